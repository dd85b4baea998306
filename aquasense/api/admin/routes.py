# aquasense/api/admin/routes.py
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from aquasense.api.admin.schemas import StatusUpdateSchema, UserListQuerySchema
from aquasense.api.users.routes import profile_payload
from aquasense.core.access import Role
from aquasense.core.security import role_required, current_actor

admin_bp = Blueprint('admin_bp', __name__)


@admin_bp.route('/users', methods=['GET'])
@role_required(Role.ADMIN, Role.SUPERADMIN)
def list_users():
    """Accounts with role 'user', oldest first."""
    try:
        query = UserListQuerySchema().load(request.args)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    users = current_app.services['users'].list_users(role=Role.USER, active=query.get('active'))
    return jsonify({"users": [profile_payload(u) for u in users], "count": len(users)}), 200


@admin_bp.route('/users/<string:uid>/overview', methods=['GET'])
@role_required(Role.ADMIN, Role.SUPERADMIN)
def user_overview(uid: str):
    overview = current_app.services['admin'].overview(current_actor(), uid)
    overview['user'] = profile_payload(overview['user'])
    return jsonify(overview), 200


@admin_bp.route('/users/<string:uid>/status', methods=['PATCH'])
@role_required(Role.ADMIN, Role.SUPERADMIN)
def update_status(uid: str):
    try:
        data = StatusUpdateSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    user = current_app.services['users'].set_active(current_actor(), uid, data['is_active'])
    return jsonify(profile_payload(user)), 200


@admin_bp.route('/summary', methods=['GET'])
@role_required(Role.ADMIN, Role.SUPERADMIN)
def summary():
    return jsonify(current_app.services['admin'].summary()), 200
