# aquasense/api/superadmin/routes.py
from flask import Blueprint, request, jsonify, current_app, Response
from marshmallow import ValidationError

from aquasense.api.admin.schemas import StatusUpdateSchema
from aquasense.api.superadmin.schemas import RoleUpdateSchema, AccountListQuerySchema
from aquasense.api.users.routes import profile_payload
from aquasense.core.access import Role
from aquasense.core.security import role_required, current_actor

superadmin_bp = Blueprint('superadmin_bp', __name__)


@superadmin_bp.route('/users', methods=['GET'])
@role_required(Role.SUPERADMIN)
def list_accounts():
    try:
        query = AccountListQuerySchema().load(request.args)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    users = current_app.services['users'].list_users(role=query.get('role'), active=query.get('active'))
    return jsonify({"users": [profile_payload(u) for u in users], "count": len(users)}), 200


@superadmin_bp.route('/users/<string:uid>/role', methods=['PATCH'])
@role_required(Role.SUPERADMIN)
def change_role(uid: str):
    """The only path that changes a role. A superadmin cannot change their own."""
    try:
        data = RoleUpdateSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    user = current_app.services['users'].change_role(current_actor(), uid, Role(data['role']))
    return jsonify(profile_payload(user)), 200


@superadmin_bp.route('/users/<string:uid>/status', methods=['PATCH'])
@role_required(Role.SUPERADMIN)
def update_status(uid: str):
    try:
        data = StatusUpdateSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    user = current_app.services['users'].set_active(current_actor(), uid, data['is_active'])
    return jsonify(profile_payload(user)), 200


@superadmin_bp.route('/users/<string:uid>', methods=['DELETE'])
@role_required(Role.SUPERADMIN)
def delete_account(uid: str):
    current_app.services['users'].delete_user(current_actor(), uid)
    return Response(status=204)


@superadmin_bp.route('/stats', methods=['GET'])
@role_required(Role.SUPERADMIN)
def stats():
    return jsonify(current_app.services['users'].stats()), 200
