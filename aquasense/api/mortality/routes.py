# aquasense/api/mortality/routes.py
from flask import Blueprint, request, jsonify, current_app, Response
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from aquasense.api.mortality.schemas import MortalityCreateSchema, MortalityQuerySchema, MortalityResponseSchema
from aquasense.core.security import current_actor

# Registered under /api/users/<uid>/mortality
mortality_bp = Blueprint('mortality_bp', __name__)


@mortality_bp.route('', methods=['GET'])
@jwt_required()
def list_mortality(uid: str):
    try:
        query = MortalityQuerySchema().load(request.args)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    logs = current_app.services['mortality'].list_logs(current_actor(), uid, **query)
    return jsonify({
        "logs": MortalityResponseSchema(many=True).dump([log.to_dict() for log in logs]),
        "total": sum(log.count for log in logs)
    }), 200


@mortality_bp.route('', methods=['POST'])
@jwt_required()
def record_mortality(uid: str):
    try:
        data = MortalityCreateSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    log = current_app.services['mortality'].create_log(current_actor(), uid, data)
    return jsonify(MortalityResponseSchema().dump(log.to_dict())), 201


@mortality_bp.route('/<string:log_id>', methods=['DELETE'])
@jwt_required()
def delete_mortality(uid: str, log_id: str):
    current_app.services['mortality'].delete_log(current_actor(), uid, log_id)
    return Response(status=204)
