# aquasense/api/feeding_logs/routes.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from aquasense.api.feeding_logs.schemas import FeedingLogQuerySchema, FeedingLogResponseSchema
from aquasense.core.security import current_actor

# Registered under /api/users/<uid>/feeding-logs
feeding_logs_bp = Blueprint('feeding_logs_bp', __name__)


@feeding_logs_bp.route('', methods=['GET'])
@jwt_required()
def list_feeding_logs(uid: str):
    """Feeding logs, newest first."""
    try:
        query = FeedingLogQuerySchema().load(request.args)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    logs = current_app.services['feeding_logs'].list_logs(current_actor(), uid, **query)
    return jsonify({
        "logs": FeedingLogResponseSchema(many=True).dump(logs),
        "count": len(logs)
    }), 200
