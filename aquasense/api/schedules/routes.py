# aquasense/api/schedules/routes.py
from flask import Blueprint, request, jsonify, current_app, Response
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from aquasense.api.schedules.schemas import (
    ScheduleCreateSchema,
    ScheduleUpdateSchema,
    ScheduleQuerySchema,
    ScheduleResponseSchema
)
from aquasense.core.security import current_actor

# Registered under /api/users/<uid>/schedules
schedules_bp = Blueprint('schedules_bp', __name__)


def _dump(schedule) -> dict:
    data = schedule.to_dict()
    data['editable'] = schedule.is_editable
    return ScheduleResponseSchema().dump(data)


@schedules_bp.route('', methods=['GET'])
@jwt_required()
def list_schedules(uid: str):
    try:
        query = ScheduleQuerySchema().load(request.args)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    schedules = current_app.services['schedules'].list_schedules(current_actor(), uid, query.get('status'))
    return jsonify({"schedules": [_dump(s) for s in schedules], "count": len(schedules)}), 200


@schedules_bp.route('', methods=['POST'])
@jwt_required()
def create_schedule(uid: str):
    try:
        data = ScheduleCreateSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    schedule = current_app.services['schedules'].create_schedule(current_actor(), uid, data)
    return jsonify(_dump(schedule)), 201


@schedules_bp.route('/<string:schedule_id>', methods=['GET'])
@jwt_required()
def get_schedule(uid: str, schedule_id: str):
    schedule = current_app.services['schedules'].get_schedule(current_actor(), uid, schedule_id)
    return jsonify(_dump(schedule)), 200


@schedules_bp.route('/<string:schedule_id>', methods=['PATCH'])
@jwt_required()
def update_schedule(uid: str, schedule_id: str):
    """Only 'pending' schedules can be edited (409 SCHEDULE_LOCKED otherwise)."""
    try:
        data = ScheduleUpdateSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    schedule = current_app.services['schedules'].update_schedule(current_actor(), uid, schedule_id, data)
    return jsonify(_dump(schedule)), 200


@schedules_bp.route('/<string:schedule_id>', methods=['DELETE'])
@jwt_required()
def delete_schedule(uid: str, schedule_id: str):
    current_app.services['schedules'].delete_schedule(current_actor(), uid, schedule_id)
    return Response(status=204)
