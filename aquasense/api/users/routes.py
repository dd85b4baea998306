# aquasense/api/users/routes.py
import json
import logging
import queue

from flask import Blueprint, jsonify, current_app, Response, stream_with_context
from flask_jwt_extended import jwt_required

from aquasense.api.users.schemas import UserProfileResponseSchema, SensorsResponseSchema
from aquasense.core.security import current_actor
from aquasense.utils.datetime_utils import DateTimeUtils

users_bp = Blueprint('users_bp', __name__)

STREAM_HEARTBEAT_SECONDS = 15


def profile_payload(user) -> dict:
    data = user.to_dict()
    data['display_name'] = user.display_name
    return UserProfileResponseSchema().dump(data)


@users_bp.route('/me', methods=['GET'])
@jwt_required()
def get_my_profile():
    actor = current_actor()
    user = current_app.services['users'].get_profile(actor, actor.uid)
    return jsonify(profile_payload(user)), 200


@users_bp.route('/<string:uid>', methods=['GET'])
@jwt_required()
def get_user_profile(uid: str):
    """Profile of `uid` (owner, admin or superadmin)."""
    user = current_app.services['users'].get_profile(current_actor(), uid)
    return jsonify(profile_payload(user)), 200


@users_bp.route('/<string:uid>/sensors', methods=['GET'])
@jwt_required()
def get_sensors(uid: str):
    sensors = current_app.services['users'].latest_sensors(current_actor(), uid)
    sensors = DateTimeUtils.for_firestore(sensors)
    for kind in ('temperature', 'ph'):
        updated_at = sensors[kind]['updated_at']
        if updated_at is not None and hasattr(updated_at, 'isoformat'):
            sensors[kind]['updated_at'] = DateTimeUtils.to_iso_string(updated_at)
    return jsonify(SensorsResponseSchema().dump(sensors)), 200


@users_bp.route('/<string:uid>/sensors/stream', methods=['GET'])
@jwt_required()
def stream_sensors(uid: str):
    """
    Server-sent events: one 'sensors' event per change of users/{uid}/sensors.
    Falls back to polling when the snapshot listener is unavailable.
    """
    updates = queue.Queue()
    subscription = current_app.services['users'].subscribe_sensors(current_actor(), uid, updates.put)

    def generate():
        try:
            while True:
                try:
                    docs = updates.get(timeout=STREAM_HEARTBEAT_SECONDS)
                except queue.Empty:
                    subscription.check()
                    yield ": heartbeat\n\n"
                    continue
                payload = json.dumps(DateTimeUtils.for_firestore(docs), default=str)
                yield f"event: sensors\ndata: {payload}\n\n"
        finally:
            subscription.unsubscribe()
            logging.info(f"Sensor stream closed (uid: {uid})")

    return Response(stream_with_context(generate()), mimetype='text/event-stream',
                    headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'})
