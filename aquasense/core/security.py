# aquasense/core/security.py
import hmac
from functools import wraps
from typing import Optional

from flask import jsonify, current_app, request
from flask_jwt_extended import JWTManager, verify_jwt_in_request, get_current_user

from aquasense.core.access import Actor, Role
from aquasense.core.errors import AccountDisabledError

ROLE_CLAIM = "role"


def current_actor() -> Actor:
    """
    The Actor behind the current request (requires a verified JWT).

    Role and active flag come from the stored user document loaded for this
    request, so a demotion or deactivation takes effect on the next call
    instead of when the access token expires.
    """
    user = get_current_user()
    if not user.is_active:
        raise AccountDisabledError("This account has been deactivated.")
    return Actor(uid=user.uid, role=user.role)


def role_required(*roles: Role):
    """
    Reject the request unless the caller's stored role is one of `roles`.
    """
    allowed = {Role(r) for r in roles}

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            if current_actor().role not in allowed:
                return jsonify({"error_code": "FORBIDDEN", "message": "Your role does not allow this action."}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def cron_secret_valid(provided: Optional[str]) -> bool:
    """Constant-time comparison against CRON_SECRET. Always False while it is unset."""
    expected = current_app.config.get('CRON_SECRET')
    if not expected or not provided:
        return False
    return hmac.compare_digest(provided.encode('utf-8'), expected.encode('utf-8'))


def cron_secret_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        secret = request.headers.get('X-Cron-Secret') or request.args.get('secret')
        if not cron_secret_valid(secret):
            return jsonify({"success": False, "error_code": "INVALID_CRON_SECRET", "message": "Invalid cron secret"}), 401
        return f(*args, **kwargs)
    return decorated_function


def init_jwt(app, auth_service) -> JWTManager:
    """Register flask-jwt-extended and its callbacks."""
    jwt = JWTManager(app)

    @jwt.user_lookup_loader
    def load_stored_user(jwt_header, jwt_payload):
        return auth_service.find_user(jwt_payload.get('sub'))

    @jwt.user_lookup_error_loader
    def missing_user_callback(jwt_header, jwt_payload):
        return jsonify({"error_code": "USER_NOT_FOUND", "message": "The account behind this token no longer exists."}), 401

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return auth_service.is_token_revoked(jwt_payload)

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"error_code": "TOKEN_EXPIRED", "message": "Token has expired"}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(reason):
        return jsonify({"error_code": "INVALID_TOKEN", "message": reason}), 401

    @jwt.unauthorized_loader
    def missing_token_callback(reason):
        return jsonify({"error_code": "AUTHORIZATION_REQUIRED", "message": reason}), 401

    @jwt.revoked_token_loader
    def revoked_token_callback(jwt_header, jwt_payload):
        return jsonify({"error_code": "TOKEN_REVOKED", "message": "Token has been revoked"}), 401

    return jwt
