# aquasense/api/auth/routes.py

import logging
import jwt
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    jwt_required,
    get_jwt_identity
)
from marshmallow import ValidationError

from aquasense.api.auth.schemas import SessionRequestSchema, LogoutRequestSchema, SessionUserSchema
from aquasense.core.security import ROLE_CLAIM

auth_bp = Blueprint('auth_bp', __name__)


def _issue_tokens(user):
    claims = {ROLE_CLAIM: user.role.value}
    return (
        create_access_token(identity=user.uid, additional_claims=claims),
        create_refresh_token(identity=user.uid, additional_claims=claims)
    )


@auth_bp.route('/session', methods=['POST'])
def start_session():
    """Exchange a Firebase ID token for API tokens, creating the user document on first sign-in."""
    auth_service = current_app.services['auth']
    try:
        data = SessionRequestSchema().load(request.get_json() or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    user, is_new_user = auth_service.start_session(data['id_token'])
    access_token, refresh_token = _issue_tokens(user)

    return jsonify({
        "access_token": access_token,
        "refresh_token": refresh_token,
        "uid": user.uid,
        "role": user.role.value,
        "is_new_user": is_new_user,
        "user_info": SessionUserSchema().dump(user.to_dict())
    }), 200


@auth_bp.route('/token/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh_token():
    """Issue a new access token; the role claim is re-read so role changes apply here."""
    user = current_app.services['auth'].current_user(get_jwt_identity())
    new_access_token = create_access_token(identity=user.uid, additional_claims={ROLE_CLAIM: user.role.value})
    return jsonify(access_token=new_access_token, role=user.role.value), 200


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Add the given access and refresh tokens to the blocklist."""
    try:
        data = LogoutRequestSchema().load(request.get_json() or {})

        # Decoded with PyJWT directly so that expired tokens can still be revoked.
        secret_key = current_app.config['JWT_SECRET_KEY']
        algorithm = current_app.config.get('JWT_ALGORITHM', 'HS256')
        decoded_access = jwt.decode(data['access_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})
        decoded_refresh = jwt.decode(data['refresh_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})

        current_app.services['auth'].logout_user(
            decoded_access['jti'], decoded_access['exp'],
            decoded_refresh['jti'], decoded_refresh['exp']
        )
        return jsonify({"message": "Logged out."}), 200

    except ValidationError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": e.messages}), 400
    except jwt.PyJWTError as e:
        logging.error(f"JWT decode error: {e}", exc_info=True)
        return jsonify({"error_code": "INVALID_TOKEN", "message": "Invalid token."}), 422
