# aquasense/api/auth/services.py
import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

from firebase_admin import auth as firebase_auth

from aquasense.core.access import Role
from aquasense.core.errors import AuthenticationError, AccountDisabledError, NotFoundError
from aquasense.models.user import User, legacy_fields
from aquasense.services import collections as col
from aquasense.utils.datetime_utils import DateTimeUtils


class AuthService:
    def __init__(self, repo, firebase_auth_client=None):
        self.repo = repo
        # firebase_admin.auth module in production; tests pass a fake with the same calls
        self.firebase_auth = firebase_auth_client or firebase_auth

    def verify_id_token(self, id_token: str) -> dict:
        try:
            return self.firebase_auth.verify_id_token(id_token)
        except Exception as e:
            logging.warning(f"Firebase ID token verification failed: {e}")
            raise AuthenticationError("The Firebase ID token is invalid or expired.")

    def get_or_create_user(self, claims: dict) -> Tuple[User, bool]:
        """Return the user document for a verified token, creating it on first sign-in."""
        uid = claims.get('uid') or claims.get('sub')
        if not uid:
            raise AuthenticationError("The Firebase ID token carries no uid.")

        existing = self.repo.get(col.user_doc(uid))
        if existing:
            migrated = legacy_fields(existing)
            if migrated:
                self.repo.update(col.user_doc(uid), migrated)
                logging.info(f"Legacy user fields migrated (uid: {uid}, fields: {sorted(migrated)})")
            return User.from_dict(existing), False

        name = (claims.get('name') or '').strip()
        first_name, _, last_name = name.partition(' ')
        new_user = User(
            uid=uid,
            email=claims.get('email', ''),
            first_name=first_name,
            last_name=last_name.strip(),
            role=Role.USER,
            is_active=True,
            join_date=DateTimeUtils.now(),
            provider=(claims.get('firebase') or {}).get('sign_in_provider')
        )
        self.repo.set(col.user_doc(uid), new_user.to_dict())
        logging.info(f"New user document created (uid: {uid})")
        return new_user, True

    def start_session(self, id_token: str) -> Tuple[User, bool]:
        user, is_new_user = self.get_or_create_user(self.verify_id_token(id_token))
        if not user.is_active:
            raise AccountDisabledError("This account has been deactivated.")
        return user, is_new_user

    def find_user(self, uid: str) -> Optional[User]:
        """The stored user for a JWT identity, or None when the document is gone."""
        if not uid:
            return None
        doc = self.repo.get(col.user_doc(uid))
        return User.from_dict(doc) if doc else None

    def current_user(self, uid: str) -> User:
        """Re-read the stored user; used when a refresh token is exchanged."""
        doc = self.repo.get(col.user_doc(uid))
        if not doc:
            raise NotFoundError("User not found.", error_code="USER_NOT_FOUND")
        user = User.from_dict(doc)
        if not user.is_active:
            raise AccountDisabledError("This account has been deactivated.")
        return user

    # --- Blocklist ---
    def add_token_to_blocklist(self, jti: str, expires: datetime):
        token_data = {
            'revoked_at': DateTimeUtils.now(),
            'expires_at': expires
        }
        self.repo.set(f"{col.COLLECTION_REVOKED_TOKENS}/{jti}", token_data)

    def is_token_revoked(self, jwt_payload: dict) -> bool:
        jti = jwt_payload['jti']
        return self.repo.get(f"{col.COLLECTION_REVOKED_TOKENS}/{jti}") is not None

    def logout_user(self, access_jti: str, access_exp: int, refresh_jti: str, refresh_exp: int):
        """Revoke both the access and the refresh token."""
        self.add_token_to_blocklist(access_jti, datetime.fromtimestamp(access_exp, tz=timezone.utc))
        self.add_token_to_blocklist(refresh_jti, datetime.fromtimestamp(refresh_exp, tz=timezone.utc))
        logging.info(f"User logged out. JTI: {access_jti[:8]}..., {refresh_jti[:8]}...")
