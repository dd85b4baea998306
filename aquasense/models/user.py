# aquasense/models/user.py
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from aquasense.core.access import Role

# camelCase keys written by the legacy web client
_LEGACY_KEYS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'isActive': 'is_active',
    'firebaseUid': 'uid',
}


def legacy_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """snake_case values for the camelCase keys that have no snake_case counterpart yet."""
    return {
        snake: data[legacy]
        for legacy, snake in _LEGACY_KEYS.items()
        if legacy in data and snake not in data
    }


@dataclass
class User:
    """
    Document structure of the Firestore 'users' collection.
    The document id is the Firebase Auth uid.
    """
    uid: str
    email: str
    first_name: str = ""
    last_name: str = ""
    role: Role = Role.USER
    is_active: bool = True
    join_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    provider: Optional[str] = None

    @property
    def display_name(self) -> str:
        full = f"{self.first_name} {self.last_name}".strip()
        return full or self.email

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        processed = {}
        for key, value in data.items():
            if key in _LEGACY_KEYS:
                continue
            processed[key] = value
        processed.update(legacy_fields(data))

        if 'uid' not in processed and 'id' in processed:
            processed['uid'] = processed['id']

        processed['role'] = Role.parse(processed.get('role'))

        # createdAt was stored as epoch milliseconds by the web client
        if 'join_date' not in processed and isinstance(processed.get('createdAt'), (int, float)):
            processed['join_date'] = datetime.fromtimestamp(processed['createdAt'] / 1000, tz=timezone.utc)

        known = {f for f in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in processed.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['role'] = self.role.value
        return data
