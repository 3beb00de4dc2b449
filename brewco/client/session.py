from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

from brewco.client.storage import LocalStorage

SESSION_KEY = 'session'

Kind = Literal['customer', 'admin']


@dataclass
class Session:
    """Who is signed in: a customer or an admin, never both."""
    kind: Kind
    token: str
    profile: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return self.kind == 'admin'

    @property
    def username(self) -> Optional[str]:
        return self.profile.get('username')

    def auth_header(self) -> Dict[str, str]:
        return {'Authorization': f'Bearer {self.token}'}

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': self.kind, 'token': self.token, 'profile': self.profile}

    @classmethod
    def from_dict(cls, data: Any) -> Optional['Session']:
        if not isinstance(data, dict):
            return None
        if data.get('kind') not in ('customer', 'admin') or not data.get('token'):
            return None
        return cls(kind=data['kind'], token=data['token'], profile=dict(data.get('profile') or {}))


class SessionStore:
    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self.current: Optional[Session] = Session.from_dict(storage.get(SESSION_KEY))

    def save(self, session: Session) -> Session:
        self.current = session
        self.storage.set(SESSION_KEY, session.to_dict())
        return session

    def update_profile(self, profile: Dict[str, Any]) -> None:
        if self.current:
            self.save(Session(self.current.kind, self.current.token, dict(profile)))

    def clear(self) -> None:
        self.current = None
        self.storage.remove(SESSION_KEY)

    @property
    def is_authenticated(self) -> bool:
        return self.current is not None
