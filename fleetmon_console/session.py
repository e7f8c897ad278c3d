"""
Console session state.

One ConsoleSession is created per login and passed explicitly to the
transport; nothing is kept in module globals. The transport clears it when
the API answers 401, and logout clears it directly.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class SessionUser:
    """Identity of the logged-in account."""
    id: Optional[str]
    email: str
    role: str


@dataclass
class ConsoleSession:
    """Bearer token plus identity; empty until login succeeds."""
    token: Optional[str] = None
    user: Optional[SessionUser] = None

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    @property
    def is_admin(self) -> bool:
        return bool(self.user and self.user.role == "ADMIN")

    def start(self, token: str, user: SessionUser) -> None:
        self.token = token
        self.user = user

    def clear(self) -> None:
        self.token = None
        self.user = None

    def auth_headers(self) -> dict[str, str]:
        """Authorization header for the current token, or nothing."""
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    @classmethod
    def from_login_response(cls, data: dict, email: str) -> "ConsoleSession":
        """
        Build a session from a /auth/login body.

        Missing user fields fall back to the submitted email and the ADMIN role,
        matching what older API builds returned.
        """
        user_data = data.get("user") or {}
        role = user_data.get("role") or data.get("role") or "ADMIN"
        user = SessionUser(
            id=user_data.get("id"),
            email=user_data.get("email") or email,
            role=str(role).upper(),
        )
        return cls(token=data.get("token"), user=user)
