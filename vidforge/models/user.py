"""
User Model
Authenticated account as returned by the backend
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

ADMIN_ROLES = {"admin", "superadmin", "super_admin"}


def _role_name(raw: Any) -> str:
    if isinstance(raw, dict):
        raw = raw.get("name") or raw.get("role") or ""
    return str(raw or "user").strip().lower()


@dataclass(frozen=True)
class User:
    id: str
    email: str = ""
    full_name: str = ""
    avatar: Optional[str] = None
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            id=str(data.get("id") or ""),
            email=str(data.get("email") or ""),
            full_name=str(data.get("full_name") or data.get("name") or ""),
            avatar=data.get("avatar") or data.get("avatar_url"),
            role=_role_name(data.get("role")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "avatar": self.avatar,
            "role": self.role,
            "is_admin": self.is_admin,
        }


@dataclass(frozen=True)
class AuthSession:
    """Token plus user returned by a successful login"""
    access_token: str
    user: User

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthSession":
        user_data = data.get("user") if isinstance(data.get("user"), dict) else data
        return cls(access_token=str(data.get("access_token") or ""), user=User.from_dict(user_data))
