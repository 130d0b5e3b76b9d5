from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    """Authenticated caller handed to every service call."""

    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_user(cls, user) -> "Principal":
        return cls(user_id=user.id, role=user.role)
