"""Authentication and authorization schemas."""

from fairlend_db.enums import UserRole
from pydantic import BaseModel, ConfigDict, Field


class UserContext(BaseModel):
    """Injected by auth middleware into every authenticated request.

    ``user_id`` is the opaque principal stored on applications, appeals and
    notifications.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: UserRole
    email: str
    name: str

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.EMPLOYEE, UserRole.ADMIN)


class TokenPayload(BaseModel):
    """Decoded JWT token claims from Keycloak."""

    sub: str
    email: str = ""
    preferred_username: str = ""
    name: str = ""
    realm_access: dict = Field(default_factory=dict)
