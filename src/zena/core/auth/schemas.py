"""Authentication schemas for token handling."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from zena.core.constants import MAX_PASSWORD_LENGTH


class TokenClaims(BaseModel):
    """Claims carried by a session token.

    Attributes:
        user_id: The subject's UUID
        tenant_id: The subject's tenant, None for system-global subjects
        jti: Unique token ID, used for revocation
        issued_at: When this token was issued
        expires_at: When this token stops being valid
        auth_time: When the subject last presented credentials
        version: Subject token version at issue time
        type: Token type, always "access"
    """

    user_id: UUID
    tenant_id: UUID | None
    jti: str
    issued_at: datetime
    expires_at: datetime
    auth_time: datetime
    version: int = 0
    type: str = "access"


class IssuedToken(BaseModel):
    """A freshly signed token and its claims."""

    token: str
    claims: TokenClaims

    @property
    def expires_in(self) -> int:
        return int((self.claims.expires_at - self.claims.issued_at).total_seconds())


class LoginRequest(BaseModel):
    """Credentials submitted to the login endpoint."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=MAX_PASSWORD_LENGTH)


class TokenResponse(BaseModel):
    """Session token returned to clients.

    Attributes:
        access_token: Signed bearer token
        token_type: Always "bearer"
        expires_in: Seconds until expiry
        expires_at: Absolute expiry time
    """

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    expires_at: datetime

    @classmethod
    def from_issued(cls, issued: IssuedToken) -> "TokenResponse":
        return cls(
            access_token=issued.token,
            expires_in=issued.expires_in,
            expires_at=issued.claims.expires_at,
        )


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str
