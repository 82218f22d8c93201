"""
Account and Session Models

An Account is what the credential store holds; a Session is the same
identity with the secret removed. Only Sessions leave the auth package.

DESIGN DECISION: The secret is a pydantic SecretStr, so it is masked in
reprs, logs and default dumps even if an Account is accidentally printed.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr


NAME_MAX_LENGTH = 200
EMAIL_MAX_LENGTH = 320


class AuthState(str, Enum):
    """Session manager state machine."""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"  # login/registration in flight
    AUTHENTICATED = "authenticated"


class Session(BaseModel):
    """
    The currently authenticated identity.

    Persisted under the "session" key with camelCase field names,
    e.g. {"id": "1", "name": "...", "email": "...", "isAdmin": true}.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str
    email: str
    is_admin: bool = Field(default=False, alias="isAdmin")

    def to_storage_dict(self) -> dict:
        """Serialize in the persisted shape."""
        return self.model_dump(mode="json", by_alias=True)


class Account(BaseModel):
    """
    A registered account. Never leaves the auth package with its secret.

    Fields are stored exactly as given. The secret is opaque: surrounding
    whitespace is part of it.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    email: str = Field(..., min_length=3, max_length=EMAIL_MAX_LENGTH)
    secret: SecretStr
    is_admin: bool = False

    def to_session(self) -> Session:
        """Strip the secret."""
        return Session(
            id=self.id,
            name=self.name,
            email=self.email,
            is_admin=self.is_admin,
        )


class AuthResult(BaseModel):
    """
    Outcome of a login/registration/logout request.

    Failures are reported here, never raised.
    """

    success: bool
    message: str
    session: Optional[Session] = None
