"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated, NoReturn

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from cti_registry.core.security import decode_identity
from cti_registry.db.session import get_db
from cti_registry.services.errors import (
    AlreadyVotedError,
    InvalidArgumentError,
    RecordNotFoundError,
    RegistryError,
    SelfVoteForbiddenError,
)
from cti_registry.services.registry import RegistryService

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]

_ERROR_STATUS: dict[type[RegistryError], int] = {
    InvalidArgumentError: status.HTTP_400_BAD_REQUEST,
    RecordNotFoundError: status.HTTP_404_NOT_FOUND,
    AlreadyVotedError: status.HTTP_409_CONFLICT,
    SelfVoteForbiddenError: status.HTTP_403_FORBIDDEN,
}


def raise_http_error(exc: RegistryError) -> NoReturn:
    """Translate a registry failure into an HTTP error carrying its message."""
    status_code = _ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    raise HTTPException(status_code=status_code, detail=exc.message) from exc


def get_registry(db: SessionDep) -> RegistryService:
    """Return a registry service bound to the request's session."""
    return RegistryService(db)


def get_caller_identity(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> str:
    """Return the authenticated caller identity from the bearer token.

    Raises:
        HTTPException: If the token is invalid or carries no subject.
    """
    try:
        identity = decode_identity(credentials.credentials)
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    return identity


def get_optional_identity(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)
    ],
) -> str | None:
    """Return the caller identity when a token is present, else None.

    A token that is present but invalid is still rejected.
    """
    if credentials is None:
        return None
    return get_caller_identity(credentials)


RegistryDep = Annotated[RegistryService, Depends(get_registry)]
CallerDep = Annotated[str, Depends(get_caller_identity)]
OptionalCallerDep = Annotated[str | None, Depends(get_optional_identity)]
