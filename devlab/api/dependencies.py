"""
FastAPI dependencies: shared state, database sessions and caller checks.
"""

from typing import Generator

from fastapi import Depends, Header, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session, sessionmaker

from common.config import Settings
from common.db import get_db_session
from modules.simulator import ExecutionSimulator
from modules.validator import Validator

security = HTTPBearer()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_factory(request: Request) -> sessionmaker[Session]:
    return request.app.state.session_factory


def get_validator(request: Request) -> Validator:
    return request.app.state.validator


def get_simulator(request: Request) -> ExecutionSimulator:
    return request.app.state.simulator


def get_db(
    session_factory: sessionmaker[Session] = Depends(get_session_factory)
) -> Generator[Session, None, None]:
    """Per-request database session, closed when the response is sent."""
    yield from get_db_session(session_factory)


def verify_token(
    credentials: HTTPAuthorizationCredentials = Security(security),
    settings: Settings = Depends(get_settings)
) -> str:
    """
    Check the static bearer token.

    Returns:
        str: The accepted token

    Raises:
        HTTPException: 401 if the token does not match STATIC_TOKEN
    """
    if credentials.credentials != settings.static_token:
        raise HTTPException(
            status_code=401,
            detail="Invalid authentication token"
        )
    return credentials.credentials


def get_current_user_id(
    x_user_id: str = Header(
        default="",
        description="Caller identity resolved by the identity layer"
    )
) -> str:
    """
    Caller's user id, forwarded by the identity layer in X-User-Id.

    Raises:
        HTTPException: 401 if the header is missing or blank
    """
    user_id = x_user_id.strip()
    if not user_id:
        raise HTTPException(
            status_code=401,
            detail="Missing X-User-Id header"
        )
    return user_id
