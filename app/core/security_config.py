"""Security wiring: the authentication manager and the HTTP access posture.

The primary client is a desktop application, not a browser, so the HTTP side
permits every request: no route carries an authentication dependency and CORS
is open to the configured origins. FastAPI has no CSRF layer to switch off.
"""
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.security import verify_password
from app.auth.services import AuthenticationManager, CredentialsAuthenticationProvider, UserLookupService
from app.core.config import settings
from app.db.session import get_db


def credentials_authentication_provider(db: AsyncSession) -> CredentialsAuthenticationProvider:
    return CredentialsAuthenticationProvider(
        user_lookup=UserLookupService(db),
        password_verifier=verify_password,
    )


def authentication_manager(db: AsyncSession) -> AuthenticationManager:
    return AuthenticationManager([credentials_authentication_provider(db)])


async def get_authentication_manager(db: AsyncSession = Depends(get_db)) -> AuthenticationManager:
    return authentication_manager(db)


def configure_http_security(app: FastAPI) -> None:
    """Permit all requests."""
    origins = settings.cors_allow_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentialed requests against a wildcard origin.
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
