from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.schemas import Authentication, LoginRequest, UserInfo
from app.auth.security import verify_password
from app.core.app_logger import get_logger
from app.core.exceptions import AccountStatusError, AuthenticationError, UserNotFoundError
from app.repositories.users import UserRepository

logger = get_logger("auth")

PasswordVerifier = Callable[[str, str], bool]


class UserLookupService:
    """Resolves a username to the User that authenticates with it."""

    def __init__(self, db: AsyncSession) -> None:
        self.users = UserRepository(db)

    async def load_user_by_username(self, username: str) -> User:
        user = await self.users.find_by_username(username)
        if user is None:
            raise UserNotFoundError(f"User {username} not found")
        return user


class CredentialsAuthenticationProvider:
    """Username/password check against the stored bcrypt hash, followed by account status checks."""

    def __init__(
        self,
        user_lookup: UserLookupService,
        password_verifier: PasswordVerifier = verify_password,
    ) -> None:
        self.user_lookup = user_lookup
        self.password_verifier = password_verifier

    async def authenticate(self, username: str, password: str) -> Authentication:
        # 1. Resolve user; an unknown username looks the same as a wrong password
        try:
            user = await self.user_lookup.load_user_by_username(username)
        except UserNotFoundError:
            logger.info("Login failed for %s: unknown user", username)
            raise AuthenticationError()

        # 2. Verify password hash
        if not self.password_verifier(password, user.password):
            logger.info("Login failed for %s: bad credentials", username)
            raise AuthenticationError()

        # 3. Check account status
        capabilities = user.capabilities()
        if not capabilities.enabled:
            raise AccountStatusError("User is disabled")
        if not capabilities.account_non_locked:
            raise AccountStatusError("User account is locked")
        if not capabilities.account_non_expired:
            raise AccountStatusError("User account has expired")
        if not capabilities.credentials_non_expired:
            raise AccountStatusError("User credentials have expired")

        logger.info("User %s authenticated as %s", username, user.role.value)
        return Authentication(
            user=UserInfo.model_validate(user),
            authorities=capabilities.authorities,
            capabilities=capabilities,
            authenticated_at=datetime.now(timezone.utc),
        )


class AuthenticationManager:
    """Tries each provider in order; the first success wins, otherwise the last failure is raised."""

    def __init__(self, providers: Sequence[CredentialsAuthenticationProvider]) -> None:
        if not providers:
            raise ValueError("At least one authentication provider is required")
        self.providers: List[CredentialsAuthenticationProvider] = list(providers)

    async def authenticate(self, payload: LoginRequest) -> Authentication:
        last_error: Optional[AuthenticationError] = None
        for provider in self.providers:
            try:
                return await provider.authenticate(payload.username, payload.password)
            except AccountStatusError:
                # Valid credentials for a blocked account: no other provider may override that.
                raise
            except AuthenticationError as e:
                last_error = e
        raise last_error
