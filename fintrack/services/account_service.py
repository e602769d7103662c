import structlog
from pymongo.errors import DuplicateKeyError

from fintrack.core.exceptions import AuthError, ConflictError, NotFoundError, ValidationError
from fintrack.core.security import create_access_token, hash_password, verify_password
from fintrack.models import LoginResponse, ProfileDetail, ProfileUpdateResponse, UserProfile
from fintrack.repositories import UserRepository

logger = structlog.get_logger(__name__)

INVALID_CREDENTIALS = "invalid credentials"


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class AccountService:
    """Registration, login and profile access."""

    def __init__(self, user_repo: UserRepository | None = None) -> None:
        self.user_repo = user_repo or UserRepository()

    async def register(self, email: str, username: str, password: str) -> UserProfile:
        email = normalize_email(email)
        username = (username or "").strip()
        if not email or not username or not password:
            raise ValidationError("email, username and password are required")

        password_hash = hash_password(password)
        try:
            user = await self.user_repo.create_user(email=email, username=username, password_hash=password_hash)
        except DuplicateKeyError:
            logger.info("Signup rejected", reason="duplicate email")
            raise ConflictError("email already registered")

        logger.info("User registered", user_id=user.id)
        return UserProfile(id=user.id, email=user.email, username=user.username)

    async def authenticate(self, email: str, password: str) -> LoginResponse:
        """Issue a token for valid credentials.

        Unknown email and wrong password raise the same ``AuthError`` so the
        response never reveals which one failed.
        """
        user = await self.user_repo.get_by_email(normalize_email(email))
        if not user or not verify_password(password or "", user.password_hash):
            logger.info("Login rejected")
            raise AuthError(INVALID_CREDENTIALS)

        token = create_access_token(subject=user.id, email=user.email)
        return LoginResponse(
            token=token,
            user=UserProfile(id=user.id, email=user.email, username=user.username),
        )

    async def get_profile(self, user_id: str, caller_id: str) -> ProfileDetail:
        if user_id != caller_id:
            raise NotFoundError("user not found")
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("user not found")
        return ProfileDetail(id=user.id, email=user.email, username=user.username, created_at=user.created_at)

    async def update_profile(self, user_id: str, caller_id: str, username: str) -> ProfileUpdateResponse:
        if user_id != caller_id:
            raise NotFoundError("user not found")
        username = (username or "").strip()
        if not username:
            raise ValidationError("username is required")
        user = await self.user_repo.update_username(user_id, username)
        if not user:
            raise NotFoundError("user not found")
        return ProfileUpdateResponse(id=user.id, username=user.username)
