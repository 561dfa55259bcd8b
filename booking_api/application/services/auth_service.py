import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ...exceptions import AuthError, ConflictError, EmailTakenError, NotFoundError, ValidationError
from ..ports.audit_logger import AuditLogger
from ..ports.security import PasswordHasher, TokenIssuer
from ..ports.user_repo import UserDto, UserRepository, UserRole
from .policies import Actor

logger = logging.getLogger(__name__)


def parse_role(value: Optional[str]) -> UserRole:
    try:
        return UserRole((value or "").upper())
    except ValueError:
        raise ValidationError("invalid role")


@dataclass
class AuthService:
    user_repo: UserRepository
    hasher: PasswordHasher
    tokens: TokenIssuer
    audit: Optional[AuditLogger] = None

    def register(self, name: Optional[str], email: Optional[str], password: Optional[str], role: Optional[str], specialization: Optional[str] = None, photo_url: Optional[str] = None) -> UserDto:
        if not (name and name.strip()) or not email or not password or not role:
            raise ValidationError("missing required fields")
        user_role = parse_role(role)
        if user_role == UserRole.DOCTOR and not (specialization and specialization.strip()):
            raise ValidationError("specialization required")

        if self.user_repo.get_by_email(email):
            raise ConflictError("email already registered")
        try:
            user = self.user_repo.create(
                name=name.strip(),
                email=email,
                password_hash=self.hasher.hash(password),
                role=user_role,
                specialization=specialization.strip() if user_role == UserRole.DOCTOR else None,
                photo_url=photo_url or None,
            )
        except EmailTakenError:
            raise ConflictError("email already registered")

        logger.info(f"Registered {user.role.value} {user.id}")
        if self.audit is not None:
            self.audit.log("user.registered", actor_id=user.id, subject_id=user.id, details={"role": user.role.value})
        return user

    def login(self, email: Optional[str], password: Optional[str], role: Optional[str]) -> Tuple[UserDto, str]:
        """Check credentials and return the user with a fresh access token."""
        if not email or not password or not role:
            raise ValidationError("missing credentials")
        user_role = parse_role(role)

        user = self.user_repo.get_by_email_and_role(email, user_role)
        if not user:
            raise NotFoundError("user not found")
        if not self.hasher.verify(password, user.password_hash):
            logger.warning(f"Failed login for user {user.id}")
            if self.audit is not None:
                self.audit.log("user.login", actor_id=user.id, subject_id=user.id, success=False)
            raise AuthError("invalid password")

        token = self.tokens.issue(user.id, {"role": user.role.value})
        if self.audit is not None:
            self.audit.log("user.login", actor_id=user.id, subject_id=user.id)
        return user, token

    def authenticate(self, token: str) -> Actor:
        """Resolve a bearer token to the calling user."""
        payload = self.tokens.decode(token)
        if not payload:
            raise AuthError("Invalid or expired token")
        user_id = payload.get("sub")
        if not user_id:
            raise AuthError("Invalid token: missing user ID")
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise AuthError("Invalid token: unknown user")
        return Actor(user_id=user.id, role=user.role)
