"""JWT access token service."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from jose import JWTError, jwt

from app.config import get_settings
from app.errors import UnauthorizedError


@dataclass
class AccessTokenClaims:
    """Verified identity carried by an access token."""

    user_id: int
    role: str


class JWTService:
    """Signs and verifies short-lived access tokens."""

    def __init__(self) -> None:
        settings = get_settings()
        self.secret_key = settings.JWT_ACCESS_SECRET
        self.algorithm = settings.JWT_ALGORITHM
        self.issuer = settings.JWT_ISSUER
        self.audience = settings.JWT_AUDIENCE
        self.expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def create_access_token(self, user_id: int, role: str) -> str:
        """Create a signed access token for the given user."""
        now = datetime.utcnow()
        payload = {
            "sub": str(user_id),
            "role": role,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> AccessTokenClaims:
        """Verify signature, issuer, audience and expiry.

        Raises UnauthorizedError if any check fails.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
            )
        except JWTError as exc:
            raise UnauthorizedError("Invalid or expired token") from exc

        try:
            return AccessTokenClaims(user_id=int(payload["sub"]), role=payload["role"])
        except (KeyError, ValueError) as exc:
            raise UnauthorizedError("Invalid or expired token") from exc


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService()
    return _jwt_service
