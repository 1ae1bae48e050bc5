"""User management service."""

from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFoundError
from app.models.user import User
from app.services.auth import normalize_email


class UserService:
    """Lookup and profile updates for user accounts."""

    def get_all_users(self, db: Session) -> list[User]:
        return db.query(User).order_by(User.created_at, User.id).all()

    def get_user_by_id(self, db: Session, user_id: int) -> User:
        user = db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def get_user_by_email(self, db: Session, email: str) -> User:
        user = db.query(User).filter(User.email == normalize_email(email)).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_user(self, db: Session, user_id: int, changes: dict) -> User:
        """Apply profile changes (name, email, preferred_currency)."""
        user = self.get_user_by_id(db, user_id)

        if changes.get("email"):
            email = normalize_email(changes["email"])
            taken = db.query(User).filter(User.email == email, User.id != user.id).first()
            if taken:
                raise ConflictError("Email is already registered")
            if email != user.email:
                user.is_email_verified = False
            user.email = email
        if changes.get("name"):
            user.name = changes["name"].strip()
        if changes.get("preferred_currency"):
            user.preferred_currency = changes["preferred_currency"].upper()

        db.commit()
        db.refresh(user)
        return user


_user_service: UserService | None = None


def get_user_service() -> UserService:
    """Get singleton user service instance."""
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
