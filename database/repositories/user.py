from typing import Optional, Any

from sqlalchemy import select

from database.models import User
from database.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    def get_by_id(self, user_id: Any) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def create(self, email: str, display_name: Optional[str] = None, is_admin: bool = False) -> User:
        user = User(email=email.strip().lower(), display_name=display_name, is_admin=is_admin)
        self.db.add(user)
        self.db.flush()
        return user
