from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from polkarena.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

ANONYMOUS_NAME = "Anonymous"


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "users"

    email: Mapped[str | None] = mapped_column(String(320), unique=True, nullable=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    @property
    def display_name(self) -> str:
        return self.name or self.email or ANONYMOUS_NAME
