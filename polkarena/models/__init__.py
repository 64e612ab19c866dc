from polkarena.models.base import Base
from polkarena.models.event import Event
from polkarena.models.user import User

__all__ = ["Base", "User", "Event"]
