from __future__ import annotations

from enum import Enum


class ServiceError(Exception):
    """Domain failure carrying a stable machine code and a user-facing message."""

    def __init__(self, code: str | Enum, message: str | None = None) -> None:
        self.code = code.value if isinstance(code, Enum) else code
        self.message = message or self.code
        super().__init__(self.message)

    def to_detail(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class NotFoundError(ServiceError):
    pass


class PermissionDeniedError(ServiceError):
    pass


class ConflictError(ServiceError):
    pass


class ValidationError(ServiceError):
    """Input rejected before anything is written."""


class UpstreamError(ServiceError):
    """A collaborator (database, object storage) failed to answer."""


class ShortCodeLookupError(UpstreamError):
    pass
