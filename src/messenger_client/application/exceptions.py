from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    pass


class ConflictError(AppError):
    pass


class ValidationError(AppError):
    pass


class StoreError(AppError):
    """Remote store query/insert failed (constraint violation or connectivity)."""


class LoadFailure(AppError):
    """Bulk load aborted; nothing from the attempt is kept."""


class WriteFailure(AppError):
    pass


class PartialCreateFailure(AppError):
    """Conversation row was inserted but its participant rows were not."""

    def __init__(self, detail: str = "", conversation_id: object = None) -> None:
        super().__init__(detail)
        self.conversation_id = conversation_id


class CapabilityDenied(AppError):
    """Camera / microphone acquisition was refused."""


class UnauthorizedError(AppError):
    """No signed-in user for a command that needs one."""
