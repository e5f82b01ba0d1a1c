from __future__ import annotations


class ServiceError(Exception):
    """Base for failures the routers turn into HTTP errors."""


class NotFoundError(ServiceError):
    def __init__(self, what: str, ident: object):
        super().__init__(f"{what} {ident} not found")
        self.what = what
        self.ident = ident


class ProtectedShiftError(ServiceError):
    """Event-derived shifts can only be changed through their event."""

    def __init__(self, message: str = "Event assignments are managed in the Events page"):
        super().__init__(message)


class TemplateApplyError(ServiceError):
    pass


class TemplateStorageError(TemplateApplyError):
    """The week could not be rewritten; nothing was changed."""
