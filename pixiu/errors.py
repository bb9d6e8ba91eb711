"""Error types shared by the storage and cluster layers."""

from __future__ import annotations


class PixiuError(Exception):
    """Base class for errors raised by this package."""


class RecordNotFound(PixiuError, LookupError):
    """A requested database record does not exist."""

    def __init__(self, message: str = "record not found") -> None:
        super().__init__(message)


class RecordNotUpdated(PixiuError):
    """An update matched no record, usually due to a stale resource version."""

    def __init__(self, message: str = "record not updated") -> None:
        super().__init__(message)


class ClientNotFound(PixiuError, LookupError):
    """No cluster client is registered for the requested cloud."""

    def __init__(self, message: str = "failed to find cloud client") -> None:
        super().__init__(message)


def _chain(err: BaseException | None):
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = err.__cause__ or err.__context__


def is_not_found(err: BaseException | None) -> bool:
    """Return True if ``err`` or an error it wraps is a RecordNotFound."""
    return any(isinstance(e, RecordNotFound) for e in _chain(err))


def is_not_update(err: BaseException | None) -> bool:
    """Return True if ``err`` or an error it wraps is a RecordNotUpdated."""
    return any(isinstance(e, RecordNotUpdated) for e in _chain(err))