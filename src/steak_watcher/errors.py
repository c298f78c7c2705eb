from __future__ import annotations


class WatcherError(Exception):
    """Base class for errors raised by the watcher."""


class FetchError(WatcherError):
    """The listing page could not be fetched (transport failure or non-2xx)."""

    def __init__(self, url: str, message: str, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class NotificationError(WatcherError):
    """The notification transport rejected or failed to deliver a message."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigError(WatcherError):
    pass
