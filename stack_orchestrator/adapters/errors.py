"""Project-native typed exceptions for adapter boundary failures."""

from __future__ import annotations


class AdapterError(Exception):
    """Base exception for adapter-level failures.

    Attributes:
        target: Optional URL or command the failure refers to.
    """

    def __init__(self, message: str, target: str | None = None):
        super().__init__(message)
        self.target = target


class TransientNetworkError(AdapterError, ConnectionError):
    """Single HTTP request failed at transport level or with a non-2xx status.

    Attributes:
        status_code: HTTP status code when a response was received.
    """

    def __init__(self, message: str, target: str | None = None, status_code: int | None = None):
        super().__init__(message=message, target=target)
        self.status_code = status_code


class AdapterResponseError(AdapterError, ValueError):
    """Upstream response was received but did not match the expected contract."""


class ComposeCommandError(AdapterError, RuntimeError):
    """Docker Compose invocation failed or could not be started.

    Attributes:
        return_code: Process exit code when the process ran.
        output: Combined stdout/stderr captured from the process.
    """

    def __init__(
        self,
        message: str,
        target: str | None = None,
        return_code: int | None = None,
        output: str = "",
    ):
        super().__init__(message=message, target=target)
        self.return_code = return_code
        self.output = output
