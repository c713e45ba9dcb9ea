"""Error taxonomy for console commands and remote calls."""

from __future__ import annotations


class ConsoleError(Exception):
    """Base error with a machine-readable code."""

    code = "console_error"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code

    @property
    def message(self) -> str:
        return str(self)


class ValidationRejected(ConsoleError):
    """The API refused the request content."""

    code = "validation_rejected"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportFailure(ConsoleError):
    """The API could not be reached or answered with a server fault."""

    code = "transport_failure"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PreconditionFailed(ConsoleError):
    code = "precondition_failed"


class ConfirmationExpired(ConsoleError):
    code = "confirmation_expired"


class IllegalTransitionError(ConsoleError):
    """Raised before confirmation when a status move is not allowed."""

    code = "illegal_transition"

    def __init__(self, kind: str, from_status: str | None, to_status: str) -> None:
        super().__init__(f"Illegal {kind} transition: {from_status!r} -> {to_status!r}")
        self.kind = kind
        self.from_status = from_status
        self.to_status = to_status


class UnsupportedActionError(ConsoleError):
    code = "unsupported_action"


class UnknownEntityKindError(ValueError):
    def __init__(self, name: object) -> None:
        super().__init__(f"Unknown entity kind: {name!r}")
        self.name = name
