"""Error kinds for the try-on workflow and their translation to HTTP responses."""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTH = "auth"
    INVALID_INPUT = "invalid_input"
    TIMEOUT = "timeout"
    JOB_FAILED = "job_failed"
    CANCELED = "canceled"
    NO_OUTPUT = "no_output"
    UPSTREAM = "upstream"
    TRANSPORT = "transport"
    CONFIG = "config"


STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTH: 401,
    ErrorKind.INVALID_INPUT: 422,
    ErrorKind.TIMEOUT: 504,
}


class TryOnError(Exception):
    def __init__(self, kind: ErrorKind, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return STATUS_CODES.get(self.kind, 500)

    def to_body(self) -> dict[str, str]:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body
