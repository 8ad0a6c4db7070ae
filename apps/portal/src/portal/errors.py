from __future__ import annotations

from dataclasses import dataclass

RETRYABLE_CODES = frozenset({"UPSTREAM_TIMEOUT", "UPSTREAM_UNAVAILABLE"})


@dataclass
class ApiError(Exception):
    code: str
    message: str
    status_code: int

    @property
    def retryable(self) -> bool:
        return self.code in RETRYABLE_CODES


class EnvelopeDecodeError(ApiError):
    """Raised when an upstream payload does not match the expected schema."""

    def __init__(self, message: str) -> None:
        super().__init__("UPSTREAM_DECODE_ERROR", message, 502)


class UserInputError(ApiError):
    """Raised before any mutation when required user input is missing."""

    def __init__(self, message: str) -> None:
        super().__init__("USER_INPUT_ERROR", message, 422)
