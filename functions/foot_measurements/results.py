"""
Failure taxonomy and the result type returned by every pipeline stage.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class FailureKind(Enum):
    INVALID_INPUT = "invalid_input"
    DECODE_FAILURE = "decode_failure"
    CALIBRATION_UNAVAILABLE = "calibration_unavailable"
    NO_USABLE_CONTOUR = "no_usable_contour"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class Outcome:
    """
    Either a success value or a failure kind with a message.

    Stages return an Outcome instead of raising so that failures can be
    mapped to sentinel values at the request boundary.
    """
    value: Any = None
    failure: Optional[FailureKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value) -> "Outcome":
        return cls(value=value)

    @classmethod
    def failed(cls, kind: FailureKind, message: str = "") -> "Outcome":
        return cls(failure=kind, message=message)
