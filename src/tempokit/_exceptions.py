from __future__ import annotations

from typing import Any


class InvalidArgumentError(ValueError):
    """Error type raised when a timing primitive is given an invalid argument."""

    __module__ = "tempokit"

    def __init__(self, name: str, value: Any, reason: str = "must be >= 0") -> None:
        self.name = name
        self.value = value
        super().__init__(f"{name!r} {reason}, got {value!r}")


def check_non_negative(name: str, value: float) -> float:
    # also rejects NaN
    if not value >= 0:
        raise InvalidArgumentError(name, value)
    return value
