"""Doclink custom exceptions."""


class DoclinkError(Exception):
    """Base exception for Doclink errors."""


class ModelError(DoclinkError):
    """Error reading or interpreting a program model."""


class MalformedModelError(ModelError):
    """Enclosing, supertype or override relations form a cycle."""

    def __init__(self, message: str, cycle: list[str] | None = None) -> None:
        super().__init__(message)
        self.cycle = cycle or []


class ElementNotFoundError(DoclinkError):
    """Element not found in the universe."""


class InvalidUsageError(DoclinkError, ValueError):
    """An operation was applied to an element kind it does not support."""


class SignatureSyntaxError(DoclinkError, ValueError):
    """Signature text does not follow the reference grammar."""

    def __init__(self, text: str, position: int, reason: str) -> None:
        super().__init__(f"Bad signature {text!r} at {position}: {reason}")
        self.text = text
        self.position = position
        self.reason = reason
