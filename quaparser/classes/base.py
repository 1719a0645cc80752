"""
Base, generic classes supporting other more specialized classes.
"""
from abc import ABC, abstractmethod
from typing import Any

__all__ = [
    "Validateable",
    "QuaError",
    "TransportError",
    "DecodeError",
    "StructuralError",
    "FieldError",
]


class Validateable(ABC):
    """An abstract base class for classes that require validation."""

    @abstractmethod
    def validate(self):
        """
        Perform validation on the object.

        :raises ValueError: if any of the input is invalid.
        """
        pass


class QuaError(Exception):
    """Base class for errors raised while reading or writing .qua data."""

    pass


class TransportError(QuaError):
    """
    The bytes could not be obtained from the source, or could not be written to the destination.

    The underlying exception is available as ``__cause__``.
    """

    pass


class DecodeError(QuaError):
    """Base class for errors caused by the content of a document."""

    pass


class StructuralError(DecodeError):
    """The input is not a well-formed YAML document consisting of a single mapping."""

    pass


class FieldError(DecodeError):
    """A field is present, but its value cannot be coerced to the field's type."""

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{field}: {reason} (got {value!r})")
