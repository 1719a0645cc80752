"""
Abstract base classes for parsers.
"""
from abc import ABC, abstractmethod
from typing import BinaryIO, TextIO

from ..classes.qua import Qua

__all__ = [
    "Parser",
]


class Parser(ABC):
    """
    An abstract base class for parsers that read and write a specific format.
    """

    @abstractmethod
    def parse(self, f: BinaryIO | TextIO) -> Qua:
        """Parse a stream, producing chart data."""
        pass

    @abstractmethod
    def parse_text(self, text: str) -> Qua:
        """Parse chart data from a string that has already been read."""
        pass

    @abstractmethod
    def write(self, qua: Qua, f: BinaryIO | TextIO) -> None:
        """Write chart data to a stream."""
        pass

    @abstractmethod
    def to_text(self, qua: Qua) -> str:
        """Produce the textual form of chart data."""
        pass
