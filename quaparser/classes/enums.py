"""
General purpose enumerations.
"""
from enum import Enum, Flag, unique

__all__ = [
    "GameMode",
    "TimeSignature",
    "HitSounds",
]


@unique
class GameMode(Enum):
    """
    Enumeration for the game mode of a map.

    The values are the integers written to the file, and must not be changed.
    """

    KEYS_4 = 1
    KEYS_7 = 2

    def __str__(self) -> str:
        return f"{self.key_count}K ({self.value})"

    @classmethod
    def from_key_count(cls, key_count: int) -> "GameMode | None":
        """
        Look up the game mode that plays with the given number of keys.

        :param key_count: The number of lanes, not counting the scratch lane.
        :returns: The matching game mode, or `None` if no mode uses that many keys.
        """
        match key_count:
            case 4:
                return cls.KEYS_4
            case 7:
                return cls.KEYS_7
        return None

    @property
    def key_count(self) -> int:
        """The number of lanes in this game mode, not counting the scratch lane."""
        match self:
            case GameMode.KEYS_4:
                return 4
            case GameMode.KEYS_7:
                return 7
        raise ValueError(f"invalid game mode (got {self})")


@unique
class TimeSignature(Enum):
    """Enumeration for the time signature of a timing point. Values are beats per measure."""

    QUADRUPLE = 4
    TRIPLE = 3

    def __str__(self) -> str:
        return f"{self.value}/4"


class HitSounds(Flag):
    """
    Flag enumeration for the sounds played when a hit object is hit.

    The normal sound is always played, whether or not its bit is set.
    """

    NORMAL = 1
    WHISTLE = 2
    FINISH = 4
    CLAP = 8

    @classmethod
    def from_raw(cls, value: int) -> "HitSounds":
        """
        Convert a raw hit sound bit field to flags.

        Bits that do not correspond to a sound are ignored, and :attr:`NORMAL` is always included.
        """
        flags = cls.NORMAL
        for member in cls:
            if value & member.value:
                flags |= member
        return flags
