"""
Classes that represent the entities contained in a chart.

Field metadata is read by the parser:

- ``key``: document key, when it differs from the PascalCase form of the attribute name.
- ``aliases``: additional document keys accepted on read.
- ``whole``: float fields that are written as integers when they hold a whole number.
- ``flags``: :class:`~enum.Flag` type whose member names are accepted on read for an integer field.
- ``missing``: value used on read for absent fields that have no default.
"""
from dataclasses import dataclass, field

from .enums import HitSounds, TimeSignature

__all__ = [
    "EditorLayerInfo",
    "CustomAudioSampleInfo",
    "SoundEffectInfo",
    "TimingPointInfo",
    "ScrollVelocityInfo",
    "KeySoundInfo",
    "HitObjectInfo",
]

DEFAULT_LAYER_COLOR = "255,255,255"


@dataclass
class EditorLayerInfo:
    """An editor layer that separates notes into groups. The color is given in ``rrr,ggg,bbb`` format."""

    name: str = ""
    hidden: bool = False
    color_rgb: str = DEFAULT_LAYER_COLOR

    @property
    def color(self) -> tuple[int, int, int]:
        """
        The layer's color as a tuple.

        :raises ValueError: if :attr:`color_rgb` is not three comma-separated integers in 0-255.
        """
        parts = self.color_rgb.split(",")
        if len(parts) != 3:
            raise ValueError(f"color must have three components (got {self.color_rgb!r})")
        r, g, b = (int(part.strip()) for part in parts)
        for component in (r, g, b):
            if not 0 <= component <= 255:
                raise ValueError(f"color component out of range (got {component})")
        return r, g, b


@dataclass
class CustomAudioSampleInfo:
    """An audio sample that can be assigned to hit objects and sound effects."""

    path: str = ""
    unaffected_by_rate: bool = False
    """If true, the sample always plays back at 1.0x speed, regardless of the rate."""


@dataclass
class SoundEffectInfo:
    """A sound sample played at a specific moment in time."""

    start_time: float = 0.0
    sample: int = 0
    """One-based index into the chart's custom audio samples."""
    volume: int = 0


@dataclass
class TimingPointInfo:
    """
    A moment in time where the BPM of the song changes.

    The BPM holds from this point's start time until the next timing point begins.
    """

    start_time: float = field(default=0.0, metadata={"whole": True})
    bpm: float = 0.0
    signature: TimeSignature = TimeSignature.QUADRUPLE
    hidden: bool = False
    """Whether the timing lines of this section are hidden."""

    @property
    def milliseconds_per_beat(self) -> float:
        return 60000 / self.bpm


@dataclass
class ScrollVelocityInfo:
    """
    A moment in time where the scroll velocity changes.

    Whether the multiplier is relative to the BPM depends on the chart's
    ``bpm_does_not_affect_scroll_velocity`` flag.
    """

    start_time: int = field(metadata={"missing": 0})
    multiplier: float = field(metadata={"missing": 0.0})


@dataclass
class KeySoundInfo:
    """A key sound played for a specific hit object."""

    sample: int = 0
    """One-based index into the chart's custom audio samples."""
    volume: int = 100


@dataclass
class HitObjectInfo:
    """A note to be played. Notes with an end time greater than 0 are long notes."""

    start_time: int = 0
    lane: int = 1
    end_time: int = 0
    hit_sound: int = field(default=0, metadata={"flags": HitSounds})
    key_sounds: list[KeySoundInfo] = field(default_factory=list)
    editor_layer: int = 0

    @property
    def is_long_note(self) -> bool:
        return self.end_time > 0

    @property
    def hit_sounds(self) -> HitSounds:
        """The hit sounds played by this object. :attr:`HitSounds.NORMAL` is always included."""
        return HitSounds.from_raw(self.hit_sound)
