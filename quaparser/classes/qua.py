"""
The root chart class, and the functions that convert scroll velocities between BPM-relative and BPM-independent form.
"""
import copy
import logging
import os

from bisect import bisect_right
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import BinaryIO, TextIO

from .base import TransportError, Validateable
from .chart import (
    CustomAudioSampleInfo,
    EditorLayerInfo,
    HitObjectInfo,
    ScrollVelocityInfo,
    SoundEffectInfo,
    TimingPointInfo,
)
from .enums import GameMode

__all__ = [
    "Qua",
    "normalize_scroll_velocities",
    "denormalize_scroll_velocities",
]

MAX_VOLUME = 100

logger = logging.getLogger(__name__)


def _sorted_timing_points(timing_points: Sequence[TimingPointInfo]) -> list[TimingPointInfo]:
    # Stable, so the last of several points sharing a start time stays last
    return sorted(timing_points, key=lambda tp: tp.start_time)


def _regional_bpm(ordered: list[TimingPointInfo], starts: list[float], time: float, reference: float) -> float:
    index = bisect_right(starts, time) - 1
    if index < 0:
        return reference
    return ordered[index].bpm


def _rescale_scroll_velocities(
    timing_points: Sequence[TimingPointInfo], slider_velocities: Sequence[ScrollVelocityInfo], *, normalize: bool
) -> list[ScrollVelocityInfo]:
    if not slider_velocities:
        return []
    if not timing_points:
        logger.warning("chart has no timing points, scroll velocities are left unchanged")
        return [ScrollVelocityInfo(sv.start_time, sv.multiplier) for sv in slider_velocities]

    ordered = _sorted_timing_points(timing_points)
    starts = [tp.start_time for tp in ordered]
    reference = ordered[0].bpm
    if reference == 0:
        raise ValueError(f"reference timing point at {ordered[0].start_time}ms has a BPM of 0")

    result = []
    for sv in slider_velocities:
        bpm = _regional_bpm(ordered, starts, sv.start_time, reference)
        if normalize:
            multiplier = sv.multiplier * bpm / reference
        else:
            if bpm == 0:
                raise ValueError(f"cannot denormalize scroll velocity at {sv.start_time}ms in a region with a BPM of 0")
            multiplier = sv.multiplier * reference / bpm
        result.append(ScrollVelocityInfo(sv.start_time, multiplier))
    return result


def normalize_scroll_velocities(
    timing_points: Sequence[TimingPointInfo], slider_velocities: Sequence[ScrollVelocityInfo]
) -> list[ScrollVelocityInfo]:
    """
    Convert BPM-relative scroll velocities to BPM-independent ones.

    Each multiplier is scaled by the BPM of the timing region containing it, divided by the BPM of the earliest
    timing point. Scroll velocities placed before every timing point use the earliest timing point's BPM.

    :param timing_points: The chart's timing points, in any order.
    :param slider_velocities: Scroll velocities in denormalized form.
    :returns: New scroll velocity objects in normalized form, in the same order as the input.
    :raises ValueError: if the earliest timing point has a BPM of 0.
    """
    return _rescale_scroll_velocities(timing_points, slider_velocities, normalize=True)


def denormalize_scroll_velocities(
    timing_points: Sequence[TimingPointInfo], slider_velocities: Sequence[ScrollVelocityInfo]
) -> list[ScrollVelocityInfo]:
    """
    Convert BPM-independent scroll velocities to BPM-relative ones. This is the inverse of
    :func:`normalize_scroll_velocities`.

    :param timing_points: The chart's timing points, in any order.
    :param slider_velocities: Scroll velocities in normalized form.
    :returns: New scroll velocity objects in denormalized form, in the same order as the input.
    :raises ValueError: if a timing point needed for the conversion has a BPM of 0.
    """
    return _rescale_scroll_velocities(timing_points, slider_velocities, normalize=False)


@dataclass
class Qua(Validateable):
    """
    A class that contains all data of a .qua chart.

    A default-constructed instance is identical to the result of reading an empty document.
    """

    # Metadata
    audio_file: str = ""
    song_preview_time: int = 0
    """Time in milliseconds where the song preview starts."""
    background_file: str = ""
    banner_file: str = ""
    map_id: int = -1
    """-1 if the map has not been submitted."""
    map_set_id: int = -1
    """-1 if the map set has not been submitted."""
    game_mode: GameMode = field(default=GameMode.KEYS_4, metadata={"key": "Mode"})
    title: str = ""
    artist: str = ""
    source: str = ""
    tags: str = ""
    creator: str = ""
    difficulty_name: str = ""
    description: str = ""
    genre: str = ""

    # Gameplay settings
    bpm_does_not_affect_scroll_velocity: bool = field(
        default=False, metadata={"aliases": ("BPMDoesNotAffectScrollVelocity",)}
    )
    """
    If false, :attr:`slider_velocities` are in denormalized form (relative to the BPM), and if true, they are in
    normalized form (independent of the BPM).
    """
    initial_scroll_velocity: float = 1.0
    """The scroll velocity before the first scroll velocity change. Only used in normalized form."""
    has_scratch_key: bool = False
    """Adds a scratch lane, allowing for 5K and 8K play."""

    # Chart data
    editor_layers: list[EditorLayerInfo] = field(default_factory=list)
    custom_audio_samples: list[CustomAudioSampleInfo] = field(default_factory=list)
    sound_effects: list[SoundEffectInfo] = field(default_factory=list)
    timing_points: list[TimingPointInfo] = field(default_factory=list)
    slider_velocities: list[ScrollVelocityInfo] = field(default_factory=list)
    hit_objects: list[HitObjectInfo] = field(default_factory=list)

    def __str__(self) -> str:
        from ..parser.qua import to_text

        return to_text(self)

    @classmethod
    def from_file(cls, path: str | os.PathLike) -> "Qua":
        """
        Read a chart from a file.

        :raises TransportError: if the file cannot be opened or read.
        :raises DecodeError: if the file is not a valid .qua document.
        """
        from ..parser.qua import decode

        try:
            f = open(path, "rb")
        except OSError as e:
            raise TransportError(f"cannot open {os.fspath(path)!r} for reading") from e
        with f:
            return decode(f)

    @classmethod
    def from_reader(cls, stream: BinaryIO | TextIO) -> "Qua":
        """Read a chart from a binary or text stream."""
        from ..parser.qua import decode

        return decode(stream)

    @classmethod
    def from_str(cls, text: str) -> "Qua":
        """Read a chart from a string."""
        from ..parser.qua import decode_text

        return decode_text(text)

    def to_writer(self, sink: BinaryIO | TextIO) -> None:
        """Write the chart to a binary or text stream."""
        from ..parser.qua import encode

        encode(self, sink)

    def to_file(self, path: str | os.PathLike) -> None:
        """
        Write the chart to a file, replacing its contents.

        :raises TransportError: if the file cannot be opened or written.
        """
        from ..parser.qua import encode

        try:
            f = open(path, "wb")
        except OSError as e:
            raise TransportError(f"cannot open {os.fspath(path)!r} for writing") from e
        with f:
            encode(self, f)

    @property
    def key_count(self) -> int:
        """The number of lanes, including the scratch lane."""
        return self.game_mode.key_count + (1 if self.has_scratch_key else 0)

    @property
    def length(self) -> int:
        """The time in milliseconds at which the last hit object ends."""
        if not self.hit_objects:
            return 0
        return max(max(hit_object.start_time, hit_object.end_time) for hit_object in self.hit_objects)

    @property
    def tap_note_count(self) -> int:
        return sum(1 for hit_object in self.hit_objects if not hit_object.is_long_note)

    @property
    def long_note_count(self) -> int:
        return sum(1 for hit_object in self.hit_objects if hit_object.is_long_note)

    def get_timing_point_at(self, time: float) -> TimingPointInfo | None:
        """
        Fetch the timing point in effect at the given time.

        Times before the first timing point use the first timing point.

        :param time: The time in milliseconds to query.
        :returns: The timing point, or `None` if the chart has no timing points.
        """
        if not self.timing_points:
            return None
        ordered = _sorted_timing_points(self.timing_points)
        index = bisect_right([tp.start_time for tp in ordered], time) - 1
        return ordered[max(index, 0)]

    def get_scroll_velocity_at(self, time: float) -> ScrollVelocityInfo | None:
        """
        Fetch the scroll velocity change in effect at the given time.

        :param time: The time in milliseconds to query.
        :returns: The scroll velocity, or `None` if no scroll velocity change happens at or before that time.
        """
        ordered = sorted(self.slider_velocities, key=lambda sv: sv.start_time)
        index = bisect_right([sv.start_time for sv in ordered], time) - 1
        if index < 0:
            return None
        return ordered[index]

    def get_bpm(self, time: float) -> float:
        """
        Fetch the prevailing BPM at the given time.

        :param time: The time in milliseconds to query.
        :returns: The chart's BPM at that time, or 0 if the chart has no timing points.
        """
        timing_point = self.get_timing_point_at(time)
        if timing_point is None:
            return 0.0
        return timing_point.bpm

    def common_bpm(self) -> float:
        """
        Find the BPM that lasts for the longest total duration, up to the end of the last hit object.

        :returns: The most common BPM, or 0 if the chart has no timing points.
        """
        if not self.timing_points:
            return 0.0
        ordered = _sorted_timing_points(self.timing_points)
        if not self.hit_objects:
            return ordered[0].bpm

        last_time = float(self.length)
        durations: dict[float, float] = {}
        for i in reversed(range(len(ordered))):
            timing_point = ordered[i]
            if timing_point.start_time > last_time:
                continue
            # The first section is measured from the start of the song
            section_start = 0.0 if i == 0 else timing_point.start_time
            durations[timing_point.bpm] = durations.get(timing_point.bpm, 0.0) + (last_time - section_start)
            last_time = timing_point.start_time

        if not durations:
            return ordered[0].bpm
        return max(durations, key=lambda bpm: durations[bpm])

    def sort_hit_objects(self) -> None:
        self.hit_objects.sort(key=lambda hit_object: hit_object.start_time)

    def sort_timing_points(self) -> None:
        self.timing_points.sort(key=lambda tp: tp.start_time)

    def sort_scroll_velocities(self) -> None:
        self.slider_velocities.sort(key=lambda sv: sv.start_time)

    def sort_sound_effects(self) -> None:
        self.sound_effects.sort(key=lambda sound_effect: sound_effect.start_time)

    def sort(self) -> None:
        """Sort every time-based collection by start time. Objects sharing a start time keep their order."""
        self.sort_hit_objects()
        self.sort_timing_points()
        self.sort_scroll_velocities()
        self.sort_sound_effects()

    def validate(self):
        if not self.timing_points:
            raise ValueError("chart has no timing points")
        if not self.hit_objects:
            raise ValueError("chart has no hit objects")

        for i, timing_point in enumerate(self.timing_points):
            if timing_point.bpm <= 0:
                raise ValueError(f"timing point {i} has a non-positive BPM (got {timing_point.bpm})")

        sample_count = len(self.custom_audio_samples)
        for i, hit_object in enumerate(self.hit_objects):
            if not 1 <= hit_object.lane <= self.key_count:
                raise ValueError(f"hit object {i} lane out of range (got {hit_object.lane})")
            if hit_object.is_long_note and hit_object.end_time <= hit_object.start_time:
                raise ValueError(
                    f"hit object {i} ends before it starts (got {hit_object.start_time} ~ {hit_object.end_time})"
                )
            if not 0 <= hit_object.editor_layer <= len(self.editor_layers):
                raise ValueError(f"hit object {i} editor layer out of range (got {hit_object.editor_layer})")
            for key_sound in hit_object.key_sounds:
                if not 1 <= key_sound.sample <= sample_count:
                    raise ValueError(f"hit object {i} key sound sample out of range (got {key_sound.sample})")
                if not 0 <= key_sound.volume <= MAX_VOLUME:
                    raise ValueError(f"hit object {i} key sound volume out of range (got {key_sound.volume})")

        for i, sound_effect in enumerate(self.sound_effects):
            if not 1 <= sound_effect.sample <= sample_count:
                raise ValueError(f"sound effect {i} sample out of range (got {sound_effect.sample})")
            if not 0 <= sound_effect.volume <= MAX_VOLUME:
                raise ValueError(f"sound effect {i} volume out of range (got {sound_effect.volume})")

    def is_valid(self) -> bool:
        """Check whether the chart is playable. See :meth:`validate` for the reason a chart is not."""
        try:
            self.validate()
        except ValueError as e:
            logger.debug(f"chart is invalid: {e}")
            return False
        return True

    def with_normalized_svs(self) -> "Qua":
        """
        Return a copy of the chart with its scroll velocities in normalized form.

        The copy has :attr:`bpm_does_not_affect_scroll_velocity` set. If the chart is already normalized, the copy is
        returned unchanged.
        """
        qua = copy.deepcopy(self)
        if self.bpm_does_not_affect_scroll_velocity:
            return qua

        qua.slider_velocities = normalize_scroll_velocities(self.timing_points, self.slider_velocities)
        # Before the first change, the multiplier is 1 relative to the first timing point, which is the reference
        qua.initial_scroll_velocity = 1.0
        qua.bpm_does_not_affect_scroll_velocity = True
        return qua

    def with_denormalized_svs(self) -> "Qua":
        """
        Return a copy of the chart with its scroll velocities in denormalized form.

        Denormalized charts have no initial scroll velocity, so an initial scroll velocity other than 1 is kept as a
        scroll velocity change at the first timing point, unless a change already starts at or before that time.
        """
        qua = copy.deepcopy(self)
        if not self.bpm_does_not_affect_scroll_velocity:
            return qua

        slider_velocities = denormalize_scroll_velocities(self.timing_points, self.slider_velocities)
        if self.initial_scroll_velocity != 1.0 and self.timing_points:
            first_time = round(_sorted_timing_points(self.timing_points)[0].start_time)
            if all(sv.start_time > first_time for sv in self.slider_velocities):
                initial = ScrollVelocityInfo(first_time, self.initial_scroll_velocity)
                slider_velocities.insert(0, denormalize_scroll_velocities(self.timing_points, [initial])[0])
                logger.debug(f"added scroll velocity at {first_time}ms for initial velocity")

        qua.slider_velocities = slider_velocities
        qua.initial_scroll_velocity = 1.0
        qua.bpm_does_not_affect_scroll_velocity = False
        return qua
