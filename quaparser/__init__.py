"""
Reads and writes .qua chart files.

Example::

    from quaparser import Qua

    qua = Qua.from_file("123.qua")
    qua.title = "Never Gonna Give You Up"
    qua.to_file("test.qua")
"""
from .classes import (
    CustomAudioSampleInfo,
    DecodeError,
    EditorLayerInfo,
    FieldError,
    GameMode,
    HitObjectInfo,
    HitSounds,
    KeySoundInfo,
    Qua,
    QuaError,
    ScrollVelocityInfo,
    SoundEffectInfo,
    StructuralError,
    TimeSignature,
    TimingPointInfo,
    TransportError,
    denormalize_scroll_velocities,
    normalize_scroll_velocities,
)

from .parser import (
    QuaParser,
    decode,
    decode_text,
    encode,
    to_text,
)

__version__ = "0.1.0"
