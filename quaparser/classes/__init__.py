from .base import (
    DecodeError,
    FieldError,
    QuaError,
    StructuralError,
    TransportError,
    Validateable,
)

from .chart import (
    CustomAudioSampleInfo,
    EditorLayerInfo,
    HitObjectInfo,
    KeySoundInfo,
    ScrollVelocityInfo,
    SoundEffectInfo,
    TimingPointInfo,
)

from .enums import (
    GameMode,
    HitSounds,
    TimeSignature,
)

from .qua import (
    Qua,
    denormalize_scroll_velocities,
    normalize_scroll_velocities,
)
