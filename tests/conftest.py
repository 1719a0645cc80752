from pathlib import Path

import pytest

from quaparser import (
    CustomAudioSampleInfo,
    EditorLayerInfo,
    GameMode,
    HitObjectInfo,
    KeySoundInfo,
    Qua,
    ScrollVelocityInfo,
    SoundEffectInfo,
    TimeSignature,
    TimingPointInfo,
)

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture()
def csikos_post_path() -> Path:
    return DATA_DIR / "1416.qua"


@pytest.fixture()
def csikos_post(csikos_post_path: Path) -> Qua:
    return Qua.from_file(csikos_post_path)


@pytest.fixture()
def full_chart() -> Qua:
    """A chart with every field changed from its default."""
    return Qua(
        audio_file="audio.ogg",
        song_preview_time=12345,
        background_file="bg.png",
        banner_file="banner.png",
        map_id=0,
        map_set_id=77,
        game_mode=GameMode.KEYS_7,
        title="チャート: the \"Remix\"",
        artist="1234",
        source="true",
        tags="a, b, c",
        creator="someone #1",
        difficulty_name="- Hard -",
        description="line one\nline two",
        genre="null",
        bpm_does_not_affect_scroll_velocity=True,
        initial_scroll_velocity=0.1,
        has_scratch_key=True,
        editor_layers=[
            EditorLayerInfo(name="Layer: 1", hidden=True, color_rgb="0,128,255"),
            EditorLayerInfo(),
        ],
        custom_audio_samples=[CustomAudioSampleInfo(path="clap.wav", unaffected_by_rate=True)],
        sound_effects=[SoundEffectInfo(start_time=500.25, sample=1, volume=80)],
        timing_points=[
            TimingPointInfo(start_time=0.0, bpm=120.0),
            TimingPointInfo(start_time=1234.5, bpm=1 / 3, signature=TimeSignature.TRIPLE, hidden=True),
        ],
        slider_velocities=[
            ScrollVelocityInfo(start_time=-100, multiplier=0.0),
            ScrollVelocityInfo(start_time=2000, multiplier=1e-7),
        ],
        hit_objects=[
            HitObjectInfo(),
            HitObjectInfo(
                start_time=3000,
                lane=8,
                end_time=3500,
                hit_sound=15,
                key_sounds=[KeySoundInfo(sample=1, volume=50), KeySoundInfo()],
                editor_layer=2,
            ),
        ],
    )
