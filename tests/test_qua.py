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
    TimingPointInfo,
)


@pytest.fixture()
def playable() -> Qua:
    return Qua(
        timing_points=[TimingPointInfo(start_time=0, bpm=120)],
        hit_objects=[HitObjectInfo(start_time=0, lane=1), HitObjectInfo(start_time=500, lane=4, end_time=1000)],
    )


def test_default_instances_do_not_share_collections() -> None:
    a = Qua()
    b = Qua()
    a.hit_objects.append(HitObjectInfo())
    assert b.hit_objects == []
    assert a != b


def test_key_count() -> None:
    assert Qua().key_count == 4
    assert Qua(has_scratch_key=True).key_count == 5
    assert Qua(game_mode=GameMode.KEYS_7).key_count == 7
    assert Qua(game_mode=GameMode.KEYS_7, has_scratch_key=True).key_count == 8


def test_length() -> None:
    assert Qua().length == 0
    qua = Qua(hit_objects=[HitObjectInfo(start_time=100), HitObjectInfo(start_time=50, end_time=900)])
    assert qua.length == 900


def test_note_counts(playable: Qua) -> None:
    assert playable.tap_note_count == 1
    assert playable.long_note_count == 1


def test_get_timing_point_at() -> None:
    first = TimingPointInfo(start_time=0, bpm=120)
    second = TimingPointInfo(start_time=1000, bpm=180)
    qua = Qua(timing_points=[second, first])

    assert qua.get_timing_point_at(-50) is first
    assert qua.get_timing_point_at(999) is first
    assert qua.get_timing_point_at(1000) is second
    assert qua.get_timing_point_at(5000) is second
    assert qua.get_bpm(1500) == 180


def test_get_timing_point_at_without_timing_points() -> None:
    assert Qua().get_timing_point_at(0) is None
    assert Qua().get_bpm(0) == 0.0


def test_get_scroll_velocity_at() -> None:
    late = ScrollVelocityInfo(500, 1.5)
    early = ScrollVelocityInfo(100, 0.5)
    qua = Qua(slider_velocities=[late, early])

    assert qua.get_scroll_velocity_at(50) is None
    assert qua.get_scroll_velocity_at(100) is early
    assert qua.get_scroll_velocity_at(499) is early
    assert qua.get_scroll_velocity_at(600) is late


def test_common_bpm() -> None:
    qua = Qua(
        timing_points=[
            TimingPointInfo(start_time=0, bpm=100),
            TimingPointInfo(start_time=1000, bpm=200),
            TimingPointInfo(start_time=5000, bpm=100),
        ],
        hit_objects=[HitObjectInfo(start_time=5500, end_time=6000)],
    )
    # 100 BPM for 2000ms, 200 BPM for 4000ms
    assert qua.common_bpm() == 200


def test_common_bpm_ignores_timing_points_after_last_note() -> None:
    qua = Qua(
        timing_points=[TimingPointInfo(start_time=0, bpm=100), TimingPointInfo(start_time=10000, bpm=300)],
        hit_objects=[HitObjectInfo(start_time=2000)],
    )
    assert qua.common_bpm() == 100


def test_common_bpm_without_notes_or_timing_points() -> None:
    assert Qua().common_bpm() == 0.0
    assert Qua(timing_points=[TimingPointInfo(bpm=150)]).common_bpm() == 150


def test_sort_is_stable() -> None:
    a = HitObjectInfo(start_time=100, lane=1)
    b = HitObjectInfo(start_time=0, lane=2)
    c = HitObjectInfo(start_time=100, lane=3)
    qua = Qua(
        hit_objects=[a, b, c],
        timing_points=[TimingPointInfo(start_time=10), TimingPointInfo(start_time=5)],
        slider_velocities=[ScrollVelocityInfo(20, 1.0), ScrollVelocityInfo(10, 2.0)],
        sound_effects=[SoundEffectInfo(start_time=3.5), SoundEffectInfo(start_time=1.5)],
    )

    qua.sort()

    assert qua.hit_objects == [b, a, c]
    assert [tp.start_time for tp in qua.timing_points] == [5, 10]
    assert [sv.start_time for sv in qua.slider_velocities] == [10, 20]
    assert [se.start_time for se in qua.sound_effects] == [1.5, 3.5]


def test_validate(playable: Qua) -> None:
    playable.validate()
    assert playable.is_valid()


def test_validate_empty_chart() -> None:
    with pytest.raises(ValueError, match="timing points"):
        Qua().validate()
    with pytest.raises(ValueError, match="hit objects"):
        Qua(timing_points=[TimingPointInfo(bpm=120)]).validate()
    assert not Qua().is_valid()


def test_validate_lanes(playable: Qua) -> None:
    playable.hit_objects.append(HitObjectInfo(lane=5))
    with pytest.raises(ValueError, match="lane"):
        playable.validate()

    playable.has_scratch_key = True
    playable.validate()

    playable.hit_objects.append(HitObjectInfo(lane=0))
    assert not playable.is_valid()


def test_validate_long_note_end(playable: Qua) -> None:
    playable.hit_objects.append(HitObjectInfo(start_time=1000, end_time=900))
    with pytest.raises(ValueError, match="ends before it starts"):
        playable.validate()


def test_validate_bpm(playable: Qua) -> None:
    playable.timing_points.append(TimingPointInfo(start_time=1000, bpm=0))
    with pytest.raises(ValueError, match="BPM"):
        playable.validate()


def test_validate_editor_layer(playable: Qua) -> None:
    playable.hit_objects[0].editor_layer = 1
    with pytest.raises(ValueError, match="editor layer"):
        playable.validate()

    playable.editor_layers.append(EditorLayerInfo(name="layer"))
    playable.validate()


def test_validate_samples(playable: Qua) -> None:
    playable.hit_objects[0].key_sounds.append(KeySoundInfo(sample=1))
    with pytest.raises(ValueError, match="key sound sample"):
        playable.validate()

    playable.custom_audio_samples.append(CustomAudioSampleInfo(path="hit.wav"))
    playable.validate()

    playable.sound_effects.append(SoundEffectInfo(sample=1, volume=150))
    with pytest.raises(ValueError, match="sound effect 0 volume"):
        playable.validate()


def test_editor_layer_color() -> None:
    assert EditorLayerInfo().color == (255, 255, 255)
    assert EditorLayerInfo(color_rgb="0, 128,255").color == (0, 128, 255)
    with pytest.raises(ValueError):
        _ = EditorLayerInfo(color_rgb="0,128").color
    with pytest.raises(ValueError):
        _ = EditorLayerInfo(color_rgb="0,128,256").color
    with pytest.raises(ValueError):
        _ = EditorLayerInfo(color_rgb="red").color


def test_milliseconds_per_beat() -> None:
    assert TimingPointInfo(bpm=120).milliseconds_per_beat == 500
