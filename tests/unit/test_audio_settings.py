"""
Tests for the audio settings domain: clamping, event order and forwarding.
"""
import pytest

from savesettings.application.settings.audio_settings import (
    AUDIO_SETTINGS_KEY,
    AudioSettings,
    AudioSettingsData,
    AudioSettingsManager,
    AudioVolumeData,
)


@pytest.fixture
def audio(backend):
    settings = AudioSettings(AudioSettingsData(), backend)
    yield settings
    settings.dispose()


@pytest.fixture
def manager(registry):
    manager = AudioSettingsManager(registry=registry)
    yield manager
    manager.destroy()


class TestAudioVolumes:

    def test_defaults(self, audio):
        assert audio.master_volume == 1.0
        assert audio.bgm_volume == 1.0
        assert audio.sfx_volume == 1.0
        assert audio.key == AUDIO_SETTINGS_KEY

    @pytest.mark.parametrize("value, expected", [(1.5, 1.0), (-0.3, 0.0), (0.25, 0.25)])
    def test_setters_clamp(self, audio, value, expected):
        audio.master_volume = value
        audio.bgm_volume = value
        audio.sfx_volume = value
        assert audio.master_volume == expected
        assert audio.bgm_volume == expected
        assert audio.sfx_volume == expected

    def test_unchanged_value_does_not_notify(self, audio):
        events = []
        audio.settings_changed.subscribe(events.append)

        audio.master_volume = 0.5
        audio.master_volume = 0.5
        assert len(events) == 1

    def test_clamped_to_current_value_does_not_notify(self, audio):
        events = []
        audio.settings_changed.subscribe(events.append)

        audio.sfx_volume = 1.5  # already 1.0 after clamping
        assert events == []

    def test_actual_volumes(self, audio):
        audio.master_volume = 0.5
        audio.bgm_volume = 0.8
        audio.sfx_volume = 0.4
        assert audio.get_actual_bgm_volume() == pytest.approx(0.4)
        assert audio.get_actual_sfx_volume() == pytest.approx(0.2)

    def test_holder_is_shared(self, backend):
        holder = AudioSettingsData()
        audio = AudioSettings(holder, backend)
        audio.bgm_volume = 0.3
        assert holder.bgm_volume == 0.3
        audio.dispose()


class TestAudioEvents:

    def test_domain_event_fires_before_generic(self, audio):
        order = []
        audio.settings_changed.subscribe(lambda sender: order.append("settings_changed"))
        audio.volume_changed.subscribe(lambda sender: order.append("volume_changed"))

        audio.master_volume = 0.2

        assert order == ["volume_changed", "settings_changed"]

    def test_generic_listener_sees_updated_state(self, audio):
        seen = []
        audio.settings_changed.subscribe(lambda sender: seen.append(sender.master_volume))
        audio.master_volume = 0.7
        assert seen == [0.7]

    def test_reset_notifies_once(self, audio):
        audio.master_volume = 0.1
        audio.bgm_volume = 0.1
        events = []
        audio.settings_changed.subscribe(events.append)
        volume_events = []
        audio.volume_changed.subscribe(volume_events.append)

        audio.reset_to_default()

        assert len(events) == 1
        assert len(volume_events) == 1
        assert audio.get_current_data() == AudioVolumeData()

    def test_apply_notifies_once_and_only_on_change(self, audio):
        events = []
        audio.settings_changed.subscribe(events.append)

        audio.apply_data_to_settings(AudioVolumeData(master_volume=0.3, bgm_volume=0.4, sfx_volume=0.5))
        audio.apply_data_to_settings(AudioVolumeData(master_volume=0.3, bgm_volume=0.4, sfx_volume=0.5))

        assert len(events) == 1

    def test_apply_clamps(self, audio):
        audio.apply_data_to_settings(AudioVolumeData(master_volume=4.0, bgm_volume=-1.0))
        assert audio.master_volume == 1.0
        assert audio.bgm_volume == 0.0


class TestAudioPersistence:

    def test_first_run_defaults_with_one_event(self, audio):
        audio.master_volume = 0.2
        events = []
        audio.settings_changed.subscribe(events.append)

        audio.load()

        assert audio.get_current_data() == AudioVolumeData()
        assert len(events) == 1

    def test_save_load_round_trip(self, backend):
        first = AudioSettings(AudioSettingsData(), backend)
        first.master_volume = 0.6
        first.bgm_volume = 1.7
        first.sfx_volume = 0.05
        first.save()
        first.dispose()

        second = AudioSettings(AudioSettingsData(), backend)
        second.load()
        assert second.get_current_data() == AudioVolumeData(master_volume=0.6, bgm_volume=1.0, sfx_volume=0.05)
        second.dispose()

    def test_out_of_range_stored_values_are_clamped(self, audio, backend):
        backend.repository.set(AUDIO_SETTINGS_KEY, '{"master_volume": 2.5, "bgm_volume": -1, "sfx_volume": 0.5}')
        audio.load()
        assert audio.master_volume == 1.0
        assert audio.bgm_volume == 0.0
        assert audio.sfx_volume == 0.5

    def test_stored_entry_uses_field_names(self, audio, backend):
        audio.save()
        assert backend.get_value(AUDIO_SETTINGS_KEY) == {
            "master_volume": 1.0,
            "bgm_volume": 1.0,
            "sfx_volume": 1.0,
        }


class TestAudioSettingsManager:

    def test_registers_and_exposes_settings(self, registry, manager):
        assert registry.get_manager(AudioSettingsManager) is manager
        assert isinstance(manager.settings, AudioSettings)

    def test_full_propagation_order(self, manager):
        order = []
        manager.settings.volume_changed.subscribe(lambda sender: order.append("instance.volume_changed"))
        manager.audio_volume_changed.subscribe(lambda sender: order.append("manager.audio_volume_changed"))
        manager.settings.settings_changed.subscribe(lambda sender: order.append("instance.settings_changed"))
        manager.settings_changed.subscribe(lambda sender: order.append("manager.settings_changed"))

        manager.settings.master_volume = 0.5

        assert order == [
            "manager.audio_volume_changed",
            "instance.volume_changed",
            "manager.settings_changed",
            "instance.settings_changed",
        ]
        assert order.index("manager.audio_volume_changed") < order.index("manager.settings_changed")

    def test_loads_persisted_state_on_construction(self, registry, backend):
        backend.put(AUDIO_SETTINGS_KEY, AudioVolumeData(master_volume=0.25))
        manager = AudioSettingsManager(registry=registry)
        assert manager.settings.master_volume == 0.25
        manager.destroy()

    def test_second_manager_of_same_type_is_inert(self, registry, manager, backend, error_records):
        second = AudioSettingsManager(registry=registry)

        assert registry.get_manager(AudioSettingsManager) is manager
        assert second.settings is None
        assert len(error_records()) == 1

        second.save()
        second.reset_to_default()
        assert not backend.has_key(AUDIO_SETTINGS_KEY)

        second.destroy()
        assert registry.get_manager(AudioSettingsManager) is manager
        assert backend.key_owner(AUDIO_SETTINGS_KEY) is manager.settings

    def test_destroy_stops_domain_forwarding(self, registry):
        manager = AudioSettingsManager(registry=registry)
        settings = manager.settings
        received = []
        manager.audio_volume_changed.subscribe(received.append)

        manager.destroy()
        settings.master_volume = 0.1

        assert received == []
        assert registry.get_manager(AudioSettingsManager) is None
