"""
End-to-end persistence through managers, the registry and a real database
file, simulating application restarts by reopening the file.
"""
import pytest

from savesettings.application.settings.audio_settings import AUDIO_SETTINGS_KEY, AudioSettingsManager, AudioVolumeData
from savesettings.application.settings.persistence import PreferencesBackend
from savesettings.application.settings.simple_settings import SimpleSettingsManager
from savesettings.shared.application.settings.settings_registry import SettingsRegistry


class Session:
    """One application run: opens the database, builds the managers."""

    def __init__(self, db_path):
        self.backend = PreferencesBackend.open(db_path)
        self.registry = SettingsRegistry(self.backend)
        self.audio = AudioSettingsManager(registry=self.registry)
        self.simple = SimpleSettingsManager(registry=self.registry)
        self.simple.register_setting("ui.language", "en")
        self.simple.load_all_settings()

    def close(self):
        self.registry.shutdown()
        self.audio.destroy()
        self.simple.destroy()
        self.backend.close()


@pytest.fixture
def sessions(db_path):
    opened = []

    def start():
        session = Session(db_path)
        opened.append(session)
        return session

    yield start
    for session in opened:
        if not session.registry.is_shut_down:
            session.close()


def test_values_survive_restart(sessions):
    first = sessions()
    first.audio.settings.master_volume = 0.3
    first.audio.settings.sfx_volume = 0.6
    first.simple.set_setting("ui.language", "fr")
    first.close()

    second = sessions()
    assert second.audio.settings.get_current_data() == AudioVolumeData(master_volume=0.3, sfx_volume=0.6)
    assert second.simple.get_setting("ui.language") == "fr"


def test_save_all_is_visible_to_another_connection(sessions):
    first = sessions()
    first.audio.settings.bgm_volume = 0.4
    report = first.registry.save_all_settings()
    assert report

    second = sessions()
    assert second.audio.settings.bgm_volume == 0.4


def test_reset_all_is_durable(sessions):
    first = sessions()
    first.audio.settings.master_volume = 0.1
    first.simple.set_setting("ui.language", "de")
    first.registry.save_all_settings()

    first.registry.reset_all_settings()
    first.close()

    second = sessions()
    assert second.audio.settings.get_current_data() == AudioVolumeData()
    assert second.simple.get_setting("ui.language") == "en"


def test_deleted_entry_loads_defaults(sessions):
    first = sessions()
    first.audio.settings.master_volume = 0.2
    first.registry.save_all_settings()
    first.registry.delete_preferences_by_key(AUDIO_SETTINGS_KEY)

    first.audio.load()
    assert first.audio.settings.master_volume == 1.0


def test_corrupt_entry_recovers_to_defaults(sessions, db_path):
    first = sessions()
    first.audio.settings.master_volume = 0.2
    first.close()

    backend = PreferencesBackend.open(db_path)
    backend.repository.set(AUDIO_SETTINGS_KEY, "not json")
    backend.close()

    second = sessions()
    assert second.audio.settings.master_volume == 1.0


def test_unregistered_manager_is_skipped(sessions):
    session = sessions()
    session.audio.settings.master_volume = 0.7
    session.registry.unregister_manager(session.audio)

    session.registry.save_all_settings()

    assert not session.backend.has_key(AUDIO_SETTINGS_KEY)
