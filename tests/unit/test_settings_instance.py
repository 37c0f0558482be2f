"""
Tests for SettingsInstance: save/load/reset semantics, events and errors.
"""
import pytest
from dataclasses import dataclass
from typing import Optional

from savesettings.application.settings.base_settings import BaseSettings, validated_field
from savesettings.application.settings.errors import StorageKeyConflictError
from savesettings.application.settings.settings_instance import SettingsInstance


# =============================================================================
# Test Fixtures
# =============================================================================

@dataclass
class GameplayData(BaseSettings):
    difficulty: int = validated_field(1, min_value=0, max_value=3)
    hints: bool = True


class GameplayProfile:
    """Mutable holder."""

    def __init__(self):
        self.difficulty = 1
        self.hints = True


class GameplaySettings(SettingsInstance[GameplayData, GameplayProfile]):
    DATA_CLASS = GameplayData

    def __init__(self, holder, backend=None, key=None):
        super().__init__(holder, backend, key)
        self.extract_result = "auto"
        self.reset_calls = 0

    def get_data_from_settings(self) -> Optional[GameplayData]:
        if self.extract_result != "auto":
            return self.extract_result
        return GameplayData(difficulty=self._holder.difficulty, hints=self._holder.hints)

    def apply_data_to_settings(self, data: GameplayData) -> None:
        self._holder.difficulty = data.difficulty
        self._holder.hints = data.hints
        self.notify_settings_changed()

    def reset_to_default(self) -> None:
        self.reset_calls += 1
        self._holder.difficulty = 1
        self._holder.hints = True
        self.notify_settings_changed()


class FailingApplySettings(GameplaySettings):
    """Writes one field, then fails."""

    def apply_data_to_settings(self, data: GameplayData) -> None:
        self._holder.difficulty = data.difficulty
        raise RuntimeError("apply failed")


@dataclass
class Unserializable(BaseSettings):
    handle: object = None


class UnserializableSettings(SettingsInstance[Unserializable, GameplayProfile]):
    DATA_CLASS = Unserializable

    def get_data_from_settings(self):
        return Unserializable()

    def apply_data_to_settings(self, data):
        pass

    def reset_to_default(self):
        self.notify_settings_changed()


@pytest.fixture
def events():
    return []


@pytest.fixture
def settings(backend, events):
    instance = GameplaySettings(GameplayProfile(), backend)
    instance.settings_changed.subscribe(events.append)
    yield instance
    instance.dispose()


# =============================================================================
# Construction
# =============================================================================

class TestConstruction:

    def test_none_holder_raises(self, backend):
        with pytest.raises(ValueError):
            GameplaySettings(None, backend)

    def test_key_defaults_to_class_name(self, settings):
        assert settings.key == "GameplaySettings"

    def test_custom_key(self, backend):
        instance = GameplaySettings(GameplayProfile(), backend, key="gameplay.v2")
        assert instance.key == "gameplay.v2"
        instance.dispose()

    def test_shared_key_conflicts(self, settings, backend):
        with pytest.raises(StorageKeyConflictError):
            GameplaySettings(GameplayProfile(), backend)

    def test_dispose_releases_key(self, backend):
        first = GameplaySettings(GameplayProfile(), backend)
        first.dispose()
        second = GameplaySettings(GameplayProfile(), backend)
        assert second.key == first.key
        second.dispose()

    def test_unserializable_type_logs_but_constructs(self, backend, error_records):
        instance = UnserializableSettings(GameplayProfile(), backend)
        errors = error_records()
        assert len(errors) == 1
        assert "not serializable" in errors[0].getMessage()
        instance.dispose()


# =============================================================================
# Save
# =============================================================================

class TestSave:

    def test_save_persists_and_notifies(self, settings, backend, events):
        settings.holder.difficulty = 3
        assert settings.save() is True

        assert backend.get("GameplaySettings", GameplayData).difficulty == 3
        assert events == [settings]

    def test_extraction_failure_skips_save_and_event(self, settings, backend, events, error_records):
        settings.extract_result = None
        assert settings.save() is False

        assert not backend.has_key("GameplaySettings")
        assert events == []
        assert len(error_records()) == 1

    def test_empty_extraction_skips_save(self, settings, backend, events):
        settings.extract_result = BaseSettings()
        settings.save()

        assert not backend.has_key("GameplaySettings")
        assert events == []

    def test_failed_extraction_leaves_prior_entry(self, settings, backend):
        settings.holder.difficulty = 2
        settings.save()

        settings.extract_result = None
        settings.holder.difficulty = 0
        settings.save()

        assert backend.get("GameplaySettings", GameplayData).difficulty == 2

    def test_backend_failure_is_logged_not_raised(self, settings, backend, events, error_records, monkeypatch):
        def failing_put(key, value):
            raise OSError("disk full")

        monkeypatch.setattr(backend, "put", failing_put)
        assert settings.save() is False
        assert events == []
        assert len(error_records()) == 1


# =============================================================================
# Load
# =============================================================================

class TestLoad:

    def test_first_run_resets_and_notifies_once(self, settings, events):
        settings.holder.difficulty = 3
        settings.load()

        assert settings.holder.difficulty == 1
        assert settings.reset_calls == 1
        assert events == [settings]

    def test_first_run_is_not_an_error(self, settings, error_records):
        settings.load()
        assert error_records() == []

    def test_load_applies_stored_values(self, settings, backend, events):
        backend.put("GameplaySettings", GameplayData(difficulty=2, hints=False))
        settings.load()

        assert settings.holder.difficulty == 2
        assert settings.holder.hints is False
        assert settings.reset_calls == 0
        assert events == [settings]

    def test_corrupt_entry_falls_back_to_defaults(self, settings, backend, error_records):
        backend.repository.set("GameplaySettings", "{broken")
        settings.holder.difficulty = 3
        settings.load()

        assert settings.holder.difficulty == 1
        assert settings.reset_calls == 1
        assert len(error_records()) == 1
        assert error_records()[0].exc_info is not None

    def test_out_of_range_entry_is_clamped(self, settings, backend):
        backend.repository.set("GameplaySettings", '{"difficulty": 9, "hints": true}')
        settings.load()
        assert settings.holder.difficulty == 3

    def test_partial_apply_is_overwritten_by_defaults(self, backend):
        instance = FailingApplySettings(GameplayProfile(), backend)
        backend.put(instance.key, GameplayData(difficulty=3, hints=False))

        instance.load()

        assert instance.holder.difficulty == 1
        assert instance.holder.hints is True
        instance.dispose()


# =============================================================================
# Apply / current data
# =============================================================================

class TestApplyAndSave:

    def test_apply_and_save(self, settings, backend):
        settings.apply_and_save(GameplayData(difficulty=0, hints=False))

        assert settings.holder.difficulty == 0
        assert backend.get("GameplaySettings", GameplayData) == GameplayData(difficulty=0, hints=False)

    def test_apply_none_is_noop(self, settings, backend, events, error_records):
        settings.apply_and_save(None)

        assert not backend.has_key("GameplaySettings")
        assert events == []
        assert len(error_records()) == 1

    def test_get_current_data(self, settings):
        settings.holder.hints = False
        assert settings.get_current_data() == GameplayData(difficulty=1, hints=False)

    def test_round_trip(self, backend):
        source = GameplaySettings(GameplayProfile(), backend)
        source.apply_and_save(GameplayData(difficulty=2, hints=False))
        source.dispose()

        target = GameplaySettings(GameplayProfile(), backend)
        target.load()
        assert target.get_current_data() == GameplayData(difficulty=2, hints=False)
        target.dispose()
