"""
Audio Settings

Example settings domain: master, background music and sound effect
volumes, each clamped to [0, 1] with a default of 1.0.

Usage:
    audio = AudioSettingsManager(registry=registry, backend=backend)
    audio.audio_volume_changed.subscribe(lambda sender: mixer.refresh())

    audio.settings.master_volume = 0.8
    audio.settings.bgm_volume = 1.5      # stored as 1.0
    audio.save()

    bgm_gain = audio.settings.get_actual_bgm_volume()
"""
from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING

from savesettings.application.events.settings_event import SettingsEvent
from savesettings.application.settings.base_settings import BaseSettings, clamp01, validated_field, values_differ
from savesettings.application.settings.persistence import PreferencesBackend
from savesettings.application.settings.settings_instance import SettingsInstance
from savesettings.application.settings.settings_manager import BaseSettingsManager

if TYPE_CHECKING:
    from savesettings.shared.application.settings.settings_registry import SettingsRegistry


DEFAULT_VOLUME = 1.0
AUDIO_SETTINGS_KEY = "AudioSettings"


@dataclass
class AudioVolumeData(BaseSettings):
    """Persisted snapshot of the audio volumes."""
    master_volume: float = validated_field(DEFAULT_VOLUME, min_value=0.0, max_value=1.0)
    bgm_volume: float = validated_field(DEFAULT_VOLUME, min_value=0.0, max_value=1.0)
    sfx_volume: float = validated_field(DEFAULT_VOLUME, min_value=0.0, max_value=1.0)


@dataclass
class AudioSettingsData:
    """Live audio volume holder shared with whatever plays sound."""
    master_volume: float = DEFAULT_VOLUME
    bgm_volume: float = DEFAULT_VOLUME
    sfx_volume: float = DEFAULT_VOLUME


class AudioSettings(SettingsInstance[AudioVolumeData, AudioSettingsData]):
    """
    Audio volume settings.

    Setters clamp to [0, 1] and only notify when the clamped value differs
    from the current one. volume_changed fires before settings_changed.
    """

    DATA_CLASS = AudioVolumeData

    def __init__(
        self,
        holder: AudioSettingsData,
        backend: Optional[PreferencesBackend] = None,
        key: str = AUDIO_SETTINGS_KEY,
    ):
        # The fixed default key keeps the stored entry stable if the class is renamed
        self.volume_changed = SettingsEvent("volume_changed")
        super().__init__(holder, backend, key)

    # =========================================================================
    # Volumes
    # =========================================================================

    @property
    def master_volume(self) -> float:
        return self._holder.master_volume

    @master_volume.setter
    def master_volume(self, value: float):
        self._set_volume("master_volume", value)

    @property
    def bgm_volume(self) -> float:
        return self._holder.bgm_volume

    @bgm_volume.setter
    def bgm_volume(self, value: float):
        self._set_volume("bgm_volume", value)

    @property
    def sfx_volume(self) -> float:
        return self._holder.sfx_volume

    @sfx_volume.setter
    def sfx_volume(self, value: float):
        self._set_volume("sfx_volume", value)

    def _set_volume(self, name: str, value: float) -> None:
        clamped_value = clamp01(value)
        if values_differ(getattr(self._holder, name), clamped_value):
            setattr(self._holder, name, clamped_value)
            self._volume_changed()

    def _volume_changed(self) -> None:
        self.volume_changed.emit(self)
        self.notify_settings_changed()

    def get_actual_bgm_volume(self) -> float:
        """Background music volume scaled by the master volume."""
        return clamp01(self.master_volume * self.bgm_volume)

    def get_actual_sfx_volume(self) -> float:
        """Sound effect volume scaled by the master volume."""
        return clamp01(self.master_volume * self.sfx_volume)

    # =========================================================================
    # SettingsInstance hooks
    # =========================================================================

    def reset_to_default(self) -> None:
        self._holder.master_volume = DEFAULT_VOLUME
        self._holder.bgm_volume = DEFAULT_VOLUME
        self._holder.sfx_volume = DEFAULT_VOLUME
        self._volume_changed()

    def get_data_from_settings(self) -> AudioVolumeData:
        return AudioVolumeData(
            master_volume=self.master_volume,
            bgm_volume=self.bgm_volume,
            sfx_volume=self.sfx_volume,
        )

    def apply_data_to_settings(self, data: AudioVolumeData) -> None:
        master = clamp01(data.master_volume)
        bgm = clamp01(data.bgm_volume)
        sfx = clamp01(data.sfx_volume)

        changed = (
            values_differ(self._holder.master_volume, master)
            or values_differ(self._holder.bgm_volume, bgm)
            or values_differ(self._holder.sfx_volume, sfx)
        )

        self._holder.master_volume = master
        self._holder.bgm_volume = bgm
        self._holder.sfx_volume = sfx

        if changed:
            self._volume_changed()

    def dispose(self) -> None:
        self.volume_changed.clear()
        super().dispose()


class AudioSettingsManager(BaseSettingsManager[AudioSettings]):
    """
    Manager for the audio volume settings.

    audio_volume_changed fires after the instance's volume_changed and
    before the generic settings_changed chain.
    """

    def __init__(
        self,
        registry: Optional['SettingsRegistry'] = None,
        backend: Optional[PreferencesBackend] = None,
        holder: Optional[AudioSettingsData] = None,
        key: str = AUDIO_SETTINGS_KEY,
        auto_register: bool = True,
    ):
        self.audio_volume_changed = SettingsEvent("audio_volume_changed")
        self._holder = holder if holder is not None else AudioSettingsData()
        self._key = key
        super().__init__(registry=registry, backend=backend, auto_register=auto_register)

    def initialize_settings(self) -> AudioSettings:
        settings = AudioSettings(self._holder, backend=self._backend, key=self._key)
        settings.volume_changed.subscribe(self._handle_volume_changed)
        return settings

    def _handle_volume_changed(self, sender: Any) -> None:
        self.audio_volume_changed.emit(self)

    def destroy(self) -> None:
        if self._settings is not None and not self.is_destroyed:
            self._settings.volume_changed.unsubscribe(self._handle_volume_changed)
        self.audio_volume_changed.clear()
        super().destroy()
