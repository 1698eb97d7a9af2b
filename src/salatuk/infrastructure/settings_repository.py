"""JSON-based settings repository."""

import json
import logging
from pathlib import Path

import aiofiles

from salatuk.domain.models import AppSettings
from salatuk.services.ports import SettingsRepositoryPort

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "salatuk" / "settings.json"


class JsonSettingsRepository(SettingsRepositoryPort):
    """Repository that keeps settings in a JSON file."""

    def __init__(self, file_path: Path | None = None) -> None:
        """
        Initialize repository.

        Args:
            file_path: Settings file path (default: ~/.config/salatuk/settings.json)
        """
        self._file_path = file_path or DEFAULT_SETTINGS_PATH

    @property
    def file_path(self) -> Path:
        return self._file_path

    async def _ensure_dir(self) -> None:
        parent = self._file_path.parent
        if not parent.exists():
            parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Settings directory created: {parent}")

    async def load(self) -> AppSettings:
        """Load settings, falling back to defaults when the file is missing or invalid."""
        if not self._file_path.exists():
            logger.info("No settings file found, using defaults.")
            return AppSettings()

        try:
            async with aiofiles.open(self._file_path, encoding="utf-8") as f:
                data = json.loads(await f.read())
        except json.JSONDecodeError as e:
            logger.error(f"Settings file is not valid JSON: {e}")
            return AppSettings()

        try:
            settings = AppSettings.from_dict(data)
        except (ValueError, TypeError, AttributeError) as e:
            logger.error(f"Settings file has invalid values: {e}")
            return AppSettings()

        logger.info(f"Settings loaded: {self._file_path}")
        return settings

    async def save(self, settings: AppSettings) -> None:
        """Write settings to disk."""
        await self._ensure_dir()

        try:
            async with aiofiles.open(self._file_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(settings.to_dict(), ensure_ascii=False, indent=2))
            logger.info(f"Settings saved: {self._file_path}")
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")
            raise
