"""
Settings stores: Infrastructure adapters for the quiz settings blob.

Implement SettingsStore either in memory or as a YAML file.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from ridquiz.domain.ports import SettingsStore
from ridquiz.domain.settings import QuizSettings

logger = logging.getLogger(__name__)


class InMemorySettingsStore(SettingsStore):
    """Keeps settings for the life of the process only."""

    def __init__(self, settings: QuizSettings | None = None):
        self._settings = settings.model_copy(deep=True) if settings else QuizSettings()

    def load(self) -> QuizSettings:
        return self._settings.model_copy(deep=True)

    def save(self, settings: QuizSettings) -> None:
        self._settings = settings.model_copy(deep=True)


class YamlSettingsStore(SettingsStore):
    """
    Persists settings as a YAML mapping.

    The file is re-read on every load, so edits made between rebuilds are
    picked up at the next rebuild.
    """

    def __init__(self, path: Path, defaults: QuizSettings | None = None):
        self.path = Path(path)
        self.defaults = defaults or QuizSettings()

    def load(self) -> QuizSettings:
        if not self.path.exists():
            return self.defaults.model_copy(deep=True)

        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not read settings {self.path}: {e}; using defaults")
            return self.defaults.model_copy(deep=True)

        if not isinstance(data, dict):
            logger.warning(f"Settings {self.path} is not a mapping; using defaults")
            return self.defaults.model_copy(deep=True)

        merged = {**self.defaults.model_dump(), **data}
        try:
            return QuizSettings.model_validate(merged)
        except ValidationError as e:
            logger.warning(f"Invalid settings in {self.path}: {e}; using defaults")
            return self.defaults.model_copy(deep=True)

    def save(self, settings: QuizSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        text = yaml.safe_dump(
            settings.model_dump(mode="json"), allow_unicode=True, sort_keys=True
        )
        try:
            tmp_path.write_text(text, encoding="utf-8")
            os.replace(tmp_path, self.path)
        finally:
            tmp_path.unlink(missing_ok=True)
        logger.debug(f"Saved settings to {self.path}")
