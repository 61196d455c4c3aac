"""
Session Factory
Centralizes the logic for selecting adapters and assembling a quiz session.
"""

import logging
import random

from ridquiz.application.catalog import load_catalog
from ridquiz.application.config import AppConfig
from ridquiz.application.session_engine import QuizSession
from ridquiz.domain.ports import NotificationSink, SettingsStore
from ridquiz.infrastructure.notifications import (
    ConsoleNotificationSink,
    LoggingNotificationSink,
    NullNotificationSink,
)
from ridquiz.infrastructure.settings_store import InMemorySettingsStore, YamlSettingsStore

logger = logging.getLogger(__name__)


def get_settings_store(config: AppConfig) -> SettingsStore:
    """
    Returns the SettingsStore implementation selected by config.
    """
    if config.ephemeral:
        return InMemorySettingsStore()
    return YamlSettingsStore(config.settings_path)


def get_notification_sink(config: AppConfig, store: SettingsStore) -> NotificationSink:
    """
    Returns the NotificationSink implementation selected by config.
    """
    if config.notifier == "none":
        return NullNotificationSink()

    if config.notifier == "log":
        return LoggingNotificationSink()

    settings = store.load()
    return ConsoleNotificationSink(
        sounds_enabled=settings.answer_sounds_enabled,
        speech_command=config.speech_command,
        voice=config.speech_voice,
    )


def build_quiz_session(config: AppConfig) -> QuizSession:
    """
    Load the catalog and wire a QuizSession to the configured adapters.

    Raises:
        CatalogError: The configured catalog cannot be loaded.
    """
    catalog = load_catalog(config.catalog_path)
    store = get_settings_store(config)
    notifier = get_notification_sink(config, store)
    rng = random.Random(config.seed)
    logger.debug(
        f"Session wiring: store={type(store).__name__} notifier={type(notifier).__name__} "
        f"seed={config.seed}"
    )
    return QuizSession(catalog, store, notifier=notifier, rng=rng)
