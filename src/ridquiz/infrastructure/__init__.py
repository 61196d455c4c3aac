# Infrastructure adapters
from .notifications import (
    ConsoleNotificationSink,
    LoggingNotificationSink,
    NullNotificationSink,
)
from .settings_store import InMemorySettingsStore, YamlSettingsStore

__all__ = [
    "ConsoleNotificationSink",
    "LoggingNotificationSink",
    "NullNotificationSink",
    "InMemorySettingsStore",
    "YamlSettingsStore",
]
