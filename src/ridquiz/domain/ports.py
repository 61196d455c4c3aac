"""
Ports (interfaces) for the session engine's collaborators.

These define the contract that infrastructure adapters must implement.
The engine depends on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .settings import QuizSettings


class SettingsStore(ABC):
    """
    Port for reading and persisting quiz settings.

    Implementations:
        - InMemorySettingsStore: Process-local, nothing persisted.
        - YamlSettingsStore: A YAML file on disk.
    """

    @abstractmethod
    def load(self) -> QuizSettings:
        """
        Return the current settings.

        Called at every deck rebuild; implementations must not cache
        across external changes they are expected to observe.
        """
        pass

    @abstractmethod
    def save(self, settings: QuizSettings) -> None:
        """Persist the given settings."""
        pass


class NotificationSink(ABC):
    """
    Port for answer feedback and pronunciation.

    Fire-and-forget: the engine ignores return values and errors, so an
    implementation can never influence score, phase, or deck state.

    Implementations:
        - NullNotificationSink: Does nothing.
        - LoggingNotificationSink: Writes events to the log.
        - ConsoleNotificationSink: Terminal feedback plus espeak speech.
    """

    @abstractmethod
    def notify_correct(self) -> None:
        pass

    @abstractmethod
    def notify_incorrect(self) -> None:
        pass

    @abstractmethod
    def speak(self, word: str, rate: float, enabled: bool) -> None:
        """
        Pronounce a word.

        Args:
            word: Text to speak.
            rate: Speech rate from settings (0.2-0.9, 0.5 is normal).
            enabled: Whether speech is enabled in settings.
        """
        pass
