"""
Notification sinks: Infrastructure adapters for answer feedback and speech.

Implement NotificationSink. All of them are fire-and-forget: nothing here
blocks on audio or reports back to the engine.
"""

import logging
import shutil
import subprocess

import typer

from ridquiz.domain.constants import (
    SPEECH_BASE_WPM,
    SPEECH_RATE_DEFAULT,
    SPEECH_RATE_MAX,
    SPEECH_RATE_MIN,
    SPEECH_WPM_SPREAD,
)
from ridquiz.domain.ports import NotificationSink

logger = logging.getLogger(__name__)


class NullNotificationSink(NotificationSink):
    """Discards every event."""

    def notify_correct(self) -> None:
        pass

    def notify_incorrect(self) -> None:
        pass

    def speak(self, word: str, rate: float, enabled: bool) -> None:
        pass


class LoggingNotificationSink(NotificationSink):
    """Writes events to the log; useful for headless runs."""

    def notify_correct(self) -> None:
        logger.info("Answer correct")

    def notify_incorrect(self) -> None:
        logger.info("Answer incorrect")

    def speak(self, word: str, rate: float, enabled: bool) -> None:
        if enabled:
            logger.info(f"Speak {word!r} at rate {rate:.2f}")


def speech_rate_to_wpm(rate: float) -> int:
    """
    Map a 0.2-0.9 speech-rate setting onto espeak words per minute.

    0.5 is espeak's normal speed; values outside the range are clamped.
    """
    rate = max(SPEECH_RATE_MIN, min(SPEECH_RATE_MAX, rate))
    return int(SPEECH_BASE_WPM * (1 + (rate - SPEECH_RATE_DEFAULT) * SPEECH_WPM_SPREAD))


class ConsoleNotificationSink(NotificationSink):
    """
    Terminal feedback for interactive play.

    Correct/incorrect print a short coloured marker (plus the terminal bell
    when answer sounds are on). Speech runs espeak-ng as a detached process.
    """

    def __init__(
        self,
        sounds_enabled: bool = True,
        speech_command: str = "espeak-ng",
        voice: str = "uk",
    ):
        self.sounds_enabled = sounds_enabled
        self.speech_command = speech_command
        self.voice = voice
        self._speech_proc: subprocess.Popen | None = None

    def notify_correct(self) -> None:
        typer.secho("✓ Correct", fg="green", bold=True)
        self._bell()

    def notify_incorrect(self) -> None:
        typer.secho("✗ Incorrect", fg="red", bold=True)
        self._bell()

    def _bell(self) -> None:
        if self.sounds_enabled:
            typer.echo("\a", nl=False)

    def speak(self, word: str, rate: float, enabled: bool) -> None:
        if not enabled or not word:
            return

        binary = shutil.which(self.speech_command)
        if binary is None:
            logger.debug(f"Speech command {self.speech_command!r} not found; skipping")
            return

        # Only one utterance at a time
        if self._speech_proc is not None and self._speech_proc.poll() is None:
            self._speech_proc.terminate()

        try:
            self._speech_proc = subprocess.Popen(
                [binary, "-v", self.voice, "-s", str(speech_rate_to_wpm(rate)), word],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            logger.warning(f"Could not start speech: {e}")
