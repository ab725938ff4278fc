"""Single-slot progress reporting for long-running pipeline stages.

The animator pushes short stage labels; the presentation host reads the
latest one. There is no queue: a slow reader only ever sees the most recent
label.
"""

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

SUBMITTING = "submitting"
PROCESSING = "processing"

_DISPLAY_TEXT = {
    SUBMITTING: "Initiating video generation...",
    PROCESSING: "Processing video (this may take a minute)...",
}


def describe(label: str) -> str:
    """Return display text for a progress label (unknown labels pass through)."""
    return _DISPLAY_TEXT.get(label, label)


class ProgressReporter:
    """Holds the latest progress label and notifies subscribers synchronously."""

    def __init__(self) -> None:
        self._latest: Optional[str] = None
        self._subscribers: list[Callable[[Optional[str]], None]] = []

    @property
    def latest(self) -> Optional[str]:
        return self._latest

    def subscribe(self, callback: Callable[[Optional[str]], None]) -> Callable[[], None]:
        """Register a callback for label changes. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def report(self, label: str) -> None:
        """Overwrite the current label."""
        logger.debug(f"Progress: {label}")
        self._latest = label
        self._notify()

    def clear(self) -> None:
        self._latest = None
        self._notify()

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self._latest)

    __call__ = report
