"""
Activity Watchers

Sources of "the user is here" signals. Each watcher blocks in ``watch``
and calls ``on_signal`` whenever it detects activity.
"""

import threading
from typing import Callable, List, Optional, Protocol, Tuple

import numpy as np

from .logging_setup import get_logger

Position = Tuple[float, float]


class ActivityWatcher(Protocol):
    name: str

    def watch(self, on_signal: Callable[[], None]) -> None: ...


def _pointer_position() -> Position:
    # pynput needs a display server at import time.
    from pynput import mouse

    return mouse.Controller().position


class KeyboardWatcher:
    """Emits a signal on every key press."""

    name = "KeyboardWatcher"

    def __init__(self):
        self.logger = get_logger(__name__)
        self._listener = None

    def watch(self, on_signal: Callable[[], None]) -> None:
        from pynput import keyboard

        def on_press(key) -> None:
            on_signal()

        self.logger.debug("Starting keyboard listener")
        with keyboard.Listener(on_press=on_press) as listener:
            self._listener = listener
            listener.join()

    def stop(self) -> None:
        if self._listener is not None:
            self._listener.stop()


class MouseWatcher:
    """
    Samples the pointer position at a fixed interval.

    Small jitter is ignored: a signal is emitted only when the pointer has
    moved more than ``threshold`` pixels from the last counted position.
    """

    name = "MouseWatcher"

    def __init__(self,
                 interval: float = 30.0,
                 threshold: float = 100.0,
                 position: Optional[Callable[[], Position]] = None,
                 stop_event: Optional[threading.Event] = None):
        """
        Initialize the mouse watcher.

        Args:
            interval: Seconds between position samples
            threshold: Minimum displacement in pixels that counts as activity
            position: Pointer position source (pynput by default)
            stop_event: Ends the watch loop when set
        """
        self.logger = get_logger(__name__)
        self.interval = interval
        self.threshold = threshold
        self._position = position or _pointer_position
        self.stop_event = stop_event or threading.Event()
        self.last_position: Position = (0.0, 0.0)

    def watch(self, on_signal: Callable[[], None]) -> None:
        while not self.stop_event.wait(self.interval):
            self.sample(on_signal)

    def sample(self, on_signal: Callable[[], None]) -> bool:
        """Take one position sample. Returns True when a signal was emitted."""
        current = self._position()
        distance = float(np.linalg.norm(np.subtract(current, self.last_position)))
        self.logger.debug(f"Mouse at {current}, last {self.last_position}, distance {distance:.1f}")
        if distance <= self.threshold:
            return False

        self.last_position = (float(current[0]), float(current[1]))
        on_signal()
        return True

    def stop(self) -> None:
        self.stop_event.set()


def build_watchers(keyboard: bool = True,
                   mouse: bool = True,
                   mouse_interval: float = 30.0,
                   mouse_threshold: float = 100.0) -> List[ActivityWatcher]:
    """Create the enabled watchers."""
    watchers: List[ActivityWatcher] = []
    if keyboard:
        watchers.append(KeyboardWatcher())
    if mouse:
        watchers.append(MouseWatcher(interval=mouse_interval, threshold=mouse_threshold))
    return watchers
