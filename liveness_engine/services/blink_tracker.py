"""
Temporal blink tracker with debounce and a bounded blink history
"""
import logging
from collections import deque
from typing import Optional, Tuple
from ..config import Config, config as default_config
from ..models.data_models import BlinkCounterState, FrameSignals

logger = logging.getLogger(__name__)


class BlinkTracker:
    """
    Folds per-frame blink states into a debounced blink count.

    One physical blink spans several consecutive frames with closed eyes;
    only the first of them outside the debounce window is counted. The
    history records one sample per face-present frame that is either a
    counted blink (True) or open eyes (False).
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or default_config
        self._history = deque(maxlen=self.config.BLINK_HISTORY_SIZE)
        self._counter = BlinkCounterState()

    @property
    def history(self) -> Tuple[bool, ...]:
        """Recent blink samples, most recent last"""
        return tuple(self._history)

    @property
    def counter(self) -> BlinkCounterState:
        return self._counter

    def update(self, frame_signals: FrameSignals, timestamp_ms: int) -> bool:
        """
        Apply one processed frame.

        Args:
            frame_signals: Signals of the current frame
            timestamp_ms: Frame time in milliseconds

        Returns:
            bool: True if this frame registered a debounced blink event
        """
        elapsed = timestamp_ms - self._counter.last_blink_timestamp_ms

        if frame_signals.is_blinking and elapsed > self.config.BLINK_DEBOUNCE_MS:
            self._counter = BlinkCounterState(
                count=self._counter.count + 1,
                last_blink_timestamp_ms=timestamp_ms
            )
            self._history.append(True)
            logger.info(f"Blink detected at {timestamp_ms}ms (count={self._counter.count})")
            return True

        if not frame_signals.is_blinking and frame_signals.landmark_count > 0:
            self._history.append(False)

        # Closed eyes inside the debounce window, or no face: nothing recorded
        return False

    def has_recent_blink(self, window: Optional[int] = None) -> bool:
        """Whether any of the last `window` history samples is a blink"""
        window = self.config.RECENT_BLINK_WINDOW if window is None else window
        if window <= 0:
            return False
        return any(list(self._history)[-window:])

    def reset(self):
        """Clear the history and zero the counter and last-blink time"""
        self._history.clear()
        self._counter = BlinkCounterState()
