"""
Liveness session: per-session state folding frames into a verdict
"""
import logging
import time
from typing import TYPE_CHECKING, Optional, Tuple
import numpy as np
from ..config import Config, config as default_config
from ..models.data_models import BlinkCounterState, FrameSignals, LivenessSnapshot
from .blink_tracker import BlinkTracker
from .geometry_metrics import GeometryMetrics
from .liveness_fusion import LivenessFusion

if TYPE_CHECKING:
    from .landmark_detector import LandmarkDetector

logger = logging.getLogger(__name__)


def current_time_ms() -> int:
    return int(time.time() * 1000)


class LivenessSession:
    """
    Owns the liveness state of one camera session.

    Each call to update() runs the blink tracker and then the fusion rule,
    and publishes a new LivenessSnapshot. Frames must be delivered one at a
    time and in order; the session performs no locking, so hosts receiving
    frames from overlapping callbacks must serialize calls into it.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        metrics: Optional[GeometryMetrics] = None,
        detector: Optional["LandmarkDetector"] = None
    ):
        """
        Args:
            config: Engine configuration (defaults to the module config)
            metrics: Geometry metrics used by process_landmarks()
            detector: Landmark detector used by process_frame()

        Raises:
            ValueError: If the configuration is invalid
        """
        self.config = config or default_config
        self.config.validate()

        self.metrics = metrics or GeometryMetrics(self.config)
        self.detector = detector
        self.blink_tracker = BlinkTracker(self.config)
        self.fusion = LivenessFusion(self.config)

        self.frames_processed = 0
        self._snapshot = LivenessSnapshot()

    @property
    def snapshot(self) -> LivenessSnapshot:
        return self._snapshot

    @property
    def frame_signals(self) -> FrameSignals:
        return self._snapshot.frame_signals

    @property
    def blink_history(self) -> Tuple[bool, ...]:
        return self._snapshot.blink_history

    @property
    def blink_counter(self) -> BlinkCounterState:
        return self._snapshot.blink_counter

    @property
    def verdict(self) -> bool:
        return self._snapshot.verdict

    def update(self, frame_signals: FrameSignals, timestamp_ms: Optional[int] = None) -> LivenessSnapshot:
        """
        Fold one frame's signals into the session.

        Args:
            frame_signals: Signals computed for the frame
            timestamp_ms: Frame time in milliseconds (defaults to now)

        Returns:
            LivenessSnapshot: The newly published state
        """
        if timestamp_ms is None:
            timestamp_ms = current_time_ms()

        self.blink_tracker.update(frame_signals, timestamp_ms)
        self.frames_processed += 1
        return self._publish(frame_signals, timestamp_ms)

    def process_landmarks(self, landmarks, timestamp_ms: Optional[int] = None) -> LivenessSnapshot:
        """Compute signals for one frame's landmark set and fold them in"""
        return self.update(self.metrics.compute_frame_signals(landmarks), timestamp_ms)

    def process_frame(self, frame: np.ndarray, timestamp_ms: Optional[int] = None) -> LivenessSnapshot:
        """
        Run landmark detection on a BGR video frame and fold the result in.

        Raises:
            RuntimeError: If the session was created without a detector
        """
        if self.detector is None:
            raise RuntimeError("process_frame() requires a LandmarkDetector")
        return self.process_landmarks(self.detector.detect_landmarks(frame), timestamp_ms)

    def reset(self):
        """
        Clear the blink history and counter.

        The most recent frame signals are kept; the verdict is re-evaluated
        against the cleared blink state.
        """
        self.blink_tracker.reset()
        self._publish(self._snapshot.frame_signals, self._snapshot.timestamp_ms)
        logger.info("Liveness session reset")

    def _publish(self, frame_signals: FrameSignals, timestamp_ms: int) -> LivenessSnapshot:
        history = self.blink_tracker.history
        counter = self.blink_tracker.counter
        failed = self.fusion.failed_checks(frame_signals, history, counter)
        verdict = not failed

        if verdict != self._snapshot.verdict:
            if verdict:
                logger.info(f"Real user detected (blinks={counter.count})")
            else:
                logger.info(f"Spoof presumed, failed checks: {', '.join(failed)}")

        self._snapshot = LivenessSnapshot(
            frame_signals=frame_signals,
            blink_history=history,
            blink_counter=counter,
            verdict=verdict,
            failed_checks=tuple(failed),
            timestamp_ms=timestamp_ms,
        )
        return self._snapshot
