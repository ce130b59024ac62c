"""
Data models for the liveness decision engine
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple


class GazeDirection(str, Enum):
    """Horizontal gaze bucket, in image coordinates"""
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"
    UNKNOWN = "unknown"


class FaceDistance(str, Enum):
    """Distance bucket of the face from the camera"""
    CLOSE = "close"
    OPTIMAL = "optimal"
    FAR = "far"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Landmark:
    """A single normalized facial keypoint"""
    x: float
    y: float
    z: float = 0.0


@dataclass(frozen=True)
class FrameSignals:
    """
    Biometric cues derived from one frame's landmark set.

    When landmark_count is 0 every other field holds its no-signal default.
    """
    is_blinking: bool = False
    head_pose_valid: bool = False
    eye_gaze_direction: GazeDirection = GazeDirection.UNKNOWN
    face_distance: FaceDistance = FaceDistance.UNKNOWN
    is_smiling: bool = False
    expression_confidence: float = 0.0
    landmark_count: int = 0

    @classmethod
    def no_face(cls) -> "FrameSignals":
        return cls()

    @property
    def face_present(self) -> bool:
        return self.landmark_count > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_blinking": self.is_blinking,
            "head_pose_valid": self.head_pose_valid,
            "eye_gaze_direction": self.eye_gaze_direction.value,
            "face_distance": self.face_distance.value,
            "is_smiling": self.is_smiling,
            "expression_confidence": self.expression_confidence,
            "landmark_count": self.landmark_count,
        }


@dataclass(frozen=True)
class BlinkCounterState:
    """Debounced blink count and the time of the last counted blink"""
    count: int = 0
    last_blink_timestamp_ms: int = 0


@dataclass(frozen=True)
class LivenessSnapshot:
    """Published session state after one processed frame"""
    frame_signals: FrameSignals = field(default_factory=FrameSignals)
    blink_history: Tuple[bool, ...] = ()
    blink_counter: BlinkCounterState = field(default_factory=BlinkCounterState)
    verdict: bool = False
    failed_checks: Tuple[str, ...] = ()
    timestamp_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the snapshot for telemetry consumers"""
        return {
            "frame_signals": self.frame_signals.to_dict(),
            "blink_history": list(self.blink_history),
            "blink_count": self.blink_counter.count,
            "last_blink_timestamp_ms": self.blink_counter.last_blink_timestamp_ms,
            "verdict": self.verdict,
            "failed_checks": list(self.failed_checks),
            "timestamp_ms": self.timestamp_ms,
        }
