"""
Liveness fusion: the real-user / spoof decision rule
"""
from typing import Dict, List, Optional, Sequence
from ..config import Config, config as default_config
from ..models.data_models import BlinkCounterState, FaceDistance, FrameSignals, GazeDirection

# Condition names, in evaluation order
FACE_PRESENT = "face_present"
HEAD_POSE = "head_pose"
BLINK = "blink"
DISTANCE = "distance"
EXPRESSION = "expression"
GAZE = "gaze"

ACCEPTED_DISTANCES = (FaceDistance.OPTIMAL, FaceDistance.CLOSE)


class LivenessFusion:
    """
    Combines the current frame's signals with the blink state into one
    verdict.

    The rule is a conjunction: every condition must hold for a real-user
    verdict, so any missing or ambiguous cue rejects the frame. There is no
    scoring and no hysteresis; the verdict is recomputed for every frame.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or default_config

    def check_conditions(
        self,
        frame_signals: FrameSignals,
        blink_history: Sequence[bool],
        blink_counter: BlinkCounterState
    ) -> Dict[str, bool]:
        """
        Evaluate each fusion condition separately.

        Returns:
            Dict mapping condition name to whether it holds
        """
        window = self.config.RECENT_BLINK_WINDOW
        recent = list(blink_history)[-window:] if window > 0 else []
        has_recent_blink = any(recent)
        has_enough_blinks = blink_counter.count >= self.config.MIN_BLINK_COUNT

        return {
            FACE_PRESENT: frame_signals.landmark_count > 0,
            HEAD_POSE: frame_signals.head_pose_valid,
            BLINK: has_recent_blink or has_enough_blinks,
            DISTANCE: frame_signals.face_distance in ACCEPTED_DISTANCES,
            EXPRESSION: frame_signals.expression_confidence > self.config.EXPRESSION_CONFIDENCE_THRESHOLD,
            GAZE: frame_signals.eye_gaze_direction == GazeDirection.CENTER,
        }

    def failed_checks(
        self,
        frame_signals: FrameSignals,
        blink_history: Sequence[bool],
        blink_counter: BlinkCounterState
    ) -> List[str]:
        """Names of the conditions that do not hold"""
        conditions = self.check_conditions(frame_signals, blink_history, blink_counter)
        return [name for name, passed in conditions.items() if not passed]

    def evaluate(
        self,
        frame_signals: FrameSignals,
        blink_history: Sequence[bool],
        blink_counter: BlinkCounterState
    ) -> bool:
        """
        Decide whether the frame shows a live user.

        Returns:
            bool: True only when every condition holds
        """
        return all(self.check_conditions(frame_signals, blink_history, blink_counter).values())
