"""
Configuration management for the liveness engine
"""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Liveness engine configuration"""

    # Blink detection
    EAR_THRESHOLD = float(os.getenv('EAR_THRESHOLD', '0.25'))
    BLINK_DEBOUNCE_MS = int(os.getenv('BLINK_DEBOUNCE_MS', '300'))
    BLINK_HISTORY_SIZE = int(os.getenv('BLINK_HISTORY_SIZE', '10'))

    # Head pose: nose offset from the eye midpoint, relative to eye distance
    HEAD_POSE_RATIO_THRESHOLD = float(os.getenv('HEAD_POSE_RATIO_THRESHOLD', '0.3'))

    # Gaze: horizontal iris position inside the eye (0.0 = image-left corner)
    GAZE_LEFT_MAX = float(os.getenv('GAZE_LEFT_MAX', '0.35'))
    GAZE_RIGHT_MIN = float(os.getenv('GAZE_RIGHT_MIN', '0.65'))

    # Face distance: cheek-to-cheek span in normalized frame coordinates
    DISTANCE_CLOSE_SPAN = float(os.getenv('DISTANCE_CLOSE_SPAN', '0.55'))
    DISTANCE_FAR_SPAN = float(os.getenv('DISTANCE_FAR_SPAN', '0.20'))

    # Expression: mouth width relative to eye-corner width
    SMILE_WIDTH_NEUTRAL = float(os.getenv('SMILE_WIDTH_NEUTRAL', '0.55'))
    SMILE_WIDTH_FULL = float(os.getenv('SMILE_WIDTH_FULL', '0.75'))
    SMILE_LIFT_FULL = float(os.getenv('SMILE_LIFT_FULL', '0.05'))
    SMILE_SCORE_THRESHOLD = float(os.getenv('SMILE_SCORE_THRESHOLD', '0.5'))

    # Fusion rule
    RECENT_BLINK_WINDOW = int(os.getenv('RECENT_BLINK_WINDOW', '5'))
    MIN_BLINK_COUNT = int(os.getenv('MIN_BLINK_COUNT', '2'))
    EXPRESSION_CONFIDENCE_THRESHOLD = float(os.getenv('EXPRESSION_CONFIDENCE_THRESHOLD', '0.7'))

    # Capture geometry used to scale normalized landmarks to pixels
    FRAME_WIDTH = int(os.getenv('FRAME_WIDTH', '640'))
    FRAME_HEIGHT = int(os.getenv('FRAME_HEIGHT', '480'))

    # MediaPipe Face Landmarker
    MEDIAPIPE_MODEL_PATH = os.getenv(
        'MEDIAPIPE_MODEL_PATH',
        str(Path.home() / '.mediapipe_models' / 'face_landmarker.task')
    )
    MIN_DETECTION_CONFIDENCE = float(os.getenv('MIN_DETECTION_CONFIDENCE', '0.5'))

    def validate(self):
        """
        Check that the thresholds describe a usable policy.

        Raises:
            ValueError: If any setting is out of range or inconsistent
        """
        if self.EAR_THRESHOLD <= 0:
            raise ValueError(f"EAR_THRESHOLD must be positive, got {self.EAR_THRESHOLD}")
        if self.HEAD_POSE_RATIO_THRESHOLD <= 0:
            raise ValueError(
                f"HEAD_POSE_RATIO_THRESHOLD must be positive, got {self.HEAD_POSE_RATIO_THRESHOLD}"
            )
        if not 0.0 < self.SMILE_SCORE_THRESHOLD < 1.0:
            raise ValueError(f"SMILE_SCORE_THRESHOLD must be in (0, 1), got {self.SMILE_SCORE_THRESHOLD}")
        if self.BLINK_HISTORY_SIZE <= 0:
            raise ValueError(f"BLINK_HISTORY_SIZE must be positive, got {self.BLINK_HISTORY_SIZE}")
        if not 0 < self.RECENT_BLINK_WINDOW <= self.BLINK_HISTORY_SIZE:
            raise ValueError(
                f"RECENT_BLINK_WINDOW must be in (0, {self.BLINK_HISTORY_SIZE}], "
                f"got {self.RECENT_BLINK_WINDOW}"
            )
        if self.BLINK_DEBOUNCE_MS < 0:
            raise ValueError(f"BLINK_DEBOUNCE_MS must not be negative, got {self.BLINK_DEBOUNCE_MS}")
        if self.MIN_BLINK_COUNT < 0:
            raise ValueError(f"MIN_BLINK_COUNT must not be negative, got {self.MIN_BLINK_COUNT}")
        if not 0.0 <= self.EXPRESSION_CONFIDENCE_THRESHOLD <= 1.0:
            raise ValueError(
                f"EXPRESSION_CONFIDENCE_THRESHOLD must be in [0, 1], "
                f"got {self.EXPRESSION_CONFIDENCE_THRESHOLD}"
            )
        if not 0.0 <= self.GAZE_LEFT_MAX <= self.GAZE_RIGHT_MIN <= 1.0:
            raise ValueError("Gaze bounds must satisfy 0 <= GAZE_LEFT_MAX <= GAZE_RIGHT_MIN <= 1")
        if not 0.0 < self.DISTANCE_FAR_SPAN < self.DISTANCE_CLOSE_SPAN:
            raise ValueError("Distance bounds must satisfy 0 < DISTANCE_FAR_SPAN < DISTANCE_CLOSE_SPAN")
        if self.SMILE_WIDTH_FULL <= self.SMILE_WIDTH_NEUTRAL or self.SMILE_LIFT_FULL <= 0:
            raise ValueError("Smile calibration must satisfy SMILE_WIDTH_FULL > SMILE_WIDTH_NEUTRAL and SMILE_LIFT_FULL > 0")
        if self.FRAME_WIDTH <= 0 or self.FRAME_HEIGHT <= 0:
            raise ValueError(f"Frame size must be positive, got {self.FRAME_WIDTH}x{self.FRAME_HEIGHT}")


config = Config()
