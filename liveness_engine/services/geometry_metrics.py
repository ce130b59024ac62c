"""
Geometry metrics: per-frame conversion of facial landmarks into liveness cues
"""
import logging
from collections.abc import Mapping
import numpy as np
from typing import Optional, Sequence, Tuple
from ..config import Config, config as default_config
from ..models.data_models import FaceDistance, FrameSignals, GazeDirection
from ..models.landmark_topology import LandmarkTopology, MEDIAPIPE_FACE_MESH

logger = logging.getLogger(__name__)

# Distances below this are treated as zero
EPSILON = 1e-9


class GeometryMetrics:
    """
    Derives blink, head pose, gaze, distance and expression signals from a
    single landmark set.

    Holds configuration only, so one instance can serve any number of frames
    and sessions. Every method is deterministic for a given landmark set.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        topology: LandmarkTopology = MEDIAPIPE_FACE_MESH
    ):
        """
        Args:
            config: Threshold configuration (defaults to the module config)
            topology: Landmark index layout of the detector feeding this instance
        """
        self.config = config or default_config
        self.topology = topology
        self._pixel_scale = np.array(
            [self.config.FRAME_WIDTH, self.config.FRAME_HEIGHT], dtype=np.float64
        )

    def to_landmark_array(self, landmarks) -> np.ndarray:
        """
        Convert detector output into an (N, 3) array of x, y, z.

        Accepts objects with x/y(/z) attributes (MediaPipe NormalizedLandmark,
        Landmark), mappings with x/y(/z) keys, (x, y[, z]) sequences, or an
        (N, 2)/(N, 3) array.

        Raises:
            ValueError: If the input cannot be read as a landmark set
        """
        if isinstance(landmarks, np.ndarray):
            points = np.asarray(landmarks, dtype=np.float64)
            if points.ndim != 2 or points.shape[1] not in (2, 3):
                raise ValueError(f"Expected an (N, 2) or (N, 3) landmark array, got shape {points.shape}")
            if points.shape[1] == 2:
                points = np.hstack([points, np.zeros((points.shape[0], 1))])
            return points

        rows = []
        for lm in landmarks:
            if isinstance(lm, Mapping):
                z = lm.get('z', 0.0)
                rows.append([lm['x'], lm['y'], 0.0 if z is None else z])
            elif hasattr(lm, 'x') and hasattr(lm, 'y'):
                z = getattr(lm, 'z', 0.0)
                rows.append([lm.x, lm.y, 0.0 if z is None else z])
            else:
                coords = list(lm)
                if len(coords) not in (2, 3):
                    raise ValueError(f"Landmark must have 2 or 3 coordinates, got {len(coords)}")
                rows.append(coords if len(coords) == 3 else coords + [0.0])
        return np.array(rows, dtype=np.float64).reshape(-1, 3)

    def eye_aspect_ratio(self, eye_points: np.ndarray) -> Optional[float]:
        """
        Compute the Eye Aspect Ratio of one eye.

        EAR = (|p2 - p6| + |p3 - p5|) / (2 * |p1 - p4|)

        Args:
            eye_points: Six ordered 2D points p1..p6 in pixel space

        Returns:
            The EAR, or None when the horizontal corner distance is zero
        """
        p1, p2, p3, p4, p5, p6 = eye_points
        horizontal = np.linalg.norm(p1 - p4)
        if horizontal < EPSILON:
            return None
        vertical_a = np.linalg.norm(p2 - p6)
        vertical_b = np.linalg.norm(p3 - p5)
        return float((vertical_a + vertical_b) / (2.0 * horizontal))

    def _pixel_points(self, points: np.ndarray, indices: Sequence[int]) -> np.ndarray:
        return points[list(indices), :2] * self._pixel_scale

    def eye_aspect_ratios(self, points: np.ndarray) -> Tuple[Optional[float], Optional[float]]:
        """Left and right EAR for a landmark array"""
        left = self.eye_aspect_ratio(self._pixel_points(points, self.topology.left_eye_ear))
        right = self.eye_aspect_ratio(self._pixel_points(points, self.topology.right_eye_ear))
        return left, right

    def is_blinking(self, points: np.ndarray) -> bool:
        """
        Average both eyes' EAR and compare against EAR_THRESHOLD.

        A degenerate eye makes the blink signal undefined, which reads as
        "not blinking" so detector artifacts cannot produce blinks.
        """
        left_ear, right_ear = self.eye_aspect_ratios(points)
        if left_ear is None or right_ear is None:
            return False
        avg_ear = (left_ear + right_ear) / 2.0
        return avg_ear < self.config.EAR_THRESHOLD

    def head_pose_ratio(self, points: np.ndarray) -> Optional[float]:
        """
        Horizontal offset of the nose tip from the eye midpoint, relative to
        the eye-to-eye distance. None when the eyes coincide horizontally.
        """
        t = self.topology
        nose_x = points[t.nose_tip, 0]
        left_x = points[t.left_eye_outer, 0]
        right_x = points[t.right_eye_outer, 0]

        eye_distance = abs(left_x - right_x)
        if eye_distance < EPSILON:
            return None
        return float(abs(nose_x - (left_x + right_x) / 2.0) / eye_distance)

    def head_pose_valid(self, points: np.ndarray) -> bool:
        ratio = self.head_pose_ratio(points)
        return ratio is not None and ratio < self.config.HEAD_POSE_RATIO_THRESHOLD

    def _iris_position(self, points: np.ndarray, iris: int, corner_a: int, corner_b: int) -> Optional[float]:
        # 0.0 at the image-left corner of the eye, 1.0 at the image-right one
        xs = (points[corner_a, 0], points[corner_b, 0])
        low, high = min(xs), max(xs)
        width = high - low
        if width < EPSILON:
            return None
        return float((points[iris, 0] - low) / width)

    def gaze_direction(self, points: np.ndarray) -> GazeDirection:
        """
        Bucket the horizontal iris position, averaged over both eyes.

        Directions are in image coordinates: LEFT means the irises sit toward
        the image-left eye corners.
        """
        t = self.topology
        left = self._iris_position(points, t.left_iris_center, t.left_eye_outer, t.left_eye_inner)
        right = self._iris_position(points, t.right_iris_center, t.right_eye_inner, t.right_eye_outer)
        if left is None or right is None:
            return GazeDirection.UNKNOWN

        position = (left + right) / 2.0
        if position < self.config.GAZE_LEFT_MAX:
            return GazeDirection.LEFT
        if position > self.config.GAZE_RIGHT_MIN:
            return GazeDirection.RIGHT
        return GazeDirection.CENTER

    def face_distance(self, points: np.ndarray) -> FaceDistance:
        """Bucket the cheek-to-cheek span in normalized frame coordinates"""
        t = self.topology
        span = float(np.linalg.norm(points[t.left_cheek, :2] - points[t.right_cheek, :2]))
        if span < EPSILON:
            return FaceDistance.UNKNOWN
        if span >= self.config.DISTANCE_CLOSE_SPAN:
            return FaceDistance.CLOSE
        if span < self.config.DISTANCE_FAR_SPAN:
            return FaceDistance.FAR
        return FaceDistance.OPTIMAL

    def smile_score(self, points: np.ndarray) -> Optional[float]:
        """
        Score mouth deformation toward a smile, between 0.0 and 1.0.

        Combines mouth width relative to the eye-corner width (70%) with
        how far the mouth corners sit above the lip midline (30%).
        """
        t = self.topology
        left_eye, right_eye = self._pixel_points(points, (t.left_eye_outer, t.right_eye_outer))
        eye_width = np.linalg.norm(left_eye - right_eye)
        if eye_width < EPSILON:
            return None

        mouth_left, mouth_right, upper_lip, lower_lip = self._pixel_points(
            points, (t.mouth_left, t.mouth_right, t.upper_lip, t.lower_lip)
        )
        width_ratio = np.linalg.norm(mouth_left - mouth_right) / eye_width
        width_score = np.clip(
            (width_ratio - self.config.SMILE_WIDTH_NEUTRAL)
            / (self.config.SMILE_WIDTH_FULL - self.config.SMILE_WIDTH_NEUTRAL),
            0.0, 1.0
        )

        # Image y grows downward, so raised corners give a positive lift
        lip_mid_y = (upper_lip[1] + lower_lip[1]) / 2.0
        corner_y = (mouth_left[1] + mouth_right[1]) / 2.0
        lift = (lip_mid_y - corner_y) / eye_width
        lift_score = np.clip(lift / self.config.SMILE_LIFT_FULL, 0.0, 1.0)

        return float(0.7 * width_score + 0.3 * lift_score)

    def expression(self, points: np.ndarray) -> Tuple[bool, float]:
        """
        Classify the mouth as smiling or neutral.

        Returns:
            (is_smiling, confidence) where confidence measures how far the
            smile score sits from the decision threshold, scaled to [0, 1]
        """
        score = self.smile_score(points)
        if score is None:
            return False, 0.0

        threshold = self.config.SMILE_SCORE_THRESHOLD
        is_smiling = score >= threshold
        if is_smiling:
            span = 1.0 - threshold
            confidence = (score - threshold) / span if span > 0 else 1.0
        else:
            confidence = (threshold - score) / threshold if threshold > 0 else 1.0
        return is_smiling, float(np.clip(confidence, 0.0, 1.0))

    def compute_frame_signals(self, landmarks) -> FrameSignals:
        """
        Convert one frame's landmark set into FrameSignals.

        Never raises: an empty set is a normal no-face frame, and any failure
        to read the landmarks (too few points for the topology, malformed
        points, non-finite coordinates) is treated as no face.

        Args:
            landmarks: Detector output for one face, empty if none detected

        Returns:
            FrameSignals for the frame
        """
        try:
            if landmarks is None or len(landmarks) == 0:
                return FrameSignals.no_face()

            points = self.to_landmark_array(landmarks)
            if points.shape[0] < self.topology.required_count:
                raise IndexError(
                    f"{self.topology.name} needs {self.topology.required_count} landmarks, "
                    f"got {points.shape[0]}"
                )
            if not np.all(np.isfinite(points)):
                raise ValueError("Landmark set contains non-finite coordinates")

            is_smiling, expression_confidence = self.expression(points)
            signals = FrameSignals(
                is_blinking=self.is_blinking(points),
                head_pose_valid=self.head_pose_valid(points),
                eye_gaze_direction=self.gaze_direction(points),
                face_distance=self.face_distance(points),
                is_smiling=is_smiling,
                expression_confidence=expression_confidence,
                landmark_count=int(points.shape[0]),
            )
        except (AttributeError, IndexError, TypeError, ValueError) as e:
            logger.warning(f"Unreadable landmark set, treating frame as no face: {e}")
            return FrameSignals.no_face()

        logger.debug(f"Frame signals: {signals}")
        return signals
