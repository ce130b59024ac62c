"""
Unit tests for GeometryMetrics
"""
import pytest
import numpy as np
from hypothesis import given, strategies as st, settings
from liveness_engine.config import Config
from liveness_engine.models.data_models import FaceDistance, FrameSignals, GazeDirection, Landmark
from liveness_engine.models.landmark_topology import MEDIAPIPE_FACE_MESH
from liveness_engine.services.geometry_metrics import GeometryMetrics
from landmark_factory import build_face_landmarks


def eye_points(vertical: float, horizontal: float = 40.0) -> np.ndarray:
    """Six pixel-space eye points p1..p6 with symmetric lid pairs"""
    return np.array([
        [0.0, 0.0],
        [horizontal / 3, -vertical / 2],
        [2 * horizontal / 3, -vertical / 2],
        [horizontal, 0.0],
        [2 * horizontal / 3, vertical / 2],
        [horizontal / 3, vertical / 2],
    ])


class TestEyeAspectRatio:
    """Test the EAR formula"""

    def setup_method(self):
        self.metrics = GeometryMetrics()

    def test_ear_formula(self):
        """EAR = (|p2-p6| + |p3-p5|) / (2 * |p1-p4|)"""
        ear = self.metrics.eye_aspect_ratio(eye_points(vertical=12.0, horizontal=40.0))
        assert ear == pytest.approx(12.0 / 40.0)

    def test_degenerate_eye_returns_none(self):
        """Zero corner distance leaves the EAR undefined"""
        points = np.zeros((6, 2))
        assert self.metrics.eye_aspect_ratio(points) is None

    @given(
        larger=st.floats(min_value=0.5, max_value=50.0),
        shrink=st.floats(min_value=0.01, max_value=0.99)
    )
    @settings(max_examples=100)
    def test_property_ear_decreases_with_vertical_separation(self, larger, shrink):
        """
        Property: with horizontal separation fixed, a smaller vertical
        separation gives a strictly smaller EAR
        """
        smaller = larger * shrink
        wide = self.metrics.eye_aspect_ratio(eye_points(vertical=larger))
        narrow = self.metrics.eye_aspect_ratio(eye_points(vertical=smaller))
        assert narrow < wide

    def test_landmark_ear_matches_construction(self):
        """Synthetic faces produce the EAR they were built with"""
        points = self.metrics.to_landmark_array(build_face_landmarks(ear=0.3))
        left, right = self.metrics.eye_aspect_ratios(points)
        assert left == pytest.approx(0.3)
        assert right == pytest.approx(0.3)


class TestBlinkSignal:
    """Test blink classification"""

    def setup_method(self):
        self.metrics = GeometryMetrics()

    def test_open_eyes_not_blinking(self):
        signals = self.metrics.compute_frame_signals(build_face_landmarks(ear=0.30))
        assert signals.is_blinking is False

    def test_closed_eyes_blinking(self):
        signals = self.metrics.compute_frame_signals(build_face_landmarks(ear=0.10))
        assert signals.is_blinking is True

    def test_threshold_is_strict(self):
        """An EAR just above the threshold is not a blink"""
        signals = self.metrics.compute_frame_signals(build_face_landmarks(ear=0.26))
        assert signals.is_blinking is False

    def test_degenerate_eye_is_not_blinking(self):
        """Collapsed eye corners must not be read as a blink"""
        points = self.metrics.to_landmark_array(build_face_landmarks(ear=0.05))
        points[133, :2] = points[33, :2]
        assert self.metrics.is_blinking(points) is False

    def test_custom_threshold(self):
        cfg = Config()
        cfg.EAR_THRESHOLD = 0.35
        metrics = GeometryMetrics(cfg)
        signals = metrics.compute_frame_signals(build_face_landmarks(ear=0.30))
        assert signals.is_blinking is True


class TestHeadPose:
    """Test head pose frontality"""

    def setup_method(self):
        self.metrics = GeometryMetrics()

    def test_centered_nose_is_frontal(self):
        points = self.metrics.to_landmark_array(build_face_landmarks())
        assert self.metrics.head_pose_ratio(points) == pytest.approx(0.0)
        assert self.metrics.head_pose_valid(points) is True

    def test_ratio_below_threshold_is_frontal(self):
        points = self.metrics.to_landmark_array(build_face_landmarks(nose_offset=0.04))
        assert self.metrics.head_pose_ratio(points) == pytest.approx(0.2)
        assert self.metrics.head_pose_valid(points) is True

    def test_turned_head_is_not_frontal(self):
        points = self.metrics.to_landmark_array(build_face_landmarks(nose_offset=0.07))
        assert self.metrics.head_pose_ratio(points) == pytest.approx(0.35)
        assert self.metrics.head_pose_valid(points) is False

    def test_zero_eye_distance_is_invalid(self):
        points = self.metrics.to_landmark_array(build_face_landmarks())
        points[263, 0] = points[33, 0]
        assert self.metrics.head_pose_ratio(points) is None
        assert self.metrics.head_pose_valid(points) is False


class TestGazeDirection:
    """Test iris-based gaze buckets"""

    def setup_method(self):
        self.metrics = GeometryMetrics()

    @pytest.mark.parametrize("gaze,expected", [
        (0.5, GazeDirection.CENTER),
        (0.1, GazeDirection.LEFT),
        (0.9, GazeDirection.RIGHT),
    ])
    def test_gaze_buckets(self, gaze, expected):
        points = self.metrics.to_landmark_array(build_face_landmarks(gaze=gaze))
        assert self.metrics.gaze_direction(points) == expected

    def test_collapsed_eye_is_unknown(self):
        points = self.metrics.to_landmark_array(build_face_landmarks())
        points[133, 0] = points[33, 0]
        assert self.metrics.gaze_direction(points) == GazeDirection.UNKNOWN


class TestFaceDistance:
    """Test face distance buckets"""

    def setup_method(self):
        self.metrics = GeometryMetrics()

    @pytest.mark.parametrize("span,expected", [
        (0.35, FaceDistance.OPTIMAL),
        (0.60, FaceDistance.CLOSE),
        (0.10, FaceDistance.FAR),
    ])
    def test_distance_buckets(self, span, expected):
        points = self.metrics.to_landmark_array(build_face_landmarks(span=span))
        assert self.metrics.face_distance(points) == expected

    def test_zero_span_is_unknown(self):
        points = self.metrics.to_landmark_array(build_face_landmarks(span=0.0))
        assert self.metrics.face_distance(points) == FaceDistance.UNKNOWN


class TestExpression:
    """Test smile detection and expression confidence"""

    def setup_method(self):
        self.metrics = GeometryMetrics()

    def test_neutral_mouth_is_confident_non_smile(self):
        points = self.metrics.to_landmark_array(build_face_landmarks())
        is_smiling, confidence = self.metrics.expression(points)
        assert is_smiling is False
        assert confidence == pytest.approx(1.0)

    def test_wide_raised_mouth_is_smile(self):
        points = self.metrics.to_landmark_array(
            build_face_landmarks(mouth_width=0.16, corner_raise=0.02)
        )
        is_smiling, confidence = self.metrics.expression(points)
        assert is_smiling is True
        assert confidence == pytest.approx(1.0)

    def test_ambiguous_mouth_has_low_confidence(self):
        points = self.metrics.to_landmark_array(build_face_landmarks(mouth_width=0.13))
        assert self.metrics.smile_score(points) == pytest.approx(0.35)
        is_smiling, confidence = self.metrics.expression(points)
        assert is_smiling is False
        assert confidence == pytest.approx(0.3)

    def test_confidence_in_unit_range(self):
        for width in (0.08, 0.11, 0.13, 0.15, 0.2):
            points = self.metrics.to_landmark_array(build_face_landmarks(mouth_width=width))
            _, confidence = self.metrics.expression(points)
            assert 0.0 <= confidence <= 1.0


class TestComputeFrameSignals:
    """Test the frame-level entry point"""

    def setup_method(self):
        self.metrics = GeometryMetrics()

    def test_full_face_signals(self):
        signals = self.metrics.compute_frame_signals(build_face_landmarks())
        assert signals.is_blinking is False
        assert signals.head_pose_valid is True
        assert signals.eye_gaze_direction == GazeDirection.CENTER
        assert signals.face_distance == FaceDistance.OPTIMAL
        assert signals.is_smiling is False
        assert signals.expression_confidence == pytest.approx(1.0)
        assert signals.landmark_count == 478

    def test_empty_landmarks_is_no_face(self):
        assert self.metrics.compute_frame_signals([]) == FrameSignals.no_face()

    def test_none_is_no_face(self):
        assert self.metrics.compute_frame_signals(None) == FrameSignals.no_face()

    def test_too_few_landmarks_is_no_face(self):
        """A 468-point mesh lacks the iris points and must not raise"""
        signals = self.metrics.compute_frame_signals(build_face_landmarks(count=468))
        assert signals == FrameSignals.no_face()
        assert signals.landmark_count == 0

    def test_malformed_landmark_is_no_face(self):
        landmarks = build_face_landmarks()
        landmarks[5] = "not a landmark"
        assert self.metrics.compute_frame_signals(landmarks) == FrameSignals.no_face()

    def test_non_finite_coordinates_is_no_face(self):
        landmarks = build_face_landmarks()
        landmarks[1] = Landmark(x=float('nan'), y=0.5)
        assert self.metrics.compute_frame_signals(landmarks) == FrameSignals.no_face()

    def test_accepts_tuples_and_arrays(self):
        """Tuples and numpy arrays give the same signals as Landmark objects"""
        landmarks = build_face_landmarks(ear=0.1)
        expected = self.metrics.compute_frame_signals(landmarks)

        as_tuples = [(lm.x, lm.y) for lm in landmarks]
        as_array = np.array([[lm.x, lm.y, lm.z] for lm in landmarks])

        assert self.metrics.compute_frame_signals(as_tuples) == expected
        assert self.metrics.compute_frame_signals(as_array) == expected

    def test_accepts_dict_landmarks(self):
        """Decoded JSON landmarks give the same signals as Landmark objects"""
        landmarks = build_face_landmarks(ear=0.1)
        expected = self.metrics.compute_frame_signals(landmarks)

        as_dicts = [{"x": lm.x, "y": lm.y, "z": lm.z} for lm in landmarks]
        without_z = [{"x": lm.x, "y": lm.y} for lm in landmarks]

        signals = self.metrics.compute_frame_signals(as_dicts)
        assert signals.landmark_count == 478
        assert signals == expected
        assert self.metrics.compute_frame_signals(without_z) == expected

    def test_bad_array_shape_is_no_face(self):
        assert self.metrics.compute_frame_signals(np.zeros((478, 4))) == FrameSignals.no_face()

    def test_deterministic(self):
        landmarks = build_face_landmarks(ear=0.2, gaze=0.3, mouth_width=0.12)
        results = {self.metrics.compute_frame_signals(landmarks) for _ in range(5)}
        assert len(results) == 1

    def test_required_count_matches_topology(self):
        assert MEDIAPIPE_FACE_MESH.required_count == 478
