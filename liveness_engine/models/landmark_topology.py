"""
Named landmark indices for a face landmark model.

Geometry code looks points up by anatomical name through a LandmarkTopology,
so supporting a different detector means supplying a different table.
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class LandmarkTopology:
    """
    Index layout of one landmark model.

    Eye tuples are ordered p1..p6 for the eye aspect ratio: p1/p4 are the
    horizontal corners, (p2, p6) and (p3, p5) the vertical lid pairs.
    "left" and "right" refer to image coordinates.
    """
    name: str
    nose_tip: int
    left_eye_outer: int
    left_eye_inner: int
    right_eye_inner: int
    right_eye_outer: int
    left_eye_ear: Tuple[int, int, int, int, int, int]
    right_eye_ear: Tuple[int, int, int, int, int, int]
    left_iris_center: int
    right_iris_center: int
    left_cheek: int
    right_cheek: int
    mouth_left: int
    mouth_right: int
    upper_lip: int
    lower_lip: int

    @property
    def required_count(self) -> int:
        """Minimum landmark set size that covers every index in the table"""
        indices = [
            self.nose_tip,
            self.left_eye_outer,
            self.left_eye_inner,
            self.right_eye_inner,
            self.right_eye_outer,
            self.left_iris_center,
            self.right_iris_center,
            self.left_cheek,
            self.right_cheek,
            self.mouth_left,
            self.mouth_right,
            self.upper_lip,
            self.lower_lip,
        ]
        indices.extend(self.left_eye_ear)
        indices.extend(self.right_eye_ear)
        return max(indices) + 1


# MediaPipe Face Mesh with iris refinement (478 points)
MEDIAPIPE_FACE_MESH = LandmarkTopology(
    name="mediapipe_face_mesh",
    nose_tip=1,
    left_eye_outer=33,
    left_eye_inner=133,
    right_eye_inner=362,
    right_eye_outer=263,
    left_eye_ear=(33, 160, 158, 133, 153, 144),
    right_eye_ear=(362, 385, 387, 263, 373, 380),
    left_iris_center=468,
    right_iris_center=473,
    left_cheek=234,
    right_cheek=454,
    mouth_left=61,
    mouth_right=291,
    upper_lip=13,
    lower_lip=14,
)
