from .data_models import (
    BlinkCounterState,
    FaceDistance,
    FrameSignals,
    GazeDirection,
    Landmark,
    LivenessSnapshot,
)
from .landmark_topology import LandmarkTopology, MEDIAPIPE_FACE_MESH

__all__ = [
    "BlinkCounterState",
    "FaceDistance",
    "FrameSignals",
    "GazeDirection",
    "Landmark",
    "LivenessSnapshot",
    "LandmarkTopology",
    "MEDIAPIPE_FACE_MESH",
]
