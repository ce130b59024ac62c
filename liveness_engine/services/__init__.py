from .blink_tracker import BlinkTracker
from .geometry_metrics import GeometryMetrics
from .liveness_fusion import LivenessFusion
from .liveness_session import LivenessSession

# LandmarkDetector pulls in OpenCV and MediaPipe; import it from
# liveness_engine.services.landmark_detector when frames are needed.

__all__ = [
    "BlinkTracker",
    "GeometryMetrics",
    "LivenessFusion",
    "LivenessSession",
]
