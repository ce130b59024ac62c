"""
MediaPipe landmark detector adapter feeding the liveness engine
"""
import logging
import os
import cv2
import mediapipe as mp
import numpy as np
from typing import List, Optional, Tuple
from ..config import Config, config as default_config
from ..models.data_models import Landmark

logger = logging.getLogger(__name__)


class LandmarkDetector:
    """
    Produces one face's landmark set per video frame using the MediaPipe
    Face Landmarker (478 points with iris refinement).

    Any failure (missing model, detector error, no face) yields an empty
    landmark list, which the engine reads as "no face".
    """

    def __init__(self, model_path: Optional[str] = None, config: Optional[Config] = None):
        """
        The FaceLandmarker is created lazily on first use so the adapter can
        be constructed, and frames preprocessed, without the model file.

        Args:
            model_path: Path to the face_landmarker.task model file.
                        Defaults to MEDIAPIPE_MODEL_PATH.
            config: Engine configuration (defaults to the module config)
        """
        self.config = config or default_config
        self.model_path = os.path.expanduser(model_path or self.config.MEDIAPIPE_MODEL_PATH)
        self._face_landmarker = None
        self._load_failed = False

    @property
    def face_landmarker(self):
        """
        Lazy initialization of the MediaPipe FaceLandmarker.

        Returns None if the model cannot be loaded. A failed load is not
        retried, so the failure is logged once per detector.
        """
        if self._face_landmarker is None:
            if self._load_failed:
                return None
            if not self.model_path or not os.path.exists(self.model_path):
                self._load_failed = True
                logger.warning(
                    f"MediaPipe model not found at {self.model_path}. "
                    "Set MEDIAPIPE_MODEL_PATH to a face_landmarker.task file."
                )
                return None

            try:
                base_options = mp.tasks.BaseOptions(model_asset_path=self.model_path)
                options = mp.tasks.vision.FaceLandmarkerOptions(
                    base_options=base_options,
                    running_mode=mp.tasks.vision.RunningMode.IMAGE,
                    num_faces=1,
                    min_face_detection_confidence=self.config.MIN_DETECTION_CONFIDENCE,
                    min_face_presence_confidence=self.config.MIN_DETECTION_CONFIDENCE,
                    output_face_blendshapes=False,
                    output_facial_transformation_matrixes=False
                )
                self._face_landmarker = mp.tasks.vision.FaceLandmarker.create_from_options(options)
            except Exception as e:
                self._load_failed = True
                logger.error(f"Failed to initialize MediaPipe FaceLandmarker: {e}")
                return None

        return self._face_landmarker

    def preprocess_frame(self, frame: np.ndarray, target_size: Optional[Tuple[int, int]] = None) -> np.ndarray:
        """
        Resize a BGR frame and convert it to RGB for MediaPipe.

        Args:
            frame: Input frame in BGR format (OpenCV default)
            target_size: (width, height); defaults to FRAME_WIDTH x FRAME_HEIGHT

        Returns:
            np.ndarray: Preprocessed frame in RGB format
        """
        if target_size is None:
            target_size = (self.config.FRAME_WIDTH, self.config.FRAME_HEIGHT)
        resized = cv2.resize(frame, target_size, interpolation=cv2.INTER_LINEAR)
        return cv2.cvtColor(resized, cv2.COLOR_BGR2RGB)

    def detect_landmarks(self, frame: Optional[np.ndarray]) -> List[Landmark]:
        """
        Detect the landmarks of the first face in a frame.

        Args:
            frame: Video frame in BGR format

        Returns:
            List of normalized landmarks, empty when no face is available
        """
        if frame is None or frame.size == 0:
            return []

        landmarker = self.face_landmarker
        if landmarker is None:
            return []

        rgb_frame = self.preprocess_frame(frame)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)
        try:
            detection_result = landmarker.detect(mp_image)
        except Exception as e:
            logger.warning(f"Face landmark detection failed: {e}")
            return []

        if not detection_result.face_landmarks:
            return []

        return [Landmark(x=lm.x, y=lm.y, z=lm.z) for lm in detection_result.face_landmarks[0]]

    def close(self):
        """Release MediaPipe resources"""
        if getattr(self, '_face_landmarker', None) is not None:
            self._face_landmarker.close()
            self._face_landmarker = None

    def __del__(self):
        self.close()
