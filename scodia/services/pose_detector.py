"""
Scodia Pose Detector
====================
MediaPipe Pose (BlazePose GHUM) keypoint provider.
Turns a decoded image into a PoseObservation, or None when no person is found.
"""

import logging
import threading
import time
from typing import Optional, Protocol

import numpy as np

from scodia.config import Settings, settings
from scodia.models import Coordinate, Joint, Keypoint, PoseObservation

logger = logging.getLogger("scodia.detector")

# MediaPipe lazy import
_mediapipe = None


def _get_mediapipe():
    """Lazy load MediaPipe."""
    global _mediapipe
    if _mediapipe is None:
        try:
            import mediapipe as mp
            _mediapipe = mp
            logger.info("MediaPipe loaded successfully")
        except ImportError as e:
            logger.warning(f"MediaPipe not available: {e}")
    return _mediapipe


class KeypointProvider(Protocol):
    """Anything that can turn an image into an optional pose observation."""

    def detect(self, image: np.ndarray) -> Optional[PoseObservation]:
        ...


# MediaPipe landmark index per joint
LANDMARK_INDEX = {
    Joint.NOSE: 0,
    Joint.LEFT_EYE: 2,
    Joint.RIGHT_EYE: 5,
    Joint.LEFT_EAR: 7,
    Joint.RIGHT_EAR: 8,
    Joint.LEFT_SHOULDER: 11,
    Joint.RIGHT_SHOULDER: 12,
    Joint.LEFT_ELBOW: 13,
    Joint.RIGHT_ELBOW: 14,
    Joint.LEFT_WRIST: 15,
    Joint.RIGHT_WRIST: 16,
    Joint.LEFT_HIP: 23,
    Joint.RIGHT_HIP: 24,
    Joint.LEFT_KNEE: 25,
    Joint.RIGHT_KNEE: 26,
    Joint.LEFT_ANKLE: 27,
    Joint.RIGHT_ANKLE: 28,
}

# Joints MediaPipe does not report, built from the midpoint of two others
SYNTHETIC_JOINTS = {
    Joint.NECK: (Joint.LEFT_SHOULDER, Joint.RIGHT_SHOULDER),
    Joint.ROOT: (Joint.LEFT_HIP, Joint.RIGHT_HIP),
}


def landmarks_to_observation(
    landmarks,
    confidence_threshold: Optional[float] = None
) -> PoseObservation:
    """
    Convert a MediaPipe landmark list to a PoseObservation.

    MediaPipe puts the origin top-left with y growing down; the observation
    uses a bottom-left origin, so y is flipped.
    """
    keypoints = {}
    for joint, index in LANDMARK_INDEX.items():
        lm = landmarks[index]
        keypoints[joint] = Keypoint(
            coordinate=Coordinate(float(lm.x), 1.0 - float(lm.y)),
            confidence=float(lm.visibility),
        )

    for joint, (a, b) in SYNTHETIC_JOINTS.items():
        first, second = keypoints[a], keypoints[b]
        keypoints[joint] = Keypoint(
            coordinate=Coordinate(
                (first.coordinate.x + second.coordinate.x) / 2.0,
                (first.coordinate.y + second.coordinate.y) / 2.0,
            ),
            confidence=min(first.confidence, second.confidence),
        )

    return PoseObservation(keypoints, confidence_threshold=confidence_threshold)


class PoseDetector:
    """
    Keypoint provider using MediaPipe Pose in static-image mode.

    Detection failures (no person, bad image, model error) are logged and
    reported as None; `detect` never raises.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.settings = config or settings
        self._pose = None
        self._initialized = False
        self._lock = threading.Lock()
        self._init_lock = threading.Lock()

        # Performance tracking
        self._last_inference_time_ms: float = 0.0

    def initialize(self) -> bool:
        """Initialize MediaPipe Pose model. Only one model is ever built per detector."""
        with self._init_lock:
            if self._initialized:
                return True

            mp = _get_mediapipe()

            if mp is None:
                logger.error("Cannot initialize: MediaPipe not available")
                return False

            try:
                self._pose = mp.solutions.pose.Pose(
                    static_image_mode=True,
                    model_complexity=self.settings.MODEL_COMPLEXITY,
                    enable_segmentation=False,
                    min_detection_confidence=self.settings.MIN_DETECTION_CONFIDENCE,
                )
                self._initialized = True
                logger.info("MediaPipe Pose initialized (BlazePose GHUM)")
                return True

            except Exception as e:
                logger.error(f"Failed to initialize MediaPipe Pose: {e}")
                return False

    def detect(self, image: Optional[np.ndarray]) -> Optional[PoseObservation]:
        """
        Detect a single pose in an image.

        Args:
            image: BGR image as numpy array

        Returns:
            PoseObservation, or None if nothing usable was found
        """
        if image is None or image.size == 0:
            logger.warning("Empty image passed to detector")
            return None

        if not self._initialized:
            self.initialize()

        if self._pose is None:
            return None

        start_time = time.time()

        try:
            import cv2

            # Convert BGR to RGB for MediaPipe
            rgb_image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

            # Pose graphs are not safe to share between threads
            with self._lock:
                results = self._pose.process(rgb_image)

            self._last_inference_time_ms = (time.time() - start_time) * 1000

            if not results.pose_landmarks:
                logger.info(f"No pose detected ({self._last_inference_time_ms:.1f}ms)")
                return None

            observation = landmarks_to_observation(
                results.pose_landmarks.landmark,
                confidence_threshold=self.settings.JOINT_CONFIDENCE_THRESHOLD,
            )
            logger.debug(f"Pose detected in {self._last_inference_time_ms:.1f}ms")
            return observation

        except Exception as e:
            logger.error(f"Pose detection failed: {e}")
            return None

    def cleanup(self):
        """Release MediaPipe resources."""
        with self._init_lock:
            if self._pose:
                self._pose.close()
                self._pose = None
            self._initialized = False
        logger.info("Pose detector cleaned up")

    @property
    def last_inference_time_ms(self) -> float:
        """Get the last inference time in milliseconds."""
        return self._last_inference_time_ms

    @property
    def is_initialized(self) -> bool:
        """Check if detector is initialized."""
        return self._initialized
