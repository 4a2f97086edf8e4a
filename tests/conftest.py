"""Shared fixtures for Scodia tests. MediaPipe is never loaded here."""

import time
from typing import Callable, Dict, Optional

import numpy as np
import pytest

from scodia.models import PoseObservation


def build_pose(confidence: float = 0.9, **joints) -> PoseObservation:
    """make a pose from keyword joints: build_pose(left_shoulder=(0.3, 0.5), ...)"""
    return PoseObservation.from_dict(
        {name: (x, y, confidence) for name, (x, y) in joints.items()}
    )


class FakeProvider:
    """
    Keypoint provider returning canned observations.

    Images are keyed by their first pixel value so tests can tell the side
    photo from the back photo.
    """

    def __init__(self, by_marker: Optional[Dict[int, Optional[PoseObservation]]] = None,
                 default: Optional[PoseObservation] = None):
        self.by_marker = by_marker or {}
        self.default = default
        self.calls = 0

    def detect(self, image: np.ndarray) -> Optional[PoseObservation]:
        self.calls += 1
        marker = int(image.flat[0])
        return self.by_marker.get(marker, self.default)


class SlowProvider:
    def __init__(self, delay: float):
        self.delay = delay

    def detect(self, image):
        time.sleep(self.delay)
        return None


class BrokenProvider:
    def detect(self, image):
        raise RuntimeError("detector crashed")


def marked_image(marker: int) -> np.ndarray:
    return np.full((4, 4, 3), marker, dtype=np.uint8)


@pytest.fixture
def make_pose() -> Callable[..., PoseObservation]:
    return build_pose


@pytest.fixture
def level_back_pose() -> PoseObservation:
    """Level shoulders and hips, centered."""
    return build_pose(
        left_shoulder=(0.3, 0.5),
        right_shoulder=(0.7, 0.5),
        left_hip=(0.3, 0.2),
        right_hip=(0.7, 0.2),
    )


@pytest.fixture
def tilted_back_pose() -> PoseObservation:
    """Shoulders tilted 45 degrees, hips level, no axis shift."""
    return build_pose(
        left_shoulder=(0.3, 0.5),
        right_shoulder=(0.7, 0.9),
        left_hip=(0.3, 0.2),
        right_hip=(0.7, 0.2),
    )


@pytest.fixture
def upright_side_pose() -> PoseObservation:
    return build_pose(
        nose=(0.5, 0.8),
        neck=(0.5, 0.7),
        root=(0.5, 0.3),
    )
