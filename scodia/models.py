"""
Scodia Domain Models
====================
Keypoints, pose observations and the immutable screening report.
"""

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Optional, Tuple

from scodia.config import settings
from scodia.messages import get_messages


class Joint(str, Enum):
    """Named body joints reported by the keypoint provider."""
    NOSE = "nose"
    NECK = "neck"
    LEFT_EYE = "left_eye"
    RIGHT_EYE = "right_eye"
    LEFT_EAR = "left_ear"
    RIGHT_EAR = "right_ear"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_WRIST = "right_wrist"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    ROOT = "root"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_ANKLE = "right_ankle"


@dataclass(frozen=True)
class Coordinate:
    """Normalized image point, origin bottom-left, y growing upward."""
    x: float
    y: float


@dataclass(frozen=True)
class Keypoint:
    coordinate: Coordinate
    confidence: float


class PoseObservation(Mapping):
    """
    Read-only mapping of joint -> keypoint for a single image.

    All joint access from the scorer goes through `point()`, which applies the
    confidence gate: a joint is known only if present and its confidence is
    strictly above the threshold.
    """

    def __init__(
        self,
        keypoints: Mapping,
        confidence_threshold: Optional[float] = None
    ):
        self._keypoints = MappingProxyType(dict(keypoints))
        if confidence_threshold is None:
            confidence_threshold = settings.JOINT_CONFIDENCE_THRESHOLD
        self._threshold = confidence_threshold

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Tuple[float, float, float]],
        confidence_threshold: Optional[float] = None
    ) -> "PoseObservation":
        """Build from {"left_shoulder": (x, y, confidence), ...}."""
        keypoints = {
            Joint(name): Keypoint(Coordinate(float(x), float(y)), float(conf))
            for name, (x, y, conf) in data.items()
        }
        return cls(keypoints, confidence_threshold=confidence_threshold)

    def __getitem__(self, joint: Joint) -> Keypoint:
        return self._keypoints[joint]

    def __iter__(self) -> Iterator[Joint]:
        return iter(self._keypoints)

    def __len__(self) -> int:
        return len(self._keypoints)

    def __repr__(self) -> str:
        return f"PoseObservation({len(self)} joints, threshold={self._threshold})"

    @property
    def confidence_threshold(self) -> float:
        return self._threshold

    def point(self, joint: Joint) -> Optional[Coordinate]:
        """Coordinate of a joint, or None if missing, not confident enough or not finite."""
        keypoint = self._keypoints.get(joint)
        if keypoint is None or not keypoint.confidence > self._threshold:
            return None
        coordinate = keypoint.coordinate
        if not (math.isfinite(coordinate.x) and math.isfinite(coordinate.y)):
            return None
        return coordinate

    def confidence(self, joint: Joint) -> float:
        keypoint = self._keypoints.get(joint)
        return keypoint.confidence if keypoint is not None else 0.0


class VerdictTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


VERDICT_COLORS = {
    VerdictTier.LOW: "green",
    VerdictTier.MEDIUM: "orange",
    VerdictTier.HIGH: "red",
}


def verdict_for(
    risk_score: int,
    medium_threshold: Optional[int] = None,
    high_threshold: Optional[int] = None
) -> VerdictTier:
    """Map a risk score to its tier (0-24 low, 25-59 medium, 60-100 high by default)."""
    if medium_threshold is None:
        medium_threshold = settings.MEDIUM_RISK_THRESHOLD
    if high_threshold is None:
        high_threshold = settings.HIGH_RISK_THRESHOLD
    if risk_score >= high_threshold:
        return VerdictTier.HIGH
    if risk_score >= medium_threshold:
        return VerdictTier.MEDIUM
    return VerdictTier.LOW


@dataclass(frozen=True)
class AnalysisReport:
    """
    Result of one screening analysis.

    Only the score, metrics, note and recommendations are stored, together with
    the tier thresholds the scorer used. Verdict and display text are
    properties so they can never disagree with the stored values.
    """
    risk_score: int
    shoulder_tilt_deg: Optional[float] = None
    hip_tilt_deg: Optional[float] = None
    axis_shift: Optional[float] = None
    side_lean_deg: Optional[float] = None
    note: Optional[str] = None
    recommendations: Tuple[str, ...] = field(default_factory=tuple)
    language: str = "en"
    medium_risk_threshold: Optional[int] = None
    high_risk_threshold: Optional[int] = None

    @property
    def verdict(self) -> VerdictTier:
        return verdict_for(self.risk_score, self.medium_risk_threshold, self.high_risk_threshold)

    @property
    def verdict_title(self) -> str:
        return get_messages(self.language)[f"verdict_{self.verdict.value}"]

    @property
    def verdict_color(self) -> str:
        return VERDICT_COLORS[self.verdict]

    @property
    def has_pose(self) -> bool:
        """False for the sentinel report produced when no pose was found."""
        return any(
            value is not None
            for value in (self.shoulder_tilt_deg, self.hip_tilt_deg, self.axis_shift, self.side_lean_deg)
        )

    def _degrees_text(self, value: Optional[float]) -> str:
        if value is None or not math.isfinite(value):
            return get_messages(self.language)["not_available"]
        return f"{abs(value):.1f}°"

    @property
    def shoulder_tilt_text(self) -> str:
        return self._degrees_text(self.shoulder_tilt_deg)

    @property
    def hip_tilt_text(self) -> str:
        return self._degrees_text(self.hip_tilt_deg)

    @property
    def axis_shift_text(self) -> str:
        if self.axis_shift is None:
            return get_messages(self.language)["not_available"]
        return f"{min(max(self.axis_shift, 0.0), 1.0) * 100.0:.0f}%"

    @property
    def side_lean_text(self) -> str:
        return self._degrees_text(self.side_lean_deg)

    def to_dict(self) -> Dict[str, Any]:
        """Stored fields plus derived display values."""
        data = asdict(self)
        data["recommendations"] = list(self.recommendations)
        data.update({
            "verdict": self.verdict.value,
            "verdict_title": self.verdict_title,
            "verdict_color": self.verdict_color,
            "shoulder_tilt_text": self.shoulder_tilt_text,
            "hip_tilt_text": self.hip_tilt_text,
            "axis_shift_text": self.axis_shift_text,
            "side_lean_text": self.side_lean_text,
        })
        return data
