"""
Scodia Risk Scorer
==================
Turns back-view and side-view pose observations into a 0-100 postural
asymmetry risk score with recommendations.

Weighted formula:
    Shoulder tilt (34%) + Hip tilt (26%) + Axis shift (20%) + Side lean (20%)

A missing metric contributes zero; weights are never redistributed.
"""

import logging
import math
from typing import Optional, Tuple

from scodia.config import Settings, settings
from scodia.messages import get_messages
from scodia.models import AnalysisReport, Coordinate, Joint, PoseObservation, verdict_for

logger = logging.getLogger("scodia.scorer")

# Vertical deltas below this make the side-lean angle meaningless.
MIN_VERTICAL_DELTA = 1e-6

IMAGE_CENTER = Coordinate(0.5, 0.5)


def line_angle_degrees(p1: Optional[Coordinate], p2: Optional[Coordinate]) -> Optional[float]:
    """Angle of the line p1 -> p2 relative to horizontal."""
    if p1 is None or p2 is None:
        return None
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    return math.degrees(math.atan2(dy, dx))


def midpoint(a: Optional[Coordinate], b: Optional[Coordinate]) -> Coordinate:
    """Midpoint of two joints; image center if either is unknown."""
    if a is None or b is None:
        return IMAGE_CENTER
    return Coordinate((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)


def axis_shift(
    left_shoulder: Optional[Coordinate],
    right_shoulder: Optional[Coordinate],
    left_hip: Optional[Coordinate],
    right_hip: Optional[Coordinate]
) -> float:
    """Horizontal offset between shoulder-line and hip-line centers, scaled to [0, 1]."""
    shoulder_mid = midpoint(left_shoulder, right_shoulder)
    hip_mid = midpoint(left_hip, right_hip)
    axis = abs(shoulder_mid.x - hip_mid.x)
    return min(max(axis * 2.0, 0.0), 1.0)


def side_lean_degrees(
    nose: Optional[Coordinate],
    neck: Optional[Coordinate],
    hip: Optional[Coordinate]
) -> Optional[float]:
    """
    Trunk lean from vertical in the side view.

    Neck and hip must be known; the nose is preferred as the top reference
    when available.
    """
    if neck is None or hip is None:
        return None
    top = nose if nose is not None else neck
    dx = top.x - hip.x
    dy = top.y - hip.y
    if abs(dy) < MIN_VERTICAL_DELTA:
        return None
    return math.degrees(math.atan2(dx, dy))


class RiskScorer:
    """
    Postural asymmetry risk scorer.

    Pure and stateless: the same observations always yield an equal report.
    """

    def __init__(self, config: Optional[Settings] = None, language: Optional[str] = None):
        self.settings = config or settings
        self.language = language or self.settings.LANGUAGE

    @property
    def weights(self) -> dict[str, float]:
        return self.settings.weights

    def back_metrics(
        self,
        pose: PoseObservation
    ) -> Tuple[Optional[float], Optional[float], float]:
        """Shoulder tilt, hip tilt and axis shift from a back-view pose."""
        left_shoulder = pose.point(Joint.LEFT_SHOULDER)
        right_shoulder = pose.point(Joint.RIGHT_SHOULDER)
        left_hip = pose.point(Joint.LEFT_HIP)
        right_hip = pose.point(Joint.RIGHT_HIP)

        shoulder_tilt = line_angle_degrees(left_shoulder, right_shoulder)
        hip_tilt = line_angle_degrees(left_hip, right_hip)
        shift = axis_shift(left_shoulder, right_shoulder, left_hip, right_hip)
        return shoulder_tilt, hip_tilt, shift

    def side_metric(self, pose: PoseObservation) -> Optional[float]:
        return side_lean_degrees(
            nose=pose.point(Joint.NOSE),
            neck=pose.point(Joint.NECK),
            hip=pose.point(Joint.ROOT),
        )

    def combine(
        self,
        shoulder_tilt: Optional[float] = None,
        hip_tilt: Optional[float] = None,
        axis: Optional[float] = None,
        side_lean: Optional[float] = None
    ) -> int:
        """
        Weighted risk score in [0, 100].

        The fractional part is discarded, not rounded.
        """
        cfg = self.settings
        shoulder_score = min(abs(shoulder_tilt or 0.0) / cfg.SHOULDER_TILT_FULL_SCALE_DEG, 1.0)
        hip_score = min(abs(hip_tilt or 0.0) / cfg.HIP_TILT_FULL_SCALE_DEG, 1.0)
        axis_score = min((axis or 0.0) / cfg.AXIS_SHIFT_FULL_SCALE, 1.0)
        side_score = min(abs(side_lean or 0.0) / cfg.SIDE_LEAN_FULL_SCALE_DEG, 1.0)

        w = self.weights
        weighted = (
            w["shoulder"] * shoulder_score
            + w["hip"] * hip_score
            + w["axis"] * axis_score
            + w["side"] * side_score
        )
        risk = int(weighted * 100.0)
        return max(0, min(100, risk))

    def recommendations(self, risk: int) -> list[str]:
        """Tier-specific items first, then the general base list."""
        messages = get_messages(self.language)
        tier = verdict_for(risk, self.settings.MEDIUM_RISK_THRESHOLD, self.settings.HIGH_RISK_THRESHOLD)
        prepend = messages[f"{tier.value}_recommendations"]
        return list(prepend) + list(messages["base_recommendations"])

    def no_pose_report(self) -> AnalysisReport:
        messages = get_messages(self.language)
        return AnalysisReport(
            risk_score=0,
            note=messages["note_no_pose"],
            recommendations=tuple(messages["no_pose_recommendations"]),
            language=self.language,
            medium_risk_threshold=self.settings.MEDIUM_RISK_THRESHOLD,
            high_risk_threshold=self.settings.HIGH_RISK_THRESHOLD,
        )

    def analyze(
        self,
        back: Optional[PoseObservation] = None,
        side: Optional[PoseObservation] = None
    ) -> AnalysisReport:
        """
        Score whatever subset of observations is available.

        Args:
            back: Pose detected on the back-view photo, if any
            side: Pose detected on the side-view photo, if any

        Returns:
            AnalysisReport; the no-pose report when both are missing
        """
        if back is None and side is None:
            logger.info("No pose observations available, returning guidance report")
            return self.no_pose_report()

        shoulder_tilt: Optional[float] = None
        hip_tilt: Optional[float] = None
        axis: Optional[float] = None
        side_lean: Optional[float] = None

        if back is not None:
            shoulder_tilt, hip_tilt, axis = self.back_metrics(back)

        if side is not None:
            side_lean = self.side_metric(side)

        risk = self.combine(shoulder_tilt, hip_tilt, axis, side_lean)

        logger.debug(
            f"Risk score calculated: {risk} "
            f"(shoulder={shoulder_tilt}, hip={hip_tilt}, "
            f"axis={axis}, side={side_lean})"
        )

        return AnalysisReport(
            risk_score=risk,
            shoulder_tilt_deg=shoulder_tilt,
            hip_tilt_deg=hip_tilt,
            axis_shift=axis,
            side_lean_deg=side_lean,
            note=get_messages(self.language)["note_metrics"],
            recommendations=tuple(self.recommendations(risk)),
            language=self.language,
            medium_risk_threshold=self.settings.MEDIUM_RISK_THRESHOLD,
            high_risk_threshold=self.settings.HIGH_RISK_THRESHOLD,
        )


def analyze(
    back: Optional[PoseObservation] = None,
    side: Optional[PoseObservation] = None
) -> AnalysisReport:
    """
    Convenience function for risk scoring with the global settings.

    Args:
        back: Back-view pose observation
        side: Side-view pose observation

    Returns:
        AnalysisReport
    """
    return RiskScorer().analyze(back=back, side=side)
