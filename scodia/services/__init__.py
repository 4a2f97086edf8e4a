"""Services module for Scodia pose detection and risk scoring."""
from .pose_detector import KeypointProvider, PoseDetector, landmarks_to_observation
from .risk_scorer import RiskScorer, analyze
from .pipeline import ScreeningPipeline, decode_image

__all__ = [
    "KeypointProvider",
    "PoseDetector",
    "landmarks_to_observation",
    "RiskScorer",
    "analyze",
    "ScreeningPipeline",
    "decode_image",
]
