"""
Screening API Router
====================
Endpoints for photo-based postural asymmetry screening.
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel

from scodia.config import get_settings
from scodia.models import AnalysisReport
from scodia.services.pipeline import ScreeningPipeline, decode_image
from scodia.services.pose_detector import KeypointProvider, PoseDetector

logger = logging.getLogger("scodia.router.screening")

router = APIRouter()

# Detector instance
_detector: Optional[PoseDetector] = None


def get_detector() -> KeypointProvider:
    """Get or create the pose detector instance."""
    global _detector
    if _detector is None:
        _detector = PoseDetector()
        _detector.initialize()
    return _detector


def get_pipeline(detector: KeypointProvider = Depends(get_detector)) -> ScreeningPipeline:
    return ScreeningPipeline(provider=detector)


def shutdown_detector():
    """Release the shared detector, if one was created."""
    global _detector
    if _detector is not None:
        _detector.cleanup()
        _detector = None


# =============================================================================
# Request/Response Models
# =============================================================================

class ScreeningResponse(BaseModel):
    """Screening report with derived display fields."""
    risk_score: int
    shoulder_tilt_deg: Optional[float] = None
    hip_tilt_deg: Optional[float] = None
    axis_shift: Optional[float] = None
    side_lean_deg: Optional[float] = None
    note: Optional[str] = None
    recommendations: List[str]
    verdict: str
    verdict_title: str
    verdict_color: str
    shoulder_tilt_text: str
    hip_tilt_text: str
    axis_shift_text: str
    side_lean_text: str

    @classmethod
    def from_report(cls, report: AnalysisReport) -> "ScreeningResponse":
        data = report.to_dict()
        for key in ("language", "medium_risk_threshold", "high_risk_threshold"):
            data.pop(key, None)
        return cls(**data)


class KeypointModel(BaseModel):
    joint: str
    x: float
    y: float
    confidence: float


class KeypointsResponse(BaseModel):
    """Detected joints for one image."""
    pose_detected: bool
    keypoints: List[KeypointModel] = []
    count: int = 0


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/")
async def root():
    """Screening service info."""
    return {
        "service": "Posture Asymmetry Screening",
        "model": "MediaPipe Pose (BlazePose GHUM)",
        "views": ["side", "back"],
        "metrics": ["shoulder_tilt_deg", "hip_tilt_deg", "axis_shift", "side_lean_deg"],
        "disclaimer": "Screening only, not a medical diagnosis.",
    }


@router.post("/analyze", response_model=ScreeningResponse)
async def analyze_photos(
    side: Optional[UploadFile] = File(None),
    back: Optional[UploadFile] = File(None),
    pipeline: ScreeningPipeline = Depends(get_pipeline)
):
    """
    Screen a side-view and a back-view photo.

    Either photo may fail detection; the report then covers whatever was
    recognized. At least one photo must be uploaded.
    """
    if side is None and back is None:
        raise HTTPException(status_code=400, detail="Upload at least one of 'side' or 'back'")

    try:
        side_data = await side.read() if side is not None else None
        back_data = await back.read() if back is not None else None

        report = await pipeline.analyze_bytes(side_data=side_data, back_data=back_data)
        return ScreeningResponse.from_report(report)

    except Exception as e:
        logger.error(f"Screening analysis failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/keypoints", response_model=KeypointsResponse)
async def get_keypoints(
    file: UploadFile = File(...),
    detector: KeypointProvider = Depends(get_detector)
):
    """
    Detect joints in a single image.

    Returns normalized coordinates (bottom-left origin) for visualization.
    """
    contents = await file.read()
    image = decode_image(contents)

    if image is None:
        raise HTTPException(status_code=400, detail="Invalid image file")

    try:
        observation = await asyncio.wait_for(
            asyncio.to_thread(detector.detect, image),
            timeout=get_settings().DETECTION_TIMEOUT_S,
        )
    except asyncio.TimeoutError:
        logger.warning("Keypoint extraction timed out")
        return KeypointsResponse(pose_detected=False)
    except Exception as e:
        logger.error(f"Keypoint extraction failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if observation is None:
        return KeypointsResponse(pose_detected=False)

    keypoints = [
        KeypointModel(
            joint=joint.value,
            x=keypoint.coordinate.x,
            y=keypoint.coordinate.y,
            confidence=keypoint.confidence,
        )
        for joint, keypoint in observation.items()
    ]
    return KeypointsResponse(pose_detected=True, keypoints=keypoints, count=len(keypoints))


@router.get("/thresholds")
async def get_thresholds():
    """Get scoring constants currently in effect."""
    settings = get_settings()
    return {
        "joint_confidence_threshold": settings.JOINT_CONFIDENCE_THRESHOLD,
        "full_scale": {
            "shoulder_tilt_deg": settings.SHOULDER_TILT_FULL_SCALE_DEG,
            "hip_tilt_deg": settings.HIP_TILT_FULL_SCALE_DEG,
            "axis_shift": settings.AXIS_SHIFT_FULL_SCALE,
            "side_lean_deg": settings.SIDE_LEAN_FULL_SCALE_DEG,
        },
        "weights": settings.weights,
        "tiers": {
            "low": [0, settings.MEDIUM_RISK_THRESHOLD - 1],
            "medium": [settings.MEDIUM_RISK_THRESHOLD, settings.HIGH_RISK_THRESHOLD - 1],
            "high": [settings.HIGH_RISK_THRESHOLD, 100],
        },
    }
