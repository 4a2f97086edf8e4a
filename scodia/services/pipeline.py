"""
Scodia Screening Pipeline
=========================
Runs pose detection on the side and back photos independently, waits for
both, then scores whatever was found.
"""

import asyncio
import logging
from typing import Optional

import numpy as np

from scodia.config import Settings, settings
from scodia.models import AnalysisReport, PoseObservation
from scodia.services.pose_detector import KeypointProvider
from scodia.services.risk_scorer import RiskScorer

logger = logging.getLogger("scodia.pipeline")


def decode_image(data: Optional[bytes]) -> Optional[np.ndarray]:
    """Decode an encoded image (JPEG, PNG, ...) to a BGR array, or None."""
    if not data:
        return None

    import cv2

    nparr = np.frombuffer(data, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    if image is None:
        logger.warning("Could not decode uploaded image")
    return image


class ScreeningPipeline:
    """
    Detection + scoring for one screening request.

    Each view is detected in a worker thread with its own timeout; a failed or
    timed-out view simply has no observation.
    """

    def __init__(
        self,
        provider: KeypointProvider,
        scorer: Optional[RiskScorer] = None,
        config: Optional[Settings] = None
    ):
        self.settings = config or settings
        self.provider = provider
        self.scorer = scorer or RiskScorer(self.settings)

    async def detect(self, image: Optional[np.ndarray], view: str) -> Optional[PoseObservation]:
        """Detect a pose for one view; None on absence, timeout or error."""
        if image is None:
            logger.debug(f"No {view} image provided")
            return None

        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.provider.detect, image),
                timeout=self.settings.DETECTION_TIMEOUT_S,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"{view.capitalize()} detection timed out after {self.settings.DETECTION_TIMEOUT_S}s"
            )
            return None
        except Exception as e:
            logger.error(f"{view.capitalize()} detection failed: {e}")
            return None

    async def analyze(
        self,
        side_image: Optional[np.ndarray] = None,
        back_image: Optional[np.ndarray] = None
    ) -> AnalysisReport:
        """
        Run both detections concurrently and score the result.

        Args:
            side_image: Decoded side-view photo
            back_image: Decoded back-view photo

        Returns:
            AnalysisReport
        """
        side_pose, back_pose = await asyncio.gather(
            self.detect(side_image, "side"),
            self.detect(back_image, "back"),
        )

        report = self.scorer.analyze(back=back_pose, side=side_pose)

        logger.info(
            f"Screening complete: risk={report.risk_score}, verdict={report.verdict.value}, "
            f"back_pose={back_pose is not None}, side_pose={side_pose is not None}"
        )
        return report

    async def analyze_bytes(
        self,
        side_data: Optional[bytes] = None,
        back_data: Optional[bytes] = None
    ) -> AnalysisReport:
        """Decode uploaded photos and analyze them."""
        return await self.analyze(
            side_image=decode_image(side_data),
            back_image=decode_image(back_data),
        )
