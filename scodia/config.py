"""
Scodia Screening Service Configuration
======================================
Centralized configuration using Pydantic settings with environment variable support.
All scoring constants are heuristics without a cited clinical basis; they are kept
here so they can be tuned without touching the scorer.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # -------------------------------------------------------------------------
    # Service Configuration
    # -------------------------------------------------------------------------
    HOST: str = Field(default="0.0.0.0", description="Service bind address.")
    PORT: int = Field(default=8003, description="Screening service port.")
    LOG_LEVEL: str = Field(default="INFO", description="Root logging level.")
    LANGUAGE: str = Field(
        default="en",
        description="Message catalog for verdicts and recommendations: 'en' or 'ru'."
    )

    # -------------------------------------------------------------------------
    # Pose Detector (MediaPipe Pose)
    # -------------------------------------------------------------------------
    MODEL_COMPLEXITY: int = Field(
        default=1,
        description="MediaPipe Pose complexity. 0=Lite, 1=Full, 2=Heavy."
    )
    MIN_DETECTION_CONFIDENCE: float = Field(
        default=0.5,
        description="Minimum person detection confidence for MediaPipe."
    )
    DETECTION_TIMEOUT_S: float = Field(
        default=10.0,
        description="Upper bound on a single image detection before it counts as failed."
    )
    JOINT_CONFIDENCE_THRESHOLD: float = Field(
        default=0.2,
        description="Joints at or below this confidence are treated as unknown."
    )

    # -------------------------------------------------------------------------
    # Risk Scoring
    # -------------------------------------------------------------------------
    SHOULDER_TILT_FULL_SCALE_DEG: float = Field(default=12.0, gt=0, description="Shoulder tilt at which its score saturates.")
    HIP_TILT_FULL_SCALE_DEG: float = Field(default=10.0, gt=0, description="Hip tilt at which its score saturates.")
    AXIS_SHIFT_FULL_SCALE: float = Field(default=0.35, gt=0, description="Axis shift at which its score saturates.")
    SIDE_LEAN_FULL_SCALE_DEG: float = Field(default=10.0, gt=0, description="Side lean at which its score saturates.")

    MEDIUM_RISK_THRESHOLD: int = Field(default=25, description="Lowest risk score of the medium tier.")
    HIGH_RISK_THRESHOLD: int = Field(default=60, description="Lowest risk score of the high tier.")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @property
    def weights(self) -> dict[str, float]:
        """
        Risk weights per metric.

        Shoulders: 34%, Hips: 26%, Axis: 20%, Side lean: 20%
        """
        return {
            "shoulder": 0.34,
            "hip": 0.26,
            "axis": 0.20,
            "side": 0.20,
        }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance for dependency injection."""
    return Settings()


# Global settings instance
settings = get_settings()
