"""Routers module for Scodia screening endpoints."""
from .screening import router as screening_router

__all__ = [
    "screening_router",
]
