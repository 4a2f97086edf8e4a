"""Tests for the async screening pipeline."""

import cv2
import numpy as np

from scodia.config import Settings
from scodia.services.pipeline import ScreeningPipeline, decode_image

from conftest import BrokenProvider, FakeProvider, SlowProvider, marked_image

SIDE, BACK = 1, 2


def png_bytes(marker: int) -> bytes:
    ok, buf = cv2.imencode(".png", marked_image(marker))
    assert ok
    return buf.tobytes()


class TestDecodeImage:
    def test_none_and_empty(self) -> None:
        assert decode_image(None) is None
        assert decode_image(b"") is None

    def test_garbage(self) -> None:
        assert decode_image(b"definitely not an image") is None

    def test_png(self) -> None:
        image = decode_image(png_bytes(7))
        assert image.shape == (4, 4, 3)
        assert int(image[0, 0, 0]) == 7


class TestScreeningPipeline:
    async def test_both_views(self, tilted_back_pose, upright_side_pose) -> None:
        provider = FakeProvider({SIDE: upright_side_pose, BACK: tilted_back_pose})
        pipeline = ScreeningPipeline(provider, config=Settings())
        report = await pipeline.analyze(side_image=marked_image(SIDE), back_image=marked_image(BACK))
        assert provider.calls == 2
        assert report.risk_score == 34
        assert report.side_lean_deg == 0.0

    async def test_missing_images_skip_detection(self) -> None:
        provider = FakeProvider()
        report = await ScreeningPipeline(provider, config=Settings()).analyze()
        assert provider.calls == 0
        assert report.risk_score == 0
        assert len(report.recommendations) == 3

    async def test_one_view_fails(self, level_back_pose) -> None:
        provider = FakeProvider({SIDE: None, BACK: level_back_pose})
        report = await ScreeningPipeline(provider, config=Settings()).analyze(
            side_image=marked_image(SIDE), back_image=marked_image(BACK)
        )
        assert report.side_lean_deg is None
        assert report.shoulder_tilt_deg == 0.0
        assert len(report.recommendations) == 4

    async def test_provider_error_degrades_to_no_pose(self) -> None:
        report = await ScreeningPipeline(BrokenProvider(), config=Settings()).analyze(
            side_image=marked_image(SIDE), back_image=marked_image(BACK)
        )
        assert report.has_pose is False
        assert report.risk_score == 0

    async def test_timeout_degrades_to_no_pose(self) -> None:
        pipeline = ScreeningPipeline(SlowProvider(0.5), config=Settings(DETECTION_TIMEOUT_S=0.05))
        report = await pipeline.analyze(back_image=marked_image(BACK))
        assert report.has_pose is False

    async def test_analyze_bytes(self, level_back_pose) -> None:
        provider = FakeProvider({BACK: level_back_pose})
        report = await ScreeningPipeline(provider, config=Settings()).analyze_bytes(
            side_data=b"broken upload", back_data=png_bytes(BACK)
        )
        assert provider.calls == 1
        assert report.axis_shift == 0.0
