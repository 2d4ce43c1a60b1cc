"""Shared fixtures for the segmentation test-suite."""
from __future__ import annotations

import os
import tempfile

import pytest

# Keep the audit log out of the working tree before the app configures logging.
os.environ.setdefault("SEGMENTER_LOG_DIR", tempfile.mkdtemp(prefix="segmenter-logs-"))

from statement_segmenter.config import SegmenterSettings  # noqa: E402
from statement_segmenter.segmentation import BankDetector, SegmentationPipeline  # noqa: E402


@pytest.fixture
def settings() -> SegmenterSettings:
    return SegmenterSettings()


@pytest.fixture
def bank_detector() -> BankDetector:
    return BankDetector(["Chase", "Wells Fargo"])


@pytest.fixture
def pipeline(settings: SegmenterSettings, bank_detector: BankDetector) -> SegmentationPipeline:
    return SegmentationPipeline(settings=settings, bank_detector=bank_detector)
