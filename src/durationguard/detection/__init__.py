"""Test duration regression detection."""

from durationguard.detection.detector import RegressionDetector

__all__ = ["RegressionDetector"]
