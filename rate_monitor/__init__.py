"""
Rate Monitor — pulse and breathing rate from a noisy scalar stream.
Feed one measurement per frame (red-channel intensity of a fingertip on
the camera, or vertical torso displacement); the estimator detrends,
bandpass-filters and peak-detects a sliding window and publishes the rate
per minute with a 0 – 1 confidence score.

Wellness estimate only, not a medical device.
"""

from rate_monitor.config import (
    DetrendMode,
    EstimatorConfig,
    heart_rate_config,
    respiration_config,
)
from rate_monitor.estimator import EstimatorState, LatestValue, RateEstimator, RateResult
from rate_monitor.throttle import SampleThrottle

__version__ = "0.1.0"
__author__ = "rate_monitor"

__all__ = [
    "DetrendMode",
    "EstimatorConfig",
    "EstimatorState",
    "LatestValue",
    "RateEstimator",
    "RateResult",
    "SampleThrottle",
    "heart_rate_config",
    "respiration_config",
]
