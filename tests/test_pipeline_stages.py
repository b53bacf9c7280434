"""
Unit tests for the individual processing stages.
Run with:  pytest tests/
"""

from __future__ import annotations

import numpy as np
import pytest

from rate_monitor.bandpass import BandpassFilter
from rate_monitor.confidence import ConfidenceScorer
from rate_monitor.config import DetrendMode
from rate_monitor.detrend import Detrender
from rate_monitor.peaks import PeakDetector
from rate_monitor.window import SlidingWindow


# ---------------------------------------------------------------------------
# SlidingWindow tests
# ---------------------------------------------------------------------------

class TestSlidingWindow:

    def test_partial_fill(self):
        w = SlidingWindow(5)
        for v in (1.0, 2.0, 3.0):
            w.push(v)
        assert len(w) == 3
        assert not w.is_full
        assert w.progress == pytest.approx(0.6)
        np.testing.assert_array_equal(w.snapshot(), [1.0, 2.0, 3.0])

    def test_oldest_evicted(self):
        w = SlidingWindow(5)
        for v in range(1, 8):
            w.push(float(v))
        assert len(w) == 5
        assert w.is_full
        assert w.progress == 1.0
        np.testing.assert_array_equal(w.snapshot(), [3.0, 4.0, 5.0, 6.0, 7.0])

    def test_snapshot_does_not_alias(self):
        w = SlidingWindow(3)
        for v in (1.0, 2.0, 3.0):
            w.push(v)
        snap = w.snapshot()
        snap[:] = 0.0
        np.testing.assert_array_equal(w.snapshot(), [1.0, 2.0, 3.0])

    def test_snapshot_into_buffer(self):
        w = SlidingWindow(4)
        for v in range(6):
            w.push(float(v))
        buf = np.zeros(4)
        out = w.snapshot(out=buf)
        assert np.shares_memory(out, buf)
        np.testing.assert_array_equal(buf, [2.0, 3.0, 4.0, 5.0])

    def test_snapshot_buffer_too_small(self):
        w = SlidingWindow(4)
        for v in range(4):
            w.push(float(v))
        with pytest.raises(ValueError):
            w.snapshot(out=np.zeros(2))

    def test_clear(self):
        w = SlidingWindow(3)
        for v in range(5):
            w.push(float(v))
        w.clear()
        assert len(w) == 0
        assert w.progress == 0.0
        assert not w.is_full
        w.push(9.0)
        np.testing.assert_array_equal(w.snapshot(), [9.0])


# ---------------------------------------------------------------------------
# Detrender tests
# ---------------------------------------------------------------------------

class TestDetrender:

    def test_mean_mode(self):
        out = Detrender(DetrendMode.MEAN).apply(np.array([1.0, 2.0, 3.0]))
        np.testing.assert_allclose(out, [-1.0, 0.0, 1.0])

    def test_linear_mode_removes_line(self):
        signal = 2.0 * np.arange(50) + 5.0
        out = Detrender("linear").apply(signal)
        np.testing.assert_allclose(out, 0.0, atol=1e-9)

    def test_linear_mode_keeps_oscillation(self):
        i = np.arange(200)
        wave = np.sin(2 * np.pi * i / 20)
        out = Detrender(DetrendMode.LINEAR).apply(wave + 0.5 * i + 3.0)
        # Ten full periods: the fitted line absorbs only a sliver of the wave
        np.testing.assert_allclose(out, wave, atol=0.15)

    def test_short_signal_unchanged(self):
        np.testing.assert_array_equal(Detrender("linear").apply(np.array([4.0])), [4.0])
        assert Detrender().apply(np.array([])).shape == (0,)

    def test_writes_into_buffer(self):
        buf = np.empty(3)
        out = Detrender().apply(np.array([2.0, 4.0, 6.0]), out=buf)
        assert out is buf
        np.testing.assert_allclose(buf, [-2.0, 0.0, 2.0])

    def test_input_not_modified(self):
        signal = np.array([1.0, 5.0, 2.0, 8.0])
        Detrender("linear").apply(signal)
        np.testing.assert_array_equal(signal, [1.0, 5.0, 2.0, 8.0])

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            Detrender("quadratic")


# ---------------------------------------------------------------------------
# BandpassFilter tests
# ---------------------------------------------------------------------------

class TestBandpassFilter:

    def test_window_widths(self):
        pulse = BandpassFilter(30.0, 0.5, 3.0)
        assert pulse.baseline_window == 61
        assert pulse.smoothing_window == 11

        breathing = BandpassFilter(10.0, 0.1, 0.8)
        assert breathing.baseline_window == 101
        assert breathing.smoothing_window == 13

    def test_minimum_width(self):
        bp = BandpassFilter(10.0, 5.0, 6.0)
        assert bp.baseline_window == 3
        assert bp.smoothing_window == 3

    def test_output_length(self):
        bp = BandpassFilter(30.0, 0.5, 3.0)
        for n in (1, 5, 450):
            assert bp.apply(np.random.default_rng(n).normal(size=n)).shape == (n,)

    def test_constant_input_gives_zero(self):
        bp = BandpassFilter(30.0, 0.5, 3.0)
        np.testing.assert_allclose(bp.apply(np.full(450, 7.0)), 0.0, atol=1e-9)

    def _interior_gain(self, freq_hz: float) -> float:
        fs = 30.0
        t = np.arange(450) / fs
        wave = np.sin(2 * np.pi * freq_hz * t)
        out = BandpassFilter(fs, 0.5, 3.0).apply(wave)
        return float(np.std(out[100:350]) / np.std(wave[100:350]))

    def test_passband_preserved(self):
        assert self._interior_gain(1.0) > 0.5

    def test_slow_drift_attenuated(self):
        assert self._interior_gain(0.1) < 0.2

    def test_fast_noise_attenuated(self):
        assert self._interior_gain(10.0) < 0.2

    def test_edges_are_finite(self):
        out = BandpassFilter(10.0, 0.1, 0.8).apply(np.linspace(-1.0, 1.0, 60))
        assert np.all(np.isfinite(out))

    def test_writes_into_buffer(self):
        bp = BandpassFilter(30.0, 0.5, 3.0)
        buf = np.empty(100)
        signal = np.sin(np.arange(100) / 3.0)
        out = bp.apply(signal, out=buf)
        assert out is buf
        # Repeat calls reuse the cached buffers and give identical results
        np.testing.assert_array_equal(bp.apply(signal), buf)


# ---------------------------------------------------------------------------
# PeakDetector tests
# ---------------------------------------------------------------------------

class TestPeakDetector:

    def test_isolated_spikes(self):
        x = np.zeros(50)
        x[[10, 20, 30, 40]] = 1.0
        np.testing.assert_array_equal(PeakDetector(0.4).detect(x), [10, 20, 30, 40])

    def test_min_distance_keeps_first(self):
        x = np.zeros(50)
        x[[10, 12, 30]] = 1.0
        np.testing.assert_array_equal(PeakDetector(0.4, min_distance=5).detect(x), [10, 30])

    def test_threshold_excludes_small_bumps(self):
        x = np.zeros(50)
        x[10] = 1.0
        x[20] = 0.1
        x[30] = 1.0
        np.testing.assert_array_equal(PeakDetector(0.4).detect(x), [10, 30])

    def test_endpoints_never_peaks(self):
        x = np.zeros(50)
        x[0] = 5.0
        x[49] = 5.0
        x[25] = 5.0
        np.testing.assert_array_equal(PeakDetector(0.0).detect(x), [25])

    def test_flat_top_is_not_a_peak(self):
        x = np.zeros(10)
        x[2] = x[3] = 5.0
        assert PeakDetector(0.0, 1).detect(x).size == 0

    def test_flat_top_beside_strict_peak(self):
        x = np.zeros(30)
        x[10] = x[11] = 1.0
        x[20] = 1.0
        np.testing.assert_array_equal(PeakDetector(0.4).detect(x), [20])

    def test_flat_signal_has_no_peaks(self):
        assert PeakDetector().detect(np.full(100, 3.0)).size == 0

    def test_short_signal_has_no_peaks(self):
        assert PeakDetector().detect(np.array([0.0, 1.0])).size == 0

    def test_sine_peaks(self):
        i = np.arange(200)
        x = np.sin(2 * np.pi * i / 20)   # maxima at 5, 25, 45, ...
        np.testing.assert_array_equal(PeakDetector(0.4, 5).detect(x), np.arange(5, 200, 20))


# ---------------------------------------------------------------------------
# ConfidenceScorer tests
# ---------------------------------------------------------------------------

class TestConfidenceScorer:

    _signal = np.sin(2 * np.pi * np.arange(200) / 20)

    def test_regular_peaks(self):
        peaks = np.arange(5, 200, 20)
        score = ConfidenceScorer(3, snr_cap=5.0).score(self._signal, peaks)
        # Perfect regularity; a sine peaks at sqrt(2) standard deviations
        assert score == pytest.approx(0.6 + 0.4 * np.sqrt(2) / 5.0, abs=1e-6)

    def test_irregular_peaks_score_lower(self):
        scorer = ConfidenceScorer(3)
        regular = scorer.score(self._signal, np.arange(5, 200, 20))
        irregular = scorer.score(self._signal, np.array([5, 25, 30, 70, 85]))
        assert irregular < regular

    def test_too_few_peaks(self):
        assert ConfidenceScorer(3).score(self._signal, np.array([5, 25])) == 0.0

    def test_flat_signal_has_no_quality(self):
        score = ConfidenceScorer(2).score(np.zeros(100), np.array([10, 30, 50]))
        assert score == pytest.approx(0.6)

    def test_negative_peaks_clamped(self):
        score = ConfidenceScorer(2).score(-np.abs(self._signal), np.array([10, 30, 50]))
        assert 0.0 <= score <= 1.0

    def test_quality_saturates_at_cap(self):
        x = np.zeros(100)
        x[[10, 30, 50, 70, 90]] = 100.0
        score = ConfidenceScorer(2, snr_cap=1.0).score(x, np.array([10, 30, 50, 70, 90]))
        assert score == pytest.approx(1.0)
