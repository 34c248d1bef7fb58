import numpy as np
import pytest

from eqscope.dsp.filters import Band, FilterShape, Placement, Slope, band_response, clamp_field
from eqscope.dsp.mapping import gain_to_y
from eqscope.dsp.response import band_curve, composite_curve, composite_db, frequency_response


@pytest.mark.parametrize("gain", [-30.0, -6.5, 0.0, 4.0, 30.0])
def test_bell_peaks_at_band_gain(gain):
    band = Band(index=0, freq=1234.0, gain=gain, q=3.0)
    assert band_response(1234.0, band) == gain


@pytest.mark.parametrize(
    "shape, gain, freq, expected",
    [
        (FilterShape.LOW_SHELF, 6.0, 1000.0, 3.0),
        (FilterShape.HIGH_SHELF, 6.0, 1000.0, 3.0),
        (FilterShape.LOW_CUT, 6.0, 500.0, -15.0),
        (FilterShape.LOW_CUT, 6.0, 2000.0, 0.0),
        (FilterShape.HIGH_CUT, 6.0, 2000.0, -30.0),
        (FilterShape.HIGH_CUT, 6.0, 500.0, 0.0),
        (FilterShape.NOTCH, 6.0, 1000.0, -30.0),
        (FilterShape.BAND_PASS, 6.0, 1000.0, 6.0),
        (FilterShape.TILT_SHELF, 6.0, 2000.0, 3.0),
        (FilterShape.TILT_SHELF, 12.0, 32000.0, 12.0),
        (FilterShape.ALL_PASS, 6.0, 300.0, 0.0),
        (FilterShape.BRICKWALL, 6.0, 300.0, 0.0),
    ],
)
def test_shape_formulas(shape, gain, freq, expected):
    band = Band(index=0, freq=1000.0, gain=gain, q=1.0, shape=shape)
    assert band_response(freq, band) == pytest.approx(expected)


def test_shelves_approach_gain_on_their_side():
    low = Band(index=0, freq=1000.0, gain=10.0, shape=FilterShape.LOW_SHELF)
    high = Band(index=1, freq=1000.0, gain=10.0, shape=FilterShape.HIGH_SHELF)
    assert band_response(20.0, low) == pytest.approx(10.0, abs=0.01)
    assert band_response(20000.0, low) == pytest.approx(0.0, abs=0.01)
    assert band_response(20000.0, high) == pytest.approx(10.0, abs=0.01)


def test_every_shape_has_a_response():
    freqs = np.geomspace(10, 30000, 16)
    for shape in FilterShape:
        out = band_response(freqs, Band(index=0, shape=shape, gain=5.0))
        assert out.shape == freqs.shape
        assert np.all(np.isfinite(out))


def test_composite_skips_disabled_bands():
    on = Band(index=0, freq=1000.0, gain=6.0)
    off = Band(index=1, freq=1000.0, gain=12.0, enabled=False)
    assert composite_db([on, off], 1000.0) == pytest.approx(6.0)


def test_composite_curve_shape_and_clamp():
    boost = [Band(index=i, freq=1000.0, gain=30.0, q=0.5) for i in range(3)]
    curve = composite_curve(boost, 400, 200)
    assert curve.shape == (400,)
    assert curve.min() >= 0.0
    assert curve.max() <= 200.0
    assert curve.min() == 0.0  # 90 dB of summed boost is pinned to the top


def test_flat_curve_sits_on_centre_line():
    curve = composite_curve([], 100, 300)
    np.testing.assert_allclose(curve, gain_to_y(0.0, 300))


def test_curve_rejects_empty_size():
    with pytest.raises(ValueError):
        composite_curve([], 0, 100)


def test_band_curve_columns():
    xs, ys = band_curve(Band(index=0, gain=6.0), 100, 300, step=2)
    assert xs[0] == 0 and xs[-1] == 100
    assert len(xs) == len(ys) == 51


def test_frequency_response_grid():
    freqs, db = frequency_response([Band(index=0, freq=1000.0, gain=6.0)], points=64)
    assert freqs[0] == pytest.approx(10.0)
    assert freqs[-1] == pytest.approx(30000.0)
    assert db.max() <= 6.0 + 1e-9


def test_clamp_field_domains():
    assert clamp_field("freq", 5.0) == 10.0
    assert clamp_field("gain", -45.0) == -30.0
    assert clamp_field("q", 50.0) == 30.0
    assert clamp_field("q", 0.05) == 0.1
    assert clamp_field("dynamic_ratio", 0.5) == 1.0
    assert clamp_field("dynamic_release", 9000.0) == 5000.0
    assert clamp_field("shape", 5) is FilterShape.NOTCH
    assert clamp_field("placement", 4) is Placement.SIDE
    assert clamp_field("slope", 24) is Slope.DB24
    with pytest.raises(ValueError):
        clamp_field("colour", 1)


def test_band_dict_round_trip_clamps():
    band = Band(index=7, freq=99999.0, shape=FilterShape.TILT_SHELF, dynamic_enabled=True)
    restored = Band.from_dict(band.to_dict())
    assert restored.index == 7
    assert restored.freq == 30000.0
    assert restored.shape is FilterShape.TILT_SHELF
    assert restored.dynamic_enabled is True


def test_clamp_field_replaces_nan():
    assert clamp_field("gain", float("nan")) == 0.0
    assert clamp_field("freq", float("nan")) == 1000.0
    assert clamp_field("q", float("nan"), fallback=4.0) == 4.0
    assert clamp_field("freq", float("inf")) == 30000.0


def test_nan_band_keeps_curve_finite():
    band = Band(index=0, freq=float("nan"), gain=float("nan")).clamped()
    curve = composite_curve([band], 200, 100)
    assert np.all(np.isfinite(curve))


def test_band_dict_carries_solo():
    assert Band.from_dict(Band(index=2, solo=True).to_dict()).solo is True
