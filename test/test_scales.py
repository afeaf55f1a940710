# test/test_scales.py
import numpy as np
import pytest

from morlet_cwt import (
    DegenerateGridError,
    EmptyBandError,
    InvalidRangeError,
    ScaleGrid,
    fourier_factor,
    get_dj,
    period_to_scale,
)


@pytest.mark.parametrize("lower, upper, dj", [
    (2, 200, 0.05),
    (2, 3650, 1 / 250),
    (3, 17, 0.3),
    (0.5, 1000, 0.125),
    (10, 11, 0.01),
])
def test_grid_is_increasing_with_expected_length(lower, upper, dj):
    grid = ScaleGrid.build(lower, upper, dj)

    assert len(grid) == int(np.floor(np.log2(upper / lower) / dj)) + 1
    assert np.all(np.diff(grid.scales) > 0)
    assert np.all(np.diff(grid.periods) > 0)
    assert grid.periods[0] == pytest.approx(lower)
    assert grid.periods[-1] <= upper * (1 + 1e-12)


def test_grid_is_log_spaced_by_dj():
    grid = ScaleGrid.build(2, 200, 0.05)
    np.testing.assert_allclose(np.diff(np.log2(grid.scales)), 0.05, rtol=1e-9)
    assert grid.scales[0] == pytest.approx(2 / fourier_factor(6))


def test_grid_scales_round_trip_through_periods():
    grid = ScaleGrid.build(2, 500, 0.1, omega=6)
    np.testing.assert_allclose(period_to_scale(grid.periods, 6), grid.scales, rtol=1e-12)


def test_grid_iterates_scale_period_pairs():
    grid = ScaleGrid.build(4, 64, 0.5)
    pairs = list(grid)
    assert len(pairs) == len(grid) == 9
    for (scale, period), s, p in zip(pairs, grid.scales, grid.periods):
        assert scale == s
        assert period == p


def test_grid_arrays_are_read_only():
    grid = ScaleGrid.build(2, 64, 0.5)
    with pytest.raises(ValueError):
        grid.scales[0] = 1.0


def test_grid_exact_octave_ratio_keeps_end_point():
    grid = ScaleGrid.build(2, 64, 0.5)
    assert grid.periods[-1] == pytest.approx(64)


def test_grid_dt_scales_periods_in_time_units():
    grid = ScaleGrid.build(0.5, 10, 0.25, dt=0.25)
    assert grid.dt == 0.25
    assert grid.periods[0] == pytest.approx(0.5)


def test_invalid_range_inverted_bounds():
    with pytest.raises(InvalidRangeError):
        ScaleGrid.build(100, 50, 0.05)


@pytest.mark.parametrize("lower, upper", [(0, 10), (-1, 10), (5, 5), (2, np.inf), (np.nan, 3)])
def test_invalid_range_bad_bounds(lower, upper):
    with pytest.raises(InvalidRangeError):
        ScaleGrid.build(lower, upper, 0.1)


@pytest.mark.parametrize("dj", [0, -0.1, np.nan, np.inf])
def test_degenerate_grid_bad_dj(dj):
    with pytest.raises(DegenerateGridError):
        ScaleGrid.build(2, 100, dj)


def test_nyquist_warning():
    with pytest.warns(UserWarning, match="Nyquist"):
        ScaleGrid.build(1, 100, 0.1)


def test_band_selects_inclusive_periods():
    grid = ScaleGrid.build(2, 200, 0.05)
    idx = grid.band(20, 40)
    assert np.all(grid.periods[idx] >= 20)
    assert np.all(grid.periods[idx] <= 40)
    outside = np.setdiff1d(np.arange(len(grid)), idx)
    assert np.all((grid.periods[outside] < 20) | (grid.periods[outside] > 40))


def test_band_defaults_to_full_grid():
    grid = ScaleGrid.build(2, 200, 0.05)
    np.testing.assert_array_equal(grid.band(), np.arange(len(grid)))


def test_band_outside_grid_is_empty():
    grid = ScaleGrid.build(2, 200, 0.05)
    with pytest.raises(EmptyBandError):
        grid.band(1, 1.5)


def test_band_inverted_is_invalid():
    grid = ScaleGrid.build(2, 200, 0.05)
    with pytest.raises(InvalidRangeError):
        grid.band(50, 20)


def test_from_scales_recovers_dj():
    scales = 1.5 * 2**(np.arange(20) * 0.2)
    grid = ScaleGrid.from_scales(scales)
    assert grid.dj == pytest.approx(0.2)
    np.testing.assert_allclose(grid.periods, scales * fourier_factor(6))


def test_from_scales_rejects_linear_spacing():
    with pytest.raises(DegenerateGridError):
        ScaleGrid.from_scales(np.arange(1.0, 10.0))


def test_from_scales_rejects_empty_and_unordered():
    with pytest.raises(DegenerateGridError):
        ScaleGrid.from_scales([])
    with pytest.raises(DegenerateGridError):
        ScaleGrid.from_scales([4.0, 2.0, 1.0], dj=1.0)


def test_get_dj_other_base():
    scales = 10**(np.arange(5) * 0.5)
    assert get_dj(scales, base=10) == pytest.approx(0.5)
    assert get_dj(np.array([1.0])) is None


@pytest.mark.parametrize("lower, upper", [(1000, None), (None, 1.5)])
def test_open_band_outside_grid_is_empty(lower, upper):
    grid = ScaleGrid.build(2, 200, 0.05)
    with pytest.raises(EmptyBandError):
        grid.band(lower, upper)


def test_open_band_inside_grid():
    grid = ScaleGrid.build(2, 200, 0.05)
    idx = grid.band(None, 10)
    assert idx[0] == 0
    assert grid.periods[idx[-1]] <= 10
    idx = grid.band(100, None)
    assert idx[-1] == len(grid) - 1
