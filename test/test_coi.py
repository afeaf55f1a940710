# test/test_coi.py
import numpy as np
import pytest

from morlet_cwt import ScaleGrid, ShapeMismatchError, compute_coi, define_coi, fourier_factor
from morlet_cwt.coi import coi_half_width


@pytest.mark.parametrize("n, dt", [(500, 1.0), (101, 1.0), (240, 0.5), (7, 1.0)])
def test_unreliable_indices_are_exactly_the_edges(n, dt):
    grid = ScaleGrid.build(2 * dt, 400 * dt, 0.1, dt=dt)
    mask = compute_coi(n, grid)
    idx = np.arange(n)

    assert mask.shape == (len(grid), n)
    for j, s in enumerate(grid.scales):
        w = int(np.ceil(np.sqrt(2) * s / dt))
        expected = (idx < w) | (idx >= n - w)
        np.testing.assert_array_equal(mask.unreliable[j], expected)


def test_mask_is_symmetric_and_shrinks_with_scale():
    grid = ScaleGrid.build(2, 100, 0.1)
    mask = compute_coi(300, grid)
    np.testing.assert_array_equal(mask.reliable, mask.reliable[:, ::-1])
    frac = mask.fraction_reliable()
    assert np.all(np.diff(frac) <= 0)


def test_half_widths_and_read_only():
    grid = ScaleGrid.build(2, 100, 0.1)
    mask = compute_coi(300, grid)
    np.testing.assert_array_equal(mask.half_widths, coi_half_width(grid.scales))
    with pytest.raises(ValueError):
        mask.reliable[0, 0] = True


def test_compute_coi_rejects_bad_length():
    with pytest.raises(ShapeMismatchError):
        compute_coi(0, ScaleGrid.build(2, 10, 0.5))


def test_define_coi_boundary():
    n = 11
    coi = define_coi(n, dt=1, omega=6)
    expected = fourier_factor(6) / np.sqrt(2) * np.array([1, 2, 3, 4, 5, 6, 5, 4, 3, 2, 1])
    np.testing.assert_allclose(coi, expected)


def test_define_coi_clipped_at_smallest_period():
    coi = define_coi(50, dt=1, omega=6, fper=[4.0, 8.0])
    assert coi.min() == pytest.approx(4.0)
    assert coi.max() == pytest.approx(fourier_factor(6) / np.sqrt(2) * 25)
