"""
Approximate inverse of the Morlet transform over a band of periods.
"""
# Standard library imports
import logging
from typing import Optional, Sequence, Union

# Third-party imports
import numpy as np

# Local imports
from .exceptions import ShapeMismatchError
from .kernel import MORLET_PSI0, reconstruction_factor
from .scales import ScaleGrid

logger = logging.getLogger(__name__)


def reconstruct(wave: np.ndarray,
                grid: ScaleGrid,
                period_band: Optional[Sequence[Optional[Union[int, float]]]] = None,
                omega: Optional[Union[int, float]] = None,
                mask: Optional[np.ndarray] = None,
                mean: Optional[Union[float, np.ndarray]] = None,
                std: Optional[float] = None,
                rescale: bool = False) -> np.ndarray:
    """
    Reconstruct a real signal from wavelet coefficients.

    Parameters
    ----------
    wave : numpy.ndarray
        Complex coefficients, shape (n_scales, n_samples).
    grid : ScaleGrid
        Scale grid of the coefficients.
    period_band : sequence of two floats, optional
        Closed period band [lower, upper] of the scales to sum. Either
        bound may be None. Default is the whole grid.
    omega : int or float, optional
        Central angular frequency of the wavelet. Defaults to grid.omega.
    mask : numpy.ndarray of bool, optional
        Coefficients to keep (e.g. a ridge); others are treated as zero.
    mean : float or numpy.ndarray, optional
        Mean (or baseline per sample) of the original signal, added back to
        the result. The Morlet transform carries no information about it.
    std : float, optional
        Standard deviation of the original signal. Only used with rescale.
    rescale : bool, optional (default=False)
        If True, the result is standardised to the given mean and std.

    Returns
    -------
    x : numpy.ndarray
        Reconstructed real signal, length n_samples.

    Raises
    ------
    ShapeMismatchError
        If wave rows do not match the grid, or mask does not match wave.
    InvalidRangeError
        If the period band is inverted or non-positive.
    EmptyBandError
        If no scale of the grid lies inside the band.

    Notes
    -----
    Torrence & Compo (1998), eq. 11:

        x_t = dj * sqrt(dt) / (C_delta * psi0(0)) * sum_j Re(W(t, s_j)) / sqrt(s_j)

    that is ``C**-1 * sum_j Re(W)/sqrt(s_j) * dj`` with
    ``C = C_delta * pi**(-1/4) / sqrt(dt)``. dj must be the spacing of the
    grid in octaves, otherwise the amplitude is biased.
    """
    wave = np.asarray(wave)
    if wave.ndim != 2 or wave.shape[0] != len(grid):
        raise ShapeMismatchError(f'Coefficient surface shape {wave.shape} does not match '
                                 f'a grid of {len(grid)} scales')

    if omega is None:
        omega = grid.omega
    elif not np.isclose(omega, grid.omega):
        raise ValueError(f'omega={omega} differs from the omega of the scale grid ({grid.omega})')

    if period_band is None:
        period_band = (None, None)
    lower, upper = period_band
    idx = grid.band(lower, upper)

    coefs = np.real(wave[idx])
    if mask is not None:
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != wave.shape:
            raise ShapeMismatchError(f'Mask shape {mask.shape} does not match surface shape {wave.shape}')
        coefs = np.where(mask[idx], coefs, 0.0)

    # Normalisation constant C = C_delta * psi0(0) / sqrt(dt)
    norm = reconstruction_factor(omega) * MORLET_PSI0 / np.sqrt(grid.dt)

    x = grid.dj / norm * np.sum(coefs / np.sqrt(grid.scales[idx])[:, np.newaxis], axis=0)
    logger.debug('Reconstructed %d samples from %d scales', x.size, idx.size)

    if rescale:
        if mean is None or std is None:
            raise ValueError('rescale requires the mean and std of the original signal')
        x_std = x.std()
        x = x - x.mean()
        if x_std > 0:
            x *= std / x_std
        x += mean
    elif mean is not None:
        x = x + mean

    return x
