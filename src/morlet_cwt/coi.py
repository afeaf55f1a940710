"""
Cone of influence (COI) of the Morlet transform.
"""
# Standard library imports
from dataclasses import dataclass, field
from typing import Optional, Union

# Third-party imports
import numpy as np
from numpy.typing import ArrayLike

# Local imports
from .exceptions import ShapeMismatchError
from .kernel import fourier_factor
from .scales import ScaleGrid


def coi_half_width(scales: ArrayLike, dt: Union[int, float] = 1) -> np.ndarray:
    """
    Number of edge samples affected at each scale.

    The e-folding time of the Morlet power at scale s is ``sqrt(2)*s``;
    the half-width is that time rounded up to a whole number of samples.
    """
    scales = np.asarray(scales, dtype=float)
    return np.ceil(np.sqrt(2) * scales / dt).astype(int)


@dataclass(frozen=True, eq=False)
class EdgeMaskSurface:
    """
    Reliability of each coefficient with respect to the signal edges.

    Attributes
    ----------
    reliable : numpy.ndarray of bool
        Shape (n_scales, n_samples). True inside the cone of influence,
        False where edge padding influences the coefficient.
    half_widths : numpy.ndarray of int
        Number of unreliable samples at each edge, per scale.
    """

    reliable: np.ndarray = field(repr=False)
    half_widths: np.ndarray = field(repr=False)

    @property
    def unreliable(self) -> np.ndarray:
        return ~self.reliable

    @property
    def shape(self):
        return self.reliable.shape

    def fraction_reliable(self) -> np.ndarray:
        """Share of reliable samples per scale."""
        return self.reliable.mean(axis=1)


def compute_coi(n_samples: int, grid: ScaleGrid) -> EdgeMaskSurface:
    """
    Compute the cone-of-influence mask of a transform.

    Parameters
    ----------
    n_samples : int
        Signal length.
    grid : ScaleGrid
        Scales of the transform.

    Returns
    -------
    mask : EdgeMaskSurface
        For the scale s, the first and last ``ceil(sqrt(2)*s/dt)`` time
        indices are unreliable and no others.
    """
    n_samples = int(n_samples)
    if n_samples < 1:
        raise ShapeMismatchError(f'Signal length must be positive, got {n_samples}')
    if len(grid) == 0:
        raise ShapeMismatchError('Scale grid is empty')

    half_widths = coi_half_width(grid.scales, grid.dt)

    # Distance (in samples) of each index to the closest edge
    idx = np.arange(n_samples)
    distance = np.minimum(idx, n_samples - 1 - idx)

    reliable = distance[np.newaxis, :] >= half_widths[:, np.newaxis]
    reliable.setflags(write=False)
    half_widths.setflags(write=False)

    return EdgeMaskSurface(reliable, half_widths)


def define_coi(n: int,
               dt: Union[int, float] = 1,
               omega: Union[int, float] = 6,
               fper: Optional[ArrayLike] = None) -> np.ndarray:
    """
    Cone of influence boundary in period units.

    Parameters
    ----------
    n : int
        Signal length.
    dt : int or float, optional (default=1)
        Sampling interval.
    omega : int or float, optional (default=6)
        Central angular frequency of the Morlet wavelet.
    fper : array_like, optional
        Periods of the transform. If given, COI values are clipped below at
        the smallest period.

    Returns
    -------
    coi : numpy.ndarray
        For each time index, the longest period whose coefficient is not
        affected by the edges: ``fourier_factor / sqrt(2) * dt * d`` where
        d is the distance to the closest edge counted from 1.

    Notes
    -----
    This is the curve usually drawn over scalograms. It matches the
    boolean mask of compute_coi up to the rounding of the half-width.
    """
    coival = fourier_factor(omega) / np.sqrt(2)

    # Create distance indices from the edges, symmetric w.r.t. the center
    idx = np.arange(n)
    indices = np.minimum(idx, n - 1 - idx) + 1

    coi = coival * dt * indices

    # Ensure COI values don't go below the minimum period
    if fper is not None:
        pmin = np.min(fper)
        coi[coi < pmin] = pmin

    return coi
