"""
Scale discretisation of the Morlet transform.
"""
# Standard library imports
import logging
import warnings
from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, Union

# Third-party imports
import numpy as np
from numpy.typing import ArrayLike

# Local imports
from .exceptions import DegenerateGridError, EmptyBandError, InvalidRangeError
from .kernel import fourier_factor

logger = logging.getLogger(__name__)

# Absolute slack when flooring log2 ratios (exact octave ratios)
_LOG_TOL = 1e-9


def _check_bounds(lower: float, upper: float, what: str = 'period') -> None:
    if not (np.isfinite(lower) and np.isfinite(upper)):
        raise InvalidRangeError(f'{what} bounds must be finite, got [{lower}, {upper}]')
    if lower <= 0 or upper <= 0:
        raise InvalidRangeError(f'{what} bounds must be positive, got [{lower}, {upper}]')
    if lower >= upper:
        raise InvalidRangeError(f'lower {what} ({lower}) must be strictly smaller than upper {what} ({upper})')


def define_scales(fourier_fac: float,
                  dt: Union[int, float],
                  dj: Union[int, float],
                  permin: Union[int, float],
                  permax: Union[int, float]) -> np.ndarray:
    """
    Define logarithmically spaced scales between two periods.

    Parameters
    ----------
    fourier_fac : float
        Fourier factor (ratio of period to scale).
    dt : float, int
        Sampling interval. Only used for the Nyquist check.
    dj : float, int
        Scale resolution, in octaves (log2 units).
    permin : float, int
        Smallest period to analyze.
    permax : float, int
        Largest period to analyze.

    Returns
    -------
    scales : numpy.ndarray
        ``s0 * 2**(k*dj)`` for ``k = 0..J`` with
        ``J = floor(log2(permax/permin)/dj)``.

    Raises
    ------
    InvalidRangeError
        If the period bounds are not finite with 0 < permin < permax.
    DegenerateGridError
        If dj is not a positive finite number or no scale fits.
    """
    _check_bounds(permin, permax)
    if not (np.isfinite(dj) and dj > 0):
        raise DegenerateGridError(f'dj must be a positive finite number, got {dj}')

    if permin < 2 * dt:
        warnings.warn('permin does not respect the Nyquist frequency. \n A value of 2*dt is recommended',
                      UserWarning, stacklevel=3)

    # Converting periods to scales using the Fourier factor
    s0 = permin / fourier_fac
    smax = permax / fourier_fac

    # Maximal index for scales (log computation)
    J = int(np.floor(np.log2(smax / s0) / dj + _LOG_TOL))
    if J + 1 < 1:
        raise DegenerateGridError(f'Scale grid between periods {permin} and {permax} with dj={dj} is empty')

    # Scales for which wavelets are computed
    return s0 * 2**(np.arange(0, J + 1) * dj)


def convert_scales(scales: np.ndarray,
                   fourier_fac: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert wavelet scales to periods and frequencies.

    Parameters
    ----------
    scales : numpy.ndarray
        Array of scales used in the wavelet transform.
    fourier_fac : float
        Fourier factor for the wavelet.

    Returns
    -------
    periods : numpy.ndarray
        Periods corresponding to the scales (units of dt).
    frequencies : numpy.ndarray
        Inverse of the periods.
    """
    periods = fourier_fac * np.asarray(scales, dtype=float)
    return periods, 1.0 / periods


def get_dj(scales: np.ndarray, base: Union[int, float] = 2) -> Optional[float]:
    """
    Recover the logarithmic resolution of a scale array.

    Parameters
    ----------
    scales : numpy.ndarray
        Array of scales.
    base : int or float
        Base of the logarithm (default is 2).

    Returns
    -------
    dj : float or None
        Spacing parameter in ``s_j = s_0 * base**(j*dj)``, or None if the
        scales are not logarithmically spaced or fewer than 2 are given.
    """
    scales = np.asarray(scales, dtype=float)
    if len(scales) < 2:
        return None

    log_scales = np.log2(scales)
    if len(scales) > 2 and not np.all(np.abs(np.diff(np.diff(log_scales))) < 1e-10):
        return None

    dj = (log_scales[-1] - log_scales[0]) / (len(scales) - 1)
    if base != 2:
        dj /= np.log2(base)
    return float(dj)


def _readonly(a: np.ndarray) -> np.ndarray:
    a = np.array(a, dtype=float)
    a.setflags(write=False)
    return a


@dataclass(frozen=True, eq=False)
class ScaleGrid:
    """
    Ordered, strictly increasing set of scales and their Fourier periods.

    Attributes
    ----------
    scales : numpy.ndarray
        Wavelet scales (units of dt), read-only.
    periods : numpy.ndarray
        Fourier periods (units of dt), read-only.
    dj : float
        Spacing between consecutive scales in octaves.
    omega : float
        Central angular frequency of the Morlet wavelet.
    dt : float
        Sampling interval the grid was built for.
    """

    scales: np.ndarray = field(repr=False)
    periods: np.ndarray = field(repr=False)
    dj: float
    omega: float = 6.0
    dt: float = 1.0

    @classmethod
    def build(cls,
              lower_period: Union[int, float],
              upper_period: Union[int, float],
              dj: Union[int, float],
              omega: Union[int, float] = 6,
              dt: Union[int, float] = 1) -> "ScaleGrid":
        """Grid of ``1 + floor(log2(upper/lower)/dj)`` scales starting at lower_period."""
        ff = fourier_factor(omega)
        scales = define_scales(ff, dt, dj, lower_period, upper_period)
        periods, _ = convert_scales(scales, ff)
        logger.debug('Scale grid: %d scales, periods %.6g to %.6g (dj=%g)',
                     len(scales), periods[0], periods[-1], dj)
        return cls(_readonly(scales), _readonly(periods), float(dj), float(omega), float(dt))

    @classmethod
    def from_scales(cls,
                    scales: ArrayLike,
                    omega: Union[int, float] = 6,
                    dt: Union[int, float] = 1,
                    dj: Optional[float] = None) -> "ScaleGrid":
        """
        Wrap explicit scales. dj is recovered from the spacing when not given.

        Raises DegenerateGridError for an empty or non-increasing array, or
        when dj cannot be deduced (not log-spaced, single scale).
        """
        scales = np.asarray(scales, dtype=float).ravel()
        if scales.size == 0:
            raise DegenerateGridError('Scale array is empty')
        if not np.all(np.isfinite(scales)) or np.any(scales <= 0):
            raise DegenerateGridError('Scales must be positive finite values')
        if np.any(np.diff(scales) <= 0):
            raise DegenerateGridError('Scales must be strictly increasing')
        if dj is None:
            dj = get_dj(scales)
            if dj is None:
                raise DegenerateGridError('Unable to deduce dj: scales are not logarithmically spaced')

        periods, _ = convert_scales(scales, fourier_factor(omega))
        return cls(_readonly(scales), _readonly(periods), float(dj), float(omega), float(dt))

    def __len__(self) -> int:
        return len(self.scales)

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        return zip(self.scales.tolist(), self.periods.tolist())

    @property
    def frequencies(self) -> np.ndarray:
        return 1.0 / self.periods

    def band(self,
             lower_period: Optional[Union[int, float]] = None,
             upper_period: Optional[Union[int, float]] = None) -> np.ndarray:
        """
        Row indices of the scales whose period lies in [lower_period, upper_period].

        Missing bounds default to the grid limits.

        Raises
        ------
        InvalidRangeError
            If a bound is not positive, or both bounds are given with lower > upper.
        EmptyBandError
            If no period of the grid lies inside the band.
        """
        lower = self.periods[0] if lower_period is None else float(lower_period)
        upper = self.periods[-1] if upper_period is None else float(upper_period)
        if not (np.isfinite(lower) and np.isfinite(upper)) or lower <= 0 or upper <= 0:
            raise InvalidRangeError(f'Invalid period band [{lower}, {upper}]')
        # Open bounds take the grid limits
        if lower_period is not None and upper_period is not None and lower > upper:
            raise InvalidRangeError(f'Invalid period band [{lower}, {upper}]: lower bound above upper bound')

        # Relative slack so that the grid's own end points are always selected
        tol = 1e-12 * upper
        idx = np.flatnonzero((self.periods >= lower - tol) & (self.periods <= upper + tol))
        if idx.size == 0:
            raise EmptyBandError(f'No scale with period in [{lower}, {upper}]; '
                                 f'grid covers [{self.periods[0]:.6g}, {self.periods[-1]:.6g}]')
        return idx
