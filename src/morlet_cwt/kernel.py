"""
Morlet mother wavelet and its scale/period conversions.
"""
# Standard library imports
import warnings
from functools import lru_cache
from typing import Union

# Third-party imports
import numpy as np
from numpy.typing import ArrayLike

# Value of the mother wavelet at t=0 (L2 normalisation factor)
MORLET_PSI0 = np.pi**-0.25


def morlet(t: ArrayLike, omega: Union[int, float] = 6) -> np.ndarray:
    """
    Evaluate the L2-normalised Morlet mother wavelet.

    Parameters
    ----------
    t : array_like
        Real argument(s), in units of the wavelet scale.
    omega : int or float, optional (default=6)
        Central angular frequency of the wavelet.

    Returns
    -------
    psi : numpy.ndarray
        Complex values ``pi**(-1/4) * exp(-t**2/2) * exp(1j*omega*t)``.

    Notes
    -----
    The factor ``pi**(-1/4)`` gives the wavelet unit energy. The small
    correction term that makes the Morlet wavelet strictly admissible is
    neglected, which is accurate for omega >= 6.
    """
    t = np.asarray(t, dtype=float)
    return MORLET_PSI0 * np.exp(-0.5 * t**2) * np.exp(1j * omega * t)


def fourier_factor(omega: Union[int, float] = 6) -> float:
    """
    Ratio between the Fourier period and the wavelet scale.

    The period of a sinusoid producing the strongest Morlet power at scale
    ``s`` is ``s * 4*pi / (omega + sqrt(2 + omega**2))``.
    """
    return 4 * np.pi / (omega + np.sqrt(2 + omega**2))


def scale_to_period(scales: ArrayLike, omega: Union[int, float] = 6) -> np.ndarray:
    """Convert scale(s) to Fourier period(s)."""
    return np.asarray(scales, dtype=float) * fourier_factor(omega)


def period_to_scale(periods: ArrayLike, omega: Union[int, float] = 6) -> np.ndarray:
    """Convert Fourier period(s) to scale(s). Exact inverse of scale_to_period."""
    return np.asarray(periods, dtype=float) / fourier_factor(omega)


def check_admissibility(omega: Union[int, float]) -> None:
    """Warn when the neglected admissibility term is no longer negligible."""
    if omega < 6:
        warnings.warn('The Morlet wavelet is admissible for w0 >= 6. '
                      'For lower values, additional terms cannot be neglected', UserWarning, stacklevel=3)


@lru_cache(maxsize=32)
def reconstruction_factor(omega: Union[int, float] = 6) -> float:
    """
    Reconstruction factor C_delta of the Morlet wavelet.

    Parameters
    ----------
    omega : int or float, optional (default=6)
        Central angular frequency of the wavelet.

    Returns
    -------
    cdelta : float
        Factor such that summing ``Re(W)/sqrt(s)`` over log2-spaced scales
        and multiplying by ``dj * sqrt(dt) / (cdelta * psi0(0))`` recovers the
        signal. Close to 0.776 for omega=6 (Torrence & Compo, 1998, Table 2).

    Notes
    -----
    Derived from the admissibility integral of the (analytic) Morlet
    spectrum ``psi_hat(u) = pi**(-1/4) * sqrt(2*pi) * exp(-(u-omega)**2/2)``:

        C_delta = sqrt(2*pi) / (2*ln 2) * int_0^inf exp(-(u-omega)**2/2) / u du

    The integral diverges logarithmically at 0 for a non-admissible
    wavelet, so the lower bound is taken where the Gaussian has vanished.
    """
    from scipy.integrate import quad

    omega = float(omega)
    # Integration window around the Gaussian peak
    lower = max(omega - 12.0, 1e-3)
    upper = max(omega, 0.0) + 12.0
    integral, _ = quad(lambda u: np.exp(-0.5 * (u - omega)**2) / u,
                       lower, upper, points=[max(omega, lower * 2)], limit=200)

    return float(np.sqrt(2 * np.pi) / (2 * np.log(2)) * integral)
