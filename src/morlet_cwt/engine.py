"""
Morlet continuous wavelet transform: coefficients, power, phase and derived surfaces.
"""
# Standard library imports
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Callable, Iterator, Optional, Tuple, Union

# Third-party imports
import numpy as np
from numpy.typing import ArrayLike

# Local imports
from .data_utils import prepare_signal, sig_length_and_padding
from .exceptions import ShapeMismatchError
from .kernel import morlet
from .scales import ScaleGrid

logger = logging.getLogger(__name__)

METHODS = ('fft', 'direct')


def get_fft_backend(use_pyfftw: bool = False,
                    threads: Optional[int] = None) -> Tuple[Callable, Callable]:
    """
    Return the (fft, ifft) pair used by the transform.

    pyFFTW is used when requested and importable, scipy.fft otherwise.
    """
    import scipy.fft as sp_fft

    if use_pyfftw:
        try:
            import pyfftw
            import pyfftw.interfaces.scipy_fft as fftw
        except ImportError:
            logger.info('pyfftw requested but not installed, using scipy.fft')
        else:
            # PyFFTW setup for better performance
            pyfftw.interfaces.cache.enable()
            if threads is None:
                threads = max(1, (os.cpu_count() or 2) - 1)  # Leave one core free
            return partial(fftw.fft, workers=threads), partial(fftw.ifft, workers=threads)

    return sp_fft.fft, sp_fft.ifft


def _lag_grid(n: int) -> np.ndarray:
    # Circular lags 0, 1, ..., n//2, -(n - n//2 - 1), ..., -1
    lags = np.arange(n, dtype=float)
    lags[lags > n // 2] -= n
    return lags


def scaled_kernel(n: int,
                  dt: Union[int, float],
                  scales: ArrayLike,
                  omega: Union[int, float] = 6) -> np.ndarray:
    """
    Sample ``sqrt(dt/s) * psi(lag*dt/s)`` on the circular lag grid of length n.

    Returns an array of shape (n_scales, n).
    """
    scales = np.atleast_1d(np.asarray(scales, dtype=float))[:, np.newaxis]
    lags = _lag_grid(n) * dt
    return np.sqrt(dt / scales) * morlet(lags / scales, omega)


def compute_psi(n: int,
                dt: Union[int, float],
                scales: ArrayLike,
                omega: Union[int, float] = 6,
                fft: Optional[Callable] = None) -> np.ndarray:
    """
    Compute the correlation filters of the scaled wavelets in Fourier space.

    Parameters
    ----------
    n : int
        Length of the signal (after padding if applicable).
    dt : int or float
        Sampling interval.
    scales : array_like
        Scales at which to compute the wavelet transform.
    omega : int or float, optional (default=6)
        Central angular frequency of the Morlet wavelet.
    fft : callable, optional
        FFT function (defaults to scipy.fft.fft).

    Returns
    -------
    psiscaled_ft : numpy.ndarray
        Conjugated DFT of the sampled scaled wavelets, shape (n_scales, n).
        Multiplying the signal's DFT by a row and inverting yields the
        circular correlation of the signal with that wavelet.

    Notes
    -----
    The wavelet is sampled in the time domain and transformed, rather than
    evaluated with its analytic Fourier transform, so that the FFT path
    reproduces the direct sum exactly (including at scales close to the
    Nyquist limit, where the analytic spectrum would be truncated).
    """
    if fft is None:
        import scipy.fft as sp_fft
        fft = sp_fft.fft

    return np.conj(fft(scaled_kernel(n, dt, scales, omega), axis=1))


def compute_wavelet_coef(x: np.ndarray,
                         scales: ArrayLike,
                         dt: Union[int, float] = 1,
                         omega: Union[int, float] = 6,
                         chunk_size: Optional[int] = None,
                         use_pyfftw: bool = False,
                         workers: Optional[int] = None) -> np.ndarray:
    """
    Compute wavelet coefficients using the FFT correlation method.

    Parameters
    ----------
    x : numpy.ndarray
        1D (padded) signal to analyze.
    scales : array_like
        Scales at which to compute the wavelet transform.
    dt : int or float, optional (default=1)
        Sampling interval.
    omega : int or float, optional (default=6)
        Central angular frequency of the Morlet wavelet.
    chunk_size : int, optional (default=None)
        Number of scales processed at once. If None, all scales are
        processed together. Use this for very large scale arrays.
    use_pyfftw : bool, optional (default=False)
        Whether to use the pyfftw library for the FFTs.
    workers : int, optional (default=None)
        Number of threads processing chunks concurrently. Only used
        when chunk_size splits the scales in more than one chunk.

    Returns
    -------
    wave : numpy.ndarray
        Circular wavelet coefficients with shape (n_scales, len(x)).

    Notes
    -----
    The computation follows these steps:
    1. FFT of the input signal (computed once)
    2. Multiplication with the scaled wavelet filters (per chunk of scales)
    3. Inverse FFT to obtain wavelet coefficients

    Each chunk writes a disjoint block of rows, so chunks can run in
    parallel without locking. Any failure in a chunk propagates.
    """
    x = np.asarray(x)
    if x.ndim != 1:
        raise ShapeMismatchError(f'x must be a 1D signal, got shape {x.shape}')
    scales = np.atleast_1d(np.asarray(scales, dtype=float))
    n_scales, n_signal = len(scales), x.size
    if n_scales == 0:
        raise ShapeMismatchError('No scale to compute')

    fft, ifft = get_fft_backend(use_pyfftw)

    # Compute FFT of the input signal (only once)
    y_ft = fft(x)

    # Prepare output array for results
    try:
        wave = np.empty((n_scales, n_signal), dtype=np.complex128)
    except MemoryError:
        suggested_chunk = max(1, n_scales // 4)
        raise MemoryError('Not enough memory to allocate the coefficient array. '
                          f'Try streaming rows with iter_power_rows, or chunk_size={suggested_chunk}.')

    if chunk_size is None or chunk_size >= n_scales:
        chunk_indices = [(0, n_scales)]
    else:
        if chunk_size < 1:
            raise ValueError(f'chunk_size must be a positive integer, got {chunk_size}')
        chunk_indices = [(i, min(i + chunk_size, n_scales)) for i in range(0, n_scales, chunk_size)]

    # Function to process a single chunk of scales
    def process_chunk(chunk_bounds: Tuple[int, int]) -> None:
        chunk_start, chunk_end = chunk_bounds
        psi_ft = compute_psi(n_signal, dt, scales[chunk_start:chunk_end], omega, fft)
        wave[chunk_start:chunk_end] = ifft(y_ft * psi_ft, axis=1)

    if workers is not None and workers > 1 and len(chunk_indices) > 1:
        logger.debug('Processing %d chunks of scales with %d threads', len(chunk_indices), workers)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # Consuming the iterator re-raises the first failure
            list(executor.map(process_chunk, chunk_indices))
    else:
        for bounds in chunk_indices:
            process_chunk(bounds)

    return wave


def compute_wavelet_coef_direct(y: np.ndarray,
                                scales: ArrayLike,
                                dt: Union[int, float] = 1,
                                omega: Union[int, float] = 6) -> np.ndarray:
    """
    Compute wavelet coefficients by direct summation.

    ``W(tau, s) = sum_t y[t] * sqrt(dt/s) * conj(psi((t - tau)*dt/s))``,
    with implicit zeros outside the signal. Cost is O(n_scales * n**2):
    meant for short signals and for checking the FFT path.
    """
    y = np.asarray(y, dtype=float)
    scales = np.atleast_1d(np.asarray(scales, dtype=float))
    n = y.size

    # lags[tau, t] = (t - tau) * dt
    t = np.arange(n)
    lags = (t[np.newaxis, :] - t[:, np.newaxis]) * float(dt)

    wave = np.empty((len(scales), n), dtype=np.complex128)
    for j, s in enumerate(scales):
        wave[j] = np.conj(morlet(lags / s, omega)) @ y * np.sqrt(dt / s)
    return wave


def _check_grid(grid: ScaleGrid) -> None:
    if not isinstance(grid, ScaleGrid):
        raise TypeError(f'grid must be a ScaleGrid, not a {type(grid).__name__}')
    if len(grid) == 0:
        raise ShapeMismatchError('Scale grid is empty')


def transform(y: ArrayLike,
              grid: ScaleGrid,
              padding: str = 'symmetric',
              padmode: str = 'b',
              method: str = 'fft',
              chunk_size: Optional[int] = None,
              use_pyfftw: bool = False,
              workers: Optional[int] = None) -> np.ndarray:
    """
    Continuous Morlet wavelet transform of a regularly sampled signal.

    Parameters
    ----------
    y : array_like
        1D signal, finite values only. Used unmodified.
    grid : ScaleGrid
        Scales to probe; also provides omega and dt.
    padding : str, optional (default='symmetric')
        Padding applied before the FFT ('zero', 'symmetric', 'reflect',
        'periodic' or 'none'). See data_utils.sig_length_and_padding.
    padmode : str, optional (default='b')
        Side(s) of the signal to pad.
    method : str, optional (default='fft')
        'fft' for frequency-domain correlation, 'direct' for the explicit
        sum (zero outside the signal, padding ignored).
    chunk_size, use_pyfftw, workers
        Processing options, see compute_wavelet_coef.

    Returns
    -------
    wave : numpy.ndarray
        Read-only complex coefficients, shape (n_scales, n_samples).

    Raises
    ------
    NonFiniteInputError
        If y contains NaN or infinite values.
    ShapeMismatchError
        If y is not a non-empty 1D signal or the grid is empty.
    TypeError
        If y is complex or grid is not a ScaleGrid.
    """
    _check_grid(grid)
    y = prepare_signal(y)
    method = str(method).lower()
    if method not in METHODS:
        raise ValueError(f'Method "{method}" invalid. Please use one of {METHODS}')

    if method == 'direct':
        wave = compute_wavelet_coef_direct(y, grid.scales, grid.dt, grid.omega)
    else:
        apply_padding, remove_padding, _ = sig_length_and_padding(y.size, padding, padmode)
        y_ext = y if apply_padding is None else apply_padding(y)
        wave = compute_wavelet_coef(y_ext, grid.scales, grid.dt, grid.omega,
                                    chunk_size, use_pyfftw, workers)
        if remove_padding is not None:
            wave = np.ascontiguousarray(remove_padding(wave))

    if wave.shape != (len(grid), y.size):
        raise ShapeMismatchError(f'Coefficient surface shape {wave.shape} does not match '
                                 f'grid and signal ({len(grid)}, {y.size})')

    wave.setflags(write=False)
    return wave


def iter_power_rows(y: ArrayLike,
                    grid: ScaleGrid,
                    padding: str = 'symmetric',
                    padmode: str = 'b',
                    use_pyfftw: bool = False) -> Iterator[Tuple[float, np.ndarray]]:
    """
    Stream the power spectrum one scale at a time.

    Yields ``(period, power_row)`` in increasing period order. Only one
    row of coefficients is held in memory at a time; the rows equal the
    rows of ``power_spectrum(transform(y, grid, padding, padmode))``.
    """
    _check_grid(grid)
    y = prepare_signal(y)
    fft, ifft = get_fft_backend(use_pyfftw)

    apply_padding, remove_padding, n_ext = sig_length_and_padding(y.size, padding, padmode)
    y_ext = y if apply_padding is None else apply_padding(y)
    y_ft = fft(y_ext)

    for scale, period in grid:
        row = ifft(y_ft * compute_psi(n_ext, grid.dt, [scale], grid.omega, fft), axis=1)
        if remove_padding is not None:
            row = remove_padding(row)
        yield period, np.abs(row[0])**2


def power_spectrum(wave: np.ndarray) -> np.ndarray:
    """Wavelet power |W|**2."""
    return np.abs(wave)**2


def phase_spectrum(wave: np.ndarray) -> np.ndarray:
    """Wavelet phase arg(W), in (-pi, pi]."""
    return np.angle(wave)


def average_power(power: np.ndarray, mask: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Time-averaged power for each scale.

    Parameters
    ----------
    power : numpy.ndarray
        Power surface, shape (n_scales, n_samples).
    mask : numpy.ndarray of bool, optional
        Entries to include (e.g. EdgeMaskSurface.reliable). Scales without
        any included entry average to NaN.

    Returns
    -------
    avg : numpy.ndarray
        Averaged power, shape (n_scales,).
    """
    power = np.asarray(power, dtype=float)
    if mask is None:
        return power.mean(axis=1)

    mask = np.asarray(mask, dtype=bool)
    if mask.shape != power.shape:
        raise ShapeMismatchError(f'Mask shape {mask.shape} does not match power shape {power.shape}')

    counts = mask.sum(axis=1)
    sums = np.where(mask, power, 0.0).sum(axis=1)
    avg = np.full(power.shape[0], np.nan)
    np.divide(sums, counts, out=avg, where=counts > 0)
    return avg


def ridge(power: np.ndarray, band: int = 5, scale_factor: float = 0.1) -> np.ndarray:
    """
    Ridge of the power surface.

    An entry belongs to the ridge when it is the maximum of its column
    within ``band`` scales on either side and exceeds
    ``scale_factor * max(power)``.

    Returns a boolean array with the shape of power.
    """
    from scipy.ndimage import maximum_filter1d

    power = np.asarray(power, dtype=float)
    if power.ndim != 2:
        raise ShapeMismatchError(f'power must be 2D, got shape {power.shape}')
    if band < 1:
        raise ValueError(f'band must be a positive integer, got {band}')

    local_max = maximum_filter1d(power, size=2 * band + 1, axis=0, mode='nearest')
    return (power == local_max) & (power > scale_factor * power.max())
