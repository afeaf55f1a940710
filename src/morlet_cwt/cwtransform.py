"""
High-level interface of the Morlet continuous wavelet transform.
"""
# Standard library imports
import logging
from typing import Iterator, Optional, Sequence, Tuple, Union, TYPE_CHECKING

# Third-party imports
import numpy as np

# Local imports
from . import data_utils
from .coi import compute_coi, define_coi
from .config import CWTConfig, get_args
from .kernel import check_admissibility
from .inverse import reconstruct
from .scales import ScaleGrid
from .engine import (average_power, iter_power_rows, phase_spectrum,
                        power_spectrum, ridge, transform)

# Variable type hints
if TYPE_CHECKING:
    import pandas as pd
    from numpy.typing import ArrayLike

logger = logging.getLogger(__name__)


def _readonly(a: np.ndarray) -> np.ndarray:
    a.setflags(write=False)
    return a


class WaveletTransform():
    '''
    Continuous Wavelet Transform (CWT) of a regularly sampled series with the Morlet wavelet.

    Parameters
    ----------
    y : array_like, pandas.Series or pandas.DataFrame, optional
        Series to analyze. If provided at initialization, the transform is
        computed immediately. A datetime index (or 'time' column) is kept as
        xdata for the output boundary.
    config : CWTConfig, optional
        Analysis parameters. If None, built from the keyword arguments.
    xdata : array_like, optional
        Timestamps of the samples. Not used by the computation.
    **args : dict
        Keyword arguments of CWTConfig (or their aliases, see
        config.get_args) when config is not given.

    Attributes
    ----------
    wave : numpy.ndarray
        Complex wavelet coefficients, shape (n_scales, n_samples), read-only.
    grid : ScaleGrid
        Scales and periods of the transform.
    coi_mask : EdgeMaskSurface
        Reliability of each coefficient with respect to the signal edges.
    coi : numpy.ndarray
        Cone of influence boundary in period units, per time index.
    xdata : array_like or None
        Timestamps of the analyzed series.

    Examples
    --------
    >>> wt = WaveletTransform(y, dt=1, lower_period=2, upper_period=200, dj=0.05)
    >>> wt.dominant_period()
    >>> band = wt.reconstruct(period_band=(20, 40))
    '''

    def __init__(self,
                 y: Optional[Union["ArrayLike", "pd.Series", "pd.DataFrame"]] = None,
                 config: Optional[CWTConfig] = None,
                 xdata: Optional["ArrayLike"] = None,
                 **args):
        if config is None:
            config = get_args(**args)
        elif args:
            raise TypeError('Pass either a CWTConfig or keyword arguments, not both')
        self.config = config
        check_admissibility(config.omega)

        # Run cwt if signal provided
        if y is not None:
            self.cwt(y, xdata=xdata)

    def cwt(self,
            y: Union["ArrayLike", "pd.Series", "pd.DataFrame"],
            xdata: Optional["ArrayLike"] = None):
        """
        Compute the Continuous Wavelet Transform of a signal.

        Parameters
        ----------
        y : array_like, pandas.Series or pandas.DataFrame
            Input signal to analyze.
        xdata : array_like, optional
            Timestamps of the samples.

        Returns
        -------
        self : WaveletTransform
            Results are stored as attributes of the instance.

        Notes
        -----
        This method performs these steps in sequence:
        1. Extract signal and timestamps, reject non-finite samples
        2. Detrend (if requested)
        3. Compute the scale grid
        4. Compute wavelet coefficients (padding handled by the transform)
        5. Compute the cone of influence
        """
        cfg = self.config

        # Extract signal and xdata
        y, xdata = data_utils.extract_signal_and_time(y, xdata)
        y_raw = y
        y = data_utils.prepare_signal(y, cfg.detrend)

        if cfg.compute_p_values:
            logger.info('Significance testing is not available; compute_p_values is ignored')

        n = y.size
        self.n = n
        self.xdata = xdata
        self.mean = float(np.mean(y_raw))
        self.std = float(np.std(y_raw))
        # Part of the signal the transform cannot represent (mean and removed trend)
        self.baseline = _readonly((y_raw - y) + np.mean(y))

        # Scales and periods
        lower, upper = cfg.resolve_periods(n)
        self.grid = ScaleGrid.build(lower, upper, cfg.dj, cfg.omega, cfg.dt)

        # Compute wavelet coefficients
        self.wave = transform(y, self.grid, cfg.padding, cfg.padmode, cfg.method,
                              cfg.chunk_size, cfg.use_pyfftw, cfg.workers)

        # Cone of influence
        self.coi_mask = compute_coi(n, self.grid)
        self.coi = _readonly(define_coi(n, cfg.dt, cfg.omega, self.grid.periods))

        logger.debug('CWT of %d samples over %d scales done', n, len(self.grid))
        return self

    def _require_wave(self):
        if not hasattr(self, 'wave'):
            raise AttributeError('wave attribute not found. Please run cwt first.')

    @property
    def scales(self) -> np.ndarray:
        self._require_wave()
        return self.grid.scales

    @property
    def periods(self) -> np.ndarray:
        self._require_wave()
        return self.grid.periods

    @property
    def power(self) -> np.ndarray:
        """Wavelet power |W|**2."""
        self._require_wave()
        return _readonly(power_spectrum(self.wave))

    @property
    def phase(self) -> np.ndarray:
        """Wavelet phase arg(W)."""
        self._require_wave()
        return _readonly(phase_spectrum(self.wave))

    def average_power(self, exclude_coi: bool = True) -> np.ndarray:
        """
        Time-averaged power per period.

        Parameters
        ----------
        exclude_coi : bool, optional (default=True)
            Average only the coefficients inside the cone of influence.
        """
        self._require_wave()
        mask = self.coi_mask.reliable if exclude_coi else None
        return average_power(power_spectrum(self.wave), mask)

    def dominant_period(self, exclude_coi: bool = True) -> float:
        """Period with the largest time-averaged power."""
        avg = self.average_power(exclude_coi)
        if np.all(np.isnan(avg)):
            raise ValueError('No coefficient inside the cone of influence')
        return float(self.grid.periods[np.nanargmax(avg)])

    def ridge(self, band: int = 5, scale_factor: float = 0.1) -> np.ndarray:
        """Ridge of the power surface, see engine.ridge."""
        self._require_wave()
        return ridge(power_spectrum(self.wave), band, scale_factor)

    def reconstruct(self,
                    period_band: Optional[Sequence[Optional[float]]] = None,
                    only_ridge: bool = False,
                    only_coi: bool = False,
                    rescale: bool = False,
                    as_series: bool = False) -> Union[np.ndarray, "pd.Series"]:
        '''
        Reconstruct the series from the coefficients of a period band.

        Parameters
        ----------
        period_band : sequence of two floats, optional
            Closed band [lower, upper] of periods to use. Default is all.
        only_ridge : bool, optional (default=False)
            Use only the coefficients on the power ridge.
        only_coi : bool, optional (default=False)
            Use only the coefficients inside the cone of influence.
        rescale : bool, optional (default=False)
            Standardise the result to the mean and standard deviation of the
            input series. Otherwise the input mean (and the removed trend,
            if detrended) is added back.
        as_series : bool, optional (default=False)
            Return a pandas.Series indexed by xdata (or by position).

        Returns
        -------
        x : numpy.ndarray or pandas.Series
            Reconstructed series, same length as the input.
        '''
        self._require_wave()

        mask = None
        if only_ridge:
            mask = self.ridge()
        if only_coi:
            mask = self.coi_mask.reliable if mask is None else mask & self.coi_mask.reliable

        if rescale:
            x = reconstruct(self.wave, self.grid, period_band, mask=mask,
                            mean=self.mean, std=self.std, rescale=True)
        else:
            x = reconstruct(self.wave, self.grid, period_band, mask=mask, mean=self.baseline)

        if as_series:
            import pandas as pd

            index = None if self.xdata is None else pd.Index(self.xdata)
            return pd.Series(x, index=index, name='reconstruction')
        return x

    def stream_power(self,
                     y: Union["ArrayLike", "pd.Series", "pd.DataFrame"]) -> Iterator[Tuple[float, np.ndarray]]:
        """
        Stream (period, power_row) pairs of a signal without storing the coefficients.

        Uses the configuration of this instance; does not modify its attributes.
        """
        cfg = self.config
        y, _ = data_utils.extract_signal_and_time(y)
        y = data_utils.prepare_signal(y, cfg.detrend)
        lower, upper = cfg.resolve_periods(y.size)
        grid = ScaleGrid.build(lower, upper, cfg.dj, cfg.omega, cfg.dt)
        return iter_power_rows(y, grid, cfg.padding, cfg.padmode, cfg.use_pyfftw)
