"""
Input boundary helpers: signal extraction, validation, detrending and padding.
"""
# Standard library imports
import logging
from typing import Callable, Optional, Tuple, Union, TYPE_CHECKING

# Third-party imports
import numpy as np
from numpy.typing import ArrayLike

# Local imports
from .exceptions import NonFiniteInputError, ShapeMismatchError

# Variable type hints
if TYPE_CHECKING:
    import pandas as pd

logger = logging.getLogger(__name__)

# Padding methods and their numpy.pad modes
PAD_MODES = {
    'zero': 'constant',
    'symmetric': 'symmetric',
    'reflect': 'reflect',
    'periodic': 'wrap',
}
# Short names accepted as aliases
_PAD_ALIASES = {'zpd': 'zero', 'sym': 'symmetric', 'ref': 'reflect', 'per': 'periodic', 'non': 'none'}


def extract_signal_and_time(y: Union[ArrayLike, "pd.DataFrame", "pd.Series"],
                            xdata: Optional[ArrayLike] = None
                            ) -> Tuple[np.ndarray, Optional[ArrayLike]]:
    """
    Extract a single real signal and its x-axis from various input types.

    Parameters
    ----------
    y : array_like, pandas.Series or pandas.DataFrame
        The input signal. A DataFrame must hold one value column, optionally
        next to a 'time', 'datetime' or 'xdata' column.
    xdata : array_like, optional
        Timestamps or x-axis values. If None, taken from the DataFrame time
        column or from a datetime index when available.

    Returns
    -------
    y : numpy.ndarray
        The signal as a 1D float64 array (a copy).
    xdata : array_like or None
        Timestamps for the output boundary, or None.

    Raises
    ------
    ShapeMismatchError
        If the signal is empty, not one-dimensional, or xdata has a different length.
    TypeError
        If the input type is not supported or the values are complex.
    """
    import pandas as pd

    if isinstance(y, pd.DataFrame):
        if y.empty:
            raise ShapeMismatchError('y must contain at least one sample (DataFrame is empty)')
        cols = list(y.columns)
        columns_lower = [str(col).lower() for col in cols]

        # Look for an x-axis column
        time_col = None
        for name in ('xdata', 'time', 'datetime'):
            if name in columns_lower:
                time_col = cols[columns_lower.index(name)]
                break
        if time_col is not None:
            if xdata is None:
                xdata = y[time_col].to_numpy()
            cols.remove(time_col)
        elif xdata is None and pd.api.types.is_datetime64_any_dtype(y.index):
            xdata = y.index

        if len(cols) != 1:
            raise ShapeMismatchError(f'DataFrame must hold exactly one signal column, found {len(cols)}')
        check_real(y[cols[0]].to_numpy())
        y = y[cols[0]].to_numpy(dtype=float)

    elif isinstance(y, pd.Series):
        if y.empty:
            raise ShapeMismatchError('y must contain at least one sample (Series is empty)')
        if xdata is None and not isinstance(y.index, pd.RangeIndex):
            xdata = y.index
        check_real(y.to_numpy())
        y = y.to_numpy(dtype=float)

    elif isinstance(y, (np.ndarray, list, tuple)) or hasattr(y, '__array__'):
        check_real(y)
        try:
            y = np.asarray(y, dtype=float)
        except (TypeError, ValueError):
            raise TypeError('y must contain numeric values')

    else:
        raise TypeError(f'y must be a numeric array, not a {type(y).__name__}')

    y = np.array(y, dtype=float).squeeze()
    if y.ndim != 1:
        raise ShapeMismatchError(f'y must be a single 1D signal, got shape {y.shape}')
    if y.size == 0:
        raise ShapeMismatchError('y must contain at least one sample')

    if xdata is not None and len(xdata) != y.size:
        raise ShapeMismatchError(f'xdata length ({len(xdata)}) does not match signal length ({y.size})')

    return y, xdata


def check_real(y: ArrayLike) -> None:
    """Reject complex signals: the transform is defined for real samples only."""
    if np.iscomplexobj(y):
        raise TypeError('y must be a real signal, got complex values')


def check_finite(y: np.ndarray) -> None:
    """Reject signals containing NaN or infinite samples."""
    bad = ~np.isfinite(y)
    if np.any(bad):
        first = int(np.flatnonzero(bad)[0])
        raise NonFiniteInputError(f'Signal contains {int(bad.sum())} non-finite sample(s) '
                                  f'(first at index {first})')


def prepare_signal(y: np.ndarray, detrend: bool = False) -> np.ndarray:
    """
    Validate a signal and optionally remove its linear trend.

    Parameters
    ----------
    y : numpy.ndarray
        1D signal.
    detrend : bool, optional (default=False)
        If True, a least-squares linear trend is removed. Otherwise the
        signal is returned unmodified (as a float copy).

    Returns
    -------
    y : numpy.ndarray
        Signal to transform.
    """
    check_real(y)
    y = np.array(y, dtype=float)
    if y.ndim != 1 or y.size == 0:
        raise ShapeMismatchError(f'Signal must be a non-empty 1D array, got shape {y.shape}')
    check_finite(y)

    if detrend:
        from scipy.signal import detrend as linear_detrend

        y = linear_detrend(y, type='linear')
        logger.debug('Removed linear trend from signal of length %d', y.size)

    return y


def normalize_padding(pad: str) -> str:
    """Return the canonical padding name, accepting 3-letter aliases."""
    key = str(pad).lower()
    key = _PAD_ALIASES.get(key, key)
    if key not in PAD_MODES and key != 'none':
        raise ValueError(f'Padding method "{pad}" invalid. '
                         f'Please select an option among {", ".join(list(PAD_MODES) + ["none"])}')
    return key


def sig_length_and_padding(n: int,
                           pad: str = 'symmetric',
                           padmode: str = 'b'
                           ) -> Tuple[Optional[Callable[[np.ndarray], np.ndarray]],
                                      Optional[Callable[[np.ndarray], np.ndarray]], int]:
    """
    Provide functions to apply and remove padding.

    Parameters
    ----------
    n : int
        Length of the input signal to be padded.
    pad : str, optional (default='symmetric')
        Padding method to use. Options are:
        - 'none': No padding (circular transform of the raw signal)
        - 'zero': Zero padding
        - 'symmetric': Mirror reflection repeating the edge values
        - 'reflect': Mirror reflection without repeating the edge values
        - 'periodic': Repeating the signal
    padmode : str, optional (default='b')
        Where to apply padding: 'r' (right), 'l' (left) or 'b' (both).

    Returns
    -------
    apply_padding : callable or None
        A function that pads a 1D signal. None if no padding is applied.
    remove_padding : callable or None
        A function that removes the padding from a (n_scales, n_ext)
        coefficient array, targeting the time dimension.
    n_ext : int
        Padded signal length.

    Notes
    -----
    The padded length is the smallest power of 2 that is at least 2*n. At
    this length a zero padded circular correlation is identical to the
    linear correlation of the unpadded signal for every lag inside the
    signal, and FFTs run on a power-of-2 size.

    For 'b', the left extension receives the extra sample when the total
    extension is odd.
    """
    pad = normalize_padding(pad)
    padmode = str(padmode)[:1].lower()
    if padmode not in ('l', 'r', 'b'):
        raise ValueError(f'padmode "{padmode}" invalid. Please use "l", "r" or "b"')

    if pad == 'none':
        return None, None, n

    # Next power of 2 covering twice the signal
    n_ext = int(2**np.ceil(np.log2(2 * n)))
    ext = n_ext - n

    if padmode == 'r':
        left_ext, right_ext = 0, ext
    elif padmode == 'l':
        left_ext, right_ext = ext, 0
    else:
        left_ext = int(np.ceil(ext / 2))
        right_ext = ext - left_ext

    mode = PAD_MODES[pad]

    def apply_padding(x: np.ndarray) -> np.ndarray:
        return np.pad(x, (left_ext, right_ext), mode=mode)

    def remove_padding(wave: np.ndarray) -> np.ndarray:
        return wave[..., left_ext:left_ext + n]

    logger.debug('Padding signal of length %d to %d (%s, left=%d, right=%d)',
                 n, n_ext, pad, left_ext, right_ext)

    return apply_padding, remove_padding, n_ext
