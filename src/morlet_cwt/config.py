"""
Configuration of a wavelet analysis.
"""
# Standard library imports
import dataclasses
import os
from dataclasses import dataclass
from typing import Optional

# Third-party imports
import numpy as np

# Local imports
from .data_utils import normalize_padding
from .exceptions import DegenerateGridError, InvalidRangeError
from .engine import METHODS

# Alternative argument names and their canonical field
_ALIASES = {
    'pmin': 'lower_period',
    'permin': 'lower_period',
    'lowerperiod': 'lower_period',
    'pmax': 'upper_period',
    'permax': 'upper_period',
    'upperperiod': 'upper_period',
    'w0': 'omega',
    'pad': 'padding',
    'pvalues': 'compute_p_values',
    'computepvalues': 'compute_p_values',
    'signif': 'compute_p_values',
    'parallel_proc': 'workers',
}


@dataclass(frozen=True)
class CWTConfig:
    """
    Parameters of a Morlet wavelet analysis.

    Attributes
    ----------
    dj : float (default=1/20)
        Scale resolution, in octaves.
    lower_period : float, optional (default=2*dt)
        Smallest period analyzed, in the units of dt.
    upper_period : float, optional (default=n*dt/3)
        Largest period analyzed, in the units of dt.
    dt : float (default=1)
        Sampling interval.
    omega : float (default=6)
        Central angular frequency of the Morlet wavelet.
    detrend : bool (default=False)
        Remove a linear trend before the transform. If False, the signal
        is analyzed unmodified.
    compute_p_values : bool (default=False)
        Significance testing. Accepted for compatibility, has no effect.
    padding : str (default='symmetric')
        Padding method ('zero', 'symmetric', 'reflect', 'periodic', 'none').
    padmode : str (default='b')
        Side(s) padded: 'l', 'r' or 'b'.
    method : str (default='fft')
        'fft' or 'direct'.
    use_pyfftw : bool (default=False)
        Use pyFFTW for the FFTs when installed.
    chunk_size : int, optional
        Number of scales processed together.
    workers : int, optional
        Number of threads processing chunks of scales.
    """

    dj: float = 1 / 20
    lower_period: Optional[float] = None
    upper_period: Optional[float] = None
    dt: float = 1.0
    omega: float = 6.0
    detrend: bool = False
    compute_p_values: bool = False
    padding: str = 'symmetric'
    padmode: str = 'b'
    method: str = 'fft'
    use_pyfftw: bool = False
    chunk_size: Optional[int] = None
    workers: Optional[int] = None

    def __post_init__(self):
        if not (np.isfinite(self.dj) and self.dj > 0):
            raise DegenerateGridError(f'dj must be a positive finite number, got {self.dj}')
        if not (np.isfinite(self.dt) and self.dt > 0):
            raise ValueError(f'dt must be a positive number, got {self.dt}')
        for name in ('lower_period', 'upper_period'):
            value = getattr(self, name)
            if value is not None and not (np.isfinite(value) and value > 0):
                raise InvalidRangeError(f'{name} must be a positive number, got {value}')
        if (self.lower_period is not None and self.upper_period is not None
                and self.lower_period >= self.upper_period):
            raise InvalidRangeError(f'lower_period ({self.lower_period}) must be smaller '
                                    f'than upper_period ({self.upper_period})')
        # Canonical names
        object.__setattr__(self, 'padding', normalize_padding(self.padding))
        object.__setattr__(self, 'method', str(self.method).lower())
        if self.method not in METHODS:
            raise ValueError(f'Method "{self.method}" invalid. Please use one of {METHODS}')
        if str(self.padmode)[:1].lower() not in ('l', 'r', 'b'):
            raise ValueError(f'padmode "{self.padmode}" invalid. Please use "l", "r" or "b"')
        if self.chunk_size is not None and self.chunk_size < 1:
            raise ValueError(f'chunk_size must be a positive integer, got {self.chunk_size}')

    def replace(self, **changes) -> "CWTConfig":
        """Copy of the configuration with some fields changed."""
        return dataclasses.replace(self, **changes)

    def resolve_periods(self, n: int):
        """Period bounds for a signal of n samples, applying the defaults."""
        lower = 2 * self.dt if self.lower_period is None else self.lower_period
        upper = n * self.dt / 3 if self.upper_period is None else self.upper_period
        return lower, upper


def get_args(**kwargs) -> CWTConfig:
    """
    Build a CWTConfig from keyword arguments.

    Field names are accepted as is; common alternative names (pmin/permin,
    pmax/permax, w0, pad, signif, ...) are mapped to their field, and
    camelCase names are matched case-insensitively with underscores removed.

    Raises
    ------
    TypeError
        If an argument is unknown or given twice under different names.
    """
    fields = {f.name for f in dataclasses.fields(CWTConfig)}
    lookup = {name.replace('_', ''): name for name in fields}

    params = {}
    for key, value in kwargs.items():
        flat = key.lower().replace('_', '')
        if key in fields:
            name = key
        elif key.lower() in _ALIASES:
            name = _ALIASES[key.lower()]
        elif flat in _ALIASES:
            name = _ALIASES[flat]
        elif flat in lookup:
            name = lookup[flat]
        else:
            raise TypeError(f'Unknown wavelet transform argument "{key}"')
        if name in params:
            raise TypeError(f'Argument "{key}" duplicates "{name}"')
        params[name] = value

    # parallel_proc=True means "use the available cores"
    if 'workers' in params and isinstance(params['workers'], bool):
        params['workers'] = None if not params['workers'] else -1

    if params.get('workers') == -1:
        params['workers'] = max(1, (os.cpu_count() or 2) - 1)

    return CWTConfig(**params)
