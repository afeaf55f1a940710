"""
Continuous wavelet transform (CWT) with the Morlet wavelet.

- kernel: Morlet mother wavelet, scale/period conversions, reconstruction factor
- scales: logarithmic scale grid (ScaleGrid)
- engine: wavelet coefficients (FFT or direct), power, phase, averages, ridge
- coi: cone of influence (EdgeMaskSurface)
- inverse: inverse transform over a band of periods
- cwtransform: WaveletTransform, the high-level interface

Plotting, data ingestion and persistence are left to the caller.
"""

from .exceptions import (
    CWTError,
    InvalidRangeError,
    DegenerateGridError,
    NonFiniteInputError,
    EmptyBandError,
    ShapeMismatchError,
)
from .kernel import (
    MORLET_PSI0,
    morlet,
    fourier_factor,
    scale_to_period,
    period_to_scale,
    reconstruction_factor,
)
from .scales import ScaleGrid, define_scales, convert_scales, get_dj
from .engine import (
    transform,
    compute_psi,
    compute_wavelet_coef,
    compute_wavelet_coef_direct,
    iter_power_rows,
    power_spectrum,
    phase_spectrum,
    average_power,
    ridge,
)
from .coi import EdgeMaskSurface, compute_coi, coi_half_width, define_coi
from .inverse import reconstruct
from .config import CWTConfig, get_args
from .cwtransform import WaveletTransform


__all__ = [
    # errors
    "CWTError",
    "InvalidRangeError",
    "DegenerateGridError",
    "NonFiniteInputError",
    "EmptyBandError",
    "ShapeMismatchError",

    # kernel
    "MORLET_PSI0",
    "morlet",
    "fourier_factor",
    "scale_to_period",
    "period_to_scale",
    "reconstruction_factor",

    # scales
    "ScaleGrid",
    "define_scales",
    "convert_scales",
    "get_dj",

    # transform
    "transform",
    "compute_psi",
    "compute_wavelet_coef",
    "compute_wavelet_coef_direct",
    "iter_power_rows",
    "power_spectrum",
    "phase_spectrum",
    "average_power",
    "ridge",

    # edges and inverse
    "EdgeMaskSurface",
    "compute_coi",
    "coi_half_width",
    "define_coi",
    "reconstruct",

    # configuration and interface
    "CWTConfig",
    "get_args",
    "WaveletTransform",
]

__version__ = "1.0.0"
