# -*- coding: utf-8 -*-
"""
Colour-space conversions between wavelength, CIE XYZ, linear sRGB,
gamma-encoded display RGB (0-255) and chromaticity coordinates.

Every function is pure. Inputs are triplets or arrays of triplets with
shape (..., 3); a single triplet returns a named record (XYZ, RGB,
Chromaticity, ...), a batch returns an ndarray of the same shape.

Created on Sat 12 Oct, 2024
"""

import logging
import numpy as _np
from typing import NamedTuple as _NamedTuple, Optional as _Optional

from .errors import RangeError, DivisionByZeroError
from .ref_spectra import Table
from .utils import interpolate_at

__all__ = ['XYZ',
           'RGB',
           'Chromaticity',
           'ChromaticityCoefficients',
           'XYZ_TO_LINEAR_SRGB',
           'LINEAR_SRGB_TO_XYZ',
           'xyz_to_linear_rgb',
           'xyz_to_linear_rgb_safe',
           'linear_rgb_to_xyz',
           'correct_gamma',
           'inverse_gamma',
           'linear_to_display_rgb',
           'display_rgb_to_linear',
           'xyz_to_display_rgb',
           'xyz_to_display_rgb_safe',
           'xyY_to_XYZ',
           'XYZ_to_xyY',
           'chromaticity_coefficients',
           'linear_rgb_table',
           'wavelength_to_linear_rgb',
           'wavelength_to_display_rgb',
           'xy_chromaticity_to_display_rgb',
           'in_display_gamut',
           'to_css_rgb',
           'rgb_to_hex']

logger = logging.getLogger(__name__)


class XYZ(_NamedTuple):
    X: float
    Y: float
    Z: float


class RGB(_NamedTuple):
    R: float
    G: float
    B: float


class Chromaticity(_NamedTuple):
    x: float
    y: float
    Y: float = 1.0


class ChromaticityCoefficients(_NamedTuple):
    r: float
    g: float
    b: float


# CIE XYZ -> linear sRGB (D65)
XYZ_TO_LINEAR_SRGB = _np.array([[ 3.2404542, -1.5371385, -0.4985314],
                                [-0.9692660,  1.8760108,  0.0415560],
                                [ 0.0556434, -0.2040259,  1.0572252]])
LINEAR_SRGB_TO_XYZ = _np.linalg.inv(XYZ_TO_LINEAR_SRGB)
XYZ_TO_LINEAR_SRGB.setflags(write=False)
LINEAR_SRGB_TO_XYZ.setflags(write=False)

# sRGB transfer function breakpoint (linear side / encoded side)
_GAMMA_THRESHOLD = 0.0031308
_GAMMA_THRESHOLD_ENCODED = 12.92*_GAMMA_THRESHOLD


# ---------------------------- helpers ---------------------------------

def _as_triplets(values, name='values'):
    arr = _np.asarray(values, dtype=float)
    if arr.ndim == 0 or arr.shape[-1] != 3:
        raise ValueError(f"{name} must have shape (..., 3).")
    return arr


def _pack(arr, record):
    '''single triplet -> record, batch -> ndarray'''
    if arr.ndim == 1:
        return record(*(float(v) for v in arr))
    return arr


def _out_of_unit_range(arr):
    # NaN fails both comparisons, so non-finite values are rejected explicitly
    return _np.any(~_np.isfinite(arr) | (arr < 0.0) | (arr > 1.0), axis=-1)


# ---------------------------- XYZ <-> linear RGB -------------------------------

def xyz_to_linear_rgb(xyz):
    """
    Strict CIE XYZ -> linear sRGB conversion.

    Parameters
    ----------
    xyz : (..., 3) array_like
        X, Y, Z with every component in [0, 1].

    Returns
    -------
    RGB or ndarray
        linear R, G, B. Values outside [0, 1] mean the colour is outside the
        sRGB gamut.

    Raises
    ------
    RangeError
        if any component is outside [0, 1].
    """
    arr = _as_triplets(xyz, 'xyz')
    bad = _out_of_unit_range(arr)
    if _np.any(bad):
        first = arr[bad][0] if arr.ndim > 1 else arr
        raise RangeError(
            f"X, Y, Z should be in range [0, 1], got {first[0]:g}, {first[1]:g}, {first[2]:g}")
    return _pack(arr @ XYZ_TO_LINEAR_SRGB.T, RGB)


def xyz_to_linear_rgb_safe(xyz):
    """
    Permissive CIE XYZ -> linear sRGB conversion: triplets with a component
    outside [0, 1] are mapped to black (0, 0, 0) instead of raising.
    """
    arr = _as_triplets(xyz, 'xyz')
    rgb = arr @ XYZ_TO_LINEAR_SRGB.T
    rgb[_out_of_unit_range(arr)] = 0.0
    return _pack(rgb, RGB)


def linear_rgb_to_xyz(rgb):
    '''
    Linear sRGB -> CIE XYZ (inverse of XYZ_TO_LINEAR_SRGB). No range check.
    '''
    arr = _as_triplets(rgb, 'rgb')
    return _pack(arr @ LINEAR_SRGB_TO_XYZ.T, XYZ)


# ---------------------------- gamma ---------------------------------

def correct_gamma(value):
    '''
    sRGB encoding of a linear value:
        12.92*v                   if v <= 0.0031308
        1.055*v**(1/2.4) - 0.055  otherwise
    Output is in [0, 1] for v in [0, 1].
    '''
    v = _np.asarray(value, dtype=float)
    # the clip only keeps the unused branch of np.where away from negative powers
    out = _np.where(v <= _GAMMA_THRESHOLD,
                    12.92*v,
                    1.055*_np.power(_np.maximum(v, _GAMMA_THRESHOLD), 1/2.4) - 0.055)
    return float(out) if out.ndim == 0 else out


def inverse_gamma(value):
    '''
    Inverse of correct_gamma (encoded value in [0, 1] -> linear value).
    '''
    v = _np.asarray(value, dtype=float)
    out = _np.where(v <= _GAMMA_THRESHOLD_ENCODED,
                    v/12.92,
                    _np.power((_np.maximum(v, _GAMMA_THRESHOLD_ENCODED) + 0.055)/1.055, 2.4))
    return float(out) if out.ndim == 0 else out


def linear_to_display_rgb(rgb):
    '''
    Linear RGB -> gamma-encoded display RGB in the 0-255 range (not clipped).
    '''
    arr = _as_triplets(rgb, 'rgb')
    return _pack(_np.asarray(correct_gamma(arr))*255.0, RGB)


def display_rgb_to_linear(rgb):
    '''
    Display RGB in 0-255 -> linear RGB.
    '''
    arr = _as_triplets(rgb, 'rgb')
    return _pack(_np.asarray(inverse_gamma(arr/255.0)), RGB)


def xyz_to_display_rgb(xyz):
    '''Strict XYZ -> display RGB; raises RangeError outside [0, 1].'''
    return linear_to_display_rgb(xyz_to_linear_rgb(xyz))


def xyz_to_display_rgb_safe(xyz):
    '''Permissive XYZ -> display RGB; out-of-range triplets become black.'''
    return linear_to_display_rgb(xyz_to_linear_rgb_safe(xyz))


# ---------------------------- chromaticity ---------------------------------

def xyY_to_XYZ(xyY, *, strict: bool = True):
    """
    Chromaticity (x, y) plus luminance Y -> CIE XYZ.

        X = x*Y/y
        Z = (1 - x - y)*Y/y

    Parameters
    ----------
    xyY : (..., 3) array_like
        x, y, Y triplets (a Chromaticity record works too).
    strict : bool
        if True, y = 0 raises DivisionByZeroError. If False, those triplets
        return (0, 0, 0), which is what bulk rasterization wants.

    Returns
    -------
    XYZ or ndarray
    """
    arr = _as_triplets(xyY, 'xyY')
    x, y, Y = arr[..., 0], arr[..., 1], arr[..., 2]
    zero = (y == 0)
    if strict and _np.any(zero):
        raise DivisionByZeroError("chromaticity y = 0: X and Z are undefined.")

    with _np.errstate(divide='ignore', invalid='ignore'):
        scale = _np.where(zero, 0.0, Y/_np.where(zero, 1.0, y))
    out = _np.stack((x*scale, _np.where(zero, 0.0, Y), (1.0 - x - y)*scale), axis=-1)
    return _pack(out, XYZ)


def XYZ_to_xyY(xyz, *, strict: bool = True):
    '''
    CIE XYZ -> (x, y, Y) with x = X/(X+Y+Z), y = Y/(X+Y+Z).

    With strict=False a zero sum returns (0, 0, 0) instead of raising
    DivisionByZeroError.
    '''
    arr = _as_triplets(xyz, 'xyz')
    total = arr.sum(axis=-1)
    zero = (total == 0)
    if strict and _np.any(zero):
        raise DivisionByZeroError("X + Y + Z = 0: chromaticity is undefined.")

    safe = _np.where(zero, 1.0, total)
    out = _np.stack((arr[..., 0]/safe, arr[..., 1]/safe, arr[..., 1]), axis=-1)
    out[zero] = 0.0
    return _pack(out, Chromaticity)


def chromaticity_coefficients(rgb, *, strict: bool = True):
    '''
    Projection on the R + G + B = 1 plane: r = R/(R+G+B), etc.

    With strict=False a zero total returns (0, 0, 0) instead of raising
    DivisionByZeroError.
    '''
    arr = _as_triplets(rgb, 'rgb')
    total = arr.sum(axis=-1, keepdims=True)
    zero = (total == 0)
    if strict and _np.any(zero):
        raise DivisionByZeroError("R + G + B = 0: chromaticity coefficients are undefined.")

    out = _np.where(zero, 0.0, arr/_np.where(zero, 1.0, total))
    return _pack(out, ChromaticityCoefficients)


def xy_chromaticity_to_display_rgb(x, y, *, strict: bool = True):
    """
    Display colour of a chromaticity at maximum brightness.

    XYZ is computed at Y = 1 and divided by max(X, Y, Z), so the brightest
    component is 1 whatever the true relative luminance; the result is then
    encoded with the permissive XYZ -> display RGB path.

    Parameters
    ----------
    x, y : float or array_like
        chromaticity coordinates (broadcast together).
    strict : bool
        forwarded to xyY_to_XYZ for y = 0.

    Returns
    -------
    RGB or ndarray (..., 3)
    """
    x = _np.asarray(x, dtype=float)
    y = _np.asarray(y, dtype=float)
    xb, yb = _np.broadcast_arrays(x, y)
    xyY = _np.stack((xb, yb, _np.ones_like(xb)), axis=-1)

    xyz = _np.asarray(xyY_to_XYZ(xyY, strict=strict))
    peak = xyz.max(axis=-1, keepdims=True)
    xyz = _np.where(peak > 0, xyz/_np.where(peak > 0, peak, 1.0), 0.0)
    return _pack(_np.asarray(xyz_to_display_rgb_safe(xyz)), RGB)


# ---------------------------- wavelength ---------------------------------

def linear_rgb_table(xyz_cmf: Table, channels=('X', 'Y', 'Z')) -> Table:
    '''
    Per-wavelength linear RGB of the spectral colours.

    The XYZ colour-matching functions are divided by their global maximum
    (over every channel and wavelength) so all of them lie in [0, 1], then
    converted row-wise with the strict XYZ -> linear RGB matrix.

    Parameters
    ----------
    xyz_cmf : Table
        table holding the X, Y, Z colour-matching functions.
    channels : tuple of str
        names of the X, Y, Z channels in `xyz_cmf`.

    Returns
    -------
    Table
        channels R, G, B on the wavelength grid of `xyz_cmf`.
    '''
    xyz = xyz_cmf.values(channels)
    peak = xyz.max()
    if peak <= 0:
        raise ValueError("colour-matching functions must have a positive maximum.")
    rgb = _np.asarray(xyz_to_linear_rgb(xyz/peak))
    logger.debug("linear RGB table from %s (normalized by %g)", xyz_cmf.name or 'table', peak)
    return xyz_cmf.with_channels(dict(zip(('R', 'G', 'B'), rgb.T)), name='linear_rgb')


def wavelength_to_linear_rgb(lam, rgb_table: Table):
    '''
    Linear RGB of a monochromatic light of wavelength `lam` (nm),
    interpolated in `rgb_table` (see linear_rgb_table) and clamped to its
    wavelength domain.
    '''
    out = interpolate_at(rgb_table.wavelength, rgb_table.values(('R', 'G', 'B')), lam)
    return _pack(_np.asarray(out), RGB)


def wavelength_to_display_rgb(lam, rgb_table: Table, intensity=1.0):
    '''
    Display RGB of a monochromatic light. Linear RGB is scaled by
    `intensity` before gamma encoding.
    '''
    lin = _np.asarray(wavelength_to_linear_rgb(lam, rgb_table))
    lin = lin*_np.asarray(intensity, dtype=float)[..., None] if _np.ndim(intensity) else lin*intensity
    return linear_to_display_rgb(lin)


# ---------------------------- presentation ---------------------------------

def in_display_gamut(rgb, tol: float = 1E-9):
    '''
    True where every display RGB component lies in [0, 255].
    '''
    arr = _as_triplets(rgb, 'rgb')
    out = _np.all((arr >= -tol) & (arr <= 255.0 + tol), axis=-1)
    return bool(out) if out.ndim == 0 else out


def _to_bytes(rgb):
    arr = _as_triplets(rgb, 'rgb')
    if arr.ndim != 1:
        raise ValueError("expected a single RGB triplet.")
    return [int(v) for v in _np.clip(_np.round(arr), 0, 255)]


def to_css_rgb(rgb, alpha: _Optional[float] = None) -> str:
    '''
    CSS colour string for a display RGB triplet: 'rgb(r, g, b)', or
    'rgba(r, g, b, a)' when alpha is given. Components are rounded and
    clipped to 0-255.
    '''
    r, g, b = _to_bytes(rgb)
    if alpha is None:
        return f"rgb({r}, {g}, {b})"
    return f"rgba({r}, {g}, {b}, {alpha:g})"


def rgb_to_hex(rgb) -> str:
    """Convert display RGB (0-255) to an HTML-style hex string."""
    return '#{:02x}{:02x}{:02x}'.format(*_to_bytes(rgb))
