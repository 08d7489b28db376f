# -*- coding: utf-8 -*-
"""
Numerical helpers over wavelength-indexed samples:
    linear interpolation with boundary clamping
    arc-length resampling of polylines
    trapezoid integration
    point interpolation at a parameter t

All functions take NumPy array-likes. Inputs that must be sorted are
documented as preconditions and are not checked at runtime.
"""

import logging
import warnings
import numpy as _np
from scipy.integrate import trapezoid as _trapezoid
from typing import Tuple as _Tuple

__all__ = ['convert_units',
           'interpolate_at',
           'resample_uniform',
           'integrate_trapezoid',
           'lerp_point']

logger = logging.getLogger(__name__)

# standard constants
speed_of_light = 299792458      # m/s (speed of light)
h_planck_eV = 4.135667696E-15   # eV*s (plank's constant)

# Floating tolerance used to decide if two arc-length positions coincide
_ARC_TOL = 1E-12


def _ndarray_check(x):
    '''
    check if x is not ndarray. If so, convert x to a 1d ndarray
    '''
    if _np.ndim(x) == 0:
        return _np.array([x], dtype=float), True
    return _np.asarray(x, dtype=float), False


def _warn_extrapolation(lam_arr, lo, hi, label="", quantity=""):
    '''
    Emit a warning when requested wavelengths (nm) fall outside [lo, hi].
    '''
    lam_min = float(_np.min(lam_arr))
    lam_max = float(_np.max(lam_arr))
    if lam_min < lo and lam_max > hi:
        warnings.warn(
            f"{label} {quantity} requested over {lam_min:.1f}–{lam_max:.1f} nm; "
            f"data only covers {lo:.1f}–{hi:.1f} nm", stacklevel=3)
    elif lam_min < lo:
        warnings.warn(
            f"{label} {quantity} requested below tabulated range "
            f"(requested min {lam_min:.1f} nm; data starts {lo:.1f} nm)", stacklevel=3)
    elif lam_max > hi:
        warnings.warn(
            f"{label} {quantity} requested above tabulated range "
            f"(requested max {lam_max:.1f} nm; data ends {hi:.1f} nm)", stacklevel=3)


def convert_units(x, x_in, to='nm'):
    '''
    Convert spectral coordinates between units. Accepted units are:
        nanometers              : 'nm'
        micrometers             : 'um'
        meters                  : 'm'
        recriprocal centimeters : 'cm^-1'
        frequency               : 'Hz'
        electron volts          : 'eV'

    Parameters
    ----------
    x : float or ndarray
        values to convert.
    x_in : string
        units of the input variable.
    to : string
        conversion units. Default 'nm'.

    Returns
    -------
    float or ndarray
        converted values. Reciprocal units (cm^-1, Hz, eV) reverse the
        ordering of a sorted grid.
    '''
    c0 = speed_of_light
    h = h_planck_eV

    to_nm = {
        'nm'    : lambda v: v,
        'um'    : lambda v: v*1E3,
        'm'     : lambda v: v*1E9,
        'cm^-1' : lambda v: 1E7/v,
        'Hz'    : lambda v: c0/v*1E9,
        'eV'    : lambda v: h*c0/v*1E9,
    }
    from_nm = {
        'nm'    : lambda v: v,
        'um'    : lambda v: v*1E-3,
        'm'     : lambda v: v*1E-9,
        'cm^-1' : lambda v: 1E7/v,
        'Hz'    : lambda v: c0/(v*1E-9),
        'eV'    : lambda v: h*c0/(v*1E-9),
    }
    if x_in not in to_nm:
        raise ValueError('Unknown unit: ' + str(x_in))
    if to not in from_nm:
        raise ValueError('Unknown unit: ' + str(to))

    x = _np.asarray(x, dtype=float) if _np.ndim(x) else float(x)
    return from_nm[to](to_nm[x_in](x))


def interpolate_at(xp, fp, x):
    '''
    Linear interpolation of tabulated samples at arbitrary abscissas.

    Outside the tabulated domain the value is clamped to the nearest
    boundary sample (no extrapolation).

    Parameters
    ----------
    xp : (N,) array_like
        sample abscissas, sorted ascending (precondition, not checked).
    fp : (N,) or (N, k) array_like
        sample values. Each column of a 2D array is interpolated separately.
    x : float or array_like
        abscissas where the values are requested.

    Returns
    -------
    float, ndarray (M,), ndarray (k,) or ndarray (M, k)
        interpolated values; a scalar x drops the leading axis.
    '''
    xp = _np.asarray(xp, dtype=float)
    fp = _np.asarray(fp, dtype=float)
    x, x_isfloat = _ndarray_check(x)

    if xp.ndim != 1 or xp.size == 0:
        raise ValueError("xp must be a non-empty 1D array.")
    if fp.shape[0] != xp.size:
        raise ValueError("xp and fp must have the same length.")

    if x.size and (x.min() < xp[0] or x.max() > xp[-1]):
        logger.debug("clamping %d abscissas to [%g, %g]",
                     int(_np.count_nonzero((x < xp[0]) | (x > xp[-1]))), xp[0], xp[-1])

    # np.interp clamps to fp[0]/fp[-1] by default
    if fp.ndim == 1:
        out = _np.interp(x, xp, fp)
    else:
        out = _np.column_stack([_np.interp(x, xp, col) for col in fp.T])

    if x_isfloat:
        return float(out[0]) if out.ndim == 1 else out[0]
    return out


def resample_uniform(points, spacing):
    """
    Resample a polyline at approximately constant arc-length spacing.

    Parameters
    ----------
    points : (N, D) array_like
        ordered vertices of the polyline (any dimension D).
    spacing : float
        target arc length between consecutive output points. Must be > 0.

    Returns
    -------
    ndarray (M, D)
        vertices along the original path. The first and last input points
        are always returned exactly. A target position that coincides with
        an existing vertex reuses that vertex (t = 0), so no duplicates are
        emitted.
    """
    pts = _np.asarray(points, dtype=float)
    if pts.ndim != 2:
        raise ValueError("points must have shape (N, D).")
    if not spacing > 0:
        raise ValueError("spacing must be > 0.")
    if len(pts) < 2:
        return pts.copy()

    seg_len = _np.linalg.norm(_np.diff(pts, axis=0), axis=1)
    arc = _np.concatenate(([0.0], _np.cumsum(seg_len)))
    total = arc[-1]
    if total <= _ARC_TOL:
        return pts[[0, -1]].copy()

    # targets strictly before the end; the last vertex is appended as-is
    targets = _np.arange(0.0, total, spacing)
    targets = targets[targets < total - _ARC_TOL]

    # segment i satisfies arc[i] <= s < arc[i+1]; zero-length segments are skipped
    idx = _np.searchsorted(arc, targets, side='right') - 1
    idx = _np.clip(idx, 0, len(pts) - 2)
    span = arc[idx + 1] - arc[idx]
    with _np.errstate(divide='ignore', invalid='ignore'):
        t = _np.where(span > 0, (targets - arc[idx])/span, 0.0)
    t[_np.abs(targets - arc[idx]) <= _ARC_TOL] = 0.0

    out = pts[idx] + t[:, None]*(pts[idx + 1] - pts[idx])
    out[0] = pts[0]
    return _np.vstack((out, pts[-1:]))


def integrate_trapezoid(points) -> float:
    '''
    Definite integral of y over x with the trapezoid rule:
        sum (x[i+1] - x[i])*(y[i+1] + y[i])/2

    Parameters
    ----------
    points : (N, 2) array_like
        (x, y) samples sorted ascending by x. Unsorted input is not an
        error, it just yields a meaningless value.

    Returns
    -------
    float
        the integral. Fewer than two samples integrate to 0.
    '''
    pts = _np.asarray(points, dtype=float)
    if pts.size == 0:
        return 0.0
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError("points must have shape (N, 2).")
    if len(pts) < 2:
        return 0.0
    return float(_trapezoid(pts[:, 1], pts[:, 0]))


def lerp_point(a, b, t):
    """
    Linear interpolation between two points: (1 - t)*a + t*b.

    If `a` is a named record (e.g. XYZ, RGB) and t is a scalar, a record of
    the same type is returned. An array of t values returns one row per t.
    """
    pa = _np.asarray(a, dtype=float)
    pb = _np.asarray(b, dtype=float)
    if pa.shape != pb.shape:
        raise ValueError("a and b must have the same shape.")

    if _np.ndim(t) == 0:
        out = (1.0 - t)*pa + t*pb
        if hasattr(a, '_fields'):
            return type(a)(*(float(v) for v in out))
        return out

    tt = _np.asarray(t, dtype=float).reshape((-1,) + (1,)*pa.ndim)
    return (1.0 - tt)*pa + tt*pb
