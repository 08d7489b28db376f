# -*- coding: utf-8 -*-
"""
Tristimulus values of a spectral power distribution (SPD):

    R = ∫ Φ(λ) r̄(λ) dλ,   G = ∫ Φ(λ) ḡ(λ) dλ,   B = ∫ Φ(λ) b̄(λ) dλ

and the RGB colour-matching functions built from chromaticity coefficients
and the photopic luminosity function.
"""

import logging
import numpy as _np
from typing import Optional as _Optional, Sequence as _Sequence, Tuple as _Tuple

from .conversions import XYZ, RGB, linear_to_display_rgb
from .ref_spectra import Table
from .utils import interpolate_at, integrate_trapezoid, _warn_extrapolation

__all__ = ['CIE_RGB_LUMINANCES',
           'weighted_spectra',
           'integrate_tristimulus',
           'max_tristimulus',
           'normalized_tristimulus_to_display_rgb',
           'cmfs_from_chromaticity_coefficients']

logger = logging.getLogger(__name__)

# Relative luminances of the CIE 1931 R, G, B primaries
CIE_RGB_LUMINANCES = (1.0, 4.5907, 0.0601)


def _record_for(channels):
    if tuple(c.upper() for c in channels) == ('X', 'Y', 'Z'):
        return XYZ
    return RGB


def _cmf_channels(cmf: Table, cmf_channels):
    names = cmf.channel_names if cmf_channels is None else tuple(cmf_channels)
    if len(names) != 3:
        raise ValueError(f"expected 3 colour-matching channels, got {len(names)}: {names}")
    return names


def weighted_spectra(spd: Table,
                     cmf: Table,
                     *,
                     spd_channel: _Optional[str] = None,
                     cmf_channels: _Optional[_Sequence[str]] = None) -> Table:
    """
    Products Φ(λ)·c̄(λ) of an SPD with each colour-matching function.

    The products are evaluated on the SPD wavelengths that fall inside the
    CMF domain; SPD samples outside it are discarded (with a warning) and
    the CMFs are linearly interpolated onto the SPD grid when the grids
    differ. Nothing is extrapolated.

    Parameters
    ----------
    spd : Table
        spectral power distribution.
    cmf : Table
        colour-matching functions (3 channels).
    spd_channel : str, optional
        SPD column to use. Defaults to the first channel.
    cmf_channels : sequence of str, optional
        the 3 CMF channels. Defaults to all channels of `cmf`.

    Returns
    -------
    Table
        one channel per CMF channel, on the overlapping SPD wavelengths.

    Raises
    ------
    ValueError
        if the SPD and CMF wavelength ranges do not overlap.
    """
    names = _cmf_channels(cmf, cmf_channels)
    spd_channel = spd.channel_names[0] if spd_channel is None else spd_channel

    lam = spd.wavelength
    power = spd[spd_channel]
    lo = max(spd.domain[0], cmf.domain[0])
    hi = min(spd.domain[1], cmf.domain[1])
    if hi < lo:
        raise ValueError("No spectral overlap between SPD and colour-matching functions.")

    inside = (lam >= lo) & (lam <= hi)
    if not _np.all(inside):
        _warn_extrapolation(lam, cmf.domain[0], cmf.domain[1],
                            label=spd.name or 'SPD', quantity='power (samples outside the CMF domain are dropped)')
        lam = lam[inside]
        power = power[inside]

    if lam.shape == cmf.wavelength.shape and _np.array_equal(lam, cmf.wavelength):
        cmf_values = cmf.values(names)
    else:
        cmf_values = interpolate_at(cmf.wavelength, cmf.values(names), lam)

    products = power[:, None]*cmf_values
    return Table(lam, dict(zip(names, products.T)),
                 name=f"{spd.name or 'spd'}*{cmf.name or 'cmf'}")


def integrate_tristimulus(spd: Table,
                          cmf: Table,
                          *,
                          spd_channel: _Optional[str] = None,
                          cmf_channels: _Optional[_Sequence[str]] = None):
    """
    Tristimulus values of an SPD against colour-matching functions.

    Each channel is the trapezoid integral of Φ(λ)·c̄(λ) over the wavelengths
    shared by both tables (see weighted_spectra).

    Returns
    -------
    XYZ or RGB
        XYZ when the CMF channels are X, Y, Z; RGB otherwise (fields in CMF
        channel order).
    """
    names = _cmf_channels(cmf, cmf_channels)
    products = weighted_spectra(spd, cmf, spd_channel=spd_channel, cmf_channels=names)
    lam = products.wavelength
    values = [integrate_trapezoid(_np.column_stack((lam, products[c]))) for c in names]
    return _record_for(names)(*values)


def max_tristimulus(spd_table: Table, cmf: Table, *, cmf_channels: _Optional[_Sequence[str]] = None):
    '''
    Per-channel maximum of the tristimulus values of every SPD column in
    `spd_table` (e.g. a set of reflectance spectra sharing one wavelength
    grid). Used to normalise a family of colours for display.
    '''
    names = _cmf_channels(cmf, cmf_channels)
    totals = _np.array([integrate_tristimulus(spd_table, cmf, spd_channel=c, cmf_channels=names)
                        for c in spd_table.channel_names])
    return _record_for(names)(*(float(v) for v in totals.max(axis=0)))


def normalized_tristimulus_to_display_rgb(tristimulus, maximum, gamma: bool = False) -> RGB:
    '''
    Scale tristimulus values by a per-channel maximum to the 0-255 display
    range: 255*t/max. With gamma=True the normalised values t/max are
    treated as linear RGB and sRGB-encoded (linear_to_display_rgb).
    '''
    t = _np.asarray(tristimulus, dtype=float)
    m = _np.asarray(maximum, dtype=float)
    if _np.any(m == 0):
        raise ValueError("maximum must be non-zero in every channel.")
    if gamma:
        return linear_to_display_rgb(t/m)
    return RGB(*(float(v) for v in 255.0*t/m))


def cmfs_from_chromaticity_coefficients(coef_table: Table,
                                        photopic_table: Table,
                                        luminances: _Tuple[float, float, float] = CIE_RGB_LUMINANCES,
                                        *,
                                        coef_channels: _Sequence[str] = ('r', 'g', 'b'),
                                        photopic_channel: str = 'V') -> Table:
    '''
    RGB colour-matching functions from chromaticity coefficients r, g, b
    and the photopic luminosity function V(λ).

    At each wavelength the coefficients are scaled so that the luminance of
    the mixture equals V(λ):

        k = V(λ) / (Lr·r + Lg·g + Lb·b)
        r̄ = k·r,  ḡ = k·g,  b̄ = k·b

    V is interpolated onto the coefficient wavelengths. Wavelengths where
    the mixture luminance is zero get r̄ = ḡ = b̄ = 0.

    Parameters
    ----------
    coef_table : Table
        chromaticity coefficients (r + g + b = 1).
    photopic_table : Table
        photopic luminosity function.
    luminances : (Lr, Lg, Lb)
        relative luminances of the primaries.

    Returns
    -------
    Table
        channels R, G, B on the coefficient grid.
    '''
    coef = coef_table.values(coef_channels)
    V = interpolate_at(photopic_table.wavelength, photopic_table[photopic_channel], coef_table.wavelength)
    lum = coef @ _np.asarray(luminances, dtype=float)

    zero = (lum == 0)
    k = _np.where(zero, 0.0, V/_np.where(zero, 1.0, lum))
    if _np.any(zero):
        logger.debug("%d wavelengths with zero mixture luminance set to 0", int(zero.sum()))

    cmf = coef*k[:, None]
    return coef_table.with_channels(dict(zip(('R', 'G', 'B'), cmf.T)), name='rgb_cmf')
