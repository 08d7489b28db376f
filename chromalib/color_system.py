# color_system.py
# -*- coding: utf-8 -*-
"""
This library contains the class ColorSystem, the read-only context shared by
the conversions that need colour-matching data (wavelength -> RGB lookup,
spectral locus, visual gamut, spectrum -> colour).

A ColorSystem is built once by the application and passed to whatever needs
it; nothing is computed at import time.
"""

import logging
import numpy as _np
import pandas as _pd
from typing import Optional as _Optional

from .conversions import RGB, XYZ, linear_rgb_table, wavelength_to_linear_rgb, \
    wavelength_to_display_rgb, xyz_to_display_rgb_safe
from .locus import GamutConfig, compute_spectral_locus, point_in_locus, rasterize_locus, build_gamut_cloud
from .ref_spectra import Table, reference_table
from .tristimulus import integrate_tristimulus, weighted_spectra
from .utils import _warn_extrapolation

__all__ = ['ColorSystem']

logger = logging.getLogger(__name__)


class ColorSystem:
    """
    Colour-matching context built from a CIE XYZ colour-matching table.

    Holds, for the lifetime of the object:
        xyz_cmf         the X, Y, Z colour-matching functions
        linear_rgb      per-wavelength linear RGB of the spectral colours
        spectral_locus  (N, 2) xy chromaticities in wavelength order

    Parameters
    ----------
    xyz_cmf : Table
        table with channels X, Y, Z.
    """

    def __init__(self, xyz_cmf: Table):
        self._xyz_cmf = xyz_cmf.select(('X', 'Y', 'Z'))
        self._linear_rgb = linear_rgb_table(self._xyz_cmf)
        self._locus = compute_spectral_locus(self._xyz_cmf)
        self._locus.setflags(write=False)
        lo, hi = self._xyz_cmf.domain
        logger.debug("ColorSystem from %r: %d wavelengths, %g–%g nm", xyz_cmf.name, len(xyz_cmf), lo, hi)

    @classmethod
    def from_tables(cls, xyz_cmf: Table) -> 'ColorSystem':
        return cls(xyz_cmf)

    @classmethod
    def cie1931(cls) -> 'ColorSystem':
        '''ColorSystem of the CIE 1931 2° standard observer (360–830 nm, 1 nm).'''
        return cls(reference_table('cie_xyz_1931_2deg'))

    def __repr__(self):
        lo, hi = self._xyz_cmf.domain
        return f"ColorSystem({self._xyz_cmf.name!r}, {lo:g}–{hi:g} nm)"

    @property
    def xyz_cmf(self) -> Table:
        return self._xyz_cmf

    @property
    def linear_rgb(self) -> Table:
        return self._linear_rgb

    @property
    def spectral_locus(self) -> _np.ndarray:
        return self._locus

    @property
    def locus_wavelength(self) -> _np.ndarray:
        return self._xyz_cmf.wavelength

    # ---------------------------- wavelength ---------------------------------

    def wavelength_to_linear_rgb(self, lam):
        '''
        Linear RGB of monochromatic light, clamped to the CMF domain.
        '''
        return wavelength_to_linear_rgb(lam, self._linear_rgb)

    def wavelength_to_display_rgb(self, lam, intensity=1.0):
        '''
        Display RGB (0-255) of monochromatic light scaled by `intensity`.
        '''
        return wavelength_to_display_rgb(lam, self._linear_rgb, intensity)

    # ---------------------------- chromaticity diagram ---------------------------------

    def contains(self, x, y):
        '''True where (x, y) is a physically realizable chromaticity.'''
        return point_in_locus(self._locus, x, y)

    def rasterize(self, step: float = 0.01) -> _pd.DataFrame:
        return rasterize_locus(self._locus, step)

    def gamut_cloud(self, config: _Optional[GamutConfig] = None) -> _pd.DataFrame:
        '''
        Visual-gamut point cloud in XYZ. Defaults to the
        'xyz_visual_gamut' preset (CMFs scaled so their maximum is 1).
        '''
        config = GamutConfig.from_preset('xyz_visual_gamut') if config is None else config
        return build_gamut_cloud(self._xyz_cmf.values(), config=config)

    # ---------------------------- spectra ---------------------------------

    def spectrum_to_xyz(self, spd: Table, *, spd_channel: _Optional[str] = None,
                        illuminant: _Optional[Table] = None) -> XYZ:
        """
        XYZ of a spectrum normalised to Y = 1.

        Parameters
        ----------
        spd : Table
            emitter SPD, or a reflectance/transmittance factor when an
            illuminant is given.
        spd_channel : str, optional
            column of `spd` to use (default: first channel).
        illuminant : Table, optional
            illuminant SPD. When given, the spectrum is multiplied by the
            illuminant (interpolated on the spectrum grid) and the result is
            normalised by the Y of the illuminant on that same grid, so a
            perfect reflector maps to Y = 1. Spectrum samples outside the
            illuminant domain are dropped with a warning.

        Returns
        -------
        XYZ
            (0, 0, 0) if the reference luminance is zero.
        """
        if illuminant is None:
            xyz = integrate_tristimulus(spd, self._xyz_cmf, spd_channel=spd_channel)
            reference = xyz.Y
        else:
            spd_channel = spd.channel_names[0] if spd_channel is None else spd_channel
            lam = spd.wavelength
            lo, hi = illuminant.domain
            inside = (lam >= lo) & (lam <= hi)
            if not _np.any(inside):
                raise ValueError("No spectral overlap between spectrum and illuminant.")
            if not _np.all(inside):
                _warn_extrapolation(lam, lo, hi, label=spd.name or 'spectrum',
                                    quantity='factor (samples outside the illuminant domain are dropped)')
            lam = lam[inside]
            light = illuminant.interpolate(lam)[:, 0]
            lit = Table(lam, {'power': spd[spd_channel][inside]*light, 'white': light},
                        name=spd.name)
            xyz = integrate_tristimulus(lit, self._xyz_cmf, spd_channel='power')
            reference = integrate_tristimulus(lit, self._xyz_cmf, spd_channel='white').Y

        if reference <= 0:
            return XYZ(0.0, 0.0, 0.0)
        return XYZ(*(v/reference for v in xyz))

    def spectrum_to_display_rgb(self, spd: Table, *, spd_channel: _Optional[str] = None,
                                illuminant: _Optional[Table] = None) -> RGB:
        '''
        Display RGB (0-255) of a spectrum via spectrum_to_xyz and the
        permissive XYZ -> display RGB path. XYZ is divided by
        max(1, X, Y, Z) first, so e.g. a D65 white (Z > 1) stays displayable.
        '''
        xyz = _np.asarray(self.spectrum_to_xyz(spd, spd_channel=spd_channel, illuminant=illuminant))
        return xyz_to_display_rgb_safe(xyz/max(1.0, float(xyz.max())))

    def weighted_spectra(self, spd: Table, *, spd_channel: _Optional[str] = None) -> Table:
        '''Φ(λ)·x̄(λ), Φ(λ)·ȳ(λ), Φ(λ)·z̄(λ) on the shared wavelengths.'''
        return weighted_spectra(spd, self._xyz_cmf, spd_channel=spd_channel)
