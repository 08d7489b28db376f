# -*- coding: utf-8 -*-
import numpy as np
import pytest
from numpy.testing import assert_allclose

from chromalib import ColorSystem, GamutConfig, RGB, XYZ, Table, reference_table


def test_cie1931_context(cie1931, cie_xyz):
    assert cie1931.xyz_cmf.channel_names == ('X', 'Y', 'Z')
    assert cie1931.spectral_locus.shape == (len(cie_xyz), 2)
    assert cie1931.linear_rgb.channel_names == ('R', 'G', 'B')
    assert cie1931.locus_wavelength[0] == 360.0
    assert 'ColorSystem' in repr(cie1931)
    with pytest.raises(ValueError):
        cie1931.spectral_locus[0, 0] = 1.0


def test_from_tables_selects_xyz(triangle_xyz):
    extra = triangle_xyz.with_channels(dict(triangle_xyz.channels, V=[1.0, 1.0, 1.0]))
    system = ColorSystem.from_tables(extra)
    assert system.xyz_cmf.channel_names == ('X', 'Y', 'Z')
    assert system.contains(0.2, 0.2)


def test_wavelength_lookup_is_clamped(cie1931):
    assert cie1931.wavelength_to_linear_rgb(300.0) == cie1931.wavelength_to_linear_rgb(360.0)
    assert cie1931.wavelength_to_display_rgb(350.0) == cie1931.wavelength_to_display_rgb(360.0)
    assert cie1931.wavelength_to_display_rgb(900.0) == cie1931.wavelength_to_display_rgb(830.0)


def test_green_wavelength(cie1931):
    rgb = cie1931.wavelength_to_linear_rgb(555.0)
    assert isinstance(rgb, RGB)
    assert rgb.G > rgb.R and rgb.G > rgb.B
    assert cie1931.wavelength_to_display_rgb(555.0, intensity=0.0) == RGB(0.0, 0.0, 0.0)


def test_contains(cie1931):
    assert cie1931.contains(0.3127, 0.3290)
    assert not cie1931.contains(0.6, 0.6)
    assert list(cie1931.contains([0.33, 0.05], [0.33, 0.05])) == [True, False]


def test_rasterize(cie1931):
    grid = cie1931.rasterize(step=0.1)
    assert len(grid) > 0
    assert np.all(cie1931.contains(grid['x'].to_numpy(), grid['y'].to_numpy()))


def test_gamut_cloud(cie1931):
    cloud = cie1931.gamut_cloud(GamutConfig(delta=0.2, anchor_indices=(0, 87, 168), normalize=True))
    assert len(cloud) >= 3*len(cie1931.xyz_cmf)
    assert set(cloud['anchor']) == {0, 87, 168}
    assert cloud[['x', 'y', 'z']].to_numpy().max() == pytest.approx(1.0)


def test_equal_energy_emitter(cie1931, cie_xyz):
    spd = Table(cie_xyz.wavelength, {'power': np.full(len(cie_xyz), 5.0)})
    xyz = cie1931.spectrum_to_xyz(spd)
    assert isinstance(xyz, XYZ)
    assert xyz.Y == pytest.approx(1.0)
    assert xyz.X == pytest.approx(1.0, abs=5E-3)
    assert xyz.Z == pytest.approx(1.0, abs=5E-3)


def test_perfect_reflector_under_d65(cie1931):
    lam = np.arange(380.0, 781.0, 5.0)
    white = Table(lam, {'reflectance': np.ones_like(lam)})
    xyz = cie1931.spectrum_to_xyz(white, illuminant=reference_table('illuminant_D65'))
    assert xyz.Y == pytest.approx(1.0)
    assert_allclose(xyz, (0.9504, 1.0, 1.0888), atol=0.01)


def test_half_reflector_under_d65(cie1931):
    lam = np.arange(380.0, 781.0, 5.0)
    grey = Table(lam, {'reflectance': np.full_like(lam, 0.5)})
    xyz = cie1931.spectrum_to_xyz(grey, illuminant=reference_table('illuminant_D65'))
    assert xyz.Y == pytest.approx(0.5)


def test_dark_spectrum(cie1931, cie_xyz):
    spd = Table(cie_xyz.wavelength, {'power': np.zeros(len(cie_xyz))})
    assert cie1931.spectrum_to_xyz(spd) == XYZ(0.0, 0.0, 0.0)


def test_white_spectrum_to_display(cie1931):
    lam = np.arange(380.0, 781.0, 5.0)
    white = Table(lam, {'reflectance': np.ones_like(lam)})
    rgb = cie1931.spectrum_to_display_rgb(white, illuminant=reference_table('illuminant_D65'))
    assert max(rgb) - min(rgb) < 3.0
    assert min(rgb) > 230.0


def test_weighted_spectra(cie1931, cie_xyz):
    spd = Table(cie_xyz.wavelength, {'power': np.full(len(cie_xyz), 2.0)})
    products = cie1931.weighted_spectra(spd)
    assert_allclose(products.values(), 2.0*cie_xyz.values())


def test_reflectance_beyond_illuminant_domain_is_dropped(cie1931):
    lam = np.arange(380.0, 831.0, 5.0)
    factor = Table(lam, {'reflectance': np.where(lam > 780.0, 1.0, 0.0)})
    with pytest.warns(UserWarning):
        xyz = cie1931.spectrum_to_xyz(factor, illuminant=reference_table('illuminant_D65'))
    assert xyz == XYZ(0.0, 0.0, 0.0)


def test_perfect_reflector_wider_than_illuminant(cie1931):
    lam = np.arange(380.0, 831.0, 5.0)
    white = Table(lam, {'reflectance': np.ones_like(lam)})
    with pytest.warns(UserWarning):
        xyz = cie1931.spectrum_to_xyz(white, illuminant=reference_table('illuminant_D65'))
    assert xyz.Y == pytest.approx(1.0)
    assert_allclose(xyz, (0.9504, 1.0, 1.0888), atol=0.01)


def test_reflectance_without_illuminant_overlap(cie1931):
    lam = np.arange(800.0, 831.0, 5.0)
    factor = Table(lam, {'reflectance': np.ones_like(lam)})
    with pytest.raises(ValueError, match='overlap'):
        cie1931.spectrum_to_xyz(factor, illuminant=reference_table('illuminant_D65'))
