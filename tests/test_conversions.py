# -*- coding: utf-8 -*-
import numpy as np
import pytest
from numpy.testing import assert_allclose

from chromalib import (XYZ, RGB, Chromaticity, ChromaticityCoefficients, Table,
                       RangeError, DivisionByZeroError, XYZ_TO_LINEAR_SRGB)
from chromalib.conversions import (xyz_to_linear_rgb, xyz_to_linear_rgb_safe, linear_rgb_to_xyz,
                                   correct_gamma, inverse_gamma, linear_to_display_rgb,
                                   display_rgb_to_linear, xyz_to_display_rgb, xyz_to_display_rgb_safe,
                                   xyY_to_XYZ, XYZ_to_xyY, chromaticity_coefficients,
                                   xy_chromaticity_to_display_rgb, linear_rgb_table,
                                   wavelength_to_linear_rgb, wavelength_to_display_rgb,
                                   in_display_gamut, to_css_rgb, rgb_to_hex)


def test_xyz_to_linear_rgb_matrix():
    rgb = xyz_to_linear_rgb((0.5, 0.5, 0.5))
    assert isinstance(rgb, RGB)
    assert_allclose(rgb, XYZ_TO_LINEAR_SRGB @ [0.5, 0.5, 0.5])


def test_xyz_to_linear_rgb_strict_range():
    with pytest.raises(RangeError, match='should be in range'):
        xyz_to_linear_rgb((1.2, 0.5, 0.5))
    with pytest.raises(ValueError):
        xyz_to_linear_rgb([[0.1, 0.1, 0.1], [0.1, -0.1, 0.1]])


def test_safe_path_maps_out_of_range_to_black():
    assert xyz_to_linear_rgb_safe((1.2, 0.5, 0.5)) == RGB(0.0, 0.0, 0.0)
    assert xyz_to_display_rgb_safe((0.0, 2.0, 0.0)) == RGB(0.0, 0.0, 0.0)
    out = xyz_to_linear_rgb_safe([[0.2, 0.3, 0.4], [0.2, 1.3, 0.4]])
    assert_allclose(out[0], XYZ_TO_LINEAR_SRGB @ [0.2, 0.3, 0.4])
    assert_allclose(out[1], 0.0)


def test_linear_rgb_to_xyz_is_inverse():
    xyz = XYZ(0.3, 0.4, 0.2)
    back = linear_rgb_to_xyz(xyz_to_linear_rgb(xyz))
    assert isinstance(back, XYZ)
    assert_allclose(back, xyz, atol=1E-12)


def test_gamma_continuity_at_breakpoint():
    t = 0.0031308
    assert abs(correct_gamma(t + 1E-9) - correct_gamma(t - 1E-9)) < 1E-4
    assert correct_gamma(0.0) == 0.0
    assert correct_gamma(1.0) == pytest.approx(1.0)


def test_gamma_roundtrip():
    v = np.linspace(0.0, 1.0, 101)
    assert_allclose(inverse_gamma(correct_gamma(v)), v, atol=1E-12)


def test_display_roundtrip():
    rng = np.random.default_rng(0)
    xyz = rng.uniform(0.0, 1.0, size=(200, 3))
    lin = np.asarray(xyz_to_linear_rgb(xyz))
    back = np.asarray(display_rgb_to_linear(linear_to_display_rgb(lin)))
    assert_allclose(back, lin, atol=1E-6)


def test_xyz_to_display_rgb_white():
    rgb = xyz_to_display_rgb(np.asarray(linear_rgb_to_xyz((1.0, 1.0, 1.0))) / 1.1)
    assert rgb.R == pytest.approx(rgb.G, abs=1E-6)
    assert rgb.G == pytest.approx(rgb.B, abs=1E-6)


def test_xyY_to_XYZ():
    xyz = xyY_to_XYZ(Chromaticity(0.3127, 0.3290))
    assert isinstance(xyz, XYZ)
    assert_allclose(xyz, (0.3127/0.3290, 1.0, (1 - 0.3127 - 0.3290)/0.3290))


def test_xyY_to_XYZ_zero_y():
    with pytest.raises(DivisionByZeroError):
        xyY_to_XYZ((0.3, 0.0, 1.0))
    with pytest.raises(ZeroDivisionError):
        xyY_to_XYZ([(0.3, 0.3, 1.0), (0.3, 0.0, 1.0)])
    out = xyY_to_XYZ([(0.3, 0.3, 1.0), (0.3, 0.0, 1.0)], strict=False)
    assert_allclose(out[1], 0.0)


def test_XYZ_to_xyY():
    c = XYZ_to_xyY((1.0, 2.0, 1.0))
    assert isinstance(c, Chromaticity)
    assert_allclose(c, (0.25, 0.5, 2.0))
    with pytest.raises(DivisionByZeroError):
        XYZ_to_xyY((0.0, 0.0, 0.0))
    assert XYZ_to_xyY((0.0, 0.0, 0.0), strict=False) == Chromaticity(0.0, 0.0, 0.0)


def test_chromaticity_coefficients():
    c = chromaticity_coefficients((2.0, 1.0, 1.0))
    assert isinstance(c, ChromaticityCoefficients)
    assert_allclose(c, (0.5, 0.25, 0.25))
    with pytest.raises(DivisionByZeroError):
        chromaticity_coefficients((0.0, 0.0, 0.0))
    out = chromaticity_coefficients([(1.0, 1.0, 2.0), (0.0, 0.0, 0.0)], strict=False)
    assert_allclose(out, [(0.25, 0.25, 0.5), (0.0, 0.0, 0.0)])


def test_xy_chromaticity_white_point_is_neutral():
    rgb = xy_chromaticity_to_display_rgb(0.3127, 0.3290)
    assert isinstance(rgb, RGB)
    assert max(rgb) - min(rgb) < 2.0
    assert min(rgb) > 240.0


def test_xy_chromaticity_bulk_zero_y():
    out = xy_chromaticity_to_display_rgb([0.3, 0.3], [0.3, 0.0], strict=False)
    assert out.shape == (2, 3)
    assert_allclose(out[1], 0.0)
    with pytest.raises(DivisionByZeroError):
        xy_chromaticity_to_display_rgb(0.3, 0.0)


def test_linear_rgb_table_normalizes_by_global_max():
    xyz = Table([400, 500], {'X': [0.5, 1.0], 'Y': [1.0, 2.0], 'Z': [0.0, 0.5]})
    rgb = linear_rgb_table(xyz)
    assert rgb.channel_names == ('R', 'G', 'B')
    assert_allclose(rgb.values(), (xyz.values()/2.0) @ XYZ_TO_LINEAR_SRGB.T)


def test_wavelength_to_linear_rgb_interpolates_and_clamps():
    table = Table([400, 500, 600], {'R': [0.0, 0.2, 0.4], 'G': [1.0, 0.5, 0.0], 'B': [0.1, 0.1, 0.1]})
    assert_allclose(wavelength_to_linear_rgb(450, table), (0.1, 0.75, 0.1))
    assert wavelength_to_linear_rgb(300, table) == RGB(0.0, 1.0, 0.1)
    assert wavelength_to_linear_rgb(900, table) == RGB(0.4, 0.0, 0.1)
    assert wavelength_to_linear_rgb([400, 600], table).shape == (2, 3)


def test_wavelength_to_display_rgb_intensity():
    table = Table([400, 500], {'R': [1.0, 1.0], 'G': [0.5, 0.5], 'B': [0.0, 0.0]})
    assert wavelength_to_display_rgb(450, table, intensity=0.0) == RGB(0.0, 0.0, 0.0)
    full = wavelength_to_display_rgb(450, table)
    assert full.R == pytest.approx(255.0)
    out = wavelength_to_display_rgb([400, 500], table, intensity=[1.0, 0.0])
    assert_allclose(out[0], full)
    assert_allclose(out[1], 0.0)


def test_in_display_gamut():
    assert in_display_gamut((0.0, 128.0, 255.0))
    assert not in_display_gamut((-1.0, 128.0, 255.0))
    assert list(in_display_gamut([(0, 0, 0), (0, 0, 256)])) == [True, False]


def test_css_and_hex():
    assert to_css_rgb(RGB(255.4, -3.0, 12.6)) == 'rgb(255, 0, 13)'
    assert to_css_rgb((255, 0, 13), alpha=0.5) == 'rgba(255, 0, 13, 0.5)'
    assert rgb_to_hex((255, 0, 128)) == '#ff0080'
    with pytest.raises(ValueError):
        rgb_to_hex([(0, 0, 0), (1, 1, 1)])


def test_non_finite_xyz_is_out_of_range():
    with pytest.raises(RangeError):
        xyz_to_linear_rgb((np.nan, 0.5, 0.5))
    with pytest.raises(RangeError):
        xyz_to_linear_rgb([[0.1, 0.1, 0.1], [0.1, np.inf, 0.1]])
    assert xyz_to_linear_rgb_safe((0.2, np.nan, 0.2)) == RGB(0.0, 0.0, 0.0)
