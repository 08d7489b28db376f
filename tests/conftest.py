# -*- coding: utf-8 -*-
import numpy as np
import pytest

from chromalib import ColorSystem, Table, reference_table


@pytest.fixture
def triangle_xyz():
    '''XYZ table whose locus is the triangle (1, 0), (0, 1), (0, 0)'''
    return Table([400, 500, 600],
                 {'X': [1.0, 0.0, 0.0], 'Y': [0.0, 1.0, 0.0], 'Z': [0.0, 0.0, 1.0]},
                 name='triangle')


@pytest.fixture
def ramp_cmf():
    '''CMF-like table on 0-10 nm: X = 1, Y = λ, Z = 0'''
    lam = np.arange(11.0)
    return Table(lam, {'X': np.ones_like(lam), 'Y': lam, 'Z': np.zeros_like(lam)}, name='ramp')


@pytest.fixture(scope='session')
def cie_xyz():
    return reference_table('cie_xyz_1931_2deg')


@pytest.fixture(scope='session')
def cie_rgb():
    return reference_table('cie_rgb_1931_2deg')


@pytest.fixture(scope='session')
def cie1931():
    return ColorSystem.cie1931()
