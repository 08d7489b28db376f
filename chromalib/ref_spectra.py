# -*- coding: utf-8 -*-
"""
This library contains the tabulated function store:
    Table: immutable wavelength-indexed numeric table
    load_table: parse CSV files, URLs, DataFrames or row dicts into a Table
    reference_table: bundled CIE tables (CMFs, V(λ), illuminants)

Tables are keyed by wavelength in nm and sorted ascending. Every channel is
a read-only float array.
"""

import logging
import numpy as _np
import pandas as _pd
import colour as _clr
import requests
from io import StringIO
from pathlib import Path as _Path
from types import MappingProxyType as _MappingProxyType
from typing import Optional as _Optional, Sequence as _Sequence, Dict as _Dict, Union as _Union

from .errors import DataFormatError
from .utils import convert_units, interpolate_at

__all__ = ['Table',
           'load_table',
           'reference_table',
           'REFERENCE_TABLES',
           'WAVELENGTH']

logger = logging.getLogger(__name__)

# Column name used for the wavelength key when exporting rows / frames
WAVELENGTH = 'Wavelength'

# Global cache for parsed files/URLs and bundled tables
_file_cache = {}
_reference_cache = {}


class Table:
    """
    Immutable wavelength-indexed table.

    Parameters
    ----------
    wavelength : (N,) array_like
        wavelengths in nm, strictly increasing.
    channels : dict
        channel name -> (N,) array_like of values.
    name : str, optional
        label used in messages.
    """

    def __init__(self, wavelength, channels: _Dict[str, _Sequence[float]], name: str = ''):
        lam = _np.array(wavelength, dtype=float)
        if lam.ndim != 1 or lam.size == 0:
            raise DataFormatError("wavelength must be a non-empty 1D array.")
        if not _np.all(_np.isfinite(lam)):
            raise DataFormatError("wavelength contains missing or non-finite values.")
        if lam.size > 1 and not _np.all(_np.diff(lam) > 0):
            raise DataFormatError("wavelength must be strictly increasing.")
        if not channels:
            raise DataFormatError("a table needs at least one channel.")

        data = {}
        for key, col in channels.items():
            arr = _np.array(col, dtype=float)
            if arr.shape != lam.shape:
                raise DataFormatError(f"channel '{key}' must have {lam.size} values.")
            arr.setflags(write=False)
            data[str(key)] = arr
        lam.setflags(write=False)

        self._wavelength = lam
        self._channels = data
        self.name = name

    @property
    def wavelength(self) -> _np.ndarray:
        return self._wavelength

    @property
    def channels(self):
        return _MappingProxyType(self._channels)

    @property
    def channel_names(self):
        return tuple(self._channels)

    @property
    def domain(self):
        """(min, max) wavelength in nm"""
        return float(self._wavelength[0]), float(self._wavelength[-1])

    def __len__(self):
        return self._wavelength.size

    def __contains__(self, key):
        return key in self._channels

    def __getitem__(self, key) -> _np.ndarray:
        try:
            return self._channels[key]
        except KeyError:
            raise KeyError(f"{self.name or 'table'} has no channel '{key}' "
                           f"(available: {', '.join(self._channels)})") from None

    def __repr__(self):
        lo, hi = self.domain
        return (f"Table(name={self.name!r}, rows={len(self)}, "
                f"domain=({lo:g}, {hi:g}) nm, channels={list(self._channels)})")

    def values(self, channels: _Optional[_Sequence[str]] = None) -> _np.ndarray:
        '''
        Channel values stacked column-wise, shape (N, len(channels)).
        '''
        names = self.channel_names if channels is None else tuple(channels)
        return _np.column_stack([self[c] for c in names])

    def select(self, channels: _Sequence[str]) -> 'Table':
        '''
        New table restricted to `channels` (in the given order). Raises
        DataFormatError if one of them is missing.
        '''
        missing = [c for c in channels if c not in self._channels]
        if missing:
            raise DataFormatError(f"{self.name or 'table'} is missing channel(s): {', '.join(missing)}")
        return Table(self._wavelength, {c: self._channels[c] for c in channels}, name=self.name)

    def with_channels(self, channels: _Dict[str, _Sequence[float]], name: _Optional[str] = None) -> 'Table':
        '''
        New table on the same wavelength grid with different channels.
        '''
        return Table(self._wavelength, channels, name=self.name if name is None else name)

    def interpolate(self, lam, channels: _Optional[_Sequence[str]] = None):
        '''
        Linearly interpolated channel values at `lam` (nm), clamped to the
        table domain. Returns shape (k,) for scalar lam, (M, k) otherwise.
        '''
        return interpolate_at(self._wavelength, self.values(channels), lam)

    def rows(self):
        '''
        List of samples: [{'Wavelength': λ, channel: value, ...}, ...]
        '''
        names = self.channel_names
        return [dict(zip((WAVELENGTH,) + names, (float(v) for v in row)))
                for row in _np.column_stack((self._wavelength, self.values()))]

    def to_frame(self) -> _pd.DataFrame:
        df = _pd.DataFrame(dict(self._channels), index=_pd.Index(self._wavelength, name=WAVELENGTH))
        return df


def _table_from_frame(df: _pd.DataFrame, name: str = '', wavelength_column: _Optional[str] = None) -> Table:
    '''
    Validate a DataFrame whose first column (or `wavelength_column`) is the
    wavelength and build a sorted Table from it.
    '''
    df = df.rename(columns=lambda c: str(c).strip())
    if df.shape[1] < 2:
        raise DataFormatError(f"{name or 'table'}: expected a wavelength column and at least one channel.")

    wl_col = df.columns[0] if wavelength_column is None else wavelength_column
    if wl_col not in df.columns:
        raise DataFormatError(f"{name or 'table'}: missing wavelength column '{wl_col}'.")

    columns = {}
    for col in df.columns:
        raw = df[col]
        num = _pd.to_numeric(raw, errors='coerce')
        bad = num.isna()
        if bad.any():
            row = int(_np.flatnonzero(bad.to_numpy())[0])
            if raw.isna().iloc[row] or str(raw.iloc[row]).strip() == '':
                what = 'wavelength' if col == wl_col else f"channel '{col}'"
                raise DataFormatError(f"{name or 'table'}: row {row} is missing {what}.")
            raise DataFormatError(
                f"{name or 'table'}: non-numeric value {raw.iloc[row]!r} in column '{col}' (row {row}).")
        columns[col] = num.to_numpy(dtype=float)

    lam = columns.pop(wl_col)
    order = _np.argsort(lam, kind='stable')
    lam = lam[order]
    dup = _np.flatnonzero(_np.diff(lam) == 0)
    if dup.size:
        raise DataFormatError(f"{name or 'table'}: duplicate wavelength {lam[dup[0]]:g} nm.")

    return Table(lam, {c: v[order] for c, v in columns.items()}, name=name)


def _read_source(source, sep: str) -> _pd.DataFrame:
    '''
    Read a CSV path, http(s) URL or file-like object into a DataFrame.
    '''
    if hasattr(source, 'read'):
        return _pd.read_csv(source, sep=sep, comment='#', skipinitialspace=True)

    src = str(source)
    if src.startswith(('http://', 'https://')):
        response = requests.get(src, timeout=30)
        response.raise_for_status()
        return _pd.read_csv(StringIO(response.text), sep=sep, comment='#', skipinitialspace=True)

    file_path = _Path(src).expanduser()
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    return _pd.read_csv(file_path, sep=sep, comment='#', skipinitialspace=True)


def load_table(source,
               *,
               name: _Optional[str] = None,
               channels: _Optional[_Sequence[str]] = None,
               wavelength_column: _Optional[str] = None,
               wavelength_units: str = 'nm',
               sep: str = ',',
               use_cache: bool = True) -> Table:
    """
    Load a wavelength-indexed table.

    Parameters
    ----------
    source : str, Path, file-like, pandas.DataFrame or list of dict
        - path to a CSV file with a header row
        - http(s) URL of a CSV file (downloaded with requests)
        - an open text stream
        - a DataFrame
        - a list of row dicts, e.g. [{'Wavelength': 380, 'X': 0.0014, ...}, ...]
        In every case the first column (or `wavelength_column`) is the
        wavelength; the remaining columns are numeric channels.
    name : str, optional
        label for the table. Defaults to the file name.
    channels : sequence of str, optional
        channels to keep. A missing channel raises DataFormatError.
    wavelength_column : str, optional
        name of the wavelength column if it is not the first one.
    wavelength_units : str
        units of the wavelength column ('nm', 'um', 'm', 'cm^-1', 'Hz', 'eV').
        The resulting table is always in nm.
    sep : str
        CSV delimiter.
    use_cache : bool
        paths and URLs are parsed once and reused.

    Returns
    -------
    Table

    Raises
    ------
    DataFormatError
        missing wavelength, missing or non-numeric channel, duplicate
        wavelengths.
    FileNotFoundError
        the path does not exist.
    """
    if isinstance(source, Table):
        table = source

    elif isinstance(source, _pd.DataFrame):
        table = _table_from_frame(source, name or '', wavelength_column)

    elif isinstance(source, (list, tuple)):
        if not source:
            raise DataFormatError("no rows to load.")
        key = wavelength_column or next(iter(source[0]), None)
        for i, row in enumerate(source):
            if key is None or key not in row:
                raise DataFormatError(f"{name or 'table'}: row {i} is missing the wavelength key {key!r}.")
        table = _table_from_frame(_pd.DataFrame(list(source)), name or '', key)

    else:
        is_stream = hasattr(source, 'read')
        cache_key = None if is_stream else (str(source), sep, wavelength_column)
        if use_cache and cache_key in _file_cache:
            logger.debug("table cache hit: %s", source)
            table = _file_cache[cache_key]
        else:
            label = name or ('' if is_stream else _Path(str(source)).stem)
            table = _table_from_frame(_read_source(source, sep), label, wavelength_column)
            if use_cache and cache_key is not None:
                _file_cache[cache_key] = table

    if name is not None and table.name != name:
        table = Table(table.wavelength, dict(table.channels), name=name)

    if wavelength_units != 'nm':
        lam = convert_units(table.wavelength, wavelength_units, 'nm')
        order = _np.argsort(lam)
        table = Table(lam[order], {c: v[order] for c, v in table.channels.items()}, name=table.name)

    if channels is not None:
        table = table.select(channels)

    lo, hi = table.domain
    logger.debug("loaded table %r: %d rows, %g–%g nm, channels %s",
                 table.name, len(table), lo, hi, table.channel_names)
    return table


# ----------------------------- bundled tables ---------------------------------

def _from_multi_sds(key, labels, name):
    msds = _clr.MSDS_CMFS[key]
    values = _np.asarray(msds.values, dtype=float)
    return Table(_np.asarray(msds.domain, float), dict(zip(labels, values.T)), name=name)


def _from_sd(sd, label, name):
    return Table(_np.asarray(sd.domain, float), {label: _np.asarray(sd.values, float)}, name=name)


def _cie_xyz(name):
    return _from_multi_sds('CIE 1931 2 Degree Standard Observer', ('X', 'Y', 'Z'), name)


def _cie_xyz_normalized(name):
    table = reference_table('cie_xyz_1931_2deg')
    peak = table.values().max()
    return table.with_channels({c: v/peak for c, v in table.channels.items()}, name=name)


def _cie_rgb(name):
    return _from_multi_sds('Wright & Guild 1931 2 Degree RGB CMFs', ('R', 'G', 'B'), name)


def _cie_rgb_coef(name):
    from .conversions import chromaticity_coefficients
    table = reference_table('cie_rgb_1931_2deg')
    coef = chromaticity_coefficients(table.values(), strict=False)
    return table.with_channels(dict(zip(('r', 'g', 'b'), coef.T)), name=name)


def _photopic(name):
    return _from_sd(_clr.colorimetry.SDS_LEFS_PHOTOPIC['CIE 1924 Photopic Standard Observer'], 'V', name)


def _illuminant(key):
    return lambda name: _from_sd(_clr.SDS_ILLUMINANTS[key], 'power', name)


_REFERENCE_BUILDERS = {
    'cie_xyz_1931_2deg'            : _cie_xyz,
    'cie_xyz_1931_2deg_normalized' : _cie_xyz_normalized,
    'cie_rgb_1931_2deg'            : _cie_rgb,
    'cie_rgb_coef'                 : _cie_rgb_coef,
    'cie_photopic'                 : _photopic,
    'illuminant_A'                 : _illuminant('A'),
    'illuminant_D50'               : _illuminant('D50'),
    'illuminant_D65'               : _illuminant('D65'),
}

REFERENCE_TABLES = tuple(_REFERENCE_BUILDERS)


def reference_table(name: str) -> Table:
    '''
    Bundled CIE table (data from colour-science).

    Parameters
    ----------
    name : str
        'cie_xyz_1931_2deg'             X, Y, Z  (360–830 nm, 1 nm)
        'cie_xyz_1931_2deg_normalized'  same, scaled so the largest value is 1
        'cie_rgb_1931_2deg'             R, G, B  (Wright & Guild RGB CMFs)
        'cie_rgb_coef'                  r, g, b  chromaticity coefficients
        'cie_photopic'                  V        (CIE 1924 photopic V(λ))
        'illuminant_A', 'illuminant_D50', 'illuminant_D65'   power

    Returns
    -------
    Table
        shared, read-only instance.
    '''
    if name not in _REFERENCE_BUILDERS:
        raise KeyError(f"Unknown reference table '{name}'. Available: {', '.join(REFERENCE_TABLES)}")
    if name not in _reference_cache:
        _reference_cache[name] = _REFERENCE_BUILDERS[name](name)
        logger.debug("built reference table %s", _reference_cache[name])
    return _reference_cache[name]
