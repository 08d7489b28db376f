# -*- coding: utf-8 -*-
"""
Geometry derived from the colour-matching functions:
    spectral locus (xy chromaticity of every spectral colour)
    point-in-locus test and rasterized chromaticity diagram
    visual-gamut point cloud (segments joining spectral samples to anchors)

Created on Sun 13 Oct, 2024
"""

import dataclasses
import logging
import yaml
import numpy as _np
import pandas as _pd
from matplotlib.path import Path as _MplPath
from pathlib import Path as _Path
from typing import Callable as _Callable, Dict as _Dict, Iterator as _Iterator, \
    Optional as _Optional, Tuple as _Tuple

from .conversions import XYZ_to_xyY, chromaticity_coefficients, linear_to_display_rgb, \
    xy_chromaticity_to_display_rgb, xyz_to_display_rgb_safe
from .ref_spectra import Table

__all__ = ['GamutConfig',
           'load_gamut_presets',
           'compute_spectral_locus',
           'close_locus',
           'point_in_locus',
           'rasterize_locus',
           'iter_gamut_segments',
           'build_gamut_cloud',
           'project_to_unit_plane']

logger = logging.getLogger(__name__)

_PRESETS_FILE = _Path(__file__).parent / 'gamut_presets.yaml'

# default point colouring per sample space
_COLOR_FUNCS = {
    'xyz'        : xyz_to_display_rgb_safe,
    'linear_rgb' : linear_to_display_rgb,
}


@dataclasses.dataclass(frozen=True)
class GamutConfig:
    """
    Parameters of a visual-gamut point cloud.

    delta : float
        arc-length step between points emitted along a segment.
    anchor_indices : tuple of int
        sample indices every spectral sample is joined to.
    brightness_factor : float
        scale applied to the samples before sampling.
    normalize : bool
        divide the samples by their largest coordinate before scaling.
    space : str
        colour space of the samples, 'xyz' or 'linear_rgb'. Selects the
        default display colour conversion.
    color_gain : float
        factor applied to the display colours (values above 1 brighten
        them without moving the points).
    """
    delta: float = 0.02
    anchor_indices: _Tuple[int, ...] = (0, 87, 168)
    brightness_factor: float = 1.0
    normalize: bool = False
    space: str = 'xyz'
    color_gain: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, 'anchor_indices', tuple(int(i) for i in self.anchor_indices))
        if self.space not in _COLOR_FUNCS:
            raise ValueError(f"space must be one of {', '.join(_COLOR_FUNCS)}, got '{self.space}'.")
        if not self.color_gain > 0:
            raise ValueError("color_gain must be > 0.")
        if not self.delta > 0:
            raise ValueError("delta must be > 0.")
        if not self.anchor_indices:
            raise ValueError("anchor_indices cannot be empty.")
        if any(i < 0 for i in self.anchor_indices):
            raise ValueError("anchor_indices must be non-negative.")
        if not self.brightness_factor > 0:
            raise ValueError("brightness_factor must be > 0.")

    @classmethod
    def from_preset(cls, name: str, path=None) -> 'GamutConfig':
        presets = load_gamut_presets(path)
        if name not in presets:
            raise KeyError(f"Unknown gamut preset '{name}'. Available: {', '.join(presets)}")
        return presets[name]


def load_gamut_presets(path=None) -> _Dict[str, GamutConfig]:
    '''
    Read gamut presets from a YAML file (defaults to the bundled
    gamut_presets.yaml). Each top-level key maps to GamutConfig fields.
    '''
    file_path = _Path(path) if path is not None else _PRESETS_FILE
    with open(file_path, encoding='utf-8') as fn:
        raw = yaml.safe_load(fn) or {}

    fields = {f.name for f in dataclasses.fields(GamutConfig)}
    presets = {}
    for name, params in raw.items():
        unknown = set(params) - fields
        if unknown:
            raise ValueError(f"preset '{name}': unknown field(s) {', '.join(sorted(unknown))}")
        presets[name] = GamutConfig(**params)
    return presets


# ---------------------------- spectral locus ---------------------------------

def compute_spectral_locus(xyz_table: Table, channels=('X', 'Y', 'Z')) -> _np.ndarray:
    '''
    Chromaticity (x, y) of every row of an XYZ colour-matching table.

    Parameters
    ----------
    xyz_table : Table
        CIE XYZ colour-matching functions.
    channels : tuple of str
        names of the X, Y, Z channels.

    Returns
    -------
    ndarray (N, 2)
        open curve in wavelength order. Together with the straight line of
        purples between its first and last points it bounds every
        physically realizable chromaticity.

    Raises
    ------
    DivisionByZeroError
        if a row has X + Y + Z = 0.
    '''
    xyY = _np.atleast_2d(_np.asarray(XYZ_to_xyY(xyz_table.values(channels))))
    return xyY[:, :2].copy()


def close_locus(locus) -> _np.ndarray:
    '''Locus polygon with the first point repeated at the end (line of purples).'''
    pts = _np.asarray(locus, dtype=float)
    return _np.vstack((pts, pts[:1]))


def point_in_locus(locus, x, y):
    """
    Point-in-polygon test against the closed locus polygon
    (matplotlib.path.Path.contains_points, one vectorised pass over the queries).

    Parameters
    ----------
    locus : (N, 2) array_like
        open locus (the closing purple segment is implied).
    x, y : float or array_like
        query chromaticities, broadcast together.

    Returns
    -------
    bool or ndarray of bool
    """
    poly = _np.asarray(locus, dtype=float)
    if poly.ndim != 2 or poly.shape[1] != 2 or len(poly) < 3:
        raise ValueError("locus must have shape (N, 2) with N >= 3.")

    x, y = _np.broadcast_arrays(_np.asarray(x, dtype=float), _np.asarray(y, dtype=float))
    path = _MplPath(close_locus(poly), closed=True)
    inside = path.contains_points(_np.column_stack((x.ravel(), y.ravel()))).reshape(x.shape)
    return bool(inside) if inside.ndim == 0 else inside


def rasterize_locus(locus, step: float = 0.01) -> _pd.DataFrame:
    '''
    Chromaticity diagram on a regular grid.

    Every (x, y) of a `step` grid over [0, 1]² that lies inside the locus is
    returned with its display colour at maximum brightness
    (xy_chromaticity_to_display_rgb).

    Returns
    -------
    DataFrame
        columns x, y, R, G, B.
    '''
    if not step > 0:
        raise ValueError("step must be > 0.")
    grid = _np.arange(int(_np.floor(1/step)) + 1)*step
    xx, yy = _np.meshgrid(grid, grid, indexing='ij')
    xx, yy = xx.ravel(), yy.ravel()

    mask = point_in_locus(locus, xx, yy)
    xs, ys = xx[mask], yy[mask]
    colors = _np.asarray(xy_chromaticity_to_display_rgb(xs, ys, strict=False)).reshape(-1, 3)
    logger.debug("rasterized locus: %d of %d grid points inside", xs.size, xx.size)
    return _pd.DataFrame({'x': xs, 'y': ys, 'R': colors[:, 0], 'G': colors[:, 1], 'B': colors[:, 2]})


# ---------------------------- gamut cloud ---------------------------------

def _prepare_samples(points, config: GamutConfig) -> _np.ndarray:
    pts = _np.asarray(points, dtype=float)
    if pts.ndim != 2 or pts.shape[1] != 3:
        raise ValueError("points must have shape (N, 3).")
    bad = [i for i in config.anchor_indices if i >= len(pts)]
    if bad:
        raise ValueError(f"anchor index {bad[0]} out of range for {len(pts)} samples.")

    if config.normalize:
        peak = pts.max()
        if peak > 0:
            pts = pts/peak
    return pts*config.brightness_factor


def iter_gamut_segments(points, config: _Optional[GamutConfig] = None) -> _Iterator[_Tuple[int, int, _np.ndarray]]:
    '''
    Walk every segment joining a sample to each anchor.

    Yields (sample_index, anchor_index, segment_points) where segment_points
    has shape (k, 3): the sample itself followed by points every
    `config.delta` along the segment towards the anchor (the anchor is only
    reached when the length is a multiple of delta).

    Being a generator, the walk can be chunked or stopped between segments.
    '''
    config = GamutConfig() if config is None else config
    pts = _prepare_samples(points, config)
    delta = config.delta

    for i, start in enumerate(pts):
        for j in config.anchor_indices:
            vec = pts[j] - start
            length = _np.linalg.norm(vec)
            unit = vec/length if length != 0 else _np.zeros(3)
            nb_step = int(_np.floor(length/delta))
            steps = _np.arange(nb_step + 1)*delta
            yield i, j, start + steps[:, None]*unit


def build_gamut_cloud(points,
                      delta: _Optional[float] = None,
                      *,
                      config: _Optional[GamutConfig] = None,
                      color_func: _Optional[_Callable] = None) -> _pd.DataFrame:
    """
    Dense point cloud approximating the visual gamut.

    Each spectral sample is joined by a straight segment to every anchor
    sample, and points are emitted every `delta` along those segments. The
    cloud fills the volume spanned by pairs of spectral colours; it is a
    visual approximation, not the convex hull of the locus.

    Parameters
    ----------
    points : (N, 3) array_like
        spectral samples, e.g. XYZ or RGB colour-matching values per
        wavelength.
    delta : float, optional
        overrides config.delta.
    config : GamutConfig, optional
        defaults to GamutConfig().
    color_func : callable, optional
        maps an (M, 3) array of points to display RGB. Defaults to the
        conversion matching config.space: permissive XYZ -> display RGB
        for 'xyz', linear_to_display_rgb for 'linear_rgb'. The colours
        are then multiplied by config.color_gain.

    Returns
    -------
    DataFrame
        columns x, y, z (point), R, G, B (display colour), sample, anchor.
    """
    config = GamutConfig() if config is None else config
    if delta is not None:
        config = dataclasses.replace(config, delta=delta)
    color_func = _COLOR_FUNCS[config.space] if color_func is None else color_func

    chunks, samples, anchors = [], [], []
    for i, j, seg in iter_gamut_segments(points, config):
        chunks.append(seg)
        samples.append(_np.full(len(seg), i))
        anchors.append(_np.full(len(seg), j))

    cloud = _np.vstack(chunks) if chunks else _np.empty((0, 3))
    colors = _np.asarray(color_func(cloud), dtype=float).reshape(-1, 3) if len(cloud) else _np.empty((0, 3))
    colors = colors*config.color_gain
    logger.debug("gamut cloud: %d points over %d segments (delta=%g)", len(cloud), len(chunks), config.delta)

    return _pd.DataFrame({
        'x': cloud[:, 0], 'y': cloud[:, 1], 'z': cloud[:, 2],
        'R': colors[:, 0], 'G': colors[:, 1], 'B': colors[:, 2],
        'sample': _np.concatenate(samples) if samples else _np.empty(0, dtype=int),
        'anchor': _np.concatenate(anchors) if anchors else _np.empty(0, dtype=int),
    })


def project_to_unit_plane(points, *, strict: bool = False) -> _np.ndarray:
    '''
    Central projection of 3D points onto the plane x + y + z = 1
    (each point divided by the sum of its coordinates). Points with a zero
    sum map to the origin unless strict=True.
    '''
    pts = _np.asarray(points, dtype=float)
    return _np.asarray(chromaticity_coefficients(pts, strict=strict))
