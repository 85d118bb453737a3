"""
DXF export of rebar curves.

Writes rebarCAD curves to a three dimensional DXF drawing with ezdxf:

- lines become LINE entities
- NURBS curves become SPLINE entities, rational when weighted
- every other curve (arcs, polycurves, surface lines, trimmed segments)
  is sampled into a 3D POLYLINE
"""

import logging
from pathlib import Path
from typing import Dict, List

import ezdxf

from rebarcad.curves import iscurve, sample
from rebarcad.errors import PreconditionError
from rebarcad.geom import isline
from rebarcad.spline import isnurbs

logger = logging.getLogger(__name__)

## chords per sampled curve
POLYLINE_SAMPLES = 64

## ACI colors handed out to new layers in turn
_LAYER_COLORS = (1, 2, 3, 4, 5, 6, 7)


def _xyz(p):
    return (float(p[0]), float(p[1]), float(p[2]))


def _ensure_layer(doc, name):
    if name not in doc.layers:
        color = _LAYER_COLORS[(len(doc.layers) - 1) % len(_LAYER_COLORS)]
        doc.layers.new(name, dxfattribs={'color': color})


def add_curve(msp, curve, layer):
    """Add one curve to a modelspace on ``layer``."""
    attribs = {'layer': layer}
    if isline(curve):
        msp.add_line(_xyz(curve[0]), _xyz(curve[1]), dxfattribs=attribs)
    elif isnurbs(curve):
        _, ctrl, meta = curve
        points = [_xyz(p) for p in ctrl]
        weights = meta['weights']
        if any(abs(w - 1.0) > 1e-12 for w in weights):
            msp.add_rational_spline(points, weights, degree=meta['degree'],
                                    knots=meta['knots'], dxfattribs=attribs)
        else:
            msp.add_open_spline(points, degree=meta['degree'],
                                knots=meta['knots'], dxfattribs=attribs)
    elif iscurve(curve):
        points = [_xyz(sample(curve, i / POLYLINE_SAMPLES))
                  for i in range(POLYLINE_SAMPLES + 1)]
        msp.add_polyline3d(points, dxfattribs=attribs)
    else:
        raise PreconditionError('cannot export {!r} to DXF'.format(curve))


def write_dxf_layers(layers: Dict[str, List[list]], output_path) -> Path:
    """Write curves grouped by layer name to one DXF file.

    Args:
        layers: mapping of layer name to a list of curves
        output_path: DXF file to write; ``.dxf`` is appended if missing

    Returns:
        The path written.
    """
    path = Path(output_path)
    if path.suffix.lower() != '.dxf':
        path = path.with_suffix('.dxf')

    doc = ezdxf.new(dxfversion='R2010', setup=False)
    msp = doc.modelspace()
    count = 0
    for name, curves in layers.items():
        _ensure_layer(doc, name)
        for curve in curves:
            add_curve(msp, curve, name)
            count += 1
    doc.saveas(str(path))
    logger.info('wrote %d curves on %d layers to %s', count, len(layers), path)
    return path


def write_dxf(curves: List[list], output_path, layer: str = 'REBAR') -> Path:
    """Write a list of curves to a DXF file on a single layer."""
    return write_dxf_layers({layer: curves}, output_path)


__all__ = ['POLYLINE_SAMPLES', 'add_curve', 'write_dxf', 'write_dxf_layers']
