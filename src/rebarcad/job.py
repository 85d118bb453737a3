"""
Batch rebar jobs described in YAML.

A job names some geometry and lists the rebar operations to run on it.
Every operation produces a list of curves stored under the operation's
name, which later operations can refer to and which becomes the DXF
layer the curves are written to.

Example::

    bar_catalog: metric
    geometry:
      bottom: {line: [[0, 0, 0], [2000, 0, 0]]}
      top: {arc: [[0, 0, 1000], [1000, 0, 1400], [2000, 0, 1000]]}
      wall: {quad: [[0, 0, 0], [2000, 0, 0], [2000, 0, 1000], [0, 0, 1000]]}
    operations:
      - name: MORPH
        op: morph
        from: bottom
        to: top
        count: 4
      - name: MORPH_TRIMMED
        op: shorten
        source: MORPH
        length: 50
      - name: VERTICAL
        op: follow
        face: wall
        spacing: 200
        cover: 30
        bar_type: D12

Geometry kinds are ``line``, ``arc`` (three points), ``polyline``,
``nurbs`` (``points``, ``degree``, ``interpolate``), ``quad``, ``plane``
(``origin``, ``x_axis``, ``y_axis``, ``width``, ``height``), ``patch`` and
``loft`` (two named curves).  Operations are ``morph``,
``perpendicular``, ``follow``, ``shorten`` and ``cut``.
"""

from pathlib import Path
from typing import Any, Callable, Dict, List

import yaml

from rebarcad.curves import iscurve, polycurve
from rebarcad.errors import PreconditionError
from rebarcad.geom import arc3p, line, point
from rebarcad.logging_config import get_logger
from rebarcad.rebar import (cover_to_offset, cut, following_surface, morphed,
                            perpendicular, shorten)
from rebarcad.spline import interpolate_nurbs, nurbs_by_control_points
from rebarcad.surfaces import (issurface, loft_surface, patch_surface,
                               plane_surface, quad_surface)

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Geometry
# -----------------------------------------------------------------------------

def _points(value, count=None):
    if not isinstance(value, (list, tuple)):
        raise PreconditionError(f"expected a list of points, got {value!r}")
    pts = [point(p) for p in value]
    if count is not None and len(pts) != count:
        raise PreconditionError(f"expected {count} points, got {len(pts)}")
    return pts


def _make_nurbs(value, named):
    if isinstance(value, dict):
        pts = _points(value.get("points"))
        degree = int(value.get("degree", 3))
        if value.get("interpolate", True):
            return interpolate_nurbs(pts, degree)
        return nurbs_by_control_points(pts, degree)
    return interpolate_nurbs(_points(value))


def _make_polyline(value, named):
    pts = _points(value)
    if len(pts) < 2:
        raise PreconditionError("a polyline needs at least 2 points")
    return polycurve([line(a, b) for a, b in zip(pts, pts[1:])])


def _make_plane(value, named):
    if not isinstance(value, dict):
        raise PreconditionError("plane needs origin, x_axis, y_axis, width and height")
    return plane_surface(point(value.get("origin", [0, 0, 0])),
                         point(value.get("x_axis", [1, 0, 0])),
                         point(value.get("y_axis", [0, 1, 0])),
                         float(value["width"]), float(value["height"]))


def _make_loft(value, named):
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise PreconditionError("loft needs the names of two curves")
    curves = [_lookup(named, name, iscurve, "curve") for name in value]
    return loft_surface(*curves)


GEOMETRY_KINDS: Dict[str, Callable[[Any, Dict[str, Any]], list]] = {
    "line": lambda v, named: line(*_points(v, 2)),
    "arc": lambda v, named: arc3p(*_points(v, 3)),
    "polyline": _make_polyline,
    "nurbs": _make_nurbs,
    "quad": lambda v, named: quad_surface(*_points(v, 4)),
    "plane": _make_plane,
    "patch": lambda v, named: patch_surface(_points(v)),
    "loft": _make_loft,
}


def _lookup(named, name, check, what):
    if name not in named:
        raise PreconditionError(f"unknown {what} '{name}'")
    value = named[name]
    if not check(value):
        raise PreconditionError(f"'{name}' is not a {what}")
    return value


def build_geometry(spec: Dict[str, Any]) -> Dict[str, list]:
    """Build the named geometry of a job, in file order.

    Each entry maps a name to a single-key dict ``{kind: value}``.
    Lofts may refer to curves defined above them.
    """
    named: Dict[str, list] = {}
    for name, entry in (spec or {}).items():
        if not isinstance(entry, dict) or len(entry) != 1:
            raise PreconditionError(f"geometry '{name}' must be a single {{kind: value}} entry")
        kind, value = next(iter(entry.items()))
        if kind not in GEOMETRY_KINDS:
            raise PreconditionError(
                f"unknown geometry kind '{kind}' for '{name}'. "
                f"Available: {sorted(GEOMETRY_KINDS)}")
        named[name] = GEOMETRY_KINDS[kind](value, named)
        logger.debug("built %s '%s'", kind, name)
    return named


# -----------------------------------------------------------------------------
# Operations
# -----------------------------------------------------------------------------

def _offset(op, job):
    if "cover" in op:
        return cover_to_offset(float(op["cover"]), op.get("bar_type"),
                               job.get("bar_catalog", "metric"))
    return float(op.get("offset", 0.0))


def _surface(named, name):
    return _lookup(named, name, issurface, "surface")


def _source(results, op):
    name = op.get("source")
    if name not in results:
        raise PreconditionError(f"unknown source '{name}'")
    return results[name]


def _run_morph(op, named, results, job):
    return morphed(_lookup(named, op.get("from"), iscurve, "curve"),
                   _lookup(named, op.get("to"), iscurve, "curve"),
                   int(op["count"]), _offset(op, job))


def _run_perpendicular(op, named, results, job):
    boundary = op.get("boundary", [])
    if isinstance(boundary, str):
        boundary = [boundary]
    return perpendicular(_surface(named, op.get("face")),
                         [_surface(named, b) for b in boundary],
                         float(op.get("height", 0.5)), int(op["count"]),
                         flip=bool(op.get("flip", True)), offset=_offset(op, job))


def _run_follow(op, named, results, job):
    return following_surface(_surface(named, op.get("face")),
                             count=int(op.get("count", 0)),
                             spacing=float(op.get("spacing", 0.0)),
                             flip=bool(op.get("flip", True)),
                             offset=_offset(op, job),
                             idealize=bool(op.get("idealize", True)),
                             include_first_edge=bool(op.get("include_first_edge", False)),
                             include_last_edge=bool(op.get("include_last_edge", False)))


def _run_shorten(op, named, results, job):
    return shorten(_source(results, op), float(op["length"]))


def _run_cut(op, named, results, job):
    return cut(_source(results, op), _surface(named, op.get("plane")),
               first_part=bool(op.get("first_part", True)))


OPERATIONS = {
    "morph": _run_morph,
    "perpendicular": _run_perpendicular,
    "follow": _run_follow,
    "shorten": _run_shorten,
    "cut": _run_cut,
}


def run_job(job: Dict[str, Any]) -> Dict[str, List[list]]:
    """Run every operation of a job.

    Returns:
        Mapping of operation name to the curves it produced, in job order.
    """
    if not isinstance(job, dict):
        raise PreconditionError("a job must be a mapping")
    named = build_geometry(job.get("geometry"))
    results: Dict[str, List[list]] = {}
    for index, op in enumerate(job.get("operations") or []):
        if not isinstance(op, dict) or "op" not in op:
            raise PreconditionError(f"operation {index} has no 'op'")
        kind = op["op"]
        if kind not in OPERATIONS:
            raise PreconditionError(
                f"unknown operation '{kind}'. Available: {sorted(OPERATIONS)}")
        name = str(op.get("name", f"{kind.upper()}_{index}"))
        try:
            results[name] = OPERATIONS[kind](op, named, results, job)
        except KeyError as e:
            raise PreconditionError(f"operation '{name}' is missing {e}") from None
        logger.info("%s: %d curves", name, len(results[name]))
    return results


def load_job(path) -> Dict[str, Any]:
    """Read a job file."""
    with open(Path(path), "r", encoding="utf-8") as f:
        job = yaml.safe_load(f)
    if not isinstance(job, dict):
        raise PreconditionError(f"Invalid job format in {path}: expected a mapping at root")
    return job


def run_job_file(path) -> Dict[str, List[list]]:
    return run_job(load_job(path))


__all__ = [
    "GEOMETRY_KINDS",
    "OPERATIONS",
    "build_geometry",
    "run_job",
    "load_job",
    "run_job_file",
]
