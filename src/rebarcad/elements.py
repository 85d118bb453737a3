"""
Rebar element records.

These are the in-memory counterparts of the structural elements a host
application creates from rebar curves: single bars and containers
holding a set of bars that share a bar type, style and hooks.  Curves
are stored as rebarCAD curves; nothing here talks to a host document.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from rebarcad.bartypes import BarType
from rebarcad.curves import iscurve, ispolycurve, sample, translate
from rebarcad.errors import PreconditionError
from rebarcad.geom import isgoodnum, scale3, unit, vclose, vect


class RebarStyle(Enum):
    """Whether bars are bent as standard bars or as stirrups and ties."""
    STANDARD = "Standard"
    STIRRUP_TIE = "StirrupTie"

    @classmethod
    def by_name(cls, name: str) -> "RebarStyle":
        return _parse_enum(cls, name)


class HookOrientation(Enum):
    """Side a hook turns to, seen along the bar with the normal up."""
    LEFT = "Left"
    RIGHT = "Right"

    @classmethod
    def by_name(cls, name: str) -> "HookOrientation":
        return _parse_enum(cls, name)


def _parse_enum(cls, name):
    if isinstance(name, cls):
        return name
    if name is None:
        raise PreconditionError(f"{cls.__name__} name missing")
    key = str(name).replace(" ", "").replace("_", "").lower()
    for member in cls:
        if member.value.lower() == key or member.name.replace("_", "").lower() == key:
            return member
    raise PreconditionError(f"Cannot parse {name!r} as {cls.__name__}")


class LayoutRule(Enum):
    """How a bar's shape is repeated along its normal."""
    SINGLE = "Single"
    FIXED_NUMBER = "FixedNumber"
    MAXIMUM_SPACING = "MaximumSpacing"
    NUMBER_WITH_SPACING = "NumberWithSpacing"
    MINIMUM_CLEAR_SPACING = "MinimumClearSpacing"

    @classmethod
    def by_name(cls, name: str) -> "LayoutRule":
        return _parse_enum(cls, name)


@dataclass
class RebarLayout:
    """Distribution of bar positions along the normal of a bar.

    ``spacing`` is the centre to centre distance actually used and
    ``array_length`` the distance from the first to the last position.
    """
    rule: LayoutRule = LayoutRule.SINGLE
    number_of_bar_positions: int = 1
    spacing: float = 0.0
    array_length: float = 0.0
    bars_on_normal_side: bool = True
    include_first_bar: bool = True
    include_last_bar: bool = True

    def offsets(self) -> List[float]:
        """signed distances of the included positions from the driving curves"""
        side = 1.0 if self.bars_on_normal_side else -1.0
        offsets = [side * i * self.spacing for i in range(self.number_of_bar_positions)]
        if self.rule is LayoutRule.SINGLE:
            return offsets
        if not self.include_last_bar:
            offsets = offsets[:-1]
        if not self.include_first_bar:
            offsets = offsets[1:]
        return offsets


def _check_positions(n) -> int:
    if isinstance(n, bool) or not isinstance(n, int) or n < 1:
        raise PreconditionError(f"number of bar positions must be an integer >= 1, got {n!r}")
    return n


def _check_distance(value, what, allow_zero=False) -> float:
    if not isgoodnum(value) or value < 0.0 or (value == 0.0 and not allow_zero):
        raise PreconditionError(f"{what} must be a {'non-negative' if allow_zero else 'positive'} "
                                f"number, got {value!r}")
    return float(value)


def _spread(array_length: float, n: int) -> float:
    return array_length / (n - 1) if n > 1 else 0.0


DEFAULT_NORMAL = vect(0, 0, 1, 0)


def curves_similar(a, b, tol: float = 1e-6) -> bool:
    """Do two curves trace the same path, in either direction?

    Compared at the start, middle and end.
    """
    pa = [sample(a, u) for u in (0.0, 0.5, 1.0)]
    pb = [sample(b, u) for u in (0.0, 0.5, 1.0)]
    forward = all(vclose(p, q, tol) for p, q in zip(pa, pb))
    backward = all(vclose(p, q, tol) for p, q in zip(pa, reversed(pb)))
    return forward or backward


def _pieces(curve) -> List[list]:
    # a bar is driven by the pieces of a polycurve
    return list(curve[1]) if ispolycurve(curve) else [curve]


@dataclass
class RebarItem:
    """One bar in a container: its driving curves and plane normal."""
    curves: List[list]
    normal: List[float] = field(default_factory=lambda: list(DEFAULT_NORMAL))

    def matches(self, curves: List[list]) -> bool:
        """Is every driving curve of this bar among ``curves``?"""
        return all(any(curves_similar(mine, theirs) for theirs in curves)
                   for mine in self.curves)


@dataclass
class Rebar:
    """A single bar."""
    curves: List[list]
    bar_type: BarType
    style: RebarStyle = RebarStyle.STANDARD
    host_id: Optional[Any] = None
    start_hook: Optional[str] = None
    end_hook: Optional[str] = None
    start_hook_orientation: HookOrientation = HookOrientation.LEFT
    end_hook_orientation: HookOrientation = HookOrientation.LEFT
    normal: List[float] = field(default_factory=lambda: list(DEFAULT_NORMAL))
    layout: RebarLayout = field(default_factory=RebarLayout)

    def __post_init__(self):
        if not self.curves:
            raise PreconditionError("Input Curves missing")
        for c in self.curves:
            if not iscurve(c):
                raise PreconditionError("Rebar curves must be curves")
        self.style = RebarStyle.by_name(self.style)
        self.start_hook_orientation = HookOrientation.by_name(self.start_hook_orientation)
        self.end_hook_orientation = HookOrientation.by_name(self.end_hook_orientation)

    ## layout rules
    ## ------------

    def set_layout_as_single(self) -> None:
        self.layout = RebarLayout()

    def set_layout_as_fixed_number(self, number_of_bar_positions, array_length,
                                   bars_on_normal_side=True, include_first_bar=True,
                                   include_last_bar=True) -> None:
        """``number_of_bar_positions`` spread evenly over ``array_length``"""
        n = _check_positions(number_of_bar_positions)
        length = _check_distance(array_length, "array length", allow_zero=True)
        self._set_layout(LayoutRule.FIXED_NUMBER, n, _spread(length, n), length,
                         bars_on_normal_side, include_first_bar, include_last_bar)

    def set_layout_as_maximum_spacing(self, spacing, array_length,
                                      bars_on_normal_side=True, include_first_bar=True,
                                      include_last_bar=True) -> None:
        """The fewest evenly spread positions no further apart than ``spacing``"""
        spacing = _check_distance(spacing, "spacing")
        length = _check_distance(array_length, "array length", allow_zero=True)
        n = int(math.ceil(length / spacing - 1e-9)) + 1
        self._set_layout(LayoutRule.MAXIMUM_SPACING, n, _spread(length, n), length,
                         bars_on_normal_side, include_first_bar, include_last_bar)

    def set_layout_as_number_with_spacing(self, number_of_bar_positions, spacing,
                                          bars_on_normal_side=True, include_first_bar=True,
                                          include_last_bar=True) -> None:
        """``number_of_bar_positions`` exactly ``spacing`` apart"""
        n = _check_positions(number_of_bar_positions)
        spacing = _check_distance(spacing, "spacing")
        self._set_layout(LayoutRule.NUMBER_WITH_SPACING, n, spacing, spacing * (n - 1),
                         bars_on_normal_side, include_first_bar, include_last_bar)

    def set_layout_as_minimum_clear_spacing(self, spacing, array_length,
                                            bars_on_normal_side=True, include_first_bar=True,
                                            include_last_bar=True) -> None:
        """The most evenly spread positions whose clear gap, between bar
        surfaces, is at least ``spacing``"""
        spacing = _check_distance(spacing, "clear spacing", allow_zero=True)
        length = _check_distance(array_length, "array length", allow_zero=True)
        n = int(math.floor(length / (spacing + self.bar_type.diameter) + 1e-9)) + 1
        self._set_layout(LayoutRule.MINIMUM_CLEAR_SPACING, n, _spread(length, n), length,
                         bars_on_normal_side, include_first_bar, include_last_bar)

    def _set_layout(self, rule, n, spacing, length, bars_on_normal_side,
                    include_first_bar, include_last_bar):
        self.layout = RebarLayout(rule=rule, number_of_bar_positions=n, spacing=spacing,
                                  array_length=length,
                                  bars_on_normal_side=bool(bars_on_normal_side),
                                  include_first_bar=bool(include_first_bar),
                                  include_last_bar=bool(include_last_bar))

    @property
    def array_length(self) -> float:
        """length of the distribution path"""
        return self.layout.array_length

    @property
    def quantity(self) -> int:
        return len(self.layout.offsets())

    def bar_positions(self) -> List[List[list]]:
        """Driving curves of every included bar, moved along the normal."""
        direction = unit(self.normal)
        return [[translate(c, scale3(direction, offset)) for c in self.curves]
                for offset in self.layout.offsets()]


@dataclass
class RebarContainer:
    """A set of bars sharing bar type, style and hooks."""
    bar_type: BarType
    host_id: Optional[Any] = None
    style: RebarStyle = RebarStyle.STANDARD
    start_hook: Optional[str] = None
    end_hook: Optional[str] = None
    start_hook_orientation: HookOrientation = HookOrientation.LEFT
    end_hook_orientation: HookOrientation = HookOrientation.LEFT
    items: List[RebarItem] = field(default_factory=list)

    def __post_init__(self):
        self.style = RebarStyle.by_name(self.style)
        self.start_hook_orientation = HookOrientation.by_name(self.start_hook_orientation)
        self.end_hook_orientation = HookOrientation.by_name(self.end_hook_orientation)

    @property
    def quantity(self) -> int:
        return len(self.items)

    def set_from_curves(self, curves: List[list], normals: Optional[List[list]] = None) -> None:
        """Make the container hold one bar per curve.

        Bars whose geometry is still present are kept, bars whose curves
        disappeared are removed and new curves are appended.  ``normals``
        holds one normal for all curves or one per curve.
        """
        if not curves:
            raise PreconditionError("Input Curves missing")
        for c in curves:
            if not iscurve(c):
                raise PreconditionError("Rebar curves must be curves")
        normals = list(normals) if normals else [list(DEFAULT_NORMAL)]
        if len(normals) not in (1, len(curves)):
            raise PreconditionError(
                f"expected 1 or {len(curves)} normals, got {len(normals)}")

        pending = [_pieces(c) for c in curves]
        kept = []
        for item in self.items:
            index = next((i for i, p in enumerate(pending) if item.matches(p)), -1)
            if index == -1:
                continue
            kept.append(item)
            pending.pop(index)
            if len(normals) > 1:
                normals.pop(index)

        for i, pieces in enumerate(pending):
            normal = normals[0] if len(normals) == 1 else normals[i]
            kept.append(RebarItem(curves=pieces, normal=list(normal)))
        self.items = kept

    def bars(self) -> List[Rebar]:
        """The items as individual bars."""
        return [Rebar(curves=item.curves, bar_type=self.bar_type, style=self.style,
                      host_id=self.host_id, start_hook=self.start_hook,
                      end_hook=self.end_hook,
                      start_hook_orientation=self.start_hook_orientation,
                      end_hook_orientation=self.end_hook_orientation,
                      normal=item.normal)
                for item in self.items]


__all__ = [
    "RebarStyle",
    "HookOrientation",
    "LayoutRule",
    "RebarLayout",
    "DEFAULT_NORMAL",
    "curves_similar",
    "RebarItem",
    "Rebar",
    "RebarContainer",
]
