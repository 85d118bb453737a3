import pytest

from rebarcad.bartypes import get_bar_type
from rebarcad.binding import ElementBinder, rebar_by_curves
from rebarcad.curves import polycurve, reverse
from rebarcad.elements import (
    DEFAULT_NORMAL,
    HookOrientation,
    LayoutRule,
    Rebar,
    RebarContainer,
    RebarStyle,
    curves_similar,
)
from rebarcad.errors import PreconditionError
from rebarcad.geom import arc3p, line, point, vect


def _bars(n, y0=0.0):
    return [line(point(0, y0 + i), point(10, y0 + i)) for i in range(n)]


class TestEnums:
    def test_style_by_name(self):
        assert RebarStyle.by_name("Standard") is RebarStyle.STANDARD
        assert RebarStyle.by_name("stirrup tie") is RebarStyle.STIRRUP_TIE
        assert RebarStyle.by_name("STIRRUP_TIE") is RebarStyle.STIRRUP_TIE
        assert RebarStyle.by_name(RebarStyle.STANDARD) is RebarStyle.STANDARD

    def test_hook_orientation(self):
        assert HookOrientation.by_name("right") is HookOrientation.RIGHT

    def test_bad_name(self):
        with pytest.raises(PreconditionError):
            RebarStyle.by_name("Spiral")
        with pytest.raises(PreconditionError):
            HookOrientation.by_name(None)


def test_curves_similar():
    a = line(point(0, 0), point(10, 0))
    assert curves_similar(a, reverse(a))
    assert not curves_similar(a, line(point(0, 0), point(10, 1)))
    arc = arc3p(point(1, 0), point(0, 1), point(-1, 0))
    assert curves_similar(arc, reverse(arc))


class TestRebar:
    def test_defaults(self):
        bar = Rebar(curves=_bars(1), bar_type=get_bar_type("D12"), style="StirrupTie")
        assert bar.style is RebarStyle.STIRRUP_TIE
        assert bar.start_hook_orientation is HookOrientation.LEFT
        assert bar.normal == DEFAULT_NORMAL

    def test_needs_curves(self):
        with pytest.raises(PreconditionError):
            Rebar(curves=[], bar_type=get_bar_type("D12"))
        with pytest.raises(PreconditionError):
            Rebar(curves=[point(0, 0)], bar_type=get_bar_type("D12"))


class TestRebarContainer:
    def test_set_from_curves(self):
        container = RebarContainer(bar_type=get_bar_type("D12"))
        container.set_from_curves(_bars(3))
        assert container.quantity == 3
        assert all(item.normal == DEFAULT_NORMAL for item in container.items)

    def test_unchanged_bars_are_kept(self):
        container = RebarContainer(bar_type=get_bar_type("D12"))
        container.set_from_curves(_bars(3))
        first, second, third = container.items
        container.set_from_curves(_bars(2, y0=1.0) + _bars(1, y0=7.0))
        assert container.quantity == 3
        assert container.items[0] is second
        assert container.items[1] is third
        assert first not in container.items

    def test_polycurve_bar(self):
        pc = polycurve([line(point(0, 0), point(5, 0)), line(point(5, 0), point(5, 5))])
        container = RebarContainer(bar_type=get_bar_type("D12"))
        container.set_from_curves([pc])
        assert len(container.items[0].curves) == 2

    def test_normals(self):
        container = RebarContainer(bar_type=get_bar_type("D12"))
        normals = [vect(0, 1, 0, 0), vect(1, 0, 0, 0)]
        container.set_from_curves(_bars(2), normals)
        assert container.items[1].normal == vect(1, 0, 0, 0)
        with pytest.raises(PreconditionError):
            container.set_from_curves(_bars(3), normals)

    def test_bars(self):
        container = RebarContainer(bar_type=get_bar_type("D16"), style="StirrupTie",
                                   start_hook="Standard - 90 deg.", host_id=42)
        container.set_from_curves(_bars(2))
        bars = container.bars()
        assert len(bars) == 2
        assert all(b.style is RebarStyle.STIRRUP_TIE for b in bars)
        assert bars[0].host_id == 42
        assert bars[0].bar_type.diameter == 16.0

    def test_missing_curves(self):
        container = RebarContainer(bar_type=get_bar_type("D12"))
        with pytest.raises(PreconditionError):
            container.set_from_curves([])


class TestBinding:
    def test_bind_creates_once(self):
        binder = ElementBinder()
        made = []

        def create():
            made.append(object())
            return made[-1]

        updated = []
        a = binder.bind("node-1", create, updated.append)
        b = binder.bind("node-1", create, updated.append)
        assert a is b
        assert len(made) == 1
        assert updated == [a]
        assert "node-1" in binder and len(binder) == 1
        assert binder.release("node-1") is a
        assert binder.keys() == []

    def test_rebar_by_curves_updates_in_place(self):
        binder = ElementBinder()
        d12 = get_bar_type("D12")
        first = rebar_by_curves(binder, "wall", _bars(3), d12)
        kept = first.items[0]
        second = rebar_by_curves(binder, "wall", _bars(4), get_bar_type("D16"),
                                 style="StirrupTie", end_hook_orientation="Right")
        assert second is first
        assert second.quantity == 4
        assert second.items[0] is kept
        assert second.bar_type.diameter == 16.0
        assert second.style is RebarStyle.STIRRUP_TIE
        assert second.end_hook_orientation is HookOrientation.RIGHT

    def test_separate_keys(self):
        binder = ElementBinder()
        a = rebar_by_curves(binder, "a", _bars(1), get_bar_type("D12"))
        b = rebar_by_curves(binder, "b", _bars(1), get_bar_type("D12"))
        assert a is not b
        binder.clear()
        assert len(binder) == 0

    def test_missing_inputs(self):
        binder = ElementBinder()
        with pytest.raises(PreconditionError):
            rebar_by_curves(binder, "a", None, get_bar_type("D12"))
        with pytest.raises(PreconditionError):
            rebar_by_curves(binder, "a", _bars(1), None)


def _bar(**kw):
    return Rebar(curves=[line(point(0, 0), point(1000, 0))], bar_type=get_bar_type("D12"),
                 normal=vect(0, 1, 0, 0), **kw)


class TestLayout:
    def test_single_by_default(self):
        bar = _bar()
        assert bar.layout.rule is LayoutRule.SINGLE
        assert bar.quantity == 1
        assert bar.array_length == 0.0
        assert bar.layout.offsets() == [0.0]

    def test_fixed_number(self):
        bar = _bar()
        bar.set_layout_as_fixed_number(5, 800.0)
        assert bar.layout.rule is LayoutRule.FIXED_NUMBER
        assert bar.layout.spacing == pytest.approx(200.0)
        assert bar.array_length == 800.0
        assert bar.layout.offsets() == pytest.approx([0, 200, 400, 600, 800])

    def test_maximum_spacing(self):
        bar = _bar()
        bar.set_layout_as_maximum_spacing(300.0, 1000.0)
        # four gaps of 250 are the fewest that stay under 300
        assert bar.layout.number_of_bar_positions == 5
        assert bar.layout.spacing == pytest.approx(250.0)
        bar.set_layout_as_maximum_spacing(250.0, 1000.0)
        assert bar.layout.number_of_bar_positions == 5

    def test_number_with_spacing(self):
        bar = _bar()
        bar.set_layout_as_number_with_spacing(4, 150.0)
        assert bar.array_length == pytest.approx(450.0)
        assert bar.layout.offsets() == pytest.approx([0, 150, 300, 450])

    def test_minimum_clear_spacing(self):
        bar = _bar()
        # 188 mm clear plus a 12 mm bar gives 200 mm centres
        bar.set_layout_as_minimum_clear_spacing(188.0, 1000.0)
        assert bar.layout.number_of_bar_positions == 6
        bar.set_layout_as_minimum_clear_spacing(190.0, 1000.0)
        assert bar.layout.number_of_bar_positions == 5
        assert bar.layout.spacing - 12.0 >= 190.0

    def test_side_and_end_bars(self):
        bar = _bar()
        bar.set_layout_as_fixed_number(4, 300.0, bars_on_normal_side=False,
                                       include_first_bar=False, include_last_bar=False)
        assert bar.layout.offsets() == pytest.approx([-100.0, -200.0])
        assert bar.quantity == 2
        assert bar.array_length == 300.0

    def test_bar_positions(self):
        bar = _bar()
        bar.set_layout_as_number_with_spacing(3, 100.0)
        positions = bar.bar_positions()
        assert len(positions) == 3
        for k, curves in enumerate(positions):
            assert curves[0][0][:3] == pytest.approx([0.0, 100.0 * k, 0.0])
            assert curves[0][1][:3] == pytest.approx([1000.0, 100.0 * k, 0.0])

    def test_back_to_single(self):
        bar = _bar()
        bar.set_layout_as_fixed_number(3, 200.0)
        bar.set_layout_as_single()
        assert bar.quantity == 1

    @pytest.mark.parametrize("call", [
        lambda b: b.set_layout_as_fixed_number(0, 100.0),
        lambda b: b.set_layout_as_fixed_number(2.5, 100.0),
        lambda b: b.set_layout_as_fixed_number(3, -1.0),
        lambda b: b.set_layout_as_maximum_spacing(0.0, 100.0),
        lambda b: b.set_layout_as_number_with_spacing(3, -5.0),
        lambda b: b.set_layout_as_minimum_clear_spacing(10.0, None),
    ])
    def test_invalid(self, call):
        with pytest.raises(PreconditionError):
            call(_bar())

    def test_rule_by_name(self):
        assert LayoutRule.by_name("Maximum Spacing") is LayoutRule.MAXIMUM_SPACING
