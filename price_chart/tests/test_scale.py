# price_chart/tests/test_scale.py
"""
Module: Scale Mapper Tests
Purpose: Verify price/index to pixel mappings and their inverses
Features: Headroom, degenerate domains, monotonicity, round trips, padding
"""

import pytest

from price_chart.data.models import Bar
from price_chart.rendering.scale import (
    ScaleContext, Padding, price_domain, build_scale_context
)
from price_chart.tests.conftest import make_bars, SESSION_START


def _context(n: int, width: float = 700, height: float = 300, domain=(90.0, 110.0)) -> ScaleContext:
    return ScaleContext(
        price_domain=domain,
        index_domain=(0, n - 1),
        pixel_width=width,
        pixel_height=height,
        padding=Padding(top=20, right=60, bottom=40, left=60)
    )


class TestPriceDomain:
    """Test price domain construction"""

    def test_headroom(self, example_bars):
        low, high = price_domain(example_bars)
        assert low == pytest.approx(8 * 0.98)
        assert high == pytest.approx(12 * 1.02)

    def test_collapsed_range_falls_back(self):
        bars = [Bar(SESSION_START, 0, 0, 0, 0, 0)]
        assert price_domain(bars) == (-1.0, 1.0)

    def test_empty_series_rejected(self):
        with pytest.raises(ValueError):
            price_domain([])

    def test_context_repairs_collapsed_domain(self):
        ctx = _context(5, domain=(50.0, 50.0))
        assert ctx.price_domain == (49.0, 51.0)


class TestScaleY:
    """Test vertical mapping"""

    def test_domain_edges(self):
        ctx = _context(10)
        assert ctx.scale_y(90.0) == pytest.approx(300.0)
        assert ctx.scale_y(110.0) == pytest.approx(0.0)

    def test_monotonically_decreasing(self):
        ctx = _context(10)
        prices = [90 + 0.5 * i for i in range(41)]
        ys = [ctx.scale_y(p) for p in prices]
        assert all(a > b for a, b in zip(ys, ys[1:]))
        assert all(0.0 <= y <= 300.0 for y in ys)

    def test_unscale_y_inverts(self):
        ctx = _context(10)
        for price in (90.0, 97.3, 110.0):
            assert ctx.unscale_y(ctx.scale_y(price)) == pytest.approx(price)


class TestScaleX:
    """Test horizontal mapping and nearest-index lookup"""

    @pytest.mark.parametrize("n,width", [(2, 700), (7, 700), (100, 700), (391, 700), (391, 50)])
    def test_round_trip(self, n, width):
        ctx = _context(n, width=width)
        for i in range(n):
            assert ctx.unscale_x(ctx.scale_x(i)) == i

    def test_ends(self):
        ctx = _context(11)
        assert ctx.scale_x(0) == 0.0
        assert ctx.scale_x(10) == pytest.approx(700.0)

    def test_single_point_is_centered(self):
        ctx = _context(1)
        assert ctx.scale_x(0) == pytest.approx(350.0)
        assert ctx.unscale_x(10.0) == 0
        assert ctx.unscale_x(690.0) == 0

    def test_unscale_clamps(self):
        ctx = _context(11)
        assert ctx.unscale_x(-100.0) == 0
        assert ctx.unscale_x(5000.0) == 10

    def test_unscale_picks_nearest(self):
        ctx = _context(11)  # 70 px per step
        assert ctx.unscale_x(34.0) == 0
        assert ctx.unscale_x(36.0) == 1
        assert ctx.unscale_x(671.0) == 10


class TestSurfaceMapping:
    """Test padding offsets and hit testing"""

    def test_padding_offsets(self):
        ctx = _context(11)
        assert ctx.x_at(0) == 60.0
        assert ctx.y_at(110.0) == pytest.approx(20.0)
        assert ctx.index_at(60.0 + 140.0) == 2
        assert ctx.price_at(20.0) == pytest.approx(110.0)

    def test_contains(self):
        ctx = _context(11)
        assert ctx.contains(60.0, 20.0)
        assert ctx.contains(760.0, 320.0)
        assert not ctx.contains(59.0, 100.0)
        assert not ctx.contains(100.0, 321.0)

    def test_build_scale_context(self):
        bars = make_bars([10, 11, 12, 13])
        ctx = build_scale_context(bars, 400, 200)
        assert ctx.index_domain == (0, 3)
        assert ctx.point_count == 4
        assert ctx.price_domain == price_domain(bars)

    @pytest.mark.parametrize("width,height", [(0, 200), (400, 0), (-5, -5)])
    def test_build_rejects_empty_plot(self, width, height):
        with pytest.raises(ValueError):
            build_scale_context(make_bars([10, 11]), width, height)
