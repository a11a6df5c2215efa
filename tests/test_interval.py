"""Unit tests for the Interval struct."""

import math

import pytest
import taichi as ti


class TestIntervalQueries:
    """Tests for contains, surrounds, clamp and size."""

    @pytest.mark.parametrize(
        "x, contains, surrounds",
        [
            (0.5, 1, 1),
            (0.0, 1, 0),
            (1.0, 1, 0),
            (-0.1, 0, 0),
            (1.1, 0, 0),
        ],
    )
    def test_contains_is_closed_and_surrounds_is_open(self, x, contains, surrounds):
        """Test that endpoints are contained but not surrounded."""
        from pathlite.core.interval import Interval

        result = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel(x: ti.f64):
            interval = Interval(min=0.0, max=1.0)
            result[0] = interval.contains(x)
            result[1] = interval.surrounds(x)

        test_kernel(x)
        assert result[0] == contains
        assert result[1] == surrounds

    @pytest.mark.parametrize("x, expected", [(-3.0, -1.0), (0.25, 0.25), (9.0, 2.0)])
    def test_clamp(self, x, expected):
        """Test clamping into [min, max]."""
        from pathlite.core.interval import make_interval

        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(x: ti.f64):
            result[None] = make_interval(-1.0, 2.0).clamp(x)

        test_kernel(x)
        assert result[None] == pytest.approx(expected)

    def test_size(self):
        """Test size of a regular and an empty interval."""
        from pathlite.core.interval import make_interval

        result = ti.field(dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = make_interval(1.0, 3.0).size()
            result[1] = make_interval(3.0, 1.0).size()

        test_kernel()
        assert result[0] == pytest.approx(2.0)
        assert result[1] == pytest.approx(-2.0)


class TestNamedIntervals:
    """Tests for the empty and universe intervals."""

    def test_empty_contains_nothing(self):
        """Test that the empty interval contains no value and has negative size."""
        from pathlite.core.interval import empty_interval

        result = ti.field(dtype=ti.i32, shape=2)
        size = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            interval = empty_interval()
            result[0] = interval.contains(0.0)
            result[1] = interval.contains(1e30)
            size[None] = interval.size()

        test_kernel()
        assert result[0] == 0
        assert result[1] == 0
        assert size[None] < 0.0

    def test_universe_contains_everything(self):
        """Test that the universe interval surrounds any finite value."""
        from pathlite.core.interval import universe_interval

        result = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            interval = universe_interval()
            result[0] = interval.surrounds(-1e30)
            result[1] = interval.surrounds(1e30)

        test_kernel()
        assert result[0] == 1
        assert result[1] == 1

    def test_host_constants(self):
        """Test the host-side (min, max) pairs."""
        from pathlite.core.interval import EMPTY, UNIVERSE

        assert EMPTY == (math.inf, -math.inf)
        assert UNIVERSE == (-math.inf, math.inf)
