"""Closed real intervals used to bound ray parameters and clamp colors.

An interval ``[min, max]`` is empty whenever ``min > max``. Two named
intervals are provided: the empty interval ``(+inf, -inf)`` and the universe
``(-inf, +inf)``. Inside kernels use :func:`empty_interval` and
:func:`universe_interval`; host code can use the ``EMPTY`` and ``UNIVERSE``
bound pairs.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlite.core.interval import Interval
    >>> @ti.kernel
    ... def clamp_one() -> ti.f64:
    ...     return Interval(min=0.0, max=0.999).clamp(1.5)
"""

import math

import taichi as ti

INFINITY = math.inf

# Host-side (min, max) bounds of the named intervals
EMPTY = (INFINITY, -INFINITY)
UNIVERSE = (-INFINITY, INFINITY)


@ti.dataclass
class Interval:
    """A range of real values.

    Attributes:
        min: Lower bound of the interval.
        max: Upper bound of the interval. The interval is empty if max < min.
    """

    min: ti.f64
    max: ti.f64

    @ti.func
    def size(self) -> ti.f64:
        """Width of the interval; negative when empty."""
        return self.max - self.min

    @ti.func
    def contains(self, x: ti.f64) -> ti.i32:
        """Return 1 if min <= x <= max, 0 otherwise."""
        result = 0
        if self.min <= x and x <= self.max:
            result = 1
        return result

    @ti.func
    def surrounds(self, x: ti.f64) -> ti.i32:
        """Return 1 if min < x < max, 0 otherwise."""
        result = 0
        if self.min < x and x < self.max:
            result = 1
        return result

    @ti.func
    def clamp(self, x: ti.f64) -> ti.f64:
        """Clamp x into [min, max]."""
        result = x
        if x < self.min:
            result = self.min
        elif x > self.max:
            result = self.max
        return result


@ti.func
def make_interval(lo: ti.f64, hi: ti.f64) -> Interval:
    """Create an interval [lo, hi]."""
    return Interval(min=lo, max=hi)


@ti.func
def empty_interval() -> Interval:
    """The interval containing no values."""
    return Interval(min=INFINITY, max=-INFINITY)


@ti.func
def universe_interval() -> Interval:
    """The interval containing every real value."""
    return Interval(min=-INFINITY, max=INFINITY)
