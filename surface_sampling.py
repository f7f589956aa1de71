"""Domain sampling: evaluate ``fn(t, x, y)`` over a rectangular grid.

The field is stored as a float array indexed ``[time][x][y]``. Grid points
are ``min + i * resolution``; when the range does not divide evenly the last
point falls short of ``max`` (truncation, not rounding or re-scaling).
"""

from __future__ import annotations
import math
import sys
from dataclasses import dataclass
from typing import Callable, Iterator
import numpy as np

from surface_errors import InvalidConfig

ScalarFn = Callable[[float, float, float], float]

# A few ulps of slack so 0.3 / 0.1 counts as 3 steps, not 2.
_STEP_EPS = 4 * sys.float_info.epsilon


def spacetime_origin(t: float, x: float, y: float) -> float:
    """Default function: flat zero plane at every time."""
    return 0.0


def _step_count(span: float, resolution: float) -> int:
    n = int(math.floor(span / resolution))
    if (n + 1) * resolution <= span * (1.0 + _STEP_EPS):
        n += 1
    return n + 1


@dataclass(frozen=True)
class Domain:
    """Closed interval ``[min, max]`` sampled every ``resolution``."""
    min: float
    max: float
    resolution: float = 1.0

    def __post_init__(self):
        if not (math.isfinite(self.min) and math.isfinite(self.max)):
            raise InvalidConfig(f"domain bounds must be finite, got [{self.min}, {self.max}]")
        if not self.min < self.max:
            raise InvalidConfig(f"domain needs min < max, got [{self.min}, {self.max}]")
        if not self.resolution > 0:
            raise InvalidConfig(f"resolution must be > 0, got {self.resolution!r}")

    @property
    def count(self) -> int:
        return _step_count(self.max - self.min, self.resolution)

    def points(self) -> np.ndarray:
        # Rounding slack can leave the last point an ulp past max
        pts = self.min + np.arange(self.count, dtype=float) * self.resolution
        return np.minimum(pts, self.max)


@dataclass(frozen=True)
class TimeSpan:
    """Time samples ``start, start + resolution, ...`` up to ``stop``."""
    start: float = 0.0
    stop: float = 0.0
    resolution: float = 1.0

    def __post_init__(self):
        if not self.resolution > 0:
            raise InvalidConfig(f"time resolution must be > 0, got {self.resolution!r}")
        if not self.start <= self.stop:
            raise InvalidConfig(f"time span needs start <= stop, got [{self.start}, {self.stop}]")

    @classmethod
    def at(cls, t: float) -> "TimeSpan":
        return cls(start=t, stop=t, resolution=1.0)

    @property
    def count(self) -> int:
        if self.start == self.stop:
            return 1
        return _step_count(self.stop - self.start, self.resolution)

    def points(self) -> np.ndarray:
        return self.start + np.arange(self.count, dtype=float) * self.resolution


def grid_points(domain: Domain) -> np.ndarray:
    """Sample coordinates along one axis (``floor(range / resolution) + 1`` of them)."""
    return domain.points()


def iter_vertices(times: TimeSpan, x_domain: Domain, y_domain: Domain) -> Iterator[tuple]:
    """Yield ``(ti, xi, yi, t, x, y)`` in evaluation order: time, then x, then y."""
    xs = x_domain.points()
    ys = y_domain.points()
    for ti, t in enumerate(times.points()):
        for xi, x in enumerate(xs):
            for yi, y in enumerate(ys):
                yield ti, xi, yi, float(t), float(x), float(y)


def sample_field(fn: ScalarFn, x_domain: Domain, y_domain: Domain,
                 times: TimeSpan = TimeSpan()) -> np.ndarray:
    """Evaluate *fn* at every ``(t, x, y)`` vertex.

    Returns an array of shape ``(n_t, n_x, n_y)``. ``fn`` is called exactly
    once per vertex; NaN/inf results are stored untouched. No caching here.
    """
    field = np.empty((times.count, x_domain.count, y_domain.count), dtype=float)
    for ti, xi, yi, t, x, y in iter_vertices(times, x_domain, y_domain):
        field[ti, xi, yi] = fn(t, x, y)
    return field
