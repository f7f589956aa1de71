from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple
import numpy as np

Point2 = Tuple[float, float]

# -----------------------------------------------------------------------------
# Projection: grid samples -> screen pixels
# -----------------------------------------------------------------------------

def project_grid(
    values: np.ndarray,
    xs: Sequence[float],
    ys: Sequence[float],
    matrix: np.ndarray,
    x_scale: float = 1.0,
    y_scale: float = 1.0,
    z_scale: float = 1.0,
    zoom: float = 1.0,
    width: float = 300,
    height: float = 300,
) -> np.ndarray:
    """Orthographically project one time slice onto the viewport.

    *values* has shape ``(n_x, n_y)``; *xs*/*ys* are the matching grid
    coordinates. Returns an ``(n_x, n_y, 2)`` array of ``(screen_x, screen_y)``.

    Every vertex gets the same rigid rotation and uniform zoom:

        P  = (x * x_scale, y * y_scale, z * z_scale)
        P' = M @ P                     (z' dropped, no perspective divide)
        u  = width / 2  + zoom * x'
        v  = height / 2 - zoom * y'    (screen rows grow *down*)

    Non-finite samples propagate into their point unchanged.
    """
    values = np.asarray(values, dtype=float)
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)
    if values.shape != (xs.size, ys.size):
        raise ValueError(f"values shape {values.shape} does not match grid ({xs.size}, {ys.size})")

    px = np.broadcast_to((xs * x_scale)[:, None], values.shape)
    py = np.broadcast_to((ys * y_scale)[None, :], values.shape)
    pz = values * z_scale

    # Row-by-row product keeps the arithmetic identical on every call
    m = np.asarray(matrix, dtype=float)
    rx = m[0, 0] * px + m[0, 1] * py + m[0, 2] * pz
    ry = m[1, 0] * px + m[1, 1] * py + m[1, 2] * pz

    out = np.empty(values.shape + (2,), dtype=float)
    out[..., 0] = width / 2 + zoom * rx
    out[..., 1] = height / 2 - zoom * ry
    return out


# -----------------------------------------------------------------------------
# Quad assembly
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Quad:
    """One grid cell face, closed back to ``move_to`` when drawn."""
    move_to: Point2
    point_one: Point2
    point_two: Point2
    point_three: Point2
    avg: float

    @property
    def path(self) -> Tuple[Point2, Point2, Point2, Point2]:
        return (self.move_to, self.point_one, self.point_two, self.point_three)


@dataclass(frozen=True)
class VisData:
    """Quads for one time slice in paint (row-major) order.

    ``skipped`` counts cells dropped because a corner projected to NaN/inf.
    """
    quads: Tuple[Quad, ...] = ()
    skipped: int = 0

    def __iter__(self) -> Iterator[Quad]:
        return iter(self.quads)

    def __len__(self) -> int:
        return len(self.quads)

    def __getitem__(self, idx: int) -> Quad:
        return self.quads[idx]


def _pt(points: np.ndarray, i: int, j: int) -> Point2:
    return (float(points[i, j, 0]), float(points[i, j, 1]))


def assemble_quads(points: np.ndarray, values: np.ndarray) -> VisData:
    """Tessellate an ``(n_x, n_y, 2)`` point grid into quads.

    Cell ``(i, j)`` has corners ``(i,j) -> (i+1,j) -> (i+1,j+1) -> (i,j+1)`` and
    ``avg`` = mean of the four source samples. Emission is row-major over
    ``i`` then ``j`` with no depth sort. A cell with any non-finite corner
    coordinate is skipped and counted instead of failing the pass.
    """
    points = np.asarray(points, dtype=float)
    values = np.asarray(values, dtype=float)
    nx, ny = values.shape
    if points.shape != (nx, ny, 2):
        raise ValueError(f"points shape {points.shape} does not match values {values.shape}")

    finite = np.isfinite(points).all(axis=-1)
    quads = []
    skipped = 0
    for i in range(nx - 1):
        for j in range(ny - 1):
            if not (finite[i, j] and finite[i + 1, j] and finite[i + 1, j + 1] and finite[i, j + 1]):
                skipped += 1
                continue
            total = (float(values[i, j]) + float(values[i + 1, j])
                     + float(values[i + 1, j + 1]) + float(values[i, j + 1]))
            quads.append(Quad(
                move_to=_pt(points, i, j),
                point_one=_pt(points, i + 1, j),
                point_two=_pt(points, i + 1, j + 1),
                point_three=_pt(points, i, j + 1),
                avg=total / 4,
            ))
    return VisData(quads=tuple(quads), skipped=skipped)
