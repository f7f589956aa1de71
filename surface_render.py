"""Drawing backends for :class:`surface.Surface`.

Both backends implement the same two-call interface, ``clear()`` and
``paint(quad, fill, stroke)``, and draw quads strictly in the order given.

- :class:`RasterRenderer` paints onto an Agg bitmap via matplotlib.
- :class:`VectorRenderer` collects SVG ``<path>`` elements.

Colours are anything matplotlib understands (``"#333333"``, ``"tab:blue"``,
``(r, g, b, a)`` tuples, ...).
"""

from __future__ import annotations
import abc
import enum
from pathlib import Path
from typing import Callable, List, Sequence, Tuple, Union
import matplotlib
import numpy as np
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.colors import Normalize, to_rgba
from matplotlib.figure import Figure
from matplotlib.patches import Polygon

from surface_errors import UnsupportedTargetKind
from surface_projection import Quad

Color = Union[str, Sequence[float]]
ColorFn = Callable[[float], Color]


def default_color_fn(avg: float) -> Color:
    return "#333333"


def default_stroke_color_fn(avg: float) -> Color:
    return (0.0, 0.0, 0.0, 0.4)


def colormap_color_fn(cmap: str = "viridis", z_range: Tuple[float, float] = (-10.0, 10.0)) -> ColorFn:
    """Build a ``color_fn`` mapping a quad's ``avg`` through a matplotlib colormap.

    Values outside *z_range* clip to the colormap ends.
    """
    colormap = matplotlib.colormaps[cmap]
    norm = Normalize(vmin=z_range[0], vmax=z_range[1], clip=True)

    def color_fn(avg: float) -> Color:
        return tuple(float(c) for c in colormap(norm(avg)))

    return color_fn


# -----------------------------------------------------------------------------
# Target selection
# -----------------------------------------------------------------------------

class TargetKind(enum.Enum):
    RASTER = "raster"
    VECTOR = "vector"

    @classmethod
    def parse(cls, value: Union["TargetKind", str]) -> "TargetKind":
        """Accept a TargetKind, its value, or the ``canvas``/``svg`` aliases."""
        if isinstance(value, cls):
            return value
        key = str(value).lower()
        key = {"canvas": "raster", "svg": "vector"}.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedTargetKind(
                f"target must be 'raster' or 'vector', got {value!r}") from None


class Renderer(abc.ABC):
    """Drawing capability handed the assembled quads."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    @abc.abstractmethod
    def clear(self) -> None:
        ...

    @abc.abstractmethod
    def paint(self, quad: Quad, fill: Color, stroke: Color) -> None:
        ...


# -----------------------------------------------------------------------------
# Raster (matplotlib Agg)
# -----------------------------------------------------------------------------

class RasterRenderer(Renderer):
    """Bitmap target: one Agg figure sized ``width x height`` pixels.

    The single axes fills the figure with pixel limits and an inverted y axis,
    so quad coordinates map 1:1 onto image rows/columns.
    """

    def __init__(self, width: int = 300, height: int = 300, dpi: int = 100) -> None:
        super().__init__(width, height)
        self.dpi = dpi
        self.fig = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        self.canvas = FigureCanvasAgg(self.fig)
        self.ax = self.fig.add_axes([0.0, 0.0, 1.0, 1.0])
        self.clear()

    def resize(self, width: int, height: int) -> None:
        super().resize(width, height)
        self.fig.set_size_inches(width / self.dpi, height / self.dpi)
        self.clear()

    def clear(self) -> None:
        self.ax.cla()
        self.ax.set_axis_off()
        self.ax.set_xlim(0, self.width)
        self.ax.set_ylim(self.height, 0)  # rows grow downward

    def paint(self, quad: Quad, fill: Color, stroke: Color) -> None:
        # Whole-pixel corners, matching a 2D canvas path
        corners = [(round(x), round(y)) for x, y in quad.path]
        self.ax.add_patch(Polygon(corners, closed=True, facecolor=fill,
                                  edgecolor=stroke, linewidth=1.0))

    def to_array(self) -> np.ndarray:
        """Rasterise and return an RGBA ``uint8`` array of shape ``(height, width, 4)``."""
        self.canvas.draw()
        return np.array(self.canvas.buffer_rgba(), dtype=np.uint8)

    def save(self, path: Union[str, Path]) -> None:
        self.fig.savefig(path, dpi=self.dpi)


# -----------------------------------------------------------------------------
# Vector (SVG)
# -----------------------------------------------------------------------------

def _svg_color(color: Color) -> Tuple[str, float]:
    """Split a matplotlib colour into an SVG ``rgb(...)`` string and opacity."""
    r, g, b, a = to_rgba(color)
    return f"rgb({round(r * 255)},{round(g * 255)},{round(b * 255)})", a


def _coord(p) -> str:
    # Shortest round-trip repr, no precision lost for large/zoomed coordinates
    return f"{float(p[0])!r},{float(p[1])!r}"


def path_d(quad: Quad) -> str:
    """SVG ``d`` attribute: move, three lines, close."""
    p0, p1, p2, p3 = quad.path
    return f"M{_coord(p0)} L{_coord(p1)} L{_coord(p2)} L{_coord(p3)} Z"


class VectorRenderer(Renderer):
    """SVG target: appends one ``<path>`` per quad in paint order."""

    def __init__(self, width: int = 300, height: int = 300) -> None:
        super().__init__(width, height)
        self.elements: List[str] = []

    def clear(self) -> None:
        self.elements = []

    def paint(self, quad: Quad, fill: Color, stroke: Color) -> None:
        fill_rgb, fill_a = _svg_color(fill)
        stroke_rgb, stroke_a = _svg_color(stroke)
        self.elements.append(
            f'<path d="{path_d(quad)}" fill="{fill_rgb}" fill-opacity="{fill_a:g}" '
            f'stroke="{stroke_rgb}" stroke-opacity="{stroke_a:g}"/>'
        )

    def to_svg(self) -> str:
        rows = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{self.width}" '
            f'height="{self.height}" viewBox="0 0 {self.width} {self.height}">',
        ]
        rows.extend(self.elements)
        rows.append("</svg>")
        return "\n".join(rows) + "\n"

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_svg(), encoding="utf-8")


def make_renderer(kind: Union[TargetKind, str], width: int, height: int) -> Renderer:
    kind = TargetKind.parse(kind)
    if kind is TargetKind.RASTER:
        return RasterRenderer(width, height)
    return VectorRenderer(width, height)
