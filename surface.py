"""Pseudo-3D surface plot of ``fn(t, x, y)``.

Pipeline per render::

    SurfaceConfig -> sample_field -> Orientation.matrix -> project_grid
                  -> assemble_quads -> Renderer.clear / Renderer.paint

Axis conventions (model space):
    * +X, +Y span the sampled domain, +Z is the function value ("up").
    * yaw   – rotation about +Z, applied first.
    * pitch – rotation about +X, applied second, clamped to ``±max_pitch``.
    * ``yaw = pitch = 0`` looks straight down the Z axis.

Screen space has its origin at the viewport centre with rows growing down.
"""

from __future__ import annotations
import dataclasses
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional, Tuple, Union
import numpy as np

from surface_errors import InvalidConfig
from surface_math import DEFAULT_MAX_PITCH, DEFAULT_PITCH, DEFAULT_YAW, Orientation, check_angles, clamp_pitch
from surface_projection import VisData, assemble_quads, project_grid
from surface_render import (
    ColorFn,
    Renderer,
    TargetKind,
    default_color_fn,
    default_stroke_color_fn,
    make_renderer,
)
from surface_sampling import Domain, ScalarFn, TimeSpan, sample_field, spacetime_origin

logger = logging.getLogger(__name__)

Interval = Tuple[float, float]

# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SurfaceConfig:
    """Everything a Surface needs; validated on construction.

    ``x_*``/``y_*`` fields override the shared ``xy_*`` value when set.
    """
    xy_domain: Interval = (-10.0, 10.0)
    x_domain: Optional[Interval] = None
    y_domain: Optional[Interval] = None
    xy_resolution: float = 1.0
    x_resolution: Optional[float] = None
    y_resolution: Optional[float] = None
    xy_scale: float = 1.0
    x_scale: Optional[float] = None
    y_scale: Optional[float] = None
    z_scale: float = 1.0
    z_range: Interval = (-10.0, 10.0)  # colour normalisation range
    zoom: float = 1.0
    yaw: float = DEFAULT_YAW
    pitch: float = DEFAULT_PITCH
    max_pitch: float = DEFAULT_MAX_PITCH
    fn: ScalarFn = spacetime_origin
    color_fn: ColorFn = default_color_fn
    stroke_color_fn: ColorFn = default_stroke_color_fn
    width: int = 300
    height: int = 300
    target: Union[TargetKind, str] = TargetKind.RASTER
    field_cache_size: int = 8

    def __post_init__(self):
        # Building the domains raises InvalidConfig on bad intervals/resolutions
        self.x_grid()
        self.y_grid()
        if not self.z_range[0] < self.z_range[1]:
            raise InvalidConfig(f"z_range needs min < max, got {self.z_range!r}")
        if not (self.width > 0 and self.height > 0):
            raise InvalidConfig(f"viewport must be positive, got {self.width}x{self.height}")
        check_angles(self.yaw, self.pitch, self.max_pitch)
        if self.field_cache_size < 0:
            raise InvalidConfig(f"field_cache_size must be >= 0, got {self.field_cache_size!r}")
        object.__setattr__(self, "target", TargetKind.parse(self.target))
        object.__setattr__(self, "pitch", clamp_pitch(self.pitch, self.max_pitch))

    # --- resolved per-axis values -------------------------------------
    def x_domain_resolved(self) -> Interval:
        return self.x_domain if self.x_domain is not None else self.xy_domain

    def y_domain_resolved(self) -> Interval:
        return self.y_domain if self.y_domain is not None else self.xy_domain

    def x_resolution_resolved(self) -> float:
        return self.x_resolution if self.x_resolution is not None else self.xy_resolution

    def y_resolution_resolved(self) -> float:
        return self.y_resolution if self.y_resolution is not None else self.xy_resolution

    def x_scale_resolved(self) -> float:
        return self.x_scale if self.x_scale is not None else self.xy_scale

    def y_scale_resolved(self) -> float:
        return self.y_scale if self.y_scale is not None else self.xy_scale

    def x_grid(self) -> Domain:
        lo, hi = self.x_domain_resolved()
        return Domain(lo, hi, self.x_resolution_resolved())

    def y_grid(self) -> Domain:
        lo, hi = self.y_domain_resolved()
        return Domain(lo, hi, self.y_resolution_resolved())


# -----------------------------------------------------------------------------
# Surface
# -----------------------------------------------------------------------------

class Surface:
    """Owns one configuration, its orientation and a drawing backend.

    Not safe for concurrent ``orient``/``render`` calls on the same instance.
    """

    def __init__(self, config: Optional[SurfaceConfig] = None,
                 renderer: Optional[Renderer] = None, **overrides) -> None:
        config = config or SurfaceConfig()
        if overrides:
            config = dataclasses.replace(config, **overrides)
        self.config = config
        self.orientation = Orientation(config.yaw, config.pitch, config.max_pitch)
        # Injected renderers belong to the caller and are never replaced
        self._owns_renderer = renderer is None
        self.renderer = renderer or make_renderer(config.target, config.width, config.height)
        self.last_vis_data: Optional[VisData] = None
        self._field_cache: "OrderedDict[tuple, np.ndarray]" = OrderedDict()

    # --- orientation --------------------------------------------------
    def orient(self, yaw: Optional[float] = None, pitch: Optional[float] = None) -> Orientation:
        """Set new angles (pitch clamped to ``±max_pitch``); returns the new orientation."""
        self.orientation = self.orientation.oriented(yaw=yaw, pitch=pitch)
        self.config = dataclasses.replace(
            self.config, yaw=self.orientation.yaw, pitch=self.orientation.pitch)
        logger.debug("orient: yaw=%.4f pitch=%.4f", self.orientation.yaw, self.orientation.pitch)
        return self.orientation

    # --- configuration ------------------------------------------------
    def reconfigure(self, **changes) -> "Surface":
        """Apply *changes* to the config, validating eagerly; drops cached fields.

        A renderer passed to the constructor is kept: size changes are forwarded
        to it via ``resize`` and a target change raises InvalidConfig.
        """
        old = self.config
        new = dataclasses.replace(old, **changes)
        if not self._owns_renderer and new.target is not old.target:
            raise InvalidConfig("cannot change target of a surface with an injected renderer")
        self.config = new
        self._field_cache.clear()
        self.orientation = Orientation(new.yaw, new.pitch, new.max_pitch)
        if self._owns_renderer and new.target is not old.target:
            self.renderer = make_renderer(new.target, new.width, new.height)
        elif (new.width, new.height) != (old.width, old.height):
            self.renderer.resize(new.width, new.height)
        return self

    # --- sampling -----------------------------------------------------
    def sample(self, start: float = 0.0, stop: float = 0.0, resolution: float = 1.0) -> np.ndarray:
        """Uncached field over ``[start, stop]``; shape ``(n_t, n_x, n_y)``."""
        cfg = self.config
        return sample_field(cfg.fn, cfg.x_grid(), cfg.y_grid(), TimeSpan(start, stop, resolution))

    def _field_at(self, time: float) -> np.ndarray:
        cfg = self.config
        x_grid, y_grid = cfg.x_grid(), cfg.y_grid()
        key = (id(cfg.fn), x_grid, y_grid, time)
        if cfg.field_cache_size and key in self._field_cache:
            return self._field_cache[key]
        values = sample_field(cfg.fn, x_grid, y_grid, TimeSpan.at(time))[0]
        if cfg.field_cache_size:
            self._field_cache[key] = values
            while len(self._field_cache) > cfg.field_cache_size:
                self._field_cache.popitem(last=False)
        return values

    # --- rendering ----------------------------------------------------
    def compute_vis_data(self, time: float = 0.0) -> VisData:
        """Run the geometry pipeline for one time slice; no drawing."""
        cfg = self.config
        values = self._field_at(time)
        points = project_grid(
            values,
            cfg.x_grid().points(),
            cfg.y_grid().points(),
            self.orientation.matrix,
            x_scale=cfg.x_scale_resolved(),
            y_scale=cfg.y_scale_resolved(),
            z_scale=cfg.z_scale,
            zoom=cfg.zoom,
            width=cfg.width,
            height=cfg.height,
        )
        return assemble_quads(points, values)

    def render(self, time: float = 0.0) -> "Surface":
        """Compute the quads for *time* and paint them in emission order."""
        vis = self.compute_vis_data(time)
        cfg = self.config
        self.renderer.clear()
        for quad in vis:
            self.renderer.paint(quad, cfg.color_fn(quad.avg), cfg.stroke_color_fn(quad.avg))
        if vis.skipped:
            logger.warning("render t=%g: skipped %d quad(s) with non-finite corners", time, vis.skipped)
        logger.debug("render t=%g: painted %d quads", time, len(vis))
        self.last_vis_data = vis
        return self
