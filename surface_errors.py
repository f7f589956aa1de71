"""Exceptions raised by the surface plotting pipeline."""


class SurfaceError(Exception):
    """Base class for all surface plotting errors."""


class InvalidConfig(SurfaceError, ValueError):
    """A domain, resolution, viewport or angle bound is unusable."""


class UnsupportedTargetKind(SurfaceError, ValueError):
    """Requested output target is neither raster nor vector."""
