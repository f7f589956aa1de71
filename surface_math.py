from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Optional
import numpy as np

from surface_errors import InvalidConfig

DEFAULT_YAW = 0.5
DEFAULT_PITCH = 0.5
DEFAULT_MAX_PITCH = math.pi / 2

# -----------------------------------------------------------------------------
# Elementary rotations
# -----------------------------------------------------------------------------

def rot_up(angle_rad: float) -> np.ndarray:
    """Rotation about the model *up* axis (+Z, the value axis), CCW seen from +Z."""
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    return np.array([
        [c, -s, 0.0],
        [s,  c, 0.0],
        [0.0, 0.0, 1.0],
    ], dtype=float)


def rot_horizontal(angle_rad: float) -> np.ndarray:
    """Rotation about the horizontal screen axis (+X), CCW seen from +X."""
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    return np.array([
        [1.0, 0.0, 0.0],
        [0.0, c, -s],
        [0.0, s,  c],
    ], dtype=float)


def rotation_matrix(yaw: float, pitch: float) -> np.ndarray:
    """Return the read-only 3x3 matrix ``R_pitch @ R_yaw``.

    Conventions:
    - Yaw rotates about Up (+Z) and is applied *first*.
    - Pitch rotates about the horizontal axis (+X) and is applied *second*.
    - ``(0, 0)`` is exactly the identity (top-down view).

    Pitch is used as given; clamping is the caller's job (see :func:`clamp_pitch`).
    """
    m = rot_horizontal(pitch) @ rot_up(yaw)
    m.setflags(write=False)
    return m


def clamp_pitch(pitch: float, max_pitch: float) -> float:
    return max(-max_pitch, min(max_pitch, pitch))


def check_angles(yaw: float, pitch: float, max_pitch: float) -> None:
    """Raise InvalidConfig for NaN/inf angles or a negative pitch bound."""
    if not (math.isfinite(yaw) and math.isfinite(pitch)):
        raise InvalidConfig(f"yaw/pitch must be finite, got ({yaw!r}, {pitch!r})")
    if not max_pitch >= 0:
        raise InvalidConfig(f"max_pitch must be >= 0, got {max_pitch!r}")


# -----------------------------------------------------------------------------
# Orientation value
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Orientation:
    """Current viewing angles plus the matching rotation matrix.

    Never mutated: :meth:`oriented` hands back a new instance.
    """
    yaw: float = DEFAULT_YAW
    pitch: float = DEFAULT_PITCH
    max_pitch: float = DEFAULT_MAX_PITCH
    matrix: np.ndarray = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        check_angles(self.yaw, self.pitch, self.max_pitch)
        object.__setattr__(self, "pitch", clamp_pitch(self.pitch, self.max_pitch))
        object.__setattr__(self, "matrix", rotation_matrix(self.yaw, self.pitch))

    def oriented(self, yaw: Optional[float] = None, pitch: Optional[float] = None) -> "Orientation":
        """Return a new orientation; omitted angles keep their current value."""
        return Orientation(
            yaw=self.yaw if yaw is None else yaw,
            pitch=self.pitch if pitch is None else pitch,
            max_pitch=self.max_pitch,
        )
