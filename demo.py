"""Interactive Surface Demo
=========================

Renders ``z = 3 * sin(r - t) / (r + 1)`` (a ripple spreading from the origin)
with the raster backend and shows the bitmap in a matplotlib window.

- Yaw/Pitch sliders call :meth:`Surface.orient` (pitch clamps at ±90°).
- Time slider re-renders the field at ``t``.
- Zoom slider reconfigures the surface.
- Keys: ``r`` reset, ``s`` save ``surface.png`` + ``surface.svg``, ``q`` quit.

Run:
    pip install numpy matplotlib
    python demo.py

"""

from __future__ import annotations
import logging
import math
import matplotlib.pyplot as plt
from matplotlib.widgets import Slider

from surface import Surface, SurfaceConfig
from surface_render import VectorRenderer, colormap_color_fn

logger = logging.getLogger(__name__)

VIEW_SIZE = 400  # pixels
Z_RANGE = (-3.0, 3.0)


def ripple(t, x, y):
    r = math.hypot(x, y)
    return 3.0 * math.sin(r - t) / (r + 1.0)


class SurfaceDemo:
    def __init__(self):
        self.surface = Surface(SurfaceConfig(
            fn=ripple,
            xy_domain=(-10.0, 10.0),
            xy_resolution=0.5,
            xy_scale=12.0,
            z_scale=12.0,
            z_range=Z_RANGE,
            width=VIEW_SIZE,
            height=VIEW_SIZE,
            color_fn=colormap_color_fn("viridis", Z_RANGE),
        ))
        self.t = 0.0
        self._build_ui()
        self._redraw()

    def _build_ui(self):
        self.fig = plt.figure(figsize=(7, 8))
        self.ax = self.fig.add_axes([0.05, 0.25, 0.9, 0.7])
        self.ax.set_axis_off()
        self.img = None

        cfg = self.surface.config
        self.sl_yaw = self._new_slider(0.15, 0.15, 'Yaw°', -180, 180, math.degrees(cfg.yaw), self._on_pose_change)
        self.sl_pitch = self._new_slider(0.15, 0.10, 'Pitch°', -90, 90, math.degrees(cfg.pitch), self._on_pose_change)
        self.sl_time = self._new_slider(0.15, 0.05, 't', 0, 4 * math.pi, self.t, self._on_time_change)
        self.sl_zoom = self._new_slider(0.15, 0.00, 'Zoom', 0.25, 3, cfg.zoom, self._on_zoom_change)

        self.fig.canvas.mpl_connect('key_press_event', self._on_key)

    def _new_slider(self, x, y, label, vmin, vmax, valinit, cb):
        ax = plt.axes([x, y, 0.7, 0.03])
        sl = Slider(ax, label, vmin, vmax, valinit=valinit)
        sl.on_changed(cb)
        return sl

    def _on_pose_change(self, _):
        self.surface.orient(yaw=math.radians(self.sl_yaw.val), pitch=math.radians(self.sl_pitch.val))
        self._redraw()

    def _on_time_change(self, _):
        self.t = self.sl_time.val
        self._redraw()

    def _on_zoom_change(self, _):
        self.surface.reconfigure(zoom=self.sl_zoom.val)
        self._redraw()

    def _on_key(self, event):
        if event.key in ('q', 'escape'):
            plt.close(self.fig)
        elif event.key == 'r':
            self.sl_yaw.set_val(math.degrees(0.5))
            self.sl_pitch.set_val(math.degrees(0.5))
            self.sl_time.set_val(0.0)
            self.sl_zoom.set_val(1.0)
            logger.info("Reset.")
        elif event.key == 's':
            self.surface.renderer.save("surface.png")
            # config already carries the current yaw/pitch
            svg = Surface(self.surface.config, renderer=VectorRenderer(VIEW_SIZE, VIEW_SIZE))
            svg.render(self.t).renderer.save("surface.svg")
            logger.info("Saved surface.png and surface.svg")

    def _redraw(self):
        self.surface.render(self.t)
        rgba = self.surface.renderer.to_array()
        if self.img is None:
            self.img = self.ax.imshow(rgba)
        else:
            self.img.set_data(rgba)
        vis = self.surface.last_vis_data
        self.ax.set_title(f"t = {self.t:.2f}   quads = {len(vis)}   skipped = {vis.skipped}")
        self.fig.canvas.draw_idle()


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    demo = SurfaceDemo()
    plt.show()


if __name__ == '__main__':
    main()
