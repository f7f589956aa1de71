# test_surface_render.py
import pytest

from surface_errors import UnsupportedTargetKind
from surface_projection import Quad
from surface_render import (
    RasterRenderer,
    TargetKind,
    VectorRenderer,
    colormap_color_fn,
    default_stroke_color_fn,
    make_renderer,
    path_d,
)

SQUARE = Quad((50.0, 50.0), (150.0, 50.0), (150.0, 150.0), (50.0, 150.0), avg=0.0)
TRIANGLE = Quad((0.0, 0.0), (10.5, 0.0), (10.5, 10.0), (10.5, 10.0), avg=1.0)


@pytest.mark.parametrize("value, kind", [
    ("raster", TargetKind.RASTER),
    ("canvas", TargetKind.RASTER),
    ("SVG", TargetKind.VECTOR),
    (TargetKind.VECTOR, TargetKind.VECTOR),
])
def test_target_kind_parse(value, kind):
    assert TargetKind.parse(value) is kind


def test_unknown_target_rejected():
    with pytest.raises(UnsupportedTargetKind):
        TargetKind.parse("webgl")
    with pytest.raises(UnsupportedTargetKind):
        make_renderer("div", 10, 10)


def test_make_renderer_picks_backend():
    assert isinstance(make_renderer("raster", 20, 10), RasterRenderer)
    assert isinstance(make_renderer(TargetKind.VECTOR, 20, 10), VectorRenderer)


def test_path_d():
    assert path_d(TRIANGLE) == "M0.0,0.0 L10.5,0.0 L10.5,10.0 L10.5,10.0 Z"


def test_path_d_keeps_full_precision():
    far = Quad((123456.7, -98765.4321), (1e-7, 0.1), (2.0, 2.0), (3.0, 3.0), avg=0.0)
    assert path_d(far).startswith("M123456.7,-98765.4321 L1e-07,0.1 ")


def test_vector_paths_keep_paint_order():
    r = VectorRenderer(200, 100)
    r.paint(SQUARE, "#ff0000", default_stroke_color_fn(0.0))
    r.paint(TRIANGLE, (0.0, 0.0, 1.0, 0.5), "black")
    assert len(r.elements) == 2
    assert path_d(SQUARE) in r.elements[0]
    assert 'fill="rgb(255,0,0)"' in r.elements[0]
    assert 'stroke-opacity="0.4"' in r.elements[0]
    assert 'fill="rgb(0,0,255)" fill-opacity="0.5"' in r.elements[1]

    svg = r.to_svg()
    assert svg.count("<path") == 2
    assert svg.index(path_d(SQUARE)) < svg.index(path_d(TRIANGLE))
    assert 'viewBox="0 0 200 100"' in svg

    r.clear()
    assert r.elements == []


def test_vector_save(tmp_path):
    r = VectorRenderer(10, 10)
    r.paint(TRIANGLE, "#333333", "black")
    out = tmp_path / "nested" / "surface.svg"
    r.save(out)
    assert out.read_text(encoding="utf-8") == r.to_svg()


def test_raster_paints_pixels():
    r = RasterRenderer(200, 200)
    blank = r.to_array()
    assert blank.shape == (200, 200, 4)
    assert tuple(blank[100, 100]) == (255, 255, 255, 255)

    r.paint(SQUARE, "#ff0000", "#ff0000")
    img = r.to_array()
    assert tuple(img[100, 100]) == (255, 0, 0, 255)
    assert tuple(img[10, 10]) == (255, 255, 255, 255)

    r.clear()
    assert tuple(r.to_array()[100, 100]) == (255, 255, 255, 255)


def test_raster_rows_grow_downward():
    r = RasterRenderer(100, 100)
    top_strip = Quad((0.0, 0.0), (100.0, 0.0), (100.0, 20.0), (0.0, 20.0), avg=0.0)
    r.paint(top_strip, "#0000ff", "#0000ff")
    img = r.to_array()
    assert tuple(img[5, 50]) == (0, 0, 255, 255)
    assert tuple(img[90, 50]) == (255, 255, 255, 255)


def test_colormap_color_fn_clips_to_range():
    fn = colormap_color_fn("viridis", (-1.0, 1.0))
    assert len(fn(0.0)) == 4
    assert fn(-50.0) == fn(-1.0)
    assert fn(50.0) == fn(1.0)
    assert fn(-1.0) != fn(1.0)


def test_raster_resize():
    r = RasterRenderer(100, 100)
    r.resize(160, 80)
    assert (r.width, r.height) == (160, 80)
    assert r.to_array().shape == (80, 160, 4)
