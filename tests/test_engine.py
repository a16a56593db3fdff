"""Arena-to-terminal projection and color parsing."""

import pytest

from ball_breaker.engine import ArenaProjection, BrailleCanvas, hex_to_rgb, WHITE

pytestmark = pytest.mark.unit


class TestProjection:
    @pytest.fixture
    def projection(self):
        return ArenaProjection(800.0, 600.0, 80, 30)

    def test_corners(self, projection):
        assert projection.to_cell(0, 0) == (0, 0)
        assert projection.to_cell(799.9, 599.9) == (79, 29)

    def test_center(self, projection):
        assert projection.to_cell(400, 300) == (40, 15)

    def test_subpixel(self, projection):
        assert projection.to_subpixel(400, 300) == (80, 60)

    def test_span_at_least_one_cell(self, projection):
        assert projection.span(60, 30) == (6, 2)
        assert projection.span(1, 1) == (1, 1)

    def test_inside(self, projection):
        assert projection.inside(0, 0)
        assert not projection.inside(80, 0)
        assert not projection.inside(0, -1)


class TestColors:
    def test_hex(self):
        assert hex_to_rgb('#ff8800') == (255, 136, 0)

    @pytest.mark.parametrize("value", ['', '#fff', 'zzzzzz'])
    def test_unparseable_is_white(self, value):
        assert hex_to_rgb(value) == WHITE


class TestBraille:
    def test_dots_combine(self):
        canvas = BrailleCanvas(2, 1)
        canvas.set_pixel(0, 0)
        canvas.set_pixel(1, 3)
        assert canvas.canvas[0][0] == 0x01 | 0x80

    def test_out_of_range_ignored(self):
        canvas = BrailleCanvas(2, 1)
        canvas.set_pixel(4, 0)
        canvas.set_pixel(0, 4)
        assert canvas.canvas == [[0, 0]]
