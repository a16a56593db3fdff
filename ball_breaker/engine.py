"""
Rendering Engine
=================
Double-buffered terminal renderer. Projects the arena onto the terminal
grid and draws simulation snapshots; it holds no game rules.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import random

try:
    from blessed import Terminal
except ImportError:
    raise ImportError("'blessed' library required. Install with: pip install blessed")


RGB = Tuple[int, int, int]

WHITE: RGB = (255, 255, 255)
GRAY_MED: RGB = (138, 138, 138)
GRAY_DARK: RGB = (68, 68, 68)
NEON_CYAN: RGB = (78, 205, 196)
NEON_YELLOW: RGB = (255, 215, 0)
NEON_RED: RGB = (255, 107, 107)
NEON_GREEN: RGB = (124, 255, 107)

HUD_ROWS = 2


def hex_to_rgb(value: str) -> RGB:
    """'#rrggbb' to an (r, g, b) tuple. Unparseable colors render white."""
    value = value.lstrip('#')
    if len(value) != 6:
        return WHITE
    try:
        return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
    except ValueError:
        return WHITE


@dataclass
class ArenaProjection:
    """Maps arena coordinates onto a terminal character grid."""
    arena_width: float
    arena_height: float
    cols: int
    rows: int

    def to_cell(self, x: float, y: float) -> Tuple[int, int]:
        cx = int(x / self.arena_width * self.cols)
        cy = int(y / self.arena_height * self.rows)
        return cx, cy

    def to_subpixel(self, x: float, y: float) -> Tuple[int, int]:
        """Braille sub-pixel coordinates (2x4 dots per cell)."""
        px = int(x / self.arena_width * self.cols * 2)
        py = int(y / self.arena_height * self.rows * 4)
        return px, py

    def span(self, width: float, height: float) -> Tuple[int, int]:
        """Size in cells of an arena-sized box, at least one cell each way."""
        return (max(1, round(width / self.arena_width * self.cols)),
                max(1, round(height / self.arena_height * self.rows)))

    def inside(self, cx: int, cy: int) -> bool:
        return 0 <= cx < self.cols and 0 <= cy < self.rows


@dataclass
class Cell:
    """One terminal cell: glyph plus foreground and background color."""
    char: str = ' '
    fg: Optional[RGB] = None
    bg: Optional[RGB] = None

    def matches(self, other: 'Cell') -> bool:
        return self.char == other.char and self.fg == other.fg and self.bg == other.bg

    def reset(self):
        self.char = ' '
        self.fg = None
        self.bg = None


class DoubleBuffer:
    """
    Front and back cell grids.

    Frames are drawn into the back grid. present() emits escape sequences
    for the cells that differ from the front grid, then swaps the two.
    """

    def __init__(self, term: Terminal):
        self.term = term
        self.width = term.width
        self.height = term.height
        self.front: List[List[Cell]] = []
        self.back: List[List[Cell]] = []
        self._init_buffers()
        self._normal = term.normal

    def _init_buffers(self):
        self.front = [[Cell() for _ in range(self.width)] for _ in range(self.height)]
        self.back = [[Cell() for _ in range(self.width)] for _ in range(self.height)]

    def resize(self, width: int, height: int):
        self.width = width
        self.height = height
        self._init_buffers()

    def clear_back(self):
        for row in self.back:
            for cell in row:
                cell.reset()

    def put(self, x: int, y: int, char: str, fg: Optional[RGB] = None,
            bg: Optional[RGB] = None):
        if 0 <= x < self.width and 0 <= y < self.height:
            cell = self.back[y][x]
            cell.char = char
            cell.fg = fg
            cell.bg = bg

    def put_string(self, x: int, y: int, text: str, fg: Optional[RGB] = None,
                   bg: Optional[RGB] = None):
        for i, char in enumerate(text):
            self.put(x + i, y, char, fg, bg)

    def present(self) -> str:
        """Swap buffers and return escape output for changed cells only."""
        term = self.term
        output_parts = []

        for y in range(self.height):
            for x in range(self.width):
                back_cell = self.back[y][x]
                if back_cell.matches(self.front[y][x]):
                    continue
                output_parts.append(term.move_xy(x, y))
                output_parts.append(self._normal)
                if back_cell.bg is not None:
                    output_parts.append(term.on_color_rgb(*back_cell.bg))
                if back_cell.fg is not None:
                    output_parts.append(term.color_rgb(*back_cell.fg))
                output_parts.append(back_cell.char or ' ')

        self.front, self.back = self.back, self.front
        return ''.join(output_parts)


class BrailleCanvas:
    """
    Dot-resolution drawing surface built from Unicode Braille glyphs.

    Each character cell maps to a 2x4 dot grid. Used for particles so they
    read as sparks rather than whole cells.
    """

    # (column, row) -> bit value
    DOTS = {
        (0, 0): 0x01, (0, 1): 0x02, (0, 2): 0x04, (0, 3): 0x40,
        (1, 0): 0x08, (1, 1): 0x10, (1, 2): 0x20, (1, 3): 0x80,
    }
    BASE = 0x2800

    def __init__(self, char_width: int, char_height: int):
        self.char_width = char_width
        self.char_height = char_height
        self.pixel_width = char_width * 2
        self.pixel_height = char_height * 4
        self.canvas: List[List[int]] = []
        self.colors: List[List[RGB]] = []
        self.clear()

    def clear(self):
        self.canvas = [[0] * self.char_width for _ in range(self.char_height)]
        self.colors = [[WHITE] * self.char_width for _ in range(self.char_height)]

    def set_pixel(self, px: int, py: int, color: RGB = WHITE):
        if 0 <= px < self.pixel_width and 0 <= py < self.pixel_height:
            cx, cy = px // 2, py // 4
            self.canvas[cy][cx] |= self.DOTS[(px % 2, py % 4)]
            self.colors[cy][cx] = color

    def blit_to_buffer(self, buffer: DoubleBuffer, offset_y: int = 0):
        """Overlay dots onto empty buffer cells."""
        for cy in range(self.char_height):
            for cx in range(self.char_width):
                pattern = self.canvas[cy][cx]
                if not pattern:
                    continue
                by = cy + offset_y
                if 0 <= by < buffer.height and cx < buffer.width:
                    if buffer.back[by][cx].char == ' ':
                        buffer.put(cx, by, chr(self.BASE + pattern), self.colors[cy][cx])


@dataclass
class GameRenderer:
    """
    Draws simulation snapshots: arena, HUD, overlays.

    The arena occupies every row below the HUD. Screen shake offsets
    arena cells only; HUD and overlays stay put.
    """
    term: Terminal
    arena_width: float = 800.0
    arena_height: float = 600.0
    buffer: DoubleBuffer = field(init=False)
    braille: BrailleCanvas = field(init=False)
    projection: ArenaProjection = field(init=False)

    shake_x: int = 0
    shake_y: int = 0
    shake_frames: int = 0
    shake_intensity: int = 1

    def __post_init__(self):
        self.buffer = DoubleBuffer(self.term)
        self._layout()

    def _layout(self):
        rows = max(1, self.buffer.height - HUD_ROWS)
        cols = max(1, self.buffer.width)
        self.braille = BrailleCanvas(cols, rows)
        self.projection = ArenaProjection(self.arena_width, self.arena_height, cols, rows)

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    def resize(self, width: int, height: int):
        self.buffer.resize(width, height)
        self._layout()

    def trigger_shake(self, intensity: int = 1, frames: int = 4):
        self.shake_intensity = intensity
        self.shake_frames = max(self.shake_frames, frames)

    def update_effects(self):
        if self.shake_frames > 0:
            self.shake_x = random.randint(-self.shake_intensity, self.shake_intensity)
            self.shake_y = random.randint(-self.shake_intensity, self.shake_intensity)
            self.shake_frames -= 1
        else:
            self.shake_x = 0
            self.shake_y = 0

    def begin_frame(self):
        self.buffer.clear_back()
        self.braille.clear()

    def end_frame(self) -> str:
        self.braille.blit_to_buffer(self.buffer, offset_y=HUD_ROWS)
        self.update_effects()
        return self.buffer.present()

    # -------------------------------------------------------------------------
    # Arena drawing
    # -------------------------------------------------------------------------

    def put_arena(self, cx: int, cy: int, char: str, fg: Optional[RGB] = None):
        """Put a character at arena cell coordinates, with shake."""
        cx += self.shake_x
        cy += self.shake_y
        if self.projection.inside(cx, cy):
            self.buffer.put(cx, cy + HUD_ROWS, char, fg)

    def draw_entity(self, entity: dict):
        color = hex_to_rgb(entity['color'])
        if entity['kind'] == 'particle':
            px, py = self.projection.to_subpixel(entity['x'], entity['y'])
            self.braille.set_pixel(px + self.shake_x * 2, py + self.shake_y * 4, color)
            return

        if entity.get('slowed'):
            color = NEON_CYAN
        elif entity.get('burning'):
            color = NEON_RED

        cx, cy = self.projection.to_cell(entity['x'], entity['y'])
        if 'width' in entity:
            w, h = self.projection.span(entity['width'], entity['height'])
            left, top = cx - w // 2, cy - h // 2
            for j in range(h):
                for i in range(w):
                    self.put_arena(left + i, top + j, entity['char'], color)
        else:
            self.put_arena(cx, cy, entity['char'], color)

    def draw_snapshot(self, snapshot: dict):
        for entity in snapshot['entities']:
            self.draw_entity(entity)
        self.draw_hud(snapshot['hud'])

    # -------------------------------------------------------------------------
    # UI
    # -------------------------------------------------------------------------

    def draw_bar(self, x: int, y: int, width: int, fraction: float,
                 fg: RGB, label: str = ''):
        filled = int(round(max(0.0, min(1.0, fraction)) * width))
        self.buffer.put_string(x, y, label, WHITE)
        x += len(label)
        for i in range(width):
            self.buffer.put(x + i, y, '=' if i < filled else '-',
                            fg if i < filled else GRAY_DARK)

    def draw_hud(self, hud: dict):
        top = (f"SCORE {hud['score']:>6}  WAVE {hud['wave']:>2}  LV {hud['level']:>2}  "
               f"BALL {hud['archetype'] or '-':<9}  AUTO {'ON' if hud['auto_fire'] else 'OFF'}")
        self.buffer.put_string(0, 0, top[:self.width], WHITE)

        hp = f"HP {int(hud['health']):>3}/{int(hud['max_health']):<3} "
        self.draw_bar(0, 1, 20, hud['health'] / hud['max_health'] if hud['max_health'] else 0.0,
                      NEON_RED, hp)
        self.draw_bar(30, 1, 16, hud['xp_fraction'], NEON_GREEN, ' XP ')
        self.draw_bar(52, 1, 12, hud['wave_fraction'], NEON_YELLOW, ' WAVE ')

    def draw_center(self, lines: List[Tuple[str, RGB]]):
        top = max(0, (self.height - len(lines)) // 2)
        for i, (text, color) in enumerate(lines):
            x = max(0, (self.width - len(text)) // 2)
            self.buffer.put_string(x, top + i, text, color)

    def draw_upgrade_overlay(self, choices: List[dict]):
        lines = [('LEVEL UP - choose an upgrade', NEON_YELLOW), ('', WHITE)]
        for i, choice in enumerate(choices):
            lines.append((f"[{i + 1}] {choice['name']}", WHITE))
            lines.append((f"    {choice['description']}", GRAY_MED))
        self.draw_center(lines)

    def draw_title(self):
        self.draw_center([
            ('B A L L   B R E A K E R', NEON_CYAN),
            ('', WHITE),
            ('WASD move   IJKL aim and fire   TAB auto-fire', GRAY_MED),
            ('SPACE to start   Q to quit', WHITE),
        ])

    def draw_game_over(self, score: int, wave: int, level: int):
        self.draw_center([
            ('GAME OVER', NEON_RED),
            ('', WHITE),
            (f'score {score}   wave {wave}   level {level}', WHITE),
            ('R to restart   Q to quit', GRAY_MED),
        ])
