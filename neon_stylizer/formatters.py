"""
Neon Stylizer - ASCII Output Formatters
=======================================
Terminal, HTML and raster presentations of an AsciiGrid.
"""

from typing import Dict, Literal, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from neon_stylizer.constants import ASCII_LINE_HEIGHT
from neon_stylizer.models import AsciiGrid, Bitmap, FontMetrics


def _escape(char: str) -> str:
    return char.replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;')


def css_rgba(color: Tuple[int, int, int, int]) -> str:
    r, g, b, a = color
    return f"rgba({r},{g},{b},{round(a / 255, 3)})"


# =============================================================================
# ANSI COLOR OUTPUT
# =============================================================================

class AnsiColorFormatter:
    """Format ASCII grids with ANSI colour codes for terminal output."""

    RESET = "\033[0m"

    @staticmethod
    def rgb_to_ansi_24bit(r: int, g: int, b: int, foreground: bool = True) -> str:
        """Convert RGB to 24-bit ANSI color code (true color)."""
        code = 38 if foreground else 48
        return f"\033[{code};2;{r};{g};{b}m"

    @staticmethod
    def rgb_to_ansi_256(r: int, g: int, b: int, foreground: bool = True) -> str:
        """Convert RGB to 256-color ANSI code."""
        if r == g == b:
            if r < 8:
                color = 16
            elif r > 248:
                color = 231
            else:
                color = round((r - 8) / 247 * 24) + 232
        else:
            # 6x6x6 colour cube
            color = 16 + (36 * round(r / 255 * 5)) + (6 * round(g / 255 * 5)) + round(b / 255 * 5)

        code = 38 if foreground else 48
        return f"\033[{code};5;{color}m"

    @staticmethod
    def rgb_to_ansi_16(r: int, g: int, b: int, foreground: bool = True) -> str:
        """Convert RGB to 16-color ANSI code."""
        bright = (r + g + b) / 3 > 127
        color = (1 if r > 127 else 0) + ((1 if g > 127 else 0) << 1) + ((1 if b > 127 else 0) << 2)

        if foreground:
            code = 90 + color if bright else 30 + color
        else:
            code = 100 + color if bright else 40 + color
        return f"\033[{code}m"

    @classmethod
    def _code(cls, rgb, color_mode: str, foreground: bool) -> str:
        if color_mode == '24bit':
            return cls.rgb_to_ansi_24bit(*rgb, foreground)
        if color_mode == '256':
            return cls.rgb_to_ansi_256(*rgb, foreground)
        return cls.rgb_to_ansi_16(*rgb, foreground)

    @classmethod
    def format_grid(cls, grid: AsciiGrid,
                    color_mode: Literal['24bit', '256', '16'] = '24bit',
                    with_background: bool = True) -> str:
        """
        Format an AsciiGrid with ANSI colours.

        Args:
            grid: Grid to format
            color_mode: '24bit', '256' or '16'
            with_background: Also paint the grid background colour

        Returns:
            String with ANSI escape codes, one line per grid row
        """
        background = cls._code(grid.background[:3], color_mode, False) if with_background else ""
        output_lines = []

        for row in grid.rows:
            output = background
            prev_color = None
            for cell in row:
                # Only emit a code when the colour changes
                if cell.color != prev_color:
                    output += cls._code(cell.color[:3], color_mode, True)
                    prev_color = cell.color
                output += cell.char
            output += cls.RESET
            output_lines.append(output)

        return '\n'.join(output_lines)


# =============================================================================
# HTML OUTPUT
# =============================================================================

class HtmlFormatter:
    """Format ASCII grids as HTML."""

    @staticmethod
    def format_grid(grid: AsciiGrid,
                    font_family: str = "monospace",
                    font_size: Optional[int] = None,
                    line_height: float = ASCII_LINE_HEIGHT) -> str:
        """
        Format an AsciiGrid as a standalone HTML document.

        Args:
            grid: Grid to format
            font_family: CSS font family
            font_size: Font size in pixels (defaults to the grid cell size)
            line_height: Line height multiplier

        Returns:
            HTML string
        """
        font_size = grid.cell_size if font_size is None else font_size
        html = f"""<!DOCTYPE html>
<html>
<head>
    <style>
        .ascii-art {{
            font-family: {font_family};
            font-size: {font_size}px;
            line-height: {line_height};
            background-color: {css_rgba(grid.background)};
            white-space: pre;
            display: inline-block;
            margin: 0;
        }}
    </style>
</head>
<body>
<pre class="ascii-art">
"""
        for row in grid.rows:
            prev_color = None
            span_open = False
            for cell in row:
                if cell.color != prev_color:
                    if span_open:
                        html += "</span>"
                    html += f'<span style="color:{css_rgba(cell.color)}">'
                    span_open = True
                    prev_color = cell.color
                html += _escape(cell.char)
            if span_open:
                html += "</span>"
            html += '\n'

        html += """</pre>
</body>
</html>"""
        return html


# =============================================================================
# RASTER OUTPUT
# =============================================================================

class AsciiRasterizer:
    """Draw an AsciiGrid to an RGBA bitmap using explicit font metrics."""

    def __init__(self, metrics: Optional[FontMetrics] = None, font=None):
        self.metrics = metrics
        self.font = font
        self._default_fonts: Dict[int, ImageFont.FreeTypeFont] = {}

    def font_for(self, metrics: FontMetrics):
        """The explicit font, or Pillow's default font sized to the cell height."""
        if self.font is not None:
            return self.font
        size = max(1, metrics.cell_height)
        if size not in self._default_fonts:
            self._default_fonts[size] = ImageFont.load_default(size=size)
        return self._default_fonts[size]

    def canvas_size(self, grid: AsciiGrid, metrics: FontMetrics) -> Tuple[int, int]:
        row_pitch = self.row_pitch(metrics)
        return (max(1, grid.columns * metrics.cell_width),
                max(1, grid.row_count * row_pitch))

    @staticmethod
    def row_pitch(metrics: FontMetrics) -> int:
        return max(1, int(round(metrics.cell_height * metrics.line_height)))

    def rasterize(self, grid: AsciiGrid) -> Bitmap:
        """
        Render the grid: one glyph per cell on the grid background.

        Rows advance by ``cell_height * line_height`` pixels, columns by
        ``cell_width``.
        """
        metrics = self.metrics or FontMetrics.for_cell_size(grid.cell_size)
        image = Image.new('RGBA', self.canvas_size(grid, metrics), tuple(grid.background))
        draw = ImageDraw.Draw(image)
        pitch = self.row_pitch(metrics)
        font = self.font_for(metrics)

        for y, row in enumerate(grid.rows):
            for x, cell in enumerate(row):
                if cell.char.isspace():
                    continue
                draw.text((x * metrics.cell_width, y * pitch), cell.char,
                          fill=tuple(cell.color), font=font)

        return Bitmap.from_image(image)
