#!/usr/bin/env python3
"""
Neon Stylizer - Command Line
============================
Stylize image files from the terminal.

Features:
- Every style: Floyd-Steinberg, Atkinson, Smooth Diffuse, Stippling,
  Gradient and ASCII
- Per-style defaults with individual flag overrides
- Custom neon colour with independent opacity
- PNG/JPEG output, or text/HTML/ANSI/PNG for ASCII art
- Batch processing of several inputs
"""

import argparse
import logging
import os
import sys
from typing import List, Optional, Tuple, Union

from PIL import Image, ImageDraw

from neon_stylizer import (
    AnsiColorFormatter,
    AsciiGrid,
    AsciiRasterizer,
    Bitmap,
    CharacterSet,
    HtmlFormatter,
    NeonColor,
    PipelineDispatcher,
    Style,
    StyleSettings,
    InvalidSettings,
    StylizerError,
    defaults_for,
    save_bitmap,
)
from neon_stylizer.constants import MAX_PIXELS, STYLE_DEFAULTS

logger = logging.getLogger('neon_stylizer.cli')

# Extensions Pillow can write a stylized bitmap to
IMAGE_FORMATS = {'png', 'jpg', 'jpeg', 'webp', 'bmp', 'tiff', 'tif', 'gif'}

# Settings fields that can be overridden from the command line
NUMERIC_FLAGS = (
    'scale', 'smoothness', 'contrast', 'midtones', 'highlights',
    'luminance_threshold', 'blur', 'invert_shape',
)


def style_choices() -> List[str]:
    return [style.name.lower().replace('_', '-') for style in Style]


# =============================================================================
# OUTPUT
# =============================================================================

def _extension(path: str) -> str:
    return os.path.splitext(path)[1].lower().lstrip('.')


def write_result(result: Union[Bitmap, AsciiGrid], path: str,
                 settings: StyleSettings, color_mode: str = '24bit') -> str:
    """
    Write a stylized result; the format comes from the file extension.

    Raises:
        InvalidSettings: for an extension the result cannot be written as
        InvalidImageData: for a fully transparent bitmap
    """
    ext = _extension(path)

    if isinstance(result, AsciiGrid):
        if ext == 'html':
            content = HtmlFormatter.format_grid(result)
        elif ext == 'ansi':
            content = AnsiColorFormatter.format_grid(result, color_mode=color_mode)
        elif ext in IMAGE_FORMATS:
            return save_bitmap(AsciiRasterizer().rasterize(result), path, settings.invert)
        elif ext == 'txt':
            content = result.to_text()
        else:
            raise InvalidSettings(f"Cannot write ASCII art as '.{ext}'")
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        return path

    if ext not in IMAGE_FORMATS:
        raise InvalidSettings(f"Cannot write an image as '.{ext}'")
    return save_bitmap(result, path, settings.invert)


def default_output_path(input_path: str, style: Style, fmt: Optional[str],
                        output_dir: Optional[str] = None) -> str:
    """``<dir>/<name>_<style>.<fmt>``; txt for ASCII and png otherwise by default."""
    if fmt is None:
        fmt = 'txt' if style is Style.ASCII else 'png'
    base_name = os.path.splitext(os.path.basename(input_path))[0]
    directory = output_dir if output_dir is not None else os.path.dirname(input_path)
    suffix = style.name.lower()
    return os.path.join(directory, f"{base_name}_{suffix}.{fmt}")


# =============================================================================
# BATCH PROCESSING
# =============================================================================

class BatchProcessor:
    """Process multiple images with the same settings."""

    def __init__(self, settings: StyleSettings,
                 charset: str = CharacterSet.SAFE,
                 color_mode: str = '24bit',
                 max_pixels: int = MAX_PIXELS):
        self.settings = settings
        self.color_mode = color_mode
        self.dispatcher = PipelineDispatcher(max_pixels=max_pixels, charset=charset)

    def process_file(self, input_path: str, output_path: str) -> str:
        """Load, stylize and write a single image."""
        with Image.open(input_path) as image:
            logger.info("Loaded %s (%dx%d, %s)", input_path, image.width, image.height, image.mode)
            bitmap = Bitmap.from_image(image)
        result = self.dispatcher.transform(bitmap, self.settings)
        return write_result(result, output_path, self.settings, self.color_mode)

    def process_files(self, input_paths: List[str],
                      output_dir: Optional[str] = None,
                      output_format: Optional[str] = None) -> Tuple[List[str], List[str]]:
        """
        Process several image files.

        Args:
            input_paths: Input file paths
            output_dir: Output directory (None writes next to each input)
            output_format: Output extension (None picks by style)

        Returns:
            (written paths, failed input paths)
        """
        written = []
        failed = []

        for path in input_paths:
            output_path = default_output_path(path, self.settings.style, output_format, output_dir)
            try:
                written.append(self.process_file(path, output_path))
                print(f"Saved to {output_path}")
            except (StylizerError, OSError) as e:
                print(f"Error processing {path}: {e}", file=sys.stderr)
                failed.append(path)

        return written, failed


# =============================================================================
# DEMO
# =============================================================================

def demo_image(size: int = 120) -> Bitmap:
    """Synthetic test image: a red disc with a blue square on white."""
    image = Image.new('RGB', (size, size), color='white')
    draw = ImageDraw.Draw(image)
    draw.ellipse([size // 10, size // 10, size * 9 // 10, size * 9 // 10],
                 fill='red', outline='black')
    draw.rectangle([size * 3 // 10, size * 3 // 10, size * 7 // 10, size * 7 // 10], fill='blue')
    return Bitmap.from_image(image)


def demo(output_dir: Optional[str] = None):
    """Run every style over the synthetic image."""

    print("=" * 60)
    print("Neon Stylizer Demo")
    print("=" * 60)

    bitmap = demo_image()
    dispatcher = PipelineDispatcher()
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    for number, style in enumerate(Style, 1):
        settings = defaults_for(style)
        if style is Style.ASCII:
            # Small cells so the demo image yields a readable grid
            settings = settings.replace(scale=1.0)
        result = dispatcher.transform(bitmap, settings)

        print(f"\n{number}. {style.display_name}:")
        print("-" * 40)
        if isinstance(result, AsciiGrid):
            print(result.to_text())
            print(f"Grid: {result.columns}x{result.row_count}")
        else:
            drawn = int((result.to_array()[..., 3] > 0).sum())
            print(f"Drawn pixels: {drawn} of {result.width * result.height}")

        if output_dir:
            path = default_output_path('demo.png', style, None, output_dir)
            try:
                write_result(result, path, settings)
            except StylizerError as e:
                print(f"Not saved: {e}")
                continue
            print(f"Saved to {path}")

    print("\n" + "=" * 60)
    print("Demo Complete!")
    print("=" * 60)


def list_styles():
    """Print every style with its default settings."""
    header = f"{'style':<16}" + ''.join(f"{name:>21}" for name in NUMERIC_FLAGS)
    print(header)
    for style in Style:
        defaults = STYLE_DEFAULTS[style]
        row = f"{style.name.lower().replace('_', '-'):<16}"
        row += ''.join(f"{defaults[name]:>21g}" for name in NUMERIC_FLAGS)
        print(row)


# =============================================================================
# COMMAND LINE INTERFACE
# =============================================================================

def create_argument_parser():
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description='Stylize images with dithering, line art, stippling, gradients or ASCII',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s photo.jpg                              # Floyd-Steinberg, writes photo_floyd_steinberg.png
  %(prog)s photo.jpg -s atkinson --scale 0.5      # Coarser Atkinson dither
  %(prog)s photo.jpg -s stippling --color 180 100 100
  %(prog)s photo.jpg -s ascii                     # ASCII art to the terminal
  %(prog)s photo.jpg -s ascii -o art.html         # ASCII art as HTML
  %(prog)s a.png b.png -d out/ -f jpg             # Batch mode
        """
    )

    # Input/Output
    parser.add_argument('inputs', nargs='*', help='Input image file(s)')
    parser.add_argument('-o', '--output', help='Output file (single input only)')
    parser.add_argument('-d', '--output-dir', help='Output directory for batch mode')
    parser.add_argument('-f', '--format', help='Output extension for batch mode (png, jpg, txt, html, ansi)')

    # Style
    parser.add_argument('-s', '--style', choices=style_choices(), default='floyd-steinberg',
                        help='Stylization algorithm')

    # Numeric settings (None keeps the style default)
    parser.add_argument('--scale', type=float, help='Processing scale / density (0.1-1)')
    parser.add_argument('--smoothness', type=float, help='Diffusion, edge sensitivity or posterization (0-10)')
    parser.add_argument('--contrast', type=float, help='Contrast (-100-100)')
    parser.add_argument('--midtones', type=float, help='Midtone curve (0-100)')
    parser.add_argument('--highlights', type=float, help='Highlights (0-100)')
    parser.add_argument('-t', '--threshold', dest='luminance_threshold', type=float,
                        help='Luminance threshold (0-100, 0 = near-white cutoff)')
    parser.add_argument('--blur', type=float, help='Box blur radius (0-10)')
    parser.add_argument('--invert-shape', type=float, help='Partial negative of the source (0-100)')

    # Colour
    parser.add_argument('-i', '--invert', action='store_true', help='Invert foreground and background')
    parser.add_argument('--color', nargs=3, type=float, metavar=('H', 'S', 'V'),
                        help='Custom neon colour (hue 0-360, saturation and value 0-100)')
    parser.add_argument('--alpha', type=float, default=1.0, help='Custom colour opacity (0-1)')
    parser.add_argument('--exporting', action='store_true',
                        help='Transparent stippling background')

    # ASCII options
    parser.add_argument('--charset', default='safe',
                        help='ASCII character set: safe, detailed, blocks, simple')
    parser.add_argument('--color-mode', choices=['24bit', '256', '16'],
                        default='24bit', help='Terminal color mode for ASCII output')

    # Other options
    parser.add_argument('--max-pixels', type=int, default=MAX_PIXELS,
                        help='Largest accepted image in pixels')
    parser.add_argument('--demo', action='store_true', help='Run demo')
    parser.add_argument('--list-styles', action='store_true', help='List styles and their defaults')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')

    return parser


def build_settings(args) -> StyleSettings:
    """Style defaults overridden by the flags that were given."""
    settings = defaults_for(args.style)
    overrides = {name: getattr(args, name) for name in NUMERIC_FLAGS
                 if getattr(args, name) is not None}
    overrides['invert'] = args.invert
    overrides['is_exporting'] = args.exporting
    if args.color is not None or args.alpha < 1:
        h, s, v = args.color if args.color is not None else (300.0, 100.0, 100.0)
        overrides['use_custom_colors'] = True
        overrides['neon_color'] = NeonColor(h=h, s=s, v=v, a=args.alpha)

    settings = settings.replace(**overrides)
    settings.validate()
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for command line usage."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.list_styles:
        list_styles()
        return 0

    if args.demo:
        demo(args.output_dir)
        return 0

    if not args.inputs:
        parser.print_help()
        return 0

    if args.output and len(args.inputs) > 1:
        parser.error('--output takes a single input; use --output-dir for batch mode')

    try:
        settings = build_settings(args)
    except StylizerError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 2

    processor = BatchProcessor(settings,
                               charset=CharacterSet.get_preset(args.charset),
                               color_mode=args.color_mode,
                               max_pixels=args.max_pixels)

    # A single ASCII conversion without an output file prints to the terminal
    if len(args.inputs) == 1 and settings.style is Style.ASCII \
            and not args.output and not args.output_dir and not args.format:
        path = args.inputs[0]
        try:
            with Image.open(path) as image:
                bitmap = Bitmap.from_image(image)
            grid = processor.dispatcher.transform(bitmap, settings)
        except (StylizerError, OSError) as e:
            print(f"Error processing {path}: {e}", file=sys.stderr)
            return 1
        print(AnsiColorFormatter.format_grid(grid, color_mode=args.color_mode))
        return 0

    if args.output:
        path = args.inputs[0]
        try:
            processor.process_file(path, args.output)
        except (StylizerError, OSError) as e:
            print(f"Error processing {path}: {e}", file=sys.stderr)
            return 1
        print(f"Saved to {args.output}")
        return 0

    _, failed = processor.process_files(args.inputs, args.output_dir, args.format)
    return 1 if failed else 0


# =============================================================================
# ENTRY POINT
# =============================================================================

if __name__ == '__main__':
    sys.exit(main())
