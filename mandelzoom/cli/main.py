"""
Command-line interface for Mandelbrot rendering and zoom replay.
"""

import click
import sys
import json
from pathlib import Path
from typing import List, Optional, Tuple
import logging
import time

from .. import __version__
from ..api import ZoomController
from ..core.exceptions import MandelzoomError
from ..core.viewport import PixelCoordinate, ViewportState
from ..io.config import ConfigManager
from ..io.protocol import PointRequest, answer_request
from ..rendering.backends import create_backend
from ..rendering.coloring import PaletteRegistry
from ..rendering.image_output import ImageExporter, RenderMetadata

logger = logging.getLogger(__name__)

HANDLED_ERRORS = (MandelzoomError, ValueError, OSError)


def _fail(ctx, error: Exception):
    click.echo(f"Error: {error}", err=True)
    if ctx.obj.get('verbose'):
        import traceback
        traceback.print_exc()
    sys.exit(1)


def _parse_center(value: Optional[str]) -> Tuple[float, float]:
    if not value:
        return 0.0, 0.0
    try:
        parts = [float(x.strip()) for x in value.split(',')]
    except ValueError:
        raise click.BadParameter("Use 'real,imag'") from None
    if len(parts) != 2:
        raise click.BadParameter("Center must have exactly 2 coordinates")
    return parts[0], parts[1]


def parse_event(text: str):
    """
    Parse a zoom event.

    Accepted forms are ``in:X,Y`` (primary click at a pixel), ``out``
    (secondary click) and ``reset``.
    """
    text = text.strip().lower()
    if text in ('out', 'reset'):
        return text, None
    if text.startswith('in:'):
        try:
            x, y = (int(v.strip()) for v in text[3:].split(','))
        except ValueError:
            raise click.BadParameter(f"Invalid zoom-in event '{text}'. Use 'in:X,Y'") from None
        return 'in', PixelCoordinate(x, y)
    raise click.BadParameter(f"Unknown event '{text}'. Use 'in:X,Y', 'out' or 'reset'")


def _events_callback(ctx, param, values) -> List[tuple]:
    return [parse_event(v) for v in values]


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True), help='Configuration file path (JSON)')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, verbose, quiet):
    """
    mandelzoom - render the Mandelbrot set and replay zoom sessions.
    """
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"mandelzoom v{__version__}")
        click.echo(f"Python: {sys.version}")
        if ctx.invoked_subcommand is None:
            sys.exit(0)

    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose


def _engine_options(func):
    func = click.option('--palette', help='Palette name (or mpl:<colormap>)')(func)
    func = click.option('--max-iter', type=int, help='Maximum iterations')(func)
    func = click.option('--size', '-s', type=int, help='Surface size in pixels')(func)
    return func


def _load_config(ctx, size, max_iter, palette):
    manager = ConfigManager()
    return manager.create_engine_config(
        ctx.obj.get('config_file'),
        surface_size=size,
        max_iter=max_iter,
        palette=palette,
    )


@main.command()
@click.argument('output', type=click.Path())
@_engine_options
@click.option('--scale', type=float, default=1.0, show_default=True, help='Viewport scale (1 = full view)')
@click.option('--center', type=str, help='Viewport offset "real,imag"')
@click.option('--backend', type=click.Choice(['image', 'raster', 'vertices']), default='image',
              show_default=True, help='How the field is turned into output')
@click.option('--radius', type=int, default=0, help='Dot radius for the raster backend')
@click.option('--raw', is_flag=True, help='Also save the raw iteration grid (.npy)')
@click.pass_context
def render(ctx, output, size, max_iter, palette, scale, center, backend, radius, raw):
    """
    Render a single field.

    OUTPUT: image file (.png, .tif, .jpg) or, for the vertices backend, a .npy file
    """
    try:
        config = _load_config(ctx, size, max_iter, palette)
        offset_x, offset_y = _parse_center(center)
        state = ViewportState(scale, offset_x, offset_y)
        controller = ZoomController.from_config(config)
        generator = controller.generator

        start_time = time.time()
        metadata = RenderMetadata.for_state(state, config.surface_size, config.max_iter,
                                            generator.palette.name, backend=backend)

        if backend == 'image':
            iterations = generator.iteration_grid(state)
            rgb_image = generator.classifier.classify_array(iterations)
            metadata.render_time_seconds = time.time() - start_time
            exporter = ImageExporter()
            exporter.save_image(rgb_image, Path(output), metadata)
            if raw:
                exporter.save_raw_data(iterations, Path(output).with_suffix('.npy'), metadata)
        else:
            target = create_backend(backend, config.surface_size, radius)
            target(generator.snapshot(state))
            target.save(output)

        click.echo(f"Render complete: {time.time() - start_time:.2f}s")
        click.echo(f"Saved: {output}")

    except HANDLED_ERRORS as e:
        _fail(ctx, e)


@main.command()
@click.argument('output', type=click.Path())
@_engine_options
@click.option('--event', '-e', 'events', multiple=True, callback=_events_callback,
              help="Zoom event, repeatable: 'in:X,Y', 'out' or 'reset'")
@click.option('--radius', type=int, default=0, help='Dot radius for drawn points')
@click.pass_context
def zoom(ctx, output, size, max_iter, palette, events, radius):
    """
    Replay a sequence of zoom events and save the final view.

    OUTPUT: image file for the final field
    """
    try:
        config = _load_config(ctx, size, max_iter, palette)
        controller = ZoomController.from_config(config)
        raster = create_backend('raster', config.surface_size, radius)
        controller.add_listener(raster)

        controller.regenerate()
        for kind, pixel in events:
            if kind == 'in':
                controller.zoom_in(pixel)
            elif kind == 'out':
                controller.zoom_out()
            else:
                controller.reset()

            info = controller.get_exploration_info()
            click.echo(f"{kind}: scale={info['scale']:g} center=({info['center'][0]:.15g}, "
                       f"{info['center'][1]:.15g})")

        raster.save(output)
        click.echo(f"Saved: {output}")

    except HANDLED_ERRORS as e:
        _fail(ctx, e)


@main.command()
@click.argument('request', type=click.File('r'))
@click.option('--output', '-o', type=click.File('w'), default='-', help='Response file (default stdout)')
@click.option('--palette', help='Palette name (or mpl:<colormap>)')
@click.pass_context
def points(ctx, request, output, palette):
    """
    Answer a point-generation request.

    REQUEST: JSON request file, '-' for stdin
    """
    try:
        point_request = PointRequest.from_json(request.read())
        selected = PaletteRegistry.get(palette) if palette else None
        response = answer_request(point_request, selected)
        json.dump(response, output)
        output.write("\n")

    except HANDLED_ERRORS as e:
        _fail(ctx, e)


@main.command()
@click.pass_context
def list_palettes(ctx):
    """List available color palettes."""
    click.echo("Available color palettes:")
    for name in PaletteRegistry.list_palettes():
        palette = PaletteRegistry.get(name)
        click.echo(f"  {name} ({len(palette)} colors)")
        if ctx.obj.get('verbose'):
            for color in palette.colors:
                click.echo(f"    {color.to_uint8_tuple()}")


@main.command()
@click.argument('config_file', type=click.Path(exists=True))
@click.pass_context
def validate_config(ctx, config_file):
    """Validate a configuration file."""
    try:
        config = ConfigManager(environ={}).create_engine_config(config_file)
        PaletteRegistry.get(config.palette)
    except HANDLED_ERRORS as e:
        click.echo(f"Configuration file has errors: {config_file}", err=True)
        _fail(ctx, e)

    click.echo(f"Configuration file is valid: {config_file}")
    if ctx.obj.get('verbose'):
        for key, value in config.to_dict().items():
            click.echo(f"  {key}: {value}")


if __name__ == '__main__':
    main()
