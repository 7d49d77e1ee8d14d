"""Command-line interface for darkpage."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
import yaml

from .classifier import ElementCategory, is_colorful, is_light_background, is_near_black
from .color import parse_color
from .config import EngineConfig, discover_config
from .exceptions import DarkpageError
from .gradient import GradientValue, is_gradient
from .loader import dump_inline_styles, load_page
from .logger import VERBOSITY_DEBUG, VERBOSITY_SILENT, setup_logger
from .profiles import is_restricted_url
from .session import Session
from .transform import (
    gradient_is_dark,
    transform_background,
    transform_border,
    transform_gradient,
    transform_side_border,
    transform_text,
    transform_vector_paint,
)

app = typer.Typer(
    name="darkpage",
    help="Dark mode engine for rendered pages - darken light themes, keep dark ones",
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show style writes, 2=show all checks, 3=debug",
            min=VERBOSITY_SILENT,
            max=VERBOSITY_DEBUG,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: darkpage_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for darkpage commands."""
    setup_logger(verbose)
    ctx.obj = config


def _load_config(ctx: typer.Context, page_path: Path | None = None) -> EngineConfig:
    try:
        return discover_config(page_path, ctx.obj)
    except (DarkpageError, FileNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _decision(value: str | None) -> str:
    return value if value is not None else "unchanged"


@app.command()
def apply(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Path to the page description YAML file")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Output file path (default: stdout)")
    ] = None,
    profiles: Annotated[
        Path | None,
        typer.Option("--profiles", help="Directory of <hostname>.css site stylesheets"),
    ] = None,
) -> None:
    """Enable dark mode on a page description and print the resulting inline styles."""
    config = _load_config(ctx, file)
    if profiles is not None:
        config = config.model_copy(update={"profiles_dir": profiles})

    try:
        page = load_page(file)
    except DarkpageError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if page.url is not None and is_restricted_url(page.url):
        typer.echo(f"Error: Cannot darken restricted page {page.url}", err=True)
        raise typer.Exit(1)

    session = Session(page.document, config)
    session.enable()
    theme = "dark" if session.is_dark_site else "light"
    result = dump_inline_styles(page.document, site_theme=theme)

    if output:
        output.write_text(result, encoding="utf-8")
        typer.echo(f"Dark styles for {page.hostname} ({theme} site) written to {output}")
    else:
        typer.echo(result, nl=False)


@app.command()
def color(
    ctx: typer.Context,
    value: Annotated[str, typer.Argument(help="Functional color, e.g. 'rgb(240, 240, 240)'")],
    *,
    is_input: Annotated[
        bool, typer.Option("--input", help="Treat the color as a form control's")
    ] = False,
    dark_context: Annotated[
        bool, typer.Option("--dark-context", help="Text sits on a dark background")
    ] = False,
) -> None:
    """Show how the engine would treat one color."""
    config = _load_config(ctx)
    thresholds = config.thresholds
    parsed = parse_color(value)
    if parsed is None:
        typer.echo(f"{value}: not a visible rgb()/rgba() color, left unchanged")
        return

    hsl = parsed.hsl
    category = ElementCategory.INPUT if is_input else ElementCategory.PLAIN
    typer.echo(f"Color:        {parsed}")
    typer.echo(f"Brightness:   {parsed.brightness:.1f}")
    typer.echo(f"HSL:          {hsl.h:.0f}, {hsl.s:.1f}%, {hsl.l:.1f}%")
    typer.echo(f"Light:        {'yes' if is_light_background(parsed, thresholds) else 'no'}")
    typer.echo(f"Colorful:     {'yes' if is_colorful(parsed, thresholds) else 'no'}")
    typer.echo(f"Near black:   {'yes' if is_near_black(parsed, thresholds) else 'no'}")
    typer.echo("")
    typer.echo(f"Background:   {_decision(transform_background(parsed, is_input, thresholds))}")
    typer.echo(
        f"Text:         {_decision(transform_text(parsed, category, dark_context, thresholds))}"
    )
    typer.echo(f"Border:       {_decision(transform_border(parsed, thresholds))}")
    typer.echo(
        f"Side border:  {_decision(transform_side_border(parsed, thresholds, config.colors))}"
    )
    typer.echo(
        f"Vector paint: {_decision(transform_vector_paint(parsed, thresholds, config.colors))}"
    )


@app.command()
def gradient(
    ctx: typer.Context,
    value: Annotated[str, typer.Argument(help="background-image value with a gradient")],
) -> None:
    """Show how the engine would rewrite a gradient."""
    config = _load_config(ctx)
    if not is_gradient(value):
        typer.echo(f"{value}: not a gradient, left unchanged")
        return

    parsed = GradientValue.parse(value)
    for token in parsed.tokens:
        label = f"{token.color.brightness:.1f}" if token.color is not None else "invisible"
        typer.echo(f"Stop {token.text}: {label}")
    mean = parsed.mean_brightness
    typer.echo(f"Mean brightness: {mean:.1f}" if mean is not None else "Mean brightness: n/a")
    typer.echo(f"Dark: {'yes' if gradient_is_dark(value, config.thresholds) else 'no'}")
    typer.echo(f"Rewritten: {_decision(transform_gradient(value, config.thresholds))}")


@app.command()
def thresholds(ctx: typer.Context) -> None:
    """Print the effective configuration."""
    config = _load_config(ctx)
    typer.echo(
        yaml.safe_dump(config.model_dump(mode="json"), default_flow_style=False, sort_keys=False),
        nl=False,
    )


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
