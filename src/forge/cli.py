"""Command line front end: ``forge health`` and ``forge render``."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, cast

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .client import Client
from .config import ClientConfig, ConfigError, load_config
from .datatypes import (
    AccessibilityLevel,
    DitherMethod,
    Flow,
    Orientation,
    OutputFormat,
    PalettePreset,
    PdfMode,
    PdfStandard,
)
from .errors import ForgeConnectionError, ForgeError
from .request import RenderRequest

__all__ = ["main"]

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_UNHEALTHY = 2


def _choices(enum_cls: Any) -> click.Choice:
    return click.Choice([member.value for member in enum_cls], case_sensitive=False)


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def _fail(console: Console, message: str, code: int = EXIT_FAILURE) -> click.exceptions.Exit:
    console.print(f"[red]{escape(message)}[/red]")
    return click.exceptions.Exit(code)


def _build_client(ctx: click.Context) -> Client:
    params = cast(Dict[str, Any], ctx.ensure_object(dict))
    cfg = cast(ClientConfig, params["config"])
    transport = params.get("transport")
    return Client.from_config(cfg, transport=transport)


@click.group()
@click.option("--config", "config_path", default=None, help="TOML file with a [client] table.")
@click.option("--url", "base_url", default=None, help="Server address; overrides config and FORGE_URL.")
@click.option("--timeout", "timeout", type=float, default=None, help="HTTP timeout in seconds.")
@click.option("--verbose", is_flag=True, help="Log HTTP exchanges.")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Optional[str],
    base_url: Optional[str],
    timeout: Optional[float],
    verbose: bool,
) -> None:
    """Client for a Forge rendering server."""

    _configure_logging(verbose)
    console = Console()
    try:
        cfg = load_config(config_path)
    except ConfigError as exc:
        raise _fail(console, str(exc)) from exc
    if base_url:
        cfg.base_url = base_url
    if timeout is not None:
        if timeout <= 0:
            raise _fail(console, "--timeout must be greater than zero.")
        cfg.timeout = timeout
    params = cast(Dict[str, Any], ctx.ensure_object(dict))
    params["config"] = cfg


@main.command("health")
@click.pass_context
def health_command(ctx: click.Context) -> None:
    """Check whether the server reports itself healthy."""

    console = Console()
    with _build_client(ctx) as client:
        try:
            healthy = client.health()
        except ForgeConnectionError as exc:
            raise _fail(console, str(exc)) from exc
        if not healthy:
            raise _fail(console, f"{client.base_url} is not healthy", EXIT_UNHEALTHY)
        console.print(f"[green]{escape(client.base_url)} is healthy[/green]")


def _read_source(client: Client, source: str) -> RenderRequest:
    if source.startswith(("http://", "https://")):
        return client.render_url(source)
    if source == "-":
        return client.render_html(sys.stdin.read())
    return client.render_html(Path(source).read_text(encoding="utf-8"))


@main.command("render")
@click.argument("source")
@click.option("-o", "--output", "output", required=True, type=click.Path(dir_okay=False), help="Output file.")
@click.option("--format", "fmt", type=_choices(OutputFormat), default=None, help="Output format (default pdf).")
@click.option("--width", type=int, default=None, help="Viewport width in CSS pixels.")
@click.option("--height", type=int, default=None, help="Viewport height in CSS pixels.")
@click.option("--paper", default=None, help="Paper size, e.g. a4 or letter.")
@click.option("--orientation", type=_choices(Orientation), default=None)
@click.option("--margins", default=None, help='Margin preset or "T,R,B,L" in mm.')
@click.option("--flow", type=_choices(Flow), default=None)
@click.option("--density", type=float, default=None, help="Output DPI.")
@click.option("--background", default=None, help="CSS background colour.")
@click.option("--page-timeout", type=int, default=None, help="Server-side page load timeout in seconds.")
@click.option("--colors", type=int, default=None, help="Quantize to this many colours.")
@click.option(
    "--palette",
    default=None,
    help="Palette preset (auto, bw, grayscale, eink) or comma-separated hex colours.",
)
@click.option("--dither", type=_choices(DitherMethod), default=None)
@click.option("--title", default=None)
@click.option("--author", default=None)
@click.option("--subject", default=None)
@click.option("--keywords", default=None, help="Comma-separated keywords.")
@click.option("--creator", default=None)
@click.option("--bookmarks/--no-bookmarks", default=None, help="Generate bookmarks from headings.")
@click.option("--page-numbers/--no-page-numbers", default=None, help='Add "Page X of Y" footers.')
@click.option("--watermark", "watermark_text", default=None, help="Watermark text.")
@click.option("--watermark-opacity", type=float, default=None)
@click.option("--watermark-pages", default=None, help='Watermark page range, e.g. "1,3-5".')
@click.option("--pdf-standard", type=_choices(PdfStandard), default=None)
@click.option("--pdf-mode", type=_choices(PdfMode), default=None)
@click.option("--accessibility", type=_choices(AccessibilityLevel), default=None)
@click.option("--linearize/--no-linearize", default=None, help="Optimize for fast web view.")
@click.option("--user-password", default=None)
@click.option("--owner-password", default=None)
@click.option("--permissions", default=None, help='Comma-separated permissions, e.g. "print,copy".')
@click.pass_context
def render_command(ctx: click.Context, source: str, output: str, **options: Any) -> None:
    """Render SOURCE (an HTML file, - for stdin, or an http(s) URL) to OUTPUT."""

    console = Console()
    with _build_client(ctx) as client:
        try:
            request = _read_source(client, source)
        except OSError as exc:
            raise _fail(console, f"Cannot read {source}: {exc}") from exc
        _apply_options(request, options)
        logger.debug("Rendering %s to %s", source, output)
        try:
            target = request.save(output)
        except ForgeError as exc:
            raise _fail(console, str(exc)) from exc
        except OSError as exc:
            raise _fail(console, f"Cannot write {output}: {exc}") from exc
    size = target.stat().st_size
    console.print(f"[green]Wrote[/green] {escape(str(target))} ({size} bytes)")


# (click parameter, RenderRequest setter) for options passed through unchanged.
_PASSTHROUGH_OPTIONS = (
    ("fmt", "format"),
    ("width", "width"),
    ("height", "height"),
    ("paper", "paper"),
    ("orientation", "orientation"),
    ("margins", "margins"),
    ("flow", "flow"),
    ("density", "density"),
    ("background", "background"),
    ("page_timeout", "timeout"),
    ("colors", "colors"),
    ("dither", "dither"),
    ("title", "pdf_title"),
    ("author", "pdf_author"),
    ("subject", "pdf_subject"),
    ("keywords", "pdf_keywords"),
    ("creator", "pdf_creator"),
    ("bookmarks", "pdf_bookmarks"),
    ("page_numbers", "pdf_page_numbers"),
    ("watermark_text", "pdf_watermark_text"),
    ("watermark_opacity", "pdf_watermark_opacity"),
    ("watermark_pages", "pdf_watermark_pages"),
    ("pdf_standard", "pdf_standard"),
    ("pdf_mode", "pdf_mode"),
    ("accessibility", "pdf_accessibility"),
    ("linearize", "pdf_linearize"),
    ("user_password", "pdf_user_password"),
    ("owner_password", "pdf_owner_password"),
    ("permissions", "pdf_permissions"),
)


def _apply_options(request: RenderRequest, options: Dict[str, Any]) -> None:
    """Forward every option the user supplied to the matching setter."""

    for option, setter in _PASSTHROUGH_OPTIONS:
        value = options.get(option)
        if value is None:
            continue
        getattr(request, setter)(value)

    palette = options.get("palette")
    if palette is not None:
        if palette.startswith("#"):
            request.custom_palette([color.strip() for color in palette.split(",") if color.strip()])
        else:
            try:
                request.palette(PalettePreset(palette.lower()))
            except ValueError as exc:
                raise click.BadParameter(
                    f"unknown palette preset {palette!r}", param_hint="--palette"
                ) from exc
