from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer

from productstamp.config import load_config, write_default_config
from productstamp.cutout import CutoutConfig, preload_model
from productstamp.decoders.image_decoder import read_image_file
from productstamp.discover import discover_inputs
from productstamp.models import CompositeOptions, Fidelity, RenderSettings
from productstamp.naming import build_output_name
from productstamp.pipeline import composite_sync

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Product photo post CLI.")
LOGGER = logging.getLogger("productstamp")


@dataclass(slots=True)
class _Result:
    source: Path
    status: str          # ok | degraded | skipped | failed
    output: Path | None = None
    elapsed: float = 0.0
    error: str | None = None


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _fail(message: str) -> NoReturn:
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(1)


def _existing_output(out_dir: Path, name_tmpl: str, source: Path, cutout_format: str) -> Path | None:
    """Return a previous output for ``source``: the JPEG post or the degraded cutout.

    Templates with ``{date}`` or ``{timestamp}`` render a new name on every run,
    so they never match.
    """
    cutout_ext = cutout_format.lower()
    if cutout_ext == "jpeg":
        cutout_ext = "jpg"
    candidates = [
        build_output_name(name_tmpl, source, "jpg", fidelity=Fidelity.ADVANCED.value),
        build_output_name(name_tmpl, source, cutout_ext, fidelity=Fidelity.MINIMAL.value),
    ]
    for name in candidates:
        if (out_dir / name).exists():
            return out_dir / name
    return None


@app.command()
def render(
    input_path: Path = typer.Argument(..., exists=True, resolve_path=True),
    out: Path | None = typer.Option(None, "--out", help="Output directory."),
    recursive: bool = typer.Option(False, "--recursive", help="Recursively scan input directories."),
    logo: Path | None = typer.Option(None, "--logo", exists=True, dir_okay=False, resolve_path=True, help="Logo image."),
    logo_position: str | None = typer.Option(None, "--logo-position", help='Corner (top-left, ...) or "x,y" percent.'),
    logo_scale: float = typer.Option(1.0, "--logo-scale", min=0.01),
    logo_rotation: float = typer.Option(0.0, "--logo-rotation", help="Degrees, clockwise."),
    price: str | None = typer.Option(None, "--price", help='Price text, e.g. "1500" or "Rs 1500".'),
    price_position: str | None = typer.Option(None, "--price-position", help='Corner (bottom-right, ...) or "x,y" percent.'),
    price_text_color: str | None = typer.Option(None, "--price-text-color"),
    price_bg_color: str | None = typer.Option(None, "--price-bg-color"),
    price_scale: float = typer.Option(1.0, "--price-scale", min=0.01),
    price_rotation: float = typer.Option(0.0, "--price-rotation", help="Degrees, clockwise."),
    name_template: str | None = typer.Option(None, "--name", help='Output filename template, e.g. "{stem}__post.{ext}"'),
    skip_existing: bool = typer.Option(
        True,
        "--skip-existing/--no-skip-existing",
        help="Skip inputs whose post or cutout output already exists (never matches {date}/{timestamp} names).",
    ),
    timeout: float | None = typer.Option(None, "--timeout", min=0.0, help="Cutout timeout in seconds."),
    config_path: Path | None = typer.Option(None, "--config", help="Config file (default: user config)."),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Cut out product photos and composite them onto a square post."""
    _setup_logging(log_level)
    cfg = load_config(config_path)

    try:
        settings = RenderSettings.from_config(cfg)
        options = CompositeOptions(
            logo_image=logo.read_bytes() if logo else None,
            logo_position=logo_position or cfg["logo_position"],
            logo_scale=logo_scale,
            logo_rotation_degrees=logo_rotation,
            price_text=price,
            price_position=price_position or cfg["price_position"],
            price_text_color=price_text_color or cfg["price_text_color"],
            price_background_color=price_bg_color or cfg["price_background_color"],
            price_scale=price_scale,
            price_rotation_degrees=price_rotation,
        )
    except (ValueError, OSError) as exc:
        _fail(f"Invalid options: {exc}")

    cutout_config = CutoutConfig.from_config(cfg)
    cutout_timeout = timeout if timeout is not None else cfg["cutout"].get("timeout")
    name_tmpl = name_template or str(cfg.get("name_template", "{stem}__post.{ext}"))
    try:
        build_output_name(name_tmpl, Path("image.png"), "jpg")
    except ValueError as exc:
        _fail(f"Invalid name template: {exc}")

    out_dir = out
    if out_dir is None:
        out_dir = (input_path / "output") if input_path.is_dir() else (input_path.parent / "output")

    files = discover_inputs(input_path, recursive=recursive, exclude=out_dir)
    if not files:
        typer.echo("No supported image files found.")
        raise typer.Exit(0)
    out_dir.mkdir(parents=True, exist_ok=True)

    def process_one(source: Path) -> _Result:
        t0 = time.perf_counter()
        try:
            if skip_existing:
                existing = _existing_output(out_dir, name_tmpl, source, cutout_config.output_format)
                if existing is not None:
                    return _Result(source=source, status="skipped", output=existing, elapsed=time.perf_counter() - t0)
            result = composite_sync(
                read_image_file(source),
                options,
                settings=settings,
                cutout_config=cutout_config,
                timeout=cutout_timeout,
            )
            output_file = out_dir / build_output_name(
                name_tmpl,
                source,
                result.extension,
                fidelity=result.fidelity.value,
            )
            output_file.write_bytes(result.data)
            status = "degraded" if result.degraded else "ok"
            return _Result(
                source=source,
                status=status,
                output=output_file,
                elapsed=time.perf_counter() - t0,
                error=result.error,
            )
        except Exception as exc:
            return _Result(source=source, status="failed", error=str(exc), elapsed=time.perf_counter() - t0)

    results: list[_Result] = []
    for f in files:
        r = process_one(f)
        results.append(r)
        if r.status == "ok":
            LOGGER.info("OK   %s -> %s  (%.2fs)", r.source.name, r.output.name if r.output else "-", r.elapsed)
        elif r.status == "degraded":
            LOGGER.warning("LOW  %s -> %s  cutout only: %s", r.source.name, r.output.name if r.output else "-", r.error)
        elif r.status == "skipped":
            LOGGER.info("SKIP %s (exists)", r.source.name)
        else:
            LOGGER.error("FAIL %s  %s", r.source.name, r.error)

    ok = sum(1 for r in results if r.status == "ok")
    degraded = sum(1 for r in results if r.status == "degraded")
    skip_count = sum(1 for r in results if r.status == "skipped")
    failed = [r for r in results if r.status == "failed"]
    typer.echo(f"Done. success={ok} degraded={degraded} skipped={skip_count} failed={len(failed)}")
    if failed:
        typer.secho("Failures:", fg=typer.colors.RED)
        for r in failed:
            typer.secho(f"  {r.source}: {r.error}", fg=typer.colors.RED)
        raise typer.Exit(1)


@app.command()
def preload(
    config_path: Path | None = typer.Option(None, "--config", help="Config file (default: user config)."),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Download and load the background-removal model."""
    _setup_logging(log_level)
    cutout_config = CutoutConfig.from_config(load_config(config_path))
    if not preload_model(cutout_config):
        _fail(f"Could not load cutout model {cutout_config.model}")
    typer.echo(f"Model ready: {cutout_config.model}")


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config file."),
) -> None:
    path = write_default_config(force=force)
    typer.echo(f"Config initialized: {path}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
