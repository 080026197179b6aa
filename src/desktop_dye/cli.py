"""Command-line interface for DesktopDye."""

import logging
import time
from pathlib import Path
from typing import Optional

import click
import numpy as np
from rich.table import Table
from rich.text import Text

from .capture.screen import ScreenInfo, capture_image, capture_pixels, find_screen, list_screens
from .colors.extraction import as_pixel_array, get_algorithm
from .colors.payload import describe_color
from .config import (
    DEFAULT_CONFIG_FILE_CONTENTS,
    DesktopDyeConfig,
    config_exists,
    create_default_config,
    get_config_path,
    load_config,
    setup_logging,
)
from .console import console, hex_label, render_title, step, swatch
from .core.exceptions import ConfigError, DesktopDyeError
from .core.models import AlgorithmKind
from .home_assistant.client import ApiStatus, HomeAssistantApi
from .pipeline import FinalColors, run_pipeline

VERSION = "0.2.0"

# Consecutive failed cycles before giving up
MAX_FAILURES = 3
RETRY_DELAY = 5.0  # seconds

logger = logging.getLogger(__name__)


def print_screens(screens: list[ScreenInfo]) -> None:
    console.print(f"Found {len(screens)} screens:")
    for screen in screens:
        line = f"  - id: {screen.id} ({screen.width}x{screen.height})"
        if screen.is_primary:
            line += " (primary)"
        console.print(line)


def print_colors(result: FinalColors) -> None:
    """Print the dominant color and each final color as a swatch."""
    if result.dominant is not None:
        console.print(Text("Dominant color: ") + swatch(result.dominant, hex_label(result.dominant)))

    console.print("Final colors:")
    for i, color in enumerate(result.colors, start=1):
        label = f"{hex_label(color)} ({describe_color(color, result.color_format)})"
        console.print(Text(f"  {i}. ") + swatch(color, label))


def capture_and_submit(
    api: HomeAssistantApi,
    config: DesktopDyeConfig,
    screen: ScreenInfo,
    last_result: Optional[FinalColors],
) -> FinalColors:
    """Run one capture cycle and submit the colors if they changed.

    Raises:
        DesktopDyeError: If any step of the cycle fails.
    """
    with step("Capturing screen"):
        pixels = capture_pixels(screen)

    with step("Calculating colors"):
        result = run_pipeline(pixels, config, last_result)

    print_colors(result)

    if not result.changed:
        console.print("Colors haven't changed, skipping submission")
        return result

    console.print(f'Sending colors value ({result.color_format.label}): "{result.payload}"')
    with step("Submitting colors to Home Assistant"):
        api.set_state(config.ha_target_entity_id, result.payload)

    return result


def _load_or_create_config(config_path: Path) -> DesktopDyeConfig:
    with step(f"Checking config file (at {config_path})"):
        exists = config_exists(config_path)
        if not exists:
            create_default_config(config_path)

    if not exists:
        console.print(f"No config file found. Created default config file at {config_path}")
        raise click.ClickException(
            "DesktopDye cannot run without editing the config file. "
            "Please view and edit the config file and rerun."
        )

    try:
        return load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(f"Failed to get config at\n  {config_path}\n{e}") from e


@click.group()
@click.version_option(version=VERSION)
def cli():
    """DesktopDye - mirror the dominant colors of your screen onto Home Assistant lights."""
    pass


@cli.command("run")
@click.option("--config", "config_file", type=click.Path(dir_okay=False, path_type=Path),
              help="Config file (default: ~/.desktop_dye/config.yaml)")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.option("--once", is_flag=True, help="Run a single capture cycle and exit")
def run(config_file: Optional[Path], verbose: bool, once: bool):
    """Capture the screen and submit colors to Home Assistant in a loop."""
    setup_logging(verbose=verbose)
    console.print()
    console.print(render_title(VERSION))
    console.print()

    config_path = config_file or get_config_path()
    config = _load_or_create_config(config_path)
    console.print(Text("Color selection mode set to ") + Text(config.mode.label, style="italic"))

    api = HomeAssistantApi(config.ha_endpoint, config.ha_token)
    try:
        with step("Checking Home Assistant connection"):
            status = api.get_status()
            if status != ApiStatus.OK:
                raise DesktopDyeError(f"API status: {status.value}")
    except DesktopDyeError as e:
        raise click.ClickException(
            f"Failed to connect to Home Assistant. Please check your config file at\n"
            f"  {config_path}\n\nError: {e}"
        ) from e

    try:
        with step("Checking for screens"):
            screens = list_screens()
            screen = find_screen(screens, config.screen_id)
    except DesktopDyeError as e:
        raise click.ClickException(f"{e}. Please check your config file at\n  {config_path}") from e

    print_screens(screens)
    if config.screen_id is not None:
        console.print(f"Using screen with id {screen.id} (from config)")
    else:
        console.print(f"Using screen with id {screen.id} (the primary screen)")

    failures = 0
    last_result: Optional[FinalColors] = None

    while True:
        started = time.monotonic()
        try:
            last_result = capture_and_submit(api, config, screen, last_result)
        except DesktopDyeError as e:
            failures += 1
            logger.warning("Capture cycle failed (%d/%d): %s", failures, MAX_FAILURES, e)
            if failures >= MAX_FAILURES:
                console.print("Too many failures. Exiting...")
                raise click.ClickException(str(e)) from e
            console.print(Text("Error: ", style="red") + Text(str(e)))
            console.print(f"Retrying in {RETRY_DELAY:g} seconds...")
            time.sleep(RETRY_DELAY)
            continue

        failures = 0
        if once:
            return

        remaining = config.capture_interval - (time.monotonic() - started)
        if remaining > 0:
            console.print(
                f"Waiting {config.capture_interval:g} second(s) for next capture "
                f"({remaining:.2f}s remaining)..."
            )
            time.sleep(remaining)


@cli.command("screens")
def screens_cmd():
    """List the screens available for capture."""
    try:
        screens = list_screens()
    except DesktopDyeError as e:
        raise click.ClickException(str(e)) from e

    if not screens:
        console.print("[red]No screens found![/red]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Resolution")
    table.add_column("Position")
    table.add_column("Primary", justify="center")
    for screen in screens:
        table.add_row(
            str(screen.id),
            f"{screen.width}x{screen.height}",
            f"{screen.left},{screen.top}",
            "[green]✓[/green]" if screen.is_primary else "",
        )
    console.print(table)


# ============================================================================
# Config Commands
# ============================================================================


@cli.group("config")
def config_group():
    """Config file operations."""
    pass


@config_group.command("path")
def config_path_cmd():
    """Print the config file location."""
    click.echo(str(get_config_path()))


@config_group.command("init")
@click.option("--config", "config_file", type=click.Path(dir_okay=False, path_type=Path),
              help="Where to write the config file")
def config_init(config_file: Optional[Path]):
    """Write the default config file."""
    try:
        path = create_default_config(config_file)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    console.print(f"[green]✓[/green] Created default config file at {path}")


@config_group.command("show")
@click.option("--config", "config_file", type=click.Path(dir_okay=False, path_type=Path),
              help="Config file to validate")
@click.option("--template", is_flag=True, help="Print the default config template instead")
def config_show(config_file: Optional[Path], template: bool):
    """Validate the config file and show the effective settings."""
    if template:
        click.echo(DEFAULT_CONFIG_FILE_CONTENTS)
        return

    try:
        config = load_config(config_file)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    table = Table(show_header=True, header_style="bold")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in config.model_dump(mode="json").items():
        if key == "ha_token":
            value = "********"
        table.add_row(key, str(value))
    console.print(table)


# ============================================================================
# Palette comparison
# ============================================================================


@cli.command("palettes")
@click.option("--screen", "screen_id", type=int, help="Screen id (default: primary)")
@click.option("--samples", "-n", type=click.IntRange(1, 10), default=5, show_default=True,
              help="Number of colors per palette")
@click.option("--save", type=click.Path(dir_okay=False, path_type=Path),
              help="Also save the screenshot to this file")
def palettes(screen_id: Optional[int], samples: int, save: Optional[Path]):
    """Capture once and compare the palettes of every algorithm."""
    try:
        screen = find_screen(list_screens(), screen_id)
        console.print(f"Using screen {screen.id} ({screen.width}x{screen.height})")

        with step("Capturing screen"):
            if save:
                image = capture_image(screen)
                pixels = as_pixel_array(np.asarray(image))
            else:
                pixels = capture_pixels(screen)

        if save:
            with step("Saving screenshot"):
                image.save(save)
            console.print(f"Saved screenshot to {save}")
    except DesktopDyeError as e:
        raise click.ClickException(str(e)) from e

    console.print()
    console.print(f"Calculating color palettes ({samples} colors)")

    for kind in AlgorithmKind:
        algorithm = get_algorithm(kind)
        try:
            with step(f"* {algorithm.name}"):
                entries = algorithm.weighted_palette(pixels, samples)
        except Exception as e:
            console.print(f"{algorithm.name}: failed to get palette: {e}")
            console.print()
            continue

        entries = sorted(entries, key=lambda e: e.weight or 0.0, reverse=True)
        colors_concat = "-".join(hex_label(e.color)[1:] for e in entries)
        console.print(f"{algorithm.name}: https://coolors.co/{colors_concat}")

        for entry in entries:
            c = entry.color
            line = Text("  - ") + swatch(c, f"{hex_label(c)} ({c.red}, {c.green}, {c.blue})")
            if entry.weight is not None:
                line.append(f" ({entry.weight * 100:.2f}%)")
            console.print(line)
        console.print()


if __name__ == "__main__":
    cli()
