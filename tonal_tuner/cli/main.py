"""Main entry point for the Tonal Tuner CLI."""

import collections
import sys
import time
from typing import List, Optional, Tuple

import click
import numpy as np

from ..core.config import ConfigManager
from ..core.errors import ConfigurationError
from ..core.factory import ComponentFactory
from ..logger import get_logger
from ..logging_config import setup_logging
from ..note_table import get_note_table, guitar_string_targets
from ..note_types import DetectionResult
from ..note_utils import convert_note_notation, parse_note
from .display import format_outcome, render_big_note

logger = get_logger(__name__)

METHODS = ["default", "yin"]


def _build_factory(ctx: click.Context) -> ComponentFactory:
    return ComponentFactory(ConfigManager(ctx.obj["config_dir"]))


def _parse_target(target: Optional[str]):
    if target is None:
        return None
    try:
        return parse_note(target)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--target")


def summarize(results: List[DetectionResult], use_flats: bool = False) -> str:
    """Summarize a run of readings: count, most common note, median frequency and cents."""
    if not results:
        return "No readings"

    labels = collections.Counter(
        convert_note_notation(f"{r.note_name}{r.octave}", to_flats=use_flats) for r in results
    )
    note, votes = labels.most_common(1)[0]
    frequency = float(np.median([r.frequency for r in results]))
    deviation = float(np.median([r.cents for r in results]))
    return (
        f"{len(results)} readings, mostly {note} ({votes}/{len(results)}), "
        f"median {frequency:.2f} Hz, median {deviation:+.1f} cents"
    )


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Configuration directory (default: ~/.config/tonal_tuner)",
)
@click.pass_context
def cli(ctx, debug, config_dir):
    """Tonal Tuner - detect the pitch of a single string and tune it."""
    setup_logging(level="DEBUG" if debug else "WARNING")
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir


@cli.command()
@click.option("--octave", type=click.IntRange(0, 8), default=None, help="Only show one octave")
@click.option("--flats", is_flag=True, help="Use flat notes instead of sharps")
def table(octave, flats):
    """Print the equal-tempered note table."""
    for index, entry in enumerate(get_note_table()):
        if octave is not None and entry.octave != octave:
            continue
        name = convert_note_notation(str(entry), to_flats=flats)
        click.echo(f"{index:3d}  {name:<4} {entry.frequency:9.2f} Hz")


@cli.command()
def strings():
    """Print the open-string targets for standard guitar tuning."""
    for number, target in enumerate(reversed(guitar_string_targets()), start=1):
        click.echo(f"{number}  {str(target):<3} {target.frequency:7.2f} Hz")


@cli.command()
def devices():
    """List audio input devices and their default sample rates."""
    from ..audio.audio_input import list_input_devices

    inputs = list_input_devices()
    if not inputs:
        click.echo("No input devices found")
        return
    for device_id, device in inputs:
        click.echo(
            f"{device_id:3d}  {device['name']} "
            f"({device['max_input_channels']} ch, {device['default_samplerate']:.0f} Hz)"
        )


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--target", default=None, help="Tune against a fixed note, e.g. E2")
@click.option("--method", type=click.Choice(METHODS), default="default", help="Pitch estimator")
@click.option("--flats", is_flag=True, help="Use flat notes instead of sharps")
@click.option("--quiet", "-q", is_flag=True, help="Only print the summary")
@click.pass_context
def analyze(ctx, file_path, target, method, flats, quiet):
    """Run a recorded file through the tuner."""
    pinned = _parse_target(target)
    factory = _build_factory(ctx)
    tolerance = factory.config_manager.get_config("tuner").get("in_tune_cents", 5.0)

    audio_input = factory.create_audio_input("wav", file_path=file_path, realtime=False)
    service = factory.create_tuner_service(
        audio_input=audio_input, estimator=factory.create_pitch_estimator(method)
    )
    if pinned is not None:
        service.select(pinned)

    ticks: List[Tuple[object, float]] = []

    def on_tick(outcome, timestamp):
        ticks.append((outcome, timestamp))

    try:
        service.start(on_tick)
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    audio_input.wait()
    service.stop()

    if audio_input.error is not None:
        raise click.ClickException(f"Analysis failed: {audio_input.error}")

    if not quiet:
        for outcome, timestamp in ticks:
            click.echo(f"{timestamp:7.2f}s  {format_outcome(outcome, flats, tolerance)}")

    results = [outcome for outcome, _ in ticks if isinstance(outcome, DetectionResult)]
    click.echo(summarize(results, flats))


@cli.command()
@click.option("--device", type=int, default=None, help="Audio input device ID")
@click.option("--target", default=None, help="Tune against a fixed note, e.g. E2")
@click.option("--method", type=click.Choice(METHODS), default="default", help="Pitch estimator")
@click.option("--duration", "-t", type=float, default=None, help="Stop after this many seconds")
@click.option("--flats", is_flag=True, help="Use flat notes instead of sharps")
@click.option("--big", is_flag=True, help="Show the note as a large banner")
@click.pass_context
def listen(ctx, device, target, method, duration, flats, big):
    """Tune live from the microphone."""
    pinned = _parse_target(target)
    factory = _build_factory(ctx)
    tolerance = factory.config_manager.get_config("tuner").get("in_tune_cents", 5.0)

    overrides = {"device_id": device} if device is not None else {}
    service = factory.create_tuner_service(
        audio_input=factory.create_audio_input("default", **overrides),
        estimator=factory.create_pitch_estimator(method),
    )
    if pinned is not None:
        service.select(pinned)

    latest = {"outcome": None}

    def on_tick(outcome, _timestamp):
        latest["outcome"] = outcome

    try:
        started = service.start(on_tick)
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    if not started:
        raise click.ClickException("Could not start audio input")

    click.echo("Listening... play a single string (Ctrl+C to stop)")
    deadline = time.time() + duration if duration else None
    try:
        while service.is_running() and (deadline is None or time.time() < deadline):
            time.sleep(0.1)
            outcome = latest["outcome"]
            if big:
                click.clear()
                click.echo(render_big_note(outcome, flats, tolerance))
            elif outcome is not None:
                click.echo("\r" + format_outcome(outcome, flats, tolerance).ljust(80), nl=False)
    except KeyboardInterrupt:
        logger.info("Tuning interrupted by user")
    finally:
        service.stop()
        click.echo()

    if service.last_error is not None:
        raise click.ClickException(f"Tuning stopped: {service.last_error}")


def main(args: Optional[List[str]] = None) -> int:
    """Run the CLI and return its exit code."""
    try:
        cli.main(args=args, prog_name="tonal-tuner", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
