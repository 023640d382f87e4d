"""Main entry point for the event exporter."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError

from .config import ExporterConfig, Settings, load_event, load_exporter_config
from .metrics import get_metrics
from .models import EnhancedEvent
from .observability import configure_logging, get_logger
from .sinks import SinkRegistry, register_receivers


logger = get_logger(__name__)

app = typer.Typer(help="Deliver Kubernetes events to configured receivers.", no_args_is_help=True)


def _load_config(config_path: Optional[Path]) -> tuple[Settings, ExporterConfig]:
    settings = Settings()
    configure_logging(settings.log_level, settings.json_logs)
    path = config_path or settings.config_file
    try:
        return settings, load_exporter_config(path)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        typer.echo(f"Invalid config {path}: {e}", err=True)
        raise typer.Exit(1)


async def _send_event(
    config: ExporterConfig,
    event: EnhancedEvent,
    receiver: Optional[str]
) -> list[str]:
    """Send the event to each selected receiver; return the names that failed."""
    registry = register_receivers(SinkRegistry(), config)
    names = [receiver] if receiver else registry.list_sinks()
    failed = []
    try:
        for name in names:
            sink = registry.get(name)
            if sink is None:
                logger.warning("receiver_not_deliverable", receiver=name)
                failed.append(name)
                continue
            try:
                await sink.send(event)
            except Exception as e:
                logger.error("event_delivery_failed", receiver=name, error=str(e))
                failed.append(name)
    finally:
        await registry.close_all()
    return failed


@app.command("send")
def send_command(
    event_file: Path = typer.Argument(..., help="Event to deliver, as JSON or YAML."),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Receivers file; defaults to EVENTEXPORTER_CONFIG_FILE.",
    ),
    receiver: Optional[str] = typer.Option(
        None,
        "--receiver",
        "-r",
        help="Only deliver to this receiver.",
    ),
    metrics_file: Optional[Path] = typer.Option(
        None,
        "--metrics-file",
        help="Write delivery metrics here in Prometheus text format.",
    ),
) -> None:
    """Deliver one event to the configured receivers."""
    _, config = _load_config(config_path)
    if receiver and receiver not in {r.name for r in config.receivers}:
        typer.echo(f"Unknown receiver: {receiver}", err=True)
        raise typer.Exit(2)

    event = load_event(event_file)
    if not event.cluster_name:
        event.cluster_name = config.cluster_name

    failed = asyncio.run(_send_event(config, event, receiver))
    if metrics_file:
        metrics_file.write_bytes(get_metrics())
    if failed:
        typer.echo(f"Delivery failed for: {', '.join(failed)}", err=True)
        raise typer.Exit(1)


@app.command("check-config")
def check_config_command(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Receivers file; defaults to EVENTEXPORTER_CONFIG_FILE.",
    ),
) -> None:
    """Validate a receivers file and list its receivers."""
    _, config = _load_config(config_path)
    for receiver in config.receivers:
        kind = "loki" if receiver.loki is not None else "none"
        typer.echo(f"{receiver.name}: {kind}")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
