"""Entry point for the standalone health server — `healthserver` console script."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import settings
from .endpoint import Endpoint
from .engine import collect
from .errors import HealthServerError
from .registry import EndpointRegistry
from .report import status_for
from .server import HealthServer, create_app

console = Console()
logger = logging.getLogger(__name__)


def _load_endpoints(config: str | None) -> list[Endpoint]:
    path = Path(config or settings.endpoints_file)
    if not path.is_absolute():
        path = Path.cwd() / path
    return EndpointRegistry(path=path).load()


def run_server(config: str | None, host: str | None, port: int | None) -> None:
    """Start the health server and block until SIGINT/SIGTERM."""
    endpoints = _load_endpoints(config)
    address = settings.model_copy(
        update={k: v for k, v in {"host": host, "port": port}.items() if v is not None},
    ).address

    server = HealthServer(address=address, endpoints=endpoints)
    server.start()

    console.print(
        Panel.fit(
            f"[bold]Health Server[/bold]\n"
            f"Bind:  {server.url}\n"
            + "\n".join(f"  - {server.url}{e.path} ({e.mode.value})" for e in endpoints),
            title="healthserver",
            border_style="green",
        )
    )

    stop = threading.Event()

    def _signal_handler(signum: int, frame: object) -> None:
        logger.info("Received signal %d, shutting down...", signum)
        stop.set()

    signal.signal(signal.SIGTERM, _signal_handler)
    signal.signal(signal.SIGINT, _signal_handler)

    try:
        stop.wait()
    finally:
        server.shutdown()


def run_checks(config: str | None) -> int:
    """Evaluate every endpoint once and print the outcomes. Returns the exit code."""
    endpoints = _load_endpoints(config)
    # Reject the same configurations `serve` would
    create_app(endpoints)
    exit_code = 0

    for endpoint in endpoints:
        result = collect(endpoint.checks)
        status = status_for(result)

        table = Table(title=f"{endpoint.path} — {status.value} {status.phrase}")
        table.add_column("Check")
        table.add_column("Status", justify="center")
        table.add_column("Message")
        for outcome in result.outcomes:
            if outcome.passed:
                table.add_row(outcome.name, "[green]✔[/green]", "")
            else:
                table.add_row(outcome.name, "[red]✘[/red]", str(outcome.error))
        console.print(table)

        if not result.healthy:
            exit_code = 1

    return exit_code


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="Health check HTTP server")
    sub = parser.add_subparsers(dest="command")

    serve_parser = sub.add_parser("serve", help="Start the health server")
    serve_parser.add_argument("--config", help="Path to endpoints.yaml")
    serve_parser.add_argument("--host", help="Bind host")
    serve_parser.add_argument("--port", type=int, help="Bind port")

    check_parser = sub.add_parser("check", help="Run all checks once and report")
    check_parser.add_argument("--config", help="Path to endpoints.yaml")

    args = parser.parse_args()

    try:
        if args.command == "serve":
            run_server(args.config, args.host, args.port)
        elif args.command == "check":
            sys.exit(run_checks(args.config))
        else:
            parser.print_help()
            sys.exit(1)
    except HealthServerError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()
