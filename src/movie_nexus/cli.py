from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from movie_nexus.backends.zeroconf_advertiser import SERVICE_NAME, AdvertisementError
from movie_nexus.catalogue.scanner import ScanOptions
from movie_nexus.startup import DEFAULT_PORT, ServerOptions, load_catalogue, run_server
from movie_nexus.util.assertx import ValidationError
from movie_nexus.util.logging import configure_logging

app = typer.Typer(add_completion=False)


@app.command()
def main(
    root: Path = typer.Argument(
        ..., exists=True, file_okay=False, dir_okay=True, envvar="MOVIE_NEXUS_ROOT"
    ),
    host: Optional[str] = typer.Option(
        None,
        "--host",
        envvar="MOVIE_NEXUS_HOST",
        help="Listen on this address only (default: every IPv4 and IPv6 address)",
    ),
    port: int = typer.Option(
        DEFAULT_PORT, "--port", min=1, max=65535, envvar="MOVIE_NEXUS_PORT"
    ),
    service_name: str = typer.Option(
        SERVICE_NAME, "--service-name", envvar="MOVIE_NEXUS_SERVICE_NAME"
    ),
    advertise: bool = typer.Option(
        True, "--advertise/--no-advertise", envvar="MOVIE_NEXUS_ADVERTISE"
    ),
    default_language: str = typer.Option(
        "en",
        "--default-language",
        help="Language tag for subtitle tracks whose sidecar names none",
    ),
    manifest_out: Optional[Path] = typer.Option(
        None, "--manifest-out", dir_okay=False, help="Also write the manifest here"
    ),
    print_manifest: bool = typer.Option(
        False, "--print-manifest", help="Print the manifest JSON and exit"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    configure_logging(logging.DEBUG if verbose else logging.INFO)
    scan = ScanOptions(default_language=default_language)

    try:
        if print_manifest:
            state = load_catalogue(root, scan)
            typer.echo(state.manifest.decode("utf-8"))
            raise typer.Exit(code=0)

        run_server(
            ServerOptions(
                root=root,
                host=host,
                port=port,
                service_name=service_name,
                advertise=advertise,
                manifest_out=manifest_out,
                scan=scan,
            )
        )
    except (ValidationError, AdvertisementError, OSError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


if __name__ == "__main__":
    app()
