from __future__ import annotations

import logging
from pathlib import Path
import socket

import uvicorn

from movie_nexus.backends.zeroconf_advertiser import SERVICE_NAME, ZeroconfAdvertiser
from movie_nexus.catalogue.manifest import serialize_manifest, write_manifest
from movie_nexus.catalogue.scanner import ScanOptions, count_videos, scan_directory
from movie_nexus.catalogue.served_files import ServedFileIndex
from movie_nexus.util.assertx import ValidationError, assert_dir_exists
from movie_nexus.web.app import CatalogueState, create_app

LOGGER = logging.getLogger(__name__)

# IPv4 and IPv6 wildcards, bound as separate listeners.
DEFAULT_HOSTS = ("0.0.0.0", "::")
DEFAULT_PORT = 5000


class ServerOptions:
    def __init__(
        self,
        root: Path,
        host: str | None = None,
        port: int = DEFAULT_PORT,
        service_name: str = SERVICE_NAME,
        advertise: bool = True,
        manifest_out: Path | None = None,
        scan: ScanOptions | None = None,
    ) -> None:
        self.root = root
        self.host = host
        self.port = port
        self.service_name = service_name
        self.advertise = advertise
        self.manifest_out = manifest_out
        self.scan = scan or ScanOptions()


def load_catalogue(root: Path, scan: ScanOptions | None = None) -> CatalogueState:
    """Scan ``root`` once and derive everything the server shares read-only."""
    assert_dir_exists(root, f"Catalogue root must be an existing directory: {root}")
    root = root.resolve()
    LOGGER.info("Scanning %s", root)
    catalogue = scan_directory(root, root, scan or ScanOptions())
    manifest = serialize_manifest(catalogue)
    try:
        served_files = ServedFileIndex.from_catalogue(catalogue)
    except ValueError as exc:
        raise ValidationError(f"Catalogue contains an unservable path: {exc}") from exc
    LOGGER.info(
        "Catalogue ready: %d videos, %d served files",
        count_videos(catalogue),
        len(served_files),
    )
    return CatalogueState(
        root_path=root,
        catalogue=catalogue,
        manifest=manifest,
        served_files=served_files,
    )


def bind_listener(host: str, port: int) -> socket.socket:
    family, kind, proto, _, address = socket.getaddrinfo(
        host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE
    )[0]
    sock = socket.socket(family, kind, proto)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        if family == socket.AF_INET6:
            sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 1)
        sock.bind(address)
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


def bind_listeners(host: str | None, port: int) -> list[socket.socket]:
    """Bind ``host``, or both wildcard addresses when no host is given.

    Without an explicit host a missing IPv6 stack only costs the IPv6
    listener; any bind failure for an explicit host is fatal.
    """
    if host is not None:
        return [bind_listener(host, port)]

    sockets = [bind_listener(DEFAULT_HOSTS[0], port)]
    try:
        sockets.append(bind_listener(DEFAULT_HOSTS[1], port))
    except OSError as exc:
        LOGGER.warning("IPv6 listener unavailable, serving IPv4 only: %s", exc)
    return sockets


def run_server(options: ServerOptions) -> None:
    state = load_catalogue(options.root, options.scan)
    if options.manifest_out is not None:
        write_manifest(options.manifest_out, state.manifest)
        LOGGER.info("Manifest written to %s", options.manifest_out)

    sockets = bind_listeners(options.host, options.port)
    advertiser: ZeroconfAdvertiser | None = None
    try:
        if options.advertise:
            advertiser = ZeroconfAdvertiser(service_name=options.service_name)
            advertiser.advertise(options.port)
        config = uvicorn.Config(create_app(state), port=options.port, log_config=None)
        uvicorn.Server(config).run(sockets=sockets)
    finally:
        if advertiser is not None:
            advertiser.close()
        for sock in sockets:
            sock.close()
