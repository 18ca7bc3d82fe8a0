from __future__ import annotations

"""DNS-SD advertisement of the HTTP port so players can find the server.

``advertise`` blocks until zeroconf has finished probing and announcing the
service; the completion signal lives inside the zeroconf instance owned by
the advertiser.
"""

from dataclasses import dataclass, field
import ipaddress
import logging
import socket
from typing import Any, Callable

import ifaddr
from zeroconf import Error as ZeroconfError
from zeroconf import ServiceInfo, Zeroconf

LOGGER = logging.getLogger(__name__)

SERVICE_NAME = "MovieNexus"
SERVICE_TYPE = "_http._tcp.local."


class AdvertisementError(RuntimeError):
    pass


def interface_addresses() -> list[str]:
    """Routable addresses of the local network interfaces.

    Loopback and IPv6 link-local addresses are left out: players on other
    machines cannot use them to reach ``<hostname>.local.``.
    """
    addresses = []
    for adapter in ifaddr.get_adapters():
        for ip in adapter.ips:
            # ifaddr reports IPv6 as (address, flowinfo, scope_id)
            text = ip.ip if isinstance(ip.ip, str) else ip.ip[0]
            address = ipaddress.ip_address(text.split("%")[0])
            if address.is_loopback or address.is_link_local:
                continue
            if str(address) not in addresses:
                addresses.append(str(address))
    return addresses


@dataclass
class ZeroconfAdvertiser:
    service_name: str = SERVICE_NAME
    service_type: str = SERVICE_TYPE
    hostname: str = field(default_factory=lambda: socket.gethostname().split(".")[0])
    zeroconf_factory: Callable[[], Any] = Zeroconf
    address_provider: Callable[[], list[str]] = interface_addresses
    _zeroconf: Any = field(default=None, init=False, repr=False)
    _info: ServiceInfo | None = field(default=None, init=False, repr=False)

    def instance_name(self) -> str:
        return f"{self.hostname}-{self.service_name}.{self.service_type}"

    def host_name(self) -> str:
        return f"{self.hostname}.local."

    def build_info(self, port: int) -> ServiceInfo:
        addresses = self.address_provider()
        if not addresses:
            LOGGER.warning("No routable interface address found for %s", self.host_name())
        return ServiceInfo(
            self.service_type,
            self.instance_name(),
            port=port,
            server=self.host_name(),
            parsed_addresses=addresses or None,
        )

    def advertise(self, port: int) -> ServiceInfo:
        if self._zeroconf is not None:
            raise AdvertisementError("Service is already advertised")
        info = self.build_info(port)
        try:
            zeroconf = self.zeroconf_factory()
        except (ZeroconfError, OSError) as exc:
            raise AdvertisementError(f"Cannot start zeroconf: {exc}") from exc
        try:
            zeroconf.register_service(info)
        except (ZeroconfError, OSError) as exc:
            zeroconf.close()
            raise AdvertisementError(
                f"Service registration failed for {info.name}: {exc}"
            ) from exc
        self._zeroconf = zeroconf
        self._info = info
        LOGGER.info("Service registration complete: %s on port %d", info.name, port)
        return info

    def close(self) -> None:
        if self._zeroconf is None:
            return
        try:
            if self._info is not None:
                self._zeroconf.unregister_service(self._info)
        finally:
            self._zeroconf.close()
            self._zeroconf = None
            self._info = None
