"""Outbound connectivity probes used to gate the upgrade."""

import ipaddress
import socket
from pathlib import Path
from typing import Optional, Sequence, Tuple

from nixupgrader.errors import NetworkCheckError

DEFAULT_ENDPOINTS = ("8.8.8.8:53", "1.1.1.1:53")
CONNECT_TIMEOUT_SECONDS = 2.0
ROUTE_TABLE = "/proc/net/route"
RTF_UP = 0x0001


def parse_endpoint(endpoint: str) -> Tuple[str, int]:
    """Split a literal ``ip:port`` endpoint, raising ``ValueError`` when malformed."""
    host, sep, port = endpoint.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in '{endpoint}'")
    host = host.strip("[]")
    ipaddress.ip_address(host)
    port_number = int(port)
    if not 0 < port_number < 65536:
        raise ValueError(f"port out of range in '{endpoint}'")
    return host, port_number


class NetworkProbeService:
    """Confirms connectivity by opening a TCP connection to well-known resolvers.

    Endpoints are tried in order and the first successful connection wins.
    Connection failures mean "no connectivity"; only when no endpoint could be
    attempted at all is the probe itself considered broken.
    """

    def __init__(
        self,
        logger,
        endpoints: Sequence[str] = DEFAULT_ENDPOINTS,
        timeout: float = CONNECT_TIMEOUT_SECONDS,
        socket_module=socket,
    ):
        self.logger = logger
        self.endpoints = tuple(endpoints)
        self.timeout = min(timeout, CONNECT_TIMEOUT_SECONDS)
        self.socket = socket_module

    def is_network_available(self) -> bool:
        attempted = False
        parse_error: Optional[ValueError] = None

        for endpoint in self.endpoints:
            try:
                address = parse_endpoint(endpoint)
            except ValueError as exc:
                self.logger.debug("Failed to parse address %s: %s", endpoint, exc)
                parse_error = exc
                continue

            attempted = True
            try:
                connection = self.socket.create_connection(address, timeout=self.timeout)
            except OSError as exc:
                self.logger.debug("Failed to connect to %s: %s", endpoint, exc)
                continue

            connection.close()
            self.logger.info("Network connectivity confirmed via %s", endpoint)
            return True

        if not attempted:
            raise NetworkCheckError(
                f"Failed to check network connectivity: no usable probe endpoint ({parse_error})"
            )

        self.logger.warning("No network connectivity detected")
        return False


class DefaultRouteProbe:
    """Treats the presence of an active default route as evidence of connectivity."""

    def __init__(self, logger, route_table: str = ROUTE_TABLE):
        self.logger = logger
        self.route_table = Path(route_table)

    def is_network_available(self) -> bool:
        try:
            lines = self.route_table.read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            raise NetworkCheckError(
                f"Failed to check network connectivity: cannot read {self.route_table}: {exc}"
            ) from exc

        # Iface Destination Gateway Flags RefCnt Use Metric Mask ...
        for line in lines[1:]:
            fields = line.split()
            if len(fields) < 4:
                continue
            try:
                flags = int(fields[3], 16)
            except ValueError:
                continue
            if fields[1] == "00000000" and flags & RTF_UP:
                self.logger.info("Default route found via interface %s", fields[0])
                return True

        self.logger.warning("No default route found in %s", self.route_table)
        return False
