"""
Parser for `wg show <interface> dump` output.

Each line is tab separated. The interface line has 5 populated fields:
  ifname  public_key  private_key  listen_port  fwmark
Peer lines have 9:
  ifname  public_key  preshared_key  endpoint  allowed_ips  latest_handshake
  transfer_rx  transfer_tx  persistent_keepalive

Column 0 is only printed by `wg show all dump`; for a single interface the
collector prepends it before the text reaches this module.
"""

import ipaddress
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .errors import DumpParseError
from .secure import SecureString, mask_fields

logger = logging.getLogger(__name__)

EMPTY = '(none)'

LOCAL_FIELDS = 5
REMOTE_FIELDS = 9

U16_MAX = 2 ** 16 - 1
U64_MAX = 2 ** 64 - 1
U128_MAX = 2 ** 128 - 1

# fe80::1%eth0 is not a valid address literal, drop the zone before parsing
ZONE_PATTERN = re.compile(r'^\[(?P<ip>[^%\]]+)%[^\]]*\]:(?P<port>[0-9]+)$')


@dataclass
class LocalEndpoint:
    public_key: str
    private_key: SecureString
    local_port: int
    persistent_keepalive: bool


@dataclass
class RemoteEndpoint:
    public_key: str
    remote_ip: Optional[str]
    remote_port: Optional[int]
    allowed_ips: str
    latest_handshake: int
    sent_bytes: int
    received_bytes: int
    persistent_keepalive: bool


Endpoint = Union[LocalEndpoint, RemoteEndpoint]


def to_bool(value: str) -> bool:
    return value != 'off'


def _parse_unsigned(value: str, maximum: int, name: str, line_no: int, line: str) -> int:
    if not (value.isascii() and value.isdigit()):
        raise DumpParseError(line_no, line, f"{name} is not an unsigned integer ({value!r})")
    number = int(value)
    if number > maximum:
        raise DumpParseError(line_no, line, f"{name} out of range ({value})")
    return number


def parse_socket_address(value: str) -> Tuple[str, int]:
    """Split an `ip:port` or `[ipv6]:port` endpoint into (ip, port).

    Raises ValueError on anything that is not a valid socket address.
    """
    value = ZONE_PATTERN.sub(r'[\g<ip>]:\g<port>', value)

    if value.startswith('['):
        host, sep, port = value[1:].partition(']:')
        if not sep:
            raise ValueError(f"invalid socket address {value!r}")
        ip = ipaddress.IPv6Address(host)
    else:
        host, sep, port = value.rpartition(':')
        if not sep:
            raise ValueError(f"invalid socket address {value!r}")
        ip = ipaddress.IPv4Address(host)

    if not (port.isascii() and port.isdigit()) or int(port) > U16_MAX:
        raise ValueError(f"invalid port in socket address {value!r}")

    return str(ip), int(port)


def parse_line(line_no: int, line: str) -> Tuple[str, Endpoint]:
    """Parse one dump line into (interface name, endpoint)."""
    v = [s for s in line.split('\t') if s]

    # field 2 is the private key on the interface line and the preshared key
    # on peer lines; with an unknown layout only ifname and public key are shown
    if len(v) in (LOCAL_FIELDS, REMOTE_FIELDS):
        shown = mask_fields(v, {2})
    else:
        shown = mask_fields(v, range(2, len(v)))

    if len(v) == LOCAL_FIELDS:
        endpoint = LocalEndpoint(
            public_key=v[1],
            private_key=SecureString(v[2]),
            local_port=_parse_unsigned(v[3], U16_MAX, 'listen port', line_no, shown),
            persistent_keepalive=to_bool(v[4]),
        )
        return v[0], endpoint

    if len(v) != REMOTE_FIELDS:
        raise DumpParseError(
            line_no, shown,
            f"expected {LOCAL_FIELDS} or {REMOTE_FIELDS} fields, found {len(v)}",
        )

    remote_ip = None
    remote_port = None
    if v[3] != EMPTY:
        try:
            remote_ip, remote_port = parse_socket_address(v[3])
        except ValueError as e:
            raise DumpParseError(line_no, shown, f"malformed endpoint: {e}") from e

    endpoint = RemoteEndpoint(
        public_key=v[1],
        remote_ip=remote_ip,
        remote_port=remote_port,
        allowed_ips=v[4],
        latest_handshake=_parse_unsigned(v[5], U64_MAX, 'latest handshake', line_no, shown),
        received_bytes=_parse_unsigned(v[6], U128_MAX, 'received bytes', line_no, shown),
        sent_bytes=_parse_unsigned(v[7], U128_MAX, 'sent bytes', line_no, shown),
        persistent_keepalive=to_bool(v[8]),
    )
    return v[0], endpoint


@dataclass
class WireGuard:
    """Endpoints grouped by interface name, in dump order."""

    interfaces: Dict[str, List[Endpoint]] = field(default_factory=dict)

    @classmethod
    def from_dump(cls, text: str) -> 'WireGuard':
        wg = cls()
        for line_no, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            interface, endpoint = parse_line(line_no, line)
            logger.debug("interface %s endpoint == %r", interface, endpoint)
            wg.interfaces.setdefault(interface, []).append(endpoint)
        return wg

    def merge(self, other: 'WireGuard') -> None:
        """Append every endpoint list of `other` to ours.

        Not idempotent: merging the same model twice duplicates its entries.
        """
        for interface, endpoints in other.interfaces.items():
            self.interfaces.setdefault(interface, []).extend(endpoints)

    def remote_endpoints(self, interface: str) -> List[RemoteEndpoint]:
        return [ep for ep in self.interfaces.get(interface, []) if isinstance(ep, RemoteEndpoint)]
