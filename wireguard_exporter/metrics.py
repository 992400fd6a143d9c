"""
Prometheus text rendering of a WireGuard model.

Four families are exported, in this order:
  wireguard_sent_bytes_total          counter, per peer
  wireguard_received_bytes_total      counter, per peer
  wireguard_latest_handshake_seconds  gauge, per peer
  wireguard_peers_total               gauge, per interface

Output is deterministic: interfaces are sorted, peers keep dump order.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .dump import RemoteEndpoint, WireGuard
from .friendly_description import FriendlyJson, FriendlyName, escape_label_value
from .peer_config import PeerEntryMap

logger = logging.getLogger(__name__)

UNSUPPORTED_JSON_VALUE = 'unsupported_json_value'

Labels = List[Tuple[str, str]]


@dataclass(frozen=True)
class MetricAttributeOptions:
    split_allowed_ips: bool = False
    export_remote_ip_and_port: bool = False
    handshake_timeout_seconds: Optional[int] = None


class PrometheusMetric:
    """One metric family: HELP/TYPE preamble plus its samples."""

    def __init__(self, name: str, metric_type: str, help_text: str):
        self.name = name
        self.metric_type = metric_type
        self.help_text = help_text
        self.samples: List[str] = []

    def add(self, labels: Labels, value: int) -> None:
        rendered = ','.join(f'{k}="{v}"' for k, v in labels)
        self.samples.append(f'{self.name}{{{rendered}}} {value}')

    def render(self) -> str:
        output = [
            f'# HELP {self.name} {self.help_text}',
            f'# TYPE {self.name} {self.metric_type}',
        ]
        output.extend(self.samples)
        return '\n'.join(output) + '\n'


def json_label_value(value) -> str:
    # bool first: it is an int subclass
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return escape_label_value(value)
    logger.debug("unsupported json value %r", value)
    return UNSUPPORTED_JSON_VALUE


def split_allowed_ips(allowed_ips: str) -> Labels:
    labels = []
    for idx, ip_and_subnet in enumerate(allowed_ips.split(',')):
        tokens = ip_and_subnet.split('/')
        labels.append((f'allowed_ip_{idx}', escape_label_value(tokens[0])))
        labels.append((f'allowed_subnet_{idx}', escape_label_value(tokens[-1])))
    return labels


def endpoint_labels(
    interface: str,
    ep: RemoteEndpoint,
    peers: Optional[PeerEntryMap],
    options: MetricAttributeOptions,
) -> Labels:
    """Label set of one peer.

    Order: interface, public_key, allowed_ips, friendly_name, remote_ip, then
    the collected extras (split allowed ips, json keys, remote_port).
    """
    labels: Labels = [('interface', interface), ('public_key', ep.public_key)]
    extra: Labels = []

    if options.split_allowed_ips:
        extra.extend(split_allowed_ips(ep.allowed_ips))
    else:
        labels.append(('allowed_ips', escape_label_value(ep.allowed_ips)))

    entry = peers.get(ep.public_key) if peers else None
    if entry is not None:
        description = entry.friendly_description
        if isinstance(description, FriendlyName):
            labels.append(('friendly_name', description.name))
        elif isinstance(description, FriendlyJson):
            extra.extend(sorted(
                (key, json_label_value(value)) for key, value in description.values.items()
            ))

    if options.export_remote_ip_and_port:
        if ep.remote_ip is not None:
            labels.append(('remote_ip', ep.remote_ip))
        if ep.remote_port is not None:
            extra.append(('remote_port', str(ep.remote_port)))

    return labels + extra


def render_with_names(
    wg: WireGuard,
    peers: Optional[PeerEntryMap],
    options: MetricAttributeOptions,
    clock: Callable[[], float] = time.time,
) -> str:
    logger.debug("render_with_names options == %r, %d annotated peers",
                 options, len(peers) if peers else 0)

    sent_bytes = PrometheusMetric('wireguard_sent_bytes_total', 'counter', 'Bytes sent to the peer')
    received_bytes = PrometheusMetric('wireguard_received_bytes_total', 'counter', 'Bytes received from the peer')
    latest_handshake = PrometheusMetric('wireguard_latest_handshake_seconds', 'gauge', 'Seconds from the last handshake')
    peers_total = PrometheusMetric('wireguard_peers_total', 'gauge', 'Total number of peers')

    for interface in sorted(wg.interfaces):
        remote_endpoints = wg.remote_endpoints(interface)

        for ep in remote_endpoints:
            labels = endpoint_labels(interface, ep, peers, options)
            logger.debug("labels == %r", labels)
            sent_bytes.add(labels, ep.sent_bytes)
            received_bytes.add(labels, ep.received_bytes)
            latest_handshake.add(labels, ep.latest_handshake)

        timeout = options.handshake_timeout_seconds
        if timeout is None:
            peers_total.add([('interface', interface)], len(remote_endpoints))
        else:
            now = int(clock())
            seen = sum(1 for ep in remote_endpoints if now - ep.latest_handshake < timeout)
            peers_total.add([('interface', interface), ('seen_recently', 'true')], seen)
            peers_total.add([('interface', interface), ('seen_recently', 'false')], len(remote_endpoints) - seen)

    return '\n'.join([
        sent_bytes.render(),
        received_bytes.render(),
        latest_handshake.render(),
        peers_total.render(),
    ])
