"""
Runtime options. Every command line flag falls back to a
PROMETHEUS_WIREGUARD_EXPORTER_* environment variable.
"""

import argparse
import os
from dataclasses import dataclass, field
from typing import List, Optional

from .metrics import MetricAttributeOptions

ENV_PREFIX = 'PROMETHEUS_WIREGUARD_EXPORTER_'

DEFAULT_ADDRESS = '0.0.0.0'
DEFAULT_PORT = 9586


def _env(name: str, default=None):
    return os.environ.get(ENV_PREFIX + name, default)


def _env_bool(name: str) -> bool:
    return str(_env(name, '')).strip().lower() in ('1', 'true', 'yes', 'on')


def _env_list(name: str) -> Optional[List[str]]:
    value = _env(name)
    if not value:
        return None
    items = [item.strip() for item in value.split(',') if item.strip()]
    return items or None


def _port(value: str) -> int:
    port = int(value)
    if not 0 < port <= 65535:
        raise argparse.ArgumentTypeError(f"port must be between 1 and 65535, got {value}")
    return port


def _non_negative(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be a non-negative integer, got {value}")
    return number


@dataclass
class Options:
    verbose: bool = False
    prepend_sudo: bool = False
    addr: str = DEFAULT_ADDRESS
    port: int = DEFAULT_PORT
    interfaces: Optional[List[str]] = None
    extract_names_config_files: Optional[List[str]] = None
    metric_attributes: MetricAttributeOptions = field(default_factory=MetricAttributeOptions)

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> 'Options':
        return cls(
            verbose=args.verbose,
            prepend_sudo=args.prepend_sudo,
            addr=args.addr,
            port=args.port,
            interfaces=args.interfaces or _env_list('INTERFACES'),
            extract_names_config_files=(
                args.extract_names_config_files or _env_list('CONFIG_FILE_NAMES')
            ),
            metric_attributes=MetricAttributeOptions(
                split_allowed_ips=args.separate_allowed_ips,
                export_remote_ip_and_port=args.export_remote_ip_and_port,
                handshake_timeout_seconds=args.handshake_timeout_seconds,
            ),
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='prometheus_wireguard_exporter',
        description='Prometheus WireGuard Exporter',
    )
    parser.add_argument('-l', '--addr', default=_env('ADDRESS', DEFAULT_ADDRESS),
                        help='exporter address')
    parser.add_argument('-p', '--port', type=_port, default=_env('PORT', str(DEFAULT_PORT)),
                        help='exporter port')
    parser.add_argument('-v', '--verbose', action='store_true', default=_env_bool('VERBOSE_ENABLED'),
                        help='verbose logging')
    parser.add_argument('-a', '--prepend-sudo', action='store_true',
                        default=_env_bool('PREPEND_SUDO_ENABLED'),
                        help='prepend sudo to the wg show commands')
    parser.add_argument('-s', '--separate-allowed-ips', action='store_true',
                        default=_env_bool('SEPARATE_ALLOWED_IPS_ENABLED'),
                        help='separate allowed ips and subnets in distinct labels')
    parser.add_argument('-r', '--export-remote-ip-and-port', action='store_true',
                        default=_env_bool('EXPORT_REMOTE_IP_AND_PORT_ENABLED'),
                        help="export peer's remote ip and port as labels (if available)")
    parser.add_argument('-t', '--handshake-timeout-seconds', type=_non_negative,
                        default=_env('HANDSHAKE_TIMEOUT_SECONDS'),
                        help='handshake timeout to determine if a peer is still connected')
    parser.add_argument('-n', '--extract-names-config-files', action='append',
                        help='WireGuard config file to read peer names from (repeatable)')
    parser.add_argument('-i', '--interfaces', action='append',
                        help='interface passed to wg show (repeatable); all interfaces if omitted')
    return parser


def parse_options(argv: Optional[List[str]] = None) -> Options:
    return Options.from_args(build_parser().parse_args(argv))
