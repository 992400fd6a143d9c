"""
Runs `wg show <interface> dump`, reads peer config files and renders one
scrape. Nothing is cached between scrapes.
"""

import logging
import subprocess
import time
from typing import Callable, List, Optional

from .dump import WireGuard
from .errors import CollectorError, DumpEncodingError, ExporterIOError
from .metrics import render_with_names
from .options import Options
from .peer_config import PeerEntryMap, parse_peer_entries

logger = logging.getLogger(__name__)

ALL_INTERFACES = 'all'
WG_TIMEOUT = 10


def wg_show_dump(interface: str, prepend_sudo: bool = False, timeout: int = WG_TIMEOUT) -> str:
    cmd = ['wg', 'show', interface, 'dump']
    if prepend_sudo:
        cmd.insert(0, 'sudo')

    logger.debug("running %s", ' '.join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, timeout=timeout)
    except FileNotFoundError as e:
        raise CollectorError(cmd, f"command not found: {e.filename}") from e
    except subprocess.TimeoutExpired as e:
        raise CollectorError(cmd, f"timed out after {timeout}s") from e

    stderr = result.stderr.decode('utf-8', errors='replace')
    if result.returncode != 0:
        raise CollectorError(cmd, f"exited with status {result.returncode}", stderr)

    try:
        stdout = result.stdout.decode('utf-8')
    except UnicodeDecodeError as e:
        raise DumpEncodingError(' '.join(cmd), e) from e

    # stdout holds the private key, only its size is logged
    logger.debug("%s returned %d bytes", ' '.join(cmd), len(result.stdout))
    if stderr:
        logger.debug("%s stderr == %s", ' '.join(cmd), stderr)
    return stdout


def inject_interface(interface: str, output: str) -> str:
    """Prepend the interface column `wg show <interface> dump` leaves out."""
    if interface == ALL_INTERFACES:
        return output
    logger.debug("injecting %s into the wg show output", interface)
    return ''.join(f'{interface}\t{line}\n' for line in output.splitlines())


def read_peer_configs(paths: Optional[List[str]]) -> Optional[str]:
    if not paths:
        return None

    contents = []
    for path in paths:
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise ExporterIOError(path, e) from e
        try:
            contents.append(data.decode('utf-8'))
        except UnicodeDecodeError as e:
            raise DumpEncodingError(path, e) from e
    return '\n'.join(contents)


def load_peer_entries(paths: Optional[List[str]]) -> Optional[PeerEntryMap]:
    text = read_peer_configs(paths)
    if text is None:
        return None
    return parse_peer_entries(text)


def collect(options: Options) -> WireGuard:
    """Query each requested interface and fold the results in request order."""
    wg = WireGuard()
    for interface in options.interfaces or [ALL_INTERFACES]:
        output = wg_show_dump(interface, options.prepend_sudo)
        wg.merge(WireGuard.from_dump(inject_interface(interface, output)))
    return wg


def scrape(options: Options, clock: Callable[[], float] = time.time) -> str:
    peers = load_peer_entries(options.extract_names_config_files)
    wg = collect(options)
    return render_with_names(wg, peers, options.metric_attributes, clock=clock)
