"""
Peer annotations from WireGuard config files.

Only [Peer] sections are read. PublicKey and AllowedIPs are required in
each one; `# friendly_name = ...` or `# friendly_json = ...` comments attach
a description to the peer.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from . import friendly_description
from .errors import AllowedIPsNotFound, PublicKeyNotFound
from .friendly_description import FriendlyDescription

logger = logging.getLogger(__name__)

PEER_SECTION = '[Peer]'


@dataclass
class PeerEntry:
    public_key: str
    allowed_ips: str
    friendly_description: Optional[FriendlyDescription] = None


PeerEntryMap = Dict[str, PeerEntry]


def after_char_strip_comment(line: str, sep: str = '=') -> str:
    """Value after the first `sep`, without a trailing # comment."""
    _, found, value = line.partition(sep)
    if not found:
        return ''
    return value.split('#', 1)[0].strip()


def pound_line_to_key_value(line: str) -> Optional[Tuple[str, str]]:
    """`# key = value` -> (key, value); None for a plain comment."""
    body = line.strip()[1:]
    key, found, value = body.partition('=')
    if not found:
        return None
    return key.strip(), value.strip()


def split_peer_blocks(text: str) -> List[List[str]]:
    blocks = []
    current = None

    for line in text.splitlines():
        if line.startswith('['):
            if current is not None:
                blocks.append(current)
                current = None
            if line == PEER_SECTION:
                current = []
        elif current is not None and line.strip():
            current.append(line)

    if current is not None:
        blocks.append(current)

    return blocks


def parse_peer_entry(lines: List[str]) -> PeerEntry:
    public_key = ''
    allowed_ips = ''
    tags = []

    for line in lines:
        lowered = line.lower()
        if lowered.startswith('publickey'):
            public_key = after_char_strip_comment(line)
        elif lowered.startswith('allowedips'):
            allowed_ips = after_char_strip_comment(line)
        elif line.strip().startswith('#'):
            pair = pound_line_to_key_value(line)
            if pair and pair[0] in friendly_description.SUPPORTED_TAGS:
                tags.append(pair)

    # a duplicated PublicKey or AllowedIPs line is not caught here, wg-quick
    # refuses such a file anyway
    if not public_key:
        raise PublicKeyNotFound(lines)
    if not allowed_ips:
        raise AllowedIPsNotFound(lines)

    description = None
    if tags:
        tag, value = tags[-1]
        description = friendly_description.decode(tag, value)

    return PeerEntry(public_key, allowed_ips, description)


def parse_peer_entries(text: str) -> PeerEntryMap:
    """Build the public key -> PeerEntry map for a whole config text.

    A later block with the same public key replaces the earlier one.
    """
    entries: PeerEntryMap = {}
    for block in split_peer_blocks(text):
        entry = parse_peer_entry(block)
        logger.debug("peer entry == %r", entry)
        entries[entry.public_key] = entry
    return entries
