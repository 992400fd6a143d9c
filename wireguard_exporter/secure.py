"""
Keeps key material out of logs, reprs and error messages.

Setting WIREGUARD_EXPORTER_LEAKY_LOG=1 shows everything in clear, for
debugging only.
"""

import os
from typing import Collection, List

HIDDEN = '**hidden**'
LEAKY_LOG_ENV = 'WIREGUARD_EXPORTER_LEAKY_LOG'

SECRET_CONFIG_KEYS = ('privatekey', 'presharedkey')


def leaky_log() -> bool:
    return os.environ.get(LEAKY_LOG_ENV) == '1'


class SecureString(str):
    """A str that does not show its value in logs or reprs."""

    def __repr__(self):
        if leaky_log():
            return str.__repr__(self)
        return HIDDEN


def mask_fields(fields: List[str], secret: Collection[int]) -> str:
    """Tab-join dump fields with the ones at `secret` positions hidden."""
    if leaky_log():
        return '\t'.join(fields)
    return '\t'.join(HIDDEN if idx in secret else f for idx, f in enumerate(fields))


def mask_config_line(line: str) -> str:
    """`PrivateKey = abc` -> `PrivateKey = **hidden**`, other lines unchanged."""
    if leaky_log():
        return line
    key, sep, _ = line.partition('=')
    if sep and key.strip().lower() in SECRET_CONFIG_KEYS:
        return f'{key}= {HIDDEN}'
    return line
