"""
Exception hierarchy for the exporter.

Every failure while building a scrape is an ExporterError; the HTTP layer
turns any of them into a 500 and never returns half a document. Messages
never carry private or preshared keys.
"""

from typing import List, Optional

from .secure import mask_config_line


class ExporterError(Exception):
    """Base class for all exporter failures."""


class ExporterIOError(ExporterError):
    """A WireGuard config file could not be read."""

    def __init__(self, path: str, error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"IO error reading {path}: {error}")


class CollectorError(ExporterError):
    """The wg command could not be run or exited with an error."""

    def __init__(self, command: List[str], message: str, stderr: str = ''):
        self.command = command
        self.stderr = stderr
        detail = f"{' '.join(command)}: {message}"
        if stderr:
            detail += f" ({stderr.strip()})"
        super().__init__(detail)


class DumpEncodingError(ExporterError):
    """Input bytes are not valid UTF-8 text."""

    def __init__(self, source: str, error: UnicodeDecodeError):
        self.source = source
        self.error = error
        super().__init__(f"UTF-8 conversion error in {source}: {error}")


class DumpParseError(ExporterError):
    """A line of `wg show dump` output could not be parsed.

    `line` holds the offending line with its key field masked.
    """

    def __init__(self, line_no: int, line: str, reason: str):
        self.line_no = line_no
        self.line = line
        self.reason = reason
        super().__init__(f"dump line {line_no}: {reason}: {line!r}")


class PeerEntryParseError(ExporterError):
    """A [Peer] block in a config file is missing a required entry."""

    entry = ''

    def __init__(self, lines: List[str]):
        self.lines = list(lines)
        shown = [mask_config_line(line) for line in self.lines]
        super().__init__(f"{self.entry} entry not found in lines: {shown!r}")


class PublicKeyNotFound(PeerEntryParseError):
    entry = 'PublicKey'


class AllowedIPsNotFound(PeerEntryParseError):
    entry = 'AllowedIPs'


class FriendlyDescriptionParseError(ExporterError):
    """A friendly_* comment tag could not be decoded."""


class UnsupportedHeader(FriendlyDescriptionParseError):
    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"{tag} is not a supported tag")


class InvalidFriendlyJson(FriendlyDescriptionParseError):
    def __init__(self, value: str, reason: Optional[str] = None):
        self.value = value
        message = f"invalid friendly_json value {value!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
