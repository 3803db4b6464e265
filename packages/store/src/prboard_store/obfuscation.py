"""Token masking for settings at rest.

This is obfuscation, not encryption: it keeps a token from being read at a
glance in a settings file or Gist. The key is derived from the local user and
host name, so anyone with access to the machine can reverse it. Use a PAT with
minimal scopes, or the GITHUB_TOKEN / gh CLI fallback, where that matters.
"""

from __future__ import annotations

import base64
import binascii
import getpass
import logging
import platform

logger = logging.getLogger(__name__)


def machine_key() -> str:
    identity = f"{getpass.getuser()}@{platform.node()}"
    return format(sum(ord(ch) for ch in identity), "x")


def _xor(text: str, key: str) -> str:
    return "".join(chr(ord(ch) ^ ord(key[i % len(key)])) for i, ch in enumerate(text))


def obfuscate(text: str, key: str | None = None) -> str:
    if not text:
        return ""
    masked = _xor(text, key or machine_key())
    return base64.b64encode(masked.encode("utf-8")).decode("ascii")


def reveal(encoded: str, key: str | None = None) -> str:
    """Reverse obfuscate(). Returns "" when the value cannot be decoded."""
    if not encoded:
        return ""
    try:
        masked = base64.b64decode(encoded.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as e:
        logger.warning("Could not decode stored token (%s); re-enter it with `prboard settings set`.", e)
        return ""
    return _xor(masked, key or machine_key())
