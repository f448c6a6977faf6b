"""Name generation for staged and stored files.

Staged files get a random letter prefix so concurrent uploads of the same
client filename never share a temp path. Stored files get a short name
derived from the content digest, which is what makes deduplication work:
identical bytes with the same extension always map to the same name.
"""

from __future__ import annotations

import base64
import ntpath
import os
import posixpath
import secrets
import string

# 52 symbols, upper and lower case Latin letters.
PREFIX_ALPHABET = string.ascii_letters


def random_prefix(length: int) -> str:
    """Return ``length`` letters drawn uniformly (with replacement)."""
    if length < 0:
        raise ValueError(f"prefix length must be >= 0, got {length}")
    return "".join(secrets.choice(PREFIX_ALPHABET) for _ in range(length))


def strip_chars(value: str, chars: str) -> str:
    """Remove every character in ``chars`` from ``value``."""
    if not chars:
        return value
    return value.translate({ord(c): None for c in chars})


def safe_basename(filename: str) -> str:
    """Final path component of a client-supplied filename.

    Browsers may send folder-relative names ("dir/a.txt") and some clients
    send Windows paths, so both separators are honoured.
    """
    return posixpath.basename(ntpath.basename(filename))


def file_extension(filename: str) -> str:
    """Extension of the final path component, leading dot included."""
    return os.path.splitext(safe_basename(filename))[1]


def encode_digest(digest: bytes) -> str:
    # URL-safe alphabet keeps "/" out of filenames; padding carries no entropy.
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def derive_name(
    digest: bytes,
    extension: str,
    keep_length: int,
    disallow_chars: str = "",
) -> str:
    """Content-derived store name: filtered, truncated digest + extension.

    Truncation happens after filtering, so a large ``disallow_chars`` set can
    leave fewer than ``keep_length`` characters. The shorter name is returned
    as is.
    """
    stem = strip_chars(encode_digest(digest), disallow_chars)[:keep_length]
    return stem + extension
