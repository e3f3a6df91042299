"""
=============================================================================
GZIP CONTENT ENCODING
=============================================================================

The /echo/ route can gzip its body when the client asks for it.

=============================================================================
NEGOTIATION
=============================================================================

The client lists the encodings it understands:

    Accept-Encoding: gzip, deflate

The header is split on commas and the pieces are compared against the
literal token "gzip" WITHOUT trimming them:

    "gzip"               → ["gzip"]                  → gzip
    "gzip, deflate"      → ["gzip", " deflate"]      → gzip
    "deflate, gzip"      → ["deflate", " gzip"]      → identity
    "gzip;q=1.0"         → ["gzip;q=1.0"]            → identity

That is stricter than RFC 9110: no whitespace tolerance, no q-values.

=============================================================================
THE GZIP FORMAT
=============================================================================

    ┌──────────┬────────────────────────────┬───────────────────┐
    │  Header  │  DEFLATE-compressed data   │      Trailer      │
    │ 10 bytes │                            │ CRC32 + size (8B) │
    │ 1f 8b 08 │                            │                   │
    └──────────┴────────────────────────────┴───────────────────┘

One member, default compression level. gzip.compress() produces exactly
this; a raw zlib/deflate stream would NOT be valid for
Content-Encoding: gzip.

=============================================================================
"""

import gzip
import zlib
from typing import Optional


GZIP = "gzip"
DEFAULT_LEVEL = 6  # zlib's own default: balanced speed vs size


class CompressionError(Exception):
    """Raised when a body cannot be compressed."""


def accepts_gzip(accept_encoding: Optional[str]) -> bool:
    """
    Check whether an Accept-Encoding value negotiates gzip.

    Args:
        accept_encoding: Raw header value, or None if absent.

    Returns:
        True if one of the comma-separated items is exactly "gzip".
    """
    if not accept_encoding:
        return False
    return GZIP in accept_encoding.split(",")


def gzip_compress(data: bytes, level: int = DEFAULT_LEVEL) -> bytes:
    """
    Compress data as a standalone single-member gzip stream.

    Args:
        data: Bytes to compress.
        level: Compression level 0-9.

    Raises:
        CompressionError: The compressor failed.
    """
    try:
        return gzip.compress(data, compresslevel=level)
    except (zlib.error, ValueError, TypeError) as e:
        raise CompressionError(f"gzip compression failed: {e}") from e
