"""Input validation helpers for partcopy.

These run before a copy touches the network, so a malformed request never
leaves a half-initiated upload behind. Each function raises ``InvalidInput``.
"""

import re

from partcopy.errors import InvalidInput

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Bucket names are checked against the legacy us-east-1 rules, the loosest S3
# still serves: 1-255 characters of letters, digits, periods, hyphens and
# underscores. Stricter naming is left to the service.

_BUCKET_RE = re.compile(r"^[A-Za-z0-9._\-]{1,255}$")

_MAX_KEY_BYTES = 1024


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_bucket_name(name: str) -> None:
    """Validate a bucket name.

    Args:
        name: The candidate bucket name.

    Raises:
        InvalidInput: If the name is not a string or contains characters no
            S3 bucket name may hold.
    """
    if not isinstance(name, str) or not _BUCKET_RE.match(name):
        raise InvalidInput(f"Invalid bucket name: {name!r}")


def validate_object_key(key: str) -> None:
    """Validate an object key.

    Args:
        key: The object key string.

    Raises:
        InvalidInput: If the key is not a non-empty string or exceeds 1024
            bytes UTF-8 encoded.
    """
    if not isinstance(key, str) or not key:
        raise InvalidInput("Object key must not be empty")
    if len(key.encode("utf-8")) > _MAX_KEY_BYTES:
        raise InvalidInput(f"Object key exceeds {_MAX_KEY_BYTES} bytes")


def validate_object_size(size: int) -> None:
    """Validate an object size in bytes.

    Raises:
        InvalidInput: If ``size`` is not a positive integer.
    """
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise InvalidInput(f"Object size must be a positive integer, got {size!r}")
