"""Storage-safe keys derived from image URLs.

Hey future me - the key is used twice: as the record store's row key AND as the
de-duplication fingerprint for a source URL. Changing the rules below orphans every
record already stored, so don't touch them without a migration.

Examples:
    >>> normalize_image_key("My Image!!.png")
    'My-Image.png'
    >>> normalize_image_key("  --a--  ")
    'a'
    >>> normalize_image_key("https://cdn.example.com/a b/c.jpg")
    'httpscdn.example.coma-bc.jpg'
"""

import re

_INVALID_CHARS = re.compile(r"[^a-zA-Z0-9 .-]")
_WHITESPACE_RUNS = re.compile(r"\s+")
_DASH_RUNS = re.compile(r"--+")


def normalize_image_key(raw: str) -> str:
    """Turn an arbitrary URL into a deterministic, storage-safe key.

    Not reversible - the record keeps the original URL next to the key.
    An input that normalizes to "" yields the empty key; callers must not
    special-case it.

    Args:
        raw: Source URL (or any string)

    Returns:
        Key made of letters, digits, '.', and single '-' separators
    """
    key = _INVALID_CHARS.sub("", raw)  # remove invalid characters
    key = _WHITESPACE_RUNS.sub(" ", key)  # reduce spaces
    key = key.replace(" ", "-")  # replace spaces
    key = _DASH_RUNS.sub("-", key)  # reduce dashes
    return key.strip("-")
