"""Text processing helpers for site identifiers."""

import re
import unicodedata

_NON_SIGNATURE_CHARS = re.compile(r"[^a-z0-9]")


def normalize_signature(name: str | None) -> str:
    """Normalize a site identifier into its dedup key.

    Applies the following transformations:
    - Unicode NFKD normalization (decomposes characters)
    - Removes diacritical marks (accents)
    - Converts to lowercase
    - Removes everything outside [a-z0-9] (dots, dashes, spaces, symbols)

    Examples:
        "Gacor88.com" -> "gacor88com"
        "SLOT-VIP 4D" -> "slotvip4d"

    Returns:
        Normalized signature, or empty string if input is empty/None
    """
    if not name:
        return ""

    name = unicodedata.normalize("NFKD", name)
    name = "".join(c for c in name if not unicodedata.combining(c))

    return _NON_SIGNATURE_CHARS.sub("", name.lower())


def brand_stem(site_name: str) -> str:
    """Return the part of a site name before its first dot ("gacor88.com" -> "gacor88")."""
    return site_name.split(".")[0]
