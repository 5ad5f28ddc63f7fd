"""Key normalisation for Sentry tag and extra keys."""

from __future__ import annotations

import re

# Sentry rejects tag keys longer than 32 characters
MAX_KEY_LENGTH = 32

_DISALLOWED = re.compile(r"[^a-z0-9_.:-]+")


def normalise_key(key: object) -> str:
    """
    Normalise a free-form key into Sentry's accepted key grammar.

    Lower-cases, collapses runs of unsupported characters into ``_``,
    truncates to ``MAX_KEY_LENGTH`` and strips outer underscores.
    Normalising an already normalised key returns it unchanged.

    Example:
        >>> normalise_key("Release Name")
        'release_name'
    """
    text = _DISALLOWED.sub("_", str(key).lower())
    return text[:MAX_KEY_LENGTH].strip("_")
