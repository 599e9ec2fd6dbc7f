"""Identifier case conversions shared by the planner and the templates.

Entity names are expected in PascalCase (``BlogPost``) but may also arrive
hyphenated (``blog-post``).  These helpers produce the three spellings used
across generated artifacts: class names, variable names, and file/URL names.
"""

from __future__ import annotations

import re

_PASCAL_BOUNDARY = re.compile(r"(^\w|-\w)")
_KEBAB_BOUNDARY = re.compile(r"(?<!^)(?<!-)([A-Z])")


def to_pascal(value: str) -> str:
    """Convert ``blog-post`` to ``BlogPost``.

    Upper-cases the first character and every character following a hyphen,
    dropping those hyphens.  Already-PascalCase input is returned unchanged.
    """
    return _PASCAL_BOUNDARY.sub(lambda m: m.group(0).lstrip("-").upper(), value)


def to_camel(value: str) -> str:
    """Convert ``blog-post`` or ``BlogPost`` to ``blogPost``."""
    pascal = to_pascal(value)
    return pascal[:1].lower() + pascal[1:]


def to_kebab(value: str) -> str:
    """Convert ``BlogPost`` to ``blog-post``.

    A hyphen is inserted before each capital except a leading one or one that
    already follows a hyphen, then the whole string is lower-cased.
    """
    return _KEBAB_BOUNDARY.sub(r"-\1", value).lower()
