import re
from typing import Optional


class NameNormalizer:
    """
    Canonicalizes free-form display strings (song names, artist names, links)
    before they are stored or matched.

    Rules, in order:
    1. Non-breaking spaces become ordinary spaces.
    2. Whitespace around a hyphen is dropped: "A - B" -> "A-B".
    3. Whitespace around a comma is dropped: "A , B" -> "A,B".
    4. Any other whitespace run collapses to a single space.
    5. Leading/trailing whitespace is trimmed.
    """
    NBSP = "\u00a0"
    DASH_PATTERN = re.compile(r"\s*-\s*")
    COMMA_PATTERN = re.compile(r"\s*,\s*")

    @staticmethod
    def normalize(value: Optional[str]) -> str:
        if not value:
            return ""

        text = value.replace(NameNormalizer.NBSP, " ")
        text = NameNormalizer.DASH_PATTERN.sub("-", text)
        text = NameNormalizer.COMMA_PATTERN.sub(",", text)
        # str.split() with no argument splits on any unicode whitespace run
        text = " ".join(text.split())
        return text.strip()


def normalize(value: Optional[str]) -> str:
    """Shortcut for NameNormalizer.normalize."""
    return NameNormalizer.normalize(value)
