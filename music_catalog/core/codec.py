import json
import logging
from typing import List, Optional

from music_catalog.core.errors import EncodingError

logger = logging.getLogger(__name__)


class LyricsCodec:
    """
    Converts between the verse list used by the API and the string persisted in
    SongDetail.text.

    New rows are written as a versioned JSON envelope. Older rows may hold the
    bare structured form ({"verses": [...]}) or plain newline-delimited text;
    both still decode. Decoding never raises.
    """
    VERSION = 1
    PARAGRAPH_BREAK = "\n\n"

    @staticmethod
    def encode(verses: List[str]) -> str:
        """
        Serialize verses into the persisted form.

        Args:
            verses: Ordered verse strings. Empty strings are kept.

        Returns:
            JSON envelope string.

        Raises:
            EncodingError: If a verse is not a string.
        """
        verses = list(verses)
        bad = [v for v in verses if not isinstance(v, str)]
        if bad:
            raise EncodingError(f"Verses must be strings, got {type(bad[0]).__name__}")

        return json.dumps(
            {"version": LyricsCodec.VERSION, "verses": verses},
            ensure_ascii=False,
        )

    @staticmethod
    def decode(stored: Optional[str]) -> List[str]:
        """
        Best-effort conversion of a stored value back into verses.

        Structured values are returned exactly as written. Anything else goes
        through raw-text segmentation.
        """
        if not stored or not stored.strip():
            return []

        verses = LyricsCodec._decode_structured(stored)
        if verses is not None:
            return verses

        logger.debug("Stored lyrics are not structured, using raw text segmentation")
        return LyricsCodec.from_raw_text(stored)

    @staticmethod
    def _decode_structured(stored: str) -> Optional[List[str]]:
        try:
            payload = json.loads(stored)
        except ValueError:
            return None

        if not isinstance(payload, dict) or "verses" not in payload:
            return None

        verses = payload["verses"]
        # Rows written by the first service version stored an absent list as null
        if verses is None:
            return []
        if not isinstance(verses, list) or not all(isinstance(v, str) for v in verses):
            logger.warning("Structured lyrics have a malformed verses field, falling back to raw text")
            return None

        version = payload.get("version", LyricsCodec.VERSION)
        if version != LyricsCodec.VERSION:
            logger.warning(f"Unknown lyrics encoding version {version!r}, reading verses as-is")

        return verses

    @staticmethod
    def from_raw_text(text: Optional[str]) -> List[str]:
        """
        Segment legacy raw text into verses.

        Paragraphs are separated by a blank line (literal or escaped newlines).
        Every non-empty trimmed line of every paragraph becomes one verse.
        """
        if not text:
            return []

        # Legacy rows were saved with escaped newlines, so every two-character
        # backslash-n is a line break here, including one inside text like "C:\new"
        normalized = text.replace("\r\n", "\n").replace("\\n", "\n")

        verses: List[str] = []
        for paragraph in normalized.split(LyricsCodec.PARAGRAPH_BREAK):
            paragraph = paragraph.strip()
            if not paragraph:
                continue
            for line in paragraph.split("\n"):
                line = line.strip()
                if line:
                    verses.append(line)
        return verses
