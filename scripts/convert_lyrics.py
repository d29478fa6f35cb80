"""
Convert a raw lyrics text file (paragraphs separated by blank lines) into the
structured form stored in song_details.text.

Usage: python scripts/convert_lyrics.py input.txt [output.txt]
"""
import sys

from music_catalog.core.codec import LyricsCodec


def main(argv):
    if len(argv) < 2:
        print(__doc__)
        return 1

    with open(argv[1], "r", encoding="utf-8") as f:
        verses = LyricsCodec.from_raw_text(f.read())

    encoded = LyricsCodec.encode(verses)

    if len(argv) > 2:
        with open(argv[2], "w", encoding="utf-8") as f:
            f.write(encoded)
        print(f"Saved {len(verses)} verses to {argv[2]}")
    else:
        print(encoded)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
