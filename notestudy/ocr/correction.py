"""Lexical clean-up of recognized lines (the ``autocorrect`` recognition option).

This does not try to spell-correct; it removes the artifacts recognizers
commonly leave behind:
- HTML entities and control characters
- runs of spaces/tabs and trailing whitespace
- words hyphenated across a line break ("plants use photo-" / "synthesis to ...")

Only a wrapped line of several words is re-joined. A single word ending in
"-" on its own line is left alone, since it is more likely a dash-form label
("Mitochondria-" / "powerhouse of the cell").

Blank lines are kept: they carry the paragraph boundaries the segmenter needs.
"""
import re
from typing import List

from notestudy.utils import get_logger

LOG = get_logger()

_HTML_ENTITIES = {
    '&nbsp;': ' ',
    '&amp;': '&',
    '&lt;': '<',
    '&gt;': '>',
    '&quot;': '"',
}


def clean_line(line: str) -> str:
    """Normalize a single recognized line.

    Examples:
        >>> clean_line("  Mitosis :\\tcell   division  ")
        'Mitosis : cell division'
        >>> clean_line("A&amp;B")
        'A&B'
    """
    if line is None or not isinstance(line, str):
        raise ValueError("Recognized line must be a string")
    for entity, char in _HTML_ENTITIES.items():
        line = line.replace(entity, char)
    # drop control characters (newlines never occur inside a single line)
    line = ''.join(ch for ch in line if ord(ch) >= 32 or ch == '\t')
    line = re.sub(r'[ \t]+', ' ', line)
    return line.strip()


def correct_lines(lines: List[str]) -> List[str]:
    """Clean every line and re-join words hyphenated across line ends."""
    cleaned = [clean_line(l) for l in lines]
    out: List[str] = []
    joined = 0
    for line in cleaned:
        prev = out[-1] if out else ''
        # word-\nword -> wordword; a lone "-" bullet or one-word label is not a hyphenation
        if line and ' ' in prev and re.search(r'\w-$', prev) and re.match(r'[a-z]', line):
            out[-1] = prev[:-1] + line
            joined += 1
            continue
        out.append(line)
    if joined:
        LOG.debug('ocr_hyphenation_joined', extra={'joined': joined})
    return out
