"""Paragraph segmentation of recognized text.

Units are separated by blank lines: two or more consecutive line breaks,
where a line holding only spaces or tabs counts as blank. Units that are empty
after trimming are dropped. Each unit keeps its offsets into the raw text so
``raw[unit.start:unit.end] == unit.text``.
"""
import re
from dataclasses import dataclass
from typing import Iterator

BLANK_LINE_RE = re.compile(r'(?:[ \t]*\r?\n){2,}')


@dataclass(frozen=True)
class ExtractionUnit:
    text: str
    start: int
    end: int


class UnitSequence:
    """Lazy, restartable view over the units of one text; every iteration rescans."""

    def __init__(self, text: str):
        self.text = text or ''

    def __iter__(self) -> Iterator[ExtractionUnit]:
        pos = 0
        for m in BLANK_LINE_RE.finditer(self.text):
            unit = self._unit(pos, m.start())
            if unit is not None:
                yield unit
            pos = m.end()
        unit = self._unit(pos, len(self.text))
        if unit is not None:
            yield unit

    def _unit(self, start: int, end: int):
        chunk = self.text[start:end]
        if not chunk.strip():
            return None
        return ExtractionUnit(chunk, start, end)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return f'UnitSequence(chars={len(self.text)})'


def segment(text: str) -> UnitSequence:
    return UnitSequence(text)
