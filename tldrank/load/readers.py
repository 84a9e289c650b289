"""Parsers for the two tab-separated input files.

Both readers raise ``OSError`` when the file cannot be opened or read and
``MalformedRowError`` on the first line that does not parse; there is no
partial-row skipping. Blank lines are ignored.
"""
from pathlib import Path
from typing import Iterator, List, Tuple

from tldrank.core.types import MalformedRowError, MappingRecord, UrlRecord


def _lines(path: Path) -> Iterator[Tuple[int, str]]:
    with open(path, "r", encoding="utf-8") as f:
        for line_no, raw in enumerate(f, start=1):
            line = raw.rstrip("\r\n")
            if line.strip():
                yield line_no, line


def parse_mapping_line(line: str, path="<mapping>", line_no: int = 1) -> MappingRecord:
    parts = line.split("\t", 1)
    if len(parts) != 2:
        raise MalformedRowError(path, line_no, "expected tld<TAB>description")
    return MappingRecord(tld=parts[0], description=parts[1])


def parse_url_line(line: str, path="<urls>", line_no: int = 1) -> UrlRecord:
    parts = line.split("\t")
    if len(parts) not in (3, 4):
        raise MalformedRowError(
            path, line_no, f"expected 3 or 4 tab-separated fields, got {len(parts)}"
        )
    try:
        pos = int(parts[0])
    except ValueError:
        raise MalformedRowError(path, line_no, f"rank is not an integer: {parts[0]!r}")
    return UrlRecord(
        pos=pos,
        domain_name=parts[1],
        tld1=parts[2],
        tld2=parts[3] if len(parts) == 4 else "",
    )


def read_mapping(path: Path) -> List[MappingRecord]:
    return [parse_mapping_line(line, path, n) for n, line in _lines(path)]


def read_urls(path: Path) -> List[UrlRecord]:
    return [parse_url_line(line, path, n) for n, line in _lines(path)]
