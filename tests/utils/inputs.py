from pathlib import Path
from typing import List

from tldrank.load.populate import LoadInputs


def write_lines(path: Path, lines: List[str]) -> Path:
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    return path


def write_inputs(
    tmp: Path, mapping: List[str], urls: List[str], strict: bool = False
) -> LoadInputs:
    return LoadInputs(
        mapping_path=write_lines(tmp / "mapping", mapping),
        urls_path=write_lines(tmp / "TopURLs", urls),
        strict=strict,
    )
