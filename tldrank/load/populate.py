from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, TypeVar

import pandas as pd
import structlog

from tldrank.core.types import InputUnavailable
from tldrank.infra.duckdb.gateway import DatabaseGateway
from tldrank.infra.duckdb.inspect import row_count
from tldrank.load.readers import read_mapping, read_urls
from tldrank.schema import ddls

log = structlog.get_logger("tldrank.load")

URL_TEMP_COLUMNS = ["pos", "domain_name", "tld1", "tld2"]

T = TypeVar("T")


@dataclass(frozen=True)
class LoadInputs:
    mapping_path: Path
    urls_path: Path
    strict: bool = False  # unreadable input aborts the run instead of loading nothing


def _read_or_report(
    reader: Callable[[Path], List[T]], path: Path, table: str, strict: bool
) -> List[T]:
    try:
        return reader(path)
    except OSError as e:
        if strict:
            raise InputUnavailable(f"{table}: cannot read {path}: {e}") from e
        log.error("input_unreadable", table=table, path=str(path), error=str(e))
        return []


def populate_mapping(gw: DatabaseGateway, inputs: LoadInputs) -> int:
    records = _read_or_report(read_mapping, inputs.mapping_path, "mapping", inputs.strict)
    return gw.prepare_batch(
        ddls.INSERT_MAPPING, [(r.tld, r.description) for r in records]
    )


def populate_url_temp(gw: DatabaseGateway, inputs: LoadInputs) -> int:
    records = _read_or_report(read_urls, inputs.urls_path, "url_temp", inputs.strict)
    df = pd.DataFrame.from_records(
        [(r.pos, r.domain_name, r.tld1, r.tld2) for r in records],
        columns=URL_TEMP_COLUMNS,
    )
    return gw.insert_frame("url_temp", df)


def populate_tld(gw: DatabaseGateway) -> int:
    gw.execute(ddls.INSERT_TLD)
    return row_count(gw, "tld")


def populate_domain(gw: DatabaseGateway) -> int:
    gw.execute(ddls.INSERT_DOMAIN)
    return row_count(gw, "domain")


def populate_url(gw: DatabaseGateway) -> int:
    rows = gw.fetch_all(ddls.SELECT_RESOLVED_URLS)
    return gw.prepare_batch(ddls.INSERT_URL, rows)
