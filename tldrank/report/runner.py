import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import duckdb
import structlog

from tldrank.core.json import load_yaml
from tldrank.core.types import ColumnFormat, ReportSpec
from tldrank.infra.duckdb.gateway import DatabaseGateway

REPORTS_PATH = Path(__file__).with_name("reports.yaml")

# used when a query returns more columns than its report declares
DEFAULT_COLUMN = ColumnFormat(width=15, limit=50)


def load_reports(path: Path = REPORTS_PATH) -> List[ReportSpec]:
    cfg = load_yaml(path) or {}
    reports = []
    for r in cfg.get("reports", []):
        reports.append(
            ReportSpec(
                key=r["key"],
                title=r["title"],
                sql=r["sql"],
                columns=[ColumnFormat(int(c["width"]), int(c["limit"])) for c in r["columns"]],
            )
        )
    return reports


def format_cell(value: Any, col: ColumnFormat) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return f"{value:<{col.width}d}"
    text = "" if value is None else str(value)[: col.limit]
    return f"{text:<{col.width}}"


def format_row(values: Sequence[Any], columns: Sequence[ColumnFormat]) -> str:
    cells = [
        format_cell(v, columns[i] if i < len(columns) else DEFAULT_COLUMN)
        for i, v in enumerate(values)
    ]
    return " ".join(cells).rstrip()


class ReportRunner:
    """Prints each report as a titled, fixed-width table.

    A failing report is logged and skipped; the others still run.
    """

    def __init__(
        self,
        gw: DatabaseGateway,
        reports: Optional[List[ReportSpec]] = None,
        out=None,
        log=None,
    ):
        self.gw = gw
        self.reports = reports if reports is not None else load_reports()
        self.out = out or sys.stdout
        self.log = log or structlog.get_logger("tldrank.report")

    def run(self) -> Dict[str, Optional[int]]:
        """Return rows printed per report key, None where the query failed."""
        printed: Dict[str, Optional[int]] = {}
        for spec in self.reports:
            try:
                printed[spec.key] = self.print_report(spec)
            except duckdb.Error as e:
                self.log.error("report_failed", report=spec.key, error=str(e))
                printed[spec.key] = None
        return printed

    def print_report(self, spec: ReportSpec) -> int:
        cursor = self.gw.execute_query(spec.sql)
        names = [d[0] for d in cursor.description]

        self._write(f"\n##{spec.title}##\n")
        self._write(format_row([n.upper() for n in names], spec.columns))
        n = 0
        while (row := cursor.fetchone()) is not None:
            self._write(format_row(row, spec.columns))
            n += 1
        self._write("")
        return n

    def _write(self, line: str) -> None:
        print(line, file=self.out)
