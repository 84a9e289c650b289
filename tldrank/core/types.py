from dataclasses import dataclass, asdict, field
from typing import List, Optional, Dict, Any
from datetime import datetime
from tldrank.core.time import iso


class MalformedRowError(ValueError):
    """An input line that cannot be parsed; aborts the load."""

    def __init__(self, path, line_no: int, reason: str):
        super().__init__(f"{path}:{line_no}: {reason}")
        self.path = str(path)
        self.line_no = line_no
        self.reason = reason


class InputUnavailable(RuntimeError):
    pass


class ConnectionFailed(RuntimeError):
    pass


class IntegrityCheckFailed(RuntimeError):
    def __init__(self, report: "DQReport"):
        failed = [r.name for r in report.failed]
        super().__init__(f"integrity checks failed: {', '.join(failed)}")
        self.report = report


@dataclass(frozen=True)
class MappingRecord:
    tld: str
    description: str


@dataclass(frozen=True)
class UrlRecord:
    pos: int
    domain_name: str
    tld1: str
    tld2: str = ""  # '' marks a single-part TLD, never None


@dataclass
class TestResult:
    __test__ = False  # not a pytest class
    name: str
    status: str  # "passed" | "failed" | "warn"
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DQReport:
    status: str  # "passed" unless a check failed
    results: List[TestResult]
    summary: Dict[str, Any] = field(default_factory=dict)

    @property
    def failed(self) -> List[TestResult]:
        return [r for r in self.results if r.status == "failed"]


@dataclass
class LoadSummary:
    run_id: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    row_counts: Dict[str, int] = field(default_factory=dict)
    durations_sec: Dict[str, float] = field(default_factory=dict)
    dq_status: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        d = asdict(self)
        d["started_at"] = iso(self.started_at)
        if self.finished_at:
            d["finished_at"] = iso(self.finished_at)
        return d


@dataclass(frozen=True)
class ColumnFormat:
    width: int
    limit: int


@dataclass(frozen=True)
class ReportSpec:
    key: str
    title: str
    sql: str
    columns: List[ColumnFormat]
