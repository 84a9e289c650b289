from __future__ import annotations
from typing import List

from tldrank.core.time import now_utc
from tldrank.core.types import TestResult, DQReport
from tldrank.infra.duckdb.gateway import DatabaseGateway
from tldrank.infra.duckdb.inspect import _count

POSITION_MIN = 1
POSITION_MAX = 10000


def check_pk(gw, tbl, pk: List[str]) -> List[TestResult]:
    results = []
    null_pred = " OR ".join([f"{k} IS NULL" for k in pk])
    null_cnt = _count(gw, f"SELECT COUNT(*) FROM {tbl} WHERE {null_pred};")
    results.append(
        TestResult(
            f"pk_not_null:{tbl}",
            "passed" if null_cnt == 0 else "failed",
            {"null_rows": null_cnt},
        )
    )
    results.append(check_unique(gw, tbl, pk, name=f"pk_unique:{tbl}"))
    return results


def check_unique(gw, tbl, cols: List[str], name: str | None = None) -> TestResult:
    grp = ", ".join(cols)
    dup_cnt = _count(
        gw,
        f"SELECT COUNT(*) FROM (SELECT {grp}, COUNT(*) c FROM {tbl} GROUP BY {grp} HAVING COUNT(*)>1);",
    )
    return TestResult(
        name or f"unique:{tbl}({grp})",
        "passed" if dup_cnt == 0 else "failed",
        {"duplicate_keys": dup_cnt},
    )


def check_range(gw, tbl, col: str, lo: int, hi: int) -> TestResult:
    cnt = _count(
        gw, f"SELECT COUNT(*) FROM {tbl} WHERE {col} < ? OR {col} > ?;", [lo, hi]
    )
    return TestResult(
        f"range:{tbl}.{col}",
        "passed" if cnt == 0 else "failed",
        {"violations": cnt, "min": lo, "max": hi},
    )


def check_foreign_key(gw, tbl, fk_col: str, ref_table: str, ref_key: str) -> TestResult:
    sql = f"""
    SELECT COUNT(*)
    FROM {tbl} t
    LEFT JOIN {ref_table} d ON t.{fk_col} = d.{ref_key}
    WHERE d.{ref_key} IS NULL
    """
    cnt = _count(gw, sql)
    return TestResult(
        f"ri:{fk_col}->{ref_table}.{ref_key}",
        "passed" if cnt == 0 else "failed",
        {"violations": cnt},
    )


def check_dense_ids(gw, tbl, col: str) -> TestResult:
    """Ids must be exactly 1..n."""
    n, lo, hi = gw.execute_query(
        f"SELECT COUNT(*), MIN({col}), MAX({col}) FROM {tbl};"
    ).fetchone()
    ok = n == 0 or (lo == 1 and hi == n)
    return TestResult(
        f"dense:{tbl}.{col}",
        "passed" if ok else "failed",
        {"rows": n, "min": lo, "max": hi},
    )


def check_effective_tld_coverage(gw) -> TestResult:
    """Ranked TLD pairs whose effective TLD has no description (they never reach top_10_tlds)."""
    cnt = _count(
        gw,
        """
        SELECT COUNT(*)
        FROM tld t
        LEFT JOIN mapping m
          ON m.tld = CASE WHEN t.tld2 = '' THEN t.tld1 ELSE t.tld2 END
        WHERE m.tld IS NULL
        """,
    )
    return TestResult(
        "coverage:tld->mapping",
        "passed" if cnt == 0 else "warn",
        {"unmapped_pairs": cnt},
    )


def run_integrity_checks(gw: DatabaseGateway) -> DQReport:
    """Verify the loaded url/domain/tld relations; a 'warn' result does not fail."""
    results: List[TestResult] = []

    results.extend(check_pk(gw, "url", ["domain_name", "tld_id"]))
    results.append(check_unique(gw, "url", ["position"]))
    results.append(check_range(gw, "url", "position", POSITION_MIN, POSITION_MAX))
    results.append(check_foreign_key(gw, "url", "domain_name", "domain", "domain_name"))
    results.append(check_foreign_key(gw, "url", "tld_id", "tld", "tld_id"))
    results.append(check_unique(gw, "tld", ["tld1", "tld2"]))
    results.append(check_dense_ids(gw, "tld", "tld_id"))
    results.append(check_effective_tld_coverage(gw))

    overall = "failed" if any(r.status == "failed" for r in results) else "passed"
    summary = {
        "tests_total": len(results),
        "tests_failed": sum(1 for r in results if r.status == "failed"),
        "tests_warned": sum(1 for r in results if r.status == "warn"),
        "at": now_utc().isoformat(),
    }
    return DQReport(status=overall, results=results, summary=summary)
