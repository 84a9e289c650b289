import argparse
from pathlib import Path
from typing import List, Optional

from tldrank.core.config import Settings
from tldrank.core.json import write_json
from tldrank.core.logging import configure_logging
from tldrank.core.types import ConnectionFailed
from tldrank.infra.duckdb.gateway import DatabaseGateway
from tldrank.load.pipeline import LoadPipeline
from tldrank.load.populate import LoadInputs
from tldrank.report.runner import ReportRunner

USAGE_MESSAGE = "Please enter your username and password as command line arguments."
CONNECTION_FAILED_MESSAGE = "Failed to make connection!"


def run(
    user: str,
    password: str,
    cfg: Settings,
    log,
    report: bool = True,
    summary_path: Optional[Path] = None,
) -> int:
    try:
        gw = DatabaseGateway.connect(cfg.database_path(user), password, log=log)
    except ConnectionFailed as e:
        log.error("connection_failed", user=user, error=str(e))
        print(CONNECTION_FAILED_MESSAGE)
        return 1

    with gw:
        inputs = LoadInputs(
            mapping_path=cfg.mapping_path,
            urls_path=cfg.urls_path,
            strict=cfg.STRICT_INPUTS,
        )
        summary = LoadPipeline(log, gw, inputs).run()
        if summary_path:
            write_json(summary_path, summary.to_payload())
            log.info("summary_written", path=str(summary_path))
        if report:
            ReportRunner(gw, log=log).run()
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tldrank",
        description="Load the ranked URL list into DuckDB and print the top-10 reports.",
    )
    p.add_argument("credentials", nargs="*", metavar="USER PASSWORD")
    p.add_argument("--data-root", help="directory the input and database paths are relative to")
    p.add_argument("--db-root", help="directory holding <user>.duckdb")
    p.add_argument("--mapping", help="TLD description file (tld<TAB>description)")
    p.add_argument("--urls", help="ranked URL file (pos<TAB>domain<TAB>tld1[<TAB>tld2])")
    p.add_argument(
        "--strict-inputs",
        action="store_true",
        default=None,
        help="fail when an input file cannot be read",
    )
    logs = p.add_mutually_exclusive_group()
    logs.add_argument("--json-logs", dest="json_logs", action="store_const", const=True)
    logs.add_argument("--console-logs", dest="json_logs", action="store_const", const=False)
    p.add_argument("--log-level")
    p.add_argument("--no-report", action="store_true")
    p.add_argument("--summary", type=Path, help="write the load summary as JSON")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    if len(args.credentials) != 2:
        print(USAGE_MESSAGE)
        p.print_usage()
        return 1

    overrides = {
        "DATA_ROOT": args.data_root,
        "DB_DIR": args.db_root,
        "MAPPING_FILE": args.mapping,
        "URLS_FILE": args.urls,
        "STRICT_INPUTS": args.strict_inputs,
        "JSON_LOGS": args.json_logs,
        "LOG_LEVEL": args.log_level,
    }
    cfg = Settings().model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )
    log = configure_logging(cfg.JSON_LOGS, cfg.LOG_LEVEL)

    user, password = args.credentials
    return run(
        user,
        password,
        cfg,
        log,
        report=not args.no_report,
        summary_path=args.summary,
    )


if __name__ == "__main__":
    raise SystemExit(main())
