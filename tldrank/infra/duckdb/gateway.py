import hashlib
import hmac
import secrets
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

import duckdb
import pandas as pd
import structlog

from tldrank.core.types import ConnectionFailed

TABLE = "table"
VIEW = "view"

CREDENTIALS_DDL = """
CREATE TABLE IF NOT EXISTS _credentials (
  identity  VARCHAR PRIMARY KEY,
  salt      VARCHAR NOT NULL,
  digest    VARCHAR NOT NULL
);
"""


def _digest(salt: str, secret: str) -> str:
    return hashlib.pbkdf2_hmac(
        "sha256", secret.encode("utf-8"), bytes.fromhex(salt), 100_000
    ).hex()


def _check_secret(con: duckdb.DuckDBPyConnection, identity: str, secret: str) -> None:
    try:
        con.execute(CREDENTIALS_DDL)
        row = con.execute(
            "SELECT salt, digest FROM _credentials WHERE identity = ?", [identity]
        ).fetchone()
        if row is None:
            salt = secrets.token_hex(16)
            con.execute(
                "INSERT INTO _credentials VALUES (?, ?, ?)",
                [identity, salt, _digest(salt, secret)],
            )
            return
    except duckdb.Error as e:
        raise ConnectionFailed(f"cannot read credentials of {identity}: {e}") from e
    salt, digest = row
    if not hmac.compare_digest(digest, _digest(salt, secret)):
        raise ConnectionFailed(f"wrong secret for {identity}")


class DatabaseGateway:
    """Owns the single DuckDB connection of a run.

    Every statement of the load and the reports goes through this object,
    serially. Use it as a context manager so the connection is closed on
    every exit path.
    """

    def __init__(self, con: duckdb.DuckDBPyConnection, log=None):
        self.con = con
        self.log = log or structlog.get_logger("tldrank.gateway")

    @classmethod
    def connect(cls, db_path: Path, secret: str, log=None) -> "DatabaseGateway":
        """Open the warehouse file at db_path for the identity it is named after.

        The first connection registers a salted digest of secret; later
        connections must present the same secret.
        """
        log = log or structlog.get_logger("tldrank.gateway")
        db_path = Path(db_path)
        log.debug("duckdb_connect", db_path=str(db_path))
        if not secret:
            raise ConnectionFailed(f"empty secret for {db_path.stem}")
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            con = duckdb.connect(database=str(db_path))
        except (duckdb.Error, OSError) as e:
            raise ConnectionFailed(f"cannot open {db_path}: {e}") from e
        try:
            _check_secret(con, db_path.stem, secret)
        except Exception:
            con.close()
            raise
        return cls(con, log)

    @classmethod
    def in_memory(cls, log=None) -> "DatabaseGateway":
        return cls(duckdb.connect(database=":memory:"), log)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self.con.close()

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> None:
        self.log.debug("sql_execute", sql=sql)
        if params is None:
            self.con.execute(sql)
        else:
            self.con.execute(sql, params)

    def execute_query(self, sql: str, params: Optional[Sequence[Any]] = None):
        """Run a query and return the cursor positioned before the first row."""
        self.log.debug("sql_query", sql=sql)
        if params is None:
            return self.con.execute(sql)
        return self.con.execute(sql, params)

    def fetch_all(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[tuple]:
        return self.execute_query(sql, params).fetchall()

    def prepare_batch(self, sql: str, rows: Iterable[Sequence[Any]]) -> int:
        """Bind every row to sql and submit them as one transaction."""
        rows = [tuple(r) for r in rows]
        if not rows:
            return 0
        self.con.execute("BEGIN;")
        try:
            self.con.executemany(sql, rows)
            self.con.execute("COMMIT;")
        except Exception:
            self.con.execute("ROLLBACK;")
            self.log.error("batch_rolled_back", sql=sql, rows=len(rows))
            raise
        return len(rows)

    def insert_frame(self, table: str, df: pd.DataFrame) -> int:
        """Insert a DataFrame into table with a single INSERT ... SELECT."""
        if df.empty:
            return 0
        stage = f"{table}_stage_df"
        cols = ", ".join(df.columns)
        self.con.register(stage, df)
        try:
            self.con.execute(
                f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {stage};"
            )
        finally:
            self.con.unregister(stage)
        return len(df)

    def object_exists(self, name: str, kind: str = TABLE) -> bool:
        """Catalog lookup by name; views are matched among views only."""
        sql = "SELECT COUNT(*) FROM information_schema.tables WHERE table_name = ?"
        if kind == VIEW:
            sql += " AND table_type = 'VIEW'"
        return self.con.execute(sql, [name]).fetchone()[0] > 0
