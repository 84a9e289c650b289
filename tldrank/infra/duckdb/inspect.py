from tldrank.infra.duckdb.gateway import DatabaseGateway


def _count(gw: DatabaseGateway, sql: str, params: list | None = None) -> int:
    return gw.execute_query(sql, params or []).fetchone()[0]


def row_count(gw: DatabaseGateway, table: str) -> int:
    return _count(gw, f"SELECT COUNT(*) FROM {table}")
