from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

import structlog

from tldrank.infra.duckdb.gateway import DatabaseGateway, TABLE, VIEW

log = structlog.get_logger("tldrank.schema")


@dataclass(frozen=True)
class SchemaObject:
    """One table or view the load owns.

    ``depends_on`` names the objects this one structurally references
    (foreign-key targets, view sources). Dropping an object drops its
    dependents first because DuckDB neither cascades through foreign keys
    nor tracks view dependencies.
    """

    name: str
    kind: str
    definition: str
    temporary: bool = False
    depends_on: Tuple[str, ...] = ()
    populate: Optional[Callable[[DatabaseGateway], int]] = None

    def __post_init__(self):
        if self.kind not in (TABLE, VIEW):
            raise ValueError(f"unknown schema object kind: {self.kind}")
        if self.kind == VIEW and (self.temporary or self.populate is not None):
            raise ValueError(f"view {self.name} cannot be temporary or populated")

    def create_sql(self) -> str:
        if self.kind == VIEW:
            return f"CREATE VIEW {self.name} AS {self.definition.strip()};"
        temp = "TEMP " if self.temporary else ""
        return f"CREATE {temp}TABLE {self.name} ({self.definition.strip()});"

    def drop_sql(self) -> str:
        return f"DROP {self.kind.upper()} {self.name} CASCADE;"


def dependents(obj: SchemaObject, catalog: Iterable[SchemaObject]):
    return [o for o in catalog if obj.name in o.depends_on]


def exists(obj: SchemaObject, gw: DatabaseGateway) -> bool:
    return gw.object_exists(obj.name, obj.kind)


def drop(obj: SchemaObject, gw: DatabaseGateway, catalog: Iterable[SchemaObject] = ()):
    catalog = tuple(catalog)
    for dep in dependents(obj, catalog):
        if exists(dep, gw):
            drop(dep, gw, catalog)
    gw.execute(obj.drop_sql())
    log.info("object_dropped", name=obj.name, kind=obj.kind)


def create(obj: SchemaObject, gw: DatabaseGateway) -> None:
    gw.execute(obj.create_sql())
    log.info("object_created", name=obj.name, kind=obj.kind, temporary=obj.temporary)


def initialise(
    obj: SchemaObject, gw: DatabaseGateway, catalog: Iterable[SchemaObject] = ()
) -> bool:
    """Create obj, dropping a lingering copy first. Returns True if replaced."""
    replaced = exists(obj, gw)
    if replaced:
        drop(obj, gw, catalog)
    create(obj, gw)
    return replaced
