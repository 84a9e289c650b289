from functools import partial
from typing import Tuple

from tldrank.infra.duckdb.gateway import TABLE, VIEW
from tldrank.load.populate import (
    LoadInputs,
    populate_domain,
    populate_mapping,
    populate_tld,
    populate_url,
    populate_url_temp,
)
from tldrank.schema import ddls
from tldrank.schema.objects import SchemaObject

# views derive from tables and are never populated
VIEWS: Tuple[SchemaObject, ...] = (
    SchemaObject("top_10_urls", VIEW, ddls.TOP_10_URLS, depends_on=("url", "tld")),
    SchemaObject(
        "top_10_tlds", VIEW, ddls.TOP_10_TLDS, depends_on=("url", "tld", "mapping")
    ),
    SchemaObject(
        "top_10_repeated_domains",
        VIEW,
        ddls.TOP_10_REPEATED_DOMAINS,
        depends_on=("url",),
    ),
)


def build_tables(inputs: LoadInputs) -> Tuple[SchemaObject, ...]:
    """Tables in load order: tld, domain and url read url_temp, url reads tld."""
    return (
        SchemaObject(
            "mapping", TABLE, ddls.MAPPING, populate=partial(populate_mapping, inputs=inputs)
        ),
        SchemaObject(
            "url_temp",
            TABLE,
            ddls.URL_TEMP,
            temporary=True,
            populate=partial(populate_url_temp, inputs=inputs),
        ),
        SchemaObject("tld", TABLE, ddls.TLD, populate=populate_tld),
        SchemaObject("domain", TABLE, ddls.DOMAIN, populate=populate_domain),
        SchemaObject(
            "url",
            TABLE,
            ddls.URL,
            depends_on=("domain", "tld"),
            populate=populate_url,
        ),
    )
