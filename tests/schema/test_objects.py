import unittest

from tldrank.infra.duckdb.gateway import DatabaseGateway, TABLE, VIEW
from tldrank.infra.duckdb.inspect import row_count
from tldrank.load.catalog import VIEWS, build_tables
from tldrank.load.populate import LoadInputs
from tldrank.schema.objects import SchemaObject, dependents, initialise

PAIR = SchemaObject("pair", TABLE, "k INTEGER PRIMARY KEY, v VARCHAR")
SCRATCH = SchemaObject("scratch", TABLE, "k INTEGER", temporary=True)
PAIR_VIEW = SchemaObject("pair_view", VIEW, "SELECT k FROM pair", depends_on=("pair",))


class SchemaObjectSqlTests(unittest.TestCase):
    def test_create_sql_per_variant(self):
        self.assertEqual(
            PAIR.create_sql(), "CREATE TABLE pair (k INTEGER PRIMARY KEY, v VARCHAR);"
        )
        self.assertEqual(SCRATCH.create_sql(), "CREATE TEMP TABLE scratch (k INTEGER);")
        self.assertEqual(
            PAIR_VIEW.create_sql(), "CREATE VIEW pair_view AS SELECT k FROM pair;"
        )
        self.assertEqual(PAIR_VIEW.drop_sql(), "DROP VIEW pair_view CASCADE;")

    def test_views_cannot_be_populated(self):
        with self.assertRaises(ValueError):
            SchemaObject("v", VIEW, "SELECT 1", populate=lambda gw: 0)
        with self.assertRaises(ValueError):
            SchemaObject("x", "index", "k INTEGER")


class LifecycleTests(unittest.TestCase):
    def setUp(self):
        self.gw = DatabaseGateway.in_memory()

    def tearDown(self):
        self.gw.close()

    def test_initialise_creates_missing_object(self):
        self.assertFalse(self.gw.object_exists("pair"))
        self.assertFalse(initialise(PAIR, self.gw))
        self.assertTrue(self.gw.object_exists("pair"))

    def test_initialise_replaces_existing_table_with_empty_one(self):
        initialise(PAIR, self.gw)
        self.gw.execute("INSERT INTO pair VALUES (1, 'a'), (2, 'b')")
        self.assertTrue(initialise(PAIR, self.gw))
        self.assertEqual(row_count(self.gw, "pair"), 0)

    def test_temporary_table_is_visible_in_catalog(self):
        initialise(SCRATCH, self.gw)
        self.assertTrue(self.gw.object_exists("scratch", TABLE))
        self.assertTrue(initialise(SCRATCH, self.gw))

    def test_view_lookup_ignores_tables_of_the_same_name(self):
        initialise(PAIR, self.gw)
        self.assertFalse(self.gw.object_exists("pair", VIEW))
        initialise(PAIR_VIEW, self.gw, (PAIR, PAIR_VIEW))
        self.assertTrue(self.gw.object_exists("pair_view", VIEW))

    def test_replacing_a_table_drops_its_dependents(self):
        catalog = (PAIR, PAIR_VIEW)
        initialise(PAIR, self.gw, catalog)
        initialise(PAIR_VIEW, self.gw, catalog)
        initialise(PAIR, self.gw, catalog)
        self.assertFalse(self.gw.object_exists("pair_view", VIEW))

    def test_replacing_a_foreign_key_target_drops_the_referencing_table(self):
        tables = build_tables(LoadInputs(mapping_path="m", urls_path="u"))
        catalog = tables + VIEWS
        by_name = {t.name: t for t in tables}
        for name in ("mapping", "tld", "domain", "url"):
            initialise(by_name[name], self.gw, catalog)
        for view in VIEWS:
            initialise(view, self.gw, catalog)

        self.assertTrue(initialise(by_name["tld"], self.gw, catalog))
        self.assertFalse(self.gw.object_exists("url"))
        self.assertFalse(self.gw.object_exists("top_10_urls", VIEW))
        self.assertTrue(self.gw.object_exists("domain"))

    def test_dependents_follow_declared_references(self):
        tables = build_tables(LoadInputs(mapping_path="m", urls_path="u"))
        catalog = tables + VIEWS
        mapping = next(t for t in tables if t.name == "mapping")
        self.assertEqual([o.name for o in dependents(mapping, catalog)], ["top_10_tlds"])
