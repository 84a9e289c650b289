import unittest
from contextlib import redirect_stdout
import io
import json
from unittest import mock

from tldrank import cli
from tldrank.infra.duckdb.gateway import DatabaseGateway
from tests.utils.inputs import write_lines
from tests.utils.tempdir import managed_temp_dir


class CliTests(unittest.TestCase):
    def run_main(self, argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = cli.main(argv)
        return code, out.getvalue()

    def test_missing_credentials_prints_usage_and_skips_database(self):
        with mock.patch.object(DatabaseGateway, "connect") as connect:
            code, text = self.run_main(["alice"])
        self.assertEqual(code, 1)
        self.assertIn(cli.USAGE_MESSAGE, text)
        connect.assert_not_called()

    def test_connection_failure_prints_message_and_skips_load(self):
        with managed_temp_dir("cli_conn") as tmp:
            not_a_dir = write_lines(tmp / "blocker", ["x"])
            with mock.patch.object(cli, "LoadPipeline") as pipeline:
                code, text = self.run_main(
                    ["alice", "secret", "--db-root", str(not_a_dir), "--log-level", "CRITICAL"]
                )
        self.assertEqual(code, 1)
        self.assertIn(cli.CONNECTION_FAILED_MESSAGE, text)
        pipeline.assert_not_called()

    def test_full_run_loads_reports_and_writes_summary(self):
        with managed_temp_dir("cli_run") as tmp:
            write_lines(tmp / "mapping", ["com\tCommercial"])
            write_lines(tmp / "TopURLs", ["1\texample.com\tcom", "2\texample.org\torg\tnet"])
            gw = DatabaseGateway.in_memory()
            with mock.patch.object(DatabaseGateway, "connect", return_value=gw) as connect:
                code, text = self.run_main(
                    [
                        "alice",
                        "secret",
                        "--data-root",
                        str(tmp),
                        "--summary",
                        str(tmp / "summary.json"),
                        "--log-level",
                        "WARNING",
                    ]
                )
            summary = json.loads((tmp / "summary.json").read_text(encoding="utf-8"))

        self.assertEqual(code, 0)
        db_path, secret = connect.call_args.args
        self.assertEqual(db_path.name, "alice.duckdb")
        self.assertEqual(secret, "secret")
        self.assertEqual(summary["row_counts"]["url"], 2)
        self.assertEqual(summary["dq_status"], "passed")
        self.assertIn("##Query 4:", text)
        self.assertIn("example.org", text)

    def test_second_run_needs_the_same_password(self):
        with managed_temp_dir("cli_rerun") as tmp:
            write_lines(tmp / "mapping", ["com\tCommercial"])
            write_lines(tmp / "TopURLs", ["1\texample.com\tcom"])
            base = ["--data-root", str(tmp), "--log-level", "CRITICAL", "--no-report"]
            first, _ = self.run_main(["alice", "secret", *base])
            second, _ = self.run_main(["alice", "secret", *base])
            wrong, text = self.run_main(["alice", "guess", *base])
        self.assertEqual((first, second), (0, 0))
        self.assertEqual(wrong, 1)
        self.assertIn(cli.CONNECTION_FAILED_MESSAGE, text)
