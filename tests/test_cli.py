from __future__ import annotations

import json
import unittest
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock

from sqlalchemy.orm import Session

from app.cli import main
from app.repositories.integration_repository import IntegrationRepository
from db.models.integration import Integration

TOTAL_ORDER_HEADER = "Partner,Order Id,Order Status,Total Order Status - Customer Cancelled"


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.path = Path(self._tmp.name) / "orders.csv"
        self.path.write_text(
            f"{TOTAL_ORDER_HEADER}\nBurger Co,T1,good,0\nBurger Co,,bad,0\n",
            encoding="utf-8",
        )

    def test_dry_run_processes_against_seed_integrations(self) -> None:
        with self.assertLogs("app", level="INFO"):
            with mock.patch("builtins.print") as printed:
                exit_code = main(["process", str(self.path), "deliveryplatform3_total_order", "--dry-run"])

        self.assertEqual(exit_code, 0)
        payload = json.loads(printed.call_args.args[0])
        self.assertTrue(payload["dry_run"])
        self.assertEqual(payload["integration"], "deliveryplatform3_total_order")
        self.assertEqual(payload["processed"], 1)
        self.assertEqual(payload["skipped"], 1)

    def test_missing_file_exits_one(self) -> None:
        missing = Path(self._tmp.name) / "missing.csv"
        with self.assertLogs("app.cli", level="ERROR") as logs:
            exit_code = main(["process", str(missing), "--dry-run"])
        self.assertEqual(exit_code, 1)
        self.assertIn("File not found", logs.output[0])

    def test_invalid_key_exits_one(self) -> None:
        with self.assertLogs("app.cli", level="ERROR"):
            self.assertEqual(main(["process", str(self.path), "Not-A-Key", "--dry-run"]), 1)

    def test_processing_error_exits_one(self) -> None:
        self.path.write_text(
            "Restaurant,Order ID,Order status,Time to confirm\nNoodle Bar,H1,completed,12:75\n",
            encoding="utf-8",
        )
        with self.assertLogs("app.cli", level="ERROR") as logs:
            exit_code = main(["process", str(self.path), "deliveryplatform1_order_history", "--dry-run"])
        self.assertEqual(exit_code, 1)
        self.assertIn("MALFORMED_TIME", logs.output[0])

    def test_unusable_stored_integration_exits_one(self) -> None:
        row = Integration(
            id=9,
            name="retired_feed",
            platform_id=1,
            field_mapping={"Order Id": {"target": "platform_order_id", "required": True}},
            tables=["orders", "restaurants"],
            is_active=True,
            source_format="retired_format",
        )

        @contextmanager
        def fake_scope() -> Iterator[Session]:
            yield mock.create_autospec(Session, instance=True)

        with mock.patch("app.cli.session_scope", fake_scope), mock.patch.object(
            IntegrationRepository, "get_active_by_name", return_value=row
        ):
            with self.assertLogs("app.cli", level="ERROR") as logs:
                exit_code = main(["process", str(self.path), "retired_feed"])

        self.assertEqual(exit_code, 1)
        self.assertIn("INVALID_INTEGRATION_CONFIG", logs.output[0])
        self.assertIn("retired_feed", logs.output[0])

    def test_missing_command_is_usage_error(self) -> None:
        with mock.patch("sys.stderr"):
            with self.assertRaises(SystemExit) as ctx:
                main([])
        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
