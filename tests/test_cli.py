"""Tests for the ``liebert-mpx`` command line entry point."""

from __future__ import annotations

import argparse
import contextlib
import io
import json
import os
import unittest
from unittest.mock import patch

from liebert_mpx.liebert_mpx import main, parse_address
from liebert_mpx.mpx_client import MPXClient

from tests.mocks import MockSession, fixture_pages


class CLITests(unittest.TestCase):
    def setUp(self):
        self.session = MockSession(pages=fixture_pages())
        self.hosts = []

        def build_client(host=None):
            self.hosts.append(host)
            return MPXClient(host=host or "pdu.example", session=self.session)  # type: ignore[arg-type]

        self.client_patcher = patch("liebert_mpx.liebert_mpx.MPXClient", side_effect=build_client)
        self.client_patcher.start()

        # Keep a developer's .env out of the tests
        self.dotenv_patcher = patch("liebert_mpx.liebert_mpx.load_dotenv")
        self.dotenv_patcher.start()

    def tearDown(self):
        self.dotenv_patcher.stop()
        self.client_patcher.stop()

    def _run(self, *argv: str):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(list(argv))
        return code, out.getvalue()

    def test_receptacles_prints_json(self):
        """Read commands print their records as JSON."""
        code, out = self._run("--host", "10.1.1.1", "receptacles")

        self.assertEqual(code, 0)
        self.assertEqual(self.hosts, ["10.1.1.1"])
        data = json.loads(out)
        self.assertEqual(len(data), 3)
        self.assertEqual(data[2]["label"], "Low Power Light")
        self.assertEqual(data[2]["status"], "ALARM")

    def test_receptacle_details(self):
        code, out = self._run("receptacle", "1", "2", "3")

        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(data["settings"]["power_on_delay"], 3)
        self.assertEqual(data["hardware"]["line_source"], "L2_N")

    def test_pdu_details_show_firmware_version(self):
        code, out = self._run("pdu", "1")

        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["hardware"]["fw_version"], "1.2.0.5")

    def test_receptacle_command(self):
        code, out = self._run("receptacle-command", "1", "1", "2", "reboot")

        self.assertEqual(code, 0)
        self.assertEqual(out, "")
        self.assertEqual(self.session.last_form, {"receptacleStateGroup": "2", "Submit": "Save"})

    def test_set_label_picks_scope_from_address(self):
        """A two part address changes the branch label."""
        code, _ = self._run("set-label", "1.2", "Storage")

        self.assertEqual(code, 0)
        call = self.session.post_calls[-1]
        self.assertTrue(call["url"].endswith("/dp/std:1.2.0_0.0.0/rpc/rpcControlRemSetting"))
        self.assertEqual(self.session.last_form["label"], "Storage")

    def test_device_errors_exit_with_status_one(self):
        """A rejected write is logged and turned into exit status 1."""
        self.session.post_status = 403

        with self.assertLogs("liebert_mpx.liebert_mpx", level="ERROR"):
            code, _ = self._run("pdu-command", "1", "test-event")

        self.assertEqual(code, 1)
        self.assertEqual(len(self.session.post_calls), 1)

    def test_set_label_of_locked_receptacle(self):
        """Relabelling a receptacle writes back its lock state unchanged."""
        code, _ = self._run("set-label", "1.2.3", "Desk Lamp")

        self.assertEqual(code, 0)
        self.assertEqual(self.session.last_form["label"], "Desk Lamp")
        self.assertEqual(self.session.last_form["lockStateTypeGroup1"], "1")

    def test_invalid_timeout_exits_with_status_one(self):
        """A bad MPX_TIMEOUT is reported as an error instead of a traceback."""
        self.client_patcher.stop()
        try:
            with patch.dict(os.environ, {"MPX_TIMEOUT": "soon"}, clear=False):
                with self.assertLogs("liebert_mpx.liebert_mpx", level="ERROR"):
                    code, _ = self._run("receptacles")
        finally:
            self.client_patcher.start()

        self.assertEqual(code, 1)

    def test_unknown_log_level_falls_back_to_info(self):
        with patch.dict(os.environ, {"MPX_LOG_LEVEL": "chatty"}, clear=False):
            with self.assertLogs("liebert_mpx.liebert_mpx", level="WARNING") as logs:
                code, _ = self._run("receptacles")

        self.assertEqual(code, 0)
        self.assertIn("MPX_LOG_LEVEL", logs.output[0])

    def test_parse_address(self):
        self.assertEqual(parse_address("1.2.3"), [1, 2, 3])
        with self.assertRaises(argparse.ArgumentTypeError):
            parse_address("1.2.3.4")
        with self.assertRaises(argparse.ArgumentTypeError):
            parse_address("one")


if __name__ == "__main__":
    unittest.main()
