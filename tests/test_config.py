import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from oblio_mcp.backends import oblio_client
from oblio_mcp.backends.oblio_client import OblioError, get_client
from oblio_mcp.utils import config


class ParseTests(unittest.TestCase):
    def test_parse_bool(self):
        for value in ("1", "true", "YES", " on "):
            self.assertTrue(config._parse_bool(value))
        for value in ("0", "false", "", "maybe"):
            self.assertFalse(config._parse_bool(value))
        self.assertTrue(config._parse_bool(None, default=True))

    def test_parse_float_falls_back_to_default(self):
        self.assertEqual(config._parse_float("12.5", default=30.0), 12.5)
        self.assertEqual(config._parse_float("soon", default=30.0), 30.0)
        self.assertEqual(config._parse_float(" ", default=30.0), 30.0)


class CredentialTests(unittest.TestCase):
    def test_both_missing(self):
        with patch.dict(os.environ, {"OBLIO_API_EMAIL": "", "OBLIO_API_SECRET": ""}):
            with self.assertRaises(config.MissingCredentials) as ctx:
                config.get_credentials()

        self.assertEqual(
            str(ctx.exception),
            "OBLIO_API_EMAIL and OBLIO_API_SECRET environment variables must be set",
        )

    def test_one_missing(self):
        with patch.dict(os.environ, {"OBLIO_API_EMAIL": "me@example.com", "OBLIO_API_SECRET": ""}):
            with self.assertRaises(config.MissingCredentials) as ctx:
                config.get_credentials()

        self.assertEqual(str(ctx.exception), "OBLIO_API_SECRET environment variable must be set")

    def test_values_are_stripped(self):
        with patch.dict(
            os.environ, {"OBLIO_API_EMAIL": " me@example.com ", "OBLIO_API_SECRET": "secret\n"}
        ):
            self.assertEqual(config.get_credentials(), ("me@example.com", "secret"))

    def test_initial_cif(self):
        with patch.dict(os.environ, {"CIF": " RO37311090 "}):
            self.assertEqual(config.get_initial_cif(), "RO37311090")
        with patch.dict(os.environ, {"CIF": ""}):
            self.assertEqual(config.get_initial_cif(), "")


class GetClientTests(unittest.TestCase):
    def setUp(self):
        patcher = patch.object(oblio_client, "_CLIENT", None)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_missing_credentials_surface_as_client_error(self):
        with patch.dict(os.environ, {"OBLIO_API_EMAIL": "", "OBLIO_API_SECRET": ""}):
            with self.assertRaises(OblioError):
                get_client()

    def test_client_created_once_with_initial_cif(self):
        env = {"OBLIO_API_EMAIL": "me@example.com", "OBLIO_API_SECRET": "secret", "CIF": "RO1"}
        with patch.dict(os.environ, env):
            first = get_client()
            second = get_client()
        self.addCleanup(first.close)

        self.assertIs(first, second)
        self.assertEqual(first.get_cif(), "RO1")


if __name__ == "__main__":
    unittest.main()
