import asyncio
import json
import sys
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mcp.server.fastmcp.exceptions import ToolError

from oblio_mcp.app import SERVER_NAME, build_server
from oblio_mcp.backends.oblio_client import OblioClient, OblioNotFound


class BuildServerTests(unittest.TestCase):
    def setUp(self):
        self.factory = Mock(return_value=Mock(spec=OblioClient))
        self.server, self.dispatcher = build_server(self.factory, read_only=False)

    def _tools(self):
        return {tool.name: tool for tool in asyncio.run(self.server.list_tools())}

    def test_server_name(self):
        self.assertEqual(self.server.name, SERVER_NAME)

    def test_tools_match_dispatcher(self):
        tools = self._tools()

        self.assertEqual(len(tools), 12)
        self.assertEqual(set(tools), {entry.name for entry in self.dispatcher.entries()})
        self.factory.assert_not_called()

    def test_document_tool_arguments(self):
        schema = self._tools()["get_document"].inputSchema

        self.assertEqual(set(schema["properties"]), {"type", "seriesName", "number"})
        self.assertEqual(set(schema["required"]), {"type", "seriesName", "number"})

    def test_optional_arguments_not_required(self):
        schema = self._tools()["delete_document"].inputSchema

        self.assertNotIn("deleteCollect", schema.get("required", []))
        self.assertNotIn("idempotencyKey", schema.get("required", []))

    def test_annotations_mark_destructive_tools(self):
        tools = self._tools()

        self.assertTrue(tools["delete_document"].annotations.destructiveHint)
        self.assertTrue(tools["list_documents"].annotations.readOnlyHint)
        self.assertFalse(tools["create_document"].annotations.readOnlyHint)

    def test_prompts_registered(self):
        prompts = {prompt.name for prompt in asyncio.run(self.server.list_prompts())}

        self.assertIn("createInvoice", prompts)
        self.assertIn("getEinvoiceFromSpv", prompts)

    def test_read_only_flag_reaches_dispatcher(self):
        _, dispatcher = build_server(self.factory, read_only=True)

        envelope = dispatcher.dispatch("create_einvoice", {"seriesName": "FCT", "number": 1})

        self.assertEqual(envelope["errors"][0]["kind"], "disabled")


def _text(result) -> str:
    # Newer FastMCP releases return (content, structured) pairs
    if isinstance(result, tuple):
        result = result[0]
    return result[0].text


@patch("oblio_mcp.api.dispatcher.record_write_attempt")
class CallToolTests(unittest.TestCase):
    def setUp(self):
        self.client = Mock(spec=OblioClient)
        self.server, _ = build_server(Mock(return_value=self.client), read_only=False)

    def _call(self, name, arguments):
        return asyncio.run(self.server.call_tool(name, arguments))

    def test_create_document_returns_remote_result(self, audit):
        remote = {"seriesName": "FCT", "number": 1, "link": "http://oblio.test/FCT1"}
        self.client.create_document.return_value = remote

        text = _text(
            self._call(
                "create_document",
                {
                    "type": "invoice",
                    "data": {
                        "cif": "RO1",
                        "client": {"name": "Acme"},
                        "issueDate": "2024-01-01",
                        "seriesName": "FCT",
                        "products": [{"name": "Widget", "price": "10", "measuringUnit": "buc"}],
                    },
                },
            )
        )

        self.assertEqual(json.loads(text), remote)
        kind, payload = self.client.create_document.call_args.args
        self.assertEqual(kind, "invoice")
        self.assertEqual(payload["cif"], "RO1")

    def test_receipt_without_series_rejected_before_client(self, audit):
        with self.assertRaises(ToolError) as ctx:
            self._call(
                "collect_payment",
                {"seriesName": "FCT", "number": 1, "collect": {"type": "Chitanta"}},
            )

        self.assertIn("seriesName is required when type is Chitanta", str(ctx.exception))
        self.client.collect_payment.assert_not_called()

    def test_boolean_delete_collect_rejected_before_client(self, audit):
        with self.assertRaises(ToolError) as ctx:
            self._call(
                "delete_document",
                {"type": "invoice", "seriesName": "FCT", "number": 1, "deleteCollect": True},
            )

        self.assertIn("deleteCollect", str(ctx.exception))
        self.client.delete_document.assert_not_called()

    def test_remote_error_message_reaches_caller(self, audit):
        self.client.get_document.side_effect = OblioNotFound("Documentul nu exista", status=404)

        with self.assertRaises(ToolError) as ctx:
            self._call("get_document", {"type": "invoice", "seriesName": "FCT", "number": 999})

        self.assertIn("Error getting document: Documentul nu exista", str(ctx.exception))

    def test_text_results_passed_verbatim(self, audit):
        self.client.get_cif.return_value = "RO37311090"

        text = _text(self._call("get_cif", {}))

        self.assertEqual(text, "Current company CIF is: RO37311090")


if __name__ == "__main__":
    unittest.main()
