import asyncio
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mcp.server.fastmcp import FastMCP

from oblio_mcp.api.prompts import (
    collect_payment_message,
    create_document_message,
    document_action_message,
    invoice_list_message,
    nomenclature_message,
    register,
)


class PromptMessageTests(unittest.TestCase):
    def test_create_document_message(self):
        text = create_document_message("proforma", "Acme SRL", "RO1", "Widget", "10", "2")

        self.assertIn("Please create a proforma", text)
        self.assertIn("Client CIF: RO1", text)
        self.assertIn('create_document tool with the type "proforma"', text)

    def test_get_message_names_tool(self):
        text = document_action_message("get", "invoice", "FCT", "12")

        self.assertIn('series "FCT"', text)
        self.assertIn("get_document", text)

    def test_delete_message_warns_about_series(self):
        text = document_action_message("delete", "notice", "AVZ", "3")

        self.assertIn("delete_document", text)
        self.assertIn("only the last document in a series", text)

    def test_nomenclature_message_without_filters(self):
        text = nomenclature_message("vat_rates")

        self.assertIn('type "vat_rates"', text)
        self.assertIn("No additional filters", text)

    def test_nomenclature_message_defaults(self):
        text = nomenclature_message("clients", name="Acme", clientCif=None, offset=None)

        self.assertIn("name: Acme", text)
        self.assertIn("clientCif: (not specified)", text)
        self.assertIn("offset: 0", text)

    def test_collect_payment_message_defaults(self):
        text = collect_payment_message("FCT", "7", "Card", document_number="POS-1")

        self.assertIn("Payment type: Card", text)
        self.assertIn("Document number: POS-1", text)
        self.assertIn("Value: invoice total", text)
        self.assertIn("seriesName=FCT", text)

    def test_invoice_list_message_skips_missing_filters(self):
        text = invoice_list_message(clientCif="RO1", collected="0", draft=None)

        self.assertIn("clientCif: RO1", text)
        self.assertNotIn("draft", text.split("\n\n")[1])
        self.assertIn('"collected" field', text)

    def test_invoice_list_message_without_filters(self):
        self.assertIn("(no filters)", invoice_list_message())


class PromptRegistrationTests(unittest.TestCase):
    def setUp(self):
        self.server = FastMCP("prompt-test")
        self.names = register(self.server)

    def _render(self, name, arguments=None):
        result = asyncio.run(self.server.get_prompt(name, arguments or {}))
        (message,) = result.messages
        self.assertEqual(message.role, "user")
        return message.content.text

    def test_catalogue(self):
        expected = {
            f"{action}{kind}"
            for kind in ("Invoice", "Proforma", "Notice")
            for action in ("create", "get", "cancel", "restore", "delete")
        } | {
            "getProductsNomenclature",
            "getClientsNomenclature",
            "getVatRatesNomenclature",
            "getCompaniesNomenclature",
            "getDocumentSeriesNomenclature",
            "getLanguagesNomenclature",
            "getManagementNomenclature",
            "collectPayment",
            "getInvoiceList",
            "sendInvoiceToSpv",
            "getEinvoiceFromSpv",
            "setCif",
            "getCif",
        }

        self.assertEqual(set(self.names), expected)
        self.assertEqual(len(self.names), len(expected))
        listed = asyncio.run(self.server.list_prompts())
        self.assertEqual({prompt.name for prompt in listed}, expected)

    def test_action_prompts_bind_their_kind(self):
        text = self._render("cancelNotice", {"seriesName": "AVZ", "number": "4"})

        self.assertIn("cancel_document", text)
        self.assertIn('type "notice"', text)

    def test_get_invoice_prompt(self):
        text = self._render("getInvoice", {"seriesName": "FCT", "number": "12"})

        self.assertIn('type "invoice"', text)
        self.assertIn('number "12"', text)

    def test_simple_nomenclature_prompt(self):
        text = self._render("getDocumentSeriesNomenclature")

        self.assertIn('type "series"', text)

    def test_invoice_list_prompt(self):
        text = self._render(
            "getInvoiceList",
            {
                "clientCif": "RO1",
                "collected": "0",
                "issuedAfter": "2024-01-01",
                "orderDir": "DESC",
                "offset": "100",
            },
        )

        filters = text.split("\n\n")[1].splitlines()
        self.assertEqual(
            filters,
            [
                "issuedAfter: 2024-01-01",
                "clientCif: RO1",
                "collected: 0",
                "orderDir: DESC",
                "offset: 100",
            ],
        )

    def test_set_cif_prompt(self):
        self.assertIn("RO37311090", self._render("setCif", {"cif": "RO37311090"}))


if __name__ == "__main__":
    unittest.main()
