"""Canned prompts that guide an assistant to the right Oblio tool.

Prompts never call Oblio; each renders a single user message.
"""
from __future__ import annotations

from typing import Callable, Literal, Optional

from mcp.server.fastmcp import FastMCP

NOT_SPECIFIED = "(not specified)"

DocumentAction = Literal["get", "cancel", "restore", "delete"]
PromptDecorator = Callable[[str, str], Callable[[Callable[..., str]], Callable[..., str]]]

# kind -> (prompt suffix, human label, example series)
_KINDS: dict[str, tuple[str, str, str]] = {
    "invoice": ("Invoice", "invoice", "FCT"),
    "proforma": ("Proforma", "proforma", "PR"),
    "notice": ("Notice", "notice (aviz)", "AVZ"),
}

_ACTION_DESCRIPTIONS: dict[DocumentAction, str] = {
    "get": "Retrieve a {label} by series name (e.g. {series}) and number.",
    "cancel": "Cancel (annul) a {label}. The document is marked as void but not deleted.",
    "restore": "Restore a previously cancelled {label}.",
    "delete": "Permanently delete the last {label} in a series. This cannot be undone.",
}

_SIMPLE_NOMENCLATURES: dict[str, tuple[str, str]] = {
    "getVatRatesNomenclature": ("vat_rates", "List the VAT rates configured for your company."),
    "getCompaniesNomenclature": ("companies", "List the companies linked to the Oblio account."),
    "getDocumentSeriesNomenclature": (
        "series",
        "List the document series (invoice, proforma, notice) configured for your company.",
    ),
    "getLanguagesNomenclature": ("languages", "List the languages configured for your company."),
    "getManagementNomenclature": (
        "management",
        "List stock management locations (gestiuni). Only works when stock is enabled.",
    ),
}


def create_document_message(
    kind: str,
    client_name: str,
    client_cif: str,
    product_name: str,
    product_price: str,
    quantity: str,
) -> str:
    label = _KINDS[kind][1]
    return (
        f"Please create a {label} with the following details:\n\n"
        f"Client Name: {client_name}\n"
        f"Client CIF: {client_cif}\n"
        f"Product: {product_name}\n"
        f"Price: {product_price}\n"
        f"Quantity: {quantity}\n\n"
        f'You can use the create_document tool with the type "{kind}" to create the {label}. '
        "Make sure to include all required fields."
    )


def document_action_message(action: DocumentAction, kind: str, series_name: str, number: str) -> str:
    label = _KINDS[kind][1]
    if action == "get":
        return (
            f'Please retrieve the document with type "{kind}", series "{series_name}" '
            f'and number "{number}".\n\n'
            f"You can use the get_document tool to fetch the {label} details."
        )
    text = (
        f'Please {action} the {label} with series "{series_name}" and number "{number}".\n\n'
        f'You can use the {action}_document tool with type "{kind}".'
    )
    if action == "delete":
        text += " Note: only the last document in a series can be deleted."
    return text


def nomenclature_message(kind: str, **filters: Optional[str]) -> str:
    if not filters:
        return (
            f"Please get the {kind} nomenclature for my company.\n"
            f'Use the get_nomenclatures tool with type "{kind}". No additional filters are needed.'
        )
    lines = []
    for key, value in filters.items():
        if value is None:
            value = "0" if key == "offset" else NOT_SPECIFIED
        lines.append(f"{key}: {value}")
    return (
        f"Please get the {kind} nomenclature with the following filters:\n\n"
        + "\n".join(lines)
        + f'\n\nUse the get_nomenclatures tool with type "{kind}". Pass name as the name '
        "argument and the remaining values as key/value pairs in the filters parameter."
    )


def collect_payment_message(
    invoice_series_name: str,
    invoice_number: str,
    payment_type: str,
    series_name: Optional[str] = None,
    document_number: Optional[str] = None,
    value: Optional[str] = None,
    mentions: Optional[str] = None,
) -> str:
    return (
        "Please collect the payment for the invoice with the following details:\n\n"
        f"Invoice series: {invoice_series_name}\n"
        f"Invoice number: {invoice_number}\n"
        f"Payment type: {payment_type}\n"
        f"Payment series: {series_name or NOT_SPECIFIED}\n"
        f"Document number: {document_number or NOT_SPECIFIED}\n"
        f"Value: {value or 'invoice total'}\n"
        f"Mentions: {mentions or '(none)'}\n\n"
        f"Use the collect_payment tool. Pass seriesName={invoice_series_name}, "
        f"number={invoice_number}, and the collect object with the payment details above."
    )


def invoice_list_message(**filters: Optional[str]) -> str:
    lines = [f"{key}: {value}" for key, value in filters.items() if value is not None]
    body = "\n".join(lines) if lines else "(no filters)"
    return (
        f"Please get the list of invoices with the following filters:\n\n{body}\n\n"
        'Use the list_documents tool with type "invoice". For client filters (clientCif, '
        'clientName, clientCode), nest them under a "client" object in filters, e.g. '
        '{ client: { cif: "..." } }.\n\n'
        "When returning results, indicate for each invoice whether it is paid or unpaid by "
        'checking the "collected" field (0 = unpaid).'
    )


def _register_kind_prompts(prompt: PromptDecorator, kind: str) -> None:
    suffix, label, example_series = _KINDS[kind]

    @prompt(
        f"create{suffix}",
        f"Create a {label} in Oblio with client details, a product, price and quantity.",
    )
    def _create(
        clientName: str, clientCif: str, productName: str, productPrice: str, quantity: str
    ) -> str:
        return create_document_message(
            kind, clientName, clientCif, productName, productPrice, quantity
        )

    def _action_prompt(action: DocumentAction) -> Callable[[str, str], str]:
        def _prompt(seriesName: str, number: str) -> str:
            return document_action_message(action, kind, seriesName, number)

        return _prompt

    for action, description in _ACTION_DESCRIPTIONS.items():
        prompt(f"{action}{suffix}", description.format(label=label, series=example_series))(
            _action_prompt(action)
        )


def _nomenclature_prompt(kind: str) -> Callable[[], str]:
    def _prompt() -> str:
        return nomenclature_message(kind)

    return _prompt


def register(server: FastMCP) -> list[str]:
    """Register every prompt on the MCP server and return their names."""

    names: list[str] = []

    def prompt(name: str, description: str):
        names.append(name)
        return server.prompt(name=name, description=description)

    for kind in _KINDS:
        _register_kind_prompts(prompt, kind)

    @prompt(
        "getProductsNomenclature",
        "Look up products/services in the Oblio nomenclature by name or code.",
    )
    def get_products_nomenclature(
        name: str | None = None,
        code: str | None = None,
        management: str | None = None,
        workStation: str | None = None,
        offset: str | None = None,
    ) -> str:
        return nomenclature_message(
            "products",
            name=name,
            code=code,
            management=management,
            workStation=workStation,
            offset=offset,
        )

    @prompt("getClientsNomenclature", "Look up clients in the Oblio nomenclature by name or CIF.")
    def get_clients_nomenclature(
        name: str | None = None, clientCif: str | None = None, offset: str | None = None
    ) -> str:
        return nomenclature_message("clients", name=name, clientCif=clientCif, offset=offset)

    for prompt_name, (kind, description) in _SIMPLE_NOMENCLATURES.items():
        prompt(prompt_name, description)(_nomenclature_prompt(kind))

    @prompt("collectPayment", "Record a payment against an existing invoice.")
    def collect_payment(
        invoiceSeriesName: str,
        invoiceNumber: str,
        type: str,
        seriesName: str | None = None,
        documentNumber: str | None = None,
        value: str | None = None,
        mentions: str | None = None,
    ) -> str:
        return collect_payment_message(
            invoiceSeriesName, invoiceNumber, type, seriesName, documentNumber, value, mentions
        )

    @prompt(
        "getInvoiceList",
        "Search and list invoices with filters (date range, client, status, etc.).",
    )
    def get_invoice_list(
        id: str | None = None,
        seriesName: str | None = None,
        number: str | None = None,
        issuedAfter: str | None = None,
        issuedBefore: str | None = None,
        clientCif: str | None = None,
        clientName: str | None = None,
        clientCode: str | None = None,
        draft: str | None = None,
        canceled: str | None = None,
        collected: str | None = None,
        withProducts: str | None = None,
        withCollects: str | None = None,
        withEinvoiceStatus: str | None = None,
        orderBy: str | None = None,
        orderDir: str | None = None,
        limitPerPage: str | None = None,
        offset: str | None = None,
    ) -> str:
        return invoice_list_message(
            id=id,
            seriesName=seriesName,
            number=number,
            issuedAfter=issuedAfter,
            issuedBefore=issuedBefore,
            clientCif=clientCif,
            clientName=clientName,
            clientCode=clientCode,
            draft=draft,
            canceled=canceled,
            collected=collected,
            withProducts=withProducts,
            withCollects=withCollects,
            withEinvoiceStatus=withEinvoiceStatus,
            orderBy=orderBy,
            orderDir=orderDir,
            limitPerPage=limitPerPage,
            offset=offset,
        )

    @prompt("sendInvoiceToSpv", "Submit an invoice to Romania's SPV system to create an e-Factura.")
    def send_invoice_to_spv(seriesName: str, number: str) -> str:
        return (
            f'Send invoice to SPV (e-Factura) with series "{seriesName}" and number "{number}".\n\n'
            "Use the create_einvoice tool."
        )

    @prompt("getEinvoiceFromSpv", "Download the e-Invoice archive from SPV for a specific invoice.")
    def get_einvoice_from_spv(seriesName: str, number: str) -> str:
        return (
            f'Get the e-Invoice archive from SPV for series "{seriesName}" and number "{number}".\n\n'
            "Use the get_einvoice_archive tool."
        )

    @prompt("setCif", "Configure the company CIF (tax ID) for all subsequent API requests.")
    def set_cif(cif: str) -> str:
        return f'Set the company CIF to "{cif}".\n\nUse the set_cif tool.'

    @prompt("getCif", "Check which company CIF is currently configured.")
    def get_cif() -> str:
        return "Get the currently configured company CIF.\n\nUse the get_cif tool."

    return names


__all__ = [
    "collect_payment_message",
    "create_document_message",
    "document_action_message",
    "invoice_list_message",
    "nomenclature_message",
    "register",
]
