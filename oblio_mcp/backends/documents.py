"""MCP backend for Oblio documents, nomenclatures, payments and SPV."""
from __future__ import annotations

from typing import Annotated, Any, Dict

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..api.dispatcher import ToolDispatcher, ToolEntry
from ..api.envelopes import render_envelope
from .oblio_client import OblioClient
from .oblio_models import (
    BoolFlag,
    Collect,
    CollectPaymentArgs,
    CreateDocumentArgs,
    DeleteDocumentArgs,
    DocumentData,
    DocumentKind,
    DocumentRefArgs,
    EinvoiceArgs,
    ListDocumentsArgs,
    ListFilters,
    NoArgs,
    NomenclatureArgs,
    NomenclatureFilters,
    NomenclatureKind,
    SetCifArgs,
)

SeriesName = Annotated[str, Field(description='Document series name, e.g. "FCT", "PR"')]
DocumentNumber = Annotated[int, Field(description="Document number within the series")]


def _hints(*, read_only: bool, destructive: bool = False, idempotent: bool, open_world: bool = True):
    return ToolAnnotations(
        readOnlyHint=read_only,
        destructiveHint=destructive,
        idempotentHint=idempotent,
        openWorldHint=open_world,
    )


def create_document_impl(client: OblioClient, args: CreateDocumentArgs) -> Dict[str, Any]:
    return client.create_document(args.type, args.data.to_payload())


def get_document_impl(client: OblioClient, args: DocumentRefArgs) -> Dict[str, Any]:
    return client.get_document(args.type, args.series_name, args.number)


def delete_document_impl(client: OblioClient, args: DeleteDocumentArgs) -> Dict[str, Any]:
    return client.delete_document(
        args.type,
        args.series_name,
        args.number,
        delete_collect=args.delete_collect,
        idempotency_key=args.idempotency_key,
    )


def cancel_document_impl(client: OblioClient, args: DocumentRefArgs) -> Dict[str, Any]:
    return client.cancel_or_restore(args.type, args.series_name, args.number, cancel=True)


def restore_document_impl(client: OblioClient, args: DocumentRefArgs) -> Dict[str, Any]:
    return client.cancel_or_restore(args.type, args.series_name, args.number, cancel=False)


def list_documents_impl(client: OblioClient, args: ListDocumentsArgs) -> Dict[str, Any]:
    return client.list_documents(args.type, args.filters.to_payload())


def get_nomenclatures_impl(client: OblioClient, args: NomenclatureArgs) -> Dict[str, Any]:
    filters = args.filters.to_payload() if args.filters is not None else None
    return client.lookup_nomenclature(args.type, args.name, filters)


def collect_payment_impl(client: OblioClient, args: CollectPaymentArgs) -> Dict[str, Any]:
    return client.collect_payment(args.series_name, args.number, args.collect.to_payload())


def create_einvoice_impl(client: OblioClient, args: EinvoiceArgs) -> Dict[str, Any]:
    return client.submit_einvoice(args.series_name, args.number)


def get_einvoice_archive_impl(client: OblioClient, args: EinvoiceArgs) -> Dict[str, Any]:
    return client.fetch_einvoice_archive(args.series_name, args.number)


def set_cif_impl(client: OblioClient, args: SetCifArgs) -> str:
    client.set_cif(args.cif)
    return f"CIF has been updated to {client.get_cif()}"


def get_cif_impl(client: OblioClient, args: NoArgs) -> str:
    cif = client.get_cif()
    if not cif:
        return "No company CIF is configured. Use set_cif to select one."
    return f"Current company CIF is: {cif}"


TOOL_ENTRIES: tuple[ToolEntry, ...] = (
    ToolEntry(
        name="create_document",
        title="Create Document",
        description=(
            "Create an invoice, proforma or delivery notice (aviz) in Oblio. "
            "Required: cif, client.name, seriesName, issueDate and at least one product line. "
            "Product lines need name, price and measuringUnit; discount lines need name and "
            "discount and apply to the products above them. Optional: inline payment (collect), "
            "referenceDocument to convert a proforma/notice or reverse an invoice, useStock, "
            "spvExtern for automatic e-Factura submission, idempotencyKey. "
            "Returns seriesName, number and a link to view/download the document."
        ),
        schema=CreateDocumentArgs,
        handler=create_document_impl,
        error_prefix="Error creating document",
        writes=True,
        annotations=_hints(read_only=False, idempotent=False),
    ),
    ToolEntry(
        name="get_document",
        title="Get Document",
        description=(
            "Fetch one document by type, seriesName and number. Returns documentType, "
            "seriesName, number, link and the collects (payments) recorded on it."
        ),
        schema=DocumentRefArgs,
        handler=get_document_impl,
        error_prefix="Error getting document",
        annotations=_hints(read_only=True, idempotent=True),
    ),
    ToolEntry(
        name="delete_document",
        title="Delete Document",
        description=(
            "Permanently delete a document. Oblio only allows deleting the last document "
            "of a series; this cannot be undone. deleteCollect=1 also removes the "
            "associated payment (invoices only)."
        ),
        schema=DeleteDocumentArgs,
        handler=delete_document_impl,
        error_prefix="Error deleting document",
        writes=True,
        annotations=_hints(read_only=False, destructive=True, idempotent=False),
    ),
    ToolEntry(
        name="cancel_document",
        title="Cancel Document",
        description=(
            "Cancel (annul) a document. It is marked as void but stays in Oblio. "
            "Returns documentType, seriesName, number and link."
        ),
        schema=DocumentRefArgs,
        handler=cancel_document_impl,
        error_prefix="Error cancelling document",
        writes=True,
        annotations=_hints(read_only=False, idempotent=True),
    ),
    ToolEntry(
        name="restore_document",
        title="Restore Document",
        description=(
            "Restore a previously cancelled document, making it active again. "
            "Returns documentType, seriesName, number and link."
        ),
        schema=DocumentRefArgs,
        handler=restore_document_impl,
        error_prefix="Error restoring document",
        writes=True,
        annotations=_hints(read_only=False, idempotent=True),
    ),
    ToolEntry(
        name="get_nomenclatures",
        title="Get Nomenclatures",
        description=(
            "Fetch reference data: companies, clients (filter by name, clientCif), products "
            "(filter by name, code, management, workStation), vat_rates, series, languages, "
            "management (stock locations). At most 250 results per page; page with "
            "filters.offset (0, 250, 500...)."
        ),
        schema=NomenclatureArgs,
        handler=get_nomenclatures_impl,
        error_prefix="Error getting nomenclatures",
        annotations=_hints(read_only=True, idempotent=True),
    ),
    ToolEntry(
        name="collect_payment",
        title="Collect Payment",
        description=(
            "Record a payment (incasare) on an existing invoice identified by seriesName and "
            "number. collect.type is one of: Chitanta, Bon fiscal, Bon fiscal card, Alta "
            "incasare numerar, Ordin de plata, Mandat postal, Card, CEC, Bilet ordin, Alta "
            "incasare banca, Ramburs. Chitanta needs collect.seriesName, every other type "
            "needs collect.documentNumber. value defaults to the invoice total, issueDate "
            "to today. Returns the invoice with all its collects."
        ),
        schema=CollectPaymentArgs,
        handler=collect_payment_impl,
        error_prefix="Error collecting payment",
        writes=True,
        annotations=_hints(read_only=False, idempotent=False),
    ),
    ToolEntry(
        name="list_documents",
        title="List Documents",
        description=(
            "List documents of one type with filters and pagination (max 100 per page, "
            "page with filters.offset). Results include id, draft, canceled, seriesName, "
            "number, issueDate, dueDate, currency, total, collected (0 unpaid, 1 paid), link, "
            "einvoiceStatus and client. withProducts, withCollects and withEinvoiceStatus "
            "add product lines, payments and SPV status."
        ),
        schema=ListDocumentsArgs,
        handler=list_documents_impl,
        error_prefix="Error listing documents",
        annotations=_hints(read_only=True, idempotent=True),
    ),
    ToolEntry(
        name="create_einvoice",
        title="Send e-Invoice to SPV",
        description=(
            "Submit an existing invoice to Romania's SPV (e-Factura). Returns text, sent and "
            "code (-1 not sent, 0 processing, 1 success, 2 errors)."
        ),
        schema=EinvoiceArgs,
        handler=create_einvoice_impl,
        error_prefix="Error sending e-invoice to SPV",
        writes=True,
        annotations=_hints(read_only=False, idempotent=False),
    ),
    ToolEntry(
        name="get_einvoice_archive",
        title="Get e-Invoice Archive from SPV",
        description=(
            "Download the SPV archive of an invoice that was already submitted as e-Factura."
        ),
        schema=EinvoiceArgs,
        handler=get_einvoice_archive_impl,
        error_prefix="Error getting e-invoice archive",
        annotations=_hints(read_only=True, idempotent=True),
    ),
    ToolEntry(
        name="set_cif",
        title="Set Company CIF",
        description=(
            "Set the company CIF (tax ID, e.g. RO37311090) used by every following Oblio "
            "request. Call it first when the CIF variable is not configured."
        ),
        schema=SetCifArgs,
        handler=set_cif_impl,
        error_prefix="Error setting CIF",
        annotations=_hints(read_only=False, idempotent=True, open_world=False),
    ),
    ToolEntry(
        name="get_cif",
        title="Get Company CIF",
        description="Return the company CIF currently used for Oblio requests.",
        schema=NoArgs,
        handler=get_cif_impl,
        error_prefix="Error getting CIF",
        annotations=_hints(read_only=True, idempotent=True, open_world=False),
    ),
)


def register_entries(dispatcher: ToolDispatcher) -> None:
    for entry in TOOL_ENTRIES:
        dispatcher.register(entry)


def register(server: FastMCP, dispatcher: ToolDispatcher) -> None:
    """Register Oblio tools on the MCP server.

    Every tool forwards its arguments to the dispatcher, which validates them
    and produces the response envelope.
    """

    def tool(name: str):
        entry = dispatcher.get(name)
        return server.tool(
            name=name,
            title=entry.title,
            description=entry.description,
            annotations=entry.annotations,
        )

    def call(name: str, **arguments: Any) -> str:
        present = {key: value for key, value in arguments.items() if value is not None}
        return render_envelope(dispatcher.dispatch(name, present))

    @tool("create_document")
    def create_document(type: DocumentKind, data: DocumentData) -> str:
        return call("create_document", type=type, data=data)

    @tool("get_document")
    def get_document(type: DocumentKind, seriesName: SeriesName, number: DocumentNumber) -> str:
        return call("get_document", type=type, seriesName=seriesName, number=number)

    @tool("delete_document")
    def delete_document(
        type: DocumentKind,
        seriesName: SeriesName,
        number: DocumentNumber,
        deleteCollect: BoolFlag | None = None,
        idempotencyKey: str | None = None,
    ) -> str:
        return call(
            "delete_document",
            type=type,
            seriesName=seriesName,
            number=number,
            deleteCollect=deleteCollect,
            idempotencyKey=idempotencyKey,
        )

    @tool("cancel_document")
    def cancel_document(type: DocumentKind, seriesName: SeriesName, number: DocumentNumber) -> str:
        return call("cancel_document", type=type, seriesName=seriesName, number=number)

    @tool("restore_document")
    def restore_document(type: DocumentKind, seriesName: SeriesName, number: DocumentNumber) -> str:
        return call("restore_document", type=type, seriesName=seriesName, number=number)

    @tool("get_nomenclatures")
    def get_nomenclatures(
        type: NomenclatureKind,
        name: str | None = None,
        filters: NomenclatureFilters | None = None,
    ) -> str:
        return call("get_nomenclatures", type=type, name=name, filters=filters)

    @tool("collect_payment")
    def collect_payment(seriesName: SeriesName, number: DocumentNumber, collect: Collect) -> str:
        return call("collect_payment", seriesName=seriesName, number=number, collect=collect)

    @tool("list_documents")
    def list_documents(type: DocumentKind, filters: ListFilters | None = None) -> str:
        return call("list_documents", type=type, filters=filters)

    @tool("create_einvoice")
    def create_einvoice(seriesName: SeriesName, number: DocumentNumber) -> str:
        return call("create_einvoice", seriesName=seriesName, number=number)

    @tool("get_einvoice_archive")
    def get_einvoice_archive(seriesName: SeriesName, number: DocumentNumber) -> str:
        return call("get_einvoice_archive", seriesName=seriesName, number=number)

    @tool("set_cif")
    def set_cif(cif: Annotated[str, Field(description="Company CIF, e.g. RO37311090")]) -> str:
        return call("set_cif", cif=cif)

    @tool("get_cif")
    def get_cif() -> str:
        return call("get_cif")


__all__ = [
    "TOOL_ENTRIES",
    "register",
    "register_entries",
]
