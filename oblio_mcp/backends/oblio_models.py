"""Pydantic models describing the arguments accepted by each Oblio tool."""
from __future__ import annotations

from datetime import date
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

DocumentKind = Literal["invoice", "proforma", "notice"]
NomenclatureKind = Literal[
    "products",
    "companies",
    "clients",
    "vat_rates",
    "series",
    "languages",
    "management",
]
PaymentType = Literal[
    "Chitanta",
    "Bon fiscal",
    "Bon fiscal card",
    "Alta incasare numerar",
    "Ordin de plata",
    "Mandat postal",
    "Card",
    "CEC",
    "Bilet ordin",
    "Alta incasare banca",
    "Ramburs",
]
ProductType = Literal[
    "Marfa",
    "Materii prime",
    "Materiale consumabile",
    "Semifabricate",
    "Produs finit",
    "Produs rezidual",
    "Produse agricole",
    "Animale si pasari",
    "Ambalaje",
    "Obiecte de inventar",
    "Serviciu",
]
ReferenceDocumentType = Literal["Factura", "Proforma", "Aviz"]

RECEIPT_PAYMENT_TYPE = "Chitanta"
MAX_LIST_PAGE_SIZE = 100


def _strict_flag(allowed: tuple[int, ...]):
    def _validate(value: Any) -> Any:
        # bool is an int subclass; True/False must not pass as 1/0
        if type(value) is not int or value not in allowed:
            raise ValueError(f"must be one of {', '.join(str(v) for v in allowed)}")
        return value

    return _validate


BoolFlag = Annotated[Literal[0, 1], BeforeValidator(_strict_flag((0, 1)))]
TriStateFlag = Annotated[Literal[-1, 0, 1], BeforeValidator(_strict_flag((-1, 0, 1)))]


class OblioModel(BaseModel):
    """Base model: camelCase on the wire, unknown keys rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="forbid",
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the Oblio API; absent optional fields are dropped."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Client(OblioModel):
    name: str = Field(min_length=1, description="Client company name or person name")
    cif: str | None = Field(default=None, description="Client CIF or CNP (for individuals)")
    rc: str | None = Field(default=None, description="Trade Register number (Registru Comert)")
    code: str | None = Field(default=None, description="Internal client code")
    address: str | None = None
    state: str | None = Field(default=None, description="County (Judet)")
    city: str | None = None
    country: str | None = None
    iban: str | None = None
    bank: str | None = None
    email: str | None = None
    phone: str | None = None
    contact: str | None = Field(default=None, description="Contact person name")
    vat_payer: BoolFlag | None = Field(default=None, description="1 if client is a VAT payer")
    save: BoolFlag | None = Field(
        default=None, description="1 to update client data in Oblio, 0 to keep existing"
    )
    autocomplete: BoolFlag | None = Field(
        default=None, description="1 to auto-fill client data from Romanian registries using CIF"
    )


class ProductLine(OblioModel):
    """A product or service line."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1, description="Product or service name")
    price: Union[str, float] = Field(description="Unit price")
    measuring_unit: str = Field(description='Unit of measure, e.g. "buc", "kg", "ora"')
    code: str | None = Field(default=None, description="Product code / SKU")
    description: str | None = None
    currency: str | None = Field(default=None, description="Product-level currency override")
    exchange_rate: float | None = None
    vat_name: str | None = Field(
        default=None, description='VAT rate name from nomenclature, e.g. "Normala"'
    )
    vat_percentage: float | None = Field(default=None, description="VAT percentage, e.g. 19")
    vat_included: BoolFlag | None = Field(default=None, description="1 if price includes VAT")
    quantity: float | None = None
    management: str | None = Field(
        default=None, description="Stock management location (gestiune)"
    )
    name_translation: str | None = None
    measuring_unit_translation: str | None = None
    save: BoolFlag | None = Field(default=None, description="1 to save the list price in Oblio")
    product_type: ProductType | None = None


class DiscountLine(OblioModel):
    """A discount applied relative to the preceding product lines."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1, description="Discount label shown on the document")
    discount: float = Field(description="Discount value")
    discount_type: Literal["procentual", "valoric"] | None = Field(
        default=None, description='"procentual" for percentage, "valoric" for a fixed amount'
    )
    discount_all_above: BoolFlag | None = Field(
        default=None,
        description="1 to apply to all preceding undiscounted products, 0 for the product directly above",
    )


# Product is tried first; keys outside the matched variant are dropped.
LineItem = Annotated[Union[ProductLine, DiscountLine], Field(union_mode="left_to_right")]


class Collect(OblioModel):
    """A payment collection (incasare)."""

    type: PaymentType = Field(description="Payment method")
    series_name: str | None = Field(
        default=None, description="Receipt series name (required when type is Chitanta)"
    )
    document_number: str | None = Field(
        default=None, description="Payment document number (required when type is not Chitanta)"
    )
    value: float | None = Field(
        default=None, description="Amount paid; the remote service uses the document total when omitted"
    )
    issue_date: date | None = Field(default=None, description="Payment date (YYYY-MM-DD)")
    mentions: str | None = None

    @model_validator(mode="after")
    def _require_method_fields(self) -> "Collect":
        if self.type == RECEIPT_PAYMENT_TYPE:
            if not self.series_name:
                raise ValueError("seriesName is required when type is Chitanta")
        elif not self.document_number:
            raise ValueError(f"documentNumber is required when type is {self.type}")
        return self


class ReferenceDocument(OblioModel):
    type: ReferenceDocumentType
    series_name: str
    number: int
    refund: BoolFlag = Field(
        description="1 to refund/reverse the associated payment (type Factura only)"
    )


class DocumentData(OblioModel):
    """Payload for creating an invoice, proforma or notice."""

    cif: str | None = Field(
        default=None,
        min_length=1,
        description="Issuing company CIF, e.g. RO37311090; defaults to the CIF selected with set_cif",
    )
    client: Client
    issue_date: date = Field(description="Issue date (YYYY-MM-DD)")
    series_name: str = Field(
        min_length=1, description="Document series; list them with get_nomenclatures type 'series'"
    )
    products: list[LineItem] = Field(
        min_length=1, description="Products/services and optional discount lines, in order"
    )
    due_date: date | None = None
    delivery_date: date | None = None
    collect_date: date | None = None
    disable_auto_series: BoolFlag | None = None
    number: int | None = Field(
        default=None, description="Manual document number; only with disableAutoSeries=1"
    )
    collect: Collect | None = None
    reference_document: ReferenceDocument | None = None
    language: str | None = Field(default=None, description='Document language, e.g. "RO", "EN"')
    precision: int | None = Field(default=None, ge=2, le=4)
    currency: str | None = Field(default=None, description='Currency code, e.g. "RON", "EUR"')
    exchange_rate: float | None = None
    issuer_name: str | None = None
    issuer_id: str | None = None
    notice_number: str | None = None
    internal_note: str | None = None
    deputy_name: str | None = None
    deputy_identity_card: str | None = None
    deputy_auto: str | None = None
    seles_agent: str | None = Field(default=None, description="Sales agent name")
    mentions: str | None = None
    work_station: str | None = None
    send_email: BoolFlag | None = None
    order_number: str | None = None
    contract_number: str | None = None
    reception_notice: str | None = None
    project_number: str | None = None
    buyer_identifier: str | None = None
    client_account_reference: str | None = None
    use_stock: BoolFlag | None = Field(
        default=None, description="1 to deduct stock (invoices and notices, stock enabled)"
    )
    spv_extern: BoolFlag | None = Field(
        default=None, description="1 to send the invoice to SPV automatically"
    )
    idempotency_key: str | None = None

    @model_validator(mode="after")
    def _manual_number_requires_disabled_series(self) -> "DocumentData":
        if self.number is not None and self.disable_auto_series != 1:
            raise ValueError("number can only be set when disableAutoSeries is 1")
        return self


class ClientFilter(OblioModel):
    cif: str | None = None
    name: str | None = None
    code: str | None = None
    email: str | None = None
    phone: str | None = None


class ListFilters(OblioModel):
    id: str | None = None
    series_name: str | None = None
    number: str | None = None
    issued_after: date | None = None
    issued_before: date | None = None
    client: ClientFilter | None = None
    draft: TriStateFlag | None = None
    canceled: TriStateFlag | None = None
    collected: TriStateFlag | None = None
    with_products: BoolFlag | None = None
    with_collects: BoolFlag | None = None
    with_einvoice_status: BoolFlag | None = None
    order_by: Literal["id", "issueDate", "number"] | None = None
    order_dir: Literal["ASC", "DESC"] | None = None
    limit_per_page: int | None = Field(default=None, ge=1, le=MAX_LIST_PAGE_SIZE)
    offset: int | None = Field(default=None, ge=0)


class NomenclatureFilters(OblioModel):
    client_cif: str | None = None
    code: str | None = None
    management: str | None = None
    work_station: str | None = None
    offset: int | None = Field(default=None, ge=0)


# Tool argument models


class CreateDocumentArgs(OblioModel):
    type: DocumentKind
    data: DocumentData


class DocumentRefArgs(OblioModel):
    type: DocumentKind
    series_name: str = Field(min_length=1)
    number: int


class DeleteDocumentArgs(DocumentRefArgs):
    delete_collect: BoolFlag | None = None
    idempotency_key: str | None = None


class ListDocumentsArgs(OblioModel):
    type: DocumentKind
    filters: ListFilters = Field(default_factory=ListFilters)


class NomenclatureArgs(OblioModel):
    type: NomenclatureKind
    name: str | None = None
    filters: NomenclatureFilters | None = None


class CollectPaymentArgs(OblioModel):
    series_name: str = Field(min_length=1)
    number: int
    collect: Collect


class EinvoiceArgs(OblioModel):
    series_name: str = Field(min_length=1)
    number: int


class SetCifArgs(OblioModel):
    cif: str = Field(min_length=1)


class NoArgs(OblioModel):
    pass


def format_validation_error(exc: ValidationError) -> str:
    """Render pydantic errors as ``field.path: message`` lines."""

    lines = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(part) for part in error["loc"]) or "arguments"
        lines.append(f"{location}: {error['msg']}")
    return "; ".join(lines)


__all__ = [
    "BoolFlag",
    "Client",
    "Collect",
    "CollectPaymentArgs",
    "CreateDocumentArgs",
    "DeleteDocumentArgs",
    "DiscountLine",
    "DocumentData",
    "DocumentKind",
    "DocumentRefArgs",
    "EinvoiceArgs",
    "LineItem",
    "ListDocumentsArgs",
    "ListFilters",
    "NoArgs",
    "NomenclatureArgs",
    "NomenclatureFilters",
    "NomenclatureKind",
    "PaymentType",
    "ProductLine",
    "SetCifArgs",
    "TriStateFlag",
    "format_validation_error",
]
