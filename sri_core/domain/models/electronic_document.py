# sri_core/domain/models/electronic_document.py
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Dict, Optional, Tuple, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer


class DocumentType(str, Enum):
    """Tipos de comprobante soportados, indexados por el `codDoc` del SRI."""
    INVOICE = "01"
    PURCHASE_SETTLEMENT = "03"
    CREDIT_NOTE = "04"
    DEBIT_NOTE = "05"
    DELIVERY_GUIDE = "06"
    WITHHOLDING = "07"

    @property
    def root_tag(self) -> str:
        return ROOT_TAGS[self]


ROOT_TAGS = {
    DocumentType.INVOICE: "factura",
    DocumentType.PURCHASE_SETTLEMENT: "liquidacionCompra",
    DocumentType.CREDIT_NOTE: "notaCredito",
    DocumentType.DEBIT_NOTE: "notaDebito",
    DocumentType.DELIVERY_GUIDE: "guiaRemision",
    DocumentType.WITHHOLDING: "comprobanteRetencion",
}


class Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# Diccionario de solo lectura; se serializa como dict normal
FrozenMapping = Annotated[
    Dict[str, str],
    AfterValidator(MappingProxyType),
    PlainSerializer(dict, return_type=Dict[str, str]),
]


class Severity(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"


class ValidationIssue(Frozen):
    severity: Severity
    message: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.severity.value}: {self.message} (línea {self.line}, columna {self.column})"


class AccessKey(Frozen):
    """
    Clave de acceso de 49 dígitos. El dígito verificador se expone tal cual
    viene en el comprobante; su cálculo no se verifica aquí.
    """
    value: str = Field(pattern=r"^[0-9]{49}$")

    @property
    def emission_date(self) -> date:
        return datetime.strptime(self.value[0:8], "%d%m%Y").date()

    @property
    def doc_code(self) -> str:
        return self.value[8:10]

    @property
    def ruc(self) -> str:
        return self.value[10:23]

    @property
    def environment(self) -> str:
        return self.value[23]

    @property
    def series(self) -> str:
        return self.value[24:30]

    @property
    def sequential(self) -> str:
        return self.value[30:39]

    @property
    def numeric_code(self) -> str:
        return self.value[39:47]

    @property
    def emission_type(self) -> str:
        return self.value[47]

    @property
    def check_digit(self) -> str:
        return self.value[48]

    def __str__(self) -> str:
        return self.value


class TaxHeader(Frozen):
    """Bloque `infoTributaria`, común a todos los comprobantes."""
    environment: str
    emission_type: str
    legal_name: str
    trade_name: str = ""
    ruc: str
    access_key: AccessKey
    doc_code: str
    establishment: str
    emission_point: str
    sequential: str
    head_office_address: str
    withholding_agent: Optional[str] = None
    rimpe_taxpayer: Optional[str] = None

    @property
    def document_number(self) -> str:
        return f"{self.establishment}-{self.emission_point}-{self.sequential}"


class Authorization(Frozen):
    number: Optional[str] = None
    authorized_at: Optional[str] = None
    status: Optional[str] = None


# --- Piezas compartidas por los cuerpos ---

class TaxTotal(Frozen):
    code: str
    percentage_code: str
    taxable_base: Decimal
    value: Decimal
    additional_discount: Decimal = Decimal("0.00")
    rate: Optional[Decimal] = None


class Payment(Frozen):
    method: str
    total: Decimal
    term: str = ""
    time_unit: str = ""


class LineTax(Frozen):
    code: str
    percentage_code: str
    rate: Decimal
    taxable_base: Decimal
    value: Decimal


class LineItem(Frozen):
    id: int
    main_code: str = ""
    auxiliary_code: str = ""
    description: str
    quantity: Decimal
    unit_price: Optional[Decimal] = None
    discount: Decimal = Decimal("0.00")
    total_without_tax: Optional[Decimal] = None
    additional_details: FrozenMapping = Field(default_factory=dict, validate_default=True)
    taxes: Tuple[LineTax, ...] = ()


# --- Cuerpos específicos por tipo ---

class InvoiceInfo(Frozen):
    emission_date: date
    establishment_address: str = ""
    special_taxpayer: str = ""
    accounting_required: str = ""
    buyer_id_type: str
    buyer_name: str
    buyer_id: str
    buyer_address: str = ""
    remission_guide: str = ""
    total_without_taxes: Decimal
    total_discount: Decimal
    total_taxes: Tuple[TaxTotal, ...] = ()
    tip: Decimal = Decimal("0.00")
    total_amount: Decimal
    currency: str = ""
    payments: Tuple[Payment, ...] = ()


class PurchaseSettlementInfo(Frozen):
    emission_date: date
    establishment_address: str = ""
    special_taxpayer: str = ""
    accounting_required: str = ""
    supplier_id_type: str
    supplier_name: str
    supplier_id: str
    supplier_address: str = ""
    total_without_taxes: Decimal
    total_discount: Decimal
    total_taxes: Tuple[TaxTotal, ...] = ()
    total_amount: Decimal
    currency: str = ""
    payments: Tuple[Payment, ...] = ()


class CreditNoteInfo(Frozen):
    emission_date: date
    establishment_address: str = ""
    buyer_id_type: str
    buyer_name: str
    buyer_id: str
    special_taxpayer: str = ""
    accounting_required: str = ""
    rise: str = ""
    modified_doc_code: str
    modified_doc_number: str
    support_doc_date: Optional[date] = None
    total_without_taxes: Decimal
    modification_value: Decimal
    currency: str = ""
    total_taxes: Tuple[TaxTotal, ...] = ()
    reason: str = ""


class DebitNoteReason(Frozen):
    reason: str
    value: Decimal


class DebitNoteInfo(Frozen):
    emission_date: date
    establishment_address: str = ""
    buyer_id_type: str
    buyer_name: str
    buyer_id: str
    special_taxpayer: str = ""
    accounting_required: str = ""
    rise: str = ""
    modified_doc_code: str
    modified_doc_number: str
    support_doc_date: Optional[date] = None
    total_without_taxes: Decimal
    taxes: Tuple[TaxTotal, ...] = ()
    total_value: Decimal
    payments: Tuple[Payment, ...] = ()
    reasons: Tuple[DebitNoteReason, ...] = ()


class Recipient(Frozen):
    """Destinatario de una guía de remisión, con sus propios ítems."""
    identification: str = ""
    name: str
    address: str
    transfer_reason: str
    customs_document: str = ""
    destination_establishment: str = ""
    route: str = ""
    support_doc_code: str = ""
    support_doc_number: str = ""
    support_doc_authorization: str = ""
    support_doc_date: Optional[date] = None
    details: Tuple[LineItem, ...] = ()


class DeliveryGuideInfo(Frozen):
    establishment_address: str = ""
    departure_address: str
    carrier_name: str
    carrier_id_type: str
    carrier_ruc: str
    rise: str = ""
    accounting_required: str = ""
    special_taxpayer: str = ""
    transport_start: date
    transport_end: date
    plate: str
    recipients: Tuple[Recipient, ...] = ()


class Withholding(Frozen):
    code: str
    withholding_code: str
    taxable_base: Decimal
    percentage: Decimal
    withheld_value: Decimal
    support_doc_code: str = ""
    support_doc_number: str = ""
    support_doc_date: Optional[date] = None


class SupportDocumentTax(Frozen):
    code: str
    percentage_code: str
    taxable_base: Decimal
    rate: Decimal
    value: Decimal


class SupportDocument(Frozen):
    """`docSustento` de un comprobante de retención versión 2.0.0."""
    support_code: str
    doc_code: str
    doc_number: str
    emission_date: date
    accounting_date: Optional[date] = None
    authorization_number: str = ""
    local_or_foreign_payment: str
    total_without_taxes: Decimal
    total_amount: Decimal
    taxes: Tuple[SupportDocumentTax, ...] = ()
    withholdings: Tuple[Withholding, ...] = ()
    payments: Tuple[Payment, ...] = ()


class WithholdingInfo(Frozen):
    emission_date: date
    establishment_address: str = ""
    special_taxpayer: str = ""
    accounting_required: str = ""
    subject_id_type: str
    subject_type: str = ""
    related_party: str = ""
    subject_name: str
    subject_id: str
    fiscal_period: str
    withholdings: Tuple[Withholding, ...] = ()
    support_documents: Tuple[SupportDocument, ...] = ()


DocumentBody = Union[
    InvoiceInfo,
    PurchaseSettlementInfo,
    CreditNoteInfo,
    DebitNoteInfo,
    DeliveryGuideInfo,
    WithholdingInfo,
]


class ElectronicDocument(Frozen):
    """
    Comprobante electrónico completamente parseado y validado. Solo lo
    construye `DocumentBuilder.build()` al final del pipeline.
    """
    document_type: DocumentType
    version: str
    header: TaxHeader
    emission_date: date
    body: DocumentBody
    details: Tuple[LineItem, ...] = ()
    additional_info: FrozenMapping = Field(default_factory=dict, validate_default=True)
    authorization: Optional[Authorization] = None

    @property
    def access_key(self) -> str:
        return self.header.access_key.value


class ParseOutcome(Frozen):
    success: bool
    document: Optional[ElectronicDocument] = None
    error_message: str = ""
    error_code: Optional[str] = None
    issues: Tuple[ValidationIssue, ...] = ()
