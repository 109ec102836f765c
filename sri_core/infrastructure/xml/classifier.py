# sri_core/infrastructure/xml/classifier.py
from typing import Callable, Dict

from lxml import etree

from sri_core.domain.models.document_builder import DocumentBuilder
from sri_core.domain.models.electronic_document import DocumentType
from sri_core.domain.models.errors import UnsupportedDocumentTypeError
from sri_core.infrastructure.xml.document_parsers import (
    parse_credit_note,
    parse_debit_note,
    parse_delivery_guide,
    parse_invoice,
    parse_purchase_settlement,
    parse_withholding,
)

DocumentParser = Callable[[etree._Element, DocumentBuilder], None]

# Un tipo nuevo se agrega con una entrada aquí (y su esquema en schema_validator)
DOCUMENT_PARSERS: Dict[DocumentType, DocumentParser] = {
    DocumentType.INVOICE: parse_invoice,
    DocumentType.PURCHASE_SETTLEMENT: parse_purchase_settlement,
    DocumentType.CREDIT_NOTE: parse_credit_note,
    DocumentType.DEBIT_NOTE: parse_debit_note,
    DocumentType.DELIVERY_GUIDE: parse_delivery_guide,
    DocumentType.WITHHOLDING: parse_withholding,
}


def classify(root: etree._Element) -> DocumentType:
    """
    Determina el tipo de comprobante a partir de `infoTributaria/codDoc`.
    Un código desconocido, ausente o que no corresponde al elemento raíz
    es un error explícito: nunca se adivina el tipo.
    """
    raw_code = root.findtext("infoTributaria/codDoc")
    doc_code = raw_code.strip() if raw_code else None
    if not doc_code:
        raise UnsupportedDocumentTypeError(None, "El comprobante no declara codDoc en infoTributaria")

    try:
        document_type = DocumentType(doc_code)
    except ValueError:
        raise UnsupportedDocumentTypeError(doc_code)

    if document_type not in DOCUMENT_PARSERS:
        raise UnsupportedDocumentTypeError(doc_code)

    if document_type.root_tag != root.tag:
        raise UnsupportedDocumentTypeError(
            doc_code,
            f"codDoc {doc_code} corresponde a '{document_type.root_tag}', pero el comprobante es '{root.tag}'",
        )
    return document_type


def parser_for(document_type: DocumentType) -> DocumentParser:
    try:
        return DOCUMENT_PARSERS[document_type]
    except KeyError:
        raise UnsupportedDocumentTypeError(document_type.value)
