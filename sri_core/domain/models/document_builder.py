# sri_core/domain/models/document_builder.py
from datetime import date
from typing import Dict, List, Optional

from sri_core.domain.models.electronic_document import (
    Authorization,
    DocumentBody,
    DocumentType,
    ElectronicDocument,
    LineItem,
    TaxHeader,
)
from sri_core.domain.models.errors import FieldParseError


class DocumentBuilder:
    """
    Acumula las secciones de un comprobante mientras corre el pipeline.
    Cada sub-parser escribe solo su sección; el documento inmutable se
    obtiene únicamente con `build()`.
    """

    def __init__(self, document_type: DocumentType, version: str):
        self.document_type = document_type
        self.version = version
        self.header: Optional[TaxHeader] = None
        self.body: Optional[DocumentBody] = None
        self.emission_date: Optional[date] = None
        self.details: List[LineItem] = []
        self.additional_info: Dict[str, str] = {}
        self.authorization: Optional[Authorization] = None

    def set_header(self, header: TaxHeader):
        self.header = header

    def set_body(self, body: DocumentBody, emission_date: Optional[date] = None):
        self.body = body
        if emission_date is not None:
            self.emission_date = emission_date

    def add_details(self, items: List[LineItem]):
        self.details.extend(items)

    def set_additional_info(self, fields: Dict[str, str]):
        self.additional_info = dict(fields)

    def next_detail_id(self) -> int:
        return len(self.details)

    def build(self) -> ElectronicDocument:
        if self.header is None:
            raise FieldParseError("infoTributaria", "el bloque tributario no fue procesado")
        if self.body is None:
            raise FieldParseError(self.document_type.root_tag, "el cuerpo del comprobante no fue procesado")

        # La guía de remisión no trae fechaEmision: se toma de la clave de acceso
        emission_date = self.emission_date or self.header.access_key.emission_date

        return ElectronicDocument(
            document_type=self.document_type,
            version=self.version,
            header=self.header,
            emission_date=emission_date,
            body=self.body,
            details=list(self.details),
            additional_info=dict(self.additional_info),
            authorization=self.authorization,
        )
