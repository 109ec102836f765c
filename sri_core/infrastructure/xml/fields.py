# sri_core/infrastructure/xml/fields.py
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Type, TypeVar

from lxml import etree
from pydantic import BaseModel, ValidationError

from sri_core.domain.models.document_builder import DocumentBuilder
from sri_core.domain.models.electronic_document import (
    AccessKey,
    LineItem,
    LineTax,
    Payment,
    TaxHeader,
    TaxTotal,
)
from sri_core.domain.models.errors import FieldParseError

M = TypeVar("M", bound=BaseModel)

SRI_DATE_FORMAT = "%d/%m/%Y"

# Factura y liquidación usan codigoPrincipal/codigoAuxiliar; el resto codigoInterno/codigoAdicional
PRINCIPAL_CODE_DOCS = {"01", "03"}

ACCESS_KEY_PATTERN = re.compile(r"[0-9]{49}")


# --- Helpers de lectura ---

def node_path(node: etree._Element, tag: Optional[str] = None) -> str:
    path = node.getroottree().getpath(node)
    return f"{path}/{tag}" if tag else path


def find_text(node: etree._Element, tag: str, default: Optional[str] = None) -> Optional[str]:
    element = node.find(tag)
    if element is None or element.text is None:
        return default
    return element.text.strip()


def required_text(node: etree._Element, tag: str) -> str:
    value = find_text(node, tag)
    if not value:
        raise FieldParseError(node_path(node, tag), "campo requerido ausente")
    return value


def decimal_value(node: etree._Element, tag: str, default: Optional[Decimal] = None) -> Optional[Decimal]:
    raw = find_text(node, tag)
    if raw is None or raw == "":
        if default is None:
            raise FieldParseError(node_path(node, tag), "monto requerido ausente")
        return default
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise FieldParseError(node_path(node, tag), f"monto inválido '{raw}'")


def date_value(node: etree._Element, tag: str, required: bool = True) -> Optional[date]:
    raw = find_text(node, tag)
    if not raw:
        if required:
            raise FieldParseError(node_path(node, tag), "fecha requerida ausente")
        return None
    try:
        return datetime.strptime(raw, SRI_DATE_FORMAT).date()
    except ValueError:
        raise FieldParseError(node_path(node, tag), f"fecha inválida '{raw}', se esperaba dd/mm/aaaa")


def build_model(model: Type[M], node: etree._Element, **values) -> M:
    """Construye un modelo de dominio y traduce errores de pydantic a la ruta del nodo."""
    try:
        return model(**values)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise FieldParseError(node_path(node), f"{field}: {first.get('msg')}")


def children(node: Optional[etree._Element], tag: str) -> List[etree._Element]:
    if node is None:
        return []
    return node.findall(tag)


# --- infoTributaria ---

def parse_tax_header(node: etree._Element, builder: DocumentBuilder) -> TaxHeader:
    """
    Lee el bloque `infoTributaria` y lo registra en el builder. Verifica que la
    clave de acceso tenga 49 dígitos, una fecha real y que el tipo embebido
    coincida con `codDoc`.
    """
    if node is None:
        raise FieldParseError(f"/{builder.document_type.root_tag}/infoTributaria", "bloque tributario ausente")

    raw_key = required_text(node, "claveAcceso")
    if not ACCESS_KEY_PATTERN.fullmatch(raw_key):
        raise FieldParseError(node_path(node, "claveAcceso"), "la clave de acceso debe tener 49 dígitos")
    access_key = AccessKey(value=raw_key)
    # El XSD no valida la fecha embebida; la guía de remisión la usa como fecha de emisión
    try:
        access_key.emission_date
    except ValueError:
        raise FieldParseError(node_path(node, "claveAcceso"), "fecha inválida en la clave de acceso")

    doc_code = required_text(node, "codDoc")
    if access_key.doc_code != doc_code:
        raise FieldParseError(
            node_path(node, "claveAcceso"),
            f"el tipo de comprobante de la clave ({access_key.doc_code}) no coincide con codDoc ({doc_code})",
        )

    header = build_model(
        TaxHeader, node,
        environment=required_text(node, "ambiente"),
        emission_type=required_text(node, "tipoEmision"),
        legal_name=required_text(node, "razonSocial"),
        trade_name=find_text(node, "nombreComercial", ""),
        ruc=required_text(node, "ruc"),
        access_key=access_key,
        doc_code=doc_code,
        establishment=required_text(node, "estab"),
        emission_point=required_text(node, "ptoEmi"),
        sequential=required_text(node, "secuencial"),
        head_office_address=required_text(node, "dirMatriz"),
        withholding_agent=find_text(node, "agenteRetencion"),
        rimpe_taxpayer=find_text(node, "contribuyenteRimpe"),
    )
    builder.set_header(header)
    return header


# --- Totales, pagos e impuestos ---

def parse_total_taxes(node: Optional[etree._Element]) -> List[TaxTotal]:
    """`totalConImpuestos/totalImpuesto`"""
    return [
        build_model(
            TaxTotal, tax,
            code=required_text(tax, "codigo"),
            percentage_code=required_text(tax, "codigoPorcentaje"),
            additional_discount=decimal_value(tax, "descuentoAdicional", Decimal("0.00")),
            taxable_base=decimal_value(tax, "baseImponible"),
            rate=decimal_value(tax, "tarifa") if tax.find("tarifa") is not None else None,
            value=decimal_value(tax, "valor"),
        )
        for tax in children(node, "totalImpuesto")
    ]


def parse_tax_list(node: Optional[etree._Element]) -> List[TaxTotal]:
    """`impuestos/impuesto` a nivel de comprobante (nota de débito)."""
    return [
        build_model(
            TaxTotal, tax,
            code=required_text(tax, "codigo"),
            percentage_code=required_text(tax, "codigoPorcentaje"),
            rate=decimal_value(tax, "tarifa"),
            taxable_base=decimal_value(tax, "baseImponible"),
            value=decimal_value(tax, "valor"),
        )
        for tax in children(node, "impuesto")
    ]


def parse_payments(node: Optional[etree._Element]) -> List[Payment]:
    return [
        build_model(
            Payment, payment,
            method=required_text(payment, "formaPago"),
            total=decimal_value(payment, "total"),
            term=find_text(payment, "plazo", ""),
            time_unit=find_text(payment, "unidadTiempo", ""),
        )
        for payment in children(node, "pago")
    ]


def parse_line_taxes(node: Optional[etree._Element]) -> List[LineTax]:
    return [
        build_model(
            LineTax, tax,
            code=required_text(tax, "codigo"),
            percentage_code=required_text(tax, "codigoPorcentaje"),
            rate=decimal_value(tax, "tarifa"),
            taxable_base=decimal_value(tax, "baseImponible"),
            value=decimal_value(tax, "valor"),
        )
        for tax in children(node, "impuesto")
    ]


def parse_additional_details(node: Optional[etree._Element]) -> Dict[str, str]:
    return {
        detail.get("nombre"): detail.get("valor", "")
        for detail in children(node, "detAdicional")
        if detail.get("nombre")
    }


# --- detalles ---

def parse_details(node: Optional[etree._Element], builder: DocumentBuilder) -> List[LineItem]:
    """
    Lee `detalles/detalle` y los agrega al builder en orden. Necesita el
    encabezado ya procesado: el código del ítem depende del tipo de comprobante.
    """
    if builder.header is None:
        raise FieldParseError(node_path(node) if node is not None else "detalles",
                              "los detalles requieren el bloque tributario procesado")

    if builder.header.doc_code in PRINCIPAL_CODE_DOCS:
        main_tag, auxiliary_tag = "codigoPrincipal", "codigoAuxiliar"
    else:
        main_tag, auxiliary_tag = "codigoInterno", "codigoAdicional"

    first_id = builder.next_detail_id()
    items = []
    for offset, detail in enumerate(children(node, "detalle")):
        items.append(build_model(
            LineItem, detail,
            id=first_id + offset,
            main_code=find_text(detail, main_tag, ""),
            auxiliary_code=find_text(detail, auxiliary_tag, ""),
            description=required_text(detail, "descripcion"),
            quantity=decimal_value(detail, "cantidad"),
            unit_price=decimal_value(detail, "precioUnitario") if detail.find("precioUnitario") is not None else None,
            discount=decimal_value(detail, "descuento", Decimal("0.00")),
            total_without_tax=(
                decimal_value(detail, "precioTotalSinImpuesto")
                if detail.find("precioTotalSinImpuesto") is not None else None
            ),
            additional_details=parse_additional_details(detail.find("detallesAdicionales")),
            taxes=parse_line_taxes(detail.find("impuestos")),
        ))

    builder.add_details(items)
    return items


# --- infoAdicional ---

def parse_additional_info(node: Optional[etree._Element], builder: DocumentBuilder) -> Dict[str, str]:
    """Campos libres `campoAdicional`, en el orden del documento."""
    fields: Dict[str, str] = {}
    for field in children(node, "campoAdicional"):
        name = field.get("nombre")
        if not name:
            raise FieldParseError(node_path(field), "campoAdicional sin atributo 'nombre'")
        fields[name] = (field.text or "").strip()
    builder.set_additional_info(fields)
    return fields
