# sri_core/infrastructure/xml/document_parsers.py
from decimal import Decimal
from typing import List

from lxml import etree

from sri_core.domain.models.document_builder import DocumentBuilder
from sri_core.domain.models.electronic_document import (
    CreditNoteInfo,
    DebitNoteInfo,
    DebitNoteReason,
    DeliveryGuideInfo,
    InvoiceInfo,
    PurchaseSettlementInfo,
    Recipient,
    SupportDocument,
    SupportDocumentTax,
    Withholding,
    WithholdingInfo,
)
from sri_core.domain.models.errors import FieldParseError
from sri_core.infrastructure.xml.fields import (
    build_model,
    children,
    date_value,
    decimal_value,
    find_text,
    node_path,
    parse_additional_info,
    parse_details,
    parse_payments,
    parse_tax_header,
    parse_tax_list,
    parse_total_taxes,
    required_text,
)

# Cada parser sigue el mismo orden: infoTributaria -> info del cuerpo -> detalles -> infoAdicional


def _section(root: etree._Element, tag: str) -> etree._Element:
    node = root.find(tag)
    if node is None:
        raise FieldParseError(f"{node_path(root)}/{tag}", "sección requerida ausente")
    return node


def parse_invoice(root: etree._Element, builder: DocumentBuilder) -> None:
    parse_tax_header(root.find("infoTributaria"), builder)

    info = _section(root, "infoFactura")
    emission_date = date_value(info, "fechaEmision")
    builder.set_body(build_model(
        InvoiceInfo, info,
        emission_date=emission_date,
        establishment_address=find_text(info, "dirEstablecimiento", ""),
        special_taxpayer=find_text(info, "contribuyenteEspecial", ""),
        accounting_required=find_text(info, "obligadoContabilidad", ""),
        buyer_id_type=required_text(info, "tipoIdentificacionComprador"),
        buyer_name=required_text(info, "razonSocialComprador"),
        buyer_id=required_text(info, "identificacionComprador"),
        buyer_address=find_text(info, "direccionComprador", ""),
        remission_guide=find_text(info, "guiaRemision", ""),
        total_without_taxes=decimal_value(info, "totalSinImpuestos"),
        total_discount=decimal_value(info, "totalDescuento"),
        total_taxes=parse_total_taxes(info.find("totalConImpuestos")),
        tip=decimal_value(info, "propina", Decimal("0.00")),
        total_amount=decimal_value(info, "importeTotal"),
        currency=find_text(info, "moneda", ""),
        payments=parse_payments(info.find("pagos")),
    ), emission_date)

    parse_details(_section(root, "detalles"), builder)
    parse_additional_info(root.find("infoAdicional"), builder)


def parse_purchase_settlement(root: etree._Element, builder: DocumentBuilder) -> None:
    parse_tax_header(root.find("infoTributaria"), builder)

    info = _section(root, "infoLiquidacionCompra")
    emission_date = date_value(info, "fechaEmision")
    builder.set_body(build_model(
        PurchaseSettlementInfo, info,
        emission_date=emission_date,
        establishment_address=find_text(info, "dirEstablecimiento", ""),
        special_taxpayer=find_text(info, "contribuyenteEspecial", ""),
        accounting_required=find_text(info, "obligadoContabilidad", ""),
        supplier_id_type=required_text(info, "tipoIdentificacionProveedor"),
        supplier_name=required_text(info, "razonSocialProveedor"),
        supplier_id=required_text(info, "identificacionProveedor"),
        supplier_address=find_text(info, "direccionProveedor", ""),
        total_without_taxes=decimal_value(info, "totalSinImpuestos"),
        total_discount=decimal_value(info, "totalDescuento"),
        total_taxes=parse_total_taxes(info.find("totalConImpuestos")),
        total_amount=decimal_value(info, "importeTotal"),
        currency=find_text(info, "moneda", ""),
        payments=parse_payments(info.find("pagos")),
    ), emission_date)

    parse_details(_section(root, "detalles"), builder)
    parse_additional_info(root.find("infoAdicional"), builder)


def parse_credit_note(root: etree._Element, builder: DocumentBuilder) -> None:
    parse_tax_header(root.find("infoTributaria"), builder)

    info = _section(root, "infoNotaCredito")
    emission_date = date_value(info, "fechaEmision")
    builder.set_body(build_model(
        CreditNoteInfo, info,
        emission_date=emission_date,
        establishment_address=find_text(info, "dirEstablecimiento", ""),
        buyer_id_type=required_text(info, "tipoIdentificacionComprador"),
        buyer_name=required_text(info, "razonSocialComprador"),
        buyer_id=required_text(info, "identificacionComprador"),
        special_taxpayer=find_text(info, "contribuyenteEspecial", ""),
        accounting_required=find_text(info, "obligadoContabilidad", ""),
        rise=find_text(info, "rise", ""),
        modified_doc_code=required_text(info, "codDocModificado"),
        modified_doc_number=required_text(info, "numDocModificado"),
        support_doc_date=date_value(info, "fechaEmisionDocSustento", required=False),
        total_without_taxes=decimal_value(info, "totalSinImpuestos"),
        modification_value=decimal_value(info, "valorModificacion"),
        currency=find_text(info, "moneda", ""),
        total_taxes=parse_total_taxes(info.find("totalConImpuestos")),
        reason=find_text(info, "motivo", ""),
    ), emission_date)

    parse_details(_section(root, "detalles"), builder)
    parse_additional_info(root.find("infoAdicional"), builder)


def parse_debit_note(root: etree._Element, builder: DocumentBuilder) -> None:
    """La nota de débito no tiene detalles: sus valores vienen en `motivos`."""
    parse_tax_header(root.find("infoTributaria"), builder)

    info = _section(root, "infoNotaDebito")
    reasons = [
        build_model(DebitNoteReason, reason, reason=required_text(reason, "razon"), value=decimal_value(reason, "valor"))
        for reason in children(_section(root, "motivos"), "motivo")
    ]
    emission_date = date_value(info, "fechaEmision")
    builder.set_body(build_model(
        DebitNoteInfo, info,
        emission_date=emission_date,
        establishment_address=find_text(info, "dirEstablecimiento", ""),
        buyer_id_type=required_text(info, "tipoIdentificacionComprador"),
        buyer_name=required_text(info, "razonSocialComprador"),
        buyer_id=required_text(info, "identificacionComprador"),
        special_taxpayer=find_text(info, "contribuyenteEspecial", ""),
        accounting_required=find_text(info, "obligadoContabilidad", ""),
        rise=find_text(info, "rise", ""),
        modified_doc_code=required_text(info, "codDocModificado"),
        modified_doc_number=required_text(info, "numDocModificado"),
        support_doc_date=date_value(info, "fechaEmisionDocSustento", required=False),
        total_without_taxes=decimal_value(info, "totalSinImpuestos"),
        taxes=parse_tax_list(info.find("impuestos")),
        total_value=decimal_value(info, "valorTotal"),
        payments=parse_payments(info.find("pagos")),
        reasons=reasons,
    ), emission_date)

    parse_additional_info(root.find("infoAdicional"), builder)


def parse_delivery_guide(root: etree._Element, builder: DocumentBuilder) -> None:
    """
    Los ítems de la guía viajan dentro de cada destinatario. Se parsean por
    destinatario y además se acumulan, en orden, en los detalles del documento.
    La guía no trae fechaEmision; el builder la toma de la clave de acceso.
    """
    parse_tax_header(root.find("infoTributaria"), builder)

    info = _section(root, "infoGuiaRemision")
    recipients: List[Recipient] = []
    for recipient in children(_section(root, "destinatarios"), "destinatario"):
        items = parse_details(_section(recipient, "detalles"), builder)
        recipients.append(build_model(
            Recipient, recipient,
            identification=find_text(recipient, "identificacionDestinatario", ""),
            name=required_text(recipient, "razonSocialDestinatario"),
            address=required_text(recipient, "dirDestinatario"),
            transfer_reason=required_text(recipient, "motivoTraslado"),
            customs_document=find_text(recipient, "docAduaneroUnico", ""),
            destination_establishment=find_text(recipient, "codEstabDestino", ""),
            route=find_text(recipient, "ruta", ""),
            support_doc_code=find_text(recipient, "codDocSustento", ""),
            support_doc_number=find_text(recipient, "numDocSustento", ""),
            support_doc_authorization=find_text(recipient, "numAutDocSustento", ""),
            support_doc_date=date_value(recipient, "fechaEmisionDocSustento", required=False),
            details=items,
        ))

    builder.set_body(build_model(
        DeliveryGuideInfo, info,
        establishment_address=find_text(info, "dirEstablecimiento", ""),
        departure_address=required_text(info, "dirPartida"),
        carrier_name=required_text(info, "razonSocialTransportista"),
        carrier_id_type=required_text(info, "tipoIdentificacionTransportista"),
        carrier_ruc=required_text(info, "rucTransportista"),
        rise=find_text(info, "rise", ""),
        accounting_required=find_text(info, "obligadoContabilidad", ""),
        special_taxpayer=find_text(info, "contribuyenteEspecial", ""),
        transport_start=date_value(info, "fechaIniTransporte"),
        transport_end=date_value(info, "fechaFinTransporte"),
        plate=required_text(info, "placa"),
        recipients=recipients,
    ))

    parse_additional_info(root.find("infoAdicional"), builder)


def _parse_withholdings(node: etree._Element, tag: str) -> List[Withholding]:
    return [
        build_model(
            Withholding, item,
            code=required_text(item, "codigo"),
            withholding_code=required_text(item, "codigoRetencion"),
            taxable_base=decimal_value(item, "baseImponible"),
            percentage=decimal_value(item, "porcentajeRetener"),
            withheld_value=decimal_value(item, "valorRetenido"),
            support_doc_code=find_text(item, "codDocSustento", ""),
            support_doc_number=find_text(item, "numDocSustento", ""),
            support_doc_date=date_value(item, "fechaEmisionDocSustento", required=False),
        )
        for item in children(node, tag)
    ]


def _parse_support_documents(node: etree._Element) -> List[SupportDocument]:
    documents = []
    for support in children(node, "docSustento"):
        taxes = [
            build_model(
                SupportDocumentTax, tax,
                code=required_text(tax, "codImpuestoDocSustento"),
                percentage_code=required_text(tax, "codigoPorcentaje"),
                taxable_base=decimal_value(tax, "baseImponible"),
                rate=decimal_value(tax, "tarifa"),
                value=decimal_value(tax, "valorImpuesto"),
            )
            for tax in children(support.find("impuestosDocSustento"), "impuestoDocSustento")
        ]
        documents.append(build_model(
            SupportDocument, support,
            support_code=required_text(support, "codSustento"),
            doc_code=required_text(support, "codDocSustento"),
            doc_number=required_text(support, "numDocSustento"),
            emission_date=date_value(support, "fechaEmisionDocSustento"),
            accounting_date=date_value(support, "fechaRegistroContable", required=False),
            authorization_number=find_text(support, "numAutDocSustento", ""),
            local_or_foreign_payment=required_text(support, "pagoLocExt"),
            total_without_taxes=decimal_value(support, "totalSinImpuestos"),
            total_amount=decimal_value(support, "importeTotal"),
            taxes=taxes,
            withholdings=_parse_withholdings(support.find("retenciones"), "retencion"),
            payments=parse_payments(support.find("pagos")),
        ))
    return documents


def parse_withholding(root: etree._Element, builder: DocumentBuilder) -> None:
    """
    Comprobante de retención. La versión 1.0.0 trae `impuestos` planos; la
    2.0.0 agrupa las retenciones por documento sustento (`docsSustento`).
    """
    parse_tax_header(root.find("infoTributaria"), builder)

    info = _section(root, "infoCompRetencion")
    if builder.version.startswith("2."):
        withholdings: List[Withholding] = []
        support_documents = _parse_support_documents(_section(root, "docsSustento"))
    else:
        withholdings = _parse_withholdings(_section(root, "impuestos"), "impuesto")
        support_documents = []

    emission_date = date_value(info, "fechaEmision")
    builder.set_body(build_model(
        WithholdingInfo, info,
        emission_date=emission_date,
        establishment_address=find_text(info, "dirEstablecimiento", ""),
        special_taxpayer=find_text(info, "contribuyenteEspecial", ""),
        accounting_required=find_text(info, "obligadoContabilidad", ""),
        subject_id_type=required_text(info, "tipoIdentificacionSujetoRetenido"),
        subject_type=find_text(info, "tipoSujetoRetenido", ""),
        related_party=find_text(info, "parteRel", ""),
        subject_name=required_text(info, "razonSocialSujetoRetenido"),
        subject_id=required_text(info, "identificacionSujetoRetenido"),
        fiscal_period=required_text(info, "periodoFiscal"),
        withholdings=withholdings,
        support_documents=support_documents,
    ), emission_date)

    parse_additional_info(root.find("infoAdicional"), builder)
