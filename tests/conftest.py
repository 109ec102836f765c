"""
Fixtures para los tests de comprobantes electrónicos e identificaciones.

Proporciona:
- Un comprobante de ejemplo, válido contra su esquema, por cada tipo soportado
- La clave de acceso usada en cada ejemplo
- Un comprobante envuelto en la respuesta de autorización del SRI
"""

import pytest

from sri_core.application.use_cases.parse_electronic_document import ElectronicDocumentService

EMITTER_RUC = "1790012345001"
EMISSION_DATE = "15012024"


def make_access_key(cod_doc: str, ruc: str = EMITTER_RUC, date: str = EMISSION_DATE) -> str:
    """fecha(8) + codDoc(2) + ruc(13) + ambiente(1) + serie(6) + secuencial(9) + código(8) + emisión(1) + dígito(1)"""
    return f"{date}{cod_doc}{ruc}1001002000000123123456781" + "7"


def info_tributaria(cod_doc: str, key_cod_doc: str = None) -> str:
    key = make_access_key(key_cod_doc or cod_doc)
    return f"""  <infoTributaria>
    <ambiente>1</ambiente>
    <tipoEmision>1</tipoEmision>
    <razonSocial>COMERCIAL ANDINA S.A.</razonSocial>
    <nombreComercial>ANDINA</nombreComercial>
    <ruc>{EMITTER_RUC}</ruc>
    <claveAcceso>{key}</claveAcceso>
    <codDoc>{cod_doc}</codDoc>
    <estab>001</estab>
    <ptoEmi>002</ptoEmi>
    <secuencial>000000123</secuencial>
    <dirMatriz>Av. Amazonas N34-120, Quito</dirMatriz>
  </infoTributaria>"""


INFO_ADICIONAL = """  <infoAdicional>
    <campoAdicional nombre="Email">compras@cliente.ec</campoAdicional>
    <campoAdicional nombre="Telefono">022345678</campoAdicional>
  </infoAdicional>"""

PAGOS = """      <pagos>
        <pago>
          <formaPago>20</formaPago>
          <total>115.00</total>
          <plazo>30</plazo>
          <unidadTiempo>dias</unidadTiempo>
        </pago>
      </pagos>"""

TOTAL_CON_IMPUESTOS = """      <totalConImpuestos>
        <totalImpuesto>
          <codigo>2</codigo>
          <codigoPorcentaje>4</codigoPorcentaje>
          <baseImponible>100.00</baseImponible>
          <valor>15.00</valor>
        </totalImpuesto>
      </totalConImpuestos>"""

DETALLE_IMPUESTOS = """        <impuestos>
          <impuesto>
            <codigo>2</codigo>
            <codigoPorcentaje>4</codigoPorcentaje>
            <tarifa>15</tarifa>
            <baseImponible>100.00</baseImponible>
            <valor>15.00</valor>
          </impuesto>
        </impuestos>"""


def invoice_xml(cod_doc: str = "01", key_cod_doc: str = None) -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<factura id="comprobante" version="1.1.0">
{info_tributaria(cod_doc, key_cod_doc)}
  <infoFactura>
    <fechaEmision>15/01/2024</fechaEmision>
    <dirEstablecimiento>Av. 10 de Agosto y Colón</dirEstablecimiento>
    <obligadoContabilidad>SI</obligadoContabilidad>
    <tipoIdentificacionComprador>04</tipoIdentificacionComprador>
    <razonSocialComprador>DISTRIBUIDORA DEL PACIFICO CIA. LTDA.</razonSocialComprador>
    <identificacionComprador>0992345678001</identificacionComprador>
    <direccionComprador>Guayaquil</direccionComprador>
    <totalSinImpuestos>100.00</totalSinImpuestos>
    <totalDescuento>0.00</totalDescuento>
{TOTAL_CON_IMPUESTOS}
    <propina>0.00</propina>
    <importeTotal>115.00</importeTotal>
    <moneda>DOLAR</moneda>
{PAGOS}
  </infoFactura>
  <detalles>
    <detalle>
      <codigoPrincipal>PRD-001</codigoPrincipal>
      <codigoAuxiliar>AUX-001</codigoAuxiliar>
      <descripcion>Resma de papel A4</descripcion>
      <cantidad>20</cantidad>
      <precioUnitario>5.00</precioUnitario>
      <descuento>0.00</descuento>
      <precioTotalSinImpuesto>100.00</precioTotalSinImpuesto>
      <detallesAdicionales>
        <detAdicional nombre="Marca" valor="Norma"/>
      </detallesAdicionales>
{DETALLE_IMPUESTOS}
    </detalle>
  </detalles>
{INFO_ADICIONAL}
</factura>
"""


def purchase_settlement_xml() -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<liquidacionCompra id="comprobante" version="1.1.0">
{info_tributaria("03")}
  <infoLiquidacionCompra>
    <fechaEmision>15/01/2024</fechaEmision>
    <dirEstablecimiento>Av. 10 de Agosto y Colón</dirEstablecimiento>
    <obligadoContabilidad>SI</obligadoContabilidad>
    <tipoIdentificacionProveedor>05</tipoIdentificacionProveedor>
    <razonSocialProveedor>MARIA JOSE PEREZ</razonSocialProveedor>
    <identificacionProveedor>1712345678</identificacionProveedor>
    <direccionProveedor>Cayambe</direccionProveedor>
    <totalSinImpuestos>100.00</totalSinImpuestos>
    <totalDescuento>0.00</totalDescuento>
{TOTAL_CON_IMPUESTOS}
    <importeTotal>115.00</importeTotal>
    <moneda>DOLAR</moneda>
{PAGOS}
  </infoLiquidacionCompra>
  <detalles>
    <detalle>
      <codigoPrincipal>AGR-010</codigoPrincipal>
      <descripcion>Quintal de papas</descripcion>
      <cantidad>4</cantidad>
      <precioUnitario>25.00</precioUnitario>
      <descuento>0.00</descuento>
      <precioTotalSinImpuesto>100.00</precioTotalSinImpuesto>
{DETALLE_IMPUESTOS}
    </detalle>
  </detalles>
{INFO_ADICIONAL}
</liquidacionCompra>
"""


def credit_note_xml() -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<notaCredito id="comprobante" version="1.1.0">
{info_tributaria("04")}
  <infoNotaCredito>
    <fechaEmision>15/01/2024</fechaEmision>
    <dirEstablecimiento>Av. 10 de Agosto y Colón</dirEstablecimiento>
    <tipoIdentificacionComprador>04</tipoIdentificacionComprador>
    <razonSocialComprador>DISTRIBUIDORA DEL PACIFICO CIA. LTDA.</razonSocialComprador>
    <identificacionComprador>0992345678001</identificacionComprador>
    <obligadoContabilidad>SI</obligadoContabilidad>
    <codDocModificado>01</codDocModificado>
    <numDocModificado>001-002-000000120</numDocModificado>
    <fechaEmisionDocSustento>10/01/2024</fechaEmisionDocSustento>
    <totalSinImpuestos>100.00</totalSinImpuestos>
    <valorModificacion>115.00</valorModificacion>
    <moneda>DOLAR</moneda>
{TOTAL_CON_IMPUESTOS}
    <motivo>Devolución de mercadería</motivo>
  </infoNotaCredito>
  <detalles>
    <detalle>
      <codigoInterno>PRD-001</codigoInterno>
      <codigoAdicional>AUX-001</codigoAdicional>
      <descripcion>Resma de papel A4</descripcion>
      <cantidad>20</cantidad>
      <precioUnitario>5.00</precioUnitario>
      <descuento>0.00</descuento>
      <precioTotalSinImpuesto>100.00</precioTotalSinImpuesto>
{DETALLE_IMPUESTOS}
    </detalle>
  </detalles>
{INFO_ADICIONAL}
</notaCredito>
"""


def debit_note_xml() -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<notaDebito id="comprobante" version="1.0.0">
{info_tributaria("05")}
  <infoNotaDebito>
    <fechaEmision>15/01/2024</fechaEmision>
    <dirEstablecimiento>Av. 10 de Agosto y Colón</dirEstablecimiento>
    <tipoIdentificacionComprador>04</tipoIdentificacionComprador>
    <razonSocialComprador>DISTRIBUIDORA DEL PACIFICO CIA. LTDA.</razonSocialComprador>
    <identificacionComprador>0992345678001</identificacionComprador>
    <obligadoContabilidad>SI</obligadoContabilidad>
    <codDocModificado>01</codDocModificado>
    <numDocModificado>001-002-000000120</numDocModificado>
    <fechaEmisionDocSustento>10/01/2024</fechaEmisionDocSustento>
    <totalSinImpuestos>10.00</totalSinImpuestos>
    <impuestos>
      <impuesto>
        <codigo>2</codigo>
        <codigoPorcentaje>4</codigoPorcentaje>
        <tarifa>15</tarifa>
        <baseImponible>10.00</baseImponible>
        <valor>1.50</valor>
      </impuesto>
    </impuestos>
    <valorTotal>11.50</valorTotal>
  </infoNotaDebito>
  <motivos>
    <motivo>
      <razon>Intereses por mora</razon>
      <valor>10.00</valor>
    </motivo>
  </motivos>
{INFO_ADICIONAL}
</notaDebito>
"""


def delivery_guide_xml() -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<guiaRemision id="comprobante" version="1.1.0">
{info_tributaria("06")}
  <infoGuiaRemision>
    <dirEstablecimiento>Av. 10 de Agosto y Colón</dirEstablecimiento>
    <dirPartida>Bodega Norte, Quito</dirPartida>
    <razonSocialTransportista>TRANSPORTES SIERRA</razonSocialTransportista>
    <tipoIdentificacionTransportista>04</tipoIdentificacionTransportista>
    <rucTransportista>1791234567001</rucTransportista>
    <obligadoContabilidad>SI</obligadoContabilidad>
    <fechaIniTransporte>15/01/2024</fechaIniTransporte>
    <fechaFinTransporte>16/01/2024</fechaFinTransporte>
    <placa>PBA1234</placa>
  </infoGuiaRemision>
  <destinatarios>
    <destinatario>
      <identificacionDestinatario>0992345678001</identificacionDestinatario>
      <razonSocialDestinatario>DISTRIBUIDORA DEL PACIFICO CIA. LTDA.</razonSocialDestinatario>
      <dirDestinatario>Guayaquil</dirDestinatario>
      <motivoTraslado>Venta</motivoTraslado>
      <ruta>Quito - Guayaquil</ruta>
      <codDocSustento>01</codDocSustento>
      <numDocSustento>001-002-000000123</numDocSustento>
      <fechaEmisionDocSustento>15/01/2024</fechaEmisionDocSustento>
      <detalles>
        <detalle>
          <codigoInterno>PRD-001</codigoInterno>
          <descripcion>Resma de papel A4</descripcion>
          <cantidad>20</cantidad>
        </detalle>
      </detalles>
    </destinatario>
    <destinatario>
      <identificacionDestinatario>0102345678</identificacionDestinatario>
      <razonSocialDestinatario>JUAN CARLOS VERA</razonSocialDestinatario>
      <dirDestinatario>Cuenca</dirDestinatario>
      <motivoTraslado>Consignación</motivoTraslado>
      <detalles>
        <detalle>
          <codigoInterno>PRD-002</codigoInterno>
          <descripcion>Caja de esferos</descripcion>
          <cantidad>5</cantidad>
        </detalle>
        <detalle>
          <codigoInterno>PRD-003</codigoInterno>
          <descripcion>Carpetas archivadoras</descripcion>
          <cantidad>12</cantidad>
        </detalle>
      </detalles>
    </destinatario>
  </destinatarios>
{INFO_ADICIONAL}
</guiaRemision>
"""


def withholding_v1_xml() -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<comprobanteRetencion id="comprobante" version="1.0.0">
{info_tributaria("07")}
  <infoCompRetencion>
    <fechaEmision>15/01/2024</fechaEmision>
    <dirEstablecimiento>Av. 10 de Agosto y Colón</dirEstablecimiento>
    <obligadoContabilidad>SI</obligadoContabilidad>
    <tipoIdentificacionSujetoRetenido>04</tipoIdentificacionSujetoRetenido>
    <razonSocialSujetoRetenido>DISTRIBUIDORA DEL PACIFICO CIA. LTDA.</razonSocialSujetoRetenido>
    <identificacionSujetoRetenido>0992345678001</identificacionSujetoRetenido>
    <periodoFiscal>01/2024</periodoFiscal>
  </infoCompRetencion>
  <impuestos>
    <impuesto>
      <codigo>1</codigo>
      <codigoRetencion>312</codigoRetencion>
      <baseImponible>100.00</baseImponible>
      <porcentajeRetener>1.75</porcentajeRetener>
      <valorRetenido>1.75</valorRetenido>
      <codDocSustento>01</codDocSustento>
      <numDocSustento>001002000000456</numDocSustento>
      <fechaEmisionDocSustento>12/01/2024</fechaEmisionDocSustento>
    </impuesto>
    <impuesto>
      <codigo>2</codigo>
      <codigoRetencion>3</codigoRetencion>
      <baseImponible>15.00</baseImponible>
      <porcentajeRetener>30</porcentajeRetener>
      <valorRetenido>4.50</valorRetenido>
      <codDocSustento>01</codDocSustento>
      <numDocSustento>001002000000456</numDocSustento>
      <fechaEmisionDocSustento>12/01/2024</fechaEmisionDocSustento>
    </impuesto>
  </impuestos>
{INFO_ADICIONAL}
</comprobanteRetencion>
"""


def withholding_v2_xml() -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<comprobanteRetencion id="comprobante" version="2.0.0">
{info_tributaria("07")}
  <infoCompRetencion>
    <fechaEmision>15/01/2024</fechaEmision>
    <dirEstablecimiento>Av. 10 de Agosto y Colón</dirEstablecimiento>
    <obligadoContabilidad>SI</obligadoContabilidad>
    <tipoIdentificacionSujetoRetenido>04</tipoIdentificacionSujetoRetenido>
    <parteRel>NO</parteRel>
    <razonSocialSujetoRetenido>DISTRIBUIDORA DEL PACIFICO CIA. LTDA.</razonSocialSujetoRetenido>
    <identificacionSujetoRetenido>0992345678001</identificacionSujetoRetenido>
    <periodoFiscal>01/2024</periodoFiscal>
  </infoCompRetencion>
  <docsSustento>
    <docSustento>
      <codSustento>01</codSustento>
      <codDocSustento>01</codDocSustento>
      <numDocSustento>001002000000456</numDocSustento>
      <fechaEmisionDocSustento>12/01/2024</fechaEmisionDocSustento>
      <fechaRegistroContable>12/01/2024</fechaRegistroContable>
      <numAutDocSustento>1201202401099234567800110010020000004561234567811</numAutDocSustento>
      <pagoLocExt>01</pagoLocExt>
      <totalSinImpuestos>100.00</totalSinImpuestos>
      <importeTotal>115.00</importeTotal>
      <impuestosDocSustento>
        <impuestoDocSustento>
          <codImpuestoDocSustento>2</codImpuestoDocSustento>
          <codigoPorcentaje>4</codigoPorcentaje>
          <baseImponible>100.00</baseImponible>
          <tarifa>15</tarifa>
          <valorImpuesto>15.00</valorImpuesto>
        </impuestoDocSustento>
      </impuestosDocSustento>
      <retenciones>
        <retencion>
          <codigo>1</codigo>
          <codigoRetencion>312</codigoRetencion>
          <baseImponible>100.00</baseImponible>
          <porcentajeRetener>1.75</porcentajeRetener>
          <valorRetenido>1.75</valorRetenido>
        </retencion>
      </retenciones>
      <pagos>
        <pago>
          <formaPago>20</formaPago>
          <total>115.00</total>
        </pago>
      </pagos>
    </docSustento>
  </docsSustento>
{INFO_ADICIONAL}
</comprobanteRetencion>
"""


def authorization_envelope(document_xml: str, number: str) -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<autorizacion>
  <estado>AUTORIZADO</estado>
  <numeroAutorizacion>{number}</numeroAutorizacion>
  <fechaAutorizacion>2024-01-15T10:20:30-05:00</fechaAutorizacion>
  <ambiente>PRUEBAS</ambiente>
  <comprobante><![CDATA[{document_xml}]]></comprobante>
</autorizacion>
"""


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def service():
    return ElectronicDocumentService()


@pytest.fixture
def samples():
    """Tipo de ejemplo -> (XML, codDoc esperado)."""
    return {
        "factura": (invoice_xml(), "01"),
        "liquidacion_compra": (purchase_settlement_xml(), "03"),
        "nota_credito": (credit_note_xml(), "04"),
        "nota_debito": (debit_note_xml(), "05"),
        "guia_remision": (delivery_guide_xml(), "06"),
        "retencion_v1": (withholding_v1_xml(), "07"),
        "retencion_v2": (withholding_v2_xml(), "07"),
    }


@pytest.fixture
def invoice():
    return invoice_xml()


@pytest.fixture
def invoice_key():
    return make_access_key("01")
