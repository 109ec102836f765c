# sri_core/infrastructure/xml/schema_validator.py
import codecs
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from lxml import etree

from sri_core.domain.models.electronic_document import Severity, ValidationIssue

XSD_DIR = Path(__file__).parent / "xsd"

# Elemento raíz -> versión del comprobante -> esquema empaquetado
SCHEMA_FILES: Dict[str, Dict[str, str]] = {
    "factura": {
        "1.0.0": "factura_V2.1.0.xsd",
        "1.1.0": "factura_V2.1.0.xsd",
        "2.0.0": "factura_V2.1.0.xsd",
        "2.1.0": "factura_V2.1.0.xsd",
    },
    "liquidacionCompra": {
        "1.0.0": "liquidacionCompra_V1.1.0.xsd",
        "1.1.0": "liquidacionCompra_V1.1.0.xsd",
    },
    "notaCredito": {
        "1.0.0": "notaCredito_V1.1.0.xsd",
        "1.1.0": "notaCredito_V1.1.0.xsd",
    },
    "notaDebito": {
        "1.0.0": "notaDebito_V1.0.0.xsd",
    },
    "guiaRemision": {
        "1.0.0": "guiaRemision_V1.1.0.xsd",
        "1.1.0": "guiaRemision_V1.1.0.xsd",
    },
    "comprobanteRetencion": {
        "1.0.0": "comprobanteRetencion_V1.0.0.xsd",
        "2.0.0": "comprobanteRetencion_V2.0.0.xsd",
    },
}

_XML_PROLOG = re.compile(r"^\s*(<\?xml\s.*?\?>)?", re.DOTALL)
_XML_PROLOG_BYTES = re.compile(rb"^[ \t\r\n]*(<\?xml\s.*?\?>)?", re.DOTALL)
_DECLARED_ENCODING = re.compile(rb"encoding\s*=\s*[\"']([A-Za-z0-9._-]+)[\"']")

XmlInput = Union[bytes, str, etree._Element]


def secure_parser(encoding: Optional[str] = None) -> etree.XMLParser:
    """Parser sin acceso a red ni expansión de entidades. Se crea uno por llamada."""
    try:
        return etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False, encoding=encoding)
    except LookupError:
        raise ValueError(f"codificación no soportada '{encoding}'")


def load_document(xml: Union[bytes, str]) -> etree._Element:
    """
    Carga el XML y devuelve el elemento raíz. Lanza `etree.XMLSyntaxError`
    si el documento no está bien formado.

    lxml no acepta espacios antes de la declaración XML ni una declaración
    de encoding en un str. El prólogo se reemplaza por los mismos saltos de
    línea que contenía, así los errores apuntan a la línea original.
    """
    if isinstance(xml, str):
        xml = xml.lstrip("\ufeff")
        prolog = _XML_PROLOG.match(xml).group(0)
        return etree.fromstring("\n" * prolog.count("\n") + xml[len(prolog):], parser=secure_parser())

    if xml.startswith(codecs.BOM_UTF8):
        xml = xml[len(codecs.BOM_UTF8):]
    match = _XML_PROLOG_BYTES.match(xml)
    prolog = match.group(0)
    if not prolog:
        return etree.fromstring(xml, parser=secure_parser())

    declared = _DECLARED_ENCODING.search(match.group(1) or b"")
    parser = secure_parser(declared.group(1).decode("ascii") if declared else None)
    return etree.fromstring(b"\n" * prolog.count(b"\n") + xml[len(prolog):], parser=parser)


def resolve_schema(root_tag: str, version: Optional[str]) -> Optional[Path]:
    filename = SCHEMA_FILES.get(root_tag, {}).get(version or "")
    return XSD_DIR / filename if filename else None


@lru_cache(maxsize=None)
def _load_schema_document(schema_path: str) -> etree._ElementTree:
    # Solo se cachea el árbol del XSD (de lectura). El XMLSchema compilado
    # guarda un error_log mutable, así que se construye en cada validación.
    return etree.parse(schema_path)


def _issues_from_log(entries: Iterable) -> List[ValidationIssue]:
    issues = []
    for entry in entries:
        severity = Severity.WARNING if entry.level_name == "WARNING" else Severity.ERROR
        issues.append(ValidationIssue(
            severity=severity,
            message=entry.message.strip(),
            line=entry.line or 0,
            column=entry.column or 0,
        ))
    return issues


def syntax_issues(exc: etree.XMLSyntaxError) -> List[ValidationIssue]:
    error_log = getattr(exc, "error_log", None)
    issues = _issues_from_log(error_log) if error_log else []
    if not issues:
        line, column = exc.position if exc.position else (0, 0)
        issues.append(ValidationIssue(
            severity=Severity.ERROR,
            message=f"XML mal formado: {exc.msg or exc}",
            line=line or 0,
            column=column or 0,
        ))
    return issues


def validate(xml: XmlInput, schema_path: Path) -> List[ValidationIssue]:
    """
    Valida el XML contra el esquema y devuelve todos los problemas
    encontrados, en orden. Nunca lanza por un XML inválido: un error de
    sintaxis también se reporta como `ValidationIssue`.
    Una lista vacía significa que el documento es estructuralmente válido.
    """
    if isinstance(xml, etree._Element):
        document = xml
    else:
        try:
            document = load_document(xml)
        except etree.XMLSyntaxError as exc:
            return syntax_issues(exc)
        except ValueError as exc:
            return [ValidationIssue(severity=Severity.ERROR, message=f"XML mal formado: {exc}")]

    try:
        schema = etree.XMLSchema(_load_schema_document(str(schema_path)))
    except (OSError, etree.XMLSyntaxError, etree.XMLSchemaParseError) as exc:
        return [ValidationIssue(
            severity=Severity.ERROR,
            message=f"No se pudo cargar el esquema {schema_path.name}: {exc}",
        )]

    schema.validate(document)
    return _issues_from_log(schema.error_log)
