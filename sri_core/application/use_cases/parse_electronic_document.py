# sri_core/application/use_cases/parse_electronic_document.py
import logging
from typing import List, Optional, Tuple, Union

from lxml import etree

from sri_core.domain.models.document_builder import DocumentBuilder
from sri_core.domain.models.electronic_document import (
    Authorization,
    ElectronicDocument,
    ParseOutcome,
    Severity,
    ValidationIssue,
)
from sri_core.domain.models.errors import (
    DocumentParseError,
    ErrorCode,
    SchemaValidationError,
    UnsupportedDocumentTypeError,
)
from sri_core.infrastructure.xml import schema_validator
from sri_core.infrastructure.xml.classifier import classify, parser_for


class ElectronicDocumentService:
    """
    Punto de entrada para interpretar comprobantes electrónicos del SRI.
    Orquesta: carga -> esquema -> validación -> clasificación -> parseo -> build.
    No guarda estado entre llamadas: cada invocación construye su propio builder.
    """

    def try_parse(self, xml: Union[bytes, str]) -> ParseOutcome:
        """
        Nunca lanza por un XML inválido. Devuelve un `ParseOutcome` con el
        documento completo, o con el mensaje agregado de todos los problemas.
        """
        warnings: List[ValidationIssue] = []
        try:
            root, authorization = self._load(xml)
            warnings = self._validate(root)
            document = self._parse(root, authorization)
        except SchemaValidationError as e:
            return self._failure(e, e.issues)
        except DocumentParseError as e:
            return self._failure(e, warnings)
        except Exception as e:
            logging.error(f"Error inesperado al procesar el comprobante: {e}", exc_info=True)
            return ParseOutcome(
                success=False,
                error_message=f"Error inesperado al procesar el comprobante: {e}",
                error_code=ErrorCode.FIELD_PARSE_ERROR.value,
                issues=warnings,
            )

        logging.info(f"[{document.access_key}] Comprobante {document.document_type.name} "
                     f"versión {document.version} procesado con {len(document.details)} detalle(s).")
        return ParseOutcome(success=True, document=document, issues=warnings)

    def _load(self, xml: Union[bytes, str]) -> Tuple[etree._Element, Optional[Authorization]]:
        try:
            root = schema_validator.load_document(xml)
        except etree.XMLSyntaxError as e:
            issues = schema_validator.syntax_issues(e)
            raise SchemaValidationError(_join_issues(issues), issues)
        except ValueError as e:
            issue = ValidationIssue(severity=Severity.ERROR, message=f"XML mal formado: {e}")
            raise SchemaValidationError(str(issue), [issue])

        return self._unwrap_authorization(root)

    def _unwrap_authorization(self, root: etree._Element) -> Tuple[etree._Element, Optional[Authorization]]:
        """
        Los comprobantes descargados del SRI vienen dentro de `<autorizacion>`
        con el XML original como CDATA en `<comprobante>`.
        """
        envelope = root if root.tag == "autorizacion" else root.find(".//autorizacion")
        if envelope is None:
            return root, None

        authorization = Authorization(
            number=_clean(envelope.findtext("numeroAutorizacion")),
            authorized_at=_clean(envelope.findtext("fechaAutorizacion")),
            status=_clean(envelope.findtext("estado")),
        )

        comprobante = envelope.find("comprobante")
        if comprobante is None:
            raise UnsupportedDocumentTypeError(None, "La autorización no contiene el elemento 'comprobante'")

        if len(comprobante):
            # Comprobante embebido como elementos en lugar de CDATA
            inner = etree.fromstring(etree.tostring(comprobante[0]), parser=schema_validator.secure_parser())
        else:
            content = (comprobante.text or "").strip()
            try:
                inner = schema_validator.load_document(content)
            except etree.XMLSyntaxError as e:
                issues = schema_validator.syntax_issues(e)
                raise SchemaValidationError(_join_issues(issues), issues)

        logging.info(f"[{authorization.number}] Comprobante extraído de la autorización ({authorization.status}).")
        return inner, authorization

    def _validate(self, root: etree._Element) -> List[ValidationIssue]:
        version = root.get("version")
        schema_path = schema_validator.resolve_schema(root.tag, version)
        if schema_path is None:
            raise UnsupportedDocumentTypeError(
                None, f"No existe esquema para '{root.tag}' versión '{version}'"
            )

        issues = schema_validator.validate(root, schema_path)
        if any(issue.severity == Severity.ERROR for issue in issues):
            raise SchemaValidationError(_join_issues(issues), issues)
        return issues

    def _parse(self, root: etree._Element, authorization: Optional[Authorization]) -> ElectronicDocument:
        document_type = classify(root)
        builder = DocumentBuilder(document_type, root.get("version"))
        builder.authorization = authorization

        parser_for(document_type)(root, builder)
        return builder.build()

    def _failure(self, error: DocumentParseError, issues: List[ValidationIssue]) -> ParseOutcome:
        logging.warning(f"Comprobante rechazado ({error.code.value}): {error.message}")
        return ParseOutcome(
            success=False,
            error_message=error.message,
            error_code=error.code.value,
            issues=issues,
        )


def _join_issues(issues: List[ValidationIssue]) -> str:
    return "\n".join(str(issue) for issue in issues)


def _clean(value: Optional[str]) -> Optional[str]:
    return value.strip() if value else value
