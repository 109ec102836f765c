# sri_core/infrastructure/api/routers/documents_router.py
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

import config
from sri_core.application.use_cases.parse_electronic_document import ElectronicDocumentService

router = APIRouter(prefix="/api/v1/documentos", tags=["Comprobantes Electrónicos"])


def get_document_service() -> ElectronicDocumentService:
    return ElectronicDocumentService()


@router.post("/parse", summary="Validar e interpretar un comprobante electrónico")
async def parse_document(
    xml_file: UploadFile = File(..., description="XML del comprobante o de su autorización."),
    service: ElectronicDocumentService = Depends(get_document_service),
):
    """
    Valida el XML contra el esquema de su tipo y versión y devuelve el
    comprobante interpretado. Si no es válido responde 422 con todos los
    problemas encontrados.
    """
    content = await xml_file.read(config.MAX_XML_BYTES + 1)
    if len(content) > config.MAX_XML_BYTES:
        raise HTTPException(status_code=413, detail=f"El XML supera el máximo de {config.MAX_XML_BYTES} bytes.")

    outcome = service.try_parse(content)
    if not outcome.success:
        raise HTTPException(status_code=422, detail={
            "error_code": outcome.error_code,
            "message": outcome.error_message,
            "issues": [issue.model_dump(mode="json") for issue in outcome.issues],
        })

    document = outcome.document
    return {
        "access_key": document.access_key,
        "document_type": document.document_type.name,
        "document": document.model_dump(mode="json"),
        "warnings": [str(issue) for issue in outcome.issues],
    }
