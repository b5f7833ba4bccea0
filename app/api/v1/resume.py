from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.api.v1.deps import require_app_state
from app.core.config import settings
from app.core.state import AppState
from app.parsing.models import ExtractedDocument, ExtractionError
from app.services.advice_service import extract_resume

router = APIRouter()


async def _read_upload(file: UploadFile) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(1024 * 64)
        if not chunk:
            break
        total += len(chunk)
        if total > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum allowed size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
            )
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/users/{user_id}/resume/file", response_model=ExtractedDocument)
async def upload_resume(file: UploadFile = File(...), state: AppState = Depends(require_app_state)):
    filename = file.filename or "uploaded-file"
    content = await _read_upload(file)

    try:
        return await extract_resume(
            state,
            file_name=filename,
            media_type=file.content_type,
            content=content,
        )
    except ExtractionError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001 - reported inline next to the upload control
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=state.extraction_error or "Error processing file.",
        ) from exc


@router.delete("/users/{user_id}/resume/file", status_code=204)
async def discard_resume(state: AppState = Depends(require_app_state)):
    state.discard_document()
