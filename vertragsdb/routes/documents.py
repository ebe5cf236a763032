# vertragsdb/routes/documents.py
import asyncio
from datetime import datetime

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from vertragsdb.config import settings
from vertragsdb.database import get_db
from vertragsdb.middleware.auth import get_current_user
from vertragsdb.middleware.authorization import require_admin
from vertragsdb.models.contract import Contract
from vertragsdb.models.document import ContractDocument
from vertragsdb.services.storage import build_document_key, get_storage

logger = structlog.get_logger()
router = APIRouter()

ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "image/jpeg",
    "image/png",
}
MAX_FILE_SIZE = settings.MAX_UPLOAD_MB * 1024 * 1024


class DocumentResponse(BaseModel):
    id: int
    contract_id: int
    filename: str
    content_type: str
    size_bytes: int
    uploaded_at: datetime

    model_config = {"from_attributes": True}


async def _ensure_contract_exists(db: AsyncSession, contract_id: int):
    result = await db.execute(select(Contract.id).where(Contract.id == contract_id))
    if result.scalar_one_or_none() is None:
        raise HTTPException(status_code=404, detail="Contract not found")


@router.get("/contracts/{contract_id}/documents", response_model=list[DocumentResponse])
async def list_documents(
    contract_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _ensure_contract_exists(db, contract_id)
    result = await db.execute(
        select(ContractDocument)
        .where(ContractDocument.contract_id == contract_id)
        .order_by(ContractDocument.uploaded_at.asc(), ContractDocument.id.asc())
    )
    return [DocumentResponse.model_validate(d) for d in result.scalars().all()]


@router.post(
    "/contracts/{contract_id}/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    contract_id: int,
    document: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
    _auth: None = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    storage=Depends(get_storage),
):
    """Attach a file to a contract."""
    await _ensure_contract_exists(db, contract_id)

    if document.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type: {document.content_type}. Allowed: {sorted(ALLOWED_CONTENT_TYPES)}",
        )

    file_bytes = await document.read()
    if len(file_bytes) > MAX_FILE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Max size: {settings.MAX_UPLOAD_MB} MB",
        )

    filename = document.filename or "document"
    key = build_document_key(contract_id, filename)
    try:
        await asyncio.to_thread(storage.upload, file_bytes, key, document.content_type)
    except Exception as e:
        logger.error("document_upload_failed", contract_id=contract_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to upload file to storage",
        )

    doc = ContractDocument(
        contract_id=contract_id,
        filename=filename,
        file_key=key,
        content_type=document.content_type,
        size_bytes=len(file_bytes),
    )
    db.add(doc)
    try:
        await db.flush()
    except SQLAlchemyError:
        # Drop the orphaned object before the request fails
        await asyncio.to_thread(storage.delete, key)
        raise
    await db.refresh(doc)

    logger.info("document_uploaded", contract_id=contract_id, document_id=doc.id)
    return DocumentResponse.model_validate(doc)


@router.get("/documents/{document_id}/download")
async def download_document(
    document_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage=Depends(get_storage),
):
    result = await db.execute(
        select(ContractDocument).where(ContractDocument.id == document_id)
    )
    doc = result.scalar_one_or_none()
    if not doc:
        raise HTTPException(status_code=404, detail="Document not found")

    try:
        content = await asyncio.to_thread(storage.download, doc.file_key)
    except Exception as e:
        logger.error("document_download_failed", document_id=document_id, error=str(e))
        raise HTTPException(status_code=404, detail="Document file not found")

    return Response(
        content=content,
        media_type=doc.content_type,
        headers={"Content-Disposition": f'attachment; filename="{doc.filename}"'},
    )
