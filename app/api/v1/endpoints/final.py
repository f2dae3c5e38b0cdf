# File: app/api/v1/endpoints/final.py
from typing import Optional
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
from app import schemas
from app.api.deps import get_request_meta, require_event_role
from app.core.exceptions import ValidationError
from app.core.permissions import EventAccess
from app.db.database import get_db
from app.services import final_submission
from app.services.audit_service import RequestMeta

router = APIRouter()

@router.post("/{event_id}/submissions/{submission_id}/final", response_model=schemas.FinalUploadResponse)
def upload_final(
    event_id: int,
    submission_id: int,
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    access: EventAccess = Depends(require_event_role()),
    meta: RequestMeta = Depends(get_request_meta)
):
    """Upload the camera-ready PDF of an accepted paper"""
    if file is None:
        raise ValidationError("PDF file required", fields={"file": "required"})
    return final_submission.upload_final(
        db,
        access,
        submission_id=submission_id,
        event_id=event_id,
        stream=file.file,
        filename=file.filename,
        meta=meta,
    )
