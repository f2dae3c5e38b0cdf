# File: app/schemas/final.py
from pydantic import BaseModel
from datetime import datetime
from app.models.submission import SubmissionStatus

class FinalUploadResponse(BaseModel):
    submission_id: int
    status: SubmissionStatus
    final_pdf_path: str
    final_submitted_at: datetime
