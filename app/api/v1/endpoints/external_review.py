# File: app/api/v1/endpoints/external_review.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app import schemas
from app.api.deps import get_request_meta
from app.db.database import get_db
from app.services import review_engine
from app.services.audit_service import RequestMeta

router = APIRouter()

# Token-keyed, no login: the invite token is the credential

@router.get("/{token}", response_model=schemas.ExternalReviewPage)
def external_review_page(token: str, db: Session = Depends(get_db)):
    return review_engine.external_review_page(db, token)

@router.post("/{token}/submit", response_model=schemas.ReviewSubmitResponse)
def submit_external_review(
    token: str,
    body: schemas.ReviewSubmitRequest,
    db: Session = Depends(get_db),
    meta: RequestMeta = Depends(get_request_meta)
):
    return review_engine.submit_external_review(
        db,
        token=token,
        scores=body.scores(),
        comments_for_author=body.comments_for_author,
        comments_committee=body.comments_committee,
        meta=meta,
    )
