# File: app/api/v1/api.py
from fastapi import APIRouter
from app.api.v1.endpoints import chair, decisions, events, external_review, final, reviewer, submissions

# Create main API router
api_router = APIRouter()

api_router.include_router(
    events.router,
    prefix="/events",
    tags=["events"]
)

api_router.include_router(
    submissions.router,
    tags=["submissions"]
)

api_router.include_router(
    final.router,
    prefix="/events",
    tags=["final-submission"]
)

api_router.include_router(
    chair.router,
    prefix="/chair",
    tags=["chair"]
)

api_router.include_router(
    decisions.router,
    prefix="/chair",
    tags=["decisions"]
)

api_router.include_router(
    reviewer.router,
    prefix="/reviewer",
    tags=["reviewer"]
)

api_router.include_router(
    external_review.router,
    prefix="/external-review",
    tags=["external-review"]
)
