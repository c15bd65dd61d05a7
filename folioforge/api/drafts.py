"""Draft API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.draft import DraftCreate, DraftListResponse, DraftResponse
from ..services import DraftService

router = APIRouter(prefix="/api/drafts", tags=["drafts"])


@router.post("", response_model=DraftResponse, status_code=201)
def save_draft(data: DraftCreate, db: Session = Depends(get_db)):
    """Save a (possibly partial) portfolio document."""
    return DraftService(db).save_draft(data)


@router.get("", response_model=List[DraftListResponse])
def list_drafts(
    email: str = Query(..., min_length=3),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """List drafts saved under an email address, newest first."""
    return DraftService(db).list_drafts(email, skip, limit)


@router.get("/{draft_id}", response_model=DraftResponse)
def get_draft(draft_id: str, db: Session = Depends(get_db)):
    """Get a draft including its HTML."""
    return DraftService(db).get_draft(draft_id)
