"""Draft persistence with completeness bookkeeping.

Each saved draft is analyzed once, at save time, so listings can show how far
along it is without re-reading the HTML.
"""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import DatabaseError
from ..generation.completeness import analyze
from ..models import Draft
from ..repositories.draft_repository import DraftRepository
from ..schemas.draft import DraftCreate

logger = logging.getLogger(__name__)


class DraftService:
    """Save and look up portfolio drafts."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DraftRepository(db)

    def save_draft(self, data: DraftCreate) -> Draft:
        """Analyze and store a draft.

        Raises:
            DatabaseError: If the insert or commit fails.
        """
        verdict = analyze(data.html_content)
        try:
            draft = self.repo.create(
                email=data.email,
                html_content=data.html_content,
                is_partial=not verdict.is_complete,
                estimated_completion=verdict.estimated_completion,
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to save draft", extra={"email": data.email, "error": str(e)})
            raise DatabaseError("Failed to save draft", original_error=e) from e

        logger.info(
            "Saved draft %s (%d%% complete)",
            draft.id, draft.estimated_completion,
            extra={"draft_id": draft.id, "is_partial": draft.is_partial},
        )
        return draft

    def get_draft(self, draft_id: str) -> Draft:
        """Raises DraftNotFoundError if missing."""
        return self.repo.get_by_id(draft_id)

    def list_drafts(self, email: str, skip: int = 0, limit: int = 50) -> List[Draft]:
        return self.repo.list_by_email(email.strip().lower(), skip=skip, limit=limit)
