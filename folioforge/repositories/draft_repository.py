"""Draft repository for database operations."""

from typing import List

from ..exceptions import DraftNotFoundError
from ..models import Draft
from .base import BaseRepository


class DraftRepository(BaseRepository[Draft]):
    """Repository for draft persistence."""

    model_class = Draft
    not_found_error = DraftNotFoundError

    def create(
        self,
        email: str,
        html_content: str,
        is_partial: bool,
        estimated_completion: int,
    ) -> Draft:
        """Insert a draft. The caller owns the commit."""
        draft = Draft(
            email=email,
            html_content=html_content,
            is_partial=is_partial,
            estimated_completion=estimated_completion,
        )
        self.db.add(draft)
        self.db.flush()
        self.db.refresh(draft)
        return draft

    def list_by_email(self, email: str, skip: int = 0, limit: int = 50) -> List[Draft]:
        """Drafts saved under *email*, newest first."""
        return self.db.query(Draft).filter(
            Draft.email == email
        ).order_by(Draft.created_at.desc()).offset(skip).limit(limit).all()
