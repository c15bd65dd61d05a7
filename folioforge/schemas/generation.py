"""Generation result schemas: completeness verdicts and generation outcomes."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class StructureFlags(BaseModel):
    """Presence of each structural marker in a candidate document."""
    has_doctype: bool = False
    has_html_open: bool = False
    has_html_close: bool = False
    has_body_open: bool = False
    has_body_close: bool = False
    has_head_section: bool = False
    has_style_tag: bool = False
    has_script_tag: bool = False
    has_footer: bool = False


class TagStats(BaseModel):
    """Raw tag counts behind the balance heuristic."""
    total_length: int = 0
    open_tags: int = 0
    close_tags: int = 0
    self_closing_tags: int = 0
    tag_balance: float = 0.0  # closing / max(expected closing, 1)


class CompletionVerdict(BaseModel):
    """Analyzer output: whether a document can ship, and if not, whether it can be resumed."""
    is_complete: bool
    estimated_completion: int = Field(..., ge=0, le=100)
    issues: List[str] = []  # detection order, never deduplicated
    can_continue: bool
    structure: StructureFlags = StructureFlags()
    stats: TagStats = TagStats()


class QualityIssue(BaseModel):
    """One failed quality check on a finished document."""
    code: str
    severity: Literal["high", "medium", "low"]
    message: str


class QualityReport(BaseModel):
    """Accessibility and technical review of a finished document, after automatic fixes."""
    score: int = Field(..., ge=0, le=100)  # share of checks passed
    status: Literal["excellent", "good", "fair", "poor", "critical"]
    issues: List[QualityIssue] = []
    passed: List[str] = []
    fixes_applied: List[str] = []


class GenerationContext(BaseModel):
    """Original generation parameters restated to the model on every continuation."""
    person_name: str
    title: str
    project_count: int = 0
    style_preferences: Dict[str, Any] = {}


class GenerationResult(BaseModel):
    """The only structure the generation core returns across its boundary.

    ``html`` is set iff ``success``; ``incomplete`` is true iff the run failed
    but a partial document exists, in which case it is in ``partial_html``.
    """
    success: bool
    html: Optional[str] = None
    incomplete: bool = False
    partial_html: Optional[str] = None
    completion_status: Optional[CompletionVerdict] = None
    attempts_made: int = 0
    quality: Optional[QualityReport] = None  # set only on success
    error: Optional[str] = None
