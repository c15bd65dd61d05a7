"""Pydantic schemas for API validation."""

from .draft import DraftCreate, DraftListResponse, DraftResponse
from .generation import (
    CompletionVerdict,
    GenerationContext,
    GenerationResult,
    QualityIssue,
    QualityReport,
    StructureFlags,
    TagStats,
)
from .portfolio import (
    AnalyzeRequest,
    ContinueRequest,
    EditRequest,
    PersonalInfo,
    PortfolioRequest,
    Project,
    ProjectImage,
    StylePreferences,
)

__all__ = [
    "DraftCreate",
    "DraftListResponse",
    "DraftResponse",
    "CompletionVerdict",
    "GenerationContext",
    "GenerationResult",
    "QualityIssue",
    "QualityReport",
    "StructureFlags",
    "TagStats",
    "AnalyzeRequest",
    "ContinueRequest",
    "EditRequest",
    "PersonalInfo",
    "PortfolioRequest",
    "Project",
    "ProjectImage",
    "StylePreferences",
]
