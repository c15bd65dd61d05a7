"""Portfolio request schemas.

Request bodies are validated here, once, at the HTTP boundary. The generation
core only ever receives these models.
"""

import re
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from .generation import GenerationContext

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

ColorScheme = Literal["monochrome", "minimal", "warm", "cool", "vibrant", "earthy", "pastel"]
LayoutStyle = Literal["minimal", "grid", "masonry", "magazine", "asymmetric", "fullscreen"]
Typography = Literal["modern", "classic", "artistic", "minimal", "bold", "elegant"]
Mood = Literal["professional", "creative", "playful", "elegant", "edgy", "warm", "minimal"]

MAX_PROJECTS = 10


def validate_email(v: Optional[str]) -> Optional[str]:
    """Shared email check: ``None``/blank passes through, anything else must look like an address."""
    if v is None:
        return v
    v = v.strip()
    if not v:
        return None
    if not _EMAIL_RE.match(v):
        raise ValueError("Invalid email format")
    return v


def _normalize_social_url(field: str, value: str) -> str:
    """Prefix scheme-less profile links the way users usually type them."""
    url = value.strip()
    if url.startswith(("http://", "https://")):
        return url
    if field == "linkedin" and not url.startswith("linkedin.com"):
        return f"https://linkedin.com/in/{url}"
    if field == "instagram" and not url.startswith("instagram.com"):
        return f"https://instagram.com/{url.replace('@', '')}"
    if field == "behance" and not url.startswith("behance.net"):
        return f"https://behance.net/{url}"
    return f"https://{url}"


class PersonalInfo(BaseModel):
    """Who the portfolio is for."""
    name: str = Field(..., max_length=100)
    title: str = Field(..., max_length=150)
    email: Optional[str] = None
    bio: str = Field(default="", max_length=1000)
    phone: Optional[str] = None
    website: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None
    behance: Optional[str] = None
    dribbble: Optional[str] = None
    skills: List[str] = []

    @field_validator("name", "title")
    @classmethod
    def require_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return validate_email(v)

    @field_validator("website", "linkedin", "instagram", "behance", "dribbble")
    @classmethod
    def normalize_url(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return _normalize_social_url(info.field_name, v)

    @field_validator("skills")
    @classmethod
    def validate_skills(cls, v: List[str]) -> List[str]:
        cleaned = []
        for index, skill in enumerate(v):
            skill = skill.strip()
            if not skill:
                raise ValueError(f"skills[{index}] must be a non-empty string")
            if len(skill) > 50:
                raise ValueError(f"skills[{index}] must be less than 50 characters")
            cleaned.append(skill)
        return cleaned


class ProjectImage(BaseModel):
    """A hosted project image (already uploaded; hosting is out of scope)."""
    url: str
    alt: Optional[str] = None


class Project(BaseModel):
    """One portfolio project."""
    project_id: Optional[str] = None
    title: str = Field(..., max_length=200)
    subtitle: str = ""
    overview: str = Field(default="", max_length=2000)
    category: Optional[str] = None
    custom_category: Optional[str] = None
    tags: List[str] = []
    final_images: List[ProjectImage] = []
    process_images: List[ProjectImage] = []

    @field_validator("title")
    @classmethod
    def require_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Project title is required")
        return v

    @model_validator(mode="after")
    def require_category(self) -> "Project":
        if not (self.category or self.custom_category):
            raise ValueError("Project category is required")
        return self

    @property
    def display_category(self) -> str:
        return self.category or self.custom_category or ""


class StylePreferences(BaseModel):
    """Optional look-and-feel hints."""
    color_scheme: Optional[ColorScheme] = None
    layout_style: Optional[LayoutStyle] = None
    typography: Optional[Typography] = None
    mood: Optional[Mood] = None


class PortfolioRequest(BaseModel):
    """Request body for portfolio generation."""
    personal_info: PersonalInfo
    projects: List[Project] = Field(..., min_length=1, max_length=MAX_PROJECTS)
    style_preferences: StylePreferences = StylePreferences()
    custom_design_request: str = Field(default="", max_length=1000)

    def to_context(self) -> GenerationContext:
        """The slice of the request the continuation prompt restates."""
        return GenerationContext(
            person_name=self.personal_info.name,
            title=self.personal_info.title,
            project_count=len(self.projects),
            style_preferences=self.style_preferences.model_dump(exclude_none=True),
        )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "personal_info": {
                        "name": "Ada Moreau",
                        "title": "Brand Designer",
                        "email": "ada@example.com",
                        "bio": "Designing identities for independent studios.",
                        "skills": ["Branding", "Typography"],
                    },
                    "projects": [
                        {
                            "title": "Lumen Coffee",
                            "category": "branding",
                            "overview": "Identity system for a specialty roaster.",
                            "final_images": [{"url": "https://res.cloudinary.com/demo/lumen.jpg"}],
                        }
                    ],
                    "style_preferences": {"color_scheme": "warm", "mood": "creative"},
                }
            ]
        }
    }


class ContinueRequest(PortfolioRequest):
    """Request body for a user-triggered "keep going" on a partial result."""
    partial_html: str = Field(..., min_length=1)


class EditRequest(BaseModel):
    """Request body for an AI edit of an existing portfolio.

    ``partial_html`` resumes an edit whose result came back truncated; the
    same ``edit_request`` must be sent with it.
    """
    html: str = Field(..., min_length=1)
    edit_request: str = Field(..., min_length=1, max_length=1000)
    partial_html: Optional[str] = None

    @field_validator("edit_request")
    @classmethod
    def require_edit_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "html": "<!DOCTYPE html><html>...</html>",
                    "edit_request": "Make the header background dark blue",
                }
            ]
        }
    }


class AnalyzeRequest(BaseModel):
    """Request body for a standalone completeness check."""
    html: str
