"""Project image and metadata placeholder substitution.

Generated HTML references images through placeholders (``project_1_final_1``,
``[FINAL_1]`` ...) and project text through ``[PROJECT_n_*]`` markers. This
module swaps them for the hosted URLs and project fields with exact string
matching in a single pass.
"""

import logging
import re
from typing import Dict, List, Optional, Sequence

from ..schemas.portfolio import Project, ProjectImage

logger = logging.getLogger(__name__)

DEFAULT_OVERVIEW = "This project showcases creative work and innovative solutions."

IMAGE_EXTENSIONS = ("jpg", "png", "jpeg", "webp", "gif")

_LEFTOVER_OVERVIEW_RE = re.compile(r"\[PROJECT_\d+_OVERVIEW\]", re.IGNORECASE)


def image_placeholders(
    kind: str, project_number: int, image_number: int, project_id: Optional[str]
) -> List[str]:
    """Every placeholder spelling that stands for one image of one project."""
    patterns = [f"project_{project_number}_{kind}_{image_number}"]
    if project_id:
        patterns.append(f"{project_id}_{kind}_{image_number}")
    patterns.extend([
        f"{kind}_{project_number}_{image_number}",
        f"project{project_number}_{kind}{image_number}",
    ])
    # Generic spellings, shared by every project; the last project wins.
    patterns.extend(f"{kind}_{image_number}.{ext}" for ext in IMAGE_EXTENSIONS)
    patterns.extend([
        f"placeholder_{kind}_{image_number}",
        f"{kind.upper()}_IMAGE_{image_number}",
        f"[{kind.upper()}_{image_number}]",
    ])
    return patterns


def build_replacements(projects: Sequence[Project]) -> Dict[str, str]:
    """Map placeholder -> replacement text. Later projects overwrite shared keys."""
    replacements: Dict[str, str] = {}
    for number, project in enumerate(projects, 1):
        images: List[tuple[str, List[ProjectImage]]] = [
            ("final", project.final_images),
            ("process", project.process_images),
        ]
        for kind, kind_images in images:
            for image_number, image in enumerate(kind_images, 1):
                url = image.url.strip()
                if not url:
                    continue
                for pattern in image_placeholders(kind, number, image_number, project.project_id):
                    replacements[pattern] = url

        replacements[f"[PROJECT_{number}_TITLE]"] = project.title
        replacements[f"[PROJECT_{number}_SUBTITLE]"] = project.subtitle
        replacements[f"[PROJECT_{number}_OVERVIEW]"] = project.overview or DEFAULT_OVERVIEW
        replacements[f"[PROJECT_{number}_CATEGORY]"] = project.display_category
        replacements[f"[PROJECT_{number}_TAGS]"] = ", ".join(project.tags)
    return replacements


def inject_images(html: str, projects: Sequence[Project]) -> str:
    """Substitute image URLs and project fields for their placeholders in *html*."""
    if not projects:
        return html

    replacements = build_replacements(projects)
    # One pass, longest alternative first: "project_1_final_1" cannot eat into
    # "project_1_final_10", and inserted URLs are never rescanned.
    pattern = re.compile("|".join(re.escape(key) for key in sorted(replacements, key=len, reverse=True)))
    applied = 0

    def _substitute(match: re.Match) -> str:
        nonlocal applied
        applied += 1
        return replacements[match.group(0)]

    updated = pattern.sub(_substitute, html)

    updated = _LEFTOVER_OVERVIEW_RE.sub(DEFAULT_OVERVIEW, updated)

    logger.info(
        "Injected project placeholders",
        extra={"projects": len(projects), "replacements": applied},
    )
    return updated
