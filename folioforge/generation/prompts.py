"""Initial generation prompt for a portfolio request.

Pure functions from a validated ``PortfolioRequest`` to prompt text. Image
URLs are not embedded in the HTML by the model; it is told to emit exact
placeholders which ``images.inject_images`` substitutes afterwards.
"""

import json
from typing import Optional

from ..schemas.portfolio import PersonalInfo, PortfolioRequest, Project
from .continuation_prompt import FOOTER_STYLE, build_required_footer

SYSTEM_PROMPT = (
    "You are an expert web designer who builds single-page portfolio websites. "
    "You write complete, valid, self-contained HTML documents with embedded CSS "
    "and JavaScript, mobile-first and accessible. You follow placeholder and "
    "footer instructions exactly."
)

RESPONSE_FORMAT = (
    "CRITICAL RESPONSE FORMAT:\n"
    "- Your response must contain ONLY the HTML code\n"
    "- NO explanations, comments, or descriptions\n"
    "- NO markdown code blocks (```html)\n"
    '- NO "Here\'s your portfolio:" or similar text\n'
    "- START immediately with <!DOCTYPE html>\n"
    "- END immediately with </html>"
)

DEFAULT_OVERVIEW = "Innovative project showcasing creative expertise"


def format_social_links(info: PersonalInfo) -> str:
    links = [
        f"{label}: {url}"
        for label, url in (
            ("LinkedIn", info.linkedin),
            ("Instagram", info.instagram),
            ("Behance", info.behance),
            ("Dribbble", info.dribbble),
            ("Website", info.website),
        )
        if url
    ]
    return " | ".join(links) if links else "No social links provided"


def format_project(project: Project, index: int) -> str:
    """Describe one project and the image placeholders the model must use for it."""
    lines = [
        f'PROJECT {index}: "{project.title}"',
        f"- Placeholders: [PROJECT_{index}_TITLE], [PROJECT_{index}_SUBTITLE], "
        f"[PROJECT_{index}_OVERVIEW], [PROJECT_{index}_CATEGORY], [PROJECT_{index}_TAGS]",
        f"- Category: {project.display_category or 'Creative Work'}",
        f"- Overview: {project.overview or DEFAULT_OVERVIEW}",
        f"- Tags: {', '.join(project.tags) or 'design, creative'}",
        f"- Images: {len(project.final_images)} final + {len(project.process_images)} process",
    ]
    for kind, images in (("final", project.final_images), ("process", project.process_images)):
        for image_index, _ in enumerate(images, 1):
            lines.append(f"    src=\"project_{index}_{kind}_{image_index}\"")
    return "\n".join(lines)


def build_generation_prompt(
    request: PortfolioRequest,
    *,
    year: Optional[int] = None,
    emoji: Optional[str] = None,
) -> str:
    """Render the user message for the first generation call."""
    info = request.personal_info
    footer = build_required_footer(info.name, year=year, emoji=emoji)
    style = request.style_preferences.model_dump(exclude_none=True)

    sections = [
        "CREATIVE PORTFOLIO TASK:",

        "USER PROFILE:\n"
        f"- Name: {info.name}\n"
        f"- Title: {info.title}\n"
        f'- Bio: "{info.bio or "Passionate creative professional"}"\n'
        f"- Contact: {info.email or 'contact@portfolio.com'}\n"
        f"- Social: {format_social_links(info)}\n"
        f"- Skills: {', '.join(info.skills) or 'Creative Design'}",

        f"PROJECTS ({len(request.projects)}):\n"
        + "\n\n".join(format_project(p, i) for i, p in enumerate(request.projects, 1)),

        "IMAGE RULES:\n"
        "- Use the image placeholders above VERBATIM as the src attribute of each <img>\n"
        "- Use the text placeholders where the project title, subtitle, overview, category and tags go\n"
        "- Do not invent image URLs",

        f"STYLE PREFERENCES: {json.dumps(style, ensure_ascii=False) if style else 'Designer choice'}",
    ]
    if request.custom_design_request:
        sections.append(
            f'CUSTOM DESIGN REQUEST: "{request.custom_design_request}"\n'
            "- Make this the core design philosophy driving all aesthetic decisions"
        )
    sections.extend([
        "DESIGN REQUIREMENTS:\n"
        "1. Showcase every project with proper image integration\n"
        "2. Mobile-responsive design (mobile-first approach)\n"
        "3. Modern CSS (Grid, Flexbox, smooth animations)\n"
        "4. Embedded styles and scripts, no external build step\n"
        "5. Accessibility standards (ARIA, semantic HTML)",

        "MANDATORY FOOTER (last element before </body>):\n"
        f'<footer style="{FOOTER_STYLE}">\n'
        f"  {footer}\n"
        "</footer>",

        RESPONSE_FORMAT,
    ])
    return "\n\n".join(sections)
