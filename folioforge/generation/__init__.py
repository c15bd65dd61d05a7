"""Portfolio generation core: analysis, prompting, merging and the continuation loop."""

from .completeness import analyze
from .continuation_prompt import build_continuation_prompt
from .edit_prompt import build_edit_continuation_prompt, build_edit_prompt
from .images import inject_images
from .llm_client import LiteLLMTextGenerator, TextGenerationError, TextGenerator
from .merger import merge, strip_code_fences
from .orchestrator import ContinuationAttempt, ContinuationOrchestrator
from .prompts import build_generation_prompt
from .quality import apply_fixes, assess, review

__all__ = [
    "analyze",
    "apply_fixes",
    "assess",
    "review",
    "build_continuation_prompt",
    "build_edit_prompt",
    "build_edit_continuation_prompt",
    "build_generation_prompt",
    "inject_images",
    "merge",
    "strip_code_fences",
    "LiteLLMTextGenerator",
    "TextGenerationError",
    "TextGenerator",
    "ContinuationAttempt",
    "ContinuationOrchestrator",
]
