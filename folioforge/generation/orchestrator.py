"""Continuation orchestrator: generate, analyze, and resume truncated output.

State flow for one request::

    Generating -> Analyzing -> Complete
                            -> NeedsContinuation -> Continuing -> Analyzing ...
                                                 -> ExhaustedRetries

The same flow serves new portfolios and AI edits of an existing one; only the
prompts differ. Retries are an explicit bounded loop. Every collaborator
(text generator, prompt builders, image injector, quality review) is injected
by the application entry point, so the orchestrator holds no global state and
tests can drive it with stubs. Nothing raised by a model call escapes: every
outcome is a ``GenerationResult``.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple, Union

from ..schemas.generation import (
    CompletionVerdict,
    GenerationContext,
    GenerationResult,
    QualityReport,
)
from ..schemas.portfolio import PortfolioRequest, Project
from .completeness import analyze
from .continuation_prompt import build_continuation_prompt
from .edit_prompt import build_edit_continuation_prompt, build_edit_prompt
from .images import inject_images
from .llm_client import TextGenerationError, TextGenerator
from .merger import merge, strip_code_fences
from .prompts import build_generation_prompt
from .quality import review

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 2
DEFAULT_RETRY_DELAY = 1.0
DEFAULT_MAX_TOKENS = 8000
DEFAULT_TEMPERATURE = 0.7

CANCELLED_ERROR = "Generation cancelled"


@dataclass(frozen=True)
class ContinuationAttempt:
    """One round of the continuation loop. Logged, never persisted."""
    attempt_number: int
    input_fragment: str
    output_fragment: str
    merged_result: str
    verdict: CompletionVerdict


class ContinuationOrchestrator:
    """Drives a document from first model call to a complete (or best partial) result."""

    def __init__(
        self,
        generator: TextGenerator,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
        prompt_builder: Callable[[str, GenerationContext], str] = build_continuation_prompt,
        generation_prompt_builder: Callable[[PortfolioRequest], str] = build_generation_prompt,
        edit_prompt_builder: Callable[[str, str], str] = build_edit_prompt,
        edit_continuation_builder: Callable[[str, str], str] = build_edit_continuation_prompt,
        image_injector: Callable[[str, Sequence[Project]], str] = inject_images,
        quality_review: Callable[[str, Optional[str]], Tuple[str, QualityReport]] = review,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.generator = generator
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.prompt_builder = prompt_builder
        self.generation_prompt_builder = generation_prompt_builder
        self.edit_prompt_builder = edit_prompt_builder
        self.edit_continuation_builder = edit_continuation_builder
        self.image_injector = image_injector
        self.quality_review = quality_review

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def generate(
        self,
        request: PortfolioRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GenerationResult:
        """Generate a portfolio for *request*, continuing it if it comes back truncated.

        A failing first call is retried up to ``max_attempts`` times. If none
        succeeds there is no document at all, so the result is a plain failure
        with ``incomplete=False``.
        """
        first = await self._first_call(
            self.generation_prompt_builder(request), "Initial generation", cancel_event
        )
        if isinstance(first, GenerationResult):
            return first

        logger.info(
            "Initial generation returned %d chars",
            len(first),
            extra={"person": request.personal_info.name, "projects": len(request.projects)},
        )
        return await self._settle(
            first, self._portfolio_prompts(request), cancel_event,
            projects=request.projects, person_name=request.personal_info.name,
        )

    async def continue_manually(
        self,
        partial_html: str,
        request: PortfolioRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GenerationResult:
        """Resume a partial document the client sent back ("keep going")."""
        return await self._settle(
            partial_html.strip(), self._portfolio_prompts(request), cancel_event,
            projects=request.projects, person_name=request.personal_info.name,
        )

    async def edit(
        self,
        html: str,
        edit_request: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GenerationResult:
        """Apply *edit_request* to an existing portfolio.

        The model returns the whole modified document, which goes through the
        same analysis and continuation loop as a new portfolio. Images were
        injected when the portfolio was first generated, so only the quality
        review runs on success.
        """
        first = await self._first_call(
            self.edit_prompt_builder(html, edit_request), "Edit", cancel_event
        )
        if isinstance(first, GenerationResult):
            return first

        logger.info("Edit returned %d chars (input %d)", len(first), len(html))
        return await self._settle(first, self._edit_prompts(edit_request), cancel_event)

    async def continue_edit(
        self,
        partial_html: str,
        edit_request: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GenerationResult:
        """Resume a partial edit result the client sent back."""
        return await self._settle(partial_html.strip(), self._edit_prompts(edit_request), cancel_event)

    def _portfolio_prompts(self, request: PortfolioRequest) -> Callable[[str], str]:
        context = request.to_context()
        return lambda current: self.prompt_builder(current, context)

    def _edit_prompts(self, edit_request: str) -> Callable[[str], str]:
        return lambda current: self.edit_continuation_builder(current, edit_request)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def _first_call(
        self,
        prompt: str,
        label: str,
        cancel_event: Optional[asyncio.Event],
    ) -> Union[str, GenerationResult]:
        """Fence-stripped text of the first successful call, or the failure result."""
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_attempts + 1):
            if _is_set(cancel_event):
                return GenerationResult(success=False, error=CANCELLED_ERROR)
            try:
                _, html = await self._call_model(prompt)
                return html
            except Exception as exc:
                last_error = exc
                logger.warning(
                    "%s failed (attempt %d/%d): %s",
                    label, attempt, self.max_attempts, exc,
                )
                if attempt < self.max_attempts and await self._pause(cancel_event):
                    return GenerationResult(success=False, error=CANCELLED_ERROR)

        return GenerationResult(
            success=False,
            incomplete=False,
            attempts_made=0,
            error=f"{label} failed after {self.max_attempts} attempts: {last_error}",
        )

    async def _settle(
        self,
        html: str,
        next_prompt: Callable[[str], str],
        cancel_event: Optional[asyncio.Event],
        *,
        projects: Sequence[Project] = (),
        person_name: Optional[str] = None,
    ) -> GenerationResult:
        verdict = analyze(html)
        if verdict.is_complete:
            return self._complete(html, verdict, 0, projects, person_name)
        if not verdict.can_continue:
            logger.info(
                "Document incomplete and not continuable (%d%%)",
                verdict.estimated_completion,
                extra={"issues": verdict.issues, "length": verdict.stats.total_length},
            )
            return self._incomplete(
                html, verdict, 0,
                error="Generated document is incomplete and too short to continue",
            )

        current = html
        attempts = 0

        while attempts < self.max_attempts:
            if _is_set(cancel_event):
                return self._incomplete(current, verdict, attempts, error=CANCELLED_ERROR)
            attempts += 1

            try:
                raw, output = await self._call_model(next_prompt(current))
            except Exception as exc:
                logger.warning(
                    "Continuation call failed (attempt %d/%d): %s",
                    attempts, self.max_attempts, exc,
                )
                if attempts < self.max_attempts and await self._pause(cancel_event):
                    return self._incomplete(current, verdict, attempts, error=CANCELLED_ERROR)
                continue

            merged = merge(current, output)
            verdict = analyze(merged)
            _log_attempt(ContinuationAttempt(
                attempt_number=attempts,
                input_fragment=current,
                output_fragment=raw,
                merged_result=merged,
                verdict=verdict,
            ))
            current = merged
            if verdict.is_complete:
                return self._complete(current, verdict, attempts, projects, person_name)

        return self._incomplete(
            current, verdict, attempts,
            error=f"Document still incomplete after {attempts} continuation attempts",
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _call_model(self, prompt: str) -> Tuple[str, str]:
        """Return the raw completion and its fence-stripped text."""
        raw = await self.generator.complete(prompt, self.max_tokens, self.temperature)
        text = strip_code_fences(raw or "")
        if not text:
            raise TextGenerationError("Model returned no HTML")
        return raw, text

    async def _pause(self, cancel_event: Optional[asyncio.Event]) -> bool:
        """Wait ``retry_delay`` seconds. Returns True if cancelled meanwhile."""
        if cancel_event is None:
            await asyncio.sleep(self.retry_delay)
            return False
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=self.retry_delay)
            return True
        except asyncio.TimeoutError:
            return False

    def _complete(
        self,
        html: str,
        verdict: CompletionVerdict,
        attempts_made: int,
        projects: Sequence[Project],
        person_name: Optional[str],
    ) -> GenerationResult:
        logger.info(
            "Document complete (%d%%) after %d continuation attempt(s)",
            verdict.estimated_completion, attempts_made,
        )
        if projects:
            html = self.image_injector(html, projects)
        html, quality = self.quality_review(html, person_name)
        return GenerationResult(
            success=True,
            html=html,
            completion_status=verdict,
            attempts_made=attempts_made,
            quality=quality,
        )

    @staticmethod
    def _incomplete(
        html: str,
        verdict: CompletionVerdict,
        attempts_made: int,
        error: str,
    ) -> GenerationResult:
        return GenerationResult(
            success=False,
            incomplete=bool(html),
            partial_html=html or None,
            completion_status=verdict,
            attempts_made=attempts_made,
            error=error,
        )


def _is_set(event: Optional[asyncio.Event]) -> bool:
    return event is not None and event.is_set()


def _log_attempt(attempt: ContinuationAttempt) -> None:
    logger.info(
        "Continuation attempt %d: %d -> %d chars, %d%% complete",
        attempt.attempt_number,
        len(attempt.input_fragment),
        len(attempt.merged_result),
        attempt.verdict.estimated_completion,
        extra={
            "attempt": attempt.attempt_number,
            "output_chars": len(attempt.output_fragment),
            "is_complete": attempt.verdict.is_complete,
            "issues": attempt.verdict.issues,
        },
    )
