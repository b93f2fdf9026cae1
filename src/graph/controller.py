"""Wizard step machine.

Owns the single WorkflowState. Every mutation goes through one of the
operations below; screens read ``state`` or ``current_view()`` only.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Dict, List, Optional
from .workflow import RequestState, Runner
from ..errors import ValidationError
from ..state import (
    AppStep,
    InputView,
    LandingView,
    PROCESSING_STEPS,
    ProcessingView,
    ResultView,
    ReviewDraft,
    ReviewView,
    StepView,
    WorkflowState,
)

logger = logging.getLogger(__name__)

ANALYSIS_FAILED = "Failed to analyze resume. Please check your input and try again."
GENERATION_FAILED = "Failed to generate final resume."
REFINE_FAILED = "Could not apply change. Please try again."


class WorkflowController:
    def __init__(self, runner: Runner, provider: str | None = None, timeout: Optional[float] = 45.0):
        self.runner = runner
        self.provider = provider
        self.timeout = timeout
        self.state = WorkflowState()
        self.is_refining = False
        self._token = 0

    @property
    def step(self) -> AppStep:
        return self.state.step

    @property
    def is_busy(self) -> bool:
        return self.state.step in PROCESSING_STEPS or self.is_refining

    def _move(self, step: AppStep) -> None:
        logger.info("step %s -> %s", self.state.step.value, step.value)
        self.state.step = step

    async def _run(self, request: RequestState) -> RequestState:
        """Run one request; any failure comes back as ``errors``."""
        request.provider = self.provider
        try:
            return await asyncio.wait_for(self.runner(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error("%s request timed out after %ss", request.action, self.timeout)
            return request.model_copy(update={"errors": [f"{request.action} timed out"]})
        except Exception as e:
            logger.exception("%s request failed", request.action)
            return request.model_copy(update={"errors": [str(e)]})

    def _stale(self, token: int, action: str) -> bool:
        if token != self._token:
            logger.warning("Discarding stale %s response", action)
            return True
        return False

    # -------- Operations --------
    def start(self) -> None:
        self.state.error = None
        self._move(AppStep.INPUT)

    @staticmethod
    def validate_intake(target_role: str, resume_text: str) -> None:
        if not (target_role or "").strip() or not (resume_text or "").strip():
            raise ValidationError("Both target role and resume content are required.")

    async def submit_intake(self, target_role: str, resume_text: str) -> bool:
        self.validate_intake(target_role, resume_text)
        if self.state.step != AppStep.INPUT:
            logger.warning("submit_intake ignored in step %s", self.state.step.value)
            return False

        self.state.error = None
        self.state.target_role = target_role.strip()
        self.state.resume_text = resume_text
        self.state.analysis = None
        self.state.review = None
        self.state.result = None
        self._move(AppStep.PROCESSING_ANALYSIS)

        token = self._token
        final = await self._run(RequestState(
            action="analyze",
            target_role=self.state.target_role,
            resume_text=resume_text,
        ))
        if self._stale(token, "analysis"):
            return False
        if final.errors or final.analysis is None:
            logger.error("Analysis failed: %s", "; ".join(final.errors) or "no result")
            self.state.error = ANALYSIS_FAILED
            self._move(AppStep.INPUT)
            return False

        self.state.analysis = final.analysis
        self.state.review = ReviewDraft.from_analysis(final.analysis)
        self._move(AppStep.ANALYSIS_REVIEW)
        return True

    async def submit_strategy(self,
                              user_answers: Optional[Dict[str, str]] = None,
                              selected_ids: Optional[List[str]] = None) -> bool:
        analysis = self.state.analysis
        if analysis is None or self.state.step != AppStep.ANALYSIS_REVIEW:
            return False
        review = self.state.review or ReviewDraft.from_analysis(analysis)
        answers = dict(review.answers if user_answers is None else user_answers)
        selected = list(review.selected_ids if selected_ids is None else selected_ids)

        self.state.error = None
        self._move(AppStep.PROCESSING_GENERATION)

        token = self._token
        final = await self._run(RequestState(
            action="generate",
            target_role=self.state.target_role,
            resume_text=self.state.resume_text,
            analysis=analysis,
            user_answers=answers,
            selected_ids=selected,
        ))
        if self._stale(token, "generation"):
            return False
        if final.errors or final.result is None:
            logger.error("Generation failed: %s", "; ".join(final.errors) or "no result")
            self.state.error = GENERATION_FAILED
            # Back to review so answers and selections are not lost
            self._move(AppStep.ANALYSIS_REVIEW)
            return False

        self.state.result = final.result
        self._move(AppStep.RESULT)
        return True

    async def refine(self, instruction: str, selected_text: str) -> bool:
        if not (instruction or "").strip() or not (selected_text or "").strip():
            raise ValidationError("Select some text in the preview and describe the change.")
        result = self.state.result
        if result is None or self.state.step != AppStep.RESULT:
            return False
        if self.is_refining:
            logger.warning("Refinement already in progress; ignoring request")
            return False

        self.is_refining = True
        token = self._token
        try:
            final = await self._run(RequestState(
                action="refine",
                current_resume=result.optimized_resume,
                instruction=instruction,
                selected_text=selected_text,
            ))
        finally:
            # after a reset the flag belongs to whichever refinement runs now
            if token == self._token:
                self.is_refining = False

        if self._stale(token, "refinement"):
            return False
        if final.errors or final.refined_resume is None:
            logger.error("Refinement failed: %s", "; ".join(final.errors) or "no result")
            self.state.error = REFINE_FAILED
            return False

        self.state.result = result.model_copy(update={
            "optimized_resume": final.refined_resume,
            "change_overview": f"Manual Update: {instruction}",
        })
        return True

    def reset(self) -> None:
        # resume_text is kept so the same resume can be re-run against a new role
        self._token += 1
        self.is_refining = False
        self.state.analysis = None
        self.state.review = None
        self.state.result = None
        self.state.target_role = ""
        self.state.error = None
        self._move(AppStep.INPUT)

    def dismiss_error(self) -> None:
        self.state.error = None

    def current_view(self) -> StepView:
        s = self.state
        if s.step == AppStep.INPUT:
            return InputView(target_role=s.target_role, resume_text=s.resume_text)
        if s.step in PROCESSING_STEPS:
            return ProcessingView(step=s.step, target_role=s.target_role)
        if s.step == AppStep.ANALYSIS_REVIEW and s.analysis is not None:
            if s.review is None:
                s.review = ReviewDraft.from_analysis(s.analysis)
            return ReviewView(target_role=s.target_role, analysis=s.analysis, review=s.review)
        if s.step == AppStep.RESULT and s.result is not None:
            return ResultView(result=s.result, original_text=s.resume_text, is_refining=self.is_refining)
        return LandingView()
