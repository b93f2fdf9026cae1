from __future__ import annotations
from enum import Enum
from typing import Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class AppStep(str, Enum):
    LANDING = "LANDING"
    INPUT = "INPUT"
    PROCESSING_ANALYSIS = "PROCESSING_ANALYSIS"
    ANALYSIS_REVIEW = "ANALYSIS_REVIEW"
    PROCESSING_GENERATION = "PROCESSING_GENERATION"
    RESULT = "RESULT"


PROCESSING_STEPS = {AppStep.PROCESSING_ANALYSIS, AppStep.PROCESSING_GENERATION}


class StrategyCategory(str, Enum):
    FORMATTING_TONE = "Formatting & Tone"
    SKILL_GAPS = "Skill Gaps"
    ATS_SYSTEMS = "ATS & Systems"


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -------- Analysis --------
class ClarificationQuestion(WireModel):
    id: str
    question: str
    context: str = ""


class StrategicSuggestion(WireModel):
    id: str
    category: StrategyCategory
    label: str
    description: str = ""
    benefit: str = ""


class AnalysisResult(WireModel):
    model_config = ConfigDict(frozen=True)

    match_score: int = 0
    executive_summary: str = ""
    strengths: List[str] = Field(default_factory=list)
    hard_skill_gaps: List[str] = Field(default_factory=list)
    soft_skill_gaps: List[str] = Field(default_factory=list)
    missing_keywords: List[str] = Field(default_factory=list)
    clarification_questions: List[ClarificationQuestion] = Field(default_factory=list)
    strategic_suggestions: List[StrategicSuggestion] = Field(default_factory=list)

    @field_validator("match_score", mode="before")
    @classmethod
    def _clamp_score(cls, v):
        # Models occasionally answer 105 or "62"
        try:
            score = int(round(float(v)))
        except (TypeError, ValueError, OverflowError) as e:
            raise ValueError(f"matchScore must be a number, got {v!r}") from e
        return max(0, min(100, score))

    def suggestions_by_category(self) -> Dict[StrategyCategory, List[StrategicSuggestion]]:
        grouped: Dict[StrategyCategory, List[StrategicSuggestion]] = {c: [] for c in StrategyCategory}
        for s in self.strategic_suggestions:
            grouped[s.category].append(s)
        return grouped


class ReviewDraft(BaseModel):
    """Answers and pivot selection held by the review step."""
    answers: Dict[str, str] = Field(default_factory=dict)
    selected_ids: List[str] = Field(default_factory=list)

    @classmethod
    def from_analysis(cls, analysis: AnalysisResult) -> "ReviewDraft":
        return cls(selected_ids=[s.id for s in analysis.strategic_suggestions])

    def is_selected(self, suggestion_id: str) -> bool:
        return suggestion_id in self.selected_ids

    def toggle(self, suggestion_id: str) -> None:
        if suggestion_id in self.selected_ids:
            self.selected_ids = [sid for sid in self.selected_ids if sid != suggestion_id]
        else:
            self.selected_ids = self.selected_ids + [suggestion_id]

    def set_answer(self, question_id: str, text: str) -> None:
        self.answers = {**self.answers, question_id: text}


# -------- Resume document --------
class ResumeHeader(WireModel):
    full_name: str
    email: str
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    location: Optional[str] = None
    title: Optional[str] = None

    def contact_line(self) -> str:
        parts = [self.location, self.phone, self.email, self.linkedin_url]
        return " | ".join(p for p in parts if p)


class ExperienceItem(WireModel):
    id: Optional[str] = None
    company: str
    role: str
    date_range: str
    location: Optional[str] = None
    achievements: List[str] = Field(default_factory=list)


class EducationItem(WireModel):
    id: Optional[str] = None
    institution: str
    degree: str
    date_range: str
    details: Optional[str] = None


class ResumeDocument(WireModel):
    header: ResumeHeader
    summary: str = ""
    skills: List[str] = Field(default_factory=list)
    experience: List[ExperienceItem] = Field(default_factory=list)
    education: List[EducationItem] = Field(default_factory=list)

    def with_ids(self) -> "ResumeDocument":
        """Copy with an id on every experience and education entry."""
        experience = [
            item if item.id else item.model_copy(update={"id": f"exp-{i}"})
            for i, item in enumerate(self.experience)
        ]
        education = [
            item if item.id else item.model_copy(update={"id": f"edu-{i}"})
            for i, item in enumerate(self.education)
        ]
        return self.model_copy(update={"experience": experience, "education": education})


class OptimizationResult(WireModel):
    analysis: AnalysisResult
    optimized_resume: ResumeDocument
    change_overview: str = ""


# -------- Workflow --------
class WorkflowState(BaseModel):
    step: AppStep = AppStep.LANDING
    target_role: str = ""
    resume_text: str = ""
    analysis: Optional[AnalysisResult] = None
    review: Optional[ReviewDraft] = None
    result: Optional[OptimizationResult] = None
    error: Optional[str] = None


# Step views: what each screen receives from the controller
class LandingView(BaseModel):
    step: AppStep = AppStep.LANDING


class InputView(BaseModel):
    step: AppStep = AppStep.INPUT
    target_role: str = ""
    resume_text: str = ""


class ProcessingView(BaseModel):
    step: AppStep
    target_role: str


class ReviewView(BaseModel):
    step: AppStep = AppStep.ANALYSIS_REVIEW
    target_role: str
    analysis: AnalysisResult
    review: ReviewDraft


class ResultView(BaseModel):
    step: AppStep = AppStep.RESULT
    result: OptimizationResult
    original_text: str
    is_refining: bool = False


StepView = Union[LandingView, InputView, ProcessingView, ReviewView, ResultView]
