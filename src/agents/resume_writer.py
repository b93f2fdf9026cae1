from __future__ import annotations
from typing import Any, Dict, Iterable, List
from langchain_core.messages import HumanMessage, SystemMessage
from ..state import AnalysisResult, OptimizationResult, ResumeDocument, WireModel
from ..utils import message_text, parse_json_response

NO_ANSWER = "No details provided."

RESUME_SCHEMA = (
    '{"header": {"fullName": str, "email": str, "phone": str?, "linkedinUrl": str?, "location": str?, "title": str?}, '
    '"summary": str, "skills": string[], '
    '"experience": [{"id": str?, "company": str, "role": str, "dateRange": str, "location": str?, "achievements": string[]}], '
    '"education": [{"id": str?, "institution": str, "degree": str, "dateRange": str, "details": str?}]}'
)


class GenerationPayload(WireModel):
    change_overview: str = ""
    optimized_resume: ResumeDocument


def build_strategy_context(analysis: AnalysisResult, selected_ids: Iterable[str]) -> str:
    selected = set(selected_ids)
    return "; ".join(
        f"[{s.category.value}] {s.label}: {s.description}"
        for s in analysis.strategic_suggestions
        if s.id in selected
    )


def build_answer_context(analysis: AnalysisResult, answers: Dict[str, str]) -> str:
    return "\n\n".join(
        f"Q: {q.question} \n Context: {q.context} \n User Answer: {(answers.get(q.id) or '').strip() or NO_ANSWER}"
        for q in analysis.clarification_questions
    )


def build_generation_prompt(resume_text: str, target_role: str, strategy_context: str,
                            answer_context: str) -> List[Any]:
    system = SystemMessage(content=(
        "You are a professional Resume Writer. Return ONLY JSON, no markdown, no code fences."
    ))
    human = HumanMessage(content=f"""
Target Role: "{target_role}".

Original Data:
\"\"\"{resume_text}\"\"\"

Strategic Directive:
{strategy_context or "Apply general best practice for the target role."}

New Evidence Provided by User:
{answer_context or NO_ANSWER}

Task:
1. Rewrite the resume completely. Use a formal, executive tone. Incorporate the new evidence. Execute the strategic directives. Optimize for ATS keywords.
2. Provide a "changeOverview": a detailed bulleted string explaining exactly what was changed and why, contrasting the old vs. new.

Schema (JSON) you must return exactly:
{{"changeOverview": str, "optimizedResume": {RESUME_SCHEMA}}}
""")
    return [system, human]


async def generate_tailored_resume(resume_text: str,
                                   target_role: str,
                                   analysis: AnalysisResult,
                                   user_answers: Dict[str, str],
                                   selected_ids: List[str],
                                   llm: Any) -> OptimizationResult:
    messages = build_generation_prompt(
        resume_text,
        target_role,
        build_strategy_context(analysis, selected_ids),
        build_answer_context(analysis, user_answers),
    )
    resp = await llm.ainvoke(messages)
    payload = parse_json_response(message_text(resp), GenerationPayload, "Generation")
    return OptimizationResult(
        analysis=analysis,
        optimized_resume=payload.optimized_resume.with_ids(),
        change_overview=payload.change_overview,
    )
