from __future__ import annotations
from typing import Any, List
from langchain_core.messages import HumanMessage, SystemMessage
from ..state import AnalysisResult, StrategyCategory
from ..utils import message_text, parse_json_response

ANALYSIS_SCHEMA = (
    '{"matchScore": int 0-100, "executiveSummary": str, "strengths": string[], '
    '"hardSkillGaps": string[], "softSkillGaps": string[], "missingKeywords": string[], '
    '"clarificationQuestions": [{"id": str, "question": str, "context": str}], '
    '"strategicSuggestions": [{"id": str, "category": '
    + " | ".join(f'"{c.value}"' for c in StrategyCategory)
    + ', "label": str, "description": str, "benefit": str}]}'
)


def build_analysis_prompt(resume_text: str, target_role: str) -> List[Any]:
    system = SystemMessage(content=(
        "You are a distinguished Executive Career Consultant. Return ONLY JSON, no markdown, no code fences."
    ))
    human = HumanMessage(content=f"""
The user is applying for the role of: "{target_role}".

Resume Data:
\"\"\"
{resume_text}
\"\"\"

Objective:
Analyze the gap between the candidate's current presentation and what is required to win a "{target_role}" offer.
Do NOT rewrite the resume yet. Create a Strategic Audit Report.

Requirements:
1. Executive Summary: a formal, direct paragraph (80-100 words) addressing the candidate. State where they are strong and name the gap that will cause rejection.
2. Strengths: 3-4 key assets the candidate already has.
3. Clarification Questions: 2-3 specific details missing from their history that are critical for this role, each with a short stable id such as "q1".
4. Strategic Suggestions: exactly 4-5 pivotal changes, each with a short stable id such as "s1", categorized strictly into:
   - Formatting & Tone: narrative flow, action verbs, professional voice.
   - Skill Gaps: missing hard skills, certifications, or tools required for the role.
   - ATS & Systems: keywords, standard headings, machine-readability.
5. Gaps: missing hard/soft skills and specific missing ATS keywords.
6. Match Score: an integer from 0 to 100 for the current fit.

Schema (JSON) you must return exactly:
{ANALYSIS_SCHEMA}
""")
    return [system, human]


async def perform_initial_analysis(resume_text: str, target_role: str, llm: Any) -> AnalysisResult:
    resp = await llm.ainvoke(build_analysis_prompt(resume_text, target_role))
    return parse_json_response(message_text(resp), AnalysisResult, "Analysis")
