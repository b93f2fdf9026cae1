from __future__ import annotations
from typing import Any, List
from langchain_core.messages import HumanMessage, SystemMessage
from ..state import ResumeDocument
from ..utils import message_text, parse_json_response
from .resume_writer import RESUME_SCHEMA


def build_refine_prompt(resume: ResumeDocument, instruction: str, selected_text: str) -> List[Any]:
    system = SystemMessage(content=(
        "You are an expert Resume Editor. Return ONLY JSON, no markdown, no code fences."
    ))
    human = HumanMessage(content=f"""
Current Resume Data (JSON):
{resume.model_dump_json(by_alias=True, exclude_none=True)}

User Selection: "{selected_text}"
User Instruction: "{instruction}"

Task:
1. Locate the section in the resume that corresponds to the User Selection.
2. Apply the User Instruction ONLY to that section. Do not change other parts of the resume.
3. If the instruction implies adding a skill, add it to the skills array.
4. If the instruction implies changing a bullet point, rewrite that specific bullet point to be more impactful, professional, or accurate based on the instruction.
5. Keep every existing "id" unchanged.

Return the FULL updated resume JSON with this schema:
{RESUME_SCHEMA}
""")
    return [system, human]


async def refine_resume_content(resume: ResumeDocument, instruction: str, selected_text: str,
                                llm: Any) -> ResumeDocument:
    resp = await llm.ainvoke(build_refine_prompt(resume, instruction, selected_text))
    refined = parse_json_response(message_text(resp), ResumeDocument, "Refinement")
    return refined.with_ids()
