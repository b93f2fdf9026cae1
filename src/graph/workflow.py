from __future__ import annotations
import logging
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional, Tuple
from langgraph.graph import StateGraph, START, END
from pydantic import BaseModel, Field
from ..state import AnalysisResult, OptimizationResult, ResumeDocument
from ..llm_provider import get_llm, normalize_provider
from ..agents.gap_analyst import perform_initial_analysis
from ..agents.resume_writer import generate_tailored_resume
from ..agents.resume_editor import refine_resume_content

logger = logging.getLogger(__name__)

Action = Literal["analyze", "generate", "refine"]


class RequestState(BaseModel):
    action: Action
    provider: str | None = None

    # Input
    target_role: str = ""
    resume_text: str = ""
    user_answers: Dict[str, str] = Field(default_factory=dict)
    selected_ids: List[str] = Field(default_factory=list)
    current_resume: Optional[ResumeDocument] = None
    instruction: str = ""
    selected_text: str = ""

    # Output (analysis is also the input of "generate")
    analysis: Optional[AnalysisResult] = None
    result: Optional[OptimizationResult] = None
    refined_resume: Optional[ResumeDocument] = None
    errors: List[str] = Field(default_factory=list)


Runner = Callable[[RequestState], Awaitable[RequestState]]


def build_graph(llm: Any = None, temperature: float = 0.2, timeout: Optional[float] = None,
                models: Optional[Dict[str, str]] = None) -> Runner:
    # llms are built lazily, once per provider, unless one is injected
    llm_holder: Dict[str, Any] = {}

    def ensure_llm(state: RequestState) -> Tuple[Any, Optional[str]]:
        if llm is not None:
            return llm, None
        prov = normalize_provider(state.provider)
        if prov not in llm_holder:
            try:
                llm_holder[prov] = get_llm(
                    provider=prov,
                    temperature=temperature,
                    timeout=timeout,
                    gemini_model=(models or {}).get("gemini"),
                    mistral_model=(models or {}).get("mistral"),
                )
            except Exception as e:
                logger.error("LLM init error (%s): %s", prov, e)
                return None, f"LLM init error ({prov}): {e}"
        return llm_holder[prov], None

    def route(state: RequestState) -> str:
        return state.action

    async def analyze_node(state: RequestState) -> dict:
        model, err = ensure_llm(state)
        if err:
            return {"errors": state.errors + [err]}
        try:
            analysis = await perform_initial_analysis(state.resume_text, state.target_role, model)
        except Exception as e:
            logger.exception("Analysis failed")
            return {"errors": state.errors + [f"Analysis error: {e}"]}
        return {"analysis": analysis}

    async def generate_node(state: RequestState) -> dict:
        if state.analysis is None:
            return {"errors": state.errors + ["No analysis to generate from."]}
        model, err = ensure_llm(state)
        if err:
            return {"errors": state.errors + [err]}
        try:
            result = await generate_tailored_resume(
                state.resume_text,
                state.target_role,
                state.analysis,
                state.user_answers,
                state.selected_ids,
                model,
            )
        except Exception as e:
            logger.exception("Generation failed")
            return {"errors": state.errors + [f"Generation error: {e}"]}
        return {"result": result}

    async def refine_node(state: RequestState) -> dict:
        if state.current_resume is None:
            return {"errors": state.errors + ["No resume to refine."]}
        model, err = ensure_llm(state)
        if err:
            return {"errors": state.errors + [err]}
        try:
            refined = await refine_resume_content(
                state.current_resume, state.instruction, state.selected_text, model
            )
        except Exception as e:
            logger.exception("Refinement failed")
            return {"errors": state.errors + [f"Refinement error: {e}"]}
        return {"refined_resume": refined}

    g = StateGraph(RequestState)
    g.add_node("analyze", analyze_node)
    g.add_node("generate", generate_node)
    g.add_node("refine", refine_node)

    g.add_conditional_edges(START, route, {"analyze": "analyze", "generate": "generate", "refine": "refine"})
    g.add_edge("analyze", END)
    g.add_edge("generate", END)
    g.add_edge("refine", END)

    app = g.compile()

    async def runner(state: RequestState) -> RequestState:
        final = await app.ainvoke(state)
        # LangGraph may return a plain dict; coerce into RequestState for uniform handling
        if isinstance(final, dict):
            final = RequestState.model_validate(final)
        return final

    return runner
