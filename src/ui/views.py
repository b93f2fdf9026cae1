from __future__ import annotations
import asyncio
from typing import Callable, Dict, Type
import streamlit as st
from ..errors import ValidationError
from ..graph.controller import WorkflowController
from ..layout.pagination import BlockHeightEstimator, LayoutConfig, paginate
from ..layout.render import render_document_html, render_markdown, render_page_html
from ..layout.selection import RefinementTarget, locate_selection, preview_region, selectable_spans
from ..state import (
    AppStep,
    InputView,
    LandingView,
    ProcessingView,
    ResultView,
    ReviewView,
    StepView,
    StrategyCategory,
)
from ..utils import RESUME_SUFFIXES, resume_text_from_bytes, slugify

ANALYSIS_STAGES = [
    ("Extracting Profile Data", "Parsing your resume structure and professional history..."),
    ("Market Analysis", "Scanning industry standards for {role} roles..."),
    ("Gap Identification", "Detecting where your experience doesn't match the target..."),
    ("Formulating Strategy", "Preparing strategic questions for your review..."),
]
GENERATION_STAGES = [
    ("Applying Strategy", "Integrating your feedback and selected pivots..."),
    ("Content Optimization", "Rewriting bullet points with action verbs & metrics..."),
    ("ATS Formatting", "Structuring data for automated tracking systems..."),
    ("Final Polish", "Generating your professional document..."),
]
VIEWPORT_WIDTH = 1280


def _run_step(controller: WorkflowController, stages, coro) -> None:
    """Drive one async operation while showing its progress stages."""
    role = controller.state.target_role
    with st.status(stages[0][0], expanded=True) as status:
        for label, desc in stages:
            st.write(f"**{label}**: {desc.format(role=role)}")
        ok = asyncio.run(coro)
        status.update(label="Done" if ok else "Failed", state="complete" if ok else "error")
    st.rerun()


def render_error_banner(controller: WorkflowController) -> None:
    if not controller.state.error:
        return
    cols = st.columns([10, 1])
    cols[0].error(f"Error: {controller.state.error}")
    if cols[1].button("✕", key="dismiss-error"):
        controller.dismiss_error()
        st.rerun()


def render_landing(controller: WorkflowController, view: LandingView) -> None:
    st.title("Resume Pivot Studio")
    st.caption("A strategic audit of your resume for the role you want next, then a rewrite you control.")
    st.markdown(
        "1. **Audit**: match score, strengths, and the gaps that cause rejection.\n"
        "2. **Strategy**: choose which pivots to apply and fill in missing evidence.\n"
        "3. **Rewrite**: a paginated, ATS-ready resume you can refine inline."
    )
    if st.button("Start optimizing", type="primary"):
        controller.start()
        st.rerun()


def render_input(controller: WorkflowController, view: InputView) -> None:
    st.header("Target & source")
    role = st.text_input("Target role", value=view.target_role, placeholder="e.g. Vice President of Product")
    uploaded = st.file_uploader("Upload resume (.pdf, .txt or .md)", type=list(RESUME_SUFFIXES))
    text = st.text_area("Resume content", value=view.resume_text, height=280,
                        placeholder="Alternatively, paste raw text here...")
    if uploaded is not None:
        try:
            text = resume_text_from_bytes(uploaded.name, uploaded.getvalue())
            st.caption(f"Loaded {uploaded.name} ({len(text.split())} words)")
        except (RuntimeError, ValueError) as e:
            st.warning(str(e))

    if st.button("Analyze resume", type="primary", disabled=controller.is_busy):
        try:
            controller.validate_intake(role, text)
        except ValidationError as e:
            st.warning(str(e))
            return
        _run_step(controller, ANALYSIS_STAGES, controller.submit_intake(role, text))


def render_processing(controller: WorkflowController, view: ProcessingView) -> None:
    stages = ANALYSIS_STAGES if view.step == AppStep.PROCESSING_ANALYSIS else GENERATION_STAGES
    st.info(f"Working on your {view.target_role} application...")
    for label, desc in stages:
        st.write(f"**{label}**: {desc.format(role=view.target_role)}")


def render_review(controller: WorkflowController, view: ReviewView) -> None:
    analysis, draft = view.analysis, view.review
    st.header(f"Strategic audit: {view.target_role}")
    c1, c2 = st.columns([1, 3])
    c1.metric("Match score", f"{analysis.match_score}%")
    c2.write(analysis.executive_summary)

    with st.expander("Strengths and gaps", expanded=False):
        st.markdown("**Strengths**\n" + "\n".join(f"- {s}" for s in analysis.strengths))
        st.markdown("**Hard skill gaps**\n" + "\n".join(f"- {s}" for s in analysis.hard_skill_gaps))
        st.markdown("**Soft skill gaps**\n" + "\n".join(f"- {s}" for s in analysis.soft_skill_gaps))
        st.markdown("**Missing keywords**: " + (", ".join(analysis.missing_keywords) or "none"))

    st.subheader("Strategic pivots")
    grouped = analysis.suggestions_by_category()
    for category in StrategyCategory:
        items = grouped[category]
        if not items:
            continue
        st.markdown(f"**{category.value}**")
        for s in items:
            checked = st.checkbox(f"{s.label}", value=draft.is_selected(s.id), key=f"sugg-{id(analysis)}-{s.id}",
                                  help=f"Benefit: {s.benefit}")
            st.caption(s.description)
            if checked != draft.is_selected(s.id):
                draft.toggle(s.id)

    st.subheader("Clarifications")
    for q in analysis.clarification_questions:
        answer = st.text_area(q.question, value=draft.answers.get(q.id, ""), key=f"answer-{id(analysis)}-{q.id}",
                              help=q.context)
        if answer != draft.answers.get(q.id, ""):
            draft.set_answer(q.id, answer)

    label = f"Generate tailored resume ({len(draft.selected_ids)} pivots)"
    if st.button(label, type="primary", disabled=controller.is_busy):
        _run_step(controller, GENERATION_STAGES, controller.submit_strategy())


def _layout() -> LayoutConfig:
    return st.session_state.get("layout") or LayoutConfig()


def render_result(controller: WorkflowController, view: ResultView) -> None:
    result = view.result
    resume = result.optimized_resume
    config = _layout()
    pages = paginate(resume, config.content_height, BlockHeightEstimator(config))

    top = st.columns([1, 2, 2])
    if top[0].button("← Back"):
        controller.reset()
        st.rerun()
    mode = top[1].radio("View", ["Result", "Compare"], horizontal=True, label_visibility="collapsed")
    name = slugify(resume.header.full_name)
    with top[2]:
        st.download_button("Download .md", data=render_markdown(pages).encode("utf-8"),
                           file_name=f"resume-{name}.md", mime="text/markdown")
        st.download_button("Download for Google Docs (.html)", data=render_document_html(resume).encode("utf-8"),
                           file_name=f"resume-{name}.html", mime="text/html")

    with st.sidebar:
        st.metric("Original match score", f"{result.analysis.match_score}%")
        st.markdown("**What changed**")
        st.write(result.change_overview)
        st.markdown("**Critical gaps**\n" + "\n".join(f"- {g}" for g in result.analysis.hard_skill_gaps[:3]))
        st.markdown("**Missing keywords**: " + (", ".join(result.analysis.missing_keywords[:3]) or "None detected"))

    _render_refine_popover(controller, pages, config, view.is_refining)

    if mode == "Compare":
        left, right = st.columns(2)
        left.code(view.original_text, language=None)
        target = right
    else:
        target = st.container()
    with target:
        st.caption(f"{len(pages)} page(s)")
        html = "".join(render_page_html(p, config, i + 1) for i, p in enumerate(pages))
        st.markdown(f'<div id="resume-preview-container">{html}</div>', unsafe_allow_html=True)


def _render_refine_popover(controller: WorkflowController, pages, config: LayoutConfig, busy: bool) -> None:
    spans = selectable_spans(pages, config)
    target = RefinementTarget(preview_region(pages, config), VIEWPORT_WIDTH)
    with st.expander("✨ Refine a passage", expanded=False):
        picked = st.selectbox("Passage", [""] + [s.text for s in spans], key="refine-span")
        typed = st.text_input("…or paste the exact text you selected", key="refine-typed")
        anchor = target.capture(locate_selection(typed or picked or "", spans))
        if (typed or picked) and anchor is None:
            st.caption("That text is not part of the resume preview.")
        instruction = st.text_input("Instruction", placeholder="E.g. Make this punchier...", key="refine-instruction")
        if st.button("Fix", disabled=busy or anchor is None):
            try:
                with st.spinner("Applying change..."):
                    asyncio.run(target.submit(controller, instruction))
            except ValidationError as e:
                st.warning(str(e))
                return
            for key in ("refine-span", "refine-typed", "refine-instruction"):
                st.session_state.pop(key, None)
            st.rerun()


RENDERERS: Dict[Type, Callable] = {
    LandingView: render_landing,
    InputView: render_input,
    ProcessingView: render_processing,
    ReviewView: render_review,
    ResultView: render_result,
}


def render(controller: WorkflowController) -> None:
    render_error_banner(controller)
    view: StepView = controller.current_view()
    RENDERERS[type(view)](controller, view)
