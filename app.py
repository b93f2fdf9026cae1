from __future__ import annotations
from pathlib import Path
import sys
import streamlit as st
BASE_DIR = Path(__file__).parent.resolve()
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from src.settings import configure_logging, load_settings
from src.graph.workflow import build_graph
from src.graph.controller import WorkflowController
from src.llm_provider import normalize_provider
from src.ui.views import render


def get_controller() -> WorkflowController:
    """One controller per browser session, kept across reruns."""
    if "controller" not in st.session_state:
        settings = load_settings()
        configure_logging(settings.log_level)
        runner = build_graph(temperature=settings.temperature, timeout=settings.request_timeout,
                             models={"gemini": settings.gemini_model, "mistral": settings.mistral_model})
        st.session_state["controller"] = WorkflowController(
            runner,
            provider=normalize_provider(settings.provider),
            timeout=settings.request_timeout,
        )
        st.session_state["layout"] = settings.layout
    return st.session_state["controller"]


def main():
    st.set_page_config(page_title="Resume Pivot Studio", page_icon="📄", layout="wide")
    controller = get_controller()

    with st.sidebar:
        labels = {"Auto": "auto", "Gemini": "gemini", "Mistral": "mistral"}
        current = next((k for k, v in labels.items() if v == controller.provider), "Auto")
        choice = st.selectbox("LLM Provider", options=list(labels), index=list(labels).index(current),
                              disabled=controller.is_busy)
        controller.provider = labels[choice]

    render(controller)


if __name__ == "__main__":
    main()
