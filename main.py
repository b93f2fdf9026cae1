from __future__ import annotations
import argparse
import asyncio
import json
from pathlib import Path
import sys
from pathlib import Path as _P
BASE_DIR = _P(__file__).parent.resolve()
sys.path.insert(0, str(BASE_DIR))
from src.errors import ValidationError
from src.graph.controller import WorkflowController
from src.graph.workflow import build_graph
from src.layout.pagination import BlockHeightEstimator, paginate
from src.layout.render import render_markdown
from src.llm_provider import normalize_provider
from src.settings import configure_logging, load_settings
from src.utils import load_resume


async def run(args: argparse.Namespace) -> int:
    settings = load_settings()
    configure_logging(settings.log_level)
    provider = normalize_provider(args.provider or settings.provider)
    runner = build_graph(temperature=settings.temperature, timeout=settings.request_timeout,
                         models={"gemini": settings.gemini_model, "mistral": settings.mistral_model})
    controller = WorkflowController(runner, provider=provider, timeout=settings.request_timeout)

    controller.start()
    try:
        await controller.submit_intake(args.role, load_resume(args.resume))
    except ValidationError as e:
        print(f"[ERR] {e}")
        return 2
    if controller.state.error or controller.state.analysis is None:
        print(f"[ERR] {controller.state.error}")
        return 1

    analysis = controller.state.analysis
    print(f"[OK] Match score for '{controller.state.target_role}': {analysis.match_score}/100")
    print(analysis.executive_summary)
    for q in analysis.clarification_questions:
        print(f" ? [{q.id}] {q.question}")

    answers = {}
    if args.answers:
        answers = json.loads(Path(args.answers).read_text(encoding="utf-8"))
    selected = [s.id for s in analysis.strategic_suggestions if s.id not in set(args.skip)]
    for s in analysis.strategic_suggestions:
        mark = "x" if s.id in selected else " "
        print(f" [{mark}] {s.category.value}: {s.label}")

    await controller.submit_strategy(answers, selected)
    if controller.state.error or controller.state.result is None:
        print(f"[ERR] {controller.state.error}")
        return 1

    result = controller.state.result
    pages = paginate(result.optimized_resume, settings.layout.content_height,
                     BlockHeightEstimator(settings.layout))
    out_path = Path(args.out)
    out_path.write_text(render_markdown(pages), encoding="utf-8")
    if result.change_overview:
        print("Changes:")
        print(result.change_overview)
    else:
        print("[WARN] Model returned no change overview.")
    print(f"[OK] {len(pages)} page(s) written to: {out_path.resolve()}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Resume Pivot Studio: tailor a resume to a target role (Gemini/Mistral)")
    parser.add_argument("--resume", required=True, help="Path to resume file (.txt, .md or .pdf)")
    parser.add_argument("--role", required=True, help="Target role, e.g. 'Director of Engineering'")
    parser.add_argument("--out", default="resume.md", help="Output markdown path")
    parser.add_argument("--provider", default=None, choices=["auto", "gemini", "mistral"], help="LLM provider selection")
    parser.add_argument("--answers", default=None, help="JSON file mapping clarification question ids to answers")
    parser.add_argument("--skip", nargs="*", default=[], help="Suggestion ids to leave out")
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
