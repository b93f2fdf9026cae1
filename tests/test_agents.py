"""Tests for the analyze / generate / refine model calls."""

import json

import pytest

from src.agents.gap_analyst import perform_initial_analysis
from src.agents.resume_editor import refine_resume_content
from src.agents.resume_writer import (
    NO_ANSWER,
    build_answer_context,
    build_strategy_context,
    generate_tailored_resume,
)
from src.errors import ServiceError

from conftest import FakeLLM, RESUME_TEXT


class TestContexts:
    def test_strategy_context_only_selected(self, analysis):
        ctx = build_strategy_context(analysis, ["s1", "s4"])
        assert ctx == (
            "[Formatting & Tone] Lead with outcomes: Open bullets with business results.; "
            "[ATS & Systems] Standard headings: Use standard section names."
        )

    def test_answer_context_uses_placeholder(self, analysis):
        ctx = build_answer_context(analysis, {"q1": "$4M", "q2": "   "})
        blocks = ctx.split("\n\n")
        assert len(blocks) == 3
        assert blocks[0] == "Q: What was your largest budget? \n Context: Directors own budgets. \n User Answer: $4M"
        assert blocks[1].endswith(f"User Answer: {NO_ANSWER}")
        assert blocks[2].endswith(f"User Answer: {NO_ANSWER}")


class TestAnalyze:
    @pytest.mark.asyncio
    async def test_parses_fenced_json(self, analysis_json):
        llm = FakeLLM("Here you go:\n```json\n" + json.dumps(analysis_json) + "\n```")
        analysis = await perform_initial_analysis(RESUME_TEXT, "Director of Engineering", llm)
        assert analysis.match_score == 62
        assert len(analysis.strategic_suggestions) == 4
        prompt = llm.prompt()
        assert '"Director of Engineering"' in prompt
        assert RESUME_TEXT in prompt

    @pytest.mark.asyncio
    async def test_empty_response_is_service_error(self):
        with pytest.raises(ServiceError, match="Empty response"):
            await perform_initial_analysis(RESUME_TEXT, "CTO", FakeLLM(""))

    @pytest.mark.asyncio
    async def test_unparseable_response_is_service_error(self):
        with pytest.raises(ServiceError, match="Unparseable"):
            await perform_initial_analysis(RESUME_TEXT, "CTO", FakeLLM("I cannot help with that."))

    @pytest.mark.asyncio
    async def test_schema_mismatch_is_service_error(self, analysis_json):
        analysis_json["strategicSuggestions"][0]["category"] = "Vibes"
        with pytest.raises(ServiceError):
            await perform_initial_analysis(RESUME_TEXT, "CTO", FakeLLM(analysis_json))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score", [None, [62], "sixty", 1e400])
    async def test_non_numeric_score_is_service_error(self, analysis_json, score):
        analysis_json["matchScore"] = score
        with pytest.raises(ServiceError, match="Unparseable"):
            await perform_initial_analysis(RESUME_TEXT, "CTO", FakeLLM(analysis_json))


class TestGenerate:
    @pytest.mark.asyncio
    async def test_returns_result_with_ids(self, analysis, generation_json):
        llm = FakeLLM(generation_json)
        result = await generate_tailored_resume(RESUME_TEXT, "Director of Engineering", analysis,
                                                {"q1": "$4M"}, ["s1", "s3"], llm)
        assert result.analysis == analysis
        assert result.change_overview.startswith("- Reframed")
        assert [e.id for e in result.optimized_resume.experience] == ["exp-0", "exp-1"]
        prompt = llm.prompt()
        assert "Lead with outcomes" in prompt and "Surface budget work" in prompt
        assert "Standard headings" not in prompt
        assert "User Answer: $4M" in prompt

    @pytest.mark.asyncio
    async def test_empty_response_is_service_error(self, analysis):
        with pytest.raises(ServiceError):
            await generate_tailored_resume(RESUME_TEXT, "CTO", analysis, {}, [], FakeLLM(""))


class TestRefine:
    @pytest.mark.asyncio
    async def test_sends_full_document_and_returns_replacement(self, resume, resume_json):
        resume_json["skills"].append("Vendor management")
        llm = FakeLLM(resume_json)
        refined = await refine_resume_content(resume, "Add vendor management", "Budgeting", llm)
        assert refined.skills[-1] == "Vendor management"
        prompt = llm.prompt()
        assert '"fullName":"Dana Reyes"' in prompt
        assert 'User Selection: "Budgeting"' in prompt
        assert 'User Instruction: "Add vendor management"' in prompt

    @pytest.mark.asyncio
    async def test_model_error_propagates(self, resume):
        with pytest.raises(RuntimeError):
            await refine_resume_content(resume, "x", "y", FakeLLM(RuntimeError("quota")))
