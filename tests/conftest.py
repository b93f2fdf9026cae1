import copy
import json

import pytest
from langchain_core.messages import AIMessage

from src.state import AnalysisResult, ResumeDocument


ANALYSIS_JSON = {
    "matchScore": 62,
    "executiveSummary": "You lead teams well, but the page reads like a senior IC.",
    "strengths": ["Platform delivery", "Hiring", "Incident leadership"],
    "hardSkillGaps": ["Budget ownership", "Org design"],
    "softSkillGaps": ["Executive communication"],
    "missingKeywords": ["P&L", "OKRs", "headcount planning"],
    "clarificationQuestions": [
        {"id": "q1", "question": "What was your largest budget?", "context": "Directors own budgets."},
        {"id": "q2", "question": "How many engineers reported to you?", "context": "Span of control."},
        {"id": "q3", "question": "Which cloud platforms did you run?", "context": "Role lists AWS."},
    ],
    "strategicSuggestions": [
        {"id": "s1", "category": "Formatting & Tone", "label": "Lead with outcomes",
         "description": "Open bullets with business results.", "benefit": "Reads as leadership."},
        {"id": "s2", "category": "Formatting & Tone", "label": "Executive summary",
         "description": "Replace the objective with a summary.", "benefit": "Sets level."},
        {"id": "s3", "category": "Skill Gaps", "label": "Surface budget work",
         "description": "Show cost and budget ownership.", "benefit": "Closes the main gap."},
        {"id": "s4", "category": "ATS & Systems", "label": "Standard headings",
         "description": "Use standard section names.", "benefit": "Parses cleanly."},
    ],
}

RESUME_JSON = {
    "header": {"fullName": "Dana Reyes", "email": "dana@example.com", "phone": "555-0100",
               "location": "Austin, TX", "title": "Director of Engineering"},
    "summary": "Engineering leader with twelve years building platform teams.",
    "skills": ["Org design", "AWS", "Kubernetes", "Budgeting", "Hiring", "OKRs"],
    "experience": [
        {"company": "Acme", "role": "Senior Engineering Manager", "dateRange": "2019 - Present",
         "location": "Remote", "achievements": ["Grew team from 8 to 30", "Cut cloud spend 22%", "Shipped v2"]},
        {"company": "Globex", "role": "Engineering Manager", "dateRange": "2015 - 2019",
         "achievements": ["Led payments rewrite", "Hired 12 engineers"]},
    ],
    "education": [
        {"institution": "UT Austin", "degree": "BS Computer Science", "dateRange": "2007 - 2011",
         "details": "Dean's list"},
    ],
}

RESUME_TEXT = (
    "Dana Reyes, Senior Engineering Manager at Acme. Grew the platform team from eight to thirty "
    "engineers, cut cloud spend by a fifth, and led the payments rewrite at Globex before that."
)


class FakeLLM:
    """Chat model stand-in returning queued answers; exceptions in the queue are raised."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    async def ainvoke(self, messages):
        self.calls.append(messages)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, dict):
            item = json.dumps(item)
        return AIMessage(content=item)

    def prompt(self, i=-1):
        return self.calls[i][-1].content


@pytest.fixture
def analysis_json():
    return copy.deepcopy(ANALYSIS_JSON)


@pytest.fixture
def resume_json():
    return copy.deepcopy(RESUME_JSON)


@pytest.fixture
def analysis(analysis_json):
    return AnalysisResult.model_validate(analysis_json)


@pytest.fixture
def resume(resume_json):
    return ResumeDocument.model_validate(resume_json)


@pytest.fixture
def generation_json(resume_json):
    return {"changeOverview": "- Reframed bullets around outcomes", "optimizedResume": copy.deepcopy(resume_json)}
