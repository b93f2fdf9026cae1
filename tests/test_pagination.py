"""Tests for resume pagination."""

from src.layout.pagination import (
    Block,
    BlockHeightEstimator,
    LayoutConfig,
    document_blocks,
    paginate,
)
from src.state import ExperienceItem, ResumeDocument, ResumeHeader

ORDER = ["header", "summary", "skills", "exp-title", "job-0", "job-1", "edu-title", "edu-0"]


def fixed(**heights):
    """Estimator with one height per block kind."""
    def estimate(block: Block) -> float:
        return heights.get(block.kind, 10)
    return estimate


class TestEstimator:
    def test_default_budget_is_a4_content_height(self):
        assert LayoutConfig().content_height == 963

    def test_heights_scale_with_items(self, resume):
        est = BlockHeightEstimator()
        blocks = {b.key: b for b in document_blocks(resume)}
        assert est(blocks["header"]) == 150
        assert est(blocks["summary"]) == 100
        assert est(blocks["skills"]) == 80 + (6 / 3) * 20
        assert est(blocks["exp-title"]) == 40
        assert est(blocks["job-0"]) == 60 + 3 * 24
        assert est(blocks["edu-0"]) == 60

    def test_config_overrides(self, resume):
        est = BlockHeightEstimator(LayoutConfig(achievement_height=10, experience_base=0))
        job = [b for b in document_blocks(resume) if b.key == "job-1"][0]
        assert est(job) == 20


class TestPaginate:
    def test_fits_on_one_page(self, resume):
        pages = paginate(resume)
        assert len(pages) == 1
        assert pages[0].keys() == ORDER
        assert pages[0].height < LayoutConfig().content_height

    def test_oversized_entries_get_a_page_each(self, resume):
        long_job = ExperienceItem(company="Big", role="Lead", date_range="2020",
                                  achievements=[f"Did thing {i}" for i in range(40)])
        resume.experience = [long_job, long_job, long_job]
        resume.education = []
        pages = paginate(resume)

        assert len(pages) == 4
        assert pages[0].keys() == ["header", "summary", "skills", "exp-title"]
        for n, page in enumerate(pages[1:]):
            assert page.keys() == [f"job-{n}"]
            assert page.height > LayoutConfig().content_height

    def test_no_entry_is_split_or_dropped(self, resume):
        resume.experience = resume.experience * 6
        pages = paginate(resume, budget=400)
        keys = [k for p in pages for k in p.keys()]
        assert keys == ["header", "summary", "skills", "exp-title"] + [f"job-{i}" for i in range(12)] + ["edu-title", "edu-0"]
        for page in pages:
            assert page.height <= 400 or len(page.blocks) == 1

    def test_is_deterministic(self, resume):
        first = paginate(resume, budget=300)
        second = paginate(resume, budget=300)
        assert [p.keys() for p in first] == [p.keys() for p in second]
        assert first == second

    def test_header_always_on_first_page(self, resume):
        pages = paginate(resume, budget=50, estimator=fixed(header=500))
        assert pages[0].keys() == ["header"]
        assert pages[0].height == 500
        assert pages[1].keys() == ["summary", "skills", "exp-title", "job-0", "job-1"]
        assert pages[2].keys() == ["edu-title", "edu-0"]

    def test_section_title_may_end_a_page(self, resume):
        resume.experience = resume.experience[:1]
        pages = paginate(resume, budget=100, estimator=fixed(experience=65))
        assert pages[0].keys() == ["header", "summary", "skills", "exp-title"]
        assert pages[1].keys() == ["job-0", "edu-title", "edu-0"]

    def test_section_title_overflows_to_next_page(self, resume):
        resume.experience = resume.experience[:1]
        pages = paginate(resume, budget=100, estimator=fixed(experience=55))
        assert pages[0].keys() == ["header", "summary", "skills", "exp-title", "job-0"]
        assert pages[1].keys() == ["edu-title", "edu-0"]
        assert pages[1].height == 20

    def test_header_only_document(self):
        doc = ResumeDocument(header=ResumeHeader(full_name="A", email="a@b.c"))
        pages = paginate(doc)
        assert len(pages) == 1
        assert pages[0].keys() == ["header"]

    def test_empty_sections_are_skipped(self, resume):
        resume.summary = ""
        resume.skills = []
        resume.education = []
        assert paginate(resume)[0].keys() == ["header", "exp-title", "job-0", "job-1"]

    def test_offsets_accumulate(self, resume):
        page = paginate(resume, estimator=fixed(header=100, summary=50))[0]
        assert page.offsets()[:3] == [0, 100, 150]
