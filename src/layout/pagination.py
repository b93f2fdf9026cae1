"""Greedy A4 pagination of a resume document.

The preview shows the resume as discrete pages. Blocks are laid out in
document order and a block that does not fit the remaining content height
starts a new page; blocks are never split. Heights are estimates from
per-block heuristics, not measurements, so a page may visually over- or
under-run slightly.
"""
from __future__ import annotations
from typing import Any, Callable, List, Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict

BlockKind = Literal["header", "summary", "skills", "section_title", "experience", "education"]

EXPERIENCE_TITLE = "Professional Experience"
EDUCATION_TITLE = "Education"


class LayoutConfig(BaseModel):
    """Page geometry and block height heuristics, in CSS pixels at 96 DPI."""
    model_config = ConfigDict(frozen=True)

    page_height: float = 1123
    page_width: float = 794
    page_padding: float = 80
    page_gap: float = 32
    header_height: float = 150
    summary_height: float = 100
    skills_base: float = 80
    skills_per_row: float = 3
    skills_row_height: float = 20
    section_title_height: float = 40
    experience_base: float = 60
    achievement_height: float = 24
    education_height: float = 60

    @property
    def content_height(self) -> float:
        return self.page_height - 2 * self.page_padding

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.page_padding


class Block(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: BlockKind
    key: str
    payload: Any = None


class Page(BaseModel):
    model_config = ConfigDict(frozen=True)

    blocks: Tuple[Block, ...] = ()
    heights: Tuple[float, ...] = ()
    height: float = 0

    def offsets(self) -> List[float]:
        """Estimated top of each block, relative to the content box."""
        tops, y = [], 0.0
        for h in self.heights:
            tops.append(y)
            y += h
        return tops

    def keys(self) -> List[str]:
        return [b.key for b in self.blocks]


HeightEstimator = Callable[[Block], float]


class BlockHeightEstimator:
    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()

    def __call__(self, block: Block) -> float:
        c = self.config
        if block.kind == "header":
            return c.header_height
        if block.kind == "summary":
            return c.summary_height
        if block.kind == "skills":
            return c.skills_base + (len(block.payload) / c.skills_per_row) * c.skills_row_height
        if block.kind == "section_title":
            return c.section_title_height
        if block.kind == "experience":
            return c.experience_base + len(block.payload.achievements) * c.achievement_height
        if block.kind == "education":
            return c.education_height
        raise ValueError(f"Unknown block kind: {block.kind}")


def document_blocks(document) -> List[Block]:
    """Renderable blocks of a ResumeDocument in reading order."""
    blocks = [Block(kind="header", key="header", payload=document.header)]
    if document.summary:
        blocks.append(Block(kind="summary", key="summary", payload=document.summary))
    if document.skills:
        blocks.append(Block(kind="skills", key="skills", payload=tuple(document.skills)))
    if document.experience:
        blocks.append(Block(kind="section_title", key="exp-title", payload=EXPERIENCE_TITLE))
        for idx, job in enumerate(document.experience):
            blocks.append(Block(kind="experience", key=f"job-{idx}", payload=job))
    if document.education:
        blocks.append(Block(kind="section_title", key="edu-title", payload=EDUCATION_TITLE))
        for idx, edu in enumerate(document.education):
            blocks.append(Block(kind="education", key=f"edu-{idx}", payload=edu))
    return blocks


def paginate(document,
             budget: Optional[float] = None,
             estimator: Optional[HeightEstimator] = None) -> List[Page]:
    """Partition ``document`` into pages of at most ``budget`` estimated height.

    The header always opens page 1. Every other block goes on the current
    page if it fits, otherwise it opens a new page, even when it is taller
    than a whole page on its own. The trailing page is always emitted.
    """
    if estimator is None:
        estimator = BlockHeightEstimator()
    if budget is None:
        config = getattr(estimator, "config", None) or LayoutConfig()
        budget = config.content_height

    pages: List[Page] = []
    current: List[Block] = []
    heights: List[float] = []
    used = 0.0

    def close() -> None:
        pages.append(Page(blocks=tuple(current), heights=tuple(heights), height=used))

    for block in document_blocks(document):
        h = estimator(block)
        if block.kind == "header":
            current.append(block)
            heights.append(h)
            used += h
            continue
        if current and used + h > budget:
            close()
            current, heights, used = [block], [h], h
        else:
            current.append(block)
            heights.append(h)
            used += h

    close()
    return pages
