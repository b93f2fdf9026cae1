from __future__ import annotations
import logging
from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from .pagination import LayoutConfig, Page
from ..errors import ValidationError

logger = logging.getLogger(__name__)

POPOVER_WIDTH = 320
POPOVER_OFFSET = 60
VIEWPORT_MARGIN = 20


class Rect(BaseModel):
    model_config = ConfigDict(frozen=True)

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def contains(self, other: "Rect") -> bool:
        return (self.left <= other.left and self.top <= other.top
                and other.right <= self.right and other.bottom <= self.bottom)


class Selection(BaseModel):
    text: str = ""
    rect: Optional[Rect] = None
    collapsed: bool = False


class Anchor(BaseModel):
    top: float
    left: float
    width: float = POPOVER_WIDTH


class Span(BaseModel):
    text: str
    rect: Rect
    block_key: str


def anchor_for(selection: Selection, region: Rect, viewport_width: float) -> Optional[Anchor]:
    """Where to float the refine popover, or None if the selection is not actionable."""
    if selection.collapsed or not selection.text.strip():
        return None
    if selection.rect is None or not region.contains(selection.rect):
        return None
    left = min(viewport_width - POPOVER_WIDTH, max(VIEWPORT_MARGIN, selection.rect.left))
    return Anchor(top=selection.rect.top - POPOVER_OFFSET, left=left)


def _block_fragments(block) -> List[str]:
    p = block.payload
    if block.kind == "header":
        return [t for t in (p.full_name, p.title) if t]
    if block.kind == "summary":
        return [p]
    if block.kind == "skills":
        return list(p)
    if block.kind == "experience":
        return [p.role, *p.achievements]
    if block.kind == "education":
        return [t for t in (p.degree, p.details) if t]
    return []


def preview_region(pages: List[Page], config: LayoutConfig) -> Rect:
    n = max(1, len(pages))
    return Rect(left=0, top=0, width=config.page_width,
                height=n * config.page_height + (n - 1) * config.page_gap)


def selectable_spans(pages: List[Page], config: LayoutConfig) -> List[Span]:
    """Text fragments of the preview with their estimated on-screen boxes.

    Fragments of one block share the block's vertical extent, split evenly.
    """
    spans: List[Span] = []
    for page_no, page in enumerate(pages):
        page_top = page_no * (config.page_height + config.page_gap) + config.page_padding
        for block, top, height in zip(page.blocks, page.offsets(), page.heights):
            fragments = [f for f in _block_fragments(block) if f and f.strip()]
            if not fragments:
                continue
            line = height / len(fragments)
            for i, text in enumerate(fragments):
                rect = Rect(left=config.page_padding, top=page_top + top + i * line,
                            width=config.content_width, height=line)
                spans.append(Span(text=text, rect=rect, block_key=block.key))
    return spans


def locate_selection(text: str, spans: List[Span]) -> Selection:
    needle = text.strip()
    if not needle:
        return Selection(text=text, collapsed=True)
    for span in spans:
        if needle in span.text:
            return Selection(text=needle, rect=span.rect)
    return Selection(text=needle, rect=None)


class RefinementTarget:
    """Pending selection and popover anchor for an inline refinement."""

    def __init__(self, region: Rect, viewport_width: float):
        self.region = region
        self.viewport_width = viewport_width
        self.selected_text = ""
        self.anchor: Optional[Anchor] = None
        self.instruction = ""

    def capture(self, selection: Selection) -> Optional[Anchor]:
        self.anchor = anchor_for(selection, self.region, self.viewport_width)
        self.selected_text = selection.text if self.anchor else ""
        return self.anchor

    def clear(self) -> None:
        self.selected_text = ""
        self.anchor = None
        self.instruction = ""

    async def submit(self, controller, instruction: str) -> bool:
        self.instruction = instruction
        if not instruction.strip() or not self.selected_text.strip():
            raise ValidationError("Select some text in the preview and describe the change.")
        try:
            return await controller.refine(instruction, self.selected_text)
        finally:
            self.clear()
