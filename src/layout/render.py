from __future__ import annotations
import re
from html import escape
from typing import List
from .pagination import Block, LayoutConfig, Page, document_blocks

_H2 = ("font-size:13px;font-weight:700;text-transform:uppercase;letter-spacing:.08em;"
       "border-bottom:1px solid #cbd5e1;padding-bottom:4px;margin:16px 0 12px 0;")
_ROW = "display:flex;justify-content:space-between;align-items:baseline;"


def _block_html(block: Block) -> str:
    p = block.payload
    if block.kind == "header":
        title = f'<div style="font-size:18px;color:#2563eb;font-weight:700;">{escape(p.title)}</div>' if p.title else ""
        return (
            '<div style="text-align:center;border-bottom:2px solid #1e293b;padding-bottom:24px;margin-bottom:24px;">'
            f'<h1 style="font-family:serif;text-transform:uppercase;margin:0 0 8px 0;">{escape(p.full_name)}</h1>'
            f'{title}<div style="font-size:13px;color:#475569;">{escape(p.contact_line())}</div></div>'
        )
    if block.kind == "summary":
        return f'<div><h2 style="{_H2}">Professional Summary</h2><p style="font-size:14px;">{escape(p)}</p></div>'
    if block.kind == "skills":
        items = "".join(f'<span style="margin-right:12px;">&bull; {escape(s)}</span>' for s in p)
        return f'<div><h2 style="{_H2}">Core Competencies</h2><div style="font-size:14px;">{items}</div></div>'
    if block.kind == "section_title":
        return f'<h2 style="{_H2}">{escape(p)}</h2>'
    if block.kind == "experience":
        bullets = "".join(f'<li style="font-size:14px;">{escape(a)}</li>' for a in p.achievements)
        return (
            '<div style="margin-bottom:20px;">'
            f'<div style="{_ROW}"><b>{escape(p.company)}</b><b style="font-size:13px;">{escape(p.date_range)}</b></div>'
            f'<div style="{_ROW}"><i>{escape(p.role)}</i><i style="font-size:12px;color:#64748b;">{escape(p.location or "")}</i></div>'
            f'<ul style="padding-left:20px;margin:6px 0 0 0;">{bullets}</ul></div>'
        )
    if block.kind == "education":
        details = f'<div style="font-size:12px;color:#475569;">{escape(p.details)}</div>' if p.details else ""
        return (
            '<div style="margin-bottom:16px;">'
            f'<div style="{_ROW}"><b>{escape(p.institution)}</b><b style="font-size:13px;">{escape(p.date_range)}</b></div>'
            f'<div style="font-size:14px;"><i>{escape(p.degree)}</i></div>{details}</div>'
        )
    raise ValueError(f"Unknown block kind: {block.kind}")


def render_page_html(page: Page, config: LayoutConfig, number: int = 1) -> str:
    body = "".join(_block_html(b) for b in page.blocks)
    return (
        f'<div class="resume-page" data-page="{number}" style="background:#fff;color:#0f172a;'
        f'width:{config.page_width}px;min-height:{config.page_height}px;padding:{config.page_padding}px;'
        f'box-sizing:border-box;margin:0 auto {config.page_gap}px auto;box-shadow:0 1px 4px rgba(0,0,0,.15);">'
        f'{body}</div>'
    )


def render_document_html(document) -> str:
    """Single-flow HTML of the whole document, for pasting into an editor."""
    body = "".join(_block_html(b) for b in document_blocks(document))
    return f'<html><head><meta charset="utf-8"></head><body>{body}</body></html>'


# -------- Markdown export --------
def postprocess_markdown(md: str) -> str:
    s = md.replace("\r\n", "\n").replace("\r", "\n")
    # Collapse 3+ blank lines to 2
    s = re.sub(r"\n{3,}", "\n\n", s)
    s = re.sub(r"[ \t]+\n", "\n", s)
    return s.rstrip() + "\n"


def _block_markdown(block: Block) -> List[str]:
    p = block.payload
    if block.kind == "header":
        lines = [f"# {p.full_name}"]
        if p.title:
            lines.append(f"**{p.title}**")
        lines += [p.contact_line(), ""]
        return lines
    if block.kind == "summary":
        return ["## Professional Summary", p, ""]
    if block.kind == "skills":
        return ["## Core Competencies", " • ".join(p), ""]
    if block.kind == "section_title":
        return [f"## {p}"]
    if block.kind == "experience":
        where = f" ({p.location})" if p.location else ""
        lines = ["", f"### {p.company} | {p.date_range}", f"*{p.role}*{where}"]
        lines += [f"- {a}" for a in p.achievements]
        return lines
    if block.kind == "education":
        lines = ["", f"### {p.institution} | {p.date_range}", f"*{p.degree}*"]
        if p.details:
            lines.append(p.details)
        return lines
    raise ValueError(f"Unknown block kind: {block.kind}")


def render_markdown(pages: List[Page]) -> str:
    """Markdown of the paginated document with a rule between pages."""
    chunks: List[str] = []
    for i, page in enumerate(pages):
        if i:
            chunks += ["", "---", ""]
        for block in page.blocks:
            chunks += _block_markdown(block)
    return postprocess_markdown("\n".join(chunks))
