from __future__ import annotations
import io
import json
import logging
import re
import unicodedata
from typing import Any, Optional, Type, TypeVar
from pathlib import Path
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from .errors import ServiceError

M = TypeVar("M", bound=BaseModel)

RESUME_SUFFIXES = ("pdf", "txt", "md")


def read_text_file(path: str) -> str:
    p = Path(path)
    return p.read_text(encoding="utf-8")


def pdf_to_text(data: bytes) -> Optional[str]:
    try:
        from pypdf import PdfReader
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
        return "\n".join(pages).strip()
    except Exception:
        return None


def resume_text_from_bytes(name: str, data: bytes) -> str:
    """Text of an uploaded .txt/.md/.pdf resume."""
    name_lower = name.lower()
    if name_lower.endswith(".txt") or name_lower.endswith(".md"):
        return data.decode("utf-8", errors="replace")
    if name_lower.endswith(".pdf"):
        txt = pdf_to_text(data)
        if txt:
            return txt
        raise RuntimeError("Could not read PDF file. Make sure it is not encrypted or scanned.")
    raise ValueError("Please upload a .pdf, .txt, or .md file.")


def load_resume(path: str) -> str:
    p = Path(path)
    if p.suffix.lower() in (".txt", ".md"):
        return read_text_file(path)
    return resume_text_from_bytes(p.name, p.read_bytes())


def extract_json_block(text: str) -> str:
    """Extract JSON from LLM response, handling code fences and finding first {...} block."""
    t = text.strip()
    # Strip code fences if any
    t = re.sub(r"^```[a-zA-Z]*\n|```$", "", t, flags=re.MULTILINE)
    # Find first {...}
    m = re.search(r"\{[\s\S]*\}", t)
    if m:
        return t[m.start():m.end()]
    return t


def message_text(resp: Any) -> str:
    content = getattr(resp, "content", "")
    if isinstance(content, list):
        # Gemini may answer with content parts
        content = "".join(
            part.get("text", "") if isinstance(part, dict) else str(part) for part in content
        )
    return (content or "").strip()


def slugify(value: str) -> str:
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-zA-Z0-9-]+", "-", value).strip("-")
    value = re.sub(r"-+", "-", value)
    return value.lower() or "resume"


def parse_json_response(content: str, model_cls: Type[M], what: str) -> M:
    """Validate a model answer against ``model_cls`` or raise ServiceError."""
    if not content:
        raise ServiceError(f"Empty response from AI {what}")
    raw = extract_json_block(content)
    try:
        return model_cls.model_validate(json.loads(raw))
    except (json.JSONDecodeError, PydanticValidationError) as e:
        logging.warning(f"Unusable {what} response: {e}")
        raise ServiceError(f"Unparseable response from AI {what}") from e
