from __future__ import annotations
import logging
import os
from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from .layout.pagination import LayoutConfig


def _read_secrets() -> dict[str, str]:
    try:
        import streamlit as st  # type: ignore
        if hasattr(st, "secrets"):
            return dict(st.secrets)
    except Exception:
        # No secrets.toml outside of `streamlit run`
        pass
    return {}


def get_secret(name: str) -> Optional[str]:
    secrets = _read_secrets()
    return secrets.get(name) or os.getenv(name)


def _get_float(name: str, default: float) -> float:
    raw = get_secret(name)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logging.warning(f"Ignoring non-numeric {name}={raw!r}, using {default}")
        return default


class Settings(BaseModel):
    provider: str = "auto"
    gemini_model: str = "gemini-2.5-flash"
    mistral_model: str = "mistral-large-latest"
    temperature: float = 0.2
    request_timeout: float = 45.0
    log_level: str = "INFO"
    layout: LayoutConfig = Field(default_factory=LayoutConfig)


def load_layout_config() -> LayoutConfig:
    """Build the pagination heuristics, letting LAYOUT_<FIELD> override each default."""
    defaults = LayoutConfig()
    overrides = {
        name: _get_float(f"LAYOUT_{name.upper()}", getattr(defaults, name))
        for name in LayoutConfig.model_fields
    }
    return LayoutConfig(**overrides)


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        provider=(get_secret("LLM_PROVIDER") or "auto").strip().lower(),
        gemini_model=get_secret("GEMINI_MODEL") or "gemini-2.5-flash",
        mistral_model=get_secret("MISTRAL_MODEL") or "mistral-large-latest",
        temperature=_get_float("LLM_TEMPERATURE", 0.2),
        request_timeout=_get_float("REQUEST_TIMEOUT", 45.0),
        log_level=(get_secret("LOG_LEVEL") or "INFO").upper(),
        layout=load_layout_config(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
