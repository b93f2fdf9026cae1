from __future__ import annotations
import os
from typing import Any, Callable, List, Optional
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_mistralai import ChatMistralAI
from .settings import get_secret


PROVIDERS = {"auto", "gemini", "mistral"}


def normalize_provider(p: str | None) -> str:
    if not p:
        return "auto"
    p = p.strip().lower()
    if p in PROVIDERS:
        return p
    return "auto"


def build_gemini(temperature: float = 0.2, timeout: Optional[float] = None,
                 model: Optional[str] = None) -> ChatGoogleGenerativeAI:
    # Prefer GEMINI_API_KEY, fallback to GOOGLE_API_KEY
    key = get_secret("GEMINI_API_KEY") or get_secret("GOOGLE_API_KEY")
    if not key:
        raise RuntimeError("GEMINI_API_KEY (or GOOGLE_API_KEY) is missing. Set it in .env or Streamlit secrets.")
    model = model or get_secret("GEMINI_MODEL") or "gemini-2.5-flash"
    os.environ["GOOGLE_API_KEY"] = key
    return ChatGoogleGenerativeAI(model=model, temperature=temperature, timeout=timeout,
                                  response_mime_type="application/json")


def build_mistral(temperature: float = 0.2, timeout: Optional[float] = None,
                  model: Optional[str] = None) -> ChatMistralAI:
    key = get_secret("MISTRAL_API_KEY")
    if not key:
        raise RuntimeError("MISTRAL_API_KEY is missing. Set it in .env or Streamlit secrets.")
    model = model or get_secret("MISTRAL_MODEL") or "mistral-large-latest"
    os.environ["MISTRAL_API_KEY"] = key
    kwargs: dict[str, Any] = {"model": model, "temperature": temperature}
    if timeout:
        kwargs["timeout"] = int(timeout)
    return ChatMistralAI(**kwargs)


class MultiProviderLLM:
    """Try multiple provider builders in order. Build lazily and failover on errors."""

    def __init__(self, builders: List[Callable[[], Any]]):
        self.builders = builders
        self._instances: List[Any | None] = [None] * len(builders)
        self._errors: List[str] = []

    def _model(self, i: int) -> Any:
        if self._instances[i] is None:
            self._instances[i] = self.builders[i]()
        return self._instances[i]

    def invoke(self, messages: list[Any]) -> Any:
        self._errors.clear()
        last_exc: Optional[Exception] = None
        for i in range(len(self.builders)):
            try:
                return self._model(i).invoke(messages)
            except Exception as e:
                self._errors.append(f"provider[{i}]: {e}")
                last_exc = e
        raise RuntimeError("All providers failed: " + "; ".join(self._errors)) from last_exc

    async def ainvoke(self, messages: list[Any]) -> Any:
        self._errors.clear()
        last_exc: Optional[Exception] = None
        for i in range(len(self.builders)):
            try:
                return await self._model(i).ainvoke(messages)
            except Exception as e:
                self._errors.append(f"provider[{i}]: {e}")
                last_exc = e
        raise RuntimeError("All providers failed: " + "; ".join(self._errors)) from last_exc


def get_llm(provider: str = "auto", temperature: float = 0.2, timeout: Optional[float] = None,
            gemini_model: Optional[str] = None, mistral_model: Optional[str] = None) -> Any:
    p = normalize_provider(provider)
    if p == "gemini":
        return build_gemini(temperature, timeout, gemini_model)
    if p == "mistral":
        return build_mistral(temperature, timeout, mistral_model)
    # auto
    return MultiProviderLLM([
        lambda: build_gemini(temperature, timeout, gemini_model),
        lambda: build_mistral(temperature, timeout, mistral_model),
    ])
