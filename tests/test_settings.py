import pytest

from src import settings as settings_mod
from src.llm_provider import MultiProviderLLM, normalize_provider


@pytest.fixture(autouse=True)
def no_streamlit_secrets(monkeypatch):
    monkeypatch.setattr(settings_mod, "_read_secrets", lambda: {})


def test_layout_overrides_from_env(monkeypatch):
    monkeypatch.setenv("LAYOUT_PAGE_HEIGHT", "1000")
    monkeypatch.setenv("LAYOUT_ACHIEVEMENT_HEIGHT", "not-a-number")
    config = settings_mod.load_layout_config()
    assert config.page_height == 1000
    assert config.content_height == 840
    assert config.achievement_height == 24


def test_load_settings_defaults(monkeypatch):
    for name in ("LLM_PROVIDER", "REQUEST_TIMEOUT", "LOG_LEVEL", "LLM_TEMPERATURE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings_mod, "load_dotenv", lambda: None)
    s = settings_mod.load_settings()
    assert s.provider == "auto"
    assert s.request_timeout == 45.0
    assert s.layout.content_height == 963


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setattr(settings_mod, "load_dotenv", lambda: None)
    monkeypatch.setenv("LLM_PROVIDER", " Gemini ")
    monkeypatch.setenv("REQUEST_TIMEOUT", "30")
    s = settings_mod.load_settings()
    assert s.provider == "gemini"
    assert s.request_timeout == 30


def test_normalize_provider():
    assert normalize_provider(None) == "auto"
    assert normalize_provider("MISTRAL") == "mistral"
    assert normalize_provider("openai") == "auto"


def test_configured_models_reach_providers(monkeypatch):
    from src import llm_provider

    built = []
    monkeypatch.setattr(llm_provider, "ChatGoogleGenerativeAI", lambda **kw: built.append(kw) or "gemini")
    monkeypatch.setattr(llm_provider, "ChatMistralAI", lambda **kw: built.append(kw) or "mistral")
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")
    monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
    monkeypatch.setenv("MISTRAL_API_KEY", "m-key")
    monkeypatch.setenv("GEMINI_MODEL", "ignored-when-configured")

    assert llm_provider.get_llm("gemini", gemini_model="gemini-2.0-pro") == "gemini"
    assert llm_provider.get_llm("mistral", mistral_model="mistral-small") == "mistral"
    assert [kw["model"] for kw in built] == ["gemini-2.0-pro", "mistral-small"]


@pytest.mark.asyncio
async def test_graph_builds_llm_with_configured_model(monkeypatch):
    from src.graph import workflow
    from src.graph.workflow import RequestState

    seen = {}

    def fake_get_llm(**kw):
        seen.update(kw)
        raise RuntimeError("no key")

    monkeypatch.setattr(workflow, "get_llm", fake_get_llm)
    runner = workflow.build_graph(models={"gemini": "gemini-x", "mistral": "mistral-y"})
    final = await runner(RequestState(action="analyze", provider="gemini", target_role="CTO", resume_text="cv"))
    assert final.errors == ["LLM init error (gemini): no key"]
    assert (seen["gemini_model"], seen["mistral_model"]) == ("gemini-x", "mistral-y")


class _Broken:
    async def ainvoke(self, messages):
        raise RuntimeError("down")


class _Working:
    async def ainvoke(self, messages):
        return "ok"


@pytest.mark.asyncio
async def test_multi_provider_fails_over():
    def no_key():
        raise RuntimeError("missing key")

    llm = MultiProviderLLM([no_key, _Broken, _Working])
    assert await llm.ainvoke([]) == "ok"


@pytest.mark.asyncio
async def test_multi_provider_all_fail():
    llm = MultiProviderLLM([_Broken, _Broken])
    with pytest.raises(RuntimeError, match="All providers failed"):
        await llm.ainvoke([])
