import pytest

from cai.core.errors import MissingCredentialError
from cai.core.types import ModelSpecifier, Provider
from cai.llm.selection import FALLBACK_MODELS, select


class TestExplicitSelection:
    """Test caller-chosen models"""

    def test_label_and_request(self, full_config):
        label, request = select(ModelSpecifier(Provider.ANTHROPIC, "sonnet"), full_config)
        assert label == "Anthropic claude-sonnet-4-5"
        assert request.model == "claude-sonnet-4-5"

    def test_missing_key_is_not_replaced(self):
        config = {"groq_api_key": "gsk", "openai_api_key": "sk"}
        with pytest.raises(MissingCredentialError) as excinfo:
            select(ModelSpecifier(Provider.ANTHROPIC, "sonnet"), config)
        assert excinfo.value.provider is Provider.ANTHROPIC


class TestFallback:
    """Test credential-based provider choice"""

    def test_order(self):
        assert [candidate.provider for candidate in FALLBACK_MODELS] == [
            Provider.GROQ, Provider.OPENAI, Provider.ANTHROPIC,
        ]

    def test_first_configured_wins(self, full_config):
        label, request = select(None, full_config)
        assert request.provider is Provider.GROQ
        assert label == "Groq llama-3.1-8b-instant"

    def test_second_provider(self):
        _, request = select(None, {"openai_api_key": "sk", "anthropic_api_key": "sk-ant"})
        assert request.provider is Provider.OPENAI
        assert request.model == "gpt-4o-mini"

    def test_only_third_provider(self):
        label, request = select(None, {"anthropic_api_key": "sk-ant"})
        assert request.provider is Provider.ANTHROPIC
        assert request.api_key == "sk-ant"
        assert label == "Anthropic claude-3-5-haiku-latest"

    def test_other_keys_ignored(self):
        with pytest.raises(MissingCredentialError):
            select(None, {"xai_api_key": "xai", "perplexity_api_key": "pplx"})

    def test_nothing_configured(self, tmp_path):
        secrets_path = tmp_path / "secrets.env"
        with pytest.raises(MissingCredentialError) as excinfo:
            select(None, {}, secrets_path)
        message = str(excinfo.value)
        assert excinfo.value.provider is None
        assert str(secrets_path) in message
        for name in ("GROQ", "OPENAI", "ANTHROPIC"):
            assert f"CAI_{name}_API_KEY" in message
            assert f"`{name.lower()}_api_key`" in message
