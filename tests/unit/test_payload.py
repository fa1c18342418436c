import json
from pathlib import Path

import pytest

from cai.core.errors import UnsupportedCapabilityError
from cai.core.types import ExecutionOptions, JsonPayload, MultipartPayload, Provider
from cai.llm.payload import shape_payload, token_budget_field

SCHEMA = {
    "name": "answer",
    "schema": {"type": "object", "properties": {"year": {"type": "integer"}}},
}


class TestChatBody:
    """Test chat-completions and messages bodies"""

    def test_anthropic_body(self, make_request, options):
        request = make_request(Provider.ANTHROPIC, "claude-3-5-haiku-latest")
        payload = shape_payload(request, options, "Hello")
        assert payload == JsonPayload({
            "model": "claude-3-5-haiku-latest",
            "max_tokens": 4096,
            "messages": [{"role": "user", "content": "Hello"}],
        })

    @pytest.mark.parametrize("model,field", [
        ("o1", "max_completion_tokens"),
        ("o3-mini", "max_completion_tokens"),
        ("o4-mini", "max_completion_tokens"),
        ("gpt-5-nano", "max_completion_tokens"),
        ("gpt-4o", "max_tokens"),
        ("gpt-4.1-mini", "max_tokens"),
    ])
    def test_token_budget_field(self, make_request, options, model, field):
        """Exactly one of the two budget fields is present"""
        body = shape_payload(make_request(Provider.OPENAI, model), options, "hi").body
        other = "max_tokens" if field == "max_completion_tokens" else "max_completion_tokens"
        assert token_budget_field(model) == field
        assert body[field] == 4096
        assert other not in body

    def test_json_mode(self, make_request):
        options = ExecutionOptions(is_json=True)
        body = shape_payload(make_request(Provider.GROQ, "llama-3.1-8b-instant"), options, "hi").body
        assert body["response_format"] == {"type": "json_object"}

    def test_schema_replaces_json_mode(self, make_request):
        options = ExecutionOptions(is_json=True, json_schema=SCHEMA)
        body = shape_payload(make_request(Provider.OPENAI, "gpt-4o"), options, "hi").body
        assert body["response_format"] == {"type": "json_schema", "json_schema": SCHEMA}

    def test_no_response_format_by_default(self, make_request, options):
        body = shape_payload(make_request(Provider.OPENAI, "gpt-4o"), options, "hi").body
        assert "response_format" not in body


class TestCapabilityGating:
    """Test JSON mode / schema restrictions"""

    @pytest.mark.parametrize("provider", [
        Provider.ANTHROPIC, Provider.GOOGLE, Provider.CEREBRAS,
        Provider.DEEPSEEK, Provider.XAI, Provider.PERPLEXITY, Provider.LLAMAFILE,
    ])
    def test_json_mode_unsupported(self, make_request, provider):
        with pytest.raises(UnsupportedCapabilityError) as excinfo:
            shape_payload(make_request(provider, "m"), ExecutionOptions(is_json=True), "hi")
        assert excinfo.value.provider is provider
        assert "JSON mode" in str(excinfo.value)

    @pytest.mark.parametrize("provider", [Provider.OPENAI, Provider.GROQ, Provider.OLLAMA])
    def test_json_mode_supported(self, make_request, provider):
        payload = shape_payload(make_request(provider, "m"), ExecutionOptions(is_json=True), "hi")
        assert isinstance(payload, JsonPayload)

    def test_schema_unsupported_on_groq(self, make_request):
        with pytest.raises(UnsupportedCapabilityError):
            shape_payload(
                make_request(Provider.GROQ, "llama-3.1-8b-instant"),
                ExecutionOptions(json_schema=SCHEMA),
                "hi",
            )


class TestGoogle:
    """Test Gemini contents/parts bodies"""

    def test_text_model(self, make_request, options):
        body = shape_payload(make_request(Provider.GOOGLE, "gemini-2.5-flash"), options, "Hi").body
        assert body == {
            "contents": [{"role": "user", "parts": [{"text": "Hi"}]}],
            "generationConfig": {"maxOutputTokens": 4096},
        }

    def test_image_model_requests_image_modality(self, make_request, options):
        request = make_request(Provider.GOOGLE, "gemini-2.5-flash-image-preview")
        body = shape_payload(request, options, "A red fox").body
        assert body["generationConfig"]["responseModalities"] == ["IMAGE"]


class TestMediaPayloads:
    """Test speech, image and transcription payloads"""

    def test_speech(self, make_request, options):
        body = shape_payload(make_request(Provider.OPENAI, "gpt-4o-mini-tts"), options, "Hello there").body
        assert body == {"model": "gpt-4o-mini-tts", "input": "Hello there", "voice": "alloy"}

    def test_image_context(self, make_request):
        options = ExecutionOptions(subcommand="image")
        body = shape_payload(make_request(Provider.OPENAI, "gpt-4o"), options, "A cat").body
        assert body == {"model": "gpt-4o", "prompt": "A cat"}

    @pytest.mark.parametrize("model", ["gpt-image-1", "dall-e-3"])
    def test_image_model(self, make_request, options, model):
        body = shape_payload(make_request(Provider.OPENAI, model), options, "A cat").body
        assert body == {"model": model, "prompt": "A cat"}

    def test_xai_image_model(self, make_request, options):
        body = shape_payload(make_request(Provider.XAI, "grok-2-image-1212"), options, "A cat").body
        assert body == {"model": "grok-2-image-1212", "prompt": "A cat", "n": 1}

    def test_transcription_is_multipart(self, make_request, options):
        payload = shape_payload(make_request(Provider.OPENAI, "gpt-4o-transcribe"), options, " talk.mp3\n")
        assert payload == MultipartPayload(
            fields={"model": "gpt-4o-transcribe"},
            file_field="file",
            file_path=Path("talk.mp3"),
        )

    def test_transcribe_context(self, make_request):
        options = ExecutionOptions(subcommand="transcribe")
        payload = shape_payload(make_request(Provider.OPENAI, "whisper-1"), options, "talk.mp3")
        assert isinstance(payload, MultipartPayload)

    def test_media_rules_are_openai_only(self, make_request, options):
        body = shape_payload(make_request(Provider.GROQ, "playai-tts"), options, "hi").body
        assert "messages" in body


class TestCustomBody:
    """Test verbatim JSON prompts"""

    def test_json_object_sent_verbatim(self, make_request, options):
        custom = {"model": "gpt-4o", "messages": [{"role": "system", "content": "x"}]}
        payload = shape_payload(make_request(Provider.OPENAI, "gpt-4o"), options, json.dumps(custom))
        assert payload == JsonPayload(custom, custom=True)

    def test_precedes_capability_check(self, make_request):
        payload = shape_payload(
            make_request(Provider.ANTHROPIC, "claude-sonnet-4-5"),
            ExecutionOptions(is_json=True),
            '{"model": "claude-sonnet-4-5"}',
        )
        assert payload.custom

    @pytest.mark.parametrize("prompt", ["[1, 2]", "42", '"quoted"', "{not json"])
    def test_non_object_json_is_text(self, make_request, options, prompt):
        payload = shape_payload(make_request(Provider.OPENAI, "gpt-4o"), options, prompt)
        assert not payload.custom
        assert payload.body["messages"][0]["content"] == prompt
