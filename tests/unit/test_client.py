import json

import httpx
import pytest

from cai.core.errors import InputFileError, TransportError
from cai.core.types import JsonPayload, MultipartPayload, Provider
from cai.llm.client import ANTHROPIC_VERSION, build_headers, build_target, send


class TestHeaders:
    """Test per-provider authentication"""

    def test_anthropic(self, make_request):
        headers = build_headers(make_request(Provider.ANTHROPIC, api_key="sk-ant"))
        assert headers == {"anthropic-version": ANTHROPIC_VERSION, "x-api-key": "sk-ant"}

    def test_google_has_no_auth_header(self, make_request):
        assert build_headers(make_request(Provider.GOOGLE)) == {}

    @pytest.mark.parametrize("provider", [Provider.OPENAI, Provider.GROQ, Provider.XAI, Provider.OLLAMA])
    def test_bearer(self, make_request, provider):
        headers = build_headers(make_request(provider, api_key="sk-test"))
        assert headers == {"Authorization": "Bearer sk-test"}


class TestTarget:
    """Test final URL construction"""

    def test_google_appends_model_and_key(self, make_request):
        request = make_request(
            Provider.GOOGLE,
            "gemini-2.5-flash",
            url="https://generativelanguage.googleapis.com/v1beta/models",
            api_key="g-key",
        )
        url, params = build_target(request)
        assert url == "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent"
        assert params == {"key": "g-key"}

    def test_others_unchanged(self, make_request):
        request = make_request(Provider.OPENAI)
        assert build_target(request) == (request.url, {})


class TestSend:
    """Test dispatch over a mock transport"""

    @pytest.mark.asyncio
    async def test_posts_json_body(self, make_request, mock_transport, recorded):
        request = make_request(Provider.ANTHROPIC, "claude-sonnet-4-5", api_key="sk-ant")
        body = {"model": "claude-sonnet-4-5", "messages": []}

        response = await send(request, JsonPayload(body), transport=mock_transport(json_body={"ok": True}))

        assert response.status_code == 200
        sent = recorded[0]
        assert sent.method == "POST"
        assert sent.url.host == "api.example.test"
        assert sent.url.path == "/v1/chat/completions"
        assert sent.headers["x-api-key"] == "sk-ant"
        assert sent.headers["anthropic-version"] == ANTHROPIC_VERSION
        assert json.loads(sent.content) == body

    @pytest.mark.asyncio
    async def test_google_key_in_query(self, make_request, mock_transport, recorded):
        request = make_request(
            Provider.GOOGLE,
            "gemini-2.5-flash",
            url="https://generativelanguage.googleapis.com/v1beta/models",
            api_key="g-key",
        )
        await send(request, JsonPayload({}), transport=mock_transport())

        sent = recorded[0]
        assert sent.url.path == "/v1beta/models/gemini-2.5-flash:generateContent"
        assert sent.url.params["key"] == "g-key"
        assert "authorization" not in sent.headers

    @pytest.mark.asyncio
    async def test_error_status_returned(self, make_request, mock_transport):
        transport = mock_transport(status_code=401, json_body={"error": {"message": "invalid_api_key"}})
        response = await send(make_request(), JsonPayload({}), transport=transport)
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_connection_failure(self, make_request, mock_transport):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as excinfo:
            await send(make_request(Provider.OLLAMA), JsonPayload({}), transport=mock_transport(handler=refuse))
        assert excinfo.value.provider is Provider.OLLAMA
        assert "connection refused" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_multipart_upload(self, make_request, mock_transport, recorded, tmp_path):
        audio = tmp_path / "talk.mp3"
        audio.write_bytes(b"fake-mp3-bytes")
        payload = MultipartPayload({"model": "gpt-4o-transcribe"}, "file", audio)

        await send(make_request(Provider.OPENAI, "gpt-4o-transcribe"), payload, transport=mock_transport())

        sent = recorded[0]
        assert sent.headers["content-type"].startswith("multipart/form-data")
        assert b'name="model"' in sent.content
        assert b"gpt-4o-transcribe" in sent.content
        assert b'filename="talk.mp3"' in sent.content
        assert b"fake-mp3-bytes" in sent.content

    @pytest.mark.asyncio
    async def test_missing_upload_file(self, make_request, mock_transport, recorded, tmp_path):
        payload = MultipartPayload({"model": "whisper-1"}, "file", tmp_path / "missing.mp3")
        with pytest.raises(InputFileError):
            await send(make_request(Provider.OPENAI, "whisper-1"), payload, transport=mock_transport())
        assert recorded == []
