"""
Shared pytest fixtures for the cai test suite.

HTTP traffic never leaves the process: tests hand an `httpx.MockTransport`
to the dispatcher through its `transport` parameter.
"""
import httpx
import pytest

from cai.core.types import ExecutionOptions, Provider, RequestDescriptor
from cai.llm.provider_config import KEYED_PROVIDERS


@pytest.fixture
def full_config():
    """
    Configuration map with a key for every keyed provider.

    Returns:
        dict: `<provider>_api_key` -> `test-<provider>-key`
    """
    return {f"{p.value}_api_key": f"test-{p.value}-key" for p in KEYED_PROVIDERS}


@pytest.fixture
def options():
    """Default execution options (no raw, no JSON mode)"""
    return ExecutionOptions()


@pytest.fixture
def make_request():
    """Factory for resolved request descriptors"""
    def factory(
        provider=Provider.OPENAI,
        model="gpt-4o-mini",
        url="https://api.example.test/v1/chat/completions",
        api_key="test-key",
    ):
        return RequestDescriptor(provider=provider, url=url, model=model, api_key=api_key)
    return factory


@pytest.fixture
def recorded():
    """Requests seen by transports built with `mock_transport`"""
    return []


@pytest.fixture
def mock_transport(recorded):
    """
    Factory for `httpx.MockTransport` instances.

    Without a `handler` every request is answered with the given status and
    JSON body (or raw `content`). Each request is appended to `recorded`.
    """
    def factory(status_code=200, json_body=None, content=None, handler=None):
        def respond(request):
            recorded.append(request)
            if handler is not None:
                return handler(request)
            if content is not None:
                return httpx.Response(status_code, content=content)
            return httpx.Response(status_code, json={} if json_body is None else json_body)
        return httpx.MockTransport(respond)
    return factory
