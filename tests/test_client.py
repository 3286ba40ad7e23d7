from types import SimpleNamespace

import httpx
import pytest

from wall_quote.core.errors import UpstreamError
from wall_quote.core.retry import RetryPolicy
from wall_quote.vision.client import GeminiVisionClient


class FakeModels:
    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def generate_content(self, model, contents):
        self.calls.append({"model": model, "contents": contents})
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def make_client(models, attempts=1):
    genai_client = SimpleNamespace(models=models)
    return GeminiVisionClient(genai_client, model="gemini-2.0-flash", retry=RetryPolicy(attempts=attempts, base=0))


def test_generate_sends_text_and_inline_image():
    models = FakeModels(SimpleNamespace(text='{"width": 1, "height": 2}'))
    text = make_client(models).generate("measure the wall", b"\xff\xd8jpeg", "image/jpeg")

    assert text == '{"width": 1, "height": 2}'
    call = models.calls[0]
    assert call["model"] == "gemini-2.0-flash"
    content = call["contents"][0]
    assert content.role == "user"
    assert content.parts[0].text == "measure the wall"
    assert content.parts[1].inline_data.data == b"\xff\xd8jpeg"
    assert content.parts[1].inline_data.mime_type == "image/jpeg"


def test_generate_empty_reply():
    models = FakeModels(SimpleNamespace(text=None))
    assert make_client(models).generate("p", b"x", "image/png") == ""


def test_generate_retries_transport_errors():
    models = FakeModels(httpx.ConnectError("reset"), SimpleNamespace(text="ok"))
    assert make_client(models, attempts=2).generate("p", b"x", "image/png") == "ok"
    assert len(models.calls) == 2


def test_generate_wraps_failures_as_upstream_error():
    models = FakeModels(httpx.ReadTimeout("timed out"), httpx.ReadTimeout("timed out"))
    with pytest.raises(UpstreamError, match="Vision model request failed"):
        make_client(models, attempts=2).generate("p", b"x", "image/png")
