from io import BytesIO

import pytest
from PIL import Image

from wall_quote.core.config import Settings
from wall_quote.core import credentials


class FakeVisionClient:
    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate(self, prompt, image, mime_type):
        self.calls.append({"prompt": prompt, "image": image, "mime_type": mime_type})
        if self.error is not None:
            raise self.error
        return self.reply


class FakePredictionClient:
    def __init__(self, body=None, error=None):
        self.body = body if body is not None else {"predictions": []}
        self.error = error
        self.calls = []

    def predict(self, instances, parameters):
        self.calls.append({"instances": instances, "parameters": parameters})
        if self.error is not None:
            raise self.error
        return self.body


def make_image(fmt="JPEG", size=(32, 24)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color=(200, 180, 160)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        google_project_id="test-project",
        google_application_credentials_json=None,
        localizer_endpoint_id=None,
        cost_rate=5.0,
        json_extraction="greedy",
        remote_retry_attempts=1,
    )


@pytest.fixture
def jpeg_bytes():
    return make_image("JPEG")


@pytest.fixture(autouse=True)
def _reset_credentials():
    credentials._reset_materialized()
    yield
    credentials._reset_materialized()
