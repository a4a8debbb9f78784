import base64

import pytest

from scenegen.scene.clients import BaseGenerator, GeneratorResult
from scenegen.session import SessionState

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
RESULT_BYTES = b"\x89PNG\r\n\x1a\ngenerated-scene"


class FakeUpload:
    """Stands in for FastAPI's UploadFile."""

    def __init__(self, filename, content_type, data=b"", error=None):
        self.filename = filename
        self.content_type = content_type
        self._data = data
        self._error = error

    async def read(self):
        if self._error is not None:
            raise self._error
        return self._data


class StubGenerator(BaseGenerator):
    """Records calls and returns a canned result."""

    def __init__(self, result=None):
        self.calls = []
        self.result = result or GeneratorResult(RESULT_BYTES, mime_type="image/png")

    def is_configured(self):
        return True

    def generate(self, image, prompt):
        self.calls.append((image, prompt))
        return self.result


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=""):
        self.status_code = status_code
        self._json = json_data
        self.text = text

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GEMINI_API_KEY", "GEMINI_MODEL", "GEMINI_ENDPOINT",
                 "GEMINI_TIMEOUT", "SCENE_PROMPT_FILE", "SCENE_PROVIDER"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def session():
    return SessionState(session_id="test")


@pytest.fixture
def cat_png():
    return FakeUpload("cat.png", "image/png", PNG_BYTES)


@pytest.fixture
def stub_generator():
    return StubGenerator()
