import base64
import re

import pytest
from fastapi.testclient import TestClient

from scenegen import main
from scenegen.scene.clients import GeminiGenerator, gemini
from scenegen.scene.view import IDLE_LABEL
from scenegen.session import SessionStore

from .conftest import PNG_BYTES, RESULT_BYTES, FakeResponse, StubGenerator


@pytest.fixture
def use_generator(monkeypatch):
    def install(generator):
        monkeypatch.setattr(main.scene_service, "_generator", generator)
        return generator
    return install


@pytest.fixture
def client():
    with TestClient(main.app) as client:
        response = client.get("/")
        assert response.status_code == 200
        yield client


def upload(client, filename="cat.png", content_type="image/png", data=PNG_BYTES, source="picker"):
    return client.post(
        "/upload",
        files={"file": (filename, data, content_type)},
        data={"source": source}
    )


def test_page_renders_idle(client):
    response = client.get("/")
    assert "upload-box" in response.text
    assert IDLE_LABEL in response.text
    assert main.SESSION_COOKIE in response.cookies


def test_reload_discards_session(client):
    upload(client)
    client.get("/")
    state = client.get("/state").json()
    assert state["image"] is None
    assert not state["view"]["trigger_enabled"]


def test_requests_without_session_are_rejected():
    with TestClient(main.app) as fresh:
        response = fresh.get("/state")
    assert response.status_code == 400


def test_non_image_upload_rejected(client):
    response = upload(client, "notes.txt", "text/plain", b"hello")

    assert response.status_code == 400
    assert response.json()["detail"] == "Please select a valid image file."
    state = client.get("/state").json()
    assert state["image"] is None
    assert not state["view"]["trigger_enabled"]


def test_generate_without_image(client, use_generator):
    generator = use_generator(StubGenerator())
    response = client.post("/generate")

    assert response.status_code == 400
    assert response.json()["detail"] == "Please upload an image first."
    assert generator.calls == []


def test_end_to_end_success(client, use_generator):
    generator = use_generator(StubGenerator())

    state = upload(client, source="drop").json()
    assert state["image"]["filename"] == "cat.png"
    assert state["image"]["encoded"]
    assert state["view"]["preview_visible"]
    assert state["view"]["trigger_enabled"]

    response = client.post("/generate")
    assert response.status_code == 200
    state = response.json()

    assert generator.calls[0][0].decode() == PNG_BYTES
    assert not state["view"]["progress_visible"]
    assert state["view"]["trigger_enabled"]
    assert state["view"]["trigger_label"] == IDLE_LABEL
    assert state["view"]["result_visible"]
    assert state["result"]["data_url"] == (
        "data:image/png;base64," + base64.b64encode(RESULT_BYTES).decode("ascii")
    )

    result = client.get("/result")
    assert result.status_code == 200
    assert result.headers["content-type"] == "image/png"
    assert result.content == RESULT_BYTES


def test_end_to_end_failure(client, monkeypatch, use_generator):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    use_generator(GeminiGenerator())
    monkeypatch.setattr(gemini.requests, "post", lambda url, **kwargs: FakeResponse(
        status_code=429,
        json_data={"error": {"code": 429, "message": "quota exceeded"}}
    ))

    upload(client)
    response = client.post("/generate")

    assert response.status_code == 502
    body = response.json()
    assert "quota exceeded" in body["detail"]
    view = body["state"]["view"]
    assert view["result_placeholder_visible"]
    assert not view["result_visible"]
    assert view["trigger_enabled"]
    assert body["state"]["result"] is None
    assert client.get("/result").status_code == 404


def test_no_image_part_does_not_show_stale_result(client, monkeypatch, use_generator):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    use_generator(GeminiGenerator())
    upload(client)

    monkeypatch.setattr(gemini.requests, "post", lambda url, **kwargs: FakeResponse(json_data={
        "candidates": [{"content": {"parts": [
            {"inlineData": {"mimeType": "image/png", "data": base64.b64encode(RESULT_BYTES).decode()}}
        ]}}]
    }))
    assert client.post("/generate").status_code == 200

    monkeypatch.setattr(gemini.requests, "post", lambda url, **kwargs: FakeResponse(json_data={
        "candidates": [{"content": {"parts": [{"text": "Sorry, I can't."}]}}]
    }))
    response = client.post("/generate")

    assert response.status_code == 502
    assert "The model may have refused the request" in response.json()["detail"]
    assert response.json()["state"]["result"] is None
    assert response.json()["state"]["view"]["result_placeholder_visible"]


def test_provider_status(client, use_generator):
    use_generator(GeminiGenerator())
    body = client.get("/provider").json()

    assert body["name"] == "gemini"
    assert body["model"] == GeminiGenerator.DEFAULT_MODEL
    assert not body["configured"]
    assert body["missing"] == ["GEMINI_API_KEY"]


def test_health(client):
    assert client.get("/health").json()["status"] == "running"


def page_session(response):
    match = re.search(r'data-session="([0-9a-f]+)"', response.text)
    assert match
    return {main.SESSION_HEADER: match.group(1)}


def test_each_tab_keeps_its_own_session(use_generator):
    generator = use_generator(StubGenerator())
    with TestClient(main.app) as browser:
        first_tab = page_session(browser.get("/"))
        state = browser.post(
            "/upload",
            files={"file": ("cat.png", PNG_BYTES, "image/png")},
            headers=first_tab
        ).json()
        assert state["view"]["trigger_enabled"]

        second_tab = page_session(browser.get("/"))
        assert second_tab != first_tab

        response = browser.post("/generate", headers=first_tab)
        assert response.status_code == 200
        assert response.json()["result"] is not None
        assert generator.calls[0][0].decode() == PNG_BYTES

        second_state = browser.get("/state", headers=second_tab).json()
        assert second_state["image"] is None
        assert second_state["result"] is None


def test_unknown_session_header_rejected(client):
    response = client.get("/state", headers={main.SESSION_HEADER: "gone"})
    assert response.status_code == 400
    assert "reload" in response.json()["detail"]


def test_visits_do_not_accumulate_sessions(monkeypatch):
    clock = {"now": 0.0}
    store = SessionStore(ttl=10, clock=lambda: clock["now"])
    monkeypatch.setattr(main, "sessions", store)

    with TestClient(main.app) as browser:
        for visit in range(50):
            clock["now"] = visit * 20
            browser.cookies.clear()
            assert browser.get("/").status_code == 200

    assert len(store) == 1


def test_page_script_recovers_from_failed_requests(client):
    script = client.get("/static/app.js").text

    assert "'X-Session-Id': sessionId" in script
    assert "} catch (error) {" in script
    assert "} finally {" in script
    assert "showIdleFailure();" in script


def test_state_matches_response_model(client):
    body = client.get("/state").json()

    assert set(body) == set(main.StateResponse.model_fields)
    assert set(body["view"]) == set(main.ViewInfo.model_fields)
    schema = client.get("/openapi.json").json()
    assert "StateResponse" in schema["components"]["schemas"]
