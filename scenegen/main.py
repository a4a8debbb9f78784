import logging
from pathlib import Path
from typing import Optional
from fastapi import FastAPI, UploadFile, HTTPException, File, Form, Depends, Cookie, Header, Request
from fastapi.responses import Response, JSONResponse, HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel
from .session import SessionStore, SessionState
from .scene import SceneService, ValidationError, ReadError, GenerationError, SupersededError
from .scene.view import IDLE_LABEL

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).parent
SESSION_COOKIE = "scenegen_session"
SESSION_HEADER = "X-Session-Id"

app = FastAPI(
    title="SceneGen",
    description="Compose an uploaded character image into a generated scene",
    version="1.0.0"
)
sessions = SessionStore()
scene_service = SceneService()

app.mount("/static", StaticFiles(directory=BASE_DIR / "static"), name="static")

# Setup Templates
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


class ImageInfo(BaseModel):
    """Selected image summary."""
    filename: str
    media_type: str
    size: int
    encoded: bool


class ResultInfo(BaseModel):
    """Generated image, ready to display."""
    media_type: str
    data_url: str


class ViewInfo(BaseModel):
    """Control and panel visibility flags."""
    loading: bool
    progress_visible: bool
    trigger_enabled: bool
    trigger_label: str
    preview_visible: bool
    upload_placeholder_visible: bool
    result_visible: bool
    result_placeholder_visible: bool


class StateResponse(BaseModel):
    """Snapshot of a page session."""
    image: Optional[ImageInfo] = None
    result: Optional[ResultInfo] = None
    view: ViewInfo


def get_session(
    session_header: Optional[str] = Header(None, alias=SESSION_HEADER),
    session_cookie: Optional[str] = Cookie(None, alias=SESSION_COOKIE)
) -> SessionState:
    """
    Resolve the session bound to the page that sent the request.
    The page sends its own id in a header; the cookie only names the most
    recently loaded page and is used when the header is absent.
    """
    session = sessions.get(session_header or session_cookie)
    if session is None:
        raise HTTPException(status_code=400, detail="Session expired. Please reload the page.")
    return session


@app.get("/", response_class=HTMLResponse)
def read_root(request: Request):
    """
    Serve the page. Every page load starts a fresh session; sessions of
    closed or reloaded pages expire once idle.
    """
    session = sessions.create()

    response = templates.TemplateResponse(
        request,
        "index.html",
        {"trigger_label": IDLE_LABEL, "session_id": session.session_id, "state": session.snapshot()}
    )
    response.set_cookie(SESSION_COOKIE, session.session_id, httponly=True, samesite="strict")
    return response


@app.post("/upload", response_model=StateResponse)
async def upload_image(
    file: Optional[UploadFile] = File(None),
    source: str = Form("picker"),
    session: SessionState = Depends(get_session)
):
    """
    Select a reference image from the file picker or a drop.
    """
    try:
        await scene_service.select_image(session, file, source)
    except (ValidationError, ReadError) as e:
        raise HTTPException(status_code=400, detail=e.message)
    return session.snapshot()


@app.post("/generate", response_model=StateResponse)
def generate_scene(session: SessionState = Depends(get_session)):
    """
    Generate a scene from the selected image.

    Runs in the threadpool; the remote call blocks until the service answers.
    """
    try:
        scene_service.generate(session)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except SupersededError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except GenerationError as e:
        logger.error(f"Error generating image: {e.message}")
        return JSONResponse(
            status_code=502,
            content={"detail": f"An error occurred: {e.message}", "state": session.snapshot()}
        )
    except Exception as e:
        logger.error(f"Unexpected error generating image: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return session.snapshot()


@app.get("/state", response_model=StateResponse)
def get_state(session: SessionState = Depends(get_session)):
    """
    Current state snapshot of the page's session.
    """
    return session.snapshot()


@app.get("/result")
def get_result(session: SessionState = Depends(get_session)):
    """
    Raw bytes of the latest generated image.
    """
    result = session.result
    if result is None:
        raise HTTPException(status_code=404, detail="No generated image")
    return Response(content=result.data, media_type=result.media_type)


@app.get("/provider")
def get_provider():
    """
    Generation provider and its configuration status.
    """
    try:
        generator = scene_service.generator
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))

    configured = generator.is_configured()
    return {
        "name": scene_service.provider,
        "model": getattr(generator, "model", None),
        "configured": configured,
        "missing": [] if configured else generator.get_missing_config()
    }


@app.get("/health")
def health_check():
    return {"status": "running", "sessions": len(sessions)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("scenegen.main:app", host="0.0.0.0", port=8000)
