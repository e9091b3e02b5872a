"""
Photobooth Service Main Application
===================================

FastAPI entry point for the kiosk capture-and-composition service.

The kiosk front-end drives the pipeline over HTTP: capture a frame,
move the editor sliders, pick a frame overlay, download or send the
result.

Endpoints:
    GET  /               - Service information
    GET  /health         - Liveness probe
    GET  /ready          - Readiness probe (frames loaded, camera bound?)
    GET  /frames         - Frame catalog
    POST /camera/switch  - Toggle user/environment facing camera
    POST /capture        - Grab a camera frame and compose it
    POST /source         - Upload an encoded image as the source
    PUT  /editor         - Change controls and/or frame, re-compose
    POST /editor/reset   - Drop the source and reset controls
    GET  /editor/image   - Encoded export of the composed canvas
    POST /send           - Export and hand to the messaging gateway
    GET  /metrics        - Counters for observability
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from photobooth.config import settings
from photobooth.capture import CaptureSource, FacingMode, OpenCVFeed, decode_image
from photobooth.delivery import HttpImageSender
from photobooth.editor import Compositor, Exporter
from photobooth.errors import (
    CaptureUnavailable,
    DeliveryFailed,
    EncodingFailed,
    ImageDecodeError,
    InvalidControlState,
    NoSourceCaptured,
)
from photobooth.frames import DirectoryFrameProvider
from photobooth.session import EditorSession


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_frame_provider: Optional[DirectoryFrameProvider] = None
_capture_source: Optional[CaptureSource] = None
_session: Optional[EditorSession] = None
_sender: Optional[HttpImageSender] = None
_startup_time: float = 0.0


def get_session() -> Optional[EditorSession]:
    return _session

def get_frame_provider() -> Optional[DirectoryFrameProvider]:
    return _frame_provider

def get_capture_source() -> Optional[CaptureSource]:
    return _capture_source


# =============================================================================
# Request Models
# =============================================================================

class ControlsUpdate(BaseModel):
    """Partial editor update. Omitted fields keep their value."""

    zoom: Optional[float] = None
    rotate: Optional[float] = None
    brightness: Optional[float] = None
    contrast: Optional[float] = None
    pan_x: Optional[float] = None
    pan_y: Optional[float] = None
    frame_id: Optional[str] = Field(
        default=None,
        description="Overlay id; explicit null removes the overlay",
    )


class SendBody(BaseModel):
    """Recipients and caption for /send."""

    recipients: List[str] = Field(..., min_length=1)
    caption: str = Field(default="")
    mime_type: Optional[str] = None
    quality: Optional[float] = None


# =============================================================================
# Component Factories
# =============================================================================

def create_capture_source() -> CaptureSource:
    """
    Create the capture source based on config.

    backend "none" leaves the source unbound: capture requests fail
    with CaptureUnavailable and images must be uploaded instead.
    """
    camera = settings.camera
    facing_mode = FacingMode(camera.facing_mode)
    mirrored_modes = [FacingMode(m) for m in camera.mirrored_modes]

    if camera.backend == "none":
        logger.info("Camera backend disabled, capture source left unbound")
        return CaptureSource(facing_mode=facing_mode, mirrored_modes=mirrored_modes)

    if camera.backend != "opencv":
        raise ValueError(f"Unknown camera backend: {camera.backend}")

    def open_feed(mode: FacingMode) -> OpenCVFeed:
        device = camera.device
        if mode is FacingMode.ENVIRONMENT and camera.environment_device is not None:
            device = camera.environment_device
        return OpenCVFeed(
            device=device,
            ideal_width=camera.ideal_width,
            ideal_height=camera.ideal_height,
        )

    feed_factory = open_feed if camera.environment_device is not None else None
    return CaptureSource(
        feed=open_feed(facing_mode),
        facing_mode=facing_mode,
        mirrored_modes=mirrored_modes,
        feed_factory=feed_factory,
    )


def create_sender() -> Optional[HttpImageSender]:
    """Create the gateway client, or None when no gateway is configured."""
    delivery = settings.delivery
    if not delivery.gateway_url:
        logger.info("No messaging gateway configured, /send disabled")
        return None
    return HttpImageSender(
        gateway_url=delivery.gateway_url,
        timeout_seconds=delivery.timeout_seconds,
        default_message=delivery.default_message,
    )


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    global _frame_provider, _capture_source, _session, _sender, _startup_time

    _startup_time = time.time()
    logger.info(f"Starting {settings.service.name} {settings.service.version}")

    _frame_provider = DirectoryFrameProvider(settings.frames.directory)
    frames = _frame_provider.list_frames()

    _capture_source = create_capture_source()

    compositor = Compositor(
        frames=_frame_provider,
        width=settings.canvas.width,
        height=settings.canvas.height,
        background=settings.canvas.background,
    )
    exporter = Exporter(
        default_mime_type=settings.export.mime_type,
        default_quality=settings.export.quality,
    )

    # First catalog frame is pre-selected, as on the kiosk
    _session = EditorSession(
        compositor,
        capture=_capture_source,
        exporter=exporter,
        frame_id=frames[0].id if frames else None,
    )
    _sender = create_sender()

    logger.info("All components started")

    yield

    logger.info("Shutting down...")
    if _session is not None:
        await _session.queue.close()
    if _capture_source is not None:
        _capture_source.unbind()
    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Photobooth",
    description="Kiosk capture-and-composition service",
    version=settings.service.version,
    lifespan=lifespan,
)


@app.exception_handler(CaptureUnavailable)
async def _capture_unavailable(request: Request, exc: CaptureUnavailable) -> JSONResponse:
    return JSONResponse({"success": False, "message": str(exc)}, status_code=503)


@app.exception_handler(InvalidControlState)
async def _invalid_controls(request: Request, exc: InvalidControlState) -> JSONResponse:
    return JSONResponse({"success": False, "message": str(exc)}, status_code=422)


@app.exception_handler(EncodingFailed)
async def _encoding_failed(request: Request, exc: EncodingFailed) -> JSONResponse:
    return JSONResponse({"success": False, "message": str(exc)}, status_code=400)


@app.exception_handler(ImageDecodeError)
async def _decode_failed(request: Request, exc: ImageDecodeError) -> JSONResponse:
    return JSONResponse({"success": False, "message": str(exc)}, status_code=400)


@app.exception_handler(NoSourceCaptured)
async def _no_source(request: Request, exc: NoSourceCaptured) -> JSONResponse:
    return JSONResponse({"success": False, "message": str(exc)}, status_code=409)


@app.exception_handler(DeliveryFailed)
async def _delivery_failed(request: Request, exc: DeliveryFailed) -> JSONResponse:
    return JSONResponse({"success": False, "message": str(exc)}, status_code=502)


def _editor_state(session: EditorSession) -> dict:
    return {
        "success": True,
        "width": session.canvas.width,
        "height": session.canvas.height,
        "frame_id": session.frame_id,
        "controls": session.controls.model_dump(),
        "warning": session.compositor.last_warning,
    }


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": settings.service.name,
        "version": settings.service.version,
        "status": "running",
        "canvas": {"width": settings.canvas.width, "height": settings.canvas.height},
        "camera_backend": settings.camera.backend,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness probe. Always 200 while the process is up."""
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/ready")
async def ready() -> JSONResponse:
    """
    Readiness probe.

    Ready once the session exists. Camera state is reported but does
    not gate readiness, since images can also be uploaded.
    """
    source = get_capture_source()
    camera_bound = source.is_bound if source else False

    if _session is None:
        return JSONResponse(
            {"status": "not_ready", "camera_bound": camera_bound},
            status_code=503,
        )

    return JSONResponse({
        "status": "ready",
        "camera_bound": camera_bound,
        "facing_mode": source.facing_mode.value if source else None,
        "sender_configured": _sender is not None,
    })


@app.get("/frames")
async def frames() -> JSONResponse:
    """Frame catalog in display order."""
    provider = get_frame_provider()
    catalog = provider.list_frames() if provider else []
    return JSONResponse({
        "frames": [f.model_dump(by_alias=True, exclude_none=True) for f in catalog],
    })


@app.post("/camera/switch")
async def switch_camera() -> JSONResponse:
    """Toggle between user- and environment-facing capture."""
    source = get_capture_source()
    if source is None:
        raise CaptureUnavailable("Camera not initialized")
    mode = await source.switch_facing_mode()
    return JSONResponse({"success": True, "facing_mode": mode.value})


@app.post("/capture")
async def capture(frame_id: Optional[str] = None) -> JSONResponse:
    """Grab a frame from the bound camera and compose it."""
    session = get_session()
    if frame_id is not None:
        await session.capture(frame_id=frame_id)
    else:
        await session.capture()
    return JSONResponse(_editor_state(session))


@app.post("/source")
async def upload_source(request: Request, frame_id: Optional[str] = None) -> JSONResponse:
    """Use an uploaded encoded image (request body) as the source."""
    session = get_session()
    image = decode_image(await request.body())
    if frame_id is not None:
        await session.load_source(image, frame_id=frame_id)
    else:
        await session.load_source(image)
    return JSONResponse(_editor_state(session))


@app.put("/editor")
async def update_editor(update: ControlsUpdate) -> JSONResponse:
    """Apply slider and/or frame changes and re-compose."""
    session = get_session()
    changes = update.model_dump(exclude={"frame_id"})
    if "frame_id" in update.model_fields_set:
        await session.update(frame_id=update.frame_id, **changes)
    else:
        await session.update(**changes)
    return JSONResponse(_editor_state(session))


@app.post("/editor/reset")
async def reset_editor() -> JSONResponse:
    """Drop the source image and restore default controls."""
    get_session().reset()
    return JSONResponse({"success": True})


@app.get("/editor/image")
async def editor_image(
    mime_type: Optional[str] = None,
    quality: Optional[float] = None,
) -> Response:
    """Encoded export of the composed canvas, as a download."""
    result = await get_session().export(mime_type, quality)
    return Response(
        content=result.data,
        media_type=result.mime_type,
        headers={
            "Content-Disposition": f'attachment; filename="{result.suggested_filename()}"',
        },
    )


@app.post("/send")
async def send(body: SendBody) -> JSONResponse:
    """Export the composed image and hand it to the messaging gateway."""
    if _sender is None:
        return JSONResponse(
            {"success": False, "message": "Messaging gateway not configured"},
            status_code=503,
        )

    try:
        result = await get_session().send(
            _sender,
            recipients=body.recipients,
            caption=body.caption,
            mime_type=body.mime_type,
            quality=body.quality,
        )
    except InvalidControlState:
        raise
    except ValueError as e:
        return JSONResponse({"success": False, "message": str(e)}, status_code=400)

    status_code = 200 if result.success else 502
    return JSONResponse(
        {
            "success": result.success,
            "messageIds": result.message_ids,
            "message": result.error,
        },
        status_code=status_code,
    )


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Counters for observability."""
    session = get_session()
    source = get_capture_source()
    provider = get_frame_provider()

    capture_metrics = {}
    if source:
        capture_metrics = {
            "camera_bound": source.is_bound,
            "facing_mode": source.facing_mode.value,
            "frames_captured": source.frames_captured,
        }

    frame_metrics = {}
    if provider:
        frame_metrics = {
            "frame_loads": provider.loads,
            "frame_cache_hits": provider.cache_hits,
        }

    sender_metrics = {}
    if _sender:
        sender_metrics = {
            "sent": _sender.sent_count,
            "send_failures": _sender.failed_count,
        }

    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1),
        **(session.metrics() if session else {}),
        **capture_metrics,
        **frame_metrics,
        **sender_metrics,
    })


# =============================================================================
# Main Entry Point
# =============================================================================

def run() -> None:
    """Console entry point."""
    import uvicorn

    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "photobooth.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    run()
