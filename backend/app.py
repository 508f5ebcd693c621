import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import NoReturn
from urllib.parse import quote

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from commentary.config import load_settings
from commentary.errors import CommentaryError, InvalidInput
from commentary.pipeline import CommentaryPipeline, build_pipeline, parse_duration, require_video_id
from commentary.styles import COMMENTARY_STYLES, resolve_voice

SETTINGS = load_settings()
DEBUG = SETTINGS.debug

logging.basicConfig(
    level=getattr(logging, SETTINGS.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
STATIC_DIR = BASE_DIR / "static"

app = FastAPI(title="Courtside Commentary")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
    expose_headers=[
        "Content-Disposition",
        "X-Video-ID",
        "X-Duration",
        "X-Commentary-Style",
        "X-Voice-ID",
        "X-Commentary",
        "X-Commentary-Length",
        "X-Description-Length",
    ],
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _raise_http(exc: Exception, message: str) -> NoReturn:
    if isinstance(exc, InvalidInput):
        raise HTTPException(
            status_code=exc.status_code,
            detail={"message": str(exc), "error": exc.detail, "failedStep": exc.step},
        ) from exc
    if isinstance(exc, CommentaryError):
        logger.error(f"{message} at step {exc.step}: {exc}")
        raise HTTPException(
            status_code=exc.status_code,
            detail={"message": message, "error": str(exc), "failedStep": exc.step},
        ) from exc

    logger.exception(message)
    error = "Unknown error occurred"
    if DEBUG:
        error = f"{type(exc).__name__}: {exc}"
    raise HTTPException(
        status_code=500,
        detail={"message": message, "error": error, "failedStep": "unknown"},
    ) from exc


def _audio_response(audio: bytes, filename: str, headers: dict | None = None) -> Response:
    return Response(
        content=audio,
        media_type="audio/mpeg",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            **(headers or {}),
        },
    )


def _format_seconds(seconds: float) -> str:
    return f"{seconds:g}"


def get_pipeline(request: Request) -> CommentaryPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        pipeline = build_pipeline(SETTINGS)
        request.app.state.pipeline = pipeline
    return pipeline


@app.on_event("startup")
async def on_startup():
    app.state.pipeline = build_pipeline(SETTINGS)
    logger.info("Commentary pipeline ready")


@app.get("/api/health")
async def health():
    return {"ok": True, "time": _now()}


@app.get("/api/commentary-styles")
async def commentary_styles():
    styles = [style.to_dict() for style in COMMENTARY_STYLES]
    return {"ok": True, "styles": styles, "count": len(styles), "timestamp": _now()}


@app.get("/api/voices")
async def voices(pipeline: CommentaryPipeline = Depends(get_pipeline)):
    try:
        found = await run_in_threadpool(pipeline.list_voices)
    except Exception as exc:
        _raise_http(exc, "Failed to fetch available voices")
    return {"ok": True, "voices": found, "count": len(found)}


@app.get("/api/test-video-analysis")
async def test_video_analysis(
    video_id: str | None = Query(None, alias="videoId"),
    pipeline: CommentaryPipeline = Depends(get_pipeline),
):
    video_id = video_id or SETTINGS.test_video_id
    try:
        analysis = await run_in_threadpool(pipeline.analyze, video_id)
    except Exception as exc:
        _raise_http(exc, "Video analysis failed")
    return {"ok": True, "videoId": analysis.video_id, "analysis": analysis.text, "timestamp": _now()}


@app.get("/api/basketball-commentary")
async def video_commentary(
    video_id: str | None = Query(None, alias="videoId"),
    duration: str | None = Query(None),
    commentary_style: str | None = Query(None, alias="commentaryStyle"),
    pipeline: CommentaryPipeline = Depends(get_pipeline),
):
    try:
        video_id = require_video_id(video_id)
        duration_seconds = parse_duration(duration)
        result = await run_in_threadpool(
            pipeline.commentate_video,
            video_id,
            duration_seconds,
            commentary_style,
        )
    except Exception as exc:
        _raise_http(exc, "Basketball commentary generation failed")

    return {
        "ok": True,
        "videoId": video_id,
        "originalDescription": result.analysis.text,
        "duration": duration_seconds,
        "wordBudget": result.commentary.word_budget,
        "commentaryStyle": result.commentary.style_id,
        "commentary": result.commentary.text,
        "timestamp": _now(),
    }


@app.post("/api/basketball-commentary")
async def description_commentary(payload: dict, pipeline: CommentaryPipeline = Depends(get_pipeline)):
    description = payload.get("description")
    try:
        if not description or not isinstance(description, str):
            raise InvalidInput("Description is required", "Please provide a description in the request body")
        duration_seconds = parse_duration(payload.get("duration"))
        commentary = await run_in_threadpool(
            pipeline.commentate,
            description,
            duration_seconds,
            payload.get("commentaryStyle"),
        )
    except Exception as exc:
        _raise_http(exc, "Basketball commentary generation failed")

    return {
        "ok": True,
        "originalDescription": description,
        "duration": duration_seconds,
        "wordBudget": commentary.word_budget,
        "commentaryStyle": commentary.style_id,
        "commentary": commentary.text,
        "timestamp": _now(),
    }


@app.get("/api/basketball-audio")
async def video_audio(
    video_id: str | None = Query(None, alias="videoId"),
    duration: str | None = Query(None),
    commentary_style: str | None = Query(None, alias="commentaryStyle"),
    voice_id: str | None = Query(None, alias="voiceId"),
    pipeline: CommentaryPipeline = Depends(get_pipeline),
):
    try:
        video_id = require_video_id(video_id)
        duration_seconds = parse_duration(duration)
        result = await run_in_threadpool(
            pipeline.commentate_video,
            video_id,
            duration_seconds,
            commentary_style,
        )
        narrated = await run_in_threadpool(
            pipeline.narrate,
            result.commentary.text,
            commentary_style,
            voice_id,
        )
    except Exception as exc:
        _raise_http(exc, "Basketball audio commentary generation failed")

    logger.info(f"Audio commentary for {video_id}: {len(narrated.audio)} bytes")
    return _audio_response(narrated.audio, f"basketball-commentary-{narrated.style_id}-{video_id}.mp3")


@app.post("/api/basketball-audio")
async def text_audio(payload: dict, pipeline: CommentaryPipeline = Depends(get_pipeline)):
    """Narrate ``text`` as given, or generate commentary from ``description`` first.

    A raw ``voiceId`` overrides the style. When it belongs to a registered style
    the response filename names that style, otherwise it says ``custom``.
    """
    text = payload.get("text")
    description = payload.get("description")
    style_id = payload.get("commentaryStyle")
    try:
        voice_id = payload.get("voiceId")
        if voice_id is not None and not isinstance(voice_id, str):
            raise InvalidInput("Invalid voiceId", "voiceId must be a string")
        if text and isinstance(text, str):
            commentary_text = text
        elif description and isinstance(description, str):
            duration_seconds = parse_duration(payload.get("duration"))
            commentary = await run_in_threadpool(pipeline.commentate, description, duration_seconds, style_id)
            commentary_text = commentary.text
        else:
            raise InvalidInput(
                "Text or description is required",
                'Please provide either "text" (for direct audio conversion) or "description" '
                "(to generate commentary first) in the request body",
            )
        narrated = await run_in_threadpool(pipeline.narrate, commentary_text, style_id, voice_id)
    except Exception as exc:
        _raise_http(exc, "Basketball audio commentary generation failed")

    return _audio_response(narrated.audio, f"basketball-commentary-{narrated.style_id}.mp3")


@app.get("/api/get-commentary-audio")
async def commentary_audio(
    video_id: str | None = Query(None, alias="videoId"),
    duration: str | None = Query(None),
    commentary_style: str | None = Query(None, alias="commentaryStyle"),
    voice_id: str | None = Query(None, alias="voiceId"),
    pipeline: CommentaryPipeline = Depends(get_pipeline),
):
    """Video id and duration in, narrated commentary out.

    ``X-Commentary-Style`` is ``custom`` for an unregistered ``voiceId`` and the
    owning style's id for a registered one.
    """
    resolved_voice, selected_style = resolve_voice(commentary_style, voice_id)
    try:
        video_id = require_video_id(video_id)
        duration_seconds = parse_duration(duration, required=True)
        result = await run_in_threadpool(
            pipeline.commentate_video,
            video_id,
            duration_seconds,
            commentary_style,
        )
    except Exception as exc:
        _raise_http(exc, "Commentary audio pipeline failed")

    commentary = result.commentary.text
    description = result.analysis.text

    try:
        narrated = await run_in_threadpool(pipeline.narrate, commentary, commentary_style, voice_id)
    except CommentaryError as exc:
        logger.warning(f"Speech generation failed, returning commentary text instead: {exc}")
        return {
            "ok": True,
            "message": "Pipeline completed successfully (audio generation failed, returning text)",
            "videoId": video_id,
            "duration": duration_seconds,
            "commentaryStyle": selected_style,
            "voiceId": resolved_voice,
            "originalDescription": description,
            "commentary": commentary,
            "audioGenerationError": str(exc),
            "timestamp": _now(),
        }

    logger.info(
        f"Pipeline completed for {video_id}: {len(description)} character description, "
        f"{len(commentary)} character commentary, {len(narrated.audio)} bytes of audio"
    )
    seconds = _format_seconds(duration_seconds)
    return _audio_response(
        narrated.audio,
        f"commentary-{narrated.style_id}-{video_id}-{seconds}s.mp3",
        headers={
            "X-Video-ID": video_id,
            "X-Duration": seconds,
            "X-Commentary-Style": narrated.style_id,
            "X-Voice-ID": narrated.voice_id,
            "X-Commentary": quote(commentary),
            "X-Commentary-Length": str(len(commentary)),
            "X-Description-Length": str(len(description)),
        },
    )


app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="ui")


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("app:app", host="0.0.0.0", port=port, reload=DEBUG)
