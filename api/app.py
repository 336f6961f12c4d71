import os
import sqlite3
import sys
import time
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel

from core import relay
from core.catalog import get_catalog
from core.errors import RelayError
from metrics.log import log_interaction
from tools import hf_inference as hf

app = FastAPI(title="Movie Chatbot")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


def _static_dir() -> Path:
    path = os.getenv("MOVIE_BOT_STATIC_DIR")
    if path:
        return Path(path).resolve()
    return (Path(__file__).resolve().parents[1] / "web").resolve()


@app.on_event("startup")
async def startup_event():
    print("🔹 Starting Movie Chatbot API...")
    movies = get_catalog()
    print(f"🎬 Loaded {len(movies)} movies; model endpoint: {hf._api_url()}")
    print("✅ Startup complete.")


@app.on_event("shutdown")
async def shutdown_event():
    print("🔻 Shutting down Movie Chatbot API...")


class ChatRequest(BaseModel):
    message: Optional[str] = None


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = [
        {"loc": list(err.get("loc", ())), "msg": str(err.get("msg", ""))}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": relay.MESSAGE_REQUIRED, "details": problems})


@app.get("/api/ping")
def ping():
    return {"status": "ok", "message": "Server is running"}


@app.post("/api/chat")
def chat(req: Optional[ChatRequest] = None):
    t0 = time.time()
    message = req.message if req else None
    status, error_kind, reply = 200, None, ""
    try:
        reply = relay.answer(message)
        response = JSONResponse({"reply": reply})
    except RelayError as e:
        status, error_kind = e.status_code, e.kind
        print(f"❌ Chat error ({e.kind}): {e.message} {e.details!r}", file=sys.stderr)
        response = JSONResponse(status_code=status, content=e.to_body())
    except Exception as e:
        status, error_kind = 500, "internal"
        print("❌ Chat error:", repr(e), file=sys.stderr)
        response = JSONResponse(
            status_code=500,
            content={"error": hf.GENERIC_MESSAGE, "details": str(e)},
        )

    latency_ms = int((time.time() - t0) * 1000)
    try:
        log_interaction(
            status=status,
            error_kind=error_kind,
            latency_ms=latency_ms,
            message_chars=len(message) if isinstance(message, str) else 0,
            reply_chars=len(reply),
        )
    except (sqlite3.Error, OSError) as e:
        print("⚠️ Metrics logging failed:", e, file=sys.stderr)
    return response


@app.get("/{full_path:path}")
def client_bundle(full_path: str):
    if full_path == "api" or full_path.startswith("api/"):
        return JSONResponse(status_code=404, content={"error": "Not found"})
    root = _static_dir()
    target = (root / full_path).resolve()
    if full_path and target.is_file() and target.is_relative_to(root):
        return FileResponse(target)
    index = root / "index.html"
    if not index.is_file():
        return JSONResponse(status_code=404, content={"error": "Client bundle not found"})
    return FileResponse(index)
