"""
secondbrain/main.py
FastAPI application: all endpoints for the Second Brain inbox.
Endpoints: GET /health, POST /slack/events, GET|POST /cron/daily-digest, GET|POST /cron/weekly-review
"""

import hmac
import json
import logging
import os
from typing import Any

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from secondbrain.capture.dedup import DedupWindow, default_dedup_window
from secondbrain.capture.runner import handle_message_event
from secondbrain.capture.runtime import build_capture_runtime, inbox_channel_id
from secondbrain.capture.signature import verify_slack_request
from secondbrain.digest.runner import build_digest_runtime, run_daily_digest, run_weekly_review

logger = logging.getLogger(__name__)
load_dotenv()

app = FastAPI(title="Second Brain Inbox")


@app.get("/health")
def health_check() -> dict[str, str]:
    """Return service health status."""
    return {"status": "ok"}


@app.post("/slack/events", response_model=None)
async def slack_events(
    request: Request,
    dedup: DedupWindow = Depends(default_dedup_window),
) -> dict[str, Any] | JSONResponse:
    """
    Receive Slack Events API callbacks for the inbox channel.

    The `url_verification` handshake is answered before the signature check.
    Every other request must carry a valid Slack signature.

    Args:
        request: FastAPI Request (raw body is needed for the signature).
        dedup: Window of recently processed message timestamps.
    Returns:
        `{"challenge": ...}` for the handshake, `{"ok": true}` otherwise.
    Raises:
        HTTPException 400: Body is not a JSON object.
        HTTPException 401: Missing or invalid signature.
    """
    raw_body = await request.body()
    envelope = _parse_json_object(raw_body)

    if envelope.get("type") == "url_verification":
        return {"challenge": envelope.get("challenge")}

    signature = _first_header(request, "x-slack-signature", "x-signature")
    timestamp = _first_header(request, "x-slack-request-timestamp", "x-request-timestamp")
    if not verify_slack_request(signature, timestamp, raw_body):
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        outcome = await run_in_threadpool(_dispatch_message_event, envelope, dedup)
    except Exception:
        logger.exception("Error processing Slack event.")
        return JSONResponse(status_code=500, content={"error": "Processing failed"})
    logger.info("Slack event handled: %s", outcome)
    return {"ok": True}


@app.api_route("/cron/daily-digest", methods=["GET", "POST"], response_model=None)
async def daily_digest(request: Request) -> dict[str, Any] | JSONResponse:
    """
    Scheduled trigger: DM the daily digest of open items.

    Raises:
        HTTPException 401: Missing/invalid bearer token.
    """
    _verify_cron_token(request)
    try:
        return await run_in_threadpool(lambda: run_daily_digest(build_digest_runtime()))
    except Exception as exc:
        logger.exception("Daily digest failed.")
        return JSONResponse(status_code=500, content={"error": "Failed", "details": str(exc)})


@app.api_route("/cron/weekly-review", methods=["GET", "POST"], response_model=None)
async def weekly_review(request: Request) -> dict[str, Any] | JSONResponse:
    """
    Scheduled trigger: DM the weekly review of captures and projects.

    Raises:
        HTTPException 401: Missing/invalid bearer token.
    """
    _verify_cron_token(request)
    try:
        return await run_in_threadpool(lambda: run_weekly_review(build_digest_runtime()))
    except Exception as exc:
        logger.exception("Weekly review failed.")
        return JSONResponse(status_code=500, content={"error": "Failed", "details": str(exc)})


def _dispatch_message_event(envelope: dict[str, Any], dedup: DedupWindow) -> str:
    return handle_message_event(
        envelope,
        inbox_channel_id=inbox_channel_id(),
        dedup=dedup,
        runtime_factory=build_capture_runtime,
    )


def _parse_json_object(raw_body: bytes) -> dict[str, Any]:
    """
    Parse a request body that must be a JSON object.

    Raises:
        HTTPException 400: Invalid JSON or not an object.
    """
    try:
        payload = json.loads(raw_body)
    except (ValueError, UnicodeDecodeError) as exc:
        raise HTTPException(status_code=400, detail="Invalid JSON") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="JSON body must be an object.")
    return payload


def _first_header(request: Request, *names: str) -> str:
    for name in names:
        value = request.headers.get(name, "").strip()
        if value:
            return value
    return ""


def _verify_cron_token(request: Request) -> None:
    """
    Validate the `Authorization: Bearer <CRON_SECRET>` header.

    Raises:
        HTTPException 401: When the secret is unset or the token does not match.
    """
    expected = os.getenv("CRON_SECRET", "").strip()
    if not expected:
        logger.error("CRON_SECRET not configured; rejecting scheduled trigger.")
        raise HTTPException(status_code=401, detail="Unauthorized")
    provided = request.headers.get("authorization", "").strip()
    if not hmac.compare_digest(provided.encode("utf-8"), f"Bearer {expected}".encode("utf-8")):
        raise HTTPException(status_code=401, detail="Unauthorized")
