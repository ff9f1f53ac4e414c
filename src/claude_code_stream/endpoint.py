"""FastAPI endpoints for a Claude Code language model."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import StreamingResponse

from .core.events import ErrorEvent
from .core.types import ConfiguredBaseModel
from .encoder import EventEncoder
from .errors import APICallError, AuthenticationError, ClaudeCodeError
from .model import ClaudeCodeLanguageModel, GenerateResult
from .request.call_options import CallOptions, ResponseFormat

logger = logging.getLogger(__name__)


class GenerateRequest(ConfiguredBaseModel):
    """
    Body of a generation request.
    """
    prompt: str
    response_format: Optional[ResponseFormat] = None


def add_claude_code_fastapi_endpoint(
    app: FastAPI | APIRouter,
    model: ClaudeCodeLanguageModel,
    path: str = "/",
) -> None:
    """Add Claude Code endpoints to a FastAPI app.

    Registers:
    - ``POST {path}`` streams downstream events as Server-Sent Events.
    - ``POST {path}/generate`` returns the aggregated result as JSON.
    - ``GET {path}/health`` reports the configured model.

    Args:
        app: FastAPI application or APIRouter instance.
        model: Configured ClaudeCodeLanguageModel instance.
        path: API endpoint path (default: "/").
    """
    base = path.rstrip("/")

    @app.post(path)
    async def claude_code_endpoint(input_data: GenerateRequest, request: Request):
        """Claude Code streaming endpoint."""
        encoder = EventEncoder(accept=request.headers.get("accept"))
        options = CallOptions(response_format=input_data.response_format)

        async def event_generator():
            try:
                async for event in model.stream(input_data.prompt, options):
                    encoded = encoder.encode(event)
                    logger.debug(f"HTTP Response: {encoded}")
                    yield encoded
            except Exception as e:
                logger.error(f"Stream error: {e}", exc_info=True)
                yield encoder.encode(ErrorEvent(message=str(e) or type(e).__name__, code="STREAM_ERROR"))

        return StreamingResponse(event_generator(), media_type=encoder.get_content_type())

    @app.post(f"{base}/generate", response_model=GenerateResult)
    async def claude_code_generate(input_data: GenerateRequest):
        """Claude Code non-streaming endpoint."""
        options = CallOptions(response_format=input_data.response_format)
        try:
            return await model.generate(input_data.prompt, options)
        except AuthenticationError as e:
            raise HTTPException(status_code=401, detail=str(e))
        except APICallError as e:
            raise HTTPException(status_code=504 if e.code == "TIMEOUT" else 502, detail=str(e))
        except ClaudeCodeError as e:
            raise HTTPException(status_code=500, detail=str(e))

    @app.get(f"{base}/health")
    def health():
        """Health check."""
        return {
            "status": "ok",
            "model": {
                "id": model.model_id,
                "session_id": model.session_id,
            },
        }
