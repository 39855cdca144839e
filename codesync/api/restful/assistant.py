import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from codesync.api.dependencies import get_http_client
from codesync.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["assistant"],
)


class AskAIRequest(BaseModel):
    code: Optional[str] = None
    prompt: Optional[str] = None


def build_prompt(prompt: str, code: str) -> str:
    return f"{prompt}:\n\n```\n{code}\n```"


def extract_text(body: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first Gemini candidate."""
    parts = body["candidates"][0]["content"]["parts"]
    return "".join(part.get("text", "") for part in parts)


async def generate(client: httpx.AsyncClient, settings: Settings, text: str) -> str:
    if not settings.gemini_api_key:
        raise ValueError("GEMINI_API_KEY is not configured")

    response = await client.post(
        f"{settings.gemini_url}/models/{settings.gemini_model}:generateContent",
        headers={"x-goog-api-key": settings.gemini_api_key},
        json={"contents": [{"parts": [{"text": text}]}]},
    )
    response.raise_for_status()
    return extract_text(response.json())


@router.post("/ask-ai")
async def ask_ai(
    request: AskAIRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
):
    """
    Ask the AI assistant about a piece of code.

    Args:
        request: the code and the instruction to apply to it
    """
    if not request.code or not request.prompt:
        return JSONResponse({"error": "Code and a prompt are required."}, status_code=400)

    try:
        answer = await generate(client, settings, build_prompt(request.prompt, request.code))
    except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
        logger.error(f"Error with Gemini API: {e}")
        return JSONResponse(
            {"error": "Failed to get a response from the AI assistant."}, status_code=500
        )

    return {"response": answer}
