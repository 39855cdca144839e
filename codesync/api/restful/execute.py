import asyncio
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
    tags=["execute"],
)

# Judge0 CE language ids
LANGUAGE_IDS: Dict[str, int] = {
    "javascript": 93,
    "python": 71,
    "java": 62,
    "c_cpp": 54,
    "typescript": 74,
    "golang": 60,
}

TIMED_OUT_RESULT = {
    "status": {"description": "Timed Out"},
    "stderr": "Execution timed out. Your code took too long to run.",
}


class ExecuteRequest(BaseModel):
    """Code to run on the execution service."""
    language: str = "javascript"
    code: Optional[str] = None


def _judge0_headers(settings: Settings) -> Dict[str, str]:
    return {
        "X-RapidAPI-Key": settings.judge0_api_key or "",
        "X-RapidAPI-Host": settings.judge0_host,
    }


async def run_submission(
    client: httpx.AsyncClient,
    settings: Settings,
    language_id: int,
    code: str,
) -> Dict[str, Any]:
    """
    Submit code to Judge0 and poll until it finishes or the attempts run out.

    Returns:
        The Judge0 submission result, or TIMED_OUT_RESULT
    """
    params = {"base64_encoded": "false", "fields": "*"}
    submission = await client.post(
        f"{settings.judge0_url}/submissions",
        params=params,
        headers=_judge0_headers(settings),
        json={"language_id": language_id, "source_code": code},
    )
    submission.raise_for_status()
    token = submission.json()["token"]

    for _ in range(settings.judge0_poll_attempts):
        await asyncio.sleep(settings.judge0_poll_interval)
        response = await client.get(
            f"{settings.judge0_url}/submissions/{token}",
            params=params,
            headers=_judge0_headers(settings),
        )
        response.raise_for_status()
        result = response.json()
        # ids 1 and 2 are "In Queue" and "Processing"
        if result["status"]["id"] > 2:
            return result

    return TIMED_OUT_RESULT


@router.post("/execute")
async def execute(
    request: ExecuteRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
):
    """
    Run code on the Judge0 execution service.

    Args:
        request: language key (see LANGUAGE_IDS) and source code
    """
    if not request.code:
        return JSONResponse({"error": "Code is required."}, status_code=400)

    language_id = LANGUAGE_IDS.get(request.language)
    if language_id is None:
        return JSONResponse({"error": "Unsupported language."}, status_code=400)

    try:
        return await run_submission(client, settings, language_id, request.code)
    except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
        logger.error(f"Error executing code: {e}")
        return JSONResponse(
            {"error": "An error occurred while executing the code."}, status_code=500
        )
