"""
Client for the OpenAI Responses endpoint.

Builds the request body, attaches the bearer credential, surfaces upstream
failures and pulls plain text out of the response envelope. One outbound
call per invocation; retries are left to callers (none exist today).
"""
import logging
import time
from typing import Any, Dict, List, Optional, Union

import httpx

from syllabuild.core.config import Settings, get_settings
from syllabuild.core.errors import ConfigError, UpstreamError

logger = logging.getLogger(__name__)

PromptPayload = Union[str, List[Dict[str, Any]]]


def build_request_body(
    model: str,
    input: PromptPayload,
    max_output_tokens: int,
    wants_json_object: bool,
) -> Dict[str, Any]:
    """Request body for one Responses call. A plain string becomes a single user message."""
    if isinstance(input, str):
        input = [{"role": "user", "content": input}]

    body = {
        "model": model,
        "input": input,
        "max_output_tokens": max_output_tokens,
        "truncation": "auto",
    }
    # A hint only: the model can still return prose around the object
    if wants_json_object:
        body["text"] = {"format": {"type": "json_object"}}
    return body


def extract_text(data: Any) -> str:
    """
    Plain text of a Responses envelope.

    Prefers the `output_text` convenience field; otherwise concatenates every
    `output_text` block, in document order, whether nested in a message item
    or sitting directly in `output`.
    """
    if not isinstance(data, dict):
        return ""

    output_text = data.get("output_text")
    if isinstance(output_text, str) and output_text.strip():
        return output_text

    parts = []
    for item in data.get("output") or []:
        if not isinstance(item, dict):
            continue
        if item.get("type") == "message" and isinstance(item.get("content"), list):
            for block in item["content"]:
                if (
                    isinstance(block, dict)
                    and block.get("type") == "output_text"
                    and isinstance(block.get("text"), str)
                ):
                    parts.append(block["text"])
        elif item.get("type") == "output_text" and isinstance(item.get("text"), str):
            parts.append(item["text"])
    return "".join(parts)


def _upstream_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if payload.get("message"):
            return payload["message"]
    return f"OpenAI error ({response.status_code})"


class ModelClient:
    """Thin async wrapper around the remote generation endpoint."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self._http = http_client

    async def invoke(
        self,
        model: str,
        input: PromptPayload,
        max_output_tokens: int = 4000,
        wants_json_object: bool = False,
    ) -> Dict[str, Any]:
        """Send one request and return the decoded response envelope."""
        api_key = self.settings.openai_api_key
        if not api_key:
            raise ConfigError()

        body = build_request_body(model, input, max_output_tokens, wants_json_object)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

        start_time = time.time()
        try:
            if self._http is not None:
                response = await self._http.post(self.settings.openai_url, json=body, headers=headers)
            else:
                timeout = httpx.Timeout(self.settings.model_timeout_seconds)
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.post(self.settings.openai_url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.exception("Failed to reach the model endpoint")
            raise UpstreamError(f"Failed to reach OpenAI: {exc}") from exc

        elapsed = round(time.time() - start_time, 3)
        if response.status_code >= 400:
            message = _upstream_message(response)
            logger.error(f"Model call failed ({response.status_code}, model={model}, {elapsed}s): {message}")
            raise UpstreamError(message)

        try:
            data = response.json()
        except ValueError:
            # An unreadable envelope yields no text; JSON passes then fail at parse time
            logger.warning(f"Model call returned a non-JSON body (model={model})")
            data = {}

        logger.info(f"Model call ok: model={model} max_output_tokens={max_output_tokens} in {elapsed}s")
        return data


def get_model_client() -> ModelClient:
    """FastAPI dependency; overridden in tests."""
    return ModelClient()
