"""REST adapter for the OpenAI chat-completion and model-listing endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from proofread.adapters.api_errors import (
    AuthError,
    ProviderError,
    build_error_message,
    extract_error_code,
    extract_error_hint,
    parse_error_payload,
)
from proofread.adapters.http_client import ApiSession, HttpConfig
from proofread.domain.models import ModelDescriptor, ModelId
from proofread.domain.ports import TransformPort

DEFAULT_BASE_URL = "https://api.openai.com"
CHAT_MODEL_PREFIX = "gpt-"


class OpenAIRestAdapter(TransformPort):
    """HTTP adapter for ``/v1/chat/completions`` and ``/v1/models``."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        request_timeout_s: float = 60,
    ) -> None:
        if not api_key:
            raise ValueError("OpenAIRestAdapter requires an API key")
        self.base_url = base_url.rstrip("/") or DEFAULT_BASE_URL
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s)
        self.session = ApiSession(api_key, self.cfg)
        self._log = logging.getLogger(__name__)

    def complete(self, model: ModelId, instruction: str, text: str) -> Optional[str]:
        """Run one chat completion and return the assistant text.

        Returns ``None`` when the provider answered successfully but without
        any text.
        """
        url = self._make_url("/v1/chat/completions")
        body = {
            "model": model,
            "messages": [
                {"role": "user", "content": build_user_message(instruction, text)},
            ],
        }
        self._log.debug("POST %s model=%s chars=%d", url, model, len(text))
        resp = self.session.post(url, json_body=body, timeout=self.cfg.request_timeout_s)
        self._ensure_ok(resp, "complete")
        return self._parse_completion(self._json_dict(resp, "complete"))

    def list_models(self) -> List[ModelDescriptor]:
        """Return conversational models (``gpt-*``) sorted by id."""
        url = self._make_url("/v1/models")
        resp = self.session.get(url, timeout=self.cfg.list_timeout_s)
        self._ensure_ok(resp, "list_models")
        payload = self._json_dict(resp, "list_models")
        data = payload.get("data")
        if not isinstance(data, list):
            raise ProviderError("list_models: response has no 'data' list", payload=payload)
        ids = set()
        for entry in data:
            if not isinstance(entry, dict):
                continue
            model_id = entry.get("id")
            if isinstance(model_id, str) and model_id.startswith(CHAT_MODEL_PREFIX):
                ids.add(model_id)
        return [ModelDescriptor(id=model_id) for model_id in sorted(ids)]

    def close(self) -> None:
        """Release the pooled HTTP connection."""
        self.session.close()

    # ------------------------------------------------------------------
    def _make_url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @staticmethod
    def _ensure_ok(resp: requests.Response, ctx: str) -> None:
        """Raise typed adapter errors for non-2xx responses."""
        if 200 <= resp.status_code < 300:
            return
        status = resp.status_code
        payload = parse_error_payload(resp)
        message = build_error_message(ctx, status, payload)
        code = extract_error_code(payload)
        hint = extract_error_hint(payload)
        if status in (401, 403):
            raise AuthError(
                message, status=status, code=code, hint=hint, payload=payload, context=ctx
            )
        raise ProviderError(
            message, status=status, code=code, hint=hint, payload=payload, context=ctx
        )

    @staticmethod
    def _json_dict(resp: requests.Response, ctx: str) -> Dict[str, Any]:
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ProviderError(f"{ctx}: response is not valid JSON", context=ctx) from exc
        if not isinstance(payload, dict):
            raise ProviderError(f"{ctx}: unexpected response shape", payload=payload, context=ctx)
        return payload

    @staticmethod
    def _parse_completion(payload: Dict[str, Any]) -> Optional[str]:
        choices = payload.get("choices")
        if not isinstance(choices, list):
            raise ProviderError("complete: response has no 'choices' list", payload=payload)
        if not choices:
            return None
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            raise ProviderError("complete: first choice has no message", payload=payload)
        content = message.get("content")
        if content is None:
            return None
        if not isinstance(content, str):
            raise ProviderError("complete: message content is not text", payload=payload)
        return content or None


def build_user_message(instruction: str, text: str) -> str:
    """Join the prompt instruction and the user text into one message."""
    instruction = (instruction or "").strip()
    if not instruction:
        return text
    return f"{instruction}\n\n{text}"


__all__ = ["CHAT_MODEL_PREFIX", "DEFAULT_BASE_URL", "OpenAIRestAdapter", "build_user_message"]
