"""
Bedrock Claude minimal wrapper.

Uses Anthropic Messages API on Bedrock (anthropic_version=bedrock-2023-05-31).
"""

from __future__ import annotations

import importlib
import json
import logging
import time

from .logutil import log_event

logger = logging.getLogger(__name__)


class LLMError(RuntimeError):
    """Generation failed after all attempts."""


def _boto3():
    # Allow tests to monkeypatch module-level `boto3` symbol.
    return globals().get("boto3") or importlib.import_module("boto3")


def _bedrock_client(timeout_seconds: int):
    config = importlib.import_module("botocore.config").Config(
        read_timeout=timeout_seconds, retries={"max_attempts": 1}
    )
    return _boto3().client("bedrock-runtime", config=config)


def _invoke_messages(
    client,
    model_id: str,
    system: str | None,
    user_text: str,
    max_tokens: int,
    temperature: float | None,
    top_p: float | None,
) -> str:
    body = {
        "anthropic_version": "bedrock-2023-05-31",
        "max_tokens": max_tokens,
        "messages": [{"role": "user", "content": [{"type": "text", "text": user_text}]}],
    }
    if system:
        body["system"] = system
    if temperature is not None:
        body["temperature"] = temperature
    if top_p is not None:
        body["top_p"] = top_p
    resp = client.invoke_model(
        modelId=model_id,
        body=json.dumps(body),
        accept="application/json",
        contentType="application/json",
    )
    data = json.loads(resp["body"].read())
    # Anthropic messages returns { content: [{text: "..."}]} on Bedrock
    return "".join(part.get("text", "") for part in data.get("content") or [])


class BedrockLLM:
    def __init__(
        self,
        fast_model: str,
        large_model: str,
        timeout_seconds: int = 30,
        max_retries: int = 2,
    ) -> None:
        self.fast_model = fast_model
        self.large_model = large_model
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self._client = None

    def _get_client(self):
        if self._client is None:
            self._client = _bedrock_client(self.timeout_seconds)
        return self._client

    def generate(
        self,
        model_id: str,
        prompt: str,
        *,
        system: str | None = None,
        temperature: float | None = None,
        top_p: float | None = None,
        max_tokens: int = 1024,
    ) -> str:
        last_err: Exception | None = None
        for attempt in range(max(1, self.max_retries)):
            try:
                t0 = time.time()
                out = _invoke_messages(
                    self._get_client(), model_id, system, prompt, max_tokens, temperature, top_p
                )
                if not out.strip():
                    raise LLMError("empty completion")
                log_event(
                    "llm_ok",
                    model=model_id,
                    ms=int((time.time() - t0) * 1000),
                    prompt_chars=len(prompt),
                    out_chars=len(out),
                )
                return out
            except Exception as e:
                last_err = e
                log_event("llm_retry", model=model_id, attempt=attempt + 1, error=str(e))
        raise LLMError(f"LLM call failed: {last_err}") from last_err
