from __future__ import annotations

import base64
import json
from urllib import error as urlerror
from urllib import parse, request

from lightcheck.infra.ports.llm import LLMPort

_GOOGLE_AI_BASE = "https://generativelanguage.googleapis.com/v1beta"
_TYPE_MAP = {
    "object": "OBJECT",
    "array": "ARRAY",
    "string": "STRING",
    "number": "NUMBER",
    "integer": "INTEGER",
    "boolean": "BOOLEAN",
    "null": "NULL",
}


def _normalize_schema_type(type_value: object) -> tuple[str | None, bool]:
    if isinstance(type_value, str):
        return _TYPE_MAP.get(type_value.lower()), False

    if isinstance(type_value, list):
        types = [item for item in type_value if isinstance(item, str)]
        nullable = any(item.lower() == "null" for item in types)
        non_null = [item for item in types if item.lower() != "null"]
        if not non_null:
            return None, nullable
        return _TYPE_MAP.get(non_null[0].lower()), nullable

    return None, False


def to_gemini_response_schema(node: object) -> dict:
    """Convert a JSON Schema into the responseSchema subset Gemini REST accepts.

    Keys such as ``$schema``, ``$id`` and ``additionalProperties`` are rejected
    by the API and are dropped here.
    """
    if not isinstance(node, dict):
        return {}

    out: dict[str, object] = {}
    mapped_type, nullable = _normalize_schema_type(node.get("type"))
    if mapped_type:
        out["type"] = mapped_type
    if nullable:
        out["nullable"] = True
    elif isinstance(node.get("nullable"), bool):
        out["nullable"] = node["nullable"]

    if isinstance(node.get("description"), str):
        out["description"] = node["description"]
    if isinstance(node.get("enum"), list):
        out["enum"] = node["enum"]
    if isinstance(node.get("required"), list):
        out["required"] = [item for item in node["required"] if isinstance(item, str)]

    properties = node.get("properties")
    if isinstance(properties, dict):
        out["properties"] = {
            key: to_gemini_response_schema(value)
            for key, value in properties.items()
            if isinstance(key, str) and isinstance(value, dict)
        }

    items = node.get("items")
    if isinstance(items, dict):
        out["items"] = to_gemini_response_schema(items)

    return out


class GeminiLLM(LLMPort):
    provider_name = "gemini"

    def __init__(self, *, api_key: str, model_name: str, timeout_seconds: int = 90):
        self.api_key = api_key
        self.model_name = model_name
        self.timeout_seconds = max(3, int(timeout_seconds))

    def generate_structured_from_media(
        self,
        *,
        prompt: str,
        schema: dict,
        media_bytes: bytes,
        media_mime_type: str,
        system_prompt: str | None = None,
        model: str | None = None,
    ) -> dict:
        encoded = base64.b64encode(media_bytes).decode("ascii")
        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {
                            "inlineData": {
                                "mimeType": media_mime_type,
                                "data": encoded,
                            }
                        },
                        {"text": prompt},
                    ],
                }
            ],
            "generationConfig": {
                "temperature": 0,
                "responseMimeType": "application/json",
                "responseSchema": to_gemini_response_schema(schema),
            },
        }
        return self._request_json(payload=payload, system_prompt=system_prompt, model=model)

    def _request_json(self, *, payload: dict, system_prompt: str | None, model: str | None) -> dict:
        model_name = model or self.model_name
        url = (
            f"{_GOOGLE_AI_BASE}/models/{parse.quote(model_name)}:generateContent"
            f"?key={parse.quote(self.api_key)}"
        )
        payload = dict(payload)
        payload["systemInstruction"] = {
            "parts": [{"text": system_prompt or "Return strict JSON only."}],
        }

        req = request.Request(
            url=url,
            method="POST",
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

        try:
            with request.urlopen(req, timeout=self.timeout_seconds) as resp:
                body = resp.read().decode("utf-8")
        except urlerror.HTTPError as exc:
            try:
                detail = exc.read().decode("utf-8")
            except Exception:
                detail = str(exc)
            raise RuntimeError(f"Gemini API error ({exc.code}): {detail[:400]}") from exc
        except urlerror.URLError as exc:
            raise RuntimeError(f"Gemini API connection error: {exc}") from exc
        except TimeoutError as exc:
            raise RuntimeError(f"Gemini API timeout (timeout={self.timeout_seconds}s).") from exc

        parsed = json.loads(body)
        candidates = parsed.get("candidates") or []
        if not candidates:
            raise RuntimeError("Gemini response has no candidates")

        parts = (candidates[0].get("content") or {}).get("parts") or []
        if not parts:
            raise RuntimeError("Gemini response has no content parts")

        text = parts[0].get("text")
        if not isinstance(text, str) or not text.strip():
            raise RuntimeError("Gemini response part does not contain JSON text")

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise RuntimeError("Gemini returned non-JSON text") from exc
        if not isinstance(data, dict):
            raise RuntimeError("Gemini structured output is not a JSON object")
        return data
