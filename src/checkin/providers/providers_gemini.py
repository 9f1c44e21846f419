"""Gemini provider implementation (Files API + generateContent over REST)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from .providers_base import AssetState, ProviderError, RemoteAsset, RemoteProvider

logger = structlog.get_logger(__name__)

_STATE_MAP = {
    "STATE_UNSPECIFIED": AssetState.PROCESSING,
    "PROCESSING": AssetState.PROCESSING,
    "ACTIVE": AssetState.ACTIVE,
    "FAILED": AssetState.FAILED,
}


@dataclass(slots=True)
class GeminiFilesProvider(RemoteProvider):
    """Talk to Gemini via raw REST calls."""

    api_key: str
    model: str = "gemini-2.0-flash"
    api_url_base: str = "https://generativelanguage.googleapis.com"
    timeout_seconds: float = 60.0
    response_mime_type: str | None = "application/json"
    log: Any = field(default_factory=lambda: logger)

    async def upload(self, data: bytes, mime_type: str, display_name: str) -> RemoteAsset:
        start_headers = {
            **self._auth_headers(),
            "X-Goog-Upload-Protocol": "resumable",
            "X-Goog-Upload-Command": "start",
            "X-Goog-Upload-Header-Content-Length": str(len(data)),
            "X-Goog-Upload-Header-Content-Type": mime_type,
            "Content-Type": "application/json",
        }
        start = await self._request(
            "POST",
            f"{self.api_url_base}/upload/v1beta/files",
            headers=start_headers,
            json={"file": {"display_name": display_name}},
        )
        self._ensure_ok(start, "upload start")
        upload_url = start.headers.get("x-goog-upload-url")
        if not upload_url:
            raise ProviderError("Gemini did not return an upload URL")

        finalize = await self._request(
            "POST",
            upload_url,
            headers={
                "Content-Length": str(len(data)),
                "X-Goog-Upload-Offset": "0",
                "X-Goog-Upload-Command": "upload, finalize",
            },
            content=data,
        )
        self._ensure_ok(finalize, "upload finalize")
        body = _json_body(finalize)
        file_info = body.get("file") or {}
        name = file_info.get("name")
        uri = file_info.get("uri")
        if not name or not uri:
            raise ProviderError("Gemini upload response is missing file name or uri")

        asset = RemoteAsset(
            uri=uri,
            name=name,
            mime_type=file_info.get("mimeType") or mime_type,
            state=_parse_state(file_info.get("state") or "PROCESSING"),
        )
        self.log.info(
            "gemini.file.uploaded",
            asset_name=asset.name,
            size_bytes=len(data),
            mime_type=asset.mime_type,
        )
        return asset

    async def get_status(self, name: str) -> AssetState:
        response = await self._request(
            "GET",
            f"{self.api_url_base}/v1beta/{_resource_name(name)}",
            headers=self._auth_headers(),
        )
        self._ensure_ok(response, "file status")
        return _parse_state(_json_body(response).get("state") or "STATE_UNSPECIFIED")

    async def generate_text(self, uri: str, mime_type: str, prompt: str) -> str:
        body: dict[str, Any] = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"file_data": {"mime_type": mime_type, "file_uri": uri}},
                        {"text": prompt},
                    ],
                }
            ],
        }
        if self.response_mime_type:
            body["generationConfig"] = {"responseMimeType": self.response_mime_type}

        response = await self._request(
            "POST",
            f"{self.api_url_base}/v1beta/models/{self.model}:generateContent",
            headers={**self._auth_headers(), "Content-Type": "application/json"},
            json=body,
        )
        self._ensure_ok(response, "generateContent")
        data = _json_body(response)
        text = _extract_text(data)
        self.log.info("gemini.response.received", **_response_summary(data, text))
        # clinical text is only ever logged at DEBUG
        self.log.debug("gemini.response.preview", text_preview=text[:160])
        return text

    async def delete_asset(self, name: str) -> None:
        response = await self._request(
            "DELETE",
            f"{self.api_url_base}/v1beta/{_resource_name(name)}",
            headers=self._auth_headers(),
        )
        self._ensure_ok(response, "file delete")

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise ProviderError(f"Gemini HTTP error: {exc}") from exc

    def _auth_headers(self) -> dict[str, str]:
        if not self.api_key:
            raise ProviderError("Gemini API key is not configured")
        return {"x-goog-api-key": self.api_key}

    def _ensure_ok(self, response: httpx.Response, action: str) -> None:
        if 200 <= response.status_code < 300:
            return
        error_detail = _extract_error(response)
        self.log.error(
            "gemini.response.error",
            action=action,
            status=response.status_code,
            detail=error_detail,
        )
        raise ProviderError(
            f"Gemini {action} failed (status={response.status_code}): {error_detail}"
        )


def _resource_name(name: str) -> str:
    return name if name.startswith("files/") else f"files/{name}"


def _parse_state(raw: str) -> AssetState:
    try:
        return _STATE_MAP[raw.upper()]
    except KeyError:
        raise ProviderError(f"Unknown Gemini file state '{raw}'") from None


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError as exc:
        raise ProviderError("Gemini returned a non-JSON body") from exc
    if not isinstance(data, dict):
        raise ProviderError("Gemini returned an unexpected JSON body")
    return data


def _extract_text(data: dict[str, Any]) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def _extract_error(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        message = (error.get("message") or "").strip()
        status = (error.get("status") or "").strip()
        return " ".join(part for part in (status, message) if part)
    return str(data)


def _response_summary(data: dict[str, Any], text: str) -> dict[str, Any]:
    candidates = data.get("candidates") or []
    first = candidates[0] if candidates else {}
    return {
        "candidates": len(candidates),
        "finish_reason": first.get("finishReason") or first.get("finish_reason"),
        "block_reason": (data.get("promptFeedback") or {}).get("blockReason"),
        "text_len": len(text),
    }
