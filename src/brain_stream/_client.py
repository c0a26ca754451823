from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Iterator

import httpx

from brain_stream._config import http_debug_enabled
from brain_stream._errors import BrainAPIError, BrainStreamError


@dataclass(frozen=True, slots=True)
class HttpConfig:
    base_url: str
    timeout_s: float = 120.0


def _extract_error_message(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _parse_error_response(
    status_code: int,
    body_text: str,
    content_type: str,
) -> BrainAPIError:
    """
    Parsea una respuesta de error del endpoint.

    Si el body no es JSON o no matchea ninguno de los formatos conocidos,
    retorna BrainAPIError con los campos estructurados en None.
    """
    message = "HTTP error"
    error_code: str | None = None
    request_id: str | None = None
    details: dict[str, Any] | None = None

    if body_text and body_text.strip():
        message = body_text.strip()

    # Solo parsear JSON si Content-Type lo indica
    if "application/json" not in content_type.lower():
        return BrainAPIError(status_code=status_code, message=message, body=body_text or None)

    try:
        data = json.loads(body_text) if body_text else {}
    except (json.JSONDecodeError, ValueError):
        return BrainAPIError(status_code=status_code, message=message, body=body_text or None)

    if not isinstance(data, dict):
        return BrainAPIError(status_code=status_code, message=message, body=body_text or None)

    error_obj = data.get("error")

    if isinstance(error_obj, dict):
        code = error_obj.get("code")
        error_code = code.strip() if isinstance(code, str) and code.strip() else None

        message = _extract_error_message(error_obj.get("message")) or message
        request_id = _extract_error_message(error_obj.get("requestId"))

        det = error_obj.get("details")
        if isinstance(det, dict):
            details = det
    else:
        # Formato del route: {"error": "..."} o {"message": "..."}
        message = (
            _extract_error_message(error_obj)
            or _extract_error_message(data.get("message"))
            or message
        )

    return BrainAPIError(
        status_code=status_code,
        message=message,
        body=body_text or None,
        error_code=error_code,
        request_id=request_id,
        details=details,
    )


def _has_no_body(resp: httpx.Response) -> bool:
    return resp.status_code == 204 or resp.headers.get("content-length") == "0"


class BrainHttpClient:
    """
    Wrapper HTTPX ligero con:
    - JSON requests
    - Streaming SSE via httpx.Client.stream / AsyncClient.stream
    - Debug logging opcional (BRAIN_HTTP_DEBUG)
    """

    def __init__(self, *, config: HttpConfig, api_key: str | None = None) -> None:
        self._config = config
        self._api_key = api_key
        self._debug_http = http_debug_enabled()

        def _redact_headers(headers: dict[str, Any]) -> dict[str, Any]:
            out = dict(headers)
            for k in ("authorization", "Authorization"):
                if k in out:
                    out[k] = "Bearer ***REDACTED***"
            return out

        def _log_request(request: httpx.Request) -> None:
            if not self._debug_http:
                return
            logging.warning("HTTPX REQUEST %s %s", request.method, request.url)
            logging.warning("HTTPX REQUEST headers=%s", _redact_headers(dict(request.headers)))
            if request.content:
                try:
                    logging.warning("HTTPX REQUEST body=%s", request.content.decode("utf-8", "ignore"))
                except Exception:
                    logging.warning("HTTPX REQUEST body=(binary) len=%s", len(request.content))

        def _log_response_line(response: httpx.Response) -> bool:
            req = response.request
            logging.warning("HTTPX RESPONSE %s %s -> %s", req.method, req.url, response.status_code)
            logging.warning("HTTPX RESPONSE headers=%s", dict(response.headers))
            if "text/event-stream" in response.headers.get("content-type", ""):
                logging.warning("HTTPX RESPONSE body=(event-stream; not auto-logged)")
                return False
            return True

        def _log_response_sync(response: httpx.Response) -> None:
            if not self._debug_http or not _log_response_line(response):
                return
            try:
                response.read()
                logging.warning("HTTPX RESPONSE body=%s", response.text)
            except Exception as e:
                logging.warning("HTTPX RESPONSE body=(unreadable) err=%r", e)

        async def _log_request_async(request: httpx.Request) -> None:
            _log_request(request)

        async def _log_response_async(response: httpx.Response) -> None:
            if not self._debug_http or not _log_response_line(response):
                return
            try:
                await response.aread()
                logging.warning("HTTPX RESPONSE body=%s", response.text)
            except Exception as e:
                logging.warning("HTTPX RESPONSE body=(unreadable) err=%r", e)

        EventHooksDict = dict[str, list[Callable[..., Any]]]

        hooks_sync: EventHooksDict = {"request": [_log_request], "response": [_log_response_sync]}
        hooks_async: EventHooksDict = {"request": [_log_request_async], "response": [_log_response_async]}

        self._client = httpx.Client(timeout=httpx.Timeout(config.timeout_s), event_hooks=hooks_sync)
        self._aclient = httpx.AsyncClient(timeout=httpx.Timeout(config.timeout_s), event_hooks=hooks_async)

    def close(self) -> None:
        self._client.close()

    async def aclose(self) -> None:
        await self._aclient.aclose()

    def _headers(self, *, accept: str | None = None) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        if accept:
            headers["Accept"] = accept
        return headers

    def _url(self, path: str) -> str:
        return f"{self._config.base_url}{path}"

    @staticmethod
    def raise_for_status(resp: httpx.Response) -> None:
        """Verifica status y levanta BrainAPIError estructurado."""
        if 200 <= resp.status_code < 300:
            return

        body_text: str | None = None
        try:
            body_text = resp.text
        except Exception:
            body_text = None

        content_type = resp.headers.get("content-type", "")

        raise _parse_error_response(
            status_code=resp.status_code,
            body_text=body_text or "",
            content_type=content_type,
        )

    def read_error_and_raise(self, resp: httpx.Response) -> None:
        """
        Variante para respuestas en streaming: el body de error aún no fue leído,
        así que se lee antes de construir el BrainAPIError.
        """
        if 200 <= resp.status_code < 300:
            return
        resp.read()
        self.raise_for_status(resp)

    async def aread_error_and_raise(self, resp: httpx.Response) -> None:
        if 200 <= resp.status_code < 300:
            return
        await resp.aread()
        self.raise_for_status(resp)

    @staticmethod
    def iter_body(resp: httpx.Response) -> Iterator[bytes]:
        """Bytes crudos del body; sin body legible es un error fatal."""
        if _has_no_body(resp):
            raise BrainStreamError("No response body")
        return resp.iter_bytes()

    @staticmethod
    def aiter_body(resp: httpx.Response) -> AsyncIterator[bytes]:
        if _has_no_body(resp):
            raise BrainStreamError("No response body")
        return resp.aiter_bytes()

    def stream_post_json(self, path: str, payload: dict[str, Any]) -> Any:
        """
        Retorna un httpx stream context manager.

        Uso:
            with client.stream_post_json(...) as r:
                client.read_error_and_raise(r)
                for chunk in client.iter_body(r):
                    ...
        """
        headers = self._headers(accept="text/event-stream")
        return self._client.stream("POST", self._url(path), headers=headers, json=payload)

    def astream_post_json(self, path: str, payload: dict[str, Any]) -> Any:
        """
        Retorna un httpx stream context manager asíncrono.

        Usage:
            async with client.astream_post_json(...) as r:
                await client.aread_error_and_raise(r)
                async for chunk in client.aiter_body(r):
                    ...
        """
        headers = self._headers(accept="text/event-stream")
        return self._aclient.stream("POST", self._url(path), headers=headers, json=payload)
