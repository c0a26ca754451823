from __future__ import annotations
from dataclasses import dataclass
from typing import Any


class BrainError(RuntimeError):
    """Error base de la librería."""


class BrainStreamError(BrainError):
    """
    Fallo fatal del stream: respuesta sin body, buffer por encima del límite
    configurado o uso del reassembler después de finish().
    """


@dataclass(slots=True)
class BrainAPIError(BrainError):
    """
    Error HTTP del endpoint del asistente (cualquier status fuera de 2xx).

    El route de /api/assistant/run responde errores como:
        {"error": "Invalid JSON body"}

    Otros despliegues pueden usar un envelope estructurado:
    {
        "error": {
            "code": "BAD_REQUEST" | "UNAUTHORIZED" | ...,
            "message": "...",
            "details": {...},
            "requestId": "req_..."
        }
    }

    Ambos formatos se parsean automáticamente.
    """
    status_code: int
    message: str
    body: str | None = None

    error_code: str | None = None
    request_id: str | None = None
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        parts = [f"BrainAPIError(status_code={self.status_code}"]
        if self.error_code:
            parts.append(f", code={self.error_code!r}")
        parts.append(f", message={self.message!r}")
        if self.request_id:
            parts.append(f", request_id={self.request_id!r}")
        if self.body:
            parts.append(f", body={len(self.body)} chars")
        parts.append(")")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convierte el error a dict para logging estructurado."""
        return {
            "status_code": self.status_code,
            "message": self.message,
            "error_code": self.error_code,
            "request_id": self.request_id,
            "details": self.details,
            "body": self.body,
        }

    @property
    def is_client_error(self) -> bool:
        """True si es un error 4xx."""
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        """True si es un error 5xx."""
        return 500 <= self.status_code < 600

    @property
    def is_auth_error(self) -> bool:
        """True si es 401 o 403."""
        return self.status_code in (401, 403)

    @property
    def is_validation_error(self) -> bool:
        """True si es un 400 (body inválido o sin mensajes)."""
        return self.status_code == 400
