"""Error taxonomy shared by the store, services and routers."""

from __future__ import annotations

from typing import Any, Dict, Optional


class GhostboardError(Exception):
    """Base class for failures reported back to API callers."""

    status_code = 500
    kind = "error"

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def payload(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"ok": False, "error": self.message, "kind": self.kind}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class ValidationError(GhostboardError):
    """Missing or malformed input field."""

    status_code = 400
    kind = "validation"


class IntegrityError(GhostboardError):
    """Declared digest does not match the digest of the received bytes."""

    status_code = 400
    kind = "integrity"

    def __init__(self, computed: str, provided: str):
        super().__init__("sha256 mismatch")
        self.computed = computed
        self.provided = provided

    def payload(self) -> Dict[str, Any]:
        body = super().payload()
        body["computed"] = self.computed
        body["provided"] = self.provided
        return body


class NotFoundError(GhostboardError):
    """No record or blob satisfies the query."""

    status_code = 404
    kind = "not_found"


class StorageError(GhostboardError):
    """I/O failure reading or writing persisted state or a blob."""

    status_code = 500
    kind = "storage"


__all__ = [
    "GhostboardError",
    "IntegrityError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
]
