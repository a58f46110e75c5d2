# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured errors raised by the generator.

All errors derive from :class:`DataverseGenError` and carry a stable ``code``
plus an optional ``subcode`` from :mod:`~dataverse_gen.core._error_codes`.
Errors raised for problems on the caller's side (configuration, EDMX
content, metadata payloads) have ``source="client"``; :class:`HttpError`
reports a failed service call and has ``source="server"``.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, ClassVar, Dict, Optional


class DataverseGenError(Exception):
    """
    Base structured error for the generator.

    :param message: Human readable description.
    :type message: str
    :param code: Error category, e.g. ``"configuration_error"``.
    :type code: str
    :param subcode: Finer grained reason from :mod:`~dataverse_gen.core._error_codes`.
    :type subcode: str or None
    :param details: Extra context such as the offending entity or field.
    :type details: dict or None
    """

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
        is_transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = details or {}
        self.source = source or "client"
        self.is_transient = is_transient
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        keys = ("message", "code", "subcode", "status_code", "details", "source", "is_transient", "timestamp")
        return {key: getattr(self, key) for key in keys}

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class _ClientError(DataverseGenError):
    error_code: ClassVar[str] = "client_error"

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=self.error_code, subcode=subcode, details=details, source="client")


class ConfigurationError(_ClientError):
    """Raised for a missing configuration field or an entity that does not exist on the server."""

    error_code = "configuration_error"


class EdmxStructureError(_ClientError):
    """Raised when the EDMX document cannot be parsed or lacks a required element."""

    error_code = "edmx_structure_error"


class MetadataError(_ClientError):
    """Raised for a metadata payload that does not have the expected shape."""

    error_code = "metadata_error"


class HttpError(DataverseGenError):
    """
    A metadata request returned a non-success status.

    Service diagnostics (error code, correlation and request ids, body
    excerpt) are stored in :attr:`details` next to any ``details`` passed in.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        is_transient: bool = False,
        subcode: Optional[str] = None,
        service_error_code: Optional[str] = None,
        correlation_id: Optional[str] = None,
        request_id: Optional[str] = None,
        body_excerpt: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        merged = dict(details or {})
        diagnostics = {
            "service_error_code": service_error_code,
            "correlation_id": correlation_id,
            "request_id": request_id,
            "body_excerpt": body_excerpt,
        }
        merged.update((k, v) for k, v in diagnostics.items() if v is not None)
        super().__init__(
            message,
            code="http_error",
            subcode=subcode,
            status_code=status_code,
            details=merged,
            source="server",
            is_transient=is_transient,
        )


__all__ = [
    "DataverseGenError",
    "ConfigurationError",
    "EdmxStructureError",
    "MetadataError",
    "HttpError",
]
