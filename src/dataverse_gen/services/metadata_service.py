# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Metadata collaborators.

:class:`MetadataService` is the contract the schema model depends on.
:class:`DataverseMetadataService` implements it against the Dataverse Web API
using an Azure Identity credential and the retrying HTTP client.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

import requests
from azure.core.credentials import TokenCredential

from ..common.constants import EDMX_CACHE_FILE_NAME
from ..core._auth import _AuthManager
from ..core._error_codes import METADATA_INVALID_RESPONSE, http_subcode, is_transient_status
from ..core._http import _HttpClient
from ..core.config import ServiceConfig
from ..core.errors import HttpError, MetadataError

logger = logging.getLogger(__name__)

# Attribute properties requested for every column
ATTRIBUTE_PROPERTY_NAMES = [
    "SchemaName",
    "LogicalName",
    "OptionSet",
    "RequiredLevel",
    "AttributeType",
    "AttributeTypeName",
    "SourceType",
    "IsLogical",
    "AttributeOf",
    "Targets",
    "Description",
    "DateTimeBehavior",
    "Format",
    "DisplayName",
]

ENTITY_PROPERTY_NAMES = ["Attributes", "SchemaName", "EntitySetName"]

_EDMX_API_VERSION = "9.0"
_BODY_EXCERPT_LENGTH = 200


class MetadataService(Protocol):
    """Source of the EDMX document and of per-table metadata."""

    async def get_edmx_metadata(self, use_cache: bool = False) -> str:
        """Return the full EDMX document of the environment."""
        ...

    async def get_entity_metadata(self, logical_name: str) -> Dict[str, Any]:
        """
        Return ``{"EntityMetadata": [...]}`` for one table.

        The list holds zero records when the table does not exist.
        """
        ...


def build_metadata_query(logical_name: str) -> Dict[str, Any]:
    """
    Build the ``EntityQueryExpression`` selecting one table by logical name.

    :param logical_name: Table logical name.
    :type logical_name: str
    :return: Query for the ``RetrieveMetadataChanges`` function.
    :rtype: dict[str, Any]
    """
    return {
        "Criteria": {
            "Conditions": [
                {
                    "PropertyName": "LogicalName",
                    "ConditionOperator": "Equals",
                    "Value": {"Value": logical_name, "Type": "System.String"},
                }
            ],
            "FilterOperator": "And",
        },
        "Properties": {"PropertyNames": list(ENTITY_PROPERTY_NAMES)},
        "AttributeQuery": {"Properties": {"PropertyNames": list(ATTRIBUTE_PROPERTY_NAMES)}},
    }


class DataverseMetadataService:
    """
    Metadata service backed by the Dataverse Web API.

    :param base_url: Environment URL, e.g. ``"https://org.crm.dynamics.com"``.
    :type base_url: str
    :param credential: Azure Identity credential used for every request.
    :type credential: ~azure.core.credentials.TokenCredential
    :param config: HTTP and API settings. Defaults to :class:`ServiceConfig`.
    :type config: ~dataverse_gen.core.config.ServiceConfig or None
    :param cache_dir: Directory of the ``cds-edmx.xml`` cache file. Defaults to the working directory.
    :type cache_dir: str or ~pathlib.Path or None

    :raises ValueError: If ``base_url`` is missing or empty.

    The EDMX document and each table's metadata are fetched at most once per
    instance. Blocking requests run in a worker thread.
    """

    def __init__(
        self,
        base_url: str,
        credential: TokenCredential,
        config: Optional[ServiceConfig] = None,
        cache_dir: Union[str, Path, None] = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("base_url is required.")
        self.config = config or ServiceConfig()
        self.cache_dir = Path(cache_dir) if cache_dir is not None else Path.cwd()
        self.auth = _AuthManager(credential)
        self._http = _HttpClient(
            retries=self.config.http_retries,
            backoff=self.config.http_backoff,
            timeout=self.config.http_timeout,
            session=requests.Session(),
        )
        self._edmx: Optional[str] = None
        self._entity_metadata_cache: Dict[str, Dict[str, Any]] = {}

    @property
    def api(self) -> str:
        return f"{self.base_url}/api/data/v{self.config.api_version}"

    @property
    def edmx_cache_path(self) -> Path:
        return self.cache_dir / EDMX_CACHE_FILE_NAME

    def _headers(self, accept: str = "application/json") -> Dict[str, str]:
        scope = f"{self.base_url}/.default"
        token = self.auth._acquire_token(scope).access_token
        return {
            "Authorization": f"Bearer {token}",
            "Accept": accept,
            "OData-MaxVersion": "4.0",
            "OData-Version": "4.0",
            "Prefer": f'odata.include-annotations="*",odata.language={self.config.language_code}',
        }

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Send a request and raise :class:`HttpError` on a non-success status."""
        response = self._http._request(method, url, **kwargs)
        if 200 <= response.status_code < 300:
            return response
        raise self._to_http_error(response)

    @staticmethod
    def _to_http_error(response: requests.Response) -> HttpError:
        status = response.status_code
        headers = response.headers or {}
        body_text = response.text or ""
        service_code = None
        message = body_text[:_BODY_EXCERPT_LENGTH] or f"HTTP {status}"
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            service_code = payload["error"].get("code")
            message = payload["error"].get("message") or message

        details: Dict[str, Any] = {}
        retry_after = headers.get("Retry-After")
        if retry_after is not None:
            try:
                details["retry_after"] = int(retry_after)
            except (TypeError, ValueError):
                pass
        return HttpError(
            f"Dataverse request failed ({status}): {message}",
            status_code=status,
            is_transient=is_transient_status(status),
            subcode=http_subcode(status),
            service_error_code=service_code,
            correlation_id=headers.get("x-ms-correlation-request-id"),
            request_id=headers.get("x-ms-service-request-id") or headers.get("REQ_ID"),
            body_excerpt=body_text[:_BODY_EXCERPT_LENGTH] if body_text else None,
            details=details,
        )

    # ------------------------------------------------------------------ EDMX

    async def get_edmx_metadata(self, use_cache: bool = False) -> str:
        """
        Return the ``$metadata`` document.

        :param use_cache: Read the document from ``cds-edmx.xml`` when the file
            exists; otherwise fetch it and write the file.
        :type use_cache: bool
        :return: The EDMX document.
        :rtype: str
        :raises HttpError: If the request fails.
        """
        if self._edmx is not None:
            return self._edmx
        cache_path = self.edmx_cache_path
        if use_cache and cache_path.exists():
            logger.info("Reading EDMX metadata from %s", cache_path)
            edmx = cache_path.read_text(encoding="utf-8")
        else:
            edmx = await asyncio.to_thread(self._fetch_edmx)
            if use_cache:
                cache_path.write_text(edmx, encoding="utf-8")
                logger.debug("Cached EDMX metadata in %s", cache_path)
        self._edmx = edmx
        return edmx

    def _fetch_edmx(self) -> str:
        url = f"{self.base_url}/api/data/v{_EDMX_API_VERSION}/$metadata"
        logger.debug("GET %s", url)
        response = self._request("get", url, headers=self._headers(accept="application/xml"))
        response.encoding = response.encoding or "utf-8"
        return response.text

    # ------------------------------------------------------- entity metadata

    async def get_entity_metadata(self, logical_name: str) -> Dict[str, Any]:
        """
        Return the ``RetrieveMetadataChanges`` response for one table.

        Attributes of every returned record are sorted by ``LogicalName``.

        :param logical_name: Table logical name.
        :type logical_name: str
        :return: ``{"EntityMetadata": [...]}`` with zero or one record.
        :rtype: dict[str, Any]
        :raises HttpError: If the request fails.
        :raises MetadataError: If the response is not a JSON object.
        """
        cached = self._entity_metadata_cache.get(logical_name)
        if cached is not None:
            return cached
        response = await asyncio.to_thread(self._fetch_entity_metadata, logical_name)
        self._entity_metadata_cache[logical_name] = response
        return response

    def _fetch_entity_metadata(self, logical_name: str) -> Dict[str, Any]:
        url = f"{self.api}/RetrieveMetadataChanges(Query=@q)"
        params = {"@q": json.dumps(build_metadata_query(logical_name))}
        response = self._request("get", url, headers=self._headers(), params=params)
        try:
            body = response.json()
        except ValueError as ex:
            raise MetadataError(
                f"RetrieveMetadataChanges returned a non-JSON response for {logical_name}",
                subcode=METADATA_INVALID_RESPONSE,
                details={"entity": logical_name},
            ) from ex
        if not isinstance(body, dict):
            raise MetadataError(
                f"RetrieveMetadataChanges returned an unexpected response for {logical_name}",
                subcode=METADATA_INVALID_RESPONSE,
                details={"entity": logical_name},
            )
        records = body.get("EntityMetadata") or []
        for record in records:
            attributes = record.get("Attributes")
            if isinstance(attributes, list):
                attributes.sort(key=lambda a: a.get("LogicalName") or "")
        body["EntityMetadata"] = records
        return body

    def close(self) -> None:
        self._http.close()


__all__ = ["DataverseMetadataService", "MetadataService", "build_metadata_query"]
