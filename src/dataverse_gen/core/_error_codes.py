# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

# HTTP subcodes; http_subcode() builds the others
HTTP_404 = "http_404"
HTTP_429 = "http_429"

TRANSIENT_STATUS = {429, 502, 503, 504}

# Configuration subcodes
CONFIG_ENTITY_NOT_FOUND = "config_entity_not_found"
CONFIG_FIELD_MISSING = "config_field_missing"
CONFIG_INVALID_JSON = "config_invalid_json"

# EDMX subcodes
EDMX_SYNTAX_ERROR = "edmx_syntax_error"
EDMX_MISSING_ELEMENT = "edmx_missing_element"
EDMX_UNSUPPORTED_NAMESPACE = "edmx_unsupported_namespace"

# Metadata subcodes
METADATA_INVALID_RESPONSE = "metadata_invalid_response"


def http_subcode(status: int) -> str:
    """Return the ``http_<status>`` subcode for a status code."""
    return f"http_{status}"


def is_transient_status(status: int) -> bool:
    return status in TRANSIENT_STATUS
