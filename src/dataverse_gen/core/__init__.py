# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the generator.

This module contains the foundational components including authentication,
configuration, HTTP client, and error handling.
"""

from .errors import (
    DataverseGenError,
    ConfigurationError,
    EdmxStructureError,
    MetadataError,
    HttpError,
)

__all__ = [
    "DataverseGenError",
    "ConfigurationError",
    "EdmxStructureError",
    "MetadataError",
    "HttpError",
]
