# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Code generator for Microsoft Dataverse metadata.

Reads the EDMX document and per-table metadata of a Dataverse environment and
produces a filtered, type-annotated schema graph that is rendered into typed
client definitions.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
