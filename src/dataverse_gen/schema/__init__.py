# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Schema model construction for the generator.

This module contains the passes that build the schema graph:
- EdmxParser: EDMX document to schema graph
- ReferenceFilter: pruning to the requested entities, actions and functions
- MetadataEnricher: attribute metadata from the metadata API
- TypeMapper: platform types to type descriptors
- SchemaModel: orchestration of the passes
"""

__all__ = []
