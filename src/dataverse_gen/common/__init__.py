# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Common constants for the generator.

This module contains shared platform identifiers used across the package.
"""

__all__ = []
