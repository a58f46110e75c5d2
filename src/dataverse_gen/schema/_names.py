# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Helpers for EDMX type references such as ``Collection(mscrm.account)``."""

from __future__ import annotations

from typing import Optional

from ..common.constants import COLLECTION_PREFIX


def is_collection(type_name: Optional[str]) -> bool:
    return type_name is not None and type_name.startswith(COLLECTION_PREFIX)


def remove_collection(type_name: str) -> str:
    """Return ``type_name`` without a ``Collection(...)`` wrapper."""
    if not is_collection(type_name):
        return type_name
    inner = type_name[len(COLLECTION_PREFIX) :]
    if inner.endswith(")"):
        inner = inner[:-1]
    return inner


def last_segment(name: str) -> str:
    """Return the part after the last ``.`` (``mscrm.account`` -> ``account``)."""
    parts = [part for part in name.split(".") if part]
    return parts[-1] if parts else name


def short_type_name(type_name: str) -> str:
    """Unwrap collections and drop the namespace of a type reference."""
    return last_segment(remove_collection(type_name))
