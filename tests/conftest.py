# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures for dataverse-gen tests.

This module provides the sample EDMX document, sample ``RetrieveMetadataChanges``
records and an in-memory metadata service that can be used across all test
modules.
"""

import copy
from pathlib import Path

import pytest

from dataverse_gen.core.config import GeneratorConfig

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _label(text):
    return {"LocalizedLabels": [{"Label": text, "LanguageCode": 1033}], "UserLocalizedLabel": {"Label": text}}


def _option(value, text):
    return {"Value": value, "Label": _label(text) if text is not None else {"UserLocalizedLabel": None}}


def _attribute(logical_name, schema_name, type_name, required="None", **extra):
    attribute = {
        "LogicalName": logical_name,
        "SchemaName": schema_name,
        "AttributeTypeName": {"Value": type_name},
        "RequiredLevel": {"Value": required},
        "DisplayName": _label(schema_name),
        "Description": {"UserLocalizedLabel": None},
    }
    attribute.update(extra)
    return attribute


def account_record():
    return {
        "LogicalName": "account",
        "SchemaName": "Account",
        "EntitySetName": "accounts",
        "Attributes": [
            _attribute(
                "accountcategorycode",
                "AccountCategoryCode",
                "PicklistType",
                DisplayName=_label("Category"),
                Description=_label("Drop-down list for selecting the category of the account."),
                OptionSet={
                    "Name": "accountcategorycode",
                    "IsGlobal": False,
                    "Options": [_option(2, "Standard"), _option(1, "Preferred Customer")],
                },
            ),
            _attribute("accountid", "AccountId", "UniqueidentifierType", "SystemRequired"),
            _attribute(
                "createdon",
                "CreatedOn",
                "DateTimeType",
                Format="DateAndTime",
                DateTimeBehavior={"Value": "UserLocal"},
            ),
            _attribute(
                "industrycode",
                "IndustryCode",
                "PicklistType",
                OptionSet={
                    "Name": "industry",
                    "IsGlobal": True,
                    "Options": [_option(3, "50% Complete"), _option(1, None)],
                },
            ),
            _attribute(
                "name",
                "Name",
                "StringType",
                "ApplicationRequired",
                DisplayName=_label("Account Name"),
                Description=_label("Type the company or business name.\nShown in lists."),
            ),
            _attribute(
                "new_regions",
                "new_Regions",
                "MultiSelectPicklistType",
                OptionSet={
                    "Name": "new_region",
                    "IsGlobal": True,
                    "Options": [_option(100000001, "East"), _option(100000000, "West")],
                },
            ),
            _attribute("new_virtualcolumn", "new_VirtualColumn", "VirtualType"),
            _attribute("primarycontactid", "PrimaryContactId", "LookupType", Targets=["contact"]),
            _attribute("statecode", "StateCode", "StateType", OptionSet=None),
        ],
    }


def contact_record():
    return {
        "LogicalName": "contact",
        "SchemaName": "Contact",
        "EntitySetName": "contacts",
        "Attributes": [
            _attribute("contactid", "ContactId", "UniqueidentifierType", "SystemRequired"),
            _attribute("fullname", "FullName", "StringType"),
            _attribute(
                "gendercode",
                "GenderCode",
                "PicklistType",
                OptionSet={
                    "Name": "gendercode",
                    "IsGlobal": False,
                    "Options": [_option(1, "Male"), _option(2, "Female")],
                },
            ),
            _attribute(
                "industrycode",
                "IndustryCode",
                "PicklistType",
                OptionSet={"Name": "industry", "IsGlobal": True, "Options": [_option(9, "Other")]},
            ),
            _attribute("parentcustomerid", "ParentCustomerId", "CustomerType", Targets=["account", "contact"]),
        ],
    }


def opportunity_record():
    return {
        "LogicalName": "opportunity",
        "SchemaName": "Opportunity",
        "EntitySetName": "opportunities",
        "Attributes": [
            _attribute("estimatedvalue", "EstimatedValue", "MoneyType"),
            _attribute("opportunityid", "OpportunityId", "UniqueidentifierType", "SystemRequired"),
        ],
    }


class FakeMetadataService:
    """In-memory metadata service recording every call."""

    def __init__(self, edmx, records=None):
        self.edmx = edmx
        self.records = records or {}
        self.edmx_calls = []
        self.entity_calls = []

    async def get_edmx_metadata(self, use_cache=False):
        self.edmx_calls.append(use_cache)
        return self.edmx

    async def get_entity_metadata(self, logical_name):
        self.entity_calls.append(logical_name)
        record = self.records.get(logical_name)
        return {"EntityMetadata": [record] if record is not None else []}


@pytest.fixture
def edmx_text():
    """The sample EDMX document."""
    return (FIXTURES_DIR / "sample_edmx.xml").read_text(encoding="utf-8")


@pytest.fixture
def entity_records():
    """Sample metadata records keyed by logical name."""
    return {
        "account": account_record(),
        "contact": contact_record(),
        "opportunity": opportunity_record(),
    }


@pytest.fixture
def metadata_service(edmx_text, entity_records):
    return FakeMetadataService(edmx_text, entity_records)


@pytest.fixture
def make_metadata_service(edmx_text, entity_records):
    """Factory for independent in-memory metadata services."""

    def _make():
        return FakeMetadataService(edmx_text, copy.deepcopy(entity_records))

    return _make


@pytest.fixture
def generator_config():
    """Configuration selecting part of the sample document."""
    return GeneratorConfig.from_dict(
        {
            "entities": ["account", "contact"],
            "actions": ["new_BulkUpdate"],
            "functions": ["WhoAmI"],
        }
    )


@pytest.fixture
def sample_base_url():
    """Standard test base URL."""
    return "https://org.example.com"
