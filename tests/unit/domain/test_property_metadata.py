"""Tests for PropertyMetadata collections and fulfillment checks."""

from typing import Literal

import pytest
from pydantic import ValidationError

from mobile_native_workflow.domain.entities.property_metadata import (
    ANDROID_SETUP_PROPERTIES,
    WORKFLOW_USER_INPUT_PROPERTIES,
    PropertyMetadata,
    create_property_collection,
    is_property_fulfilled,
    unfulfilled_properties,
)


class TestPropertyMetadata:
    """Validation through the pydantic-backed validator."""

    def test_string_validator_accepts_text(self):
        prop = PropertyMetadata("projectName", "project name", "Name of the project")
        assert prop.validate("MyApp") == "MyApp"
        assert prop.is_valid("MyApp")

    def test_literal_validator_rejects_unknown_platform(self):
        prop = PropertyMetadata("platform", "platform", "Target platform", validator=Literal["iOS", "Android"])
        assert prop.is_valid("iOS")
        assert not prop.is_valid("Windows")
        with pytest.raises(ValidationError):
            prop.validate("Windows")


class TestPropertyCollection:
    """Tests for property collection."""

    def test_preserves_insertion_order(self):
        collection = create_property_collection(
            [
                PropertyMetadata("b", "B", "second"),
                PropertyMetadata("a", "A", "first"),
            ]
        )
        assert list(collection) == ["b", "a"]

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate property name: a"):
            create_property_collection([PropertyMetadata("a", "A", "x"), PropertyMetadata("a", "A2", "y")])

    def test_workflow_properties(self):
        assert list(WORKFLOW_USER_INPUT_PROPERTIES) == [
            "platform",
            "projectName",
            "packageName",
            "organization",
            "loginHost",
        ]
        assert list(ANDROID_SETUP_PROPERTIES) == ["androidHome", "javaHome"]


class TestFulfillment:
    """Fulfillment follows truthiness of the state value."""

    @pytest.mark.parametrize("value", [None, "", 0, [], {}, False])
    def test_falsy_values_are_unfulfilled(self, value):
        assert is_property_fulfilled(value) is False

    @pytest.mark.parametrize("value", ["iOS", 1, ["x"], True])
    def test_truthy_values_are_fulfilled(self, value):
        assert is_property_fulfilled(value) is True

    def test_unfulfilled_properties_in_collection_order(self):
        state = {"platform": "iOS", "packageName": "", "organization": "Acme"}
        missing = unfulfilled_properties(state, WORKFLOW_USER_INPUT_PROPERTIES)
        assert [p.property_name for p in missing] == ["projectName", "packageName", "loginHost"]

    def test_all_fulfilled(self):
        state = {
            "platform": "Android",
            "projectName": "App",
            "packageName": "com.acme.app",
            "organization": "Acme",
            "loginHost": "login.salesforce.com",
        }
        assert unfulfilled_properties(state, WORKFLOW_USER_INPUT_PROPERTIES) == []
