"""Declarative metadata for the properties a workflow must collect from the user."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import TypeAdapter, ValidationError


@dataclass(frozen=True)
class PropertyMetadata:
    """A named input property the workflow needs in its state.

    property_name is the state key. validator is any type pydantic can build a
    TypeAdapter for; it is used to check values extracted from user input.
    """

    property_name: str
    friendly_name: str
    description: str
    validator: Any = str

    def validate(self, value: Any) -> Any:
        """Return the validated value, raising pydantic.ValidationError if it does not conform."""
        return TypeAdapter(self.validator).validate_python(value)

    def is_valid(self, value: Any) -> bool:
        try:
            self.validate(value)
        except ValidationError:
            return False
        return True


# propertyName -> metadata, in insertion order
PropertyMetadataCollection = Mapping[str, PropertyMetadata]


def create_property_collection(properties: Iterable[PropertyMetadata]) -> dict[str, PropertyMetadata]:
    """Build an ordered collection, rejecting duplicate property names."""
    collection: dict[str, PropertyMetadata] = {}
    for prop in properties:
        if prop.property_name in collection:
            raise ValueError(f"Duplicate property name: {prop.property_name}")
        collection[prop.property_name] = prop
    return collection


def is_property_fulfilled(value: Any) -> bool:
    """A property is fulfilled when its state value is truthy.

    None, empty strings, 0 and empty containers count as missing.
    """
    return bool(value)


def unfulfilled_properties(
    state: Mapping[str, Any],
    properties: PropertyMetadataCollection,
) -> list[PropertyMetadata]:
    """Return the properties whose state value is not fulfilled, in collection order."""
    return [prop for name, prop in properties.items() if not is_property_fulfilled(state.get(name))]


WORKFLOW_USER_INPUT_PROPERTIES = create_property_collection(
    [
        PropertyMetadata(
            property_name="platform",
            friendly_name="mobile platform",
            description="Target mobile platform for the mobile app (iOS or Android)",
            validator=Literal["iOS", "Android"],
        ),
        PropertyMetadata(
            property_name="projectName",
            friendly_name="project name",
            description="Name for the mobile app project",
        ),
        PropertyMetadata(
            property_name="packageName",
            friendly_name="package identifier",
            description=(
                "The package identifier of the mobile app, for example com.company.appname. "
                "Used as the iOS bundle id prefix and the Android application id."
            ),
        ),
        PropertyMetadata(
            property_name="organization",
            friendly_name="organization or company name",
            description="The organization or company name of the mobile app",
        ),
        PropertyMetadata(
            property_name="loginHost",
            friendly_name="Salesforce login host",
            description=(
                "The Salesforce login host for the mobile app, for example "
                "login.salesforce.com or test.salesforce.com"
            ),
        ),
    ]
)

ANDROID_SETUP_PROPERTIES = create_property_collection(
    [
        PropertyMetadata(
            property_name="androidHome",
            friendly_name="Android SDK root (ANDROID_HOME)",
            description="Absolute path to the Android SDK installation, used as ANDROID_HOME",
        ),
        PropertyMetadata(
            property_name="javaHome",
            friendly_name="Java home (JAVA_HOME)",
            description="Absolute path to the JDK installation used for Android builds, used as JAVA_HOME",
        ),
    ]
)


def template_property_collection(metadata: Mapping[str, Mapping[str, Any]] | None) -> dict[str, PropertyMetadata]:
    """Build a string-valued collection from the selected template's declared properties."""
    return create_property_collection(
        PropertyMetadata(
            property_name=name,
            friendly_name=name,
            description=entry.get("description") or f"Value for the template property {name}",
        )
        for name, entry in (metadata or {}).items()
    )
