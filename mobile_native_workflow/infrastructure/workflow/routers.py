"""Conditional edge routers.

A router reads state and returns the name of the next node. Missing or
falsy inputs always take the negative branch; routers never raise and never
mutate state.
"""

from collections.abc import Mapping
from typing import Any

from mobile_native_workflow.domain.entities.property_metadata import (
    PropertyMetadataCollection,
    is_property_fulfilled,
)

DEFAULT_MAX_BUILD_RETRIES = 3


def _no_fatal_errors(state: Mapping[str, Any]) -> bool:
    return not state.get("workflowFatalErrorMessages")


class _BinaryRouter:
    """Routes to positive_node when the predicate holds, else negative_node."""

    def __init__(self, positive_node: str, negative_node: str) -> None:
        self.positive_node = positive_node
        self.negative_node = negative_node

    def predicate(self, state: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def execute(self, state: Mapping[str, Any]) -> str:
        return self.positive_node if self.predicate(state) else self.negative_node

    @property
    def destinations(self) -> dict[str, str]:
        return {self.positive_node: self.positive_node, self.negative_node: self.negative_node}


class CheckPropertiesFulfilledRouter(_BinaryRouter):
    """Fulfilled when every required property holds a truthy value."""

    def __init__(
        self,
        fulfilled_node: str,
        unfulfilled_node: str,
        properties: PropertyMetadataCollection,
    ) -> None:
        super().__init__(fulfilled_node, unfulfilled_node)
        self.properties = properties

    def predicate(self, state: Mapping[str, Any]) -> bool:
        return all(is_property_fulfilled(state.get(name)) for name in self.properties)


class CheckEnvironmentValidatedRouter(_BinaryRouter):
    def predicate(self, state: Mapping[str, Any]) -> bool:
        return bool(state.get("validEnvironment"))


class CheckPluginValidatedRouter(_BinaryRouter):
    def predicate(self, state: Mapping[str, Any]) -> bool:
        return bool(state.get("validPluginSetup"))


class CheckFatalErrorsRouter(_BinaryRouter):
    """Continues only while no fatal error message has been recorded."""

    def predicate(self, state: Mapping[str, Any]) -> bool:
        return _no_fatal_errors(state)


class CheckTemplatePropertiesFulfilledRouter(_BinaryRouter):
    """Fulfilled once every required template property has a value.

    A template that declares no properties needs nothing further; without a
    selected template there is nothing to generate from yet.
    """

    def predicate(self, state: Mapping[str, Any]) -> bool:
        if not state.get("selectedTemplate"):
            return False
        metadata = state.get("templatePropertiesMetadata")
        if not metadata:
            return True
        values = state.get("templateProperties") or {}
        return all(
            is_property_fulfilled(values.get(name))
            for name, entry in metadata.items()
            if entry.get("required")
        )


class CheckProjectGenerationRouter(_BinaryRouter):
    def predicate(self, state: Mapping[str, Any]) -> bool:
        return bool(state.get("projectPath")) and _no_fatal_errors(state)


class CheckAndroidSetupExtractedRouter(_BinaryRouter):
    def predicate(self, state: Mapping[str, Any]) -> bool:
        return bool(state.get("androidHome")) and bool(state.get("javaHome")) and _no_fatal_errors(state)


class CheckEmulatorFoundRouter(_BinaryRouter):
    def predicate(self, state: Mapping[str, Any]) -> bool:
        return bool(state.get("androidEmulatorName"))


class CheckEmulatorCreatedRouter(_BinaryRouter):
    def predicate(self, state: Mapping[str, Any]) -> bool:
        return bool(state.get("androidEmulatorName")) and _no_fatal_errors(state)


class CheckSetupValidatedRouter:
    """Platform setup gate.

    An Android project whose SDK or JDK location is unknown is sent to collect
    them from the user instead of failing outright.
    """

    def __init__(self, valid_node: str, android_setup_node: str, failure_node: str) -> None:
        self.valid_node = valid_node
        self.android_setup_node = android_setup_node
        self.failure_node = failure_node

    def execute(self, state: Mapping[str, Any]) -> str:
        if state.get("validPlatformSetup"):
            return self.valid_node
        if (
            state.get("platform") == "Android"
            and _no_fatal_errors(state)
            and not (state.get("androidHome") and state.get("javaHome"))
        ):
            return self.android_setup_node
        return self.failure_node

    @property
    def destinations(self) -> dict[str, str]:
        return {n: n for n in (self.valid_node, self.android_setup_node, self.failure_node)}


class CheckBuildSuccessfulRouter:
    """After a build: deploy on success, recover while attempts remain, else fail.

    The cap comes from state.maxBuildRetries, falling back to the configured
    default. A recovery pass that reported it could not help ends the loop.
    """

    def __init__(
        self,
        deployment_node: str,
        recovery_node: str,
        failure_node: str,
        max_build_retries: int = DEFAULT_MAX_BUILD_RETRIES,
    ) -> None:
        self.deployment_node = deployment_node
        self.recovery_node = recovery_node
        self.failure_node = failure_node
        self.max_build_retries = max_build_retries

    def execute(self, state: Mapping[str, Any]) -> str:
        if state.get("buildSuccessful"):
            return self.deployment_node
        attempt_count = state.get("buildAttemptCount") or 0
        max_retries = state.get("maxBuildRetries") or self.max_build_retries
        if attempt_count >= max_retries:
            return self.failure_node
        if state.get("recoveryReadyForRetry") is False:
            return self.failure_node
        return self.recovery_node

    @property
    def destinations(self) -> dict[str, str]:
        return {n: n for n in (self.deployment_node, self.recovery_node, self.failure_node)}


class CheckDeploymentPlatformRouter:
    def __init__(self, ios_node: str, android_node: str, failure_node: str) -> None:
        self.ios_node = ios_node
        self.android_node = android_node
        self.failure_node = failure_node

    def execute(self, state: Mapping[str, Any]) -> str:
        platform = state.get("platform")
        if platform == "iOS":
            return self.ios_node
        if platform == "Android":
            return self.android_node
        return self.failure_node

    @property
    def destinations(self) -> dict[str, str]:
        return {n: n for n in (self.ios_node, self.android_node, self.failure_node)}
