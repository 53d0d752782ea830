"""Deployment nodes - iOS simulators and Android emulators."""

from mobile_native_workflow.infrastructure.workflow.nodes.deployment.android import (
    AndroidCreateEmulatorNode,
    AndroidInstallAppNode,
    AndroidLaunchAppNode,
    AndroidSelectEmulatorNode,
    AndroidStartEmulatorNode,
)
from mobile_native_workflow.infrastructure.workflow.nodes.deployment.ios import (
    IOSBootSimulatorNode,
    IOSInstallAppNode,
    IOSLaunchAppNode,
    IOSSelectSimulatorNode,
)

__all__ = [
    "AndroidCreateEmulatorNode",
    "AndroidInstallAppNode",
    "AndroidLaunchAppNode",
    "AndroidSelectEmulatorNode",
    "AndroidStartEmulatorNode",
    "IOSBootSimulatorNode",
    "IOSInstallAppNode",
    "IOSLaunchAppNode",
    "IOSSelectSimulatorNode",
]
