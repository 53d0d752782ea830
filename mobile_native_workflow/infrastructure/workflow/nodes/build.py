"""Build validation and build recovery nodes."""

import logging

from mobile_native_workflow.domain.entities.workflow_state import MobileNativeState
from mobile_native_workflow.infrastructure.workflow.nodes.base import BaseNode
from mobile_native_workflow.infrastructure.workflow.services import (
    BuildRecoveryService,
    BuildValidationService,
)


class BuildValidationNode(BaseNode):
    """Runs one build attempt and tracks consecutive failures.

    Success resets buildAttemptCount to 0; failure sets it to incoming + 1.
    The retry cap is enforced by CheckBuildSuccessfulRouter.
    """

    def __init__(
        self,
        build_service: BuildValidationService | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__("validateBuild", logger)
        self.build_service = build_service or BuildValidationService()

    def execute(self, state: MobileNativeState) -> MobileNativeState:
        result = self.build_service.execute_build(
            platform=state.get("platform"),
            project_path=state.get("projectPath"),
            project_name=state.get("projectName"),
        )
        if result.buildSuccessful:
            return {"buildSuccessful": True, "buildAttemptCount": 0}

        attempt_count = (state.get("buildAttemptCount") or 0) + 1
        self.logger.warning("Build attempt %d failed", attempt_count)
        return {
            "buildSuccessful": False,
            "buildAttemptCount": attempt_count,
            "buildOutputFilePath": result.buildOutputFilePath,
        }


class BuildRecoveryNode(BaseNode):
    """Asks the LLM to fix the failed build and records what it tried."""

    def __init__(
        self,
        recovery_service: BuildRecoveryService | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__("buildRecovery", logger)
        self.recovery_service = recovery_service or BuildRecoveryService()

    def execute(self, state: MobileNativeState) -> MobileNativeState:
        attempt_number = state.get("buildAttemptCount") or 1
        result = self.recovery_service.attempt_recovery(
            platform=state.get("platform"),
            project_path=state.get("projectPath"),
            project_name=state.get("projectName"),
            build_output_file_path=state.get("buildOutputFilePath") or "",
            attempt_number=attempt_number,
        )
        fixes = ", ".join(result.fixesAttempted) if result.fixesAttempted else "No fixes could be applied"
        return {
            "buildErrorMessages": [*(state.get("buildErrorMessages") or []), f"Recovery attempt {attempt_number}: {fixes}"],
            "recoveryReadyForRetry": result.readyForRetry,
        }
