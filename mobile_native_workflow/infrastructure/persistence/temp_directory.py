"""Per-process temp directory for build products handed between tools."""

import logging
import shutil
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class TempDirectoryManager:
    """Creates one magen-temp-* directory lazily and removes it on cleanup."""

    def __init__(self) -> None:
        self._path: Path | None = None

    def get_temp_directory(self) -> Path:
        if self._path is None or not self._path.exists():
            self._path = Path(tempfile.mkdtemp(prefix="magen-temp-"))
            logger.debug("Created temp directory %s", self._path)
        return self._path

    def get_app_artifact_path(self, project_name: str) -> Path:
        """Location of the built iOS .app bundle: <temp>/<project>/<project>.app"""
        return self.get_temp_directory() / project_name / f"{project_name}.app"

    def cleanup(self) -> None:
        if self._path is not None:
            shutil.rmtree(self._path, ignore_errors=True)
            self._path = None


temp_directory_manager = TempDirectoryManager()
