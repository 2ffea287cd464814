"""
Output file management for generated artifacts.

Every artifact is fully rendered in memory and then written in a single atomic
step: content goes to a temporary file in the destination directory, which is
then renamed over the target.
"""

import os
import tempfile
from pathlib import Path

from .logging_config import get_logger

logger = get_logger(__name__)


class OutputManager:
    """Manages the output directory for generated artifacts."""

    def __init__(self, base_output_dir: str | Path = "."):
        """
        Initialize the output manager.

        Args:
            base_output_dir: Directory outputs are written to (default: cwd)
        """
        self.base_dir = Path(base_output_dir)

    def get_output_path(self, filename: str, create_dirs: bool = True) -> Path:
        """
        Get the full output path for a file, creating directories if needed.

        Args:
            filename: Output filename
            create_dirs: Whether to create the base directory if it doesn't exist

        Returns:
            Full path to the output file
        """
        output_path = self.base_dir / filename

        if create_dirs:
            output_path.parent.mkdir(parents=True, exist_ok=True)

        return output_path

    def save_output(self, content: str, filename: str) -> Path:
        """
        Save content to the output directory.

        Args:
            content: Content to save
            filename: Output filename

        Returns:
            Path to the saved file
        """
        output_path = self.get_output_path(filename)
        write_atomic(output_path, content)
        logger.info(f"Saved output to {output_path} ({len(content)} bytes)")
        return output_path


def write_atomic(path: str | Path, content: str) -> None:
    """
    Write text to ``path`` so readers never observe a partial file.

    Args:
        path: Destination file
        content: Full file content
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
