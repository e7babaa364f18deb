"""
Tag Index Strategy for readtags
"""
import shutil
import subprocess
from typing import Optional

from ..constants import READTAGS_COMMAND
from ..exceptions import ExternalToolError
from .base import TagIndexStrategy


class ReadtagsStrategy(TagIndexStrategy):
    """Tag lookup using the 'readtags' command-line tool shipped with ctags."""

    def __init__(self, command: str = READTAGS_COMMAND):
        self.command = command

    @property
    def name(self) -> str:
        """The name of the backend."""
        return 'readtags'

    def is_available(self) -> bool:
        """Check if the readtags command is available on the system."""
        return shutil.which(self.command) is not None

    def query(self, tag_file_path: str, symbol: str, timeout: Optional[float] = None) -> bytes:
        """
        Run ``readtags -t <tag_file_path> -e <symbol>``.

        Args:
            tag_file_path: Path of the tag file to read
            symbol: The exact symbol name
            timeout: Seconds before the process is killed, None for no limit

        Returns:
            The process stdout, undecoded
        """
        cmd = [self.command, '-t', tag_file_path, '-e', symbol]

        try:
            process = subprocess.run(
                cmd,
                capture_output=True,
                check=False,
                timeout=timeout,
            )
        except OSError as e:
            raise ExternalToolError(f"Failed to execute {self.command}: {e}") from e

        if process.returncode != 0:
            stderr = process.stderr.decode('utf-8', errors='replace').strip()
            raise ExternalToolError(
                f"{self.command} failed with exit code {process.returncode}: {stderr}"
            )

        return process.stdout
