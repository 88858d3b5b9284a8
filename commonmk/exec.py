"""
Command execution for commonmk targets.

Every recipe step is a single external command run from an argument list.
A non-zero exit stops the run and its code becomes the process exit code.
"""
import logging
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

import requests

from commonmk.errors import CommandFailedError, CommandNotFoundError

logger = logging.getLogger(__name__)


def shell_exit_code(returncode: int) -> int:
    """
    Exit status as a shell reports it: 128 + N for a process killed by signal N.

    Examples:
        >>> shell_exit_code(-9)
        137
        >>> shell_exit_code(2)
        2
    """
    if returncode < 0:
        return 128 - returncode
    return returncode


class CommandExecutor:
    """Runs external commands for targets, or prints them in dry-run mode."""

    def __init__(self, cwd: Optional[Path] = None, dry_run: bool = False, env: Optional[dict] = None):
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.dry_run = dry_run
        self.env = env

    def echo(self, message: str = "") -> None:
        """Print a progress line."""
        print(message, flush=True)

    def run(
        self,
        command: List[str],
        check: bool = True,
        input: Optional[str] = None,
        capture: bool = False,
    ) -> subprocess.CompletedProcess:
        """
        Run a command from a list of arguments.

        Args:
            command: Command as list of arguments
            check: Raise CommandFailedError on non-zero exit
            input: Text fed to the command's stdin
            capture: Capture stdout instead of streaming it to the terminal

        Returns:
            CompletedProcess result

        Raises:
            CommandNotFoundError: If the binary is not installed
            CommandFailedError: If the command fails and check=True
        """
        command_str = shlex.join(command)

        if self.dry_run:
            print(command_str, flush=True)
            return subprocess.CompletedProcess(command, 0, stdout='', stderr='')

        logger.debug(f"Running: {command_str} (cwd={self.cwd})")

        if not self.cwd.is_dir():
            raise CommandFailedError(f"Working directory not found: {self.cwd}")

        # stderr always reaches the terminal, even when stdout is captured
        try:
            result = subprocess.run(
                command,
                cwd=self.cwd,
                env=self.env,
                input=input,
                stdout=subprocess.PIPE if capture else None,
                text=True,
            )
        except FileNotFoundError:
            raise CommandNotFoundError(command[0])

        if check and result.returncode != 0:
            exit_code = shell_exit_code(result.returncode)
            if result.returncode < 0:
                reason = f"terminated by signal {-result.returncode} (exit code {exit_code})"
            else:
                reason = f"failed with exit code {exit_code}"
            raise CommandFailedError(f"Command {reason}: {command_str}", exit_code=exit_code)

        return result

    def output(self, command: List[str]) -> str:
        """Run a command and return its stripped stdout."""
        if self.dry_run:
            self.run(command)
            return ''
        return self.run(command, capture=True).stdout.strip()

    def which(self, binary: str) -> Optional[str]:
        return shutil.which(binary)

    def ensure_tool(self, binary: str, install_command: List[str]) -> None:
        """Install a developer tool if it is not on PATH."""
        if self.which(binary):
            return
        self.echo(f"{binary} not found, installing...")
        self.run(install_command)

    def make_dirs(self, path: str) -> None:
        if self.dry_run:
            print(shlex.join(['mkdir', '-p', path]), flush=True)
            return
        (self.cwd / path).mkdir(parents=True, exist_ok=True)

    def remove_paths(self, paths: List[str]) -> None:
        """Remove files and directories recursively, ignoring missing ones."""
        if self.dry_run:
            print(shlex.join(['rm', '-rf'] + paths), flush=True)
            return

        for path in paths:
            full_path = self.cwd / path
            if full_path.is_dir() and not full_path.is_symlink():
                shutil.rmtree(full_path)
            elif full_path.exists() or full_path.is_symlink():
                full_path.unlink()
            else:
                logger.debug(f"Nothing to remove at {full_path}")

    def download(self, url: str, dest: str, timeout: float = 60.0) -> Path:
        """
        Fetch url into dest (relative to cwd).

        Raises:
            CommandFailedError: If the request fails or returns an error status
        """
        dest_path = self.cwd / dest
        if self.dry_run:
            print(f"GET {url} -> {dest}", flush=True)
            return dest_path

        logger.debug(f"Downloading {url} to {dest_path}")
        writing = False
        try:
            with requests.get(url, timeout=timeout, stream=True) as response:
                response.raise_for_status()
                with open(dest_path, 'wb') as f:
                    writing = True
                    for chunk in response.iter_content(chunk_size=65536):
                        f.write(chunk)
        except (requests.exceptions.RequestException, OSError) as e:
            if writing and dest_path.exists():
                dest_path.unlink()
            raise CommandFailedError(f"Download failed: {url}: {e}")

        return dest_path
