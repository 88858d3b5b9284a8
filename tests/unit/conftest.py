"""
Pytest configuration for unit tests.

Provides a recording executor so target recipes can be checked without
running docker, go or psql.
"""
import subprocess
from pathlib import Path

import pytest

from commonmk.config import Variables
from commonmk.errors import CommandFailedError
from commonmk.exec import CommandExecutor
from commonmk.targets import TaskContext, build_registry

# Fixed values for variables that would otherwise shell out
PROBED = {
    'BUILD_TIME': '2024-01-01_00:00:00',
    'GIT_COMMIT': 'abc1234',
    'GIT_BRANCH': 'main',
    'GO_VERSION': 'go1.24.0',
}


class RecordingExecutor(CommandExecutor):
    """CommandExecutor that records commands instead of running them."""

    def __init__(self, cwd: Path, tools=(), outputs=None, fail_on=None):
        super().__init__(cwd=cwd)
        self.commands = []
        self.removed = []
        self.created = []
        self.downloads = []
        self.inputs = []
        self.tools = set(tools)
        self.outputs = outputs or {}
        self.fail_on = fail_on

    def run(self, command, check=True, input=None, capture=False):
        self.commands.append(list(command))
        if input is not None:
            self.inputs.append(input)
        if self.fail_on and command[:len(self.fail_on)] == self.fail_on:
            raise CommandFailedError(f"Command failed: {command}", exit_code=3)
        stdout = self.outputs.get(tuple(command), '')
        return subprocess.CompletedProcess(command, 0, stdout=stdout, stderr='')

    def which(self, binary):
        return f"/usr/bin/{binary}" if binary in self.tools else None

    def make_dirs(self, path):
        self.created.append(path)

    def remove_paths(self, paths):
        self.removed.extend(paths)

    def download(self, url, dest, timeout=60.0):
        self.downloads.append((url, dest))
        return self.cwd / dest


@pytest.fixture
def executor(tmp_path):
    return RecordingExecutor(cwd=tmp_path)


@pytest.fixture
def make_context(tmp_path):
    """Factory for contexts with VAR=value overrides and no environment."""
    def factory(executor=None, project=None, gate_on_init=False, **overrides):
        variables = Variables(
            project=project,
            overrides=dict(PROBED, **overrides),
            environ={},
            cwd=tmp_path,
        )
        return TaskContext(
            vars=variables,
            executor=executor or RecordingExecutor(cwd=tmp_path),
            gate_on_init=gate_on_init,
        )
    return factory


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def make_executor(tmp_path):
    """Factory for recording executors with stubbed tools and outputs."""
    def factory(**kwargs):
        return RecordingExecutor(cwd=tmp_path, **kwargs)
    return factory
