"""
Variable configuration for commonmk.

Variables are plain strings resolved from four layers, lowest precedence first:
built-in defaults, the project file (commonmk.yaml), the process environment,
and VAR=value assignments given on the command line. Values may reference
other variables as $(NAME); references are expanded when a value is read.
"""
import logging
import os
import re
import shlex
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import yaml

from commonmk.errors import ConfigError, UsageError

logger = logging.getLogger(__name__)

PROJECT_FILE = "commonmk.yaml"

DEFAULTS: Dict[str, str] = {
    # Project information
    'PROJECT_NAME': 'chitchat',
    'PROJECT_TITLE': 'ChitChat - Messaging Application',
    'VERSION': '1.0.0',

    # Go configuration
    'GO': 'go',
    'GO_MODULE': 'github.com/msniranjan18/chit-chat',
    'GO_MAIN': './cmd/main.go',
    'GO_TEST_FLAGS': '-v -race -cover -timeout 2m',
    'GO_BUILD_FLAGS': '-ldflags "-X main.version=$(VERSION) -X main.commit=$(GIT_COMMIT) -X main.date=$(BUILD_TIME)"',
    'GO_LDFLAGS': '-ldflags="-s -w"',
    'GO_IMAGE': 'golang:1.24',

    # Directories
    'BIN_DIR': 'bin',
    'DIST_DIR': 'dist',
    'COVERAGE_DIR': 'coverage',
    'MIGRATIONS_DIR': 'migrations',
    'LOGS_DIR': 'logs',
    'DOCKER_DIR': '.',

    # Files
    'BINARY': '$(BIN_DIR)/$(PROJECT_NAME)',
    'ENV_FILE': '.env',
    'ENV_EXAMPLE': '.env.example',

    # Docker
    'DOCKER': 'docker',
    'DOCKER_COMPOSE': 'docker-compose -f hack/docker-compose.yaml',
    'DOCKER_IMAGE_NAME': '$(PROJECT_NAME)',
    'DOCKER_TAG': 'latest',
    'DOCKER_REGISTRY': '',
    'APP_PORT': '8080',
    'APP_SERVICE': 'app',
    'POSTGRES_SERVICE': 'postgres',
    'REDIS_SERVICE': 'redis',

    # PostgreSQL
    'POSTGRES_DB': 'chitchat',
    'POSTGRES_USER': 'usr-chitchat',
    'POSTGRES_PASSWORD': 'password',
    'POSTGRES_HOST': 'localhost',
    'POSTGRES_PORT': '5432',

    # Redis
    'REDIS_HOST': 'localhost',
    'REDIS_PORT': '6379',

    # Debugging
    'PPROF_PORT': '7070',
    'TRACE_PORT': '8081',
    'TRACE_SECONDS': '5',
    'TRACE_FILE': 'trace.out',

    # Documentation
    'SWAGGER_MAIN': 'cmd/main.go',
    'SWAGGER_DIRS': './,pkg/handlers,pkg/routes',
    'SWAGGER_OUT': 'docs',

    # Submodule bootstrap
    'SUBMODULE_PATH': 'common',
}

_NAME = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
_REFERENCE = re.compile(r'\$\$|\$\(([A-Za-z_][A-Za-z0-9_]*)\)')


def _command_output(argv: List[str], cwd: Optional[Path] = None) -> str:
    """Return stripped stdout of a probe command, or '' if it cannot run."""
    try:
        result = subprocess.run(argv, cwd=cwd, capture_output=True, text=True, check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.debug(f"Probe {argv} failed: {e}")
        return ''
    return result.stdout.strip()


def _build_time(cwd: Optional[Path]) -> str:
    return datetime.now(timezone.utc).strftime('%Y-%m-%d_%H:%M:%S')


def _git_commit(cwd: Optional[Path]) -> str:
    return _command_output(['git', 'rev-parse', '--short', 'HEAD'], cwd)


def _git_branch(cwd: Optional[Path]) -> str:
    return _command_output(['git', 'rev-parse', '--abbrev-ref', 'HEAD'], cwd)


def _go_version(cwd: Optional[Path]) -> str:
    fields = _command_output(['go', 'version'], cwd).split()
    return fields[2] if len(fields) > 2 else ''


# Computed on first read, then cached for the rest of the invocation
PROBES: Dict[str, Callable[[Optional[Path]], str]] = {
    'BUILD_TIME': _build_time,
    'GIT_COMMIT': _git_commit,
    'GIT_BRANCH': _git_branch,
    'GO_VERSION': _go_version,
}


def is_assignment(arg: str) -> bool:
    """True if arg looks like NAME=value."""
    name, sep, _ = arg.partition('=')
    return bool(sep) and bool(_NAME.match(name))


def parse_assignments(argv: List[str]) -> Tuple[List[str], Dict[str, str]]:
    """
    Split command-line words into target names and variable assignments.

    Examples:
        >>> parse_assignments(['pg-select', 'TABLE=users', 'LIMIT=5'])
        (['pg-select'], {'TABLE': 'users', 'LIMIT': '5'})
    """
    targets = []
    assignments = {}
    for arg in argv:
        if is_assignment(arg):
            name, _, value = arg.partition('=')
            assignments[name] = value
        else:
            targets.append(arg)
    return targets, assignments


def load_project_file(path: Path) -> Dict[str, Any]:
    """
    Load a project file.

    A missing file yields an empty project (the file is optional).

    Raises:
        ConfigError: If the file is not valid YAML or has the wrong shape
    """
    if not path.exists():
        logger.debug(f"No project file at {path}")
        return {'variables': {}, 'targets': {}, 'gate_on_init': False}

    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")

    variables = data.get('variables') or {}
    if not isinstance(variables, dict):
        raise ConfigError(f"'variables' in {path} must be a mapping")
    for name in variables:
        if not _NAME.match(str(name)):
            raise ConfigError(f"Invalid variable name in {path}: {name!r}")

    targets = data.get('targets') or {}
    if not isinstance(targets, dict):
        raise ConfigError(f"'targets' in {path} must be a mapping")

    return {
        'variables': {str(k): '' if v is None else str(v) for k, v in variables.items()},
        'targets': targets,
        'gate_on_init': bool(data.get('gate_on_init', False)),
    }


class Variables:
    """Layered, lazily expanded variable set."""

    def __init__(
        self,
        project: Optional[Mapping[str, str]] = None,
        overrides: Optional[Mapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
    ):
        self.project = dict(project or {})
        self.overrides = dict(overrides or {})
        self.environ = os.environ if environ is None else environ
        self.cwd = cwd
        self._probed: Dict[str, str] = {}

    def raw(self, name: str) -> Optional[str]:
        """Unexpanded value of name from the highest layer defining it."""
        if name in self.overrides:
            return self.overrides[name]
        if name in self.environ:
            return self.environ[name]
        if name in self.project:
            return self.project[name]
        if name in DEFAULTS:
            return DEFAULTS[name]
        if name in PROBES:
            if name not in self._probed:
                self._probed[name] = PROBES[name](self.cwd)
            return self._probed[name]
        return None

    def get(self, name: str, default: str = '') -> str:
        return self._lookup(name, (), default)

    def _lookup(self, name: str, stack: Tuple[str, ...], default: str = '') -> str:
        if name in stack:
            chain = ' -> '.join(stack + (name,))
            raise ConfigError(f"Recursive variable reference: {chain}")
        value = self.raw(name)
        if value is None:
            return default
        return self._expand(value, stack + (name,))

    def expand(self, text: str) -> str:
        """Expand $(NAME) references in arbitrary text."""
        return self._expand(text, ())

    def _expand(self, text: str, stack: Tuple[str, ...]) -> str:
        def substitute(match):
            if match.group(0) == '$$':
                return '$'
            return self._lookup(match.group(1), stack)

        return _REFERENCE.sub(substitute, text)

    def split(self, name: str) -> List[str]:
        """Expanded value split into words with shell quoting rules."""
        try:
            return shlex.split(self.get(name))
        except ValueError as e:
            raise ConfigError(f"Cannot split {name}: {e}")

    def require(self, name: str, usage: str) -> str:
        value = self.get(name).strip()
        if not value:
            raise UsageError(usage)
        return value
