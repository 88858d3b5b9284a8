"""
Submodule bootstrap and project-defined targets.

A consumer repository vendors commonmk as a git submodule at SUBMODULE_PATH
and sets `gate_on_init: true` in commonmk.yaml, so every target first makes
sure the submodule has been fetched. The same file may declare extra
targets of its own:

    targets:
      migrate:
        help: Apply database migrations
        deps: [docker-compose-up]
        commands:
          - [migrate, -path, $(MIGRATIONS_DIR), up]
"""
import logging
from typing import Any, Dict, List

from commonmk.errors import ConfigError
from commonmk.targets.base import Target, TargetRegistry, TaskContext

logger = logging.getLogger(__name__)


def submodule_missing(ctx: TaskContext) -> bool:
    path = ctx.executor.cwd / ctx.vars.get('SUBMODULE_PATH')
    return not path.is_dir() or not any(path.iterdir())


def register(registry: TargetRegistry) -> None:

    @registry.target('init', help='Fetch the shared submodule if it is missing', bootstrap=True)
    def init(ctx: TaskContext) -> None:
        if not submodule_missing(ctx):
            logger.debug("Submodule already present, nothing to fetch")
            return
        path = ctx.vars.get('SUBMODULE_PATH')
        ctx.echo(f"Initializing submodule {path}...")
        ctx.run(['git', 'submodule', 'update', '--init', '--recursive', path])


def _command_list(name: str, definition: Dict[str, Any]) -> List[List[str]]:
    commands = definition.get('commands') or []
    if not isinstance(commands, list):
        raise ConfigError(f"Target '{name}': 'commands' must be a list")
    result = []
    for command in commands:
        if not isinstance(command, list) or not command:
            raise ConfigError(f"Target '{name}': each command must be a non-empty argument list")
        result.append([str(word) for word in command])
    return result


def project_target(name: str, definition: Dict[str, Any]) -> Target:
    """Build a Target from a project-file entry."""
    if not isinstance(definition, dict):
        raise ConfigError(f"Target '{name}' must be a mapping")

    commands = _command_list(name, definition)
    deps = definition.get('deps') or []
    if isinstance(deps, str):
        deps = deps.split()

    def recipe(ctx: TaskContext) -> None:
        for command in commands:
            ctx.run([ctx.vars.expand(word) for word in command])

    return Target(
        name=str(name),
        recipe=recipe,
        help=definition.get('help'),
        prerequisites=tuple(str(d) for d in deps),
    )


def register_project_targets(registry: TargetRegistry, targets: Dict[str, Any]) -> None:
    for name, definition in targets.items():
        registry.add(project_target(name, definition))
