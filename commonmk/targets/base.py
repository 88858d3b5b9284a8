"""
Target definitions and registry.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from commonmk.config import Variables
from commonmk.exec import CommandExecutor

logger = logging.getLogger(__name__)


@dataclass
class TaskContext:
    """Everything a recipe needs: variables and a command executor."""
    vars: Variables
    executor: CommandExecutor
    gate_on_init: bool = False

    def compose(self) -> List[str]:
        return self.vars.split('DOCKER_COMPOSE')

    def go(self) -> List[str]:
        return self.vars.split('GO')

    def docker(self) -> List[str]:
        return self.vars.split('DOCKER')

    def echo(self, message: str = "") -> None:
        self.executor.echo(message)

    def run(self, command: List[str], **kwargs):
        return self.executor.run(command, **kwargs)


Recipe = Callable[[TaskContext], None]


@dataclass
class Target:
    """A named step with optional help text and prerequisites."""
    name: str
    recipe: Recipe
    help: Optional[str] = None
    prerequisites: Tuple[str, ...] = ()
    # Runs before prerequisites; used for variable guards
    guard: Optional[Recipe] = None
    # Skipped by the init gate
    bootstrap: bool = False


class TargetRegistry:
    """Ordered collection of targets keyed by name."""

    def __init__(self):
        self._targets: Dict[str, Target] = {}

    def add(self, target: Target) -> Target:
        if target.name in self._targets:
            logger.warning(f"Overriding recipe for target '{target.name}'")
        self._targets[target.name] = target
        return target

    def target(
        self,
        name: str,
        help: Optional[str] = None,
        deps: Tuple[str, ...] = (),
        guard: Optional[Recipe] = None,
        bootstrap: bool = False,
    ) -> Callable[[Recipe], Recipe]:
        """Decorator registering a recipe function as a target."""
        def decorator(recipe: Recipe) -> Recipe:
            self.add(Target(
                name=name,
                recipe=recipe,
                help=help,
                prerequisites=tuple(deps),
                guard=guard,
                bootstrap=bootstrap,
            ))
            return recipe
        return decorator

    def get(self, name: str) -> Optional[Target]:
        return self._targets.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._targets

    def __iter__(self):
        return iter(self._targets.values())

    def __len__(self) -> int:
        return len(self._targets)

    def names(self) -> List[str]:
        return sorted(self._targets)

    def documented(self) -> List[Target]:
        """Targets carrying help text, sorted by name."""
        return sorted((t for t in self._targets.values() if t.help), key=lambda t: t.name)
