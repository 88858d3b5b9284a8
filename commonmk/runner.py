"""
Dependency-ordered target execution.

Prerequisites run depth-first in declaration order before their target, and
every target runs at most once per invocation. The first failure stops the
run.
"""
import logging
from typing import List, Optional, Set

from commonmk.errors import CircularDependencyError, NoSuchTargetError
from commonmk.targets.base import Target, TargetRegistry, TaskContext

logger = logging.getLogger(__name__)

DEFAULT_GOAL = 'help'
INIT_TARGET = 'init'


class TargetRunner:
    """Runs targets from a registry against one context."""

    def __init__(self, registry: TargetRegistry, context: TaskContext):
        self.registry = registry
        self.context = context
        self._done: Set[str] = set()

    def plan(self, names: Optional[List[str]] = None) -> List[Target]:
        """
        Resolve names into the ordered list of targets that would run.

        Raises:
            NoSuchTargetError: If a target or prerequisite is unknown
            CircularDependencyError: If prerequisites form a cycle
        """
        names = list(names) if names else [DEFAULT_GOAL]
        order: List[Target] = []
        seen: Set[str] = set(self._done)
        for name in names:
            self._visit(name, [], seen, order, parent=None)
        return order

    def _visit(self, name: str, path: List[str], seen: Set[str], order: List[Target], parent: Optional[str]) -> None:
        if name in path:
            chain = ' <- '.join(path[path.index(name):] + [name])
            raise CircularDependencyError(f"Circular dependency: {chain}")
        if name in seen:
            return

        target = self.registry.get(name)
        if target is None:
            if parent:
                raise NoSuchTargetError(f"No rule to make target '{name}', needed by '{parent}'")
            raise NoSuchTargetError(f"No rule to make target '{name}'")

        prerequisites = list(target.prerequisites)
        if self.context.gate_on_init and not target.bootstrap and INIT_TARGET in self.registry:
            prerequisites.insert(0, INIT_TARGET)

        for prerequisite in prerequisites:
            self._visit(prerequisite, path + [name], seen, order, parent=name)

        seen.add(name)
        order.append(target)

    def run(self, names: Optional[List[str]] = None) -> List[str]:
        """
        Run the named targets (default goal when empty).

        Guards of every planned target are checked before any recipe runs,
        so a missing required variable fails without side effects.

        Returns:
            Names of the targets that ran, in order
        """
        order = self.plan(names)

        for target in order:
            if target.guard is not None:
                target.guard(self.context)

        for target in order:
            logger.debug(f"Running target '{target.name}'")
            target.recipe(self.context)
            self._done.add(target.name)

        return [t.name for t in order]
