"""
Target catalogue.

Each module exposes register(registry) adding its targets.
"""
from typing import Any, Dict, Optional

from commonmk.targets import (
    bootstrap,
    build,
    clean,
    credentials,
    deps,
    devtools,
    docker,
    postgres,
    quality,
    redis,
    usage,
)
from commonmk.targets.base import Target, TargetRegistry, TaskContext

MODULES = [usage, bootstrap, deps, build, docker, quality, clean, devtools, credentials, redis, postgres]


def build_registry(project_targets: Optional[Dict[str, Any]] = None) -> TargetRegistry:
    """Registry with every built-in target plus those from the project file."""
    registry = TargetRegistry()
    for module in MODULES:
        module.register(registry)
    if project_targets:
        bootstrap.register_project_targets(registry, project_targets)
    return registry


__all__ = ['Target', 'TargetRegistry', 'TaskContext', 'build_registry']
