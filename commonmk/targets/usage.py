"""
The help target: lists every documented target.
"""
import os
import sys

from commonmk.targets.base import TargetRegistry, TaskContext

CYAN = "\033[36m"
RESET = "\033[0m"


def use_color(stream=None) -> bool:
    stream = stream or sys.stdout
    if os.environ.get('NO_COLOR'):
        return False
    return hasattr(stream, 'isatty') and stream.isatty()


def format_help(registry: TargetRegistry, title: str, color: bool = False) -> str:
    """Render the help screen for all targets with help text."""
    lines = [
        title,
        "",
        "Usage:",
        "  commonmkctl <target> [VAR=value ...]",
        "",
        "Targets:",
    ]
    for target in registry.documented():
        if color:
            lines.append(f"  {CYAN}{target.name:<20}{RESET} {target.help}")
        else:
            lines.append(f"  {target.name:<20} {target.help}")
    return "\n".join(lines)


def register(registry: TargetRegistry) -> None:

    @registry.target('help', help='Display this help message', bootstrap=True)
    def show_help(ctx: TaskContext) -> None:
        ctx.echo(format_help(registry, ctx.vars.get('PROJECT_TITLE'), color=use_color()))
