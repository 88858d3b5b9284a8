"""
Cleanup targets.
"""
from commonmk.targets.base import TargetRegistry, TaskContext


def register(registry: TargetRegistry) -> None:

    @registry.target('clean', help='Clean build artifacts')
    def clean(ctx: TaskContext) -> None:
        v = ctx.vars
        ctx.echo("Cleaning build artifacts...")
        ctx.executor.remove_paths([v.get('BIN_DIR'), v.get('DIST_DIR'), v.get('COVERAGE_DIR'), v.get('LOGS_DIR')])
        ctx.run(ctx.go() + ['clean'])
        ctx.echo("Cleanup complete.")

    @registry.target('clean-all', help='Clean everything including dependencies',
                     deps=('clean', 'deps-clean'))
    def clean_all(ctx: TaskContext) -> None:
        ctx.echo("Cleaning everything...")
        ctx.run(ctx.docker() + ['system', 'prune', '-f'])
        ctx.echo("Complete cleanup done.")
