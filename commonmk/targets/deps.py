"""
Go module dependency targets.
"""
from commonmk.targets.base import TargetRegistry, TaskContext


def register(registry: TargetRegistry) -> None:

    @registry.target('deps', help='Download dependencies')
    def deps(ctx: TaskContext) -> None:
        ctx.echo("Downloading dependencies...")
        ctx.run(ctx.go() + ['mod', 'download'])
        ctx.run(ctx.go() + ['mod', 'verify'])
        ctx.echo("Dependencies downloaded.")

    @registry.target('deps-update', help='Update all dependencies')
    def deps_update(ctx: TaskContext) -> None:
        ctx.echo("Updating dependencies...")
        ctx.run(ctx.go() + ['get', '-u', './...'])
        ctx.run(ctx.go() + ['mod', 'tidy'])
        ctx.echo("Dependencies updated.")

    @registry.target('deps-clean', help='Clean dependencies cache')
    def deps_clean(ctx: TaskContext) -> None:
        ctx.echo("Cleaning dependencies cache...")
        ctx.run(ctx.go() + ['clean', '-modcache'])
        ctx.echo("Dependencies cache cleaned.")

    @registry.target('tidy', help='Tidy go.mod')
    def tidy(ctx: TaskContext) -> None:
        ctx.echo("Tidying go.mod...")
        ctx.run(ctx.go() + ['mod', 'tidy'])
        ctx.echo("go.mod tidied.")
