"""
Build and test targets.
"""
from commonmk.targets.base import TargetRegistry, TaskContext


def register(registry: TargetRegistry) -> None:

    @registry.target('build', help='Build the application', deps=('clean', 'deps', 'deps-update'))
    def build(ctx: TaskContext) -> None:
        v = ctx.vars
        binary = v.get('BINARY')
        ctx.echo(f"Building {v.get('PROJECT_NAME')} v{v.get('VERSION')}...")
        ctx.executor.make_dirs(v.get('BIN_DIR'))
        ctx.run(ctx.go() + ['build'] + v.split('GO_BUILD_FLAGS') + ['-o', binary, v.get('GO_MAIN')])
        ctx.echo(f"Build complete: {binary}")

    @registry.target('test', help='Run unit tests')
    def test(ctx: TaskContext) -> None:
        ctx.echo("Running tests...")
        ctx.run(ctx.go() + ['test'] + ctx.vars.split('GO_TEST_FLAGS') + ['./...'])
        ctx.echo("Tests passed.")
