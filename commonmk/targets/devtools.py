"""
Documentation, developer tooling and profiling targets.

The swagger, pprof and trace targets run the Go toolchain inside a
container so the host only needs Docker.
"""
import re

from commonmk.errors import UsageError
from commonmk.targets.base import TargetRegistry, TaskContext

DEV_TOOLS = [
    'github.com/cespare/reflex@latest',
    'github.com/golangci/golangci-lint/cmd/golangci-lint@latest',
    'github.com/securego/gosec/v2/cmd/gosec@latest',
    'github.com/swaggo/swag/cmd/swag@latest',
]

SWAG = 'github.com/swaggo/swag/cmd/swag@latest'


def swagger_script(ctx: TaskContext) -> str:
    v = ctx.vars
    return (
        f"go install {SWAG} && "
        f"swag init -g {v.get('SWAGGER_MAIN')} -d {v.get('SWAGGER_DIRS')} "
        f"--parseDependency -o {v.get('SWAGGER_OUT')} && "
        "go mod tidy"
    )


def register(registry: TargetRegistry) -> None:

    @registry.target('swagger', help='Generate Swagger / OpenAPI documentation')
    def swagger(ctx: TaskContext) -> None:
        v = ctx.vars
        ctx.echo("Generating Swagger documentation in container...")
        ctx.run(ctx.docker() + [
            'run', '--rm',
            '-v', f"{ctx.executor.cwd}:/app",
            '-w', '/app',
            v.get('GO_IMAGE'),
            'sh', '-c', swagger_script(ctx),
        ])
        ctx.echo(f"Swagger documentation generated in {v.get('SWAGGER_OUT')}/")
        ctx.echo(f"Access it at: http://localhost:{v.get('APP_PORT')}/swagger/index.html")

    @registry.target('tools', help='Install development tools')
    def tools(ctx: TaskContext) -> None:
        ctx.echo("Installing development tools...")
        for tool in DEV_TOOLS:
            ctx.run(ctx.go() + ['install', tool])
        ctx.echo("Tools installed.")

    @registry.target('pprof')
    def pprof(ctx: TaskContext) -> None:
        v = ctx.vars
        port = v.get('PPROF_PORT')
        ctx.echo(f"Opening pprof UI at http://localhost:{port}")
        ctx.run(ctx.docker() + [
            'run', '--rm', '-it',
            '-p', f"{port}:{port}",
            v.get('GO_IMAGE'),
            'go', 'tool', 'pprof', f"-http=:{port}",
            f"http://host.docker.internal:{v.get('APP_PORT')}/debug/pprof/profile",
        ])

    @registry.target('trace')
    def trace(ctx: TaskContext) -> None:
        v = ctx.vars
        port = v.get('TRACE_PORT')
        seconds = v.get('TRACE_SECONDS')
        if not re.fullmatch(r'[0-9]+', seconds):
            raise UsageError(f"TRACE_SECONDS must be a whole number of seconds, got {seconds!r}")
        ctx.echo("Collecting trace...")
        ctx.executor.download(
            f"http://localhost:{v.get('APP_PORT')}/debug/pprof/trace?seconds={seconds}",
            v.get('TRACE_FILE'),
            timeout=int(seconds) + 30,
        )
        ctx.run(ctx.docker() + [
            'run', '--rm', '-it',
            '-p', f"{port}:{port}",
            '-v', f"{ctx.executor.cwd}:/app",
            '-w', '/app',
            v.get('GO_IMAGE'),
            'go', 'tool', 'trace', f"-http=:{port}", v.get('TRACE_FILE'),
        ])
