"""
Docker image and Docker Compose targets.
"""
from commonmk.errors import UsageError
from commonmk.targets.base import TargetRegistry, TaskContext


def image_ref(ctx: TaskContext) -> str:
    return f"{ctx.vars.get('DOCKER_IMAGE_NAME')}:{ctx.vars.get('DOCKER_TAG')}"


def require_registry(ctx: TaskContext) -> None:
    """Fail before docker-build runs when no registry is configured."""
    if not ctx.vars.get('DOCKER_REGISTRY').strip():
        raise UsageError("Error: DOCKER_REGISTRY not set")


def register(registry: TargetRegistry) -> None:

    @registry.target('docker-build', help='Build Docker image')
    def docker_build(ctx: TaskContext) -> None:
        ctx.echo("Building Docker image...")
        ctx.run(ctx.docker() + ['build', '-t', image_ref(ctx), ctx.vars.get('DOCKER_DIR')])
        ctx.echo(f"Docker image built: {image_ref(ctx)}")

    @registry.target('docker-push', help='Push Docker image to registry',
                     deps=('docker-build',), guard=require_registry)
    def docker_push(ctx: TaskContext) -> None:
        remote = f"{ctx.vars.get('DOCKER_REGISTRY').strip()}/{image_ref(ctx)}"
        ctx.echo("Pushing Docker image...")
        ctx.run(ctx.docker() + ['tag', image_ref(ctx), remote])
        ctx.run(ctx.docker() + ['push', remote])
        ctx.echo("Docker image pushed.")

    @registry.target('docker-run', help='Run Docker container')
    def docker_run(ctx: TaskContext) -> None:
        port = ctx.vars.get('APP_PORT')
        ctx.echo("Running Docker container...")
        ctx.run(ctx.docker() + [
            'run', '-p', f"{port}:{port}",
            '--name', ctx.vars.get('PROJECT_NAME'),
            image_ref(ctx),
        ])

    @registry.target('docker-compose-build', help='Build app service with Docker Compose')
    def compose_build(ctx: TaskContext) -> None:
        app = ctx.vars.get('APP_SERVICE')
        ctx.echo(f"Building {app} service...")
        ctx.run(ctx.compose() + ['build', app])
        ctx.echo(f"Docker Compose build completed for {app}.")

    @registry.target('docker-compose-build-nocache',
                     help='Build app service with Docker Compose without cache')
    def compose_build_nocache(ctx: TaskContext) -> None:
        app = ctx.vars.get('APP_SERVICE')
        ctx.echo(f"Building {app} service without Docker cache...")
        ctx.run(ctx.compose() + ['build', '--no-cache', app])
        ctx.echo(f"Docker Compose build (no cache) completed for {app}.")

    @registry.target('docker-compose-up', help='Start all services with Docker Compose',
                     deps=('docker-compose-build-nocache',))
    def compose_up(ctx: TaskContext) -> None:
        ctx.echo("Starting services with Docker Compose...")
        ctx.run(ctx.compose() + ['up', '-d'])
        ctx.echo(f"Services started. Visit http://localhost:{ctx.vars.get('APP_PORT')}")

    @registry.target('docker-compose-down', help='Stop all services with Docker Compose')
    def compose_down(ctx: TaskContext) -> None:
        ctx.echo("Stopping services...")
        ctx.run(ctx.compose() + ['down'])
        ctx.echo("Services stopped.")

    @registry.target('docker-compose-docker-volume-delete',
                     help='Stop all services and delete their volumes')
    def compose_volume_delete(ctx: TaskContext) -> None:
        ctx.echo("Stopping services and removing volumes...")
        ctx.run(ctx.compose() + ['down', '-v'])
        ctx.echo("Services stopped.")

    @registry.target('docker-compose-logs', help='View Docker Compose logs')
    def compose_logs(ctx: TaskContext) -> None:
        ctx.run(ctx.compose() + ['logs', '-f'])

    for suffix, variable in (('app', 'APP_SERVICE'), ('postgres', 'POSTGRES_SERVICE'), ('redis', 'REDIS_SERVICE')):
        _register_service_logs(registry, suffix, variable)

    @registry.target('docker-compose-ps')
    def compose_ps(ctx: TaskContext) -> None:
        ctx.run(ctx.compose() + ['ps'])

    @registry.target('docker-compose-restart', help='Restart all services',
                     deps=('docker-compose-down', 'docker-compose-build-nocache', 'docker-compose-up'))
    def compose_restart(ctx: TaskContext) -> None:
        pass


def _register_service_logs(registry: TargetRegistry, suffix: str, variable: str) -> None:

    @registry.target(f'docker-compose-logs-{suffix}', help=f'View Docker Compose logs for the {suffix} service')
    def service_logs(ctx: TaskContext) -> None:
        ctx.run(ctx.compose() + ['logs', '-f', ctx.vars.get(variable)])
