"""
Redis utility targets, run through redis-cli inside the compose service.
"""
from typing import Tuple

from commonmk.targets.base import TargetRegistry, TaskContext

# target name, redis-cli arguments, help, banner, completion message
REDIS_COMMANDS: Tuple[Tuple[str, Tuple[str, ...], str, str, str], ...] = (
    ('redis-cli', (), 'Open Redis CLI inside the Redis container', 'Opening Redis CLI...', ''),
    ('redis-ping', ('ping',), 'Ping Redis to check if it is alive', 'Pinging Redis...', ''),
    ('redis-info', ('info',), 'Show Redis server info', 'Fetching Redis info...', ''),
    ('redis-keys', ('keys', '*'), 'List all Redis keys (use carefully in production)', 'Listing Redis keys...', ''),
    ('redis-flush', ('FLUSHALL',), 'Flush all Redis data (DANGEROUS)', 'Flushing ALL Redis data...', 'Redis data cleared.'),
    ('redis-memory', ('info', 'memory'), 'Show Redis memory usage', 'Redis memory usage:', ''),
    ('redis-stats', ('info', 'stats'), 'Show Redis stats', 'Redis statistics:', ''),
    ('redis-monitor', ('monitor',), 'Monitor Redis commands in real-time (DEBUG use only)',
     'Starting Redis MONITOR (Ctrl+C to stop)...', ''),
)


def redis_cli(ctx: TaskContext, *args: str) -> list:
    return ctx.compose() + ['exec', ctx.vars.get('REDIS_SERVICE'), 'redis-cli'] + list(args)


def register(registry: TargetRegistry) -> None:
    for name, args, help_text, banner, done in REDIS_COMMANDS:
        _register_command(registry, name, args, help_text, banner, done)


def _register_command(registry, name, args, help_text, banner, done) -> None:

    @registry.target(name, help=help_text)
    def recipe(ctx: TaskContext) -> None:
        ctx.echo(banner)
        ctx.run(redis_cli(ctx, *args))
        if done:
            ctx.echo(done)
