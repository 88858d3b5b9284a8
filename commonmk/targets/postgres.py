"""
PostgreSQL utility targets, run through psql inside the compose service.

TABLE and LIMIT come from VAR=value assignments or the environment, e.g.

    commonmkctl pg-select TABLE=users LIMIT=20
"""
import re
from typing import List, Optional

from commonmk.errors import CommandFailedError, UsageError
from commonmk.targets.base import TargetRegistry, TaskContext

_LIMIT = re.compile(r'^[0-9]+$')
_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_$]*(\.[A-Za-z_][A-Za-z0-9_$]*)?$')
DEFAULT_LIMIT = 10


def table_name(ctx: TaskContext, target: str, extra_usage: str = '') -> str:
    usage = f"Usage: commonmkctl {target} TABLE=table_name{extra_usage}"
    table = ctx.vars.require('TABLE', usage)
    if not _IDENTIFIER.match(table):
        raise UsageError(f"Invalid table name: {table!r}\n{usage}")
    return table


def row_limit(ctx: TaskContext) -> int:
    raw = ctx.vars.get('LIMIT').strip()
    if not raw:
        return DEFAULT_LIMIT
    if not _LIMIT.match(raw):
        raise UsageError(f"LIMIT must be a non-negative integer, got {raw!r}")
    return int(raw)


def psql(ctx: TaskContext, sql: Optional[str] = None, database: bool = True) -> List[str]:
    """psql command inside the postgres service, optionally running one statement."""
    v = ctx.vars
    command = ctx.compose() + ['exec', v.get('POSTGRES_SERVICE'), 'psql', '-U', v.get('POSTGRES_USER')]
    if database:
        command += ['-d', v.get('POSTGRES_DB')]
    if sql is not None:
        command += ['-c', sql]
    return command


def register(registry: TargetRegistry) -> None:

    @registry.target('pg-psql', help='Open psql shell inside PostgreSQL container')
    def pg_psql(ctx: TaskContext) -> None:
        ctx.echo("Opening PostgreSQL shell...")
        ctx.run(psql(ctx))

    @registry.target('pg-status', help='Check PostgreSQL container health')
    def pg_status(ctx: TaskContext) -> None:
        ctx.echo("Checking PostgreSQL health...")
        service = ctx.vars.get('POSTGRES_SERVICE')
        container_id = ctx.executor.output(ctx.compose() + ['ps', '-q', service])
        if not container_id and not ctx.executor.dry_run:
            raise CommandFailedError(f"No running container for service '{service}'")
        ctx.run(ctx.docker() + ['inspect', '--format={{.State.Health.Status}}', container_id or f'<{service}>'])

    @registry.target('pg-tables', help='List all tables in the database')
    def pg_tables(ctx: TaskContext) -> None:
        ctx.echo(f"Listing tables in {ctx.vars.get('POSTGRES_DB')} DB...")
        ctx.run(psql(ctx, "\\dt"))

    @registry.target('pg-describe', help='Describe a table (usage: pg-describe TABLE=table_name)')
    def pg_describe(ctx: TaskContext) -> None:
        table = table_name(ctx, 'pg-describe')
        ctx.run(psql(ctx, f"\\d {table}"))

    @registry.target('pg-count', help='Count rows in a table (usage: pg-count TABLE=table_name)')
    def pg_count(ctx: TaskContext) -> None:
        table = table_name(ctx, 'pg-count')
        ctx.run(psql(ctx, f"SELECT COUNT(*) FROM {table};"))

    @registry.target('pg-select', help='View data from a table (usage: pg-select TABLE=table_name LIMIT=10)')
    def pg_select(ctx: TaskContext) -> None:
        table = table_name(ctx, 'pg-select', ' [LIMIT=10]')
        ctx.run(psql(ctx, f"SELECT * FROM {table} LIMIT {row_limit(ctx)};"))

    @registry.target('pg-size', help='Show database size')
    def pg_size(ctx: TaskContext) -> None:
        db = ctx.vars.get('POSTGRES_DB')
        ctx.run(psql(ctx, f"SELECT pg_size_pretty(pg_database_size('{db}'));"))

    @registry.target('pg-connections', help='Show active connections')
    def pg_connections(ctx: TaskContext) -> None:
        db = ctx.vars.get('POSTGRES_DB')
        ctx.run(psql(ctx, f"SELECT pid, usename, state, query FROM pg_stat_activity WHERE datname='{db}';"))

    @registry.target('pg-flush', help='Drop and recreate database (DANGEROUS)')
    def pg_flush(ctx: TaskContext) -> None:
        db = ctx.vars.get('POSTGRES_DB')
        ctx.echo(f"Dropping and recreating database {db}...")
        ctx.run(psql(ctx, f"DROP DATABASE IF EXISTS {db};", database=False))
        ctx.run(psql(ctx, f"CREATE DATABASE {db};", database=False))
        ctx.echo("Database reset completed.")
