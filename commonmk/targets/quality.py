"""
Linting, formatting and security targets.
"""
from commonmk.targets.base import TargetRegistry, TaskContext

GOLANGCI_LINT = 'github.com/golangci/golangci-lint/cmd/golangci-lint@latest'
GOSEC = 'github.com/securego/gosec/v2/cmd/gosec@latest'


def audited_modules(module_list: str) -> list:
    """
    Module paths from `go list -m all` output, skipping the main module.

    Examples:
        >>> audited_modules("example.com/app\\ngolang.org/x/text v0.3.0\\n")
        ['golang.org/x/text']
    """
    modules = []
    for line in module_list.splitlines()[1:]:
        fields = line.split()
        if fields:
            modules.append(fields[0])
    return modules


def register(registry: TargetRegistry) -> None:

    @registry.target('lint', help='Run linter')
    def lint(ctx: TaskContext) -> None:
        ctx.echo("Running linter...")
        ctx.executor.ensure_tool('golangci-lint', ctx.go() + ['install', GOLANGCI_LINT])
        ctx.run(['golangci-lint', 'run', './...'])

    @registry.target('fmt', help='Format Go code')
    def fmt(ctx: TaskContext) -> None:
        ctx.echo("Formatting Go code...")
        ctx.run(ctx.go() + ['fmt', './...'])
        ctx.echo("Code formatted.")

    @registry.target('vet', help='Run go vet')
    def vet(ctx: TaskContext) -> None:
        ctx.echo("Running go vet...")
        ctx.run(ctx.go() + ['vet', './...'])
        ctx.echo("Vet completed.")

    @registry.target('security-scan', help='Run security scan')
    def security_scan(ctx: TaskContext) -> None:
        ctx.echo("Running security scan...")
        ctx.executor.ensure_tool('gosec', ctx.go() + ['install', GOSEC])
        ctx.run(['gosec', './...'])

    @registry.target('audit', help='Audit dependencies')
    def audit(ctx: TaskContext) -> None:
        ctx.echo("Auditing dependencies...")
        module_list = ctx.executor.output(ctx.go() + ['list', '-m', 'all'])
        for module in audited_modules(module_list):
            ctx.run(ctx.go() + ['mod', 'why', module])
