"""
Credential generation targets.
"""
import base64
import secrets

from commonmk.targets.base import TargetRegistry, TaskContext

# Tried in order; the first one on PATH receives the secret on stdin
CLIPBOARD_TOOLS = [
    ('pbcopy', ['pbcopy']),
    ('xclip', ['xclip', '-selection', 'clipboard']),
]


def generate_secret(num_bytes: int = 32) -> str:
    """Random bytes, base64 encoded (same shape as `openssl rand -base64 32`)."""
    return base64.b64encode(secrets.token_bytes(num_bytes)).decode('ascii')


def register(registry: TargetRegistry) -> None:

    @registry.target('jwt-secret', help='Generate a secure JWT secret and copy to clipboard')
    def jwt_secret(ctx: TaskContext) -> None:
        ctx.echo("Generating JWT secret...")
        secret = generate_secret()

        for binary, command in CLIPBOARD_TOOLS:
            if ctx.executor.which(binary):
                ctx.run(command, input=secret + "\n")
                ctx.echo(f"Generated JWT_SECRET is copied to clipboard using {binary}")
                break
        else:
            ctx.echo("Clipboard tool not found. Please copy manually.")

        ctx.echo()
        ctx.echo("Add this to your .env file by using paste command")
        ctx.echo(f"JWT_SECRET={secret}")
