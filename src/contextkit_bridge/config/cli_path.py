from ..runner.errors import InvalidCLIPathError
from .settings import DEFAULT_CLI_NAME

# Characters a shell would interpret. The runner never uses a shell, but the configured
# executable string is rejected outright so no later layer can interpret it unsafely.
SHELL_METACHARACTERS = frozenset(";&|`$")


def validate_cli_path(cli_path: str | None) -> str:
    """Return the executable to launch, or raise before anything is spawned.

    Raises:
        InvalidCLIPathError: If ``cli_path`` contains a shell metacharacter.
    """
    value = (cli_path or "").strip() or DEFAULT_CLI_NAME
    offending = "".join(sorted({ch for ch in value if ch in SHELL_METACHARACTERS}))
    if offending:
        raise InvalidCLIPathError(value, offending)
    return value
