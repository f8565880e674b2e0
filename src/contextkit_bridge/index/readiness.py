import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..clients.contextkit import ContextKitClient
from ..runner.errors import ExternalCLIError, FailureKind

logger = logging.getLogger(__name__)


class CheckStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class CheckEntry:
    name: str
    status: CheckStatus


@dataclass(frozen=True)
class ReadinessReport:
    entries: tuple[CheckEntry, ...]

    @property
    def ready(self) -> bool:
        """Ready iff no entry reports an error; warnings do not block queries."""
        return not any(entry.status is CheckStatus.ERROR for entry in self.entries)

    @property
    def errors(self) -> list[CheckEntry]:
        return [entry for entry in self.entries if entry.status is CheckStatus.ERROR]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ready": self.ready,
            "checks": [{"name": e.name, "status": e.status.value} for e in self.entries],
        }


def parse_readiness(payload: str) -> ReadinessReport:
    """Parse ``doctor --json`` output.

    Accepts a JSON array of ``{"name", "status"}`` objects, or an object wrapping that
    array under ``"checks"``.

    Raises:
        ValueError: Malformed payload. Callers treat this as "cannot determine
            readiness", never as ready.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ValueError(f"doctor output is not JSON: {exc}") from exc
    except RecursionError as exc:
        raise ValueError("doctor output is nested too deeply") from exc

    if isinstance(data, dict):
        data = data.get("checks")
    if not isinstance(data, list):
        raise ValueError("doctor output must be a list of checks")

    entries: list[CheckEntry] = []
    for item in data:
        if not isinstance(item, dict):
            raise ValueError(f"doctor check is not an object: {item!r}")
        name = item.get("name")
        status = item.get("status")
        if not isinstance(name, str) or not isinstance(status, str):
            raise ValueError(f"doctor check lacks name/status: {item!r}")
        try:
            entries.append(CheckEntry(name=name, status=CheckStatus(status.strip().lower())))
        except ValueError as exc:
            raise ValueError(f"Unknown doctor status {status!r} for check {name!r}") from exc
    return ReadinessReport(entries=tuple(entries))


async def check_readiness(client: ContextKitClient, root: str) -> ReadinessReport:
    """Ask contextkit whether ``root`` can answer queries.

    The payload, not the exit code, signals readiness: doctor exits 0 even when
    some checks report errors.

    Raises:
        ExternalCLIError: The command failed, or its payload could not be parsed.
    """
    stdout = await client.doctor(root, as_json=True)
    try:
        report = parse_readiness(stdout)
    except ValueError as exc:
        raise ExternalCLIError(
            kind=FailureKind.UNKNOWN,
            message=f"Could not determine workspace readiness: {exc}",
            command=["doctor", "--json"],
        ) from exc

    if not report.ready:
        logger.info(
            "Workspace %s not ready: %s", root, ", ".join(e.name for e in report.errors)
        )
    return report
