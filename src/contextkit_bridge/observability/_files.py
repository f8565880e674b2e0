import glob
import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..config import settings

logger = logging.getLogger(__name__)


def rotate_if_needed(path: Path) -> None:
    try:
        if path.exists() and path.stat().st_size > settings.MAX_LOG_SIZE_BYTES:
            ts = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
            rotated_path = path.with_name(f"{path.stem}.{ts}{path.suffix}")
            path.rename(rotated_path)
            logger.debug("Rotated log file to %s", rotated_path)

            pattern = f"{glob.escape(path.stem)}.*{glob.escape(path.suffix)}"
            rotated = sorted(path.parent.glob(pattern), reverse=True)
            for old in rotated[settings.MAX_ROTATED_LOGS :]:
                old.unlink(missing_ok=True)
                logger.debug("Cleaned up old log file: %s", old)
    except Exception as exc:
        logger.warning("Failed to rotate log file %s: %s", path, exc)


def append_jsonl(path: Path, event: dict[str, Any]) -> None:
    if path.is_dir():
        logger.warning("Log path %s is a directory, skipping write", path)
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    rotate_if_needed(path)
    with open(path, "a", encoding="utf-8") as f:
        f.write(json.dumps(event, ensure_ascii=False, default=str) + "\n")
