from __future__ import annotations

import datetime as dt
import shutil
import sys
from email.utils import format_datetime
from pathlib import Path
from typing import Optional

TRUE_VALUES = frozenset({"1", "true", "yes", "y", "on"})


def parse_bool(value: object) -> bool:
    """Read a front-matter or config flag; anything unrecognised is ``False``."""
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    if isinstance(value, (bool, int, float)):
        return bool(value)
    return False


def parse_int(value: object, default: int) -> int:
    try:
        return int(str(value).strip()) if value is not None else default
    except ValueError:
        return default


def parse_date(value: Optional[str]) -> Optional[dt.datetime]:
    """Read a ``dateCreated`` string as a naive UTC datetime, ``None`` when it is not ISO."""
    if not value:
        return None
    try:
        parsed = dt.datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return parsed


def join_url(base: str, path: str) -> str:
    path = path.lstrip("/")
    return f"{base.rstrip('/')}/{path}" if path else base.rstrip("/")


def rfc822_date(value: dt.datetime) -> str:
    return format_datetime(value.replace(tzinfo=dt.timezone.utc))


def clean_output_dir(output_dir: Path, project_root: Path) -> None:
    """Remove a previous build, but only from inside the project."""
    if not output_dir.exists():
        return
    target = output_dir.resolve()
    root = project_root.resolve()
    if target == root or not target.is_relative_to(root):
        print(f"Refusing to clean {target}: not a subdirectory of {root}.", file=sys.stderr)
        sys.exit(1)
    shutil.rmtree(target)
