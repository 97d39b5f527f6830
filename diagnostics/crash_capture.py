from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Dict, Optional


def get_crash_dir(base_dir: Optional[Path] = None) -> Path:
    root = base_dir or Path("data/roaming")
    crash_dir = root / "crashes"
    crash_dir.mkdir(parents=True, exist_ok=True)
    return crash_dir


def write_crash_marker(
    exc: BaseException,
    context: Dict[str, Any] | None = None,
    base_dir: Optional[Path] = None,
) -> Path:
    """Record a fatal viewer error (failed fetch or bitmap build) as JSON."""
    crash_dir = get_crash_dir(base_dir)
    ts = time.time()
    payload = {
        "ts": ts,
        "exception_type": type(exc).__name__,
        "message": str(exc),
        "context": {key: str(value) for key, value in (context or {}).items()},
    }
    path = crash_dir / f"crash_marker_{int(ts * 1000)}.json"
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path
