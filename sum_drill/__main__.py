from __future__ import annotations

import logging
import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    Lets ``python sum_drill/__main__.py`` work as well as ``python -m sum_drill``.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root_str = str(pkg_dir.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    from .app import run  # type: ignore[attr-defined]
except ImportError:
    _ensure_repo_root_on_path()
    from sum_drill.app import run  # type: ignore[attr-defined]


def configure_logging(level: str | int = logging.WARNING) -> None:
    """Install a stderr handler on the root logger unless one is already present."""

    root = logging.getLogger()
    if root.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root.addHandler(handler)
    try:
        root.setLevel(level)
    except ValueError:
        root.setLevel(logging.WARNING)
        root.warning("unknown log level %r; using WARNING", level)


def main() -> int:
    """Entry point for running the drill from the command line."""
    configure_logging()
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
