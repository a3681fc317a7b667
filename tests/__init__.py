"""Test suite package configuration.

Puts the repository root on ``sys.path`` so ``voting_system`` and the
``tests`` helpers import the same way whether pytest is launched through the
console script or ``python -m pytest``.
"""

from __future__ import annotations

import sys
from pathlib import Path

_REPO_ROOT: Path = Path(__file__).resolve().parent.parent


def _ensure_repo_on_path() -> None:
    """Insert the repository root at the front of ``sys.path`` when missing."""

    repo_root_str: str = str(_REPO_ROOT)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_on_path()
