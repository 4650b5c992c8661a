"""
Extension models — what to install and how it went.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

ExtensionSource = Literal["inline", "file", "default"]


@dataclass
class ExtensionList:
    """Ordered extension identifiers plus where they came from.

    Order is preserved and duplicates are kept as given.
    """

    ids: list[str] = field(default_factory=list)
    source: ExtensionSource = "default"
    path: Path | None = None

    def __len__(self) -> int:
        return len(self.ids)

    def __iter__(self):
        return iter(self.ids)

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "path": str(self.path) if self.path else None,
            "count": len(self.ids),
            "extensions": list(self.ids),
        }


@dataclass
class ExtensionReport:
    """Tally of an extension install pass.

    ``ok`` and ``failed`` keep input order so the failure list is
    reproducible between runs.
    """

    ok: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    log_path: Path | None = None

    @property
    def total(self) -> int:
        return len(self.ok) + len(self.failed)

    @property
    def succeeded(self) -> int:
        return len(self.ok)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def status(self) -> str:
        if not self.failed:
            return "ok"
        if self.ok:
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed_count,
            "ok_ids": list(self.ok),
            "failed_ids": list(self.failed),
            "log_path": str(self.log_path) if self.log_path else None,
        }
