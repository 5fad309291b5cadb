"""Result store: JSON envelopes with freshness metadata, plus CSV exports.

Layout under the base directory:
  - reference/: Slow-changing inputs, 90-day TTL (region boundaries)
  - derived/:   Computed tables, rewritten on every analysis run
  - exports/:   CSV renderings of the derived tables

JSON files carry a ``{"meta": ..., "data": ...}`` envelope; ``meta`` holds the
source, ``fetched_at`` and an optional ``valid_until``. CSV files keep their
native format and get a ``.meta.json`` sidecar with the same metadata.
"""

from __future__ import annotations

import csv
import json
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - used at runtime, not just annotations
from typing import TYPE_CHECKING, Any

from windscape.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

SIDECAR_SUFFIX = ".meta.json"


class DataStore:
    """Reads and writes pipeline data under one base directory."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self.reference = base_dir / "reference"
        self.derived = base_dir / "derived"
        self.exports = base_dir / "exports"

    # -------------------------------------------------------------------------
    # JSON envelopes
    # -------------------------------------------------------------------------

    def read(self, path: Path) -> Any | None:
        """Return the ``data`` payload of an envelope, or None if missing."""
        envelope = self.read_raw(path)
        if envelope is None:
            return None
        return envelope.get("data", envelope)

    def read_raw(self, path: Path) -> dict[str, Any] | None:
        """Return the whole envelope (meta + data), or None if missing."""
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open(encoding="utf-8") as f:
            envelope: dict[str, Any] = json.load(f)
        return envelope

    def write(
        self,
        path: Path,
        data: Any,
        source: str,
        valid_until: datetime | None = None,
        **params: Any,
    ) -> Path:
        """Write ``data`` inside a metadata envelope.

        Args:
            path: Path relative to the base (e.g. ``derived/monthly_stats.json``).
            data: JSON-serializable payload.
            source: Where the data came from (e.g. ``"earthengine"``).
            valid_until: Expiry; None means never considered fresh.
            **params: Extra metadata (region, years, seed, ...).

        Returns:
            Absolute path written.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)
        envelope = {"meta": _meta(source, valid_until, params), "data": data}
        with full.open("w", encoding="utf-8") as f:
            json.dump(envelope, f, indent=2)
        return full

    # -------------------------------------------------------------------------
    # CSV tables
    # -------------------------------------------------------------------------

    def write_csv(
        self,
        path: Path,
        rows: Iterable[dict[str, Any]],
        columns: Sequence[str],
        source: str,
        **params: Any,
    ) -> Path:
        """Write rows as CSV (header first) with a sidecar ``.meta.json``.

        ``None`` values are written as empty cells. Keys outside ``columns``
        are rejected so a schema drift can't pass unnoticed.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)
        n_rows = 0
        with full.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(columns), extrasaction="raise")
            writer.writeheader()
            for row in rows:
                writer.writerow({k: ("" if v is None else v) for k, v in row.items()})
                n_rows += 1

        meta = _meta(source, None, {**params, "rows": n_rows, "columns": list(columns)})
        with self._sidecar(full).open("w", encoding="utf-8") as f:
            json.dump({"meta": meta}, f, indent=2)
        return full

    def read_csv(self, path: Path) -> list[dict[str, str]] | None:
        """Read a CSV table as string-valued dicts, or None if missing."""
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open(encoding="utf-8", newline="") as f:
            return list(csv.DictReader(f))

    # -------------------------------------------------------------------------
    # Freshness
    # -------------------------------------------------------------------------

    def is_fresh(self, path: Path) -> bool:
        """True if the file exists and its ``valid_until`` is in the future."""
        full = self._resolve(path)
        if not full.exists():
            return False

        valid_until = self._read_meta(full).get("valid_until")
        if valid_until is None:
            return False

        expiry = datetime.fromisoformat(valid_until)
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=UTC)
        return datetime.now(UTC) < expiry

    def _read_meta(self, full: Path) -> dict[str, Any]:
        sidecar = self._sidecar(full)
        if sidecar.exists():
            with sidecar.open(encoding="utf-8") as f:
                return json.load(f).get("meta", {})
        if full.suffix == ".json":
            with full.open(encoding="utf-8") as f:
                return json.load(f).get("meta", {})
        return {}

    @staticmethod
    def _sidecar(full: Path) -> Path:
        return full.with_suffix(full.suffix + SIDECAR_SUFFIX)

    def _resolve(self, path: Path) -> Path:
        full = path if path.is_absolute() else self.base / path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ConfigurationError(msg) from None
        return full


def _meta(source: str, valid_until: datetime | None, params: dict[str, Any]) -> dict[str, Any]:
    meta: dict[str, Any] = {"source": source, "fetched_at": datetime.now(UTC).isoformat()}
    if valid_until is not None:
        meta["valid_until"] = valid_until.isoformat()
    meta.update(params)
    return meta
