"""
Artifact sinks for pipeline output.

Provides a Protocol-based interface so the runner can persist its two JSON
artifacts without knowing where they go. The file implementation writes a
complete JSON array atomically: readers never observe a half-written file.
"""

import asyncio
import contextlib
import json
import logging
import os
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from core.utils import json_serializer

logger = logging.getLogger(__name__)


@runtime_checkable
class RecordSink(Protocol):
    """Protocol for sinks that persist a whole JSON array at once."""

    async def write(self, records: Sequence[Any]) -> Path:
        """
        Replace the artifact with ``records``.

        Args:
            records: Plain dicts or pydantic models (dumped with wire names)

        Returns:
            Location the artifact was written to
        """
        ...


@dataclass
class JsonArraySinkConfig:
    """Configuration for JSON array sink."""

    output_path: Path
    indent: int | None = 2


class JsonArraySink:
    """
    Sink that writes one JSON array per call.

    - Parent directories are created on demand
    - Temp file in the target directory, then os.replace()
    - Temp file is removed if anything fails before the replace
    """

    def __init__(self, config: JsonArraySinkConfig):
        self.config = config
        self.config.output_path = Path(config.output_path)

    @property
    def output_path(self) -> Path:
        return self.config.output_path

    async def write(self, records: Sequence[Any]) -> Path:
        """Write records as a JSON array, replacing any previous artifact."""
        await asyncio.to_thread(self._write_atomic, list(records))
        logger.info(
            "Wrote %d records to %s",
            len(records),
            self.output_path,
            extra={"output_path": str(self.output_path), "row_count": len(records)},
        )
        return self.output_path

    def read(self) -> list[Any]:
        """Load the artifact back as a list of plain JSON values."""
        with open(self.output_path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON array in {self.output_path}")
        return data

    def _write_atomic(self, records: list[Any]) -> None:
        target = self.output_path
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(
                    records,
                    f,
                    indent=self.config.indent,
                    default=json_serializer,
                    ensure_ascii=False,
                )
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, target)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                tmp_path.unlink()
            raise
