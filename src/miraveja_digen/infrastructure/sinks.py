"""Source sinks - Destinations for generated units."""

from pathlib import Path
from typing import Dict, List, Union

import structlog

from miraveja_digen.domain import ISourceSink, SourceUnit

logger = structlog.get_logger(__name__)


class InMemorySourceSink(ISourceSink):
    """Keeps generated units in memory, in the order they were added."""

    def __init__(self) -> None:
        self._units: Dict[str, SourceUnit] = {}

    def add_source(self, unit: SourceUnit) -> None:
        if unit.name in self._units:
            raise ValueError(f"Source unit {unit.name} was already added")
        self._units[unit.name] = unit

    @property
    def units(self) -> List[SourceUnit]:
        return list(self._units.values())

    def get(self, name: str) -> SourceUnit:
        return self._units[name]

    def __contains__(self, name: str) -> bool:
        return name in self._units

    def __len__(self) -> int:
        return len(self._units)


class FileSystemSourceSink(ISourceSink):
    """Writes each generated unit to ``<directory>/<unit name>``.

    Unit names are fully qualified, so a flat directory never sees two units
    with the same file name.

    Attributes:
        directory: Output directory, created on first write.
        written: Paths written so far.
    """

    def __init__(self, directory: Union[str, Path], encoding: str = "utf-8") -> None:
        self.directory = Path(directory)
        self.encoding = encoding
        self.written: List[Path] = []

    def add_source(self, unit: SourceUnit) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / unit.name
        path.write_text(unit.text, encoding=self.encoding)
        self.written.append(path)
        logger.debug("source_written", unit=unit.name, path=str(path))
