"""Lookup of metric SQL templates by name."""
import logging
import re
from pathlib import Path
from typing import List, Optional, Union

from metrictest.exceptions import MetricNotFoundError

logger = logging.getLogger(__name__)

_METRIC_NAME = re.compile(r"[A-Za-z0-9_][A-Za-z0-9_.-]*")


class MetricCatalog:
    """Directory of ``<name>.sql`` templates.

    When a dialect is given, ``<directory>/<dialect>/<name>.sql`` is preferred
    over ``<directory>/<name>.sql``.
    """

    def __init__(self, directory: Union[str, Path], dialect: Optional[str] = None):
        self.directory = Path(directory)
        self.dialect = dialect

    def _candidates(self, name: str) -> List[Path]:
        candidates = []
        if self.dialect:
            candidates.append(self.directory / self.dialect / f"{name}.sql")
        candidates.append(self.directory / f"{name}.sql")
        return candidates

    def path_for(self, name: str) -> Path:
        """Resolve the template file of ``name``.

        Raises:
            MetricNotFoundError: If the name is not a plain metric name or no
                template exists for it.
        """
        if not _METRIC_NAME.fullmatch(name or "") or ".." in name:
            raise MetricNotFoundError(f"Invalid metric name: {name!r}", metric=name)

        for candidate in self._candidates(name):
            if candidate.is_file():
                return candidate

        searched = ", ".join(str(p) for p in self._candidates(name))
        raise MetricNotFoundError(
            f"Metric '{name}' not found (searched: {searched})", metric=name
        )

    def load(self, name: str) -> str:
        """Read the SQL template of ``name``."""
        path = self.path_for(name)
        try:
            template = path.read_text(encoding="utf-8")
        except OSError as e:
            raise MetricNotFoundError(
                f"Cannot read metric '{name}' from {path}: {e}", metric=name
            ) from e
        logger.debug(f"Loaded metric '{name}' from {path}")
        return template

    def names(self) -> List[str]:
        """Names of all metrics available, dialect folder included."""
        found = set()
        if self.directory.is_dir():
            found.update(p.stem for p in self.directory.glob("*.sql"))
            if self.dialect and (self.directory / self.dialect).is_dir():
                found.update(p.stem for p in (self.directory / self.dialect).glob("*.sql"))
        return sorted(found)

    def __contains__(self, name: str) -> bool:
        try:
            self.path_for(name)
        except MetricNotFoundError:
            return False
        return True
