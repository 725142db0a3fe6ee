"""Source file discovery and line counting per canister kind."""

from __future__ import annotations

import abc
import fnmatch
import logging
from pathlib import Path

from canister_graph.models import Unit, UnitKind, UnitStats

logger = logging.getLogger(__name__)


def count_lines(file_path: Path) -> int:
    """Number of newline-separated lines; 0 when the file can't be read."""
    try:
        content = file_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Failed to read %s: %s", file_path, e)
        return 0
    return len(content.split("\n"))


class BaseSourceFinder(abc.ABC):
    """Base class for kind-specific source discovery."""

    kind: UnitKind
    extensions: tuple[str, ...]

    def __init__(self, skip_dirs: list[str] | None = None):
        self.skip_dirs = skip_dirs or ["target", ".dfx", "node_modules", ".git"]

    @abc.abstractmethod
    def find_sources(self, unit: Unit, project_dir: Path) -> list[Path]:
        """Return absolute paths of the unit's source files."""

    def collect(self, unit: Unit, project_dir: Path) -> UnitStats:
        sources = self.find_sources(unit, project_dir)
        lines = sum(count_lines(path) for path in sources)
        return UnitStats(
            lines_of_code=lines,
            source_files=tuple(_relative(path, project_dir) for path in sources),
        )

    def _should_skip(self, path: Path) -> bool:
        for part in path.parts:
            for pattern in self.skip_dirs:
                if fnmatch.fnmatch(part, pattern):
                    return True
        return False


class MotokoSourceFinder(BaseSourceFinder):
    kind = UnitKind.MOTOKO
    extensions = (".mo",)

    def find_sources(self, unit: Unit, project_dir: Path) -> list[Path]:
        if not unit.main:
            return []
        main_path = (project_dir / unit.main).resolve()
        if not main_path.is_file():
            logger.warning("Main file not found: %s", main_path)
            return []

        # Main first, then its .mo siblings
        siblings = sorted(
            p for p in main_path.parent.iterdir()
            if p.is_file() and p.suffix in self.extensions and p != main_path
        )
        return [main_path, *siblings]


class RustSourceFinder(BaseSourceFinder):
    kind = UnitKind.RUST
    extensions = (".rs",)

    def find_sources(self, unit: Unit, project_dir: Path) -> list[Path]:
        src_dir = self.crate_dir(unit, project_dir) / "src"
        if not src_dir.is_dir():
            logger.warning("Source directory not found: %s", src_dir)
            return []

        return [
            path for path in sorted(src_dir.rglob("*"))
            if path.is_file()
            and path.suffix in self.extensions
            and not self._should_skip(path.relative_to(src_dir))
        ]

    @staticmethod
    def crate_dir(unit: Unit, project_dir: Path) -> Path:
        """``src/<name>`` by convention, else the crate holding ``main``."""
        conventional = project_dir / "src" / unit.name
        if conventional.is_dir() or not unit.main:
            return conventional
        main_dir = (project_dir / unit.main).parent
        return main_dir.parent if main_dir.name == "src" else main_dir


_FINDERS: dict[UnitKind, BaseSourceFinder] = {
    UnitKind.MOTOKO: MotokoSourceFinder(),
    UnitKind.RUST: RustSourceFinder(),
}


def collect_unit_stats(unit: Unit, project_dir: Path) -> UnitStats:
    """Source files and line count for one unit; assets/custom have none."""
    finder = _FINDERS.get(unit.kind)
    if finder is None:
        return UnitStats()
    return finder.collect(unit, Path(project_dir))


def _relative(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(Path(root).resolve()).as_posix()
    except ValueError:
        return str(path)
