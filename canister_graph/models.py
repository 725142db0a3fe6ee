"""Data models for canister-graph."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from pathlib import Path


class UnitKind(enum.Enum):
    MOTOKO = "motoko"
    RUST = "rust"
    ASSETS = "assets"
    CUSTOM = "custom"


class FindingKind(enum.Enum):
    UNDEFINED_DEPENDENCY = "UndefinedDependency"
    CYCLE = "Cycle"
    BLOCKED_BY_CYCLE = "BlockedByCycle"


class Severity(enum.Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Unit:
    """One buildable canister as declared in the project manifest."""
    name: str
    kind: UnitKind
    depends_on: tuple[str, ...] = ()
    import_depends_on: tuple[str, ...] = ()  # detected from source imports
    main: str | None = None
    candid: str | None = None
    package: str | None = None
    wasm: str | None = None


@dataclass(frozen=True)
class UnitStats:
    """Per-unit statistics gathered outside the core."""
    lines_of_code: int = 0
    source_files: tuple[str, ...] = ()


@dataclass(frozen=True)
class Finding:
    """A validation error or warning produced during analysis."""
    kind: FindingKind
    severity: Severity
    detail: str
    unit: str | None = None
    missing_name: str | None = None
    units: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        data: dict = {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "detail": self.detail,
        }
        if self.unit is not None:
            data["unit"] = self.unit
        if self.missing_name is not None:
            data["missingName"] = self.missing_name
        if self.units:
            data["units"] = list(self.units)
        return data


@dataclass(frozen=True)
class ProjectIssue:
    """A project-level problem found while loading the manifest."""
    severity: Severity
    message: str
    canisters: tuple[str, ...] = ()
    file: str | None = None

    def to_dict(self) -> dict:
        data: dict = {"severity": self.severity.value, "message": self.message}
        if self.canisters:
            data["canisters"] = list(self.canisters)
        if self.file:
            data["file"] = self.file
        return data


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


@dataclass
class AnalyzerConfig:
    """Configuration for a project analysis run.

    Zero values are filled from ``CANISTER_GRAPH_*`` environment variables,
    then from the built-in defaults.
    """
    project_dir: Path = field(default_factory=lambda: Path("."))
    include_imports: bool = True
    max_workers: int = 0
    timeout: float = 0.0  # seconds, applied by callers around the whole run
    cache_ttl: float = 0.0  # seconds

    def __post_init__(self):
        self.project_dir = Path(self.project_dir)
        if not self.max_workers:
            self.max_workers = _env_int("CANISTER_GRAPH_MAX_WORKERS", 4)
        if not self.timeout:
            self.timeout = _env_float("CANISTER_GRAPH_TIMEOUT", 30.0)
        if not self.cache_ttl:
            self.cache_ttl = _env_float("CANISTER_GRAPH_CACHE_TTL", 15 * 60)
