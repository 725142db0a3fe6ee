"""Read dfx.json and turn its canister entries into Units."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from canister_graph.errors import MalformedInputError, ProjectConfigError
from canister_graph.models import Unit, UnitKind

logger = logging.getLogger(__name__)

MANIFEST_NAME = "dfx.json"

_KIND_BY_SUFFIX = {
    ".mo": UnitKind.MOTOKO,
    ".rs": UnitKind.RUST,
}


@dataclass
class ProjectManifest:
    """Parsed project manifest."""
    name: str
    path: Path
    units: list[Unit] = field(default_factory=list)
    dfx_version: str | None = None
    networks: list[str] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)


def read_manifest(project_dir: Path) -> dict[str, Any]:
    """Load the raw dfx.json object from ``project_dir``."""
    manifest_path = Path(project_dir) / MANIFEST_NAME
    if not manifest_path.is_file():
        raise ProjectConfigError(f"{MANIFEST_NAME} not found at {manifest_path}")

    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProjectConfigError(f"Failed to parse {manifest_path}: {e}") from e

    if not isinstance(data, dict):
        raise ProjectConfigError(f"{manifest_path} must contain a JSON object")
    return data


def detect_kind(config: dict[str, Any]) -> UnitKind:
    """Explicit ``type`` wins; otherwise infer from the main file extension."""
    declared = config.get("type")
    if isinstance(declared, str):
        try:
            return UnitKind(declared)
        except ValueError:
            logger.debug("Unknown canister type %r, inferring from main", declared)

    main = config.get("main")
    if isinstance(main, str):
        return _KIND_BY_SUFFIX.get(Path(main).suffix, UnitKind.CUSTOM)
    return UnitKind.CUSTOM


def unit_from_config(name: str, config: Any) -> Unit:
    if not isinstance(config, dict):
        raise MalformedInputError(f"Canister {name!r} must be declared as an object")

    deps = config.get("dependencies", [])
    if not isinstance(deps, list) or not all(isinstance(d, str) and d for d in deps):
        raise MalformedInputError(
            f"Canister {name!r}: 'dependencies' must be a list of canister names"
        )

    def _opt(key: str) -> str | None:
        value = config.get(key)
        return value if isinstance(value, str) else None

    return Unit(
        name=name,
        kind=detect_kind(config),
        depends_on=tuple(deps),
        main=_opt("main"),
        candid=_opt("candid"),
        package=_opt("package"),
        wasm=_opt("wasm"),
    )


def units_from_manifest(data: dict[str, Any]) -> list[Unit]:
    canisters = data.get("canisters")
    if not isinstance(canisters, dict):
        raise MalformedInputError("'canisters' must be an object mapping names to configs")

    units: list[Unit] = []
    for name, config in canisters.items():
        if not name:
            raise MalformedInputError("Canister names must be non-empty")
        units.append(unit_from_config(name, config))
    return units


def load_project(project_dir: Path) -> ProjectManifest:
    """Parse ``project_dir/dfx.json`` into a ProjectManifest."""
    project_dir = Path(project_dir).resolve()
    logger.info("Loading project at %s", project_dir)

    data = read_manifest(project_dir)
    units = units_from_manifest(data)

    networks = data.get("networks")
    dfx_version = data.get("dfx")

    return ProjectManifest(
        name=project_dir.name or "unknown",
        path=project_dir,
        units=units,
        dfx_version=dfx_version if isinstance(dfx_version, str) else None,
        networks=list(networks) if isinstance(networks, dict) else [],
        raw=data,
    )
