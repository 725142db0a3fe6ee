"""Detect inter-canister dependencies from source imports."""

from __future__ import annotations

import logging
import re
import tomllib
from pathlib import Path
from typing import Collection

from canister_graph.models import Unit, UnitKind
from canister_graph.loader.sources import RustSourceFinder

logger = logging.getLogger(__name__)

# import Ledger "canister:ledger";
_MOTOKO_CANISTER_IMPORT = re.compile(r'import\s+\w+\s+"canister:([\w-]+)"')


def parse_motoko_imports(source: str, known: Collection[str]) -> list[str]:
    """Canister names imported via ``canister:<name>`` that are known units."""
    found: list[str] = []
    for name in _MOTOKO_CANISTER_IMPORT.findall(source):
        if name in known and name not in found:
            found.append(name)
    return found


def parse_cargo_dependencies(cargo_toml: str, known: Collection[str]) -> list[str]:
    """Known canister names among a Cargo.toml's dependency keys.

    Crate names are compared with ``-`` and ``_`` treated alike.
    """
    try:
        data = tomllib.loads(cargo_toml)
    except tomllib.TOMLDecodeError as e:
        logger.warning("Invalid Cargo.toml: %s", e)
        return []

    by_crate = {_crate_key(name): name for name in known}
    found: list[str] = []
    for section in ("dependencies", "dev-dependencies", "build-dependencies"):
        deps = data.get(section, {})
        if not isinstance(deps, dict):
            continue
        for key, spec in deps.items():
            crate = spec.get("package", key) if isinstance(spec, dict) else key
            if not isinstance(crate, str):
                continue
            name = by_crate.get(_crate_key(crate))
            if name and name not in found:
                found.append(name)
    return found


def detect_import_dependencies(
    unit: Unit,
    project_dir: Path,
    known: Collection[str],
) -> tuple[str, ...]:
    """Dependencies of ``unit`` found in its sources, excluding itself."""
    others = [name for name in known if name != unit.name]
    project_dir = Path(project_dir)

    if unit.kind is UnitKind.MOTOKO and unit.main:
        main_path = project_dir / unit.main
        if not main_path.is_file():
            return ()
        try:
            source = main_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Failed to parse imports from %s: %s", main_path, e)
            return ()
        return tuple(parse_motoko_imports(source, others))

    if unit.kind is UnitKind.RUST:
        cargo_path = RustSourceFinder.crate_dir(unit, project_dir) / "Cargo.toml"
        if not cargo_path.is_file():
            return ()
        try:
            content = cargo_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read %s: %s", cargo_path, e)
            return ()
        return tuple(parse_cargo_dependencies(content, others))

    return ()


def _crate_key(name: str) -> str:
    return name.replace("-", "_").lower()
