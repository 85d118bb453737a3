"""Rebar bar-type catalogs with bundled data and external override support.

A bar type carries the nominal diameter and the three bend diameters a
detailer needs.  Catalogs are YAML files:

- Bundled catalogs for metric (EN 1992-1-1) and imperial (ACI 318) bars
- Environment variable override for custom data directories
- User config directory support (~/.config/rebarcad/bartypes/)
- Explicit path override in API calls

Environment Variables:
    REBARCAD_BARTYPE_DATA: Colon-separated (or semicolon on Windows) paths
                           to directories containing custom YAML catalogs.
                           These are searched before bundled data.

Example:
    export REBARCAD_BARTYPE_DATA="/path/to/office/bartypes"
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

__all__ = [
    "REBARCAD_BARTYPE_DATA",
    "CATALOGS",
    "BarType",
    "load_catalog",
    "list_bar_types",
    "get_bar_type",
    "clear_cache",
]

# Environment variable name for custom data paths
REBARCAD_BARTYPE_DATA = "REBARCAD_BARTYPE_DATA"

_BUNDLED_DATA_DIR = Path(__file__).parent / "data" / "bartypes"

CATALOGS = {
    "metric": "Metric bars, bend diameters to EN 1992-1-1 (mm)",
    "imperial": "ASTM bars, bend diameters to ACI 318 (in)",
}

_FIELDS = (
    "diameter",
    "standard_bend_diameter",
    "standard_hook_bend_diameter",
    "stirrup_tie_bend_diameter",
)


@dataclass(frozen=True)
class BarType:
    """A rebar bar type."""
    name: str
    diameter: float
    standard_bend_diameter: float
    standard_hook_bend_diameter: float
    stirrup_tie_bend_diameter: float
    units: str = "mm"

    @property
    def radius(self) -> float:
        return self.diameter / 2.0

    def properties(self) -> Dict[str, float]:
        """The four diameters keyed the way Revit names them."""
        return {
            "BarDiameter": self.diameter,
            "StandardBendDiameter": self.standard_bend_diameter,
            "StandardHookBendDiameter": self.standard_hook_bend_diameter,
            "StirrupTieBendDiameter": self.stirrup_tie_bend_diameter,
        }


def clear_cache() -> None:
    """Forget loaded catalogs.

    The search path is read on every lookup; only parsed files are
    cached, so call this after editing a catalog file.
    """
    _cached_catalog.cache_clear()


def _search_path() -> List[Path]:
    # REBARCAD_BARTYPE_DATA entries, then the user config directory, then bundled data
    sep = ";" if sys.platform == "win32" else ":"
    dirs = [Path(p.strip()).expanduser()
            for p in os.environ.get(REBARCAD_BARTYPE_DATA, "").split(sep) if p.strip()]
    if sys.platform == "win32":
        dirs.append(Path(os.environ.get("APPDATA", "~")).expanduser() / "rebarcad" / "bartypes")
    else:
        dirs.append(Path.home() / ".config" / "rebarcad" / "bartypes")
    dirs.append(_BUNDLED_DATA_DIR)
    return dirs


@lru_cache(maxsize=32)
def _cached_catalog(catalog: str, custom_path_str: Optional[str]) -> Dict[str, Any]:
    if custom_path_str:
        path = Path(custom_path_str)
        if not path.is_file():
            raise FileNotFoundError(f"Custom catalog not found: {path}")
        return _read_catalog(path)

    dirs = _search_path()
    for path in (d / f"{catalog}.yaml" for d in dirs):
        if path.is_file():
            return _read_catalog(path)
    raise FileNotFoundError(
        f"No bar-type catalog found for '{catalog}'.\n"
        f"Searched directories: {[str(d) for d in dirs]}"
    )


def _read_catalog(path: Path) -> Dict[str, Any]:
    """Parse a catalog file and check every bar type carries positive diameters."""
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict) or not isinstance(data.get("bar_types"), dict) \
            or not data["bar_types"]:
        raise ValueError(f"Catalog {path} needs a non-empty 'bar_types' mapping")

    schema_version = str(data.get("schema_version", "1.0"))
    if not schema_version.startswith("1."):
        raise ValueError(f"Catalog {path} has schema version {schema_version}, expected 1.x")

    for name, entry in data["bar_types"].items():
        entry = entry or {}
        missing = [f for f in _FIELDS if f not in entry]
        if missing:
            raise ValueError(f"Bar type '{name}' in {path} is missing {missing}")
        bad = [f for f in _FIELDS
               if isinstance(entry[f], bool) or not isinstance(entry[f], (int, float))
               or entry[f] <= 0]
        if bad:
            raise ValueError(f"Bar type '{name}' in {path} needs positive numbers for {bad}")

    data["_source_path"] = str(path)
    return data


def load_catalog(
    catalog: str = "metric",
    custom_path: Optional[Path] = None
) -> Dict[str, Any]:
    """Load a bar-type catalog.

    Args:
        catalog: Catalog name, e.g. "metric" or "imperial".  Names other
                 than the bundled ones are looked up in the override
                 directories only.
        custom_path: Optional explicit path to YAML file (overrides search)

    Returns:
        Parsed catalog dictionary containing:
            - schema_version: str
            - standard: str
            - units: str
            - bar_types: dict of bar type data
            - _source_path: str (path catalog was loaded from)

    Raises:
        FileNotFoundError: If no catalog file is found
        ValueError: If the catalog has an invalid format
    """
    custom_str = str(custom_path) if custom_path else None
    return _cached_catalog(catalog, custom_str)


def list_bar_types(
    catalog: str = "metric",
    custom_path: Optional[Path] = None
) -> List[str]:
    """Bar type names in catalog order."""
    return list(load_catalog(catalog, custom_path)["bar_types"].keys())


def get_bar_type(
    name: str,
    catalog: str = "metric",
    custom_path: Optional[Path] = None
) -> BarType:
    """Look up a bar type by name.

    Raises:
        KeyError: If the name is not in the catalog
    """
    data = load_catalog(catalog, custom_path)
    bar_types = data["bar_types"]
    if name not in bar_types:
        raise KeyError(
            f"Bar type '{name}' not found in {catalog}.\n"
            f"Available bar types: {list(bar_types.keys())}"
        )
    entry = bar_types[name]
    return BarType(
        name=str(name),
        diameter=float(entry["diameter"]),
        standard_bend_diameter=float(entry["standard_bend_diameter"]),
        standard_hook_bend_diameter=float(entry["standard_hook_bend_diameter"]),
        stirrup_tie_bend_diameter=float(entry["stirrup_tie_bend_diameter"]),
        units=str(data.get("units", "mm")),
    )
