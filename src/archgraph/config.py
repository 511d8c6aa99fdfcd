"""Configuration loading and management for archgraph.

Configuration sources are merged in priority order (lowest to highest):
    1. Defaults (defined in DiagramConfig)
    2. Global config (~/.archgraph.toml)
    3. ``[tool.archgraph]`` in the project's pyproject.toml
    4. Project config (<root>/archgraph.toml, top level or ``[archgraph]``)
    5. Explicit config file
    6. Environment variables (ARCHGRAPH_* prefix)
    7. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(Path("."), scan_dirs=["lib"])
    >>> config.scan_dirs
    ['lib']
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, get_type_hints

from .exceptions import ArchGraphError, ConfigurationError, InvalidConfigError
from .extraction.scanner import DEFAULT_EXCLUDE_DIRS

SUPPORTED_LANGUAGES = ("python", "javascript")

_LANGUAGE_EXTENSIONS = {
    "python": (".py",),
    "javascript": (".js", ".mjs"),
}


@dataclass(frozen=True)
class DiagramConfig:
    """Settings for one project.

    Paths are relative to the project root unless absolute.

    Attributes:
        Source discovery:
            scan_dirs: Directories scanned for source files
            base_dir: Directory module paths are made relative to. When unset:
                the parent of a single scan dir, else the scan dirs' common
                parent, else the project root
            language: "python" or "javascript"; detected from the files when unset
            extensions: File extensions to scan; language default when unset
            exclude_dirs: Directory names never descended into

        Output:
            diagrams_dir: Where artifacts are written
            external_tools: External generators to run as well
                (pyreverse, goplantuml, go-callvis)
            tool_flags: Extra flags passed to every external tool
            project_name: Name passed to tools that need one; detected when unset

        Review:
            entry_point_patterns: fnmatch patterns for symbols or module paths
                expected to have no in-repo importers
            review_artifact: Document whose staging approves structural change
            tracking_file: Fingerprint store; ``<diagrams_dir>/.fingerprints.json``
                when unset

        Performance:
            workers: Parallel extraction workers (None = auto)
    """

    scan_dirs: list[str] = field(default_factory=lambda: ["src"])
    base_dir: Optional[str] = None
    language: Optional[str] = None
    extensions: Optional[list[str]] = None
    exclude_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))

    diagrams_dir: str = "docs/diagrams"
    external_tools: list[str] = field(default_factory=list)
    tool_flags: list[str] = field(default_factory=list)
    project_name: Optional[str] = None

    entry_point_patterns: list[str] = field(
        default_factory=lambda: ["main", "__main__.py", "index.js", "index.mjs"]
    )
    review_artifact: str = "docs/ARCHITECTURE.md"
    tracking_file: Optional[str] = None

    workers: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.scan_dirs:
            raise InvalidConfigError(
                "scan_dirs", self.scan_dirs, "at least one directory is required"
            )
        if self.language is not None and self.language not in SUPPORTED_LANGUAGES:
            raise InvalidConfigError(
                "language", self.language, f"must be one of {', '.join(SUPPORTED_LANGUAGES)}"
            )
        if self.extensions is not None:
            bad = [e for e in self.extensions if not e.startswith(".")]
            if bad or not self.extensions:
                raise InvalidConfigError(
                    "extensions", self.extensions, "extensions must start with '.'"
                )
        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")
        if not self.review_artifact:
            raise InvalidConfigError("review_artifact", self.review_artifact, "must not be empty")
        if not self.diagrams_dir:
            raise InvalidConfigError("diagrams_dir", self.diagrams_dir, "must not be empty")

    # ── derived paths ───────────────────────────────────────────────

    def scan_paths(self, project_root: Path) -> list[Path]:
        return [_absolute(project_root, d) for d in self.scan_dirs]

    def diagrams_path(self, project_root: Path) -> Path:
        return _absolute(project_root, self.diagrams_dir)

    def tracking_path(self, project_root: Path) -> Path:
        if self.tracking_file:
            return _absolute(project_root, self.tracking_file)
        return self.diagrams_path(project_root) / ".fingerprints.json"

    def file_extensions(self, language: str) -> tuple[str, ...]:
        if self.extensions:
            return tuple(self.extensions)
        return _LANGUAGE_EXTENSIONS[language]


def _absolute(project_root: Path, path: str) -> Path:
    p = Path(path)
    return p if p.is_absolute() else (Path(project_root) / p)


def compute_base_dir(config: DiagramConfig, project_root: Path) -> Path:
    """Directory canonical module paths are relative to."""
    project_root = Path(project_root).resolve()
    if config.base_dir:
        return _absolute(project_root, config.base_dir).resolve()
    scan_paths = [p.resolve() for p in config.scan_paths(project_root)]
    if len(scan_paths) == 1:
        return scan_paths[0].parent
    try:
        common = Path(os.path.commonpath([str(p) for p in scan_paths]))
    except ValueError:
        return project_root
    return common if common != Path(common.anchor) else project_root


def detect_language(config: DiagramConfig, project_root: Path) -> str:
    """Configured language, else whichever supported language has more files."""
    if config.language:
        return config.language
    counts = {lang: 0 for lang in SUPPORTED_LANGUAGES}
    skipped = set(config.exclude_dirs)
    for scan_dir in config.scan_paths(project_root):
        for dirpath, dirnames, filenames in os.walk(scan_dir):
            dirnames[:] = [d for d in dirnames if d not in skipped]
            for filename in filenames:
                for lang, exts in _LANGUAGE_EXTENSIONS.items():
                    if filename.endswith(exts):
                        counts[lang] += 1
    return max(SUPPORTED_LANGUAGES, key=lambda lang: (counts[lang], lang == "python"))


def detect_project_name(project_root: Path) -> str:
    """Name from pyproject.toml ``[project]``, setup.cfg ``[metadata]``, or the directory."""
    project_root = Path(project_root)
    pyproject = project_root / "pyproject.toml"
    if pyproject.exists():
        try:
            name = _load_toml_file(pyproject).get("project", {}).get("name")
            if name:
                return str(name)
        except (OSError, ValueError):
            pass
    setup_cfg = project_root / "setup.cfg"
    if setup_cfg.exists():
        parser = configparser.ConfigParser()
        try:
            parser.read(setup_cfg, encoding="utf-8")
            name = parser.get("metadata", "name", fallback="")
            if name:
                return name.strip()
        except configparser.Error:
            pass
    return project_root.resolve().name


def load_config(
    project_root: Optional[Path] = None, config_file: Optional[Path] = None, **overrides
) -> DiagramConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        project_root: Directory holding archgraph.toml / pyproject.toml (default: cwd)
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); None values are ignored

    Returns:
        Validated DiagramConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing, or a key is unknown
        InvalidConfigError: If a value fails validation
    """
    project_root = Path(project_root) if project_root is not None else Path.cwd()
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".archgraph.toml"
    if global_config.exists():
        merged.update(_read_config_source(global_config))

    pyproject = project_root / "pyproject.toml"
    if pyproject.exists():
        try:
            tool_section = _load_toml_file(pyproject).get("tool", {}).get("archgraph", {})
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Invalid pyproject.toml '{pyproject}': {e}")
        merged.update(tool_section)

    project_config = project_root / "archgraph.toml"
    if project_config.exists():
        merged.update(_read_config_source(project_config))

    if config_file is not None:
        config_file = Path(config_file)
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_read_config_source(config_file))

    merged.update(_load_env_vars())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(DiagramConfig)}
    unknown = sorted(set(merged) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration key(s): {', '.join(unknown)}",
            details={"known": ", ".join(sorted(known))},
        )
    return DiagramConfig(**merged)


def _read_config_source(path: Path) -> dict[str, Any]:
    """Settings from an archgraph TOML file: an ``[archgraph]`` table or top-level keys."""
    try:
        data = _load_toml_file(path)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")
    section = data.get("archgraph")
    return dict(section) if isinstance(section, dict) else data


def _load_env_vars() -> dict[str, Any]:
    """Configuration from ARCHGRAPH_* environment variables.

    Examples:
        ARCHGRAPH_SCAN_DIRS=src,lib       list (comma-separated)
        ARCHGRAPH_DIAGRAMS_DIR=docs/arch  str
        ARCHGRAPH_WORKERS=4               int
    """
    type_hints = get_type_hints(DiagramConfig)
    result: dict[str, Any] = {}
    for field_name in DiagramConfig.__dataclass_fields__:
        env_key = f"ARCHGRAPH_{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue
        try:
            parsed = _parse_env_value(env_value, type_hints[field_name])
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")
        if parsed is not None:
            result[field_name] = parsed
    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment string into the field's type.

    Raises:
        ValueError: If the value cannot be parsed
    """
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none = [t for t in args if t is not type(None)]
        if non_none:
            type_hint = non_none[0]

    origin = getattr(type_hint, "__origin__", None)
    if origin is list or type_hint is list:
        return [part.strip() for part in value.split(",") if part.strip()]
    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")
    if type_hint is int:
        return int(value)
    if type_hint is str:
        return value
    return None


def _load_toml_file(path: Path) -> dict:
    """Load a TOML file and return the parsed dict.

    Raises:
        ArchGraphError: If no TOML parser is available
        ValueError: If TOML parsing fails (TOMLDecodeError subclasses ValueError)
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ArchGraphError(
                "TOML support requires Python 3.11+ or the 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
