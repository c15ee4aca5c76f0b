"""Configuration file loader for catalogkeeper.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``catalogkeeper.toml``: settings under ``[catalogkeeper]`` table
- ``pyproject.toml``: settings under ``[tool.catalogkeeper]`` table

Discovery order:

1. Explicit path from ``--config`` or ``CATALOGKEEPER_CONFIG``
2. ``catalogkeeper.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.catalogkeeper]`` section

Configuration precedence: defaults < config file < CLI args.

Typical usage::

    config = load_config()  # Auto-discover
    config = load_config(Path("custom.toml"))  # Explicit path

Example (``catalogkeeper.toml``)::

    [catalogkeeper]
    version_catalog_path = "gradle/libs.versions.toml"
    policy = "stability-level"
    excluded_keys = ["kotlin"]
    excluded_libraries = ["com.example", "org.acme:legacy"]

    [[catalogkeeper.repositories]]
    url = "https://maven.example.com/releases"
    user = "ci"
    password = "secret"
    include = ["com.example.**"]
"""

from __future__ import annotations


import tomli
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple
from dataclasses import dataclass, field

from catalogkeeper.exceptions import ConfigError
from catalogkeeper.models.dependency import Dependency, Plugin
from catalogkeeper.models.repository import (
    ComponentFilter,
    PackageSpec,
    Repository,
    default_library_repositories,
    default_plugin_repositories,
)
from catalogkeeper.utils.logger import get_logger
from catalogkeeper.constants import (
    DEFAULT_ONLY_CHECK_STATIC_VERSIONS,
    DEFAULT_POLICY,
    DEFAULT_VERSION_CATALOG_PATH,
)

logger = get_logger("config")

CONFIG_FILE_NAME = "catalogkeeper.toml"
CONFIG_SECTION = "catalogkeeper"


@dataclass
class CatalogKeeperConfig:
    """Parsed and validated catalogkeeper configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        version_catalog_path: Catalog checked when none is given on the
            command line.
        repositories: Repositories searched for libraries, in priority order.
        plugin_repositories: Repositories searched for plugins, in priority
            order.
        excluded_keys: Catalog keys never checked.
        excluded_libraries: ``group`` or ``group:name`` specs of libraries
            never checked; groups may use ``*`` and ``**`` globs.
        excluded_plugins: Plugin ids never checked.
        policy: Name of the update policy, or ``None`` for no policy.
        only_check_static_versions: Skip dependencies not pinned to a single
            static version.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    version_catalog_path: str = DEFAULT_VERSION_CATALOG_PATH
    repositories: Tuple[Repository, ...] = field(
        default_factory=default_library_repositories
    )
    plugin_repositories: Tuple[Repository, ...] = field(
        default_factory=default_plugin_repositories
    )
    excluded_keys: FrozenSet[str] = frozenset()
    excluded_libraries: Tuple[PackageSpec, ...] = ()
    excluded_plugins: FrozenSet[str] = frozenset()
    policy: Optional[str] = DEFAULT_POLICY
    only_check_static_versions: bool = DEFAULT_ONLY_CHECK_STATIC_VERSIONS

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def is_excluded(self, key: str, dependency: Dependency) -> bool:
        """Return whether the configuration excludes *dependency* under *key*."""
        if key in self.excluded_keys:
            return True
        if isinstance(dependency, Plugin):
            return dependency.id in self.excluded_plugins
        return any(spec.matches(dependency) for spec in self.excluded_libraries)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Credentials are left out.
        """
        return {
            "version_catalog_path": self.version_catalog_path,
            "repositories": [repo.url for repo in self.repositories],
            "plugin_repositories": [repo.url for repo in self.plugin_repositories],
            "excluded_keys": sorted(self.excluded_keys),
            "excluded_libraries": [
                f"{spec.group}:{spec.name}" if spec.name else spec.group
                for spec in self.excluded_libraries
            ],
            "excluded_plugins": sorted(self.excluded_plugins),
            "policy": self.policy,
            "only_check_static_versions": self.only_check_static_versions,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    own_file = cwd / CONFIG_FILE_NAME
    if own_file.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, own_file)
        return own_file

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_section(pyproject_toml):
        logger.debug("Found [tool.%s] in pyproject.toml", CONFIG_SECTION)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_section(path: Path) -> bool:
    """Check whether pyproject.toml holds a ``[tool.catalogkeeper]`` table.

    An unreadable pyproject.toml counts as not configured.
    """
    try:
        raw = _read_toml(path)
    except ConfigError as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return False
    return CONFIG_SECTION in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> CatalogKeeperConfig:
    """Load and validate catalogkeeper configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`CatalogKeeperConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return CatalogKeeperConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get(CONFIG_SECTION, {})
    else:
        section = raw.get(CONFIG_SECTION, {})

    if not section:
        logger.debug("Config file found but no %s section, using defaults", CONFIG_SECTION)
        return CatalogKeeperConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as fh:
            return tomli.load(fh)
    except tomli.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


# ---------------------------------------------------------------------------
# Section parsing
# ---------------------------------------------------------------------------

_KNOWN_KEYS = {
    "version_catalog_path",
    "repositories",
    "plugin_repositories",
    "excluded_keys",
    "excluded_libraries",
    "excluded_plugins",
    "policy",
    "only_check_static_versions",
}

_REPOSITORY_KEYS = {"url", "user", "password", "include", "exclude"}


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> CatalogKeeperConfig:
    """Validate a ``[catalogkeeper]`` or ``[tool.catalogkeeper]`` table.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    unknown = set(section) - _KNOWN_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    config = CatalogKeeperConfig()

    if "version_catalog_path" in section:
        config.version_catalog_path = _expect(
            section, "version_catalog_path", str, config_path
        )

    if "policy" in section:
        config.policy = _expect(section, "policy", str, config_path)

    if "only_check_static_versions" in section:
        config.only_check_static_versions = _expect(
            section, "only_check_static_versions", bool, config_path
        )

    if "excluded_keys" in section:
        config.excluded_keys = frozenset(
            _string_list(section, "excluded_keys", config_path)
        )

    if "excluded_plugins" in section:
        config.excluded_plugins = frozenset(
            _string_list(section, "excluded_plugins", config_path)
        )

    if "excluded_libraries" in section:
        config.excluded_libraries = tuple(
            _package_spec(item, "excluded_libraries", config_path)
            for item in _expect(section, "excluded_libraries", list, config_path)
        )

    for option in ("repositories", "plugin_repositories"):
        if option in section:
            entries = _expect(section, option, list, config_path)
            setattr(
                config,
                option,
                tuple(_repository(entry, option, config_path) for entry in entries),
            )

    return config


def _expect(section: Dict[str, Any], option: str, kind: type, config_path: str) -> Any:
    value = section[option]
    if not isinstance(value, kind):
        raise ConfigError(
            f"{option} must be a {_type_name(kind)}, got {type(value).__name__}",
            config_path=config_path,
            option=option,
        )
    return value


def _type_name(kind: type) -> str:
    return {bool: "boolean", str: "string", list: "list", dict: "table"}.get(
        kind, kind.__name__
    )


def _string_list(section: Dict[str, Any], option: str, config_path: str) -> List[str]:
    values = _expect(section, option, list, config_path)
    if not all(isinstance(value, str) for value in values):
        raise ConfigError(
            f"{option} must be a list of strings",
            config_path=config_path,
            option=option,
        )
    return values


def _package_spec(item: Any, option: str, config_path: str) -> PackageSpec:
    try:
        if isinstance(item, str):
            return PackageSpec.parse(item)
        if isinstance(item, dict) and isinstance(item.get("group"), str):
            name = item.get("name")
            if name is not None and not isinstance(name, str):
                raise ConfigError(
                    f"{option}: 'name' must be a string",
                    config_path=config_path,
                    option=option,
                )
            return PackageSpec(item["group"], name)
    except ValueError as exc:
        raise ConfigError(
            f"{option}: invalid pattern: {exc}",
            config_path=config_path,
            option=option,
        ) from exc

    raise ConfigError(
        f"{option} entries must be 'group[:name]' strings or tables with a 'group'",
        config_path=config_path,
        option=option,
    )


def _repository(entry: Any, option: str, config_path: str) -> Repository:
    if isinstance(entry, str):
        return Repository(entry)

    if not isinstance(entry, dict) or not isinstance(entry.get("url"), str):
        raise ConfigError(
            f"{option} entries must be URLs or tables with a 'url'",
            config_path=config_path,
            option=option,
        )

    unknown = set(entry) - _REPOSITORY_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown {option} keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
            option=option,
        )

    for credential in ("user", "password"):
        if credential in entry and not isinstance(entry[credential], str):
            raise ConfigError(
                f"{option}: '{credential}' must be a string",
                config_path=config_path,
                option=option,
            )

    includes = [
        _package_spec(item, option, config_path) for item in entry.get("include", [])
    ]
    excludes = [
        _package_spec(item, option, config_path) for item in entry.get("exclude", [])
    ]
    component_filter = (
        ComponentFilter(includes=tuple(includes), excludes=tuple(excludes))
        if includes or excludes
        else None
    )

    return Repository(
        url=entry["url"],
        user=entry.get("user"),
        password=entry.get("password"),
        component_filter=component_filter,
    )
