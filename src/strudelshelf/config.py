"""strudelshelf configuration loader.

Priority (high to low):
  1. CLI flags           (handled at call site, not in this module)
  2. Environment variables  (STRUDELSHELF_DB, STRUDELSHELF_GITHUB_API_URL)
  3. Per-project strudelshelf.yaml
  4. Global ~/.strudelshelf/config.yaml
  5. Hardcoded defaults

No config file may contain a GitHub token; it is read from GITHUB_TOKEN only.
All YAML reads use yaml.safe_load(), never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from strudelshelf.discovery.models import SourceFilter

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".strudelshelf"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "strudelshelf.yaml"

_TOKEN_ENV = "GITHUB_TOKEN"

# Key names that look like credentials.
# Matches: api_key, github_token, token, client_secret, password, credentials.
# Does NOT match max_repositories, raw_url_template, timeout.
_CREDENTIAL_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(["github", "search", "catalog", "snippet"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class GitHubCfg:
    """GitHub discovery configuration (strudelshelf.yaml: github:).

    Attributes:
        api_url: Base URL of the GitHub REST API.
        manifest_filename: File name searched for via code search.
        raw_url_template: Raw-content URL built from ``{repository}``,
            ``{branch}`` and ``{path}``.
        max_repositories: Repository cap for remote discovery.
        timeout: Per-request timeout in seconds.
    """

    api_url: str = "https://api.github.com"
    manifest_filename: str = "strudel.json"
    raw_url_template: str = "https://raw.githubusercontent.com/{repository}/{branch}/{path}"
    max_repositories: int = 10
    timeout: float = 30.0


@dataclass
class SearchCfg:
    """Unified search defaults (strudelshelf.yaml: search:)."""

    limit: int = 50
    source: str = SourceFilter.ALL.value


@dataclass
class CatalogCfg:
    """Local catalog location (strudelshelf.yaml: catalog:)."""

    db: str = ".strudelshelf.db"


@dataclass
class SnippetCfg:
    """Snippet generation defaults (strudelshelf.yaml: snippet:)."""

    pattern: str | None = None


@dataclass
class ShelfConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    github: GitHubCfg = field(default_factory=GitHubCfg)
    search: SearchCfg = field(default_factory=SearchCfg)
    catalog: CatalogCfg = field(default_factory=CatalogCfg)
    snippet: SnippetCfg = field(default_factory=SnippetCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_credentials(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any credential-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _CREDENTIAL_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Config '{source}' contains a forbidden key '{full}'.\n"
                        f"  Credentials must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {_TOKEN_ENV}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _validate_http_url(value: str, key: str) -> None:
    if not value.startswith(("http://", "https://")):
        raise ConfigError(f"{key} must be an http:// or https:// URL: '{value}'")


def _validate(cfg: ShelfConfig) -> None:
    _validate_http_url(cfg.github.api_url, "github.api_url")
    _validate_http_url(cfg.github.raw_url_template, "github.raw_url_template")
    if cfg.github.max_repositories < 1:
        raise ConfigError("github.max_repositories must be >= 1")
    if cfg.search.limit < 0:
        raise ConfigError("search.limit must be >= 0")
    try:
        SourceFilter(cfg.search.source)
    except ValueError as exc:
        allowed = ", ".join(f.value for f in SourceFilter)
        raise ConfigError(
            f"search.source must be one of: {allowed} (got '{cfg.search.source}')"
        ) from exc


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' ignored.",
                UserWarning,
                stacklevel=4,
            )


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> ShelfConfig:
    """Build a *ShelfConfig* from a merged raw YAML dict."""
    cfg = ShelfConfig()

    if "github" in data:
        g = data["github"] or {}
        cfg.github = GitHubCfg(
            api_url=str(g.get("api_url", cfg.github.api_url)).rstrip("/"),
            manifest_filename=str(g.get("manifest_filename", cfg.github.manifest_filename)),
            raw_url_template=str(g.get("raw_url_template", cfg.github.raw_url_template)),
            max_repositories=int(g.get("max_repositories", cfg.github.max_repositories)),
            timeout=float(g.get("timeout", cfg.github.timeout)),
        )

    if "search" in data:
        s = data["search"] or {}
        cfg.search = SearchCfg(
            limit=int(s.get("limit", cfg.search.limit)),
            source=str(s.get("source", cfg.search.source)),
        )

    if "catalog" in data:
        c = data["catalog"] or {}
        cfg.catalog = CatalogCfg(db=str(c.get("db", cfg.catalog.db)))

    if "snippet" in data:
        sn = data["snippet"] or {}
        pattern = sn.get("pattern")
        cfg.snippet = SnippetCfg(pattern=str(pattern) if pattern else None)

    return cfg


def _apply_env_overrides(cfg: ShelfConfig) -> ShelfConfig:
    """Apply STRUDELSHELF_* environment variable overrides."""
    if db := os.environ.get("STRUDELSHELF_DB"):
        cfg.catalog.db = db
    if api_url := os.environ.get("STRUDELSHELF_GITHUB_API_URL"):
        cfg.github.api_url = api_url.rstrip("/")
    return cfg


def _read_layer(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config '{path}' must be a YAML mapping.")
    _check_no_credentials(raw, path)
    _warn_unknown_keys(raw, path)
    return raw


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> ShelfConfig:
    """Load and return a merged *ShelfConfig*.

    Applies layers in order: global, per-project, env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *strudelshelf.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If a config file contains credential-like keys or an
            invalid value.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    if global_path.exists():
        merged = _deep_merge(merged, _read_layer(global_path))

    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        merged = _deep_merge(merged, _read_layer(project_cfg_path))

    cfg = _apply_env_overrides(_cfg_from_dict(merged))
    _validate(cfg)
    return cfg


def github_token() -> str | None:
    """Return the GitHub token from the environment, or None for anonymous access."""
    return os.environ.get(_TOKEN_ENV) or None


def write_project_config(project_dir: Path, db: str) -> Path | None:
    """Write a default *strudelshelf.yaml* into *project_dir* unless one exists.

    Returns:
        Path of the written file, or None if a config was already present.
    """
    target = project_dir / _PROJECT_CONFIG_NAME
    if target.exists():
        return None
    defaults = ShelfConfig()
    data = {
        "github": {
            "manifest_filename": defaults.github.manifest_filename,
            "max_repositories": defaults.github.max_repositories,
        },
        "search": {"limit": defaults.search.limit, "source": defaults.search.source},
        "catalog": {"db": db},
    }
    target.write_text(
        "# strudelshelf project configuration.\n"
        "# Set GITHUB_TOKEN in the environment for higher code-search rate limits.\n"
        + yaml.safe_dump(data, sort_keys=False),
        encoding="utf-8",
    )
    return target


def ensure_global_config(
    global_config_path: Path | None = None,
) -> Path:
    """Create ``~/.strudelshelf/config.yaml`` with defaults if it does not exist.

    Creates parent directory with mode 0o700 and the config file with
    mode 0o600 (owner-readable only).
    """
    target = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    if not target.exists():
        content = (
            "# strudelshelf global configuration.\n"
            "# NEVER store tokens here; use the environment:\n"
            "#   export GITHUB_TOKEN=ghp_...\n"
            "\n"
            "github:\n"
            "  api_url: https://api.github.com\n"
            "  max_repositories: 10\n"
            "\n"
            "search:\n"
            "  limit: 50\n"
        )
        target.write_text(content, encoding="utf-8")
        target.chmod(0o600)

    return target
