"""Unipilot configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call sites, not in this module)
  2. Environment variables  (UNIPILOT_GENERATION_MODEL, UNIPILOT_SNAPSHOT_PATH,
     UNIPILOT_LOG_LEVEL)
  3. Per-project unipilot.yaml  (current working directory)
  4. Global ~/.unipilot/config.yaml  (model defaults only, no API keys)
  5. Hardcoded defaults

Global config must never contain API keys; use environment variables instead.
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

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".unipilot"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "unipilot.yaml"

# Matches api_key, apikey, api-key, api_secret, *_token, token, *_secret, secret,
# password, passwd, credential(s). Does NOT match max_tokens.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["generation", "chunking", "retrieval", "storage", "ingest", "logging"]
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class GenerationCfg:
    """Completion model configuration (unipilot.yaml: generation:)."""

    model: str = "openai/gpt-4o-mini"
    max_tokens: int = 800
    temperature: float = 0.3
    timeout_seconds: float = 15.0
    num_retries: int = 2


@dataclass
class ChunkingCfg:
    """Chunk window configuration (unipilot.yaml: chunking:).

    Attributes:
        chunk_size: Target window size in characters.
        chunk_overlap: Characters shared by consecutive windows.
        min_chunk_length: Trimmed windows this short or shorter are dropped.
        min_substantial_length: Chunks shorter than this are not stored.
        break_threshold: Fraction of ``chunk_size`` a sentence break must lie
            beyond for the window to end there instead of at the hard cutoff.
    """

    chunk_size: int = 2000
    chunk_overlap: int = 200
    min_chunk_length: int = 50
    min_substantial_length: int = 100
    break_threshold: float = 0.5


@dataclass
class RetrievalCfg:
    """Scoring and context assembly configuration (unipilot.yaml: retrieval:)."""

    top_k: int = 5
    name_bonus: int = 10
    topic_bonus: int = 5
    context_budget: int = 8_000
    general_info_chars: int = 500
    excerpt_chars: int = 200
    section_chars: int = 1_000


@dataclass
class StorageCfg:
    """Where PDFs are read from and where the document snapshot is written."""

    snapshot_path: str = "processed/documents.json"
    data_dir: str = "data"


@dataclass
class SourceMapping:
    """One configured prospectus (unipilot.yaml: ingest.sources[])."""

    file: str
    institution: str | None = None


@dataclass
class IngestCfg:
    """Bulk ingestion configuration (unipilot.yaml: ingest:)."""

    batch_size: int = 5
    batch_pause_seconds: float = 1.0
    sources: list[SourceMapping] = field(default_factory=list)


@dataclass
class LoggingCfg:
    level: str = "INFO"


@dataclass
class UnipilotConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    generation: GenerationCfg = field(default_factory=GenerationCfg)
    chunking: ChunkingCfg = field(default_factory=ChunkingCfg)
    retrieval: RetrievalCfg = field(default_factory=RetrievalCfg)
    storage: StorageCfg = field(default_factory=StorageCfg)
    ingest: IngestCfg = field(default_factory=IngestCfg)
    logging: LoggingCfg = field(default_factory=LoggingCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Global config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {str(k).upper().replace('-', '_')}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}'; ignored.",
                UserWarning,
                stacklevel=4,
            )


def _validate(cfg: UnipilotConfig) -> None:
    """Raise ConfigError for values the pipeline cannot work with."""
    ch = cfg.chunking
    if ch.chunk_size < 1:
        raise ConfigError(f"chunking.chunk_size must be >= 1, got {ch.chunk_size}")
    if ch.chunk_overlap < 0:
        raise ConfigError(f"chunking.chunk_overlap must be >= 0, got {ch.chunk_overlap}")
    if not 0.0 <= ch.break_threshold <= 1.0:
        raise ConfigError(
            f"chunking.break_threshold must be in [0.0, 1.0], got {ch.break_threshold}"
        )
    r = cfg.retrieval
    if r.top_k < 1:
        raise ConfigError(f"retrieval.top_k must be >= 1, got {r.top_k}")
    if r.context_budget < 1:
        raise ConfigError(f"retrieval.context_budget must be >= 1, got {r.context_budget}")
    if cfg.generation.timeout_seconds <= 0:
        raise ConfigError(
            f"generation.timeout_seconds must be > 0, got {cfg.generation.timeout_seconds}"
        )
    if cfg.ingest.batch_size < 1:
        raise ConfigError(f"ingest.batch_size must be >= 1, got {cfg.ingest.batch_size}")


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


def _cfg_from_dict(data: dict[str, Any]) -> UnipilotConfig:
    """Build a *UnipilotConfig* from a merged raw YAML dict."""
    cfg = UnipilotConfig()

    if "generation" in data:
        g = data["generation"]
        cfg.generation = GenerationCfg(
            model=str(g.get("model", cfg.generation.model)),
            max_tokens=int(g.get("max_tokens", cfg.generation.max_tokens)),
            temperature=float(g.get("temperature", cfg.generation.temperature)),
            timeout_seconds=float(
                g.get("timeout_seconds", cfg.generation.timeout_seconds)
            ),
            num_retries=int(g.get("num_retries", cfg.generation.num_retries)),
        )

    if "chunking" in data:
        c = data["chunking"]
        cfg.chunking = ChunkingCfg(
            chunk_size=int(c.get("chunk_size", cfg.chunking.chunk_size)),
            chunk_overlap=int(c.get("chunk_overlap", cfg.chunking.chunk_overlap)),
            min_chunk_length=int(c.get("min_chunk_length", cfg.chunking.min_chunk_length)),
            min_substantial_length=int(
                c.get("min_substantial_length", cfg.chunking.min_substantial_length)
            ),
            break_threshold=float(c.get("break_threshold", cfg.chunking.break_threshold)),
        )

    if "retrieval" in data:
        r = data["retrieval"]
        cfg.retrieval = RetrievalCfg(
            top_k=int(r.get("top_k", cfg.retrieval.top_k)),
            name_bonus=int(r.get("name_bonus", cfg.retrieval.name_bonus)),
            topic_bonus=int(r.get("topic_bonus", cfg.retrieval.topic_bonus)),
            context_budget=int(r.get("context_budget", cfg.retrieval.context_budget)),
            general_info_chars=int(
                r.get("general_info_chars", cfg.retrieval.general_info_chars)
            ),
            excerpt_chars=int(r.get("excerpt_chars", cfg.retrieval.excerpt_chars)),
            section_chars=int(r.get("section_chars", cfg.retrieval.section_chars)),
        )

    if "storage" in data:
        s = data["storage"]
        cfg.storage = StorageCfg(
            snapshot_path=str(s.get("snapshot_path", cfg.storage.snapshot_path)),
            data_dir=str(s.get("data_dir", cfg.storage.data_dir)),
        )

    if "ingest" in data:
        i = data["ingest"]
        sources: list[SourceMapping] = []
        for s in i.get("sources", []) or []:
            if isinstance(s, str):
                sources.append(SourceMapping(file=s))
            else:
                sources.append(
                    SourceMapping(file=str(s["file"]), institution=s.get("institution"))
                )
        cfg.ingest = IngestCfg(
            batch_size=int(i.get("batch_size", cfg.ingest.batch_size)),
            batch_pause_seconds=float(
                i.get("batch_pause_seconds", cfg.ingest.batch_pause_seconds)
            ),
            sources=sources,
        )

    if "logging" in data:
        cfg.logging = LoggingCfg(level=str(data["logging"].get("level", cfg.logging.level)))

    return cfg


def _apply_env_overrides(cfg: UnipilotConfig) -> UnipilotConfig:
    """Apply UNIPILOT_* environment variable overrides."""
    if model := os.environ.get("UNIPILOT_GENERATION_MODEL"):
        cfg.generation.model = model
    if snapshot := os.environ.get("UNIPILOT_SNAPSHOT_PATH"):
        cfg.storage.snapshot_path = snapshot
    if level := os.environ.get("UNIPILOT_LOG_LEVEL"):
        cfg.logging.level = level
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> UnipilotConfig:
    """Load and return a merged *UnipilotConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *unipilot.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If global config contains API-key-like fields, or a value
            is out of range.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    if global_path.exists():
        raw_global = yaml.safe_load(global_path.read_text(encoding="utf-8")) or {}
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = yaml.safe_load(project_cfg_path.read_text(encoding="utf-8")) or {}
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _apply_env_overrides(_cfg_from_dict(merged))
    _validate(cfg)
    return cfg
