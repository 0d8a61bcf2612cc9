"""Scan configuration: a validated pydantic model plus YAML profile loading.

A profile file looks like::

    default:
      max_blocks: 50
      skip_domains: ["intranet.example.com"]
    domains:
      docs.python.org:
        selectors: ["div.highlight pre"]
      example.com:
        excludeSelectors: ["nav", ".sidebar", ".comments"]

The ``default`` section is merged with the longest ``domains`` key matching
the page host (exact host or a subdomain of it).  Keys may use either the
snake_case field name or its camelCase alias; unknown keys are rejected.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from codegrab import settings
from codegrab.errors import InvalidConfigError


class ScanConfig(BaseModel):
    """Immutable configuration for one scan.

    Field names are snake_case; the camelCase spellings used by the browser
    extension settings (``maxBlocks``, ``minCodeLength`` ...) are accepted as
    aliases.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    selectors: tuple[str, ...] = settings.SELECTORS
    # Appended after ``selectors``; a comma-separated string is accepted.
    custom_selectors: tuple[str, ...] = Field(default=(), alias="customSelectors")
    exclude_selectors: tuple[str, ...] = Field(
        default=settings.EXCLUDE_SELECTORS, alias="excludeSelectors",
    )
    # Hosts (and their subdomains) that are never scanned.
    skip_domains: tuple[str, ...] = Field(default=(), alias="excludedDomains")
    min_code_length: int = Field(default=settings.MIN_CODE_LENGTH, ge=0, alias="minCodeLength")
    max_blocks: int = Field(default=settings.MAX_BLOCKS, ge=0, alias="maxBlocks")

    # Language scoring acceptance thresholds (scan path / batched path)
    language_threshold: float = Field(
        default=settings.PAGE_SCAN_THRESHOLD, ge=0.0, le=1.0, alias="languageThreshold",
    )
    batch_threshold: float = Field(
        default=settings.BATCH_THRESHOLD, ge=0.0, le=1.0, alias="batchThreshold",
    )

    # Batched processing (worker path only)
    batch_size: int = Field(default=settings.BATCH_SIZE, gt=0, alias="batchSize")
    delay_ms: int = Field(default=settings.BATCH_DELAY_MS, ge=0, alias="delayMs")
    max_processing_time_ms: int = Field(
        default=settings.MAX_PROCESSING_TIME_MS, gt=0, alias="maxProcessingTimeMs",
    )

    # Opt-in: an element whose own class names a language is kept even when
    # the text heuristics would call it prose.
    trust_class_hints: bool = Field(default=False, alias="trustClassHints")

    @field_validator("selectors", "exclude_selectors", "skip_domains", mode="before")
    @classmethod
    def _reject_bare_string(cls, v: Any) -> Any:
        if isinstance(v, str):
            raise ValueError("expected a list of strings, got a single string")
        return v

    @field_validator("custom_selectors", mode="before")
    @classmethod
    def _split_custom(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.split(",")
        return v

    @field_validator("selectors", "custom_selectors", "exclude_selectors")
    @classmethod
    def _strip_selectors(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(s.strip() for s in v if s and s.strip())

    @field_validator("skip_domains")
    @classmethod
    def _normalize_domains(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(d.strip().lower().strip(".") for d in v if d and d.strip())

    @property
    def all_selectors(self) -> tuple[str, ...]:
        """``selectors`` followed by ``custom_selectors``."""
        return self.selectors + self.custom_selectors

    def skips_host(self, host: str) -> bool:
        """True when *host* is listed in ``skip_domains`` (or is a subdomain of one)."""
        return any(host_matches(host, domain) for domain in self.skip_domains)

    def with_overrides(self, **overrides: Any) -> ScanConfig:
        """Return a validated copy with *overrides* applied (``None`` values ignored)."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return resolve_config(data)


def host_matches(host: str, domain: str) -> bool:
    """True when *host* equals *domain* or is one of its subdomains."""
    host = host.lower().rstrip(".")
    domain = domain.lower().strip(".")
    if not host or not domain:
        return False
    return host == domain or host.endswith("." + domain)


def resolve_config(config: ScanConfig | Mapping[str, Any] | None) -> ScanConfig:
    """Coerce *config* into a :class:`ScanConfig`, failing fast on bad input.

    Raises:
        InvalidConfigError: when *config* is not a mapping / ScanConfig or
            when any field fails validation.
    """
    if config is None:
        return ScanConfig()
    if isinstance(config, ScanConfig):
        return config
    if not isinstance(config, Mapping):
        raise InvalidConfigError(
            f"scan config must be a ScanConfig or a mapping, got {type(config).__name__}",
        )
    try:
        return ScanConfig.model_validate(dict(config))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in exc.errors()
        )
        raise InvalidConfigError(f"Invalid scan config: {problems}") from exc


# ---------------------------------------------------------------------------
# YAML profiles
# ---------------------------------------------------------------------------

def _field_names() -> dict[str, str]:
    names: dict[str, str] = {}
    for name, field in ScanConfig.model_fields.items():
        names[name] = name
        if field.alias:
            names[field.alias] = name
    return names


def _section(raw: Any, where: str, known: Mapping[str, str]) -> dict[str, Any]:
    """Validate one profile section and rewrite aliased keys to field names."""
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise InvalidConfigError(f"Profile section {where} must be a mapping")
    unknown = sorted(str(k) for k in raw if k not in known)
    if unknown:
        raise InvalidConfigError(
            f"Unknown scan setting(s) in {where}: {', '.join(unknown)}",
        )
    return {known[key]: value for key, value in raw.items()}


def _best_domain(domains: Mapping[Any, Any], host: str) -> str | None:
    best: str | None = None
    for key in domains:
        if isinstance(key, str) and host_matches(host, key):
            if best is None or len(key.strip(".")) > len(best.strip(".")):
                best = key
    return best


def load_profile(path: str | Path, url: str | None = None) -> dict[str, Any]:
    """Load a YAML profile and return the scan settings that apply to *url*.

    Keys in the result are ScanConfig field names.  Every section is checked,
    not only the one that matched, so a typo under an unrelated domain still
    fails.

    Raises:
        InvalidConfigError: unreadable or malformed YAML, a section that is
            not a mapping, or a key that is not a scan setting.
    """
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise InvalidConfigError(f"Could not read config profile {path}: {exc}") from exc

    if not isinstance(data, Mapping):
        raise InvalidConfigError(f"Config profile {path} must contain a mapping")
    extra = sorted(str(k) for k in data if k not in ("default", "domains"))
    if extra:
        raise InvalidConfigError(
            f"Config profile {path} has unexpected top-level keys: {', '.join(extra)}",
        )

    known = _field_names()
    merged = _section(data.get("default"), "default", known)

    domains = data.get("domains") or {}
    if not isinstance(domains, Mapping):
        raise InvalidConfigError("Profile section domains must be a mapping")
    sections = {
        key: _section(cfg, f"domains.{key}", known) for key, cfg in domains.items()
    }

    host = (urlparse(url).hostname or "") if url else ""
    best = _best_domain(domains, host) if host else None
    if best is not None:
        merged.update(sections[best])
    return merged


def load_config(path: str | Path, url: str | None = None) -> ScanConfig:
    """Load a YAML profile and validate it into a :class:`ScanConfig`."""
    return resolve_config(load_profile(path, url))
