"""Pydantic records produced by a scan."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from codegrab.language import extension_for, mime_type_for

_UNSAFE_FILENAME_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f\x7f]')


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CodeBlock(BaseModel):
    """One detected code snippet.  Immutable once created."""

    model_config = ConfigDict(frozen=True)

    # Identity
    id: str
    # Content
    code: str
    language: str
    lines: int
    size: int  # UTF-8 bytes
    # Labels
    context: str
    filename: str
    # Provenance
    source_tag: str
    classes: str = ""
    captured_at: datetime = Field(default_factory=_utcnow)

    @field_validator("id", "language", "context", "filename")
    @classmethod
    def _not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("filename")
    @classmethod
    def _safe_filename(cls, v: str) -> str:
        if _UNSAFE_FILENAME_RE.search(v):
            raise ValueError(f"unsafe characters in filename {v!r}")
        return v

    @field_validator("source_tag")
    @classmethod
    def _lower_tag(cls, v: str) -> str:
        return v.lower()

    @model_validator(mode="after")
    def _check_derived_fields(self) -> CodeBlock:
        if self.lines != len(self.code.split("\n")):
            raise ValueError("lines does not match code")
        if self.size != len(self.code.encode("utf-8")):
            raise ValueError("size does not match code")
        if not self.filename.endswith("." + extension_for(self.language)):
            raise ValueError(
                f"filename {self.filename!r} does not carry the {self.language} extension",
            )
        return self

    @classmethod
    def from_code(cls, code: str, **fields: Any) -> CodeBlock:
        """Build a block computing ``lines`` and ``size`` from *code*."""
        return cls(
            code=code,
            lines=len(code.split("\n")),
            size=len(code.encode("utf-8")),
            **fields,
        )

    @property
    def extension(self) -> str:
        return extension_for(self.language)

    @property
    def mime_type(self) -> str:
        return mime_type_for(self.language)


class ScanResult(BaseModel):
    """The batch of blocks produced by one scan of one page."""

    blocks: list[CodeBlock] = Field(default_factory=list)

    # Page identity
    url: str = ""
    title: str = ""

    # Bookkeeping
    candidates: int = 0  # elements examined
    skipped: dict[str, int] = Field(default_factory=dict)  # reason -> count
    timed_out: bool = False
    warnings: list[str] = Field(default_factory=list)
    scanned_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_empty(self) -> bool:
        """True when nothing was found.  This is a valid outcome, not an error."""
        return not self.blocks

    @property
    def count(self) -> int:
        return len(self.blocks)

    def languages(self) -> dict[str, int]:
        """Block count per language, most common first."""
        counts: dict[str, int] = {}
        for block in self.blocks:
            counts[block.language] = counts.get(block.language, 0) + 1
        return dict(sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])))
