"""Export detected code blocks: files on disk, a zip archive, a JSON manifest.

GitHub Gist, CodePen and JSFiddle are declared targets that are not
implemented; asking for them raises :class:`UnsupportedExportError`.
"""

from __future__ import annotations

import json
import logging
import zipfile
from collections.abc import Iterable, Sequence
from enum import Enum
from pathlib import Path

from codegrab.errors import UnsupportedExportError
from codegrab.extractors.context import unique_filename
from codegrab.items import CodeBlock, ScanResult

logger = logging.getLogger(__name__)

_SIZE_UNITS: tuple[str, ...] = ("B", "KB", "MB", "GB")
CLIPBOARD_SEPARATOR = "\n\n"


class ExportTarget(str, Enum):
    FILES = "files"
    ZIP = "zip"
    JSON = "json"
    GIST = "gist"
    CODEPEN = "codepen"
    JSFIDDLE = "jsfiddle"


_UNSUPPORTED = frozenset({ExportTarget.GIST, ExportTarget.CODEPEN, ExportTarget.JSFIDDLE})


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def format_file_size(num_bytes: int) -> str:
    """Human-readable size: ``0 B``, ``512 B``, ``1.5 KB``, ``2 MB``."""
    if num_bytes <= 0:
        return "0 B"
    value = float(num_bytes)
    exponent = 0
    while value >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[exponent]}"


def clipboard_text(blocks: Iterable[CodeBlock]) -> str:
    """Code of *blocks* joined by blank lines, ready to copy."""
    return CLIPBOARD_SEPARATOR.join(block.code for block in blocks)


def _archive_names(blocks: Sequence[CodeBlock]) -> list[str]:
    # Filenames are unique per scan; blocks from several scans may collide.
    used: set[str] = set()
    return [unique_filename(block.filename, used) for block in blocks]


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------

def write_files(blocks: Sequence[CodeBlock], out_dir: str | Path) -> list[Path]:
    """Write each block to ``out_dir/<filename>``; return the written paths."""
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for block, name in zip(blocks, _archive_names(blocks), strict=True):
        path = out / name
        path.write_text(block.code, encoding="utf-8")
        written.append(path)
    logger.info("Wrote %d code files to %s", len(written), out)
    return written


def write_zip(blocks: Sequence[CodeBlock], path: str | Path) -> Path:
    """Write all blocks into a single deflate-compressed zip archive."""
    archive = Path(path)
    archive.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for block, name in zip(blocks, _archive_names(blocks), strict=True):
            zf.writestr(name, block.code)
    logger.info("Wrote %d code files to %s", len(blocks), archive)
    return archive


def write_manifest(result: ScanResult, path: str | Path) -> Path:
    """Dump *result* (blocks included) as pretty-printed JSON."""
    manifest = Path(path)
    manifest.parent.mkdir(parents=True, exist_ok=True)
    manifest.write_text(
        json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return manifest


def export_blocks(
    blocks: Sequence[CodeBlock],
    target: ExportTarget | str,
    out: str | Path,
) -> list[Path]:
    """Export *blocks* to *target*, writing under/at *out*.

    ``files`` treats *out* as a directory; ``zip`` and ``json`` as a file
    path.

    Raises:
        UnsupportedExportError: for ``gist``, ``codepen`` and ``jsfiddle``.
        ValueError:             for an unknown *target* name.
    """
    target = ExportTarget(target)
    if target in _UNSUPPORTED:
        raise UnsupportedExportError(f"Export to {target.value} is not supported yet")
    if target is ExportTarget.FILES:
        return write_files(blocks, out)
    if target is ExportTarget.ZIP:
        return [write_zip(blocks, out)]
    return [write_manifest(ScanResult(blocks=list(blocks)), out)]
