"""codegrab - find source-code snippets in web pages and label their language.

Quick usage::

    from codegrab import scan

    result = scan(html, url="https://example.com/docs/install")
    for block in result.blocks:
        print(block.filename, block.language, block.lines)

Standalone language detection::

    from codegrab import classify_language

    classify_language("def add(a, b):\\n    return a + b")   # "python"
    classify_language("x = 1", "language-ruby")             # "ruby"

Extending the language table::

    from codegrab import LanguageSpec, register_language

    register_language(LanguageSpec("elixir", "ex", aliases=("elixir", "ex")))
"""

from codegrab.config import ScanConfig, load_config, resolve_config
from codegrab.errors import (
    CodegrabError,
    ElementProcessingError,
    InvalidConfigError,
    UnsupportedExportError,
)
from codegrab.export import (
    ExportTarget,
    clipboard_text,
    export_blocks,
    format_file_size,
    write_files,
    write_manifest,
    write_zip,
)
from codegrab.extractors import deduplicate, looks_like_code, normalize_text
from codegrab.filters import SizeBucket, filter_blocks
from codegrab.items import CodeBlock, ScanResult
from codegrab.language import (
    LanguageSpec,
    classify_language,
    register_language,
    supported_languages,
)
from codegrab.scanner import ScanProgress, scan, scan_batched
from codegrab.store import ScanStore
from codegrab.worker import ScanWorker

__version__ = "0.1.0"
__all__ = [
    "CodeBlock",
    "CodegrabError",
    "ElementProcessingError",
    "ExportTarget",
    "InvalidConfigError",
    "LanguageSpec",
    "ScanConfig",
    "ScanProgress",
    "ScanResult",
    "ScanStore",
    "ScanWorker",
    "SizeBucket",
    "UnsupportedExportError",
    "classify_language",
    "clipboard_text",
    "deduplicate",
    "export_blocks",
    "filter_blocks",
    "format_file_size",
    "load_config",
    "looks_like_code",
    "normalize_text",
    "register_language",
    "resolve_config",
    "scan",
    "scan_batched",
    "supported_languages",
    "write_files",
    "write_manifest",
    "write_zip",
]
