"""Programming-language detection for extracted code blocks.

Per-language behaviour (aliases, file extension, MIME type, signature
patterns) lives in one table of :class:`LanguageSpec` records, evaluated in
registration order.  Detection is two-staged:

1. **Class hints**: ``language-python``, ``lang-js``, ``highlight-sql`` or a
   bare ``python`` token on the element, then on up to three ancestors.
2. **Signature scoring**: each language scores ``matched / total`` over its
   regex signatures; the strictly highest score wins if it clears the
   acceptance threshold, otherwise the text is ``plaintext``.

Ties keep the language registered first, so results never depend on dict
ordering accidents.

Usage::

    from codegrab.language import classify_language

    classify_language("def add(a, b):\\n    return a + b")      # "python"
    classify_language("x", class_hint="hljs language-ts")       # "typescript"
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from codegrab import settings

logger = logging.getLogger(__name__)

PLAINTEXT = "plaintext"
MAX_ANCESTOR_HINTS = 3


@dataclass(frozen=True)
class LanguageSpec:
    """Everything codegrab knows about one language."""

    tag: str
    extension: str
    mime_type: str = "text/plain"
    # Class-name spellings; the tag itself is always accepted
    aliases: tuple[str, ...] = ()
    # Empty for languages only recognised through class hints
    patterns: tuple[re.Pattern[str], ...] = ()


def _p(pattern: str, flags: int = 0) -> re.Pattern[str]:
    return re.compile(pattern, flags)


_M = re.MULTILINE
_I = re.IGNORECASE

# ---------------------------------------------------------------------------
# Built-in table.  Order matters: it is both the alias lookup order and the
# tie-break order for scoring.
# ---------------------------------------------------------------------------

_BUILTIN_LANGUAGES: tuple[LanguageSpec, ...] = (
    LanguageSpec(
        tag="javascript",
        extension="js",
        mime_type="text/javascript",
        aliases=("js", "jsx", "mjs"),
        patterns=(
            _p(r"\bfunction\s+\w+\s*\("),
            _p(r"\b(?:const|let|var)\s+\w+\s*="),
            _p(r"(?:\)|\b\w+)\s*=>\s*[{(\w]"),
            _p(r"\bconsole\.\w+\s*\("),
            _p(r"\b(?:document|window)\.\w+"),
            _p(r"\brequire\s*\(|\bimport\s+.+\s+from\s+['\"]"),
            _p(r"===|!=="),
            _p(r"\bexport\s+(?:default|const|function|class)\b"),
        ),
    ),
    LanguageSpec(
        tag="typescript",
        extension="ts",
        mime_type="text/typescript",
        aliases=("ts", "tsx"),
        patterns=(
            _p(r"\binterface\s+\w+\s*(?:<[^>]*>\s*)?(?:extends\s+[\w, ]+)?\{"),
            _p(r"\btype\s+\w+\s*(?:<[^>]*>\s*)?="),
            _p(r"\benum\s+\w+"),
            _p(r":\s*(?:string|number|boolean|any|void|unknown|never)\b"),
            _p(r"\b(?:public|private|protected|readonly)\s+\w+\??\s*:"),
            _p(r"\b(?:const|let)\s+\w+\s*:\s*[\w<>\[\]]+\s*="),
        ),
    ),
    LanguageSpec(
        tag="python",
        extension="py",
        mime_type="text/x-python",
        aliases=("py", "python3", "py3"),
        patterns=(
            _p(r"\bdef\s+\w+\s*\("),
            _p(
                r"^[ \t]*(?:def|class|if|elif|else|for|while|try|except|finally|with)"
                r"\b[^\n;{}]*:[ \t]*$",
                _M,
            ),
            _p(r":[ \t]*\n[ \t]+\S"),
            _p(r"^[ \t]*(?:import\s+\w+|from\s+[\w.]+\s+import\b)", _M),
            _p(r"\bself\.\w+"),
            _p(r"\bprint\s*\("),
            _p(r"\b(?:None|True|False|elif|lambda)\b|__\w+__"),
        ),
    ),
    LanguageSpec(
        tag="java",
        extension="java",
        mime_type="text/x-java",
        patterns=(
            _p(r"\bpublic\s+(?:final\s+|abstract\s+)?class\s+\w+"),
            _p(r"\bpublic\s+static\s+void\s+main\s*\("),
            _p(r"\bSystem\.out\.print(?:ln|f)?\s*\("),
            _p(
                r"\b(?:private|protected|public)\s+(?:static\s+)?(?:final\s+)?"
                r"[\w<>\[\]]+\s+\w+\s*[;=(]",
            ),
            _p(r"\b(?:extends|implements)\s+\w+"),
            _p(r"^\s*(?:import\s+java\.|package\s+[\w.]+;)", _M),
            _p(r"@Override\b|\bnew\s+[A-Z]\w*(?:<[^>]*>)?\s*\("),
        ),
    ),
    LanguageSpec(
        tag="css",
        extension="css",
        mime_type="text/css",
        patterns=(
            _p(r"[.#][a-zA-Z][\w-]*\s*\{"),
            _p(r"^\s*(?:html|body|div|span|p|a|ul|ol|li|h[1-6]|img|table|button|input)\b[^{;\n]*\{", _M),
            _p(r"(?:^|[{;])\s*-?[a-z]+(?:-[a-z]+)*\s*:\s*[^;{}\n]+;", _M),
            _p(r"@(?:media|keyframes|import|font-face|supports)\b"),
            _p(r"\b\d+(?:\.\d+)?(?:px|em|rem|vh|vw)\b|#[0-9a-fA-F]{3,6}\b"),
            _p(r":(?:hover|focus|active|visited|before|after|first-child|last-child|nth-child)\b"),
        ),
    ),
    LanguageSpec(
        tag="html",
        extension="html",
        mime_type="text/html",
        aliases=("htm", "xhtml", "markup"),
        patterns=(
            _p(r"<!DOCTYPE\s+html", _I),
            _p(r"<(?:html|head|body)[\s>]", _I),
            _p(r"<(?:div|span|p|a|ul|ol|li|section|article|form|table)[\s>]", _I),
            _p(r"<(?:script|style|link|meta)[\s>]", _I),
            _p(r"</\w+>"),
            _p(r"\s(?:class|id|href|src|style)=[\"']"),
        ),
    ),
    LanguageSpec(
        tag="php",
        extension="php",
        mime_type="application/x-httpd-php",
        patterns=(
            _p(r"<\?php"),
            _p(r"\$\w+"),
            _p(r"\$this->|->\w+\s*\("),
            _p(r"\becho\s+"),
            _p(r"\bfunction\s+\w+\s*\(\s*\$|\b(?:public|private|protected)\s+function\b"),
            _p(r"\b(?:require|include)(?:_once)?\b"),
            _p(r"^\s*(?:namespace|use)\s+[\w\\]+;", _M),
        ),
    ),
    LanguageSpec(
        tag="sql",
        extension="sql",
        mime_type="text/x-sql",
        aliases=("mysql", "postgresql", "pgsql", "sqlite", "plsql"),
        patterns=(
            _p(r"\bSELECT\b[\s\S]+?\bFROM\b", _I),
            _p(r"\b(?:INSERT\s+INTO|UPDATE\s+\w+\s+SET|DELETE\s+FROM)\b", _I),
            _p(r"\b(?:CREATE|ALTER|DROP)\s+(?:TABLE|INDEX|VIEW|DATABASE)\b", _I),
            _p(r"\bWHERE\s+\w+", _I),
            _p(r"\bJOIN\s+\w+", _I),
            _p(r"\b(?:GROUP|ORDER)\s+BY\b", _I),
        ),
    ),
    LanguageSpec(
        tag="json",
        extension="json",
        mime_type="application/json",
        aliases=("jsonc", "json5"),
        patterns=(
            _p(r"^\s*[{\[]"),
            _p(r"\"[\w$-]+\"\s*:"),
            _p(r":\s*\"[^\"]*\""),
            _p(r":\s*-?\d+(?:\.\d+)?\s*[,}\n]"),
            _p(r":\s*(?:true|false|null)\b"),
            _p(r"[}\]]\s*$"),
        ),
    ),
    LanguageSpec(
        tag="xml",
        extension="xml",
        mime_type="application/xml",
        aliases=("xsl", "xslt"),
        patterns=(
            _p(r"<\?xml", _I),
            _p(r"<\w+[^>]*>"),
            _p(r"</\w+>"),
            _p(r"\bxmlns(?::\w+)?="),
            _p(r"<!\[CDATA\["),
        ),
    ),
    LanguageSpec(
        tag="cpp",
        extension="cpp",
        mime_type="text/x-c++src",
        aliases=("c++", "cxx", "hpp"),
        patterns=(
            _p(r"#include\s*[<\"]"),
            _p(r"\bstd::"),
            _p(r"\b(?:cout|cin|cerr)\s*(?:<<|>>)"),
            _p(r"\bint\s+main\s*\("),
            _p(r"\bnamespace\s+\w+|\busing\s+namespace\b"),
            _p(r"\b(?:public|private|protected):"),
            _p(r"\btemplate\s*<|\bclass\s+\w+\s*(?::\s*(?:public|private|protected)\s+\w+\s*)?\{"),
        ),
    ),
    LanguageSpec(
        tag="c",
        extension="c",
        mime_type="text/x-c",
        aliases=("h",),
        patterns=(
            _p(r"#include\s*[<\"]"),
            _p(r"\bprintf\s*\("),
            _p(r"\bint\s+main\s*\("),
            _p(r"\bstruct\s+\w+"),
            _p(r"\btypedef\s+"),
            _p(r"\b(?:malloc|calloc|realloc|free)\s*\("),
        ),
    ),
    # Hint-only languages: recognised from class names, never scored
    LanguageSpec("csharp", "cs", "text/x-csharp", ("cs", "c#", "dotnet")),
    LanguageSpec("ruby", "rb", "text/x-ruby", ("rb",)),
    LanguageSpec("bash", "sh", "text/x-sh", ("sh", "shell", "zsh", "console", "shell-session")),
    LanguageSpec("go", "go", "text/x-go", ("golang",)),
    LanguageSpec("rust", "rs", "text/x-rust", ("rs",)),
    LanguageSpec("kotlin", "kt", "text/x-kotlin", ("kt",)),
    LanguageSpec("swift", "swift", "text/x-swift"),
    LanguageSpec("scss", "scss", "text/x-scss", ("sass",)),
    LanguageSpec("yaml", "yaml", "text/x-yaml", ("yml",)),
    LanguageSpec("markdown", "md", "text/markdown", ("md",)),
    LanguageSpec("diff", "diff", "text/x-diff"),
    LanguageSpec("graphql", "graphql", "application/graphql", ("gql",)),
    LanguageSpec("lua", "lua", "text/x-lua"),
    LanguageSpec("perl", "pl", "text/x-perl", ("pl",)),
    LanguageSpec("r", "r", "text/x-r"),
    LanguageSpec("makefile", "mk", "text/x-makefile", ("mk",)),
    LanguageSpec("objectivec", "m", "text/x-objectivec", ("objc", "objective-c")),
    LanguageSpec("vbnet", "vb", "text/x-vb", ("vb",)),
    LanguageSpec(PLAINTEXT, "txt", "text/plain", ("txt",)),
)

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_registry: dict[str, LanguageSpec] = {}
# alias -> (canonical tag, compiled prefix pattern), in registration order
_aliases: dict[str, tuple[str, re.Pattern[str]]] = {}


def _alias_pattern(alias: str) -> re.Pattern[str]:
    # "language-c" must not fire inside "language-cpp" / "language-c++"
    return re.compile(rf"(?:language|lang|highlight)-{re.escape(alias)}(?![\w+#])")


def _rebuild_aliases() -> None:
    _aliases.clear()
    for spec in _registry.values():
        for alias in (spec.tag, *spec.aliases):
            alias = alias.lower()
            if alias not in _aliases:
                _aliases[alias] = (spec.tag, _alias_pattern(alias))


def register_language(spec: LanguageSpec, *, replace: bool = False) -> None:
    """Add *spec* to the language table (appended to the evaluation order).

    Raises:
        ValueError: if the tag is already registered and *replace* is False.
    """
    if spec.tag in _registry and not replace:
        raise ValueError(f"language {spec.tag!r} is already registered")
    _registry[spec.tag] = spec
    _rebuild_aliases()


def unregister_language(tag: str) -> None:
    """Remove *tag* from the table. Built-ins can be removed too."""
    if tag == PLAINTEXT:
        raise ValueError("plaintext cannot be unregistered")
    _registry.pop(tag, None)
    _rebuild_aliases()


def reset_languages() -> None:
    """Restore the built-in table. Primarily for use in tests."""
    _registry.clear()
    for spec in _BUILTIN_LANGUAGES:
        _registry[spec.tag] = spec
    _rebuild_aliases()


reset_languages()


def get_language(tag: str) -> LanguageSpec | None:
    return _registry.get(tag)


def supported_languages() -> list[str]:
    """Return all registered tags in evaluation order."""
    return list(_registry)


def extension_for(language: str) -> str:
    """File extension (no dot) for *language*; unknown tags map to ``txt``."""
    spec = _registry.get(language)
    return spec.extension if spec else "txt"


def mime_type_for(language: str) -> str:
    """MIME type for *language*; unknown tags map to ``text/plain``."""
    spec = _registry.get(language)
    return spec.mime_type if spec else "text/plain"


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

def _class_string(value: str | Iterable[str] | None) -> str:
    """Accept a class attribute as a string or as BeautifulSoup's list form."""
    if not value:
        return ""
    if isinstance(value, str):
        return value
    return " ".join(str(v) for v in value)


def language_from_class(class_str: str | Iterable[str] | None) -> str | None:
    """Return the canonical tag hinted by a class attribute, or ``None``."""
    lowered = _class_string(class_str).lower()
    if not lowered.strip():
        return None
    tokens = set(lowered.split())
    for alias, (tag, pattern) in _aliases.items():
        if pattern.search(lowered) or alias in tokens:
            return tag
    return None


def score_languages(text: str) -> dict[str, float]:
    """Return ``matched / total`` signature scores for every scored language."""
    scores: dict[str, float] = {}
    for tag, spec in _registry.items():
        if not spec.patterns:
            continue
        matches = sum(1 for pattern in spec.patterns if pattern.search(text))
        scores[tag] = matches / len(spec.patterns)
    return scores


def classify_language(
    text: str,
    class_hint: str | Iterable[str] | None = "",
    ancestor_classes: Sequence[str | Iterable[str] | None] = (),
    *,
    threshold: float = settings.PAGE_SCAN_THRESHOLD,
) -> str:
    """Return the language tag for *text*; never raises.

    Args:
        text:             Normalized code text.
        class_hint:       The element's class attribute.
        ancestor_classes: Class attributes of the enclosing elements, nearest
                          first; only the first three are consulted.
        threshold:        Minimum score a language must *exceed* to win.
                          0.4 on the page-scan path, 0.3 on the batched path.

    Returns:
        A registered tag, or ``"plaintext"``.
    """
    try:
        hinted = language_from_class(class_hint)
        if hinted:
            return hinted
        for ancestor in list(ancestor_classes)[:MAX_ANCESTOR_HINTS]:
            hinted = language_from_class(ancestor)
            if hinted:
                return hinted

        if not isinstance(text, str) or not text:
            return PLAINTEXT

        best_lang = PLAINTEXT
        best_score = 0.0
        for tag, score in score_languages(text).items():
            if score > best_score:
                best_lang, best_score = tag, score
        return best_lang if best_score > threshold else PLAINTEXT
    except Exception as exc:
        logger.debug("Language detection failed: %s", exc)
        return PLAINTEXT
