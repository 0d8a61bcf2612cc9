"""Default scan settings for codegrab.

Plain module-level constants; :class:`codegrab.config.ScanConfig` reads its
defaults from here and YAML profiles / CLI flags override them.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Element selection
# ---------------------------------------------------------------------------

# Tried in order.  The list overlaps on purpose: a <pre><code> pair matches
# both "pre code" and "pre", overlap suppression keeps only the first.
SELECTORS: tuple[str, ...] = (
    "pre code",
    "pre",
    ".highlight code",
    ".code-block code",
    ".language-javascript",
    ".language-python",
    ".language-java",
    ".language-css",
    ".language-html",
    ".language-php",
    ".language-sql",
    ".language-json",
    ".language-xml",
    '[class*="lang-"]',
    '[class*="language-"]',
    ".codehilite code",
    ".highlight-source code",
)

# Bare names match ancestor tag names, ".name" matches a class substring.
EXCLUDE_SELECTORS: tuple[str, ...] = (
    "nav",
    "header",
    "footer",
    ".navigation",
    ".menu",
    ".sidebar",
    ".advertisement",
    ".ads",
    "button",
    "input",
    "textarea",
    ".form-control",
)

# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------
MIN_CODE_LENGTH = 10
MAX_BLOCKS = 50

# ---------------------------------------------------------------------------
# Language scoring thresholds
# ---------------------------------------------------------------------------
# The in-page scan is stricter than the batched/worker path.
PAGE_SCAN_THRESHOLD = 0.4
BATCH_THRESHOLD = 0.3

# ---------------------------------------------------------------------------
# Batched (worker) processing
# ---------------------------------------------------------------------------
BATCH_SIZE = 50
BATCH_DELAY_MS = 10
MAX_PROCESSING_TIME_MS = 10_000

# ---------------------------------------------------------------------------
# Result store
# ---------------------------------------------------------------------------
STORE_CAPACITY = 32
