"""Google results-page selector constants with fallbacks.

Each constant is a tuple so callers iterate until a match is found.
"""

# --- One organic result ---
RESULT_CONTAINER_SELECTORS: tuple[str, ...] = (
    "div.g",
    "div.MjjYud",
    "div[data-hveid]",
)

# --- Link wrapping the result title ---
RESULT_LINK_SELECTORS: tuple[str, ...] = (
    "a:has(h3)",
    "div.yuRUbf a",
)

RESULT_TITLE_SELECTORS: tuple[str, ...] = (
    "h3",
)

RESULT_SNIPPET_SELECTORS: tuple[str, ...] = (
    "div.VwiC3b",
    "div[data-sncf]",
    "span.aCOpRe",
)

# --- Cookie consent buttons ---
CONSENT_SELECTORS: tuple[str, ...] = (
    "#L2AGLb",
    'button[id*="accept"]',
    'button[aria-label*="Accept"]',
    'button:has-text("Accept all")',
    'button:has-text("I agree")',
)
