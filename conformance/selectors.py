"""
Selector chains for the UI affordances the validators look at.

Each entry is an ordered fallback list handed to
BaseDriver.match_first, which backs locate_first_matching,
observe and grid_column_count.
"""

MENU_TRIGGER = [
    "[data-testid='mobile-menu-toggle']",
    "button[aria-label*='menu' i]",
    ".hamburger",
    ".menu-toggle",
    ".navbar-toggler",
]

TAB_BAR = [
    "[data-testid='mobile-navigation']",
    "[data-testid='bottom-nav']",
    "nav.fixed.bottom-0",
    ".bottom-nav",
    ".mobile-nav",
]

PERSISTENT_NAV = [
    "[data-testid='desktop-navigation']",
    "header nav",
    "aside nav",
    "nav[role='navigation']",
    "nav",
]

MODAL = [
    "[role='dialog']",
    "[data-testid*='modal']",
    ".modal",
]

GRID = [
    "[data-testid*='grid']",
    ".meal-plan-grid",
    ".grid",
]

INTERACTIVE = "button, a[href], [role='button'], input[type='submit'], input[type='checkbox']"

# Headings only, anchored, so prices, ids and counts containing 404 do not match
NOT_FOUND = [
    "h1:text-matches('^\\s*404\\b')",
    "h2:text-matches('^\\s*404\\b')",
    "text=/page not found/i",
]

ERROR_BANNER = [
    "[role='alert'].error",
    ".error-message",
    ".alert-error",
]

EMAIL_INPUT = [
    "input[name='email']",
    "input[type='email']",
]

PASSWORD_INPUT = [
    "input[name='password']",
    "input[type='password']",
]

SUBMIT_BUTTON = [
    "button[type='submit']",
    "button:has-text('Sign In')",
    "button:has-text('Log In')",
]

LOGIN_ERROR = [
    "[role='alert']",
    ".error-message",
]
