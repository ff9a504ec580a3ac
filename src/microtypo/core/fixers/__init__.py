"""Auto-import all fixer modules so their @registry.register decorators fire."""

from microtypo.core.fixers import (  # noqa: F401
    punctuation,
    quotes,
    spacing,
    symbols,
)
