"""
pyqt-searchselect: remote-backed searchable select control for PyQt6.

A dropdown that lazily loads its options from an HTTP endpoint, filters them
server-side as the user types, and lets the user pick one item with the
pointer or keyboard.

Architecture:
- select: Framework-agnostic state machine, fetch pipeline, template renderer
- protocols: Host service ABCs, error reporter registry, configuration
- core: PyQt6 debounce timer and background task runner
- services: HTTP item source (requests)
- widgets: SearchableSelectWidget host adapter
"""

__version__ = "0.1.0"

# Public API lives in the subpackages; importing select does not pull in PyQt6
__all__ = [
    "__version__",
]
