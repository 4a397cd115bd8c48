"""
sizecompare - proportional size comparison core.

Renders arbitrary entities on a shared pixels-per-meter scale with
human-friendly, magnitude-adaptive labels, and lets the user reorder
them by dragging in either the stage or the side panel.

The package is presentation-agnostic: a UI layer feeds it item records,
layout measurements and pointer events, and draws what it returns.
"""

from sizecompare.version import __version__, __version_display__

__all__ = ["__version__", "__version_display__"]
