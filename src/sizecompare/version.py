"""Version information for sizecompare."""

__version__ = "0.3.0"
__version_display__ = f"SizeCompare V{__version__}"
