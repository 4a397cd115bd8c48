"""Default configuration values for sizecompare.

Configuration is organized into groups. Every recognized option is listed
here with its default; the typed settings structs in
``sizecompare.config.settings`` read from these groups.
"""

DEFAULT_CONFIG = {
    # --- General ---
    "general": {
        "_label": "General",
        "unit": "cm",  # cm, ft-in
        "chart_title": "Height Comparison",
    },
    # --- Stage ---
    "stage": {
        "_label": "Stage",
        "chart_padding_px": 85,  # reserved for name/height labels above entries
        "reference_height_m": 2.0,  # used when there is nothing valid to fit
        "default_aspect_ratio": 1 / 3,
        "dense_grid_threshold_px": 500,
        "dense_grid_lines": 21,
        "sparse_grid_lines": 11,
        "min_available_px": 1.0,
    },
    # --- Zoom ---
    "zoom": {
        "_label": "Zoom",
        "button_step": 0.2,
        "wheel_step": 0.1,
        "throttle_ms": 66,
    },
    # --- Style ---
    "style": {
        "_label": "Style",
        "background_color": "#ffffff",
        "grid_lines": True,
        "labels": True,
        "shadows": True,
        "theme": "light",  # light, dark
        "chart_height": 600,
        "spacing": 50,
    },
    # --- Item catalog ---
    "catalog": {
        "_label": "Item Catalog",
        "cache_duration_hours": 24,
        "cache_min_limit": 50,
    },
    # --- Logging ---
    "logging": {
        "_label": "Logging",
        "log_level": "INFO",  # DEBUG, INFO, WARNING, ERROR, CRITICAL
        "log_to_file": True,
        "log_retention_days": 30,
        "log_max_size_mb": 50,
        "log_console_output": True,
    },
}
