"""Built-in configuration defaults registered before any file is read."""

from __future__ import annotations

import copy
from typing import Any, Dict, Final

APP_NAME: Final[str] = "sysfetch"
CONFIG_FILENAME: Final[str] = "config.toml"
ASCII_FILENAME: Final[str] = "ascii"
CONFIG_SUFFIX: Final[str] = ".toml"

DEFAULT_MODULES: Final[tuple[str, ...]] = (
    "hostname",
    "underline:16",
    "cpu",
    "gpu",
    "memory",
    "swap",
    "mounts",
    "host",
    "displays",
    "os",
    "packages",
    "desktop",
    "terminal",
    "shell",
    "editor",
    "uptime",
    "locale",
    "player",
    "initsys",
    "processes",
    "battery",
    "localip",
    "space",
    "colors",
    "bright_colors",
)

DEFAULT_VALUES: Final[Dict[str, Any]] = {
    "modules": list(DEFAULT_MODULES),
    "unknown_as_text": False,
    "separator": " > ",
    "title_color": "bright_magenta",
    "title_bold": True,
    "title_italic": False,
    "decimal_places": 2,
    "inline_values": False,
    "underline_character": "―",
    "color_character": "   ",
    "color_margin": 0,
    "color_use_background": True,
    "use_os_color": True,
    "segment_top": "{color-white}[======------{color-brightmagenta} {name} {color-white}------======]",
    "segment_bottom": "{color-white}[======------{color-brightmagenta} {name_sized_gap} {color-white}------======]",
    "progress_left_border": "[",
    "progress_right_border": "]",
    "progress_progress": "=",
    "progress_empty": " ",
    "progress_target_length": 20,
    "use_ibis": False,
    "use_version_checksums": False,
    "suppress_errors": True,
    "percentage_color_thresholds": ["75:brightgreen", "85:brightyellow", "90:brightred"],
    "ascii": {
        "display": True,
        "colors": ["bright_magenta"],
        "margin": 4,
        "side": "left",
    },
    "hostname": {
        "title": "",
        "format": "{color-title}{username}{color-white}@{color-title}{hostname}",
    },
    "cpu": {
        "title": "CPU",
        "format": "{name} {arch} ({core_count}c {thread_count}t) @ {max_clock_ghz} GHz",
        "remove_trailing_processor": True,
    },
    "gpu": {
        "amd_accuracy": True,
        "ignore_disabled_gpus": True,
        "title": "GPU",
        "format": "{vendor} {model} ({vram})",
    },
    "memory": {
        "title": "Memory",
        "format": "{used} / {max} ({percent})",
    },
    "swap": {
        "title": "Swap",
        "format": "{used} / {total} ({percent})",
    },
    "mounts": {
        "title": "Disk ({mount})",
        "format": "{space_used} used of {space_total} ({percent}) [{filesystem}]",
        "ignore": [],
    },
    "host": {
        "title": "Host",
        "format": "{host} ({chassis})",
        "newline_chassis": False,
        "chassis_title": "Chassis",
        "chassis_format": "{chassis}",
    },
    "displays": {
        "title": "Display ({make} {model})",
        "format": "{width}x{height} @ {refresh_rate}Hz ({name})",
        "scale_size": False,
    },
    "os": {
        "title": "Operating System",
        "format": "{distro} ({kernel})",
        "newline_kernel": False,
        "kernel_title": "Kernel",
        "kernel_format": "Linux {kernel}",
    },
    "packages": {
        "title": "Packages",
        "format": "{count} ({manager})",
        "ignore": [],
    },
    "desktop": {
        "title": "Desktop",
        "format": "{desktop} ({display_type})",
    },
    "terminal": {
        "title": "Terminal",
        "format": "{name} {version}",
    },
    "shell": {
        "title": "Shell",
        "format": "{name} {version}",
        "show_default_shell": False,
    },
    "uptime": {
        "title": "Uptime",
        "format": "{time}",
    },
    "editor": {
        "title": "Editor",
        "format": "{name} {version}",
        "fancy": True,
    },
    "locale": {
        "title": "Locale",
        "format": "{language} ({encoding})",
    },
    "player": {
        "title": "Player ({player})",
        "format": "{track} by {track_artists} ({album}) [{status}]",
        "ignore": [],
    },
    "battery": {
        "title": "Battery {index}",
        "format": "{percentage}%",
    },
    "initsys": {
        "title": "Init System",
        "format": "{name} {version}",
    },
    "processes": {
        "title": "Total Processes",
        "format": "{count}",
    },
    "datetime": {
        "title": "Date/Time",
        "format": "%H:%M:%S on %e %B %G",
    },
    "localip": {
        "title": "Local IP ({interface})",
        "format": "{addr}",
    },
}


def default_tree() -> Dict[str, Any]:
    """Return a fresh, mutable copy of the default configuration tree."""

    return copy.deepcopy(DEFAULT_VALUES)


__all__ = [
    "APP_NAME",
    "ASCII_FILENAME",
    "CONFIG_FILENAME",
    "CONFIG_SUFFIX",
    "DEFAULT_MODULES",
    "DEFAULT_VALUES",
    "default_tree",
]
