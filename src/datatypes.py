"""Configuration dataclasses for the sysfetch report."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class TermColor(str, Enum):
    """Named terminal colors accepted by title and ASCII color settings."""

    BLACK = "black"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"
    MAGENTA = "magenta"
    CYAN = "cyan"
    WHITE = "white"
    BRIGHT_BLACK = "bright_black"
    BRIGHT_RED = "bright_red"
    BRIGHT_GREEN = "bright_green"
    BRIGHT_YELLOW = "bright_yellow"
    BRIGHT_BLUE = "bright_blue"
    BRIGHT_MAGENTA = "bright_magenta"
    BRIGHT_CYAN = "bright_cyan"
    BRIGHT_WHITE = "bright_white"

    @classmethod
    def _missing_(cls, value: object) -> Optional["TermColor"]:
        # Accept "brightred" and "bright-red" spellings alongside "bright_red".
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower().replace("-", "_")
        if normalized.startswith("bright") and not normalized.startswith("bright_"):
            normalized = "bright_" + normalized[len("bright"):]
        for member in cls:
            if member.value == normalized:
                return member
        return None


class AsciiSide(str, Enum):
    """Placement of the ASCII art relative to the module lines."""

    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


@dataclass(frozen=True)
class AsciiConfig:
    """ASCII art display options."""

    display: bool
    colors: Tuple[TermColor, ...]
    margin: int
    side: AsciiSide


@dataclass(frozen=True)
class HostnameConfig:
    title: str
    format: str


@dataclass(frozen=True)
class CPUConfig:
    title: str
    format: str
    remove_trailing_processor: bool


@dataclass(frozen=True)
class GPUConfig:
    title: str
    format: str
    amd_accuracy: bool
    ignore_disabled_gpus: bool


@dataclass(frozen=True)
class MemoryConfig:
    title: str
    format: str


@dataclass(frozen=True)
class SwapConfig:
    title: str
    format: str


@dataclass(frozen=True)
class MountConfig:
    """Mount listing; ``ignore`` entries are matched as prefixes."""

    title: str
    format: str
    ignore: Tuple[str, ...]


@dataclass(frozen=True)
class HostConfig:
    title: str
    format: str
    newline_chassis: bool
    chassis_title: str
    chassis_format: str


@dataclass(frozen=True)
class DisplayConfig:
    title: str
    format: str
    scale_size: bool


@dataclass(frozen=True)
class OSConfig:
    title: str
    format: str
    newline_kernel: bool
    kernel_title: str
    kernel_format: str


@dataclass(frozen=True)
class PackagesConfig:
    title: str
    format: str
    ignore: Tuple[str, ...]


@dataclass(frozen=True)
class DesktopConfig:
    title: str
    format: str


@dataclass(frozen=True)
class TerminalConfig:
    title: str
    format: str


@dataclass(frozen=True)
class ShellConfig:
    title: str
    format: str
    show_default_shell: bool


@dataclass(frozen=True)
class UptimeConfig:
    title: str
    format: str


@dataclass(frozen=True)
class BatteryConfig:
    title: str
    format: str


@dataclass(frozen=True)
class LocaleConfig:
    title: str
    format: str


@dataclass(frozen=True)
class PlayerConfig:
    title: str
    format: str
    ignore: Tuple[str, ...]


@dataclass(frozen=True)
class EditorConfig:
    title: str
    format: str
    fancy: bool


@dataclass(frozen=True)
class InitSystemConfig:
    title: str
    format: str


@dataclass(frozen=True)
class ProcessesConfig:
    title: str
    format: str


@dataclass(frozen=True)
class DateTimeConfig:
    """Date/time module; ``format`` holds strftime codes."""

    title: str
    format: str


@dataclass(frozen=True)
class LocalIPConfig:
    title: str
    format: str


@dataclass(frozen=True)
class SysfetchConfig:
    """Fully merged and validated configuration consumed by the report."""

    modules: Tuple[str, ...]
    unknown_as_text: bool
    separator: str
    title_color: TermColor
    title_bold: bool
    title_italic: bool
    decimal_places: int
    inline_values: bool
    underline_character: str
    color_character: str
    color_margin: int
    color_use_background: bool
    use_os_color: bool
    segment_top: str
    segment_bottom: str
    progress_left_border: str
    progress_right_border: str
    progress_progress: str
    progress_empty: str
    progress_target_length: int
    percentage_color_thresholds: Tuple[str, ...]
    use_ibis: bool
    use_version_checksums: bool
    suppress_errors: bool

    ascii: AsciiConfig

    hostname: HostnameConfig
    cpu: CPUConfig
    gpu: GPUConfig
    memory: MemoryConfig
    swap: SwapConfig
    mounts: MountConfig
    host: HostConfig
    displays: DisplayConfig
    os: OSConfig
    packages: PackagesConfig
    desktop: DesktopConfig
    terminal: TerminalConfig
    shell: ShellConfig
    uptime: UptimeConfig
    battery: BatteryConfig
    locale: LocaleConfig
    player: PlayerConfig
    editor: EditorConfig
    initsys: InitSystemConfig
    processes: ProcessesConfig
    datetime: DateTimeConfig
    localip: LocalIPConfig
