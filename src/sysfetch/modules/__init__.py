"""Module registry: maps identifiers from the ``modules`` list to implementations."""

from __future__ import annotations

from typing import Dict, NamedTuple, Optional, Type

from .base import Module, ModuleError
from .displays import DisplayInfo, DisplayProbeError, parse_xrandr
from .hardware import (
    BatteryInfo,
    CPUInfo,
    GPUInfo,
    HostInfo,
    MemoryInfo,
    MountInfo,
    SwapInfo,
)
from .session import DesktopInfo, EditorInfo, PlayerInfo, ShellInfo, TerminalInfo
from .system import (
    DateTimeInfo,
    HostnameInfo,
    InitSystemInfo,
    LocaleInfo,
    LocalIPInfo,
    OSInfo,
    PackagesInfo,
    ProcessesInfo,
    UptimeInfo,
    os_title_sequence,
)

MODULES: Dict[str, Type[Module]] = {
    module.identifier: module
    for module in (
        HostnameInfo,
        CPUInfo,
        GPUInfo,
        MemoryInfo,
        SwapInfo,
        MountInfo,
        HostInfo,
        DisplayInfo,
        OSInfo,
        PackagesInfo,
        DesktopInfo,
        TerminalInfo,
        ShellInfo,
        UptimeInfo,
        BatteryInfo,
        LocaleInfo,
        PlayerInfo,
        EditorInfo,
        InitSystemInfo,
        ProcessesInfo,
        DateTimeInfo,
        LocalIPInfo,
    )
}

KIND_MODULE = "module"
KIND_DIRECTIVE = "directive"
KIND_UNKNOWN = "unknown"

DIRECTIVES = frozenset({"space", "colors", "bright_colors", "end_segment"})
PREFIXED_DIRECTIVES = ("underline", "segment")


class ModuleLookup(NamedTuple):
    """
    Result of resolving a ``modules`` entry.

    ``kind`` is ``"module"`` (``module`` set), ``"directive"`` (``argument``
    holds the directive name and, for prefixed forms, its parameter) or
    ``"unknown"``.
    """

    kind: str
    module: Optional[Type[Module]] = None
    directive: Optional[str] = None
    argument: Optional[str] = None


def resolve_identifier(identifier: str) -> ModuleLookup:
    """
    Resolve a module-list entry.

    Parameters:
        identifier (str): Topic name, layout directive or arbitrary text.

    Returns:
        ModuleLookup: Topic modules are matched exactly; ``underline:<n>`` only
        resolves when ``n`` is a non-negative integer and ``segment:<name>``
        accepts any name. Everything else is ``unknown``.
    """
    module = MODULES.get(identifier)
    if module is not None:
        return ModuleLookup(KIND_MODULE, module=module)
    if identifier in DIRECTIVES:
        return ModuleLookup(KIND_DIRECTIVE, directive=identifier)
    prefix, sep, argument = identifier.partition(":")
    if sep and prefix in PREFIXED_DIRECTIVES:
        if prefix == "underline" and not (argument.isascii() and argument.isdecimal()):
            return ModuleLookup(KIND_UNKNOWN)
        return ModuleLookup(KIND_DIRECTIVE, directive=prefix, argument=argument)
    return ModuleLookup(KIND_UNKNOWN)


__all__ = [
    "DIRECTIVES",
    "DisplayProbeError",
    "KIND_DIRECTIVE",
    "KIND_MODULE",
    "KIND_UNKNOWN",
    "MODULES",
    "Module",
    "ModuleError",
    "ModuleLookup",
    "os_title_sequence",
    "parse_xrandr",
    "resolve_identifier",
]
