"""Operating-system level modules: identity, packages, uptime, locale and network."""

from __future__ import annotations

import getpass
import logging
import os
import platform
import shutil
import socket
import subprocess
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Optional, Tuple

import psutil

from src.sysfetch.layout.template import RenderStyle
from src.utils import read_first_line, run_command

from .base import Module, ModuleError

if TYPE_CHECKING:
    from src.datatypes import SysfetchConfig

logger = logging.getLogger(__name__)

INIT_COMM_PATH = Path("/proc/1/comm")
INIT_EXE_PATH = Path("/proc/1/exe")
DPKG_STATUS_PATH = Path("/var/lib/dpkg/status")
PACMAN_LOCAL_PATH = Path("/var/lib/pacman/local")


@dataclass
class HostnameInfo(Module):
    identifier: ClassVar[str] = "hostname"

    username: str = ""
    hostname: str = ""

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["HostnameInfo"]:
        hostname = socket.gethostname()
        try:
            username = getpass.getuser()
        except (KeyError, OSError) as exc:
            raise ModuleError(cls.identifier, f"unable to determine the current user: {exc}") from exc
        return [cls(username=username, hostname=hostname)]

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {"username": self.username, "hostname": self.hostname}

    def summarize(self) -> str:
        return f"{self.username}@{self.hostname}"


def read_os_release() -> Dict[str, str]:
    """Return the parsed ``os-release`` mapping, or an empty dict when unavailable."""

    try:
        return dict(platform.freedesktop_os_release())
    except OSError as exc:
        logger.debug("os-release unavailable: %s", exc)
        return {}


def os_title_sequence(os_release: Optional[Dict[str, str]] = None) -> Optional[str]:
    """
    Build an SGR sequence from the distro's ``ANSI_COLOR`` entry.

    Returns:
        Optional[str]: ``"\\x1b[<ANSI_COLOR>m"`` or ``None`` when the entry is missing
        or holds anything other than digits and semicolons.
    """
    release = read_os_release() if os_release is None else os_release
    value = release.get("ANSI_COLOR", "").strip()
    if not value or not all(part.isdigit() for part in value.split(";")):
        return None
    return f"\x1b[{value}m"


@dataclass
class OSInfo(Module):
    identifier: ClassVar[str] = "os"

    distro: str = ""
    kernel: str = ""

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["OSInfo"]:
        release = read_os_release()
        distro = release.get("PRETTY_NAME") or release.get("NAME") or platform.system()
        if not distro:
            raise ModuleError(cls.identifier, "unable to determine the operating system")
        return [cls(distro=distro, kernel=platform.release())]

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {"distro": self.distro, "kernel": self.kernel}

    def render_entries(self, section: Any, decimal_places: int, style: RenderStyle) -> List[Tuple[str, str]]:
        entries = super().render_entries(section, decimal_places, style)
        if section.newline_kernel:
            entries.append(
                (
                    self.render(section.kernel_title, decimal_places, style),
                    self.render(section.kernel_format, decimal_places, style),
                )
            )
        return entries

    def summarize(self) -> str:
        return f"{self.distro} ({self.kernel})"


def _count_dpkg() -> int:
    count = 0
    with open(DPKG_STATUS_PATH, "r", encoding="utf-8", errors="replace") as handle:
        for line in handle:
            if line.startswith("Status:") and line.rstrip().endswith(" installed"):
                count += 1
    return count


def _count_pacman() -> int:
    return sum(1 for entry in PACMAN_LOCAL_PATH.iterdir() if entry.is_dir())


def _count_command_lines(args: List[str], *, skip_header: bool = False) -> int:
    lines = [line for line in run_command(args).splitlines() if line.strip()]
    if skip_header and lines:
        lines = lines[1:]
    return len(lines)


def count_packages(manager: str) -> Optional[int]:
    """
    Count the packages installed through ``manager``.

    Returns ``None`` when the manager is not present on this host.
    """
    try:
        if manager == "dpkg":
            return _count_dpkg() if DPKG_STATUS_PATH.exists() else None
        if manager == "pacman":
            return _count_pacman() if PACMAN_LOCAL_PATH.is_dir() else None
        if manager == "flatpak" and shutil.which("flatpak"):
            return _count_command_lines(["flatpak", "list", "--columns=application"])
        if manager == "snap" and shutil.which("snap"):
            return _count_command_lines(["snap", "list"], skip_header=True)
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("Unable to count %s packages: %s", manager, exc)
    return None


PACKAGE_MANAGERS: Tuple[str, ...] = ("dpkg", "pacman", "flatpak", "snap")


@dataclass
class PackagesInfo(Module):
    identifier: ClassVar[str] = "packages"

    managers: Tuple[Tuple[str, int], ...] = ()

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["PackagesInfo"]:
        found = []
        for manager in PACKAGE_MANAGERS:
            if manager in config.packages.ignore:
                continue
            count = count_packages(manager)
            if count is not None:
                found.append((manager, count))
        if not found:
            raise ModuleError(cls.identifier, "no supported package manager found")
        return [cls(managers=tuple(found))]

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {
            "count": sum(count for _, count in self.managers),
            "manager": ", ".join(manager for manager, _ in self.managers),
        }

    def render(self, format_template: str, decimal_places: int, style: Optional[RenderStyle] = None) -> str:
        """Render the format once per package manager, joined with commas."""

        if len(self.managers) < 2:
            return super().render(format_template, decimal_places, style)
        return ", ".join(
            PackagesInfo(managers=(entry,)).render(format_template, decimal_places, style)
            for entry in self.managers
        )

    def summarize(self) -> str:
        return ", ".join(f"{count} ({manager})" for manager, count in self.managers)


@dataclass
class InitSystemInfo(Module):
    identifier: ClassVar[str] = "initsys"

    name: str = ""
    path: str = ""
    version: str = ""

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["InitSystemInfo"]:
        try:
            name = read_first_line(INIT_COMM_PATH)
        except OSError as exc:
            raise ModuleError(cls.identifier, f"unable to read {INIT_COMM_PATH}: {exc}") from exc
        try:
            path = os.path.realpath(INIT_EXE_PATH, strict=True)
        except OSError:
            path = ""
        return [cls(name=name, path=path)]

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {"name": self.name, "path": self.path, "version": self.version}

    def summarize(self) -> str:
        return f"{self.name} {self.version}".strip()


@dataclass
class ProcessesInfo(Module):
    identifier: ClassVar[str] = "processes"

    count: int = 0

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["ProcessesInfo"]:
        return [cls(count=len(psutil.pids()))]

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {"count": self.count}

    def summarize(self) -> str:
        return f"{self.count} processes"


def format_duration(seconds: int) -> str:
    """Return ``"1d 2h 3m 4s"`` style text, leaving out leading zero units."""

    days, remainder = divmod(max(seconds, 0), 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    for value, suffix in ((days, "d"), (hours, "h"), (minutes, "m")):
        if value or parts:
            parts.append(f"{value}{suffix}")
    parts.append(f"{secs}s")
    return " ".join(parts)


@dataclass
class UptimeInfo(Module):
    identifier: ClassVar[str] = "uptime"

    seconds: int = 0

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["UptimeInfo"]:
        return [cls(seconds=int(time.time() - psutil.boot_time()))]

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        days, remainder = divmod(self.seconds, 86400)
        hours, remainder = divmod(remainder, 3600)
        minutes, seconds = divmod(remainder, 60)
        return {
            "days": days,
            "hours": hours,
            "minutes": minutes,
            "seconds": seconds,
            "time": format_duration(self.seconds),
        }

    def summarize(self) -> str:
        return format_duration(self.seconds)


@dataclass
class LocaleInfo(Module):
    identifier: ClassVar[str] = "locale"

    language: str = ""
    encoding: str = ""

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["LocaleInfo"]:
        value = os.environ.get("LC_ALL") or os.environ.get("LANG") or ""
        if not value:
            raise ModuleError(cls.identifier, "neither LC_ALL nor LANG is set")
        language, _, encoding = value.partition(".")
        return [cls(language=language, encoding=encoding)]

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {"language": self.language, "encoding": self.encoding}

    def summarize(self) -> str:
        return f"{self.language} ({self.encoding})"


@dataclass
class DateTimeInfo(Module):
    """Current local time; the section's format is a strftime pattern."""

    identifier: ClassVar[str] = "datetime"

    timestamp: Optional[datetime] = None

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["DateTimeInfo"]:
        return [cls(timestamp=datetime.now())]

    def render_entries(self, section: Any, decimal_places: int, style: RenderStyle) -> List[Tuple[str, str]]:
        # strftime only touches the format line, after directives are resolved
        value = self.render(section.format, decimal_places, style)
        if self.timestamp is not None:
            value = self.timestamp.strftime(value)
        return [(self.render(section.title, decimal_places, style), value)]

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {}

    def summarize(self) -> str:
        return self.timestamp.isoformat(sep=" ", timespec="seconds") if self.timestamp else ""


@dataclass
class LocalIPInfo(Module):
    identifier: ClassVar[str] = "localip"

    interface: str = ""
    addr: str = ""

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["LocalIPInfo"]:
        found: List[LocalIPInfo] = []
        for interface, addresses in psutil.net_if_addrs().items():
            for address in addresses:
                if address.family == socket.AF_INET:
                    label = f"{interface} (IPv4)"
                elif address.family == socket.AF_INET6:
                    label = f"{interface} (IPv6)"
                else:
                    continue
                if address.address.startswith(("127.", "::1")):
                    continue
                found.append(cls(interface=label, addr=address.address.split("%")[0]))
        return found

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {"interface": self.interface, "addr": self.addr}

    def summarize(self) -> str:
        return f"{self.interface}: {self.addr}"
