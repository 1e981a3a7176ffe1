"""Hardware modules: CPU, GPU, memory, swap, mounts, host and battery."""

from __future__ import annotations

import logging
import platform
import re
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Optional, Tuple

import psutil

from src.sysfetch.layout.template import RenderStyle
from src.utils import format_bytes, read_first_line, run_command

from .base import Module, ModuleError

if TYPE_CHECKING:
    from src.datatypes import SysfetchConfig

logger = logging.getLogger(__name__)

CPUINFO_PATH = Path("/proc/cpuinfo")
PCI_DEVICES_PATH = Path("/sys/bus/pci/devices")
DMI_PATH = Path("/sys/devices/virtual/dmi/id")

_TRAILING_PROCESSOR_RE = re.compile(r"\s+\S+-Core Processor\s*$", re.IGNORECASE)
_BRACKETED_RE = re.compile(r"\[(?P<inner>[^\]]+)\]")
_GPU_CLASSES = ("VGA", "3D", "Display")

_CHASSIS_TYPES: Dict[int, str] = {
    3: "Desktop",
    4: "Low Profile Desktop",
    5: "Pizza Box",
    6: "Mini Tower",
    7: "Tower",
    8: "Portable",
    9: "Laptop",
    10: "Notebook",
    11: "Hand Held",
    13: "All in One",
    14: "Sub Notebook",
    17: "Main Server Chassis",
    23: "Rack Mount Chassis",
    30: "Tablet",
    31: "Convertible",
    32: "Detachable",
    35: "Mini PC",
    36: "Stick PC",
}


def _ratio_percent(used: float, total: float) -> float:
    return (used / total) * 100 if total else 0.0


def remove_trailing_processor(model: str) -> str:
    """Strip a manufacturer's trailing ``"x-Core Processor"`` from a CPU name."""

    return _TRAILING_PROCESSOR_RE.sub("", model).strip()


def _read_cpu_model(path: Path = CPUINFO_PATH) -> str:
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as handle:
            for line in handle:
                key, sep, value = line.partition(":")
                if sep and key.strip() == "model name":
                    return value.strip()
    except OSError as exc:
        logger.debug("Unable to read %s: %s", path, exc)
    return ""


@dataclass
class CPUInfo(Module):
    identifier: ClassVar[str] = "cpu"

    model_name: str = ""
    cores: int = 0
    threads: int = 0
    current_clock_mhz: float = 0.0
    max_clock_mhz: float = 0.0
    arch: str = ""

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["CPUInfo"]:
        model_name = _read_cpu_model() or platform.processor()
        threads = psutil.cpu_count(logical=True) or 0
        if not model_name and not threads:
            raise ModuleError(cls.identifier, "unable to read CPU information")
        if config.cpu.remove_trailing_processor:
            model_name = remove_trailing_processor(model_name)
        try:
            frequency = psutil.cpu_freq()
        except (OSError, NotImplementedError) as exc:
            logger.debug("CPU frequency unavailable: %s", exc)
            frequency = None
        return [
            cls(
                model_name=model_name,
                cores=psutil.cpu_count(logical=False) or 0,
                threads=threads,
                current_clock_mhz=float(frequency.current) if frequency else 0.0,
                max_clock_mhz=float(frequency.max or frequency.current) if frequency else 0.0,
                arch=platform.machine(),
            )
        ]

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {
            "name": self.model_name,
            "core_count": self.cores,
            "thread_count": self.threads,
            "current_clock_mhz": self.current_clock_mhz,
            "current_clock_ghz": self.current_clock_mhz / 1000,
            "max_clock_mhz": self.max_clock_mhz,
            "max_clock_ghz": self.max_clock_mhz / 1000,
            "arch": self.arch,
        }

    def summarize(self) -> str:
        return f"{self.model_name} ({self.cores}c {self.threads}t) @ {self.max_clock_mhz / 1000:.2f} GHz"


def _prefer_bracketed(text: str, *, first_alias: bool = False) -> str:
    """Return the marketing name lspci puts in brackets, when present."""

    match = _BRACKETED_RE.search(text)
    if not match:
        return text.strip()
    inner = match.group("inner").strip()
    if first_alias:
        inner = inner.split("/")[0].strip()
    return inner


def parse_lspci_gpus(output: str) -> List[Tuple[str, str, str]]:
    """
    Extract ``(slot, vendor, model)`` for display controllers in ``lspci -mm`` output.

    Lines that cannot be tokenised or carry too few fields are skipped.
    """
    gpus: List[Tuple[str, str, str]] = []
    for line in output.splitlines():
        try:
            fields = shlex.split(line)
        except ValueError:
            logger.debug("Skipping unparsable lspci line: %r", line)
            continue
        if len(fields) < 4:
            continue
        slot, device_class, vendor, model = fields[:4]
        if not any(marker in device_class for marker in _GPU_CLASSES):
            continue
        gpus.append(
            (
                slot,
                _prefer_bracketed(vendor, first_alias=True),
                _prefer_bracketed(model),
            )
        )
    return gpus


@dataclass
class GPUInfo(Module):
    identifier: ClassVar[str] = "gpu"

    index: int = 0
    vendor: str = ""
    model: str = ""
    vram_bytes: int = 0

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["GPUInfo"]:
        try:
            output = run_command(["lspci", "-mm"])
        except FileNotFoundError as exc:
            raise ModuleError(cls.identifier, "the 'lspci' command is not installed") from exc
        except (subprocess.SubprocessError, OSError) as exc:
            raise ModuleError(cls.identifier, f"unable to run lspci: {exc}") from exc

        gpus: List[GPUInfo] = []
        for slot, vendor, model in parse_lspci_gpus(output):
            device_dir = PCI_DEVICES_PATH / (slot if slot.count(":") > 1 else f"0000:{slot}")
            if config.gpu.ignore_disabled_gpus and _pci_disabled(device_dir):
                continue
            vram = _read_vram(device_dir) if config.gpu.amd_accuracy else 0
            gpus.append(cls(index=len(gpus), vendor=vendor, model=model, vram_bytes=vram))
        return gpus

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {
            "index": self.index,
            "vendor": self.vendor,
            "model": self.model,
            "vram": format_bytes(self.vram_bytes, decimal_places, use_ibis=style.use_ibis),
        }

    def summarize(self) -> str:
        return f"{self.vendor} {self.model} ({format_bytes(self.vram_bytes, 2)})"


def _pci_disabled(device_dir: Path) -> bool:
    try:
        return read_first_line(device_dir / "enable") == "0"
    except OSError:
        return False


def _read_vram(device_dir: Path) -> int:
    try:
        return int(read_first_line(device_dir / "mem_info_vram_total"))
    except (OSError, ValueError):
        return 0


@dataclass
class MemoryInfo(Module):
    identifier: ClassVar[str] = "memory"

    used_bytes: int = 0
    total_bytes: int = 0

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["MemoryInfo"]:
        memory = psutil.virtual_memory()
        return [cls(used_bytes=memory.total - memory.available, total_bytes=memory.total)]

    def percentage(self) -> Optional[float]:
        return _ratio_percent(self.used_bytes, self.total_bytes)

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {
            "used": format_bytes(self.used_bytes, decimal_places, use_ibis=style.use_ibis),
            "max": format_bytes(self.total_bytes, decimal_places, use_ibis=style.use_ibis),
        }

    def summarize(self) -> str:
        return f"{format_bytes(self.used_bytes, 2)} / {format_bytes(self.total_bytes, 2)}"


@dataclass
class SwapInfo(Module):
    identifier: ClassVar[str] = "swap"

    used_bytes: int = 0
    total_bytes: int = 0

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["SwapInfo"]:
        swap = psutil.swap_memory()
        return [cls(used_bytes=swap.used, total_bytes=swap.total)]

    def percentage(self) -> Optional[float]:
        return _ratio_percent(self.used_bytes, self.total_bytes)

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        total = format_bytes(self.total_bytes, decimal_places, use_ibis=style.use_ibis)
        return {
            "used": format_bytes(self.used_bytes, decimal_places, use_ibis=style.use_ibis),
            "total": total,
            "max": total,
        }

    def summarize(self) -> str:
        return f"{format_bytes(self.used_bytes, 2)} / {format_bytes(self.total_bytes, 2)}"


def is_mount_ignored(mountpoint: str, filesystem: str, ignore: Tuple[str, ...]) -> bool:
    """Return True when the mount point or filesystem starts with an ignore entry."""

    return any(
        entry and (mountpoint.startswith(entry) or filesystem.startswith(entry))
        for entry in ignore
    )


@dataclass
class MountInfo(Module):
    identifier: ClassVar[str] = "mounts"

    device: str = ""
    mount: str = ""
    filesystem: str = ""
    used_bytes: int = 0
    avail_bytes: int = 0
    total_bytes: int = 0

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["MountInfo"]:
        mounts: List[MountInfo] = []
        for partition in psutil.disk_partitions(all=False):
            if is_mount_ignored(partition.mountpoint, partition.fstype, config.mounts.ignore):
                continue
            try:
                usage = psutil.disk_usage(partition.mountpoint)
            except OSError as exc:
                logger.debug("Skipping mount %s: %s", partition.mountpoint, exc)
                continue
            mounts.append(
                cls(
                    device=partition.device,
                    mount=partition.mountpoint,
                    filesystem=partition.fstype,
                    used_bytes=usage.used,
                    avail_bytes=usage.free,
                    total_bytes=usage.total,
                )
            )
        return mounts

    def percentage(self) -> Optional[float]:
        return _ratio_percent(self.used_bytes, self.total_bytes)

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {
            "device": self.device,
            "mount": self.mount,
            "space_used": format_bytes(self.used_bytes, decimal_places, use_ibis=style.use_ibis),
            "space_avail": format_bytes(self.avail_bytes, decimal_places, use_ibis=style.use_ibis),
            "space_total": format_bytes(self.total_bytes, decimal_places, use_ibis=style.use_ibis),
            "filesystem": self.filesystem,
        }

    def summarize(self) -> str:
        return (
            f"{self.mount} ({self.device}): {format_bytes(self.used_bytes, 2)} used of "
            f"{format_bytes(self.total_bytes, 2)} [{self.filesystem}]"
        )


@dataclass
class HostInfo(Module):
    identifier: ClassVar[str] = "host"

    host: str = ""
    chassis: str = ""

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["HostInfo"]:
        host = ""
        for filename in ("product_name", "board_name"):
            try:
                host = read_first_line(DMI_PATH / filename)
            except OSError:
                continue
            if host:
                break
        if not host:
            raise ModuleError(cls.identifier, f"unable to read host name from {DMI_PATH}")
        chassis = ""
        try:
            chassis = _CHASSIS_TYPES.get(int(read_first_line(DMI_PATH / "chassis_type")), "Unknown")
        except (OSError, ValueError) as exc:
            logger.debug("Chassis type unavailable: %s", exc)
        return [cls(host=host, chassis=chassis)]

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {"host": self.host, "chassis": self.chassis}

    def render_entries(self, section: Any, decimal_places: int, style: RenderStyle) -> List[Tuple[str, str]]:
        entries = super().render_entries(section, decimal_places, style)
        if section.newline_chassis:
            entries.append(
                (
                    self.render(section.chassis_title, decimal_places, style),
                    self.render(section.chassis_format, decimal_places, style),
                )
            )
        return entries

    def summarize(self) -> str:
        return f"{self.host} ({self.chassis})"


@dataclass
class BatteryInfo(Module):
    identifier: ClassVar[str] = "battery"

    index: int = 0
    charge: float = 0.0

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["BatteryInfo"]:
        try:
            battery = psutil.sensors_battery()
        except (AttributeError, NotImplementedError) as exc:
            raise ModuleError(cls.identifier, "battery sensors are not supported on this platform") from exc
        if battery is None:
            return []
        return [cls(index=0, charge=float(battery.percent))]

    def percentage(self) -> Optional[float]:
        return self.charge

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {"index": self.index, "percentage": self.charge}

    def summarize(self) -> str:
        return f"Battery {self.index}: {self.charge:.0f}%"
