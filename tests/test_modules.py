from __future__ import annotations

import subprocess
import types
from dataclasses import fields
from pathlib import Path

import pytest

import src.sysfetch.modules.hardware as hardware
import src.sysfetch.modules.session as session
import src.sysfetch.modules.system as system
from src.sysfetch.config_defaults import DEFAULT_VALUES
from src.sysfetch.config_writer import DEFAULT_CONFIG_PATH
from src.sysfetch.layout.template import RenderStyle
from src.sysfetch.layout.terminal import AnsiColorMapper, parse_thresholds
from src.sysfetch.modules import (
    KIND_DIRECTIVE,
    KIND_MODULE,
    KIND_UNKNOWN,
    MODULES,
    ModuleError,
    resolve_identifier,
)
from src.sysfetch.modules.hardware import (
    CPUInfo,
    GPUInfo,
    HostInfo,
    MemoryInfo,
    MountInfo,
    SwapInfo,
    parse_lspci_gpus,
    remove_trailing_processor,
)
from src.sysfetch.modules.session import EditorInfo, PlayerInfo, parse_playerctl
from src.sysfetch.modules.system import (
    DateTimeInfo,
    LocaleInfo,
    OSInfo,
    PackagesInfo,
    UptimeInfo,
    format_duration,
    os_title_sequence,
)

GB = 1000**3


def test_registry_covers_every_topic_section() -> None:
    topic_sections = {
        key for key, value in DEFAULT_VALUES.items() if isinstance(value, dict) and key != "ascii"
    }

    assert set(MODULES) == topic_sections
    for identifier, module in MODULES.items():
        assert module.identifier == identifier


@pytest.mark.parametrize(
    ("identifier", "kind", "directive", "argument"),
    [
        ("cpu", KIND_MODULE, None, None),
        ("space", KIND_DIRECTIVE, "space", None),
        ("colors", KIND_DIRECTIVE, "colors", None),
        ("bright_colors", KIND_DIRECTIVE, "bright_colors", None),
        ("end_segment", KIND_DIRECTIVE, "end_segment", None),
        ("underline:16", KIND_DIRECTIVE, "underline", "16"),
        ("underline:0", KIND_DIRECTIVE, "underline", "0"),
        ("underline:-3", KIND_UNKNOWN, None, None),
        ("underline:abc", KIND_UNKNOWN, None, None),
        ("segment:Hardware", KIND_DIRECTIVE, "segment", "Hardware"),
        ("CPU", KIND_UNKNOWN, None, None),
        ("hello there", KIND_UNKNOWN, None, None),
    ],
)
def test_resolve_identifier(identifier: str, kind: str, directive, argument) -> None:
    lookup = resolve_identifier(identifier)

    assert lookup.kind == kind
    assert lookup.directive == directive
    assert lookup.argument == argument
    if kind == KIND_MODULE:
        assert lookup.module is CPUInfo


@pytest.mark.parametrize("module", list(MODULES.values()), ids=list(MODULES))
def test_empty_instances_render_every_default_template(module) -> None:
    section = DEFAULT_VALUES[module.identifier]
    empty = module.create_empty()

    assert isinstance(empty.render(section["title"], 2), str)
    assert isinstance(empty.render(section["format"], 2), str)
    assert isinstance(empty.summarize(), str)
    assert str(empty) == empty.summarize()


def test_create_empty_is_zero_valued() -> None:
    empty = MemoryInfo.create_empty()

    assert empty.used_bytes == 0
    assert empty.total_bytes == 0
    assert all(getattr(CPUInfo.create_empty(), f.name) in ("", 0, 0.0) for f in fields(CPUInfo))


def test_cpu_render_and_summary() -> None:
    cpu = CPUInfo(
        model_name="AMD Ryzen 5 5600X",
        cores=6,
        threads=12,
        current_clock_mhz=3700.0,
        max_clock_mhz=4650.0,
        arch="x86_64",
    )

    rendered = cpu.render(DEFAULT_VALUES["cpu"]["format"], 2)

    assert rendered == "AMD Ryzen 5 5600X x86_64 (6c 12t) @ 4.65 GHz"
    assert cpu.summarize() == "AMD Ryzen 5 5600X (6c 12t) @ 4.65 GHz"
    assert cpu.render("{unknown} {name}", 2) == "{unknown} AMD Ryzen 5 5600X"


def test_remove_trailing_processor() -> None:
    assert remove_trailing_processor("AMD Ryzen 7 3700X 8-Core Processor") == "AMD Ryzen 7 3700X"
    assert remove_trailing_processor("Intel(R) Core(TM) i7-9700K CPU @ 3.60GHz") == (
        "Intel(R) Core(TM) i7-9700K CPU @ 3.60GHz"
    )


def test_memory_bar_and_percent() -> None:
    memory = MemoryInfo(used_bytes=2 * GB, total_bytes=8 * GB)

    assert memory.percentage() == 25.0
    assert memory.render("{used} / {max} ({percent})", 2) == "2.00 GB / 8.00 GB (25.00%)"
    assert memory.render("{bar}", 0) == "[" + "=" * 5 + " " * 15 + "]"


def test_percent_uses_threshold_colors() -> None:
    style = RenderStyle(colors=AnsiColorMapper(), thresholds=parse_thresholds(["50:green", "90:red"]))
    memory = MemoryInfo(used_bytes=6 * GB, total_bytes=8 * GB)

    assert memory.render("{percent}", 0, style) == "\x1b[31m75%\x1b[0m"


def test_ibi_units() -> None:
    swap = SwapInfo(used_bytes=1024**3, total_bytes=4 * 1024**3)

    assert swap.render("{used}/{total}", 1, RenderStyle(use_ibis=True)) == "1.0 GiB/4.0 GiB"
    assert swap.render("{used}/{max}", 1) == "1.1 GB/4.3 GB"


def test_zero_total_percentage_is_zero() -> None:
    assert SwapInfo().percentage() == 0.0
    assert SwapInfo().render("{percent}", 0) == "0%"


def test_placeholders_without_percentage_left_verbatim() -> None:
    assert LocaleInfo(language="en_US", encoding="UTF-8").render("{bar} {language}", 2) == "{bar} en_US"


def test_memory_gather(monkeypatch: pytest.MonkeyPatch, default_config) -> None:
    fake = types.SimpleNamespace(total=16 * GB, available=12 * GB)
    monkeypatch.setattr(hardware.psutil, "virtual_memory", lambda: fake)

    (memory,) = MemoryInfo.gather(default_config)

    assert memory.used_bytes == 4 * GB
    assert memory.total_bytes == 16 * GB


def test_mounts_gather_honours_ignore_prefixes(monkeypatch: pytest.MonkeyPatch, make_config) -> None:
    partitions = [
        types.SimpleNamespace(device="/dev/sda1", mountpoint="/", fstype="ext4"),
        types.SimpleNamespace(device="/dev/loop0", mountpoint="/snap/core/1", fstype="squashfs"),
        types.SimpleNamespace(device="/dev/sda2", mountpoint="/boot/efi", fstype="vfat"),
    ]
    usage = types.SimpleNamespace(used=40 * GB, free=60 * GB, total=100 * GB)
    monkeypatch.setattr(hardware.psutil, "disk_partitions", lambda all=False: partitions)
    monkeypatch.setattr(hardware.psutil, "disk_usage", lambda path: usage)
    config = make_config('[mounts]\nignore = ["/snap", "vfat"]\n')

    mounts = MountInfo.gather(config)

    assert [mount.mount for mount in mounts] == ["/"]
    assert mounts[0].render(config.mounts.format, 0) == "40 GB used of 100 GB (40%) [ext4]"
    assert mounts[0].render(config.mounts.title, 0) == "Disk (/)"


def test_battery_absent_yields_no_instances(monkeypatch: pytest.MonkeyPatch, default_config) -> None:
    monkeypatch.setattr(hardware.psutil, "sensors_battery", lambda: None, raising=False)

    assert hardware.BatteryInfo.gather(default_config) == []


def test_lspci_parsing_prefers_marketing_names() -> None:
    output = "\n".join(
        [
            '00:02.0 "VGA compatible controller" "Intel Corporation" "CometLake-S GT2 [UHD Graphics 630]" -r05 "" ""',
            '01:00.0 "VGA compatible controller" "Advanced Micro Devices, Inc. [AMD/ATI]" '
            '"Navi 21 [Radeon RX 6800/6800 XT / 6900 XT]" -rc1 "" ""',
            '00:1f.3 "Audio device" "Intel Corporation" "Comet Lake PCH cAVS" -r00 "" ""',
            'broken "line',
        ]
    )

    gpus = parse_lspci_gpus(output)

    assert gpus == [
        ("00:02.0", "Intel Corporation", "UHD Graphics 630"),
        ("01:00.0", "AMD", "Radeon RX 6800/6800 XT / 6900 XT"),
    ]


def test_gpu_gather_missing_lspci(monkeypatch: pytest.MonkeyPatch, default_config) -> None:
    def _missing(args, timeout=2.0):
        raise FileNotFoundError(args[0])

    monkeypatch.setattr(hardware, "run_command", _missing)

    with pytest.raises(ModuleError) as excinfo:
        GPUInfo.gather(default_config)

    assert excinfo.value.module == "gpu"
    assert "lspci" in excinfo.value.message


def test_gpu_gather_skips_disabled_devices(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, default_config
) -> None:
    output = (
        '00:02.0 "VGA compatible controller" "Intel Corporation" "UHD [UHD Graphics 630]" "" ""\n'
        '01:00.0 "VGA compatible controller" "NVIDIA Corporation" "GA104 [GeForce RTX 3070]" "" ""\n'
    )
    monkeypatch.setattr(hardware, "run_command", lambda args, timeout=2.0: output)
    monkeypatch.setattr(hardware, "PCI_DEVICES_PATH", tmp_path)
    disabled = tmp_path / "0000:00:02.0"
    disabled.mkdir()
    (disabled / "enable").write_text("0\n", encoding="utf-8")
    enabled = tmp_path / "0000:01:00.0"
    enabled.mkdir()
    (enabled / "enable").write_text("1\n", encoding="utf-8")
    (enabled / "mem_info_vram_total").write_text(f"{8 * GB}\n", encoding="utf-8")

    gpus = GPUInfo.gather(default_config)

    assert len(gpus) == 1
    assert gpus[0].render(default_config.gpu.format, 2) == "NVIDIA Corporation GeForce RTX 3070 (8.00 GB)"


def test_host_newline_chassis_adds_entry(make_config) -> None:
    host = HostInfo(host="ThinkPad X1", chassis="Notebook")
    style = RenderStyle()
    config = make_config("[host]\nnewline_chassis = true\n")

    entries = host.render_entries(config.host, 2, style)

    assert entries == [("Host", "ThinkPad X1 (Notebook)"), ("Chassis", "Notebook")]


def test_host_gather_reads_dmi(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, default_config) -> None:
    (tmp_path / "product_name").write_text("Inspiron 15\n", encoding="utf-8")
    (tmp_path / "chassis_type").write_text("10\n", encoding="utf-8")
    monkeypatch.setattr(hardware, "DMI_PATH", tmp_path)

    (host,) = HostInfo.gather(default_config)

    assert host.host == "Inspiron 15"
    assert host.chassis == "Notebook"


def test_host_gather_without_dmi(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, default_config) -> None:
    monkeypatch.setattr(hardware, "DMI_PATH", tmp_path / "missing")

    with pytest.raises(ModuleError):
        HostInfo.gather(default_config)


def test_os_newline_kernel(make_config) -> None:
    info = OSInfo(distro="Arch Linux", kernel="6.9.1-arch1-1")
    config = make_config("[os]\nnewline_kernel = true\n")

    assert info.render_entries(config.os, 2, RenderStyle()) == [
        ("Operating System", "Arch Linux (6.9.1-arch1-1)"),
        ("Kernel", "Linux 6.9.1-arch1-1"),
    ]


def test_os_title_sequence() -> None:
    assert os_title_sequence({"ANSI_COLOR": "1;34"}) == "\x1b[1;34m"
    assert os_title_sequence({"ANSI_COLOR": "bogus"}) is None
    assert os_title_sequence({}) is None


def test_packages_render_per_manager() -> None:
    packages = PackagesInfo(managers=(("pacman", 812), ("flatpak", 14)))

    assert packages.render("{count} ({manager})", 2) == "812 (pacman), 14 (flatpak)"
    assert PackagesInfo(managers=(("dpkg", 3),)).render("{count} ({manager})", 2) == "3 (dpkg)"


def test_packages_gather_respects_ignore(monkeypatch: pytest.MonkeyPatch, make_config) -> None:
    counts = {"dpkg": 1500, "pacman": None, "flatpak": 20, "snap": 5}
    monkeypatch.setattr(system, "count_packages", lambda manager: counts[manager])
    config = make_config('[packages]\nignore = ["snap"]\n')

    (packages,) = PackagesInfo.gather(config)

    assert packages.managers == (("dpkg", 1500), ("flatpak", 20))


def test_packages_gather_without_managers(monkeypatch: pytest.MonkeyPatch, default_config) -> None:
    monkeypatch.setattr(system, "count_packages", lambda manager: None)

    with pytest.raises(ModuleError, match="no supported package manager"):
        PackagesInfo.gather(default_config)


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(5, "5s"), (65, "1m 5s"), (3600, "1h 0m 0s"), (90061, "1d 1h 1m 1s")],
)
def test_format_duration(seconds: int, expected: str) -> None:
    assert format_duration(seconds) == expected


def test_uptime_comment_example_matches_output() -> None:
    template = DEFAULT_CONFIG_PATH.read_text(encoding="utf-8")

    assert f'# {{time}} -> The uptime, e.g "{format_duration(2 * 86400 + 3 * 3600 + 4 * 60)}"' in template


def test_uptime_placeholders() -> None:
    uptime = UptimeInfo(seconds=90061)

    assert uptime.render("{days}d {hours}h {minutes}m {seconds}s", 2) == "1d 1h 1m 1s"
    assert uptime.render("{time}", 2) == "1d 1h 1m 1s"


def test_datetime_formats_with_strftime() -> None:
    from datetime import datetime

    info = DateTimeInfo(timestamp=datetime(2024, 3, 9, 14, 5, 7))
    section = types.SimpleNamespace(title="Date/Time", format="%H:%M:%S on %d %B %Y")

    assert info.render_entries(section, 2, RenderStyle()) == [("Date/Time", "14:05:07 on 09 March 2024")]


def test_datetime_title_and_output_not_reinterpreted() -> None:
    from datetime import datetime

    info = DateTimeInfo(timestamp=datetime(2024, 3, 9, 14, 5, 7))
    section = types.SimpleNamespace(title="100% {time}", format="{color-red}%B")
    style = RenderStyle(colors=AnsiColorMapper())

    ((title, value),) = info.render_entries(section, 2, style)

    assert title == "100% {time}"
    assert value == "\x1b[31mMarch"


def test_locale_gather(monkeypatch: pytest.MonkeyPatch, default_config) -> None:
    monkeypatch.delenv("LC_ALL", raising=False)
    monkeypatch.setenv("LANG", "en_GB.UTF-8")

    (locale,) = LocaleInfo.gather(default_config)

    assert (locale.language, locale.encoding) == ("en_GB", "UTF-8")


def test_locale_gather_unset(monkeypatch: pytest.MonkeyPatch, default_config) -> None:
    monkeypatch.delenv("LC_ALL", raising=False)
    monkeypatch.delenv("LANG", raising=False)

    with pytest.raises(ModuleError):
        LocaleInfo.gather(default_config)


@pytest.mark.parametrize(("fancy", "expected"), [(True, "NeoVim"), (False, "nvim")])
def test_editor_fancy_names(monkeypatch: pytest.MonkeyPatch, make_config, fancy: bool, expected: str) -> None:
    monkeypatch.delenv("VISUAL", raising=False)
    monkeypatch.setenv("EDITOR", "/usr/bin/nvim -p")
    config = make_config(f"[editor]\nfancy = {'true' if fancy else 'false'}\n")

    (editor,) = EditorInfo.gather(config)

    assert editor.name == expected


def test_playerctl_parsing_skips_short_lines() -> None:
    output = "spotify\tSong\tArtist\tAlbum\tPlaying\nbroken line\n"

    (player,) = parse_playerctl(output)

    assert player.render(DEFAULT_VALUES["player"]["format"], 2) == "Song by Artist (Album) [Playing]"
    assert player.render(DEFAULT_VALUES["player"]["title"], 2) == "Player (spotify)"


def test_player_gather_filters_ignored(monkeypatch: pytest.MonkeyPatch, make_config) -> None:
    output = "spotify\tA\tB\tC\tPlaying\nfirefox\tD\tE\tF\tPaused\n"
    monkeypatch.setattr(session, "run_command", lambda args, timeout=2.0: output)
    config = make_config('[player]\nignore = ["firefox"]\n')

    assert [info.player for info in PlayerInfo.gather(config)] == ["spotify"]


def test_player_gather_nothing_playing(monkeypatch: pytest.MonkeyPatch, default_config) -> None:
    def _no_players(args, timeout=2.0):
        raise subprocess.CalledProcessError(1, args)

    monkeypatch.setattr(session, "run_command", _no_players)

    assert PlayerInfo.gather(default_config) == []


def test_module_error_str() -> None:
    error = ModuleError("cpu", "unable to read CPU information")

    assert str(error) == "cpu: unable to read CPU information"
    assert isinstance(error, RuntimeError)
