"""Modules describing the user's session: desktop, terminal, shell, editor and media player."""

from __future__ import annotations

import logging
import os
import pwd
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List

import psutil

from src.sysfetch.layout.template import RenderStyle
from src.utils import run_command

from .base import Module, ModuleError

if TYPE_CHECKING:
    from src.datatypes import SysfetchConfig

logger = logging.getLogger(__name__)

_SHELL_NAMES = frozenset({"bash", "zsh", "fish", "sh", "dash", "ksh", "tcsh", "csh", "nu", "elvish", "xonsh"})

_FANCY_EDITOR_NAMES: Dict[str, str] = {
    "vi": "VIM",
    "vim": "VIM",
    "nvim": "NeoVim",
    "nano": "GNU Nano",
    "emacs": "GNU Emacs",
    "hx": "Helix",
    "helix": "Helix",
    "micro": "Micro",
    "kak": "Kakoune",
    "code": "Visual Studio Code",
    "subl": "Sublime Text",
    "kate": "Kate",
    "gedit": "gedit",
}

_PLAYERCTL_FORMAT = "{{playerName}}\t{{title}}\t{{artist}}\t{{album}}\t{{status}}"


def _parent_process_names() -> List[str]:
    try:
        return [parent.name() for parent in psutil.Process().parents()]
    except (psutil.Error, OSError) as exc:
        logger.debug("Unable to walk parent processes: %s", exc)
        return []


@dataclass
class DesktopInfo(Module):
    identifier: ClassVar[str] = "desktop"

    desktop: str = ""
    display_type: str = ""

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["DesktopInfo"]:
        desktop = (
            os.environ.get("XDG_CURRENT_DESKTOP")
            or os.environ.get("DESKTOP_SESSION")
            or os.environ.get("XDG_SESSION_DESKTOP")
            or ""
        )
        if not desktop:
            raise ModuleError(cls.identifier, "no desktop session detected")
        display_type = os.environ.get("XDG_SESSION_TYPE", "")
        return [cls(desktop=desktop.split(":")[0], display_type=display_type)]

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {"desktop": self.desktop, "display_type": self.display_type}

    def summarize(self) -> str:
        return f"{self.desktop} ({self.display_type})"


@dataclass
class TerminalInfo(Module):
    identifier: ClassVar[str] = "terminal"

    name: str = ""
    version: str = ""

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["TerminalInfo"]:
        program = os.environ.get("TERM_PROGRAM")
        if program:
            return [cls(name=program, version=os.environ.get("TERM_PROGRAM_VERSION", ""))]
        for name in _parent_process_names():
            if name not in _SHELL_NAMES and name not in ("sudo", "su", "login", "sshd"):
                return [cls(name=name)]
        term = os.environ.get("TERM")
        if term:
            return [cls(name=term)]
        raise ModuleError(cls.identifier, "unable to identify the terminal")

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {"name": self.name, "version": self.version}

    def summarize(self) -> str:
        return f"{self.name} {self.version}".strip()


def _default_shell() -> str:
    shell = os.environ.get("SHELL", "")
    if shell:
        return shell
    try:
        return pwd.getpwuid(os.getuid()).pw_shell
    except KeyError:
        return ""


@dataclass
class ShellInfo(Module):
    identifier: ClassVar[str] = "shell"

    name: str = ""
    path: str = ""
    version: str = ""

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["ShellInfo"]:
        if not config.shell.show_default_shell:
            for name in _parent_process_names():
                if name in _SHELL_NAMES:
                    return [cls(name=name, path=shutil.which(name) or "")]
        path = _default_shell()
        if not path:
            raise ModuleError(cls.identifier, "unable to determine the shell")
        return [cls(name=Path(path).name, path=path)]

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {"name": self.name, "path": self.path, "version": self.version}

    def summarize(self) -> str:
        return f"{self.name} {self.version}".strip()


@dataclass
class EditorInfo(Module):
    identifier: ClassVar[str] = "editor"

    name: str = ""
    path: str = ""
    version: str = ""

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["EditorInfo"]:
        command = (os.environ.get("VISUAL") or os.environ.get("EDITOR") or "").strip()
        if not command:
            raise ModuleError(cls.identifier, "neither VISUAL nor EDITOR is set")
        executable = command.split()[0]
        binary = Path(executable).name
        name = _FANCY_EDITOR_NAMES.get(binary, binary) if config.editor.fancy else binary
        return [cls(name=name, path=shutil.which(executable) or executable)]

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {"name": self.name, "path": self.path, "version": self.version}

    def summarize(self) -> str:
        return f"{self.name} {self.version}".strip()


def parse_playerctl(output: str) -> List["PlayerInfo"]:
    """Parse tab separated ``playerctl metadata --all-players`` lines, skipping short ones."""

    players = []
    for line in output.splitlines():
        fields = line.split("\t")
        if len(fields) != 5:
            continue
        player, track, artists, album, status = (field.strip() for field in fields)
        players.append(
            PlayerInfo(player=player, track=track, track_artists=artists, album=album, status=status)
        )
    return players


@dataclass
class PlayerInfo(Module):
    identifier: ClassVar[str] = "player"

    player: str = ""
    track: str = ""
    track_artists: str = ""
    album: str = ""
    status: str = ""

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["PlayerInfo"]:
        try:
            output = run_command(
                ["playerctl", "metadata", "--all-players", "--format", _PLAYERCTL_FORMAT]
            )
        except FileNotFoundError as exc:
            raise ModuleError(cls.identifier, "the 'playerctl' command is not installed") from exc
        except subprocess.CalledProcessError:
            # playerctl exits non-zero when nothing is playing.
            return []
        except (subprocess.SubprocessError, OSError) as exc:
            raise ModuleError(cls.identifier, f"unable to run playerctl: {exc}") from exc
        ignored = set(config.player.ignore)
        return [info for info in parse_playerctl(output) if info.player not in ignored]

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {
            "player": self.player,
            "track": self.track,
            "track_artists": self.track_artists,
            "album": self.album,
            "status": self.status,
        }

    def summarize(self) -> str:
        return f"{self.track} by {self.track_artists} ({self.album}) [{self.status}]"
