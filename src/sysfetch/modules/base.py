"""Shared contract implemented by every fact-producing module."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Optional, Tuple, Type, TypeVar

from src.sysfetch.layout.template import (
    RenderStyle,
    format_percentage,
    progress_bar,
    render_template,
)

if TYPE_CHECKING:
    from src.datatypes import SysfetchConfig

ModuleT = TypeVar("ModuleT", bound="Module")


class ModuleError(RuntimeError):
    """Raised when a module cannot gather its facts."""

    def __init__(self, module: str, message: str) -> None:
        super().__init__(f"{module}: {message}")
        self.module = module
        self.message = message


class Module(ABC):
    """
    Base class for a topic's facts.

    Subclasses are dataclasses whose fields all carry zero/empty defaults, so
    ``create_empty()`` yields a renderable placeholder when gathering fails.
    """

    identifier: ClassVar[str] = ""

    @classmethod
    def create_empty(cls: Type[ModuleT]) -> ModuleT:
        """Return a zero-valued instance."""

        return cls()

    @classmethod
    @abstractmethod
    def gather(cls: Type[ModuleT], config: "SysfetchConfig") -> List[ModuleT]:
        """Probe the host; one instance per line of output."""

    @abstractmethod
    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        """Return the topic's placeholder bindings."""

    @abstractmethod
    def summarize(self) -> str:
        """Return a fixed one-line description independent of any template."""

    def percentage(self) -> Optional[float]:
        """Return the 0-100 value driving ``{bar}``/``{percent}``, if the topic has one."""

        return None

    def render(self, format_template: str, decimal_places: int, style: Optional[RenderStyle] = None) -> str:
        """
        Substitute this module's placeholders into ``format_template``.

        Parameters:
            format_template (str): Title or format string from the module's section.
            decimal_places (int): Precision for numeric values.
            style (Optional[RenderStyle]): Colors, thresholds and bar glyphs; plain output when omitted.

        Returns:
            str: Rendered text; unrecognised placeholders are left verbatim.
        """
        style = style or RenderStyle()
        bindings = dict(self.placeholders(decimal_places, style))
        value = self.percentage()
        if value is not None:
            bindings.setdefault("bar", progress_bar(value, style.bar))
            bindings.setdefault("percent", format_percentage(value, decimal_places, style))
        return render_template(
            format_template,
            bindings,
            decimal_places=decimal_places,
            colors=style.colors,
        )

    def render_entries(self, section: Any, decimal_places: int, style: RenderStyle) -> List[Tuple[str, str]]:
        """Return the ``(title, value)`` report entries for this instance."""

        return [
            (
                self.render(section.title, decimal_places, style),
                self.render(section.format, decimal_places, style),
            )
        ]

    def __str__(self) -> str:
        return self.summarize()
