"""
Backend selection models.

A selection travels as a prefixed string (`model:<name>`, `agent:<id>`,
`remote:<name>`) and is parsed into a tagged value right at the boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from llynx.core.exceptions import ValidationError
from llynx.models.agent import SamplingOptions
from llynx.models.enums import SelectionKind, UpstreamKind


@dataclass(frozen=True)
class Selection:
    """Tagged client selection."""

    kind: SelectionKind
    value: str

    @classmethod
    def parse(cls, raw: Optional[str], default_model: str) -> Selection:
        """
        Parse a wire selection string.

        Unprefixed values are legacy model names (`gemma3:1b` is a model,
        not an unknown `gemma3` prefix). Empty input selects the default model.
        """
        text = (raw or "").strip()
        if not text:
            return cls(SelectionKind.MODEL, default_model)

        prefix, sep, rest = text.partition(":")
        if sep:
            try:
                kind = SelectionKind(prefix)
            except ValueError:
                kind = None
            if kind is not None:
                value = rest.strip()
                if not value:
                    raise ValidationError(f"Empty {prefix} selection")
                return cls(kind, value)

        return cls(SelectionKind.MODEL, text)

    def serialize(self) -> str:
        return f"{self.kind.value}:{self.value}"


def normalize_selection(raw: Optional[str]) -> Optional[str]:
    """Normalize a stored selection string; legacy plain values become `model:<value>`."""
    if not raw:
        return None
    prefix, sep, _ = raw.partition(":")
    if sep and prefix in {kind.value for kind in SelectionKind}:
        return raw
    return f"{SelectionKind.MODEL.value}:{raw}"


@dataclass(frozen=True)
class ResolvedTarget:
    """Concrete upstream call derived from a selection."""

    selection: Selection
    upstream: UpstreamKind
    model_name: str
    # None means the system prompt is suppressed (remote backends)
    system_prompt: Optional[str]
    options: Optional[SamplingOptions] = None

    @property
    def model_ident(self) -> str:
        """Canonical identifier stored on the conversation row."""
        return self.selection.serialize()
