"""
sifter/evidence/block.py: Evidence block types and the fact accessor.

An EvidenceBlock is the structured narrative that justifies one metric's
score: a headline, ordered bullet sections, cited sources, the severity band
and a fixed completion marker. to_markdown() renders the light-markdown
text that the CSV and HTML exporters consume.

Facts wraps the free-form fact dict supplied by the data-collection layer.
Every accessor returns a default instead of raising, so templates can be
written as if every fact were present.
"""

from dataclasses import dataclass, field
from typing import Optional

ANALYSIS_COMPLETE_MARKER = "Analysis Complete"

SECTION_FINDINGS = "Key Findings"
SECTION_RED_FLAGS = "Red Flags"
SECTION_SOURCES = "Evidence Sources"


@dataclass
class EvidenceSection:
    """A titled list of bullet lines."""

    title: str
    bullets: list = field(default_factory=list)


@dataclass
class EvidenceBlock:
    """
    Narrative evidence for a single metric.

    Fields:
        metric_key: Catalog key the block describes.
        band:       'high' | 'medium' | 'low'.
        score:      Metric score the narrative was generated for.
        headline:   One-line summary.
        sections:   Ordered sections (Key Findings, Red Flags, Evidence Sources).
        sources:    Cited sources (URLs, handles, datasets).
        marker:     Fixed completion marker, not a timestamp.
    """

    metric_key: str
    band: str
    score: float
    headline: str
    sections: list = field(default_factory=list)
    sources: list = field(default_factory=list)
    marker: str = ANALYSIS_COMPLETE_MARKER

    def section(self, title: str) -> Optional[EvidenceSection]:
        for s in self.sections:
            if s.title == title:
                return s
        return None

    def to_markdown(self) -> str:
        lines = [f"**{self.headline}**", ""]
        for s in self.sections:
            lines.append(f"{s.title}:")
            for bullet in s.bullets:
                lines.append(f"- {bullet}")
            lines.append("")
        lines.append(f"*{self.marker}*")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "metricKey": self.metric_key,
            "band": self.band,
            "score": self.score,
            "headline": self.headline,
            "sections": [{"title": s.title, "bullets": list(s.bullets)} for s in self.sections],
            "sources": list(self.sources),
            "marker": self.marker,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EvidenceBlock":
        return cls(
            metric_key=data["metricKey"],
            band=data["band"],
            score=data["score"],
            headline=data["headline"],
            sections=[
                EvidenceSection(title=s["title"], bullets=list(s.get("bullets", [])))
                for s in data.get("sections", [])
            ],
            sources=list(data.get("sources", [])),
            marker=data.get("marker", ANALYSIS_COMPLETE_MARKER),
        )


@dataclass
class Narrative:
    """What a template returns; the generator wraps it into an EvidenceBlock."""

    headline: str
    findings: list
    red_flags: list
    sources: list


def _fmt_number(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.1f}"


class Facts:
    """
    Forgiving read-only view over a fact dict.

    Accessors never raise: a missing key, a None value, an empty string, or
    a value of the wrong type all produce the caller's default.
    """

    def __init__(self, facts: Optional[dict] = None):
        self._facts = facts if isinstance(facts, dict) else {}

    def has(self, key: str) -> bool:
        value = self._facts.get(key)
        if value is None:
            return False
        if isinstance(value, (str, list, tuple, dict)) and len(value) == 0:
            return False
        return True

    def text(self, key: str, default: str) -> str:
        value = self._facts.get(key)
        if value is None:
            return default
        if isinstance(value, (list, tuple)):
            joined = ", ".join(self._as_name(v) for v in value if self._as_name(v))
            return joined or default
        text = str(value).strip()
        return text or default

    def items(self, key: str, limit: Optional[int] = None) -> list:
        value = self._facts.get(key)
        if value is None:
            return []
        if isinstance(value, (str, dict)):
            value = [value]
        if not isinstance(value, (list, tuple)):
            value = [value]
        names = [self._as_name(v) for v in value]
        names = [n for n in names if n]
        return names[:limit] if limit else names

    def names(self, key: str, default: str, limit: int = 5) -> str:
        names = self.items(key)
        if not names:
            return default
        shown = ", ".join(names[:limit])
        extra = len(names) - limit
        if extra > 0:
            shown += f" and {extra} more"
        return shown

    def number(self, key: str) -> Optional[float]:
        value = self._facts.get(key)
        if value is None or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    def count(self, key: str, default: str) -> str:
        value = self.number(key)
        return default if value is None else _fmt_number(value)

    def percent(self, key: str, default: str) -> str:
        """
        Render a ratio or percentage fact.

        Values in [0, 1] are treated as ratios (0.42 → '42%'); larger values
        are treated as percentages already (42 → '42%').
        """
        value = self.number(key)
        if value is None:
            return default
        if 0 <= value <= 1:
            value *= 100
        return f"{value:.0f}%"

    def flag(self, key: str) -> Optional[bool]:
        value = self._facts.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "yes", "1"):
            return True
        if isinstance(value, str) and value.strip().lower() in ("false", "no", "0"):
            return False
        return None

    @staticmethod
    def _as_name(value) -> str:
        if isinstance(value, dict):
            value = value.get("name") or value.get("handle") or value.get("url") or ""
        if value is None:
            return ""
        return str(value).strip()
