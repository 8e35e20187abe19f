"""
sifter/metrics/catalog.py: The static registry of the 13 risk metrics.

Each metric is a single risk dimension observed by the data-collection layer
(Twitter, Discord, GitHub, on-chain). Scores are risk scores: 0 is clean,
100 is the worst observed pattern. The weight is the metric's share (in
percent) of the composite score, so the 13 weights sum to exactly 100.

Declaration order is canonical. It is the order of all() and the tie-breaker
when two metrics contribute equally to a composite score.

Weight table (highest first):
    contaminatedNetwork 19, teamIdentity 13, teamCompetence 11,
    tokenomics 7, tweetFocus 7, githubAuthenticity 7,
    engagementAuthenticity 7, mercenaryKeywords 6, founderDistraction 6,
    artificialHype 5, messageTimeEntropy 5, accountAgeEntropy 5, busFactor 2.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from sifter.config import DEFAULT_CONFIG, SifterConfig
from sifter.exceptions import UnknownMetric, WeightSumError

logger = logging.getLogger(__name__)

TOTAL_WEIGHT = 100


@dataclass(frozen=True)
class MetricDefinition:
    """
    Definition of a single risk metric.

    Fields:
        key:          Unique camelCase key used on the wire, e.g. 'teamIdentity'.
        display_name: Human-readable name, e.g. 'Team Identity'.
        weight:       Percent share of the composite score (0-100).
        description:  One-line description of what the metric measures.
        order:        Declaration index (0-based) in the catalog.
    """

    key: str
    display_name: str
    weight: int
    description: str
    order: int = 0


# (key, display name, weight, description) in canonical declaration order.
CANONICAL_METRICS = (
    ("teamIdentity", "Team Identity", 13,
     "Team legitimacy and identity verification"),
    ("teamCompetence", "Team Competence", 11,
     "Technical ability and track record"),
    ("contaminatedNetwork", "Contaminated Network", 19,
     "Connections to known bad actors"),
    ("mercenaryKeywords", "Mercenary Keywords", 6,
     "Financial vs genuine community discourse"),
    ("messageTimeEntropy", "Message Time Entropy", 5,
     "Natural vs coordinated posting patterns"),
    ("accountAgeEntropy", "Account Age Entropy", 5,
     "Organic vs bulk account creation"),
    ("tweetFocus", "Tweet Focus", 7,
     "Narrative consistency and coherence"),
    ("githubAuthenticity", "GitHub Authenticity", 7,
     "Real development vs copy-paste code"),
    ("busFactor", "Bus Factor", 2,
     "Single point of failure risk"),
    ("artificialHype", "Artificial Hype", 5,
     "Organic vs paid growth campaigns"),
    ("founderDistraction", "Founder Distraction", 6,
     "Focus on building vs personal brand"),
    ("engagementAuthenticity", "Engagement Authenticity", 7,
     "Genuine vs performative engagement"),
    ("tokenomics", "Tokenomics", 7,
     "Economic structure and fairness"),
)


def metric_status(score: float, config: SifterConfig = DEFAULT_CONFIG) -> str:
    """
    Map a single metric score to its display status.

    Bands (from config.status_ladder):
        < 30 'low', 30-49 'moderate', 50-69 'high', >= 70 'critical'.
    """
    for upper, status in config.status_ladder:
        if score < upper:
            return status
    return config.status_ladder[-1][1]


def format_metric_name(key: str) -> str:
    """Split a camelCase key into words: 'busFactor' -> 'Bus Factor'."""
    words: list[str] = []
    current = ""
    for ch in key:
        if ch.isupper() and current:
            words.append(current)
            current = ch
        else:
            current += ch
    if current:
        words.append(current)
    return " ".join(w[:1].upper() + w[1:] for w in words)


class MetricCatalog:
    """
    Read-only registry of MetricDefinitions.

    Built once at process start (DEFAULT_CATALOG) and shared across threads;
    nothing mutates it after construction.
    """

    def __init__(self, definitions):
        defs: list[MetricDefinition] = []
        seen: set[str] = set()
        for index, d in enumerate(definitions):
            if d.key in seen:
                raise ValueError(f"Duplicate metric key in catalog: {d.key!r}")
            seen.add(d.key)
            # Re-stamp declaration order so ties always break the same way.
            defs.append(
                MetricDefinition(
                    key=d.key,
                    display_name=d.display_name,
                    weight=d.weight,
                    description=d.description,
                    order=index,
                )
            )
        self._definitions = tuple(defs)
        self._by_key = {d.key: d for d in self._definitions}

    @classmethod
    def from_table(cls, table=CANONICAL_METRICS) -> "MetricCatalog":
        """Build a catalog from (key, display_name, weight, description) rows."""
        return cls(
            MetricDefinition(key=k, display_name=n, weight=w, description=desc)
            for k, n, w, desc in table
        )

    def lookup(self, key: str) -> MetricDefinition:
        """Return the definition for key, or raise UnknownMetric."""
        try:
            return self._by_key[key]
        except KeyError:
            raise UnknownMetric(key) from None

    def get(self, key: str) -> Optional[MetricDefinition]:
        return self._by_key.get(key)

    def all(self) -> tuple:
        """All definitions in canonical declaration order."""
        return self._definitions

    def keys(self) -> list[str]:
        return [d.key for d in self._definitions]

    def total_weight(self) -> int:
        return sum(d.weight for d in self._definitions)

    def validate_weights(self) -> None:
        """
        Raise WeightSumError unless the weights sum to exactly 100.

        Individual weights must also lie in [0, 100].
        """
        for d in self._definitions:
            if not 0 <= d.weight <= TOTAL_WEIGHT:
                raise WeightSumError(self.total_weight())
        total = self.total_weight()
        if total != TOTAL_WEIGHT:
            logger.error("Metric catalog weights sum to %s (expected %d).", total, TOTAL_WEIGHT)
            raise WeightSumError(total)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __iter__(self) -> Iterator[MetricDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)


# Loaded once at import time and validated immediately.
DEFAULT_CATALOG = MetricCatalog.from_table()
DEFAULT_CATALOG.validate_weights()
