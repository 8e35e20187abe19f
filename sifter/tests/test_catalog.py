"""
Tests for the metric catalog.

Tests verify:
    - The 13 canonical metrics load in declaration order with weights summing to 100
    - lookup() raises UnknownMetric for keys outside the catalog
    - validate_weights() rejects catalogs that do not sum to 100
    - Status bands and display-name formatting
"""

import pytest

from sifter.exceptions import UnknownMetric, WeightSumError
from sifter.metrics.catalog import (
    CANONICAL_METRICS,
    DEFAULT_CATALOG,
    MetricCatalog,
    MetricDefinition,
    format_metric_name,
    metric_status,
)


def test_catalog_has_thirteen_metrics():
    assert len(DEFAULT_CATALOG) == 13
    assert len(DEFAULT_CATALOG.all()) == 13


def test_weights_sum_to_100():
    assert DEFAULT_CATALOG.total_weight() == 100
    DEFAULT_CATALOG.validate_weights()


def test_all_preserves_declaration_order():
    keys = [d.key for d in DEFAULT_CATALOG.all()]
    assert keys == [row[0] for row in CANONICAL_METRICS]
    assert keys[0] == "teamIdentity"
    assert keys[-1] == "tokenomics"
    assert [d.order for d in DEFAULT_CATALOG.all()] == list(range(13))


def test_highest_weights():
    """contaminatedNetwork dominates, then teamIdentity and teamCompetence."""
    ranked = sorted(DEFAULT_CATALOG.all(), key=lambda d: -d.weight)
    assert [d.key for d in ranked[:3]] == ["contaminatedNetwork", "teamIdentity", "teamCompetence"]
    assert DEFAULT_CATALOG.lookup("busFactor").weight == 2


def test_lookup_returns_definition():
    d = DEFAULT_CATALOG.lookup("contaminatedNetwork")
    assert d.weight == 19
    assert d.display_name == "Contaminated Network"


def test_lookup_unknown_key_raises():
    with pytest.raises(UnknownMetric) as exc:
        DEFAULT_CATALOG.lookup("moonPotential")
    assert exc.value.key == "moonPotential"


def test_unknown_metric_is_a_value_error():
    with pytest.raises(ValueError):
        DEFAULT_CATALOG.lookup("nope")


def test_get_returns_none_for_unknown():
    assert DEFAULT_CATALOG.get("nope") is None
    assert "nope" not in DEFAULT_CATALOG
    assert "tokenomics" in DEFAULT_CATALOG


def test_validate_weights_rejects_bad_sum():
    catalog = MetricCatalog([
        MetricDefinition("a", "A", 60, "first"),
        MetricDefinition("b", "B", 30, "second"),
    ])
    with pytest.raises(WeightSumError) as exc:
        catalog.validate_weights()
    assert exc.value.total == 90


def test_duplicate_keys_rejected():
    with pytest.raises(ValueError):
        MetricCatalog([
            MetricDefinition("a", "A", 50, "first"),
            MetricDefinition("a", "A again", 50, "second"),
        ])


@pytest.mark.parametrize(
    "score,expected",
    [
        (0, "low"), (29, "low"), (30, "moderate"), (49, "moderate"),
        (50, "high"), (69, "high"), (70, "critical"), (100, "critical"),
    ],
)
def test_metric_status_bands(score, expected):
    assert metric_status(score) == expected


def test_format_metric_name():
    assert format_metric_name("busFactor") == "Bus Factor"
    assert format_metric_name("messageTimeEntropy") == "Message Time Entropy"
    assert format_metric_name("x") == "X"
