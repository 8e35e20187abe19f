"""
sifter/exceptions.py: Error hierarchy for the Sifter risk engine.

Validation errors subclass ValueError as well as SifterError so callers that
only know about ValueError still catch bad input.
"""


class SifterError(Exception):
    """Base exception for all Sifter errors."""


class UnknownMetric(SifterError, ValueError):
    """A metric key is not part of the catalog."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown metric key: {key!r}")


class WeightSumError(SifterError, ValueError):
    """Catalog weights do not sum to 100."""

    def __init__(self, total: float):
        self.total = total
        super().__init__(f"Metric weights sum to {total}, expected 100")


class EmptyObservationSet(SifterError, ValueError):
    """Scoring was asked to run on zero observations."""


class ScoreOutOfRange(SifterError, ValueError):
    """An observation score or confidence is not a number in [0, 100]."""

    def __init__(self, key: str, field_name: str, value: float):
        self.key = key
        self.field_name = field_name
        self.value = value
        super().__init__(f"{key}.{field_name} = {value!r} is not a number in [0, 100]")


class MissingObservation(SifterError, ValueError):
    """One or more catalog metrics have no observation."""

    def __init__(self, missing: list):
        self.missing = list(missing)
        super().__init__(f"Missing observations for metrics: {', '.join(self.missing)}")


class DuplicateObservation(SifterError, ValueError):
    """A metric was observed more than once in a single scoring call."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Duplicate observation for metric: {key!r}")


class CapacityExceeded(SifterError):
    """A batch exceeds the configured project cap."""

    def __init__(self, submitted: int, limit: int):
        self.submitted = submitted
        self.limit = limit
        super().__init__(
            f"Batch of {submitted} projects exceeds the limit of {limit} projects per batch"
        )
