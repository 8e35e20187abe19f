"""
sifter/reports/assessment.py: Score-banded wording and colours.

Everything here is a pure function of the composite score. The five bands
come from config.recommendation_bands (>=80, 60-79, 40-59, 20-39, <20);
each band carries a recommendation ladder entry, a one-line final
assessment, a detailed paragraph and a display colour.
"""

from dataclasses import dataclass

from sifter.config import DEFAULT_CONFIG, SifterConfig


@dataclass(frozen=True)
class Recommendation:
    """
    Headline action plus supporting reasons for one score band.

    Fields:
        headline: Action statement, e.g. 'DO NOT INVEST in this project'.
        reasons:  Ordered supporting reasons.
    """

    headline: str
    reasons: tuple

    def as_list(self) -> list:
        return [self.headline, *self.reasons]


# One row per band, highest risk first. Columns: recommendation, final
# assessment, detailed assessment, risk colour, chat colour.
_BANDS = (
    (
        Recommendation(
            "DO NOT INVEST in this project",
            (
                "Multiple critical red flags detected",
                "High probability of scam based on historical patterns",
                "Connected to known bad actors",
            ),
        ),
        "DO NOT INVEST - High probability of scam",
        "This project shows multiple critical red flags indicating a high probability "
        "of fraudulent activity. Strongly recommended to avoid any interaction or investment.",
        "#ef4444",
        "#ff0000",
    ),
    (
        Recommendation(
            "Extreme caution advised",
            (
                "Multiple concerning signals detected",
                "Consider waiting for more development",
                "Monitor community health closely",
            ),
        ),
        "HIGH RISK - Extreme caution advised",
        "Significant risks detected requiring thorough investigation. Proceed with extreme "
        "caution and conduct additional due diligence before considering any engagement.",
        "#f59e0b",
        "#ff9900",
    ),
    (
        Recommendation(
            "Proceed with caution",
            (
                "Some positive signals mixed with concerns",
                "Do additional research before investing",
                "Check team updates and progress",
            ),
        ),
        "MODERATE RISK - Additional research needed",
        "Moderate risk profile detected. Additional research and verification recommended "
        "before making any investment decisions.",
        "#3b82f6",
        "#ffff00",
    ),
    (
        Recommendation(
            "Looks promising",
            (
                "Mostly positive signals",
                "Standard due diligence recommended",
                "Monitor tokenomics and vesting",
            ),
        ),
        "LOW RISK - Standard due diligence",
        "Low risk detected. Standard due diligence procedures should be sufficient for evaluation.",
        "#10b981",
        "#00ff00",
    ),
    (
        Recommendation(
            "Strong fundamentals",
            (
                "Excellent risk profile",
                "Appears legitimate and well-structured",
                "Continue monitoring as with any investment",
            ),
        ),
        "VERY LOW RISK - Appears legitimate",
        "Minimal risk detected. Project appears legitimate based on current analysis.",
        "#059669",
        "#00ff00",
    ),
)


def _band_index(score: float, config: SifterConfig) -> int:
    for index, lower in enumerate(config.recommendation_bands):
        if score >= lower:
            return index
    return len(config.recommendation_bands)


def recommendation_for(score: float, config: SifterConfig = DEFAULT_CONFIG) -> Recommendation:
    """Recommendation ladder entry for a composite score."""
    return _BANDS[_band_index(score, config)][0]


def final_assessment(score: float, config: SifterConfig = DEFAULT_CONFIG) -> str:
    """One-line final assessment, e.g. 'HIGH RISK - Extreme caution advised'."""
    return _BANDS[_band_index(score, config)][1]


def detailed_assessment(score: float, config: SifterConfig = DEFAULT_CONFIG) -> str:
    return _BANDS[_band_index(score, config)][2]


def risk_color(score: float, config: SifterConfig = DEFAULT_CONFIG) -> str:
    """Hex colour for the composite score in HTML reports and Teams cards."""
    return _BANDS[_band_index(score, config)][3]


def chat_color(score: float, config: SifterConfig = DEFAULT_CONFIG) -> str:
    """Slack attachment colour (the two lowest bands share green)."""
    return _BANDS[_band_index(score, config)][4]


def verdict_label(verdict: str) -> str:
    return verdict.upper()


def risk_summary(score: int, verdict: str, tier: str, confidence: int) -> str:
    """Three-line summary used in chat cards: verdict, score/tier, confidence."""
    return (
        f"{verdict_label(verdict)}\n"
        f"Risk Score: {score}/100 ({tier})\n"
        f"Confidence: {confidence}%"
    )
