from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from dmarc_report_analyzer.aggregation import SummaryStatistics
from dmarc_report_analyzer.report import ParsedReport

SUSPICIOUS_SOURCE_MIN_COUNT = 10
ENFORCING_POLICIES = ("quarantine", "reject")


class Rating(Enum):
    UNKNOWN = "UNKNOWN"
    BAD = "BAD"
    POOR = "POOR"
    FAIR = "FAIR"
    GOOD = "GOOD"
    EXCELLENT = "EXCELLENT"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @property
    def simplified(self) -> str:
        """Three-tier label: GOOD, WARNING or BAD."""
        return _SIMPLIFIED[self]


_RANKS = {rating: rank for rank, rating in enumerate(Rating)}

_SIMPLIFIED = {
    Rating.UNKNOWN: "UNKNOWN",
    Rating.BAD: "BAD",
    Rating.POOR: "WARNING",
    Rating.FAIR: "WARNING",
    Rating.GOOD: "GOOD",
    Rating.EXCELLENT: "GOOD",
}


@dataclass(frozen=True)
class AnalysisResult:
    rating: Rating
    health_score: float
    issues: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()


def determine_rating(pass_rate: float, policy: str, total_messages: int) -> Rating:
    if total_messages <= 0:
        return Rating.UNKNOWN
    if pass_rate >= 95 and policy in ENFORCING_POLICIES:
        return Rating.EXCELLENT
    if pass_rate >= 90 and policy != "none":
        return Rating.GOOD
    if pass_rate >= 80:
        return Rating.FAIR
    if pass_rate >= 60:
        return Rating.POOR
    return Rating.BAD


def analyze(
    report: ParsedReport,
    statistics: SummaryStatistics,
    suspicious_source_min_count: int = SUSPICIOUS_SOURCE_MIN_COUNT,
) -> AnalysisResult:
    policy = report.policy.p
    pass_rate = statistics.pass_rate
    issues: List[str] = []
    recommendations: List[str] = []

    if pass_rate < 100:
        issues.append(
            f"{statistics.failed_messages} message(s) failed DMARC authentication"
        )

    if policy == "none":
        issues.append('DMARC policy is set to "none" - no action taken on failures')
        recommendations.append('Consider upgrading to "quarantine" or "reject" policy')

    if pass_rate < 90:
        recommendations.append(
            "Review failed authentication records and fix SPF/DKIM configuration"
        )

    suspicious_sources = [
        f"{record.source_ip} ({record.count} messages)"
        for record in report.records
        if not record.passed and record.count > suspicious_source_min_count
    ]
    if suspicious_sources:
        issues.append("High volume of failures from: " + ", ".join(suspicious_sources))
        recommendations.append(
            "Investigate sources with high failure counts for potential spoofing"
        )

    return AnalysisResult(
        rating=determine_rating(pass_rate, policy, statistics.total_messages),
        health_score=pass_rate,
        issues=tuple(issues),
        recommendations=tuple(recommendations),
    )
