from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Tuple

from dmarc_report_analyzer.report import ParsedReport

TOP_SOURCES_LIMIT = 5


@dataclass(frozen=True)
class SourceVolume:
    ip: str
    count: int


@dataclass(frozen=True)
class DispositionCount:
    disposition: str
    count: int


@dataclass(frozen=True)
class SummaryStatistics:
    # pylint: disable=too-many-instance-attributes
    total_messages: int = 0
    passed_messages: int = 0
    failed_messages: int = 0
    pass_rate: float = 0.0
    passed_by_dkim: int = 0
    passed_by_spf: int = 0
    dkim_pass_rate: float = 0.0
    spf_pass_rate: float = 0.0
    disposition_counts: Tuple[DispositionCount, ...] = ()
    record_count: int = 0
    top_sources: Tuple[SourceVolume, ...] = ()


def rate(part: int, total: int) -> float:
    """Percentage of ``part`` in ``total`` rounded half away from zero to one
    decimal place. Zero if there is nothing to take a share of."""
    if total <= 0:
        return 0.0
    percentage = Decimal(part) * 100 / Decimal(total)
    return float(percentage.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def aggregate(
    report: ParsedReport, top_sources_limit: int = TOP_SOURCES_LIMIT
) -> SummaryStatistics:
    total = 0
    passed = 0
    passed_by_dkim = 0
    passed_by_spf = 0
    disposition_counts: Dict[str, int] = {}
    volume_by_ip: Dict[str, int] = {}

    for record in report.records:
        total += record.count
        if record.passed:
            passed += record.count
        if record.dkim == "pass":
            passed_by_dkim += record.count
        if record.spf == "pass":
            passed_by_spf += record.count
        disposition_counts[record.disposition] = (
            disposition_counts.get(record.disposition, 0) + record.count
        )
        volume_by_ip[record.source_ip] = (
            volume_by_ip.get(record.source_ip, 0) + record.count
        )

    # sorted() is stable and dicts keep insertion order, so ties stay in
    # the order the sources first appeared.
    ranked = sorted(volume_by_ip.items(), key=lambda item: item[1], reverse=True)

    return SummaryStatistics(
        total_messages=total,
        passed_messages=passed,
        failed_messages=total - passed,
        pass_rate=rate(passed, total),
        passed_by_dkim=passed_by_dkim,
        passed_by_spf=passed_by_spf,
        dkim_pass_rate=rate(passed_by_dkim, total),
        spf_pass_rate=rate(passed_by_spf, total),
        disposition_counts=tuple(
            DispositionCount(disposition, count)
            for disposition, count in disposition_counts.items()
        ),
        record_count=len(report.records),
        top_sources=tuple(
            SourceVolume(ip=ip, count=count)
            for ip, count in ranked[: max(top_sources_limit, 0)]
        ),
    )
