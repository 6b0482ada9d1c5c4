import dataclasses

import pytest

from dmarc_report_analyzer.aggregation import (
    DispositionCount,
    SourceVolume,
    SummaryStatistics,
    aggregate,
    rate,
)
from dmarc_report_analyzer.report import ParsedReport, SourceRecord


def create_report(*records: SourceRecord) -> ParsedReport:
    return ParsedReport(records=records)


def test_aggregate():
    report = create_report(
        SourceRecord(source_ip="192.0.2.1", count=6, dkim="pass", spf="pass"),
        SourceRecord(source_ip="192.0.2.2", count=2, dkim="pass", spf="fail"),
        SourceRecord(
            source_ip="192.0.2.3", count=1, disposition="reject", dkim="fail", spf="pass"
        ),
        SourceRecord(
            source_ip="192.0.2.4",
            count=3,
            disposition="quarantine",
            dkim="fail",
            spf="fail",
        ),
    )
    assert aggregate(report) == SummaryStatistics(
        total_messages=12,
        passed_messages=9,
        failed_messages=3,
        pass_rate=75.0,
        passed_by_dkim=8,
        passed_by_spf=7,
        dkim_pass_rate=66.7,
        spf_pass_rate=58.3,
        disposition_counts=(
            DispositionCount("none", 8),
            DispositionCount("reject", 1),
            DispositionCount("quarantine", 3),
        ),
        record_count=4,
        top_sources=(
            SourceVolume("192.0.2.1", 6),
            SourceVolume("192.0.2.4", 3),
            SourceVolume("192.0.2.2", 2),
            SourceVolume("192.0.2.3", 1),
        ),
    )


def test_message_passing_both_mechanisms_is_counted_once():
    statistics = aggregate(
        create_report(SourceRecord(count=4, dkim="pass", spf="pass"))
    )
    assert statistics.passed_messages == 4
    assert statistics.passed_by_dkim == 4
    assert statistics.passed_by_spf == 4


def test_aggregate_empty_report():
    statistics = aggregate(ParsedReport())
    assert statistics == SummaryStatistics()
    assert statistics.pass_rate == 0


def test_statistics_are_immutable_and_hashable():
    statistics = aggregate(
        create_report(
            SourceRecord(count=2, dkim="pass"),
            SourceRecord(count=1, disposition="reject"),
        )
    )

    assert hash(statistics) == hash(dataclasses.replace(statistics))
    assert statistics.disposition_counts == (
        DispositionCount("none", 2),
        DispositionCount("reject", 1),
    )
    with pytest.raises(TypeError):
        statistics.disposition_counts[0] = DispositionCount("none", 999)  # type: ignore
    with pytest.raises(dataclasses.FrozenInstanceError):
        statistics.disposition_counts[0].count = 999  # type: ignore


def test_top_sources_sums_counts_per_ip():
    statistics = aggregate(
        create_report(
            SourceRecord(source_ip="192.0.2.1", count=2),
            SourceRecord(source_ip="192.0.2.2", count=3),
            SourceRecord(source_ip="192.0.2.1", count=2),
        )
    )
    assert statistics.top_sources == (
        SourceVolume("192.0.2.1", 4),
        SourceVolume("192.0.2.2", 3),
    )


def test_top_sources_are_limited_and_ties_keep_first_seen_order():
    report = create_report(
        *(SourceRecord(source_ip=f"192.0.2.{i}", count=1) for i in range(8)),
        SourceRecord(source_ip="198.51.100.1", count=5),
    )
    statistics = aggregate(report)
    assert [source.ip for source in statistics.top_sources] == [
        "198.51.100.1",
        "192.0.2.0",
        "192.0.2.1",
        "192.0.2.2",
        "192.0.2.3",
    ]
    assert sum(source.count for source in statistics.top_sources) <= (
        statistics.total_messages
    )


def test_top_sources_limit_is_configurable():
    report = create_report(
        *(SourceRecord(source_ip=f"192.0.2.{i}", count=i) for i in range(1, 4))
    )
    assert aggregate(report, top_sources_limit=1).top_sources == (
        SourceVolume("192.0.2.3", 3),
    )


@pytest.mark.parametrize(
    "part,total,expected",
    [
        (0, 0, 0.0),
        (5, 0, 0.0),
        (0, 7, 0.0),
        (7, 7, 100.0),
        (1, 3, 33.3),
        (2, 3, 66.7),
        # halves round away from zero
        (1, 400, 0.3),
        (7, 2000, 0.4),
    ],
)
def test_rate(part, total, expected):
    assert rate(part, total) == expected


@pytest.mark.parametrize(
    "counts",
    [(), (1,), (0, 0), (5, 17, 1, 300), (999, 1)],
)
def test_totals_are_consistent(counts):
    report = create_report(
        *(
            SourceRecord(
                source_ip=f"192.0.2.{i}",
                count=count,
                dkim="pass" if i % 2 else "fail",
                spf="pass" if i % 3 == 0 else "fail",
            )
            for i, count in enumerate(counts)
        )
    )
    statistics = aggregate(report)
    assert statistics.total_messages == sum(counts)
    assert (
        statistics.passed_messages + statistics.failed_messages
        == statistics.total_messages
    )
    assert 0 <= statistics.pass_rate <= 100
    assert len(statistics.top_sources) <= 5
    assert [source.count for source in statistics.top_sources] == sorted(
        (source.count for source in statistics.top_sources), reverse=True
    )
