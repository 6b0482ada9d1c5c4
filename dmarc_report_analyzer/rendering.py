"""Plain text rendering of a report analysis.

Mirrors the summary and details views of a mail client integration. Nothing
in the analysis depends on this module; other front ends render the
serialized analysis instead.
"""
from typing import List

from dmarc_report_analyzer.pipeline import ReportAnalysis
from dmarc_report_analyzer.report import SourceRecord

DATE_FORMAT = "%Y-%m-%d"


def render_summary(result: ReportAnalysis) -> str:
    report, statistics, analysis = result.report, result.statistics, result.analysis
    metadata, policy = report.metadata, report.policy
    lines: List[str] = [
        f"DMARC Report Summary: {policy.domain}",
        f"Reporter: {metadata.org_name}"
        + (f" <{metadata.email}>" if metadata.email else ""),
        f"Report ID: {metadata.report_id or 'N/A'}",
        f"Report period: {metadata.begin.strftime(DATE_FORMAT)} to "
        f"{metadata.end.strftime(DATE_FORMAT)}",
        "",
        f"Overall rating: {analysis.rating.value} ({analysis.rating.simplified})",
        f"Total messages: {statistics.total_messages}",
        f"DMARC pass rate: {statistics.pass_rate}% "
        f"({statistics.passed_messages} passed, "
        f"{statistics.failed_messages} failed)",
        f"DKIM pass rate: {statistics.dkim_pass_rate}%",
        f"SPF pass rate: {statistics.spf_pass_rate}%",
        "",
        "Published policy:",
        f"  Policy (p): {policy.p.upper()}",
        f"  Subdomain policy (sp): {policy.sp.upper()}",
        f"  Percentage (pct): {policy.pct}%",
        f"  DKIM alignment (adkim): {policy.adkim}",
        f"  SPF alignment (aspf): {policy.aspf}",
    ]

    if statistics.top_sources:
        lines += ["", f"Top {len(statistics.top_sources)} sending sources:"]
        lines += [
            f"  {source.ip}: {source.count} messages"
            for source in statistics.top_sources
        ]
    if analysis.issues:
        lines += ["", "Issues:"] + [f"  - {issue}" for issue in analysis.issues]
    if analysis.recommendations:
        lines += ["", "Recommendations:"] + [
            f"  - {recommendation}" for recommendation in analysis.recommendations
        ]
    return "\n".join(lines)


def _render_record(record: SourceRecord) -> List[str]:
    return [
        f"Source IP: {record.source_ip}",
        f"  Messages: {record.count}",
        f"  Header from: {record.header_from or 'N/A'}",
        f"  Disposition: {record.disposition}",
        f"  DMARC: {'pass' if record.passed else 'fail'} "
        f"(DKIM {record.dkim}, SPF {record.spf})",
        f"  DKIM auth: {record.dkim_result or 'N/A'}"
        + (f" for {record.dkim_domain}" if record.dkim_domain else ""),
        f"  SPF auth: {record.spf_result or 'N/A'}"
        + (f" for {record.spf_domain}" if record.spf_domain else ""),
    ]


def render_details(result: ReportAnalysis) -> str:
    lines = [
        f"Report Analysis: {result.report.domain} "
        f"from {result.report.metadata.org_name}",
        f"Records: {result.statistics.record_count}",
    ]
    for record in result.report.records:
        lines += [""] + _render_record(record)
    return "\n".join(lines)
