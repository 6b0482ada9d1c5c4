from dataclasses import dataclass
from typing import Iterable, Optional

from dmarc_report_analyzer.aggregation import SummaryStatistics, aggregate
from dmarc_report_analyzer.classifier import select_dmarc_attachment
from dmarc_report_analyzer.config import AnalyzerConfig
from dmarc_report_analyzer.deserialization import parse_report
from dmarc_report_analyzer.extraction import extract_text
from dmarc_report_analyzer.health import AnalysisResult, analyze
from dmarc_report_analyzer.report import Attachment, ParsedReport


@dataclass(frozen=True)
class ReportAnalysis:
    filename: str
    report: ParsedReport
    statistics: SummaryStatistics
    analysis: AnalysisResult


def analyze_attachment(
    attachment: Attachment, config: AnalyzerConfig = AnalyzerConfig()
) -> ReportAnalysis:
    xml_text = extract_text(
        attachment.content, attachment.filename, attachment.content_type
    )
    report = parse_report(xml_text)
    statistics = aggregate(report, top_sources_limit=config.top_sources_limit)
    return ReportAnalysis(
        filename=attachment.filename,
        report=report,
        statistics=statistics,
        analysis=analyze(
            report,
            statistics,
            suspicious_source_min_count=config.suspicious_source_min_count,
        ),
    )


def analyze_attachments(
    candidates: Iterable[Attachment], config: AnalyzerConfig = AnalyzerConfig()
) -> Optional[ReportAnalysis]:
    """Analyze the attachment most likely to be a DMARC aggregate report.

    Returns ``None`` if none of the candidates looks like a report. Errors
    while extracting or parsing the selected attachment propagate.
    """
    attachment = select_dmarc_attachment(candidates)
    if attachment is None:
        return None
    return analyze_attachment(attachment, config)
