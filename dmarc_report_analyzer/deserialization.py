import re
from datetime import datetime, timezone
from typing import Optional, Tuple
from xml.etree import ElementTree

from xsdata.exceptions import ParserError
from xsdata.formats.dataclass.context import XmlContext
from xsdata.formats.dataclass.parsers import XmlParser
from xsdata.formats.dataclass.parsers.config import ParserConfig

from dmarc_report_analyzer.errors import MalformedReportError
from dmarc_report_analyzer.extraction import BYTE_ORDER_MARK
from dmarc_report_analyzer.model.dmarc_aggregate_report import (
    AuthResultType,
    DateRangeType,
    Feedback,
    PolicyPublishedType,
    RecordType,
    ReportMetadataType,
)
from dmarc_report_analyzer.report import (
    EPOCH,
    UNKNOWN,
    AuthResult,
    ParsedReport,
    PublishedPolicy,
    ReportMetadata,
    SourceRecord,
)

LEADING_INTEGER = re.compile(r"[+-]?\d+")
ROOT_ELEMENT = "feedback"


def _text(value: Optional[str], default: str = "") -> str:
    if value is None:
        return default
    return value.strip() or default


def _keyword(value: Optional[str], default: str) -> str:
    return _text(value, default).lower()


def _parse_int(value: Optional[str]) -> int:
    """Leading integer of the value, so "1634256000.0" reads as 1634256000.
    Zero if the value does not start with a number."""
    match = LEADING_INTEGER.match(_text(value))
    return int(match.group()) if match else 0


def _parse_count(value: Optional[str]) -> int:
    return max(_parse_int(value), 0)


def _parse_timestamp(value: Optional[str]) -> datetime:
    try:
        return datetime.fromtimestamp(_parse_int(value), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return EPOCH


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _normalize_root(xml_text: str) -> str:
    root = ElementTree.fromstring(xml_text)
    root_name = _local_name(root.tag)
    if root_name != ROOT_ELEMENT:
        raise MalformedReportError(
            f"Expected <{ROOT_ELEMENT}> root element, found <{root_name}>."
        )
    elements = [element for element in root.iter() if isinstance(element.tag, str)]
    if not any(element.tag.startswith("{") for element in elements):
        return xml_text
    # Reports in a namespace (e.g. DMARC 2.0) bind like unqualified ones.
    for element in elements:
        element.tag = _local_name(element.tag)
    return ElementTree.tostring(root, encoding="unicode")


def parse_feedback(xml_text: str) -> Feedback:
    parser = XmlParser(
        context=XmlContext(), config=ParserConfig(fail_on_unknown_properties=False)
    )
    try:
        feedback = parser.from_string(
            _normalize_root(xml_text.lstrip(BYTE_ORDER_MARK).strip()), Feedback
        )
    except (ParserError, SyntaxError) as err:
        raise MalformedReportError(f"Failed to parse DMARC report: {err}") from err
    if feedback is None:
        raise MalformedReportError("Document has no root element.")
    return feedback


def parse_report(xml_text: str) -> ParsedReport:
    return convert_report(parse_feedback(xml_text))


def convert_report(feedback: Feedback) -> ParsedReport:
    return ParsedReport(
        metadata=convert_metadata(feedback.report_metadata),
        policy=convert_policy(feedback.policy_published),
        records=tuple(convert_record(record) for record in feedback.record),
    )


def convert_metadata(metadata: Optional[ReportMetadataType]) -> ReportMetadata:
    if metadata is None:
        return ReportMetadata()
    date_range = metadata.date_range or DateRangeType()
    return ReportMetadata(
        org_name=_text(metadata.org_name, UNKNOWN),
        email=_text(metadata.email),
        extra_contact_info=_text(metadata.extra_contact_info),
        report_id=_text(metadata.report_id),
        begin=_parse_timestamp(date_range.begin),
        end=_parse_timestamp(date_range.end),
        errors=tuple(_text(error) for error in metadata.error),
    )


def convert_policy(policy: Optional[PolicyPublishedType]) -> PublishedPolicy:
    if policy is None:
        return PublishedPolicy()
    p = _keyword(policy.p, "none")
    return PublishedPolicy(
        domain=_text(policy.domain, UNKNOWN),
        p=p,
        sp=_keyword(policy.sp, p),
        pct=_text(policy.pct, "100"),
        adkim=_keyword(policy.adkim, "r"),
        aspf=_keyword(policy.aspf, "r"),
        fo=_text(policy.fo),
    )


def _convert_auth_results(
    auth_results: Optional[AuthResultType],
) -> Tuple[Tuple[AuthResult, ...], Tuple[AuthResult, ...]]:
    if auth_results is None:
        return (), ()
    dkim = tuple(
        AuthResult(
            domain=_text(result.domain),
            result=_keyword(result.result, ""),
            selector=_text(result.selector),
        )
        for result in auth_results.dkim
    )
    spf = tuple(
        AuthResult(
            domain=_text(result.domain),
            result=_keyword(result.result, ""),
            scope=_keyword(result.scope, ""),
        )
        for result in auth_results.spf
    )
    return dkim, spf


def convert_record(record: RecordType) -> SourceRecord:
    row = record.row
    policy_evaluated = row.policy_evaluated if row else None
    identifiers = record.identifiers
    dkim_auth_results, spf_auth_results = _convert_auth_results(record.auth_results)

    return SourceRecord(
        source_ip=_text(row.source_ip, UNKNOWN) if row else UNKNOWN,
        count=_parse_count(row.count) if row else 0,
        disposition=_keyword(
            policy_evaluated.disposition if policy_evaluated else None, "none"
        ),
        dkim=_keyword(policy_evaluated.dkim if policy_evaluated else None, "fail"),
        spf=_keyword(policy_evaluated.spf if policy_evaluated else None, "fail"),
        header_from=_text(identifiers.header_from) if identifiers else "",
        envelope_from=_text(identifiers.envelope_from) if identifiers else "",
        envelope_to=_text(identifiers.envelope_to) if identifiers else "",
        dkim_auth_results=dkim_auth_results,
        spf_auth_results=spf_auth_results,
        override_reasons=tuple(
            _keyword(reason.type, "other") for reason in policy_evaluated.reason
        )
        if policy_evaluated
        else (),
    )
