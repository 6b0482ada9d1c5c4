from dataclasses import dataclass, field
from typing import Any, List, Optional

# Leaf values are bound as plain strings. Reporters deviate from the schema
# in the wild (counts with whitespace, capitalized keywords, unknown results)
# and the conversion into report values applies defaults instead.

ELEMENT = {"type": "Element", "namespace": ""}


def element() -> Any:
    return field(default=None, metadata=ELEMENT)


def elements() -> Any:
    return field(default_factory=list, metadata=ELEMENT)


@dataclass
class DateRangeType:
    begin: Optional[str] = element()
    end: Optional[str] = element()


@dataclass
class ReportMetadataType:
    org_name: Optional[str] = element()
    email: Optional[str] = element()
    extra_contact_info: Optional[str] = element()
    report_id: Optional[str] = element()
    date_range: Optional[DateRangeType] = element()
    error: List[str] = elements()


@dataclass
class PolicyPublishedType:
    domain: Optional[str] = element()
    adkim: Optional[str] = element()
    aspf: Optional[str] = element()
    p: Optional[str] = element()
    sp: Optional[str] = element()
    pct: Optional[str] = element()
    fo: Optional[str] = element()


@dataclass
class PolicyOverrideReason:
    type: Optional[str] = element()
    comment: Optional[str] = element()


@dataclass
class PolicyEvaluatedType:
    disposition: Optional[str] = element()
    dkim: Optional[str] = element()
    spf: Optional[str] = element()
    reason: List[PolicyOverrideReason] = elements()


@dataclass
class RowType:
    source_ip: Optional[str] = element()
    count: Optional[str] = element()
    policy_evaluated: Optional[PolicyEvaluatedType] = element()


@dataclass
class IdentifierType:
    envelope_to: Optional[str] = element()
    envelope_from: Optional[str] = element()
    header_from: Optional[str] = element()


@dataclass
class DkimauthResultType:
    class Meta:
        name = "DKIMAuthResultType"

    domain: Optional[str] = element()
    selector: Optional[str] = element()
    result: Optional[str] = element()
    human_result: Optional[str] = element()


@dataclass
class SpfauthResultType:
    class Meta:
        name = "SPFAuthResultType"

    domain: Optional[str] = element()
    scope: Optional[str] = element()
    result: Optional[str] = element()


@dataclass
class AuthResultType:
    dkim: List[DkimauthResultType] = elements()
    spf: List[SpfauthResultType] = elements()


@dataclass
class RecordType:
    row: Optional[RowType] = element()
    identifiers: Optional[IdentifierType] = element()
    auth_results: Optional[AuthResultType] = element()


@dataclass
class Feedback:
    class Meta:
        name = "feedback"

    version: Optional[str] = element()
    report_metadata: Optional[ReportMetadataType] = element()
    policy_published: Optional[PolicyPublishedType] = element()
    record: List[RecordType] = elements()
