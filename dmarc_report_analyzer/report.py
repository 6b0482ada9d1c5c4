from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Tuple

UNKNOWN = "Unknown"
EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


@dataclass(frozen=True)
class Attachment:
    filename: str
    content_type: str
    content: bytes = field(repr=False)


@dataclass(frozen=True)
class ReportMetadata:
    org_name: str = UNKNOWN
    email: str = ""
    extra_contact_info: str = ""
    report_id: str = ""
    begin: datetime = EPOCH
    end: datetime = EPOCH
    errors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PublishedPolicy:
    domain: str = UNKNOWN
    p: str = "none"
    sp: str = "none"
    pct: str = "100"
    adkim: str = "r"
    aspf: str = "r"
    fo: str = ""


@dataclass(frozen=True)
class AuthResult:
    domain: str = ""
    result: str = ""
    selector: str = ""
    scope: str = ""


@dataclass(frozen=True)
class SourceRecord:
    # pylint: disable=too-many-instance-attributes
    source_ip: str = UNKNOWN
    count: int = 0
    disposition: str = "none"
    dkim: str = "fail"
    spf: str = "fail"
    header_from: str = ""
    envelope_from: str = ""
    envelope_to: str = ""
    dkim_auth_results: Tuple[AuthResult, ...] = ()
    spf_auth_results: Tuple[AuthResult, ...] = ()
    override_reasons: Tuple[str, ...] = ()
    passed: bool = field(init=False)

    def __post_init__(self):
        # DMARC passes if either aligned mechanism passes.
        object.__setattr__(self, "passed", self.dkim == "pass" or self.spf == "pass")

    @property
    def dkim_domain(self) -> str:
        return self.dkim_auth_results[0].domain if self.dkim_auth_results else ""

    @property
    def dkim_result(self) -> str:
        return self.dkim_auth_results[0].result if self.dkim_auth_results else ""

    @property
    def spf_domain(self) -> str:
        return self.spf_auth_results[0].domain if self.spf_auth_results else ""

    @property
    def spf_result(self) -> str:
        return self.spf_auth_results[0].result if self.spf_auth_results else ""


@dataclass(frozen=True)
class ParsedReport:
    metadata: ReportMetadata = field(default_factory=ReportMetadata)
    policy: PublishedPolicy = field(default_factory=PublishedPolicy)
    records: Tuple[SourceRecord, ...] = ()

    @property
    def domain(self) -> str:
        return self.policy.domain
