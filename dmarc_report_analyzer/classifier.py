from typing import Iterable, Optional

from dmarc_report_analyzer.extraction import BYTE_ORDER_MARK, is_gzip, is_zip
from dmarc_report_analyzer.report import Attachment

REPORT_EXTENSIONS = (".xml", ".gz", ".gzip", ".zip")
# Reporters usually name files "receiver!policy-domain!begin!end.xml.gz".
FILENAME_HINTS = ("dmarc", "!", "rua")
CONTENT_MARKERS = ("<?xml", "<feedback", "report_metadata", "policy_published")
PROBE_LENGTH = 500


def _looks_like_xml(attachment: Attachment, preview: str) -> bool:
    return (
        attachment.filename.lower().endswith(".xml")
        or "xml" in attachment.content_type.lower()
        or preview.lstrip(BYTE_ORDER_MARK).lstrip().startswith("<")
    )


def is_dmarc_report_likely(attachment: Attachment) -> bool:
    content = attachment.content
    # Compressed payloads cannot be inspected further without decompressing.
    if is_gzip(content) or is_zip(content):
        return True
    preview = content[:PROBE_LENGTH].decode("utf-8", errors="ignore")
    if not _looks_like_xml(attachment, preview):
        return False
    return any(marker in preview for marker in CONTENT_MARKERS)


def has_report_extension(attachment: Attachment) -> bool:
    return attachment.filename.lower().endswith(REPORT_EXTENSIONS)


def has_report_filename(attachment: Attachment) -> bool:
    filename = attachment.filename.lower()
    return any(hint in filename for hint in FILENAME_HINTS)


def select_dmarc_attachment(
    candidates: Iterable[Attachment],
) -> Optional[Attachment]:
    attachments = list(candidates)
    for attachment in attachments:
        if has_report_extension(attachment) and (
            has_report_filename(attachment) or is_dmarc_report_likely(attachment)
        ):
            return attachment
    for attachment in attachments:
        if is_dmarc_report_likely(attachment):
            return attachment
    return None
