import email
import email.policy
from email.contentmanager import raw_data_manager
from email.message import EmailMessage
from typing import List, cast

from dmarc_report_analyzer.report import Attachment

REPORT_CONTENT_TYPES = (
    "application/gzip",
    "application/x-gzip",
    "application/zip",
    "application/x-zip-compressed",
    "application/octet-stream",
    "application/xml",
    "text/xml",
)


def parse_email(data: bytes) -> EmailMessage:
    return cast(
        EmailMessage, email.message_from_bytes(data, policy=email.policy.default)
    )


def get_attachments(msg: EmailMessage) -> List[Attachment]:
    attachments = []
    for part in msg.walk():
        if part.is_multipart():
            continue
        filename = part.get_filename()
        content_type = part.get_content_type()
        if not filename and content_type not in REPORT_CONTENT_TYPES:
            continue
        content = raw_data_manager.get_content(part)
        if isinstance(content, str):
            content = content.encode("utf-8")
        attachments.append(
            Attachment(
                filename=filename or "", content_type=content_type, content=content
            )
        )
    return attachments
