class ReportError(Exception):
    pass


class UnsupportedFormatError(ReportError):
    """The attachment could not be turned into XML text."""


class MalformedReportError(ReportError):
    """The XML text is not a well-formed aggregate report."""
