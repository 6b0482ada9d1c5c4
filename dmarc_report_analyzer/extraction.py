import gzip
import io
import zlib
from typing import Callable, Tuple
from zipfile import BadZipFile, ZipFile

from dmarc_report_analyzer.errors import UnsupportedFormatError

GZIP_MAGIC = b"\x1f\x8b"
ZIP_MAGIC = b"PK"
BYTE_ORDER_MARK = "\ufeff"


def is_gzip(data: bytes) -> bool:
    return data[:2] == GZIP_MAGIC


def is_zip(data: bytes) -> bool:
    return data[:2] == ZIP_MAGIC


def decode_text(data: bytes) -> str:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as err:
        raise UnsupportedFormatError("Payload is not valid UTF-8 text.") from err
    return text.lstrip(BYTE_ORDER_MARK)


def handle_gzip(data: bytes) -> str:
    try:
        decompressed = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as err:
        hint = "" if is_gzip(data) else " (gzip magic number missing)"
        raise UnsupportedFormatError(
            f"Failed to decompress gzip payload{hint}: {err}"
        ) from err
    return decode_text(decompressed)


def handle_zip(data: bytes) -> str:
    try:
        with ZipFile(io.BytesIO(data), "r") as zip_file:
            names = [
                info.filename for info in zip_file.infolist() if not info.is_dir()
            ]
            if not names:
                raise UnsupportedFormatError("Zip archive contains no files.")
            xml_names = [name for name in names if name.lower().endswith(".xml")]
            with zip_file.open((xml_names or names)[0], "r") as f:
                content = f.read()
    except (
        BadZipFile,
        OSError,
        EOFError,
        zlib.error,
        RuntimeError,  # encrypted member
        NotImplementedError,  # unsupported compression method
    ) as err:
        hint = "" if is_zip(data) else " (zip magic number missing)"
        raise UnsupportedFormatError(
            f"Failed to decompress zip payload{hint}: {err}"
        ) from err
    return decode_text(content)


def handle_xml(data: bytes) -> str:
    return decode_text(data)


def handle_unknown(data: bytes) -> str:
    if is_gzip(data):
        return handle_gzip(data)
    if is_zip(data):
        return handle_zip(data)
    text = decode_text(data)
    if not text.lstrip().startswith("<"):
        raise UnsupportedFormatError("Payload is neither gzip, zip, nor XML.")
    return text


# Checked in order, first match wins.
format_handlers: Tuple[Tuple[str, Tuple[str, ...], Callable[[bytes], str]], ...] = (
    ("gzip", (".gz", ".gzip"), handle_gzip),
    ("zip", (".zip",), handle_zip),
    ("xml", (".xml",), handle_xml),
)


def _select_handler(filename: str, content_type: str) -> Callable[[bytes], str]:
    filename = filename.lower()
    content_type = content_type.lower()
    for content_type_fragment, extensions, handler in format_handlers:
        if filename.endswith(extensions) or content_type_fragment in content_type:
            return handler
    return handle_unknown


def extract_text(data: bytes, filename: str = "", content_type: str = "") -> str:
    handler = _select_handler(filename or "", content_type or "")
    return handler(data)
