import io
import json

import pytest

from dmarc_report_analyzer.app import (
    EXIT_FAILURE,
    EXIT_NO_REPORT,
    EXIT_SUCCESS,
    main,
)
from dmarc_report_analyzer.tests.sample_attachments import (
    create_email_with_attachments,
    create_gzip_attachment,
    create_pdf_attachment,
    encrypted_zip_bytes,
    gzip_bytes,
)


@pytest.fixture(name="report_path")
def fixture_report_path(tmp_path):
    attachment = create_gzip_attachment()
    path = tmp_path / attachment.filename
    path.write_bytes(attachment.content)
    return path


def test_prints_analysis_as_json(report_path, capsys):
    assert main([str(report_path)]) == EXIT_SUCCESS

    doc = json.loads(capsys.readouterr().out)
    assert doc["filename"] == report_path.name
    assert doc["report"]["policy"]["domain"] == "mydomain.de"
    assert doc["statistics"]["total_messages"] == 15
    assert doc["analysis"]["rating"] == "FAIR"


def test_prints_text_summary(report_path, capsys):
    assert main(["--format", "text", str(report_path)]) == EXIT_SUCCESS

    out = capsys.readouterr().out
    assert out.startswith("DMARC Report Summary: mydomain.de\n")
    assert "Source IP:" not in out


def test_prints_text_details(report_path, capsys):
    assert main(["--format", "text", "--details", str(report_path)]) == EXIT_SUCCESS

    out = capsys.readouterr().out
    assert "DMARC Report Summary: mydomain.de" in out
    assert "Source IP: 192.0.2.7" in out


def test_filename_hint_overrides_path_name(tmp_path, capsys):
    path = tmp_path / "payload.bin"
    path.write_bytes(create_gzip_attachment().content)

    assert main(["--filename", "report.xml.gz", str(path)]) == EXIT_SUCCESS
    assert json.loads(capsys.readouterr().out)["filename"] == "report.xml.gz"


def test_reads_from_stdin(monkeypatch, capsys):
    monkeypatch.setattr(
        "sys.stdin", io.TextIOWrapper(io.BytesIO(create_gzip_attachment().content))
    )

    assert main(["-"]) == EXIT_SUCCESS
    assert json.loads(capsys.readouterr().out)["report"]["policy"]["p"] == "quarantine"


def test_reports_malformed_report(tmp_path, capsys):
    path = tmp_path / "report.xml.gz"
    path.write_bytes(gzip_bytes("<feedback><report_metadata>"))

    assert main([str(path)]) == EXIT_FAILURE
    assert json.loads(capsys.readouterr().out)["error"] == "MalformedReportError"


def test_reports_unsupported_format(tmp_path, capsys):
    path = tmp_path / "attachment"
    path.write_bytes(b"\x00\x01\x02 not a report")

    assert main([str(path)]) == EXIT_FAILURE
    doc = json.loads(capsys.readouterr().out)
    assert doc["error"] == "UnsupportedFormatError"
    assert doc["message"]


def test_reports_encrypted_zip(tmp_path, capsys):
    path = tmp_path / "report.zip"
    path.write_bytes(encrypted_zip_bytes(("report.xml", "<feedback/>")))

    assert main([str(path)]) == EXIT_FAILURE
    assert json.loads(capsys.readouterr().out)["error"] == "UnsupportedFormatError"


def test_analyzes_report_attached_to_email(tmp_path, capsys):
    path = tmp_path / "report.eml"
    path.write_bytes(
        create_email_with_attachments(
            create_pdf_attachment(), create_gzip_attachment()
        ).as_bytes()
    )

    assert main([str(path)]) == EXIT_SUCCESS
    doc = json.loads(capsys.readouterr().out)
    assert doc["filename"] == create_gzip_attachment().filename


def test_content_type_marks_input_as_email(tmp_path, capsys):
    path = tmp_path / "message"
    path.write_bytes(create_email_with_attachments(create_gzip_attachment()).as_bytes())

    assert main(["--content-type", "message/rfc822", str(path)]) == EXIT_SUCCESS
    assert json.loads(capsys.readouterr().out)["report"]["policy"]["p"] == "quarantine"


def test_email_without_report(tmp_path, capsys):
    path = tmp_path / "invoice.eml"
    path.write_bytes(create_email_with_attachments(create_pdf_attachment()).as_bytes())

    assert main([str(path)]) == EXIT_NO_REPORT
    assert json.loads(capsys.readouterr().out)["error"] == "NoReportFound"


def test_applies_configuration(report_path, tmp_path, capsys):
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "logging": {"root": {"level": "ERROR"}},
                "analysis": {"top_sources_limit": 1},
            }
        )
    )

    assert main(["--configuration", str(config_path), str(report_path)]) == (
        EXIT_SUCCESS
    )
    doc = json.loads(capsys.readouterr().out)
    assert doc["statistics"]["top_sources"] == [
        {"ip": "dead:beef:1:abc::", "count": 12}
    ]


def test_rejects_invalid_configuration(report_path, tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"analysis": {"top_sources_limit": "all"}}))

    with pytest.raises(SystemExit) as err:
        main(["--configuration", str(config_path), str(report_path)])
    assert err.value.code == 2


def test_rejects_missing_input(tmp_path):
    with pytest.raises(SystemExit) as err:
        main([str(tmp_path / "missing.xml")])
    assert err.value.code == 2
