import pytest
from botocore.exceptions import ClientError

from academy.services import extraction
from academy.services.errors import ExtractionError


def _client_error(code="AccessDenied"):
    return ClientError({"Error": {"Code": code, "Message": "nope"}}, "StartDocumentTextDetection")


def test_pdf_uses_textract_lines_across_result_pages(app, fake_s3, fake_textract):
    client = fake_textract(statuses=("IN_PROGRESS", "IN_PROGRESS", "SUCCEEDED"),
                           pages=(["page one a", "page one b"], ["page two"]))
    text = extraction.extract_text("test-bucket", "uploads/u/1-doc.pdf")
    assert text == "page one a\npage one b\npage two"
    assert client.polls == 3


def test_submission_failure_falls_back_to_local_parser(app, fake_s3, fake_textract, monkeypatch):
    fake_textract(start_error=_client_error())
    fake_s3.objects["uploads/u/1-doc.PDF"] = b"%PDF-fake"
    seen = {}

    def fake_parse(data):
        seen["data"] = data
        return "parsed locally"

    monkeypatch.setattr(extraction, "parse_pdf_bytes", fake_parse)
    assert extraction.extract_text("test-bucket", "uploads/u/1-doc.PDF") == "parsed locally"
    assert seen["data"] == b"%PDF-fake"


def test_terminal_failure_status_falls_back(app, fake_s3, fake_textract, monkeypatch):
    fake_textract(statuses=("FAILED",))
    fake_s3.objects["a.pdf"] = b"%PDF"
    monkeypatch.setattr(extraction, "parse_pdf_bytes", lambda data: "fallback text")
    assert extraction.extract_text("test-bucket", "a.pdf") == "fallback text"


def test_poll_limit_counts_as_failure(app, fake_s3, fake_textract, monkeypatch):
    client = fake_textract(statuses=("IN_PROGRESS",))
    fake_s3.objects["slow.pdf"] = b"%PDF"
    monkeypatch.setattr(extraction, "parse_pdf_bytes", lambda data: "fallback after timeout")
    assert extraction.extract_text("test-bucket", "slow.pdf") == "fallback after timeout"
    assert client.polls == app.config["TEXTRACT_MAX_POLLS"]


def test_both_failures_are_named(app, fake_s3, fake_textract):
    fake_textract(start_error=_client_error("AccessDenied"))
    # object missing from the bucket, so the local parser path fails too
    with pytest.raises(ExtractionError) as exc:
        extraction.extract_text("test-bucket", "gone.pdf")
    msg = str(exc.value)
    assert "Textract error" in msg and "AccessDenied" in msg
    assert "pdf parser error" in msg and "NoSuchKey" in msg


def test_non_pdf_read_as_text(app, fake_s3, fake_textract):
    client = fake_textract()
    fake_s3.objects["notes.txt"] = "Plain training notes ✓".encode("utf-8")
    assert extraction.extract_text("test-bucket", "notes.txt") == "Plain training notes ✓"
    assert client.polls == 0


def test_docx_extracted_with_python_docx(app, fake_s3):
    import io
    import docx

    doc = docx.Document()
    doc.add_paragraph("First rule")
    doc.add_paragraph("")
    doc.add_paragraph("Second rule")
    buf = io.BytesIO()
    doc.save(buf)
    fake_s3.objects["policy.docx"] = buf.getvalue()

    assert extraction.extract_text("test-bucket", "policy.docx") == "First rule\nSecond rule"


def test_primary_skill_picks_highest_scoring_phrase(app, monkeypatch):
    class FakeComprehend:
        def detect_key_phrases(self, Text, LanguageCode):
            assert len(Text) <= extraction.COMPREHEND_MAX_CHARS
            return {"KeyPhrases": [{"Text": "emails", "Score": 0.7}, {"Text": "phishing awareness", "Score": 0.99}]}

        def detect_entities(self, Text, LanguageCode):
            raise AssertionError("entity detection is not needed for the skill tag")

    monkeypatch.setattr(extraction, "comprehend_client", lambda: FakeComprehend())
    assert extraction.primary_skill("y" * 9000) == "phishing awareness"
    assert extraction.primary_skill("   ") is None


def test_analyze_text_returns_phrases_and_entities(app, monkeypatch):
    class FakeComprehend:
        def detect_key_phrases(self, Text, LanguageCode):
            return {"KeyPhrases": [{"Text": "password reset", "Score": 0.9}]}

        def detect_entities(self, Text, LanguageCode):
            assert len(Text) == extraction.COMPREHEND_MAX_CHARS
            return {"Entities": [{"Text": "IT desk", "Type": "ORGANIZATION"}]}

    monkeypatch.setattr(extraction, "comprehend_client", lambda: FakeComprehend())
    out = extraction.analyze_text("z" * 6000)
    assert out["key_phrases"][0]["Text"] == "password reset"
    assert out["entities"][0]["Type"] == "ORGANIZATION"
