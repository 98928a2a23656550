"""Tests for resume input types and the session string encoding."""

import base64

from comeback_coach.models.payload import (
    FilePayload,
    TextInput,
    describe_input,
    parse_analysis_input,
    to_session_string,
)


class TestParseAnalysisInput:
    def test_plain_text(self):
        assert parse_analysis_input("I am a developer") == TextInput("I am a developer")

    def test_file_sentinel(self):
        b64 = base64.b64encode(b"%PDF-1.4 data").decode()
        item = parse_analysis_input(f"[FILE_DATA:application/pdf:{b64}]")
        assert isinstance(item, FilePayload)
        assert item.mime_type == "application/pdf"
        assert item.data == b"%PDF-1.4 data"

    def test_missing_payload_is_text(self):
        raw = "[FILE_DATA:application/pdf]"
        assert parse_analysis_input(raw) == TextInput(raw)

    def test_bad_base64_is_text(self):
        raw = "[FILE_DATA:application/pdf:not base64!!]"
        assert parse_analysis_input(raw) == TextInput(raw)

    def test_prefix_inside_text_is_text(self):
        raw = "My resume mentions [FILE_DATA:x:y] somewhere"
        assert isinstance(parse_analysis_input(raw), TextInput)


class TestSessionString:
    def test_file_payload_survives_session_string(self):
        payload = FilePayload(mime_type="application/pdf", data=b"\x00\x01binary", filename="cv.pdf")
        restored = parse_analysis_input(to_session_string(payload))
        assert restored.data == payload.data
        assert restored.mime_type == payload.mime_type

    def test_text_is_unchanged(self):
        assert to_session_string(TextInput("hello")) == "hello"


class TestDescribeInput:
    def test_text(self):
        assert describe_input(TextInput("abcd")) == "text (4 chars)"

    def test_file(self):
        label = describe_input(FilePayload("application/pdf", b"12345", filename="cv.pdf"))
        assert label == "cv.pdf (application/pdf, 5 bytes)"
