import pytest

from app.features.weekly_aggregation.pipeline.sanitizer import (
    REDACTION_TOKEN,
    TRUNCATION_MARKER,
    ContentSanitizer,
)


@pytest.fixture
def sanitizer():
    return ContentSanitizer()


def test_phone_number_is_redacted(sanitizer):
    result = sanitizer.sanitize("call 010-1234-5678")

    assert result == f"call {REDACTION_TOKEN}"
    assert "010-1234-5678" not in result


def test_email_is_redacted(sanitizer):
    assert sanitizer.sanitize("a@b.com") == REDACTION_TOKEN
    assert sanitizer.sanitize("문의는 coach.kim@example.co.kr 로") == f"문의는 {REDACTION_TOKEN} 로"


def test_resident_registration_number_is_redacted(sanitizer):
    assert sanitizer.sanitize("주민번호 900101-1234567") == f"주민번호 {REDACTION_TOKEN}"


def test_undashed_mobile_number_is_redacted(sanitizer):
    assert sanitizer.sanitize("연락 01012345678") == f"연락 {REDACTION_TOKEN}"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("연락처010-1234-5678", f"연락처{REDACTION_TOKEN}"),
        ("010-1234-5678로 연락주세요", f"{REDACTION_TOKEN}로 연락주세요"),
        ("번호는01012345678입니다", f"번호는{REDACTION_TOKEN}입니다"),
        ("메일abc@test.com로", f"메일{REDACTION_TOKEN}로"),
        ("주민번호900101-1234567", f"주민번호{REDACTION_TOKEN}"),
    ],
)
def test_identifiers_touching_hangul_are_redacted(sanitizer, text, expected):
    assert sanitizer.sanitize(text) == expected


def test_long_content_is_truncated_with_marker(sanitizer):
    result = sanitizer.sanitize("가" * 800)

    assert result.endswith(TRUNCATION_MARKER)
    assert len(result) <= 500
    assert result.startswith("가" * 100)


def test_content_at_limit_is_untouched(sanitizer):
    text = "a" * 500

    assert sanitizer.sanitize(text) == text


def test_whitespace_is_collapsed_and_trimmed(sanitizer):
    assert sanitizer.sanitize("  오늘   점심은\n\n샐러드\t ") == "오늘 점심은 샐러드"


@pytest.mark.parametrize("empty", [None, ""])
def test_empty_input_yields_empty_output(sanitizer, empty):
    assert sanitizer.sanitize(empty) == ""


@pytest.mark.parametrize(
    "text",
    [
        "call 010-1234-5678 or mail a@b.com",
        "x" * 1200,
        ("word " * 200) + "010-1234-5678",
        ("x" * 488) + " a@b.com is my mail",
        "   spaced    out   ",
        "주민번호 900101-1234567 그리고 02-123-4567",
    ],
)
def test_sanitize_is_idempotent(sanitizer, text):
    once = sanitizer.sanitize(text)

    assert sanitizer.sanitize(once) == once


def test_truncation_never_leaves_a_partial_identifier(sanitizer):
    # "abc@de.kr9" is not an address, but the cut after "kr" leaves one
    text = ("x" * 487) + " abc@de.kr9 trailing words"

    result = sanitizer.sanitize(text)

    assert "@" not in result
    assert sanitizer.sanitize(result) == result


def test_custom_patterns_and_limits():
    sanitizer = ContentSanitizer(max_length=20, patterns=[r"secret\d+"], redaction_token="***")

    assert sanitizer.sanitize("my secret42 code") == "my *** code"
    assert len(sanitizer.sanitize("z" * 50)) == 20


def test_limit_must_exceed_marker():
    with pytest.raises(ValueError):
        ContentSanitizer(max_length=len(TRUNCATION_MARKER))
