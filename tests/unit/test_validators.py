"""Unit tests for text normalizers and field extractors"""

from leadrelay.domain.parsing.validators import (
    extract_emails,
    extract_phones,
    format_phone,
    is_valid_email,
    is_valid_phone,
    normalize_email,
    normalize_name,
    normalize_phone,
    normalize_whitespace,
    strip_html_tags,
)


class TestEmailValidation:
    """Test email normalization, validation and scanning"""

    def test_normalize_email_trims_and_lowercases(self):
        """Test emails are trimmed and lower-cased"""
        assert normalize_email("  JOHN@Example.COM ") == "john@example.com"

    def test_valid_email(self):
        assert is_valid_email("john.smith+leads@example.co.uk") is True
        assert is_valid_email("JOHN@Example.com") is True

    def test_invalid_emails(self):
        """Test addresses without a dotted domain or with spaces are rejected"""
        assert is_valid_email("") is False
        assert is_valid_email("john@localhost") is False
        assert is_valid_email("john smith@example.com") is False
        assert is_valid_email("not-an-email") is False

    def test_extract_emails_dedupes_in_order(self):
        text = "Contact Jane@Example.com or bob@test.org, again jane@example.com"
        assert extract_emails(text) == ["jane@example.com", "bob@test.org"]

    def test_extract_emails_empty_text(self):
        assert extract_emails("") == []


class TestPhoneNormalization:
    """Test phone normalization, validation and display formatting"""

    def test_normalize_strips_punctuation(self):
        assert normalize_phone("(555) 123-4567") == "5551234567"

    def test_normalize_keeps_leading_plus(self):
        assert normalize_phone("+44 20 7946 0958") == "+442079460958"

    def test_valid_phone_digit_range(self):
        """Test 7 to 15 digits are accepted"""
        assert is_valid_phone("555-1234") is True
        assert is_valid_phone("123456") is False
        assert is_valid_phone("1234567890123456") is False

    def test_format_us_ten_digits(self):
        """Test "(555) 123-4567" survives normalize -> validate -> format"""
        normalized = normalize_phone("(555) 123-4567")
        assert normalized == "5551234567"
        assert is_valid_phone(normalized) is True
        assert format_phone(normalized) == "(555) 123-4567"

    def test_format_us_eleven_digits(self):
        assert format_phone("1-555-123-4567") == "+1 (555) 123-4567"

    def test_format_other_lengths_returned_normalized(self):
        assert format_phone("+44 20 7946 0958") == "+442079460958"

    def test_extract_phones(self):
        text = "Call 555-123-4567 or (555) 987-6543. Office: 5551234567"
        assert extract_phones(text) == ["5551234567", "5559876543"]

    def test_extract_phones_ignores_short_numbers(self):
        assert extract_phones("Unit 42, zip 12345") == []


class TestNameAndWhitespace:
    """Test name and whitespace normalization"""

    def test_normalize_name(self):
        assert normalize_name("  jOHN   smith ") == "John Smith"

    def test_normalize_whitespace(self):
        text = "a\r\nb\t\tc   d\n\n\n\ne"
        assert normalize_whitespace(text) == "a\nb c d\n\ne"


class TestStripHtmlTags:
    """Test HTML-only bodies are reduced to parseable text"""

    def test_labeled_lines_survive(self):
        markup = (
            "<html><head><style>p { color: red; }</style></head><body>"
            "<p>Name: Jane Doe</p><div>Email: jane@example.com</div>"
            "Phone: 555-123-4567<br/>"
            "</body></html>"
        )
        text = strip_html_tags(markup)
        assert "Name: Jane Doe" in text.splitlines()
        assert "Email: jane@example.com" in text.splitlines()
        assert "color" not in text

    def test_entities_unescaped(self):
        assert strip_html_tags("<p>Tom &amp; Jerry&nbsp;Inc</p>") == "Tom & Jerry Inc"
