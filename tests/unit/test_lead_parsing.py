"""Unit tests for the recognizer chain and source recognizers"""

import pytest

from leadrelay.domain.parsing import (
    LeadParseError,
    LeadSource,
    get_all_recognizers,
    parse_facebook_lead,
    parse_generic_lead,
    parse_lead_from_text,
    parse_realtor_lead,
    parse_zillow_lead,
    try_parse_lead_from_text,
)

ZILLOW_TEXT = """John Smith is interested in your listing.

Name: John Smith
Email: John.Smith@Example.com
Phone: (555) 123-4567
Property: 123 Main St, Springfield

Reply on zillow.com to follow up."""

REALTOR_TEXT = """You have a new lead from realtor.com

Lead Name: Jane Doe
Email: jane.doe@example.com
Phone: 555.987.6543
Listing: 42 Oak Avenue
Price: $450,000"""

FACEBOOK_TEXT = """Your Lead Ad received a new submission

full_name: maria garcia
email: maria@example.com
phone_number: 555-222-3333
budget: 400k-500k
timeline: 3 months"""


class TestRecognizerChain:
    """Test chain ordering and failure behavior"""

    def test_generic_example(self):
        """Test labeled lines with no source signature fall through to generic"""
        candidate = parse_lead_from_text(
            "Name: John Smith\nEmail: JOHN@Example.com\nPhone: 555-123-4567"
        )
        assert candidate.source == LeadSource.GENERIC
        assert candidate.email == "john@example.com"
        assert candidate.first_name == "John"
        assert candidate.last_name == "Smith"
        assert candidate.phone == "5551234567"

    def test_specific_recognizer_beats_generic(self):
        """Test a Zillow notification is claimed by the Zillow recognizer"""
        candidate = parse_lead_from_text(ZILLOW_TEXT, "New lead from Zillow")
        assert candidate.source == LeadSource.ZILLOW

    def test_no_email_raises(self):
        with pytest.raises(LeadParseError):
            parse_lead_from_text("Hi, please call me back at 555-123-4567", "Question")

    def test_try_parse_returns_none(self):
        assert try_parse_lead_from_text("nothing useful here") is None

    def test_system_addresses_are_not_leads(self):
        """Test noreply/mailer-daemon addresses never become the lead email"""
        with pytest.raises(LeadParseError):
            parse_lead_from_text("Delivered by noreply@mailer.example.com", "Notice")

    def test_email_always_lowercased(self):
        candidate = parse_lead_from_text("Reach me at MIXED.Case@Example.ORG")
        assert candidate.email == "mixed.case@example.org"

    def test_generic_is_last(self):
        recognizers = get_all_recognizers()
        assert recognizers[-1] is parse_generic_lead
        assert recognizers[0] is parse_zillow_lead


class TestZillowRecognizer:
    """Test Zillow lead notifications"""

    def test_parses_labeled_fields(self):
        candidate = parse_zillow_lead(ZILLOW_TEXT, "New lead from Zillow")
        assert candidate.email == "john.smith@example.com"
        assert candidate.first_name == "John"
        assert candidate.last_name == "Smith"
        assert candidate.phone == "5551234567"
        assert candidate.raw_data["property_address"] == "123 Main St, Springfield"

    def test_requires_signature(self):
        assert parse_zillow_lead("Name: John Smith\nEmail: john@example.com", "Hello") is None

    def test_falls_back_to_unlabeled_email(self):
        """Test Zillow's own addresses are skipped when scanning for the lead"""
        text = "From zillow: leads@zillow.com forwarded a message from buyer@example.com"
        candidate = parse_zillow_lead(text, "")
        assert candidate.email == "buyer@example.com"


class TestRealtorRecognizer:
    """Test Realtor.com lead notifications"""

    def test_parses_labeled_fields(self):
        candidate = parse_realtor_lead(REALTOR_TEXT, "New Realtor.com lead")
        assert candidate.source == LeadSource.REALTOR
        assert candidate.email == "jane.doe@example.com"
        assert candidate.first_name == "Jane"
        assert candidate.last_name == "Doe"
        assert candidate.phone == "5559876543"
        assert candidate.raw_data["property_address"] == "42 Oak Avenue"
        assert candidate.raw_data["price"] == "$450,000"

    def test_chain_picks_realtor(self):
        assert parse_lead_from_text(REALTOR_TEXT, "New lead").source == LeadSource.REALTOR


class TestFacebookRecognizer:
    """Test Facebook Lead Ads form dumps"""

    def test_parses_form_fields(self):
        candidate = parse_facebook_lead(FACEBOOK_TEXT, "New lead from Facebook")
        assert candidate.source == LeadSource.FACEBOOK
        assert candidate.email == "maria@example.com"
        assert candidate.first_name == "Maria"
        assert candidate.last_name == "Garcia"
        assert candidate.phone == "5552223333"

    def test_extra_form_fields_kept(self):
        """Test non-contact form fields land in raw_data"""
        candidate = parse_facebook_lead(FACEBOOK_TEXT, "New lead from Facebook")
        assert candidate.raw_data["budget"] == "400k-500k"
        assert candidate.raw_data["timeline"] == "3 months"
        assert "email" not in candidate.raw_data

    def test_separate_first_and_last_name(self):
        text = "first_name: Ana\nlast_name: Lopez\nemail: ana@example.com\nvia facebook.com"
        candidate = parse_facebook_lead(text, "")
        assert candidate.first_name == "Ana"
        assert candidate.last_name == "Lopez"


class TestGenericRecognizer:
    """Test the fallback recognizer heuristics"""

    def test_name_from_local_part(self):
        candidate = parse_generic_lead("Please contact sarah.connor@example.com", "Inquiry")
        assert candidate.first_name == "Sarah"
        assert candidate.last_name == "Connor"
        assert candidate.raw_data["subject"] == "Inquiry"

    def test_name_from_greeting(self):
        """Test a greeting supplies the name when the local part has none"""
        candidate = parse_generic_lead("Hi, I'm Peter Parker. Reach me at pp42@example.com", "")
        assert candidate.first_name == "Peter"
        assert candidate.last_name == "Parker"

    def test_key_value_pairs_collected(self):
        text = "Email: jo@example.com\nPreferred Time: mornings\nBudget: 300k"
        candidate = parse_generic_lead(text, "")
        assert candidate.raw_data["preferred_time"] == "mornings"
        assert candidate.raw_data["budget"] == "300k"

    def test_no_email_returns_none(self):
        assert parse_generic_lead("Name: John Smith", "") is None
