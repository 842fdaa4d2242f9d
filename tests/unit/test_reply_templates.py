"""Unit tests for acknowledgment reply composition"""

from leadrelay.domain.mailbox.ports import MessageContent
from leadrelay.domain.replies import build_acknowledgment, render_reply_html, render_reply_text
from leadrelay.infrastructure.mail.mime import compose_message


class TestReplyRendering:
    """Test text and HTML bodies"""

    def test_text_body(self):
        body = render_reply_text("Alice Agent", "https://cal.example/alice")
        assert "Your assigned agent is Alice Agent." in body
        assert "https://cal.example/alice" in body

    def test_html_body_escapes_values(self):
        """Test agent names and links cannot inject markup"""
        body = render_reply_html("<script>x</script>", 'https://cal.example/?a=1&b="2"')
        assert "<script>x</script>" not in body
        assert "&lt;script&gt;" in body
        assert 'href="https://cal.example/?a=1&amp;b=&quot;2&quot;"' in body


class TestBuildAcknowledgment:
    """Test the outbound message and its threading"""

    def test_threads_onto_inbound_message(self):
        inbound = MessageContent(
            message_id="11",
            rfc_message_id="<abc@zillow.com>",
            references="<root@zillow.com>",
        )
        message = build_acknowledgment(
            to="jane@example.com",
            from_address="Acme <leads@agency.example>",
            subject="Got it",
            agent_name="Alice",
            booking_url="https://cal.example/alice",
            inbound=inbound,
        )

        assert message.to == "jane@example.com"
        assert message.in_reply_to == "<abc@zillow.com>"
        assert message.references == ["<root@zillow.com>", "<abc@zillow.com>"]
        composed = compose_message(message)
        assert composed["In-Reply-To"] == "<abc@zillow.com>"
        assert composed["References"] == "<root@zillow.com> <abc@zillow.com>"
        assert "Alice" in message.text
        assert message.html is not None

    def test_without_inbound_message_id(self):
        message = build_acknowledgment(
            to="jane@example.com",
            from_address="leads@agency.example",
            subject="Got it",
            agent_name="Alice",
            booking_url="https://cal.example/alice",
            inbound=MessageContent(message_id="11"),
        )

        assert message.in_reply_to is None
        assert message.references == []
