#!/usr/bin/env python3
"""Sample lead email generator for end-to-end testing.

Builds an inbound lead notification in the layout of one of the supported
lead sources and prints it, or delivers it over SMTP into the mailbox the
relay polls.

Usage:
    # Print a Zillow-style lead to stdout
    python scripts/generate_lead_email.py --source zillow --to leads@example.com

    # Deliver a Facebook Lead Ads notification
    python scripts/generate_lead_email.py --source facebook --to leads@example.com \
        --lead-email jane.doe@example.com --send --smtp-host localhost --smtp-port 25
"""

import argparse
import os
import smtplib
import sys
from email.mime.text import MIMEText
from typing import Optional

SOURCES = ("zillow", "realtor", "facebook", "generic")

SENDERS = {
    "zillow": "Zillow <noreply@zillow.com>",
    "realtor": "Realtor.com <leads@realtor.com>",
    "facebook": "Facebook <notification@facebookmail.com>",
    "generic": None,
}

SUBJECTS = {
    "zillow": "New lead from Zillow",
    "realtor": "New Realtor.com lead",
    "facebook": "New lead from your Facebook Lead Ad",
    "generic": "Question about your listing",
}


def build_body(source: str, first_name: str, last_name: str, lead_email: str, phone: str) -> str:
    """Lead notification body in the given source's layout."""
    full_name = f"{first_name} {last_name}"

    if source == "zillow":
        return (
            f"{full_name} is interested in your listing.\n\n"
            f"Name: {full_name}\n"
            f"Email: {lead_email}\n"
            f"Phone: {phone}\n"
            f"Property: 123 Main St, Springfield\n\n"
            f"Reply on zillow.com to follow up."
        )

    if source == "realtor":
        return (
            f"You have a new lead from realtor.com\n\n"
            f"Lead Name: {full_name}\n"
            f"Email: {lead_email}\n"
            f"Phone: {phone}\n"
            f"Listing: 42 Oak Avenue\n"
            f"Price: $450,000\n"
        )

    if source == "facebook":
        return (
            f"Your Lead Ad received a new submission on facebook.com\n\n"
            f"full_name: {full_name}\n"
            f"email: {lead_email}\n"
            f"phone_number: {phone}\n"
            f"budget: 400k-500k\n"
            f"timeline: 3 months\n"
        )

    return (
        f"Hi, I'm {full_name} and I'd like to see the house on Elm Street.\n\n"
        f"Name: {full_name}\n"
        f"Email: {lead_email}\n"
        f"Phone: {phone}\n"
    )


def create_email(
    source: str,
    to_email: str,
    lead_email: str,
    first_name: str = "John",
    last_name: str = "Smith",
    phone: str = "555-123-4567",
    from_email: Optional[str] = None,
) -> MIMEText:
    """Create a plain-text lead notification message."""
    msg = MIMEText(build_body(source, first_name, last_name, lead_email, phone), "plain")
    msg["From"] = from_email or SENDERS[source] or lead_email
    msg["To"] = to_email
    msg["Subject"] = SUBJECTS[source]
    msg["Message-ID"] = f"<test-{os.urandom(8).hex()}@leadrelay-test>"
    return msg


def send_email(
    msg: MIMEText,
    smtp_host: str = "localhost",
    smtp_port: int = 25,
    smtp_user: Optional[str] = None,
    smtp_password: Optional[str] = None,
    use_tls: bool = False,
):
    """Send email via SMTP."""
    try:
        smtp = smtplib.SMTP(smtp_host, smtp_port)

        if use_tls:
            smtp.starttls()

        if smtp_user and smtp_password:
            smtp.login(smtp_user, smtp_password)

        smtp.send_message(msg)
        smtp.quit()

        print(
            f"Email sent successfully to {msg['To']} via {smtp_host}:{smtp_port}",
            file=sys.stderr
        )

    except (smtplib.SMTPException, OSError) as e:
        print(f"ERROR sending email: {e}", file=sys.stderr)
        sys.exit(1)


def main():
    parser = argparse.ArgumentParser(
        description="Generate sample lead emails for the lead relay",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument("--source", choices=SOURCES, default="generic", help="Lead source layout")
    parser.add_argument("--to", dest="to_email", required=True, help="Mailbox the relay polls")
    parser.add_argument("--from", dest="from_email", help="Override the sender address")
    parser.add_argument("--lead-email", default="john.smith@example.com", help="Lead's email address")
    parser.add_argument("--first-name", default="John")
    parser.add_argument("--last-name", default="Smith")
    parser.add_argument("--phone", default="555-123-4567")

    parser.add_argument("--send", action="store_true", help="Send via SMTP (otherwise print)")
    parser.add_argument("--smtp-host", default="localhost")
    parser.add_argument("--smtp-port", type=int, default=25)
    parser.add_argument("--smtp-user")
    parser.add_argument("--smtp-password")
    parser.add_argument("--smtp-tls", action="store_true", help="Use STARTTLS")

    args = parser.parse_args()

    msg = create_email(
        source=args.source,
        to_email=args.to_email,
        lead_email=args.lead_email,
        first_name=args.first_name,
        last_name=args.last_name,
        phone=args.phone,
        from_email=args.from_email,
    )

    if args.send:
        send_email(
            msg,
            smtp_host=args.smtp_host,
            smtp_port=args.smtp_port,
            smtp_user=args.smtp_user,
            smtp_password=args.smtp_password,
            use_tls=args.smtp_tls,
        )
    else:
        print(msg.as_string())


if __name__ == "__main__":
    main()
