#!/usr/bin/env python3
"""
Send a single test email through Mailgun using settings from the environment.

Reads MAILGUN_API_KEY, MAILGUN_DOMAIN and optionally MAILGUN_BASE_URL
(or a .env file in the current directory).

Usage:
    python scripts/send_test_email.py --from sender@yourdomain.com --to you@example.com
    python scripts/send_test_email.py --from sender@yourdomain.com --to you@example.com \
        --attach report.pdf --tag smoke-test
"""

import argparse
import asyncio
import logging
import sys

from mailrelay import DeliveryError, Email, MailgunProvider


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Send a test email via Mailgun")
    parser.add_argument("--from", dest="sender", required=True)
    parser.add_argument("--to", action="append", required=True)
    parser.add_argument("--subject", default="mailrelay test message")
    parser.add_argument("--text", default="This is a test message sent by mailrelay.")
    parser.add_argument("--attach", action="append", default=[])
    parser.add_argument("--tag", action="append", default=[])
    return parser.parse_args(argv)


def build_email(args) -> Email:
    email = (
        Email()
        .put_from(args.sender)
        .to(args.to)
        .put_subject(args.subject)
        .put_text_body(args.text)
    )
    for path in args.attach:
        email.attachment(path)
    if args.tag:
        email.put_provider_option("tags", args.tag)
    return email


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)

    provider = MailgunProvider.from_settings()
    if provider is None:
        print("ERROR: Mailgun is not configured.")
        print()
        print("Set these environment variables (or put them in .env):")
        print("  MAILGUN_API_KEY=key-...")
        print("  MAILGUN_DOMAIN=mg.yourdomain.com")
        print("  MAILGUN_BASE_URL=https://api.eu.mailgun.net/v3   # EU domains only")
        return 1

    try:
        result = asyncio.run(provider.deliver(build_email(args)))
    except DeliveryError as e:
        print(f"\nSend failed: {e}")
        return 1

    print(f"\nQueued by Mailgun with id {result.id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
