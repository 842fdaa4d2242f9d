"""Command line interface for the lead relay.

Usage:
    leadrelay run-once
    leadrelay process-one <message_id>
    leadrelay status
    leadrelay seed-agents agents.json

Exit codes:
    0: command completed (per-message failures included)
    1: fatal error (lock store, mailbox listing, invalid input)
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .config import get_settings
from .observability.logging_config import configure_logging
from .observability.run_context import run_scope
from .schemas.agent import AgentSeedFile
from .workers.bootstrap import LeadRelayServices, build_services

logger = logging.getLogger(__name__)

RECENT_LEADS_LIMIT = 10
RECENT_FAILURES_LIMIT = 10


def cmd_run_once(services: LeadRelayServices, args: argparse.Namespace) -> int:
    summary = services.coordinator.run()

    if not summary.lock_acquired:
        print("Another worker is already running; nothing to do.")
        return 0

    print(f"Run {summary.run_id} complete")
    print(f"  Processed:  {summary.processed}")
    print(f"  Successful: {summary.successful}")
    print(f"  Failed:     {summary.failed}")
    print(f"  Retried:    {summary.retried}")
    print(f"  Duration:   {summary.duration_seconds:.1f}s")
    if summary.lock_lost:
        print("  Run lock was lost; remaining messages left for the next run.")
    return 0


def cmd_process_one(services: LeadRelayServices, args: argparse.Namespace) -> int:
    with run_scope():
        result = services.processor.process(args.message_id, replay=True)

    if result.skipped:
        print(f"Message {result.message_id} already processed; skipped.")
    elif result.success:
        print(f"Message {result.message_id} processed (attempt {result.attempts})")
        print(f"  Lead:  {result.lead_id}")
        print(f"  Agent: {result.recipient_name}")
    else:
        print(f"Message {result.message_id} failed (attempt {result.attempts})")
        print(f"  Error: {result.error.splitlines()[-1] if result.error else 'unknown'}")
    return 0


def cmd_status(services: LeadRelayServices, args: argparse.Namespace) -> int:
    reporting = services.reporting
    since = datetime.now(timezone.utc) - timedelta(hours=24)

    stats = reporting.get_processing_stats()
    print("Processing records")
    for key in ("processing", "success", "failed", "total"):
        print(f"  {key.capitalize():<11} {stats[key]}")

    digest = reporting.get_digest_stats(since)
    messages = digest["messages"]
    print("\nLast 24 hours")
    print(f"  Messages:     {messages['total']}")
    print(f"  Successful:   {messages['success']}")
    print(f"  Failed:       {messages['failed']}")
    print(f"  Success rate: {messages['success_rate']}")
    print(f"  Leads:        {digest['leads']['created']}")

    print("\nAgents")
    agents = services.selector.get_assignment_stats()
    if not agents:
        print("  (none - run seed-agents first)")
    for agent in agents:
        marker = "" if agent["is_active"] else " (inactive)"
        last = agent["last_assigned_at"] or "never"
        print(f"  {agent['name']}{marker}: {agent['assigned_count']} leads, last {last}")

    failures = reporting.get_failed_message_digest(RECENT_FAILURES_LIMIT)
    print("\nRecent failures")
    if not failures:
        print("  (none)")
    for entry in failures:
        print(f"  {entry['message_id']} ({entry['attempts']} attempts): {entry['error']}")

    leads = services.leads.list_recent(RECENT_LEADS_LIMIT)
    print("\nRecent leads")
    if not leads:
        print("  (none)")
    for lead in leads:
        name = " ".join(part for part in (lead.first_name, lead.last_name) if part) or "-"
        replied = "replied" if lead.reply_sent_at else "no reply"
        print(f"  {lead.email} [{lead.source}] {name}, {replied}")
    return 0


def load_agent_seed(path: Path) -> AgentSeedFile:
    """Read a seed file: a JSON list of agents or {"agents": [...]}.

    Raises:
        ValueError: unreadable JSON or invalid entries
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Cannot read seed file {path}: {e}") from e

    if isinstance(data, list):
        data = {"agents": data}

    try:
        return AgentSeedFile.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid seed file {path}:\n{e}") from e


def cmd_seed_agents(services: LeadRelayServices, args: argparse.Namespace) -> int:
    try:
        seed = load_agent_seed(Path(args.path))
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    created = 0
    for entry in seed.agents:
        recipient, was_created = services.roster.add_agent(
            name=entry.name,
            email=entry.email,
            phone=entry.phone,
            booking_url=entry.booking_url,
            is_active=entry.is_active,
        )
        if was_created:
            created += 1
            print(f"  Created agent: {recipient.name} <{recipient.email}>")
        else:
            print(f"  Agent already exists: {recipient.email}")

    print(f"Seeded {created} of {len(seed.agents)} agents")
    return 0


COMMANDS = {
    "run-once": cmd_run_once,
    "process-one": cmd_process_one,
    "status": cmd_status,
    "seed-agents": cmd_seed_agents,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="leadrelay",
        description="Poll a mailbox for lead emails, assign agents and send acknowledgments.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run-once", help="Execute one locked processing run")

    process_one = subparsers.add_parser("process-one", help="Replay a single message")
    process_one.add_argument("message_id", help="Mailbox message id")

    subparsers.add_parser("status", help="Show processing and assignment statistics")

    seed = subparsers.add_parser("seed-agents", help="Load agents from a JSON file")
    seed.add_argument("path", help="JSON file with a list of agents")

    return parser


def main(argv: Optional[List[str]] = None, services: Optional[LeadRelayServices] = None) -> int:
    """Entry point for the leadrelay console script."""
    args = build_parser().parse_args(argv)

    if services is None:
        settings = get_settings()
        configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)
        services = build_services(settings)

    try:
        return COMMANDS[args.command](services, args)
    except Exception as e:
        logger.error(f"Command {args.command} failed", exc_info=True)
        print(f"ERROR: {type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
