#!/usr/bin/env python3
"""
Campaign CLI - Build and launch a recruiting campaign step by step.

Each command works on the saved draft for a job, so a build can be picked
up where it was left.

Usage:
    python campaign.py new <job_id> <candidate_id>...   Start a build
    python campaign.py status [job_id]                  Show build / recent campaigns
    python campaign.py import <job_id> <file>           Import personal contacts (CSV)
    python campaign.py enrich <job_id> [--yes]          Enrich candidates with no contact
    python campaign.py manual <job_id> <candidate_id>   Enter contact details by hand
    python campaign.py channels <job_id> [options]      Choose channels and schedule
    python campaign.py integrations <job_id>            Check channel connections
    python campaign.py quality <job_id>                 Run the quality gate
    python campaign.py preflight <job_id>               Run pre-flight checks
    python campaign.py launch <job_id>                  Launch the campaign
    python campaign.py discard <job_id>                 Throw away the draft
"""

import argparse
import logging
import os
import sys
from datetime import date

from src.contact_utils import MissingColumnsError
from src.launchpad.channels import (
    ChannelConfig,
    EmailChannel,
    Job,
    Schedule,
    SmsChannel,
    VoiceChannel,
)
from src.launchpad.config import LAUNCHPAD_CONFIG
from src.launchpad.db import init_launchpad_db, list_drafts
from src.launchpad.importer import NoDataError
from src.launchpad.manager import CampaignBuilder
from src.launchpad.summary import generate_summary_text, print_status

logging.basicConfig(
    level=logging.INFO,
    format='%(message)s',
)
logging.getLogger("urllib3").setLevel(logging.WARNING)
logging.getLogger("requests").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def _resume(job_id: str) -> CampaignBuilder:
    builder = CampaignBuilder.resume(job_id)
    if not builder:
        print(f"\n✗ No draft for job {job_id}. Start one with: python campaign.py new {job_id} <candidate ids>\n")
        sys.exit(1)
    return builder


def _read_ids_file(path: str) -> list[str]:
    with open(path, encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


def cmd_new(args):
    """Start a new campaign build."""
    candidate_ids = list(args.candidate_ids)
    if args.ids_file:
        candidate_ids.extend(_read_ids_file(args.ids_file))
    if not candidate_ids:
        print("\n✗ Give candidate IDs or --ids-file\n")
        sys.exit(1)

    job = Job(
        id=args.job_id,
        job_name=args.job_name or "",
        specialty=args.specialty or "",
        facility_name=args.facility or "",
        city=args.city or "",
        state=args.state or "",
        start_date=args.start_date,
    )

    try:
        builder = CampaignBuilder.start(job, candidate_ids, campaign_name=args.name or "")
    except ValueError as e:
        print(f"\n✗ {e}\n")
        sys.exit(1)

    stats = builder.session.pool.tier_stats()
    print(f"\n✓ Started '{builder.session.campaign_name}'")
    print(f"  Candidates: {len(builder.session.pool)} ({stats.ready_count} ready, {stats.needs_enrichment} need enrichment)\n")


def cmd_status(args):
    """Show a build summary, or drafts and recent campaigns."""
    init_launchpad_db()

    if args.job_id:
        builder = _resume(args.job_id)
        print_status(builder.session)
        return

    drafts = list_drafts()
    if drafts:
        print("\nDrafts:")
        for draft in drafts:
            print(f"  • job {draft['job_id']} (saved {draft['saved_at'][:19]})")
    print_status()


def cmd_import(args):
    """Import personal contact details from a CSV file."""
    builder = _resume(args.job_id)

    if not os.path.exists(args.file):
        print(f"\n✗ File not found: {args.file}\n")
        sys.exit(1)

    with open(args.file, encoding="utf-8-sig") as f:
        text = f.read()

    try:
        result = builder.import_contacts(text)
    except MissingColumnsError as e:
        print(f"\n✗ {e}\n")
        sys.exit(1)
    except NoDataError as e:
        print(f"\n✗ {e}\n")
        sys.exit(1)

    print("\nImport results:")
    print(f"  ✓ Matched:   {result.matched}")
    print(f"  · No data:   {result.no_data}")
    print(f"  ? Not found: {result.not_found}")
    print(f"  Updated {result.updated}, skipped {result.skipped}")
    if result.retryable:
        print("  Some writes failed. Run the import again to retry them.")
    print()


def cmd_enrich(args):
    """Enrich candidates that have no contact details."""
    builder = _resume(args.job_id)

    estimate = builder.enrichment_estimate(args.ids or None)
    if not estimate['count']:
        print("\n✓ Every candidate already has contact details\n")
        return

    print(f"\n{estimate['count']} candidates need enrichment (est. ${estimate['estimated_cost']:.2f})")
    if estimate['needs_confirmation'] and not args.yes:
        print(f"More than {LAUNCHPAD_CONFIG['BULK_CONFIRM_THRESHOLD']} lookups: re-run with --yes to confirm\n")
        return

    def on_status(status):
        if status.status in ('success', 'no_match', 'failed'):
            tag = " (cached)" if status.from_cache else ""
            print(f"  {status.candidate_id}: {status.status}{tag}")

    run = builder.enrich(candidate_ids=args.ids or None, on_status=on_status)

    print(f"\n  ✓ Found: {run.succeeded}  · No match: {run.no_match}  ✗ Failed: {run.failed}")
    print(f"  Cache hits: {run.cache_hits}, lookups: {run.provider_calls}, cost: ${run.total_cost:.2f}")
    if run.retryable_ids:
        print(f"  Retry failed lookups with: python campaign.py enrich {args.job_id} --ids {' '.join(run.retryable_ids)}")
    print()


def cmd_manual(args):
    """Enter contact details by hand."""
    builder = _resume(args.job_id)

    try:
        status = builder.enter_contact(args.candidate_id, email=args.email, phone=args.phone)
    except KeyError:
        print(f"\n✗ Candidate {args.candidate_id} is not in this campaign\n")
        sys.exit(1)
    except ValueError as e:
        print(f"\n✗ {e}\n")
        sys.exit(1)

    print(f"\n✓ Saved contact for {args.candidate_id}: {status.email or ''} {status.phone or ''}\n")


def cmd_channels(args):
    """Choose channels and schedule."""
    builder = _resume(args.job_id)

    start_date = args.start_date or builder.session.job.start_date or date.today().isoformat()
    sender = args.sender_email or LAUNCHPAD_CONFIG['DEFAULT_SENDER_EMAIL'] or None

    channels = ChannelConfig(
        email=EmailChannel(sender=sender or "", sequence_length=args.email_steps, gap_days=args.gap_days)
        if args.email else None,
        sms=SmsChannel(from_number=args.sms_from or "", sequence_length=args.sms_steps)
        if args.sms else None,
        ai_call=VoiceChannel(
            from_number=args.voice_from or "",
            call_day=args.call_day,
            transfer_to=args.transfer_to or LAUNCHPAD_CONFIG['RECRUITER_PHONE'],
        ) if args.voice else None,
        linkedin=args.linkedin,
        schedule=Schedule(
            start_date=start_date,
            send_window_start=args.window_start,
            send_window_end=args.window_end,
            timezone=args.timezone,
            weekdays_only=not args.all_days,
        ),
    )

    if not channels.has_any_channel:
        print("\n✗ Enable at least one channel (--email, --sms, --voice, --linkedin)\n")
        sys.exit(1)

    builder.configure_channels(channels, sender_email=sender)
    print(f"\n✓ Channels: {channels.summary} starting {start_date}\n")


def cmd_integrations(args):
    """Check channel connections."""
    builder = _resume(args.job_id)
    statuses = builder.check_integrations()

    if not statuses:
        print("\n✗ No channels configured\n")
        return

    print()
    for s in statuses:
        icon = "✓" if s.is_ready else "✗"
        print(f"  {icon} {s.name:<12} {s.status:<13} {s.details}")
    print(f"\n  {'All connected' if builder.session.integrations_connected else 'Some disconnected'}\n")


def cmd_quality(args):
    """Run the quality gate."""
    builder = _resume(args.job_id)
    result = builder.run_quality_gate()

    print()
    print(f"  {'✓ Ready to launch' if result.can_launch else '✗ Blocked'}"
          f" ({result.critical} critical, {result.warnings} warnings, {result.info} info)")
    for issue in result.issues:
        who = f" [{issue.candidate_name}]" if issue.candidate_name else ""
        print(f"    {issue.severity.upper():<8} {issue.category}{who}: {issue.description}")
        if issue.suggestion:
            print(f"             → {issue.suggestion}")
    if result.retryable:
        print("  The check didn't complete. Run it again.")
    print()


def _print_check(checks):
    current = next((c for c in checks if c.status == 'checking'), None)
    if current:
        print(f"  … {current.name}")


def cmd_preflight(args):
    """Run pre-flight checks."""
    builder = _resume(args.job_id)
    checks = builder.run_preflight(on_update=_print_check)

    print()
    for c in checks:
        icon = "✓" if c.passed else "✗"
        print(f"  {icon} {c.name:<24} {c.details or ''}")
    print()


def cmd_launch(args):
    """Launch the campaign."""
    builder = _resume(args.job_id)
    session = builder.session

    result = builder.launch(on_preflight_update=_print_check)
    print(generate_summary_text(session, launch_result=result))

    if not result.success:
        sys.exit(1)


def cmd_discard(args):
    """Throw away a draft."""
    builder = _resume(args.job_id)
    builder.discard()
    print(f"\n✓ Discarded draft for job {args.job_id}\n")


def main():
    parser = argparse.ArgumentParser(
        description="Campaign CLI - Build and launch recruiting campaigns",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # new
    new_parser = subparsers.add_parser('new', help='Start a campaign build')
    new_parser.add_argument('job_id', help='Job ID')
    new_parser.add_argument('candidate_ids', nargs='*', help='Candidate IDs')
    new_parser.add_argument('--ids-file', help='File with one candidate ID per line')
    new_parser.add_argument('--name', help='Campaign name (default: specialty - facility - date)')
    new_parser.add_argument('--job-name', help='Job title')
    new_parser.add_argument('--specialty', help='Job specialty')
    new_parser.add_argument('--facility', help='Facility name')
    new_parser.add_argument('--city', help='Job city')
    new_parser.add_argument('--state', help='Job state')
    new_parser.add_argument('--start-date', help='Job start date (YYYY-MM-DD)')

    # status
    status_parser = subparsers.add_parser('status', help='Show build or recent campaigns')
    status_parser.add_argument('job_id', nargs='?', help='Job ID')

    # import
    import_parser = subparsers.add_parser('import', help='Import personal contacts from CSV')
    import_parser.add_argument('job_id', help='Job ID')
    import_parser.add_argument('file', help='CSV file with a candidate_id column')

    # enrich
    enrich_parser = subparsers.add_parser('enrich', help='Enrich candidates with no contact')
    enrich_parser.add_argument('job_id', help='Job ID')
    enrich_parser.add_argument('--ids', nargs='*', help='Only these candidate IDs')
    enrich_parser.add_argument('--yes', '-y', action='store_true', help='Confirm a large run')

    # manual
    manual_parser = subparsers.add_parser('manual', help='Enter contact details by hand')
    manual_parser.add_argument('job_id', help='Job ID')
    manual_parser.add_argument('candidate_id', help='Candidate ID')
    manual_parser.add_argument('--email', '-e', help='Personal email')
    manual_parser.add_argument('--phone', '-p', help='Personal mobile')

    # channels
    channels_parser = subparsers.add_parser('channels', help='Choose channels and schedule')
    channels_parser.add_argument('job_id', help='Job ID')
    channels_parser.add_argument('--email', action='store_true', help='Enable email')
    channels_parser.add_argument('--sender-email', help='Email sender account')
    channels_parser.add_argument('--email-steps', type=int, default=3, help='Emails in sequence')
    channels_parser.add_argument('--gap-days', type=int, default=3, help='Days between emails')
    channels_parser.add_argument('--sms', action='store_true', help='Enable SMS')
    channels_parser.add_argument('--sms-from', help='SMS from-number')
    channels_parser.add_argument('--sms-steps', type=int, default=2, help='Texts in sequence')
    channels_parser.add_argument('--voice', action='store_true', help='Enable AI voice calls')
    channels_parser.add_argument('--voice-from', help='Voice from-number')
    channels_parser.add_argument('--call-day', type=int, default=3, help='Sequence day to call')
    channels_parser.add_argument('--transfer-to', help='Number to transfer interested candidates to')
    channels_parser.add_argument('--linkedin', action='store_true', help='Generate LinkedIn reminders')
    channels_parser.add_argument('--start-date', help='First send date (YYYY-MM-DD)')
    channels_parser.add_argument('--window-start', default='09:00', help='Send window start')
    channels_parser.add_argument('--window-end', default='17:00', help='Send window end')
    channels_parser.add_argument('--timezone', default='America/New_York', help='Schedule timezone')
    channels_parser.add_argument('--all-days', action='store_true', help='Send on weekends too')

    for name, help_text in (
        ('integrations', 'Check channel connections'),
        ('quality', 'Run the quality gate'),
        ('preflight', 'Run pre-flight checks'),
        ('launch', 'Launch the campaign'),
        ('discard', 'Throw away the draft'),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('job_id', help='Job ID')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    # Command dispatch
    commands = {
        'new': cmd_new,
        'status': cmd_status,
        'import': cmd_import,
        'enrich': cmd_enrich,
        'manual': cmd_manual,
        'channels': cmd_channels,
        'integrations': cmd_integrations,
        'quality': cmd_quality,
        'preflight': cmd_preflight,
        'launch': cmd_launch,
        'discard': cmd_discard,
    }

    commands[args.command](args)


if __name__ == '__main__':
    main()
