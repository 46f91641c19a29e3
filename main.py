#!/usr/bin/env python3
"""
Campaign Launchpad
==================

One-shot campaign launch for a staffing job. Loads the selected candidates
from the candidate store, imports any supplied personal contacts, enriches
candidates with no contact details, checks channel integrations, runs the
quality gate and pre-flight checks, and launches.

For a step-by-step build with drafts, use campaign.py instead.

Usage:
    python main.py --job-id J1 --candidates ids.txt --email --sender me@x.com
    python main.py --job-id J1 --candidates ids.txt --sms --sms-from +15550001111
    python main.py --job-id J1 --candidates ids.txt --email --voice --import contacts.csv
    python main.py ... --no-enrich               # Skip paid lookups
    python main.py ... --output summary.txt      # Save the summary to a file
"""

import argparse
import logging
import sys
import os
from datetime import date

# Ensure project root is on the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from src.contact_utils import MissingColumnsError
from src.launchpad import run_launch_pipeline, generate_summary_text, LAUNCHPAD_CONFIG
from src.launchpad.channels import ChannelConfig, EmailChannel, Job, Schedule, SmsChannel, VoiceChannel
from src.launchpad.importer import NoDataError


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Quieten noisy libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def build_channels(args: argparse.Namespace) -> ChannelConfig:
    sender = args.sender or LAUNCHPAD_CONFIG['DEFAULT_SENDER_EMAIL']
    return ChannelConfig(
        email=EmailChannel(sender=sender) if args.email else None,
        sms=SmsChannel(from_number=args.sms_from or "") if args.sms else None,
        ai_call=VoiceChannel(
            from_number=args.voice_from or "",
            transfer_to=LAUNCHPAD_CONFIG['RECRUITER_PHONE'],
        ) if args.voice else None,
        linkedin=args.linkedin,
        schedule=Schedule(start_date=args.start_date or date.today().isoformat()),
    )


def run_once(args: argparse.Namespace) -> bool:
    """Run the whole pipeline once. Returns True if the campaign launched."""
    logger = logging.getLogger("main")

    with open(args.candidates, encoding="utf-8") as f:
        candidate_ids = [line.strip() for line in f if line.strip()]

    import_text = None
    if args.import_file:
        with open(args.import_file, encoding="utf-8-sig") as f:
            import_text = f.read()

    job = Job(
        id=args.job_id,
        job_name=args.job_name or "",
        specialty=args.specialty or "",
        facility_name=args.facility or "",
        state=args.state or "",
        start_date=args.start_date,
    )
    channels = build_channels(args)
    if not channels.has_any_channel:
        logger.error("No channels enabled (use --email, --sms, --voice or --linkedin)")
        return False

    logger.info("Launching campaign for job %s with %d candidate IDs", job.id, len(candidate_ids))

    try:
        results = run_launch_pipeline(
            job,
            candidate_ids,
            channels,
            sender_email=args.sender or LAUNCHPAD_CONFIG['DEFAULT_SENDER_EMAIL'] or None,
            campaign_name=args.name or "",
            import_text=import_text,
            enrich=not args.no_enrich,
        )
    except (MissingColumnsError, NoDataError) as e:
        logger.error("Import file rejected: %s", e)
        return False
    except ValueError as e:
        logger.error("%s", e)
        return False

    launch = results['launch']
    summary = generate_summary_text(results['session'], launch_result=launch)
    print(summary)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(summary)
        logger.info("Summary saved to %s", args.output)

    if launch.success:
        logger.info("Campaign %s launched (%s)", launch.campaign_id, launch.path)
    else:
        logger.error("Campaign not launched: %s", launch.message)
    return launch.success


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Campaign Launchpad – prepare and launch a recruiting campaign in one go"
    )
    parser.add_argument("--job-id", required=True, help="Job the campaign recruits for")
    parser.add_argument("--candidates", required=True, help="File with one candidate ID per line")
    parser.add_argument("--name", help="Campaign name (default: specialty - facility - date)")
    parser.add_argument("--job-name", help="Job title")
    parser.add_argument("--specialty", help="Job specialty")
    parser.add_argument("--facility", help="Facility name")
    parser.add_argument("--state", help="Job state")
    parser.add_argument("--start-date", help="First send date (YYYY-MM-DD)")
    parser.add_argument(
        "--import", dest="import_file", default=None,
        help="CSV of personal contacts to import first",
    )
    parser.add_argument("--no-enrich", action="store_true", help="Skip paid contact lookups")
    parser.add_argument("--email", action="store_true", help="Enable email")
    parser.add_argument("--sender", help="Email sender account")
    parser.add_argument("--sms", action="store_true", help="Enable SMS")
    parser.add_argument("--sms-from", help="SMS from-number")
    parser.add_argument("--voice", action="store_true", help="Enable AI voice calls")
    parser.add_argument("--voice-from", help="Voice from-number")
    parser.add_argument("--linkedin", action="store_true", help="Generate LinkedIn reminders")
    parser.add_argument(
        "--output", type=str, default=None,
        help="Save the summary to this file path",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()
    setup_logging(args.verbose)

    if not run_once(args):
        sys.exit(1)


if __name__ == "__main__":
    main()
