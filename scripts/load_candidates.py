#!/usr/bin/env python3
"""
Load candidates into the local candidate store.

Usage:
    python scripts/load_candidates.py [--csv PATH] [--stats]

Options:
    --csv PATH  Import candidates from a CSV file
    --stats     Show candidate store statistics

The CSV file should have columns: candidate_id, first_name, last_name,
specialty, city, state, email, phone, personal_email, personal_mobile,
tier, unified_score, icebreaker, talking_points
(candidate_id, first_name and last_name are required; separate talking
points with "|")
"""

import argparse
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.db import (
    init_candidate_db,
    import_candidates_from_csv,
    get_candidate_stats,
)


def main():
    parser = argparse.ArgumentParser(description='Load candidates into the candidate store')
    parser.add_argument('--csv', type=str, help='Import from CSV file')
    parser.add_argument('--stats', action='store_true', help='Show statistics')

    args = parser.parse_args()

    # Initialize database
    print("Initializing candidate store...")
    init_candidate_db()

    if args.csv:
        print(f"\nImporting from CSV: {args.csv}")
        if not os.path.exists(args.csv):
            print(f"  Error: File not found: {args.csv}")
            sys.exit(1)
        try:
            count = import_candidates_from_csv(args.csv)
        except ValueError as e:
            print(f"  Error: {e}")
            sys.exit(1)
        print(f"  Loaded {count} candidates")

    if args.stats or not args.csv:
        stats = get_candidate_stats()
        print("\n=== Candidate Store Statistics ===")
        print(f"  Total candidates: {stats['total']}")
        print(f"  Contact ready:    {stats['contact_ready']}")
        print(f"  Enriched:         {stats['enriched']}")
        print(f"  Last update:      {stats['last_update'] or 'Never'}")

    if not args.csv and not args.stats:
        print("\nTo load candidates:")
        print("  python scripts/load_candidates.py --csv candidates.csv")


if __name__ == '__main__':
    main()
