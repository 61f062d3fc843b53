#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Maintenance Worker Entry Point
# =============================================================================
# Starts a Celery worker on the "maintenance" queue. With --beat the same
# process also runs the scheduler for the nightly archive purge and plan
# reconciliation.
#
# Usage:
#   python scripts/start_worker.py
#   python scripts/start_worker.py --beat
#
#   # Or use Celery CLI directly
#   celery -A workers.celery_app worker -B -Q maintenance --loglevel=info
#
# Prerequisites:
#   - Redis reachable at REDIS_URL
#   - Supabase and R2 variables set (.env file)
# =============================================================================

import argparse
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from workers.celery_app import celery_app


def main():
    """Start the maintenance worker."""
    parser = argparse.ArgumentParser(description="Cuzata maintenance worker")
    parser.add_argument("--beat", action="store_true", help="Also run the beat scheduler")
    parser.add_argument("--concurrency", type=int, default=1)
    args = parser.parse_args()

    print("=" * 60)
    print("Cuzata Maintenance Worker")
    print("=" * 60)
    print()
    print(f"Queue: maintenance | beat: {'on' if args.beat else 'off'}")
    print("Press Ctrl+C to stop")
    print()

    argv = [
        "worker",
        "--loglevel=info",
        "--queues=maintenance",
        f"--concurrency={args.concurrency}",
    ]
    if args.beat:
        argv.append("--beat")

    celery_app.worker_main(argv)


if __name__ == "__main__":
    main()
