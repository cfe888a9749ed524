#!/usr/bin/env python3
"""CLI entry point for dose entry and plan finalization.

Usage:
    # Live status for an entered dose
    dose-entry check 52.5

    # Finalize a patient's plan (only commits if the dose is safe)
    dose-entry finalize Patient_Normal 50.0

    # Show every patient and its billing status
    dose-entry list

    # Restore the two seed patients (destroys finalization state)
    dose-entry reset

    # Use a specific shared database
    dose-entry --db /srv/dosimetry/medical_shared.db list
"""

import argparse
import logging
import sys

from dosimetry.finalization import (
    FinalizationStore,
    SafetyPolicy,
    StoreError,
    assess,
    attempt_finalize,
)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_REJECTED = 2


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def build_policy(args) -> SafetyPolicy:
    """Environment policy, with command-line overrides."""
    policy = SafetyPolicy.from_env()
    return SafetyPolicy(
        target=args.target if args.target is not None else policy.target,
        tolerance_fraction=(
            args.tolerance if args.tolerance is not None else policy.tolerance_fraction
        ),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Dose Entry Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("--db", metavar="PATH", help="Shared database path (default: DOSIMETRY_DB_PATH or ~/.dosimetry/medical_shared.db)")
    parser.add_argument("--target", type=float, help="Target dose (default: 50.0)")
    parser.add_argument("--tolerance", type=float, help="Allowed fraction above target (default: 0.10)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser("check", help="Check a dose against the safety interlock")
    check_parser.add_argument("dose", help="Entered dose")

    finalize_parser = subparsers.add_parser("finalize", help="Finalize a patient's plan")
    finalize_parser.add_argument("patient_id", help="Patient id")
    finalize_parser.add_argument("dose", help="Entered dose")

    subparsers.add_parser("list", help="List patients and billing status")
    subparsers.add_parser("reset", help="Reset the store to the seed patients")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        policy = build_policy(args)
    except ValueError as e:
        logger.error(f"Invalid safety policy: {e}")
        return EXIT_ERROR

    if args.command == "check":
        check = assess(args.dose, policy)
        print(check.message)
        return EXIT_OK if check.is_safe else EXIT_REJECTED

    try:
        store = FinalizationStore(db_path=args.db)

        if args.command == "finalize":
            outcome = attempt_finalize(store, args.patient_id, args.dose, policy)
            if outcome.committed:
                print("Plan Finalized Successfully!")
                print(f"  {outcome.record.id}: dose {outcome.record.dose_value} - {outcome.record.billing_status}")
                return EXIT_OK
            print(f"Finalize rejected for {outcome.patient_id}: {outcome.reason.value}")
            return EXIT_REJECTED

        elif args.command == "list":
            records = sorted(store.fetch_all(), key=lambda r: r.id)
            print("\n" + "=" * 60)
            print("PATIENTS")
            print("=" * 60)
            if not records:
                print("  No patients (run 'reset' to seed)")
            for record in records:
                risk = "high-risk" if record.is_high_risk else "normal"
                print(f"  {record.id:20} {record.dose_value:>8.2f}  {risk:10} {record.billing_status}")
            return EXIT_OK

        elif args.command == "reset":
            store.reset_and_seed()
            print(f"Store reset at {store.db_path}")
            return EXIT_OK

    except StoreError as e:
        logger.error(f"Store error: {e}", exc_info=args.verbose)
        return EXIT_ERROR

    return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
