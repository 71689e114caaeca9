import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running this script directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from sqlalchemy.exc import SQLAlchemyError

from shopledger.core.logging import setup_logging
from shopledger.database import SessionLocal
from shopledger.services.ledger_service import reconcile_batch_stock, reconcile_party_balances


def parse_args():
    parser = argparse.ArgumentParser(
        description="Recompute party balances and batch stock from the stored events."
    )
    parser.add_argument(
        "--fix",
        action="store_true",
        help="Write the recomputed values back instead of only reporting them.",
    )
    parser.add_argument(
        "--only",
        choices=("balances", "stock"),
        default=None,
        help="Check only party balances or only batch stock. Default: both.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    db = SessionLocal()
    try:
        drifts = []
        if args.only in (None, "balances"):
            drifts += reconcile_party_balances(db, fix=args.fix)
        if args.only in (None, "stock"):
            drifts += reconcile_batch_stock(db, fix=args.fix)
    except SQLAlchemyError as exc:
        raise SystemExit(f"Reconciliation failed: {exc}") from exc
    finally:
        db.close()

    if not drifts:
        print("No drift found.")
        return

    for drift in drifts:
        status = "fixed" if drift.fixed else "drift"
        label = f" ({drift.detail})" if drift.detail else ""
        print(f"  [{status}] {drift.kind} {drift.entity_id}{label}: {drift.stored} -> {drift.expected}")
    print(f"{len(drifts)} record(s) {'corrected' if args.fix else 'out of sync'}.")
    if not args.fix:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
