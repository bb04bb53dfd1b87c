#!/usr/bin/env python3
"""
Commission Export Script

Exports commissions to CSV for invoicing, with a totals summary.

Usage:
    python export_commissions.py --output commissions.csv
    python export_commissions.py --rep-id abc123 --output sam_commissions.csv
    python export_commissions.py --ready-to-invoice --output invoice_run.csv
"""

from __future__ import annotations

import argparse
import csv
import sys
from pathlib import Path
from typing import List

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.commission import Commission, CommissionStage
from domain.context import OperationContext
from domain.money import format_currency
from domain.rep import Role
from repositories.supabase_store import SupabaseStore
from services.commission_service import commission_statement, rollup

CSV_COLUMNS = [
    "Commission ID",
    "Customer ID",
    "Rep ID",
    "Sale Price",
    "Commission",
    "Deposit Commission",
    "Deposit Paid Date",
    "Final Commission",
    "Final Paid Date",
    "Stage",
]


def commission_to_csv_row(commission: Commission) -> dict[str, str]:
    return {
        "Commission ID": str(commission.commission_id),
        "Customer ID": str(commission.customer_id),
        "Rep ID": commission.rep_id or "",
        "Sale Price": str(commission.total_sale_price),
        "Commission": str(commission.commission_amount),
        "Deposit Commission": str(commission.deposit_commission),
        "Deposit Paid Date": commission.deposit_paid_date.isoformat() if commission.deposit_paid_date else "",
        "Final Commission": str(commission.final_commission),
        "Final Paid Date": commission.final_paid_date.isoformat() if commission.final_paid_date else "",
        "Stage": commission.stage.value,
    }


def export_commissions_to_csv(commissions: List[Commission], output_path: str) -> None:
    """
    Write commissions to a CSV file.

    Raises:
        ValueError: If the commissions list is empty
    """
    if not commissions:
        raise ValueError("No commissions to export")

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for commission in commissions:
            writer.writerow(commission_to_csv_row(commission))

    print(f"Exported {len(commissions)} commissions to {output_path}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Export commissions to CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--output", "-o", required=True, help="Path to output CSV file")
    parser.add_argument("--rep-id", help="Only this rep's commissions")
    parser.add_argument(
        "--ready-to-invoice",
        action="store_true",
        help="Only commissions whose final half has been released",
    )
    args = parser.parse_args()

    if args.rep_id:
        ctx = OperationContext(actor_id=args.rep_id, role=Role.REP)
    else:
        ctx = OperationContext(actor_id="export-script", role=Role.ADMIN)

    try:
        commissions = commission_statement(SupabaseStore(), ctx).commissions
        if args.ready_to_invoice:
            commissions = [c for c in commissions if c.stage is CommissionStage.COMPLETE]

        if not commissions:
            print("No commissions found matching the specified filters")
            return 1

        export_commissions_to_csv(commissions, args.output)

        totals = rollup(commissions)
        print()
        print("=" * 60)
        print("EXPORT SUMMARY")
        print("=" * 60)
        print(f"Commissions exported: {len(commissions)}")
        print(f"  Total:     {format_currency(totals.total)}")
        print(f"  Pending:   {format_currency(totals.pending)}")
        print(f"  Completed: {format_currency(totals.completed)}")
        print("=" * 60)
        return 0

    except KeyboardInterrupt:
        print("\n\nExport interrupted by user")
        return 130

    except Exception as e:
        print(f"\nERROR: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
