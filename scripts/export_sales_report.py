#!/usr/bin/env python3
"""
Sales Report Export Script

Fetches the sales ledger from Supabase, applies the given filters, and writes
the sales report (KPIs, payment method breakdown, transaction detail) as CSV.

Usage:
    python export_sales_report.py --output ventas.csv
    python export_sales_report.py --start 2026-02-01 --end 2026-02-28 --output febrero.csv
    python export_sales_report.py --method visa --output visa.csv
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import config
from logging_config import configure_logging
from repositories.sale_repository import fetch_sales_history
from services.aggregation_service import calculate_stats
from services.report_service import build_sales_report, render_sales_report_csv
from services.sales_filter_service import SalesFilter, filter_sales


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Export the sales report from the Supabase ledger to CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Whole history
  python export_sales_report.py --output ventas.csv

  # One month
  python export_sales_report.py --start 2026-02-01 --end 2026-02-28 --output febrero.csv

  # One customer paying by transfer
  python export_sales_report.py --customer "ana" --method bac --output ana_bac.csv
        """
    )

    parser.add_argument("--output", "-o", required=True, help="Path to output CSV file")
    parser.add_argument("--start", help="First business date, inclusive (YYYY-MM-DD)")
    parser.add_argument("--end", help="Last business date, inclusive (YYYY-MM-DD)")
    parser.add_argument("--customer", "-c", help="Customer name contains (case-insensitive)")
    parser.add_argument("--method", "-m", help="Payment method contains (case-insensitive)")
    parser.add_argument("--timezone", help="IANA timezone for business dates (default: LEDGER_TIMEZONE)")

    args = parser.parse_args()
    configure_logging(config.LOG_LEVEL)

    try:
        criteria = SalesFilter(
            start_date=args.start,
            end_date=args.end,
            customer_contains=args.customer,
            method_contains=args.method,
        )
        tz = config.get_ledger_timezone(args.timezone)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    try:
        print("Fetching sales from database...")
        sales = filter_sales(fetch_sales_history(), criteria, tz=tz)
        stats = calculate_stats(sales)

        report = build_sales_report(sales, stats, criteria, datetime.now(timezone.utc))
        with open(args.output, "w", newline="", encoding="utf-8") as f:
            f.write(render_sales_report_csv(report))

        print()
        print("=" * 60)
        print("REPORT SUMMARY")
        print("=" * 60)
        print(report.filter_description)
        print(f"Transactions:   {stats.count}")
        print(f"Total sales:    {stats.total_sales:.2f}")
        print(f"Average ticket: {stats.avg_ticket:.2f}")
        for row in report.method_rows:
            print(f"  {row.method_name:<30} {row.amount:>12.2f}  {row.share_percent}%")
        print()
        print(f"Output file: {args.output}")
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
