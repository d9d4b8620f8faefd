"""
Booking Ledger Verification Script

Checks the integrity of the Excel ledger written by the export task.
Run from project root: python scripts/verify.py
"""

import os
import sys
from datetime import datetime

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pandas as pd

from bellavista.services.excel_manager import ExcelManager


def verify_ledger() -> bool:
    """Verify the booking ledger. Returns False when a check fails."""
    ledger = ExcelManager.ledger_path()

    print("=" * 60)
    print("🔍 BOOKING LEDGER VERIFICATION")
    print("=" * 60)
    print(f"⏰ Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"📄 File: {ledger}")
    print("=" * 60)

    if not ledger.exists():
        print("\n❌ Ledger not found!")
        print("   Confirm at least one reservation first.")
        return False

    try:
        df = pd.read_excel(ledger, engine='openpyxl', dtype={'reservation_id': str})
        print("\n✅ File loaded successfully!")
    except Exception as e:
        print(f"\n❌ Could not read ledger: {e}")
        return False

    ok = True

    print("\n📊 STATISTICS:")
    print(f"   Reservations: {len(df)}")
    print(f"   Columns: {len(df.columns)}")

    missing = [col for col in ExcelManager.RESERVATION_COLUMNS if col not in df.columns]
    if missing:
        print(f"\n⚠️ Missing Columns: {missing}")
        ok = False
    else:
        print("\n✅ All ledger columns present")

    if 'reservation_id' in df.columns:
        duplicates = df['reservation_id'].duplicated().sum()
        if duplicates > 0:
            print(f"\n⚠️ {duplicates} duplicate reservation IDs found!")
            ok = False
        else:
            print("✅ No duplicate reservation IDs")

    if 'status' in df.columns:
        unconfirmed = df[df['status'] != 'confirmed']
        if len(unconfirmed) > 0:
            print(f"\n⚠️ {len(unconfirmed)} rows were exported without being confirmed")
            ok = False

    if 'party_size' in df.columns and len(df) > 0:
        print("\n🍽️ COVERS:")
        print(f"   Total guests: {int(df['party_size'].sum())}")
        print(f"   Average party: {df['party_size'].mean():.1f}")

    if 'reservation_date' in df.columns and len(df) > 0:
        print("\n📅 BY DATE:")
        per_day = df.groupby('reservation_date')['party_size'].agg(['count', 'sum'])
        for day, row in per_day.iterrows():
            print(f"   {day}: {int(row['count'])} bookings, {int(row['sum'])} guests")

    print("\n📋 UPCOMING:")
    print("-" * 60)
    if len(df) > 0:
        cols = ['reservation_date', 'reservation_time', 'customer_name', 'party_size']
        cols = [c for c in cols if c in df.columns]
        print(df[cols].head(5).to_string(index=False))

    print("\n" + "=" * 60)
    print("✅ VERIFICATION COMPLETE" if ok else "⚠️ VERIFICATION FOUND PROBLEMS")
    print("=" * 60)

    return ok


if __name__ == "__main__":
    sys.exit(0 if verify_ledger() else 1)
