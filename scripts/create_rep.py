"""
Create a rep profile from the command line.

The identity-provider account must already exist; pass its id as --rep-id.

Usage:
    python scripts/create_rep.py --rep-id abc123 --name "Sam Jones" \
        --email sam@example.com --mobile 07700900456 --region "South West" \
        --postcodes "BS1, BS2, BA1"
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path so we can import from repositories
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.context import OperationContext
from domain.errors import CrmError
from domain.rep import Role
from repositories.supabase_store import SupabaseStore
from services.notification_service import EffectDispatcher
from services.rep_service import NewRep, create_rep


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a rep profile")
    parser.add_argument("--rep-id", required=True, help="Identity-provider account id")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--mobile", required=True)
    parser.add_argument("--region", required=True)
    parser.add_argument("--postcodes", default="", help="Comma-separated service postcodes")
    parser.add_argument("--max-travel-time", default="0", help="Hours")
    parser.add_argument("--max-travel-miles", default="0")
    parser.add_argument("--calendar-id", default=None)
    parser.add_argument("--actor", default="setup-script", help="Recorded as the creator")
    args = parser.parse_args()

    store = SupabaseStore()
    ctx = OperationContext(actor_id=args.actor, role=Role.ADMIN)

    try:
        outcome = create_rep(
            store,
            ctx,
            NewRep(
                rep_id=args.rep_id,
                name=args.name,
                email=args.email,
                mobile=args.mobile,
                region=args.region,
                postcodes=args.postcodes,
                max_travel_time=args.max_travel_time,
                max_travel_miles=args.max_travel_miles,
                calendar_id=args.calendar_id,
            ),
        )
    except CrmError as exc:
        print(f"[ERROR] Failed to create rep: {exc}")
        return 1

    EffectDispatcher(store).dispatch(ctx, outcome.effects)

    rep = outcome.value
    print(f"[SUCCESS] Rep created successfully!")
    print(f"  Rep ID: {rep.rep_id}")
    print(f"  Name: {rep.name}")
    print(f"  Region: {rep.region}")
    print(f"  Postcodes: {', '.join(rep.postcodes) or '(none)'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
