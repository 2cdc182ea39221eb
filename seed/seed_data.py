"""
Seed the database with sample storefront orders.

Creates orders in the states a checkout typically meets:
  - fresh pending orders ready for checkout
  - an order already on hold, an order that failed, an order already paid
  - an order with an odd total to exercise rounding to pence

Run:
    python -m seed.seed_data
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from wonderful_gateway.database import async_session, init_db
from wonderful_gateway.models.order import Order


ORDERS = [
    {"id": 1042, "total": 19.99, "billing_email": "sam.jones@example.co.uk", "customer_ip": "203.0.113.10",
     "customer_user_agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)", "status": "pending"},
    {"id": 1043, "total": 120.00, "billing_email": "priya.shah@example.co.uk", "customer_ip": "203.0.113.11",
     "customer_user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)", "status": "pending"},
    {"id": 1044, "total": 7.50, "billing_email": "tom.baker@example.co.uk", "customer_ip": "203.0.113.12",
     "customer_user_agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0)", "status": "on-hold"},
    {"id": 1045, "total": 64.25, "billing_email": "ellie.wood@example.co.uk", "customer_ip": "203.0.113.13",
     "customer_user_agent": "Mozilla/5.0 (Linux; Android 14)", "status": "failed"},
    {"id": 1046, "total": 250.00, "billing_email": "owen.price@example.co.uk", "customer_ip": "203.0.113.14",
     "customer_user_agent": "Mozilla/5.0 (X11; Linux x86_64)", "status": "processing",
     "transaction_id": "WOO-Q7X2LM-1046"},

    # Half-penny total rounds up to 1001 pence
    {"id": 1047, "total": 10.005, "billing_email": "nia.evans@example.co.uk", "customer_ip": "203.0.113.15",
     "customer_user_agent": "Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X)", "status": "pending"},
]


async def seed():
    """Seed the database with sample orders."""
    await init_db()

    async with async_session() as session:
        # Check if already seeded
        existing = await session.get(Order, ORDERS[0]["id"])
        if existing:
            print("Database already seeded. Skipping.")
            return

        for order_data in ORDERS:
            session.add(Order(**order_data))

        await session.commit()
        print(f"Seeded {len(ORDERS)} orders.")


if __name__ == "__main__":
    asyncio.run(seed())
