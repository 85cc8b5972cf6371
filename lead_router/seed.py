"""
Seed the default agents into the router DB.

Run from the project root:  python -m lead_router.seed
"""
import logging

from lead_router.db import SessionLocal, init_db
from lead_router.errors import DuplicateRoutingAddress
from lead_router.store import LeadStore


DEFAULT_AGENTS = [
    {"name": "Diego", "wa_number": "56996096419"},
    {"name": "Rosario", "wa_number": "56953494307"},
]


def seed_agents(store: LeadStore, agents=DEFAULT_AGENTS) -> dict:
    added, existing = [], []

    for agent in agents:
        try:
            store.create_agent(agent["name"], agent["wa_number"], agent.get("phone_number_id"))
            added.append(agent["name"])
            print(f"  + Added {agent['name']} ({agent['wa_number']})")
        except DuplicateRoutingAddress:
            existing.append(agent["name"])
            print(f"  = {agent['name']} ({agent['wa_number']}) already exists")

    return {"added": added, "existing": existing}


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    init_db()

    db = SessionLocal()
    try:
        print("Seeding agents...")
        seed_agents(LeadStore(db))
        print("Done.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
