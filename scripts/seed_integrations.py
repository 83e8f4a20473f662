"""
Seed the bundled platforms and integration configurations.
"""

from __future__ import annotations

import argparse
import json
import logging

from app.logging_utils import configure_logging
from app.repositories.integration_repository import IntegrationRepository
from app.seed_data import SEED_INTEGRATIONS, SEED_PLATFORMS
from db.session import session_scope

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Upsert seed platforms and integrations.")
    parser.add_argument(
        "--only",
        dest="only",
        default=None,
        help="Optional integration name to seed on its own.",
    )
    args = parser.parse_args()
    configure_logging()

    seeds = [seed for seed in SEED_INTEGRATIONS if args.only in (None, seed["name"])]
    if not seeds:
        logger.error("Unknown integration %r", args.only)
        return 1

    seeded: list[dict[str, object]] = []
    with session_scope() as db:
        repository = IntegrationRepository(db)
        platform_ids = {name: repository.upsert_platform(name) for name in SEED_PLATFORMS}
        for seed in seeds:
            integration_id = repository.save(
                name=seed["name"],
                platform_id=platform_ids[seed["platform"]],
                field_mapping=seed["field_mapping"],
                tables=seed["tables"],
                is_active=seed.get("is_active", True),
                source_format=seed.get("source_format"),
            )
            logger.info("Seeded %s (%s)", seed["name"], ", ".join(seed["tables"]))
            seeded.append({"id": integration_id, "name": seed["name"], "tables": seed["tables"]})
        db.commit()

    print(json.dumps(seeded, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
