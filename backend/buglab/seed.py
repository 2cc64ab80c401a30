"""
BugLab Backend — Demo Data Seed
================================

What:  Fills an empty database with demo users, scientists, bugs and
       assignments.
How:   Goes through the same services the API uses, so passwords are hashed
       and every invariant holds. Safe to run repeatedly: records that
       already exist (matched by email or bug name) are reused.

Usage (from backend/):
    python -m buglab.seed
"""

import asyncio
import logging
from typing import Dict

from buglab.config import settings
from buglab.database import async_session_factory, dispose_engine, engine, init_models
from buglab.exceptions import ConflictError
from buglab.main import setup_logging
from buglab.services.assignment_service import AssignmentService
from buglab.services.bug_service import BugService
from buglab.services.credential_service import PasswordHasher
from buglab.services.identity_service import IdentityService
from buglab.services.profile_service import ProfileService

logger = logging.getLogger("buglab.seed")

# name, email, password
REGISTERED_SCIENTISTS = [
    ("Alice Smith", "alice@example.com", "password123"),
    ("Bob Johnson", "bob@example.com", "secret456"),
]

# login without a scientist profile
PLAIN_USERS = [
    ("charlie@example.com", "mypassword"),
]

# scientist profile without a login
UNLINKED_SCIENTISTS = [
    ("Dr. Jane Doe", "jane.doe@example.com"),
]

# name, strength, type
BUGS = [
    ("API Latency Issues", 80, "Critical"),
    ("UI Glitch on Login", 30, "Minor"),
    ("Database Connection Leak", 95, "Critical"),
    ("Broken Image Link on Dashboard", 10, "Trivial"),
]

# scientist email → bug names
ASSIGNMENTS = {
    "alice@example.com": ["API Latency Issues", "UI Glitch on Login"],
    "bob@example.com": ["API Latency Issues"],
    "jane.doe@example.com": ["Database Connection Leak"],
}


async def seed(
    profiles: ProfileService,
    identities: IdentityService,
    bugs: BugService,
    assignments: AssignmentService,
    hasher: PasswordHasher,
) -> None:
    existing_scientists = {s.email: s.id for s in await profiles.list_scientists()}
    scientist_ids: Dict[str, int] = dict(existing_scientists)

    for name, email, password in REGISTERED_SCIENTISTS:
        if email in scientist_ids:
            continue
        created = await profiles.register(name, email, password)
        scientist_ids[email] = created.id
        logger.info("Registered %s", email)

    for email, password in PLAIN_USERS:
        if await identities.find_by_email(email) is None:
            await identities.create_user(email, await hasher.hash(password))
            logger.info("Created user %s", email)

    for name, email in UNLINKED_SCIENTISTS:
        if email in scientist_ids:
            continue
        created = await profiles.create_profile(name, email)
        scientist_ids[email] = created.id
        logger.info("Created unlinked scientist %s", email)

    bug_ids: Dict[str, int] = {b.name: b.id for b in await bugs.list_bugs()}
    for name, strength, bug_type in BUGS:
        if name in bug_ids:
            continue
        created = await bugs.create(name, strength, bug_type)
        bug_ids[name] = created.id
        logger.info("Created bug '%s'", name)

    for email, bug_names in ASSIGNMENTS.items():
        for bug_name in bug_names:
            try:
                await assignments.assign(scientist_ids[email], bug_ids[bug_name])
            except ConflictError:
                continue
            logger.info("Assigned '%s' to %s", bug_name, email)


async def main() -> None:
    setup_logging(settings.log_level)
    await init_models(engine)

    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    try:
        await seed(
            profiles=ProfileService(async_session_factory, hasher, settings.password_min_length),
            identities=IdentityService(async_session_factory),
            bugs=BugService(async_session_factory),
            assignments=AssignmentService(async_session_factory),
            hasher=hasher,
        )
        logger.info("Seed complete.")
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
