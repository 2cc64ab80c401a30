"""
BugLab Backend — Demo Seed Tests
=================================

The seed runs through the services against a fresh SQLite file; a second
run must find everything in place and add nothing.
"""

import pytest

from buglab.models.assignment import ScientistBug
from buglab.models.bug import Bug
from buglab.models.scientist import Scientist
from buglab.models.user import User
from buglab.seed import seed


async def _snapshot(count_rows):
    return {
        "users": await count_rows(User),
        "scientists": await count_rows(Scientist),
        "linked": await count_rows(Scientist, Scientist.user_id.is_not(None)),
        "unlinked": await count_rows(Scientist, Scientist.user_id.is_(None)),
        "bugs": await count_rows(Bug),
        "assignments": await count_rows(ScientistBug),
    }


class TestSeed:
    @pytest.fixture(autouse=True)
    def _services(self, profile_service, identity_service, bug_service, assignment_service, hasher):
        self.services = dict(
            profiles=profile_service,
            identities=identity_service,
            bugs=bug_service,
            assignments=assignment_service,
            hasher=hasher,
        )

    @pytest.mark.asyncio
    async def test_first_run_creates_demo_data(self, count_rows, identity_service, hasher):
        await seed(**self.services)

        assert await _snapshot(count_rows) == {
            "users": 3,
            "scientists": 3,
            "linked": 2,
            "unlinked": 1,
            "bugs": 4,
            "assignments": 4,
        }
        charlie = await identity_service.find_by_email("charlie@example.com")
        assert await hasher.verify("mypassword", charlie.hashed_password)

    @pytest.mark.asyncio
    async def test_second_run_adds_nothing(self, count_rows):
        await seed(**self.services)
        first = await _snapshot(count_rows)

        await seed(**self.services)

        assert await _snapshot(count_rows) == first

    @pytest.mark.asyncio
    async def test_assignments_follow_the_demo_plan(self, profile_service):
        await seed(**self.services)

        scientists = {s.email: [b.name for b in s.bugs] for s in await profile_service.list_scientists()}

        assert scientists["alice@example.com"] == ["API Latency Issues", "UI Glitch on Login"]
        assert scientists["bob@example.com"] == ["API Latency Issues"]
        assert scientists["jane.doe@example.com"] == ["Database Connection Leak"]
