"""
BugLab Backend — Profile Service Tests
=======================================

What we test:
    ✅ Registration creates exactly one User + Scientist pair
    ✅ Any registration failure leaves no orphan User or Scientist
    ✅ Update mirrors email onto the login and changes the password
    ✅ Password update on an unlinked scientist changes nothing
    ✅ Delete cascades to assignments and the linked User only
"""

import pytest

from buglab.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from buglab.models.assignment import ScientistBug
from buglab.models.scientist import Scientist
from buglab.models.session import UserSession
from buglab.models.user import User


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_links_scientist_to_new_user(self, profile_service, identity_service, hasher):
        created = await profile_service.register("Alice Smith", "alice@example.com", "password123")

        assert created.id is not None
        assert created.name == "Alice Smith"
        assert created.email == "alice@example.com"

        user = await identity_service.find_by_id(created.user_id)
        assert user.email == "alice@example.com"
        assert await hasher.verify("password123", user.hashed_password)

    @pytest.mark.asyncio
    async def test_register_strips_name_and_email(self, profile_service):
        created = await profile_service.register("  Alice Smith ", " alice@example.com ", "password123")

        assert created.name == "Alice Smith"
        assert created.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_email_domain_is_normalized(self, profile_service, identity_service):
        created = await profile_service.register("Alice Smith", "alice@Example.COM", "password123")

        assert created.email == "alice@example.com"
        assert await identity_service.find_by_email("alice@example.com") is not None

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts_and_keeps_one_pair(self, profile_service, count_rows):
        await profile_service.register("Alice Smith", "alice@example.com", "password123")

        with pytest.raises(ConflictError):
            await profile_service.register("Alice Again", "alice@example.com", "password456")

        assert await count_rows(User) == 1
        assert await count_rows(Scientist) == 1

    @pytest.mark.asyncio
    async def test_email_of_unlinked_scientist_rolls_back_the_user(self, profile_service, count_rows):
        """The User insert succeeds first; the Scientist clash must undo it."""
        await profile_service.create_profile("Dr. Jane Doe", "jane.doe@example.com")

        with pytest.raises(ConflictError):
            await profile_service.register("Jane", "jane.doe@example.com", "password123")

        assert await count_rows(User) == 0
        assert await count_rows(Scientist) == 1

    @pytest.mark.asyncio
    async def test_email_of_plain_user_conflicts(self, profile_service, identity_service, count_rows):
        await identity_service.create_user("charlie@example.com", "$2b$04$placeholder")

        with pytest.raises(ConflictError):
            await profile_service.register("Charlie", "charlie@example.com", "password123")

        assert await count_rows(Scientist) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "name, email, password, message",
        [
            (None, "a@example.com", "password123", "name is required"),
            ("   ", "a@example.com", "password123", "name is required"),
            ("Alice", None, "password123", "email is required"),
            ("Alice", "not-an-email", "password123", "Invalid email format"),
            ("Alice", "a@example", "password123", "Invalid email format"),
            ("Alice", "a@@example.com", "password123", "Invalid email format"),
            ("Alice", "a b@example.com", "password123", "Invalid email format"),
            ("Alice", "a@example.com", None, "password is required"),
            ("Alice", "a@example.com", "short", "Password must be at least 8 characters long"),
        ],
    )
    async def test_invalid_input_writes_nothing(self, profile_service, count_rows, name, email, password, message):
        with pytest.raises(ValidationError) as exc_info:
            await profile_service.register(name, email, password)

        assert exc_info.value.message == message
        assert await count_rows(User) == 0
        assert await count_rows(Scientist) == 0


class TestReads:
    @pytest.mark.asyncio
    async def test_list_includes_assigned_bugs_in_id_order(
        self, profile_service, bug_service, assignment_service
    ):
        alice = await profile_service.register("Alice Smith", "alice@example.com", "password123")
        bob = await profile_service.register("Bob Johnson", "bob@example.com", "secret456")
        first = await bug_service.create("API Latency Issues", 80, "Critical")
        second = await bug_service.create("UI Glitch on Login", 30, "Minor")
        await assignment_service.assign(alice.id, second.id)
        await assignment_service.assign(alice.id, first.id)

        scientists = await profile_service.list_scientists()

        assert [s.id for s in scientists] == [alice.id, bob.id]
        assert [b.id for b in scientists[0].bugs] == [first.id, second.id]
        assert scientists[1].bugs == []

    @pytest.mark.asyncio
    async def test_get_missing_scientist(self, profile_service):
        with pytest.raises(NotFoundError) as exc_info:
            await profile_service.get_scientist(999)

        assert exc_info.value.message == "Scientist with ID '999' was not found"


class TestUpdate:
    @pytest.mark.asyncio
    async def test_email_change_is_mirrored_onto_the_login(self, profile_service, identity_service):
        created = await profile_service.register("Alice Smith", "alice@example.com", "password123")

        updated = await profile_service.update(created.id, "Alice Jones", "alice.jones@example.com")

        assert updated.name == "Alice Jones"
        assert updated.email == "alice.jones@example.com"
        user = await identity_service.find_by_id(created.user_id)
        assert user.email == "alice.jones@example.com"
        assert await identity_service.find_by_email("alice@example.com") is None

    @pytest.mark.asyncio
    async def test_password_change(self, profile_service, identity_service, hasher):
        created = await profile_service.register("Alice Smith", "alice@example.com", "password123")

        await profile_service.update(created.id, "Alice Smith", "alice@example.com", "new-password-1")

        user = await identity_service.find_by_id(created.user_id)
        assert await hasher.verify("new-password-1", user.hashed_password)
        assert not await hasher.verify("password123", user.hashed_password)

    @pytest.mark.asyncio
    async def test_email_taken_by_another_scientist(self, profile_service):
        alice = await profile_service.register("Alice Smith", "alice@example.com", "password123")
        await profile_service.register("Bob Johnson", "bob@example.com", "secret456")

        with pytest.raises(ConflictError):
            await profile_service.update(alice.id, "Alice Smith", "bob@example.com")

        unchanged = await profile_service.get_scientist(alice.id)
        assert unchanged.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_email_taken_by_a_plain_user(self, profile_service, identity_service):
        alice = await profile_service.register("Alice Smith", "alice@example.com", "password123")
        await identity_service.create_user("charlie@example.com", "$2b$04$placeholder")

        with pytest.raises(ConflictError):
            await profile_service.update(alice.id, "Alice Smith", "charlie@example.com")

    @pytest.mark.asyncio
    async def test_password_on_unlinked_scientist_changes_nothing(self, profile_service):
        jane = await profile_service.create_profile("Dr. Jane Doe", "jane.doe@example.com")

        with pytest.raises(InvalidStateError):
            await profile_service.update(jane.id, "Jane Renamed", "jane.doe@example.com", "password123")

        unchanged = await profile_service.get_scientist(jane.id)
        assert unchanged.name == "Dr. Jane Doe"

    @pytest.mark.asyncio
    async def test_unlinked_scientist_can_change_name_and_email(self, profile_service):
        jane = await profile_service.create_profile("Dr. Jane Doe", "jane.doe@example.com")

        updated = await profile_service.update(jane.id, "Dr. Jane Roe", "jane.roe@example.com")

        assert updated.name == "Dr. Jane Roe"
        assert updated.user_id is None

    @pytest.mark.asyncio
    async def test_missing_scientist(self, profile_service):
        with pytest.raises(NotFoundError):
            await profile_service.update(999, "Nobody", "nobody@example.com")

    @pytest.mark.asyncio
    async def test_short_new_password_is_rejected(self, profile_service):
        created = await profile_service.register("Alice Smith", "alice@example.com", "password123")

        with pytest.raises(ValidationError):
            await profile_service.update(created.id, "Alice Smith", "alice@example.com", "short")

    @pytest.mark.asyncio
    async def test_empty_new_password_is_rejected(self, profile_service, identity_service, hasher):
        created = await profile_service.register("Alice Smith", "alice@example.com", "password123")

        with pytest.raises(ValidationError):
            await profile_service.update(created.id, "Alice Smith", "alice@example.com", "")

        user = await identity_service.find_by_id(created.user_id)
        assert await hasher.verify("password123", user.hashed_password)


class TestDelete:
    @pytest.mark.asyncio
    async def test_linked_scientist_takes_user_sessions_and_assignments(
        self, profile_service, bug_service, assignment_service, authenticator, count_rows
    ):
        alice = await profile_service.register("Alice Smith", "alice@example.com", "password123")
        bug = await bug_service.create("API Latency Issues", 80, "Critical")
        await assignment_service.assign(alice.id, bug.id)
        await authenticator.login("alice@example.com", "password123")

        deleted = await profile_service.delete(alice.id)

        assert deleted.id == alice.id
        assert await count_rows(Scientist) == 0
        assert await count_rows(User) == 0
        assert await count_rows(ScientistBug) == 0
        assert await count_rows(UserSession) == 0
        # the bug itself survives
        assert (await bug_service.get(bug.id)).name == "API Latency Issues"

    @pytest.mark.asyncio
    async def test_unlinked_scientist_deletes_no_user(
        self, profile_service, identity_service, bug_service, assignment_service, count_rows
    ):
        await identity_service.create_user("charlie@example.com", "$2b$04$placeholder")
        jane = await profile_service.create_profile("Dr. Jane Doe", "jane.doe@example.com")
        bug = await bug_service.create("Database Connection Leak", 95, "Critical")
        await assignment_service.assign(jane.id, bug.id)

        await profile_service.delete(jane.id)

        assert await count_rows(Scientist) == 0
        assert await count_rows(ScientistBug) == 0
        assert await count_rows(User) == 1

    @pytest.mark.asyncio
    async def test_missing_scientist(self, profile_service):
        with pytest.raises(NotFoundError):
            await profile_service.delete(999)

    @pytest.mark.asyncio
    async def test_deleting_the_user_removes_the_profile(self, profile_service, identity_service, count_rows):
        alice = await profile_service.register("Alice Smith", "alice@example.com", "password123")

        await identity_service.delete_user(alice.user_id)

        assert await count_rows(Scientist) == 0
        assert await count_rows(User) == 0
