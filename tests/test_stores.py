"""Behaviour shared by the in-memory and SQLAlchemy stores: identity uniqueness, ids, ordering, updates."""

import re
import threading
import unittest
from datetime import UTC, datetime
from unittest.mock import patch

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.errors import Conflict, InvalidTransition, NotFound
from app.models import Base
from app.schemas.submission import SubmissionUpdate
from app.schemas.template import OrganizationProfile, TemplateRecord
from app.storage.base import format_submission_id, parse_submission_sequence
from app.storage.memory import (
    MemoryIdentityStore,
    MemoryOrganizationStore,
    MemorySubmissionStore,
    MemoryTemplateStore,
)
from app.storage.sql import (
    SqlIdentityStore,
    SqlOrganizationStore,
    SqlSubmissionStore,
    SqlTemplateStore,
)
from tests.helpers import FakeClock, new_user

ID_PATTERN = re.compile(r"^AK-\d{4}-\d{4}$")

DEFAULT_ORG = OrganizationProfile(
    name="Pemerintah Desa Air Kulim",
    address="Jl. Raya Desa Air Kulim",
    phone="0761000000",
    email="info@desa.id",
)


class _StoreBehaviour:
    """Mixin; subclasses provide make_stores() returning (identity, submissions, templates, org)."""

    def make_stores(self, clock: FakeClock):
        raise NotImplementedError

    def setUp(self) -> None:
        self.clock = FakeClock()
        self.identity, self.submissions, self.templates, self.organization = self.make_stores(
            self.clock
        )
        self.owner = self.identity.create(new_user("budi", nik="1471010101900001"))

    def _submit(self, owner_id: int | None = None, title: str = "Pembaruan KTP hilang"):
        return self.submissions.create(
            owner_id=owner_id or self.owner.id,
            type="ktp",
            title=title,
            description="KTP saya hilang saat banjir",
            documents=["/uploads/a1.pdf"],
        )

    # Identity store

    def test_sequential_user_ids(self) -> None:
        second = self.identity.create(new_user("siti"))
        self.assertEqual(second.id, self.owner.id + 1)

    def test_username_and_email_lookup_is_case_insensitive(self) -> None:
        alice = self.identity.create(new_user("Alice", email="Alice@Example.id"))
        self.assertEqual(self.identity.get_by_username("alice").id, alice.id)
        self.assertEqual(self.identity.get_by_username("ALICE").id, alice.id)
        self.assertEqual(self.identity.get_by_email("alice@example.id").id, alice.id)

    def test_missing_lookups_return_none(self) -> None:
        self.assertIsNone(self.identity.get_by_id(999))
        self.assertIsNone(self.identity.get_by_username("nobody"))
        self.assertIsNone(self.identity.get_by_email("nobody@example.id"))
        self.assertIsNone(self.identity.get_by_nik("0000000000000000"))

    def test_nik_lookup_is_exact(self) -> None:
        self.assertEqual(self.identity.get_by_nik("1471010101900001").id, self.owner.id)

    def test_duplicate_username_conflicts(self) -> None:
        with self.assertRaises(Conflict) as ctx:
            self.identity.create(new_user("BUDI", email="other@example.id"))
        self.assertEqual(ctx.exception.message, "Username sudah digunakan")

    def test_duplicate_email_conflicts(self) -> None:
        with self.assertRaises(Conflict) as ctx:
            self.identity.create(new_user("budi2", email="BUDI@example.id"))
        self.assertEqual(ctx.exception.message, "Email sudah digunakan")

    def test_duplicate_nik_conflicts_without_mutating(self) -> None:
        before = self.identity.list_all()
        with self.assertRaises(Conflict) as ctx:
            self.identity.create(new_user("siti", nik="1471010101900001"))
        self.assertEqual(ctx.exception.message, "NIK sudah terdaftar")
        self.assertEqual(self.identity.list_all(), before)
        self.assertIsNone(self.identity.get_by_username("siti"))

    def test_concurrent_creates_with_same_username_admit_one(self) -> None:
        workers = 8
        barrier = threading.Barrier(workers)
        created: list = []
        conflicts: list = []

        def register(n: int) -> None:
            barrier.wait()
            try:
                created.append(
                    self.identity.create(new_user("siti", email=f"siti{n}@example.id"))
                )
            except Conflict:
                conflicts.append(n)

        threads = [threading.Thread(target=register, args=(n,)) for n in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(len(created), 1)
        self.assertEqual(len(conflicts), workers - 1)
        self.assertEqual(self.identity.get_by_username("SITI").id, created[0].id)

    def test_users_without_nik_do_not_conflict(self) -> None:
        self.identity.create(new_user("siti"))
        self.identity.create(new_user("agus"))
        self.assertEqual(len(self.identity.list_all()), 3)

    def test_update_merges_fields(self) -> None:
        updated = self.identity.update(
            self.owner.id, {"full_name": "Budi Hartono", "phone": "08123456789"}
        )
        self.assertEqual(updated.full_name, "Budi Hartono")
        self.assertEqual(updated.phone, "08123456789")
        self.assertEqual(updated.email, self.owner.email)
        self.assertEqual(self.identity.get_by_id(self.owner.id).full_name, "Budi Hartono")

    def test_update_ignores_identity_fields(self) -> None:
        updated = self.identity.update(self.owner.id, {"id": 77, "username": "hacker"})
        self.assertEqual(updated.id, self.owner.id)
        self.assertEqual(updated.username, "budi")

    def test_update_missing_user(self) -> None:
        with self.assertRaises(NotFound):
            self.identity.update(999, {"full_name": "Tidak Ada"})

    def test_update_to_taken_email_conflicts(self) -> None:
        siti = self.identity.create(new_user("siti"))
        with self.assertRaises(Conflict):
            self.identity.update(siti.id, {"email": "Budi@example.id"})

    # Submission store

    def test_list_all_on_empty_store(self) -> None:
        self.assertEqual(self.submissions.list_all(), [])

    def test_create_initial_state(self) -> None:
        record = self._submit()
        self.assertRegex(record.id, ID_PATTERN)
        self.assertEqual(record.id, "AK-2026-0001")
        self.assertEqual(record.status, "pending")
        self.assertIsNone(record.admin_notes)
        self.assertEqual(record.admin_files, [])
        self.assertEqual(record.created_at, record.updated_at)
        self.assertEqual(record.user.full_name, self.owner.full_name)

    def test_round_trip(self) -> None:
        created = self._submit()
        fetched = self.submissions.get(created.id)
        self.assertEqual(
            fetched.model_dump(exclude={"user"}), created.model_dump(exclude={"user"})
        )
        self.assertEqual(fetched.updated_at, fetched.created_at)

    def test_get_missing_returns_none(self) -> None:
        self.assertIsNone(self.submissions.get("AK-2026-9999"))

    def test_ids_are_unique_and_sequential(self) -> None:
        ids = [self._submit().id for _ in range(3)]
        self.assertEqual(ids, ["AK-2026-0001", "AK-2026-0002", "AK-2026-0003"])

    def test_sequence_restarts_each_year(self) -> None:
        self._submit()
        self._submit()
        self.clock.now = datetime(2027, 1, 2, 8, 0, tzinfo=UTC)
        record = self._submit()
        self.assertEqual(record.id, "AK-2027-0001")

    def test_list_newest_first(self) -> None:
        first = self._submit(title="Pengajuan pertama")
        self.clock.advance(minutes=1)
        second = self._submit(title="Pengajuan kedua")
        self.assertEqual([r.id for r in self.submissions.list_all()], [second.id, first.id])

    def test_list_ties_fall_back_to_ascending_id(self) -> None:
        first = self._submit()
        second = self._submit()
        self.assertEqual([r.id for r in self.submissions.list_all()], [first.id, second.id])

    def test_list_for_user_filters_by_owner(self) -> None:
        siti = self.identity.create(new_user("siti"))
        mine = self._submit()
        self._submit(owner_id=siti.id)
        records = self.submissions.list_for_user(self.owner.id)
        self.assertEqual([r.id for r in records], [mine.id])
        self.assertTrue(all(r.user.id == self.owner.id for r in records))

    def test_update_rejected_with_notes(self) -> None:
        created = self._submit()
        updated = self.submissions.update(
            created.id,
            SubmissionUpdate(status="rejected", admin_notes="Dokumen tidak lengkap"),
        )
        self.assertEqual(updated.status, "rejected")
        self.assertEqual(updated.admin_notes, "Dokumen tidak lengkap")
        self.assertGreater(updated.updated_at, updated.created_at)
        self.assertEqual(self.submissions.get(created.id).status, "rejected")

    def test_repeated_status_update_advances_updated_at(self) -> None:
        created = self._submit()
        once = self.submissions.update(created.id, SubmissionUpdate(status="processing"))
        twice = self.submissions.update(created.id, SubmissionUpdate(status="processing"))
        self.assertEqual(once.status, "processing")
        self.assertEqual(twice.status, "processing")
        self.assertGreater(once.updated_at, created.updated_at)
        self.assertGreater(twice.updated_at, once.updated_at)

    def test_update_completed_to_processing_is_invalid(self) -> None:
        created = self._submit()
        self.submissions.update(created.id, SubmissionUpdate(status="completed"))
        with self.assertRaises(InvalidTransition):
            self.submissions.update(created.id, SubmissionUpdate(status="processing"))
        self.assertEqual(self.submissions.get(created.id).status, "completed")

    def test_update_missing_submission(self) -> None:
        with self.assertRaises(NotFound):
            self.submissions.update("AK-2026-0404", SubmissionUpdate(status="processing"))

    def test_admin_files_replace(self) -> None:
        created = self._submit()
        self.submissions.update(created.id, SubmissionUpdate(admin_files=["/uploads/x1.pdf"]))
        updated = self.submissions.update(
            created.id, SubmissionUpdate(admin_files=["/uploads/x2.pdf"])
        )
        self.assertEqual(updated.admin_files, ["/uploads/x2.pdf"])
        self.assertEqual(updated.documents, ["/uploads/a1.pdf"])

    def test_enrichment_reflects_current_profile(self) -> None:
        created = self._submit()
        self.identity.update(self.owner.id, {"full_name": "Budi Hartono"})
        self.assertEqual(self.submissions.get(created.id).user.full_name, "Budi Hartono")

    # Templates and organization

    def test_template_create_list_delete(self) -> None:
        record = TemplateRecord(
            id="tpl-1",
            name="Formulir KTP",
            type="ktp",
            description="Formulir permohonan KTP",
            files=["/uploads/form.pdf"],
            created_by=self.owner.id,
            created_at=self.clock(),
        )
        self.templates.create(record)
        self.assertEqual([t.id for t in self.templates.list_all()], ["tpl-1"])
        self.assertEqual(self.templates.get("tpl-1").files, ["/uploads/form.pdf"])
        self.templates.delete("tpl-1")
        self.assertEqual(self.templates.list_all(), [])
        with self.assertRaises(NotFound):
            self.templates.delete("tpl-1")

    def test_organization_defaults_then_saves(self) -> None:
        self.assertEqual(self.organization.get(), DEFAULT_ORG)
        changed = DEFAULT_ORG.model_copy(update={"phone": "0761999999"})
        self.organization.save(changed)
        self.assertEqual(self.organization.get().phone, "0761999999")


class TestMemoryStores(_StoreBehaviour, unittest.TestCase):
    def make_stores(self, clock: FakeClock):
        identity = MemoryIdentityStore(clock=clock)
        return (
            identity,
            MemorySubmissionStore(identity, clock=clock),
            MemoryTemplateStore(),
            MemoryOrganizationStore(DEFAULT_ORG),
        )


class TestSqlStores(_StoreBehaviour, unittest.TestCase):
    """Same behaviour against SQLite in memory."""

    def make_stores(self, clock: FakeClock):
        engine = create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        Base.metadata.create_all(engine)
        self.addCleanup(engine.dispose)
        factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        return (
            SqlIdentityStore(factory, clock=clock),
            SqlSubmissionStore(factory, clock=clock),
            SqlTemplateStore(factory),
            SqlOrganizationStore(factory, DEFAULT_ORG),
        )

    def test_create_rederives_id_taken_by_another_writer(self) -> None:
        first = self._submit()
        # Another worker read the same highest id and raced us to AK-2026-0001.
        with patch.object(self.submissions, "_next_sequence", side_effect=[1, 2]):
            second = self._submit(title="Pembaruan KK baru")
        self.assertEqual(first.id, "AK-2026-0001")
        self.assertEqual(second.id, "AK-2026-0002")
        self.assertEqual(len(self.submissions.list_all()), 2)

    def test_create_gives_up_with_conflict(self) -> None:
        self._submit()
        with patch.object(self.submissions, "_next_sequence", return_value=1):
            with self.assertRaises(Conflict):
                self._submit(title="Pembaruan KK baru")
        self.assertEqual(len(self.submissions.list_all()), 1)


class TestSubmissionIdFormat(unittest.TestCase):
    def test_format_and_parse(self) -> None:
        self.assertEqual(format_submission_id(2026, 7), "AK-2026-0007")
        self.assertEqual(parse_submission_sequence("AK-2026-0007"), (2026, 7))
        self.assertEqual(parse_submission_sequence("AK-2026-12345"), (2026, 12345))
        self.assertIsNone(parse_submission_sequence("XX-2026-0001"))
        self.assertIsNone(parse_submission_sequence("AK-abcd-0001"))


if __name__ == "__main__":
    unittest.main()
