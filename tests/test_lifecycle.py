"""Unit tests for app.services.lifecycle: transition allow-list and the admin update merge."""

import unittest
from datetime import UTC, datetime, timedelta

from app.core.errors import InvalidTransition
from app.schemas.submission import SubmissionRecord, SubmissionUpdate
from app.services.lifecycle import (
    TERMINAL_STATUSES,
    apply_update,
    can_transition,
    is_terminal,
    next_updated_at,
    validate_transition,
)

T0 = datetime(2026, 5, 1, 9, 0, tzinfo=UTC)


def _record(status: str = "pending", **kwargs: object) -> SubmissionRecord:
    defaults = {
        "id": "AK-2026-0001",
        "user_id": 2,
        "type": "kk",
        "title": "Pembaruan KK",
        "description": "Menambahkan anggota keluarga baru",
        "documents": ["/uploads/abc.pdf"],
        "created_at": T0,
        "updated_at": T0,
    }
    defaults.update(kwargs)
    return SubmissionRecord(status=status, **defaults)


class TestTransitionTable(unittest.TestCase):
    """pending and processing move forward; completed and rejected are terminal."""

    def test_allowed_transitions(self) -> None:
        for current, requested in [
            ("pending", "processing"),
            ("pending", "completed"),
            ("pending", "rejected"),
            ("processing", "completed"),
            ("processing", "rejected"),
        ]:
            with self.subTest(current=current, requested=requested):
                self.assertTrue(can_transition(current, requested))

    def test_disallowed_transitions(self) -> None:
        for current, requested in [
            ("processing", "pending"),
            ("completed", "processing"),
            ("completed", "pending"),
            ("completed", "rejected"),
            ("rejected", "completed"),
            ("rejected", "pending"),
        ]:
            with self.subTest(current=current, requested=requested):
                self.assertFalse(can_transition(current, requested))
                with self.assertRaises(InvalidTransition) as ctx:
                    validate_transition(current, requested)
                self.assertEqual(ctx.exception.current, current)
                self.assertEqual(ctx.exception.requested, requested)

    def test_self_transition_is_allowed_everywhere(self) -> None:
        for status in ("pending", "processing", "completed", "rejected"):
            self.assertTrue(can_transition(status, status))

    def test_terminal_statuses(self) -> None:
        self.assertEqual(TERMINAL_STATUSES, frozenset({"completed", "rejected"}))
        self.assertTrue(is_terminal("rejected"))
        self.assertFalse(is_terminal("processing"))


class TestNextUpdatedAt(unittest.TestCase):
    def test_uses_now_when_later(self) -> None:
        later = T0 + timedelta(seconds=5)
        self.assertEqual(next_updated_at(T0, later), later)

    def test_strictly_advances_when_clock_has_not_moved(self) -> None:
        self.assertGreater(next_updated_at(T0, T0), T0)
        self.assertGreater(next_updated_at(T0, T0 - timedelta(seconds=1)), T0)


class TestApplyUpdate(unittest.TestCase):
    """apply_update merges only explicitly set fields and always advances updated_at."""

    def test_status_and_notes(self) -> None:
        updated = apply_update(
            _record(),
            SubmissionUpdate(status="rejected", admin_notes="Dokumen tidak lengkap"),
            T0 + timedelta(minutes=1),
        )
        self.assertEqual(updated.status, "rejected")
        self.assertEqual(updated.admin_notes, "Dokumen tidak lengkap")
        self.assertGreater(updated.updated_at, updated.created_at)

    def test_admin_files_replace_previous_list(self) -> None:
        record = _record(status="processing", admin_files=["/uploads/old.pdf"])
        updated = apply_update(
            record, SubmissionUpdate(admin_files=["/uploads/new.pdf"]), T0
        )
        self.assertEqual(updated.admin_files, ["/uploads/new.pdf"])
        self.assertEqual(updated.status, "processing")

    def test_unset_fields_are_untouched(self) -> None:
        record = _record(admin_notes="Catatan lama")
        updated = apply_update(record, SubmissionUpdate(status="processing"), T0)
        self.assertEqual(updated.admin_notes, "Catatan lama")
        self.assertEqual(updated.documents, record.documents)
        self.assertEqual(updated.user_id, record.user_id)

    def test_illegal_transition_raises(self) -> None:
        with self.assertRaises(InvalidTransition):
            apply_update(_record(status="completed"), SubmissionUpdate(status="processing"), T0)

    def test_notes_on_terminal_submission_are_allowed(self) -> None:
        updated = apply_update(
            _record(status="completed"),
            SubmissionUpdate(admin_notes="Silakan ambil di kantor desa"),
            T0,
        )
        self.assertEqual(updated.status, "completed")
        self.assertEqual(updated.admin_notes, "Silakan ambil di kantor desa")

    def test_explicit_null_admin_files_clears_list(self) -> None:
        record = _record(admin_files=["/uploads/old.pdf"])
        updated = apply_update(record, SubmissionUpdate(admin_files=None), T0)
        self.assertEqual(updated.admin_files, [])


if __name__ == "__main__":
    unittest.main()
