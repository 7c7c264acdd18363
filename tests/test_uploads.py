"""Unit tests for app.services.uploads: batch validation, storage and safe lookup."""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from app.core.errors import NotFound, UploadRejected
from app.services.uploads import IncomingFile, resolve_upload, store_batch, validate_batch


def _settings(upload_dir: str) -> MagicMock:
    settings = MagicMock()
    settings.UPLOAD_DIR = upload_dir
    settings.UPLOAD_MAX_FILE_BYTES = 1024
    settings.UPLOAD_MAX_FILES = 2
    settings.UPLOAD_ALLOWED_EXTENSIONS = (".pdf", ".jpg", ".jpeg", ".png", ".doc", ".docx")
    return settings


def _pdf(name: str = "surat.pdf", size: int = 16) -> IncomingFile:
    return IncomingFile(filename=name, content=b"%" * size, content_type="application/pdf")


class _UploadTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.upload_dir = Path(self._tmp.name) / "uploads"
        self.settings = _settings(str(self.upload_dir))

    def stored_files(self) -> list[Path]:
        if not self.upload_dir.exists():
            return []
        return sorted(self.upload_dir.iterdir())


class TestValidateBatch(_UploadTestCase):
    def test_accepts_allowed_files(self) -> None:
        validate_batch(
            [
                _pdf(),
                IncomingFile(filename="KTP.JPG", content=b"x", content_type="image/jpeg"),
            ],
            self.settings,
        )

    def test_empty_batch(self) -> None:
        with self.assertRaises(UploadRejected) as ctx:
            validate_batch([], self.settings)
        self.assertEqual(ctx.exception.message, "Tidak ada file yang diunggah")

    def test_too_many_files(self) -> None:
        with self.assertRaises(UploadRejected) as ctx:
            validate_batch([_pdf("a.pdf"), _pdf("b.pdf"), _pdf("c.pdf")], self.settings)
        self.assertEqual(ctx.exception.message, "Maksimal 2 file diperbolehkan")

    def test_oversize_file(self) -> None:
        with self.assertRaises(UploadRejected) as ctx:
            validate_batch([_pdf(size=1025)], self.settings)
        self.assertIn("surat.pdf", ctx.exception.message)

    def test_file_at_limit_is_accepted(self) -> None:
        validate_batch([_pdf(size=1024)], self.settings)

    def test_disallowed_extension(self) -> None:
        with self.assertRaises(UploadRejected):
            validate_batch(
                [IncomingFile(filename="run.exe", content=b"MZ", content_type="application/pdf")],
                self.settings,
            )

    def test_disallowed_mime_type(self) -> None:
        with self.assertRaises(UploadRejected) as ctx:
            validate_batch(
                [IncomingFile(filename="page.pdf", content=b"<html>", content_type="text/html")],
                self.settings,
            )
        self.assertIn("text/html", ctx.exception.message)

    def test_generic_mime_type_falls_back_to_extension(self) -> None:
        validate_batch(
            [
                IncomingFile(
                    filename="scan.png", content=b"x", content_type="application/octet-stream"
                ),
                IncomingFile(filename="form.docx", content=b"x", content_type=None),
            ],
            self.settings,
        )


class TestStoreBatch(_UploadTestCase):
    def test_stores_files_under_generated_names(self) -> None:
        refs = store_batch(
            [
                _pdf("Surat Pengantar RT.pdf"),
                IncomingFile(filename="foto.PNG", content=b"png", content_type="image/png"),
            ],
            self.settings,
        )
        self.assertEqual(len(refs), 2)
        self.assertTrue(refs[0].startswith("/uploads/"))
        self.assertTrue(refs[0].endswith(".pdf"))
        self.assertTrue(refs[1].endswith(".png"))
        self.assertNotIn(" ", refs[0])
        self.assertEqual(len(self.stored_files()), 2)
        stored = self.upload_dir / refs[1].removeprefix("/uploads/")
        self.assertEqual(stored.read_bytes(), b"png")

    def test_rejected_batch_writes_nothing(self) -> None:
        with self.assertRaises(UploadRejected):
            store_batch(
                [_pdf(), IncomingFile(filename="virus.exe", content=b"MZ")],
                self.settings,
            )
        self.assertEqual(self.stored_files(), [])


class TestResolveUpload(_UploadTestCase):
    def test_resolves_stored_file(self) -> None:
        ref = store_batch([_pdf()], self.settings)[0]
        name = ref.removeprefix("/uploads/")
        path = resolve_upload(name, self.settings)
        self.assertEqual(path.name, name)
        self.assertTrue(path.is_file())

    def test_missing_file(self) -> None:
        with self.assertRaises(NotFound):
            resolve_upload("0123abcd.pdf", self.settings)

    def test_path_traversal_is_not_found(self) -> None:
        secret = Path(self._tmp.name) / "secret.txt"
        secret.write_text("rahasia")
        for name in ("../secret.txt", "..", ".hidden", "a\\..\\secret.txt", ""):
            with self.subTest(name=name):
                with self.assertRaises(NotFound):
                    resolve_upload(name, self.settings)


if __name__ == "__main__":
    unittest.main()
