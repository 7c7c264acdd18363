"""The Alembic history builds the same schema the ORM models declare."""

import tempfile
import unittest
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from app.models import Base

ROOT = Path(__file__).resolve().parent.parent


class TestMigrations(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.url = f"sqlite:///{Path(tmp.name) / 'portal.db'}"
        self.cfg = Config(str(ROOT / "alembic.ini"))
        self.cfg.set_main_option("script_location", str(ROOT / "alembic"))
        self.cfg.set_main_option("sqlalchemy.url", self.url)

    def _tables(self) -> set[str]:
        engine = create_engine(self.url)
        self.addCleanup(engine.dispose)
        return set(inspect(engine).get_table_names()) - {"alembic_version"}

    def test_upgrade_creates_every_model_table(self) -> None:
        command.upgrade(self.cfg, "head")
        self.assertEqual(self._tables(), set(Base.metadata.tables))

    def test_downgrade_drops_portal_tables(self) -> None:
        command.upgrade(self.cfg, "head")
        command.downgrade(self.cfg, "base")
        self.assertEqual(self._tables(), set())


if __name__ == "__main__":
    unittest.main()
