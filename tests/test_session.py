"""
Unit tests for the session file.

Storage contract:
- Missing/invalid file -> no session
- JSON schema: {"authToken": "...", "user": {"nome": "..."}}
- clear removes the file and is safe to repeat
"""

import json
import tempfile
import unittest
from pathlib import Path

from estagios.session import SessionStore, clear_session, load_session, save_session


class TestSession(unittest.TestCase):
    def test_load_missing_file_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            self.assertIsNone(load_session(Path(d) / "missing.json"))

    def test_save_and_load_roundtrip(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "nested" / "session.json"
            save_session(" abc123 ", {"nome": "Maria Souza", "email": "m@x"}, p)

            session = load_session(p)
            self.assertIsNotNone(session)
            self.assertEqual(session.token, "abc123")
            self.assertEqual(session.user.name, "Maria Souza")
            self.assertEqual(session.user.raw["email"], "m@x")

            data = json.loads(p.read_text(encoding="utf-8"))
            self.assertEqual(data["authToken"], "abc123")

    def test_corrupt_or_incomplete_file(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "session.json"
            p.write_text("{not json", encoding="utf-8")
            self.assertIsNone(load_session(p))

            p.write_text(json.dumps({"authToken": "t", "user": {}}), encoding="utf-8")
            self.assertIsNone(load_session(p))

            p.write_text(json.dumps({"user": {"nome": "Maria"}}), encoding="utf-8")
            self.assertIsNone(load_session(p))

    def test_clear(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "session.json"
            save_session("t", {"nome": "Maria"}, p)
            clear_session(p)
            self.assertFalse(p.exists())
            clear_session(p)

    def test_store(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            store = SessionStore(Path(d) / "session.json")
            self.assertIsNone(store.token())
            store.save("tok", {"nome": "Maria"})
            self.assertEqual(store.token(), "tok")
            self.assertEqual(store.current_user().name, "Maria")
            store.clear()
            self.assertIsNone(store.current_user())


if __name__ == "__main__":
    unittest.main()
