"""Tests for password hashing and credential verification."""

from __future__ import annotations

import sqlite3
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from landingbuilder.database import Database
from landingbuilder.errors import AuthenticationServiceError, BadCredentialsError
from landingbuilder.models import User
from landingbuilder.security import AuthenticationManager, PasswordHasher


class PasswordHasherTests(unittest.TestCase):
    def setUp(self) -> None:
        self.hasher = PasswordHasher(bcrypt_rounds=4)

    def test_hash_is_salted_and_verifies(self) -> None:
        first = self.hasher.hash("supersecurepassword")
        second = self.hasher.hash("supersecurepassword")

        self.assertNotEqual(first, "supersecurepassword")
        self.assertNotEqual(first, second)
        self.assertTrue(first.startswith("$2"))
        self.assertTrue(self.hasher.verify("supersecurepassword", first))
        self.assertFalse(self.hasher.verify("incorrect", first))

    def test_malformed_hash_does_not_verify(self) -> None:
        self.assertFalse(self.hasher.verify("anything", "not-a-hash"))
        self.assertFalse(self.hasher.verify("anything", ""))

    def test_empty_password_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.hasher.hash("")

    def test_password_at_byte_limit_is_accepted(self) -> None:
        ascii_password = "a" * 72
        multibyte_password = "é" * 36

        for password in (ascii_password, multibyte_password):
            self.assertEqual(len(password.encode("utf-8")), 72)
            hashed = self.hasher.hash(password)
            self.assertTrue(self.hasher.verify(password, hashed))

    def test_password_over_byte_limit_is_rejected(self) -> None:
        for password in ("a" * 73, "é" * 36 + "a", "a" * 71 + "é"):
            self.assertGreater(len(password.encode("utf-8")), 72)
            with self.assertRaises(ValueError):
                self.hasher.hash(password)

    def test_verify_does_not_truncate_long_passwords(self) -> None:
        hashed = self.hasher.hash("a" * 72)

        self.assertFalse(self.hasher.verify("a" * 72 + "WRONG", hashed))
        self.assertFalse(self.hasher.verify("a" * 71 + "é", hashed))


class AuthenticationManagerTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tempdir = tempfile.TemporaryDirectory()
        self.database = Database(Path(self._tempdir.name) / "landing.sqlite3")
        self.database.initialize()
        self.hasher = PasswordHasher(bcrypt_rounds=4)
        self.database.save(User(email="alice@example.com", password=self.hasher.hash("SuperSecret123!")))
        self.manager = AuthenticationManager(self.database, self.hasher)

    def tearDown(self) -> None:
        self._tempdir.cleanup()

    def test_valid_credentials_return_user(self) -> None:
        user = self.manager.authenticate("Alice@Example.com", "SuperSecret123!")
        self.assertEqual(user.email, "alice@example.com")
        self.assertEqual(user.roles, ("USER",))

    def test_wrong_password_and_unknown_email_raise_same_error(self) -> None:
        with self.assertRaises(BadCredentialsError) as wrong_password:
            self.manager.authenticate("alice@example.com", "wrong-password")
        with self.assertRaises(BadCredentialsError) as unknown_email:
            self.manager.authenticate("bob@example.com", "SuperSecret123!")

        self.assertEqual(str(wrong_password.exception), str(unknown_email.exception))

    def test_store_failure_is_reported_as_service_error(self) -> None:
        with mock.patch.object(
            self.database,
            "get_user_by_email",
            side_effect=sqlite3.OperationalError("database is locked"),
        ):
            with self.assertRaises(AuthenticationServiceError):
                self.manager.authenticate("alice@example.com", "SuperSecret123!")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
