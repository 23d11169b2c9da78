"""
Integration tests.

Tests:
- Interoperability with pyotp and cryptography's HOTP
- Audit trail of secret creation and verification
- Logging behaviour
- Concurrent use of one Authenticator
"""

import base64
import json
import logging
from concurrent.futures import ThreadPoolExecutor

import pyotp
import pytest
from cryptography.hazmat.primitives.hashes import SHA1
from cryptography.hazmat.primitives.twofactor.hotp import HOTP

from authenticator import setup_logging
from authenticator.auth.totp import Authenticator, create_secret, get_code
from authenticator.integration.event_logger import (
    EventLogger, EventType, SecurityEvent, get_user_hash,
)
from authenticator.logger import PACKAGE_LOGGER, debug_enabled


EXAMPLE_SECRET = "JBSWY3DPEHPK3PXP"


class TestInteroperability:
    """Codes must match independent TOTP implementations."""

    def test_pyotp_example_secret(self):
        """Time slice 1 equals pyotp at t=30."""
        assert get_code(EXAMPLE_SECRET, 1) == pyotp.TOTP(EXAMPLE_SECRET).at(30)

    def test_pyotp_many_slices(self):
        """Codes agree with pyotp across a range of time slices."""
        totp = pyotp.TOTP(EXAMPLE_SECRET)
        for time_slice in [0, 1, 2, 1000, 37037036, 66666666]:
            assert get_code(EXAMPLE_SECRET, time_slice) == totp.at(time_slice * 30)

    def test_pyotp_now(self):
        """pyotp's current code verifies."""
        auth = Authenticator()
        assert auth.check_code(EXAMPLE_SECRET, pyotp.TOTP(EXAMPLE_SECRET).now())

    def test_cryptography_hotp(self):
        """Codes agree with cryptography's HOTP primitive."""
        key = base64.b32decode(EXAMPLE_SECRET)
        hotp = HOTP(key, 6, SHA1(), enforce_key_length=False)
        for counter in [0, 1, 7, 123456]:
            assert get_code(EXAMPLE_SECRET, counter) == hotp.generate(counter).decode()

    def test_generated_secret_with_pyotp(self):
        """Generated secrets without '=' work in pyotp as well."""
        secret = create_secret(32)
        # '=' never appears since (byte & 31) < 32
        assert "=" not in secret
        assert get_code(secret, 5) == pyotp.TOTP(secret).at(150)


class TestAuditTrail:
    """Tests for the security event log."""

    def test_verification_events(self):
        """Successful and failed checks are recorded."""
        audit = EventLogger(clock=lambda: 1700000000)
        auth = Authenticator(audit=audit)
        code = auth.get_code(EXAMPLE_SECRET, 10)

        assert auth.check_code(EXAMPLE_SECRET, code, 1, 11, account="alice")
        assert not auth.check_code(EXAMPLE_SECRET, "12345", 1, 11, account="alice")

        verified = audit.get_events_by_type(EventType.TOTP_VERIFIED)
        failed = audit.get_events_by_type(EventType.TOTP_FAILED)
        assert len(verified) == 1 and len(failed) == 1
        assert verified[0].details == {"offset": -1}
        assert verified[0].timestamp == 1700000000
        assert len(audit.get_user_events("alice")) == 2

    def test_secret_creation_event(self):
        """Secret creation is logged without the secret."""
        audit = EventLogger()
        auth = Authenticator(audit=audit)
        secret = auth.create_secret(20, account="bob")

        events = audit.get_events_by_type(EventType.SECRET_CREATED)
        assert len(events) == 1
        assert events[0].details == {"length": 20}
        assert secret not in audit.export_log()

    def test_no_plaintext_account_or_code(self):
        """Exported log contains only hashes."""
        audit = EventLogger(clock=lambda: 0)
        auth = Authenticator(audit=audit)
        code = auth.get_code(EXAMPLE_SECRET, 3)
        auth.check_code(EXAMPLE_SECRET, code, 0, 3, account="carol@example.com")

        exported = audit.export_log()
        assert "carol@example.com" not in exported
        assert code not in exported
        assert get_user_hash("carol@example.com") in exported

    def test_anonymous_events(self):
        """Checks without an account are recorded as anonymous."""
        audit = EventLogger()
        Authenticator(audit=audit).check_code(EXAMPLE_SECRET, "000000", 0, 1)
        assert audit.get_all_events()[0].user_hash == get_user_hash("anonymous")

    def test_export_import(self):
        """Exported logs can be imported again."""
        audit = EventLogger()
        audit.log_totp("alice", success=True, offset=0)
        audit.log_totp("bob", success=False)

        imported = EventLogger.import_log(audit.export_log())
        assert len(imported) == 2
        assert [e.event_type for e in imported.get_all_events()] == [
            EventType.TOTP_VERIFIED, EventType.TOTP_FAILED,
        ]

    def test_import_invalid(self):
        """Malformed logs raise ValueError."""
        with pytest.raises(ValueError):
            EventLogger.import_log("not json")
        with pytest.raises(ValueError):
            EventLogger.import_log(json.dumps([{"type": "totp_verified"}]))

    def test_transaction_round_trip(self):
        """Events serialize to compact JSON and back."""
        event = SecurityEvent(EventType.TOTP_FAILED, get_user_hash("x"), 1, {})
        assert SecurityEvent.from_transaction(event.to_transaction()) == event
        assert "totp_failed" in str(event)

    def test_callbacks(self):
        """Callbacks see every event; failing callbacks are isolated."""
        audit = EventLogger()
        seen = []

        def broken(event):
            raise RuntimeError("sink down")

        audit.add_callback(broken)
        audit.add_callback(seen.append)
        auth = Authenticator(audit=audit)

        auth.check_code(EXAMPLE_SECRET, "000000", 0, 0)
        assert len(seen) == 1
        assert len(audit) == 1

        audit.remove_callback(seen.append)
        audit.log_totp("dave", success=False)
        assert len(seen) == 1

    def test_recent_and_clear(self):
        """Recent events are the newest ones; clear empties the log."""
        audit = EventLogger()
        for i in range(5):
            audit.log_totp(f"user{i}", success=True, offset=0)
        assert len(audit.get_recent_events(3)) == 3
        assert audit.get_recent_events(3)[-1].user_hash == get_user_hash("user4")
        assert audit.get_recent_events(0) == []
        assert audit.get_recent_events(-2) == []
        assert len(audit.get_recent_events(10)) == 5
        audit.clear()
        assert len(audit) == 0


class TestLogging:
    """Tests for logging behaviour."""

    @pytest.fixture
    def package_logger(self):
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        handlers = list(package_logger.handlers)
        level = package_logger.level
        yield package_logger
        package_logger.handlers = handlers
        package_logger.setLevel(level)

    def test_setup_logging_single_handler(self, package_logger):
        """Repeated setup does not stack console handlers."""
        setup_logging(logging.INFO)
        setup_logging(logging.DEBUG)
        stream_handlers = [h for h in package_logger.handlers
                           if type(h) is logging.StreamHandler]
        assert len(stream_handlers) == 1
        assert package_logger.level == logging.DEBUG

    def test_setup_logging_env(self, package_logger):
        """AUTHENTICATOR_DEBUG selects DEBUG, otherwise WARNING."""
        assert setup_logging(environ={"AUTHENTICATOR_DEBUG": "1"}).level == logging.DEBUG
        assert setup_logging(environ={}).level == logging.WARNING

    def test_debug_enabled(self):
        """Truthy values enable debug output."""
        assert debug_enabled({"AUTHENTICATOR_DEBUG": "yes"})
        assert debug_enabled({"AUTHENTICATOR_DEBUG": "TRUE"})
        assert not debug_enabled({"AUTHENTICATOR_DEBUG": "0"})
        assert not debug_enabled({})

    def test_setup_logging_keeps_application_handlers(self, package_logger, tmp_path):
        """Only the console handler installed by setup_logging is replaced."""
        file_handler = logging.FileHandler(tmp_path / "auth.log")
        user_stream = logging.StreamHandler()
        package_logger.addHandler(file_handler)
        package_logger.addHandler(user_stream)
        try:
            setup_logging(logging.INFO)
            setup_logging(logging.DEBUG)
            assert file_handler in package_logger.handlers
            assert user_stream in package_logger.handlers
            stream_handlers = [h for h in package_logger.handlers
                               if type(h) is logging.StreamHandler]
            assert len(stream_handlers) == 2
        finally:
            file_handler.close()

    def test_outcome_logged_without_secret(self, caplog):
        """Verification outcome is logged, secrets and codes are not."""
        caplog.set_level(logging.DEBUG, logger=PACKAGE_LOGGER)
        auth = Authenticator()
        code = auth.get_code(EXAMPLE_SECRET, 7)
        auth.check_code(EXAMPLE_SECRET, code, 1, 7)
        auth.check_code(EXAMPLE_SECRET, "12345", 1, 7)

        assert "Code accepted at drift offset 0" in caplog.text
        assert "Code rejected" in caplog.text
        assert EXAMPLE_SECRET not in caplog.text
        assert code not in caplog.text


class TestConcurrency:
    """One Authenticator shared between threads."""

    def test_parallel_checks(self):
        """Concurrent verification gives consistent results."""
        audit = EventLogger()
        auth = Authenticator(audit=audit)
        secrets_ = [create_secret() for _ in range(8)]

        def check(index):
            secret = secrets_[index % len(secrets_)]
            return auth.check_code(secret, auth.get_code(secret, index), 1, index)

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(check, range(200)))

        assert all(results)
        assert len(audit) == 200
