"""
Tests for the monitoring run executor.

Drives full runs with in-memory sources, recording notifiers and stubbed
probes.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from domain_expiry.checkers.base_checker import ProbeError
from domain_expiry.executor import DomainCheckerExecutor
from domain_expiry.models import CertificateInfo
from domain_expiry.notifiers.base import BaseNotifier, NotifierError
from domain_expiry.sources.base import BaseSource, SourceError, StaticSource

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


class WorkerCrash(BaseException):
    """Escapes the per-check error handling."""


class RecordingNotifier(BaseNotifier):
    """Notifier that keeps everything it was given."""

    def __init__(self, fail=False):
        super().__init__()
        self.commits = 0
        self.fail = fail

    async def commit(self):
        self.commits += 1
        if self.fail:
            raise NotifierError("delivery failed")


class FailingSource(BaseSource):
    source_name = "FailingSource"

    async def get_domains(self):
        raise SourceError("backend unavailable")


def make_whois(expiry_by_root):
    """Stub WHOIS probe returning an expiry per root or raising the mapped exception."""
    async def check(root):
        value = expiry_by_root[root]
        if isinstance(value, BaseException):
            raise value
        return value

    checker = AsyncMock()
    checker.check.side_effect = check
    return checker


def make_ssl(cert_by_host):
    async def check(hostname):
        value = cert_by_host[hostname]
        if isinstance(value, BaseException):
            raise value
        return value

    checker = AsyncMock()
    checker.check.side_effect = check
    return checker


def cert(days, serial="ABC"):
    return CertificateInfo(expiration_date=NOW + timedelta(days=days), serial=serial, issuer="Test CA")


def make_executor(sources, notifiers, whois_checker=None, ssl_checker=None, alarm_days=30, ssl_alarm_days=14):
    return DomainCheckerExecutor(
        sources=sources,
        notifiers=notifiers,
        whois_checker=whois_checker or make_whois({}),
        ssl_checker=ssl_checker or make_ssl({}),
        alarm_days=alarm_days,
        ssl_alarm_days=ssl_alarm_days,
    )


class TestExecutorRun:
    """Tests for DomainCheckerExecutor.run."""

    @pytest.mark.asyncio
    async def test_no_hostnames_no_notifier_calls(self):
        notifier = RecordingNotifier()
        whois_checker = make_whois({})
        executor = make_executor([StaticSource([])], [notifier], whois_checker=whois_checker)

        await executor.run(now=NOW)

        assert notifier.commits == 0
        assert notifier.errors == []
        whois_checker.check.assert_not_called()

    @pytest.mark.asyncio
    async def test_source_error_routed_and_committed(self):
        notifier = RecordingNotifier()
        executor = make_executor([FailingSource()], [notifier])

        await executor.run(now=NOW)

        assert notifier.errors == ["Failed to load domains from source: FailingSource.\nbackend unavailable"]
        assert notifier.commits == 1

    @pytest.mark.asyncio
    async def test_failing_source_does_not_block_others(self):
        notifier = RecordingNotifier()
        executor = make_executor(
            [FailingSource(), StaticSource(["example.com"])],
            [notifier],
            whois_checker=make_whois({"example.com": NOW + timedelta(days=5)}),
            ssl_checker=make_ssl({"example.com": cert(100)}),
        )

        await executor.run(now=NOW)

        assert len(notifier.errors) == 1
        assert [e.hostname for e in notifier.domain_entries] == ["example.com"]

    @pytest.mark.asyncio
    async def test_acme_challenge_scenario(self):
        """Test that TXT-record hosts reach the WHOIS probe via their root only."""
        notifier = RecordingNotifier()
        whois_checker = make_whois({"example.com": NOW + timedelta(days=10)})
        ssl_checker = make_ssl({"a.example.com": cert(5)})
        executor = make_executor(
            [StaticSource(["a.example.com", "_acme-challenge.a.example.com"])],
            [notifier],
            whois_checker=whois_checker,
            ssl_checker=ssl_checker,
        )

        await executor.run(now=NOW)

        whois_checker.check.assert_awaited_once_with("example.com")
        ssl_checker.check.assert_awaited_once_with("a.example.com")
        assert [e.hostname for e in notifier.domain_entries] == ["example.com"]
        assert [e.hostname for e in notifier.ssl_entries] == ["a.example.com"]
        assert notifier.errors == []
        assert notifier.commits == 1

    @pytest.mark.asyncio
    async def test_hostnames_merged_case_insensitively(self):
        whois_checker = make_whois({"example.com": NOW + timedelta(days=100)})
        ssl_checker = make_ssl({"www.example.com": cert(100)})
        executor = make_executor(
            [StaticSource(["WWW.Example.com"]), StaticSource(["www.example.com"])],
            [RecordingNotifier()],
            whois_checker=whois_checker,
            ssl_checker=ssl_checker,
        )

        await executor.run(now=NOW)

        assert ssl_checker.check.await_count == 1

    @pytest.mark.asyncio
    async def test_expected_error_not_reported(self):
        notifier = RecordingNotifier()
        executor = make_executor(
            [StaticSource(["www.example.com"])],
            [notifier],
            whois_checker=make_whois({"example.com": NOW + timedelta(days=100)}),
            ssl_checker=make_ssl({"www.example.com": OSError("timed out")}),
        )

        await executor.run(now=NOW)

        assert notifier.errors == []
        assert notifier.ssl_entries == []
        assert notifier.commits == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_reported(self):
        notifier = RecordingNotifier()
        executor = make_executor(
            [StaticSource(["www.example.com"])],
            [notifier],
            whois_checker=make_whois({"example.com": ProbeError("Could not parse expiry date from WHOIS")}),
            ssl_checker=make_ssl({"www.example.com": cert(100)}),
        )

        await executor.run(now=NOW)

        assert notifier.errors == ["Domain check failed: example.com"]

    @pytest.mark.asyncio
    async def test_probe_failure_isolated(self):
        """Test that one failing host does not affect the others."""
        notifier = RecordingNotifier()
        executor = make_executor(
            [StaticSource(["a.example.com", "b.example.com"])],
            [notifier],
            whois_checker=make_whois({"example.com": NOW + timedelta(days=100)}),
            ssl_checker=make_ssl({
                "a.example.com": RuntimeError("handshake exploded"),
                "b.example.com": cert(3),
            }),
        )

        await executor.run(now=NOW)

        assert [e.hostname for e in notifier.ssl_entries] == ["b.example.com"]
        assert notifier.errors == ["Certificate check failed: a.example.com"]

    @pytest.mark.asyncio
    async def test_crashed_task_loses_only_its_host(self, caplog):
        notifier = RecordingNotifier()
        executor = make_executor(
            [StaticSource(["a.example.com", "b.example.com"])],
            [notifier],
            whois_checker=make_whois({"example.com": NOW + timedelta(days=1)}),
            ssl_checker=make_ssl({
                "a.example.com": WorkerCrash("worker died"),
                "b.example.com": cert(3),
            }),
        )

        await executor.run(now=NOW)

        assert [e.hostname for e in notifier.ssl_entries] == ["b.example.com"]
        assert [e.hostname for e in notifier.domain_entries] == ["example.com"]
        assert notifier.errors == []
        assert notifier.commits == 1
        assert "a.example.com crashed" in caplog.text

    @pytest.mark.asyncio
    async def test_shared_certificate_deduplicated(self):
        notifier = RecordingNotifier()
        executor = make_executor(
            [StaticSource(["a.example.com", "b.example.com"])],
            [notifier],
            whois_checker=make_whois({"example.com": NOW + timedelta(days=100)}),
            ssl_checker=make_ssl({"a.example.com": cert(3), "b.example.com": cert(3)}),
        )

        await executor.run(now=NOW)

        assert len(notifier.ssl_entries) == 1
        assert notifier.ssl_entries[0].duplicate_count == 2

    @pytest.mark.asyncio
    async def test_commit_failure_does_not_stop_others(self):
        failing = RecordingNotifier(fail=True)
        healthy = RecordingNotifier()
        executor = make_executor(
            [StaticSource(["example.com"])],
            [failing, healthy],
            whois_checker=make_whois({"example.com": NOW + timedelta(days=1)}),
            ssl_checker=make_ssl({"example.com": cert(100)}),
        )

        await executor.run(now=NOW)

        assert failing.commits == 1
        assert healthy.commits == 1
        assert [e.days for e in healthy.domain_entries] == [1]

    @pytest.mark.asyncio
    async def test_every_notifier_gets_same_entries(self):
        first, second = RecordingNotifier(), RecordingNotifier()
        executor = make_executor(
            [StaticSource(["example.com"])],
            [first, second],
            whois_checker=make_whois({"example.com": NOW + timedelta(days=1)}),
            ssl_checker=make_ssl({"example.com": cert(1)}),
        )

        await executor.run(now=NOW)

        assert first.domain_entries == second.domain_entries
        assert first.ssl_entries == second.ssl_entries
