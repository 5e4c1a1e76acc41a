"""Regression tests for remote file polling."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from x12_exchange.domain import FtpPollerConfig, RemoteEntry, RemoteEntryKind
from x12_exchange.domain.errors import RemoteConnectionError, RemoteFileError
from x12_exchange.jobs import FtpPoller, job_remote_join

_POLL_STARTED_AT = datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)
_LAST_POLL_TIME = datetime(2026, 10, 16, 12, 0, 0, tzinfo=timezone.utc)
_NEWER = datetime(2026, 10, 17, 8, 0, 0, tzinfo=timezone.utc)
_OLDER = datetime(2026, 10, 15, 8, 0, 0, tzinfo=timezone.utc)


class _RemoteClientStub:
    """Remote client stub backed by in-memory listings and file contents."""

    def __init__(
        self,
        listings: dict[str, list[RemoteEntry]] | None = None,
        contents: dict[str, bytes] | None = None,
        failing_gets: set[str] | None = None,
        failing_lists: set[str] | None = None,
        fail_connect: bool = False,
    ):
        self.listings = listings or {}
        self.contents = contents or {}
        self.failing_gets = failing_gets or set()
        self.failing_lists = failing_lists or set()
        self.fail_connect = fail_connect
        self.list_calls: list[str] = []
        self.get_calls: list[str] = []
        self.delete_calls: list[str] = []
        self.connected = False
        self.disconnect_count = 0

    def __enter__(self) -> "_RemoteClientStub":
        """Connect stub.

        Raises:
            RemoteConnectionError: Raised when configured to fail connecting.
        """

        if self.fail_connect:
            raise RemoteConnectionError("connection refused")
        self.connected = True
        return self

    def __exit__(self, exc_type, exc, traceback) -> bool:
        self.connected = False
        self.disconnect_count += 1
        return False

    def remote_list_directory(self, path: str) -> list[RemoteEntry]:
        """List a directory stub.

        Raises:
            RemoteFileError: Raised when the path is configured to fail or is not listed.
        """

        self.list_calls.append(path)
        if path in self.failing_lists or path not in self.listings:
            raise RemoteFileError(f"directory {path} cannot be listed")
        return list(self.listings[path])

    def remote_list_entries(self, path: str) -> list[RemoteEntry]:
        self.list_calls.append(path)
        if path in self.failing_lists:
            raise RemoteFileError(f"listing {path} failed")
        return list(self.listings.get(path, []))

    def remote_get_file(self, path: str) -> bytes:
        self.get_calls.append(path)
        if path in self.failing_gets:
            raise RemoteFileError(f"download {path} failed")
        return self.contents.get(path, b"ISA*...~")

    def remote_delete_file(self, path: str) -> None:
        self.delete_calls.append(path)


class _ObjectStorageStub:
    """Object storage stub capturing writes."""

    def __init__(self, failing_keys: set[str] | None = None):
        self.failing_keys = failing_keys or set()
        self.objects: dict[tuple[str, str], bytes] = {}
        self.put_order: list[str] = []

    def storage_put_object(self, bucket_name: str, key: str, body: bytes) -> None:
        if key in self.failing_keys:
            raise RuntimeError(f"write {key} failed")
        self.objects[(bucket_name, key)] = body
        self.put_order.append(key)


def _config(**overrides) -> FtpPollerConfig:
    payload = {
        "connectionDetails": {"protocol": "sftp", "config": {"host": "sftp.partner.test", "username": "edi"}},
        "remotePath": "/outbound",
        "destinationPath": "trading_partners/ANOTHERMERCH/inbound",
    }
    payload.update(overrides)
    return FtpPollerConfig.model_validate(payload)


def _file(name: str, modify_time: datetime | None = _NEWER) -> RemoteEntry:
    return RemoteEntry(name=name, kind=RemoteEntryKind.FILE, modify_time=modify_time)


def _build_poller(client: _RemoteClientStub, storage: _ObjectStorageStub | None = None):
    factory_calls: list[tuple[object, float]] = []

    def _factory(connection_details, timeout_seconds: float) -> _RemoteClientStub:
        factory_calls.append((connection_details, timeout_seconds))
        return client

    poller = FtpPoller(
        object_storage=storage or _ObjectStorageStub(),
        destination_bucket_name="poller-bucket",
        connect_timeout_seconds=12.5,
        client_factory=_factory,
        clock=lambda: _POLL_STARTED_AT,
    )
    return poller, factory_calls


def test_jobs_poll_unset_watermark_transfers_every_file() -> None:
    """Copy every listed file into the bucket when no watermark exists.

    Returns:
        None: Assertions validate transfers and the recommended watermark.

    Raises:
        AssertionError: Raised when polling behavior regresses.
    """

    client = _RemoteClientStub(
        listings={"/outbound": [_file("a.edi", _OLDER), _file("b.edi")]},
        contents={"/outbound/a.edi": b"AAA", "/outbound/b.edi": b"BBB"},
    )
    storage = _ObjectStorageStub()
    poller, factory_calls = _build_poller(client, storage)

    outcome = poller.job_poll(_config())

    assert outcome.results.processed_files == ["/outbound/a.edi", "/outbound/b.edi"]
    assert outcome.results.skipped_items == []
    assert storage.objects == {
        ("poller-bucket", "trading_partners/ANOTHERMERCH/inbound/a.edi"): b"AAA",
        ("poller-bucket", "trading_partners/ANOTHERMERCH/inbound/b.edi"): b"BBB",
    }
    assert outcome.recommended_last_poll_time == _POLL_STARTED_AT
    assert factory_calls[0][1] == 12.5
    assert client.delete_calls == []
    assert client.disconnect_count == 1


def test_jobs_poll_watermark_stops_at_first_stale_file() -> None:
    """Skip the first file older than the watermark and ignore the rest."""

    client = _RemoteClientStub(
        listings={"/outbound": [_file("new.edi"), _file("old.edi", _OLDER), _file("newer.edi")]},
    )
    poller, _ = _build_poller(client)

    outcome = poller.job_poll(_config(lastPollTime=_LAST_POLL_TIME.isoformat()))

    assert outcome.results.processed_files == ["/outbound/new.edi"]
    assert len(outcome.results.skipped_items) == 1
    skipped_item = outcome.results.skipped_items[0]
    assert skipped_item.path == "/outbound/old.edi"
    old_ms = int(_OLDER.timestamp() * 1000)
    last_ms = int(_LAST_POLL_TIME.timestamp() * 1000)
    assert skipped_item.reason == (
        f"remote timestamp ({old_ms}) is not newer than last poll timestamp ({last_ms})"
    )
    assert client.get_calls == ["/outbound/new.edi"]


def test_jobs_poll_file_without_timestamp_counts_as_new() -> None:
    client = _RemoteClientStub(listings={"/outbound": [_file("undated.edi", None)]})
    poller, _ = _build_poller(client)

    outcome = poller.job_poll(_config(lastPollTime=_LAST_POLL_TIME.isoformat()))

    assert outcome.results.processed_files == ["/outbound/undated.edi"]


def test_jobs_poll_skips_non_file_entries() -> None:
    client = _RemoteClientStub(
        listings={
            "/outbound": [
                RemoteEntry(name="archive", kind=RemoteEntryKind.DIRECTORY),
                RemoteEntry(name="link", kind=RemoteEntryKind.SYMLINK),
                _file("a.edi"),
            ]
        }
    )
    poller, _ = _build_poller(client)

    outcome = poller.job_poll(_config())

    assert outcome.results.processed_files == ["/outbound/a.edi"]
    assert [(item.path, item.reason) for item in outcome.results.skipped_items] == [
        ("/outbound/archive", "not a file"),
        ("/outbound/link", "not a file"),
    ]


def test_jobs_poll_deletes_remote_file_after_storage_write() -> None:
    client = _RemoteClientStub(listings={"/outbound": [_file("a.edi")]})
    storage = _ObjectStorageStub()
    poller, _ = _build_poller(client, storage)

    outcome = poller.job_poll(_config(deleteAfterProcessing=True))

    assert outcome.results.processed_files == ["/outbound/a.edi"]
    assert storage.put_order == ["trading_partners/ANOTHERMERCH/inbound/a.edi"]
    assert client.delete_calls == ["/outbound/a.edi"]


def test_jobs_poll_storage_failure_keeps_remote_file_and_continues() -> None:
    """Record a per-file error, keep the remote file and continue with the next one.

    Returns:
        None: Assertions validate error isolation.

    Raises:
        AssertionError: Raised when one failed file aborts the poll.
    """

    client = _RemoteClientStub(
        listings={"/outbound": [_file("a.edi"), _file("b.edi"), _file("c.edi")]},
        failing_gets={"/outbound/c.edi"},
    )
    storage = _ObjectStorageStub(failing_keys={"trading_partners/ANOTHERMERCH/inbound/a.edi"})
    poller, _ = _build_poller(client, storage)

    outcome = poller.job_poll(_config(deleteAfterProcessing=True))

    assert outcome.results.processed_files == ["/outbound/b.edi"]
    assert [(error.path, error.error_message) for error in outcome.results.processing_errors] == [
        ("/outbound/a.edi", "write trading_partners/ANOTHERMERCH/inbound/a.edi failed"),
        ("/outbound/c.edi", "download /outbound/c.edi failed"),
    ]
    assert client.delete_calls == ["/outbound/b.edi"]


def test_jobs_poll_explicit_list_halts_at_first_failure() -> None:
    """Stop resolving named files at the first missing one."""

    client = _RemoteClientStub(listings={"/outbound/b.edi": [_file("b.edi")]})
    poller, _ = _build_poller(client)

    outcome = poller.job_poll(_config(remoteFiles=["a.edi", "b.edi"]))

    assert client.list_calls == ["/outbound/a.edi"]
    assert outcome.results.processed_files == []
    assert [(error.path, error.error_message) for error in outcome.results.processing_errors] == [
        ("/outbound/a.edi", "expected exactly one match for list of single file /outbound/a.edi"),
    ]


def test_jobs_poll_explicit_list_halts_on_ambiguous_match() -> None:
    client = _RemoteClientStub(
        listings={
            "/outbound/a.edi": [_file("a.edi"), _file("a.edi.bak")],
            "/outbound/b.edi": [_file("b.edi")],
        }
    )
    poller, _ = _build_poller(client)

    outcome = poller.job_poll(_config(remoteFiles=["a.edi", "b.edi"]))

    assert client.list_calls == ["/outbound/a.edi"]
    assert outcome.results.processed_files == []
    assert [(error.path, error.error_message) for error in outcome.results.processing_errors] == [
        ("/outbound/a.edi", "expected exactly one match for list of single file /outbound/a.edi"),
    ]


def test_jobs_poll_explicit_list_rejects_parent_segments() -> None:
    """Refuse named files that climb out of the remote path and stop resolving."""

    client = _RemoteClientStub(
        listings={"/outbound/a.edi": [_file("a.edi")], "/b.edi": [_file("b.edi")], "/outbound/c.edi": [_file("c.edi")]},
    )
    poller, _ = _build_poller(client)

    outcome = poller.job_poll(_config(remoteFiles=["a.edi", "../b.edi", "c.edi"]))

    assert client.list_calls == ["/outbound/a.edi"]
    assert client.get_calls == ["/outbound/a.edi"]
    assert outcome.results.processed_files == ["/outbound/a.edi"]
    assert [(error.path, error.error_message) for error in outcome.results.processing_errors] == [
        ("/b.edi", "requested remote file ../b.edi is outside /outbound"),
    ]


def test_jobs_poll_explicit_list_rejects_directory_match() -> None:
    client = _RemoteClientStub(
        listings={
            "/outbound/a.edi": [RemoteEntry(name="a.edi", kind=RemoteEntryKind.DIRECTORY)],
            "/outbound/b.edi": [_file("b.edi")],
        }
    )
    poller, _ = _build_poller(client)

    outcome = poller.job_poll(_config(remoteFiles=["a.edi", "b.edi"]))

    assert outcome.results.processing_errors[0].error_message == "requested remote file a.edi, but it is not a file"
    assert client.list_calls == ["/outbound/a.edi"]
    assert client.get_calls == []


def test_jobs_poll_explicit_list_listing_error_is_recorded() -> None:
    client = _RemoteClientStub(failing_lists={"/outbound/a.edi"})
    poller, _ = _build_poller(client)

    outcome = poller.job_poll(_config(remoteFiles=["a.edi"]))

    assert outcome.results.processing_errors[0].error_message == "listing /outbound/a.edi failed"


def test_jobs_poll_explicit_list_transfers_named_files() -> None:
    client = _RemoteClientStub(
        listings={"/outbound/a.edi": [_file("a.edi")], "/outbound/sub/b.edi": [_file("b.edi")]},
    )
    storage = _ObjectStorageStub()
    poller, _ = _build_poller(client, storage)

    outcome = poller.job_poll(_config(remoteFiles=["a.edi", "sub/b.edi"]))

    assert outcome.results.processed_files == ["/outbound/a.edi", "/outbound/sub/b.edi"]
    assert storage.put_order == [
        "trading_partners/ANOTHERMERCH/inbound/a.edi",
        "trading_partners/ANOTHERMERCH/inbound/b.edi",
    ]


def test_jobs_poll_listing_failure_releases_connection() -> None:
    client = _RemoteClientStub(failing_lists={"/outbound"})
    poller, _ = _build_poller(client)

    with pytest.raises(RemoteFileError):
        poller.job_poll(_config())

    assert client.disconnect_count == 1
    assert client.connected is False


def test_jobs_poll_missing_remote_directory_fails() -> None:
    client = _RemoteClientStub(listings={"/elsewhere": [_file("a.edi")]})
    poller, _ = _build_poller(client)

    with pytest.raises(RemoteFileError, match="directory /outbound cannot be listed"):
        poller.job_poll(_config())

    assert client.list_calls == ["/outbound"]
    assert client.get_calls == []
    assert client.disconnect_count == 1


def test_jobs_poll_connection_failure_propagates() -> None:
    client = _RemoteClientStub(fail_connect=True)
    poller, _ = _build_poller(client)

    with pytest.raises(RemoteConnectionError):
        poller.job_poll(_config())

    assert client.list_calls == []


@pytest.mark.parametrize(
    ("remote_path", "name", "expected"),
    [("/", "a.edi", "/a.edi"), ("/outbound/", "a.edi", "/outbound/a.edi"), ("in", "sub/./b.edi", "in/sub/b.edi")],
)
def test_jobs_remote_join_normalizes(remote_path: str, name: str, expected: str) -> None:
    assert job_remote_join(remote_path, name) == expected
