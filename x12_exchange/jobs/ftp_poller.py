"""FTP/SFTP poller: select new remote files and copy them into object storage.

One poll owns one remote connection and works serially: select candidates,
apply the watermark, then download, store and optionally delete each
candidate. Per-file failures are collected; only connection setup and
listing failures abort the poll.
"""

from __future__ import annotations

import logging
import posixpath
from datetime import datetime, timezone
from typing import Callable

from x12_exchange.adapters import ObjectStoragePort, RemoteFileClientPort, adapter_build_remote_file_client
from x12_exchange.domain import (
    EPOCH_UTC,
    ConnectionDetails,
    FtpPollerConfig,
    FtpPollingResults,
    FtpPollOutcome,
    ProcessingError,
    RemoteEntry,
    RemoteEntryKind,
    SkippedItem,
    domain_as_utc,
    domain_epoch_milliseconds,
)
from x12_exchange.domain.errors import RemoteFileError

logger = logging.getLogger(__name__)

RemoteClientFactory = Callable[[ConnectionDetails, float], RemoteFileClientPort]


def job_remote_join(remote_path: str, name: str) -> str:
    """Join and normalize a remote directory and entry name."""

    # normpath keeps a leading `//`, so the root path is stripped first.
    return posixpath.normpath(f"{remote_path.rstrip('/')}/{name}")


class FtpPoller:
    """Polls one configured remote target per call."""

    def __init__(
        self,
        object_storage: ObjectStoragePort,
        destination_bucket_name: str,
        connect_timeout_seconds: float = 30.0,
        client_factory: RemoteClientFactory | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize poller.

        Args:
            object_storage: Storage receiving downloaded files.
            destination_bucket_name: Bucket receiving downloaded files.
            connect_timeout_seconds: Remote socket timeout.
            client_factory: Optional protocol dispatch override.
            clock: Optional UTC clock.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if object_storage is None:
            raise ValueError("object_storage must not be None")
        if not destination_bucket_name.strip():
            raise ValueError("destination_bucket_name must not be blank")

        self._object_storage = object_storage
        self._destination_bucket_name = destination_bucket_name.strip()
        self._connect_timeout_seconds = connect_timeout_seconds
        self._client_factory = client_factory or adapter_build_remote_file_client
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def job_poll(self, config: FtpPollerConfig) -> FtpPollOutcome:
        """Run one poll.

        Args:
            config: Poll target configuration with its current watermark.

        Returns:
            FtpPollOutcome: Classified results and the watermark to persist on success.

        Raises:
            UnsupportedProtocolError: Raised before connecting for unknown protocols.
            RemoteConnectionError: Raised when the connection cannot be established.
            RemoteFileError: Raised when a directory listing fails.
        """

        poll_started_at = self._clock()
        client = self._client_factory(config.connection_details, self._connect_timeout_seconds)
        results = FtpPollingResults()

        with client:
            candidates = self._job_select_candidates(client=client, config=config, results=results)
            for remote_file_path, entry in self._job_apply_watermark(
                candidates=candidates,
                last_poll_time=config.last_poll_time,
                results=results,
            ):
                self._job_transfer_file(
                    client=client,
                    config=config,
                    remote_file_path=remote_file_path,
                    entry=entry,
                    results=results,
                )

        logger.info(
            "poll finished: %d processed, %d skipped, %d errors",
            len(results.processed_files),
            len(results.skipped_items),
            len(results.processing_errors),
        )
        return FtpPollOutcome(results=results, recommended_last_poll_time=poll_started_at)

    def _job_select_candidates(
        self,
        client: RemoteFileClientPort,
        config: FtpPollerConfig,
        results: FtpPollingResults,
    ) -> list[tuple[str, RemoteEntry]]:
        if config.remote_files:
            return self._job_select_explicit_files(client=client, config=config, results=results)

        candidates: list[tuple[str, RemoteEntry]] = []
        for entry in client.remote_list_directory(config.remote_path):
            entry_path = job_remote_join(config.remote_path, entry.name)
            if entry.kind is not RemoteEntryKind.FILE:
                results.skipped_items.append(SkippedItem(path=entry_path, reason="not a file"))
                continue
            candidates.append((entry_path, entry))
        return candidates

    def _job_select_explicit_files(
        self,
        client: RemoteFileClientPort,
        config: FtpPollerConfig,
        results: FtpPollingResults,
    ) -> list[tuple[str, RemoteEntry]]:
        """Resolve explicitly named files; the first failure ends resolution of the whole list."""

        candidates: list[tuple[str, RemoteEntry]] = []
        for remote_file in config.remote_files or []:
            remote_file_path = job_remote_join(config.remote_path, remote_file)
            if ".." in remote_file.split("/"):
                results.processing_errors.append(
                    ProcessingError(
                        path=remote_file_path,
                        error_message=f"requested remote file {remote_file} is outside {config.remote_path}",
                    )
                )
                break
            try:
                matches = client.remote_list_entries(remote_file_path)
            except RemoteFileError as error:
                results.processing_errors.append(ProcessingError(path=remote_file_path, error_message=str(error)))
                break

            if len(matches) != 1:
                results.processing_errors.append(
                    ProcessingError(
                        path=remote_file_path,
                        error_message=f"expected exactly one match for list of single file {remote_file_path}",
                    )
                )
                break

            match = matches[0]
            if match.kind is not RemoteEntryKind.FILE or match.name != posixpath.basename(remote_file_path):
                results.processing_errors.append(
                    ProcessingError(
                        path=remote_file_path,
                        error_message=f"requested remote file {remote_file}, but it is not a file",
                    )
                )
                break
            candidates.append((remote_file_path, match))
        return candidates

    def _job_apply_watermark(
        self,
        candidates: list[tuple[str, RemoteEntry]],
        last_poll_time: datetime | None,
        results: FtpPollingResults,
    ) -> list[tuple[str, RemoteEntry]]:
        """Keep candidates up to the first one older than the watermark.

        Listing order is meaningful: the first stale candidate is recorded as
        skipped and nothing after it is evaluated in this poll.
        """

        last_poll_timestamp = domain_as_utc(last_poll_time) if last_poll_time is not None else EPOCH_UTC
        accepted: list[tuple[str, RemoteEntry]] = []
        for remote_file_path, entry in candidates:
            remote_file_timestamp = domain_as_utc(entry.modify_time) if entry.modify_time is not None else self._clock()
            if remote_file_timestamp < last_poll_timestamp:
                results.skipped_items.append(
                    SkippedItem(
                        path=remote_file_path,
                        reason=(
                            f"remote timestamp ({domain_epoch_milliseconds(remote_file_timestamp)}) is not newer "
                            f"than last poll timestamp ({domain_epoch_milliseconds(last_poll_timestamp)})"
                        ),
                    )
                )
                break
            accepted.append((remote_file_path, entry))
        return accepted

    def _job_transfer_file(
        self,
        client: RemoteFileClientPort,
        config: FtpPollerConfig,
        remote_file_path: str,
        entry: RemoteEntry,
        results: FtpPollingResults,
    ) -> None:
        """Download, store and optionally delete one file; failures stay with this file."""

        destination_key = f"{config.destination_path}/{entry.name}"
        try:
            file_contents = client.remote_get_file(remote_file_path)
            self._object_storage.storage_put_object(
                bucket_name=self._destination_bucket_name,
                key=destination_key,
                body=file_contents,
            )
            if config.delete_after_processing:
                client.remote_delete_file(remote_file_path)
        except Exception as error:  # pylint: disable=broad-exception-caught
            logger.warning("processing %s failed: %s", remote_file_path, error)
            results.processing_errors.append(
                ProcessingError(path=remote_file_path, error_message=str(error) or type(error).__name__)
            )
            return
        results.processed_files.append(remote_file_path)
