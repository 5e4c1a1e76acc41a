"""FTP/SFTP poller configuration and result contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, RootModel


class RemoteConnectionConfig(BaseModel):
    """Credentials and endpoint of one remote file server.

    Attributes:
        host: Server host name.
        port: Optional port; protocol default when unset.
        username: Login user.
        password: Optional password.
        private_key: Optional PEM private key (SFTP only).
        secure: Use explicit TLS (FTP only).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    host: str = Field(min_length=1)
    port: int | None = Field(default=None, ge=1, le=65535)
    username: str = Field(default="anonymous")
    password: str | None = None
    private_key: str | None = Field(default=None, alias="privateKey")
    secure: bool = False


class ConnectionDetails(BaseModel):
    """Protocol tag plus connection config; the tag is checked at dispatch time."""

    model_config = ConfigDict(populate_by_name=True)

    protocol: str = Field(min_length=1)
    config: RemoteConnectionConfig


class FtpPollerConfig(BaseModel):
    """Configuration and watermark state of one poll target."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    connection_details: ConnectionDetails = Field(alias="connectionDetails")
    remote_path: str = Field(default="/", alias="remotePath")
    remote_files: list[str] | None = Field(default=None, alias="remoteFiles")
    destination_path: str = Field(alias="destinationPath")
    delete_after_processing: bool = Field(default=False, alias="deleteAfterProcessing")
    last_poll_time: datetime | None = Field(default=None, alias="lastPollTime")


class FtpPollerConfigMap(RootModel[dict[str, FtpPollerConfig]]):
    """Poller configs keyed by config id, stored as one key-value record."""


class RemoteEntryKind(str, Enum):
    """Kind of a remote directory entry."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"


@dataclass(frozen=True)
class RemoteEntry:
    """One remote listing entry.

    Attributes:
        name: Entry base name.
        kind: Entry kind.
        modify_time: Optional modification timestamp reported by the server.
    """

    name: str
    kind: RemoteEntryKind
    modify_time: datetime | None = None


@dataclass(frozen=True)
class SkippedItem:
    """Remote entry intentionally not processed."""

    path: str
    reason: str


@dataclass(frozen=True)
class ProcessingError:
    """Remote entry that failed selection or transfer."""

    path: str
    error_message: str


@dataclass
class FtpPollingResults:
    """Aggregated classification of every remote entry considered by one poll."""

    processed_files: list[str] = field(default_factory=list)
    skipped_items: list[SkippedItem] = field(default_factory=list)
    processing_errors: list[ProcessingError] = field(default_factory=list)

    def polling_results_to_payload(self) -> dict[str, list[object]]:
        """Render results in the camelCase wire shape.

        Returns:
            dict[str, list[object]]: `processedFiles`, `skippedItems` and `processingErrors`.
        """

        return {
            "processedFiles": list(self.processed_files),
            "skippedItems": [{"path": item.path, "reason": item.reason} for item in self.skipped_items],
            "processingErrors": [
                {"path": error.path, "errorMessage": error.error_message} for error in self.processing_errors
            ],
        }


@dataclass(frozen=True)
class FtpPollOutcome:
    """Poll result plus the watermark the caller should persist on success."""

    results: FtpPollingResults
    recommended_last_poll_time: datetime


EPOCH_UTC = datetime(1970, 1, 1, tzinfo=timezone.utc)


def domain_as_utc(value: datetime) -> datetime:
    """Return `value` as an aware UTC datetime; naive values are treated as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def domain_epoch_milliseconds(value: datetime) -> int:
    """Return milliseconds since the Unix epoch for `value`."""

    return int(domain_as_utc(value).timestamp() * 1000)
