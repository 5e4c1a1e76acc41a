"""Remote file clients for FTP (ftplib) and SFTP (paramiko) poll targets.

Both clients share one contract: a context manager owning a single
connection, plus list, download and delete operations used serially by the
poller.
"""

from __future__ import annotations

import ftplib
import io
import logging
import posixpath
import stat
from datetime import datetime, timezone
from typing import Callable, Final

import paramiko

from x12_exchange.domain import ConnectionDetails, RemoteConnectionConfig, RemoteEntry, RemoteEntryKind
from x12_exchange.domain.errors import RemoteConnectionError, RemoteFileError, UnsupportedProtocolError

from .interfaces import RemoteFileClientPort

logger = logging.getLogger(__name__)

_FTP_MLSD_TYPE_TO_KIND: Final[dict[str, RemoteEntryKind]] = {
    "file": RemoteEntryKind.FILE,
    "dir": RemoteEntryKind.DIRECTORY,
    "os.unix=symlink": RemoteEntryKind.SYMLINK,
}
_FTP_MLSD_DIRECTORY_SELF_TYPES: Final[frozenset[str]] = frozenset({"cdir", "pdir"})
_FTP_UNSUPPORTED_COMMAND_CODES: Final[frozenset[str]] = frozenset({"500", "502", "504"})
_FTP_FILE_UNAVAILABLE_CODE: Final[str] = "550"


def _adapter_ftp_reply_code(error: ftplib.Error) -> str:
    return str(error).strip()[:3]


def _adapter_parse_ftp_timestamp(value: str | None) -> datetime | None:
    """Parse an MLSD `modify` fact or MDTM reply (`YYYYMMDDHHMMSS[.sss]`) as UTC."""

    if not value:
        return None
    try:
        return datetime.strptime(value.strip()[:14], "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)
    except ValueError:
        return None


class FtpRemoteFileClient(RemoteFileClientPort):
    """FTP client with optional explicit TLS."""

    _DEFAULT_PORT: Final[int] = 21

    def __init__(
        self,
        connection_config: RemoteConnectionConfig,
        timeout_seconds: float = 30.0,
        ftp_factory: Callable[[bool, float], ftplib.FTP] | None = None,
    ):
        """Initialize FTP client.

        Args:
            connection_config: Host, credentials and TLS flag.
            timeout_seconds: Socket timeout.
            ftp_factory: Optional factory `(secure, timeout) -> FTP` used instead of ftplib classes.

        Returns:
            None: Initializer does not return a value.
        """

        self._connection_config = connection_config
        self._timeout_seconds = timeout_seconds
        self._ftp_factory = ftp_factory or _adapter_default_ftp_factory
        self._ftp: ftplib.FTP | None = None

    def __enter__(self) -> FtpRemoteFileClient:
        self.remote_connect()
        return self

    def __exit__(self, exc_type, exc, traceback) -> bool:
        self.remote_disconnect()
        return False

    def remote_connect(self) -> None:
        """Open the control connection and log in.

        Raises:
            RemoteConnectionError: Raised when connect, login or TLS negotiation fails.
        """

        config = self._connection_config
        ftp = self._ftp_factory(config.secure, self._timeout_seconds)
        try:
            ftp.connect(config.host, config.port or self._DEFAULT_PORT)
            ftp.login(config.username, config.password or "")
            if config.secure and isinstance(ftp, ftplib.FTP_TLS):
                ftp.prot_p()
        except ftplib.all_errors as error:
            ftp.close()
            raise RemoteConnectionError(f"ftp connection to {config.host} failed: {error}") from error
        self._ftp = ftp

    def remote_disconnect(self) -> None:
        """Close the connection; a failed `QUIT` falls back to closing the socket."""

        if self._ftp is None:
            return
        try:
            self._ftp.quit()
        except ftplib.all_errors as error:
            logger.warning("ftp quit failed, closing socket: %s", error)
            self._ftp.close()
        finally:
            self._ftp = None

    def remote_list_directory(self, path: str) -> list[RemoteEntry]:
        """List a directory with MLSD, or with NLST and MDTM when the server lacks MLSD.

        Raises:
            RemoteFileError: Raised when the directory is missing or cannot be listed.
        """

        ftp = self._remote_require_connection()
        try:
            return self._remote_mlsd_entries(ftp, path)
        except ftplib.error_perm as error:
            if _adapter_ftp_reply_code(error) not in _FTP_UNSUPPORTED_COMMAND_CODES:
                raise RemoteFileError(f"ftp directory {path} cannot be listed: {error}") from error
            logger.info("MLSD not supported by %s, listing %s with NLST", self._connection_config.host, path)
        except ftplib.all_errors as error:
            raise RemoteFileError(f"ftp list failed for {path}: {error}") from error
        return self._remote_nlst_entries(ftp, path)

    def remote_list_entries(self, path: str) -> list[RemoteEntry]:
        """List a directory path with MLSD, or describe a single file path with MDTM.

        Raises:
            RemoteFileError: Raised for transport failures and unexpected MDTM replies.
        """

        ftp = self._remote_require_connection()
        try:
            return self._remote_mlsd_entries(ftp, path)
        except ftplib.error_perm as error:
            logger.debug("MLSD rejected for %s, describing it as a file: %s", path, error)
        except ftplib.all_errors as error:
            raise RemoteFileError(f"ftp list failed for {path}: {error}") from error

        modify_value = self._remote_modify_time_reply(path)
        if modify_value is None:
            return []
        return [
            RemoteEntry(
                name=posixpath.basename(path.rstrip("/")),
                kind=RemoteEntryKind.FILE,
                modify_time=_adapter_parse_ftp_timestamp(modify_value),
            )
        ]

    def remote_get_file(self, path: str) -> bytes:
        ftp = self._remote_require_connection()
        buffer = io.BytesIO()
        try:
            ftp.retrbinary(f"RETR {path}", buffer.write)
        except ftplib.all_errors as error:
            raise RemoteFileError(f"ftp download failed for {path}: {error}") from error
        return buffer.getvalue()

    def remote_delete_file(self, path: str) -> None:
        ftp = self._remote_require_connection()
        try:
            ftp.delete(path)
        except ftplib.all_errors as error:
            raise RemoteFileError(f"ftp delete failed for {path}: {error}") from error

    def _remote_mlsd_entries(self, ftp: ftplib.FTP, path: str) -> list[RemoteEntry]:
        entries: list[RemoteEntry] = []
        for name, facts in list(ftp.mlsd(path, facts=["type", "modify"])):
            entry_type = str(facts.get("type", "")).lower()
            if entry_type in _FTP_MLSD_DIRECTORY_SELF_TYPES or name in {".", ".."}:
                continue
            entries.append(
                RemoteEntry(
                    name=name,
                    kind=_FTP_MLSD_TYPE_TO_KIND.get(entry_type, RemoteEntryKind.OTHER),
                    modify_time=_adapter_parse_ftp_timestamp(facts.get("modify")),
                )
            )
        return entries

    def _remote_nlst_entries(self, ftp: ftplib.FTP, path: str) -> list[RemoteEntry]:
        """List names with NLST and classify each one with MDTM.

        MDTM only answers for plain files, so names it reports unavailable are
        listed as `OTHER` entries without a timestamp.
        """

        try:
            listed_names = ftp.nlst(path)
        except ftplib.all_errors as error:
            raise RemoteFileError(f"ftp directory {path} cannot be listed: {error}") from error

        if len(listed_names) == 1 and listed_names[0].rstrip("/") == path.rstrip("/"):
            raise RemoteFileError(f"ftp directory {path} cannot be listed: path is not a directory")

        entries: list[RemoteEntry] = []
        for listed_name in listed_names:
            name = posixpath.basename(listed_name.rstrip("/"))
            if name in {"", ".", ".."}:
                continue
            modify_value = self._remote_modify_time_reply(f"{path.rstrip('/')}/{name}")
            if modify_value is None:
                entries.append(RemoteEntry(name=name, kind=RemoteEntryKind.OTHER))
                continue
            entries.append(
                RemoteEntry(
                    name=name,
                    kind=RemoteEntryKind.FILE,
                    modify_time=_adapter_parse_ftp_timestamp(modify_value),
                )
            )
        return entries

    def _remote_modify_time_reply(self, path: str) -> str | None:
        """Return the MDTM timestamp text of a file, or None when the server answers 550.

        Raises:
            RemoteFileError: Raised for any other failure, including servers without MDTM.
        """

        ftp = self._remote_require_connection()
        try:
            mdtm_reply = ftp.voidcmd(f"MDTM {path}")
        except ftplib.error_perm as error:
            if _adapter_ftp_reply_code(error) == _FTP_FILE_UNAVAILABLE_CODE:
                return None
            raise RemoteFileError(f"ftp MDTM failed for {path}: {error}") from error
        except ftplib.all_errors as error:
            raise RemoteFileError(f"ftp MDTM failed for {path}: {error}") from error

        reply_parts = mdtm_reply.split(maxsplit=1)
        return reply_parts[1] if len(reply_parts) > 1 else ""

    def _remote_require_connection(self) -> ftplib.FTP:
        if self._ftp is None:
            raise RemoteFileError("ftp client is not connected")
        return self._ftp


def _adapter_default_ftp_factory(secure: bool, timeout_seconds: float) -> ftplib.FTP:
    if secure:
        return ftplib.FTP_TLS(timeout=timeout_seconds)
    return ftplib.FTP(timeout=timeout_seconds)


SFTP_HOST_KEY_POLICIES: Final[dict[str, Callable[[], paramiko.MissingHostKeyPolicy]]] = {
    "reject": paramiko.RejectPolicy,
    "warning": paramiko.WarningPolicy,
    "auto_add": paramiko.AutoAddPolicy,
}


class SftpRemoteFileClient(RemoteFileClientPort):
    """SFTP client over one paramiko SSH connection.

    Server host keys are checked against the system known-hosts file and an
    optional extra known-hosts file; unknown keys are handled by the
    configured policy (`reject` unless overridden).
    """

    _DEFAULT_PORT: Final[int] = 22
    _PRIVATE_KEY_TYPES: Final[tuple[type[paramiko.PKey], ...]] = (
        paramiko.Ed25519Key,
        paramiko.ECDSAKey,
        paramiko.RSAKey,
    )

    def __init__(
        self,
        connection_config: RemoteConnectionConfig,
        timeout_seconds: float = 30.0,
        ssh_client_factory: Callable[[], paramiko.SSHClient] | None = None,
        host_key_policy: str = "reject",
        known_hosts_path: str | None = None,
    ):
        """Initialize SFTP client.

        Args:
            connection_config: Host and credentials (password and/or private key).
            timeout_seconds: TCP and banner timeout.
            ssh_client_factory: Optional factory for the underlying SSH client.
            host_key_policy: Unknown host key handling: `reject`, `warning` or `auto_add`.
            known_hosts_path: Optional known-hosts file loaded in addition to the system one.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when the host key policy is unknown.
        """

        normalized_policy = host_key_policy.strip().lower()
        if normalized_policy not in SFTP_HOST_KEY_POLICIES:
            raise ValueError(f"unsupported sftp host key policy: {host_key_policy}")

        self._connection_config = connection_config
        self._timeout_seconds = timeout_seconds
        self._ssh_client_factory = ssh_client_factory or paramiko.SSHClient
        self._host_key_policy = normalized_policy
        self._known_hosts_path = known_hosts_path
        self._ssh_client: paramiko.SSHClient | None = None
        self._sftp: paramiko.SFTPClient | None = None

    def __enter__(self) -> SftpRemoteFileClient:
        self.remote_connect()
        return self

    def __exit__(self, exc_type, exc, traceback) -> bool:
        self.remote_disconnect()
        return False

    def remote_connect(self) -> None:
        """Open the SSH connection and the SFTP channel.

        Raises:
            RemoteConnectionError: Raised for network, key or authentication failures.
        """

        config = self._connection_config
        ssh_client = self._ssh_client_factory()
        try:
            ssh_client.load_system_host_keys()
            if self._known_hosts_path:
                ssh_client.load_host_keys(self._known_hosts_path)
            ssh_client.set_missing_host_key_policy(SFTP_HOST_KEY_POLICIES[self._host_key_policy]())
            ssh_client.connect(
                hostname=config.host,
                port=config.port or self._DEFAULT_PORT,
                username=config.username,
                password=config.password,
                pkey=self._remote_load_private_key(config.private_key),
                timeout=self._timeout_seconds,
                banner_timeout=self._timeout_seconds,
                allow_agent=False,
                look_for_keys=False,
            )
            sftp = ssh_client.open_sftp()
        except (paramiko.SSHException, OSError) as error:
            ssh_client.close()
            raise RemoteConnectionError(f"sftp connection to {config.host} failed: {error}") from error
        self._ssh_client = ssh_client
        self._sftp = sftp

    def remote_disconnect(self) -> None:
        """Close the SFTP channel and the SSH connection."""

        try:
            if self._sftp is not None:
                self._sftp.close()
        finally:
            if self._ssh_client is not None:
                self._ssh_client.close()
            self._sftp = None
            self._ssh_client = None

    def remote_list_directory(self, path: str) -> list[RemoteEntry]:
        """List a directory's children.

        Raises:
            RemoteFileError: Raised when the path is missing, is not a directory or cannot be listed.
        """

        sftp = self._remote_require_connection()
        try:
            if not stat.S_ISDIR(sftp.stat(path).st_mode or 0):
                raise RemoteFileError(f"sftp directory {path} cannot be listed: path is not a directory")
            return [
                self._remote_build_entry(attributes.filename, attributes)
                for attributes in sftp.listdir_attr(path)
                if attributes.filename not in {".", ".."}
            ]
        except (paramiko.SSHException, OSError) as error:
            raise RemoteFileError(f"sftp directory {path} cannot be listed: {error}") from error

    def remote_list_entries(self, path: str) -> list[RemoteEntry]:
        """List a directory, or describe a single non-directory path.

        Raises:
            RemoteFileError: Raised for failures other than a missing path.
        """

        sftp = self._remote_require_connection()
        try:
            path_attributes = sftp.stat(path)
            if not stat.S_ISDIR(path_attributes.st_mode or 0):
                return [self._remote_build_entry(posixpath.basename(path.rstrip("/")), path_attributes)]
            return [
                self._remote_build_entry(attributes.filename, attributes)
                for attributes in sftp.listdir_attr(path)
                if attributes.filename not in {".", ".."}
            ]
        except FileNotFoundError:
            return []
        except (paramiko.SSHException, OSError) as error:
            raise RemoteFileError(f"sftp list failed for {path}: {error}") from error

    def remote_get_file(self, path: str) -> bytes:
        sftp = self._remote_require_connection()
        buffer = io.BytesIO()
        try:
            sftp.getfo(path, buffer)
        except (paramiko.SSHException, OSError) as error:
            raise RemoteFileError(f"sftp download failed for {path}: {error}") from error
        return buffer.getvalue()

    def remote_delete_file(self, path: str) -> None:
        sftp = self._remote_require_connection()
        try:
            sftp.remove(path)
        except (paramiko.SSHException, OSError) as error:
            raise RemoteFileError(f"sftp delete failed for {path}: {error}") from error

    def _remote_build_entry(self, name: str, attributes: paramiko.SFTPAttributes) -> RemoteEntry:
        file_mode = attributes.st_mode or 0
        if stat.S_ISREG(file_mode):
            kind = RemoteEntryKind.FILE
        elif stat.S_ISDIR(file_mode):
            kind = RemoteEntryKind.DIRECTORY
        elif stat.S_ISLNK(file_mode):
            kind = RemoteEntryKind.SYMLINK
        else:
            kind = RemoteEntryKind.OTHER

        modify_time = None
        if attributes.st_mtime is not None:
            modify_time = datetime.fromtimestamp(attributes.st_mtime, tz=timezone.utc)
        return RemoteEntry(name=name, kind=kind, modify_time=modify_time)

    def _remote_load_private_key(self, private_key: str | None) -> paramiko.PKey | None:
        """Parse a PEM/OpenSSH private key, trying each supported key type.

        Raises:
            RemoteConnectionError: Raised when no key type accepts the key material.
        """

        if not private_key:
            return None
        for key_type in self._PRIVATE_KEY_TYPES:
            try:
                return key_type.from_private_key(io.StringIO(private_key))
            except paramiko.SSHException:
                continue
        raise RemoteConnectionError("sftp private key could not be parsed")

    def _remote_require_connection(self) -> paramiko.SFTPClient:
        if self._sftp is None:
            raise RemoteFileError("sftp client is not connected")
        return self._sftp


RemoteFileClientFactory = Callable[..., RemoteFileClientPort]


def _adapter_build_ftp_client(
    config: RemoteConnectionConfig,
    timeout_seconds: float,
    **_sftp_options: str | None,
) -> FtpRemoteFileClient:
    return FtpRemoteFileClient(config, timeout_seconds=timeout_seconds)


def _adapter_build_sftp_client(
    config: RemoteConnectionConfig,
    timeout_seconds: float,
    sftp_host_key_policy: str = "reject",
    sftp_known_hosts_path: str | None = None,
) -> SftpRemoteFileClient:
    return SftpRemoteFileClient(
        config,
        timeout_seconds=timeout_seconds,
        host_key_policy=sftp_host_key_policy,
        known_hosts_path=sftp_known_hosts_path,
    )


REMOTE_FILE_CLIENT_FACTORIES: Final[dict[str, RemoteFileClientFactory]] = {
    "ftp": _adapter_build_ftp_client,
    "sftp": _adapter_build_sftp_client,
}


def adapter_build_remote_file_client(
    connection_details: ConnectionDetails,
    timeout_seconds: float = 30.0,
    factories: dict[str, RemoteFileClientFactory] | None = None,
    **client_options: str | None,
) -> RemoteFileClientPort:
    """Select the client implementation for the configured protocol.

    No connection is opened here; the returned client connects when entered.

    Args:
        connection_details: Protocol tag and connection config.
        timeout_seconds: Socket timeout.
        factories: Optional protocol-to-factory override.
        client_options: Protocol options forwarded to the factory
            (`sftp_host_key_policy`, `sftp_known_hosts_path`).

    Returns:
        RemoteFileClientPort: Unconnected client.

    Raises:
        UnsupportedProtocolError: Raised when the protocol has no implementation.
    """

    available_factories = factories if factories is not None else REMOTE_FILE_CLIENT_FACTORIES
    protocol = connection_details.protocol.strip().lower()
    factory = available_factories.get(protocol)
    if factory is None:
        raise UnsupportedProtocolError(f"unsupported connection protocol: {connection_details.protocol}")
    return factory(connection_details.config, timeout_seconds, **client_options)
