"""Adapter layer package for EDI platform, delivery, object storage and remote file boundaries."""

from .delivery import DestinationDeliveryAdapter
from .edi_platform import EdiPlatformAdapter
from .interfaces import (
	DeliveryPort,
	GuideResolverPort,
	GuideSummary,
	MappingInvokerPort,
	ObjectStoragePort,
	RemoteFileClientPort,
	TranslatorPort,
)
from .object_storage import LocalObjectStorageAdapter, S3ObjectStorageAdapter, adapter_build_object_storage
from .remote_files import (
	REMOTE_FILE_CLIENT_FACTORIES,
	FtpRemoteFileClient,
	SftpRemoteFileClient,
	adapter_build_remote_file_client,
)

__all__ = [
	"DeliveryPort",
	"DestinationDeliveryAdapter",
	"EdiPlatformAdapter",
	"FtpRemoteFileClient",
	"GuideResolverPort",
	"GuideSummary",
	"LocalObjectStorageAdapter",
	"MappingInvokerPort",
	"ObjectStoragePort",
	"REMOTE_FILE_CLIENT_FACTORIES",
	"RemoteFileClientPort",
	"S3ObjectStorageAdapter",
	"SftpRemoteFileClient",
	"TranslatorPort",
	"adapter_build_object_storage",
	"adapter_build_remote_file_client",
]
