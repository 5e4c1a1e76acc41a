"""API router package."""

from .executions import api_create_executions_router
from .ftp_poller import api_create_ftp_poller_router
from .health import api_create_health_router
from .outbound import api_create_outbound_router

__all__ = [
	"api_create_executions_router",
	"api_create_ftp_poller_router",
	"api_create_health_router",
	"api_create_outbound_router",
]
