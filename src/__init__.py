"""Periodically replicate a resource into an observer, backed by a crash-safe file cache."""

from datareplicator.config.settings import ConfigurationError, Settings, load_settings
from datareplicator.core.errors import CacheError, ObserverError, OriginError, ReplicationError
from datareplicator.core.models import Endpoint, JobStatus
from datareplicator.core.payload import Payload
from datareplicator.job.job_factory import start_consuming_binary, start_consuming_text
from datareplicator.job.replication_job import ReplicationJob
from datareplicator.version import __version__

__all__ = [
    "CacheError",
    "ConfigurationError",
    "Endpoint",
    "JobStatus",
    "ObserverError",
    "OriginError",
    "Payload",
    "ReplicationError",
    "ReplicationJob",
    "Settings",
    "__version__",
    "load_settings",
    "start_consuming_binary",
    "start_consuming_text",
]
