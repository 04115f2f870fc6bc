"""Core conversion model for morphit.

The runtime, router and batch driver import the backends, so they are
imported from their modules rather than re-exported here.
"""

from morphit.core.models import (
    BackendKind,
    BatchProgress,
    BatchResult,
    ConversionJob,
    ConversionRecord,
    ConversionService,
    ConvertedArtifact,
    JobState,
)
from morphit.core.options import ConversionOptions
from morphit.core.resolver import CompatibilityResolver, ServiceSection
from morphit.core.tempfiles import TempFileManager

__all__ = [
    "BackendKind",
    "BatchProgress",
    "BatchResult",
    "CompatibilityResolver",
    "ConversionJob",
    "ConversionOptions",
    "ConversionRecord",
    "ConversionService",
    "ConvertedArtifact",
    "JobState",
    "ServiceSection",
    "TempFileManager",
]
