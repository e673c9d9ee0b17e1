"""Packaging services.

Each module is one pipeline component; :mod:`relpack.services.pipeline`
sequences them.
"""

from relpack.services.errors import (
    ArchiveError,
    BuildError,
    InstallerError,
    MetadataError,
    PackageError,
    StagingError,
)
from relpack.services.pipeline import PackagingPipeline, PipelineState, PipelineStep

__all__ = [
    # errors
    "ArchiveError",
    "BuildError",
    "InstallerError",
    "MetadataError",
    "PackageError",
    "StagingError",
    # pipeline
    "PackagingPipeline",
    "PipelineState",
    "PipelineStep",
]
