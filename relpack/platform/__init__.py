"""Platform abstraction layer."""

from .detection import Arch, Platform, detect_arch, detect_platform
from .files import atomic_output, recreate_dir
from .process import ProcessError, run
from .target import PlatformFamily, Target, TargetError, default_target, parse_target

__all__ = [
    # detection
    "Arch",
    "Platform",
    "detect_arch",
    "detect_platform",
    # files
    "atomic_output",
    "recreate_dir",
    # process
    "ProcessError",
    "run",
    # target
    "PlatformFamily",
    "Target",
    "TargetError",
    "default_target",
    "parse_target",
]
