import os
from importlib import metadata
from typing import Dict, Union

__version__ = "1.0.0"


def get_version_info() -> Dict[str, Union[str, bool]]:
    """Get version information, preferring build-time injected values"""
    try:
        version = metadata.version("adsb2loki")
    except metadata.PackageNotFoundError:
        version = __version__

    commit_full = os.getenv('BUILD_COMMIT', 'unknown')
    return {
        "version": version,
        "commit": commit_full[:7],
        "commit_full": commit_full,
        "branch": os.getenv('BUILD_BRANCH', 'unknown'),
        "build_time": os.getenv('BUILD_TIME', 'unknown'),
        "clean": os.getenv('BUILD_CLEAN', 'true').lower() == 'true'
    }


# Get version info once at module load
VERSION_INFO = get_version_info()
