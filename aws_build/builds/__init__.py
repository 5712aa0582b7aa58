"""Build orchestration module.

This module handles:
- Cache and output directory preparation
- Binary target selection
- Unique artifact naming and packaging
- The latest-<mode> symlink
- The end-to-end build (service.run_build)
"""

from aws_build.builds.models import BuildOutput, BuildRequest

__all__ = ["BuildOutput", "BuildRequest"]
