"""aws-build - Build Rust projects in a container for deployment to AWS.

This package builds a project inside an ephemeral docker or podman container
and produces a uniquely named artifact for either Amazon Linux 2 (a plain
executable) or AWS Lambda (a zip file holding a ``bootstrap`` executable).
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
