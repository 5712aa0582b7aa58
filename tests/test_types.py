"""Tests for shared types."""

import pytest

from aws_build.types import (
    BuildMode,
    ContainerCommand,
    Relabel,
    mode_info,
    mount_option,
)


class TestBuildMode:
    """Test BuildMode enum."""

    def test_values(self) -> None:
        """Mode values are the tokens used in names and paths."""
        assert BuildMode.AMAZON_LINUX_2.value == "al2"
        assert BuildMode.LAMBDA.value == "lambda"

    def test_from_string(self) -> None:
        """Modes should parse from their token."""
        assert BuildMode("al2") is BuildMode.AMAZON_LINUX_2
        assert BuildMode("lambda") is BuildMode.LAMBDA

    def test_unknown_mode_rejected(self) -> None:
        """Anything else is not a mode."""
        with pytest.raises(ValueError):
            BuildMode("ec2")


class TestModeInfo:
    """Test mode_info function."""

    def test_al2(self) -> None:
        """Amazon Linux 2 builds a bare executable on amazonlinux:2."""
        info = mode_info(BuildMode.AMAZON_LINUX_2)
        assert info.name == "al2"
        assert info.base_image == "docker.io/amazonlinux:2"
        assert info.artifact_suffix == ""

    def test_lambda(self) -> None:
        """Lambda builds a zip on the lambci provided.al2 build image."""
        info = mode_info(BuildMode.LAMBDA)
        assert info.name == "lambda"
        assert info.base_image == "docker.io/lambci/lambda:build-provided.al2"
        assert info.artifact_suffix == ".zip"


class TestMountOption:
    """Test mount_option function."""

    @pytest.mark.parametrize(
        ("relabel", "expected"),
        [(None, None), (Relabel.SHARED, "z"), (Relabel.UNSHARED, "Z")],
    )
    def test_mapping(self, relabel: Relabel | None, expected: str | None) -> None:
        """Shared is lowercase z, unshared is uppercase Z."""
        assert mount_option(relabel) == expected


class TestContainerCommand:
    """Test ContainerCommand enum."""

    def test_values(self) -> None:
        assert {c.value for c in ContainerCommand} == {
            "docker",
            "sudo-docker",
            "podman",
        }
