"""Fixtures for CLI command tests."""

from collections.abc import Iterator
from unittest.mock import patch

import pytest
from fakes import FakeBackend
from workctl.core.manifest import save_manifest
from workctl.models.manifest import Manifest
from workctl.models.package import Backend


@pytest.fixture
def cli_backends(
    sample_manifest: Manifest, fake_backends: dict[Backend, FakeBackend]
) -> Iterator[dict[Backend, FakeBackend]]:
    """Run commands against the sample manifest and the fake backends.

    The host preflight is stubbed so the tests run on any machine.
    """
    save_manifest(sample_manifest)
    with (
        patch("workctl.cli.runtime.check_host"),
        patch("workctl.cli.runtime.get_backends", return_value=fake_backends),
        patch("workctl.cli.commands.verify.get_backends", return_value=fake_backends),
    ):
        yield fake_backends
