#!/usr/bin/env python3
"""Tests for identity resolution."""

import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from vmmaint.backends.gce_metadata import MetadataIdentityProvider
from vmmaint.errors import MetadataError
from vmmaint.interfaces.identity import InstanceIdentity, StaticIdentityProvider


def metadata_server(values, status=200):
    """urlopen replacement answering from a {attribute: body} mapping."""

    def urlopen(req, timeout=None):
        attribute = req.full_url.split("/v1/", 1)[1]
        response = MagicMock()
        response.getcode.return_value = status
        response.read.return_value = values[attribute].encode()
        cm = MagicMock()
        cm.__enter__.return_value = response
        cm.__exit__.return_value = False
        return cm

    return urlopen


class TestMetadataIdentityProvider:
    @patch("urllib.request.urlopen")
    def test_resolves_name_and_zone(self, mock_urlopen):
        mock_urlopen.side_effect = metadata_server({
            "instance/name": "vm1",
            "instance/zone": "projects/123456789/zones/us-central1-a",
        })

        identity = MetadataIdentityProvider().get_identity()

        assert identity == InstanceIdentity(vm_name="vm1", zone="us-central1-a")
        assert identity.region == "us-central1"

    @patch("urllib.request.urlopen")
    def test_sends_metadata_flavor_header(self, mock_urlopen):
        mock_urlopen.side_effect = metadata_server({
            "instance/name": "vm1",
            "instance/zone": "projects/1/zones/europe-west4-b",
        })

        MetadataIdentityProvider(timeout_seconds=2.5).get_identity()

        req = mock_urlopen.call_args_list[0].args[0]
        assert req.full_url == "http://metadata.google.internal/computeMetadata/v1/instance/name"
        assert req.get_header("Metadata-flavor") == "Google"
        assert mock_urlopen.call_args_list[0].kwargs["timeout"] == 2.5

    @patch("urllib.request.urlopen")
    def test_custom_base_url(self, mock_urlopen):
        mock_urlopen.side_effect = metadata_server({
            "instance/name": "vm1",
            "instance/zone": "projects/1/zones/us-east1-c",
        })

        MetadataIdentityProvider(base_url="http://127.0.0.1:8080/computeMetadata/v1/").get_identity()

        req = mock_urlopen.call_args_list[1].args[0]
        assert req.full_url == "http://127.0.0.1:8080/computeMetadata/v1/instance/zone"

    @patch("urllib.request.urlopen")
    def test_unreachable_server(self, mock_urlopen):
        mock_urlopen.side_effect = urllib.error.URLError("Name or service not known")
        with pytest.raises(MetadataError):
            MetadataIdentityProvider().get_identity()

    @patch("urllib.request.urlopen")
    def test_timeout(self, mock_urlopen):
        mock_urlopen.side_effect = TimeoutError("timed out")
        with pytest.raises(MetadataError):
            MetadataIdentityProvider().get_identity()

    @patch("urllib.request.urlopen")
    def test_empty_name(self, mock_urlopen):
        mock_urlopen.side_effect = metadata_server({"instance/name": "", "instance/zone": "z"})
        with pytest.raises(MetadataError):
            MetadataIdentityProvider().get_identity()

    @patch("urllib.request.urlopen")
    def test_unexpected_status(self, mock_urlopen):
        mock_urlopen.side_effect = metadata_server(
            {"instance/name": "vm1", "instance/zone": "z"}, status=204
        )
        with pytest.raises(MetadataError):
            MetadataIdentityProvider().get_identity()


class TestStaticIdentityProvider:
    def test_returns_configured_identity(self):
        identity = StaticIdentityProvider("db-1", "asia-east1-b").get_identity()
        assert identity.vm_name == "db-1"
        assert identity.region == "asia-east1"
