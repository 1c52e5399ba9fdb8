"""Identity lookup through the Compute Engine metadata server."""

import urllib.error
import urllib.request

import structlog

from ..config import METADATA_URL
from ..errors import MetadataError
from ..interfaces.identity import IdentityProvider, InstanceIdentity

log = structlog.get_logger(__name__)

METADATA_HEADERS = {"Metadata-Flavor": "Google"}


class MetadataIdentityProvider(IdentityProvider):
    """Read the instance name and zone from the metadata server.

    The zone attribute comes back as ``projects/<number>/zones/<zone>``;
    only the last path segment is kept.
    """

    def __init__(self, base_url: str = METADATA_URL, timeout_seconds: float = 5.0):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def get_identity(self) -> InstanceIdentity:
        vm_name = self._get("instance/name")
        zone = self._get("instance/zone").rstrip("/").rsplit("/", 1)[-1]
        if not zone:
            raise MetadataError("Metadata server returned an empty zone")
        log.debug("identity.resolved", vm_name=vm_name, zone=zone)
        return InstanceIdentity(vm_name=vm_name, zone=zone)

    def _get(self, attribute: str) -> str:
        url = f"{self.base_url}/{attribute}"
        req = urllib.request.Request(url, headers=METADATA_HEADERS)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_seconds) as response:
                status_code = response.getcode()
                body = response.read().decode("utf-8", errors="replace").strip()
        except (urllib.error.URLError, OSError) as e:
            raise MetadataError(f"Metadata request for {attribute} failed: {e}") from e

        if status_code != 200:
            raise MetadataError(f"Metadata server returned {status_code} for {attribute}")
        if not body:
            raise MetadataError(f"Metadata server returned an empty {attribute}")
        return body
