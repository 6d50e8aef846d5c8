"""Client for the remote peer-compatibility service.

One lookup answers: "which versions of *target* are compatible with
*consumer* at *specifier*?"  The service is queried with::

    GET <endpoint>?package=<consumer>&version=<specifier>&dep=<target>

and replies with ``{"ok": true, "content": [{"version": "1.2.3", ...}, ...]}``.

Successful lookups are memoized in a :class:`CompatibilityCache`.  Two
coroutines asking for the same uncached key at the same moment will both
reach the network; only sequential repeats are served from the cache.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from peercompat.models import Package
from peercompat.utils.http import HTTPClient
from peercompat.utils.logger import get_logger
from peercompat.constants import COMPATIBILITY_API
from peercompat.core.cache import DEFAULT_CACHE, CompatibilityCache, make_key
from peercompat.exceptions import NetworkError, RemoteLookupError

logger = get_logger("client")

__all__ = ["CompatibilityClient", "parse_versions"]


def parse_versions(payload: Any) -> List[str]:
    """Extract the version strings from a service response body.

    Raises:
        ValueError: The payload does not have the ``content[].version``
            shape.

    Example:
        >>> parse_versions({"content": [{"version": "1.0.0"}, {"version": "2.0.0"}]})
        ['1.0.0', '2.0.0']
    """
    if not isinstance(payload, dict):
        raise ValueError("response body is not a JSON object")

    content = payload.get("content")
    if not isinstance(content, list):
        raise ValueError("response body has no 'content' list")

    versions: List[str] = []
    for index, item in enumerate(content):
        if not isinstance(item, dict):
            raise ValueError(f"content[{index}] is not an object")
        version = item.get("version")
        if not isinstance(version, str):
            raise ValueError(f"content[{index}] has no string 'version'")
        versions.append(version)

    return versions


class CompatibilityClient:
    """Looks up compatible versions and memoizes the answers.

    Args:
        http_client: Shared :class:`HTTPClient` (owns the connection pool).
        cache: Cache to read and populate.  Defaults to the process-wide
            :data:`DEFAULT_CACHE`.
        endpoint: URL of the service's ``find`` endpoint.

    Example::

        async with HTTPClient() as http:
            client = CompatibilityClient(http)
            versions = await client.fetch_compatible_versions(
                Package("react", "18.2.0"), "sass"
            )
    """

    def __init__(
        self,
        http_client: HTTPClient,
        *,
        cache: Optional[CompatibilityCache] = None,
        endpoint: str = COMPATIBILITY_API,
    ) -> None:
        self.http_client = http_client
        self.cache = cache if cache is not None else DEFAULT_CACHE
        self.endpoint = endpoint

    async def fetch_compatible_versions(
        self,
        consumer: Package,
        target_name: str,
    ) -> List[str]:
        """Return the versions of ``target_name`` compatible with ``consumer``.

        Raises:
            RemoteLookupError: Non-2xx status, transport failure, or a
                body without the expected shape.  Nothing is cached.
        """
        key = make_key(consumer, target_name)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        params: Dict[str, str] = {
            "package": consumer.name,
            "version": consumer.version,
            "dep": target_name,
        }

        try:
            payload = await self.http_client.get_json(self.endpoint, params=params)
            versions = parse_versions(payload)
        except NetworkError as exc:
            raise RemoteLookupError(
                f"Compatibility lookup failed for {consumer} -> {target_name}: "
                f"{exc.message}",
                package_name=consumer.name,
                package_version=consumer.version,
                target_name=target_name,
                url=exc.url,
                status_code=exc.status_code,
                response_body=exc.response_body,
            ) from exc
        except ValueError as exc:
            raise RemoteLookupError(
                f"Unexpected response for {consumer} -> {target_name}: {exc}",
                package_name=consumer.name,
                package_version=consumer.version,
                target_name=target_name,
                url=self.endpoint,
            ) from exc

        self.cache.set(key, versions)
        logger.debug("Fetched %d version(s) for %s", len(versions), key)
        return versions
