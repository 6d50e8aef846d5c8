"""Batch resolution of target packages against declared packages.

For every target package the resolver asks the compatibility service,
once per declared package, which target versions are compatible, then
intersects the answers (:func:`intersect_versions`) and reports the
oldest/latest bounds (:func:`select_range`).  A resolved target is
adopted as ``~<latest>`` and appended to the declared packages, so
targets resolved afterwards are checked against it too.

Concurrency model
-----------------

By default all targets are resolved concurrently, each as its own
asyncio task, and the lookups of one target are fanned out together.
Every target snapshots the declared packages when its lookups start.
Whether it sees a package adopted by another target therefore depends
on which finishes first; with concurrent resolution it usually does
not.  ``sequential=True`` resolves one target at a time, so each target
sees every earlier adoption.

Results are always returned in the order the targets were requested,
regardless of completion order.

Failures
--------

A failed lookup fails the target it belongs to and nothing else.  The
error is logged and kept in :attr:`ResolutionReport.failures`; other
targets still resolve.  A target with no compatible version is not an
error: it is logged and left out of the results.

Typical usage::

    async with HTTPClient() as http:
        resolver = BatchResolver(CompatibilityClient(http))
        resolved = await resolver.resolve_all(
            {"react": "18.2.0", "next": "^13.5.1"},
            ["sass", "react"],
        )
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Union, cast

from peercompat.utils.logger import get_logger
from peercompat.core.selector import adopted_specifier, select_range
from peercompat.utils.http import HTTPClient
from peercompat.core.cache import CompatibilityCache
from peercompat.core.client import CompatibilityClient
from peercompat.core.intersector import intersect_versions
from peercompat.exceptions import InvalidInputError, PeerCompatError
from peercompat.models import Package, ResolvedTarget, packages_from_mapping

logger = get_logger("resolver")

__all__ = ["BatchResolver", "ResolutionReport", "ConsumerInput", "resolve_all"]

ConsumerInput = Union[Mapping[str, str], Sequence[Package]]


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------


@dataclass
class ResolutionReport:
    """Everything that happened during one batch resolution.

    Attributes:
        resolved: Resolved targets, in requested order.
        skipped: Targets that were already declared.
        incompatible: Targets whose intersected version set was empty.
        failures: Target name to the error that aborted its resolution.
        consumers: Declared packages at the end of the run, including
            adopted targets.
    """

    resolved: List[ResolvedTarget] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    incompatible: List[str] = field(default_factory=list)
    failures: Dict[str, PeerCompatError] = field(default_factory=dict)
    consumers: List[Package] = field(default_factory=list)

    @property
    def all_resolved(self) -> bool:
        """True when no target was incompatible or failed."""
        return not self.incompatible and not self.failures

    def to_json(self) -> Dict[str, object]:
        return {
            "resolved": [target.to_json() for target in self.resolved],
            "skipped": list(self.skipped),
            "incompatible": list(self.incompatible),
            "failures": {name: str(exc) for name, exc in self.failures.items()},
        }


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class BatchResolver:
    """Resolve compatible version ranges for a batch of target packages.

    Args:
        client: Compatibility client used for every lookup.
        sequential: Resolve targets one after the other instead of
            concurrently.
    """

    def __init__(
        self,
        client: CompatibilityClient,
        *,
        sequential: bool = False,
    ) -> None:
        self.client = client
        self.sequential = sequential

    async def resolve_all(
        self,
        consumer_packages: Optional[ConsumerInput],
        target_names: Optional[Sequence[str]],
    ) -> List[ResolvedTarget]:
        """Resolve ``target_names`` against ``consumer_packages``.

        Args:
            consumer_packages: Declared packages, as a ``{name: specifier}``
                mapping or a sequence of :class:`Package`.
            target_names: Packages to find compatible versions for.

        Returns:
            Resolved targets in requested order.  Skipped, incompatible
            and failed targets are omitted.

        Raises:
            InvalidInputError: Either argument is ``None``.
        """
        report = await self.resolve_report(consumer_packages, target_names)
        return report.resolved

    async def resolve_report(
        self,
        consumer_packages: Optional[ConsumerInput],
        target_names: Optional[Sequence[str]],
    ) -> ResolutionReport:
        """Like :meth:`resolve_all`, returning the full :class:`ResolutionReport`."""
        if consumer_packages is None:
            raise InvalidInputError(
                "Missing required argument(s)", argument="consumer_packages"
            )
        if target_names is None:
            raise InvalidInputError(
                "Missing required argument(s)", argument="target_names"
            )

        consumers = _to_packages(consumer_packages)
        report = ResolutionReport(consumers=consumers)

        declared = {pkg.name for pkg in consumers}
        pending: List[str] = []
        for name in dict.fromkeys(target_names):
            if name in declared:
                logger.info("Target package %s is already declared, skipping", name)
                report.skipped.append(name)
            else:
                pending.append(name)

        if self.sequential:
            outcomes: List[object] = []
            for name in pending:
                try:
                    outcomes.append(await self.resolve_target(consumers, name))
                except PeerCompatError as exc:
                    outcomes.append(exc)
        else:
            outcomes = await asyncio.gather(
                *(self.resolve_target(consumers, name) for name in pending),
                return_exceptions=True,
            )

        for name, outcome in zip(pending, outcomes):
            if isinstance(outcome, PeerCompatError):
                logger.error("Could not resolve %s: %s", name, outcome)
                report.failures[name] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            elif outcome is None:
                report.incompatible.append(name)
            else:
                report.resolved.append(cast(ResolvedTarget, outcome))

        return report

    async def resolve_target(
        self,
        consumers: List[Package],
        target_name: str,
    ) -> Optional[ResolvedTarget]:
        """Resolve one target against the packages currently in ``consumers``.

        On success the adopted package is appended to ``consumers``.

        Returns:
            The resolved target, or ``None`` when no version is compatible.

        Raises:
            RemoteLookupError: Any of the target's lookups failed.
        """
        snapshot = list(consumers)
        logger.debug(
            "Finding common compatible versions for %s across %d package(s)",
            target_name,
            len(snapshot),
        )

        version_sets = await asyncio.gather(
            *(
                self.client.fetch_compatible_versions(consumer, target_name)
                for consumer in snapshot
            )
        )
        versions = intersect_versions(version_sets)

        if not versions:
            logger.warning("No compatible version found for %s", target_name)
            return None

        compatible = select_range(versions)
        consumers.append(
            Package(name=target_name, version=adopted_specifier(compatible))
        )

        logger.info(
            "Added compatible version %s for %s (compatible range: %s)",
            compatible.latest,
            target_name,
            compatible,
        )
        logger.debug("Declared packages: %d", len(consumers))

        return ResolvedTarget(name=target_name, version=compatible)


def _to_packages(consumer_packages: ConsumerInput) -> List[Package]:
    """Copy the caller's declared packages into a list owned by the run."""
    if isinstance(consumer_packages, Mapping):
        return packages_from_mapping(consumer_packages)
    return list(consumer_packages)


async def resolve_all(
    consumer_packages: Optional[ConsumerInput],
    target_names: Optional[Sequence[str]],
    *,
    http_client: Optional[HTTPClient] = None,
    cache: Optional[CompatibilityCache] = None,
    sequential: bool = False,
) -> List[ResolvedTarget]:
    """Resolve ``target_names`` with a one-off :class:`BatchResolver`.

    Opens (and closes) its own :class:`HTTPClient` unless ``http_client``
    is given.

    Example::

        resolved = asyncio.run(resolve_all({"react": "18.2.0"}, ["sass"]))
    """
    if http_client is not None:
        resolver = BatchResolver(
            CompatibilityClient(http_client, cache=cache), sequential=sequential
        )
        return await resolver.resolve_all(consumer_packages, target_names)

    async with HTTPClient() as http:
        resolver = BatchResolver(
            CompatibilityClient(http, cache=cache), sequential=sequential
        )
        return await resolver.resolve_all(consumer_packages, target_names)
