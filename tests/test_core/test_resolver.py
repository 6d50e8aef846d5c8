"""Unit tests for peercompat.core.resolver.

The compatibility service is replaced by an in-memory table keyed by
``(package, version, dep)``; every lookup goes through a real
CompatibilityClient and CompatibilityCache.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Set, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest

from peercompat.models import CompatibleRange, Package, ResolvedTarget
from peercompat.utils.http import HTTPClient
from peercompat.core.cache import CompatibilityCache
from peercompat.core.client import CompatibilityClient
from peercompat.core.resolver import BatchResolver, ResolutionReport, resolve_all
from peercompat.exceptions import InvalidInputError, NetworkError, RemoteLookupError

Lookup = Tuple[str, str, str]


class FakeService:
    """Stands in for the remote service behind ``HTTPClient.get_json``."""

    def __init__(
        self,
        answers: Dict[Lookup, List[str]],
        *,
        failing: Optional[Set[Lookup]] = None,
        delays: Optional[Dict[str, float]] = None,
    ) -> None:
        self.answers = answers
        self.failing = failing or set()
        self.delays = delays or {}
        self.calls: List[Lookup] = []

    async def get_json(self, url: str, *, params: Dict[str, str]) -> Dict[str, Any]:
        lookup = (params["package"], params["version"], params["dep"])
        self.calls.append(lookup)

        await asyncio.sleep(self.delays.get(params["dep"], 0))

        if lookup in self.failing:
            raise NetworkError(
                f"HTTP 500 error for {url}", url=url, status_code=500
            )
        versions = self.answers.get(lookup, [])
        return {"ok": True, "content": [{"version": v} for v in versions]}

    def calls_for(self, dep: str) -> List[Lookup]:
        return [call for call in self.calls if call[2] == dep]


def make_resolver(service: FakeService, *, sequential: bool = False) -> BatchResolver:
    http = MagicMock(spec=HTTPClient)
    http.get_json = AsyncMock(side_effect=service.get_json)
    client = CompatibilityClient(http, cache=CompatibilityCache())
    return BatchResolver(client, sequential=sequential)


@pytest.fixture
def declared() -> Dict[str, str]:
    return {"react": "18.2.0", "next": "^13.5.1"}


@pytest.fixture
def service() -> FakeService:
    return FakeService(
        {
            ("react", "18.2.0", "sass"): ["1.0.0", "1.1.5", "1.2.0", "1.3.0"],
            ("next", "^13.5.1", "sass"): ["1.2.0", "1.0.0", "1.1.5"],
            ("react", "18.2.0", "zustand"): ["4.4.0", "4.4.3"],
            ("next", "^13.5.1", "zustand"): ["4.4.3", "4.4.0"],
        }
    )


# ============================================================================
# Input validation
# ============================================================================


@pytest.mark.unit
class TestInputValidation:
    @pytest.mark.asyncio
    async def test_missing_consumers(self, service: FakeService) -> None:
        resolver = make_resolver(service)

        with pytest.raises(InvalidInputError) as exc_info:
            await resolver.resolve_all(None, ["sass"])

        assert exc_info.value.argument == "consumer_packages"
        assert service.calls == []

    @pytest.mark.asyncio
    async def test_missing_targets(
        self, service: FakeService, declared: Dict[str, str]
    ) -> None:
        resolver = make_resolver(service)

        with pytest.raises(InvalidInputError) as exc_info:
            await resolver.resolve_all(declared, None)

        assert exc_info.value.argument == "target_names"
        assert service.calls == []

    @pytest.mark.asyncio
    async def test_empty_targets(
        self, service: FakeService, declared: Dict[str, str]
    ) -> None:
        resolver = make_resolver(service)

        assert await resolver.resolve_all(declared, []) == []
        assert service.calls == []


# ============================================================================
# Resolution
# ============================================================================


@pytest.mark.unit
class TestResolveAll:
    @pytest.mark.asyncio
    async def test_resolves_range_from_intersection(
        self, service: FakeService, declared: Dict[str, str]
    ) -> None:
        resolver = make_resolver(service)

        result = await resolver.resolve_all(declared, ["sass"])

        assert result == [
            ResolvedTarget(
                name="sass",
                version=CompatibleRange(oldest="1.0.0", latest="1.2.0"),
            )
        ]
        assert sorted(service.calls) == [
            ("next", "^13.5.1", "sass"),
            ("react", "18.2.0", "sass"),
        ]

    @pytest.mark.asyncio
    async def test_already_declared_target_is_skipped(
        self, service: FakeService, declared: Dict[str, str]
    ) -> None:
        resolver = make_resolver(service)

        report = await resolver.resolve_report(declared, ["react"])

        assert report.resolved == []
        assert report.skipped == ["react"]
        assert service.calls == []

    @pytest.mark.asyncio
    async def test_empty_intersection_is_omitted(
        self, declared: Dict[str, str]
    ) -> None:
        service = FakeService(
            {
                ("react", "18.2.0", "left-pad"): [],
                ("next", "^13.5.1", "left-pad"): ["1.0.0"],
            }
        )
        resolver = make_resolver(service)

        report = await resolver.resolve_report(declared, ["left-pad"])

        assert report.resolved == []
        assert report.incompatible == ["left-pad"]
        assert report.failures == {}
        assert [p.name for p in report.consumers] == ["react", "next"]

    @pytest.mark.asyncio
    async def test_empty_answer_does_not_poison_other_queries(
        self, declared: Dict[str, str]
    ) -> None:
        service = FakeService(
            {
                ("react", "18.2.0", "left-pad"): [],
                ("next", "^13.5.1", "left-pad"): [],
                ("react", "18.2.0", "sass"): ["1.0.0"],
                ("next", "^13.5.1", "sass"): ["1.0.0"],
            }
        )
        resolver = make_resolver(service)

        result = await resolver.resolve_all(declared, ["left-pad", "sass"])

        assert [target.name for target in result] == ["sass"]

    @pytest.mark.asyncio
    async def test_no_consumers_means_no_compatible_version(
        self, service: FakeService
    ) -> None:
        resolver = make_resolver(service)

        report = await resolver.resolve_report({}, ["sass"])

        assert report.resolved == []
        assert report.incompatible == ["sass"]
        assert service.calls == []

    @pytest.mark.asyncio
    async def test_adopted_package_appended_to_consumers(
        self, service: FakeService, declared: Dict[str, str]
    ) -> None:
        resolver = make_resolver(service)

        report = await resolver.resolve_report(declared, ["sass"])

        assert report.consumers[-1] == Package(name="sass", version="~1.2.0")

    @pytest.mark.asyncio
    async def test_caller_input_is_not_mutated(self, service: FakeService) -> None:
        consumers = [Package("react", "18.2.0"), Package("next", "^13.5.1")]
        resolver = make_resolver(service)

        await resolver.resolve_all(consumers, ["sass"])

        assert consumers == [Package("react", "18.2.0"), Package("next", "^13.5.1")]

    @pytest.mark.asyncio
    async def test_duplicate_targets_resolved_once(
        self, service: FakeService, declared: Dict[str, str]
    ) -> None:
        resolver = make_resolver(service)

        result = await resolver.resolve_all(declared, ["sass", "sass"])

        assert [target.name for target in result] == ["sass"]
        assert len(service.calls_for("sass")) == 2

    @pytest.mark.asyncio
    async def test_results_follow_requested_order(
        self, declared: Dict[str, str]
    ) -> None:
        """The slow first target still comes first in the output."""
        service = FakeService(
            {
                ("react", "18.2.0", "slow"): ["1.0.0"],
                ("next", "^13.5.1", "slow"): ["1.0.0"],
                ("react", "18.2.0", "fast"): ["2.0.0"],
                ("next", "^13.5.1", "fast"): ["2.0.0"],
            },
            delays={"slow": 0.05},
        )
        resolver = make_resolver(service)

        result = await resolver.resolve_all(declared, ["slow", "fast"])

        assert [target.name for target in result] == ["slow", "fast"]


# ============================================================================
# Failures
# ============================================================================


@pytest.mark.unit
class TestFailureIsolation:
    @pytest.mark.asyncio
    async def test_failed_target_does_not_block_others(
        self, service: FakeService, declared: Dict[str, str]
    ) -> None:
        service.answers[("react", "18.2.0", "broken")] = ["1.0.0"]
        service.failing.add(("next", "^13.5.1", "broken"))
        resolver = make_resolver(service)

        report = await resolver.resolve_report(declared, ["broken", "sass"])

        assert [target.name for target in report.resolved] == ["sass"]
        assert list(report.failures) == ["broken"]
        assert isinstance(report.failures["broken"], RemoteLookupError)
        assert report.failures["broken"].status_code == 500
        assert report.all_resolved is False

    @pytest.mark.asyncio
    async def test_each_outcome_lands_in_its_own_bucket(
        self, service: FakeService, declared: Dict[str, str]
    ) -> None:
        service.failing.add(("react", "18.2.0", "broken"))
        resolver = make_resolver(service)

        report = await resolver.resolve_report(
            declared, ["react", "left-pad", "broken", "sass"]
        )

        assert report.skipped == ["react"]
        assert report.incompatible == ["left-pad"]
        assert list(report.failures) == ["broken"]
        assert report.resolved == [
            ResolvedTarget("sass", CompatibleRange(oldest="1.0.0", latest="1.2.0"))
        ]
        assert all(isinstance(t, ResolvedTarget) for t in report.resolved)

    @pytest.mark.asyncio
    async def test_failed_target_is_not_adopted(
        self, service: FakeService, declared: Dict[str, str]
    ) -> None:
        service.failing.add(("react", "18.2.0", "broken"))
        resolver = make_resolver(service)

        report = await resolver.resolve_report(declared, ["broken"])

        assert "broken" not in [p.name for p in report.consumers]

    @pytest.mark.asyncio
    async def test_failed_lookup_leaves_no_cache_entry(
        self, service: FakeService, declared: Dict[str, str]
    ) -> None:
        service.failing.add(("react", "18.2.0", "broken"))
        resolver = make_resolver(service)

        await resolver.resolve_all(declared, ["broken"])

        assert "react@18.2.0--broken" not in resolver.client.cache

    @pytest.mark.asyncio
    async def test_sequential_mode_isolates_failures(
        self, service: FakeService, declared: Dict[str, str]
    ) -> None:
        service.failing.add(("react", "18.2.0", "broken"))
        resolver = make_resolver(service, sequential=True)

        report = await resolver.resolve_report(declared, ["broken", "sass"])

        assert [target.name for target in report.resolved] == ["sass"]
        assert list(report.failures) == ["broken"]

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self, declared: Dict[str, str]) -> None:
        http = MagicMock(spec=HTTPClient)
        http.get_json = AsyncMock(side_effect=RuntimeError("bug"))
        resolver = BatchResolver(CompatibilityClient(http, cache=CompatibilityCache()))

        with pytest.raises(RuntimeError, match="bug"):
            await resolver.resolve_all(declared, ["sass"])


# ============================================================================
# Ordering between targets
# ============================================================================


@pytest.mark.unit
class TestAdoptionVisibility:
    @pytest.mark.asyncio
    async def test_sequential_targets_see_earlier_adoptions(
        self, service: FakeService, declared: Dict[str, str]
    ) -> None:
        service.answers[("sass", "~1.2.0", "zustand")] = ["4.4.0"]
        resolver = make_resolver(service, sequential=True)

        result = await resolver.resolve_all(declared, ["sass", "zustand"])

        assert ("sass", "~1.2.0", "zustand") in service.calls
        assert result[1] == ResolvedTarget(
            name="zustand",
            version=CompatibleRange(oldest="4.4.0", latest="4.4.0"),
        )

    @pytest.mark.asyncio
    async def test_concurrent_targets_use_snapshot_taken_at_start(
        self, declared: Dict[str, str]
    ) -> None:
        """A target whose lookups are already in flight does not see a
        package adopted by a target that finishes while it waits."""
        service = FakeService(
            {
                ("react", "18.2.0", "quick"): ["1.0.0"],
                ("next", "^13.5.1", "quick"): ["1.0.0"],
                ("react", "18.2.0", "slow"): ["2.0.0"],
                ("next", "^13.5.1", "slow"): ["2.0.0"],
            },
            delays={"slow": 0.05},
        )
        resolver = make_resolver(service)

        report = await resolver.resolve_report(declared, ["slow", "quick"])

        assert ("quick", "~1.0.0", "slow") not in service.calls
        assert [p.name for p in report.consumers][:2] == ["react", "next"]
        assert {p.name for p in report.consumers[2:]} == {"slow", "quick"}


# ============================================================================
# Determinism
# ============================================================================


@pytest.mark.unit
class TestDeterminism:
    @pytest.mark.asyncio
    async def test_two_runs_with_cold_caches_agree(
        self, service: FakeService, declared: Dict[str, str]
    ) -> None:
        first = await make_resolver(service).resolve_all(declared, ["sass", "zustand"])
        second = await make_resolver(service).resolve_all(declared, ["sass", "zustand"])

        assert first == second
        assert [target.name for target in first] == ["sass", "zustand"]


@pytest.mark.unit
class TestResolutionReport:
    def test_to_json(self) -> None:
        report = ResolutionReport(
            resolved=[
                ResolvedTarget("sass", CompatibleRange(oldest="1.0.0", latest="1.2.0"))
            ],
            skipped=["react"],
            incompatible=["left-pad"],
            failures={"broken": RemoteLookupError("HTTP 500", status_code=500)},
        )

        assert report.to_json() == {
            "resolved": [
                {"name": "sass", "version": {"oldest": "1.0.0", "latest": "1.2.0"}}
            ],
            "skipped": ["react"],
            "incompatible": ["left-pad"],
            "failures": {"broken": "HTTP 500 (status_code=500)"},
        }

    def test_all_resolved(self) -> None:
        assert ResolutionReport().all_resolved is True
        assert ResolutionReport(incompatible=["x"]).all_resolved is False


# ============================================================================
# Module-level convenience coroutine
# ============================================================================


@pytest.mark.unit
class TestResolveAllFunction:
    @pytest.mark.asyncio
    async def test_uses_given_http_client(
        self, service: FakeService, declared: Dict[str, str]
    ) -> None:
        http = MagicMock(spec=HTTPClient)
        http.get_json = AsyncMock(side_effect=service.get_json)
        cache = CompatibilityCache()

        resolved = await resolve_all(
            declared, ["sass"], http_client=http, cache=cache
        )

        assert resolved == [
            ResolvedTarget("sass", CompatibleRange(oldest="1.0.0", latest="1.2.0"))
        ]
        assert "react@18.2.0--sass" in cache

    @pytest.mark.asyncio
    async def test_missing_arguments_raise(self) -> None:
        with pytest.raises(InvalidInputError):
            await resolve_all(None, ["sass"], http_client=MagicMock(spec=HTTPClient))
