import logging
from typing import Any, List

import pytest

from service_registry.registry.lookup_stats import LookupStats
from service_registry.registry.registry import Registry
from service_registry.registry.registry_errors import AmbiguousError, NotFoundError
from tests.registry.fixtures.fixture_types import (
    ClassA,
    ClassB,
    ClassC,
    ClassCPlus,
    ClassCPlusPlus,
)


def test_should_enable_logging(caplog: pytest.LogCaptureFixture) -> None:
    a = ClassA()
    b = ClassB()
    registry = Registry(a, b, stats_logging=False)
    assert registry.enable_stats_logging() is registry

    with caplog.at_level(logging.INFO, logger="service_registry.registry.registry"):
        assert registry.get(ClassA) is a
        assert registry.get(ClassB) is b
        with pytest.raises(NotFoundError):
            registry.get(ClassC)

    lookup_lines = [r.message for r in caplog.records if r.message.startswith("Lookup of")]
    assert len(lookup_lines) == 2
    assert "tests.registry.fixtures.fixture_types.ClassA" in lookup_lines[0]
    assert " us, total time " in lookup_lines[0]
    assert lookup_lines[1].endswith(" ms")


def test_failed_lookups_are_not_counted() -> None:
    registry = Registry(ClassCPlus(), ClassCPlusPlus(), stats_logging=True)

    with pytest.raises(AmbiguousError):
        registry.get(ClassC)
    with pytest.raises(NotFoundError):
        registry.get(ClassA)
    assert registry.stats.lookup_count == 0

    registry.get(ClassCPlusPlus)
    registry.get("tests.registry.fixtures.fixture_types.ClassCPlusPlus")

    stats: LookupStats = registry.stats
    assert stats.enabled
    assert stats.lookup_count == 2
    assert stats.total_elapsed_seconds >= 0.0


def test_disabled_stats_stay_at_zero(caplog: pytest.LogCaptureFixture) -> None:
    registry = Registry(ClassA(), stats_logging=False)

    with caplog.at_level(logging.INFO, logger="service_registry.registry.registry"):
        registry.get(ClassA)

    assert registry.stats == LookupStats()
    assert not [r for r in caplog.records if r.message.startswith("Lookup of")]


def test_clone_starts_with_fresh_stats(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SERVICE_REGISTRY_STATS_LOGGING", raising=False)
    registry = Registry(ClassA()).enable_stats_logging()
    registry.get(ClassA)

    cloned = registry.clone()

    assert cloned.stats == LookupStats()
    assert registry.stats.lookup_count == 1


def test_stats_logging_defaults_from_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("SERVICE_REGISTRY_STATS_LOGGING", "true")
    assert Registry().stats.enabled
    assert not Registry(stats_logging=False).stats.enabled

    monkeypatch.setenv("SERVICE_REGISTRY_STATS_LOGGING", "0")
    assert not Registry().stats.enabled
    assert Registry(stats_logging=True).stats.enabled


def test_enabling_stats_during_a_lookup_does_not_time_it() -> None:
    registry = Registry(ClassA(), stats_logging=False)
    match_type = registry._match_type

    def enable_then_match(target: type[Any]) -> List[Any]:
        registry.enable_stats_logging()
        return match_type(target)

    registry._match_type = enable_then_match  # type: ignore[method-assign]
    registry.get(ClassA)

    assert registry.stats.enabled
    assert registry.stats.lookup_count == 0
    assert registry.stats.total_elapsed_seconds == 0.0

    registry._match_type = match_type  # type: ignore[method-assign]
    registry.get(ClassA)
    assert registry.stats.lookup_count == 1
    assert registry.stats.total_elapsed_seconds < 1.0
