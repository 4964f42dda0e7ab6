"""
Tests for the deduplication registry.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from client_codegen.pipeline.registry import DeduplicationRegistry


def test_claim_succeeds_once():
    registry = DeduplicationRegistry()
    assert registry.claim_or_skip("http:WineryResponseBody") is True
    assert registry.claim_or_skip("http:WineryResponseBody") is False
    assert registry.claim_or_skip("http:WineryRequestBody") is True
    assert registry.is_claimed("http:WineryResponseBody")
    assert not registry.is_claimed("http:BottleResponseBody")
    assert len(registry) == 2


def test_concurrent_claims_have_a_single_winner():
    registry = DeduplicationRegistry("run")
    barrier = threading.Barrier(16)

    def claim(_):
        barrier.wait()
        return registry.claim_or_skip("http:SharedBody")

    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(claim, range(16)))

    assert results.count(True) == 1
    assert results.count(False) == 15


def test_concurrent_claims_of_many_names():
    registry = DeduplicationRegistry("run")
    names = [f"http:Type{i % 50}" for i in range(1000)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(registry.claim_or_skip, names))

    assert sum(results) == 50
    assert len(registry) == 50


def test_staged_claims_count_once_committed():
    registry = DeduplicationRegistry("run")
    registry.claim_or_skip("http:WineryResponseBody")

    staged = registry.stage()
    assert staged.claim_or_skip("http:WineryResponseBody") is False
    assert staged.claim_or_skip("http:PickResponseBody") is True
    assert staged.claim_or_skip("http:PickResponseBody") is False
    assert not registry.is_claimed("http:PickResponseBody")

    staged.commit()
    assert registry.is_claimed("http:PickResponseBody")
    assert len(registry) == 2


def test_discarded_stage_leaves_no_claims():
    registry = DeduplicationRegistry("run")
    registry.stage().claim_or_skip("http:ListResponseBody")

    assert registry.claim_or_skip("http:ListResponseBody") is True


def test_only_staged_registries_commit():
    with pytest.raises(RuntimeError):
        DeduplicationRegistry().commit()
