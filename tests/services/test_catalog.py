from __future__ import annotations

import pytest

from ethermine_exporter.core.errors import ClientInputError, UnknownTargetError
from ethermine_exporter.models.target import DEFAULT_TARGETS, ETH, Target
from ethermine_exporter.services.catalog import TargetCatalog


@pytest.fixture
def catalog() -> TargetCatalog:
    return TargetCatalog(DEFAULT_TARGETS)


def test_resolve_known_pool(catalog: TargetCatalog) -> None:
    target = catalog.resolve("ethermine")
    assert target.name == "Ethermine"
    assert target.base_address == "https://api.ethermine.org"
    assert target.currency.symbol == "ETH"
    assert target.currency_units_per_base_unit == 1e18


@pytest.mark.parametrize("pool_id", ["doesnotexist", "Ethermine", " ethermine", ""])
def test_resolve_unknown_pool_is_client_error(catalog: TargetCatalog, pool_id: str) -> None:
    with pytest.raises(ClientInputError) as excinfo:
        catalog.resolve(pool_id)
    assert isinstance(excinfo.value, UnknownTargetError)
    assert excinfo.value.target_id == pool_id
    assert excinfo.value.status_code == 400


def test_every_default_pool_resolves(catalog: TargetCatalog) -> None:
    for target in DEFAULT_TARGETS:
        assert catalog.resolve(target.id) is target
    assert len(catalog) == len(DEFAULT_TARGETS)


def test_ids_are_sorted(catalog: TargetCatalog) -> None:
    ids = catalog.ids()
    assert ids == sorted(ids)
    assert "flypool-ravencoin" in ids


def test_catalog_rejects_duplicate_ids() -> None:
    pool = Target("p", "P", ETH, "https://p.example")
    with pytest.raises(ValueError, match="duplicate pool id"):
        TargetCatalog([pool, pool])


def test_catalog_is_not_affected_by_later_changes_to_source() -> None:
    targets = [Target("p", "P", ETH, "https://p.example")]
    catalog = TargetCatalog(targets)
    targets.append(Target("q", "Q", ETH, "https://q.example"))
    assert "q" not in catalog


def test_base_addresses_have_no_trailing_slash() -> None:
    for target in DEFAULT_TARGETS:
        assert not target.base_address.endswith("/")


@pytest.mark.parametrize(
    ("pool_id", "raw", "expected"),
    [
        ("ethermine", 1.5e18, 1.5),
        ("ethermine-etc", 2e17, 0.2),
        ("flypool-zcash", 0.25, 0.25),
        ("flypool-beam", 12345.678, 12345.678),
    ],
)
def test_display_units(catalog: TargetCatalog, pool_id: str, raw: float, expected: float) -> None:
    target = catalog.resolve(pool_id)
    displayed = target.to_display_units(raw)
    assert displayed == pytest.approx(expected)
    assert displayed * target.currency_units_per_base_unit == pytest.approx(raw)


def test_display_units_exact_for_whole_unit_currency(catalog: TargetCatalog) -> None:
    target = catalog.resolve("flypool-ravencoin")
    assert target.to_display_units(0.1) == 0.1
