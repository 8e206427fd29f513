from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Currency:
    symbol: str
    # Smallest accounting units per whole coin, e.g. wei per ether.
    base_units_per_unit: float


ETH = Currency("ETH", 1e18)
ETC = Currency("ETC", 1e18)
ZEC = Currency("ZEC", 1)
RVN = Currency("RVN", 1)
BEAM = Currency("BEAM", 1)


@dataclass(frozen=True, slots=True)
class Target:
    """One upstream pool API the exporter can scrape."""

    id: str
    name: str
    currency: Currency
    # No trailing slash; path suffixes are appended verbatim.
    base_address: str

    @property
    def currency_units_per_base_unit(self) -> float:
        return self.currency.base_units_per_unit

    def to_display_units(self, base_units: float) -> float:
        return base_units / self.currency.base_units_per_unit


DEFAULT_TARGETS: tuple[Target, ...] = (
    Target("ethermine", "Ethermine", ETH, "https://api.ethermine.org"),
    Target("ethermine-etc", "ETC Ethermine", ETC, "https://api-etc.ethermine.org"),
    Target("ethpool", "Ethpool", ETH, "https://api.ethpool.org"),
    Target("flypool-zcash", "Zcash Flypool", ZEC, "https://api-zcash.flypool.org"),
    Target(
        "flypool-ravencoin",
        "Ravencoin Flypool",
        RVN,
        "https://api-ravencoin.flypool.org",
    ),
    Target("flypool-beam", "Flypool BEAM", BEAM, "https://api-beam.flypool.org"),
)
