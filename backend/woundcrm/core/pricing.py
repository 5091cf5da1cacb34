# ============================
# FILE: backend/woundcrm/core/pricing.py
# Graft ASP pricing (CMS quarterly rates, per cm²)
# ============================
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, NamedTuple

from woundcrm.core.errors import UnknownProductError


class ProductKey(NamedTuple):
    manufacturer: str
    name: str
    billing_code: str


@dataclass(frozen=True)
class GraftProduct:
    manufacturer: str
    name: str
    # Billable rate per cm² for the given quarter
    price_per_sq_cm: Decimal
    # CMS Q-code; keeps the -Q# suffix
    billing_code: str
    year: int
    quarter: str
    # discontinued products stay resolvable but are hidden from selectors
    is_active: bool = True

    @property
    def key(self) -> ProductKey:
        return ProductKey(self.manufacturer, self.name, self.billing_code)


def _g(manufacturer: str, name: str, asp: str, code: str, quarter: str, is_active: bool = True) -> GraftProduct:
    return GraftProduct(
        manufacturer=manufacturer,
        name=name,
        price_per_sq_cm=Decimal(asp),
        billing_code=code,
        year=2025,
        quarter=quarter,
        is_active=is_active,
    )


# ✅ CURRENT QUARTER: Q4 2025
# Update each quarter when CMS releases new ASP pricing; move the old list into GRAFT_HISTORY.
GRAFT_OPTIONS: tuple[GraftProduct, ...] = (
    _g("Biolab", "Membrane Wrap", "1237.28", "Q4205-Q4", "Q4"),
    _g("Biolab", "Membrane Hydro", "1867.01", "Q4290-Q4", "Q4"),
    _g("Biolab", "Membrane Tri Layer", "3574.39", "Q4344-Q4", "Q4"),
    _g("Dermabind", "Dermabind Q2", "3337.23", "Q4313-Q2", "Q4", is_active=False),
    _g("Dermabind", "Dermabind", "3312.52", "Q4313-Q4", "Q4"),
    _g("Revogen", "Revoshield", "1523.05", "Q4289-Q4", "Q4"),
    _g("Revogen", "Vitograft", "4770.00", "Q4317-Q4", "Q4"),
    _g("Evolution", "Esano", "2707.30", "Q4275-Q4", "Q4"),
    _g("Evolution", "Simplimax", "3524.11", "Q4341-Q4", "Q4"),
    _g("AmchoPlast", "AmchoPlast", "4227.97", "Q4316-Q4", "Q4"),
    _g("Encoll", "Helicoll", "1640.93", "Q4164-Q4", "Q4"),
    _g("Arsenal", "Aminoamp", "2979.56", "Q4250-Q4", "Q4"),
    _g("Generic", "2026 Rate Drop", "800.00", "Q4000-Q4", "Q4"),
)

# Archived quarters, newest first. Historical treatments keep resolving against these.
GRAFT_HISTORY: tuple[tuple[GraftProduct, ...], ...] = (
    (
        _g("Biolab", "Membrane Wrap", "1190.44", "Q4205-Q3", "Q3"),
        _g("Biolab", "Membrane Hydro", "1864.71", "Q4290-Q3", "Q3"),
        _g("Biolab", "Membrane Tri Layer", "2689.48", "Q4344-Q3", "Q3"),
        _g("Dermabind", "Dermabind Q2", "3337.23", "Q4313-Q2", "Q3"),
        _g("Dermabind", "Dermabind Q3", "3520.69", "Q4313-Q3", "Q3"),
        _g("Revogen", "Revoshield", "1468.11", "Q4289-Q3", "Q3"),
        _g("Evolution", "Esano", "2675.48", "Q4275-Q3", "Q3"),
        _g("Evolution", "Simplimax", "3071.28", "Q4341-Q3", "Q3"),
        _g("AmchoPlast", "AmchoPlast", "4415.97", "Q4316-Q3", "Q3"),
        _g("Encoll", "Helicoll", "1640.93", "Q4164-Q3", "Q3"),
    ),
)


class PricingTable:
    """
    Indexed graft lookup keyed by (manufacturer, name, billing_code).

    When the same key appears more than once, the first occurrence wins, so
    pass the current quarter before the archive.
    """

    def __init__(self, products: Iterable[GraftProduct]):
        self._by_key: dict[ProductKey, GraftProduct] = {}
        self._by_code: dict[str, GraftProduct] = {}
        self._by_name: dict[str, GraftProduct] = {}
        for p in products:
            self._by_key.setdefault(p.key, p)
            self._by_code.setdefault(p.billing_code.strip().upper(), p)
            # selectors only carry the name; prefer the active product for it
            current = self._by_name.get(p.name)
            if current is None or (p.is_active and not current.is_active):
                self._by_name[p.name] = p

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def get(self, key: ProductKey | tuple[str, str, str]) -> GraftProduct:
        try:
            product_key = ProductKey(*key)
        except TypeError:
            # bare names and partial keys never match
            raise UnknownProductError(key) from None
        product = self._by_key.get(product_key)
        if product is None:
            raise UnknownProductError(key)
        return product

    def price_for(self, key: ProductKey | tuple[str, str, str]) -> Decimal:
        return self.get(key).price_per_sq_cm

    def find_by_billing_code(self, code: str | None) -> GraftProduct:
        product = self._by_code.get((code or "").strip().upper())
        if product is None:
            raise UnknownProductError(code)
        return product

    def find_by_name(self, name: str | None) -> GraftProduct:
        product = self._by_name.get((name or "").strip())
        if product is None:
            raise UnknownProductError(name)
        return product

    def active(self) -> list[GraftProduct]:
        """Products shown in selectors (discontinued ones filtered out)."""
        return [p for p in self._by_key.values() if p.is_active]


def default_pricing_table() -> PricingTable:
    products: list[GraftProduct] = list(GRAFT_OPTIONS)
    for quarter in GRAFT_HISTORY:
        products.extend(quarter)
    return PricingTable(products)
