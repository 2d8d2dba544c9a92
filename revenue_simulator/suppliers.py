from dataclasses import dataclass

from revenue_simulator.types import SupplierInfo

# Rough order value used to turn supplier revenue into an order estimate
ASSUMED_SUPPLIER_ORDER_VALUE = 50_000


@dataclass(frozen=True)
class SupplierStep:
    total_listings: float
    total_revenue: float
    estimated_orders: float  # not reconciled with buyer-side orders


def step(active_suppliers: int, info: SupplierInfo) -> SupplierStep:
    total_revenue = active_suppliers * info.average_revenue_per_supplier
    return SupplierStep(
        total_listings=active_suppliers * info.average_listings_per_supplier,
        total_revenue=total_revenue,
        estimated_orders=total_revenue / ASSUMED_SUPPLIER_ORDER_VALUE,
    )


def advance(active_suppliers: int, info: SupplierInfo) -> int:
    # Linear growth, no supplier attrition
    return active_suppliers + info.new_suppliers_per_month
