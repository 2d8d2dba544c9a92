import math
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import ClassVar, Optional

import pandas as pd

DEFAULT_MONTHS = 12

# Marker for metrics that are unbounded (e.g. LTV with zero churn)
UNBOUNDED = math.inf


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 ties going up (2.5 -> 3, -2.5 -> -2)."""
    floor = math.floor(value)
    return floor + 1 if value - floor >= 0.5 else floor


class ConfigurationError(ValueError):
    """Raised when a simulation request cannot be run as configured."""


class BusinessType(str, Enum):
    SUBSCRIPTION = "saas"
    UNIT_ECONOMICS = "manufacturing"
    MARKETPLACE = "b2c-platform"
    HYBRID = "hybrid"


# --- Modifier settings ---


@dataclass(frozen=True)
class GrowthRate:
    quarter: int  # 1..4
    year: int
    growth_rate: float  # 0.1 = +10%, -1.0 = total collapse
    description: Optional[str] = None


@dataclass(frozen=True)
class GrowthRateSettings:
    quarterly_rates: tuple[GrowthRate, ...] = ()
    apply_to_revenue: bool = True
    apply_to_customers: bool = False
    apply_to_orders: bool = False


@dataclass(frozen=True)
class ConversionRateOverrides:
    visitor_to_signup: Optional[float] = None
    signup_to_paid: Optional[float] = None
    visitor_to_buyer: Optional[float] = None


@dataclass(frozen=True)
class PricingOverrides:
    monthly_price: Optional[float] = None
    annual_price: Optional[float] = None
    unit_price: Optional[float] = None
    average_order_value: Optional[float] = None


@dataclass(frozen=True)
class CostOverrides:
    marketing_cost: Optional[float] = None
    personnel_cost: Optional[float] = None
    other_fixed_costs: Optional[float] = None
    material_cost_per_unit: Optional[float] = None
    labor_cost_per_unit: Optional[float] = None
    shipping_cost_per_unit: Optional[float] = None


@dataclass(frozen=True)
class MetricOverrides:
    monthly_visitors: Optional[float] = None
    monthly_sales: Optional[float] = None
    churn_rate: Optional[float] = None
    refund_rate: Optional[float] = None
    take_rate: Optional[float] = None


@dataclass(frozen=True)
class QuarterlyMetrics:
    """Absolute values that replace the base inputs for one quarter."""

    quarter: int
    year: int
    conversion_rates: ConversionRateOverrides = ConversionRateOverrides()
    pricing: PricingOverrides = PricingOverrides()
    costs: CostOverrides = CostOverrides()
    metrics: MetricOverrides = MetricOverrides()
    description: Optional[str] = None


@dataclass(frozen=True)
class QuarterlyDetailedSettings:
    use_detailed_settings: bool = False
    quarterly_metrics: tuple[QuarterlyMetrics, ...] = ()


@dataclass(frozen=True)
class FunnelStep:
    order: int
    conversion_rate: float  # 0..1
    name: str = ""


@dataclass(frozen=True)
class CustomFunnel:
    id: str
    steps: tuple[FunnelStep, ...]
    name: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class ModelSettings:
    growth: GrowthRateSettings = GrowthRateSettings()
    quarterly: QuarterlyDetailedSettings = QuarterlyDetailedSettings()
    custom_funnels: tuple[CustomFunnel, ...] = ()
    active_funnel_id: Optional[str] = None


# --- Model inputs ---


@dataclass(frozen=True)
class ChannelInfo:
    name: str
    percentage: float  # 0..1, not normalized by the engine
    cost_per_visitor: float = 0.0


@dataclass(frozen=True)
class SupplierInfo:
    new_suppliers_per_month: int = 50
    active_suppliers: int = 200
    average_listings_per_supplier: float = 10.0
    average_revenue_per_supplier: float = 500.0


@dataclass(frozen=True)
class SubscriptionInputs:
    monthly_visitors: float = 10_000
    visitor_to_signup_rate: float = 0.05
    signup_to_paid_rate: float = 0.20
    monthly_churn_rate: float = 0.03
    monthly_price: float = 50_000
    annual_price: float = 500_000
    annual_discount_rate: float = 0.10
    channels: tuple[ChannelInfo, ...] = ()


@dataclass(frozen=True)
class UnitEconomicsInputs:
    monthly_sales: float = 1_000
    unit_price: float = 100_000
    production_capacity: float = 1_500
    material_cost_per_unit: float = 30_000
    labor_cost_per_unit: float = 20_000
    shipping_cost_per_unit: float = 5_000
    other_variable_cost_per_unit: float = 10_000

    @property
    def unit_cost(self) -> float:
        return (
            self.material_cost_per_unit
            + self.labor_cost_per_unit
            + self.shipping_cost_per_unit
            + self.other_variable_cost_per_unit
        )


@dataclass(frozen=True)
class MarketplaceInputs:
    monthly_visitors: float = 50_000
    visitor_to_buyer_rate: float = 0.02
    orders_per_buyer_per_month: float = 2.0
    average_order_value: float = 30_000
    refund_rate: float = 0.05
    take_rate: float = 0.10
    fixed_fee_per_order: float = 1_000
    ad_revenue_per_month: float = 500_000
    buyer_to_repeat_rate: float = 0.0
    # Supplier side is optional; without it GMV is buyer-side only
    suppliers: Optional[SupplierInfo] = None


@dataclass(frozen=True)
class CostInputs:
    marketing_cost: float = 2_000_000
    personnel_cost: float = 5_000_000
    other_fixed_costs: float = 1_000_000
    payment_fee_rate: float = 0.03
    shipping_cost_per_unit: Optional[float] = None

    @property
    def fixed_costs(self) -> float:
        return self.marketing_cost + self.personnel_cost + self.other_fixed_costs


@dataclass(frozen=True)
class SimulationRequest:
    business_type: BusinessType
    cost_inputs: CostInputs
    start_month: str  # "YYYY-MM"
    months: int = DEFAULT_MONTHS
    subscription: Optional[SubscriptionInputs] = None
    unit_economics: Optional[UnitEconomicsInputs] = None
    marketplace: Optional[MarketplaceInputs] = None
    settings: ModelSettings = ModelSettings()


# --- Results ---


@dataclass(frozen=True)
class ChannelShare:
    name: str
    percentage: float
    cost_per_visitor: float
    visitors: int
    cost: int


@dataclass(frozen=True)
class MonthlyResult:
    month: str  # "YYYY-MM"
    revenue: float
    customers: float
    total_costs: float
    net_profit: float
    profit_margin: float

    # Nested fields left out of the flat per-month row
    flat_exclude: ClassVar[tuple[str, ...]] = ()

    def as_dict(self) -> dict[str, object]:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name not in self.flat_exclude}


@dataclass(frozen=True)
class SubscriptionMonth(MonthlyResult):
    visitors: float
    signups: int
    paid_customers: int
    churned_customers: int
    mrr: float
    channel_spend: float
    channels: tuple[ChannelShare, ...]

    flat_exclude: ClassVar[tuple[str, ...]] = ("channels",)


@dataclass(frozen=True)
class UnitEconomicsMonth(MonthlyResult):
    sales: float
    production: float
    cost_of_goods_sold: float
    gross_margin: float
    unit_price: float
    unit_cost: float


@dataclass(frozen=True)
class MarketplaceMonth(MonthlyResult):
    visitors: float
    buyers: int
    orders: int
    gmv: float
    net_gmv: float
    refunds: float
    platform_revenue: float
    active_suppliers: int
    supplier_revenue: float
    supplier_listings: float
    estimated_supplier_orders: float


@dataclass(frozen=True)
class HybridMonth(MonthlyResult):
    visitors: float
    signups: int
    paid_customers: int
    mrr: float
    sales: float
    production: float
    cost_of_goods_sold: float
    gross_margin: float


@dataclass(frozen=True)
class SummaryResult:
    total_revenue: float
    total_customers: float
    total_costs: float
    net_profit: float
    average_profit_margin: float


@dataclass(frozen=True)
class SubscriptionSummary(SummaryResult):
    ltv: float
    cac: float
    mrr: float
    arr: float
    total_new_paid_customers: int
    total_marketing_spend: float
    total_channel_spend: float


@dataclass(frozen=True)
class UnitEconomicsSummary(SummaryResult):
    total_sales: float
    total_cost_of_goods_sold: float
    ltv: float
    cac: float


@dataclass(frozen=True)
class MarketplaceSummary(SummaryResult):
    total_orders: int
    total_gmv: float
    total_platform_revenue: float
    average_take_rate: float
    total_refunds: float
    ltv: float
    cac: float
    ending_active_suppliers: int


@dataclass(frozen=True)
class HybridSummary(SummaryResult):
    mrr: float
    arr: float
    ltv: float
    cac: float
    total_sales: float


@dataclass(frozen=True)
class SimulationResult:
    business_type: BusinessType
    monthly: dict[str, MonthlyResult] = field(default_factory=dict)
    summary: Optional[SummaryResult] = None

    def to_frame(self) -> pd.DataFrame:
        """Month series as a DataFrame indexed by ``"YYYY-MM"`` keys."""
        rows = [m.as_dict() for m in self.monthly.values()]
        if not rows:
            return pd.DataFrame()
        return pd.DataFrame(rows).set_index("month")
