from __future__ import annotations

from streamlit.logger import get_logger

from revenue_simulator import channels, funnel, suppliers
from revenue_simulator.growth import GrowthValues, apply_growth_rate, apply_growth_rates
from revenue_simulator.periods import month_keys, parse_start_month
from revenue_simulator.quarterly import MonthMetrics, apply_quarterly_overrides
from revenue_simulator.types import (
    DEFAULT_MONTHS,
    UNBOUNDED,
    BusinessType,
    CostInputs,
    MarketplaceInputs,
    MarketplaceMonth,
    MarketplaceSummary,
    ModelSettings,
    SimulationResult,
    SubscriptionInputs,
    SubscriptionMonth,
    SubscriptionSummary,
    UnitEconomicsInputs,
    UnitEconomicsMonth,
    UnitEconomicsSummary,
    round_half_up,
)

logger = get_logger(__name__)

# Customer lifespan assumed for unit-economics LTV
ASSUMED_LIFESPAN_MONTHS = 12


def _profit_margin(net_profit: float, revenue: float) -> float:
    return net_profit / revenue if revenue > 0 else 0.0


def _operating_costs(metrics: MonthMetrics, revenue: float, payment_fee_rate: float) -> float:
    return metrics.marketing_cost + metrics.personnel_cost + metrics.other_fixed_costs + revenue * payment_fee_rate


def _base_costs(cost_inputs: CostInputs) -> dict[str, float]:
    return {
        "marketing_cost": cost_inputs.marketing_cost,
        "personnel_cost": cost_inputs.personnel_cost,
        "other_fixed_costs": cost_inputs.other_fixed_costs,
    }


def simulate_subscription(
    inputs: SubscriptionInputs,
    cost_inputs: CostInputs,
    start_month: str,
    months: int = DEFAULT_MONTHS,
    settings: ModelSettings = ModelSettings(),
) -> SimulationResult:
    """Run a monthly simulation of a subscription business.

    Model notes:
    - Visitors go through the active custom funnel, or the visitor-to-signup
      rate when no funnel is active
    - Churn is applied to the previous month's active customers
    - Revenue counts every active customer on both the monthly plan and the
      discounted annual plan (amortized over 12 months)
    - Channel allocation is recorded per month but not added to costs
    """
    base_year = parse_start_month(start_month).year
    base = MonthMetrics(
        visitors=inputs.monthly_visitors,
        conversion_rate=inputs.visitor_to_signup_rate,
        paid_conversion_rate=inputs.signup_to_paid_rate,
        price=inputs.monthly_price,
        annual_price=inputs.annual_price,
        churn_rate=inputs.monthly_churn_rate,
        **_base_costs(cost_inputs),
    )
    growth = settings.growth

    monthly: dict[str, SubscriptionMonth] = {}
    active_customers = 0
    total_new_paid = 0
    total_marketing = 0.0
    total_channel_spend = 0.0

    for i, key in enumerate(month_keys(start_month, months)):
        metrics = apply_quarterly_overrides(i, settings.quarterly, BusinessType.SUBSCRIPTION, base, base_year)
        visitors = apply_growth_rate(metrics.visitors, i, growth, base_year, growth.apply_to_customers)

        signups = round_half_up(
            funnel.convert(visitors, settings.custom_funnels, settings.active_funnel_id, metrics.conversion_rate)
        )
        new_paid = round_half_up(signups * metrics.paid_conversion_rate)
        churned = round_half_up(active_customers * metrics.churn_rate)
        active_customers = max(0, active_customers + new_paid - churned)

        mrr = active_customers * metrics.price
        annualized = active_customers * metrics.annual_price * (1.0 - inputs.annual_discount_rate) / 12.0
        revenue = apply_growth_rate(mrr + annualized, i, growth, base_year, growth.apply_to_revenue)

        allocation = channels.allocate(visitors, inputs.channels)

        total_costs = _operating_costs(metrics, revenue, cost_inputs.payment_fee_rate)
        net_profit = revenue - total_costs

        total_new_paid += new_paid
        total_marketing += metrics.marketing_cost
        total_channel_spend += allocation.total_cost

        monthly[key] = SubscriptionMonth(
            month=key,
            revenue=revenue,
            customers=active_customers,
            total_costs=total_costs,
            net_profit=net_profit,
            profit_margin=_profit_margin(net_profit, revenue),
            visitors=visitors,
            signups=signups,
            paid_customers=new_paid,
            churned_customers=churned,
            mrr=mrr,
            channel_spend=allocation.total_cost,
            channels=allocation.channels,
        )

    total_revenue = sum(m.revenue for m in monthly.values())
    total_costs = sum(m.total_costs for m in monthly.values())
    last = list(monthly.values())[-1] if monthly else None
    mrr = last.mrr if last else 0.0
    summary = SubscriptionSummary(
        total_revenue=total_revenue,
        total_customers=total_new_paid,
        total_costs=total_costs,
        net_profit=total_revenue - total_costs,
        average_profit_margin=_profit_margin(total_revenue - total_costs, total_revenue),
        ltv=inputs.monthly_price / inputs.monthly_churn_rate if inputs.monthly_churn_rate > 0 else UNBOUNDED,
        cac=total_marketing / total_new_paid if total_new_paid > 0 else 0.0,
        mrr=mrr,
        arr=mrr * 12,
        total_new_paid_customers=total_new_paid,
        total_marketing_spend=total_marketing,
        total_channel_spend=total_channel_spend,
    )
    logger.debug(
        f"Subscription run {start_month} x{months}: revenue={total_revenue:.0f} "
        f"customers={active_customers} net_profit={summary.net_profit:.0f}"
    )
    return SimulationResult(business_type=BusinessType.SUBSCRIPTION, monthly=monthly, summary=summary)


def simulate_unit_economics(
    inputs: UnitEconomicsInputs,
    cost_inputs: CostInputs,
    start_month: str,
    months: int = DEFAULT_MONTHS,
    settings: ModelSettings = ModelSettings(),
) -> SimulationResult:
    """Run a monthly simulation of a per-unit (manufacturing) business.

    Sales are clamped to production capacity each month. Cost of goods sold
    uses the four per-unit costs; sales count as customers.
    """
    base_year = parse_start_month(start_month).year
    base = MonthMetrics(
        sales=inputs.monthly_sales,
        price=inputs.unit_price,
        material_cost_per_unit=inputs.material_cost_per_unit,
        labor_cost_per_unit=inputs.labor_cost_per_unit,
        shipping_cost_per_unit=inputs.shipping_cost_per_unit,
        **_base_costs(cost_inputs),
    )
    growth = settings.growth

    monthly: dict[str, UnitEconomicsMonth] = {}
    last_metrics = base
    for i, key in enumerate(month_keys(start_month, months)):
        metrics = apply_quarterly_overrides(i, settings.quarterly, BusinessType.UNIT_ECONOMICS, base, base_year)
        grown = apply_growth_rates(
            GrowthValues(revenue=metrics.price, customers=metrics.sales), i, growth, base_year
        )
        unit_price = grown.revenue
        actual_sales = min(grown.customers, inputs.production_capacity)

        unit_cost = (
            metrics.material_cost_per_unit
            + metrics.labor_cost_per_unit
            + metrics.shipping_cost_per_unit
            + inputs.other_variable_cost_per_unit
        )
        revenue = actual_sales * unit_price
        cogs = actual_sales * unit_cost
        total_costs = _operating_costs(metrics, revenue, cost_inputs.payment_fee_rate) + cogs
        net_profit = revenue - total_costs

        monthly[key] = UnitEconomicsMonth(
            month=key,
            revenue=revenue,
            customers=actual_sales,
            total_costs=total_costs,
            net_profit=net_profit,
            profit_margin=_profit_margin(net_profit, revenue),
            sales=actual_sales,
            production=actual_sales,
            cost_of_goods_sold=cogs,
            gross_margin=revenue - cogs,
            unit_price=unit_price,
            unit_cost=unit_cost,
        )
        last_metrics = metrics

    rows = list(monthly.values())
    total_revenue = sum(m.revenue for m in rows)
    total_costs = sum(m.total_costs for m in rows)
    total_sales = sum(m.sales for m in rows)
    last = rows[-1] if rows else None
    last_sales = last.sales if last else 0.0
    if last_sales > 0:
        ltv = (last.unit_price - last.unit_cost) * last_sales * ASSUMED_LIFESPAN_MONTHS
        cac = last_metrics.marketing_cost / last_sales
    else:
        ltv = 0.0
        cac = 0.0

    summary = UnitEconomicsSummary(
        total_revenue=total_revenue,
        total_customers=total_sales,
        total_costs=total_costs,
        net_profit=total_revenue - total_costs,
        average_profit_margin=_profit_margin(total_revenue - total_costs, total_revenue),
        total_sales=total_sales,
        total_cost_of_goods_sold=sum(m.cost_of_goods_sold for m in rows),
        ltv=ltv,
        cac=cac,
    )
    logger.debug(
        f"Unit-economics run {start_month} x{months}: revenue={total_revenue:.0f} "
        f"sales={total_sales:.0f} net_profit={summary.net_profit:.0f}"
    )
    return SimulationResult(business_type=BusinessType.UNIT_ECONOMICS, monthly=monthly, summary=summary)


def simulate_marketplace(
    inputs: MarketplaceInputs,
    cost_inputs: CostInputs,
    start_month: str,
    months: int = DEFAULT_MONTHS,
    settings: ModelSettings = ModelSettings(),
) -> SimulationResult:
    """Run a monthly simulation of a two-sided marketplace.

    Model notes:
    - Buyers are a fixed share of visitors; orders are buyers times orders per buyer
    - Supplier revenue (when suppliers are configured) is added to buyer-side GMV
    - Platform revenue is the take on net GMV plus per-order fees and ad revenue
    - Active suppliers grow linearly and are the only state carried across months
    """
    base_year = parse_start_month(start_month).year
    base = MonthMetrics(
        visitors=inputs.monthly_visitors,
        conversion_rate=inputs.visitor_to_buyer_rate,
        price=inputs.average_order_value,
        refund_rate=inputs.refund_rate,
        take_rate=inputs.take_rate,
        **_base_costs(cost_inputs),
    )
    growth = settings.growth
    active_suppliers = inputs.suppliers.active_suppliers if inputs.suppliers else 0

    monthly: dict[str, MarketplaceMonth] = {}
    last_metrics = base
    for i, key in enumerate(month_keys(start_month, months)):
        metrics = apply_quarterly_overrides(i, settings.quarterly, BusinessType.MARKETPLACE, base, base_year)
        visitors = apply_growth_rate(metrics.visitors, i, growth, base_year, growth.apply_to_customers)

        buyers = round_half_up(visitors * metrics.conversion_rate)
        orders = round_half_up(
            apply_growth_rate(
                round_half_up(buyers * inputs.orders_per_buyer_per_month), i, growth, base_year, growth.apply_to_orders
            )
        )

        if inputs.suppliers is not None:
            supply = suppliers.step(active_suppliers, inputs.suppliers)
        else:
            supply = suppliers.SupplierStep(total_listings=0.0, total_revenue=0.0, estimated_orders=0.0)

        gmv = apply_growth_rate(
            orders * metrics.price + supply.total_revenue, i, growth, base_year, growth.apply_to_revenue
        )
        refunds = gmv * metrics.refund_rate
        net_gmv = gmv - refunds
        platform_revenue = net_gmv * metrics.take_rate + orders * inputs.fixed_fee_per_order + inputs.ad_revenue_per_month

        total_costs = _operating_costs(metrics, platform_revenue, cost_inputs.payment_fee_rate)
        net_profit = platform_revenue - total_costs

        monthly[key] = MarketplaceMonth(
            month=key,
            revenue=platform_revenue,
            customers=buyers,
            total_costs=total_costs,
            net_profit=net_profit,
            profit_margin=_profit_margin(net_profit, platform_revenue),
            visitors=visitors,
            buyers=buyers,
            orders=orders,
            gmv=gmv,
            net_gmv=net_gmv,
            refunds=refunds,
            platform_revenue=platform_revenue,
            active_suppliers=active_suppliers,
            supplier_revenue=supply.total_revenue,
            supplier_listings=supply.total_listings,
            estimated_supplier_orders=supply.estimated_orders,
        )
        last_metrics = metrics
        if inputs.suppliers is not None:
            active_suppliers = suppliers.advance(active_suppliers, inputs.suppliers)

    rows = list(monthly.values())
    total_revenue = sum(m.revenue for m in rows)
    total_costs = sum(m.total_costs for m in rows)
    last = rows[-1] if rows else None

    # LTV uses the refund rate as a churn proxy
    if last_metrics.refund_rate > 0:
        ltv = last_metrics.price * inputs.orders_per_buyer_per_month * last_metrics.take_rate / last_metrics.refund_rate
    else:
        ltv = UNBOUNDED
    # CAC from the last month only, unlike the run-total subscription CAC
    cac = last_metrics.marketing_cost / last.buyers if last and last.buyers > 0 else 0.0

    summary = MarketplaceSummary(
        total_revenue=total_revenue,
        total_customers=sum(m.buyers for m in rows),
        total_costs=total_costs,
        net_profit=total_revenue - total_costs,
        average_profit_margin=_profit_margin(total_revenue - total_costs, total_revenue),
        total_orders=sum(m.orders for m in rows),
        total_gmv=sum(m.gmv for m in rows),
        total_platform_revenue=total_revenue,
        average_take_rate=inputs.take_rate,
        total_refunds=sum(m.refunds for m in rows),
        ltv=ltv,
        cac=cac,
        ending_active_suppliers=last.active_suppliers if last else active_suppliers,
    )
    logger.debug(
        f"Marketplace run {start_month} x{months}: gmv={summary.total_gmv:.0f} "
        f"orders={summary.total_orders} net_profit={summary.net_profit:.0f}"
    )
    return SimulationResult(business_type=BusinessType.MARKETPLACE, monthly=monthly, summary=summary)
