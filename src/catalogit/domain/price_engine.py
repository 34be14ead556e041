"""Price resolution engine.

Given an item, its resolved tax and an evaluation context, computes base
price, discount, tax and grand total. The engine trusts that configs were
validated by ``normalize_config`` at write time; absent data degrades to a
well-defined result (unavailable, or the last tier) instead of raising.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, assert_never

from catalogit.domain.entities import (
    AppliedPricingRule,
    ComplimentaryConfig,
    DiscountedConfig,
    DynamicConfig,
    Item,
    PriceResult,
    PricingConfig,
    PricingType,
    StaticConfig,
    TaxSetting,
    Tier,
    TieredConfig,
)
from catalogit.domain.tax import tax_amount as compute_tax_amount
from catalogit.utils.date_parser import to_naive_utc, utc_now
from catalogit.utils.money import HUNDRED, round2, to_money
from catalogit.utils.time_windows import MatchMode, find_containing_window

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


@dataclass(frozen=True)
class PriceContext:
    """Inputs that vary per request rather than per item.

    ``current_time`` is read as UTC: naive values are taken as UTC and aware
    ones are converted, matching how bookings are stored.
    """

    current_time: Optional[datetime] = None
    usage_hours: Optional[Decimal] = None


@dataclass(frozen=True)
class _BaseQuote:
    base_price: Decimal
    discount: Decimal
    is_available: bool
    rule: AppliedPricingRule


def select_tier(tiers: tuple[Tier, ...], usage_hours) -> Optional[Tier]:
    """Pick the tier for a usage amount.

    The first tier with ``usage <= upto`` wins; an unbounded tier always
    matches. Without usage, or with usage beyond every bound, the last tier
    applies.
    """
    if not tiers:
        return None
    if usage_hours is None:
        return tiers[-1]

    usage = to_money(usage_hours)
    for tier in tiers:
        if tier.upto is None or usage <= tier.upto:
            return tier
    return tiers[-1]


def _static(item: Item) -> _BaseQuote:
    return _BaseQuote(
        base_price=to_money(item.base_price),
        discount=_ZERO,
        is_available=True,
        rule=AppliedPricingRule(PricingType.STATIC),
    )


def _tiered(item: Item, config: TieredConfig, context: PriceContext) -> _BaseQuote:
    tier = select_tier(config.tiers, context.usage_hours)
    if tier is None:
        logger.debug("Item %s has no tiers configured; marking unavailable", item.id)
        return _BaseQuote(_ZERO, _ZERO, False, AppliedPricingRule(PricingType.TIERED, "no tiers"))

    if context.usage_hours is None:
        logger.debug("Item %s priced without usage hours; using last tier", item.id)
    bound = "unbounded" if tier.upto is None else f"upto {tier.upto}h"
    return _BaseQuote(tier.price, _ZERO, True, AppliedPricingRule(PricingType.TIERED, bound))


def _complimentary() -> _BaseQuote:
    return _BaseQuote(_ZERO, _ZERO, True, AppliedPricingRule(PricingType.COMPLIMENTARY))


def _discounted(item: Item, config: DiscountedConfig) -> _BaseQuote:
    base = to_money(item.base_price)
    if config.is_perc:
        discount = base * config.val / HUNDRED
        detail = f"{config.val}% off"
    else:
        discount = config.val
        detail = f"{config.val} off"
    # discount stays within [0, base]
    discount = min(max(discount, _ZERO), base)
    return _BaseQuote(base, discount, True, AppliedPricingRule(PricingType.DISCOUNTED, detail))


def _dynamic(item: Item, config: DynamicConfig, context: PriceContext) -> _BaseQuote:
    now = to_naive_utc(context.current_time) if context.current_time is not None else utc_now()
    window = find_containing_window(config.windows, now, MatchMode.POINT)
    if window is None:
        logger.debug("Item %s has no price window at %s; unavailable", item.id, now)
        return _BaseQuote(_ZERO, _ZERO, False, AppliedPricingRule(PricingType.DYNAMIC, "outside windows"))
    return _BaseQuote(
        window.price,
        _ZERO,
        True,
        AppliedPricingRule(PricingType.DYNAMIC, f"{window.start}-{window.end}"),
    )


def _dispatch(item: Item, config: PricingConfig, context: PriceContext) -> _BaseQuote:
    if isinstance(config, StaticConfig):
        return _static(item)
    elif isinstance(config, TieredConfig):
        return _tiered(item, config, context)
    elif isinstance(config, ComplimentaryConfig):
        return _complimentary()
    elif isinstance(config, DiscountedConfig):
        return _discounted(item, config)
    elif isinstance(config, DynamicConfig):
        return _dynamic(item, config, context)
    else:
        assert_never(config)


def _missing_config(item: Item) -> PricingConfig:
    """Stand-in config for an item saved without one."""
    ptype = item.pricing_type or PricingType.STATIC
    if ptype is PricingType.DISCOUNTED:
        return DiscountedConfig(val=_ZERO, is_perc=False)
    if ptype is PricingType.TIERED:
        return TieredConfig()
    if ptype is PricingType.DYNAMIC:
        return DynamicConfig()
    if ptype is PricingType.COMPLIMENTARY:
        return ComplimentaryConfig()
    return StaticConfig()


def resolve_price(
    item: Item,
    tax: TaxSetting,
    context: Optional[PriceContext] = None,
) -> PriceResult:
    """Compute the price of an item.

    Args:
        item: Item with a normalized pricing config (or none)
        tax: Effective tax from ``resolve_tax``
        context: Current time and usage hours; defaults to now, no usage

    Returns:
        PriceResult with all money fields rounded to cents

    Raises:
        InvalidNumericInputError: If the item carries a non-numeric price
    """
    context = context or PriceContext()
    config = item.pricing_config if item.pricing_config is not None else _missing_config(item)

    quote = _dispatch(item, config, context)

    final_base = max(_ZERO, quote.base_price - quote.discount)
    taxed = compute_tax_amount(final_base, tax)
    grand_total = final_base + taxed
    assert grand_total.is_finite(), f"Non-finite total for item {item.id}"

    return PriceResult(
        base_price=round2(quote.base_price),
        discount=round2(quote.discount),
        is_available=quote.is_available,
        applied_pricing_rule=quote.rule,
        tax_percentage=round2(tax.percentage if tax.applicable else _ZERO),
        tax_amount=round2(taxed),
        grand_total=round2(grand_total),
    )
