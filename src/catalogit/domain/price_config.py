"""Pricing configuration validation and normalization.

``normalize_config`` is the only way raw user input becomes a
PricingConfig. Its output is also the canonical storage format:
``config_from_storage(config_to_storage(c)) == c``.
"""

from decimal import Decimal
from typing import Any, Optional

from catalogit.domain.entities import (
    LEGACY_PRICING_KEYS,
    ComplimentaryConfig,
    DiscountedConfig,
    DynamicConfig,
    PriceWindow,
    PricingConfig,
    PricingType,
    StaticConfig,
    Tier,
    TieredConfig,
)
from catalogit.domain.errors import InvalidConfigError, InvalidNumericInputError
from catalogit.utils.money import HUNDRED, round2, to_money
from catalogit.utils.time_windows import is_hhmm


def parse_pricing_type(value) -> PricingType:
    """Parse a pricing type from an enum member, a name or a legacy key.

    Examples: PricingType.TIERED, "tiered", "TIERED", "B".

    Raises:
        InvalidConfigError: If the value names no pricing type
    """
    if isinstance(value, PricingType):
        return value
    if isinstance(value, str):
        cleaned = value.strip()
        if cleaned in LEGACY_PRICING_KEYS:
            return LEGACY_PRICING_KEYS[cleaned]
        try:
            return PricingType[cleaned.upper()]
        except KeyError:
            pass
    raise InvalidConfigError(
        f"Unknown pricing type {value!r}. Use one of: "
        f"{', '.join(t.value for t in PricingType)} (or A-E)"
    )


def _money_field(raw, label: str) -> Decimal:
    try:
        value = round2(raw)
    except InvalidNumericInputError:
        raise InvalidConfigError(f"{label} must be a number, got {raw!r}")
    if value < 0:
        raise InvalidConfigError(f"{label} must be >= 0")
    return value


def _normalize_static(p: dict) -> StaticConfig:
    # base_price is authoritative; amount is accepted and kept but never used
    amount = p.get("amount")
    if amount is None:
        return StaticConfig()
    return StaticConfig(amount=_money_field(amount, "amount"))


def _normalize_tier(raw: Any, index: int) -> Tier:
    if not isinstance(raw, dict):
        raise InvalidConfigError(f"Tier {index} must be an object with 'upto' and 'price'")
    if "upto" not in raw or "price" not in raw:
        raise InvalidConfigError("Each tier requires 'upto' (number or null) and 'price'")

    upto = raw["upto"]
    if upto is not None:
        try:
            upto = to_money(upto)
        except InvalidNumericInputError:
            raise InvalidConfigError(f"Tier {index} 'upto' must be a number or null, got {raw['upto']!r}")
        if upto < 0:
            raise InvalidConfigError(f"Tier {index} 'upto' must be >= 0")
        # Whole hours stay ints; fractional limits are kept exactly
        if upto == upto.to_integral_value():
            upto = int(upto)

    return Tier(upto=upto, price=_money_field(raw["price"], f"Tier {index} price"))


def _normalize_tiered(p: dict) -> TieredConfig:
    raw_tiers = p.get("tiers")
    if not isinstance(raw_tiers, (list, tuple)) or not raw_tiers:
        raise InvalidConfigError("TIERED pricing requires a non-empty 'tiers' array")

    tiers = [_normalize_tier(raw, i) for i, raw in enumerate(raw_tiers)]
    tiers.sort(key=lambda t: (t.upto is None, t.upto or 0))

    for prev, nxt in zip(tiers, tiers[1:]):
        if prev.upto is None:
            raise InvalidConfigError("Only the last tier may be unbounded (upto: null)")
        if nxt.upto is not None and nxt.upto <= prev.upto:
            raise InvalidConfigError(f"Tier limits must be strictly increasing; 'upto' {nxt.upto} repeats")

    return TieredConfig(tiers=tuple(tiers))


def _normalize_complimentary(p: dict) -> ComplimentaryConfig:
    if p:
        raise InvalidConfigError("COMPLIMENTARY pricing takes no configuration")
    return ComplimentaryConfig()


def _normalize_discounted(p: dict) -> DiscountedConfig:
    if "base" in p:
        raise InvalidConfigError("DISCOUNTED pricing must not include 'base'; the item's base_price is used")
    if "val" not in p or "is_perc" not in p:
        raise InvalidConfigError("DISCOUNTED pricing requires 'val' and 'is_perc'")
    extra = set(p) - {"val", "is_perc"}
    if extra:
        raise InvalidConfigError(f"DISCOUNTED pricing got unexpected fields: {', '.join(sorted(extra))}")
    if not isinstance(p["is_perc"], bool):
        raise InvalidConfigError("'is_perc' must be true or false")

    val = _money_field(p["val"], "val")
    if p["is_perc"] and val > HUNDRED:
        raise InvalidConfigError("Percentage discount must be between 0 and 100")
    return DiscountedConfig(val=val, is_perc=p["is_perc"])


def _normalize_window(raw: Any, index: int) -> PriceWindow:
    if not isinstance(raw, dict) or "start" not in raw or "end" not in raw or "price" not in raw:
        raise InvalidConfigError("Each window requires 'start', 'end', and 'price'")
    start, end = raw["start"], raw["end"]
    if not is_hhmm(start) or not is_hhmm(end):
        raise InvalidConfigError(f"Window {index} times must be in HH:MM (24-hour)")
    if start >= end:
        raise InvalidConfigError(f"Window {index} start must be before end ({start} >= {end})")
    return PriceWindow(start=start, end=end, price=_money_field(raw["price"], f"Window {index} price"))


def _normalize_dynamic(p: dict) -> DynamicConfig:
    raw_windows = p.get("windows")
    if not isinstance(raw_windows, (list, tuple)) or not raw_windows:
        raise InvalidConfigError("DYNAMIC pricing requires a non-empty 'windows' array")

    windows = sorted(
        (_normalize_window(raw, i) for i, raw in enumerate(raw_windows)),
        key=lambda w: w.start,
    )
    for prev, nxt in zip(windows, windows[1:]):
        if nxt.start < prev.end:
            raise InvalidConfigError(
                f"Windows {prev.start}-{prev.end} and {nxt.start}-{nxt.end} overlap"
            )
    return DynamicConfig(windows=tuple(windows))


_NORMALIZERS = {
    PricingType.STATIC: _normalize_static,
    PricingType.TIERED: _normalize_tiered,
    PricingType.COMPLIMENTARY: _normalize_complimentary,
    PricingType.DISCOUNTED: _normalize_discounted,
    PricingType.DYNAMIC: _normalize_dynamic,
}


def normalize_config(pricing_type, payload: Optional[dict], base_price=None) -> PricingConfig:
    """Validate a raw pricing payload and return its canonical form.

    Args:
        pricing_type: PricingType, its name, or a legacy key (A-E)
        payload: Raw configuration dict (None is treated as empty)
        base_price: The item's base price, checked to be valid money when given

    Returns:
        Normalized PricingConfig

    Raises:
        InvalidConfigError: If the payload breaks a rule of its pricing type
    """
    ptype = parse_pricing_type(pricing_type)
    p = payload if payload is not None else {}
    if not isinstance(p, dict):
        raise InvalidConfigError(f"{ptype.value} configuration must be an object")

    if base_price is not None:
        _money_field(base_price, "base_price")

    return _NORMALIZERS[ptype](p)


def _upto_payload(upto):
    return str(upto) if isinstance(upto, Decimal) else upto


def config_to_payload(config: PricingConfig) -> dict:
    """Render a config as the plain payload ``normalize_config`` accepts."""
    if isinstance(config, StaticConfig):
        return {} if config.amount is None else {"amount": str(config.amount)}
    if isinstance(config, TieredConfig):
        return {"tiers": [{"upto": _upto_payload(t.upto), "price": str(t.price)} for t in config.tiers]}
    if isinstance(config, ComplimentaryConfig):
        return {}
    if isinstance(config, DiscountedConfig):
        return {"val": str(config.val), "is_perc": config.is_perc}
    if isinstance(config, DynamicConfig):
        return {
            "windows": [
                {"start": w.start, "end": w.end, "price": str(w.price)} for w in config.windows
            ]
        }
    raise TypeError(f"Unsupported pricing config: {config!r}")


def config_to_storage(config: PricingConfig) -> dict:
    """Serialize a config to its persisted ``{type, config}`` form."""
    return {"type": config.pricing_type.value, "config": config_to_payload(config)}


def config_from_storage(blob: Optional[dict]) -> Optional[PricingConfig]:
    """Rebuild a config from its persisted form (None stays None)."""
    if blob is None:
        return None
    return normalize_config(blob["type"], blob.get("config"))
