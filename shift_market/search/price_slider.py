"""
Logarithmic mapping between prices and a 0-100 slider position.

Prices in the catalog span several orders of magnitude (a few thousand to
ten million shillings), so the slider moves along log10(price). A minimum of
0 is treated as 1 so the logarithm stays defined.
"""
import math

SLIDER_MAX = 100


def price_to_slider_value(price: float, min_price: float, max_price: float) -> float:
    min_log = math.log10(min_price or 1)
    max_log = math.log10(max_price)
    value_log = math.log10(price or 1)
    if max_log == min_log:
        return 0.0
    position = (value_log - min_log) / (max_log - min_log) * SLIDER_MAX
    return min(max(position, 0.0), float(SLIDER_MAX))


def slider_value_to_price(value: float, min_price: float, max_price: float, round_to: int = 1000) -> int:
    """Slider position back to a price, rounded to the nearest `round_to`."""
    value = min(max(value, 0.0), float(SLIDER_MAX))
    min_log = math.log10(min_price or 1)
    max_log = math.log10(max_price)
    value_log = min_log + (value / SLIDER_MAX) * (max_log - min_log)
    price = math.pow(10, value_log)
    if round_to:
        return int(math.floor(price / round_to + 0.5) * round_to)
    return int(math.floor(price + 0.5))
