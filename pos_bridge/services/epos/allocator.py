# pos_bridge/services/epos/allocator.py
"""
Spread a single POS stock figure across a product's packaging variants.

The POS only knows the total weight in stock. Locally the product is sold in
packages of fixed weight, so the total is turned into a number of packages per
variant by handing out one package at a time, variant after variant in their
declared order, until the packages cover the total:

    >>> allocate(6, [1, 2, 5])
    [1, 1, 1]
    >>> allocate(10, [1, 1])
    [5, 5]

The result may overshoot the total by less than the weight of the last package
handed out. It never undershoots.
"""

from numbers import Real
from typing import List, Sequence

from pos_bridge.core.exceptions import InvalidInput


def validate_weights(weights: Sequence[Real]) -> None:
    if not weights:
        raise InvalidInput("Cannot allocate stock without variants")
    for index, weight in enumerate(weights):
        if weight is None or weight <= 0:
            raise InvalidInput(f"Variant #{index} has non-positive weight: {weight}")


def allocate(total: Real, weights: Sequence[Real]) -> List[int]:
    """
    Round-robin allocation of `total` over variants of the given weights.

    Args:
        total: Stock reported by the POS, in the same unit as the weights.
            Zero or negative stock leaves every variant empty.
        weights: Packaging weight of each variant, in allocation order.

    Returns:
        List[int]: Number of packages per variant, same order as `weights`.

    Raises:
        InvalidInput: If there are no weights or a weight is not positive.
    """
    validate_weights(weights)

    if total <= 0:
        return [0] * len(weights)

    # Full rotations that stay below the total are handed out in one step,
    # the loop below then runs for at most one more rotation
    round_weight = sum(weights)
    rounds = max(0, int(-(-total // round_weight)) - 1)
    amounts = [rounds] * len(weights)
    allocated = rounds * round_weight
    index = 0
    while allocated < total:
        amounts[index] += 1
        allocated += weights[index]
        index = (index + 1) % len(weights)

    return amounts


def apply_allocation(product, total: Real) -> List[int]:
    """Allocate `total` over `product.variants` and store the amounts on them."""
    amounts = allocate(total, product.variant_weights)
    for variant, amount in zip(product.variants, amounts):
        variant.amount = amount
    return amounts
