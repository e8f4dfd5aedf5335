# This file formats importer and search-result counts for display.
# Exact counts are shown when they are cheap and trustworthy; otherwise counts are rounded
# so that "approximately N" and "N+" never promise more precision than the data has.

from __future__ import annotations

import math

from pkgview.api.errors import InvalidArgumentError

NOT_AVAILABLE = "N/A"


def approximate_lower_bound(n: int) -> int:
    """Round `n` down to a multiple of its leading power of 10 (2593 -> 2000)."""

    if n < 0:
        raise InvalidArgumentError(f"count must be >= 0, got {n}")
    if n == 0:
        return 0
    power_of_10 = 10 ** (len(str(n)) - 1)
    return power_of_10 * (n // power_of_10)


def approximate_number(estimate: int, sigma: float) -> int:
    """Round an estimate to a unit derived from its expected error `sigma * estimate`.

    The unit is the power of 10 logarithmically closest to the expected error,
    so an error of 300 rounds to units of 100 and an error of 400 to units of 1000.
    """

    if estimate <= 0:
        return 0
    expected_error = sigma * estimate
    unit = 10 ** _round_half_up(math.log10(expected_error))
    return int(unit * _round_half_up(estimate / unit))


def _round_half_up(value: float) -> int:
    # Built-in round() rounds halves to even; 12.5 units must become 13.
    return math.floor(value + 0.5)


def imported_by_count_text(*, exact_count: int | None, search_count: int | None, limit: int) -> str:
    """Text for the imported-by count on a unit's main page.

    `exact_count` is the number of importers retrieved with a query capped at `limit`;
    None means the data source cannot count importers. `search_count` is the
    precomputed count from the search index, used only once the cap is reached.
    """

    if exact_count is None:
        return NOT_AVAILABLE
    if exact_count < limit:
        return str(exact_count)
    count = max(search_count or 0, limit)
    return f"{approximate_lower_bound(count)}+"


def imported_by_display(*, num_retrieved: int, num_search: int, limit: int) -> str:
    """Text shown at the top of the imported-by tab.

    `num_retrieved` is capped at `limit`; reaching the cap means only `limit - 1`
    importers are displayed.
    """

    displayed = limit - 1
    if num_retrieved >= limit and num_search > num_retrieved:
        return f"{num_search} (displaying {displayed} packages)"
    if num_retrieved >= limit:
        return f"{num_search} (more than {displayed} including internal and invalid packages)"
    if num_retrieved > num_search:
        return f"{num_search} ({num_retrieved} including internal and invalid packages)"
    return str(num_retrieved)
