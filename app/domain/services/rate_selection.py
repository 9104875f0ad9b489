from typing import Any


def _score(rate: dict[str, Any], meal: str | None, room_name: str | None) -> int:
    score = 0
    if meal and rate.get("meal") == meal:
        score += 1
    if room_name and rate.get("room_name") == room_name:
        score += 1
    return score


def select_replacement_rate(
    rates: list[dict[str, Any]],
    meal: str | None = None,
    room_name: str | None = None,
) -> dict[str, Any] | None:
    """
    Pick the rate that replaces a stale one after a hotel-page refetch.

    Preference: a rate matching both the desired meal plan and room name, then a
    rate matching one of them, then the first returned rate. Ties keep supplier order.
    """
    candidates = [rate for rate in rates if isinstance(rate, dict)]
    if not candidates:
        return None
    best = candidates[0]
    best_score = _score(best, meal, room_name)
    for rate in candidates[1:]:
        score = _score(rate, meal, room_name)
        if score > best_score:
            best, best_score = rate, score
    return best
