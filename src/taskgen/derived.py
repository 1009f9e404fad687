"""
Computed answer fields.

Some condition fields are not asked in the assessment; they are derived
from raw answers once the interview is complete and added to the flattened
answer map before generation:

    moveDistance       "Local" (< 50 miles) or "Long Distance"
    isInterstate       "Yes" / "No" from the two address states
    schoolAgeChildren  count of children aged 5-18
    childrenUnder5     count of children under 5
    hireMovers, ...    "Yes" / "No" from descriptive service choices
    daysUntilMove      whole days from the clock's today to the move date

Geocoding is external: callers pass the distance in miles and the state of
each address. When geocoding failed the long-distance, interstate values
are assumed so more tasks apply rather than fewer.
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from taskgen.clock import Clock, today

LONG_DISTANCE_MILES = 50.0

LOCAL = "Local"
LONG_DISTANCE = "Long Distance"

SCHOOL_AGE_BANDS = {"5-12", "13-17"}
UNDER_5_BANDS = {"under 5"}

SERVICE_YES_VALUES: Dict[str, Tuple[str, ...]] = {
    "hireMovers": ("hire professional movers", "get me quotes", "not sure"),
    "hirePackers": ("hire professional packers", "get me quotes", "not sure"),
    "hireCleaners": ("hire professional cleaners", "get me quotes", "not sure"),
}


def classify_move_distance(miles: Optional[float]) -> str:
    if miles is None:
        return LONG_DISTANCE
    return LONG_DISTANCE if miles >= LONG_DISTANCE_MILES else LOCAL


def classify_interstate(from_state: Optional[str], to_state: Optional[str]) -> str:
    if not from_state or not to_state:
        return "Yes"
    return "No" if from_state.strip().lower() == to_state.strip().lower() else "Yes"


def count_children(ages: Iterable[Union[int, float, str]]) -> Tuple[int, int]:
    """
    Count school-age and under-5 children.

    Accepts numeric ages or the assessment's age band labels
    ("Under 5", "5-12", "13-17", "18+"). Unrecognised labels are ignored.

    Returns:
        (school_age, under_5)
    """
    school_age = 0
    under_5 = 0
    for age in ages:
        if isinstance(age, bool):
            continue
        if isinstance(age, (int, float)):
            if age < 5:
                under_5 += 1
            elif age <= 18:
                school_age += 1
            continue
        label = str(age).strip().lower()
        if label in UNDER_5_BANDS:
            under_5 += 1
        elif label in SCHOOL_AGE_BANDS:
            school_age += 1
    return school_age, under_5


def map_service_choice(label: Optional[str], yes_values: Sequence[str]) -> str:
    """
    Map a descriptive service choice to "Yes" / "No".

    An unanswered question maps to "", which no catalog token matches.
    """
    if not label:
        return ""
    lowered = label.strip().lower()
    if lowered in ("yes", "no"):
        return lowered.capitalize()
    return "Yes" if lowered in yes_values else "No"


def days_until_move(move_date: Union[date, datetime], clock: Clock) -> int:
    if isinstance(move_date, datetime):
        move_date = move_date.date()
    return (move_date - today(clock)).days


def derive_fields(
    raw: Mapping[str, Any],
    clock: Clock,
    distance_miles: Optional[float] = None,
    from_state: Optional[str] = None,
    to_state: Optional[str] = None,
    move_date: Optional[Union[date, datetime]] = None,
) -> Dict[str, Any]:
    """
    Return a new answer dictionary with computed fields added.

    `raw` is not modified. Raw service answers are kept under
    "<field>Detail" and replaced by their Yes/No mapping.
    """
    data: Dict[str, Any] = dict(raw)

    data["moveDistance"] = classify_move_distance(distance_miles)
    data["isInterstate"] = classify_interstate(from_state, to_state)

    ages = raw.get("childrenAges")
    if isinstance(ages, (list, tuple)):
        school_age, under_5 = count_children(ages)
        data["schoolAgeChildren"] = school_age
        data["childrenUnder5"] = under_5

    for name, yes_values in SERVICE_YES_VALUES.items():
        if name in raw and isinstance(raw[name], str):
            data[f"{name}Detail"] = raw[name]
            data[name] = map_service_choice(raw[name], yes_values)

    if move_date is not None:
        data["daysUntilMove"] = days_until_move(move_date, clock)

    return data
