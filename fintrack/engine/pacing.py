"""
Budget Pacing Engine

Compares month-to-date spend against an even burn of the monthly budget
and suggests daily allowances that bring spending back on pace.

Pacing, not raw usage, decides whether the user is "on track": spending
60% of the budget by mid-month is over pace even though it is under 100%.

Past months count as fully elapsed and future months as not started.
The engine is pure arithmetic; every division is guarded.
"""

from datetime import date
from typing import Optional

from fintrack.models.finance import MonthAnchor
from fintrack.models.results import (
    BudgetLevel,
    PaceSeverity,
    PacingRecommendation,
    PacingResult,
    PacingStatus,
)


ON_TRACK_TOLERANCE_POINTS = 5.0
SEVERE_PACE_POINTS = 20.0
BUDGET_WARNING_PERCENTAGE = 80.0

# Fixed short horizons; the remainder of the month is always offered too
RECOMMENDATION_HORIZONS = (3, 7)


def elapsed_days(anchor: MonthAnchor, today: date) -> int:
    """Days of the anchor month that have passed as of today."""
    current = MonthAnchor.of(today)
    if anchor == current:
        return today.day
    if (anchor.year, anchor.month) < (current.year, current.month):
        return anchor.days_in_month
    return 0


def budget_level(
    percentage: float,
    warning_percentage: float = BUDGET_WARNING_PERCENTAGE,
) -> BudgetLevel:
    """Progress tone from raw budget usage."""
    if percentage >= 100:
        return BudgetLevel.EXCEEDED
    if percentage >= warning_percentage:
        return BudgetLevel.WARNING
    return BudgetLevel.OK


def pace_severity(
    gap_points: float,
    moderate_points: float = ON_TRACK_TOLERANCE_POINTS,
    severe_points: float = SEVERE_PACE_POINTS,
) -> PaceSeverity:
    """Bucket how many budget points spending is ahead of the expected pace."""
    if gap_points <= 0:
        return PaceSeverity.NONE
    if gap_points > severe_points:
        return PaceSeverity.SEVERE
    if gap_points >= moderate_points:
        return PaceSeverity.MODERATE
    return PaceSeverity.SLIGHT


def recommendation_horizons(days_remaining: int) -> list[int]:
    """3 and 7 days when they fit, then the rest of the month."""
    if days_remaining <= 0:
        return []
    horizons = [h for h in RECOMMENDATION_HORIZONS if h <= days_remaining]
    if days_remaining not in horizons:
        horizons.append(days_remaining)
    return horizons


def recommendations(
    budget_amount: float,
    spent: float,
    total_days: int,
    current_day: int,
) -> list[PacingRecommendation]:
    """
    Daily allowances that restore the even pace by the end of each horizon.

    For a horizon h the target is the cumulative spend an even pace would
    reach on day current_day + h. Whatever is left of that target after
    what was already spent is spread over the h days.
    """
    if total_days <= 0 or budget_amount <= 0:
        return []

    days_remaining = total_days - current_day
    results = []
    for horizon in recommendation_horizons(days_remaining):
        target = budget_amount * (current_day + horizon) / total_days
        allowance = target - spent
        results.append(PacingRecommendation(
            horizon_days=horizon,
            target_cumulative_spend=target,
            allowance=allowance,
            recommended_daily_amount=allowance / horizon,
            reaches_month_end=horizon == days_remaining,
        ))
    return results


def pacing(
    budget_amount: float,
    budget_currency: str,
    spent_this_month: float,
    month_anchor: MonthAnchor,
    today: Optional[date] = None,
    *,
    on_track_tolerance: float = ON_TRACK_TOLERANCE_POINTS,
    severe_threshold: float = SEVERE_PACE_POINTS,
    warning_percentage: float = BUDGET_WARNING_PERCENTAGE,
) -> PacingResult:
    """
    Budget adherence for one month.

    Args:
        budget_amount: Monthly budget in budget_currency
        budget_currency: Currency of the budget and of spent_this_month
        spent_this_month: Month-to-date spend already converted into budget_currency
        month_anchor: The month being paced
        today: Reference date (defaults to date.today())
        on_track_tolerance: Points below pace that still count as on track;
                            also the lower bound of moderate over-pace severity
        severe_threshold: Points above pace beyond which severity is severe
        warning_percentage: Usage at which the progress level becomes a warning

    Returns:
        PacingResult. Status is DISABLED when budget_amount is not positive.
    """
    today = today or date.today()
    budget_amount = float(budget_amount)
    spent = float(spent_this_month)

    total_days = month_anchor.days_in_month
    is_current_month = MonthAnchor.of(today) == month_anchor
    current_day = elapsed_days(month_anchor, today)
    days_remaining = max(total_days - current_day, 0)

    if budget_amount <= 0:
        return PacingResult(
            month=month_anchor,
            budget_amount=budget_amount,
            budget_currency=budget_currency,
            spent=spent,
            remaining=budget_amount - spent,
            budget_percentage=0.0,
            total_days_in_month=total_days,
            current_day=current_day,
            days_remaining=days_remaining,
            is_current_month=is_current_month,
            ideal_daily_spend=0.0,
            expected_spend_by_today=0.0,
            is_on_track=spent <= 0,
            status=PacingStatus.DISABLED,
        )

    budget_percentage = spent / budget_amount * 100
    ideal_daily_spend = budget_amount / total_days if total_days else 0.0
    expected = budget_amount * current_day / total_days if total_days else 0.0
    is_on_track = spent <= expected
    gap_points = (spent - expected) / budget_amount * 100

    if budget_percentage >= 100:
        status = PacingStatus.EXCEEDED
    elif is_on_track:
        if -gap_points <= on_track_tolerance:
            status = PacingStatus.ON_TRACK
        else:
            status = PacingStatus.UNDER_BUDGET
    else:
        status = PacingStatus.OVER_PACE

    return PacingResult(
        month=month_anchor,
        budget_amount=budget_amount,
        budget_currency=budget_currency,
        spent=spent,
        remaining=budget_amount - spent,
        budget_percentage=budget_percentage,
        total_days_in_month=total_days,
        current_day=current_day,
        days_remaining=days_remaining,
        is_current_month=is_current_month,
        ideal_daily_spend=ideal_daily_spend,
        expected_spend_by_today=expected,
        is_on_track=is_on_track,
        pace_gap_points=gap_points,
        status=status,
        severity=pace_severity(gap_points, on_track_tolerance, severe_threshold),
        level=budget_level(budget_percentage, warning_percentage),
        recommendations=recommendations(budget_amount, spent, total_days, current_day),
    )
