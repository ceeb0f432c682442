"""截止日期组合 -- dueDate + 可选 dueTime -> UTC 时间点"""

from datetime import UTC, date, datetime, time

from .exceptions import ValidationError

INVALID_DATE_MESSAGE = "Invalid date or time format"


def combine_due_date(due_date: str, due_time: str | None = None) -> tuple[datetime, bool]:
    """组合截止日期与时间

    Args:
        due_date: ISO 日历日期 "YYYY-MM-DD"；完整 ISO datetime 仅取日期部分
        due_time: "HH:MM[:SS]"，可带 UTC 偏移；None/空串表示无时刻

    Returns:
        (UTC datetime, has_time) 元组；无时刻时为当日零点、has_time=False

    Raises:
        ValidationError: 日期或时间无法解析
    """
    try:
        day = _parse_day(due_date.strip())
        if not due_time or not due_time.strip():
            return datetime.combine(day, time.min, tzinfo=UTC), False
        clock = time.fromisoformat(due_time.strip())
    except (AttributeError, TypeError, ValueError) as e:
        raise ValidationError(INVALID_DATE_MESSAGE) from e

    combined = datetime.combine(day, clock)
    if combined.tzinfo is None:
        return combined.replace(tzinfo=UTC), True
    # 带偏移的时刻换算为 UTC
    return combined.astimezone(UTC), True


def _parse_day(raw: str) -> date:
    if "T" in raw:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    return date.fromisoformat(raw)
