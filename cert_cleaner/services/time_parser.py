"""
时间解析服务
"""
import re
from datetime import datetime, timezone, timedelta
from typing import Optional

from ..exceptions import TimeParseError

CST = timezone(timedelta(hours=8))

# strptime 的 %f 最多支持 6 位小数，纳秒精度截断到微秒
FRACTION_PATTERN = re.compile(r'(T\d{2}:\d{2}:\d{2}\.\d{6})\d+')

# (格式, 解析结果为无时区时使用的时区)，按顺序尝试
TIME_FORMATS = [
    ('%Y-%m-%dT%H:%M:%SZ', timezone.utc),
    ('%Y-%m-%d %H:%M:%S', timezone.utc),
    ('%Y-%m-%dT%H:%M:%S+08:00', CST),
    ('%Y-%m-%dT%H:%M:%S.%fZ', timezone.utc),
    # RFC 3339
    ('%Y-%m-%dT%H:%M:%S%z', None),
    ('%Y-%m-%dT%H:%M:%S.%f%z', None),
]


def parse_time(time_str: str) -> datetime:
    """
    尝试多种格式解析时间

    Args:
        time_str: 时间字符串

    Returns:
        datetime: UTC 时区的时间

    Raises:
        TimeParseError: 空字符串或所有格式都无法解析
    """
    if not time_str or not time_str.strip():
        raise TimeParseError("空时间字符串")

    value = FRACTION_PATTERN.sub(r"\1", time_str.strip())
    for fmt, tz in TIME_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=tz)
        return parsed.astimezone(timezone.utc)

    raise TimeParseError(f"无法解析时间: {time_str}")


def parse_expiry(time_str: str) -> Optional[datetime]:
    """解析过期时间，无法解析时返回 None（视为过期时间未知）"""
    try:
        return parse_time(time_str)
    except TimeParseError:
        return None


def format_timestamp(value) -> str:
    """将 SDK 返回的时间值转换为原始时间字符串"""
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    return str(value)
