"""
Conversion de l'heure d'un rendez-vous du fuseau du client vers celui du notaire.
"""
import logging
import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

UTC_OFFSET_RE = re.compile(r"^UTC\s*([+-])\s*(\d{1,2})(?::?(\d{2}))?$", re.IGNORECASE)


def format_12h(hour: int, minute: int) -> str:
    period = "PM" if hour >= 12 else "AM"
    display = hour - 12 if hour > 12 else (12 if hour == 0 else hour)
    return f"{display}:{minute:02d} {period}"


def _format_raw(time_value: Optional[str]) -> str:
    if not time_value:
        return "12:00 AM"
    try:
        hours, minutes = time_value.split(":")[:2]
        return format_12h(int(hours), int(minutes))
    except ValueError:
        return time_value


def resolve_timezone(name: str) -> Optional[tzinfo]:
    """Nom IANA ('Europe/Paris') ou décalage ('UTC+1', 'UTC-5:30')"""
    if not name:
        return None
    if name.upper() == "UTC":
        return timezone.utc
    match = UTC_OFFSET_RE.match(name.strip())
    if match:
        sign, hours, minutes = match.groups()
        delta = timedelta(hours=int(hours), minutes=int(minutes or 0))
        return timezone(-delta if sign == "-" else delta)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone: {name}")
        return None


def convert_time_to_notary_timezone(
    time_value: Optional[str],
    date_value: Optional[str],
    client_timezone: Optional[str],
    notary_timezone: Optional[str],
) -> str:
    """
    '14:30', '2025-03-10', 'America/New_York', 'Europe/Paris' -> '7:30 PM'
    En cas de paramètre manquant ou invalide, l'heure brute est formatée.
    """
    if not time_value or not date_value or not client_timezone or not notary_timezone:
        logger.warning("Missing timezone conversion parameters")
        return _format_raw(time_value)

    client_tz = resolve_timezone(client_timezone)
    notary_tz = resolve_timezone(notary_timezone)
    if client_tz is None or notary_tz is None:
        return _format_raw(time_value)

    try:
        local = datetime.strptime(f"{date_value} {time_value[:5]}", "%Y-%m-%d %H:%M")
    except ValueError:
        logger.error(f"Invalid date/time: {date_value} {time_value}")
        return _format_raw(time_value)

    converted = local.replace(tzinfo=client_tz).astimezone(notary_tz)
    return format_12h(converted.hour, converted.minute)
