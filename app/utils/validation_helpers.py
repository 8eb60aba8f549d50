from app import config
from app.errors import InvalidDate, InvalidTimeFormat
from app.utils.time import parse_time, today, validate_date


def validate_time_field(value):
    if value is None:
        return value
    try:
        parse_time(value)
    except InvalidTimeFormat:
        raise ValueError("Time must be in HH:MM format (e.g., 09:30)")
    return value


def validate_date_field(value):
    if value is None:
        return value
    try:
        validate_date(value)
    except InvalidDate:
        raise ValueError("Date must be in YYYY-MM-DD format")
    if not config.ALLOW_PAST_DATES and value < today():
        raise ValueError("Date must be today or in the future")
    return value


def check_time_order(start_time, end_time):
    if start_time and end_time and parse_time(start_time) >= parse_time(end_time):
        raise ValueError("Start time must be before end time")
