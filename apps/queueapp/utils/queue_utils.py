import math

from ..constants import DEFAULT_ABBREVIATION, PURPOSE_ABBREVIATIONS


def format_queue_number(purpose, position):
    """
    Build the human-readable ticket for a new entry.
    For example, purpose "payment" at position 7 becomes "PAY-007".
    """
    abbreviation = PURPOSE_ABBREVIATIONS.get(purpose, DEFAULT_ABBREVIATION)
    return f"{abbreviation}-{position:03d}"


def round_half_up(value, digits=0):
    """
    Round halves away from zero for non-negative values.
    Python's round() rounds halves to even, so 2.5 would become 2.
    """
    factor = 10**digits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if digits == 0 else rounded


def minutes_between(start_time, end_time):
    """
    Calculate the time difference between two timestamps in fractional minutes.
    """
    diff = end_time - start_time
    return diff.total_seconds() / 60


def format_time_interval(minutes):
    """
    Format a time interval in minutes into a human-readable string.
    For example, 65 minutes becomes "1 hour 5 minutes".
    """
    if minutes < 1:
        return "less than a minute"

    hours = minutes // 60
    remaining_minutes = minutes % 60

    if hours == 0:
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    elif remaining_minutes == 0:
        return f"{hours} hour{'s' if hours != 1 else ''}"
    else:
        return f"{hours} hour{'s' if hours != 1 else ''} {remaining_minutes} minute{'s' if remaining_minutes != 1 else ''}"
