from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1)
ONE_MS = timedelta(milliseconds=1)


def utcnow():
    """Naive UTC now, truncated to milliseconds like every stored timestamp."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def to_epoch_ms(dt):
    return (dt - EPOCH) // ONE_MS


def from_epoch_ms(ms):
    return EPOCH + timedelta(milliseconds=int(ms))


def to_iso(dt):
    if dt is None:
        return None
    return dt.isoformat(timespec='milliseconds') + 'Z'


def parse_timestamp(value):
    """Parse an ISO-8601 string or epoch milliseconds into naive UTC.

    Raises ValueError for anything else, including booleans and values
    outside the datetime range.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, bool):
        raise ValueError(f'Invalid timestamp: {value!r}')
    elif isinstance(value, (int, float)):
        try:
            return from_epoch_ms(value)
        except OverflowError as e:
            raise ValueError(f'Timestamp out of range: {value!r}') from e
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f'Invalid timestamp: {value!r}')

    if dt.tzinfo is not None:
        try:
            dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
        except OverflowError as e:
            raise ValueError(f'Timestamp out of range: {value!r}') from e
    return dt
