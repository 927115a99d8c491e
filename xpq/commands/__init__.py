from xpq.commands import count, frequency, read, sample, schema

COMMANDS = {
    "schema": schema,
    "count": count,
    "read": read,
    "sample": sample,
    "frequency": frequency,
}

__all__ = ["COMMANDS"]
