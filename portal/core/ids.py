from portal.core.errors import NotFoundError


def parse_id(raw, what: str) -> int:
    """Turn a path/body id into an int; malformed ids read as "not found"."""
    if isinstance(raw, bool):
        raise NotFoundError(f"{what} not found")
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        raise NotFoundError(f"{what} not found")
    if value <= 0:
        raise NotFoundError(f"{what} not found")
    return value
