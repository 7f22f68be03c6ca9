from typing import Any, Iterable


def row_to_dict(obj, exclude: Iterable[str] = ()) -> dict[str, Any]:
    """Column values of an ORM row as a plain dict"""
    if obj is None:
        return None
    skip = set(exclude)
    return {
        column.name: getattr(obj, column.key)
        for column in obj.__table__.columns
        if column.name not in skip
    }
