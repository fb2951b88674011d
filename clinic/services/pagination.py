import math


def paginate(qs, *, page: int, limit: int):
    """Slice ``qs`` for one page and build the pagination block clients expect."""
    total = qs.count()
    start = (page - 1) * limit
    items = list(qs[start:start + limit])
    return items, {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': math.ceil(total / limit) if limit else 0,
    }
