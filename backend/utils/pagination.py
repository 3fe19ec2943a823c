from sqlalchemy import or_

MAX_PER_PAGE = 100


def search_and_paginate(query, search_term, columns, page=1, per_page=20):
    """
    Filters query with a case-insensitive substring match over columns and
    returns one page of it.

    Args:
      query: base SQLAlchemy query
      search_term: text to look for; blank means no filter
      columns: model column attributes, e.g. [Student.id, Student.name]
      page: 1-based page number, values below 1 are treated as 1
      per_page: page size, clamped to 1..MAX_PER_PAGE

    Returns:
      Flask-SQLAlchemy Pagination (.items, .total, .page, .pages)
    """
    search_term = (search_term or "").strip()
    if search_term:
        query = query.filter(or_(*[col.ilike(f"%{search_term}%") for col in columns]))

    page = max(page or 1, 1)
    per_page = min(max(per_page or 20, 1), MAX_PER_PAGE)

    return query.paginate(page=page, per_page=per_page, error_out=False)


def page_payload(pagination, key, serialize):
    return {
        key: [serialize(item) for item in pagination.items],
        "total": pagination.total,
        "page": pagination.page,
        "pages": pagination.pages,
    }
