"""Common helpers for API schemas."""


def page_count(total: int, per_page: int) -> int:
    return (total + per_page - 1) // per_page if total > 0 else 0
