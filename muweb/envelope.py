"""The single response envelope used by every route."""
import math


def ok(data=None, message=None, pagination=None):
    body = {"success": True, "data": data}
    if pagination is not None:
        body["pagination"] = pagination
    if message is not None:
        body["message"] = message
    return body


def failure(error):
    return {"success": False, "error": error}


def total_pages(total, limit):
    if limit <= 0:
        return 0
    return math.ceil(total / limit)


class Page:
    """Validated page/limit pair from query parameters."""

    def __init__(self, page=1, limit=10, max_limit=100):
        self.page = max(int(page or 1), 1)
        self.limit = min(max(int(limit or 1), 1), max_limit)

    @property
    def offset(self):
        return (self.page - 1) * self.limit

    def pagination(self, total):
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "totalPages": total_pages(total, self.limit),
        }
