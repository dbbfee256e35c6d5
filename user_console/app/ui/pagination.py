from __future__ import annotations

import math

DEFAULT_PAGE_SIZE = 10


def page_count(total: int, page_size: int) -> int:
    return max(1, math.ceil(total / max(1, page_size)))


def clamp_page_index(page_index: int, pages: int) -> int:
    return min(max(0, page_index), max(1, pages) - 1)
