"""
Generic helper library for the core REST API
"""

import math
import urllib.parse
from typing import Optional, Sequence

from .. import schemas
from ..schemas import config


def _link(base_url: str, limit: int, offset: int) -> str:
    return f"{base_url}?{urllib.parse.urlencode({'limit': limit, 'offset': offset})}"


def paginate(
        items: Sequence[schemas.Emission],
        base_url: str,
        general: config.GeneralConfig,
        limit: Optional[int] = None,
        offset: Optional[int] = None
) -> schemas.EmissionPage:
    """
    Return one page of the given items together with the pagination metadata and links

    :param items: complete sequence of items which should be split into pages
    :param base_url: path of the endpoint used to construct the navigation links
    :param general: general config defining the default and maximum page size
    :param limit: requested page size (missing or non-positive values select the
        default page size, values above the maximum page size are lowered to it)
    :param offset: index of the first item of the page (negative values are treated as 0)
    :return: page of items with its metadata
    """

    if not limit or limit <= 0:
        limit = general.default_page_size
    limit = min(limit, general.max_page_size)
    offset = max(offset or 0, 0)

    total = len(items)
    total_pages = math.ceil(total / limit)
    return schemas.EmissionPage(
        data=items[offset:offset + limit],
        pagination=schemas.Pagination(
            total_records=total,
            records_per_page=limit,
            current_page=offset // limit + 1,
            total_pages=total_pages,
            offset=offset,
            links=schemas.PaginationLinks(
                self=_link(base_url, limit, offset),
                first=_link(base_url, limit, 0),
                last=_link(base_url, limit, max(0, (total_pages - 1) * limit)),
                next=_link(base_url, limit, offset + limit) if offset + limit < total else None,
                prev=_link(base_url, limit, max(0, offset - limit)) if offset > 0 else None
            )
        )
    )
