"""RFC 8288 Link headers for paginated responses."""

from typing import Any, Dict, Optional
from urllib.parse import urlencode


def create_link_header(
    base_url: str,
    params: Dict[str, Any],
    next_cursor: Optional[str] = None,
    prev_cursor: Optional[str] = None
) -> Optional[str]:
    """Create a Link header pointing at the neighbouring pages.
    
    Args:
        base_url: URL of the resource without a query string
        params: Query parameters shared by every page (limit, order, sortBy)
        next_cursor: Cursor for the next page
        prev_cursor: Cursor for the previous page
        
    Returns:
        Link header value or None if there is no neighbouring page
    """
    shared = {k: v for k, v in params.items() if v is not None}
    links = []
    
    if next_cursor:
        query = urlencode({**shared, "nextCursor": next_cursor})
        links.append(f'<{base_url}?{query}>; rel="next"')
    
    if prev_cursor:
        query = urlencode({**shared, "prevCursor": prev_cursor})
        links.append(f'<{base_url}?{query}>; rel="prev"')
    
    return ", ".join(links) if links else None
