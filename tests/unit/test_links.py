"""Tests for Link header generation."""

from urllib.parse import parse_qs, urlparse

from cursor_paginate.pagination.links import create_link_header


BASE_URL = "http://testserver/v1/collections/notes/documents"


def _links(header):
    """Map rel -> parsed query of each link."""
    result = {}
    for part in header.split(", "):
        url, rel = part.split("; ")
        query = parse_qs(urlparse(url.strip("<>")).query)
        result[rel.split("=")[1].strip('"')] = query
    return result


class TestCreateLinkHeader:
    """Test create_link_header."""
    
    def test_no_cursors(self):
        assert create_link_header(BASE_URL, {"limit": 10}) is None
    
    def test_next_only(self):
        header = create_link_header(BASE_URL, {"limit": 10, "order": "desc"}, next_cursor="abc")
        
        assert header == f'<{BASE_URL}?limit=10&order=desc&nextCursor=abc>; rel="next"'
    
    def test_both_links(self):
        header = create_link_header(
            BASE_URL,
            {"limit": 5, "order": "asc", "sortBy": "created_at"},
            next_cursor="n1",
            prev_cursor="p1"
        )
        
        links = _links(header)
        assert set(links) == {"next", "prev"}
        assert links["next"] == {
            "limit": ["5"], "order": ["asc"], "sortBy": ["created_at"], "nextCursor": ["n1"]
        }
        assert links["prev"]["prevCursor"] == ["p1"]
        assert "nextCursor" not in links["prev"]
    
    def test_none_params_dropped(self):
        header = create_link_header(BASE_URL, {"limit": 10, "sortBy": None}, prev_cursor="p1")
        
        assert "sortBy" not in header
        assert header.endswith('rel="prev"')
    
    def test_cursor_is_url_encoded(self):
        header = create_link_header(BASE_URL, {}, next_cursor="a=b&c")
        
        assert "nextCursor=a%3Db%26c" in header
