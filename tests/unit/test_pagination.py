"""Tests for cursor pagination helpers.

Verifies:
- parse_link_cursors extracts ``after`` from rel="next" and ``before`` from rel="prev".
- PageInfo derives has-next/has-previous from cursor presence and omits absent cursors.
- PaginationOptions never sends empty cursors and clamps oversized page sizes.
"""

from projects_mcp.connectors.pagination import (
    MAX_PROJECTS_PER_PAGE,
    PageCursor,
    PageInfo,
    PaginationOptions,
    clamp_per_page,
    parse_link_cursors,
)


class TestParseLinkCursors:
    """Tests for Link header cursor extraction."""

    def test_next_and_prev(self):
        header = (
            '<https://api.github.com/orgs/acme/projectsV2?per_page=2&after=Y3Vyc29yOjI%3D>; rel="next", '
            '<https://api.github.com/orgs/acme/projectsV2?per_page=2&before=Y3Vyc29yOjE%3D>; rel="prev"'
        )
        cursor = parse_link_cursors(header)
        assert cursor.after == "Y3Vyc29yOjI="
        assert cursor.before == "Y3Vyc29yOjE="

    def test_next_only(self):
        header = '<https://api.github.com/users/octo/projectsV2/1/items?after=abc>; rel="next"'
        cursor = parse_link_cursors(header)
        assert cursor.after == "abc"
        assert cursor.before is None

    def test_missing_header(self):
        assert parse_link_cursors(None) == PageCursor()
        assert parse_link_cursors("") == PageCursor()

    def test_ignores_other_relations(self):
        header = '<https://api.github.com/x?after=zzz>; rel="last", <https://api.github.com/x?page=1>; rel="first"'
        cursor = parse_link_cursors(header)
        assert cursor.after is None
        assert cursor.before is None

    def test_next_link_without_after_param(self):
        header = '<https://api.github.com/x?page=2>; rel="next"'
        assert parse_link_cursors(header).after is None


class TestPageInfo:
    """Tests for PageInfo payloads."""

    def test_empty_cursors_omit_fields(self):
        info = PageInfo.from_cursor(PageCursor(after="", before=""))
        assert info.to_payload() == {"hasNextPage": False, "hasPreviousPage": False}

    def test_forward_cursor_only(self):
        info = PageInfo.from_cursor(PageCursor(after="next-token"))
        payload = info.to_payload()
        assert payload == {
            "hasNextPage": True,
            "hasPreviousPage": False,
            "nextCursor": "next-token",
        }
        assert "prevCursor" not in payload

    def test_both_cursors(self):
        info = PageInfo.from_cursor(PageCursor(after="n", before="p"))
        assert info.hasNextPage is True
        assert info.hasPreviousPage is True
        assert info.to_payload()["prevCursor"] == "p"


class TestPaginationOptions:
    """Tests for request-side pagination options."""

    def test_default_page_size_is_maximum(self):
        assert PaginationOptions.from_request().per_page == MAX_PROJECTS_PER_PAGE

    def test_oversized_request_is_clamped(self):
        assert PaginationOptions.from_request(per_page=500).per_page == 50

    def test_small_request_kept(self):
        assert PaginationOptions.from_request(per_page=10).per_page == 10

    def test_empty_cursors_not_sent(self):
        params = PaginationOptions.from_request(per_page=20, after="", before=None).to_params()
        assert params == {"per_page": 20}

    def test_cursors_echoed_verbatim(self):
        params = PaginationOptions.from_request(after="opaque==", before="b").to_params()
        assert params["after"] == "opaque=="
        assert params["before"] == "b"

    def test_clamp_helper(self):
        assert clamp_per_page(None) == 50
        assert clamp_per_page(51) == 50
        assert clamp_per_page(120, maximum=100) == 100
