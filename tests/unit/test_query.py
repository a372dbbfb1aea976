"""
Tests for OData query options
"""

import pytest

from bcconnector.client import ODataQuery, quote_literal


@pytest.mark.unit
class TestODataQuery:
    def test_empty_query_has_no_params(self):
        assert ODataQuery().to_params() == {}

    def test_all_options(self):
        query = ODataQuery(
            filter="blocked eq false",
            select=("id", "number", "displayName"),
            orderby="number",
            top=50,
            skip=0,
            expand=("picture",),
            count=True,
        )

        assert query.to_params() == {
            "$filter": "blocked eq false",
            "$select": "id,number,displayName",
            "$orderby": "number",
            "$top": "50",
            "$skip": "0",
            "$expand": "picture",
            "$count": "true",
        }

    @pytest.mark.parametrize("options", [{"top": -1}, {"skip": -5}])
    def test_negative_paging_rejected(self, options):
        with pytest.raises(ValueError):
            ODataQuery(**options)

    def test_quote_literal_doubles_quotes(self):
        assert quote_literal("Coho Winery") == "'Coho Winery'"
        assert quote_literal("O'Brien's") == "'O''Brien''s'"
