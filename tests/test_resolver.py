"""Unit tests for netinteract.engine.resolver — ${output} / $(input) templates."""

from __future__ import annotations

from conftest import BASE_URL
from netinteract.engine.resolver import lookup_property, resolve


# ---------------------------------------------------------------------------
# 1. Plain substitution
# ---------------------------------------------------------------------------

class TestResolveSubstitution:
    def test_input_placeholder(self, make_context):
        ctx = make_context(inputs={"BaseUrl": "http://shop.test"})
        assert resolve("$(BaseUrl)/title-page", ctx) == "http://shop.test/title-page"

    def test_output_placeholder(self, make_context):
        ctx = make_context(outputs={"title": "Welcome"})
        assert resolve("Title is ${title}", ctx) == "Title is Welcome"

    def test_mixed_placeholders(self, make_context):
        ctx = make_context(inputs={"host": "a.test"}, outputs={"id": "42"})
        assert resolve("http://$(host)/item/${id}?v=$(host)", ctx) == "http://a.test/item/42?v=a.test"

    def test_text_without_placeholders_is_unchanged(self, make_context):
        assert resolve("no templates here", make_context()) == "no templates here"

    def test_none_and_empty_resolve_to_empty_string(self, make_context):
        ctx = make_context()
        assert resolve(None, ctx) == ""
        assert resolve("", ctx) == ""


# ---------------------------------------------------------------------------
# 2. Resolution gaps
# ---------------------------------------------------------------------------

class TestResolveGaps:
    def test_missing_input_becomes_empty(self, make_context):
        assert resolve("[$(nope)]", make_context()) == "[]"

    def test_missing_output_becomes_empty(self, make_context):
        assert resolve("[${nope}]", make_context(inputs={"nope": "input"})) == "[]"

    def test_outputs_and_inputs_are_separate_namespaces(self, make_context):
        ctx = make_context(inputs={"x": "in"}, outputs={"x": "out"})
        assert resolve("$(x)/${x}", ctx) == "in/out"

    def test_unterminated_output_opening_is_literal(self, make_context):
        assert resolve("price ${total", make_context(outputs={"total": "9"})) == "price ${total"

    def test_unterminated_opening_does_not_hide_later_placeholder(self, make_context):
        ctx = make_context(inputs={"a": "1"})
        assert resolve("${broken $(a)", ctx) == "${broken 1"


# ---------------------------------------------------------------------------
# 3. Rescanning
# ---------------------------------------------------------------------------

class TestResolveRescan:
    def test_substituted_value_is_resolved_again(self, make_context):
        ctx = make_context(inputs={"url": "$(host)/x", "host": "h.test"})
        assert resolve("$(url)", ctx) == "h.test/x"

    def test_output_value_referring_to_input(self, make_context):
        ctx = make_context(inputs={"user": "bob"}, outputs={"greeting": "hi $(user)"})
        assert resolve("${greeting}!", ctx) == "hi bob!"


# ---------------------------------------------------------------------------
# 4. Branch property lookup
# ---------------------------------------------------------------------------

class TestLookupProperty:
    def test_property_is_resolved_like_a_template(self, make_context):
        ctx = make_context(inputs={"ShouldLogin": "TRUE"})
        assert lookup_property("$(ShouldLogin)", ctx) == "TRUE"

    def test_missing_property_is_empty(self, make_context):
        assert lookup_property("${missing}", make_context()) == ""


# ---------------------------------------------------------------------------
# 5. Name case
# ---------------------------------------------------------------------------

class TestResolveNameCase:
    def test_names_match_regardless_of_case(self, make_context):
        ctx = make_context(inputs={"BaseUrl": BASE_URL}, outputs={"Title": "T"})
        assert resolve("$(baseurl)/x|${title}", ctx) == "http://shop.test/x|T"

    def test_later_output_write_replaces_case_variant(self, make_context):
        ctx = make_context(outputs={"Title": "old"})
        ctx.outputs["TITLE"] = "new"
        assert resolve("${title}", ctx) == "new"
        assert len(ctx.outputs) == 1

    def test_branch_property_reads_case_variant_input(self, make_context):
        ctx = make_context(inputs={"ShouldLogin": "true"})
        assert lookup_property("$(shouldlogin)", ctx) == "true"
