"""Tests for note enrichment — token grammar, rendering and config."""

import re
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest

from lotus_streams import Enricher, EnricherConfig, escape_html, scan, to_html
from lotus_streams.config import create_enricher, load_config, load_from_yaml


_INJECTED = re.compile(r"<a href='[^']*'>|</a>")


def _outside_anchors(html: str) -> str:
    return _INJECTED.sub("", html)


# ── Escaper ──────────────────────────────────────────────────────────

def test_escape_all_specials():
    assert escape_html("<a href=\"x\">Tom & Jerry's</a>") == (
        "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&#39;s&lt;/a&gt;"
    )


def test_escape_leaves_everything_else():
    assert escape_html("plain text, #1 ünïcödé") == "plain text, #1 ünïcödé"


def test_empty_input():
    assert to_html("") == ""


def test_whitespace_and_punctuation_only():
    assert to_html("  \n\t ") == "  \n\t "
    assert to_html("...!?;:") == "...!?;:"


def test_control_characters_and_lone_surrogates():
    assert to_html("\x00\x01\x02") == "\x00\x01\x02"
    assert to_html("\ud800 @") == "\ud800 @"


def test_no_raw_specials_outside_anchors():
    text = """<script>alert("x")</script> & 'q' @bob http://x.com/?a=1&b=2 #tag"""
    html = to_html(text)
    rest = _outside_anchors(html)
    for ch in "<>\"'":
        assert ch not in rest
    assert re.search(r"&(?!amp;|lt;|gt;|quot;|#39;)", rest) is None
    assert html.count("<a href=") == 3


def test_not_idempotent():
    once = to_html("Tom & Jerry")
    assert once == "Tom &amp; Jerry"
    # Single pass only: a second run escapes the entities again
    assert to_html(once) == "Tom &amp;amp; Jerry"


# ── Links ────────────────────────────────────────────────────────────

def test_link_trailing_period_left_outside():
    assert to_html("see http://example.com/page.") == (
        "see <a href='http://example.com/page'>http://example.com/page</a>."
    )


def test_link_in_parentheses():
    assert to_html("(see https://x.com/page)") == (
        "(see <a href='https://x.com/page'>https://x.com/page</a>)"
    )


def test_link_with_ampersand_is_escaped_once():
    assert to_html("go to http://x.com/a&b.") == (
        "go to <a href='http://x.com/a&amp;b'>http://x.com/a&amp;b</a>."
    )


def test_link_never_ends_inside_an_entity():
    assert to_html("see http://x.com/<") == (
        "see <a href='http://x.com/'>http://x.com/</a>&lt;"
    )


def test_link_ending_in_brace():
    assert to_html("http://x.com/{id}") == (
        "<a href='http://x.com/{id}'>http://x.com/{id}</a>"
    )


def test_link_swallows_mention_and_hashtag():
    html = to_html("http://x.com/?q=@me#frag")
    assert html == "<a href='http://x.com/?q=@me#frag'>http://x.com/?q=@me#frag</a>"
    assert "href='#'" not in html
    assert "search=" not in html


def test_no_link_without_scheme():
    assert to_html("example.com and ftp://x.org") == "example.com and ftp://x.org"


# ── Mentions ─────────────────────────────────────────────────────────

def test_mention_keeps_boundary():
    assert to_html("hello @alice how are you") == (
        "hello <a href='#'>@alice</a> how are you"
    )


def test_mention_domain_consumed_not_rendered():
    assert to_html("cc @bob@example") == "cc <a href='#'>@bob</a>"


def test_mention_domain_with_dots():
    html = to_html("cc @bob@example.org.")
    assert html == "cc <a href='#'>@bob</a>."


def test_lone_at_sign():
    assert to_html("no mention: @.") == "no mention: @."
    assert to_html("@") == "@"
    assert to_html("a @ b") == "a @ b"


def test_single_character_mention():
    assert to_html("@a") == "<a href='#'>@a</a>"


def test_mention_trailing_punctuation():
    assert to_html("thanks @carol!") == "thanks <a href='#'>@carol</a>!"
    assert to_html("@dave, @erin; @frank:") == (
        "<a href='#'>@dave</a>, <a href='#'>@erin</a>; <a href='#'>@frank</a>:"
    )


def test_mention_inside_brackets():
    assert to_html("(@alice) [@bob] {@carol}") == (
        "(<a href='#'>@alice</a>) [<a href='#'>@bob</a>] {<a href='#'>@carol</a>}"
    )


def test_mention_inside_quotes():
    assert to_html("\"@alice\" and '@bob'") == (
        "&quot;<a href='#'>@alice</a>&quot; and &#39;<a href='#'>@bob</a>&#39;"
    )


def test_email_is_not_a_mention():
    assert to_html("mail bob@example.com") == "mail bob@example.com"


def test_trailing_at_after_mention():
    assert to_html("@alice@") == "<a href='#'>@alice</a>@"


def test_mention_stops_at_url_characters():
    assert to_html("@bob?x") == "<a href='#'>@bob</a>?x"
    assert to_html("@bob/x") == "<a href='#'>@bob</a>/x"


def test_mention_before_glued_link():
    assert to_html("@bobhttp://x.com") == (
        "<a href='#'>@bob</a><a href='http://x.com'>http://x.com</a>"
    )


def test_nothing_right_after_a_link_is_a_mention():
    assert to_html("http://x.com@(") == "<a href='http://x.com'>http://x.com</a>@("


# ── Hashtags ─────────────────────────────────────────────────────────

def test_hashtag():
    assert to_html("big #Announcement today") == (
        "big <a href='/search?search=%23Announcement'>#Announcement</a> today"
    )


def test_hashtag_at_start_and_unicode():
    assert to_html("#日本 rocks") == (
        "<a href='/search?search=%23日本'>#日本</a> rocks"
    )


def test_hashtag_needs_whitespace_before():
    assert to_html("a#b (#c)") == "a#b (#c)"


def test_hashtag_stops_at_punctuation():
    assert to_html("so #cool!") == "so <a href='/search?search=%23cool'>#cool</a>!"


def test_hashtag_with_underscore_and_digits():
    assert to_html(" #tag_2024") == " <a href='/search?search=%23tag_2024'>#tag_2024</a>"


def test_hashtag_keeps_combining_marks():
    # decomposed "café": the accent is a separate code point
    assert to_html("#cafe\u0301 x") == (
        "<a href='/search?search=%23cafe\u0301'>#cafe\u0301</a> x"
    )
    assert to_html("#हिन्दी rocks") == (
        "<a href='/search?search=%23हिन्दी'>#हिन्दी</a> rocks"
    )


def test_hashtag_connector_punctuation():
    assert to_html("#a‿b x") == "<a href='/search?search=%23a‿b'>#a‿b</a> x"


def test_hashtag_boundary_is_ascii_whitespace():
    assert to_html("a\u00a0#tag") == "a\u00a0#tag"
    assert to_html("x\n#tag\t#two") == (
        "x\n<a href='/search?search=%23tag'>#tag</a>\t"
        "<a href='/search?search=%23two'>#two</a>"
    )


# ── Orchestration ────────────────────────────────────────────────────

def test_override_returns_html_verbatim():
    assert to_html("@alice http://x.com", html="<p>pre</p>") == "<p>pre</p>"


def test_empty_override_is_ignored():
    assert to_html("@a", html="") == "<a href='#'>@a</a>"


def test_all_three_kinds():
    html = to_html("hi @alice, see http://example.com #news")
    assert html == (
        "hi <a href='#'>@alice</a>, see "
        "<a href='http://example.com'>http://example.com</a> "
        "<a href='/search?search=%23news'>#news</a>"
    )


def test_enrich_returns_spans():
    result = Enricher().enrich("x <y> @bob")
    assert result.html == "x &lt;y&gt; <a href='#'>@bob</a>"
    assert [s.kind for s in result.spans] == ["mention"]


def test_override_has_no_spans():
    result = Enricher().enrich("@bob", html="<b>hi</b>")
    assert result.html == "<b>hi</b>"
    assert result.spans == []


# ── Tokenizer ────────────────────────────────────────────────────────

def test_scan_spans_sorted_with_values():
    text = "cc @bob@example.org #x http://y.com"
    spans = scan(text)
    assert [s.kind for s in spans] == ["mention", "hashtag", "link"]

    mention, hashtag, link = spans
    assert (mention.start, mention.end) == (3, 19)
    assert mention.text == "@bob@example.org"
    assert mention.value == "bob"
    assert mention.domain == "example.org"
    assert (hashtag.start, hashtag.end, hashtag.value) == (20, 22, "x")
    assert link.value == "http://y.com"
    assert text[link.start:link.end] == "http://y.com"


def test_scan_spans_never_overlap():
    spans = scan("@a http://x.com/@b#c #d @e@f (@g) #h@i")
    for prev, cur in zip(spans, spans[1:]):
        assert prev.end <= cur.start


def test_scan_kinds_filter():
    spans = scan("@a #b http://c.com", kinds=["hashtag"])
    assert [s.kind for s in spans] == ["hashtag"]


def test_scan_empty():
    assert scan("") == []


# ── Config ───────────────────────────────────────────────────────────

def test_skip_kinds():
    e = Enricher(EnricherConfig(skip_kinds={"hashtag"}))
    assert e.to_html("#tag @bob") == "#tag <a href='#'>@bob</a>"


def test_mention_resolver():
    e = Enricher(EnricherConfig(mention_resolver=lambda u, d: f"https://{d or 'local'}/{u}"))
    assert e.to_html("hi @bob@ex.org") == "hi <a href='https://ex.org/bob'>@bob</a>"
    assert e.to_html("hi @bob") == "hi <a href='https://local/bob'>@bob</a>"


def test_resolver_returning_none_falls_back():
    e = Enricher(EnricherConfig(mention_resolver=lambda u, d: None, mention_href="/people"))
    assert e.to_html("@bob") == "<a href='/people'>@bob</a>"


def test_resolver_url_is_escaped():
    e = Enricher(EnricherConfig(mention_resolver=lambda u, d: f"/u?name={u}&x='1'"))
    assert e.to_html("@bob") == "<a href='/u?name=bob&amp;x=&#39;1&#39;'>@bob</a>"


def test_search_path():
    e = Enricher(EnricherConfig(search_path="/tags?q="))
    assert e.to_html(" #x") == " <a href='/tags?q=%23x'>#x</a>"


def test_load_config_defaults():
    cfg = load_config({})
    assert cfg["enabled"] is True
    assert cfg["search_path"] == "/search?search="
    assert cfg["mention_href"] == "#"
    assert cfg["skip_kinds"] == set()


def test_load_config_nested():
    cfg = load_config({"lotus_streams": {"skip_kinds": ["link"], "mention_href": "/u"}})
    assert cfg["skip_kinds"] == {"link"}
    assert cfg["mention_href"] == "/u"


def test_load_config_rejects_unknown_kind():
    with pytest.raises(ValueError):
        load_config({"skip_kinds": ["emoji"]})


def test_load_from_yaml(tmp_path):
    path = tmp_path / "lotus.yaml"
    path.write_text(
        "lotus_streams:\n"
        "  mention_template: 'https://{domain}/users/{username}'\n"
        "  default_domain: example.org\n"
        "  skip_kinds:\n"
        "    - hashtag\n"
    )
    e = create_enricher(load_from_yaml(path))
    assert e.to_html("@bob #x") == "<a href='https://example.org/users/bob'>@bob</a> #x"
    assert e.to_html("@bob@other.net") == "<a href='https://other.net/users/bob'>@bob</a>"


def test_template_without_domain_keeps_placeholder():
    e = create_enricher({"mention_template": "https://{domain}/@{username}"})
    assert e.to_html("@bob") == "<a href='#'>@bob</a>"


def test_disabled_escapes_only():
    e = create_enricher({"enabled": False})
    assert e.to_html("<b> @bob") == "&lt;b&gt; @bob"
    assert e.to_html("x", html="<p>y</p>") == "<p>y</p>"


def test_template_with_username_only():
    e = create_enricher({"mention_template": "/u/{username}"})
    assert e.to_html("@bob and @amy@x.org") == (
        "<a href='/u/bob'>@bob</a> and <a href='/u/amy'>@amy</a>"
    )


@pytest.mark.parametrize("template", [
    "https://x.org/{user}",
    "https://x.org/{}",
    "https://x.org/{0}",
    "https://x.org/{username!r}",
    "https://x.org/{username:>10}",
    "https://{",
    "https://x.org/}",
])
def test_bad_template_rejected_at_load(template):
    with pytest.raises(ValueError):
        load_config({"mention_template": template})
    with pytest.raises(ValueError):
        create_enricher({"mention_template": template})


def test_template_must_be_a_string():
    with pytest.raises(ValueError):
        load_config({"mention_template": 5})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
