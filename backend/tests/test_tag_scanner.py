from wxformat.markup.tag_scanner import TagKind, TagScanner, classify_tag, leading_tag, scan_tags


def test_scan_tags_classifies_and_records_offsets():
    markup = '<div class="a"><br><img src="x"/></div>'
    tokens = list(scan_tags(markup))

    assert [t.name for t in tokens] == ["div", "br", "img", "div"]
    assert [t.kind for t in tokens] == [TagKind.START, TagKind.SELF_CLOSING, TagKind.SELF_CLOSING, TagKind.END]
    first = tokens[0]
    assert first.raw_text == '<div class="a">'
    assert (first.start_offset, first.end_offset) == (0, 15)
    for token in tokens:
        assert markup[token.start_offset : token.end_offset] == token.raw_text


def test_tag_names_are_lowercased():
    tokens = list(scan_tags("<DIV><P>x</p></Div>"))
    assert [t.name for t in tokens] == ["div", "p", "p", "div"]


def test_trailing_slash_marks_any_tag_self_closing():
    assert classify_tag("<p/>", "p") == TagKind.SELF_CLOSING
    assert classify_tag("<custom />", "custom") == TagKind.SELF_CLOSING
    assert classify_tag("<HR>", "HR") == TagKind.SELF_CLOSING
    assert classify_tag("</br>", "br") == TagKind.END


def test_malformed_fragments_are_skipped():
    assert list(scan_tags("a < b > c <p")) == []
    assert list(scan_tags("<!DOCTYPE html>")) == []
    assert list(scan_tags("")) == []
    assert list(scan_tags(None)) == []


def test_scanner_restarts_on_each_iteration():
    scanner = TagScanner("<p>a</p><p>b</p>")
    first = list(scanner)
    second = list(scanner)
    assert len(first) == 4
    assert first == second


def test_leading_tag_only_matches_at_line_start():
    assert leading_tag("hello <b>x</b>") is None
    token = leading_tag("</section>")
    assert token is not None
    assert token.kind == TagKind.END
    assert token.name == "section"
