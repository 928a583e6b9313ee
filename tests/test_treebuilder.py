import io
import random
import time
import unittest
from contextlib import redirect_stdout

from fuzz import generate_fuzzed_html
from minihtml import NodeType, UnclosedElementError, parse
from minihtml import node as dom
from minihtml.recognizers import NODE_RECOGNIZERS, start_tag
from minihtml.tokens import NoMatch
from minihtml.treebuilder import TreeBuilder


class TestScenarios(unittest.TestCase):
    def test_doctype(self):
        root = parse("<!DOCTYPE html>")
        assert root == dom.root([dom.document("html")])
        assert root.children[0].children == []

    def test_comment(self):
        assert parse("<!-- hello -->") == dom.root([dom.comment("hello")])

    def test_self_closing(self):
        assert parse('<img src="a.png"/>') == dom.root([dom.element("img", {"src": "a.png"})])

    def test_element_with_text(self):
        expected = dom.root([dom.element("div", {"class": "x"}, [dom.text("hi")])])
        assert parse('<div class="x"> hi </div>') == expected

    def test_unclosed_element(self):
        with self.assertRaises(UnclosedElementError) as ctx:
            parse("<p>")
        assert ctx.exception.tag_name == "p"
        assert ctx.exception.error.code == "unclosed-element"

    def test_flag_attribute(self):
        root = parse(" <tag html/>")
        assert root.children[0].attributes == {"html": "yes"}


class TestTreeShape(unittest.TestCase):
    def test_empty_documents(self):
        assert parse("") == dom.root()
        assert parse("  \n\t") == dom.root()

    def test_nesting(self):
        root = parse("<html><body><p>a</p><p>b</p></body></html>")
        expected = dom.root([
            dom.element("html", children=[
                dom.element("body", children=[
                    dom.element("p", children=[dom.text("a")]),
                    dom.element("p", children=[dom.text("b")]),
                ]),
            ]),
        ])
        assert root == expected

    def test_mixed_text_and_comments(self):
        assert parse("a<!-- c -->b") == dom.root([dom.text("a"), dom.comment("c"), dom.text("b")])

    def test_whitespace_between_tags_is_not_text(self):
        root = parse("<!DOCTYPE html>\n<ul>\n  <li>x</li>\n</ul>\n")
        ul = root.children[1]
        assert len(root.children) == 2
        assert ul.children == [dom.element("li", children=[dom.text("x")])]

    def test_full_document(self):
        html = (
            "<!DOCTYPE html>\n"
            "<html lang=en>\n"
            "  <!-- header -->\n"
            "  <head><meta charset='utf-8'/><title>Page</title></head>\n"
            "  <body hidden>\n"
            '    <img src="a.png" alt=""/>\n'
            "    Hello world\n"
            "  </body>\n"
            "</html>\n"
        )
        root = parse(html)
        assert [child.node_type for child in root.children] == [NodeType.DOCUMENT, NodeType.ELEMENT]
        html_node = root.children[1]
        assert html_node.attributes == {"lang": "en"}
        comment, head, body = html_node.children
        assert comment == dom.comment("header")
        assert head.children[0] == dom.element("meta", {"charset": "utf-8"})
        assert head.children[1] == dom.element("title", children=[dom.text("Page")])
        assert body.attributes == {"hidden": "yes"}
        assert body.children == [dom.element("img", {"src": "a.png", "alt": ""}), dom.text("Hello world")]

    def test_root_appears_once(self):
        root = parse("<a><b/></a><c>t</c>")
        kinds = [node.node_type for node in root.iter()]
        assert kinds.count(NodeType.ROOT) == 1
        assert kinds[0] is NodeType.ROOT

    def test_deep_nesting_does_not_recurse(self):
        depth = 5000
        root = parse("<div>" * depth + "x" + "</div>" * depth)
        assert sum(1 for node in root.iter() if node.node_type is NodeType.ELEMENT) == depth
        assert root == parse("<div>" * depth + "x" + "</div>" * depth)


class TestTagMatching(unittest.TestCase):
    def test_matching_tags(self):
        for tag in ("T", "div", "h1", "Custom9"):
            for body in ("body", "<b>x</b>", "<!-- c -->", "<br/>"):
                root = parse(f'<{tag} a="1">{body}</{tag}>')
                node = root.children[0]
                assert node.tag_name == tag
                assert node.attributes == {"a": "1"}
                assert len(node.children) == 1

    def test_mismatched_close_tag(self):
        errors = []
        with self.assertRaises(UnclosedElementError) as ctx:
            parse('<T a="1">body</X>', on_error=errors.append)
        assert ctx.exception.tag_name == "T"
        assert [e.code for e in errors] == ["unrecognized-unit"]

    def test_close_tag_case_must_match(self):
        with self.assertRaises(UnclosedElementError):
            parse("<DIV></div>")

    def test_missing_inner_close(self):
        with self.assertRaises(UnclosedElementError) as ctx:
            parse("<div><p>text</div>")
        assert ctx.exception.tag_name == "p"


class TestRecovery(unittest.TestCase):
    def test_stray_end_tag_is_skipped(self):
        errors = []
        root = parse("</p>hello", on_error=errors.append)
        assert root == dom.root([dom.text("hello")])
        assert len(errors) == 1
        assert errors[0].code == "unrecognized-unit"
        assert errors[0].column == 1

    def test_bad_tag_is_skipped_up_to_close_chevron(self):
        errors = []
        root = parse('<a"x">hello', on_error=errors.append)
        assert root == dom.root([dom.text("hello")])
        assert [e.code for e in errors] == ["unrecognized-unit"]

    def test_comment_with_dash_is_skipped(self):
        errors = []
        root = parse("<!-- a-b -->after", on_error=errors.append)
        assert root == dom.root([dom.text("after")])
        assert len(errors) == 1

    def test_lone_open_chevron_at_end(self):
        errors = []
        root = parse("x <", on_error=errors.append)
        assert root == dom.root([dom.text("x")])
        assert len(errors) == 1

    def test_malformed_attribute_keeps_element(self):
        errors = []
        root = parse("<a src=a.png/>", on_error=errors.append)
        assert root == dom.root([dom.element("a")])
        assert [e.code for e in errors] == ["malformed-attribute"]

    def test_attribute_errors_of_rejected_tags_are_not_reported(self):
        errors = []
        parse('<img src=a.png "/>', on_error=errors.append)
        assert [e.code for e in errors] == ["unrecognized-unit"]


class TestDebugOutput(unittest.TestCase):
    def test_debug_trace(self):
        out = io.StringIO()
        with redirect_stdout(out):
            TreeBuilder("<div><br/></div>", debug=True).build()
        trace = out.getvalue()
        assert "#root" in trace
        assert "<div>" in trace
        assert "</div>" in trace

    def test_silent_by_default(self):
        out = io.StringIO()
        with redirect_stdout(out):
            parse("<div><br/></div>")
        assert out.getvalue() == ""


class TestProperties(unittest.TestCase):
    def test_determinism(self):
        rng = random.Random(7)
        for _ in range(100):
            html = generate_fuzzed_html(rng)
            try:
                first = parse(html)
            except UnclosedElementError:
                with self.assertRaises(UnclosedElementError):
                    parse(html)
                continue
            assert first == parse(html)

    def test_every_success_advances(self):
        rng = random.Random(11)
        recognizers = (*NODE_RECOGNIZERS, start_tag)
        for _ in range(100):
            html = generate_fuzzed_html(rng)[:2000]
            for pos in sorted({0, len(html) // 3, len(html) // 2, len(html)} | {i for i, c in enumerate(html) if c == "<"}):
                for recognizer in recognizers:
                    try:
                        _, new_pos = recognizer(html, pos, [])
                    except NoMatch:
                        continue
                    assert new_pos > pos, (recognizer.__name__, html, pos)

    def test_parse_terminates_on_fuzzed_input(self):
        rng = random.Random(3)
        for _ in range(200):
            html = generate_fuzzed_html(rng)
            errors = []
            try:
                root = parse(html, on_error=errors.append)
            except UnclosedElementError:
                continue
            assert root.node_type is NodeType.ROOT


class ScanCountingStr(str):
    """A str that tallies how many characters its find/rfind/count calls look at."""

    def __new__(cls, value):
        self = super().__new__(cls, value)
        self.scanned = 0
        return self

    def _bounds(self, start, end):
        return start or 0, len(self) if end is None else end

    def find(self, sub, start=None, end=None):
        start, end = self._bounds(start, end)
        result = super().find(sub, start, end)
        self.scanned += (end if result == -1 else result + len(sub)) - start
        return result

    def rfind(self, sub, start=None, end=None):
        start, end = self._bounds(start, end)
        result = super().rfind(sub, start, end)
        self.scanned += end - (start if result == -1 else result)
        return result

    def count(self, sub, start=None, end=None):
        start, end = self._bounds(start, end)
        self.scanned += end - start
        return super().count(sub, start, end)


class TestRecoveryScaling(unittest.TestCase):
    # Recovery work per skipped unit must not grow with the document.

    def _assert_linear(self, html):
        source = ScanCountingStr(html)
        errors = []
        parse(source, on_error=errors.append)
        assert source.scanned <= 10 * len(html), (len(html), source.scanned)
        return errors

    def test_many_lone_chevrons(self):
        errors = self._assert_linear("<" * 20_000)
        assert len(errors) == 20_000
        assert (errors[-1].line, errors[-1].column) == (1, 20_000)

    def test_many_lone_chevrons_on_separate_lines(self):
        errors = self._assert_linear("\n<" * 20_000)
        assert len(errors) == 20_000
        assert (errors[-1].line, errors[-1].column) == (20_001, 1)

    def test_many_malformed_attributes(self):
        errors = self._assert_linear("<a x=@>\n</a>" * 5_000)
        assert len(errors) == 5_000
        assert {e.code for e in errors} == {"malformed-attribute"}
        assert (errors[0].line, errors[0].column) == (1, 4)
        assert (errors[-1].line, errors[-1].column) == (5_000, 8)

    def test_large_input_within_fuzzer_hang_threshold(self):
        html = "\n<" * 100_000
        start = time.perf_counter()
        parse(html, on_error=[].append)
        elapsed = time.perf_counter() - start
        assert elapsed < 5.0, f"{len(html)} chars took {elapsed:.2f}s"


if __name__ == "__main__":
    unittest.main()
