import types

import pytest

from tagscope.tagscope_renderer import Renderer, LambdaHelper, SectionNode, VariableNode, TextNode
from tagscope.tagscope_context import Context
from tagscope.tagscope_datatypes import TemplateSyntaxError, PathSyntaxError, ResolutionDepthError


@pytest.fixture
def renderer():
    return Renderer()


class User:
    def __init__(self, name):
        self.name = name

    def greet(self, greeting, who):
        return f"{greeting}, {who}"


# --- Variables ---

def test_variable(renderer):
    assert renderer.render("Hello {{name}}!", {"name": "World"}) == "Hello World!"
    assert renderer.render("Hello {{ name }}!", {"name": "World"}) == "Hello World!"


def test_missing_and_none_render_empty(renderer):
    assert renderer.render("[{{nothing}}]", {}) == "[]"
    assert renderer.render("[{{x}}]", {"x": None}) == "[]"
    assert renderer.render("[{{x}}]") == "[]"


def test_escaping(renderer):
    data = {"x": "<b>&</b>"}
    assert renderer.render("{{x}}", data) == "&lt;b&gt;&amp;&lt;/b&gt;"
    assert renderer.render("{{{x}}}", data) == "<b>&</b>"
    assert renderer.render("{{& x}}", data) == "<b>&</b>"


def test_custom_escape():
    assert Renderer(escape=lambda s: s).render("{{x}}", {"x": "<i>"}) == "<i>"


def test_comment(renderer):
    assert renderer.render("a{{! hidden }}b", {}) == "ab"


def test_dotted_and_call_tags(renderer):
    data = {"name": "Ann", "user": User("Bob"), "child": {"name": "Tim"}}
    assert renderer.render("{{child.name}}", data) == "Tim"
    assert renderer.render('{{user.greet("Hi", name)}}', data) == "Hi, Ann"


def test_variable_lambda_result_is_rendered(renderer):
    data = {"name": "x", "now": lambda: "{{name}}!"}
    assert renderer.render("{{now}}", data) == "x!"


# --- Sections ---

def test_list_section_pushes_each_item(renderer):
    data = {"items": [{"name": "a"}, {"name": "b"}]}
    assert renderer.render("{{#items}}[{{name}}]{{/items}}", data) == "[a][b]"


def test_scalar_items_with_dot(renderer):
    assert renderer.render("{{#xs}}{{.}},{{/xs}}", {"xs": [1, 2]}) == "1,2,"


def test_mapping_section_and_shadowing(renderer):
    data = {"name": "outer", "child": {"name": "inner"}}
    assert renderer.render("{{#child}}{{name}}{{/child}}-{{name}}", data) == "inner-outer"


def test_section_falls_back_to_outer_scope(renderer):
    data = {"title": "T", "items": [{"name": "a"}]}
    assert renderer.render("{{#items}}{{title}}:{{name}}{{/items}}", data) == "T:a"


def test_falsy_sections_are_skipped(renderer):
    for value in (False, None, "", 0, []):
        assert renderer.render("<{{#v}}shown{{/v}}>", {"v": value}) == "<>"


def test_inverted_sections(renderer):
    tpl = "{{^items}}none{{/items}}"
    assert renderer.render(tpl, {"items": []}) == "none"
    assert renderer.render(tpl, {}) == "none"
    assert renderer.render(tpl, {"items": [1]}) == ""


def test_sections_leave_stack_balanced(renderer):
    ctx = Context({"items": [{"a": 1}, {"a": 2}], "obj": {"b": 3}})
    out = renderer.render_in("{{#items}}{{a}}{{/items}}{{#obj}}{{b}}{{/obj}}", ctx)
    assert out == "123"
    assert len(ctx) == 1


# --- Lambdas and the helper ---

def test_section_lambda_helper(renderer):
    one = "{{name}}"
    two = "{{#lambda}}{{name}}{{/lambda}}"
    foo = types.SimpleNamespace(name="Mario")
    setattr(foo, "lambda", lambda text, helper: helper.render(text).upper())
    assert renderer.render(one, foo) == "Mario"
    assert renderer.render(two, foo) == "MARIO"


def test_section_lambda_receives_raw_text(renderer):
    seen = []

    def capture(text):
        seen.append(text)
        return "done"

    assert renderer.render("{{#wrap}}a {{b}} c{{/wrap}}", {"wrap": capture}) == "done"
    assert seen == ["a {{b}} c"]


def test_section_lambda_result_with_tags_is_rendered(renderer):
    data = {"name": "Ann", "wrap": lambda text, helper: "<" + text + ">"}
    assert renderer.render("{{#wrap}}{{name}}{{/wrap}}", data) == "<Ann>"


def test_helper_dot_is_the_lambda_call_site(renderer):
    seen = []

    def probe(text, helper):
        seen.append(helper.find("."))
        return str(helper.find("v"))

    item = {"v": 1}
    data = {"items": [item], "probe": probe}
    assert renderer.render("{{#items}}{{#probe}}x{{/probe}}{{/items}}", data) == "1"
    assert seen[0] is item


def test_helper_find():
    ctx = Context({"foo": 1, "bar": "b", "baz": {"qux": "WIN"}})
    ctx.push("MOAR WIN")
    helper = LambdaHelper(Renderer(), ctx)
    assert helper.find("foo") == 1
    assert helper.find("bar") == "b"
    assert helper.find("baz.qux") == "WIN"
    assert helper.find(".") == "MOAR WIN"


# --- Compilation ---

def test_compile_builds_node_tree(renderer):
    nodes = renderer.compile("a{{#s}}{{x}}{{/s}}b")
    assert isinstance(nodes[0], TextNode)
    section = nodes[1]
    assert isinstance(section, SectionNode)
    assert section.source == "{{x}}"
    assert isinstance(section.children[0], VariableNode)
    assert nodes[2] == TextNode("b")


@pytest.mark.parametrize("template", [
    "{{#a}}x",
    "{{/a}}",
    "{{#a}}{{/b}}",
])
def test_section_syntax_errors(renderer, template):
    with pytest.raises(TemplateSyntaxError):
        renderer.render(template, {})


def test_bad_tag_fails_before_any_lookup(renderer):
    calls = []

    class Counter:
        def tick(self):
            calls.append(1)
            return "t"

    with pytest.raises(PathSyntaxError):
        renderer.render("{{tick}}{{tick(}}", Counter())
    assert calls == []


def test_section_error_messages_print_the_parsed_tag(renderer):
    with pytest.raises(TemplateSyntaxError, match=r"unclosed section 'user\.greet\(\"Hi\"\)'"):
        renderer.compile("{{#user.greet('Hi')}}x")
    with pytest.raises(TemplateSyntaxError, match=r"does not match open section 'a\.b'"):
        renderer.compile("{{#a.b}}x{{/c}}")


# --- Depth guard ---

def test_self_rendering_variable_lambda_hits_depth_guard():
    with pytest.raises(ResolutionDepthError) as info:
        Renderer(max_depth=10).render("{{now}}", {"now": lambda: "{{now}}"})
    assert info.value.depth == 10


def test_self_rendering_section_lambda_hits_depth_guard():
    data = {"w": lambda text, helper: helper.render("{{#w}}x{{/w}}")}
    with pytest.raises(ResolutionDepthError):
        Renderer(max_depth=10).render("{{#w}}x{{/w}}", data)


def test_lambdas_release_the_guard_after_rendering():
    data = {"w": lambda text: "<" + text + ">", "n": lambda: "{{v}}", "v": 1}
    context = Context(data, max_depth=10)
    out = Renderer().render_in("{{#w}}{{n}}{{/w}}{{n}}", context)
    assert out == "<1>1"
    assert context._depth == 0
