"""Tests for template evaluation."""

import pytest

from template_text import (
    BadConversionError,
    EvaluationError,
    EvaluationOptions,
    ExpansionOptions,
    UndefinedReferenceError,
    decorate_lines,
    load,
    render,
)


# =============================================================================
# Fields and statements
# =============================================================================


@pytest.mark.parametrize(
    "template, expected, scope",
    [
        ("basic", "basic", {}),
        ("$", "$", {}),
        ("$()", "", {}),
        (" $()", " ", {}),
        ("$() ", " ", {}),
        ("$( )", "", {}),
        ("$(33)", "33", {}),
        ("$(3+3)", "6", {}),
        ("$(False)", "False", {}),
        ("$('str')", "str", {}),
        ("$('str' + str(3))", "str3", {}),
        ("$(var1)", "55", {"var1": 55}),
        ("$(var1)", "0.123", {"var1": 0.123}),
        ("$(var1)", "value", {"var1": "value"}),
        ("Text $(v) interleaved", "Text EXTRA interleaved", {"v": "EXTRA"}),
        ("Function $(f(6) + f(2))", "Function 40", {"f": lambda x: x * x}),
        ("$(d['k'])", "v", {"d": {"k": "v"}}),
    ],
)
def test_fields(template, expected, scope):
    assert render(template, scope) == expected


@pytest.mark.parametrize("template", ["@", " @", " @ ", "\t@", "@\t"])
def test_empty_statements_produce_nothing(template):
    assert render(template) == ""


def test_loop_statement():
    template = "@for i, v in enumerate(['wolf', 'dog', 'chicken'], 1):\n$(i) $(v)\n@end\n"
    assert render(template) == "1 wolf\n2 dog\n3 chicken\n"


def test_conditional_statement():
    template = "@if flag:\nyes\n@else:\nno\n@end"
    assert render(template, {"flag": True}) == "yes"
    assert render(template, {"flag": False}) == "no"


def test_statements_can_define_functions():
    template = "@def shout(s):\n@    return s.upper() + '!'\n@end\n$(shout(word))"
    assert render(template, {"word": "hey"}) == "HEY!"


def test_statements_keep_python_indentation():
    template = "@def f(x):\n@    if x:\n@        return 'a'\n@    return 'b'\n@end\n$(f(False))"
    assert render(template) == "b"


def test_empty_branches():
    assert render("@if flag:\n@else:\nno\n@end", {"flag": False}) == "no"
    assert render("@if flag:\n@else:\nno\n@end", {"flag": True}) == ""
    assert render("@try:\n@except Exception:\n@end\ndone") == "done"


def test_block_header_with_comment():
    assert render("@for x in xs:  # loop\n$(x)\n@end", {"xs": [1, 2]}) == "1\n2"


def test_fields_inside_class_body():
    assert render("@class A:\n$(1)\n@end") == "1"
    assert render("@class A:\n@    name = 'a'\n@end\n$(A.name)") == "a"


def test_global_indent():
    expansion = ExpansionOptions(indent=4)
    assert render("AAAA", expansion=expansion) == "    AAAA"
    assert render("$(a)  $(b) ", {"a": 11, "b": 22}, expansion=expansion) == "    11  22 "


def test_escaped_fields():
    assert render("\\$(x)", {"x": 1}) == "$(x)"
    assert render("\\\\$(x)", {"x": 1}) == "\\1"
    assert render("\\\\\\$(x)", {"x": 1}) == "\\$(x)"


def test_text_with_misc_features():
    template = (
        "Lorem ipsum dolor sit amet\n"
        "Lorem $(ipsum) dolor $(sit) amet\n"
        "\n"
        "@for word in words:\n"
        "$(word)\n"
        "@end\n"
        "\n"
        "    $(phrase)\n"
        "$(' '.join(words))\n"
    )
    words = ["Lorem", "ipsum", "dolor", "sit", "amet"]
    scope = {
        "ipsum": "ipsum",
        "sit": "sit",
        "words": words,
        "phrase": "Lorem ipsum dolor sit amet",
    }
    expected = (
        "Lorem ipsum dolor sit amet\n"
        "Lorem ipsum dolor sit amet\n"
        "\n"
        "Lorem\nipsum\ndolor\nsit\namet\n"
        "\n"
        "    Lorem ipsum dolor sit amet\n"
        "Lorem ipsum dolor sit amet\n"
    )
    assert render(template, scope) == expected


def test_alt_delimiters():
    template = "$(var1) «var1»\n\n    «var2» «f(5)»  .\n"
    scope = {"var1": "value1", "var2": "value2", "f": lambda x: x * x}
    expansion = ExpansionOptions(alt_delimiters=True)
    assert render(template, scope, expansion=expansion) == "$(var1) value1\n\n    value2 25  .\n"
    assert render(" «» ", expansion=expansion) == "  "


# =============================================================================
# List expansion
# =============================================================================


@pytest.mark.parametrize(
    "template, expected",
    [
        ("${}", ""),
        ("  ${}", "  "),
        ("\t${}", "\t"),
        ("${}  ", ""),
    ],
)
def test_empty_list_expansion(template, expected):
    assert render(template) == expected


def test_list_expansion_preserves_indentation():
    template = (
        "${lines}\n"
        "    ${lines}\n"
        "${empty}\n"
        "Only when alone in the line: ${lines}\n"
        "${lines}: Only when alone in the line\n"
    )
    scope = {
        "lines": ["Lorem ipsum dolor sit amet", "consectetur adipiscing elit"],
        "empty": [],
    }
    expected = (
        "Lorem ipsum dolor sit amet\n"
        "consectetur adipiscing elit\n"
        "    Lorem ipsum dolor sit amet\n"
        "    consectetur adipiscing elit\n"
        "Only when alone in the line: ${lines}\n"
        "${lines}: Only when alone in the line\n"
    )
    assert render(template, scope) == expected


def test_list_expansion_sources():
    assert render("${rows}", {"rows": ["line1", "line2", "line3"]}) == "line1\nline2\nline3"
    assert render("${nest['ed']}", {"nest": {"ed": ["a single line"]}}) == "a single line"
    assert render("${f()}", {"f": lambda: ["a single line"]}) == "a single line"
    assert render("${f}", {"f": lambda: iter(["from", "callable"])}) == "from\ncallable"
    assert render('  ${lookup["${}"]}  ', {"lookup": {"${}": ["one line"]}}) == "  one line"


def test_list_items_are_converted():
    assert render("${rows}", {"rows": [1, 2.5]}) == "1\n2.5"
    scope = {"rows": [1, 2], "to_text": lambda v: f"<{v}>"}
    assert render("${rows}", scope) == "<1>\n<2>"


def test_list_expansion_keeps_empty_items_unindented():
    assert render("  ${rows}", {"rows": ["a", "", "b"]}, evaluation=EvaluationOptions(return_lines=True)) == [
        "  a",
        "",
        "  b",
    ]


def test_list_expansion_rejects_strings():
    with pytest.raises(EvaluationError, match="must give an iterable of lines"):
        render("${rows}", {"rows": "not a list"})


def test_list_expansion_of_none():
    with pytest.raises(UndefinedReferenceError, match="Expression 'rows' is undefined"):
        render("${rows}", {"rows": None})


# =============================================================================
# Conversion to text
# =============================================================================


def test_none_is_undefined():
    with pytest.raises(UndefinedReferenceError) as exc:
        render("x = $(value)", {"value": None})
    assert exc.value.expression == "value"
    assert exc.value.message == "Expression 'value' is undefined in the current scope"


def test_custom_conversion():
    scope = {"x": 3, "to_text": lambda v: f"#{v}"}
    assert render("$(x) and $('y')", scope) == "#3 and #y"


def test_bad_conversion():
    with pytest.raises(BadConversionError) as exc:
        render("$(x)", {"x": 3, "to_text": lambda v: 42})
    assert exc.value.value == 42
    assert "did not return a string (got int)" in exc.value.message


# =============================================================================
# Blank and empty lines
# =============================================================================

TPL_WITH_EMPTY = "Lorem ipsum dolor sit amet,\n$(empty)$(empty)\nconsectetur adipiscing elit\n"
TPL_WITH_BLANK = "Lorem ipsum dolor sit amet,\n$(empty)  $(empty)\nconsectetur adipiscing elit\n"
TPL_WITH_EMPTY_LIST = "Lorem ipsum dolor sit amet,\n  ${empty_list}\nconsectetur adipiscing elit\n"

WITH_SPACES = "Lorem ipsum dolor sit amet,\n  \nconsectetur adipiscing elit\n"
WITH_EMPTY = "Lorem ipsum dolor sit amet,\n\nconsectetur adipiscing elit\n"
WITHOUT_EMPTY = "Lorem ipsum dolor sit amet,\nconsectetur adipiscing elit\n"

BLANKS_SCOPE = {"empty": "", "empty_list": []}


@pytest.mark.parametrize(
    "template, options, expected",
    [
        (TPL_WITH_EMPTY, {}, WITH_EMPTY),
        (TPL_WITH_EMPTY, {"preserve_empty_lines": True}, WITH_EMPTY),
        (TPL_WITH_EMPTY, {"preserve_empty_lines": False}, WITHOUT_EMPTY),
        (TPL_WITH_BLANK, {}, WITH_SPACES),
        (TPL_WITH_BLANK, {"preserve_blank_lines": True}, WITH_SPACES),
        (TPL_WITH_BLANK, {"preserve_blank_lines": False}, WITH_EMPTY),
        (
            TPL_WITH_BLANK,
            {"preserve_blank_lines": False, "preserve_empty_lines": False},
            WITHOUT_EMPTY,
        ),
        (TPL_WITH_EMPTY_LIST, {}, WITH_SPACES),
        (TPL_WITH_EMPTY_LIST, {"preserve_blank_lines": False}, WITH_EMPTY),
        (
            TPL_WITH_EMPTY_LIST,
            {"preserve_blank_lines": False, "preserve_empty_lines": False},
            WITHOUT_EMPTY,
        ),
    ],
)
def test_blank_and_empty_lines(template, options, expected):
    scope = dict(BLANKS_SCOPE)
    assert render(template, scope, evaluation=EvaluationOptions(**options)) == expected


@pytest.mark.parametrize(
    "options, expected",
    [
        (
            {"preserve_blank_lines": True, "preserve_empty_lines": True},
            "First line\ntable line 1\n    \ntable line 3\n\ntable line 5\nLast line\n",
        ),
        (
            {"preserve_blank_lines": False, "preserve_empty_lines": True},
            "First line\ntable line 1\n\ntable line 3\n\ntable line 5\nLast line\n",
        ),
        (
            {"preserve_blank_lines": False, "preserve_empty_lines": False},
            "First line\ntable line 1\ntable line 3\ntable line 5\nLast line\n",
        ),
    ],
)
def test_blank_and_empty_list_items(options, expected):
    scope = {"rows": ["table line 1", "    ", "table line 3", "", "table line 5"]}
    template = "First line\n${rows}\nLast line\n"
    assert render(template, scope, evaluation=EvaluationOptions(**options)) == expected


def test_blanks_from_a_loop_are_reduced():
    scope = {"values": ["monkey", "bear", "", "ladybug", "", "salmon"]}
    template = "@for v in values:\n    $(v)\n@end\n"
    evaluation = EvaluationOptions(preserve_blank_lines=False)
    expected = "    monkey\n    bear\n\n    ladybug\n\n    salmon\n"
    assert render(template, scope, evaluation=evaluation) == expected


def test_return_lines():
    evaluation = EvaluationOptions(return_lines=True)
    assert render("a\n$(b)\n", {"b": "B"}, evaluation=evaluation) == ["a", "B", ""]
    assert render("", evaluation=evaluation) == [""]


# =============================================================================
# Inclusion
# =============================================================================


def test_inclusion():
    master = "Lorem ipsum dolor sit amet,\n$<lines23>\n\n$<lines45>\n"
    included = {
        "lines23": "consectetur adipiscing elit,\nsed do eiusmod tempor.",
        "lines45": "Ut enim ad minim veniam,\nquis nostrud exercitation.",
    }
    expected = (
        "Lorem ipsum dolor sit amet,\n"
        "consectetur adipiscing elit,\n"
        "sed do eiusmod tempor.\n"
        "\n"
        "Ut enim ad minim veniam,\n"
        "quis nostrud exercitation.\n"
    )
    assert render(master, included=included) == expected


def test_nested_inclusion_with_expressions():
    animals = "@ for i, a in enumerate(animals, 1):\nAnimal $(i) is $(a)\n@ end"
    habitats = "$<animals>\nHabitats:\nprairie, marsh, forest"
    master = (
        "Here are some animals and habitats:\n"
        "    $<nature>\n"
        "\n"
        "The list of animals again:\n"
        "$<animals>\n"
    )
    expected = (
        "Here are some animals and habitats:\n"
        "    Animal 1 is crocodile\n"
        "    Animal 2 is chicken\n"
        "    Habitats:\n"
        "    prairie, marsh, forest\n"
        "\n"
        "The list of animals again:\n"
        "Animal 1 is crocodile\n"
        "Animal 2 is chicken\n"
    )
    scope = {"animals": ["crocodile", "chicken"]}
    included = {"animals": animals, "nature": habitats}
    assert render(master, scope, included=included) == expected


def test_greedy_inclusion():
    master = "Before\n\n$<looks_like> $<two_of_them>\n\nAfter\n"
    included = {"looks_like> $<two_of_them": "content of the\nincluded template"}
    expected = "Before\n\ncontent of the\nincluded template\n\nAfter\n"
    assert render(master, included=included) == expected


def test_inclusion_quoting():
    included = {"c": "x\ny"}
    assert render("\\$<c>", included=included) == "$<c>"
    assert render("\\\\$<c>", included=included) == "\\x\n\\y"


# =============================================================================
# Scope
# =============================================================================


def test_scope_is_bound_and_reused():
    scope = {"name": "one"}
    bound = load("Hello $(name)", scope=scope)
    assert bound.evaluate() == "Hello one"

    scope["name"] = "two"
    assert bound.evaluate() == "Hello two"
    assert bound.evaluate(overrides={"name": "three"}) == "Hello three"
    assert scope["name"] == "three"


def test_statements_mutate_the_scope():
    scope = {}
    render("@counter = 41\n@counter += 1", scope)
    assert scope["counter"] == 42


def test_runtime_bindings_are_removed():
    scope = {}
    render("$(1)", scope)
    assert "__text__" not in scope
    assert "__to_text__" not in scope
    assert "__insert_lines__" not in scope
    assert "__builtins__" in scope


def test_scope_builtins_are_not_replaced():
    scope = {"__builtins__": {"len": len}}
    assert render("$(len('abc'))", scope) == "3"
    with pytest.raises(UndefinedReferenceError):
        render("$(str(1))", scope)


SHARED_CHILD = "line 1:\nline 2: $(field)"
SHARED_PARENT = "\ntext\n    ${child}\ntext\n$(field)\n"
SHARED_EXPECTED = "\ntext\n    line 1:\n    line 2: value\ntext\nvalue\n"


def test_shared_scope_subsequent_evaluation():
    scope = {"field": "value"}
    child = load(SHARED_CHILD, scope=scope)
    scope["child"] = child.evaluate(EvaluationOptions(return_lines=True))

    assert load(SHARED_PARENT, scope=scope).evaluate() == SHARED_EXPECTED


def test_shared_scope_nested_evaluation():
    """A template evaluated while another one bound to the same scope runs."""
    scope = {"field": "value"}
    child = load(SHARED_CHILD, scope=scope)
    scope["child"] = lambda: child.evaluate(EvaluationOptions(return_lines=True))

    assert load(SHARED_PARENT, scope=scope).evaluate() == SHARED_EXPECTED
    assert "__text__" not in scope


# =============================================================================
# Line decorator
# =============================================================================


def test_decorate_lines():
    lines = decorate_lines(["a", "", "b"], "-- ", ";")
    assert list(lines()) == ["-- a;", "", "-- b;"]
    assert list(lines()) == ["-- a;", "", "-- b;"]


def test_decorate_lines_from_callable():
    source = ["x"]
    lines = decorate_lines(lambda: source, prefix="<")
    source.append("y")
    assert list(lines()) == ["<x", "<y"]


def test_decorate_lines_in_template():
    scope = {"items": decorate_lines(["int a", "int b"], suffix=";")}
    assert render("struct {\n    ${items}\n}", scope) == "struct {\n    int a;\n    int b;\n}"
