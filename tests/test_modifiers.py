import pytest

from tracerz import (
    Grammar,
    GrammarValidationError,
    ModifierSignatureError,
    WrongParameterCount,
    base_english_modifiers,
    make_modifier,
    node_modifier,
    string_modifier,
)


MODS = {
    "animal": "albatross",
    "animalX": "fox",
    "animalConsonantY": "guppy",
    "animalVowelY": "monkey",
    "food": "fish",
    "labor": "union",
    "vehicle": "car",
    "verbS": "pass",
    "verbE": "replace",
    "verbH": "cash",
    "verbX": "box",
    "verbConsonantY": "carry",
    "verbVowelY": "monkey",
    "verb": "hand",
    "numStart": "00flour from italy",
    "anOrigin": "#animal.a# ate #food.a#",
    "anOrigin2": "the iww is #labor.a#",
    "capAllOrigin": "#anOrigin.capitalizeAll#",
    "capOrigin": "#anOrigin.capitalize#",
    "sOrigin": "#animal.s# eat #food.s#",
    "sOrigin2": "#animalX.s# eat #animalConsonantY.s# and #animalVowelY.s#",
    "sOrigin3": "people drive #vehicle.s#",
    "edOrigin": "#verbS.ed# #verbE.ed# #verbH.ed# #verbX.ed# #verbConsonantY.ed# #verbVowelY.ed# #verb.ed#",
    "replaceOrigin": "#anOrigin.replace(a,b)#",
    "capAllNumStartOrigin": "#numStart.capitalizeAll#",
    "chainedOrigin": "#verbH.a.ed.capitalize# out",
}


@pytest.fixture
def english():
    zgr = Grammar(MODS)
    zgr.add_modifiers(base_english_modifiers())
    return zgr


def test_indefinite_article(english):
    assert english.flatten("#anOrigin#") == "an albatross ate a fish"
    assert english.flatten("#anOrigin2#") == "the iww is a union"


def test_capitalization(english):
    assert english.flatten("#capAllOrigin#") == "An Albatross Ate A Fish"
    assert english.flatten("#capOrigin#") == "An albatross ate a fish"
    assert english.flatten("#capAllNumStartOrigin#") == "00flour From Italy"


def test_plurals(english):
    assert english.flatten("#sOrigin#") == "albatrosses eat fishes"
    assert english.flatten("#sOrigin2#") == "foxes eat guppies and monkeys"
    assert english.flatten("#sOrigin3#") == "people drive cars"


def test_past_tense(english):
    assert english.flatten("#edOrigin#") == "passed replaced cashed boxed carried monkeyed handed"


def test_replace_and_chaining(english):
    assert english.flatten("#replaceOrigin#") == "bn blbbtross bte b fish"
    assert english.flatten("#chainedOrigin#") == "A cashed out"


def test_custom_modifier_without_params():
    zgr = Grammar({"rule": "output", "origin": "#rule#"})
    assert "eris" not in zgr.modifiers
    zgr.add_modifier("eris", lambda text: "hail eris")
    assert zgr.flatten("#rule.eris#") == "hail eris"
    assert zgr.flatten("#rule.eris()#") == "hail eris"


def test_custom_modifier_with_one_param():
    zgr = Grammar({"rule": "output"})
    zgr.add_modifier("eris", lambda text, param: text + param)
    assert zgr.flatten("#rule.eris(hail eris)#") == "outputhail eris"


def test_custom_modifier_with_many_params():
    def eris(text, one, two, three, four):
        if text == one:
            return four
        if text == two:
            return three
        if text == three:
            return two
        if text == four:
            return text
        return one

    zgr = Grammar({"rule": "output"})
    zgr.add_modifier("eris", eris)
    assert zgr.modifiers["eris"].arity == 4
    assert zgr.flatten("#rule.eris(output,no2,no3,yes)#") == "yes"
    assert zgr.flatten("#rule.eris(no1,output,yes,no4)#") == "yes"
    assert zgr.flatten("#rule.eris(no1,yes,output,no4)#") == "yes"
    assert zgr.flatten("#rule.eris(no1,no2,no3,output)#") == "output"
    assert zgr.flatten("#rule.eris(yes,no2,no3,no4)#") == "yes"


def test_unknown_modifier_is_skipped():
    zgr = Grammar({"rule": "output"})
    assert zgr.flatten("#rule.nope#") == "output"
    assert zgr.flatten("#rule.nope(a,b)#") == "output"


def test_modifiers_do_not_run_on_empty_text():
    calls = []

    def record(text):
        calls.append(text)
        return "filled"

    zgr = Grammar({"empty": ""})
    zgr.add_modifier("record", record)
    assert zgr.flatten("#empty.record#") == ""
    assert calls == []


def test_node_modifier_receives_rule_name():
    seen = []

    def tag(node, rule):
        seen.append((rule, node.text))
        return "ignored"

    zgr = Grammar({"rule": "output"})
    zgr.add_modifier("tag", node_modifier(tag))
    assert zgr.flatten("#rule.tag#") == ""
    assert seen == [("rule", "output")]


def test_modifier_signature_checked_at_registration():
    with pytest.raises(ModifierSignatureError) as exc:
        make_modifier(lambda text: text, arity=2)
    assert exc.value.code == "E_MODIFIER_SIGNATURE"

    with pytest.raises(ModifierSignatureError):
        string_modifier(lambda: "no input")


def test_wrong_parameter_count_reports_path():
    zgr = Grammar({"rule": "output", "origin": "#rule.replace(a)#"})
    zgr.add_modifiers(base_english_modifiers())
    with pytest.raises(WrongParameterCount) as exc:
        zgr.flatten("#origin#")
    err = exc.value
    assert err.code == "E_WRONG_PARAMETER_COUNT"
    assert err.rule == "rule"
    assert err.path == "'#origin#' > '#rule.replace(a)#' > 'output'"


def test_replace_uses_python_group_syntax():
    zgr = Grammar({"word": "cat"})
    zgr.add_modifiers(base_english_modifiers())
    assert zgr.flatten("#word.replace((a),<\\1>)#") == "c<a>t"


def test_replace_with_bad_pattern_is_a_grammar_error():
    zgr = Grammar({"word": "cat"})
    zgr.add_modifiers(base_english_modifiers())
    with pytest.raises(GrammarValidationError) as exc:
        zgr.flatten("#word.replace([,x)#")
    assert exc.value.code == "E_INVALID_MODIFIER_PARAM"
    assert exc.value.rule == "word"
