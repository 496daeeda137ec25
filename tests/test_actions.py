import random

from tracerz import Grammar, base_english_modifiers, base_extended_modifiers


ACTIONS = {
    "getKey": "key is #key#",
    "getKey2": "#key2# is key2",
    "animal": "seagull",
    "fun": "[key:whale][key2:dolphin]",
    "dll": "#animal.s# ",
    "dlr": "are neat",
    "drl": ". just kidding. ",
    "drr": "#animal.s# are annoying",
    "dl": "#dll##dlr#",
    "dr": "#drl##drr#",
    "deep": "#dl##dr#",
    "textGetKeyOrigin": "#[key:blurf]getKey#",
    "ruleGetKeyOrigin": "#[key:#animal#]getKey#",
    "funOrigin": "#[#fun#]getKey# #getKey2#",
    "deepOrigin": "#[key:#deep#]getKey#",
}


def test_basic_actions():
    zgr = Grammar(ACTIONS)
    assert zgr.flatten("#[key:testkey]getKey#") == "key is testkey"
    assert zgr.flatten("#textGetKeyOrigin#") == "key is blurf"
    assert zgr.flatten("#ruleGetKeyOrigin#") == "key is seagull"
    assert zgr.flatten("#funOrigin#") == "key is whale dolphin is key2"


def test_deep_key_capture_applies_modifiers():
    zgr = Grammar(ACTIONS)
    zgr.add_modifiers(base_english_modifiers())
    assert zgr.flatten("#deepOrigin#") == "key is seagulls are neat. just kidding. seagulls are annoying"


def test_action_text_is_hidden():
    zgr = Grammar({"getKey": "key is #key#"})
    out = zgr.flatten("#[key:x]getKey#")
    assert out == "key is x"
    assert out.count("x") == 1


def test_text_action_list_is_sampled():
    zgr = Grammar({"show": "#pet#"}, sampler=lambda rng, low, high: high)
    assert zgr.flatten("#[pet:cat,dog,fish]show#") == "fish"


def test_nested_keys_resolve_before_outer_key():
    zgr = Grammar(
        {
            "val": "v",
            "show": "<#inner#>",
            "wrap": "#[inner:#val#]show#",
        }
    )
    tree = zgr.expanded_tree("#[outer:#wrap#]outer#")
    assert tree.flatten() == "<v>"
    assert tree.runtime["inner"] == ["v"]
    assert tree.runtime["outer"] == ["<v>"]


def test_runtime_overrides_stack_and_pop():
    zgr = Grammar({"show": "#k#", "popK": "[#k.pop!!#]", "k": "static"})
    zgr.add_modifiers(base_extended_modifiers())
    assert zgr.flatten("#[k:a]show##[k:b]show##popK##show#") == "aba"
    assert zgr.flatten("#[k:a]show##popK##show#") == "astatic"


def test_pop_without_override_is_harmless():
    zgr = Grammar({"popK": "[#k.pop!!#]", "k": "static"})
    zgr.add_modifiers(base_extended_modifiers())
    assert zgr.flatten("#popK##k#") == "static"


def test_tree_modifier_pop_restores_previous_binding():
    zgr = Grammar(
        {
            "popSubject": "[#subject.pop!!#]",
            "animal": "dog",
            "object": "door",
            "noise": "#subject# made a noise",
            "story2": "#noise##popSubject#",
            "story": "#[subject:#animal#]subject# opened the #[subject:#object#]subject#. #story2#. #story2#",
        }
    )
    zgr.add_modifiers(base_english_modifiers())
    zgr.add_modifiers(base_extended_modifiers())
    assert zgr.flatten("#story#") == "dog opened the door. door made a noise. dog made a noise"


def test_flatten_does_not_rerun_tree_modifiers():
    zgr = Grammar({"popK": "[#k.pop!!#]"})
    zgr.add_modifiers(base_extended_modifiers())
    tree = zgr.expanded_tree("#[k:a]k##[k:b]k##popK#")
    assert tree.runtime == {"k": [["a"]]}

    shown = tree.flatten(ignore_hidden=False)
    assert tree.flatten(ignore_hidden=False) == shown
    assert tree.runtime == {"k": [["a"]]}
    assert tree.flatten() == "ab"


STORY = {
    "name": ["Arjun", "Yuuma", "Darcy", "Mia", "Chiaki", "Izzi", "Azra", "Lina"],
    "occupationBase": ["wizard", "witch", "detective", "ballerina", "criminal", "pirate", "spy", "captain"],
    "occupationMod": ["occult ", "space ", "professional ", "gentleman ", "time ", "cyber", "paleo", "super"],
    "strange": ["mysterious", "portentous", "enchanting", "strange", "eerie"],
    "tale": ["story", "saga", "tale", "legend"],
    "occupation": ["#occupationMod##occupationBase#"],
    "setPronouns": [
        "[heroThey:they][heroThem:them][heroTheir:their][heroTheirs:theirs]",
        "[heroThey:she][heroThem:her][heroTheir:her][heroTheirs:hers]",
        "[heroThey:he][heroThem:him][heroTheir:his][heroTheirs:his]",
    ],
    "setSailForAdventure": [
        "set sail for adventure",
        "left #heroTheir# home",
        "set out for adventure",
        "went to seek #heroTheir# fortune",
    ],
    "setCharacter": ["[#setPronouns#][hero:#name#][heroJob:#occupation#]"],
    "openBook": [
        "An old #occupation# told #hero# a story. 'Listen well' she said to #hero#, 'to this #strange# #tale#. ' #origin#'",
        "#hero# went home.",
        "#hero# found an ancient book and opened it.  As #hero# read, the book told #strange.a# #tale#: #origin#",
    ],
    "story": ["#hero# the #heroJob# #setSailForAdventure#. #openBook#"],
    "origin": ["Once upon a time, #[#setCharacter#]story#"],
}


def test_nested_story_grammar_expands_fully():
    for seed in range(30):
        zgr = Grammar(STORY, random.Random(seed))
        zgr.add_modifiers(base_english_modifiers())
        out = zgr.flatten("#origin#")
        assert out.startswith("Once upon a time, ")
        assert "#" not in out
        assert "[" not in out
