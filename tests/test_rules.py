import pytest

from smart_categorizer.classifiers.base import ClassificationContext
from smart_categorizer.classifiers.rules import RuleEngine, compile_rule
from smart_categorizer.errors import RuleCompileError
from smart_categorizer.models import (
    CategorizationRule,
    CategorizationSource,
    RuleType,
    TransactionInput,
)


def make_rule(
    rule_id: str,
    pattern: str,
    category: str,
    rule_type: RuleType = RuleType.CONTAINS,
    priority: int = 50,
    enabled: bool = True,
) -> CategorizationRule:
    return CategorizationRule(
        id=rule_id,
        pattern=pattern,
        rule_type=rule_type,
        category=category,
        priority=priority,
        enabled=enabled,
    )


def context(payee: str = "", description: str = "", **kwargs) -> ClassificationContext:
    return ClassificationContext.from_transaction(
        TransactionInput(payee=payee, description=description, **kwargs)
    )


def test_contains_rule_matches_normalized_text():
    engine = RuleEngine([make_rule("tesco", "tesco", "groceries", priority=10)])

    result = engine.classify(context("TESCO STORES 1234"))

    assert result is not None
    assert result.category == "groceries"
    assert result.confidence == 1.0
    assert result.source == CategorizationSource.RULE
    assert result.rule_id == "tesco"


def test_no_match_defers():
    engine = RuleEngine([make_rule("tesco", "tesco", "groceries")])
    assert engine.classify(context("Lidl nákup")) is None


@pytest.mark.parametrize("reverse", [False, True])
def test_higher_priority_wins_regardless_of_insertion_order(reverse):
    rules = [
        make_rule("low", "tesco", "other", priority=5),
        make_rule("high", "tesco", "groceries", priority=10),
    ]
    if reverse:
        rules.reverse()
    engine = RuleEngine(rules)

    result = engine.classify(context("Tesco Express"))

    assert result.category == "groceries"
    assert result.rule_id == "high"


def test_equal_priority_keeps_insertion_order():
    engine = RuleEngine([
        make_rule("first", "albert", "groceries"),
        make_rule("second", "albert", "other"),
    ])
    assert engine.classify(context("Albert Praha")).rule_id == "first"


def test_exact_rule_is_case_insensitive_full_match():
    engine = RuleEngine([make_rule("netflix", "Netflix.com", "entertainment", RuleType.EXACT)])

    assert engine.classify(context("NETFLIX.COM ")) is not None
    assert engine.classify(context("netflix.com")) is not None
    assert engine.classify(context("Netflix.com monthly")) is None


def test_prefix_and_suffix_rules():
    engine = RuleEngine([
        make_rule("dpp", "dpp", "transport", RuleType.PREFIX),
        make_rule("praha", "Praha", "local", RuleType.SUFFIX, priority=10),
    ])

    assert engine.classify(context("DPP Litacka kupon")).rule_id == "dpp"
    assert engine.classify(context("Jizdenka DPP")) is None
    assert engine.classify(context("Albert Praha")).rule_id == "praha"


def test_regex_rule_runs_on_normalized_text():
    engine = RuleEngine([make_rule("cd", r"ceske.*drahy", "transport", RuleType.REGEX)])

    result = engine.classify(context("Jízdenka České dráhy a.s."))

    assert result is not None
    assert result.category == "transport"


def test_variable_symbol_rule():
    engine = RuleEngine([
        make_rule("insurance", "1234567890", "insurance", RuleType.VARIABLE_SYMBOL, priority=100),
    ])

    assert engine.classify(context("Pojistovna", "Pojistne VS:1234567890")) is not None
    assert engine.classify(context("Pojistovna", variable_symbol="1234567890")) is not None
    assert engine.classify(context("Pojistovna", variable_symbol="999")) is None


def test_disabled_rule_is_skipped():
    engine = RuleEngine([make_rule("albert", "albert", "groceries", enabled=False)])

    assert engine.classify(context("Albert supermarket")) is None
    assert engine.active_rule_count == 0


@pytest.mark.parametrize(
    "rule",
    [
        make_rule("broken", "([a-z", "x", RuleType.REGEX),
        make_rule("nested", r"(a+)+$", "x", RuleType.REGEX),
        make_rule("nested-words", r"(\w+\s?)*x", "x", RuleType.REGEX),
        make_rule("nested-in-group", r"((a+))+$", "x", RuleType.REGEX),
        make_rule("repeated-alternation", r"(a|aa)+$", "x", RuleType.REGEX),
        make_rule("repeated-words", r"(?:foo|bar)*baz", "x", RuleType.REGEX),
        make_rule("too-many-stars", r"a.*b.*c.*d.*e", "x", RuleType.REGEX),
        make_rule("ss", "22x", "x", RuleType.SPECIFIC_SYMBOL),
        make_rule("blank", "   ", "x"),
        make_rule("stopword", "platba", "x"),
        make_rule("vs", "12ab", "x", RuleType.VARIABLE_SYMBOL),
        make_rule("no-category", "albert", " "),
    ],
    ids=lambda rule: rule.id,
)
def test_invalid_rules_rejected_at_creation(rule):
    with pytest.raises(RuleCompileError) as excinfo:
        compile_rule(rule)
    assert excinfo.value.rule_id == rule.id


def test_rule_engine_rejects_whole_set_with_invalid_rule():
    with pytest.raises(RuleCompileError):
        RuleEngine([make_rule("ok", "albert", "groceries"), make_rule("bad", "(", "x", RuleType.REGEX)])


@pytest.mark.parametrize(
    "pattern",
    [
        r"ceske.*drahy",
        r"\bmzd[ay]\b|\bvyplata\b",
        r"(\d{2})+",
        r"trading ?212",
        r"\bnajem(ne)?\b",
        r"(?:ab|cd)?x",
    ],
)
def test_linear_regexes_are_accepted(pattern):
    compile_rule(make_rule("ok", pattern, "x", RuleType.REGEX))


@pytest.mark.parametrize("pattern", [r"((a+))+$", r"(a|aa)+$", r"(x+x+)+y"])
def test_backtracking_regex_never_reaches_classification(pattern):
    rule = make_rule("redos", pattern, "x", RuleType.REGEX)

    with pytest.raises(RuleCompileError):
        RuleEngine([rule])


def test_specific_and_constant_symbol_rules():
    engine = RuleEngine([
        make_rule("ss", "22", "taxes", RuleType.SPECIFIC_SYMBOL),
        make_rule("ks", "0308", "insurance", RuleType.CONSTANT_SYMBOL),
    ])

    assert engine.classify(context("Urad", "Odvod SS:22")).rule_id == "ss"
    assert engine.classify(context("Pojistovna", constant_symbol="0308")).rule_id == "ks"
    assert engine.classify(context("Pojistovna", "KS:0308")).rule_id == "ks"
    assert engine.classify(context("Pojistovna", "KS:308")) is None
    assert engine.classify(context("Urad", "VS:22")) is None
