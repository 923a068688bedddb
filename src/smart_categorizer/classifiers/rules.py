import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from re import _constants as sre_constants
from re import _parser as sre_parse

from smart_categorizer import tokenizer
from smart_categorizer.errors import RuleCompileError
from smart_categorizer.logger import get_logger
from smart_categorizer.models import (
    CategorizationResult,
    CategorizationRule,
    CategorizationSource,
    RuleType,
)

from .base import ClassificationContext, Classifier

logger = get_logger(__name__)

RULE_CONFIDENCE = 1.0
MAX_REGEX_INPUT = 512

# Each extra unbounded repeat multiplies the backtracking on a failed match by the input length.
MAX_UNBOUNDED_REPEATS = 3

_REPEATS = frozenset({
    sre_constants.MAX_REPEAT,
    sre_constants.MIN_REPEAT,
    sre_constants.POSSESSIVE_REPEAT,
})

SYMBOL_RULE_FIELDS = {
    RuleType.VARIABLE_SYMBOL: "variable_symbol",
    RuleType.SPECIFIC_SYMBOL: "specific_symbol",
    RuleType.CONSTANT_SYMBOL: "constant_symbol",
}


@dataclass(frozen=True)
class CompiledRule(ABC):
    rule: CategorizationRule

    @abstractmethod
    def matches(self, context: ClassificationContext) -> bool:
        pass


@dataclass(frozen=True)
class ExactRule(CompiledRule):
    raw: str
    simple: str

    def matches(self, context: ClassificationContext) -> bool:
        payee = context.transaction.payee
        if payee.strip().casefold() == self.raw:
            return True
        return bool(self.simple) and context.payee_simple == self.simple


@dataclass(frozen=True)
class ContainsRule(CompiledRule):
    needle: str

    def matches(self, context: ClassificationContext) -> bool:
        return self.needle in context.normalized_text


@dataclass(frozen=True)
class PrefixRule(CompiledRule):
    needle: str

    def matches(self, context: ClassificationContext) -> bool:
        return context.normalized_text.startswith(self.needle)


@dataclass(frozen=True)
class SuffixRule(CompiledRule):
    needle: str

    def matches(self, context: ClassificationContext) -> bool:
        return context.normalized_text.endswith(self.needle)


@dataclass(frozen=True)
class RegexRule(CompiledRule):
    regex: re.Pattern[str]

    def matches(self, context: ClassificationContext) -> bool:
        return self.regex.search(context.normalized_text[:MAX_REGEX_INPUT]) is not None


@dataclass(frozen=True)
class PaymentSymbolRule(CompiledRule):
    """Matches one of the Czech payment symbols (VS, SS or KS) exactly."""

    symbol: str
    field: str

    def matches(self, context: ClassificationContext) -> bool:
        return getattr(context, self.field) == self.symbol


def _normalized_needle(rule: CategorizationRule) -> str:
    needle = tokenizer.normalize_text(rule.pattern)
    if not needle:
        raise RuleCompileError(rule.id, f"pattern '{rule.pattern}' is empty after normalization")
    return needle


def _children(op, av) -> list:
    if op in _REPEATS:
        return [av[2]]
    if op is sre_constants.SUBPATTERN:
        return [av[3]]
    if op is sre_constants.BRANCH:
        return list(av[1])
    if op is sre_constants.ATOMIC_GROUP:
        return [av]
    if op in (sre_constants.ASSERT, sre_constants.ASSERT_NOT):
        return [av[1]]
    if op is sre_constants.GROUPREF_EXISTS:
        return [item for item in av[1:] if item is not None]
    return []


def _walk(items):
    """Yield every (op, av) node of a parsed pattern, depth first."""
    for op, av in items:
        yield op, av
        for child in _children(op, av):
            yield from _walk(child)


def _is_variable_repeat(op, av) -> bool:
    return op in _REPEATS and av[0] != av[1]


def backtracking_hazard(pattern: str) -> str | None:
    """
    Describe why the pattern can backtrack super-linearly, or return None.

    Rejected shapes: a repeated body that itself holds a variable repeat ((a+)+, ((a+))+,
    (\\w+\\s?)*) or an alternation ((a|aa)+, (?:foo|bar)*), and more than
    MAX_UNBOUNDED_REPEATS unbounded repeats overall. Raises re.error on invalid syntax.
    """
    parsed = sre_parse.parse(pattern)
    unbounded = 0
    for op, av in _walk(parsed):
        if op not in _REPEATS:
            continue
        if av[1] == sre_constants.MAXREPEAT:
            unbounded += 1
        if av[1] <= 1:
            continue
        for inner_op, inner_av in _walk(av[2]):
            if _is_variable_repeat(inner_op, inner_av):
                return "nested repetition can backtrack catastrophically"
            if inner_op is sre_constants.BRANCH:
                return "repeated alternation can backtrack catastrophically"
    if unbounded > MAX_UNBOUNDED_REPEATS:
        return f"more than {MAX_UNBOUNDED_REPEATS} unbounded repeats"
    return None


def _compile_regex(rule: CategorizationRule) -> re.Pattern[str]:
    try:
        hazard = backtracking_hazard(rule.pattern)
        if hazard is None:
            return re.compile(rule.pattern, re.IGNORECASE)
    except re.error as e:
        raise RuleCompileError(rule.id, f"invalid regex: {e}") from e
    raise RuleCompileError(rule.id, hazard)


def compile_rule(rule: CategorizationRule) -> CompiledRule:
    """Validate a rule and build its matcher. Raises RuleCompileError."""
    if not rule.pattern or not rule.pattern.strip():
        raise RuleCompileError(rule.id, "pattern is empty")
    if not rule.category.strip():
        raise RuleCompileError(rule.id, "category is empty")

    if rule.rule_type == RuleType.EXACT:
        return ExactRule(
            rule=rule,
            raw=rule.pattern.strip().casefold(),
            simple=tokenizer.simple_normalize(rule.pattern),
        )
    if rule.rule_type == RuleType.CONTAINS:
        return ContainsRule(rule=rule, needle=_normalized_needle(rule))
    if rule.rule_type == RuleType.PREFIX:
        return PrefixRule(rule=rule, needle=_normalized_needle(rule))
    if rule.rule_type == RuleType.SUFFIX:
        return SuffixRule(rule=rule, needle=_normalized_needle(rule))
    if rule.rule_type == RuleType.REGEX:
        return RegexRule(rule=rule, regex=_compile_regex(rule))
    if rule.rule_type in SYMBOL_RULE_FIELDS:
        symbol = rule.pattern.strip()
        if not symbol.isdigit():
            raise RuleCompileError(rule.id, "payment symbol must be numeric")
        return PaymentSymbolRule(rule=rule, symbol=symbol, field=SYMBOL_RULE_FIELDS[rule.rule_type])
    raise RuleCompileError(rule.id, f"unsupported rule type {rule.rule_type}")


class RuleEngine(Classifier):
    """
    First-match-wins evaluation of rules ordered by priority (descending),
    ties kept in insertion order.
    """

    source = CategorizationSource.RULE

    def __init__(self, rules: Iterable[CategorizationRule] = ()):
        compiled = [compile_rule(rule) for rule in rules]
        # sorted() is stable, so equal priorities keep insertion order
        self.rules: tuple[CompiledRule, ...] = tuple(
            sorted(compiled, key=lambda c: -c.rule.priority)
        )

    @property
    def active_rule_count(self) -> int:
        return sum(1 for c in self.rules if c.rule.enabled)

    def match(self, context: ClassificationContext) -> CompiledRule | None:
        for compiled in self.rules:
            if compiled.rule.enabled and compiled.matches(context):
                return compiled
        return None

    def classify(self, context: ClassificationContext) -> CategorizationResult | None:
        compiled = self.match(context)
        if compiled is None:
            return None
        logger.debug("[RULES] '%s' matched -> %s", compiled.rule.label, compiled.rule.category)
        return CategorizationResult(
            category=compiled.rule.category,
            confidence=RULE_CONFIDENCE,
            source=self.source,
            rule_id=compiled.rule.id,
        )
