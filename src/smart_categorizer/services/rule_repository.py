import json
import os
from collections.abc import Iterable

from pydantic import ValidationError

from smart_categorizer.classifiers.rules import compile_rule
from smart_categorizer.errors import RuleCompileError
from smart_categorizer.logger import get_logger
from smart_categorizer.models import CategorizationRule

logger = get_logger(__name__)


class JsonRuleRepository:
    """User-defined rules kept as a JSON list; every rule is compiled before it is stored."""

    def __init__(self, data_path: str = "rules.json"):
        self.data_path = data_path

    def load(self) -> list[CategorizationRule]:
        if not os.path.exists(self.data_path):
            return []
        try:
            with open(self.data_path, encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            logger.error("[RULES] Cannot parse %s: %s", self.data_path, e)
            return []
        if not isinstance(raw, list):
            logger.error("[RULES] %s must contain a list of rules", self.data_path)
            return []

        rules: list[CategorizationRule] = []
        for item in raw:
            try:
                rule = CategorizationRule.model_validate(item)
                compile_rule(rule)
            except (ValidationError, RuleCompileError) as e:
                logger.error("[RULES] Dropping stored rule %r: %s", item, e)
                continue
            rules.append(rule)
        logger.info("[RULES] Loaded %s user rules from %s", len(rules), self.data_path)
        return rules

    def save(self, rules: Iterable[CategorizationRule]) -> list[CategorizationRule]:
        rules = list(rules)
        for rule in rules:
            compile_rule(rule)
        seen: set[str] = set()
        for rule in rules:
            if rule.id in seen:
                raise RuleCompileError(rule.id, "duplicate rule id")
            seen.add(rule.id)

        payload = [rule.model_dump(mode="json") for rule in rules]
        tmp_path = f"{self.data_path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.data_path)
        return rules
