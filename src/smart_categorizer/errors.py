class CategorizerError(Exception):
    """Base class for administrative failures (training, loading, rule editing)."""


class TrainingError(CategorizerError):
    pass


class ModelLoadError(CategorizerError):
    pass


class ModelSaveError(CategorizerError):
    pass


class RuleCompileError(CategorizerError):
    def __init__(self, rule_id: str, reason: str):
        self.rule_id = rule_id
        self.reason = reason
        super().__init__(f"Rule '{rule_id}' rejected: {reason}")
