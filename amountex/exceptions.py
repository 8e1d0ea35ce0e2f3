"""
AmountEx exceptions
"""


class AmountExError(Exception):
    """Base exception for AmountEx"""
    pass


class ConfigurationError(AmountExError):
    """Raised when configuration values are missing or invalid"""
    pass


class LLMResponseParseError(AmountExError):
    """Raised when a model response does not contain usable JSON"""

    def __init__(self, message: str, response: str = None):
        super().__init__(message)
        self.response = response


class StrategyUnavailableError(AmountExError):
    """Raised when a stage strategy cannot run (e.g. no LLM configured)"""
    pass


class StageExecutionError(AmountExError):
    """Raised when every strategy of a stage failed"""

    def __init__(self, stage: str, errors=None):
        self.stage = stage
        self.errors = errors or []
        details = "; ".join(f"{name}: {err}" for name, err in self.errors)
        super().__init__(f"All strategies failed for stage '{stage}'" + (f" ({details})" if details else ""))


class MaxRetriesExceededError(AmountExError):
    """Raised when retries are exhausted without a captured error"""
    pass
