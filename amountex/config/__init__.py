from .amountex_config import AmountExConfig

__all__ = ['AmountExConfig']
