"""
Indicator registration decorator.

Provides @register_indicator decorator that automatically registers
indicator classes into the IndicatorRegistry singleton at import time.

Requirements for decorated classes:
- Must define ParamSchema inner class (Pydantic BaseModel)
- Must define from_validated_params(cls, params) classmethod
"""

from pydantic import BaseModel


def register_indicator(name: str, description: str = ""):
    """
    Class decorator: auto-register indicator into IndicatorRegistry.

    Usage:
        @register_indicator('sma', description='Simple moving average')
        class SMAIndicator(BaseIndicator):
            class ParamSchema(BaseModel):
                period: int = Field(7, ge=1)

            @classmethod
            def from_validated_params(cls, params):
                return cls(**params.model_dump())

    Args:
        name: Unique indicator name
        description: Human-readable description
    """
    def decorator(cls):
        if not hasattr(cls, 'ParamSchema'):
            raise AttributeError(
                f"{cls.__name__} must define 'ParamSchema' inner class "
                f"(Pydantic BaseModel) for @register_indicator"
            )
        if not issubclass(cls.ParamSchema, BaseModel):
            raise TypeError(
                f"{cls.__name__}.ParamSchema must inherit from pydantic.BaseModel"
            )
        if not hasattr(cls, 'from_validated_params'):
            raise AttributeError(
                f"{cls.__name__} must define 'from_validated_params(cls, params)' "
                f"classmethod for @register_indicator"
            )

        # Lazy import to avoid circular deps
        from candleview.indicators.registry import IndicatorRegistry
        IndicatorRegistry.get_instance().register(
            name=name,
            cls_type=cls,
            param_schema=cls.ParamSchema,
            description=description,
        )

        return cls

    return decorator
