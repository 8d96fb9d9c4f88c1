"""
Indicator Registry: singleton registry for indicator discovery and creation.

Provides:
- IndicatorInfo: Registered indicator metadata
- IndicatorRegistry: Singleton for indicator registration, discovery, and instantiation

Design Principles:
- Registration happens at import time via @register_indicator decorator
- Queries are read-only dict lookups
- Pydantic validation only in create()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from candleview.core.exceptions import InvalidArgumentError


@dataclass(frozen=True)
class IndicatorInfo:
    """Registered indicator metadata."""
    name: str
    cls: Type
    param_schema: Type[BaseModel]
    description: str = ""


class IndicatorRegistry:
    """
    Singleton indicator registry.

    Indicators self-register via @register_indicator decorator at import time.
    Hosts query available indicators and their parameter schemas, and create
    configured instances.
    """
    _instance: Optional[IndicatorRegistry] = None

    def __init__(self):
        self._indicators: Dict[str, IndicatorInfo] = {}

    @classmethod
    def get_instance(cls) -> IndicatorRegistry:
        """Get or create singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset singleton for testing."""
        cls._instance = None

    def register(
        self,
        name: str,
        cls_type: Type,
        param_schema: Type[BaseModel],
        description: str = "",
    ) -> None:
        """Register an indicator. Overwrites if duplicate."""
        self._indicators[name] = IndicatorInfo(
            name=name,
            cls=cls_type,
            param_schema=param_schema,
            description=description,
        )

    def get_available(self) -> List[IndicatorInfo]:
        """List registered indicators."""
        return list(self._indicators.values())

    def get_info(self, name: str) -> Optional[IndicatorInfo]:
        return self._indicators.get(name)

    def get_param_schema(self, name: str) -> Optional[Type[BaseModel]]:
        """Get Pydantic param schema for an indicator."""
        info = self.get_info(name)
        return info.param_schema if info else None

    def create(self, name: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Create indicator instance with Pydantic-validated params.

        Args:
            name: Registered indicator name
            params: Parameter dict (validated by the indicator's ParamSchema)

        Returns:
            Indicator instance

        Raises:
            InvalidArgumentError: If the indicator is unknown or params are invalid
        """
        info = self.get_info(name)
        if info is None:
            available = sorted(self._indicators)
            raise InvalidArgumentError(
                f"Indicator '{name}' not found. Available: {available}"
            )
        try:
            validated = info.param_schema(**(params or {}))
        except ValidationError as e:
            raise InvalidArgumentError(
                f"Invalid parameters for indicator '{name}': {e}"
            ) from e
        return info.cls.from_validated_params(validated)

    def get_summary(self) -> List[Dict[str, Any]]:
        """UI-friendly summary of all indicators with JSON schemas."""
        return [
            {
                "name": info.name,
                "description": info.description,
                "schema": info.param_schema.model_json_schema(),
            }
            for info in self._indicators.values()
        ]
