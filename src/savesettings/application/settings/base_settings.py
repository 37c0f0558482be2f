"""
Base Settings

Foundation for the data transfer objects (DTOs) that settings instances
persist. A DTO is a flat dataclass whose fields all have defaults, so
that DTO() is the default-valued snapshot of a settings domain.

Features:
- Dataclass-based schema with type safety
- JSON-compatible to_dict()/from_dict() with tolerant loading
  (missing keys use defaults, unknown keys are dropped)
- Field validation and clamping via validated_field()
- Construction-time serializability check (is_serializable)

Usage:
    @dataclass
    class GraphicsData(BaseSettings):
        fullscreen: bool = True
        gamma: float = validated_field(1.0, min_value=0.5, max_value=2.0)
"""
from dataclasses import dataclass, asdict, fields, field, is_dataclass, replace
from typing import Optional, Dict, Any, Type, List, Callable, Union, TypeVar, get_args, get_origin, get_type_hints
from enum import Enum
import math
import types


T = TypeVar('T', bound='BaseSettings')


def clamp01(value: float) -> float:
    """Clamp a number into [0, 1]."""
    return clamp(value, 0.0, 1.0)


def clamp(value: float, minimum: float, maximum: float) -> float:
    value = float(value)
    if math.isnan(value):
        return minimum
    return max(minimum, min(maximum, value))


def values_differ(a: Any, b: Any) -> bool:
    """
    Change test used by setters: floats compare approximately,
    everything else by equality.
    """
    if isinstance(a, float) or isinstance(b, float):
        if isinstance(a, (int, float)) and isinstance(b, (int, float)):
            return not math.isclose(a, b, rel_tol=1e-6, abs_tol=1e-6)
    return a != b


# =============================================================================
# Validation Framework
# =============================================================================

@dataclass
class ValidationResult:
    """
    Result of validating settings.

    Attributes:
        valid: True if all validations passed
        errors: List of error messages (validation failures)
        warnings: List of warning messages (non-blocking issues)
    """
    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str):
        """Add an error and mark as invalid."""
        self.errors.append(message)
        self.valid = False

    def add_warning(self, message: str):
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(message)

    def merge(self, other: 'ValidationResult'):
        """Merge another ValidationResult into this one."""
        if not other.valid:
            self.valid = False
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def __bool__(self) -> bool:
        return self.valid


@dataclass
class FieldValidator:
    """
    Validation rules for a settings field.

    Use in field metadata (usually through validated_field()):

        volume: float = validated_field(1.0, min_value=0.0, max_value=1.0)
        quality: str = validated_field('high', choices=['low', 'medium', 'high'])
    """
    min_value: Optional[Union[int, float]] = None
    max_value: Optional[Union[int, float]] = None
    choices: Optional[List[Any]] = None
    allow_none: bool = True
    # Signature: (value, field_name) -> Optional[str] (error message or None)
    custom: Optional[Callable[[Any, str], Optional[str]]] = None

    def validate(self, value: Any, field_name: str) -> ValidationResult:
        """
        Validate a value against this validator's rules.

        Args:
            value: The value to validate
            field_name: Name of the field (for error messages)
        """
        result = ValidationResult()

        if value is None:
            if not self.allow_none:
                result.add_error(f"{field_name}: Cannot be None")
            return result

        is_number = isinstance(value, (int, float)) and not isinstance(value, bool)

        if self.min_value is not None and is_number and value < self.min_value:
            result.add_error(f"{field_name}: Value {value} is below minimum {self.min_value}")

        if self.max_value is not None and is_number and value > self.max_value:
            result.add_error(f"{field_name}: Value {value} is above maximum {self.max_value}")

        if self.choices is not None:
            check_value = value.value if isinstance(value, Enum) else value
            valid_choices = [c.value if isinstance(c, Enum) else c for c in self.choices]
            if check_value not in valid_choices:
                result.add_error(f"{field_name}: Value '{value}' not in allowed choices: {self.choices}")

        if self.custom is not None:
            error = self.custom(value, field_name)
            if error:
                result.add_error(error)

        return result

    def clamp(self, value: Any) -> Any:
        """Pull a numeric value into [min_value, max_value]; other values pass through."""
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return value
        low = self.min_value if self.min_value is not None else -math.inf
        high = self.max_value if self.max_value is not None else math.inf
        clamped = clamp(value, low, high)
        return int(clamped) if isinstance(value, int) else clamped


def validated_field(
    default: Any = None,
    *,
    min_value: Optional[Union[int, float]] = None,
    max_value: Optional[Union[int, float]] = None,
    choices: Optional[List[Any]] = None,
    allow_none: bool = True,
    custom: Optional[Callable[[Any, str], Optional[str]]] = None,
    **kwargs
):
    """
    Create a dataclass field with a FieldValidator in its metadata.

    Example:
        @dataclass
        class AudioVolumeData(BaseSettings):
            master_volume: float = validated_field(1.0, min_value=0.0, max_value=1.0)
    """
    validator = FieldValidator(
        min_value=min_value,
        max_value=max_value,
        choices=choices,
        allow_none=allow_none,
        custom=custom,
    )

    metadata = dict(kwargs.pop('metadata', {}))
    metadata['validator'] = validator

    return field(default=default, metadata=metadata, **kwargs)


# =============================================================================
# Serialization helpers
# =============================================================================

_PRIMITIVES = (bool, int, float, str)


def _encode_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseSettings):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_encode_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _encode_value(v) for k, v in value.items()}
    return value


def _decode_value(annotation: Any, value: Any, field_name: str) -> Any:
    """Convert a JSON value back into the annotated field type."""
    if value is None or annotation is Any:
        return value

    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Union or (hasattr(types, "UnionType") and origin is types.UnionType):
        non_none = [a for a in args if a is not type(None)]
        if len(non_none) == 1:
            return _decode_value(non_none[0], value, field_name)
        return value

    if origin in (list, List):
        if not isinstance(value, list):
            raise TypeError(f"{field_name}: expected list, got {type(value).__name__}")
        item_type = args[0] if args else Any
        return [_decode_value(item_type, v, field_name) for v in value]

    if origin in (dict, Dict):
        if not isinstance(value, dict):
            raise TypeError(f"{field_name}: expected object, got {type(value).__name__}")
        item_type = args[1] if len(args) == 2 else Any
        return {k: _decode_value(item_type, v, field_name) for k, v in value.items()}

    if isinstance(annotation, type):
        if issubclass(annotation, Enum):
            return annotation(value)
        if issubclass(annotation, BaseSettings):
            if not isinstance(value, dict):
                raise TypeError(f"{field_name}: expected object, got {type(value).__name__}")
            return annotation.from_dict(value)
        if annotation is bool:
            if not isinstance(value, bool):
                raise TypeError(f"{field_name}: expected bool, got {type(value).__name__}")
            return value
        if annotation is float:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"{field_name}: expected number, got {type(value).__name__}")
            return float(value)
        if annotation is int:
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{field_name}: expected integer, got {type(value).__name__}")
            return value
        if annotation is str:
            if not isinstance(value, str):
                raise TypeError(f"{field_name}: expected string, got {type(value).__name__}")
            return value

    return value


def _field_types(data_class: Type) -> Dict[str, Any]:
    """Resolved field annotations; unresolvable string annotations become Any."""
    try:
        return get_type_hints(data_class)
    except Exception:
        return {
            f.name: (Any if isinstance(f.type, str) else f.type)
            for f in fields(data_class)
        }


def _is_serializable_type(annotation: Any, seen: set) -> bool:
    if annotation is Any or annotation is type(None):
        return True

    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Union or (hasattr(types, "UnionType") and origin is types.UnionType):
        return all(_is_serializable_type(a, seen) for a in args)
    if origin in (list, List):
        return all(_is_serializable_type(a, seen) for a in args)
    if origin in (dict, Dict):
        if args and args[0] is not str:
            return False
        return all(_is_serializable_type(a, seen) for a in args[1:])

    if isinstance(annotation, type):
        if issubclass(annotation, _PRIMITIVES) or issubclass(annotation, Enum):
            return True
        if issubclass(annotation, BaseSettings):
            return is_serializable(annotation, _seen=seen)
    return False


def is_serializable(data_class: Type, _seen: Optional[set] = None) -> bool:
    """
    Check that a DTO class can be round-tripped through JSON.

    Accepts primitive types and str themselves, and BaseSettings dataclasses
    whose fields are primitives, str, Enum, lists, str-keyed dicts, Optional
    of those, or nested BaseSettings. The check is advisory: callers log a
    failure instead of refusing to run.
    """
    if data_class in _PRIMITIVES:
        return True
    if not (isinstance(data_class, type) and issubclass(data_class, BaseSettings) and is_dataclass(data_class)):
        return False

    seen = set() if _seen is None else _seen
    if data_class in seen:
        return True
    seen.add(data_class)

    try:
        hints = get_type_hints(data_class)
    except Exception:
        return False

    for f in fields(data_class):
        if not _is_serializable_type(hints.get(f.name, Any), seen):
            return False
    return True


# =============================================================================
# BaseSettings
# =============================================================================

@dataclass
class BaseSettings:
    """
    Base class for all settings DTOs.

    Subclasses are dataclasses whose fields all carry defaults.

    Example:
        @dataclass
        class AudioVolumeData(BaseSettings):
            master_volume: float = validated_field(1.0, min_value=0.0, max_value=1.0)
            muted: bool = False
    """

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to a JSON-compatible dictionary for storage."""
        return {f.name: _encode_value(getattr(self, f.name)) for f in fields(self)}

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
        """
        Create settings from a dictionary.

        Missing keys keep their defaults and unknown keys are ignored, so
        stored entries survive fields being added or removed.

        Raises:
            TypeError: If data is not a dict or a value has the wrong type
            ValueError: If an Enum field holds an unknown value
        """
        if not isinstance(data, dict):
            raise TypeError(f"{cls.__name__}: expected object, got {type(data).__name__}")

        hints = _field_types(cls)
        values = {}
        for f in fields(cls):
            if f.name in data:
                values[f.name] = _decode_value(hints.get(f.name, Any), data[f.name], f.name)
        return cls(**values)

    def copy(self: T) -> T:
        return type(self).from_dict(self.to_dict())

    def validate(self) -> ValidationResult:
        """
        Validate all fields that carry a FieldValidator in their metadata.
        Fields without validators are assumed valid.
        """
        result = ValidationResult()
        for f in fields(self):
            validator = f.metadata.get('validator') if f.metadata else None
            if isinstance(validator, FieldValidator):
                result.merge(validator.validate(getattr(self, f.name), f.name))
        return result

    def is_valid(self) -> bool:
        return self.validate().valid

    def clamped(self: T) -> T:
        """
        Return a copy with numeric fields pulled into their validator ranges.
        """
        changes = {}
        for f in fields(self):
            validator = f.metadata.get('validator') if f.metadata else None
            if isinstance(validator, FieldValidator):
                value = getattr(self, f.name)
                clamped_value = validator.clamp(value)
                if clamped_value != value:
                    changes[f.name] = clamped_value
        return replace(self, **changes) if changes else self

    @classmethod
    def get_field_validators(cls) -> Dict[str, FieldValidator]:
        """
        Map of field name -> FieldValidator for fields that have one.
        """
        validators = {}
        for f in fields(cls):
            validator = f.metadata.get('validator') if f.metadata else None
            if isinstance(validator, FieldValidator):
                validators[f.name] = validator
        return validators
