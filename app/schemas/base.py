from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from app.core.exceptions import ValidationException

ModelType = TypeVar("ModelType", bound=BaseModel)


class CamelModel(BaseModel):
    """Base schema exchanging camelCase keys with the client."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FormModel(CamelModel):
    """Schema fed from multipart form fields."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_blank_fields(cls, data: Any) -> Any:
        # browsers submit untouched inputs as empty strings
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if not (isinstance(v, str) and not v.strip())}
        return data


def validate_payload(model: Type[ModelType], data: Dict[str, Any]) -> ModelType:
    """Validate ``data`` against ``model``, raising the API's 400 error on failure."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        first = errors[0] if errors else {"field": "", "message": "Invalid input"}
        raise ValidationException(
            message=f"{first['field']}: {first['message']}" if first["field"] else first["message"],
            details={"errors": errors},
        )
