from pydantic import BaseModel, Field, ValidationError, field_validator


class SettingsSchema(BaseModel):
    api_url: str = "http://localhost:3000"
    api_token: str | None = None
    weight_unit: str = "kg"
    default_sets_count: int = Field(3, gt=0)
    default_rest_seconds: int = Field(120, ge=0)
    language: str = "en"
    log_level: str = "INFO"
    log_file: str | None = None
    atomic_save: bool = False
    duplicate_policy: str = "last_seen"

    @field_validator("weight_unit")
    @classmethod
    def _unit(cls, value: str) -> str:
        if value not in {"kg", "lb"}:
            raise ValueError("weight_unit must be 'kg' or 'lb'")
        return value

    @field_validator("duplicate_policy")
    @classmethod
    def _policy(cls, value: str) -> str:
        if value not in {"last_seen", "most_recent"}:
            raise ValueError("duplicate_policy must be 'last_seen' or 'most_recent'")
        return value

    @property
    def use_metric(self) -> bool:
        return self.weight_unit == "kg"


def validate_settings(data: dict) -> SettingsSchema:
    try:
        return SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
