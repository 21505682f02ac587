from pydantic import BaseModel, ConfigDict, Field, model_validator

SUPPORTED_OPENAPI_PREFIX = "3.1."


class EmitterConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    openapi_version: str = Field(default="3.1.0", alias="openapi")
    title: str = "API"
    version: str = "1.0.0"
    description: str | None = None
    include_schema_dialect: bool = False
    include_vendor_extensions: bool = True
    check_fragments: bool = False

    @model_validator(mode="after")
    def _validate_config(self) -> "EmitterConfig":
        if not self.openapi_version.startswith(SUPPORTED_OPENAPI_PREFIX):
            raise ValueError("Only OpenAPI 3.1.x documents are supported.")
        if not self.title.strip():
            raise ValueError("title must not be empty.")
        if not self.version.strip():
            raise ValueError("version must not be empty.")
        return self
