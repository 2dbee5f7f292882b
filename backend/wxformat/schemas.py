from pydantic import BaseModel, ConfigDict, Field


class HealthOut(BaseModel):
    status: str


class FormatTextRequest(BaseModel):
    text: str
    theme: str = "default"
    provider: str | None = None


class FormatTextOut(BaseModel):
    html: str
    message: str


class ThemeRecommendRequest(BaseModel):
    text: str
    provider: str | None = None


class ThemeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    theme: str
    theme_name: str = Field(alias="themeName")


class MarkupRequest(BaseModel):
    html: str = ""


class MarkupOut(BaseModel):
    html: str


class ValidationOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_valid: bool = Field(alias="isValid")
    errors: list[str] = Field(default_factory=list)


class ClipboardOut(BaseModel):
    html: str
    text: str


class TemplateIn(BaseModel):
    id: str | None = None
    name: str
    description: str = ""
    html: str
    theme: str = "default"


class TemplateOut(BaseModel):
    id: str
    name: str
    description: str
    html: str
    theme: str
    timestamp: str


class TemplateSavedOut(BaseModel):
    id: str


class TemplateDeleteOut(BaseModel):
    template_id: str
    deleted: bool


class ApplyTemplateRequest(BaseModel):
    text: str
