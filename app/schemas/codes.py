from pydantic import BaseModel, ConfigDict


class CodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    group_code: str
    code: str
    name: str
    english_name: str | None = None
    sort_order: int | None = None
