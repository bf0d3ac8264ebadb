# cx_hub/adaptation/models.py
"""适配结果的数据模型。"""

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class CategoryAdaptation(BaseModel):
    """一个源分类在目标语言维基中的对应结果。"""

    model_config = ConfigDict(frozen=True)

    source_name: str
    target_name: str | None = None
    adapted: bool = False


class TitleAdaptation(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_language: str
    target_language: str
    source_title: str
    target_title: str

    @model_validator(mode="before")
    @classmethod
    def _default_target_title(cls, data: Any) -> Any:
        # 找不到更好的译名时，目标标题沿用源标题
        if isinstance(data, dict) and not data.get("target_title"):
            data = {**data, "target_title": data.get("source_title")}
        return data
