# cx_hub/utils.py
"""本模块包含项目范围内的通用工具函数。"""

import re
from collections.abc import Iterable, Mapping
from typing import Any

from langcodes import Language
from langcodes.tag_parser import LanguageTagError

# 语言子标签应该由 2-3 个字母组成 (BCP 47)
LANGUAGE_SUBTAG_PATTERN = re.compile(r"^[a-zA-Z]{2,3}$")

# 维基站点使用的非标准代码，langcodes 无法直接识别
WIKI_LANGUAGE_CODES = frozenset({"simple", "be-tarask", "map-bms", "roa-tara"})


def validate_lang_codes(lang_codes: Iterable[str]) -> None:
    """使用 `langcodes` 库校验语言代码是否符合 BCP 47 规范，维基专用代码直接放行。"""
    for code in lang_codes:
        if code in WIKI_LANGUAGE_CODES:
            continue
        try:
            lang = Language.get(code)
            if not lang.language or not LANGUAGE_SUBTAG_PATTERN.match(lang.language):
                raise LanguageTagError(
                    f"Tag '{code}' lacks a valid 2-3 letter language subtag."
                )
        except LanguageTagError as e:
            raise ValueError(f"提供的语言代码 '{code}' 格式无效。原因: {e}") from e


def get_prop(path: Iterable[str | int], obj: Any) -> Any:
    """沿给定路径安全地读取嵌套的字典/列表，任一环节缺失即返回 None。"""
    current = obj
    for key in path:
        if isinstance(current, Mapping):
            current = current.get(key)
        elif isinstance(current, list) and isinstance(key, int):
            current = current[key] if -len(current) <= key < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current
