# cx_hub/mt/reduced_html.py
"""
默认的 HTML 翻译策略，供不能原生保留标记的提供方使用。

流程：
1. 精简：把每个标签（及注释）替换为编号占位符 `⟦N⟧`，文本中的字符实体解码为字符；
   原文中本来就有的 `⟦`、`⟧` 字符也各占一个占位符；
2. 翻译：精简后的文本整体交给提供方的 `translate_text`；
3. 还原：把译文中的占位符替换回原始标签，文本重新做 HTML 转义。

提供方丢失的占位符按原始顺序追加在译文末尾，保证输出的标签依然成对。
"""

from __future__ import annotations

import html
import re
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from cx_hub.mt.base import MTClient

logger = structlog.get_logger(__name__)

TAG_PATTERN = re.compile(
    r"<!--.*?-->|</?[A-Za-z][^\s/>]*(?:[^>\"']|\"[^\"]*\"|'[^']*')*>", re.S
)
PLACEHOLDER_PATTERN = re.compile(r"⟦(\d+)⟧")
DELIMITER_PATTERN = re.compile(r"[⟦⟧]")


def _reduce_text(text: str, tags: list[str], parts: list[str]) -> None:
    text = html.unescape(text)
    position = 0
    for match in DELIMITER_PATTERN.finditer(text):
        parts.append(text[position : match.start()])
        parts.append(f"⟦{len(tags)}⟧")
        tags.append(match.group(0))
        position = match.end()
    parts.append(text[position:])


def reduce_html(source_html: str) -> tuple[str, list[str]]:
    """返回 (精简文本, 按出现顺序排列的原始标签列表)。"""
    tags: list[str] = []
    parts: list[str] = []
    position = 0
    for match in TAG_PATTERN.finditer(source_html):
        _reduce_text(source_html[position : match.start()], tags, parts)
        parts.append(f"⟦{len(tags)}⟧")
        tags.append(match.group(0))
        position = match.end()
    _reduce_text(source_html[position:], tags, parts)
    return "".join(parts), tags


def expand_html(translated: str, tags: list[str]) -> str:
    """把占位符还原为原始标签；重复或越界的占位符被丢弃，缺失的追加在末尾。"""
    parts: list[str] = []
    used: set[int] = set()
    position = 0
    for match in PLACEHOLDER_PATTERN.finditer(translated):
        parts.append(html.escape(translated[position : match.start()], quote=False))
        index = int(match.group(1))
        if index < len(tags) and index not in used:
            parts.append(tags[index])
            used.add(index)
        position = match.end()
    parts.append(html.escape(translated[position:], quote=False))

    missing = [i for i in range(len(tags)) if i not in used]
    if missing:
        logger.debug("译文丢失了部分占位符，已追加到末尾。", missing=missing)
        parts.extend(tags[i] for i in missing)
    return "".join(parts)


def has_translatable_text(reduced: str) -> bool:
    return bool(PLACEHOLDER_PATTERN.sub("", reduced).strip())


async def translate_reduced_html(
    client: "MTClient", source_lang: str, target_lang: str, source_html: str
) -> str:
    reduced, tags = reduce_html(source_html)
    if not has_translatable_text(reduced):
        # 纯标记内容无需调用后端
        return source_html
    translated = await client.translate_text(source_lang, target_lang, reduced)
    return expand_html(translated, tags)
