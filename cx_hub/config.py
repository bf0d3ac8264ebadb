# cx_hub/config.py
"""
本模块定义 cx-hub 的集中配置。

主配置 `CxHubConfig` 通过 pydantic-settings 从环境变量（前缀 `CX_`）与 `.env`
文件加载；页面加载器的可移除区块列表是一份独立的 YAML 文件，进程内只解析一次。
"""

from __future__ import annotations

import functools
import re
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cx_hub.cache import CacheConfig
from cx_hub.exceptions import ConfigurationError
from cx_hub.utils import validate_lang_codes

DEFAULT_PAGELOADER_YAML = "pageloader.yaml"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["json", "console"] = "console"


class RemovableSections(BaseModel):
    """解析时需要整体移除的区块（如导航框），按类名、RDFa 类型或模板名匹配。"""

    model_config = ConfigDict(frozen=True)

    classes: tuple[str, ...] = ()
    rdfa: tuple[str, ...] = ()
    templates: tuple[str, ...] = ()

    @field_validator("templates")
    @classmethod
    def _check_template_patterns(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"无效的模板正则 '{pattern}': {e}") from e
        return v


class PageLoaderConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    removable_sections: RemovableSections = Field(default_factory=RemovableSections)

    @classmethod
    def from_yaml(cls, path: str | Path | None = None) -> "PageLoaderConfig":
        """从 YAML 文件加载配置；未指定路径时使用包内自带的默认文件。"""
        return _load_page_loader_config(str(path) if path else None)


@functools.lru_cache(maxsize=8)
def _load_page_loader_config(path: str | None) -> PageLoaderConfig:
    try:
        if path is None:
            text = (
                resources.files("cx_hub.data")
                .joinpath(DEFAULT_PAGELOADER_YAML)
                .read_text(encoding="utf-8")
            )
        else:
            text = Path(path).read_text(encoding="utf-8")
        raw = yaml.safe_load(text) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"无法加载页面加载器配置 '{path}': {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"页面加载器配置 '{path}' 的顶层必须是映射。")
    sections = raw.get("removableSections") or {}
    try:
        return PageLoaderConfig(
            removable_sections=RemovableSections(
                classes=tuple(sections.get("classes") or ()),
                rdfa=tuple(sections.get("rdfa") or ()),
                templates=tuple(sections.get("templates") or ()),
            )
        )
    except ValueError as e:
        raise ConfigurationError(f"页面加载器配置无效: {e}") from e


class WikiConfig(BaseModel):
    """维基内容 API 与知识库 API 的地址模板。"""

    domain_template: str = "{code}.wikipedia.org"
    rest_api_template: str = "https://{domain}/api/rest_v1/"
    action_api_template: str = "https://{domain}/w/api.php"
    wikidata_api: str = "https://www.wikidata.org/w/api.php"
    user_agent: str = "cx-hub/1.0 (content translation gateway)"


class CxHubConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CX_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    default_provider: str = "debug"
    source_lang: str | None = Field(default=None)
    http_timeout: float = Field(default=30.0, gt=0)
    proxy: str | None = None
    page_loader_config_path: Path | None = None

    provider_configs: dict[str, dict[str, Any]] = Field(default_factory=dict)
    wiki: WikiConfig = Field(default_factory=WikiConfig)
    cache_config: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("source_lang")
    @classmethod
    def validate_source_lang_code(cls, v: str | None) -> str | None:
        if v is not None:
            validate_lang_codes([v])
        return v

    def load_page_loader_config(self) -> PageLoaderConfig:
        return PageLoaderConfig.from_yaml(self.page_loader_config_path)
