"""Pydantic configuration models for markeddown."""

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_serializer, field_validator

logger = logging.getLogger(__name__)


def _clean_selectors(values: Any) -> Any:
    """Trim selector strings and drop blank ones."""
    if isinstance(values, (list, tuple)):
        return tuple(
            v.strip() if isinstance(v, str) else v
            for v in values
            if not (isinstance(v, str) and not v.strip())
        )
    return values


class ExclusionConfig(BaseModel):
    """
    Selectors removed from the content before conversion.

    Frozen once validated: a loaded config is shared read-only by every
    conversion for the lifetime of the process.

    YAML format (camelCase and snake_case keys are both accepted):
        globalExclusions:
          - .sidebar
          - "#comments"
        templateExclusions:
          blog/_entry:
            - "#comments"
            - .author-bio
          _layouts/article:
            - .sidebar
    """

    global_exclusions: tuple[str, ...] = Field(
        default=(),
        alias="globalExclusions",
        description="Selectors always excluded from the output",
    )
    template_exclusions: Mapping[str, tuple[str, ...]] = Field(
        default_factory=lambda: MappingProxyType({}),
        alias="templateExclusions",
        description="Context pattern -> selectors excluded when the pattern matches",
    )
    template_suffixes: tuple[str, ...] = Field(
        default=(".twig",),
        alias="templateSuffixes",
        description="Template-file suffixes stripped before pattern matching",
    )

    model_config = {"extra": "forbid", "frozen": True, "populate_by_name": True}

    @field_validator("global_exclusions", mode="before")
    @classmethod
    def _clean_global(cls, v: Any) -> Any:
        return _clean_selectors(v)

    @field_validator("template_exclusions", mode="before")
    @classmethod
    def _clean_scoped(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return {str(pattern): _clean_selectors(selectors) for pattern, selectors in v.items()}
        return v

    @field_validator("template_exclusions")
    @classmethod
    def _freeze_scoped(cls, v: Mapping[str, tuple[str, ...]]) -> Mapping[str, tuple[str, ...]]:
        return MappingProxyType(dict(v))

    @field_serializer("template_exclusions")
    def _dump_scoped(self, v: Mapping[str, tuple[str, ...]]) -> dict[str, list[str]]:
        return {pattern: list(selectors) for pattern, selectors in v.items()}

    @property
    def is_empty(self) -> bool:
        return not self.global_exclusions and not any(self.template_exclusions.values())


class ConverterConfig(BaseModel):
    """Options forwarded to the html2text engine."""

    body_width: int = Field(0, ge=0, description="Max line width (0 = no wrapping)")
    inline_links: bool = Field(True, description="Use inline [text](url) links")
    wrap_links: bool = Field(False, description="Wrap long links")
    ignore_images: bool = Field(False, description="Skip image conversion")
    ignore_tables: bool = Field(False, description="Skip table conversion")
    unicode_snob: bool = Field(True, description="Use Unicode characters instead of ASCII fallbacks")
    escape_snob: bool = Field(False, description="Escape every Markdown special character")
    emphasis_mark: str = Field("_", min_length=1, description="Marker for italic text")
    strong_mark: str = Field("**", min_length=1, description="Marker for bold text")

    model_config = {"extra": "forbid", "frozen": True}


class NormalizerConfig(BaseModel):
    """Which optional repair families run on top of the core normalization."""

    repair_links: bool = Field(True, description="Split broken links and collapse duplicates")
    repair_adjacency: bool = Field(
        True,
        description="Insert blank lines around headings, images and lists",
    )

    model_config = {"extra": "forbid", "frozen": True}


class MarkedDownConfig(BaseModel):
    """
    Root configuration model for markeddown.

    Example:
        config = MarkedDownConfig(
            exclusions=ExclusionConfig(global_exclusions=(".sidebar",)),
        )

    YAML format:
        exclusions:
          globalExclusions:
            - .sidebar
        normalizer:
          repair_adjacency: false
        log_level: DEBUG
    """

    exclusions: ExclusionConfig = Field(default_factory=ExclusionConfig)
    converter: ConverterConfig = Field(default_factory=ConverterConfig)
    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid", "frozen": True}

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(
            self.model_dump(mode="json", exclude_none=True, by_alias=True),
            default_flow_style=False,
            sort_keys=False,
        )

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "MarkedDownConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("Configuration root must be a mapping")
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "MarkedDownConfig":
        """Load config from YAML file."""
        return cls.from_yaml(Path(path).read_text(encoding="utf-8"))


class ConfigLoader:
    """
    Read-through loader for a configuration file.

    The file is read on the first call to get() and the parsed config is
    reused until invalidate() is called. A missing file gives the default
    config, which excludes nothing beyond the built-in tags.

    Example:
        loader = ConfigLoader(Path("config/marked-down.yaml"))
        converter = Converter(config_loader=loader)
        ...
        loader.invalidate()  # next conversion re-reads the file
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._config: Optional[MarkedDownConfig] = None

    @property
    def loaded(self) -> bool:
        return self._config is not None

    def get(self) -> MarkedDownConfig:
        if self._config is None:
            self._config = self._load()
        return self._config

    def invalidate(self) -> None:
        """Drop the cached config so the next get() reloads the file."""
        self._config = None

    def _load(self) -> MarkedDownConfig:
        if not self.path.exists():
            logger.debug(f"No config file at {self.path}, using defaults")
            return MarkedDownConfig()

        config = MarkedDownConfig.from_yaml_file(self.path)
        logger.info(f"Loaded configuration from {self.path}")
        return config
