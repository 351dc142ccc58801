from pydantic import BaseModel, Field, field_validator, model_validator

from docassets.core.mime import ALLOWED_BINARY_TYPES, ALLOWED_IMAGE_TYPES

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB


class PathsRules(BaseModel):
    content_dir: str = "content"
    public_dir: str = "public/assets"
    output_root: str = "."
    staging_dir: str = ".docassets-cache"

    @field_validator("public_dir")
    @classmethod
    def _strip_slashes(cls, value: str) -> str:
        stripped = value.replace("\\", "/").strip("/")
        if not stripped:
            raise ValueError("public_dir must not be empty")
        return stripped


class LocaleRules(BaseModel):
    supported: list[str] = Field(default_factory=lambda: ["en", "es", "pt"])
    default: str = "en"

    @model_validator(mode="after")
    def _default_is_supported(self) -> "LocaleRules":
        if self.default not in self.supported:
            raise ValueError(f"default locale '{self.default}' is not in supported locales")
        return self


class SecurityRules(BaseModel):
    max_file_size: int = Field(default=MAX_FILE_SIZE, gt=0)
    allowed_image_types: list[str] = Field(default_factory=lambda: list(ALLOWED_IMAGE_TYPES))
    allowed_binary_types: list[str] = Field(default_factory=lambda: list(ALLOWED_BINARY_TYPES))
    enable_content_scanning: bool = True
    strict_path_validation: bool = True


class ResponsiveRules(BaseModel):
    generate_retina: bool = True
    sizes: list[int] = Field(default_factory=list)
    quality: int = Field(default=85, ge=1, le=100)


class FormatRules(BaseModel):
    enabled: bool = True
    quality: int = Field(default=85, ge=1, le=100)
    effort: int = Field(default=4, ge=0, le=9)


class ModernFormatRules(BaseModel):
    webp: FormatRules = Field(default_factory=FormatRules)
    avif: FormatRules = Field(default_factory=lambda: FormatRules(quality=80))


class OptimizationRules(BaseModel):
    generate_responsive_variants: bool = True
    generate_modern_formats: bool = True
    responsive: ResponsiveRules = Field(default_factory=ResponsiveRules)
    modern_formats: ModernFormatRules = Field(default_factory=ModernFormatRules)


class ConcurrencyRules(BaseModel):
    max_workers: int = Field(default=8, ge=1)


class AssetRules(BaseModel):
    paths: PathsRules = Field(default_factory=PathsRules)
    locales: LocaleRules = Field(default_factory=LocaleRules)
    security: SecurityRules = Field(default_factory=SecurityRules)
    optimization: OptimizationRules = Field(default_factory=OptimizationRules)
    concurrency: ConcurrencyRules = Field(default_factory=ConcurrencyRules)

    @property
    def manifest_relpath(self) -> str:
        return f"{self.paths.public_dir}/assets-manifest.json"
