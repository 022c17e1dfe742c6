from datetime import timedelta

from pydantic import BaseModel, Field

from src.components.api_keys.models import ApiKeysConfig
from src.components.static_sites.models import StaticSitesConfig
from src.components.tokens.models import TokenConfig


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class NewslettersRules(BaseModel):
    token_expires_in_seconds: int = Field(7200, gt=0)
    token_id_length: int = Field(63, ge=32)
    subscription_id_length: int = Field(15, ge=8)
    confirmation_base_url: str = "http://localhost:8000"
    confirmation_path: str = "/newsletters/confirm"

    def token_config(self) -> TokenConfig:
        return TokenConfig(
            expires_in=timedelta(seconds=self.token_expires_in_seconds),
            id_length=self.token_id_length,
        )


class ApiKeysRules(BaseModel):
    namespace: str = "api_keys"
    key_min_size: int = 10
    key_max_size: int = 500
    value_max_size: int = 500
    id_min_size: int = 10
    id_max_size: int = 500
    policies_num_max: int = 1000
    cache_max_age: int = 3600

    def to_config(self) -> ApiKeysConfig:
        return ApiKeysConfig(
            key_min_size=self.key_min_size,
            key_max_size=self.key_max_size,
            value_max_size=self.value_max_size,
            id_min_size=self.id_min_size,
            id_max_size=self.id_max_size,
            policies_num_max=self.policies_num_max,
            cache_max_age=self.cache_max_age,
        )


class StaticSitesRules(BaseModel):
    index_name: str = "index.html"
    content_extensions: list[str] = Field(default_factory=lambda: [".html"])
    cache_content_seconds: int = 3600
    cache_assets_seconds: int = 7200
    cache_not_found_seconds: int = 3600

    def to_config(self) -> StaticSitesConfig:
        return StaticSitesConfig(
            index_name=self.index_name,
            content_extensions=tuple(self.content_extensions),
            cache_content=self.cache_content_seconds,
            cache_assets=self.cache_assets_seconds,
            cache_not_found=self.cache_not_found_seconds,
        )


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)
    run_migrations_on_startup: bool = True


class Rules(BaseModel):
    project: ProjectRules
    newsletters: NewslettersRules = Field(default_factory=NewslettersRules)
    api_keys: ApiKeysRules = Field(default_factory=ApiKeysRules)
    static_sites: StaticSitesRules = Field(default_factory=StaticSitesRules)
    ops: OpsRules = Field(default_factory=OpsRules)
