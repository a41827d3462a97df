import hashlib
from pathlib import Path
from typing import Literal

import pydantic
import pydantic_settings
from hyapp.pydsettings import YAMLedDotEnvSettingsSource, YAMLedEnvSettingsSource

from .chains.chain_decoder import DEFAULT_DATA_DIR

TEnvName = Literal["dev", "tests", "staging", "prod"]
CONFIG_ROOT = Path.home() / ".config/evmchains"
ENV_FILE_PATH = CONFIG_ROOT / "env"


class SettingsOptsBase(pydantic_settings.BaseSettings):
    """Overridable key-value settings, base version that only reads init arguments"""

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix="EVMCHAINS_",
        env_file=ENV_FILE_PATH,
        frozen=True,
    )

    def __repr__(self) -> str:
        hash_str = hashlib.sha256(self.model_dump_json().encode()).hexdigest()[:16]
        return f"{self.__class__.__name__}(env={self.env}, hash={hash_str}, ...)"

    def __str__(self) -> str:
        return self.__repr__()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[pydantic_settings.BaseSettings],
        init_settings: pydantic_settings.PydanticBaseSettingsSource,
        env_settings: pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[pydantic_settings.PydanticBaseSettingsSource, ...]:
        return (init_settings,)

    env: TEnvName = "dev"  # `EVMCHAINS_ENV`

    # Directory with the `eip155-<chain_id>.json` files.
    data_dir: Path = DEFAULT_DATA_DIR  # `EVMCHAINS_DATA_DIR`
    # Fail the catalog build when a file's `chainId` differs from its name
    # (otherwise only a warning is logged and the file name wins).
    strict_chain_id: bool = False
    # Build the catalog in `init_all` instead of on the first lookup.
    preload_catalog: bool = False


class SettingsOptsEnv(SettingsOptsBase):
    """Overridable settings class that also loads values from `os.environ`"""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[pydantic_settings.BaseSettings],
        init_settings: pydantic_settings.PydanticBaseSettingsSource,
        env_settings: pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[pydantic_settings.PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            YAMLedDotEnvSettingsSource(settings_cls),
            YAMLedEnvSettingsSource(settings_cls),
        )


class Settings(pydantic.BaseModel):
    opts: SettingsOptsBase = pydantic.Field(default_factory=SettingsOptsEnv)
