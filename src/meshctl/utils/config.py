import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError, VersionMismatchError

logger = logging.getLogger(__name__)

LATEST_VERSION = "latest"
_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)(?:\.(\d+))?")


def get_default_config_dir() -> Path:
    return Path(os.path.expanduser("~/.meshery"))


def get_default_config_path() -> Path:
    return get_default_config_dir() / "config.yaml"


def get_dotenv_path() -> Path:
    env_override = os.environ.get("MESHCTL_ENV_FILE")
    if env_override:
        return Path(env_override).expanduser().resolve()

    cwd_env = Path.cwd() / ".env"
    if cwd_env.is_file():
        return cwd_env

    return get_default_config_dir() / ".env"


class Settings(BaseSettings):
    CONFIG_PATH: str = Field(default=str(get_default_config_path()), description="Path to the meshctl context file (Set via MESHCTL_CONFIG_PATH)")
    REQUEST_TIMEOUT: float = Field(default=10.0, description="Timeout in seconds for API requests")
    PING_TIMEOUT: float = Field(default=3.0, description="Timeout in seconds for the server reachability check")
    PAGE_SIZE: int = Field(default=25, ge=1, description="Maximum number of rows shown per page")
    LOG_DIR: str = Field(default=".logs", description="Directory for the --debug log file")

    # Also switched on by the --verbose / --debug flags
    VERBOSE: bool = Field(default=False, description="Verbose mode")
    DEBUG: bool = Field(default=False, description="Enable debug logging output")

    model_config = SettingsConfigDict(
        env_prefix="MESHCTL_",
        env_file=get_dotenv_path(),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra='ignore'
    )


def parse_version(version: str) -> tuple[int, int]:
    """Return (major, minor) for a version string like ``v0.7.2``."""
    match = _VERSION_RE.match(version.strip())
    if not match:
        raise VersionMismatchError(f"'{version}' is not a valid version")
    return int(match.group(1)), int(match.group(2))


class Token(BaseModel):
    name: str
    location: str


class Context(BaseModel):
    """A named Meshery server endpoint and the version it is expected to run."""

    model_config = ConfigDict(extra="allow")

    endpoint: str
    token: Optional[str] = None
    version: str = LATEST_VERSION
    platform: Optional[str] = None
    provider: Optional[str] = None
    components: List[str] = Field(default_factory=list)

    def validate_version(self, server_version: str | None) -> None:
        """Check this context against the version the server reports.

        ``latest`` matches any server. Otherwise major and minor must agree.
        """
        if not self.version or self.version == LATEST_VERSION:
            return
        wanted = parse_version(self.version)
        if not server_version:
            raise VersionMismatchError(
                f"unable to determine the server version to compare with context version {self.version}"
            )
        running = parse_version(server_version)
        if wanted != running:
            raise VersionMismatchError(
                f"context version {self.version} is not compatible with server version {server_version}. "
                "Update the context version or the server."
            )


class MesheryCtlConfig(BaseModel):
    """The parsed context file (``~/.meshery/config.yaml``)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    contexts: Dict[str, Context] = Field(default_factory=dict)
    current_context: Optional[str] = Field(default=None, alias="current-context")
    tokens: List[Token] = Field(default_factory=list)
    path: Path = Field(default_factory=get_default_config_path, exclude=True)

    def get_current_context(self) -> Context:
        if not self.current_context:
            raise ConfigError(f"current-context is not set in {self.path}")
        ctx = self.contexts.get(self.current_context)
        if ctx is None:
            raise ConfigError(
                f"current-context '{self.current_context}' does not exist. "
                f"Available contexts: {', '.join(sorted(self.contexts)) or 'none'}"
            )
        return ctx

    def get_base_url(self) -> str:
        return self.get_current_context().endpoint.rstrip("/")

    def get_token(self, name: str) -> Token:
        for token in self.tokens:
            if token.name == name:
                return token
        raise ConfigError(f"token '{name}' is not declared in {self.path}")

    def get_auth_cookies(self) -> Dict[str, str]:
        """Read the current context's token file into request cookies.

        A context without a token sends no cookies.
        """
        ctx = self.get_current_context()
        if not ctx.token:
            return {}
        token = self.get_token(ctx.token)
        location = Path(token.location).expanduser()
        if not location.is_absolute():
            location = self.path.parent / location
        try:
            data: Dict[str, Any] = json.loads(location.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigError(f"unable to read token file {location}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"token file {location} does not hold a JSON object")

        cookies = {}
        if data.get("token"):
            cookies["token"] = str(data["token"])
        provider = data.get("meshery-provider") or ctx.provider
        if provider:
            cookies["meshery-provider"] = str(provider)
        return cookies


def load_mesheryctl_config(path: str | Path | None = None, settings: Settings | None = None) -> MesheryCtlConfig:
    """Load and validate the context file.

    Args:
        path: Explicit file path (``--config``). Falls back to settings.
        settings: Settings providing CONFIG_PATH.

    Raises:
        ConfigError: If the file is missing, unparsable or has no usable current context.
    """
    if path is None:
        path = (settings or Settings()).CONFIG_PATH
    config_path = Path(path).expanduser()
    if not config_path.is_file():
        raise ConfigError(
            f"config file not found at {config_path}. Create one or point MESHCTL_CONFIG_PATH at it."
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"error processing config {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"error processing config {config_path}: expected a mapping at the top level")

    try:
        cfg = MesheryCtlConfig.model_validate({**raw, "path": config_path})
    except ValidationError as e:
        raise ConfigError(f"error processing config {config_path}: {e}") from e

    # Dangling current-context or token references fail here
    ctx = cfg.get_current_context()
    if ctx.token:
        cfg.get_token(ctx.token)
    logger.debug(f"Loaded config {config_path} (context: {cfg.current_context})")
    return cfg
