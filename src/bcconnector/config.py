"""
Configuration management for BCConnector
"""

import os
from pathlib import Path
from typing import Optional, Literal, Tuple
from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict
import structlog

logger = structlog.get_logger(__name__)


class TenantContext(BaseModel):
    """Tenant/environment/company scope of every Business Central request"""

    model_config = ConfigDict(frozen=True)

    tenant_id: str
    environment_name: str
    company_id: str = ""
    company_name: str = ""
    client_id: str
    redirect_uri: str


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Entra ID app registration
    azure_tenant_id: str = ""
    azure_client_id: str = ""
    azure_client_secret: Optional[str] = None
    redirect_uri: str = "http://localhost"
    oauth_scopes: str = "https://api.businesscentral.dynamics.com/.default offline_access"

    # Business Central scope
    bc_environment: str = "Production"
    bc_company_id: str = ""
    bc_company_name: str = ""

    # Endpoints
    auth_base_url: str = "https://login.microsoftonline.com"
    bc_api_base_url: str = "https://api.businesscentral.dynamics.com"

    # HTTP behaviour
    request_timeout: float = 30.0
    token_expiry_skew_seconds: int = 0

    # Credential persistence
    secure_store: Literal["keyring", "sqlite", "memory"] = "keyring"
    secure_store_path: str = os.getenv(
        "SECURE_STORE_PATH", str(Path.home() / ".bcconnector" / "credentials.db")
    )
    secure_store_service: str = "BCConnector"

    log_level: str = "info"
    debug: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    @property
    def secure_store_path_resolved(self) -> Path:
        """Get resolved credential store path"""
        return Path(self.secure_store_path).expanduser().resolve()

    @property
    def scopes(self) -> Tuple[str, ...]:
        """OAuth scopes as a tuple, accepting space or comma separators"""
        raw = self.oauth_scopes.replace(",", " ")
        return tuple(s for s in raw.split() if s)

    @property
    def authority_url(self) -> str:
        """Tenant-scoped OAuth2 v2.0 authority"""
        return f"{self.auth_base_url.rstrip('/')}/{self.azure_tenant_id}/oauth2/v2.0"

    @property
    def tenant_context(self) -> TenantContext:
        return TenantContext(
            tenant_id=self.azure_tenant_id,
            environment_name=self.bc_environment,
            company_id=self.bc_company_id,
            company_name=self.bc_company_name,
            client_id=self.azure_client_id,
            redirect_uri=self.redirect_uri,
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings singleton"""
    global _settings
    if _settings is None:
        load_dotenv_if_exists()

        logger.debug("Loading settings", cwd=os.getcwd())

        try:
            _settings = Settings()
        except Exception as e:
            raise ValueError(f"Invalid BCConnector configuration: {e}") from e

        logger.info(
            "Settings loaded",
            tenant_id=_settings.azure_tenant_id,
            environment=_settings.bc_environment,
            secure_store=_settings.secure_store,
        )
    return _settings


def reset_settings() -> None:
    """Forget the cached settings (next get_settings() re-reads the environment)"""
    global _settings
    _settings = None


def load_dotenv_if_exists() -> None:
    """Load .env file if it exists"""
    from dotenv import load_dotenv

    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)
    else:
        # Try to load from parent directories
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            env_path = parent / ".env"
            if env_path.exists():
                load_dotenv(env_path)
                break
