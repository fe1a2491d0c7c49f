"""
Configuration models and data structures.

This module defines the application configuration assembled from
appsettings files and ``JATRACKR_*`` environment variables. Database
settings are kept separately in ``database.py``.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

DEFAULT_ENVIRONMENT = "Production"


class DeploymentMode(Enum):
    """Deployment-environment flag selecting optional pipeline stages."""
    PRODUCTION = "production"
    DEVELOPMENT = "development"
    OTHER = "other"

    @classmethod
    def from_name(cls, environment: Optional[str]) -> "DeploymentMode":
        """Map an environment name such as "Development" to a mode, ignoring case."""
        normalized = (environment or "").strip().lower()
        for mode in (cls.PRODUCTION, cls.DEVELOPMENT):
            if normalized == mode.value:
                return mode
        return cls.OTHER


@dataclass
class ServerConfig:
    """HTTP listener configuration."""
    host: str = "0.0.0.0"
    port: int = 5000
    # Redirection to HTTPS only happens when this is set
    https_port: Optional[int] = None
    web_root: str = "wwwroot"
    fallback_file: str = "index.html"


@dataclass
class SecurityConfig:
    """Strict-Transport-Security settings."""
    hsts_max_age: int = 30 * 24 * 60 * 60
    hsts_include_subdomains: bool = False
    hsts_preload: bool = False
    hsts_excluded_hosts: List[str] = field(
        default_factory=lambda: ["localhost", "127.0.0.1", "[::1]"])


@dataclass
class DocumentationConfig:
    """OpenAPI document and Swagger UI settings."""
    title: str = "User Management API"
    version: str = "v1"
    description: str = (
        "A web API for **managing user accounts** on JobAppTrackr. Actions "
        "include creating, updating, and deleting user records, plus "
        "retrieving user information by ID, username, or email address.")
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_url: Optional[str] = None
    openapi_url: str = "/swagger/v1/swagger.json"
    ui_path: str = "/"


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_directory: str = "logs"
    max_file_size: str = "10 MB"
    backup_count: int = 5
    console_enabled: bool = True
    file_enabled: bool = False


@dataclass
class StorageConfig:
    """Storage behaviour at startup."""
    validate_on_startup: bool = False


@dataclass
class ApplicationConfig:
    """Main application configuration."""

    name: str = "JATrackr API"
    version: str = "0.1.0"
    debug: bool = False
    environment: str = DEFAULT_ENVIRONMENT

    server: ServerConfig = field(default_factory=ServerConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    docs: DocumentationConfig = field(default_factory=DocumentationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    config_directory: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        ports = [("Server port", self.server.port), ("HTTPS port", self.server.https_port)]
        for name, port in ports:
            if port is not None and not (1 <= port <= 65535):
                raise ValueError(
                    f"{name} must be between 1 and 65535, got {port}")
        if self.security.hsts_max_age < 0:
            raise ValueError("HSTS max age must not be negative")

    @property
    def mode(self) -> DeploymentMode:
        """Deployment mode derived from the environment name."""
        return DeploymentMode.from_name(self.environment)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApplicationConfig':
        """Create configuration from dictionary."""
        return cls(
            name=data.get('name', 'JATrackr API'),
            version=data.get('version', '0.1.0'),
            debug=data.get('debug', False),
            environment=data.get('environment', DEFAULT_ENVIRONMENT),
            server=ServerConfig(**data.get('server', {})),
            security=SecurityConfig(**data.get('security', {})),
            docs=DocumentationConfig(**data.get('docs', {})),
            logging=LoggingConfig(**data.get('logging', {})),
            storage=StorageConfig(**data.get('storage', {})),
            config_directory=data.get('config_directory'),
        )
