"""
Configuration management for the PR Commenter.

This module handles environment variables, validation and default settings
for the GitHub connection, the commenter itself, batch processing and logging.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from .env_reader import get_env_bool, get_env_enum, get_env_int, get_env_str
from .validators import (
    ensure_positive_or_default, validate_github_token_format,
    validate_positive_int, validate_repository_name, validate_required_string
)


DEFAULT_EVENT_PATH = "/github/workflow/event.json"


class LogLevel(Enum):
    """Available log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class GitHubConfig:
    """Configuration for GitHub integration."""
    token: str
    api_base_url: str = "https://api.github.com"
    timeout: int = 30
    max_retries: int = 3

    def __post_init__(self):
        """Validate GitHub configuration."""
        validate_required_string(self.token, "GitHub token")
        if not validate_github_token_format(self.token):
            raise ValueError("Invalid GitHub token format")
        validate_positive_int(self.timeout, "timeout")
        self.api_base_url = self.api_base_url.rstrip("/")


@dataclass
class CommenterConfig:
    """Where findings and the pull request identity come from."""
    repository: str = ""
    event_path: str = DEFAULT_EVENT_PATH
    results_file: str = "results.json"
    workspace_path: str = ""
    embed_fingerprint_marker: bool = True

    def __post_init__(self):
        if self.repository and not validate_repository_name(self.repository):
            raise ValueError(
                f"Expected repository in the form owner/repo, got {self.repository!r}"
            )


@dataclass
class PerformanceConfig:
    """Configuration for batch processing."""
    enable_concurrent_processing: bool = False
    max_concurrent_writes: int = 4

    def __post_init__(self):
        self.max_concurrent_writes = ensure_positive_or_default(self.max_concurrent_writes, 1)


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: LogLevel = LogLevel.INFO
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    enable_file_logging: bool = False
    log_file_path: str = "pr_commenter.log"
    max_log_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 3


@dataclass
class Config:
    """Main configuration class that combines all configuration sections."""
    github: GitHubConfig
    commenter: CommenterConfig = field(default_factory=CommenterConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_environment(cls) -> 'Config':
        """Create configuration from environment variables."""
        github_token = get_env_str("INPUT_GITHUB_TOKEN", "", "GITHUB_TOKEN")
        if not github_token:
            raise ValueError("the INPUT_GITHUB_TOKEN has not been set")

        github_config = GitHubConfig(
            token=github_token,
            api_base_url=get_env_str("GITHUB_API_URL", "https://api.github.com"),
            timeout=get_env_int("GITHUB_TIMEOUT", 30),
            max_retries=get_env_int("GITHUB_MAX_RETRIES", 3)
        )

        commenter_config = CommenterConfig(
            repository=get_env_str("GITHUB_REPOSITORY"),
            event_path=get_env_str("GITHUB_EVENT_PATH", DEFAULT_EVENT_PATH),
            results_file=get_env_str("INPUT_RESULTS_FILE", "results.json", "RESULTS_FILE"),
            workspace_path=get_env_str("GITHUB_WORKSPACE"),
            embed_fingerprint_marker=get_env_bool("INPUT_EMBED_FINGERPRINT", True, "EMBED_FINGERPRINT")
        )

        performance_config = PerformanceConfig(
            enable_concurrent_processing=get_env_bool("ENABLE_CONCURRENT", False),
            max_concurrent_writes=get_env_int("MAX_CONCURRENT_WRITES", 4)
        )

        logging_config = LoggingConfig(
            level=get_env_enum("LOG_LEVEL", LogLevel, LogLevel.INFO, "INPUT_LOG_LEVEL"),
            enable_file_logging=get_env_bool("ENABLE_FILE_LOGGING", False)
        )

        return cls(
            github=github_config,
            commenter=commenter_config,
            performance=performance_config,
            logging=logging_config
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary (the token is never included)."""
        return {
            "github": {
                "api_base_url": self.github.api_base_url,
                "timeout": self.github.timeout,
                "max_retries": self.github.max_retries,
            },
            "commenter": {
                "repository": self.commenter.repository,
                "event_path": self.commenter.event_path,
                "results_file": self.commenter.results_file,
                "workspace_path": self.commenter.workspace_path,
                "embed_fingerprint_marker": self.commenter.embed_fingerprint_marker,
            },
            "performance": {
                "enable_concurrent_processing": self.performance.enable_concurrent_processing,
                "max_concurrent_writes": self.performance.max_concurrent_writes,
            },
            "logging": {
                "level": self.logging.level.value,
                "enable_file_logging": self.logging.enable_file_logging,
            }
        }
