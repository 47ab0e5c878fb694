"""
Configuration settings for the Dissertation Proposal Examiner
Centralized, typed configuration using Pydantic BaseSettings
"""
import logging
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get absolute project root path for consistent file resolution
PROJECT_ROOT = Path(__file__).parent.parent.parent.resolve()

logger = logging.getLogger(__name__)


class ExaminerConfig(BaseSettings):
    """Typed configuration for the examiner with validation"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # API Configuration - API_KEY is accepted as an alternative name
    google_api_key: Optional[str] = Field(
        None, validation_alias=AliasChoices("GOOGLE_API_KEY", "API_KEY")
    )

    # Model Configuration
    # Pro handles the four reviewers and the synthesis, flash drives the chat
    analysis_model: str = Field(
        "gemini-2.5-pro", validation_alias="EXAMINER_ANALYSIS_MODEL"
    )
    chat_model: str = Field(
        "gemini-2.5-flash", validation_alias="EXAMINER_CHAT_MODEL"
    )
    agent_temperature: float = Field(
        0.2, validation_alias="EXAMINER_AGENT_TEMPERATURE"
    )
    synthesis_temperature: float = Field(
        0.2, validation_alias="EXAMINER_SYNTHESIS_TEMPERATURE"
    )
    # google_search for Gemini 2.x, google_search_retrieval for Gemini 1.5 models
    search_tool: str = Field(
        "google_search", validation_alias="EXAMINER_SEARCH_TOOL"
    )

    # Timeout Configuration - None waits for the remote service indefinitely
    gemini_request_timeout: Optional[float] = Field(
        None, validation_alias="GEMINI_REQUEST_TIMEOUT"
    )

    # Document Ingestion
    accepted_mime_types: List[str] = ["application/pdf"]
    max_document_size_mb: float = Field(
        20.0, validation_alias="MAX_DOCUMENT_SIZE_MB"
    )

    # Logging Configuration
    log_level: str = Field("INFO", validation_alias="EXAMINER_LOG_LEVEL")

    # File Paths
    logs_dir: str = Field(
        str(PROJECT_ROOT / "logs"), validation_alias="EXAMINER_LOGS_DIR"
    )
    export_dir: str = Field(
        str(Path.cwd() / "exports"), validation_alias="EXAMINER_EXPORT_DIR"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is a valid logging level"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()

    @field_validator('agent_temperature', 'synthesis_temperature')
    @classmethod
    def validate_temperature(cls, v):
        """Validate sampling temperature is inside the range Gemini accepts"""
        if not 0 <= v <= 2:
            raise ValueError("Temperature must be between 0.0 and 2.0")
        return v

    @field_validator('search_tool')
    @classmethod
    def validate_search_tool(cls, v):
        valid_tools = ['google_search', 'google_search_retrieval']
        if v.lower() not in valid_tools:
            raise ValueError(f"Invalid search tool. Must be one of: {valid_tools}")
        return v.lower()

    @field_validator('gemini_request_timeout')
    @classmethod
    def validate_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Request timeout must be positive when set")
        return v

    @field_validator('max_document_size_mb')
    @classmethod
    def validate_document_size(cls, v):
        if v <= 0:
            raise ValueError("Maximum document size must be positive")
        return v

    @field_validator('google_api_key')
    @classmethod
    def blank_key_is_missing(cls, v):
        """Treat an empty or whitespace-only key as absent"""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def has_api_key(self) -> bool:
        return bool(self.google_api_key)

    @property
    def log_level_value(self) -> int:
        """Get logging level as integer value"""
        return getattr(logging, self.log_level, logging.INFO)

    @property
    def max_document_size_bytes(self) -> int:
        return int(self.max_document_size_mb * 1024 * 1024)

    def log_configuration_status(self) -> bool:
        """
        Log the credential and model configuration at startup.

        Returns:
            True when an API key is configured. A missing key is reported but never
            raised, every remote call then fails through the normal error paths.
        """
        if not self.has_api_key:
            logger.error("GOOGLE_API_KEY (or API_KEY) is not defined in the environment variables")
        else:
            logger.info("Gemini API key configured")
        logger.info(f"Models: analysis={self.analysis_model}, chat={self.chat_model}")
        if self.gemini_request_timeout:
            logger.info(f"Request timeout: {self.gemini_request_timeout}s")
        return self.has_api_key


# Global configuration instance
config = ExaminerConfig()
