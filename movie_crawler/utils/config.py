"""
Configuration management for the movie crawler.
"""

import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError


DEFAULT_START_URL = (
    "http://www.imdb.com/search/title?groups=top_1000&sort=user_rating&view=simple"
)


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    start_url: str = DEFAULT_START_URL
    workers: int = 8
    queue_size: int = 100
    request_timeout: int = 30
    user_agent: str = "MovieCrawler/1.0"
    max_content_bytes: int = 10 * 1024 * 1024


@dataclass
class SelectorConfig:
    """CSS selectors for listing and detail pages."""
    detail_link: str = ".lister-item-header a"
    next_page: str = ".lister-page-next"
    title: str = ".title_wrapper h1"
    year: str = "#titleYear a"
    director: str = "[itemprop=creator] [itemprop=name]"
    actors: str = "[itemprop=actors] [itemprop=name]"


@dataclass
class ServerConfig:
    """Configuration for the query server."""
    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    file: str = "logs/crawler.log"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    json: bool = False


@dataclass
class MonitoringConfig:
    """Configuration for monitoring."""
    prometheus_port: int = 8000
    metrics_enabled: bool = False


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    selectors: SelectorConfig = field(default_factory=SelectorConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = Path(config_path)
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r') as file:
            config_data = yaml.safe_load(file) or {}

        self._config = self.from_dict(config_data)
        self._validate_config()
        return self._config

    @staticmethod
    def from_dict(config_data: Dict[str, Any]) -> Config:
        """Build a Config from parsed YAML; missing sections use defaults."""
        return Config(
            crawler=CrawlerConfig(**(config_data.get('crawler') or {})),
            selectors=SelectorConfig(**(config_data.get('selectors') or {})),
            server=ServerConfig(**(config_data.get('server') or {})),
            logging=LoggingConfig(**(config_data.get('logging') or {})),
            monitoring=MonitoringConfig(**(config_data.get('monitoring') or {}))
        )

    def _validate_config(self):
        """Validate configuration values."""
        if not self._config:
            raise ValueError("Configuration not loaded")
        validate_config(self._config)
        logging.info("Configuration validation passed")

    @property
    def config(self) -> Config:
        """Get the loaded configuration."""
        if not self._config:
            raise ValueError("Configuration not loaded. Call load_config() first.")
        return self._config


def validate_config(config: Config):
    """Raise ValueError if any configuration value is out of range."""
    parsed = urlparse(config.crawler.start_url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise ValueError(f"start_url must be an http(s) URL: {config.crawler.start_url!r}")

    if config.crawler.workers < 1:
        raise ValueError("workers must be at least 1")

    # 0 means an unbounded work queue
    if config.crawler.queue_size < 0:
        raise ValueError("queue_size must be non-negative")

    if config.crawler.request_timeout <= 0:
        raise ValueError("request_timeout must be positive")

    if not 0 < config.server.port < 65536:
        raise ValueError("server port must be between 1 and 65535")

    if not hasattr(logging, config.logging.level.upper()):
        raise ValueError(f"Unknown log level: {config.logging.level}")

    empty = BeautifulSoup("", "lxml")
    for name, selector in asdict(config.selectors).items():
        try:
            empty.select_one(selector)
        except SelectorSyntaxError as e:
            raise ValueError(f"Invalid selector {name}: {e}") from e


# Global config manager instance
config_manager = ConfigManager()


def get_config() -> Config:
    """Get the global configuration instance."""
    return config_manager.config


def load_config(config_path: str = "config.yaml") -> Config:
    """Load configuration from file."""
    global config_manager
    config_manager = ConfigManager(config_path)
    return config_manager.load_config()
