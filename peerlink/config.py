"""
Configuration Management

Handles loading configuration from environment variables and config files.
"""

import os
import json
import tempfile
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv


def _default_upload_dir() -> Path:
    return Path(tempfile.gettempdir()) / 'peerlink-uploads'


def _default_temp_dir() -> Path:
    return Path(tempfile.gettempdir()) / 'peerlink-downloads'


@dataclass
class Config:
    """
    PeerLink Configuration.

    Configuration priority (highest to lowest):
    1. Environment variables (PEERLINK_*)
    2. Config file (config.json)
    3. Default values
    """
    # Network
    host: str = '0.0.0.0'           # Interface transfer listeners bind on
    api_host: str = '0.0.0.0'
    api_port: int = 8080
    download_host: str = 'localhost'  # Where /api/download looks for the sharer

    # Storage
    upload_dir: Path = field(default_factory=_default_upload_dir)
    temp_dir: Path = field(default_factory=_default_temp_dir)

    # Performance
    chunk_size: int = 64 * 1024  # 64KB

    # Timeouts (seconds)
    connect_timeout: float = 10.0

    # API
    cors_origins: List[str] = field(default_factory=lambda: [
        'http://localhost:3000', 'http://127.0.0.1:3000'
    ])

    # Logging
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        load_dotenv(find_dotenv(usecwd=True))

        config = cls()

        # Network
        config.host = os.getenv('PEERLINK_HOST', config.host)
        config.api_host = os.getenv('PEERLINK_API_HOST', config.api_host)
        config.api_port = int(os.getenv('PEERLINK_API_PORT', config.api_port))
        config.download_host = os.getenv('PEERLINK_DOWNLOAD_HOST', config.download_host)

        # Storage
        upload_dir = os.getenv('PEERLINK_UPLOAD_DIR')
        if upload_dir:
            config.upload_dir = Path(upload_dir)
        temp_dir = os.getenv('PEERLINK_TEMP_DIR')
        if temp_dir:
            config.temp_dir = Path(temp_dir)

        # Performance
        config.chunk_size = int(os.getenv('PEERLINK_CHUNK_SIZE', config.chunk_size))
        config.connect_timeout = float(
            os.getenv('PEERLINK_CONNECT_TIMEOUT', config.connect_timeout)
        )

        origins = os.getenv('PEERLINK_CORS_ORIGINS', '')
        if origins:
            config.cors_origins = [o.strip() for o in origins.split(',') if o.strip()]

        # Logging
        config.log_level = os.getenv('PEERLINK_LOG_LEVEL', config.log_level)

        return config

    @classmethod
    def from_file(cls, path: Path) -> 'Config':
        """Load configuration from a JSON file."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = json.load(f)

        config = cls()

        # Network
        config.host = data.get('host', config.host)
        config.api_host = data.get('api_host', config.api_host)
        config.api_port = data.get('api_port', config.api_port)
        config.download_host = data.get('download_host', config.download_host)

        # Storage
        if 'upload_dir' in data:
            config.upload_dir = Path(data['upload_dir'])
        if 'temp_dir' in data:
            config.temp_dir = Path(data['temp_dir'])

        config.chunk_size = data.get('chunk_size', config.chunk_size)
        config.connect_timeout = data.get('connect_timeout', config.connect_timeout)
        config.cors_origins = data.get('cors_origins', config.cors_origins)

        # Logging
        config.log_level = data.get('log_level', config.log_level)

        return config

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'host': self.host,
            'api_host': self.api_host,
            'api_port': self.api_port,
            'download_host': self.download_host,
            'upload_dir': str(self.upload_dir),
            'temp_dir': str(self.temp_dir),
            'chunk_size': self.chunk_size,
            'connect_timeout': self.connect_timeout,
            'cors_origins': list(self.cors_origins),
            'log_level': self.log_level,
        }

    def save(self, path: Path):
        """Save configuration to a JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from file and environment.

    Environment variables override file settings.
    """
    # Start with defaults
    config = Config()

    # Load from file if provided
    if config_path and config_path.exists():
        config = Config.from_file(config_path)

    # Override with environment variables
    env_config = Config.from_env()
    defaults = Config()

    # Merge (env takes precedence for non-default values)
    for key in ['host', 'api_host', 'api_port', 'download_host', 'upload_dir',
                'temp_dir', 'chunk_size', 'connect_timeout', 'cors_origins',
                'log_level']:
        env_val = getattr(env_config, key)
        if env_val != getattr(defaults, key):
            setattr(config, key, env_val)

    return config


# Example config file template
EXAMPLE_CONFIG = """
{
  "host": "0.0.0.0",
  "api_host": "0.0.0.0",
  "api_port": 8080,
  "download_host": "localhost",
  "upload_dir": "/tmp/peerlink-uploads",
  "temp_dir": "/tmp/peerlink-downloads",
  "chunk_size": 65536,
  "connect_timeout": 10.0,
  "cors_origins": ["http://localhost:3000"],
  "log_level": "INFO"
}
"""
