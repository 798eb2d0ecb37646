"""Connection configuration and environment loading."""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 7687
DEFAULT_USER = "neo4j"


def load_environment(config_file: Optional[str] = None) -> None:
    """
    Load environment variables from .env and the shell config file.

    Args:
        config_file: Optional path of an extra env file. Falls back to the
            CONFIG_FILE environment variable, then config/config.env.
    """
    load_dotenv()  # Try .env first
    config_file = config_file or os.getenv("CONFIG_FILE", "config/config.env")
    if os.path.exists(config_file):
        load_dotenv(config_file)


def parse_address(address: str) -> tuple[str, int]:
    """
    Split a ``[bolt://]host[:port]`` address into host and port.

    Raises:
        ValueError: If the port is not a number
    """
    address = address.strip()
    if "://" in address:
        address = address.split("://", 1)[1]
    address = address.rstrip("/")

    if not address:
        return DEFAULT_HOST, DEFAULT_PORT

    host, sep, port = address.rpartition(":")
    if not sep:
        return address, DEFAULT_PORT
    if not port.isdigit():
        raise ValueError(f"Invalid port in address: {address}")
    return host or DEFAULT_HOST, int(port)


@dataclass(frozen=True)
class ConnectionConfig:
    """Where and as whom to connect. Read-only once created."""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    username: str = DEFAULT_USER
    password: str = ""

    @property
    def driver_url(self) -> str:
        return f"bolt://{self.host}:{self.port}"

    @property
    def auth(self) -> Optional[tuple[str, str]]:
        """Basic auth tuple for the driver, or None when no user is set."""
        if not self.username:
            return None
        return (self.username, self.password)

    @classmethod
    def from_env(cls) -> "ConnectionConfig":
        """Build a config from NEO4J_ADDRESS, NEO4J_USER and NEO4J_PASSWORD."""
        host, port = parse_address(os.getenv("NEO4J_ADDRESS", f"{DEFAULT_HOST}:{DEFAULT_PORT}"))
        return cls(
            host=host,
            port=port,
            username=os.getenv("NEO4J_USER", DEFAULT_USER),
            password=os.getenv("NEO4J_PASSWORD", ""),
        )

    def __repr__(self) -> str:
        return (f"ConnectionConfig(host={self.host!r}, port={self.port!r}, "
                f"username={self.username!r}, password='***')")
