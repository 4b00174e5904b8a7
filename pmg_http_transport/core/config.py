"""
Transport configuration.

Loads defaults from environment variables (prefix ``PMG_HTTP_``) and a
``.env`` file. Constructor arguments passed to ``HTTPTransport`` override
these values per instance.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class TransportSettings(BaseSettings):
    """Default settings for HTTP transports.

    Attributes:
        project_name: Name reported by the standalone health listener.
        version: Package version string.
        host: Address the inbound server binds to.
        port: Port the inbound server listens on.
        serve_gzip: Compress inbound responses with gzip.
        send_gzip: Compress outbound request bodies with gzip.
        gzip_minimum_size: Smallest response body (bytes) worth compressing.
        request_timeout: Outbound call timeout in seconds.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """

    model_config = SettingsConfigDict(
        env_prefix="PMG_HTTP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "pmg-http-transport"
    version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 3000
    serve_gzip: bool = True
    send_gzip: bool = True
    gzip_minimum_size: int = 1024
    request_timeout: float = 30.0
    log_level: str = "INFO"


settings = TransportSettings()
