from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Node endpoint
    rpc_url: str = "https://rpcapi.fantom.network"
    rpc_timeout_seconds: float = 10.0

    # Scan target
    start_block: int = 0
    scan_contract: str = ""

    # Max number of blocks pulled by a single eth_getLogs call
    log_window_size: int = 5

    # Capacity of the matched records stream
    output_buffer_capacity: int = 100

    # Scan loop timing
    head_refresh_seconds: float = 0.5
    status_report_seconds: float = 5.0
    idle_delay_seconds: float = 0.25

    # Backoff after consecutive failed log pulls
    backoff_base_seconds: float = 0.5
    backoff_max_seconds: float = 30.0

    # Matches kept for the status API
    recent_matches_capacity: int = 50

    # Server
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
