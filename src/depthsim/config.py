from pydantic_settings import BaseSettings
from pydantic import Field

class Settings(BaseSettings):
    env: str = Field(default="dev")
    log_level: str = Field(default="INFO")
    log_file: str | None = None
    log_max_bytes: int = Field(default=10 * 1024 * 1024)
    log_backup_count: int = Field(default=5)
    log_json: bool = False

    # Active subscription used when nothing else is requested
    default_venue: str = "bybit"
    default_symbol: str = "BTC-USDT"

    # Number of levels per side exposed to consumers
    book_depth: int = Field(default=15)

    # Simulated slippage (percent) above which a market impact warning is raised
    slippage_warn_pct: float = Field(default=1.0)

    # Public websocket endpoints
    okx_ws_url: str = "wss://ws.okx.com:8443/ws/v5/public"
    bybit_ws_url: str = "wss://stream.bybit.com/v5/public/spot"
    deribit_ws_url: str = "wss://www.deribit.com/ws/api/v2"

    # Keepalive cadence (seconds) imposed by each venue
    okx_ping_interval: float = 25.0
    bybit_ping_interval: float = 18.0
    deribit_ping_interval: float = 5.0

    ws_open_timeout: float = 10.0

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
