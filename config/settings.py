from pydantic_settings import BaseSettings, SettingsConfigDict

_TOKEN = 10**18


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Database (aiosqlite file for local dev; asyncpg URLs work unchanged)
    DATABASE_URL: str = "sqlite+aiosqlite:///./bonding_curve.db"

    # Curve: slope is 18-decimal fixed point, reserve ratio is parts of 1_000_000
    CURVE_SLOPE: int = 75
    CURVE_RESERVE_RATIO: int = 500_000

    # Issuance (base units, 18 decimals)
    TOTAL_ISSUANCE: int = 1_000_000_000 * _TOKEN
    TRADING_ALLOCATION: int = 800_000_000 * _TOKEN
    LIQUIDITY_ALLOCATION: int = 200_000_000 * _TOKEN

    # Fees in basis points
    TRADE_FEE_BPS: int = 100
    LIQUIDITY_FEE_BPS: int = 300

    # Reserve cap and migration trigger (99% of cap)
    RESERVE_CAP: int = 24 * _TOKEN
    MIGRATION_THRESHOLD_BPS: int = 9_900

    # Addresses
    CONTROLLER_ADDRESS: str = "0x000000000000000000000000000000000000c0de"
    FEE_RECIPIENT: str = "0x000000000000000000000000000000000000fee5"
    LP_RECIPIENT: str = "0x000000000000000000000000000000000000dEaD"
    LIQUIDITY_VENUE_ADDRESS: str = "0x000000000000000000000000000000000000a3e0"
    ADMIN_ADDRESS: str = "0x0000000000000000000000000000000000000a11"

    # App
    APP_NAME: str = "Bonding Curve Pools"
    DEBUG: bool = False  # Safe default for production; set DEBUG=True in .env for local dev


settings = Settings()
