from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class _EnvSettings(BaseSettings):
    """Sub-settings read their own flat env vars; fields may also be passed by name."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )


class AppSettings(_EnvSettings):
    """General application settings."""

    name: str = Field("Governance Proposals", validation_alias="APP_NAME")
    debug: bool = Field(False, validation_alias="DEBUG")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")


class EthereumSettings(_EnvSettings):
    """Settings related to the JSON-RPC node the proposals are sent to."""

    provider_uri: str = Field(
        default="http://127.0.0.1:8545",
        validation_alias="PROVIDER_URI",
        description="Ethereum Node JSON-RPC URL (a Hardhat or Anvil node for simulations)",
    )
    # Timeout for RPC calls (seconds)
    rpc_timeout: int = Field(default=60, gt=0, validation_alias="RPC_TIMEOUT")


class ChainControlSettings(_EnvSettings):
    """Settings for the privileged test-chain RPC methods (impersonation, mining)."""

    # Prefix of the impersonation / balance RPC methods, e.g. hardhat_impersonateAccount
    rpc_namespace: str = Field(default="hardhat", validation_alias="CHAIN_RPC_NAMESPACE")
    impersonation_balance: int = Field(
        default=0xFFFFFFFFFFFFFFFF,
        ge=0,
        validation_alias="IMPERSONATION_BALANCE",
        description="Balance (wei) given to impersonated governor/timelock accounts",
    )


class ProposalSettings(_EnvSettings):
    """Defaults for building, submitting and simulating proposals."""

    governor: Optional[str] = Field(None, validation_alias="GOVERNOR_ADDRESS")
    voting_token: Optional[str] = Field(None, validation_alias="VOTING_TOKEN_ADDRESS")
    max_actions: int = Field(default=10, gt=0, validation_alias="PROPOSAL_MAX_ACTIONS")
    # Buffer added on top of the timelock delay when computing the execution eta
    eta_margin_seconds: int = Field(default=50, ge=0, validation_alias="ETA_MARGIN_SECONDS")
    receipt_timeout_seconds: int = Field(default=120, gt=0, validation_alias="RECEIPT_TIMEOUT_SECONDS")


class Settings(BaseSettings):
    """
    Main Settings class that composes all sub-settings.
    Uses validation_alias in sub-models to map flat env vars to nested structure.
    """

    app: AppSettings = Field(default_factory=AppSettings)
    ethereum: EthereumSettings = Field(default_factory=EthereumSettings)
    chain: ChainControlSettings = Field(default_factory=ChainControlSettings)
    proposals: ProposalSettings = Field(default_factory=ProposalSettings)

    # Config to load from .env file
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


# Singleton instance
settings = Settings()
