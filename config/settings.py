from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvSettings(BaseSettings):
    """Reads its fields from flat env vars (and .env) through validation_alias."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )


class AppSettings(EnvSettings):
    """General application settings."""

    name: str = Field("Governance Proposal Auditor", validation_alias="APP_NAME")
    debug: bool = Field(False, validation_alias="DEBUG")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")


class ChainSettings(EnvSettings):
    """Settings related to the chain the governor lives on."""

    provider_uri: str = Field(
        default="https://eth-mainnet.g.alchemy.com/v2/demo",
        validation_alias="PROVIDER_URI",
        description="Ethereum Node JSON-RPC URL",
    )
    chain: str = Field(default="mainnet", validation_alias="CHAIN")
    rpc_timeout: int = Field(default=60, gt=0, validation_alias="RPC_TIMEOUT")


class GovernorSettings(EnvSettings):
    """Which DAO and governor to audit."""

    dao_name: Optional[str] = Field(None, validation_alias="DAO_NAME")
    governor_address: Optional[str] = Field(None, validation_alias="GOVERNOR_ADDRESS")
    # First block to scan for ProposalCreated events
    deploy_block: int = Field(default=0, ge=0, validation_alias="GOVERNOR_DEPLOY_BLOCK")
    log_chunk_size: int = Field(default=100_000, gt=0, validation_alias="LOG_CHUNK_SIZE")


class TenderlySettings(EnvSettings):
    """Settings for the Tenderly fork simulation API."""

    access_token: Optional[str] = Field(None, validation_alias="TENDERLY_ACCESS_TOKEN")
    user: Optional[str] = Field(None, validation_alias="TENDERLY_USER")
    project_slug: Optional[str] = Field(None, validation_alias="TENDERLY_PROJECT_SLUG")
    base_url: str = Field("https://api.tenderly.co/api/v1", validation_alias="TENDERLY_BASE_URL")
    timeout: int = Field(default=120, gt=0, validation_alias="TENDERLY_TIMEOUT")


class EtherscanSettings(EnvSettings):
    """Settings for ABI retrieval from the chain explorer."""

    api_key: Optional[str] = Field(None, validation_alias="ETHERSCAN_API_KEY")
    base_url: str = Field("https://api.etherscan.io/v2/api", validation_alias="ETHERSCAN_BASE_URL")
    abi_cache_dir: Optional[str] = Field(None, validation_alias="ABI_CACHE_DIR")
    max_concurrent_requests: int = Field(default=4, gt=0, validation_alias="ETHERSCAN_MAX_CONCURRENT_REQUESTS")


class ReportSettings(EnvSettings):
    reports_dir: str = Field("reports", validation_alias="REPORTS_DIR")


class CheckSettings(EnvSettings):
    """Which checks to run and what to do when the simulation service fails."""

    enabled: Optional[str] = Field(
        default=None,
        validation_alias="CHECKS_ENABLED",
        description="Comma-separated check ids. Empty runs every registered check.",
    )
    simulation_failure_policy: str = Field("abort", validation_alias="SIMULATION_FAILURE_POLICY")

    @property
    def enabled_ids(self) -> Optional[List[str]]:
        if not self.enabled:
            return None
        return [check_id.strip() for check_id in self.enabled.split(",") if check_id.strip()]


class Settings(BaseSettings):
    """
    Main Settings class that composes all sub-settings.
    Each sub-settings reads its own flat env vars; the prefix keeps names such as
    CHAIN from being parsed as a whole section.
    """

    app: AppSettings = Field(default_factory=AppSettings)
    chain: ChainSettings = Field(default_factory=ChainSettings)
    governor: GovernorSettings = Field(default_factory=GovernorSettings)
    tenderly: TenderlySettings = Field(default_factory=TenderlySettings)
    etherscan: EtherscanSettings = Field(default_factory=EtherscanSettings)
    reports: ReportSettings = Field(default_factory=ReportSettings)
    checks: CheckSettings = Field(default_factory=CheckSettings)

    model_config = SettingsConfigDict(env_prefix="GOV_AUDITOR_", extra="ignore")


# Singleton instance
settings = Settings()
