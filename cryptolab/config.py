"""Application configuration."""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cryptolab.core.arithmetic import is_probable_prime


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    environment: str = "development"  # development, staging, production

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # JSON lines for log aggregation

    # URLs
    frontend_url: str = "http://localhost:3000"

    # Randomness source: "secure" (secrets module) or "seeded" (reproducible runs)
    randomness: str = "secure"
    random_seed: int = 0

    # Secret sharing field (small prime for demo)
    shamir_prime: int = 97
    shamir_max_shares: int = 10

    # Paillier demo primes (n = 3233)
    paillier_p: int = 61
    paillier_q: int = 53

    # ElGamal demo group
    elgamal_p: int = 23
    elgamal_g: int = 5

    # Schnorr demo group
    schnorr_p: int = 23
    schnorr_g: int = 5

    # Pedersen demo parameters - log_g(h) is public here, so binding is void
    pedersen_p: int = 23
    pedersen_g: int = 5
    pedersen_h: int = 7

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    @model_validator(mode="after")
    def _check_parameters(self) -> "Settings":
        """Reject settings that cannot produce a working field."""
        if self.randomness not in ("secure", "seeded"):
            raise ValueError(f"Unknown randomness source: {self.randomness}")
        if self.randomness == "seeded" and self.is_production:
            raise ValueError("Seeded randomness is predictable and not allowed in production")
        if not is_probable_prime(self.shamir_prime):
            raise ValueError(f"SHAMIR_PRIME must be prime, got {self.shamir_prime}")
        if not 2 <= self.shamir_max_shares < self.shamir_prime:
            raise ValueError("SHAMIR_MAX_SHARES must be at least 2 and below SHAMIR_PRIME")
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
