"""CryptoLab - Main FastAPI Application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cryptolab import __version__
from cryptolab.api import (
    homomorphic_router,
    secret_sharing_router,
    zero_knowledge_router,
)
from cryptolab.config import get_settings
from cryptolab.core.logging import RequestLoggingMiddleware, get_logger, setup_logging
from cryptolab.core.randomness import get_randomness

settings = get_settings()
logger = get_logger(__name__)

# Below this size the discrete logarithm / factorization is trivial
_DEMO_PARAMETER_BITS = 128


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging(json_output=settings.log_json, level=settings.log_level)
    logger.info(
        "CryptoLab starting",
        environment=settings.environment,
        randomness_source=get_randomness().name,
    )

    smallest = min(
        settings.shamir_prime,
        settings.paillier_p * settings.paillier_q,
        settings.elgamal_p,
        settings.schnorr_p,
        settings.pedersen_p,
    )
    if smallest.bit_length() < _DEMO_PARAMETER_BITS:
        logger.warning(
            "Demonstration-size parameters configured; outputs offer no security",
            smallest_modulus_bits=smallest.bit_length(),
        )
    yield
    logger.info("CryptoLab stopped")


app = FastAPI(
    title="CryptoLab",
    description="Finite-field protocol toolkit: secret sharing, homomorphic encryption, zero-knowledge",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Protocol-Session"],
)

# Include routers
app.include_router(secret_sharing_router)
app.include_router(homomorphic_router)
app.include_router(zero_knowledge_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "CryptoLab",
        "version": __version__,
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
