"""API routes."""

from cryptolab.api.secret_sharing import router as secret_sharing_router
from cryptolab.api.homomorphic import router as homomorphic_router
from cryptolab.api.zero_knowledge import router as zero_knowledge_router

__all__ = [
    "secret_sharing_router",
    "homomorphic_router",
    "zero_knowledge_router",
]
