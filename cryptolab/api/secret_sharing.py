"""Secret Sharing API routes.

Shamir's threshold scheme over the configured prime field. Shares are
plain integers {x, y}; the server keeps nothing between calls.
"""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from cryptolab.api.common import bad_request
from cryptolab.config import get_settings
from cryptolab.core.errors import FieldCryptoError
from cryptolab.core.secret_sharing_engine import (
    SecretSharingEngine,
    Share,
    get_secret_sharing_engine,
)

router = APIRouter(prefix="/api/secret-sharing", tags=["secret-sharing"])

ALGORITHM = "Shamir Secret Sharing"


# ============================================================================
# Request/Response Models
# ============================================================================

class ShareModel(BaseModel):
    """A single share."""
    x: int = Field(..., description="Share index")
    y: int = Field(..., description="Polynomial value at x")


class GenerateSharesRequest(BaseModel):
    """Share generation request."""
    secret: int = Field(..., ge=0, description="Secret field element")
    n: int = Field(..., ge=2, description="Total shares to generate")
    k: int = Field(..., ge=2, description="Minimum shares needed to reconstruct")


class GenerateSharesResponse(BaseModel):
    """Share generation response."""
    secret: int
    shares: list[ShareModel]
    n: int
    k: int
    prime: int
    algorithm: str = ALGORITHM


class ReconstructRequest(BaseModel):
    """Reconstruction request."""
    shares: list[ShareModel] = Field(..., min_length=2)


class ReconstructResponse(BaseModel):
    """Reconstruction response."""
    secret: int
    algorithm: str = ALGORITHM


class RecoverShareRequest(BaseModel):
    """Lost-share recovery request."""
    shares: list[ShareModel] = Field(..., min_length=2)
    target_x: int = Field(..., ge=1, description="Index of the share to rebuild")


class RecoverShareResponse(BaseModel):
    """Lost-share recovery response."""
    share: ShareModel
    algorithm: str = ALGORITHM


class SharingDemoResponse(BaseModel):
    """Generate-and-reconstruct walkthrough."""
    original_secret: int
    total_shares: int
    threshold: int
    shares: list[ShareModel]
    subset: list[ShareModel]
    reconstructed: int
    success: bool
    prime: int
    algorithm: str = ALGORITHM


# ============================================================================
# Helper Functions
# ============================================================================

def _get_engine() -> SecretSharingEngine:
    return get_secret_sharing_engine()


def _check_share_count(n: int) -> None:
    limit = get_settings().shamir_max_shares
    if n > limit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"n must be at most {limit}",
        )


def _to_shares(models: list[ShareModel]) -> list[Share]:
    return [Share(x=m.x, y=m.y) for m in models]


def _to_models(shares: list[Share]) -> list[ShareModel]:
    return [ShareModel(**share.to_dict()) for share in shares]


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/generate", response_model=GenerateSharesResponse)
async def generate_shares(data: GenerateSharesRequest):
    """Split a secret into n shares, any k of which reconstruct it."""
    _check_share_count(data.n)
    engine = _get_engine()

    try:
        shares = engine.generate_shares(data.secret, data.n, data.k)
    except FieldCryptoError as e:
        raise bad_request(e)

    return GenerateSharesResponse(
        secret=data.secret,
        shares=_to_models(shares),
        n=data.n,
        k=data.k,
        prime=engine.prime,
    )


@router.post("/reconstruct", response_model=ReconstructResponse)
async def reconstruct_secret(data: ReconstructRequest):
    """Reconstruct the secret by Lagrange interpolation at x = 0.

    The threshold is not known here; fewer shares than the original
    threshold produce a wrong value rather than an error.
    """
    try:
        secret = _get_engine().reconstruct_secret(_to_shares(data.shares))
    except FieldCryptoError as e:
        raise bad_request(e)

    return ReconstructResponse(secret=secret)


@router.post("/recover", response_model=RecoverShareResponse)
async def recover_share(data: RecoverShareRequest):
    """Rebuild the share held at target_x from other shares."""
    try:
        share = _get_engine().recover_share(_to_shares(data.shares), data.target_x)
    except FieldCryptoError as e:
        raise bad_request(e)

    return RecoverShareResponse(share=ShareModel(**share.to_dict()))


@router.post("/demo", response_model=SharingDemoResponse)
async def sharing_demo(data: GenerateSharesRequest):
    """Generate shares, then reconstruct from the first k of them."""
    _check_share_count(data.n)

    try:
        result = _get_engine().demo(data.secret, data.n, data.k)
    except FieldCryptoError as e:
        raise bad_request(e)

    return SharingDemoResponse(
        original_secret=result.secret,
        total_shares=data.n,
        threshold=data.k,
        shares=_to_models(result.shares),
        subset=_to_models(result.subset),
        reconstructed=result.reconstructed,
        success=result.success,
        prime=result.prime,
    )
