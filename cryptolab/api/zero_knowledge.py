"""Zero-Knowledge API routes.

Schnorr identification (one endpoint per protocol move) and Pedersen
commitments. Every move is stateless: callers pass back the values earlier
moves returned, and may tag the calls of one run with an
X-Protocol-Session header so the logs can be correlated.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from cryptolab.api.common import (
    bad_request,
    parse_hex,
    parse_hex_or_default,
    parse_optional_hex,
)
from cryptolab.config import get_settings
from cryptolab.core.arithmetic import to_hex
from cryptolab.core.commitment_engine import PedersenParams, pedersen_engine
from cryptolab.core.errors import FieldCryptoError
from cryptolab.core.groups import generate_dl_group
from cryptolab.core.logging import get_logger
from cryptolab.core.zkp_engine import schnorr_engine

logger = get_logger(__name__)

router = APIRouter(prefix="/api/zero-knowledge", tags=["zero-knowledge"])

SCHNORR = "Schnorr Identification Protocol"
PEDERSEN = "Pedersen Commitment Scheme"


# ============================================================================
# Request/Response Models
# ============================================================================

class GroupModel(BaseModel):
    """Prime modulus and generator (hex)."""
    p: str
    g: str


class SchnorrPublicParameters(BaseModel):
    """Schnorr public parameters (hex)."""
    p: str
    g: str
    y: str


class SchnorrPrivateKeyModel(BaseModel):
    """Prover's private exponent (hex)."""
    x: str


class SchnorrSetupRequest(BaseModel):
    """Schnorr setup request; demo group unless overridden."""
    p: str | None = None
    g: str | None = None
    x: str | None = Field(default=None, description="Private exponent (hex), sampled if omitted")
    key_size: int | None = Field(default=None, ge=512, le=4096)


class SchnorrSetupResponse(BaseModel):
    """Schnorr setup response."""
    public_parameters: SchnorrPublicParameters
    private_key: SchnorrPrivateKeyModel
    algorithm: str = SCHNORR


class SchnorrCommitRequest(BaseModel):
    """Prover's first move."""
    public_parameters: GroupModel


class SchnorrCommitResponse(BaseModel):
    """Commitment A; the nonce r stays with the prover."""
    commitment: str
    nonce: str
    algorithm: str = SCHNORR


class SchnorrChallengeRequest(BaseModel):
    """Verifier's move."""
    public_parameters: GroupModel


class SchnorrChallengeResponse(BaseModel):
    """Challenge c."""
    challenge: str
    algorithm: str = SCHNORR


class SchnorrResponseRequest(BaseModel):
    """Prover's second move."""
    public_parameters: GroupModel
    private_key: SchnorrPrivateKeyModel
    nonce: str
    challenge: str


class SchnorrResponseResponse(BaseModel):
    """Response s."""
    response: str
    algorithm: str = SCHNORR


class SchnorrVerifyRequest(BaseModel):
    """Verification request."""
    public_parameters: GroupModel
    public_key: str = Field(..., description="y = g^x mod p (hex)")
    commitment: str
    challenge: str
    response: str


class VerifyResponse(BaseModel):
    """Verification outcome (a rejected proof is not an error)."""
    is_valid: bool
    algorithm: str


class SchnorrDemoResponse(BaseModel):
    """Full Schnorr run with the demo parameters."""
    protocol: str = "Schnorr Identification"
    parameters: SchnorrPublicParameters
    commitment: str
    challenge: str
    response: str
    is_valid: bool


class PedersenParameters(BaseModel):
    """Pedersen public parameters (hex)."""
    p: str
    g: str
    h: str


class CommitmentSetupRequest(BaseModel):
    """Pedersen setup; demo parameters unless key_size is given."""
    key_size: int | None = Field(default=None, ge=512, le=4096)


class CommitmentSetupResponse(BaseModel):
    """Pedersen setup response."""
    public_parameters: PedersenParameters
    algorithm: str = PEDERSEN


class CommitRequest(BaseModel):
    """Commit request."""
    message: int = Field(..., ge=0)
    public_parameters: PedersenParameters
    randomness: int | None = Field(default=None, ge=0, description="Sampled if omitted")


class CommitResponse(BaseModel):
    """Commitment plus the randomness needed to open it."""
    commitment: str
    randomness: int
    algorithm: str = PEDERSEN


class OpenRequest(BaseModel):
    """Open request."""
    commitment: str
    message: int = Field(..., ge=0)
    randomness: int = Field(..., ge=0)
    public_parameters: PedersenParameters


class CommitmentDemoRequest(BaseModel):
    """Commit-and-open demo request."""
    message: int = Field(..., ge=0)


class CommitmentDemoResponse(BaseModel):
    """Commit-and-open demo outcome."""
    protocol: str = "Pedersen Commitment"
    parameters: PedersenParameters
    message: int
    randomness: int
    commitment: str
    is_valid: bool


# ============================================================================
# Helper Functions
# ============================================================================

def _group(model: GroupModel) -> tuple[int, int]:
    return parse_hex(model.p, "public_parameters.p"), parse_hex(model.g, "public_parameters.g")


def _pedersen_params(model: PedersenParameters) -> PedersenParams:
    return PedersenParams(
        p=parse_hex(model.p, "public_parameters.p"),
        g=parse_hex(model.g, "public_parameters.g"),
        h=parse_hex(model.h, "public_parameters.h"),
    )


def _pedersen_model(params: PedersenParams) -> PedersenParameters:
    return PedersenParameters(p=to_hex(params.p), g=to_hex(params.g), h=to_hex(params.h))


def _demo_pedersen_params() -> PedersenParams:
    settings = get_settings()
    return PedersenParams(p=settings.pedersen_p, g=settings.pedersen_g, h=settings.pedersen_h)


# ============================================================================
# Schnorr Endpoints
# ============================================================================

@router.post("/schnorr/setup", response_model=SchnorrSetupResponse)
async def schnorr_setup(data: SchnorrSetupRequest):
    """Create Schnorr public parameters and a private key."""
    settings = get_settings()

    try:
        if data.key_size is not None:
            group = await run_in_threadpool(generate_dl_group, data.key_size)
            p, g = group.p, group.g
        else:
            p = parse_hex_or_default(data.p, "p", settings.schnorr_p)
            g = parse_hex_or_default(data.g, "g", settings.schnorr_g)
        params, private_key = schnorr_engine.setup(p, g, parse_optional_hex(data.x, "x"))
    except FieldCryptoError as e:
        raise bad_request(e)

    return SchnorrSetupResponse(
        public_parameters=SchnorrPublicParameters(
            p=to_hex(params.p), g=to_hex(params.g), y=to_hex(params.y)
        ),
        private_key=SchnorrPrivateKeyModel(x=to_hex(private_key.x)),
    )


@router.post("/schnorr/commit", response_model=SchnorrCommitResponse)
async def schnorr_commit(data: SchnorrCommitRequest):
    """Prover commits: A = g^r mod p."""
    p, g = _group(data.public_parameters)
    try:
        move = schnorr_engine.commit(p, g)
    except FieldCryptoError as e:
        raise bad_request(e)
    return SchnorrCommitResponse(commitment=to_hex(move.commitment), nonce=to_hex(move.nonce))


@router.post("/schnorr/challenge", response_model=SchnorrChallengeResponse)
async def schnorr_challenge(data: SchnorrChallengeRequest):
    """Verifier draws a challenge c in [0, p-2]."""
    p, _ = _group(data.public_parameters)
    try:
        challenge = schnorr_engine.challenge(p)
    except FieldCryptoError as e:
        raise bad_request(e)
    return SchnorrChallengeResponse(challenge=to_hex(challenge))


@router.post("/schnorr/response", response_model=SchnorrResponseResponse)
async def schnorr_response(data: SchnorrResponseRequest):
    """Prover answers: s = r + x*c mod (p-1)."""
    p, _ = _group(data.public_parameters)
    try:
        response = schnorr_engine.respond(
            parse_hex(data.nonce, "nonce"),
            parse_hex(data.private_key.x, "private_key.x"),
            parse_hex(data.challenge, "challenge"),
            p,
        )
    except FieldCryptoError as e:
        raise bad_request(e)
    return SchnorrResponseResponse(response=to_hex(response))


@router.post("/schnorr/verify", response_model=VerifyResponse)
async def schnorr_verify(data: SchnorrVerifyRequest):
    """Verifier checks g^s == A * y^c mod p."""
    p, g = _group(data.public_parameters)
    try:
        is_valid = schnorr_engine.verify(
            parse_hex(data.commitment, "commitment"),
            parse_hex(data.challenge, "challenge"),
            parse_hex(data.response, "response"),
            parse_hex(data.public_key, "public_key"),
            p,
            g,
        )
    except FieldCryptoError as e:
        raise bad_request(e)

    logger.info("Schnorr proof verified", accepted=is_valid)
    return VerifyResponse(is_valid=is_valid, algorithm=SCHNORR)


@router.post("/schnorr/demo", response_model=SchnorrDemoResponse)
async def schnorr_demo():
    """Run commit, challenge, response and verify with the demo group."""
    settings = get_settings()
    try:
        params, private_key = schnorr_engine.setup(settings.schnorr_p, settings.schnorr_g)
        transcript = schnorr_engine.prove(params, private_key)
        is_valid = schnorr_engine.verify_transcript(params, transcript)
    except FieldCryptoError as e:
        raise bad_request(e)

    return SchnorrDemoResponse(
        parameters=SchnorrPublicParameters(
            p=to_hex(params.p), g=to_hex(params.g), y=to_hex(params.y)
        ),
        commitment=to_hex(transcript.commitment),
        challenge=to_hex(transcript.challenge),
        response=to_hex(transcript.response),
        is_valid=is_valid,
    )


# ============================================================================
# Pedersen Endpoints
# ============================================================================

@router.post("/commitment/setup", response_model=CommitmentSetupResponse)
async def commitment_setup(data: CommitmentSetupRequest | None = None):
    """Return Pedersen parameters (configured demo set, or a fresh group)."""
    try:
        if data is not None and data.key_size is not None:
            params = await run_in_threadpool(pedersen_engine.setup, data.key_size)
        else:
            params = _demo_pedersen_params()
            pedersen_engine.validate_params(params)
    except FieldCryptoError as e:
        raise bad_request(e)
    return CommitmentSetupResponse(public_parameters=_pedersen_model(params))


@router.post("/commitment/commit", response_model=CommitResponse)
async def commitment_commit(data: CommitRequest):
    """Commit to a message: g^m * h^r mod p."""
    params = _pedersen_params(data.public_parameters)
    try:
        result = pedersen_engine.commit(params, data.message, data.randomness)
    except FieldCryptoError as e:
        raise bad_request(e)
    return CommitResponse(commitment=to_hex(result.commitment), randomness=result.randomness)


@router.post("/commitment/open", response_model=VerifyResponse)
async def commitment_open(data: OpenRequest):
    """Check an opening against a commitment."""
    params = _pedersen_params(data.public_parameters)
    try:
        is_valid = pedersen_engine.open(
            params,
            parse_hex(data.commitment, "commitment"),
            data.message,
            data.randomness,
        )
    except FieldCryptoError as e:
        raise bad_request(e)
    return VerifyResponse(is_valid=is_valid, algorithm=PEDERSEN)


@router.post("/commitment/demo", response_model=CommitmentDemoResponse)
async def commitment_demo(data: CommitmentDemoRequest):
    """Commit to a message with the demo parameters and open it."""
    try:
        result = pedersen_engine.demo(_demo_pedersen_params(), data.message)
    except FieldCryptoError as e:
        raise bad_request(e)

    return CommitmentDemoResponse(
        parameters=_pedersen_model(result.params),
        message=result.message,
        randomness=result.randomness,
        commitment=to_hex(result.commitment),
        is_valid=result.is_valid,
    )
