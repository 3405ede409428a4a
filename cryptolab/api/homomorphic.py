"""Homomorphic Encryption API routes.

Paillier (additive) and ElGamal (multiplicative) encryption. Keys are
returned by the generate endpoints and must be sent back with every later
request; the server holds no key state. All numbers are radix-16 strings
except plaintexts, which are plain integers.
"""

from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool

from cryptolab.api.common import (
    bad_request,
    parse_hex,
    parse_hex_or_default,
    parse_optional_hex,
)
from cryptolab.config import get_settings
from cryptolab.core.arithmetic import to_hex
from cryptolab.core.errors import FieldCryptoError
from cryptolab.core.groups import generate_dl_group
from cryptolab.core.homomorphic_engine import (
    ElGamalCiphertext,
    ElGamalKeyPair,
    ElGamalPrivateKey,
    ElGamalPublicKey,
    PaillierCiphertext,
    PaillierKeyPair,
    PaillierPrivateKey,
    PaillierPublicKey,
    elgamal_engine,
    paillier_engine,
)

router = APIRouter(prefix="/api/homomorphic", tags=["homomorphic"])


# ============================================================================
# Request/Response Models
# ============================================================================

class PaillierPublicKeyModel(BaseModel):
    """Paillier public key."""
    n: str = Field(..., description="Modulus n = p*q (hex)")


class PaillierPrivateKeyModel(BaseModel):
    """Paillier private key."""
    model_config = ConfigDict(populate_by_name=True)

    lam: str = Field(..., alias="lambda", description="lcm(p-1, q-1) (hex)")
    mu: str = Field(..., description="lambda^-1 mod n (hex)")
    n: str = Field(..., description="Modulus (hex)")


class PaillierGenerateRequest(BaseModel):
    """Paillier key generation request.

    With key_size, fresh primes are generated; otherwise p and q (or the
    configured demo primes) are used.
    """
    p: str | None = Field(default=None, description="First prime (hex)")
    q: str | None = Field(default=None, description="Second prime (hex)")
    key_size: int | None = Field(default=None, ge=1024, le=4096)


class PaillierKeyResponse(BaseModel):
    """Paillier key pair."""
    public_key: PaillierPublicKeyModel
    private_key: PaillierPrivateKeyModel
    algorithm: str = "Paillier"
    homomorphic_operations: list[str] = ["addition", "scalar-multiplication"]


class PaillierEncryptRequest(BaseModel):
    """Paillier encryption request."""
    message: int = Field(..., ge=0)
    public_key: PaillierPublicKeyModel


class PaillierAddRequest(BaseModel):
    """Paillier homomorphic addition request."""
    ciphertext1: str
    ciphertext2: str
    public_key: PaillierPublicKeyModel


class PaillierScaleRequest(BaseModel):
    """Paillier scalar multiplication request."""
    ciphertext: str
    scalar: int
    public_key: PaillierPublicKeyModel


class PaillierDecryptRequest(BaseModel):
    """Paillier decryption request."""
    ciphertext: str
    private_key: PaillierPrivateKeyModel


class ElGamalPublicKeyModel(BaseModel):
    """ElGamal public key."""
    p: str
    g: str
    y: str


class ElGamalPrivateKeyModel(BaseModel):
    """ElGamal private key."""
    x: str
    p: str


class ElGamalCiphertextModel(BaseModel):
    """ElGamal ciphertext pair."""
    c1: str
    c2: str


class ElGamalGenerateRequest(BaseModel):
    """ElGamal key generation request.

    With key_size, a fresh safe-prime group is generated; otherwise p and
    g (or the configured demo group) are used.
    """
    p: str | None = None
    g: str | None = None
    x: str | None = Field(default=None, description="Private exponent (hex), sampled if omitted")
    key_size: int | None = Field(default=None, ge=512, le=4096)


class ElGamalKeyResponse(BaseModel):
    """ElGamal key pair."""
    public_key: ElGamalPublicKeyModel
    private_key: ElGamalPrivateKeyModel
    algorithm: str = "ElGamal"
    homomorphic_operations: list[str] = ["multiplication"]


class ElGamalEncryptRequest(BaseModel):
    """ElGamal encryption request."""
    message: int = Field(..., ge=0)
    public_key: ElGamalPublicKeyModel


class ElGamalMultiplyRequest(BaseModel):
    """ElGamal homomorphic multiplication request."""
    ciphertext1: ElGamalCiphertextModel
    ciphertext2: ElGamalCiphertextModel
    public_key: ElGamalPublicKeyModel


class ElGamalDecryptRequest(BaseModel):
    """ElGamal decryption request."""
    ciphertext: ElGamalCiphertextModel
    private_key: ElGamalPrivateKeyModel


class CiphertextResponse(BaseModel):
    """Single Paillier ciphertext."""
    result: str


class ElGamalCiphertextResponse(BaseModel):
    """ElGamal ciphertext."""
    result: ElGamalCiphertextModel


class PlaintextResponse(BaseModel):
    """Decrypted message."""
    message: int


class HomomorphicDemoRequest(BaseModel):
    """Encrypt, combine and decrypt 2-5 values with the demo keys."""
    operation: Literal["addition", "multiplication"]
    values: list[int] = Field(..., min_length=2, max_length=5)


class HomomorphicDemoResponse(BaseModel):
    """Demo outcome."""
    operation: str
    algorithm: str
    encrypted_values: list[str | ElGamalCiphertextModel]
    result: int


# ============================================================================
# Helper Functions
# ============================================================================

def _paillier_public(model: PaillierPublicKeyModel) -> PaillierPublicKey:
    return PaillierPublicKey(n=parse_hex(model.n, "public_key.n"))


def _paillier_private(model: PaillierPrivateKeyModel) -> PaillierPrivateKey:
    return PaillierPrivateKey(
        lam=parse_hex(model.lam, "private_key.lambda"),
        mu=parse_hex(model.mu, "private_key.mu"),
        n=parse_hex(model.n, "private_key.n"),
    )


def _paillier_ciphertext(value: str, n: int, field_name: str) -> PaillierCiphertext:
    return PaillierCiphertext(value=parse_hex(value, field_name), n=n)


def _paillier_key_response(keys: PaillierKeyPair) -> PaillierKeyResponse:
    private = keys.private_key
    return PaillierKeyResponse(
        public_key=PaillierPublicKeyModel(n=to_hex(keys.public_key.n)),
        private_key=PaillierPrivateKeyModel(
            lam=to_hex(private.lam), mu=to_hex(private.mu), n=to_hex(private.n)
        ),
    )


def _elgamal_public(model: ElGamalPublicKeyModel) -> ElGamalPublicKey:
    return ElGamalPublicKey(
        p=parse_hex(model.p, "public_key.p"),
        g=parse_hex(model.g, "public_key.g"),
        y=parse_hex(model.y, "public_key.y"),
    )


def _elgamal_ciphertext(model: ElGamalCiphertextModel, p: int, field_name: str) -> ElGamalCiphertext:
    return ElGamalCiphertext(
        c1=parse_hex(model.c1, f"{field_name}.c1"),
        c2=parse_hex(model.c2, f"{field_name}.c2"),
        p=p,
    )


def _elgamal_ciphertext_model(ciphertext: ElGamalCiphertext) -> ElGamalCiphertextModel:
    return ElGamalCiphertextModel(c1=to_hex(ciphertext.c1), c2=to_hex(ciphertext.c2))


def _elgamal_key_response(keys: ElGamalKeyPair) -> ElGamalKeyResponse:
    public = keys.public_key
    return ElGamalKeyResponse(
        public_key=ElGamalPublicKeyModel(p=to_hex(public.p), g=to_hex(public.g), y=to_hex(public.y)),
        private_key=ElGamalPrivateKeyModel(x=to_hex(keys.private_key.x), p=to_hex(public.p)),
    )


# ============================================================================
# Paillier Endpoints
# ============================================================================

@router.post("/paillier/generate", response_model=PaillierKeyResponse)
async def paillier_generate(data: PaillierGenerateRequest):
    """Generate a Paillier key pair (demo primes 61, 53 unless overridden)."""
    settings = get_settings()

    try:
        if data.key_size is not None:
            keys = await run_in_threadpool(paillier_engine.generate_random_keys, data.key_size)
        else:
            p = parse_hex_or_default(data.p, "p", settings.paillier_p)
            q = parse_hex_or_default(data.q, "q", settings.paillier_q)
            keys = paillier_engine.generate_keys(p, q)
    except FieldCryptoError as e:
        raise bad_request(e)

    return _paillier_key_response(keys)


@router.post("/paillier/encrypt", response_model=CiphertextResponse)
async def paillier_encrypt(data: PaillierEncryptRequest):
    """Encrypt a message under a Paillier public key."""
    public_key = _paillier_public(data.public_key)
    try:
        ciphertext = paillier_engine.encrypt(public_key, data.message)
    except FieldCryptoError as e:
        raise bad_request(e)
    return CiphertextResponse(result=to_hex(ciphertext.value))


@router.post("/paillier/add", response_model=CiphertextResponse)
async def paillier_add(data: PaillierAddRequest):
    """Multiply two ciphertexts, adding the plaintexts."""
    public_key = _paillier_public(data.public_key)
    c1 = _paillier_ciphertext(data.ciphertext1, public_key.n, "ciphertext1")
    c2 = _paillier_ciphertext(data.ciphertext2, public_key.n, "ciphertext2")
    try:
        combined = paillier_engine.combine(public_key, c1, c2)
    except FieldCryptoError as e:
        raise bad_request(e)
    return CiphertextResponse(result=to_hex(combined.value))


@router.post("/paillier/scale", response_model=CiphertextResponse)
async def paillier_scale(data: PaillierScaleRequest):
    """Raise a ciphertext to a scalar, multiplying the plaintext."""
    public_key = _paillier_public(data.public_key)
    ciphertext = _paillier_ciphertext(data.ciphertext, public_key.n, "ciphertext")
    try:
        scaled = paillier_engine.scale(public_key, ciphertext, data.scalar)
    except FieldCryptoError as e:
        raise bad_request(e)
    return CiphertextResponse(result=to_hex(scaled.value))


@router.post("/paillier/decrypt", response_model=PlaintextResponse)
async def paillier_decrypt(data: PaillierDecryptRequest):
    """Decrypt a Paillier ciphertext."""
    private_key = _paillier_private(data.private_key)
    ciphertext = _paillier_ciphertext(data.ciphertext, private_key.n, "ciphertext")
    try:
        message = paillier_engine.decrypt(private_key, ciphertext)
    except FieldCryptoError as e:
        raise bad_request(e)
    return PlaintextResponse(message=message)


# ============================================================================
# ElGamal Endpoints
# ============================================================================

@router.post("/elgamal/generate", response_model=ElGamalKeyResponse)
async def elgamal_generate(data: ElGamalGenerateRequest):
    """Generate an ElGamal key pair (demo group p=23, g=5 unless overridden)."""
    settings = get_settings()

    try:
        if data.key_size is not None:
            group = await run_in_threadpool(generate_dl_group, data.key_size)
            p, g = group.p, group.g
        else:
            p = parse_hex_or_default(data.p, "p", settings.elgamal_p)
            g = parse_hex_or_default(data.g, "g", settings.elgamal_g)
        keys = elgamal_engine.generate_keys(p, g, parse_optional_hex(data.x, "x"))
    except FieldCryptoError as e:
        raise bad_request(e)

    return _elgamal_key_response(keys)


@router.post("/elgamal/encrypt", response_model=ElGamalCiphertextResponse)
async def elgamal_encrypt(data: ElGamalEncryptRequest):
    """Encrypt a message under an ElGamal public key."""
    public_key = _elgamal_public(data.public_key)
    try:
        ciphertext = elgamal_engine.encrypt(public_key, data.message)
    except FieldCryptoError as e:
        raise bad_request(e)
    return ElGamalCiphertextResponse(result=_elgamal_ciphertext_model(ciphertext))


@router.post("/elgamal/multiply", response_model=ElGamalCiphertextResponse)
async def elgamal_multiply(data: ElGamalMultiplyRequest):
    """Multiply two ciphertexts component-wise, multiplying the plaintexts."""
    public_key = _elgamal_public(data.public_key)
    a = _elgamal_ciphertext(data.ciphertext1, public_key.p, "ciphertext1")
    b = _elgamal_ciphertext(data.ciphertext2, public_key.p, "ciphertext2")
    try:
        combined = elgamal_engine.combine(public_key, a, b)
    except FieldCryptoError as e:
        raise bad_request(e)
    return ElGamalCiphertextResponse(result=_elgamal_ciphertext_model(combined))


@router.post("/elgamal/decrypt", response_model=PlaintextResponse)
async def elgamal_decrypt(data: ElGamalDecryptRequest):
    """Decrypt an ElGamal ciphertext."""
    private_key = ElGamalPrivateKey(
        x=parse_hex(data.private_key.x, "private_key.x"),
        p=parse_hex(data.private_key.p, "private_key.p"),
    )
    ciphertext = _elgamal_ciphertext(data.ciphertext, private_key.p, "ciphertext")
    try:
        message = elgamal_engine.decrypt(private_key, ciphertext)
    except FieldCryptoError as e:
        raise bad_request(e)
    return PlaintextResponse(message=message)


# ============================================================================
# Demo
# ============================================================================

@router.post("/demo", response_model=HomomorphicDemoResponse)
async def homomorphic_demo(data: HomomorphicDemoRequest):
    """Encrypt the values, combine them under encryption, decrypt.

    addition uses Paillier, multiplication uses ElGamal, both with the
    configured demo parameters.
    """
    settings = get_settings()

    try:
        if data.operation == "addition":
            keys = paillier_engine.generate_keys(settings.paillier_p, settings.paillier_q)
            result = paillier_engine.demo(keys, data.values)
            encrypted = [to_hex(c.value) for c in result.ciphertexts]
            algorithm = "Paillier"
        else:
            keys = elgamal_engine.generate_keys(settings.elgamal_p, settings.elgamal_g)
            result = elgamal_engine.demo(keys, data.values)
            encrypted = [_elgamal_ciphertext_model(c) for c in result.ciphertexts]
            algorithm = "ElGamal"
    except FieldCryptoError as e:
        raise bad_request(e)

    return HomomorphicDemoResponse(
        operation=data.operation,
        algorithm=algorithm,
        encrypted_values=encrypted,
        result=result.result,
    )
