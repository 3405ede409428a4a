"""CryptoLab - Finite-Field Protocol Toolkit.

Teaching-scale implementations of the classic finite-field protocols:
- Threshold secret sharing (Shamir)
- Additive homomorphic encryption (Paillier)
- Multiplicative homomorphic encryption (ElGamal)
- Zero-knowledge identification (Schnorr)
- Commitments (Pedersen)

Demonstration parameters are deliberately tiny. Do not use them to
protect anything real.
"""

__version__ = "0.1.0"
__author__ = "CryptoLab Contributors"
