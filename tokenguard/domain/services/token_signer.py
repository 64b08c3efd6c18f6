"""Token signer interface - domain layer abstraction.

The signer owns the cryptographic envelope of a token and nothing else:
it turns claims into a signed string and back. It does not look at the
clock and does not know about revocation; the token engine layers those
checks on top.

The domain does NOT care:
- What envelope format is used (JWS compact serialization today)
- Which library implements it (PyJWT, jose, etc.)
- Which algorithm signs it (HS256, RS256, etc.)
"""

from abc import ABC, abstractmethod

from tokenguard.domain.entities.token import TokenClaims


class ITokenSigner(ABC):
    """
    Interface for signing and verifying token envelopes.

    Implementations hold key material that is read-only after construction
    and therefore safe to share between concurrent requests.
    """

    @abstractmethod
    def sign(self, claims: TokenClaims) -> str:
        """
        Sign claims into a token string.

        The header names the key that signed it, so several keys can be
        accepted during verification.

        Args:
            claims: Claims to embed

        Returns:
            Encoded three-part token string
        """
        pass

    @abstractmethod
    def verify(self, token: str) -> TokenClaims:
        """
        Check structure, then signature, and decode the claims.

        Expiry is deliberately not checked here.

        Args:
            token: Encoded token string

        Returns:
            Decoded claims

        Raises:
            MalformedTokenException: Not a decodable envelope or missing claims
            InvalidSignatureException: Signature does not verify under any known key
        """
        pass
