"""JWT authentication with RS256 signing.

Admin tokens are issued by the marketplace's auth service; this module
verifies them and, for tooling and tests, can mint tokens with the same
claim layout:

    {"sub": <admin user id>, "email": ..., "permissions": [...], "type": "access"}
"""
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from logistics.config import settings


class JWTAuth:
    """JWT authentication handler with RS256 signing."""

    def __init__(self):
        """Initialize JWT auth with RSA key pair."""
        self.algorithm = settings.jwt_algorithm
        self.access_token_expire_minutes = settings.access_token_expire_minutes

        # Ephemeral key pair; regenerated on restart
        self._private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        self._public_key = self._private_key.public_key()

    def create_access_token(
        self,
        user_id: str,
        email: str,
        permissions: List[str],
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create JWT access token.

        Args:
            user_id: Admin user ID
            email: Admin email
            permissions: Permission scopes (e.g. view_analytics, super_admin)
            expires_delta: Lifetime override (defaults to configured minutes)

        Returns:
            Encoded JWT token
        """
        now = datetime.utcnow()
        expire = now + (expires_delta or timedelta(minutes=self.access_token_expire_minutes))

        claims = {
            "sub": str(user_id),  # Subject (user ID)
            "email": email,
            "permissions": list(permissions),
            "iat": now,  # Issued at
            "exp": expire,  # Expiration
            "type": "access",
        }

        private_pem = self._private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

        return jwt.encode(claims, private_pem, algorithm=self.algorithm)

    def verify_access_token(self, token: str) -> Dict:
        """
        Verify and decode an access token.

        Args:
            token: JWT access token

        Returns:
            Decoded token claims

        Raises:
            jwt.ExpiredSignatureError: If token is expired
            jwt.InvalidTokenError: If token is invalid or not an access token
        """
        payload = jwt.decode(
            token,
            self.get_public_key_pem(),
            algorithms=[self.algorithm],
            options={"verify_signature": True},
        )

        if payload.get("type") != "access":
            raise jwt.InvalidTokenError("Not an access token")

        return payload

    def get_public_key_pem(self) -> bytes:
        """
        Get public key in PEM format for external verification.

        Returns:
            Public key in PEM format
        """
        return self._public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )


# Global JWT auth instance
jwt_auth = JWTAuth()
