"""
Modul keamanan terpusat untuk Security Audit API.
Menangani password hashing, JWT generation/validation, dan pembuatan recovery code.
"""

import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from passlib.context import CryptContext
from jose import jwt, JWTError

from app.core.config import settings
from app.core.exceptions import TokenError, ExpiredTokenException


# Password hashing context dengan Argon2
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__rounds=4,
    argon2__memory_cost=65536,
    argon2__parallelism=2,
    argon2__hash_len=32,
    argon2__salt_len=16
)


class Security:
    """Kelas untuk operasi keamanan."""

    # Password Operations
    @staticmethod
    def hash_password(password: str) -> str:
        """
        Hash password menggunakan Argon2.

        Args:
            password: Plain text password

        Returns:
            Hashed password
        """
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """
        Verifikasi password terhadap hash.

        Args:
            plain_password: Plain text password
            hashed_password: Hashed password

        Returns:
            True jika password cocok, False jika tidak
        """
        return pwd_context.verify(plain_password, hashed_password)

    # JWT Operations
    @staticmethod
    def create_access_token(
        subject: str,
        expires_delta: Optional[timedelta] = None,
        additional_claims: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Membuat JWT access token.

        Args:
            subject: Subject JWT (account id)
            expires_delta: Custom expiration time
            additional_claims: Claims tambahan untuk ditambahkan ke token

        Returns:
            Encoded JWT token
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or settings.access_token_expire_timedelta)

        to_encode = {
            "sub": subject,
            "exp": expire,
            "iat": now,
            "type": "access"
        }

        if additional_claims:
            to_encode.update(additional_claims)

        return jwt.encode(
            to_encode,
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM
        )

    @staticmethod
    def decode_token(token: str, expected_type: str = "access") -> Dict[str, Any]:
        """
        Decode dan validasi JWT token.

        Args:
            token: JWT token
            expected_type: Tipe token yang diharapkan

        Returns:
            Decoded token payload

        Raises:
            TokenError: Jika token tidak valid
        """
        try:
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM]
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenException()
        except jwt.JWTClaimsError:
            raise TokenError("Invalid token claims")
        except JWTError:
            raise TokenError("Invalid token")

        if payload.get("type") != expected_type:
            raise TokenError(f"Invalid token type. Expected {expected_type}")

        return payload

    # Recovery code
    @staticmethod
    def generate_numeric_token(length: int = 6) -> str:
        """
        Generate numeric token untuk recovery code.
        Setiap digit diambil uniform dari secrets, leading zero tetap dipertahankan.

        Args:
            length: Panjang token

        Returns:
            Numeric token
        """
        return ''.join(secrets.choice(string.digits) for _ in range(length))

    @staticmethod
    def compare_codes(provided: str, stored: str) -> bool:
        """Bandingkan dua code secara constant-time."""
        return secrets.compare_digest(provided.encode(), stored.encode())


# Global security instance
security = Security()
