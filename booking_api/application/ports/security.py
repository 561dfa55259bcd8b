from typing import Any, Dict, Optional, Protocol


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str:
        ...

    def verify(self, password: str, password_hash: str) -> bool:
        ...


class TokenIssuer(Protocol):
    def issue(self, subject: str, claims: Optional[Dict[str, Any]] = None) -> str:
        ...

    def decode(self, token: str) -> Optional[Dict[str, Any]]:
        ...
