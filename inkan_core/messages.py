"""
inkan_core.messages
-------------------
Request and result containers exchanged with the API layer.

Each request has a ``from_dict`` used by the HTTP handlers to rebuild it
from a JSON body before handing it to the service.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from .storage.models import KeyStrength, PublicView
from .utils import from_iso, to_iso


@dataclass
class GenerateRequest:
    name: str
    description: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    expires_at: Optional[datetime] = None
    tags: Set[str] = field(default_factory=set)
    key_strength: KeyStrength = KeyStrength.STANDARD

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenerateRequest":
        return cls(
            name=data.get("name", ""),
            description=data.get("description"),
            password=data.get("password"),
            expires_at=from_iso(data.get("expires_at")),
            tags=set(data.get("tags") or []),
            key_strength=KeyStrength(data.get("key_strength") or KeyStrength.STANDARD.value),
        )


@dataclass
class GenerateResult:
    key: PublicView
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key.to_dict(), "warnings": list(self.warnings)}


@dataclass
class SignRequest:
    key_id: str
    password: Optional[str] = field(default=None, repr=False)
    document_hash: Optional[str] = None       # hex
    document_content: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignRequest":
        return cls(
            key_id=data.get("key_id", ""),
            password=data.get("password"),
            document_hash=data.get("document_hash"),
            document_content=data.get("document_content"),
        )


@dataclass
class SignatureResult:
    signature: str          # base64
    key_id: str
    document_hash: str      # hex of the signed digest
    signing_time: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "signature": self.signature,
            "key_id": self.key_id,
            "document_hash": self.document_hash,
            "signing_time": to_iso(self.signing_time),
        }


@dataclass
class VerifyRequest:
    public_key: str         # base64
    signature: str          # base64
    document_hash: Optional[str] = None
    document_content: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VerifyRequest":
        return cls(
            public_key=data.get("public_key", ""),
            signature=data.get("signature", ""),
            document_hash=data.get("document_hash"),
            document_content=data.get("document_content"),
        )
