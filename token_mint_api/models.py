from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import InvalidMetadataSchema

REQUIRED_METADATA_FIELDS = ("name", "symbol", "description", "image")
OPTIONAL_METADATA_FIELDS = ("external_url", "twitter", "telegram", "discord")


@dataclass(frozen=True)
class Creator:
    name: str
    site: str


@dataclass(frozen=True)
class TokenMetadata:
    name: str
    symbol: str
    description: str
    image: str
    creator: Optional[Creator] = None
    external_url: Optional[str] = None
    twitter: Optional[str] = None
    telegram: Optional[str] = None
    discord: Optional[str] = None

    @classmethod
    def from_dict(cls, doc: Any) -> "TokenMetadata":
        """Build metadata from a decoded JSON document.

        Raises InvalidMetadataSchema when the document is not an object or any
        required field is missing, not a string, or blank.
        """
        if not isinstance(doc, dict):
            raise InvalidMetadataSchema("Invalid metadata: document must be a JSON object")
        for key in REQUIRED_METADATA_FIELDS:
            value = doc.get(key)
            if not isinstance(value, str) or not value.strip():
                raise InvalidMetadataSchema(
                    "Invalid metadata: missing required fields (name, symbol, description, image)"
                )

        creator = None
        raw_creator = doc.get("creator")
        if isinstance(raw_creator, dict):
            creator = Creator(name=str(raw_creator.get("name", "")), site=str(raw_creator.get("site", "")))

        extras = {}
        for key in OPTIONAL_METADATA_FIELDS:
            value = doc.get(key)
            extras[key] = value if isinstance(value, str) else None

        return cls(
            name=doc["name"],
            symbol=doc["symbol"],
            description=doc["description"],
            image=doc["image"],
            creator=creator,
            **extras,
        )


@dataclass(frozen=True)
class TokenCreationResult:
    mint_address: str
    transaction_signature: str
    explorer_url: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "mintAddress": self.mint_address,
            "transactionSignature": self.transaction_signature,
            "explorerUrl": self.explorer_url,
        }


@dataclass(frozen=True)
class RevokeAuthorityOptions:
    revoke_mint_authority: bool = True
    revoke_freeze_authority: bool = True


@dataclass
class RevocationResult:
    success: bool
    signatures: List[str] = field(default_factory=list)
    mint_authority_revoked: bool = False
    freeze_authority_revoked: bool = False
    error: Optional[str] = None

    @property
    def revoked(self) -> Dict[str, bool]:
        return {
            "mintAuthority": self.mint_authority_revoked,
            "freezeAuthority": self.freeze_authority_revoked,
        }

    def summary(self) -> str:
        names = []
        if self.mint_authority_revoked:
            names.append("mint authority")
        if self.freeze_authority_revoked:
            names.append("freeze authority")
        if not names:
            return "No authorities were revoked"
        return f"Revoked {' and '.join(names)}"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "success": self.success,
            "signatures": list(self.signatures),
            "revoked": self.revoked,
        }
        if self.error is not None:
            out["error"] = self.error
        return out
