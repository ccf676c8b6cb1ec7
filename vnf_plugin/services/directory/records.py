"""
Instance Record serialization.

The value stored in the instance directory for one VNF instance: the
internal resource names created per kind, in creation order.

    {"version": 1, "resources": {"deployment": ["region1-test-<uuid>-sise-deploy"],
                                 "service": ["region1-test-<uuid>-sise-svc"]},
     "csar_id": "UUID-1"}

Values written by the single-resource variant ("deployName|serviceName") are
still readable.
"""

import json
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

RECORD_VERSION = 1

LEGACY_DELIMITER = "|"
LEGACY_KINDS = ("deployment", "service")


class InstanceRecord(BaseModel):
    """Resources created for one VNF instance, keyed by kind."""
    version: int = Field(default=RECORD_VERSION, description="Record schema version")
    resources: Dict[str, List[str]] = Field(default_factory=dict, description="kind -> internal names")
    csar_id: Optional[str] = Field(default=None, description="CSAR the instance was created from")

    def add(self, kind: str, internal_name: str) -> None:
        self.resources.setdefault(kind, []).append(internal_name)

    def names(self, kind: str) -> List[str]:
        return list(self.resources.get(kind, []))

    def entries(self) -> List[Tuple[str, str]]:
        """(kind, internal name) pairs in creation order."""
        return [(kind, name) for kind, names in self.resources.items() for name in names]

    def is_empty(self) -> bool:
        return not any(self.resources.values())

    def to_value(self) -> str:
        """Serialize for the directory."""
        return self.model_dump_json(exclude_none=True)

    @classmethod
    def from_value(cls, value: str) -> "InstanceRecord":
        """
        Deserialize a directory value.

        Raises:
            ValueError: If value is neither a record nor a legacy combined name
        """
        stripped = value.strip()
        if stripped.startswith("{"):
            try:
                record = cls.model_validate_json(stripped)
            except ValidationError as e:
                raise ValueError(f"Invalid instance record: {e}") from e
            if record.version > RECORD_VERSION:
                raise ValueError(f"Unsupported instance record version: {record.version}")
            return record

        return cls.from_legacy_value(stripped)

    @classmethod
    def from_legacy_value(cls, value: str) -> "InstanceRecord":
        """
        Decode "deployName|serviceName".

        Raises:
            ValueError: If value does not have exactly one name per legacy kind
        """
        parts = value.split(LEGACY_DELIMITER)
        if len(parts) != len(LEGACY_KINDS) or not all(parts):
            raise ValueError(f"Invalid legacy instance value: {json.dumps(value)}")

        record = cls()
        for kind, name in zip(LEGACY_KINDS, parts):
            record.add(kind, name)
        return record
