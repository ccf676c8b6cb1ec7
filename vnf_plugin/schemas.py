from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict

FORBIDDEN_ID_CHARACTER = "|"


def _check_identifier(value: Optional[str], label: str, required: bool) -> Optional[str]:
    if value is None or not value.strip():
        if required:
            raise ValueError(f'{label} must not be empty')
        return value
    if FORBIDDEN_ID_CHARACTER in value:
        raise ValueError(f'{label} must not contain "{FORBIDDEN_ID_CHARACTER}"')
    return value.strip()


class CreateVnfRequest(BaseModel):
    csar_id: str = Field(..., description="CSAR directory name under CSAR_DIR")
    cloud_region_id: str = Field(..., description="Target cloud region")
    namespace: str = Field("default", description="Target namespace")
    csar_url: Optional[str] = Field(None, description="Download location if the CSAR is not present yet")

    @field_validator('csar_id')
    @classmethod
    def validate_csar_id(cls, v):
        return _check_identifier(v, 'csar_id', required=True)

    @field_validator('cloud_region_id')
    @classmethod
    def validate_cloud_region_id(cls, v):
        return _check_identifier(v, 'cloud_region_id', required=True)

    @field_validator('namespace')
    @classmethod
    def validate_namespace(cls, v):
        return _check_identifier(v, 'namespace', required=False) or "default"


class UpdateVnfRequest(BaseModel):
    csar_id: Optional[str] = Field(None, description="CSAR to apply (default: the one used at creation)")
    csar_url: Optional[str] = None

    @field_validator('csar_id')
    @classmethod
    def validate_csar_id(cls, v):
        return _check_identifier(v, 'csar_id', required=False) or None


class VnfInstanceResponse(BaseModel):
    vnf_id: str
    cloud_region_id: str
    namespace: str
    csar_id: Optional[str] = None
    vnf_components: List[str] = Field(default_factory=list, description="Declared names in creation order")
    resources: Dict[str, List[str]] = Field(default_factory=dict, description="kind -> declared names")


class VnfListResponse(BaseModel):
    vnf_list: List[str]


class ReconcileResponse(BaseModel):
    cloud_region_id: str
    namespace: str
    instances: int
    consistent: bool
    orphaned: Dict[str, List[str]] = Field(default_factory=dict, description="Live resources with no record")
    missing: Dict[str, List[str]] = Field(default_factory=dict, description="Recorded resources not in the cluster")
