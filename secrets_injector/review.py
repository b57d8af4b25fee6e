"""AdmissionReview envelope models.

Requests are validated with pydantic on the way in; responses are dumped with
camelCase keys and without empty optional fields on the way out.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

ADMISSION_API_VERSION = "admission.k8s.io/v1"
ADMISSION_KIND = "AdmissionReview"
PATCH_TYPE_JSON_PATCH = "JSONPatch"


class ReviewModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GroupVersionKind(ReviewModel):
    group: str = ""
    version: str = ""
    kind: str


class UserInfo(ReviewModel):
    username: Optional[str] = None
    uid: Optional[str] = None
    groups: List[str] = Field(default_factory=list)


class AdmissionRequest(ReviewModel):
    uid: str
    kind: GroupVersionKind
    namespace: Optional[str] = None
    name: Optional[str] = None
    operation: Optional[str] = None
    user_info: UserInfo = Field(default_factory=UserInfo, alias="userInfo")
    object: Any = None


class Status(ReviewModel):
    message: str


class AdmissionResponse(ReviewModel):
    uid: Optional[str] = None
    allowed: bool = False
    patch: Optional[str] = None
    patch_type: Optional[str] = Field(None, alias="patchType")
    status: Optional[Status] = None


class AdmissionReview(ReviewModel):
    api_version: str = Field(ADMISSION_API_VERSION, alias="apiVersion")
    kind: str = ADMISSION_KIND
    request: AdmissionRequest
    response: Optional[AdmissionResponse] = None


def review_envelope(response: Optional[AdmissionResponse], api_version: str = ADMISSION_API_VERSION) -> Dict[str, Any]:
    """Wrap ``response`` in an AdmissionReview envelope ready for ``json.dumps``."""
    envelope: Dict[str, Any] = {"apiVersion": api_version, "kind": ADMISSION_KIND}
    if response is not None:
        envelope["response"] = response.model_dump(by_alias=True, exclude_none=True)
    return envelope
