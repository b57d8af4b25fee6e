"""Admission decision: should the object be patched, and with what."""

import base64
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from secrets_injector.patches import build_patches
from secrets_injector.review import PATCH_TYPE_JSON_PATCH, AdmissionRequest, AdmissionResponse, Status
from secrets_injector.workloads import Workload

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    ALLOWED = "allowed"
    DENIED = "denied"
    ERRORED = "errored"


@dataclass(frozen=True)
class Decision:
    """Result of reviewing one admission request.

    Attributes:
        outcome: Whether the object is admitted, refused, or could not be reviewed.
        patch: Serialized JSON Patch document, only for ALLOWED.
        reason: Message surfaced in the response status for DENIED and ERRORED.

    """

    outcome: Outcome
    patch: Optional[bytes] = None
    reason: Optional[str] = None

    @classmethod
    def allowed(cls, patch: Optional[bytes] = None) -> "Decision":
        return cls(Outcome.ALLOWED, patch=patch)

    @classmethod
    def denied(cls, reason: str) -> "Decision":
        return cls(Outcome.DENIED, reason=reason)

    @classmethod
    def errored(cls, reason: str) -> "Decision":
        return cls(Outcome.ERRORED, reason=reason)

    def to_response(self, uid: Optional[str] = None) -> AdmissionResponse:
        """Build the AdmissionReview response for this decision.

        Only ALLOWED admits the object. DENIED and ERRORED both answer
        ``allowed=false`` and carry the reason as the status message.
        """
        if self.outcome is Outcome.ALLOWED:
            response = AdmissionResponse(uid=uid, allowed=True)
            if self.patch is not None:
                response.patch = base64.b64encode(self.patch).decode("utf-8")
                response.patch_type = PATCH_TYPE_JSON_PATCH
            return response
        return AdmissionResponse(uid=uid, allowed=False, status=Status(message=self.reason or self.outcome.value))


def encode_patch(patches: List[Dict[str, Any]]) -> bytes:
    return json.dumps(patches).encode("utf-8")


def mutate(req: AdmissionRequest, workload: Workload, skip_existing: bool = False) -> Decision:
    """Decide on one admission request.

    Objects of the workload's kind get the secrets injection patch; anything
    else is allowed unchanged. A malformed object or a patch that cannot be
    serialized yields an ERRORED decision without a patch.
    """
    logger.info(
        "AdmissionReview for kind=%s namespace=%s name=%s uid=%s operation=%s user=%s",
        req.kind.kind,
        req.namespace,
        req.name,
        req.uid,
        req.operation,
        req.user_info.username,
    )

    if req.kind.kind != workload.kind:
        logger.debug("Skipping kind %s, this webhook handles %s", req.kind.kind, workload.kind)
        return Decision.allowed()

    try:
        obj = workload.load(req.object)
    except ValidationError as exc:
        logger.error("Could not unmarshal raw object: %s", exc)
        return Decision.errored(str(exc))

    patches = build_patches(workload.spec_path, workload.pod_spec(obj), skip_existing=skip_existing)
    try:
        patch_bytes = encode_patch(patches)
    except (TypeError, ValueError) as exc:
        logger.error("Could not encode patch: %s", exc)
        return Decision.errored(str(exc))

    logger.info("AdmissionResponse: patch=%s", patch_bytes.decode("utf-8"))
    return Decision.allowed(patch_bytes)
