"""
Mutating Admission Webhook: inject a shared in-memory secrets volume.

Behavior:
- Target resources: objects of the configured WORKLOAD_KIND (Pod or
  Deployment). Each deployed instance handles exactly one kind; everything
  else is allowed unchanged.
- Mutation: adds an emptyDir volume `secrets` (medium Memory), prepends the
  `secrets-injector` init container, and mounts `secrets` at `/secrets` in
  every container that does not already have that mount.

Implementation details:
- Receives AdmissionReview requests at /mutate (HTTPS).
- Computes RFC 6902 JSON Patch operations and base64-encodes the patch in the
  AdmissionReview response.
- A review or object that cannot be decoded is answered with HTTP 200 and a
  response carrying only a status message (allowed=false); use the webhook
  failurePolicy to control cluster behavior.
"""

import json
import logging
import sys
from typing import Optional

from flask import Blueprint, Flask, Response, current_app, request
from pydantic import ValidationError

from secrets_injector.config import Settings, check_tls_files, load_settings
from secrets_injector.exceptions import ConfigurationError
from secrets_injector.mutate import mutate
from secrets_injector.review import (
    ADMISSION_API_VERSION,
    AdmissionResponse,
    AdmissionReview,
    Status,
    review_envelope,
)
from secrets_injector.workloads import get_workload

MUTATE_PATH = "/mutate"

webhook = Blueprint("webhook", __name__)


@webhook.route(MUTATE_PATH, methods=["POST"])
@webhook.route("/", methods=["POST"])
@webhook.route("/<path:path>", methods=["POST"])
def serve(path: Optional[str] = None) -> Response:
    """Admission endpoint that returns a JSON Patch for the configured workload kind.

    Request: AdmissionReview with `request.object` containing the resource.
    Response: AdmissionReview with `response.allowed=true` and a base64-encoded
              `response.patch` (patchType=JSONPatch) for matching objects.

    Any POST path is accepted, but only /mutate is reviewed; other paths get
    an envelope without a response.
    """
    body = request.get_data()
    if not body:
        current_app.logger.error("empty body")
        return Response("empty body", status=400, mimetype="text/plain")

    content_type = request.headers.get("Content-Type")
    if content_type != "application/json":
        current_app.logger.error("Content-Type=%s, expect application/json", content_type)
        return Response(
            "invalid Content-Type, expect `application/json`", status=415, mimetype="text/plain"
        )

    api_version = ADMISSION_API_VERSION
    response: Optional[AdmissionResponse] = None
    try:
        review = AdmissionReview.model_validate_json(body)
    except ValidationError as exc:
        current_app.logger.error("Can't decode body: %s", exc)
        response = AdmissionResponse(status=Status(message=str(exc)))
    else:
        api_version = review.api_version
        if request.path == MUTATE_PATH:
            decision = mutate(
                review.request,
                current_app.config["WORKLOAD"],
                skip_existing=current_app.config["SKIP_EXISTING"],
            )
            response = decision.to_response(uid=review.request.uid)
        else:
            current_app.logger.warning("No handler for path %s", request.path)

    envelope = review_envelope(response, api_version=api_version)
    try:
        payload = json.dumps(envelope)
    except (TypeError, ValueError) as exc:
        current_app.logger.error("Can't encode response: %s", exc)
        return Response(f"could not encode response: {exc}", status=500, mimetype="text/plain")

    current_app.logger.info("Ready to write response ...")
    return Response(payload, status=200, mimetype="application/json")


@webhook.route("/healthz", methods=["GET"])  # liveness/readiness
def healthz():
    """Simple liveness/readiness probe endpoint."""
    return "ok", 200


def create_app(settings: Optional[Settings] = None) -> Flask:
    """Build the webhook application.

    The workload adapter is resolved once here and shared read-only by every
    request.
    """
    if settings is None:
        settings = load_settings()

    app = Flask(__name__)
    app.config["WORKLOAD"] = get_workload(settings.workload_kind)
    app.config["SKIP_EXISTING"] = settings.skip_existing

    app.register_blueprint(webhook)
    return app


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main() -> None:
    """Run the Flask app with TLS using cert/key provided via env or defaults."""
    try:
        settings = load_settings()
        check_tls_files(settings)
    except ConfigurationError as exc:
        sys.exit(f"secrets-injector: {exc}")

    configure_logging(settings.log_level)
    app = create_app(settings)
    app.logger.info(
        "Starting webhook on port %s (kind %s, skip existing %s)",
        settings.port,
        settings.workload_kind,
        settings.skip_existing,
    )
    app.logger.info("TLS cert=%s key=%s", settings.cert_file, settings.key_file)
    app.run(host="0.0.0.0", port=settings.port, ssl_context=(settings.cert_file, settings.key_file))


if __name__ == "__main__":
    main()
