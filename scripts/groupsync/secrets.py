"""Secret reference resolution for the Okta API token.

Plain values are used as-is. References are fetched from AWS Secrets
Manager or GCP Secret Manager depending on their prefix.
"""

from __future__ import annotations

import json
import logging
import os

logger = logging.getLogger("groupsync.secrets")

_AWS_PREFIX = "aws-secret://"
_GCP_PREFIX = "gcp-secret://"
METADATA_PROJECT_URL = "http://metadata.google.internal/computeMetadata/v1/project/project-id"


def resolve_secret(value: str) -> str:
    """Resolve a secret reference to its plaintext value.

    Supported formats:
      - "aws-secret://secret-name"         -> AWS Secrets Manager
      - "aws-secret://secret-name#key"     -> AWS Secrets Manager (JSON key)
      - "gcp-secret://projects/P/secrets/S/versions/V" or "gcp-secret://S"
      - anything else                      -> returned unchanged
    """
    if value.startswith(_AWS_PREFIX):
        return _from_aws(value[len(_AWS_PREFIX):])
    if value.startswith(_GCP_PREFIX):
        return _from_gcp(value[len(_GCP_PREFIX):])
    return value


def _from_aws(ref: str) -> str:
    import boto3

    secret_id, _, json_key = ref.partition("#")
    client = boto3.client(
        "secretsmanager", region_name=os.environ.get("AWS_REGION", "us-east-1")
    )
    logger.info("Resolving API token from AWS Secrets Manager")
    secret_string = client.get_secret_value(SecretId=secret_id)["SecretString"]
    if json_key:
        return str(json.loads(secret_string)[json_key])
    return secret_string


def _from_gcp(ref: str) -> str:
    if ref.startswith("projects/"):
        name = ref
    else:
        project = os.environ.get("GCP_PROJECT_ID", "") or _gcp_project_from_metadata()
        name = f"projects/{project}/secrets/{ref}/versions/latest"

    from google.cloud import secretmanager

    logger.info("Resolving API token from GCP Secret Manager")
    client = secretmanager.SecretManagerServiceClient()
    response = client.access_secret_version(request={"name": name})
    return response.payload.data.decode("UTF-8")


def _gcp_project_from_metadata() -> str:
    """Read the project ID from the metadata server (Cloud Run, GCE)."""
    import requests

    try:
        resp = requests.get(
            METADATA_PROJECT_URL,
            headers={"Metadata-Flavor": "Google"},
            timeout=2,
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise ValueError(
            "Cannot determine GCP project ID from the metadata server. "
            "Set GCP_PROJECT_ID."
        ) from exc
    return resp.text.strip()
