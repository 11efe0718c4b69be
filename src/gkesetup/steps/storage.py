# steps/storage.py
# Certificate, buckets and the KMS key for app secrets.
from __future__ import annotations

from typing import TYPE_CHECKING

from ..config import KMS_KEY, KMS_KEYRING, SSL_CERT_NAME, STATIC_BUCKET_NAME

if TYPE_CHECKING:
    from ..runner import RunContext


def _make_bucket(ctx: RunContext, bucket_name: str) -> None:
    gcs_bucket = f"gs://{bucket_name}/"
    ctx.run("gsutil", "mb", "-p", ctx.env["ProjectID"], gcs_bucket)
    ctx.console.print_info(f"Created GCS bucket {gcs_bucket}")


def install_ssl_certificate(ctx: RunContext) -> None:
    ctx.run(
        "gcloud", "compute", "ssl-certificates", "create", SSL_CERT_NAME,
        "--certificate", ctx.env["CertificatePath"],
        "--private-key", ctx.env["PrivateKeyPath"],
    )


def create_static_bucket(ctx: RunContext) -> None:
    ctx.env["StaticBucketName"] = f"static-{ctx.env['ProjectID']}"
    _make_bucket(ctx, ctx.env["StaticBucketName"])


def create_backend_bucket(ctx: RunContext) -> None:
    # TODO: pass --enable-cdn once the static content is served through the CDN
    ctx.run(
        "gcloud", "compute", "--project", ctx.env["ProjectID"],
        "backend-buckets", "create", STATIC_BUCKET_NAME,
        f"--gcs-bucket-name={ctx.env['StaticBucketName']}",
    )


def create_app_data_bucket(ctx: RunContext) -> None:
    ctx.env["AppDataBucketName"] = f"app-data-{ctx.env['ProjectID']}"
    _make_bucket(ctx, ctx.env["AppDataBucketName"])


def grant_app_data_read(ctx: RunContext) -> None:
    ctx.run(
        "gsutil", "acl", "-p", ctx.env["ProjectID"],
        "ch", "-u", f"{ctx.env['ServiceAccountEmail']}:R",
        f"gs://{ctx.env['AppDataBucketName']}/",
    )


def create_secrets_key(ctx: RunContext) -> None:
    ctx.run("gcloud", "kms", "keyrings", "create", KMS_KEYRING, "--location", "global")
    # "encryption" is the only purpose; the same key encrypts and decrypts
    ctx.run(
        "gcloud", "kms", "keys", "create", KMS_KEY,
        "--location", "global", "--keyring", KMS_KEYRING,
        "--purpose", "encryption",
    )
