"""
S3 file storage plugin.
"""

from __future__ import annotations

from ..generators.renderer import get_renderer
from .base import FeaturePlugin, HealthCheckSection, PluginContext, PluginKind, PluginOutput, PluginValidation


class S3StoragePlugin(FeaturePlugin):
    """Uploads to an S3 bucket.

    Settings:
        bucket: Bucket name (required)
        region: AWS region (default "us-east-1")
    """

    kind = PluginKind.S3_STORAGE

    def validate(self, context: PluginContext) -> PluginValidation:
        result = PluginValidation()
        if not self.settings.get("bucket"):
            result.errors.append("S3 storage requires a bucket name")
        if "region" not in self.settings:
            result.warnings.append("No region set, using us-east-1")
        result.valid = not result.errors
        return result

    def generate(self, context: PluginContext) -> PluginOutput:
        bucket = self.settings["bucket"]
        region = self.settings.get("region", "us-east-1")
        content = get_renderer().render("plugins/s3_storage.ts.jinja2", bucket=bucket, region=region)
        return PluginOutput(
            files={"storage/s3.ts": content},
            env_vars={"AWS_REGION": region, "S3_BUCKET": bucket, "AWS_ACCESS_KEY_ID": "", "AWS_SECRET_ACCESS_KEY": ""},
            dependencies={"@aws-sdk/client-s3": "^3.0.0"},
        )

    def health_check(self, context: PluginContext) -> HealthCheckSection:
        return HealthCheckSection(
            id="s3-storage",
            title="S3 Storage",
            checks=[f"Bucket {self.settings.get('bucket', '?')} exists and is writable", "AWS credentials are configured"],
        )
