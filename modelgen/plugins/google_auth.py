"""
Google OAuth plugin.
"""

from __future__ import annotations

from ..generators.renderer import get_renderer
from .base import FeaturePlugin, HealthCheckSection, PluginContext, PluginKind, PluginOutput, PluginValidation

STRATEGIES = ("jwt", "session")


class GoogleAuthPlugin(FeaturePlugin):
    """Sign-in with Google through passport.

    Settings:
        user_model: Model holding user accounts (default "User"), must have an email field
        callback_url: OAuth callback path (default "/auth/google/callback")
        strategy: "jwt" or "session" (default "jwt")
    """

    kind = PluginKind.GOOGLE_AUTH

    @property
    def user_model(self) -> str:
        return self.settings.get("user_model", "User")

    @property
    def callback_url(self) -> str:
        return self.settings.get("callback_url", "/auth/google/callback")

    @property
    def strategy(self) -> str:
        return self.settings.get("strategy", "jwt")

    def validate(self, context: PluginContext) -> PluginValidation:
        result = PluginValidation()

        model = context.schema.get_model(self.user_model)
        if model is None:
            result.errors.append(f"User model '{self.user_model}' not found in schema")
        elif model.get_field("email") is None:
            result.errors.append(f"User model '{self.user_model}' has no email field")

        if self.strategy not in STRATEGIES:
            result.errors.append(f"Unknown strategy '{self.strategy}', expected one of: {', '.join(STRATEGIES)}")

        if self.strategy == "session":
            result.warnings.append("Session strategy needs a persistent session store in production")

        result.valid = not result.errors
        return result

    def generate(self, context: PluginContext) -> PluginOutput:
        content = get_renderer().render(
            "plugins/google_auth.ts.jinja2",
            user_model=self.user_model,
            callback_url=self.callback_url,
            strategy=self.strategy,
        )
        env_vars = {"GOOGLE_CLIENT_ID": "your-client-id", "GOOGLE_CLIENT_SECRET": "your-client-secret"}
        if self.strategy == "jwt":
            env_vars["JWT_SECRET"] = "change-me"
        else:
            env_vars["SESSION_SECRET"] = "change-me"

        return PluginOutput(
            files={"auth/google.strategy.ts": content},
            env_vars=env_vars,
            dependencies={"passport": "^0.7.0", "passport-google-oauth20": "^2.0.0"},
        )

    def health_check(self, context: PluginContext) -> HealthCheckSection:
        return HealthCheckSection(
            id="google-auth",
            title="Google OAuth",
            checks=[
                "GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET are set",
                f"Callback URL {self.callback_url} is registered in the Google console",
                f"{self.user_model} records are created on first sign-in",
            ],
        )
