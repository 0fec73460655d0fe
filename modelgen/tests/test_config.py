"""
Tests for configuration normalization.
"""

import logging
import unittest

import pytest

from modelgen.pipeline.config import ConfigNormalizer, Framework, GeneratorConfig, HookFramework
from modelgen.pipeline.errors import ConfigConflictError, ConfigError, MissingProductionFieldError


class TestConfigNormalizer(unittest.TestCase):
    def setUp(self):
        self.normalizer = ConfigNormalizer()

    def test_defaults(self):
        config = self.normalizer.normalize(None, environment="development")

        self.assertEqual(config.framework, Framework.EXPRESS)
        self.assertTrue(config.use_enhanced)
        self.assertFalse(config.use_registry)
        self.assertFalse(config.error_handling.fail_fast)
        self.assertTrue(config.error_handling.continue_on_error)
        self.assertFalse(config.error_handling.strict_plugin_validation)
        self.assertTrue(config.generation.checklist)
        self.assertFalse(config.generation.auto_open)
        self.assertEqual(config.generation.hook_frameworks, (HookFramework.REACT,))
        self.assertEqual(config.metadata.project_name, "Generated Project")
        self.assertEqual(config.metadata.schema_hash, "development")
        self.assertEqual(config.metadata.tool_version, "0.0.0-dev")
        self.assertIsNone(config.features)

    def test_logs_substituted_defaults(self):
        with self.assertLogs("modelgen.pipeline.config", level=logging.INFO) as logs:
            self.normalizer.normalize({"framework": "fastify"}, environment="development")

        defaults_line = next(line for line in logs.output if "Using defaults" in line)
        self.assertIn("use_enhanced=true", defaults_line)
        self.assertNotIn("framework=express", defaults_line)

    def test_dict_and_dataclass_inputs_are_equivalent(self):
        raw = {"framework": "fastify", "use_registry": True, "hook_frameworks": ["vue"]}
        from_dict = self.normalizer.normalize(raw, environment="development")
        from_dataclass = self.normalizer.normalize(GeneratorConfig.from_dict(raw), environment="development")
        self.assertEqual(from_dict, from_dataclass)
        self.assertEqual(from_dict.framework, Framework.FASTIFY)

    def test_fail_fast_and_continue_on_error_conflict(self):
        with self.assertRaises(ConfigConflictError):
            self.normalizer.normalize({"fail_fast": True, "continue_on_error": True}, environment="development")

    def test_fail_fast_turns_off_continue_on_error(self):
        config = self.normalizer.normalize({"fail_fast": True}, environment="development")
        self.assertTrue(config.error_handling.fail_fast)
        self.assertFalse(config.error_handling.continue_on_error)

    def test_production_requires_schema_hash(self):
        with self.assertRaises(MissingProductionFieldError):
            self.normalizer.normalize({"tool_version": "1.2.0"}, environment="production")
        with self.assertRaises(MissingProductionFieldError):
            self.normalizer.normalize({"schema_hash": "development", "tool_version": "1.2.0"}, environment="production")

    def test_production_requires_tool_version(self):
        with self.assertRaises(MissingProductionFieldError):
            self.normalizer.normalize({"schema_hash": "abc123", "tool_version": "0.0.0-dev"}, environment="production")

    def test_production_with_real_metadata(self):
        config = self.normalizer.normalize({"schema_hash": "abc123", "tool_version": "1.2.0"}, environment="production")
        self.assertEqual(config.metadata.schema_hash, "abc123")

    def test_invalid_hook_frameworks_fall_back_to_react(self):
        with self.assertLogs("modelgen.pipeline.config", level=logging.WARNING) as logs:
            config = self.normalizer.normalize({"hook_frameworks": ["vue", "svelte"]}, environment="development")

        self.assertEqual(config.generation.hook_frameworks, (HookFramework.REACT,))
        self.assertTrue(any("svelte" in line for line in logs.output))

    def test_hook_frameworks_are_deduplicated(self):
        config = self.normalizer.normalize({"hook_frameworks": ["vue", "zustand", "vue"]}, environment="development")
        self.assertEqual(config.generation.hook_frameworks, (HookFramework.VUE, HookFramework.ZUSTAND))

    def test_unknown_framework(self):
        with self.assertRaises(ConfigError):
            self.normalizer.normalize({"framework": "koa"}, environment="development")

    def test_unknown_feature(self):
        with self.assertRaises(ConfigError):
            self.normalizer.normalize({"features": {"stripe_payments": {}}}, environment="development")

    def test_feature_settings_must_be_an_object(self):
        with self.assertRaisesRegex(ConfigError, "google_auth"):
            self.normalizer.normalize({"features": {"google_auth": True}}, environment="development")

    def test_features_must_be_an_object(self):
        with self.assertRaises(ConfigError):
            self.normalizer.normalize({"features": ["google_auth"]}, environment="development")

    def test_feature_without_settings(self):
        config = self.normalizer.normalize({"features": {"google_auth": None}}, environment="development")
        self.assertEqual(dict(config.features["google_auth"]), {})

    def test_features_are_read_only(self):
        config = self.normalizer.normalize({"features": {"s3_storage": {"bucket": "uploads"}}}, environment="development")
        self.assertEqual(config.features["s3_storage"]["bucket"], "uploads")
        with self.assertRaises(TypeError):
            config.features["s3_storage"]["bucket"] = "other"


def test_environment_variable_enables_production(monkeypatch):
    monkeypatch.setenv("MODELGEN_ENV", "production")
    with pytest.raises(MissingProductionFieldError):
        ConfigNormalizer().normalize(None)


def test_registry_with_strict_plugins_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="modelgen.pipeline.config"):
        ConfigNormalizer().normalize({"use_registry": True, "strict_plugin_validation": True}, environment="development")
    assert "limited effect in registry mode" in caplog.text


def test_generator_config_round_trip():
    config = GeneratorConfig(framework="fastify", hook_frameworks=["react", "vue"], project_name="Shop")
    assert GeneratorConfig.from_dict(config.to_dict()) == config


def test_generator_config_ignores_unknown_keys():
    config = GeneratorConfig.from_dict({"framework": "express", "output_dir": "src"})
    assert config.framework == "express"
    assert not hasattr(config, "output_dir")


if __name__ == "__main__":
    pytest.main([__file__])
