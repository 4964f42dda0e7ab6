#!/usr/bin/env python3

import unittest

from client_codegen.pipeline.config import CodeGeneratorConfig, OutputMode, RegistryScope


class TestCodeGeneratorConfig(unittest.TestCase):
    def test_defaults(self):
        config = CodeGeneratorConfig()
        self.assertEqual(config.language, "python")
        self.assertEqual(config.package, "gen")
        self.assertEqual(config.registry_scope, RegistryScope.SERVICE)
        self.assertEqual(config.output.mode, OutputMode.ERROR_IF_EXISTS)
        self.assertFalse(config.formatter.enabled)

    def test_from_dict(self):
        config = CodeGeneratorConfig.from_dict(
            {
                "language": "go",
                "package": "example.com/wine/gen",
                "registry_scope": "run",
                "max_workers": 2,
                "formatter": {"enabled": True, "line_length": 120},
                "output": {"mode": "force", "validate_before_write": False},
                "unknown": "ignored",
            }
        )
        self.assertEqual(config.language, "go")
        self.assertEqual(config.registry_scope, RegistryScope.RUN)
        self.assertEqual(config.max_workers, 2)
        self.assertEqual(config.formatter.line_length, 120)
        self.assertEqual(config.output.mode, OutputMode.FORCE)
        self.assertFalse(config.output.validate_before_write)
        self.assertFalse(hasattr(config, "unknown"))

    def test_round_trip(self):
        config = CodeGeneratorConfig(language="go", registry_scope=RegistryScope.RUN)
        self.assertEqual(CodeGeneratorConfig.from_dict(config.to_dict()), config)

    def test_scope_is_coerced(self):
        self.assertIs(CodeGeneratorConfig(registry_scope="run").registry_scope, RegistryScope.RUN)

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            CodeGeneratorConfig(language="rust")
        with self.assertRaises(ValueError):
            CodeGeneratorConfig.from_dict({"language": "cobol"})
        with self.assertRaises(ValueError):
            CodeGeneratorConfig(max_workers=0)
        with self.assertRaises(ValueError):
            CodeGeneratorConfig(registry_scope="global")


if __name__ == "__main__":
    unittest.main()
