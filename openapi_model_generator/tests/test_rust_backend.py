import json
from pathlib import Path
from unittest import TestCase

from openapi_model_generator import __version__
from openapi_model_generator.pipeline import CodeGeneratorConfig, PipelineGenerator
from openapi_model_generator.pipeline.analyzer import PrimitiveKind, TypeRef
from openapi_model_generator.pipeline.backends import RustBackend
from openapi_model_generator.pipeline.backends.rust_backend import (
    escape_field_name,
    escape_type_name,
    rust_string,
    snake_case,
)
from openapi_model_generator.pipeline.errors import NameCollisionError
from openapi_model_generator.pipeline.writer import validate_rust

PETSTORE = {
    "openapi": "3.0.3",
    "components": {
        "schemas": {
            "Pet": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer"},
                    "name": {"type": "string"},
                    "tags": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["id", "name"],
            },
        }
    },
}


class TestRustGeneration(TestCase):
    """Test generated Rust code against the expectations in rust_generation_tests.json"""

    def setUp(self):
        self.test_data_path = Path(__file__).parent / "test_data" / "rust_generation_tests.json"
        with open(self.test_data_path) as f:
            self.test_cases = json.load(f)

    def _generate_code(self, document, config_dict):
        """Helper to generate the models file with given document and config"""
        config = CodeGeneratorConfig.from_dict(config_dict)
        files = PipelineGenerator(document, config).generate()
        return files[config.models_file_name]

    def test_generation_cases(self):
        """Every case renders the expected snippets and nothing unwanted"""
        for test_case in self.test_cases:
            with self.subTest(case=test_case["name"]):
                generated_code = self._generate_code(test_case["document"], test_case["config"])

                for expected in test_case["expected_contains"]:
                    self.assertIn(expected, generated_code, f"Expected '{expected}' not found in generated code")

                for not_expected in test_case["expected_not_contains"]:
                    self.assertNotIn(not_expected, generated_code, f"Unwanted '{not_expected}' found in generated code")

    def test_generated_code_passes_validation(self):
        """Generated code is structurally valid for every case"""
        for test_case in self.test_cases:
            with self.subTest(case=test_case["name"]):
                validate_rust(self._generate_code(test_case["document"], test_case["config"]))

    def test_generation_comment(self):
        files = PipelineGenerator(PETSTORE).generate()
        comment = f"// Generated by openapi_model_generator v{__version__} : openapi_model_generator"
        self.assertTrue(files["models.rs"].startswith(comment + "\n\n"))
        self.assertTrue(files["mod.rs"].startswith(comment + "\n\n"))

    def test_generation_comment_records_command_line(self):
        generator = PipelineGenerator(PETSTORE, command_line="openapi_model_generator -i petstore.yaml")
        self.assertIn(": openapi_model_generator -i petstore.yaml\n", generator.generate()["models.rs"])

    def test_generation_comment_disabled(self):
        config = CodeGeneratorConfig(add_generation_comment=False)
        files = PipelineGenerator(PETSTORE, config).generate()
        self.assertNotIn("// Generated by", files["models.rs"])
        self.assertTrue(files["models.rs"].startswith("use serde::{Deserialize, Serialize};\n"))

    def test_module_file(self):
        config = CodeGeneratorConfig(add_generation_comment=False)
        files = PipelineGenerator(PETSTORE, config).generate()
        self.assertEqual(files["mod.rs"], "pub mod models;\n")

    def test_custom_file_names(self):
        config = CodeGeneratorConfig(add_generation_comment=False, models_file_name="api_types.rs", module_file_name="lib.rs")
        files = PipelineGenerator(PETSTORE, config).generate()
        self.assertEqual(set(files), {"api_types.rs", "lib.rs"})
        self.assertEqual(files["lib.rs"], "pub mod api_types;\n")

    def test_list_field(self):
        config = CodeGeneratorConfig(add_generation_comment=False)
        models = PipelineGenerator(PETSTORE, config).generate()["models.rs"]
        self.assertIn("    #[serde(default, skip_serializing_if = \"Option::is_none\")]\n    pub tags: Option<Vec<String>>,\n", models)

    def test_fields_with_the_same_identifier(self):
        document = {
            "openapi": "3.0.3",
            "components": {
                "schemas": {
                    "Link": {"type": "object", "properties": {"URL": {"type": "string"}, "url": {"type": "string"}}},
                }
            },
        }

        with self.assertRaises(NameCollisionError) as ctx:
            PipelineGenerator(document).generate()

        self.assertEqual(ctx.exception.name, "Link.url")
        self.assertEqual(ctx.exception.sources, ["URL", "url"])

    def test_empty_document(self):
        config = CodeGeneratorConfig(add_generation_comment=False)
        models = PipelineGenerator({"openapi": "3.0.3"}, config).generate()["models.rs"]
        self.assertEqual(models, "use serde::{Deserialize, Serialize};\n")


class TestTypeTranslation(TestCase):
    """Test IR type to Rust type translation"""

    def setUp(self):
        self.backend = RustBackend(CodeGeneratorConfig())

    def test_primitives(self):
        expected = {
            PrimitiveKind.TEXT: "String",
            PrimitiveKind.UNIQUE_ID: "Uuid",
            PrimitiveKind.TIMESTAMP: "DateTime<Utc>",
            PrimitiveKind.DATE: "NaiveDate",
            PrimitiveKind.INTEGER64: "i64",
            PrimitiveKind.FLOAT64: "f64",
            PrimitiveKind.BOOLEAN: "bool",
        }
        for kind, rust_type in expected.items():
            with self.subTest(kind=kind):
                self.assertEqual(self.backend.translate_type(TypeRef.primitive(kind)), rust_type)

    def test_containers(self):
        nested = TypeRef.map_of(TypeRef.list_of(TypeRef.named("Pet")))
        self.assertEqual(self.backend.translate_type(nested), "HashMap<String, Vec<Pet>>")

    def test_boxed_named(self):
        self.assertEqual(self.backend.translate_type(TypeRef.named("Node"), boxed=True), "Box<Node>")

    def test_custom_is_verbatim(self):
        self.assertEqual(self.backend.translate_type(TypeRef.custom("semver::Version")), "semver::Version")


class TestIdentifiers(TestCase):
    """Test Rust identifier helpers"""

    def test_snake_case(self):
        cases = {
            "petId": "pet_id",
            "user-name": "user_name",
            "HTTPStatus": "http_status",
            "already_snake": "already_snake",
            "2fa": "_2fa",
            "---": "field",
        }
        for name, expected in cases.items():
            with self.subTest(name=name):
                self.assertEqual(snake_case(name), expected)

    def test_escape_field_name(self):
        self.assertEqual(escape_field_name("type"), "r#type")
        self.assertEqual(escape_field_name("self"), "self_")
        self.assertEqual(escape_field_name("crate"), "crate_")
        self.assertEqual(escape_field_name("name"), "name")

    def test_escape_type_name(self):
        self.assertEqual(escape_type_name("Self"), "SelfValue")
        self.assertEqual(escape_type_name("Pet"), "Pet")

    def test_rust_string(self):
        self.assertEqual(rust_string('say "hi"'), '"say \\"hi\\""')
        self.assertEqual(rust_string("a\\b"), '"a\\\\b"')
