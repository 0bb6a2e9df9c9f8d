import pytest

from openapi_model_generator.pipeline.analyzer.naming import (
    description_lines,
    enum_variant_name,
    normalize,
    operation_name,
)


class TestNormalize:
    """Test name normalization"""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("user-name", "UserName"),
            ("UserName", "UserName"),
            ("user_name", "UserName"),
            ("userName", "UserName"),
            ("pet.v2", "PetV2"),
            ("HTTPStatus", "HTTPStatus"),
            ("  spaced out  ", "SpacedOut"),
            ("", ""),
        ],
    )
    def test_normalize(self, name, expected):
        assert normalize(name) == expected

    def test_spellings_converge(self):
        assert normalize("user-name") == normalize("UserName") == "UserName"

    @pytest.mark.parametrize("name", ["user-name", "a_b_c", "Pet.Item", "x", "9lives", "already Normal"])
    def test_idempotent(self, name):
        assert normalize(normalize(name)) == normalize(name)


class TestDescriptionLines:
    def test_none_and_empty(self):
        assert description_lines(None) == ()
        assert description_lines("") == ()

    def test_lines_are_kept_in_order(self):
        assert description_lines("\n  first \n\n second\n\n") == ("first", "", "second")


class TestOperationName:
    def test_operation_id_wins(self):
        assert operation_name("get", "/pets", "listPets") == "ListPets"

    def test_from_method_and_path(self):
        assert operation_name("get", "/pets") == "GetPets"
        assert operation_name("get", "/pets/{petId}") == "GetPetsByPetId"
        assert operation_name("delete", "/stores/{store-id}/items") == "DeleteStoresByStoreIdItems"


class TestEnumVariantName:
    @pytest.mark.parametrize(
        "value, index, expected",
        [
            ("active", 0, "Active"),
            ("in-progress", 0, "InProgress"),
            (1, 0, "Value1"),
            (-2, 0, "ValueMinus2"),
            ("", 3, "Value3"),
            ("2fa", 0, "Value2fa"),
            (True, 0, "True"),
        ],
    )
    def test_enum_variant_name(self, value, index, expected):
        assert enum_variant_name(value, index) == expected


if __name__ == "__main__":
    pytest.main([__file__])
