import uuid

import pytest
from bson.int64 import Int64

from models.mapping import LOCATION_MAPPING, STUDENT_MAPPING
from models.student import Hobby
from repositories.base_repo import MongoRepository
from repositories.query import (
    NativeQuery,
    QueryDerivationError,
    build_filter,
    compile_derived_query,
    derived_query,
    like_to_regex,
)
from repositories.student_repo import StudentRepository


class TestStudentQueryFilters:
    """Filters compiled for the queries StudentRepository declares."""

    def test_find_by_name(self):
        assert StudentRepository.find_by_name.filter_for("Alice") == {"name": "Alice"}

    def test_find_by_hobbies_contains(self):
        assert StudentRepository.find_by_hobbies_contains.filter_for(Hobby("chess")) == {
            "hobbies": {"$in": [{"name": "chess"}]}
        }

    def test_find_by_hobbies_name(self):
        assert StudentRepository.find_by_hobbies_name.filter_for("chess") == {"hobbies.name": "chess"}

    def test_find_by_hobbies_name_starts_with_escapes_prefix(self):
        assert StudentRepository.find_by_hobbies_name_starts_with.filter_for("ch") == {
            "hobbies.name": {"$regex": "^ch"}
        }
        assert StudentRepository.find_by_hobbies_name_starts_with.filter_for("a.b") == {
            "hobbies.name": {"$regex": "^a\\.b"}
        }

    def test_find_by_hobbies_name_like(self):
        assert StudentRepository.find_by_hobbies_name_like.filter_for("*ess") == {
            "hobbies.name": {"$regex": ".*ess"}
        }

    def test_find_by_location_id_uses_stored_reference(self):
        location_id = uuid.uuid4()
        assert StudentRepository.find_by_location_id.filter_for(location_id) == {"location": str(location_id)}

    def test_wrong_argument_count(self):
        with pytest.raises(TypeError):
            StudentRepository.find_by_name.filter_for()
        with pytest.raises(TypeError):
            StudentRepository.find_by_name.filter_for("Alice", "Bob")


class TestDerivedQueryGrammar:

    def _filter(self, name, mapping, *args):
        return build_filter(name, compile_derived_query(name, mapping), args)

    def test_multi_word_attribute(self):
        criteria = compile_derived_query("find_by_postal_code_starts_with", LOCATION_MAPPING)
        assert criteria[0].path.storage_path == "postalCode"
        assert criteria[0].operator.keyword == "starts_with"

    def test_and_combines_conditions(self):
        assert self._filter("find_by_name_and_hobbies_name", STUDENT_MAPPING, "Alice", "chess") == {
            "name": "Alice",
            "hobbies.name": "chess",
        }

    def test_operators(self):
        assert self._filter("find_by_name_in", STUDENT_MAPPING, ["A", "B"]) == {"name": {"$in": ["A", "B"]}}
        assert self._filter("find_by_name_not", STUDENT_MAPPING, "A") == {"name": {"$ne": "A"}}
        assert self._filter("find_by_name_contains", STUDENT_MAPPING, "li") == {"name": {"$regex": "li"}}
        assert self._filter("find_by_mail_ends_with", STUDENT_MAPPING, ".com") == {"email": {"$regex": "\\.com$"}}
        assert self._filter("find_by_location_is_null", STUDENT_MAPPING) == {"location": None}

    def test_same_field_conditions_are_merged(self):
        assert self._filter("find_by_name_greater_than_and_name_less_than", STUDENT_MAPPING, "A", "C") == {
            "name": {"$gt": "A", "$lt": "C"}
        }

    def test_plain_condition_is_kept_when_combined(self):
        assert self._filter("find_by_name_and_name_not", STUDENT_MAPPING, "Alice", "Bob") == {
            "name": {"$eq": "Alice", "$ne": "Bob"}
        }
        assert self._filter("find_by_location_is_null_and_name_not", STUDENT_MAPPING, "Bob") == {
            "location": None,
            "name": {"$ne": "Bob"},
        }
        assert self._filter("find_by_name_is_not_null_and_name", STUDENT_MAPPING, "Alice") == {
            "name": {"$ne": None, "$eq": "Alice"}
        }

    def test_clashing_conditions_are_rejected(self):
        with pytest.raises(QueryDerivationError):
            self._filter("find_by_name_and_name", STUDENT_MAPPING, "Alice", "Bob")
        with pytest.raises(QueryDerivationError):
            self._filter("find_by_name_starts_with_and_name_ends_with", STUDENT_MAPPING, "A", "e")

    @pytest.mark.parametrize("argument", ["Alice", b"Alice", 7, {"name": "Alice"}])
    def test_in_needs_a_collection(self, argument):
        with pytest.raises(TypeError):
            self._filter("find_by_name_in", STUDENT_MAPPING, argument)
        with pytest.raises(TypeError):
            self._filter("find_by_name_not_in", STUDENT_MAPPING, argument)

    def test_in_accepts_any_collection(self):
        assert self._filter("find_by_name_not_in", STUDENT_MAPPING, ("A", "B")) == {"name": {"$nin": ["A", "B"]}}

    @pytest.mark.parametrize("name", [
        "find_by",
        "get_by_name",
        "find_by_age",
        "find_by_name_and_",
        "find_by_hobbies_starts_with",
        "find_by_location_city",
        "find_by_hobbies_level",
    ])
    def test_malformed_names_are_rejected(self, name):
        with pytest.raises(QueryDerivationError):
            compile_derived_query(name, STUDENT_MAPPING)

    def test_rejected_when_class_is_defined(self):
        # Python < 3.12 wraps __set_name__ errors in RuntimeError
        with pytest.raises((QueryDerivationError, RuntimeError)):
            class BrokenRepository(MongoRepository):
                mapping = STUDENT_MAPPING
                find_by_age = derived_query()


class TestLikePattern:

    @pytest.mark.parametrize("pattern,expected", [
        ("*", ".*"),
        ("ch*", "ch.*"),
        ("*ess", ".*ess"),
        ("*he*", ".*he.*"),
        ("ess", "ess"),
        ("a.b", "a\\.b"),
    ])
    def test_like_to_regex(self, pattern, expected):
        assert like_to_regex(pattern) == expected


class TestNativeQuery:

    def test_student_native_queries(self):
        assert StudentRepository.find_all_native.filter_for() == {}
        assert StudentRepository.find_by_name_native.filter_for("Alice") == {"name": "Alice"}

    def test_placeholder_keeps_argument_type(self):
        query = NativeQuery('{ "age": { "$gt": "?0" }, "tags": ["?1"] }')
        assert query.filter_for(21, True) == {"age": {"$gt": 21}, "tags": [True]}

    def test_placeholder_inside_string(self):
        query = NativeQuery('{ "name": { "$regex": "^?0" } }')
        assert query.filter_for("Al") == {"name": {"$regex": "^Al"}}

    def test_placeholder_inside_extended_json(self):
        query = NativeQuery('{ "age": { "$gt": { "$numberLong": "?0" } } }')
        flt = query.filter_for("42")
        assert flt == {"age": {"$gt": 42}}
        assert isinstance(flt["age"]["$gt"], Int64)

    def test_template_is_not_modified(self):
        query = NativeQuery('{ "name": { "$regex": "^?0" } }')
        query.filter_for("Al")
        assert query.filter_for("Bo") == {"name": {"$regex": "^Bo"}}

    def test_arguments_are_encoded(self):
        location_id = uuid.uuid4()
        query = NativeQuery('{ "location": "?0" }')
        assert query.filter_for(location_id) == {"location": str(location_id)}

    def test_missing_argument(self):
        with pytest.raises(TypeError):
            StudentRepository.find_by_name_native.filter_for()

    @pytest.mark.parametrize("template", ["{ name: ", "[1, 2]"])
    def test_invalid_template(self, template):
        with pytest.raises(QueryDerivationError):
            NativeQuery(template)
