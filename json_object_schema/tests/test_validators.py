"""
Unit tests for validator objects.
"""

import unittest

from json_object_schema.errors import ConfigurationError, ValidatorError
from json_object_schema.registry import MetaSchema
from json_object_schema.types import INTEGER, NUMBER, STRING, ArrayType, MapType, OptionalType, TypeParam
from json_object_schema.validators import (
    EnumValidator,
    MaximumValidator,
    MaxItemsValidator,
    MaxLengthValidator,
    MaxPropertiesValidator,
    MinimumValidator,
    MinItemsValidator,
    MinLengthValidator,
    MinPropertiesValidator,
    MultipleOfValidator,
    PatternValidator,
    UniqueItemsValidator,
    ValidatorSet,
)


class TestValidators(unittest.TestCase):
    """Each validator checks values and patches schemas from the same argument"""

    def assertPatch(self, validator, expected):
        meta = MetaSchema.any()
        validator.update_meta(meta)
        self.assertEqual(meta.to_dict(), expected)

    def test_multiple_of(self):
        validator = MultipleOfValidator(0.5)
        self.assertIsNone(validator.validate(2.5))
        self.assertEqual(validator.validate(2.2), "must be a multiple of 0.5")
        self.assertPatch(validator, {"multipleOf": 0.5})

    def test_multiple_of_must_be_positive(self):
        with self.assertRaises(ConfigurationError):
            MultipleOfValidator(0)

    def test_maximum(self):
        validator = MaximumValidator(150)
        self.assertIsNone(validator.validate(150))
        self.assertEqual(validator.validate(151), "must be <= 150")
        self.assertPatch(validator, {"maximum": 150})

    def test_exclusive_maximum(self):
        validator = MaximumValidator(100, exclusive=True)
        self.assertEqual(validator.validate(100), "must be < 100")
        self.assertPatch(validator, {"maximum": 100, "exclusiveMaximum": True})

    def test_minimum(self):
        validator = MinimumValidator(0)
        self.assertIsNone(validator.validate(0))
        self.assertEqual(validator.validate(-1), "must be >= 0")
        self.assertPatch(validator, {"minimum": 0})

    def test_exclusive_minimum(self):
        validator = MinimumValidator(-273.15, exclusive=True)
        self.assertEqual(validator.validate(-273.15), "must be > -273.15")
        self.assertPatch(validator, {"minimum": -273.15, "exclusiveMinimum": True})

    def test_max_length(self):
        validator = MaxLengthValidator(3)
        self.assertIsNone(validator.validate("abc"))
        self.assertEqual(validator.validate("abcd"), "must be at most 3 characters")
        self.assertPatch(validator, {"maxLength": 3})

    def test_min_length(self):
        validator = MinLengthValidator(3)
        self.assertEqual(validator.validate("ab"), "must be at least 3 characters")
        self.assertPatch(validator, {"minLength": 3})

    def test_pattern(self):
        validator = PatternValidator("^[a-z]+@[a-z]+\\.[a-z]+$")
        self.assertIsNone(validator.validate("me@example.com"))
        self.assertIn("must match pattern", validator.validate("not an email"))
        self.assertPatch(validator, {"pattern": "^[a-z]+@[a-z]+\\.[a-z]+$"})

    def test_pattern_searches(self):
        self.assertIsNone(PatternValidator("[0-9]").validate("abc1"))

    def test_invalid_pattern(self):
        with self.assertRaises(ConfigurationError):
            PatternValidator("(")

    def test_items(self):
        self.assertEqual(MaxItemsValidator(1).validate([1, 2]), "must have at most 1 items")
        self.assertEqual(MinItemsValidator(1).validate([]), "must have at least 1 items")
        self.assertPatch(MinItemsValidator(1), {"minItems": 1})

    def test_unique_items(self):
        validator = UniqueItemsValidator()
        self.assertIsNone(validator.validate([1, 2, {"a": 1}]))
        self.assertEqual(validator.validate([{"a": 1}, {"a": 1}]), "items must be unique")
        self.assertPatch(validator, {"uniqueItems": True})

    def test_properties(self):
        self.assertEqual(MaxPropertiesValidator(1).validate({"a": 1, "b": 2}), "must have at most 1 properties")
        self.assertEqual(MinPropertiesValidator(1).validate({}), "must have at least 1 properties")
        self.assertPatch(MaxPropertiesValidator(1), {"maxProperties": 1})

    def test_enum(self):
        validator = EnumValidator(["active", "inactive"])
        self.assertIsNone(validator.validate("active"))
        self.assertEqual(validator.validate("pending"), "must be one of: 'active', 'inactive'")
        self.assertPatch(validator, {"enum": ["active", "inactive"]})

    def test_absent_value_is_accepted(self):
        self.assertIsNone(MinLengthValidator(3).validate(None))

    def test_applies_to(self):
        self.assertTrue(MaxLengthValidator(3).applies_to(STRING))
        self.assertTrue(MaxLengthValidator(3).applies_to(OptionalType(OptionalType(STRING))))
        self.assertFalse(MaxLengthValidator(3).applies_to(INTEGER))
        self.assertTrue(MaximumValidator(3).applies_to(NUMBER))
        self.assertFalse(MaximumValidator(3).applies_to(STRING))
        self.assertTrue(UniqueItemsValidator().applies_to(ArrayType(INTEGER)))
        self.assertFalse(MinItemsValidator(1).applies_to(MapType(INTEGER)))
        self.assertTrue(MaxPropertiesValidator(1).applies_to(MapType(INTEGER)))
        self.assertTrue(EnumValidator([1]).applies_to(INTEGER))
        self.assertTrue(PatternValidator("^a").applies_to(TypeParam("T")))


class TestValidatorSet(unittest.TestCase):
    def test_from_dict_keeps_order(self):
        validators = ValidatorSet.from_dict(
            {"pattern": "^a", "min_length": 2, "maximum": {"value": 3, "exclusive": True}, "unique_items": True}
        )
        self.assertEqual(
            [type(v) for v in validators],
            [PatternValidator, MinLengthValidator, MaximumValidator, UniqueItemsValidator],
        )
        self.assertTrue(list(validators)[2].exclusive)

    def test_unique_items_false_adds_nothing(self):
        self.assertEqual(len(ValidatorSet.from_dict({"unique_items": False})), 0)

    def test_unknown_keyword(self):
        with self.assertRaises(ConfigurationError):
            ValidatorSet.from_dict({"max_len": 3})

    def test_check_raises_first_failure(self):
        validators = ValidatorSet.from_dict({"min_length": 5, "pattern": "^a"})
        with self.assertRaises(ValidatorError) as cm:
            validators.check("b")
        self.assertEqual(cm.exception.reason, "must be at least 5 characters")
        validators.check("abcdef")

    def test_mismatched(self):
        validators = ValidatorSet.from_dict({"minimum": 0, "max_length": 3})
        self.assertIsInstance(validators.mismatched(INTEGER), MaxLengthValidator)
        self.assertIsInstance(validators.mismatched(STRING), MinimumValidator)
        self.assertIsNone(ValidatorSet.from_dict({"minimum": 0}).mismatched(OptionalType(INTEGER)))

    def test_patches_are_additive(self):
        meta = MetaSchema(type="string")
        ValidatorSet.from_dict({"min_length": 1, "max_length": 5}).update_meta(meta)
        self.assertEqual(meta.to_dict(), {"type": "string", "minLength": 1, "maxLength": 5})


if __name__ == "__main__":
    unittest.main()
