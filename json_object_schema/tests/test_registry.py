import unittest

from json_object_schema.registry import ExternalDocument, MetaSchema, MetaSchemaRef, Registry


class TestMetaSchema(unittest.TestCase):
    def test_merge_applies_set_values(self):
        base = MetaSchema(type="string", description="base", max_length=10)
        patch = MetaSchema(description="patched", read_only=True, min_length=1)
        merged = base.merge(patch)
        self.assertEqual(merged.type, "string")
        self.assertEqual(merged.description, "patched")
        self.assertEqual(merged.max_length, 10)
        self.assertEqual(merged.min_length, 1)
        self.assertTrue(merged.read_only)
        # The base schema is left untouched
        self.assertEqual(base.description, "base")
        self.assertFalse(base.read_only)

    def test_merge_keeps_falsy_defaults(self):
        merged = MetaSchema(type="boolean").merge(MetaSchema(default=False))
        self.assertEqual(merged.to_dict(), {"type": "boolean", "default": False})

    def test_is_empty(self):
        self.assertTrue(MetaSchema.any().is_empty())
        self.assertFalse(MetaSchema(write_only=True).is_empty())

    def test_to_dict(self):
        schema = MetaSchema(
            type="object",
            description="A thing",
            external_docs=ExternalDocument(url="https://example.com", description="Docs"),
            required=["a"],
            properties=[("a", MetaSchemaRef.inline(MetaSchema(type="integer", minimum=0, exclusive_minimum=True)))],
            deprecated=True,
        )
        self.assertEqual(
            schema.to_dict(),
            {
                "type": "object",
                "description": "A thing",
                "externalDocs": {"url": "https://example.com", "description": "Docs"},
                "required": ["a"],
                "properties": {"a": {"type": "integer", "minimum": 0, "exclusiveMinimum": True}},
                "deprecated": True,
            },
        )


class TestMetaSchemaRef(unittest.TestCase):
    def test_reference_with_empty_patch(self):
        ref = MetaSchemaRef.reference("Pet")
        self.assertIs(ref.merge(MetaSchema.any()), ref)

    def test_reference_with_patch(self):
        merged = MetaSchemaRef.reference("Pet").merge(MetaSchema(read_only=True))
        self.assertEqual(merged.to_dict("#/definitions/"), {"allOf": [{"$ref": "#/definitions/Pet"}, {"readOnly": True}]})

    def test_unwrap(self):
        with self.assertRaises(ValueError):
            MetaSchemaRef.reference("Pet").unwrap_inline()
        with self.assertRaises(ValueError):
            MetaSchemaRef.inline(MetaSchema()).unwrap_reference()


class TestRegistry(unittest.TestCase):
    def test_first_writer_wins(self):
        registry = Registry()
        calls = []

        def builder(description):
            def build(reg):
                calls.append(description)
                return MetaSchema(type="object", description=description)

            return build

        registry.create_schema("A", builder("first"))
        registry.create_schema("A", builder("second"))
        self.assertEqual(calls, ["first"])
        self.assertEqual(registry.get("A").description, "first")

    def test_placeholder_while_building(self):
        registry = Registry()
        seen = []

        def build(reg):
            seen.append("A" in reg)
            # Re-entrant registration of the same name is a no-op
            reg.create_schema("A", lambda r: MetaSchema(type="never"))
            return MetaSchema(type="object")

        registry.create_schema("A", build)
        self.assertEqual(seen, [True])
        self.assertEqual(registry.get("A").type, "object")

    def test_failed_builder_leaves_no_entry(self):
        registry = Registry()

        def build(reg):
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            registry.create_schema("A", build)
        self.assertNotIn("A", registry)

    def test_export_sorted_with_prefix(self):
        registry = Registry(ref_prefix="#/definitions/")
        registry.create_schema(
            "B", lambda r: MetaSchema(type="object", properties=[("a", MetaSchemaRef.reference("A"))])
        )
        registry.create_schema("A", lambda r: MetaSchema(type="object"))
        exported = registry.export()
        self.assertEqual(list(exported), ["A", "B"])
        self.assertEqual(exported["B"]["properties"]["a"], {"$ref": "#/definitions/A"})


if __name__ == "__main__":
    unittest.main()
