from django.test import SimpleTestCase
from apps.redesign.catalog import catalog_from_text, extract_braced_json, extract_fenced_json, parse_design_catalog

class DesignCatalogParsingTests(SimpleTestCase):
    def test_fenced_block(self):
        text = 'Here you go\n```json\n{"plants": [{"name": "Lavender", "species": "Lavandula"}], "features": []}\n```\n{"ignored": true}'
        catalog = parse_design_catalog(text)
        self.assertEqual(catalog.plants, [{"name": "Lavender", "species": "Lavandula"}])
        self.assertEqual(catalog.features, [])

    def test_fenced_block_wins_over_braces(self):
        text = 'note {not json} ```json {"plants": [], "features": [{"name": "Pergola", "description": "Cedar"}]} ```'
        self.assertEqual(extract_fenced_json(text), '{"plants": [], "features": [{"name": "Pergola", "description": "Cedar"}]}')
        catalog = parse_design_catalog(text)
        self.assertEqual(catalog.features, [{"name": "Pergola", "description": "Cedar"}])

    def test_brace_span_fallback(self):
        text = 'Catalog: {"plants": [{"name": "Agave", "species": "Agave parryi"}], "features": []} thanks!'
        self.assertTrue(extract_braced_json(text).startswith('{"plants"'))
        catalog = parse_design_catalog(text)
        self.assertEqual(catalog.plants[0]["name"], "Agave")

    def test_no_json_returns_none(self):
        self.assertIsNone(parse_design_catalog("Just a lovely garden."))
        self.assertIsNone(parse_design_catalog(""))
        self.assertIsNone(parse_design_catalog("} backwards {"))

    def test_malformed_json_returns_none(self):
        self.assertIsNone(parse_design_catalog('{"plants": [oops]}'))
        self.assertIsNone(parse_design_catalog("```json\nnot json at all\n```"))

    def test_catalog_from_text_never_fails(self):
        for text in ["", "no json", '{"plants": [', None]:
            catalog = catalog_from_text(text)
            self.assertEqual(catalog.to_dict(), {"plants": [], "features": []})

    def test_loose_entries_are_normalised(self):
        catalog = parse_design_catalog('{"plants": [{"name": "Fern"}, "junk", 4], "features": "nope"}')
        self.assertEqual(catalog.plants, [{"name": "Fern", "species": ""}])
        self.assertEqual(catalog.features, [])
