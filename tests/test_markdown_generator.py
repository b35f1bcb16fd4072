"""Tests for Markdown documentation rendering."""

from schemalang import generate_markdown_docs, parse_schema


class TestMarkdownDocs:
    def test_title_and_overview(self, sample_schema):
        lines = generate_markdown_docs(sample_schema).splitlines()
        assert lines[0] == "# Database Schema Documentation"
        assert "## Overview" in lines
        assert "| Models | 4 |" in lines
        assert "| Enums | 2 |" in lines
        assert "| Fields | 26 |" in lines
        assert "| Relations | 5 |" in lines
        assert "| Avg fields per model | 7 |" in lines

    def test_custom_title(self, sample_schema):
        docs = generate_markdown_docs(sample_schema, title="Scanner Schema")
        assert docs.startswith("# Scanner Schema\n")

    def test_section_order(self, sample_schema):
        docs = generate_markdown_docs(sample_schema)
        positions = [
            docs.index(heading)
            for heading in (
                "## Overview",
                "## Models",
                "### Organization",
                "### ScanResult",
                "## Enums",
                "### Role",
                "### Severity",
            )
        ]
        assert positions == sorted(positions)

    def test_field_rows(self, sample_schema):
        lines = generate_markdown_docs(sample_schema).splitlines()
        assert "| id | `String` | PK, Default: `uuid()` |" in lines
        assert "| slug | `String` | Unique |" in lines
        assert "| projects | `Project[]` |  |" in lines
        assert "| organization | `Organization?` | → Organization |" in lines
        assert "| tags | `String[]` |  |" in lines

    def test_model_annotations(self, sample_schema):
        lines = generate_markdown_docs(sample_schema).splitlines()
        assert "- `@@index([organizationId])`" in lines
        assert "- `@@unique([organizationId, name])`" in lines
        assert lines.count("**Indexes:**") == 2
        assert lines.count("**Unique constraints:**") == 1

    def test_enum_values(self, sample_schema):
        docs = generate_markdown_docs(sample_schema)
        assert "### Role\n\n- `ADMIN`\n- `DEVELOPER`\n- `VIEWER`\n" in docs

    def test_pipes_escaped(self):
        schema = parse_schema('model A {\n  sep String @default("a|b")\n}')
        assert '| sep | `String` | Default: `"a\\|b"` |' in generate_markdown_docs(schema)

    def test_empty_schema(self):
        docs = generate_markdown_docs(parse_schema(""))
        assert "| Models | 0 |" in docs
        assert "## Models" not in docs
        assert "## Enums" not in docs
