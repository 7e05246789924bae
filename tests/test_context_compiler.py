#!/usr/bin/env python3
import unittest
from datetime import date

from pydantic import ValidationError

from portfolio_chat.app.context_compiler import ContextCompiler, format_range, format_years
from portfolio_chat.schemas.records import (
    CertificateRecord,
    EducationRecord,
    ExperienceRecord,
    KnowledgeRecords,
    ProfileFactRecord,
    ProjectRecord,
    SkillRecord,
)


def sample_records() -> KnowledgeRecords:
    return KnowledgeRecords(
        profile=[ProfileFactRecord(label="Email", value="jordan@example.com")],
        skills=[
            SkillRecord(name="Go", category="Backend", proficiency=80, years_of_experience=3),
            SkillRecord(name="Rust", years_of_experience=1),
        ],
        experience=[
            ExperienceRecord(
                position="Backend Engineer",
                company="Acme",
                start_date=date(2022, 3, 1),
                technologies=["Go", "PostgreSQL"],
            ),
        ],
        education=[
            EducationRecord(
                degree="BSc",
                field="Software Engineering",
                institution="Addis Ababa University",
                start_date=date(2018, 9, 1),
                end_date=date(2023, 7, 1),
            ),
        ],
        projects=[ProjectRecord(title="Playground", github_url="https://github.com/x/playground")],
        certificates=[CertificateRecord(title="AWS SA", issuer="Amazon Web Services", date=date(2023, 12, 15))],
    )


class TestContextCompiler(unittest.TestCase):
    def setUp(self):
        self.compiler = ContextCompiler(owner_name="Jordan Lee")

    def test_compile_is_deterministic(self):
        records = sample_records()
        self.assertEqual(self.compiler.compile(records), self.compiler.compile(records))

    def test_skill_line_renders_percent_and_years(self):
        context = self.compiler.compile(KnowledgeRecords(
            skills=[SkillRecord(name="Go", proficiency=80, years_of_experience=3)],
        ))
        self.assertIn("Go (80%, 3", context)
        self.assertIn("- Go (80%, 3 years)", context)

    def test_missing_skill_fields_are_omitted(self):
        line = ContextCompiler.format_skill(SkillRecord(name="Rust", years_of_experience=1))
        self.assertEqual(line, "- Rust (1 year)")
        self.assertEqual(ContextCompiler.format_skill(SkillRecord(name="Zig")), "- Zig")

    def test_open_ended_experience_renders_present(self):
        context = self.compiler.compile(sample_records())
        self.assertIn("Mar 2022 - Present", context)
        self.assertIn("Sep 2018 - Jul 2023", context)

    def test_no_blank_tokens_for_missing_fields(self):
        context = self.compiler.compile(sample_records())
        for token in ("None", "null", "undefined", "Tech stack: \n", "Demo:"):
            self.assertNotIn(token, context)
        # an experience without a location or description has no empty lines
        block = ContextCompiler.format_experience(sample_records().experience[0])
        self.assertEqual(block.splitlines(), [
            "• Backend Engineer at Acme",
            "  Mar 2022 - Present",
            "  Tech stack: Go, PostgreSQL",
        ])

    def test_sections_appear_in_fixed_order(self):
        context = self.compiler.compile(sample_records())
        labels = ["Profile:", "Skills:", "Work Experience:", "Education:", "Projects:", "Certifications:"]
        positions = [context.index(label) for label in labels]
        self.assertEqual(positions, sorted(positions))
        self.assertTrue(context.startswith("Portfolio information about Jordan Lee:"))

    def test_records_keep_source_order(self):
        context = self.compiler.compile(sample_records())
        self.assertLess(context.index("- Go"), context.index("- Rust"))

    def test_empty_collection_is_marked(self):
        context = self.compiler.compile(KnowledgeRecords())
        self.assertEqual(context.count("- None listed"), 6)

    def test_certificate_and_project_blocks(self):
        context = self.compiler.compile(sample_records())
        self.assertIn("• AWS SA\n  From: Amazon Web Services\n  Date: Dec 2023", context)
        self.assertIn("• Playground\n  Code: https://github.com/x/playground", context)

    def test_helpers(self):
        self.assertEqual(format_years(2.5), "2.5 years")
        self.assertEqual(format_years(0), "0 years")
        self.assertEqual(format_range(date(2020, 1, 5), None), "Jan 2020 - Present")


class TestRecordTypes(unittest.TestCase):
    def test_required_text_is_stripped(self):
        skill = SkillRecord(name="  Go ")
        self.assertEqual(skill.name, "Go")
        context = ContextCompiler(owner_name="Jordan Lee").compile(KnowledgeRecords(skills=[skill]))
        self.assertIn("- Go\n", context + "\n")

    def test_blank_required_text_is_rejected(self):
        with self.assertRaises(ValidationError):
            ProfileFactRecord(label="Phone", value="   ")
        with self.assertRaises(ValidationError):
            SkillRecord(name="")
        with self.assertRaises(ValidationError):
            ExperienceRecord(position="Engineer", company=" ", start_date=date(2020, 1, 1))
        with self.assertRaises(ValidationError):
            CertificateRecord(title="AWS SA", issuer="\t")

    def test_single_string_list_is_one_item(self):
        exp = ExperienceRecord(
            position="Engineer",
            company="Acme",
            start_date=date(2020, 1, 1),
            technologies="Go, Python",
        )
        self.assertEqual(exp.technologies, ["Go, Python"])
        self.assertIn("Tech stack: Go, Python", ContextCompiler.format_experience(exp))

    def test_non_list_is_rejected(self):
        with self.assertRaises(ValidationError):
            ProjectRecord(title="Playground", technologies=5)


if __name__ == '__main__':
    unittest.main()
