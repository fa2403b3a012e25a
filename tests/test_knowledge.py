import sys
import unittest
from io import BytesIO
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from docx import Document  # noqa: E402
from pypdf import PdfWriter  # noqa: E402

from propgen.knowledge.context import build_context  # noqa: E402
from propgen.knowledge.parse import DOCX_MIME, PDF_MIME, UnsupportedUpload, parse_upload  # noqa: E402
from propgen.store.models import KnowledgeItem  # noqa: E402


class ParseUploadTests(unittest.TestCase):
    def test_plain_text(self):
        parsed = parse_upload("case-study.txt", "ROAS went from 1.8 to 3.4".encode("utf-8"), "text/plain")
        self.assertEqual(parsed.source_type, "txt")
        self.assertEqual(parsed.mime_type, "text/plain")
        self.assertEqual(parsed.text, "ROAS went from 1.8 to 3.4")
        self.assertEqual(parsed.parsing_warnings, [])

    def test_markdown_without_content_type(self):
        parsed = parse_upload("bio.md", b"# Bio\nTen years in paid social.")
        self.assertEqual(parsed.source_type, "txt")
        self.assertEqual(parsed.mime_type, "text/plain")
        self.assertIn("Ten years", parsed.text)

    def test_utf8_bom_is_dropped(self):
        parsed = parse_upload("notes.txt", "\ufeffhello".encode("utf-8"))
        self.assertEqual(parsed.text, "hello")

    def test_invalid_utf8_is_replaced_with_warning(self):
        parsed = parse_upload("notes.txt", b"caf\xe9")
        self.assertTrue(parsed.text.startswith("caf"))
        self.assertEqual(len(parsed.parsing_warnings), 1)

    def test_docx(self):
        document = Document()
        document.add_paragraph("Scaled a wellness brand on TikTok Shop.")
        document.add_paragraph("")
        document.add_paragraph("Managed $60k/month in Meta spend.")
        buffer = BytesIO()
        document.save(buffer)

        parsed = parse_upload("portfolio.docx", buffer.getvalue())
        self.assertEqual(parsed.source_type, "docx")
        self.assertEqual(parsed.mime_type, DOCX_MIME)
        self.assertEqual(
            parsed.text,
            "Scaled a wellness brand on TikTok Shop.\nManaged $60k/month in Meta spend.",
        )

    def test_corrupt_docx_returns_warning(self):
        parsed = parse_upload("broken.docx", b"not a zip file")
        self.assertEqual(parsed.text, "")
        self.assertTrue(parsed.parsing_warnings[0].startswith("DOCX parsing failed"))

    def test_pdf_without_text_returns_warning(self):
        writer = PdfWriter()
        writer.add_blank_page(width=72, height=72)
        buffer = BytesIO()
        writer.write(buffer)

        parsed = parse_upload("scan.pdf", buffer.getvalue(), PDF_MIME)
        self.assertEqual(parsed.source_type, "pdf")
        self.assertEqual(parsed.text, "")
        self.assertEqual(parsed.parsing_warnings, ["No extractable text found in PDF."])

    def test_unsupported_type_raises(self):
        with self.assertRaises(UnsupportedUpload):
            parse_upload("installer.exe", b"MZ\x90\x00", "application/octet-stream")


class BuildContextTests(unittest.TestCase):
    def test_empty_knowledge_base_is_empty_string(self):
        self.assertEqual(build_context([]), "")

    def test_items_are_labelled_and_separated(self):
        items = [
            KnowledgeItem(id="1", user_id="u", name="a.txt", content="alpha"),
            KnowledgeItem(id="2", user_id="u", name="b.txt", content="beta"),
        ]
        self.assertEqual(build_context(items), "--- FILE: a.txt ---\nalpha\n\n--- FILE: b.txt ---\nbeta")


if __name__ == "__main__":
    unittest.main()
