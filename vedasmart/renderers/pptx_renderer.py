"""
PPTX exporter using python-pptx.

Converts a finished deck into a branded 16:9 PowerPoint file. Every slide
carries the two brand watermarks regardless of type.
"""

import base64
import binascii
import re
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, ImageColor
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.util import Emu, Inches, Pt

from vedasmart.errors import ExportFailure
from vedasmart.models import ChapterContent, ContentSlide, QuizSlide, ThemeConfig, TitleSlide

# (left, top, width, height) in inches
Box = Tuple[float, float, float, float]

PPTX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

_DATA_URI = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(?:;[\w=-]+)*;base64,(?P<data>.*)$", re.DOTALL)


def parse_color(spec: str) -> RGBColor:
    """Parse a CSS color string (#RGB, #RRGGBB, named, rgb()) into an RGBColor."""
    try:
        rgb = ImageColor.getrgb(spec.strip())
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Unrecognized theme color: {spec!r}") from e
    return RGBColor(*rgb[:3])


def decode_data_uri(uri: str) -> bytes:
    """Return the raw bytes of a base64 data URI."""
    match = _DATA_URI.match(uri.strip())
    if not match:
        raise ValueError("Image payload is not a base64 data URI")
    try:
        return base64.b64decode(match.group("data"), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Image payload is not valid base64: {e}") from e


class DeckExporter:
    """
    Render a ChapterContent deck into a PowerPoint presentation.

    Layout rules:
    - All slides: theme background, diagonal wordmark, bottom caption
    - TITLE: faint oversized wordmark plus centered title
    - CONTENT: title, body and key points on the left, diagram on the right
    - QUIZ: question and lettered options; answers are never exported
    """

    SLIDE_WIDTH_INCHES = 10.0
    SLIDE_HEIGHT_INCHES = 5.625

    BRAND_WORDMARK = "VEDANTU"
    BRAND_CAPTION = "Vedantu - Smart Learning Solution"
    FILE_SUFFIX = "_Vedantu_Official.pptx"

    WATERMARK_BOX: Box = (0.0, 1.5, 10.0, 3.0)
    CAPTION_BOX: Box = (0.5, 5.2, 9.0, 0.3)
    IMAGE_BOX: Box = (5.8, 1.2, 3.8, 3.5)

    BLANK_LAYOUT = 6
    BULLET_CHAR = "•"

    def __init__(self):
        self._colors = {}

    @classmethod
    def filename_for(cls, deck: ChapterContent) -> str:
        """``<chapterTitle>_Vedantu_Official.pptx``."""
        return f"{deck.chapter_title}{cls.FILE_SUFFIX}"

    def export(self, deck: ChapterContent) -> bytes:
        """
        Serialize the deck into PPTX bytes.

        Raises:
            ExportFailure: On any rendering or serialization error
        """
        try:
            prs = self.build(deck)
            buffer = BytesIO()
            prs.save(buffer)
        except Exception as e:
            raise ExportFailure(f"Failed to export deck: {e}") from e

        print(f"[PPTX] Exported {len(deck.slides)} slides ({buffer.tell()} bytes)")
        return buffer.getvalue()

    def export_to_path(self, deck: ChapterContent, output_dir: Path) -> Path:
        """Export and write the file; nothing is written if rendering fails."""
        data = self.export(deck)

        safe_name = re.sub(r"[\\/]", "-", self.filename_for(deck))
        output_path = Path(output_dir) / safe_name
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(data)

        print(f"[PPTX] Saved presentation to {output_path}")
        return output_path

    def build(self, deck: ChapterContent) -> Presentation:
        """Build the in-memory presentation."""
        self._colors = self._resolve_theme(deck.theme)

        prs = Presentation()
        prs.slide_width = Inches(self.SLIDE_WIDTH_INCHES)
        prs.slide_height = Inches(self.SLIDE_HEIGHT_INCHES)

        for i, slide_data in enumerate(deck.slides):
            print(f"[PPTX] Rendering slide {i + 1}/{len(deck.slides)} ({slide_data.type})")
            slide = prs.slides.add_slide(prs.slide_layouts[self.BLANK_LAYOUT])

            self._render_background(slide)
            self._render_watermarks(slide)

            if isinstance(slide_data, TitleSlide):
                self._render_title_slide(slide, slide_data)
            elif isinstance(slide_data, ContentSlide):
                self._render_content_slide(slide, slide_data)
            elif isinstance(slide_data, QuizSlide):
                self._render_quiz_slide(slide, slide_data)
            else:
                raise TypeError(f"Unknown slide type: {type(slide_data).__name__}")

        return prs

    @staticmethod
    def _resolve_theme(theme: ThemeConfig) -> dict:
        return {
            "primary": parse_color(theme.primary_color),
            "text": parse_color(theme.text_color),
            "background": parse_color(theme.background_color),
        }

    # --- Shared elements ---

    def _render_background(self, slide) -> None:
        fill = slide.background.fill
        fill.solid()
        fill.fore_color.rgb = self._colors["background"]

    def _render_watermarks(self, slide) -> None:
        """Brand marks required on every exported slide."""
        diagonal = self._add_text(
            slide,
            "Watermark Diagonal",
            self.BRAND_WORDMARK,
            self.WATERMARK_BOX,
            size=100,
            color=self._colors["primary"],
            bold=True,
            align=PP_ALIGN.CENTER,
            opacity=0.05,
            anchor=MSO_ANCHOR.MIDDLE,
        )
        diagonal.rotation = 330.0

        self._add_text(
            slide,
            "Watermark Caption",
            self.BRAND_CAPTION,
            self.CAPTION_BOX,
            size=10,
            color=self._colors["primary"],
            bold=True,
            align=PP_ALIGN.CENTER,
            opacity=0.30,
        )

    # --- Slide types ---

    def _render_title_slide(self, slide, data: TitleSlide) -> None:
        self._add_text(
            slide,
            "Title Wordmark",
            self.BRAND_WORDMARK,
            self.WATERMARK_BOX,
            size=120,
            color=self._colors["primary"],
            bold=True,
            align=PP_ALIGN.CENTER,
            opacity=0.10,
            anchor=MSO_ANCHOR.MIDDLE,
        )
        self._add_text(
            slide,
            "Title",
            data.title,
            (1.0, 2.2, 8.0, 1.0),
            size=44,
            color=self._colors["primary"],
            bold=True,
            align=PP_ALIGN.CENTER,
            anchor=MSO_ANCHOR.MIDDLE,
        )

    def _render_content_slide(self, slide, data: ContentSlide) -> None:
        self._add_text(
            slide, "Title", data.title, (0.5, 0.5, 9.0, 0.8),
            size=32, color=self._colors["primary"], bold=True,
        )
        self._add_text(
            slide, "Body", data.content, (0.5, 1.5, 5.0, 2.0),
            size=14, color=self._colors["text"],
        )
        self._add_bullets(
            slide, "Key Points", data.key_points, (0.5, 3.6, 5.0, 1.5),
            size=12, color=self._colors["text"],
        )

        # No placeholder in the export when the diagram is missing
        if data.image_url:
            self._add_image(slide, "Content Image", data.image_url, self.IMAGE_BOX)

    def _render_quiz_slide(self, slide, data: QuizSlide) -> None:
        quiz = data.quiz_data
        self._add_text(
            slide, "Quiz Title", f"QUIZ: {data.title}", (0.5, 0.5, 9.0, 0.5),
            size=18, color=self._colors["primary"], bold=True,
        )
        self._add_text(
            slide, "Question", quiz.question, (0.5, 1.2, 9.0, 1.5),
            size=24, color=self._colors["text"], bold=True,
        )
        for i, option in enumerate(quiz.options):
            letter = chr(ord("A") + i)
            self._add_text(
                slide,
                f"Option {letter}",
                f"{letter}) {option}",
                (0.8, 2.8 + i * 0.5, 8.5, 0.4),
                size=16,
                color=self._colors["text"],
            )

    # --- Primitives ---

    def _add_text(
        self,
        slide,
        name: str,
        text: str,
        box: Box,
        size: int,
        color: RGBColor,
        bold: bool = False,
        align=None,
        opacity: Optional[float] = None,
        anchor=None,
    ):
        """Add a single-paragraph text box."""
        textbox = self._add_textbox(slide, name, box)
        text_frame = textbox.text_frame
        if anchor is not None:
            text_frame.vertical_anchor = anchor

        p = text_frame.paragraphs[0]
        if align is not None:
            p.alignment = align

        run = p.add_run()
        run.text = text
        self._style_run(run, size, color, bold, opacity)
        return textbox

    def _add_bullets(self, slide, name: str, items, box: Box, size: int, color: RGBColor):
        """Add a bulleted list, one paragraph per item."""
        textbox = self._add_textbox(slide, name, box)
        text_frame = textbox.text_frame

        for i, item in enumerate(items):
            p = text_frame.paragraphs[0] if i == 0 else text_frame.add_paragraph()
            self._set_bullet(p, size)
            run = p.add_run()
            run.text = item
            self._style_run(run, size, color)
        return textbox

    def _add_image(self, slide, name: str, data_uri: str, box: Box):
        """Add an embedded image from a data URI, normalized to PNG."""
        raw = decode_data_uri(data_uri)
        with Image.open(BytesIO(raw)) as img:
            png = BytesIO()
            img.save(png, format="PNG")
        png.seek(0)

        left, top, width, height = box
        picture = slide.shapes.add_picture(
            png, Inches(left), Inches(top), width=Inches(width), height=Inches(height)
        )
        picture.name = name
        return picture

    @staticmethod
    def _add_textbox(slide, name: str, box: Box):
        left, top, width, height = box
        textbox = slide.shapes.add_textbox(
            Inches(left), Inches(top), Inches(width), Inches(height)
        )
        textbox.name = name
        textbox.text_frame.word_wrap = True
        return textbox

    @staticmethod
    def _style_run(run, size: int, color: RGBColor, bold: bool = False, opacity: Optional[float] = None):
        run.font.size = Pt(size)
        run.font.bold = bold
        run.font.color.rgb = color
        if opacity is not None:
            DeckExporter._set_alpha(run, opacity)

    @staticmethod
    def _set_alpha(run, opacity: float) -> None:
        """python-pptx has no API for text transparency; write <a:alpha> directly."""
        rPr = run._r.get_or_add_rPr()
        srgb = rPr.find(qn("a:solidFill")).find(qn("a:srgbClr"))
        alpha = srgb.makeelement(qn("a:alpha"), {"val": str(int(round(opacity * 100000)))})
        srgb.append(alpha)

    @classmethod
    def _set_bullet(cls, paragraph, size: int) -> None:
        indent = Emu(Pt(size))
        pPr = paragraph._p.get_or_add_pPr()
        pPr.set("marL", str(indent))
        pPr.set("indent", str(-indent))
        pPr.append(pPr.makeelement(qn("a:buChar"), {"char": cls.BULLET_CHAR}))
