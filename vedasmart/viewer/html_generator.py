"""
Generate a static HTML preview of a deck.

Mirrors the interactive view: watermark on every slide, diagrams on the
right of content slides, and a "generating" placeholder where a diagram
is missing. Quiz answers are revealed on click.
"""

from pathlib import Path

from jinja2 import Template

from vedasmart.models import ChapterContent
from vedasmart.renderers import DeckExporter


class DeckPreviewGenerator:
    """Render a ChapterContent deck into a single self-contained HTML file."""

    PLACEHOLDER_TEXT = "Educational Diagram Generating..."

    HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ deck.chapter_title }} - VedaSmart Preview</title>
    <style>
        * {
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }

        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, Cantarell, sans-serif;
            background: #f5f5f5;
            padding: 20px;
        }

        .header {
            background: white;
            padding: 20px;
            border-radius: 8px;
            margin-bottom: 20px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
        }

        .header h1 {
            color: {{ theme.primary_color }};
            margin-bottom: 10px;
        }

        .header .meta {
            color: #666;
            font-size: 14px;
        }

        .slide {
            position: relative;
            aspect-ratio: 16 / 9;
            max-width: 1100px;
            margin: 0 auto 30px;
            padding: 48px;
            border-radius: 24px;
            overflow: hidden;
            background: {{ theme.background_color }};
            color: {{ theme.text_color }};
            box-shadow: 0 2px 8px rgba(0,0,0,0.15);
        }

        .slide .badge {
            position: absolute;
            top: 12px;
            right: 20px;
            font-size: 11px;
            font-weight: bold;
            letter-spacing: 0.1em;
            opacity: 0.5;
        }

        .watermark {
            position: absolute;
            inset: 0;
            display: flex;
            align-items: center;
            justify-content: center;
            font-size: 160px;
            font-weight: 900;
            color: {{ theme.primary_color }};
            opacity: 0.03;
            transform: rotate(-12deg);
            pointer-events: none;
            user-select: none;
        }

        .caption {
            position: absolute;
            bottom: 16px;
            left: 50%;
            transform: translateX(-50%);
            font-size: 10px;
            font-weight: bold;
            text-transform: uppercase;
            letter-spacing: 0.2em;
            color: {{ theme.primary_color }};
            pointer-events: none;
            user-select: none;
        }

        .title-slide {
            display: flex;
            flex-direction: column;
            align-items: center;
            justify-content: center;
            text-align: center;
        }

        .title-slide h1 {
            font-size: 56px;
            color: {{ theme.primary_color }};
        }

        .title-slide p {
            font-size: 22px;
            opacity: 0.6;
            margin-top: 12px;
        }

        .content-slide {
            display: flex;
            gap: 40px;
        }

        .content-slide .text,
        .content-slide .visual {
            flex: 1;
            position: relative;
        }

        .content-slide h2 {
            color: {{ theme.primary_color }};
            font-size: 32px;
            margin-bottom: 16px;
        }

        .content-slide ul {
            margin-top: 16px;
            padding-left: 20px;
        }

        .content-slide li::marker {
            color: {{ theme.primary_color }};
        }

        .content-slide img {
            width: 100%;
            height: 100%;
            object-fit: contain;
            border-radius: 16px;
            background: white;
        }

        .placeholder {
            height: 100%;
            display: flex;
            align-items: center;
            justify-content: center;
            border: 2px dashed #d1d5db;
            border-radius: 16px;
            color: #9ca3af;
            font-weight: bold;
            background: #f9fafb;
        }

        .quiz-slide h3 {
            color: {{ theme.primary_color }};
            font-size: 18px;
        }

        .quiz-slide h4 {
            font-size: 24px;
            margin: 16px 0 24px;
        }

        .options {
            display: grid;
            grid-template-columns: 1fr 1fr;
            gap: 12px;
        }

        .options button {
            padding: 16px;
            border: 2px solid #e5e7eb;
            border-radius: 12px;
            background: white;
            text-align: left;
            font-size: 16px;
            cursor: pointer;
        }

        .options button.correct {
            background: #f0fdf4;
            border-color: #22c55e;
        }

        .options button.incorrect {
            background: #fef2f2;
            border-color: #ef4444;
        }

        .explanation {
            display: none;
            margin-top: 20px;
            padding: 16px;
            border-radius: 12px;
            background: rgba(0,0,0,0.03);
        }
    </style>
</head>
<body>
    <div class="header">
        <h1>{{ deck.chapter_title }}</h1>
        <div class="meta">
            Subject: {{ deck.subject }} |
            Slides: {{ deck.slides|length }}
        </div>
    </div>

    {% for slide in deck.slides %}
    <div class="slide {{ slide.type|lower }}-slide" id="slide-{{ slide.id }}">
        <div class="watermark">{{ wordmark }}</div>
        <div class="badge">{{ slide.type }} SLIDE &middot; {{ loop.index }} / {{ deck.slides|length }}</div>

        {% if slide.type == "TITLE" %}
        <h1>{{ slide.title }}</h1>
        <p>Class 10 CBSE | Smart Study Deck</p>

        {% elif slide.type == "CONTENT" %}
        <div class="text">
            <h2>{{ slide.title }}</h2>
            <p>{{ slide.content }}</p>
            {% if slide.key_points %}
            <ul>
                {% for point in slide.key_points %}
                <li>{{ point }}</li>
                {% endfor %}
            </ul>
            {% endif %}
        </div>
        <div class="visual">
            {% if slide.image_url %}
            <img src="{{ slide.image_url }}" alt="{{ slide.title }}">
            {% else %}
            <div class="placeholder">{{ placeholder }}</div>
            {% endif %}
        </div>

        {% elif slide.type == "QUIZ" %}
        <h3>Quiz Challenge</h3>
        <h4>{{ slide.quiz_data.question }}</h4>
        <div class="options" data-correct="{{ slide.quiz_data.correct_answer }}">
            {% for option in slide.quiz_data.options %}
            <button data-index="{{ loop.index0 }}" onclick="answer(this)">{{ "ABCD"[loop.index0] }}) {{ option }}</button>
            {% endfor %}
        </div>
        <div class="explanation"><strong>Explanation:</strong> {{ slide.quiz_data.explanation }}</div>
        {% endif %}

        <div class="caption">{{ caption }}</div>
    </div>
    {% endfor %}

    <script>
        // One answer per quiz; reveal correct option, and the chosen one if wrong
        function answer(button) {
            const options = button.parentElement;
            if (options.dataset.answered) return;
            options.dataset.answered = "1";

            const correct = options.dataset.correct;
            options.querySelectorAll('button').forEach(b => {
                b.disabled = true;
                if (b.dataset.index === correct) b.classList.add('correct');
            });
            if (button.dataset.index !== correct) button.classList.add('incorrect');
            options.nextElementSibling.style.display = 'block';
        }
    </script>
</body>
</html>
"""

    def render(self, deck: ChapterContent) -> str:
        """Render the deck to an HTML string."""
        template = Template(self.HTML_TEMPLATE, autoescape=True)
        return template.render(
            deck=deck,
            theme=deck.theme,
            wordmark=DeckExporter.BRAND_WORDMARK,
            caption=DeckExporter.BRAND_CAPTION,
            placeholder=self.PLACEHOLDER_TEXT,
        )

    def generate(self, deck: ChapterContent, output_path: Path) -> Path:
        """
        Generate the HTML preview file.

        Args:
            deck: Deck to render
            output_path: Path to save HTML file

        Returns:
            Path to generated HTML file
        """
        print(f"[Preview] Generating HTML preview for {len(deck.slides)} slides")

        html_content = self.render(deck)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(html_content)

        print(f"[Preview] Saved HTML preview to {output_path}")
        return output_path
