"""
Viewer session state.

Navigation, quiz answers and the export flag for one viewing session.
Nothing here is written back into the deck.
"""

from typing import Dict, List, Optional

from vedasmart.models import ChapterContent, QuizSlide
from vedasmart.renderers import DeckExporter


class DeckViewer:
    """
    One-slide-at-a-time view over a finished deck.

    - Navigation is clamped to [0, last index], no wraparound
    - Each quiz slide accepts one answer; later selections are ignored
    - Once answered, the correct option and explanation are revealed
    """

    def __init__(self, deck: ChapterContent, exporter: Optional[DeckExporter] = None):
        self.deck = deck
        self.exporter = exporter or DeckExporter()
        self.current_index = 0
        self.is_exporting = False
        # slide id -> selected option index
        self.quiz_answers: Dict[str, int] = {}

    @property
    def last_index(self) -> int:
        return len(self.deck.slides) - 1

    @property
    def current_slide(self):
        return self.deck.slides[self.current_index]

    @property
    def is_first(self) -> bool:
        return self.current_index == 0

    @property
    def is_last(self) -> bool:
        return self.current_index == self.last_index

    def next_slide(self) -> int:
        if not self.is_last:
            self.current_index += 1
        return self.current_index

    def prev_slide(self) -> int:
        if not self.is_first:
            self.current_index -= 1
        return self.current_index

    def go_to(self, index: int) -> int:
        self.current_index = max(0, min(index, self.last_index))
        return self.current_index

    def _quiz(self, slide_id: str) -> QuizSlide:
        for slide in self.deck.slides:
            if slide.id == slide_id:
                if not isinstance(slide, QuizSlide):
                    raise ValueError(f"Slide {slide_id} is not a quiz slide")
                return slide
        raise KeyError(f"No slide with id {slide_id}")

    def is_answered(self, slide_id: str) -> bool:
        return slide_id in self.quiz_answers

    def select_answer(self, slide_id: str, option: int) -> bool:
        """
        Record an answer for a quiz slide.

        Returns:
            True if recorded, False if the slide was already answered
        """
        quiz = self._quiz(slide_id).quiz_data
        if not 0 <= option < len(quiz.options):
            raise ValueError(f"Option index out of range: {option}")
        if self.is_answered(slide_id):
            return False
        self.quiz_answers[slide_id] = option
        return True

    def option_states(self, slide_id: str) -> List[str]:
        """
        Reveal coloring per option: "correct", "incorrect" or "neutral".

        All neutral until answered. The correct option is always marked on
        reveal; the selected option is marked only if it was wrong.
        """
        quiz = self._quiz(slide_id).quiz_data
        selected = self.quiz_answers.get(slide_id)
        states = []
        for i in range(len(quiz.options)):
            if selected is None:
                states.append("neutral")
            elif i == quiz.correct_answer:
                states.append("correct")
            elif i == selected:
                states.append("incorrect")
            else:
                states.append("neutral")
        return states

    def explanation(self, slide_id: str) -> Optional[str]:
        """The explanation, visible only after an answer is recorded."""
        quiz = self._quiz(slide_id).quiz_data
        return quiz.explanation if self.is_answered(slide_id) else None

    def export(self) -> bytes:
        """Export the deck; the exporting flag is always cleared afterwards."""
        self.is_exporting = True
        try:
            return self.exporter.export(self.deck)
        finally:
            self.is_exporting = False

    @property
    def export_filename(self) -> str:
        return self.exporter.filename_for(self.deck)
