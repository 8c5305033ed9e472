"""Renders a completed manuscript analysis next to its image."""

import logging
from typing import Callable, List, Optional, Tuple
import customtkinter as ctk

from scriptoria.encoding import decode_preview
from scriptoria.models.analysis import ManuscriptAnalysis

log = logging.getLogger(__name__)

# (heading, field name)
SECTIONS: List[Tuple[str, str]] = [
    ("Original Transcription", "original_transcription"),
    ("Modern English", "modern_english"),
    ("Modern Tamil", "modern_tamil"),
    ("Historical Context", "historical_context"),
    ("Linguistic Analysis", "linguistic_analysis"),
    ("Cultural Significance", "cultural_significance"),
    ("Translation Notes", "translation_notes"),
]


def format_confidence(score: float) -> str:
    # Models sometimes answer on a 0-100 scale
    if score > 1:
        score = score / 100
    return f"{round(max(0.0, min(score, 1.0)) * 100)}%"


class ResultView(ctk.CTkFrame):
    """Image preview on one side, analysis sections on the other."""

    def __init__(
        self,
        master,
        on_search_another: Optional[Callable[[], None]] = None,
        preview_size: int = 420,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self.on_search_another = on_search_another
        self.preview_size = preview_size
        self.photo_image: Optional[ctk.CTkImage] = None
        self.section_boxes: List[ctk.CTkTextbox] = []

        self._setup_ui()

    def _setup_ui(self) -> None:
        self.grid_columnconfigure(0, weight=0)
        self.grid_columnconfigure(1, weight=1)
        self.grid_rowconfigure(0, weight=1)

        # Left: image, confidence and action
        self.side_panel = ctk.CTkFrame(self, fg_color="transparent")
        self.side_panel.grid(row=0, column=0, sticky="ns", padx=10, pady=10)

        self.image_label = ctk.CTkLabel(self.side_panel, text="")
        self.image_label.pack(pady=(0, 10))

        self.confidence_label = ctk.CTkLabel(
            self.side_panel, text="", font=ctk.CTkFont(size=14, weight="bold")
        )
        self.confidence_label.pack(pady=5)

        self.search_button = ctk.CTkButton(
            self.side_panel, text="Decipher Another", command=self._on_search_another
        )
        self.search_button.pack(pady=10)

        # Right: scrollable sections
        self.sections_frame = ctk.CTkScrollableFrame(self)
        self.sections_frame.grid(row=0, column=1, sticky="nsew", padx=10, pady=10)

        for heading, _ in SECTIONS:
            ctk.CTkLabel(
                self.sections_frame,
                text=heading,
                font=ctk.CTkFont(size=16, weight="bold"),
                anchor="w",
            ).pack(fill="x", padx=5, pady=(10, 2))
            box = ctk.CTkTextbox(self.sections_frame, height=140, wrap="word")
            box.pack(fill="x", padx=5, pady=(0, 5))
            box.configure(state="disabled")
            self.section_boxes.append(box)

    def show(self, result: ManuscriptAnalysis, encoded: Optional[str]) -> None:
        """Display an analysis and the image it was made from."""
        for (_, field_name), box in zip(SECTIONS, self.section_boxes):
            box.configure(state="normal")
            box.delete("1.0", "end")
            box.insert("1.0", getattr(result, field_name))
            box.configure(state="disabled")

        self.confidence_label.configure(
            text=f"Confidence: {format_confidence(result.confidence_score)}"
        )
        self._show_image(encoded)

    def _show_image(self, encoded: Optional[str]) -> None:
        self.photo_image = None
        if not encoded:
            self.image_label.configure(image="", text="No preview")
            return
        try:
            pil_image = decode_preview(encoded, (self.preview_size, self.preview_size))
        except Exception as e:
            log.warning(f"Could not render preview: {e}")
            self.image_label.configure(image="", text="No preview")
            return
        self.photo_image = ctk.CTkImage(
            light_image=pil_image, size=(pil_image.width, pil_image.height)
        )
        self.image_label.configure(image=self.photo_image, text="")

    def _on_search_another(self) -> None:
        if self.on_search_another:
            self.on_search_another()
