"""
customtkinter GUI for Scriptoria
"""

import os
import logging
from pathlib import Path
from typing import Optional
import customtkinter as ctk
from async_tkinter_loop import async_handler, async_mainloop

from scriptoria.analysis import ManuscriptAnalyzer
from scriptoria.components.history_strip import HistoryStrip
from scriptoria.components.result_view import ResultView
from scriptoria.config import Config
from scriptoria.models.manuscript import ManuscriptRecord, ManuscriptStatus
from scriptoria.models.upload import UploadedFile
from scriptoria.pipeline import ProcessingPipeline
from scriptoria.store import ManuscriptStore
from scriptoria.viewport import DisplayMode, ViewportMonitor

log = logging.getLogger(__name__)

STATUS_COLORS = {
    ManuscriptStatus.IDLE: "gray50",
    ManuscriptStatus.PROCESSING: "#b45309",
    ManuscriptStatus.COMPLETED: "#16a34a",
    ManuscriptStatus.ERROR: "#dc2626",
}

IMAGE_FILE_TYPES = [
    ("Images", "*.png *.jpg *.jpeg *.webp *.gif *.bmp *.tif *.tiff"),
    ("All files", "*.*"),
]


def configure_logging() -> None:
    log_level = (
        logging.DEBUG
        if os.environ.get("SCRIPTORIA_DEBUG", "").lower() == "true"
        else logging.INFO
    )
    log_file = os.environ.get("SCRIPTORIA_LOG_FILE")
    if log_file:
        logging.basicConfig(
            level=log_level,
            filename=log_file,
            filemode="w",
            format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        logging.basicConfig(
            level=log_level,
            format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


class ScriptoriaApp:
    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

        ctk.set_appearance_mode(self.config.GUI_THEME)
        self.root = ctk.CTk()
        self.root.title("Scriptoria - Manuscript Modernizer")
        self.root.geometry(
            f"{self.config.GUI_WINDOW_WIDTH}x{self.config.GUI_WINDOW_HEIGHT}"
        )

        self.store = ManuscriptStore()
        self.analyzer = ManuscriptAnalyzer(self.config)
        self.pipeline = ProcessingPipeline(
            self.store,
            self.analyzer.analyze,
            generic_error_message=self.config.GENERIC_ERROR_MESSAGE,
            default_mime_type=self.config.DEFAULT_MIME_TYPE,
        )
        self.viewport = ViewportMonitor(self.store, self.config.EXTENSION_BREAKPOINT)

        self.setup_ui()
        self.store.subscribe(self._on_store_change)
        self.viewport.attach(self.root, initial_width=self.config.GUI_WINDOW_WIDTH)
        self._render()
        log.info("ScriptoriaApp initialized")

    def setup_ui(self):
        # Main container
        self.main_frame = ctk.CTkFrame(self.root)
        self.main_frame.pack(fill="both", expand=True, padx=20, pady=20)

        # Header
        self.header_frame = ctk.CTkFrame(self.main_frame, fg_color="transparent")
        self.header_frame.pack(fill="x", pady=(0, 10))

        self.title_label = ctk.CTkLabel(
            self.header_frame,
            text="SCRIPTORIA",
            font=ctk.CTkFont(size=32, weight="bold"),
        )
        self.title_label.pack(side="left", padx=10)

        self.subtitle_label = ctk.CTkLabel(
            self.header_frame,
            text="Manuscript Modernizer",
            font=ctk.CTkFont(size=14, slant="italic"),
        )
        self.subtitle_label.pack(side="left", padx=10, pady=(12, 0))

        # Upload view
        self.upload_frame = ctk.CTkFrame(self.main_frame, fg_color="transparent")

        ctk.CTkLabel(
            self.upload_frame,
            text="Ancient Texts, Modern Words",
            font=ctk.CTkFont(size=24, weight="bold"),
        ).pack(pady=(30, 10))

        self.upload_button = ctk.CTkButton(
            self.upload_frame,
            text="Upload Manuscript Image",
            height=48,
            command=async_handler(self._select_image),
        )
        self.upload_button.pack(pady=20)

        self.history_strip = HistoryStrip(
            self.upload_frame,
            on_select=self._on_history_select,
            thumbnail_size=(self.config.THUMBNAIL_WIDTH, self.config.THUMBNAIL_HEIGHT),
        )

        # Record view
        self.record_frame = ctk.CTkFrame(self.main_frame, fg_color="transparent")

        self.status_bar = ctk.CTkFrame(self.record_frame, fg_color="transparent")
        self.status_bar.pack(fill="x", pady=(0, 10))

        self.reset_button = ctk.CTkButton(
            self.status_bar, text="Start New", width=120, command=self._reset
        )
        self.reset_button.pack(side="left", padx=10)

        self.status_label = ctk.CTkLabel(
            self.status_bar, text="", font=ctk.CTkFont(size=12, weight="bold")
        )
        self.status_label.pack(side="right", padx=10)

        self.processing_panel = ctk.CTkFrame(self.record_frame)
        ctk.CTkLabel(
            self.processing_panel,
            text="Deciphering...",
            font=ctk.CTkFont(size=28, weight="bold"),
        ).pack(pady=(60, 10))
        self.processing_name_label = ctk.CTkLabel(
            self.processing_panel, text="", font=ctk.CTkFont(size=14, slant="italic")
        )
        self.processing_name_label.pack(pady=(0, 10))
        self.progress_bar = ctk.CTkProgressBar(self.processing_panel, mode="indeterminate")
        self.progress_bar.pack(fill="x", padx=80, pady=(10, 60))

        self.error_panel = ctk.CTkFrame(self.record_frame)
        ctk.CTkLabel(
            self.error_panel,
            text="Analysis Error",
            font=ctk.CTkFont(size=28, weight="bold"),
            text_color=STATUS_COLORS[ManuscriptStatus.ERROR],
        ).pack(pady=(60, 10))
        self.error_label = ctk.CTkLabel(
            self.error_panel, text="", wraplength=600, font=ctk.CTkFont(size=14)
        )
        self.error_label.pack(pady=10, padx=20)
        ctk.CTkButton(self.error_panel, text="Go Back", command=self._reset).pack(
            pady=(10, 60)
        )

        self.result_view = ResultView(
            self.record_frame,
            on_search_another=self._reset,
            preview_size=self.config.PREVIEW_MAX_SIZE,
        )

    async def _select_image(self):
        from tkinter import filedialog

        file_path = filedialog.askopenfilename(
            title="Select manuscript image", filetypes=IMAGE_FILE_TYPES
        )
        if not file_path:
            log.info("No file selected")
            return

        log.info(f"Image selected: {file_path}")
        await self.pipeline.start(UploadedFile.from_path(Path(file_path)))

    def _reset(self):
        self.pipeline.reset()

    def _on_history_select(self, record: ManuscriptRecord):
        self.store.show(record.id)

    def _on_store_change(self, store: ManuscriptStore):
        self._render()

    def _render(self):
        record = self.store.current
        if record is None:
            self._render_upload_view()
        else:
            self._render_record_view(record)

    def _render_upload_view(self):
        self.record_frame.pack_forget()
        self.upload_frame.pack(fill="both", expand=True)

        recent = self.store.recent_history(self.config.HISTORY_DISPLAY_LIMIT)
        if recent and self.store.mode is DisplayMode.FULL:
            self.history_strip.set_records(recent)
            self.history_strip.pack(fill="x", pady=(30, 0))
        else:
            self.history_strip.pack_forget()

    def _render_record_view(self, record: ManuscriptRecord):
        self.upload_frame.pack_forget()
        self.record_frame.pack(fill="both", expand=True)

        self.status_label.configure(
            text=record.status.value.upper(), text_color=STATUS_COLORS[record.status]
        )

        for panel in (self.processing_panel, self.error_panel, self.result_view):
            panel.pack_forget()
        self.progress_bar.stop()

        if record.status is ManuscriptStatus.PROCESSING:
            self.processing_name_label.configure(text=record.name)
            self.processing_panel.pack(fill="both", expand=True)
            self.progress_bar.start()
        elif record.status is ManuscriptStatus.ERROR:
            self.error_label.configure(text=record.error)
            self.error_panel.pack(fill="both", expand=True)
        elif record.status is ManuscriptStatus.COMPLETED and record.result:
            self.result_view.show(record.result, record.encoded)
            self.result_view.pack(fill="both", expand=True)


def main():
    configure_logging()
    config = Config()
    config.load()
    app = ScriptoriaApp(config)
    async_mainloop(app.root)


if __name__ == "__main__":
    main()
